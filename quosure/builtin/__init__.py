from quosure.types.environment import Environment
from quosure.builtin import env_builtin, quoting_builtin


def register(env: Environment) -> None:
    env_builtin.register(env)
    quoting_builtin.register(env)
