# setup.py
from setuptools import setup, find_packages

setup(
    name="quosure",
    version="0.1.0",
    description="Quasiquotation and deferred evaluation: quosures, capture, unquote and splice",
    packages=find_packages(include=["quosure", "quosure.*"]),
    python_requires=">=3.10",
    install_requires=[
        "numpy",
    ],
    extras_require={
        "test": ["pytest", "hypothesis"],
    },
    zip_safe=False,
)
