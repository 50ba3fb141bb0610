class QuosureError(Exception):
    """ Base class for all quosure errors"""
    pass

class InvalidSymbol(QuosureError):
    """ Raised when something that is not a Symbol is used as a binding name"""
    pass

class UnboundSymbol(QuosureError):
    """ Raised when a lookup exhausts the mask, local bindings and parent chain"""
    pass

class InvalidUnquoteContext(QuosureError):
    """ Raised when an unquote, splice or name-substitution marker is met outside a quoting construction"""

class AmbiguousTargetError(QuosureError):
    """ Raised when an unquote is used as a binding name without the name-substitution form"""

class ArityError(QuosureError):
    """ Raised when the number of arguments passed to a function is incorrect"""

class QuosureTypeError(QuosureError):
    """ Raised when the types of arguments passed to a function are incorrect"""

class SpliceTypeError(QuosureTypeError):
    """ Raised when a splice operand is not an ordered sequence"""

class StaleCaptureError(QuosureError):
    """ Raised when capture is attempted on a parameter whose promise was already forced"""

class QuosureRecursionError(QuosureError):
    """ Raised when evaluation nests deeper than the configured maximum depth"""
