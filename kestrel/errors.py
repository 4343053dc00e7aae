
class KestrelError(Exception):
    """ Base class for all Kestrel errors"""
    pass

class KestrelSyntaxError(KestrelError):
    """ Raised when the parser meets a token it cannot use; parsing is aborted"""

class KestrelIllegalCharacter(KestrelSyntaxError):
    """ Raised when the token stream contains an illegal character"""

class KestrelOverflowError(KestrelSyntaxError, OverflowError):
    """ Raised when an integer literal does not fit in 32 signed bits"""

class KestrelDivisionByZero(KestrelError, ZeroDivisionError):
    """ Raised on integer division by zero; never converted to null"""

class KestrelArithmeticOverflow(KestrelError, OverflowError):
    """ Raised when a division result does not fit in 32 signed bits (MIN / -1)"""
