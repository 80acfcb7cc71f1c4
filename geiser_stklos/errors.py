class SchemeError(Exception):
    """ Base class for all runtime errors"""
    pass

class UnboundVariable(SchemeError):
    """ Raised when a symbol is used before it is bound"""
    pass

class SchemeSyntaxError(SchemeError):
    """ Raised when there is a syntax error"""

class ArityError(SchemeError):
    """ Raised when the number of arguments passed to a procedure is incorrect"""

class SchemeTypeError(SchemeError):
    """ Raised when the types of arguments passed to a procedure are incorrect"""

class ModuleError(SchemeError):
    """ Raised when a module cannot be found or defined"""

class LoadError(SchemeError):
    """ Raised when a source file cannot be found or read"""

class UserError(SchemeError):
    """ Raised by the `error` primitive"""

class SchemeExit(SystemExit):
    """ Raised by `exit`; a SystemExit so `except Exception` lets it through"""
