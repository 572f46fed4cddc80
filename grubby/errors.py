from grubby.types import ErrorVal


class GrubbyError(Exception):
    """Exception type used to propagate Grubby lexical, syntax and runtime errors."""
    def __init__(self, err: ErrorVal):
        super().__init__(f"{err.name}: {err.message}")
        self.err = err


class LexerError(GrubbyError):
    """Raised when a span of source text matches no token class."""
    def __init__(self, message: str):
        super().__init__(ErrorVal('LexError', message))


class ParseError(GrubbyError):
    """Raised on an unexpected token, a misplaced token kind or premature end of input."""
    def __init__(self, message: str, name: str = 'SyntaxError'):
        super().__init__(ErrorVal(name, message))
