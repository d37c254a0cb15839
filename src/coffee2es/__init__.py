"""coffee2es - CoffeeScript to ES6 source translator."""

from .compiler import compile
from .errors import IllegalSourceError, TranslationError
from .frontend import ParseError, TokenizeError
from .options import Options

__all__ = ["IllegalSourceError", "Options", "ParseError", "TokenizeError", "TranslationError", "compile"]
