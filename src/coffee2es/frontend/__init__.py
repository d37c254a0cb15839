"""Frontend package - converts CoffeeScript source to an AST."""

from .parse import ParseError, Parser, parse
from .tokens import TokenizeError, tokenize

__all__ = ["ParseError", "Parser", "TokenizeError", "parse", "tokenize"]
