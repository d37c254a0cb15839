"""Errors raised while mapping the CoffeeScript AST to the target tree."""

from __future__ import annotations


class TranslationError(Exception):
    """Unsupported construct: no mapping rule for this node shape."""

    def __init__(self, node_type: str, target: str):
        self.node_type: str = node_type
        self.target: str = target
        self.msg: str = "can't convert node of type " + node_type + " to " + target
        super().__init__(self.msg)


class IllegalSourceError(Exception):
    """Valid source that the target language cannot express legally."""

    def __init__(self, msg: str, line: int, col: int):
        self.msg: str = msg
        self.line: int = line
        self.col: int = col
        super().__init__(msg + " at line " + str(line) + " col " + str(col))
