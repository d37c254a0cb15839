"""Mapper package - rewrites the CoffeeScript AST into an ESTree program.

Each node is classified (see classify.py) and handed to the rule of the same
name on Mapper.  Rules live in mixins grouped by concern; they call back into
map_expression and map_statement for their children.
"""

from __future__ import annotations

import logging

from ..estree import Expr, Program, Stmt
from ..frontend.ast import Block, Literal, Node, Value, walk
from ..options import Options
from .classes import ClassMapper
from .classify import IDENTIFIER_RE, classify
from .context import Meta
from .expressions import ExpressionMapper
from .functions import FunctionMapper
from .helpers import helper_statements
from .scope import Scope
from .statements import StatementMapper

log = logging.getLogger("coffee2es.mapper")


class Mapper(ExpressionMapper, StatementMapper, FunctionMapper, ClassMapper):
    """One-shot translator from a CoffeeScript Block to an ESTree Program."""

    def __init__(self, options: Options | None = None):
        self.options: Options = options if options is not None else Options()
        self.root: Scope = Scope()

    def transpile(self, block: Block) -> Program:
        referenced = {
            node.value for node in walk(block) if isinstance(node, Literal) and IDENTIFIER_RE.match(node.value)
        }
        self.root = Scope(referenced=referenced)
        meta = Meta(self.root, self.options.tab_width, self.options.quote)
        body = self.map_block(block, meta)
        log.debug("mapped %d top-level statements", len(body))
        return Program(self.scoped_body(body, meta))

    def helper_definitions(self) -> list[Stmt]:
        """Definitions of the helpers requested while mapping."""
        return helper_statements(self.root.helpers)

    def map_expression(self, node: Node, meta: Meta) -> Expr:
        rule = classify(node)
        if rule != "fallback" and rule != "member":
            while isinstance(node, Value) and not node.properties:
                node = node.base
        return getattr(self, "map_" + rule)(node, meta)


__all__ = ["Mapper", "Meta", "Scope"]
