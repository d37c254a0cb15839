"""Fallback compiler for constructs with no direct ES6 form.

Soaked accessor chains (``a?.b``, ``f?()``), the binary existential operator,
ranges with non-literal bounds, ``extends`` as an expression, and empty
anonymous classes compile to JavaScript text the way the CoffeeScript 1.x
compiler writes them.  The mapper splices the text back in as a Fragment.
Sub-expressions that need no fallback are mapped and printed normally, so
string quoting and indentation follow the same options as the rest of the
output.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .backend.printer import PREC_ASSIGN, PREC_CALL, PREC_CONDITIONAL, print_expression
from .errors import TranslationError
from .estree import Fragment
from .frontend.ast import Access, Call, Class, Extends, Index, Node, Op, Range, Slice, Splat, Value, node_type
from .mapper.classify import IDENTIFIER_RE, is_identifier, is_simple
from .options import QUOTES

if TYPE_CHECKING:
    from .mapper.context import Meta

log = logging.getLogger("coffee2es.legacy")

VOID = "void 0"


def compile_fallback(node: Node, meta: Meta, mapper) -> str:
    """JavaScript text for node; mapper renders the parts that need no fallback."""
    code = LegacyCompiler(meta, mapper).compile(node)
    log.debug("%s -> %d characters", node_type(node), len(code))
    return code


class LegacyCompiler:
    """Text-level compiler for the fallback constructs."""

    def __init__(self, meta: Meta, mapper) -> None:
        self.meta = meta
        self.mapper = mapper
        self.tab = " " * meta.tab_width
        self.quote = QUOTES[meta.quote]

    def compile(self, node: Node) -> str:
        if isinstance(node, Op) and node.operator == "?":
            return self.existential(node)
        if isinstance(node, Range):
            return self.range(node)
        if isinstance(node, Extends):
            return self.extends(node)
        if isinstance(node, Class):
            return self.anonymous_class()
        if isinstance(node, (Value, Call)):
            base, links = self.flatten(node)
            return self.chain(self.render(base, PREC_CALL), is_identifier(base), links)
        raise TranslationError(node_type(node), "fallback")

    def render(self, node: Node, precedence: int) -> str:
        """Text for a node with no fallback at its top, via the mapper."""
        expr = self.mapper.map_expression(node, self.meta.extend(left=False))
        return print_expression(expr, self.meta.tab_width, self.quote, precedence)

    def string(self, value: str) -> str:
        return self.quote + value + self.quote

    # ── Soaked chains ────────────────────────────────────────

    def flatten(self, node: Node) -> tuple[Node, list[Node]]:
        """Split an accessor chain into its base and its links, outermost last.

        Call nodes appear as links of their own; ``new`` and super calls
        stay whole as the base.
        """
        if isinstance(node, Value):
            base, links = self.flatten(node.base)
            return base, links + list(node.properties)
        if isinstance(node, Call) and not node.is_new and not node.is_super and node.variable is not None:
            base, links = self.flatten(node.variable)
            return base, links + [node]
        return node, []

    def chain(self, head: str, bare: bool, links: list[Node]) -> str:
        """Apply links to head, guarding at each soaked link.

        bare marks head as a plain identifier that may be undeclared, which
        needs a typeof test rather than a comparison with null.
        """
        for idx, link in enumerate(links):
            if getattr(link, "soak", False):
                rest = [self.unsoaked(link)] + links[idx + 1 :]
                if isinstance(link, Call):
                    callee = head
                    if "(" in head:
                        callee = self.meta.scope.free_variable("ref")
                        head = "(" + callee + " = " + head + ")"
                    guard = "typeof " + head + " === " + self.string("function")
                    return guard + " ? " + self.chain(callee, False, rest) + " : " + VOID
                if bare:
                    guard = "typeof " + head + " !== " + self.string("undefined") + " && " + head + " !== null"
                    return guard + " ? " + self.chain(head, False, rest) + " : " + VOID
                if IDENTIFIER_RE.match(head) or head == "this":
                    return head + " != null ? " + self.chain(head, False, rest) + " : " + VOID
                ref = self.meta.scope.free_variable("ref")
                guard = "(" + ref + " = " + head + ") != null"
                return guard + " ? " + self.chain(ref, False, rest) + " : " + VOID
            head = self.apply(head, link)
            bare = False
        return head

    def unsoaked(self, link: Node) -> Node:
        if isinstance(link, Access):
            return Access(link.pos, link.name)
        if isinstance(link, Index):
            return Index(link.pos, link.index)
        if isinstance(link, Call):
            return Call(link.pos, link.variable, link.args)
        return link

    def apply(self, head: str, link: Node) -> str:
        if isinstance(link, Access):
            return head + "." + link.name.value
        if isinstance(link, Index):
            return head + "[" + self.render(link.index, 0) + "]"
        if isinstance(link, Slice):
            expr = self.mapper.map_slice(Fragment(head, PREC_CALL), link.range, self.meta.extend(left=False))
            return print_expression(expr, self.meta.tab_width, self.quote)
        if isinstance(link, Call):
            return head + "(" + ", ".join(self.argument(arg) for arg in link.args) + ")"
        raise TranslationError(node_type(link), "fallback")

    def argument(self, node: Node) -> str:
        if isinstance(node, Splat):
            return "..." + self.render(node.name, PREC_ASSIGN)
        return self.render(node, PREC_ASSIGN)

    # ── Existential operator ─────────────────────────────────

    def existential(self, node: Op) -> str:
        """``a ? b``: a unless it is null or undefined, else b."""
        fallback = self.render(node.second, PREC_ASSIGN)
        if is_identifier(node.first):
            name = self.render(node.first, PREC_CALL)
            guard = "typeof " + name + " !== " + self.string("undefined") + " && " + name + " !== null"
            return guard + " ? " + name + " : " + fallback
        ref = self.meta.scope.free_variable("ref")
        left = self.render(node.first, PREC_ASSIGN)
        return "(" + ref + " = " + left + ") != null ? " + ref + " : " + fallback

    # ── Ranges ───────────────────────────────────────────────

    def range(self, node: Range) -> str:
        """Array of the integers between two runtime bounds, built in a closure."""
        results = self.meta.scope.free_variable("results", single=True)
        i = self.meta.scope.free_variable("i", single=True)
        decls = [results + " = []"]
        bounds: list[str] = []
        for bound in (node.from_, node.to):
            if is_simple(bound):
                text = self.render(bound, PREC_CONDITIONAL + 1)
            else:
                text = self.meta.scope.free_variable("ref", single=True)
                decls.append(text + " = " + self.render(bound, PREC_ASSIGN))
            bounds.append(text)
        start, end = bounds
        up = "<" if node.exclusive else "<="
        down = ">" if node.exclusive else ">="
        test = start + " <= " + end + " ? " + i + " " + up + " " + end + " : " + i + " " + down + " " + end
        update = start + " <= " + end + " ? " + i + "++ : " + i + "--"
        t = self.tab
        lines = [
            "(function() {",
            t + "var " + ", ".join(decls) + ";",
            t + "for (var " + i + " = " + start + "; " + test + "; " + update + ") {",
            t + t + results + ".push(" + i + ");",
            t + "}",
            t + "return " + results + ";",
            "}).apply(this)",
        ]
        return "\n".join(lines)

    # ── Classes ──────────────────────────────────────────────

    def extends(self, node: Extends) -> str:
        helper = self.meta.scope.helper("extend")
        child = self.render(node.child, PREC_ASSIGN)
        parent = self.render(node.parent, PREC_ASSIGN)
        return helper + "(" + child + ", " + parent + ")"

    def anonymous_class(self) -> str:
        name = self.meta.scope.free_variable("_Class", single=True)
        t = self.tab
        lines = [
            "(function() {",
            t + "function " + name + "() {}",
            "",
            t + "return " + name + ";",
            "})()",
        ]
        return "\n".join(lines)
