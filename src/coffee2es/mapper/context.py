"""Per-node mapping context."""

from __future__ import annotations

from dataclasses import dataclass, replace

from .scope import Scope


@dataclass(frozen=True)
class Meta:
    """Context handed down the tree while mapping.

    Derive a child context with extend() instead of mutating one.
    """

    scope: Scope
    tab_width: int = 2
    quote: str = "double"
    left: bool = False
    method_name: str | None = None
    in_constructor: bool = False
    is_subclass: bool = False

    def extend(self, **changes: object) -> Meta:
        return replace(self, **changes)
