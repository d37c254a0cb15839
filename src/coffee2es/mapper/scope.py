"""Name scopes for temporaries and helper functions."""

from __future__ import annotations


class Scope:
    """Names visible in one function body.

    The root scope also owns the referenced-name set (every identifier in the
    input, so generated names never shadow user names) and the registry of
    helper functions requested while mapping.
    """

    def __init__(self, parent: Scope | None = None, referenced: set[str] | None = None):
        self.parent: Scope | None = parent
        self.declared: set[str] = set()
        self.temporaries: list[str] = []
        self.referenced: set[str] = referenced if referenced is not None else set()
        self.helpers: dict[str, str] = {}

    def root(self) -> Scope:
        scope = self
        while scope.parent is not None:
            scope = scope.parent
        return scope

    def child(self) -> Scope:
        return Scope(self)

    def check(self, name: str) -> bool:
        """True if name is declared here or in an enclosing scope."""
        scope: Scope | None = self
        while scope is not None:
            if name in scope.declared:
                return True
            scope = scope.parent
        return False

    def declare(self, name: str) -> None:
        self.declared.add(name)

    def taken(self, name: str) -> bool:
        return self.check(name) or name in self.root().referenced

    def free_variable(self, name: str, single: bool = False) -> str:
        """Fresh name based on name: name, name1, name2, ...

        The name is declared here so later requests skip it.  Unless single,
        it is also recorded as a temporary that needs a ``var`` at the top of
        the function.
        """
        candidate = name
        index = 0
        while self.taken(candidate):
            index += 1
            candidate = name + str(index)
        self.declare(candidate)
        if not single:
            self.temporaries.append(candidate)
        return candidate

    def helper(self, key: str) -> str:
        """Register helper key in the root registry and return its name."""
        root = self.root()
        if key not in root.helpers:
            root.helpers[key] = root.free_variable(key, single=True)
        return root.helpers[key]
