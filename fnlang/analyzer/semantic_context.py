"""
Scope management for fnlang semantic analysis.

`SemanticContext` owns one flat symbol table (identifier -> Type) and a stack
of lexical scopes, innermost last. It is created once per compilation unit and
passed as a single mutable handle through parsing and analysis.

A scope frame records which identifiers it declared and which table entries
it shadowed, so that leaving a scope restores the outer bindings instead of
leaving stale types behind.

Author: xwest
"""

from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Set
from dataclasses import dataclass, field

from ..lexer.tokens import SourceLocation
from .errors import create_scope_underflow_error
from .types import Type, FunctionSignature


_MISSING = object()


@dataclass
class Scope:
    """A lexical scope: the identifiers it declares and what they shadowed."""
    name: str
    symbols: Set[str] = field(default_factory=set)
    shadowed: Dict[str, Type] = field(default_factory=dict)

    def __contains__(self, identifier: str) -> bool:
        return identifier in self.symbols

    def __str__(self) -> str:
        return f"Scope({self.name}, {len(self.symbols)} symbols)"


class SemanticContext:
    """
    Symbol table plus scope stack shared by the parser and the analyzer.

    The scope stack is seeded with a global scope and never becomes empty.
    """

    def __init__(self, file: str = "<input>"):
        self.file = file
        self.symbol_table: Dict[str, Type] = {}
        self.scopes: List[Scope] = [Scope("global")]
        self.current_function_return: Optional[Type] = None
        self.current_function: Optional[str] = None
        self.functions: Dict[str, FunctionSignature] = {}

    @property
    def depth(self) -> int:
        """Number of open scopes, including the global one."""
        return len(self.scopes)

    @property
    def current_scope(self) -> Scope:
        return self.scopes[-1]

    def enter_scope(self, name: str = "block") -> Scope:
        """Push an empty scope."""
        scope = Scope(name)
        self.scopes.append(scope)
        return scope

    def exit_scope(self) -> Scope:
        """
        Pop the innermost scope.

        Entries the scope introduced are removed from the symbol table and any
        binding they shadowed is restored.
        """
        if len(self.scopes) == 1:
            raise create_scope_underflow_error(SourceLocation(self.file, 0, 0))

        scope = self.scopes.pop()
        for identifier in scope.symbols:
            previous = scope.shadowed.get(identifier, _MISSING)
            if previous is _MISSING:
                self.symbol_table.pop(identifier, None)
            else:
                self.symbol_table[identifier] = previous
        return scope

    @contextmanager
    def scope(self, name: str = "block") -> Iterator[Scope]:
        """Open a scope for the duration of a `with` block."""
        scope = self.enter_scope(name)
        try:
            yield scope
        finally:
            self.exit_scope()

    def add_symbol(self, identifier: str, symbol_type: Type) -> None:
        """Record `identifier -> symbol_type` and declare it in the innermost scope."""
        scope = self.current_scope
        if identifier not in scope.symbols and identifier in self.symbol_table:
            scope.shadowed[identifier] = self.symbol_table[identifier]
        self.symbol_table[identifier] = symbol_type
        scope.symbols.add(identifier)

    def lookup(self, identifier: str) -> Optional[Type]:
        """Find the type of `identifier`, searching scopes innermost to outermost."""
        for scope in reversed(self.scopes):
            if identifier in scope:
                return self.symbol_table.get(identifier)
        return None

    def is_declared_locally(self, identifier: str) -> bool:
        """Check the innermost scope only."""
        return identifier in self.current_scope

    def declare_function(self, signature: FunctionSignature) -> None:
        self.functions[signature.name] = signature

    def lookup_function(self, name: str) -> Optional[FunctionSignature]:
        return self.functions.get(name)

    def visible_names(self) -> List[str]:
        names: List[str] = []
        for scope in reversed(self.scopes):
            names.extend(sorted(scope.symbols))
        return names

    def get_similar_names(self, name: str, max_distance: int = 2) -> List[str]:
        """Get visible names similar to the given name (for error suggestions)."""
        def levenshtein_distance(s1: str, s2: str) -> int:
            """Calculate edit distance between two strings."""
            if len(s1) < len(s2):
                return levenshtein_distance(s2, s1)

            if len(s2) == 0:
                return len(s1)

            previous_row = list(range(len(s2) + 1))
            for i, c1 in enumerate(s1):
                current_row = [i + 1]
                for j, c2 in enumerate(s2):
                    insertions = previous_row[j + 1] + 1
                    deletions = current_row[j] + 1
                    substitutions = previous_row[j] + (c1 != c2)
                    current_row.append(min(insertions, deletions, substitutions))
                previous_row = current_row

            return previous_row[-1]

        similar_names = []
        for candidate in self.visible_names():
            if candidate == name:
                continue
            distance = levenshtein_distance(name.lower(), candidate.lower())
            if distance <= max_distance:
                similar_names.append((candidate, distance))

        similar_names.sort(key=lambda x: x[1])
        return [candidate for candidate, _ in similar_names[:5]]

    def __str__(self) -> str:
        scopes = " > ".join(scope.name for scope in self.scopes)
        return f"SemanticContext({scopes}, {len(self.symbol_table)} symbols)"
