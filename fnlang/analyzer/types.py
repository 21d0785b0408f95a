"""
Type representation shared by the parser and the semantic analyzer.

Author: xwest
"""

from typing import List, Optional
from dataclasses import dataclass, field
from enum import Enum


I32_MAX = 2 ** 31 - 1


class BasicType(Enum):
    """Primitive types recognized natively."""
    I32 = "i32"
    VOID = "void"


@dataclass(frozen=True)
class Type:
    """
    A type referenced in source.

    `basic` is None for user/unknown types referenced by name only.
    """
    name: str
    basic: Optional[BasicType] = None

    @classmethod
    def i32(cls) -> 'Type':
        return cls("i32", BasicType.I32)

    @classmethod
    def void(cls) -> 'Type':
        return cls("void", BasicType.VOID)

    @classmethod
    def named(cls, name: str) -> 'Type':
        return cls(name)

    @property
    def is_basic(self) -> bool:
        return self.basic is not None

    @property
    def is_void(self) -> bool:
        return self.basic == BasicType.VOID

    def __str__(self) -> str:
        return self.name


@dataclass
class FunctionSignature:
    """Parameter and return types of a declared function."""
    name: str
    param_types: List[Type] = field(default_factory=list)
    return_type: Type = field(default_factory=Type.void)
    has_body: bool = True

    @property
    def arity(self) -> int:
        return len(self.param_types)

    def matches(self, other: 'FunctionSignature') -> bool:
        """Check whether two signatures declare the same types."""
        return (self.param_types == other.param_types and
                self.return_type == other.return_type)

    def __str__(self) -> str:
        params = ", ".join(str(t) for t in self.param_types)
        return f"fn {self.name}({params}) -> {self.return_type}"
