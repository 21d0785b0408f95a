"""
fnlang Intermediate Representation (IR) Nodes

A flat, three-address style instruction list. Values produced by an
instruction are named temporaries (`%t0`, `%t1`, ...) handed out by the
`IRContext`.

Author: xwest
"""

from typing import Any, Optional, Tuple
from dataclasses import dataclass, field
from enum import Enum


class IROpcode(Enum):
    """Enumeration of IR instruction opcodes."""

    # Declarations
    FUNCTION = "function"   # start of a function definition
    DECLARE = "declare"     # function prototype without a body
    PARAM = "param"         # bind an incoming parameter

    # Values
    CONST = "const"
    LOAD = "load"
    BINARY = "binary"

    # Calls and control flow
    ARG = "arg"
    CALL = "call"
    RET = "ret"


@dataclass(frozen=True)
class IRInstruction:
    """A single IR instruction."""
    opcode: IROpcode
    operands: Tuple[Any, ...] = ()
    result: Optional[str] = None

    def __str__(self) -> str:
        operands = ", ".join(str(operand) for operand in self.operands)
        text = f"{self.opcode.value} {operands}".rstrip()
        if self.result is not None:
            return f"{self.result} = {text}"
        return text


@dataclass
class IRContext:
    """State threaded through lowering."""
    current_function: Optional[str] = None
    temp_counter: int = 0
    functions: list = field(default_factory=list)

    def new_temp(self) -> str:
        """Allocate a fresh temporary name."""
        name = f"%t{self.temp_counter}"
        self.temp_counter += 1
        return name

    def begin_function(self, name: str) -> None:
        self.current_function = name
        self.functions.append(name)
