"""
fnlang Intermediate Representation

The instruction set and context threaded through AST lowering. Each AST node
lowers itself to an ordered list of `IRInstruction`s; code generation
consumes them.

Author: xwest
"""

from .ir_nodes import IRContext, IRInstruction, IROpcode

__all__ = [
    "IRContext",
    "IRInstruction",
    "IROpcode",
]
