"""
DCPU-16 Assembler - A two-pass assembler for the DCPU-16 virtual machine.

Translates line-oriented assembly into a stream of big-endian 16-bit words.
"""

__version__ = "1.0.0"

from .assembler import Assembler, assemble
from .errors import (
    AssemblerError,
    DuplicateLabelError,
    EncodingError,
    InvalidIndirectRegisterError,
    MalformedIndirectOffsetError,
    MalformedLineError,
    ParseError,
    SymbolError,
    UndefinedLabelError,
    UnknownInstructionError,
    UnrecognizedOperandError,
    ValueRangeError,
)
from .program import Instruction, Literal, Program, Unresolved

__all__ = [
    "Assembler",
    "assemble",
    "Instruction",
    "Literal",
    "Program",
    "Unresolved",
    "AssemblerError",
    "ParseError",
    "EncodingError",
    "SymbolError",
    "MalformedLineError",
    "UnknownInstructionError",
    "UnrecognizedOperandError",
    "InvalidIndirectRegisterError",
    "MalformedIndirectOffsetError",
    "ValueRangeError",
    "UndefinedLabelError",
    "DuplicateLabelError",
]
