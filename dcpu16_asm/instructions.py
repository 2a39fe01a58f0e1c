"""
DCPU-16 instruction definitions.

Basic instructions carry their opcode in the low 4 bits of the instruction
word and take two operands. Extended instructions use the reserved opcode 0,
store their own sub-opcode in the operand A field, and take one operand.
"""

from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Optional


class InstructionFormat(Enum):
    """DCPU-16 instruction format types."""

    BASIC = auto()  # opcode, a, b
    EXTENDED = auto()  # 0, sub-opcode, a


# Opcode field value marking an extended instruction
EXTENDED_OPCODE = 0


@dataclass(frozen=True)
class InstructionDef:
    """
    Definition of a DCPU-16 instruction.

    Attributes:
        mnemonic: Uppercase mnemonic
        opcode: Basic opcode (1-15) or extended sub-opcode
        format: Instruction format type
    """

    mnemonic: str
    opcode: int
    format: InstructionFormat

    @property
    def operand_count(self) -> int:
        return 2 if self.format is InstructionFormat.BASIC else 1


def _declare(names: str, start: int, fmt: InstructionFormat) -> dict:
    return {
        name: InstructionDef(mnemonic=name, opcode=code, format=fmt)
        for code, name in enumerate(names.split(), start=start)
    }


# =============================================================================
# Basic instructions (opcodes 1-15)
# =============================================================================

INSTRUCTIONS = MappingProxyType(
    _declare(
        "SET ADD SUB MUL DIV MOD SHL SHR AND BOR XOR IFE IFN IFG IFB",
        1,
        InstructionFormat.BASIC,
    )
)

# =============================================================================
# Extended instructions (opcode 0, sub-opcode in operand A)
# =============================================================================

EXTENDED_INSTRUCTIONS = MappingProxyType(
    _declare("JSR", 1, InstructionFormat.EXTENDED)
)


def get_instruction(mnemonic: str) -> Optional[InstructionDef]:
    """
    Look up an instruction by mnemonic.

    Basic instructions are searched before extended ones.

    Args:
        mnemonic: Instruction mnemonic (exact, uppercase)

    Returns:
        InstructionDef object if found, None otherwise
    """
    instr = INSTRUCTIONS.get(mnemonic)
    if instr is None:
        instr = EXTENDED_INSTRUCTIONS.get(mnemonic)
    return instr


def is_valid_instruction(mnemonic: str) -> bool:
    """Check if a mnemonic is a valid instruction."""
    return get_instruction(mnemonic) is not None


def get_mnemonic(opcode: int, operand_a: int = 0) -> Optional[str]:
    """Find the mnemonic for an encoded opcode field (and sub-opcode)."""
    if opcode == EXTENDED_OPCODE:
        table, code = EXTENDED_INSTRUCTIONS, operand_a
    else:
        table, code = INSTRUCTIONS, opcode
    for name, instr in table.items():
        if instr.opcode == code:
            return name
    return None


def get_all_mnemonics() -> list:
    """Get a list of all supported instruction mnemonics."""
    return list(INSTRUCTIONS.keys()) + list(EXTENDED_INSTRUCTIONS.keys())
