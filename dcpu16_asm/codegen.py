"""
Operand and instruction code generation.

Turns a parsed line into an Instruction: looks up the mnemonic, encodes each
operand into an addressing-mode code, and collects the trailing words the
operands need (literal values or label placeholders).
"""

from typing import List

from .encoder import (
    INDIRECT_BASE,
    INDIRECT_NEXT_WORD,
    INDIRECT_OFFSET_BASE,
    LITERAL_BASE,
    MAX_INLINE_LITERAL,
    NEXT_WORD_LITERAL,
    check_word_range,
)
from .errors import (
    InvalidIndirectRegisterError,
    MalformedIndirectOffsetError,
    MalformedLineError,
    UnknownInstructionError,
    UnrecognizedOperandError,
)
from .instructions import EXTENDED_OPCODE, InstructionFormat, get_instruction
from .parser import (
    Indirect,
    IndirectOffset,
    IntegerLiteral,
    LabelRef,
    ParsedLine,
    Register,
    classify_operand,
)
from .program import Instruction, Literal, Unresolved
from .registers import is_general_register, is_valid_register, parse_register


class InstructionBuilder:
    """
    Accumulates one instruction's fields while its operands are encoded.

    Trailing words are only ever appended; build() freezes the result.
    """

    def __init__(self, line_num: int, line_text: str):
        self.line_num = line_num
        self.line_text = line_text
        self.opcode = 0
        self.operand_a = 0
        self.operand_b = 0
        self._trailing = []

    def extend(self, value: int) -> None:
        """Append a literal trailing word."""
        check_word_range(value, self.line_num, self.line_text)
        self._trailing.append(Literal(value))

    def reference(self, label: str) -> None:
        """Append a placeholder for a label's address."""
        self._trailing.append(Unresolved(label))

    def build(self) -> Instruction:
        return Instruction(
            line_num=self.line_num,
            source_text=self.line_text,
            opcode=self.opcode,
            operand_a=self.operand_a,
            operand_b=self.operand_b,
            trailing=tuple(self._trailing),
        )


def _register_code(name: str, builder: InstructionBuilder) -> int:
    try:
        return parse_register(name)
    except ValueError:
        raise UnrecognizedOperandError(name, builder.line_num, builder.line_text)


def _indirect_register_code(name: str, builder: InstructionBuilder) -> int:
    if not is_general_register(name):
        raise InvalidIndirectRegisterError(name, builder.line_num, builder.line_text)
    return parse_register(name)


def encode_operand(token: str, builder: InstructionBuilder) -> int:
    """
    Encode one operand token.

    Appends at most one trailing word to the builder.

    Returns:
        6-bit addressing-mode code
    """
    operand = classify_operand(token)

    if isinstance(operand, IntegerLiteral):
        if operand.value <= MAX_INLINE_LITERAL:
            return LITERAL_BASE + operand.value
        builder.extend(operand.value)
        return NEXT_WORD_LITERAL

    if isinstance(operand, Register):
        return _register_code(operand.name, builder)

    if isinstance(operand, LabelRef):
        builder.reference(operand.name)
        return NEXT_WORD_LITERAL

    if isinstance(operand, Indirect):
        target = operand.target
        if isinstance(target, IntegerLiteral):
            builder.extend(target.value)
            return INDIRECT_NEXT_WORD
        if isinstance(target, Register):
            return INDIRECT_BASE + _indirect_register_code(target.name, builder)
        builder.reference(target.name)
        return INDIRECT_NEXT_WORD

    if isinstance(operand, IndirectOffset):
        if operand.offset is None or not is_valid_register(operand.register):
            raise MalformedIndirectOffsetError(
                operand.text, builder.line_num, builder.line_text
            )
        builder.extend(operand.offset)
        return INDIRECT_OFFSET_BASE

    raise UnrecognizedOperandError(token, builder.line_num, builder.line_text)


def encode_instruction(line: ParsedLine) -> Instruction:
    """
    Encode a parsed code line.

    Basic instructions encode operand A then operand B. Extended instructions
    put their sub-opcode in the A field and encode their single operand as B.

    Raises:
        UnknownInstructionError: If the mnemonic is in neither table
        MalformedLineError: If the operand count is wrong for the mnemonic
    """
    instr = get_instruction(line.mnemonic)
    if instr is None:
        raise UnknownInstructionError(line.mnemonic, line.line_num, line.original)

    operands: List[str] = line.operands
    if len(operands) != instr.operand_count:
        raise MalformedLineError(
            f"{instr.mnemonic} requires {instr.operand_count} operand(s), "
            f"got {len(operands)}",
            line.line_num,
            line.original,
        )

    builder = InstructionBuilder(line.line_num, line.original)
    if instr.format is InstructionFormat.BASIC:
        builder.opcode = instr.opcode
        builder.operand_a = encode_operand(operands[0], builder)
        builder.operand_b = encode_operand(operands[1], builder)
    else:
        builder.opcode = EXTENDED_OPCODE
        builder.operand_a = instr.opcode
        builder.operand_b = encode_operand(operands[0], builder)

    return builder.build()
