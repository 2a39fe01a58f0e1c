"""
DCPU-16 word encoder.

Packs opcode and operand codes into 16-bit instruction words, serializes word
streams to big-endian bytes, and decodes them back for inspection.
"""

import struct
from typing import Iterable, Iterator, List, NamedTuple, Tuple

from .errors import EncodingError, ValueRangeError
from .instructions import EXTENDED_OPCODE

# =============================================================================
# Operand value codes
# =============================================================================

INDIRECT_BASE = 0x08  # [register]
INDIRECT_OFFSET_BASE = 0x10  # [next word + register]
INDIRECT_NEXT_WORD = 0x1E  # [next word]
NEXT_WORD_LITERAL = 0x1F  # next word
LITERAL_BASE = 0x20  # inline literal 0x00-0x1f

MAX_INLINE_LITERAL = 0x1F
WORD_MASK = 0xFFFF

OPCODE_BITS = 4
OPERAND_BITS = 6
OPERAND_MASK = (1 << OPERAND_BITS) - 1
OPCODE_MASK = (1 << OPCODE_BITS) - 1


def check_word_range(value: int, line_num: int = None, line_text: str = None) -> int:
    """
    Check that a value fits in an unsigned 16-bit word.

    Returns:
        The value unchanged

    Raises:
        ValueRangeError: If the value is negative or wider than 16 bits
    """
    if not 0 <= value <= WORD_MASK:
        raise ValueRangeError(value, line_num, line_text)
    return value


def pack_word(opcode: int, operand_a: int, operand_b: int) -> int:
    """
    Pack an instruction word.

    Format: [b(6) | a(6) | opcode(4)]
    """
    if not 0 <= opcode <= OPCODE_MASK:
        raise EncodingError(f"Opcode {opcode:#x} does not fit in {OPCODE_BITS} bits")
    for operand in (operand_a, operand_b):
        if not 0 <= operand <= OPERAND_MASK:
            raise EncodingError(
                f"Operand code {operand:#x} does not fit in {OPERAND_BITS} bits"
            )
    return opcode | (operand_a << OPCODE_BITS) | (operand_b << (OPCODE_BITS + OPERAND_BITS))


def unpack_word(word: int) -> Tuple[int, int, int]:
    """Split an instruction word into (opcode, operand_a, operand_b)."""
    return (
        word & OPCODE_MASK,
        (word >> OPCODE_BITS) & OPERAND_MASK,
        (word >> (OPCODE_BITS + OPERAND_BITS)) & OPERAND_MASK,
    )


def operand_needs_next_word(code: int) -> bool:
    """True if an operand code consumes a trailing word."""
    return (
        INDIRECT_OFFSET_BASE <= code < INDIRECT_OFFSET_BASE + 8
        or code in (INDIRECT_NEXT_WORD, NEXT_WORD_LITERAL)
    )


def words_to_bytes(words: Iterable[int]) -> bytes:
    """Serialize words big-endian, two bytes each, no header or padding."""
    words = list(words)
    for word in words:
        check_word_range(word)
    return struct.pack(f">{len(words)}H", *words)


def bytes_to_words(data: bytes) -> List[int]:
    """Read a big-endian byte string back into 16-bit words."""
    if len(data) % 2:
        raise EncodingError(f"Odd byte count {len(data)} in word stream")
    return list(struct.unpack(f">{len(data) // 2}H", data))


class DecodedInstruction(NamedTuple):
    """One instruction recovered from a word stream."""

    address: int
    opcode: int
    operand_a: int
    operand_b: int
    trailing: Tuple[int, ...]

    @property
    def size(self) -> int:
        return 1 + len(self.trailing)


def decode_words(words: Iterable[int]) -> Iterator[DecodedInstruction]:
    """
    Walk a word stream, yielding one DecodedInstruction per instruction word.

    Trailing words are consumed for operand A then operand B. Operand A of an
    extended instruction is a sub-opcode and never consumes one.
    """
    words = list(words)
    address = 0
    while address < len(words):
        opcode, operand_a, operand_b = unpack_word(words[address])
        operands = [operand_b] if opcode == EXTENDED_OPCODE else [operand_a, operand_b]
        needed = sum(1 for code in operands if operand_needs_next_word(code))
        trailing = tuple(words[address + 1:address + 1 + needed])
        if len(trailing) != needed:
            raise EncodingError(
                f"Word stream ends inside instruction at address {address:#06x}"
            )
        yield DecodedInstruction(address, opcode, operand_a, operand_b, trailing)
        address += 1 + needed
