"""
Assembled program model.

An Instruction is one emitted unit: an instruction word plus the trailing
words its operands need. Trailing slots start out either as a known literal
or as an unresolved label reference, and every unresolved slot is replaced
exactly once when labels are resolved.
"""

from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple, Union

from .encoder import pack_word, words_to_bytes
from .errors import EncodingError, UndefinedLabelError


@dataclass(frozen=True)
class Literal:
    """Trailing word whose value is known."""

    value: int


@dataclass(frozen=True)
class Unresolved:
    """Trailing word holding the address of a label not yet resolved."""

    label: str


TrailingWord = Union[Literal, Unresolved]


@dataclass(frozen=True)
class Instruction:
    """
    One encoded instruction.

    Attributes:
        line_num: 1-based source line (diagnostics only)
        source_text: Original line text
        opcode: Basic opcode, or 0 for an extended instruction
        operand_a: Operand A code (extended sub-opcode when opcode is 0)
        operand_b: Operand B code
        trailing: Trailing word slots in operand parse order
    """

    line_num: int
    source_text: str
    opcode: int
    operand_a: int
    operand_b: int
    trailing: Tuple[TrailingWord, ...] = ()

    @property
    def size(self) -> int:
        """Encoded size in words."""
        return 1 + len(self.trailing)

    @property
    def word(self) -> int:
        return pack_word(self.opcode, self.operand_a, self.operand_b)

    @property
    def label_references(self) -> Dict[int, str]:
        """Trailing slot index -> label name, for every unresolved slot."""
        return {
            i: slot.label
            for i, slot in enumerate(self.trailing)
            if isinstance(slot, Unresolved)
        }

    @property
    def is_resolved(self) -> bool:
        return not self.label_references

    def resolve(self, labels: Mapping[str, int]) -> "Instruction":
        """
        Return a copy with every label reference replaced by its address.

        Raises:
            UndefinedLabelError: If a referenced label is not in labels
        """
        if self.is_resolved:
            return self

        slots = []
        for slot in self.trailing:
            if isinstance(slot, Unresolved):
                if slot.label not in labels:
                    raise UndefinedLabelError(
                        slot.label, labels.keys(), self.line_num, self.source_text
                    )
                slot = Literal(labels[slot.label])
            slots.append(slot)
        return replace(self, trailing=tuple(slots))

    def words(self) -> List[int]:
        """Instruction word followed by trailing words."""
        values = []
        for slot in self.trailing:
            if isinstance(slot, Unresolved):
                raise EncodingError(
                    f"Unresolved instruction: label {slot.label} has no address",
                    self.line_num,
                    self.source_text,
                )
            values.append(slot.value)
        return [self.word] + values

    def to_bytes(self) -> bytes:
        return words_to_bytes(self.words())

    def __str__(self) -> str:
        return f"{self.line_num}: " + " ".join(f"{w:04x}" for w in self.words())


@dataclass(frozen=True)
class Program:
    """
    A fully assembled program.

    Attributes:
        instructions: Resolved instructions in source order
        labels: Label name -> word address
    """

    instructions: Tuple[Instruction, ...]
    labels: Mapping[str, int]

    def __post_init__(self):
        object.__setattr__(self, "instructions", tuple(self.instructions))
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def __len__(self) -> int:
        return len(self.instructions)

    def __iter__(self):
        return iter(self.instructions)

    @property
    def size(self) -> int:
        """Program size in words."""
        return sum(instr.size for instr in self.instructions)

    def addresses(self) -> List[int]:
        """Word address of each instruction."""
        result = []
        address = 0
        for instr in self.instructions:
            result.append(address)
            address += instr.size
        return result

    def words(self) -> List[int]:
        return [word for instr in self.instructions for word in instr.words()]

    def to_bytes(self) -> bytes:
        return words_to_bytes(self.words())

    def listing(self) -> str:
        """One '<line>: <word> ...' line per instruction."""
        return "\n".join(str(instr) for instr in self.instructions)
