"""
Label table and label resolution.
"""

from collections.abc import Mapping
from typing import Dict, Iterable, List

from .errors import DuplicateLabelError
from .program import Instruction


class LabelTable(Mapping):
    """
    Label name -> word address, filled in during the line scan.

    Read access follows the Mapping protocol; define() is the only writer.
    """

    def __init__(self):
        self._addresses: Dict[str, int] = {}
        self._lines: Dict[str, int] = {}

    def define(self, name: str, address: int, line_num: int = None, line_text: str = None) -> None:
        """
        Bind a label to a word address.

        Raises:
            DuplicateLabelError: If the label is already defined
        """
        if name in self._addresses:
            raise DuplicateLabelError(name, self._lines.get(name), line_num, line_text)
        self._addresses[name] = address
        self._lines[name] = line_num

    def defined_on(self, name: str) -> int:
        """Line number of a label's definition."""
        return self._lines[name]

    def __getitem__(self, name: str) -> int:
        return self._addresses[name]

    def __iter__(self):
        return iter(self._addresses)

    def __len__(self) -> int:
        return len(self._addresses)

    def __repr__(self) -> str:
        return f"LabelTable({self._addresses!r})"


def resolve_labels(instructions: Iterable[Instruction], labels: Mapping) -> List[Instruction]:
    """
    Fill every label reference from the label table.

    Raises:
        UndefinedLabelError: On the first reference to a label not in labels
    """
    return [instr.resolve(labels) for instr in instructions]
