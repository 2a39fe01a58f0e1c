"""
Assembly source line parser.

Handles comment stripping, tokenization, label extraction, and classification
of operand tokens into addressing-mode variants.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Union

from .errors import MalformedLineError

COMMENT_CHAR = ";"
LABEL_PREFIX = ":"

HEX_RE = re.compile(r"^0x[0-9a-fA-F]+$")
INT_RE = re.compile(r"^\d+$")
REG_RE = re.compile(r"^[A-Z]+$")
LABEL_RE = re.compile(r"^[a-z]+$")
INDIRECT_RE = re.compile(r"^\[(.+)\]$")
INDIRECT_OFFSET_RE = re.compile(r"^([^+]+)\+([^+]+)$")

# Token counts accepted on a line that carries an instruction
MIN_TOKENS = 2
MAX_TOKENS = 4


@dataclass
class ParsedLine:
    """
    Represents a parsed line of assembly.

    Attributes:
        line_num: Original line number in source file
        original: Original line text
        label: Label defined on this line (if any)
        mnemonic: Instruction mnemonic (if any)
        operands: List of operand tokens
    """

    line_num: int
    original: str = ""
    label: Optional[str] = None
    mnemonic: Optional[str] = None
    operands: List[str] = field(default_factory=list)


def strip_comments(line: str) -> str:
    """Remove everything from the comment marker to end of line."""
    comment_pos = line.find(COMMENT_CHAR)
    if comment_pos >= 0:
        return line[:comment_pos]
    return line


def clean_line(line: str) -> str:
    """
    Normalize a raw source line.

    Comments are dropped, commas become spaces, whitespace runs collapse to a
    single space and the ends are trimmed.
    """
    line = strip_comments(line).replace(",", " ")
    return " ".join(line.split())


def tokenize(line: str) -> List[str]:
    """Split a raw source line into cleaned tokens."""
    cleaned = clean_line(line)
    return cleaned.split(" ") if cleaned else []


def split_lines(source: str) -> List[str]:
    """
    Split source text into lines on '\\n' only.

    A trailing newline does not start an extra line. Any '\\r' left on a line
    is whitespace to clean_line.
    """
    lines = source.split("\n")
    if lines[-1] == "":
        lines.pop()
    return lines


def parse_line(line: str, line_num: int) -> ParsedLine:
    """
    Parse a single line of assembly.

    Returns:
        ParsedLine object; mnemonic is None for blank and label-only lines

    Raises:
        MalformedLineError: If the token count is wrong or a label is empty
    """
    result = ParsedLine(line_num=line_num, original=line)
    tokens = tokenize(line)

    if not tokens:
        return result

    is_label = tokens[0].startswith(LABEL_PREFIX)
    label_only = is_label and len(tokens) == 1
    if not label_only and not MIN_TOKENS <= len(tokens) <= MAX_TOKENS:
        raise MalformedLineError(
            f"Wrong number of tokens ({len(tokens)})", line_num, line
        )

    if is_label:
        result.label = tokens.pop(0)[len(LABEL_PREFIX):]
        if not result.label:
            raise MalformedLineError("Empty label name", line_num, line)
        if not LABEL_RE.match(result.label):
            raise MalformedLineError(
                f"Invalid label name {result.label} (lowercase letters only)",
                line_num,
                line,
            )

    if tokens:
        result.mnemonic = tokens[0]
        result.operands = tokens[1:]

    return result


def parse_integer(token: str) -> Optional[int]:
    """
    Parse a decimal or 0x-prefixed hexadecimal literal.

    Returns:
        Integer value, or None if the token is not an integer literal
    """
    if HEX_RE.match(token):
        return int(token, 16)
    if INT_RE.match(token):
        return int(token, 10)
    return None


# =============================================================================
# Operand classification
# =============================================================================


@dataclass(frozen=True)
class IntegerLiteral:
    value: int


@dataclass(frozen=True)
class Register:
    name: str


@dataclass(frozen=True)
class LabelRef:
    name: str


@dataclass(frozen=True)
class Indirect:
    """Bracketed operand wrapping an integer, register or label."""

    target: Union[IntegerLiteral, Register, LabelRef]


@dataclass(frozen=True)
class IndirectOffset:
    """
    Bracketed <value>+<register> operand.

    offset is None when the value part is not an integer literal; register is
    the raw text of the register part. Both are validated by the encoder.
    """

    text: str
    offset: Optional[int]
    register: str


@dataclass(frozen=True)
class InvalidOperand:
    token: str


Operand = Union[IntegerLiteral, Register, LabelRef, Indirect, IndirectOffset, InvalidOperand]


def _classify_direct(token: str):
    value = parse_integer(token)
    if value is not None:
        return IntegerLiteral(value)
    if REG_RE.match(token):
        return Register(token)
    if LABEL_RE.match(token):
        return LabelRef(token)
    return None


def classify_operand(token: str) -> Operand:
    """
    Classify an operand token into its addressing-mode variant.

    Priority: integer literal (hex or decimal), register name, label
    reference, bracketed indirect form. Anything else is InvalidOperand.
    """
    direct = _classify_direct(token)
    if direct is not None:
        return direct

    match = INDIRECT_RE.match(token)
    if match:
        inner = match.group(1)
        target = _classify_direct(inner)
        if target is not None:
            return Indirect(target)

        offset_match = INDIRECT_OFFSET_RE.match(inner)
        if offset_match:
            offset_text, reg_text = (part.strip() for part in offset_match.groups())
            return IndirectOffset(inner, parse_integer(offset_text), reg_text)

    return InvalidOperand(token)
