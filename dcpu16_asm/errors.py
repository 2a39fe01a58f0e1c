"""
Custom exception types for the DCPU-16 assembler.

Every error carries the source line number and raw text of the line that
caused it, so the caller can print an actionable diagnostic.
"""

from typing import Iterable, Optional


class AssemblerError(Exception):
    """Base exception for assembler errors."""

    def __init__(self, message: str, line_num: int = None, line_text: str = None):
        self.line_num = line_num
        self.line_text = line_text
        if line_num is not None:
            if line_text:
                message = f"Line {line_num}: {message}\n  {line_text.rstrip()}"
            else:
                message = f"Line {line_num}: {message}"
        super().__init__(message)


class ParseError(AssemblerError):
    """Exception raised for line structure errors."""

    pass


class EncodingError(AssemblerError):
    """Exception raised for operand and instruction encoding errors."""

    pass


class SymbolError(AssemblerError):
    """Exception raised for symbol/label errors."""

    pass


class MalformedLineError(ParseError):
    """Wrong number of tokens on a line."""

    pass


class UnknownInstructionError(ParseError):
    """Mnemonic is not in the basic or extended instruction tables."""

    def __init__(self, mnemonic: str, line_num: int = None, line_text: str = None):
        self.mnemonic = mnemonic
        super().__init__(f"No such instruction: {mnemonic}", line_num, line_text)


class UnrecognizedOperandError(EncodingError):
    """Operand token matches none of the addressing-mode grammars."""

    def __init__(self, token: str, line_num: int = None, line_text: str = None):
        self.token = token
        super().__init__(f"Unrecognized value {token}", line_num, line_text)


class InvalidIndirectRegisterError(EncodingError):
    """Indirect addressing on a register other than A, B, C, X, Y, Z, I, J."""

    def __init__(self, register: str, line_num: int = None, line_text: str = None):
        self.register = register
        super().__init__(
            f"Can't use indirect addressing on non-basic register {register}",
            line_num,
            line_text,
        )


class MalformedIndirectOffsetError(EncodingError):
    """Offset-form indirect operand that is not <integer>+<register>."""

    def __init__(self, operand: str, line_num: int = None, line_text: str = None):
        self.operand = operand
        super().__init__(
            f"Malformed indirect offset value {operand}", line_num, line_text
        )


class ValueRangeError(EncodingError):
    """Literal does not fit in a 16-bit word."""

    def __init__(self, value: int, line_num: int = None, line_text: str = None):
        self.value = value
        super().__init__(
            f"Value {value} out of range [0, 65535] for 16-bit word",
            line_num,
            line_text,
        )


class UndefinedLabelError(SymbolError):
    """A referenced label is never defined."""

    def __init__(
        self,
        label: str,
        known_labels: Iterable[str] = (),
        line_num: int = None,
        line_text: str = None,
    ):
        self.label = label
        self.known_labels = sorted(known_labels)
        known = ", ".join(self.known_labels) if self.known_labels else "(none)"
        super().__init__(
            f"Cannot find label {label} in {known}", line_num, line_text
        )


class DuplicateLabelError(SymbolError):
    """A label is defined more than once."""

    def __init__(
        self,
        label: str,
        first_line: Optional[int] = None,
        line_num: int = None,
        line_text: str = None,
    ):
        self.label = label
        self.first_line = first_line
        message = f"Duplicate label: {label}"
        if first_line is not None:
            message += f" (first defined on line {first_line})"
        super().__init__(message, line_num, line_text)
