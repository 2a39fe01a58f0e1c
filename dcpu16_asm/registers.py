"""
DCPU-16 register and value-code definitions.

General registers A, B, C, X, Y, Z, I, J use codes 0-7. The stack,
program-counter and overflow pseudo-registers use codes 0x18-0x1d.
"""

from types import MappingProxyType

GENERAL_REGISTERS = ("A", "B", "C", "X", "Y", "Z", "I", "J")
SPECIAL_REGISTERS = ("POP", "PEEK", "PUSH", "SP", "PC", "O")

# First code of the special (non-general) value block
SPECIAL_BASE = 0x18


def _declare(names, start):
    """Number a run of names consecutively from start."""
    return {name: code for code, name in enumerate(names, start=start)}


# Name to value code
REGISTER_MAP = MappingProxyType(
    {**_declare(GENERAL_REGISTERS, 0), **_declare(SPECIAL_REGISTERS, SPECIAL_BASE)}
)

# Value code to name (for decoding)
REGISTER_NAMES = MappingProxyType({code: name for name, code in REGISTER_MAP.items()})

# Highest code usable with register-indirect addressing (J)
LAST_GENERAL_CODE = REGISTER_MAP["J"]


def parse_register(name: str) -> int:
    """
    Parse a register name and return its value code.

    Args:
        name: Register name (e.g., "A", "J", "SP", "PUSH")

    Returns:
        Value code (0-7 or 0x18-0x1d)

    Raises:
        ValueError: If the register name is invalid
    """
    if name in REGISTER_MAP:
        return REGISTER_MAP[name]
    raise ValueError(f"Invalid register name: {name}")


def is_valid_register(name: str) -> bool:
    """Check if a string is a valid register name."""
    return name in REGISTER_MAP


def is_general_register(name: str) -> bool:
    """Check if a register may be used with indirect addressing."""
    return name in REGISTER_MAP and REGISTER_MAP[name] <= LAST_GENERAL_CODE


def get_register_name(code: int) -> str:
    """Get the register name for a value code."""
    if code not in REGISTER_NAMES:
        raise ValueError(f"Invalid register code: {code:#x}")
    return REGISTER_NAMES[code]
