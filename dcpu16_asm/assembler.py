"""
Main assembler implementation.

Two-pass assembler for DCPU-16 assembly to a big-endian word stream.
"""

import logging
from typing import List, TextIO

from .codegen import encode_instruction
from .errors import ParseError
from .parser import parse_line, split_lines
from .program import Instruction, Program
from .symbols import LabelTable, resolve_labels

logger = logging.getLogger(__name__)


class Assembler:
    """
    Two-pass DCPU-16 assembler.

    Pass 1: Encode instructions, record labels at the current word address
    Pass 2: Substitute label addresses into unresolved trailing words
    """

    def __init__(self, verbose: bool = False):
        """
        Initialize the assembler.

        Args:
            verbose: If True, log detailed assembly information
        """
        self.verbose = verbose
        self.symbols = LabelTable()
        self.instructions: List[Instruction] = []
        self.current_address: int = 0
        self.program: Program = None

    def log(self, message: str) -> None:
        """Log message if verbose mode is enabled."""
        if self.verbose:
            logger.debug(message)

    def assemble_file(self, input_path: str, output_path: str = None) -> Program:
        """
        Assemble an assembly file.

        Args:
            input_path: Path to input source file
            output_path: Path to output binary file (optional)

        Returns:
            Assembled Program
        """
        self.log(f"Assembling: {input_path}")
        with open(input_path, "rb") as f:
            data = f.read()

        try:
            source = data.decode("ascii")
        except UnicodeDecodeError as e:
            line_num = data.count(b"\n", 0, e.start) + 1
            raise ParseError(
                f"Non-ASCII byte 0x{data[e.start]:02x} in source", line_num
            )
        program = self.assemble_string(source)

        if output_path:
            self.write_binary(output_path)
            self.log(f"Output written to: {output_path}")

        return program

    def assemble_stream(self, stream: TextIO) -> Program:
        """Assemble everything readable from a text stream."""
        return self.assemble_string(stream.read())

    def assemble_string(self, source: str) -> Program:
        """
        Assemble from a string.

        Args:
            source: Assembly source code

        Returns:
            Assembled Program
        """
        self._pass1(source)
        self._pass2()
        self.program = Program(self.instructions, self.symbols)
        return self.program

    def _pass1(self, source: str) -> None:
        """
        First pass: Encode lines, collect labels and compute addresses.
        """
        self.log("=== Pass 1: Encoding instructions ===")
        self.symbols = LabelTable()
        self.instructions = []
        self.program = None
        self.current_address = 0

        for line_num, text in enumerate(split_lines(source), start=1):
            line = parse_line(text, line_num)

            # Record label at current address
            if line.label:
                self.symbols.define(line.label, self.current_address, line_num, text)
                self.log(f"  Label '{line.label}' at 0x{self.current_address:04X}")

            # Skip blank and label-only lines
            if not line.mnemonic:
                continue

            instr = encode_instruction(line)
            self.instructions.append(instr)
            self.log(
                f"  0x{self.current_address:04X}: {line.mnemonic} "
                f"{', '.join(line.operands)} ({instr.size} words)"
            )
            self.current_address += instr.size

        self.log(f"  Total symbols: {len(self.symbols)}")
        self.log(f"  Program size: {self.current_address} words")

    def _pass2(self) -> None:
        """
        Second pass: Resolve label references.
        """
        self.log("=== Pass 2: Resolving labels ===")
        pending = sum(len(instr.label_references) for instr in self.instructions)
        self.instructions = resolve_labels(self.instructions, self.symbols)
        self.log(f"  Resolved {pending} label references")
        self.log(f"  Total instructions: {len(self.instructions)}")

    def write_binary(self, output_path: str) -> None:
        """
        Write the assembled program as big-endian words.

        Args:
            output_path: Path to output file
        """
        with open(output_path, "wb") as f:
            f.write(self.program.to_bytes())

    def get_hex_string(self) -> str:
        """
        Get the assembled program as hex words.

        Returns:
            String with one 4-digit hex word per line
        """
        return "\n".join(f"{word:04x}" for word in self.program.words())

    def get_listing(self) -> str:
        """
        Get a listing of line numbers and encoded words.

        Returns:
            One '<line>: <word> <word> ...' line per instruction
        """
        return self.program.listing()


def assemble(source: str, verbose: bool = False) -> Program:
    """Assemble source text with a fresh Assembler."""
    return Assembler(verbose=verbose).assemble_string(source)
