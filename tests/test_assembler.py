"""
Tests for the two-pass assembler driver.
"""

import io
import logging

import pytest

from dcpu16_asm import (
    Assembler,
    DuplicateLabelError,
    Literal,
    MalformedLineError,
    UndefinedLabelError,
    UnknownInstructionError,
    assemble,
)
from dcpu16_asm.codegen import encode_instruction
from dcpu16_asm.encoder import bytes_to_words, decode_words
from dcpu16_asm.errors import EncodingError, ParseError
from dcpu16_asm.parser import parse_line
from dcpu16_asm.symbols import LabelTable, resolve_labels

LOOP_SOURCE = ":loop\n  SET A, 0x1\n  ADD A, [loop]\n  SET PC, loop"


class TestLoopExample:
    """Tests for the label-only loop program."""

    def test_instructions(self):
        program = assemble(LOOP_SOURCE)
        assert len(program) == 3
        assert [instr.line_num for instr in program] == [2, 3, 4]
        assert program.labels == {"loop": 0}

    def test_addresses(self):
        """Test that ADD's trailing word pushes SET PC to address 3."""
        program = assemble(LOOP_SOURCE)
        assert program.addresses() == [0, 1, 3]
        assert program.size == 5

    def test_both_references_resolve(self):
        program = assemble(LOOP_SOURCE)
        assert program.instructions[1].trailing == (Literal(0),)
        assert program.instructions[2].trailing == (Literal(0),)
        assert all(instr.is_resolved for instr in program)

    def test_words_and_bytes(self):
        program = assemble(LOOP_SOURCE)
        assert program.words() == [0x8401, 0x7802, 0x0000, 0x7DC1, 0x0000]
        data = program.to_bytes()
        assert len(data) == 10
        assert data == bytes.fromhex("8401 7802 0000 7dc1 0000")

    def test_listing(self):
        program = assemble(LOOP_SOURCE)
        assert program.listing() == "2: 8401\n3: 7802 0000\n4: 7dc1 0000"


class TestLabels:
    """Tests for label definition and resolution."""

    def test_forward_reference(self):
        """Test that a label used before its definition resolves."""
        source = "SET PC, end\nSET A, 0x30\n:end SET B, 1"
        program = assemble(source)
        assert program.labels["end"] == 4
        assert program.instructions[0].words() == [0x7DC1, 0x0004]

    def test_label_on_instruction_line(self):
        """Test that a label shares the address of its line's instruction."""
        program = assemble("SET A, 1\n:here SET B, 2\nJSR here")
        assert program.labels["here"] == 1
        assert program.instructions[2].words() == [0x7C10, 0x0001]

    def test_label_at_end(self):
        """Test a trailing label-only line marking the end address."""
        program = assemble("SET A, 100\nSET B, end\n:end")
        assert program.labels["end"] == 4
        assert program.words()[-1] == 4

    def test_undefined_label(self):
        source = "SET A, 1\n:start SET B, 2\nSET PC, nowhere\nSET C, 3"
        with pytest.raises(UndefinedLabelError, match="Cannot find label nowhere in start") as exc:
            assemble(source)
        assert exc.value.label == "nowhere"
        assert exc.value.known_labels == ["start"]
        assert exc.value.line_num == 3
        assert exc.value.line_text == "SET PC, nowhere"

    def test_undefined_label_no_labels(self):
        with pytest.raises(UndefinedLabelError, match=r"in \(none\)"):
            assemble("SET PC, nowhere")

    def test_duplicate_label(self):
        with pytest.raises(DuplicateLabelError, match="Duplicate label: a \\(first defined on line 1\\)") as exc:
            assemble(":a SET A, 1\n:a SET B, 1")
        assert exc.value.line_num == 2


class TestLabelTable:
    """Tests for LabelTable and resolve_labels."""

    def test_mapping_protocol(self):
        table = LabelTable()
        table.define("loop", 3, 1, ":loop")
        table.define("end", 9, 7, ":end")
        assert dict(table) == {"loop": 3, "end": 9}
        assert "loop" in table
        assert len(table) == 2
        assert table.defined_on("end") == 7

    def test_resolve_is_pure(self):
        """Test that resolution returns new instructions and leaves inputs alone."""
        asm = Assembler()
        asm._pass1("SET PC, top\n:top SET A, 1")
        before = list(asm.instructions)
        after = resolve_labels(before, asm.symbols)
        assert not before[0].is_resolved
        assert after[0].trailing == (Literal(2),)


class TestErrors:
    """Tests that the first error aborts assembly."""

    def test_malformed_line(self):
        with pytest.raises(MalformedLineError) as exc:
            assemble("SET A, 1\n\nJSR\n")
        assert exc.value.line_num == 3

    def test_first_error_wins(self):
        with pytest.raises(UnknownInstructionError) as exc:
            assemble("NOP A, B\nSET PC, missing")
        assert exc.value.line_num == 1

    def test_error_message_format(self):
        with pytest.raises(UnknownInstructionError) as exc:
            assemble("\n  HCF A, B ; halt\n")
        assert str(exc.value) == "Line 2: No such instruction: HCF\n    HCF A, B ; halt"

    def test_unresolved_words(self):
        """Test that an unresolved instruction cannot be serialized."""
        instr = encode_instruction(parse_line("SET PC, later", 6))
        with pytest.raises(EncodingError, match="Line 6: Unresolved instruction: label later"):
            instr.words()


class TestLineNumbers:
    """Tests that only newlines advance the line count."""

    def test_form_feed_does_not_split(self):
        program = assemble("SET A, 1 \x0c\nSET B, 2")
        assert [instr.line_num for instr in program] == [1, 2]

    def test_other_separators(self):
        program = assemble("SET A, 1 \x0b\x1c\x1d\x1e\x85\nSET B, 2\nSET C, 3")
        assert [instr.line_num for instr in program] == [1, 2, 3]

    def test_crlf_source(self):
        program = assemble(":top\r\nSET A, 1\r\nSET PC, top\r\n")
        assert [instr.line_num for instr in program] == [2, 3]
        assert program.labels == {"top": 0}


class TestIndirectOffset:
    """Tests for [value+register] operands in whole programs."""

    def test_fixed_mode_code(self):
        program = assemble("SET [3+B], 1")
        assert program.instructions[0].operand_a == 0x10
        assert program.words() == [0x8501, 0x0003]

    def test_special_register(self):
        program = assemble("SET [3+PC], 1")
        assert program.instructions[0].operand_a == 0x10


class TestAssemblerInterface:
    """Tests for the Assembler class I/O helpers."""

    def test_blank_and_comment_lines(self):
        program = assemble("; header\n\n   \nSET A, 1 ; one\n")
        assert len(program) == 1
        assert program.instructions[0].line_num == 4

    def test_empty_source(self):
        program = assemble("")
        assert len(program) == 0
        assert program.to_bytes() == b""
        assert program.listing() == ""

    def test_assemble_stream(self):
        asm = Assembler()
        program = asm.assemble_stream(io.StringIO(LOOP_SOURCE))
        assert program.size == 5
        assert asm.get_hex_string() == "8401\n7802\n0000\n7dc1\n0000"
        assert asm.get_listing() == program.listing()

    def test_assemble_file(self, tmp_path):
        source = tmp_path / "loop.s"
        source.write_text(LOOP_SOURCE)
        output = tmp_path / "loop.s.o"

        program = Assembler().assemble_file(str(source), str(output))

        assert output.read_bytes() == program.to_bytes()
        assert bytes_to_words(output.read_bytes()) == program.words()

    def test_non_ascii_file(self, tmp_path):
        """Test that a non-ASCII byte is reported with its line number."""
        source = tmp_path / "accent.s"
        source.write_bytes("SET A, 1\nSET B, 2 ; café\n".encode("utf-8"))

        with pytest.raises(ParseError, match="Line 2: Non-ASCII byte 0xc3 in source") as exc:
            Assembler().assemble_file(str(source))
        assert exc.value.line_num == 2

    def test_reuse_resets_state(self):
        """Test that a second run on one Assembler starts from scratch."""
        asm = Assembler()
        asm.assemble_string(":a SET A, 1")
        program = asm.assemble_string(":a SET B, 1\nSET PC, a")
        assert program.labels == {"a": 0}
        assert len(program) == 2

    def test_program_is_read_only(self):
        program = assemble(LOOP_SOURCE)
        with pytest.raises(TypeError):
            program.labels["loop"] = 5

    def test_verbose_logging(self, caplog):
        caplog.set_level(logging.DEBUG, logger="dcpu16_asm")
        Assembler(verbose=True).assemble_string(LOOP_SOURCE)
        assert "Label 'loop' at 0x0000" in caplog.text
        assert "Program size: 5 words" in caplog.text

    def test_quiet_by_default(self, caplog):
        caplog.set_level(logging.DEBUG, logger="dcpu16_asm")
        Assembler().assemble_string(LOOP_SOURCE)
        assert caplog.text == ""


class TestRoundTrip:
    """Tests that assembled word streams decode back to the same fields."""

    SOURCE = """
        SET A, 0x30
        SET [0x1000], 0x20
        SUB A, [0x1000]
        IFN A, 0x10
        SET I, 10
        SET [0x2000+I], [A]
        SHL X, 4
        SET PC, POP
        JSR 0x100
        SET PUSH, [C]
        IFB PEEK, O
    """

    def test_decode_recovers_encoding(self):
        program = assemble(self.SOURCE)
        decoded = list(decode_words(bytes_to_words(program.to_bytes())))

        assert [d.address for d in decoded] == program.addresses()
        for instr, dec in zip(program, decoded):
            assert (dec.opcode, dec.operand_a, dec.operand_b) == (
                instr.opcode,
                instr.operand_a,
                instr.operand_b,
            )
            assert list(dec.trailing) == instr.words()[1:]
