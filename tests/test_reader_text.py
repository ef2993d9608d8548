"""Tests for the plain-text (.L5K) reader and its string helpers."""

import pytest

from conftest import fixture_bytes, text_doc
from l5ingest.errors import MalformedInput
from l5ingest.model import FileFormat
from l5ingest.reader import (
    STATEMENT,
    TextTree,
    decode_text,
    find_closing,
    find_top_level,
    read_structure,
    read_text,
    split_attributes,
    unescape,
)


def _controller(body: str):
    return read_text(text_doc(body)).root.child("CONTROLLER")


# ===========================================================================
# String helpers
# ===========================================================================

class TestUnescape:
    def test_dollar_escapes(self):
        assert unescape("Line$Nnext") == "Line\nnext"
        assert unescape("Tab$there") == "Tab\there"
        assert unescape("cost $$5") == "cost $5"
        assert unescape("say $'hi$'") == "say 'hi'"

    def test_hex_escape(self):
        assert unescape("$41BC") == "ABC"

    def test_doubled_quote(self):
        assert unescape('a ""quoted"" word') == 'a "quoted" word'

    def test_trailing_dollar_kept(self):
        assert unescape("price$") == "price$"


class TestBrackets:
    def test_find_closing_nested(self):
        text = "XIC(A[1,(2)])OTE(B)"
        assert find_closing(text, 3) == 12

    def test_find_closing_skips_strings(self):
        text = '(Description := "a ) b")'
        assert find_closing(text, 0) == len(text) - 1

    def test_find_closing_unbalanced(self):
        assert find_closing("(a, b", 0) == -1

    def test_find_top_level(self):
        text = 'Name : DINT (Description := "x := y") := 5'
        assert find_top_level(text, ":=") == text.rindex(":=")

    def test_find_closing_skips_single_quoted(self):
        text = "[7,'a ] ( b']"
        assert find_closing(text, 0) == len(text) - 1

    def test_find_top_level_skips_single_quoted(self):
        assert find_top_level("'a ; b' ; c", ";") == 8

    def test_find_top_level_missing(self):
        assert find_top_level("(a := b)", ":=") == -1


class TestSplitAttributes:
    def test_quoted_and_bare(self):
        attrs = split_attributes('(Description := "Start PB", RADIX := Decimal)')
        assert attrs == {"Description": "Start PB", "RADIX": "Decimal"}

    def test_bare_values_with_spaces_and_slashes(self):
        attrs = split_attributes("ExternalAccess := Read Only, Usage := Input")
        assert attrs == {"ExternalAccess": "Read Only", "Usage": "Input"}
        assert split_attributes("(ExternalAccess := Read/Write)") == {"ExternalAccess": "Read/Write"}

    def test_bracketed_list_value(self):
        attrs = split_attributes("(ConfigData := [20,1,0], Slot := 3)")
        assert attrs == {"ConfigData": "[20,1,0]", "Slot": "3"}

    def test_escaped_quote_in_value(self):
        attrs = split_attributes('(Description := "6$" pipe", Radix := Float)')
        assert attrs["Description"] == '6" pipe'
        assert attrs["Radix"] == "Float"

    def test_multiline(self):
        attrs = split_attributes('(MAIN := "MainRoutine",\n     MODE := 0)')
        assert attrs == {"MAIN": "MainRoutine", "MODE": "0"}

    def test_single_quoted_value(self):
        attrs = split_attributes("(Value := 'it$'s (x)', Radix := ASCII)")
        assert attrs == {"Value": "it's (x)", "Radix": "ASCII"}

    def test_empty(self):
        assert split_attributes("()") == {}


class TestDecode:
    def test_utf8_with_bom(self):
        assert decode_text(b"\xef\xbb\xbfIE_VER := 2.25;") == "IE_VER := 2.25;"

    def test_cp1252_fallback(self):
        assert decode_text(b'RC: "Caf\xe9";') == 'RC: "Café";'


# ===========================================================================
# Reader
# ===========================================================================

class TestBlocks:
    def test_fixture_top_level(self):
        tree = read_text(fixture_bytes("two_programs.L5K"))
        assert isinstance(tree, TextTree)
        assert tree.format == FileFormat.TEXT
        assert tree.root.keyword == "FILE"
        assert [c.keyword for c in tree.root.children] == [STATEMENT, "CONTROLLER"]
        assert tree.root.children[0].text == "IE_VER := 2.25"

    def test_multiline_header_attributes(self):
        tree = read_text(fixture_bytes("two_programs.L5K"))
        controller = tree.root.child("CONTROLLER")
        assert controller.name == "LineCtrl"
        assert controller.attr("ProcessorType") == "1756-L83E"
        assert controller.attr("Major") == "32"
        assert controller.attr("ShareUnusedTimeSlice") == "1"

    def test_controller_children(self):
        controller = read_text(fixture_bytes("two_programs.L5K")).root.child("CONTROLLER")
        assert [c.keyword for c in controller.children] == [
            "DATATYPE",
            "MODULE",
            "MODULE",
            "ADD_ON_INSTRUCTION_DEFINITION",
            "TAG",
            "PROGRAM",
            "PROGRAM",
            "TASK",
            "TASK",
        ]

    def test_nested_blocks(self):
        controller = _controller("""
            PROGRAM Main (MAIN := "R1")
                ROUTINE R1
                    N: NOP();
                END_ROUTINE
            END_PROGRAM
        """)
        program = controller.child("PROGRAM")
        routine = program.child("ROUTINE")
        assert routine.name == "R1"
        assert routine.children[0].keyword == STATEMENT
        assert routine.children[0].text == "N: NOP()"

    def test_header_without_name(self):
        controller = _controller("""
            TAG
                Run : BOOL;
            END_TAG
        """)
        tag_block = controller.child("TAG")
        assert tag_block.name is None
        assert tag_block.attributes == {}

    def test_block_lines(self):
        tree = read_text(text_doc("TAG\n    Run : BOOL;\nEND_TAG"))
        controller = tree.root.child("CONTROLLER")
        assert controller.line == 3
        assert controller.child("TAG").line == 4
        assert controller.child("TAG").children[0].line == 5


class TestStatements:
    def test_multiline_statement_joined(self):
        controller = _controller("""
            TAG
                Speed : DINT (Description := "Line speed",
                              RADIX := Decimal) := 0;
            END_TAG
        """)
        stmt = controller.child("TAG").children[0]
        assert stmt.text.startswith("Speed : DINT (Description")
        assert "RADIX := Decimal) := 0" in stmt.text

    def test_semicolon_inside_string(self):
        controller = _controller("""
            ROUTINE R1
                RC: "Stop; then start";
                N: NOP();
            END_ROUTINE
        """)
        texts = [c.text for c in controller.child("ROUTINE").children]
        assert texts == ['RC: "Stop; then start"', "N: NOP()"]

    def test_single_quoted_string_data(self):
        controller = _controller("""
            TAG
                Msg : STRING (RADIX := ASCII) := [7,'Jam (A$00'];
                Note : STRING := [8,'a;b (* c'];
                Speed : DINT := 0;
            END_TAG
        """)
        assert [c.text for c in controller.child("TAG").children] == [
            "Msg : STRING (RADIX := ASCII) := [7,'Jam (A$00']",
            "Note : STRING := [8,'a;b (* c']",
            "Speed : DINT := 0",
        ]

    def test_comments_removed(self):
        controller = _controller("""
            TAG
                (* interlocks *)
                Run : BOOL (* held on *) ;
            END_TAG
        """)
        tag_block = controller.child("TAG")
        assert len(tag_block.children) == 1
        assert "(*" not in tag_block.children[0].text

    def test_several_statements_on_one_line(self):
        controller = _controller("""
            TASK T1 (Type := CONTINUOUS)
                P1; P2;
            END_TASK
        """)
        assert [c.text for c in controller.child("TASK").children] == ["P1", "P2"]


class TestOpaqueBodies:
    def test_structured_text_body_kept_verbatim(self):
        controller = _controller("""
            PROGRAM Main (MAIN := "Calc")
                ST_ROUTINE Calc
                    IF Run THEN
                        Count := Count + 1; (* not parsed *)
                    END_IF;
                END_ST_ROUTINE
            END_PROGRAM
        """)
        routine = controller.child("PROGRAM").child("ST_ROUTINE")
        assert routine.children == []
        assert "IF Run THEN" in routine.text
        assert "(* not parsed *)" in routine.text
        assert "END_IF;" in routine.text


class TestMalformed:
    def test_mismatched_end(self):
        with pytest.raises(MalformedInput, match=r"END_PROGRAM found while ROUTINE") as exc_info:
            read_text(text_doc("""
                PROGRAM Main
                    ROUTINE R1
                        N: NOP();
                END_PROGRAM
            """))
        assert exc_info.value.line is not None

    def test_unclosed_block(self):
        data = b'IE_VER := 2.25;\nCONTROLLER Ctl (Major := 33)\nTAG\n    Run : BOOL;\n'
        with pytest.raises(MalformedInput, match=r"never closed"):
            read_text(data)

    def test_truncated_statement(self):
        data = b'IE_VER := 2.25;\nCONTROLLER Ctl (Major := 33)\nTAG\n    Run : BOOL (RADIX := Decimal'
        with pytest.raises(MalformedInput):
            read_text(data)

    def test_unterminated_string(self):
        data = b'IE_VER := 2.25;\nCONTROLLER Ctl\nRC: "never closed;\n'
        with pytest.raises(MalformedInput, match=r"unterminated string"):
            read_text(data)

    def test_unterminated_comment(self):
        with pytest.raises(MalformedInput, match=r"unterminated \(\* comment"):
            read_text(b"(* header\nIE_VER := 2.25;\n")

    def test_end_without_block(self):
        with pytest.raises(MalformedInput, match=r"no matching TAG"):
            read_text(b"IE_VER := 2.25;\nEND_TAG\n")

    def test_empty(self):
        with pytest.raises(MalformedInput, match=r"empty"):
            read_text(b"")

    def test_truncated_fixture_mid_block(self):
        data = fixture_bytes("two_programs.L5K")
        cut = data.index(b"END_PROGRAM")
        with pytest.raises(MalformedInput):
            read_structure(data[:cut], FileFormat.TEXT)
