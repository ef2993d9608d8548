"""Tests for the structured-markup (.L5X) reader."""

import pytest

from conftest import fixture_bytes, markup_doc
from l5ingest.errors import MalformedInput
from l5ingest.model import FileFormat
from l5ingest.reader import MarkupTree, read_markup, read_structure


# ---------------------------------------------------------------------------
# Tree shape
# ---------------------------------------------------------------------------

class TestTreeShape:
    def test_root_and_controller(self):
        tree = read_markup(fixture_bytes("two_programs.L5X"))
        assert isinstance(tree, MarkupTree)
        assert tree.format == FileFormat.MARKUP
        assert tree.root.keyword == "RSLogix5000Content"
        controller = tree.root.child("Controller")
        assert controller is not None
        assert controller.name == "LineCtrl"

    def test_attributes_keep_document_order(self):
        tree = read_markup(markup_doc('<Tags><Tag Name="A" DataType="BOOL" Radix="Decimal"/></Tags>'))
        tag = tree.root.child("Controller").grandchildren("Tags", "Tag")[0]
        assert list(tag.attributes) == ["Name", "DataType", "Radix"]
        assert tag.attr("datatype") == "BOOL"

    def test_children_in_order(self):
        tree = read_markup(markup_doc("""
            <Tags>
            <Tag Name="First" DataType="BOOL"/>
            <Tag Name="Second" DataType="BOOL"/>
            <Tag Name="Third" DataType="BOOL"/>
            </Tags>
        """))
        tags = tree.root.child("Controller").grandchildren("Tags", "Tag")
        assert [t.name for t in tags] == ["First", "Second", "Third"]

    def test_source_lines_recorded(self):
        tree = read_markup(fixture_bytes("two_programs.L5X"))
        assert tree.root.line == 2
        assert tree.root.child("Controller").line == 3

    def test_walk_visits_every_block(self):
        tree = read_markup(fixture_bytes("two_programs.L5X"))
        rungs = [b for b in tree.root.walk() if b.keyword == "Rung"]
        # Two per program plus two inside the instruction
        assert len(rungs) == 6

    def test_dispatch_by_format(self):
        tree = read_structure(fixture_bytes("two_programs.L5X"), FileFormat.MARKUP)
        assert isinstance(tree, MarkupTree)


# ---------------------------------------------------------------------------
# Leaf text
# ---------------------------------------------------------------------------

class TestLeafText:
    def test_cdata_kept_verbatim(self):
        """Markup-looking characters inside CDATA survive untouched."""
        tree = read_markup(markup_doc("""
            <Tags>
            <Tag Name="Level" DataType="REAL">
            <Description><![CDATA[Level < 10 & rising]]></Description>
            </Tag>
            </Tags>
        """))
        tag = tree.root.child("Controller").grandchildren("Tags", "Tag")[0]
        assert tag.child_text("Description") == "Level < 10 & rising"

    def test_localized_description(self):
        tree = read_markup(markup_doc("""
            <Tags>
            <Tag Name="Level" DataType="REAL">
            <Description>
            <LocalizedDescription Lang="en-US"><![CDATA[Tank level]]></LocalizedDescription>
            <LocalizedDescription Lang="de-DE"><![CDATA[Tankfüllstand]]></LocalizedDescription>
            </Description>
            </Tag>
            </Tags>
        """))
        tag = tree.root.child("Controller").grandchildren("Tags", "Tag")[0]
        assert tag.child_text("Description") == "Tank level"
        assert tag.child_text("Comment") is None

    def test_comments_are_dropped(self):
        tree = read_markup(markup_doc("""
            <Tags>
            <!-- operator inputs -->
            <Tag Name="A" DataType="BOOL"/>
            </Tags>
        """))
        tags = tree.root.child("Controller").child("Tags")
        assert [c.keyword for c in tags.children] == ["Tag"]

    def test_container_has_no_text(self):
        tree = read_markup(fixture_bytes("two_programs.L5X"))
        assert tree.root.child("Controller").text is None


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestMalformed:
    def test_truncated_document(self):
        data = fixture_bytes("two_programs.L5X")
        with pytest.raises(MalformedInput) as exc_info:
            read_markup(data[: len(data) // 2])
        assert exc_info.value.line is not None

    def test_mismatched_tags(self):
        with pytest.raises(MalformedInput, match=r"invalid markup"):
            read_markup(b"<RSLogix5000Content><Controller></Tags></RSLogix5000Content>")

    def test_empty_document(self):
        with pytest.raises(MalformedInput, match=r"empty"):
            read_markup(b"   \n")

    def test_error_message_carries_location(self):
        with pytest.raises(MalformedInput, match=r"line \d+"):
            read_markup(b"<?xml version=\"1.0\"?>\n<RSLogix5000Content>\n<Controller>\n")
