"""
Tests for the document model: margins, option layering, tables and
document traversal.
"""

import pytest

from pdf_creator.components import (
    CellStyle,
    Document,
    ImageNode,
    ImageRef,
    Margin,
    NodeStyle,
    PageMargins,
    PageNumberOptions,
    Table,
    TableCell,
    TableNode,
    TableOptions,
    TextNode,
    TextOptions,
)
from pdf_creator.document_options import DocumentOptions
from pdf_creator.exceptions import ConfigurationError


class TestMargin:
    def test_scalar(self):
        margin = Margin.parse(8)
        assert margin == Margin(8, 8, 8, 8, uniform=True)

    def test_four_sides(self):
        margin = Margin.parse([1, 2, 3, 4])
        assert (margin.left, margin.top, margin.right, margin.bottom) == (1, 2, 3, 4)
        assert not margin.uniform

    @pytest.mark.parametrize("value", [[1, 2, 3], [1, 2, 3, 4, 5], "10", {"top": 1}, [1, "a", 3, 4], True])
    def test_invalid_shapes(self, value):
        with pytest.raises(ConfigurationError):
            Margin.parse(value)

    def test_none(self):
        assert Margin.parse(None) is None


class TestOptions:
    def test_text_options_layering(self):
        base = TextOptions(width=100, height=20, align="center", ellipsis=True)
        own = TextOptions(align="right", line_gap=2)

        merged = own.merged_over(base)

        assert merged == TextOptions(width=100, height=20, align="right", ellipsis=True, line_gap=2)

    def test_without_box(self):
        options = TextOptions(width=10, height=20, align="left").without_box()
        assert (options.width, options.height, options.align) == (None, None, "left")

    def test_invalid_alignment(self):
        with pytest.raises(ConfigurationError):
            TextOptions(align="middle")

    def test_cell_style_defaults(self):
        style = CellStyle(fill_color="#ddd").resolved()

        assert style.fill_color == "#ddd"
        assert style.justify == "center"
        assert style.line_width == 0.5
        assert style.fill_opacity == 0.0
        assert style.cell_margin == 5.0

    def test_invalid_cell_style(self):
        with pytest.raises(ConfigurationError):
            CellStyle(justify="middle")

    def test_invalid_font_type(self):
        with pytest.raises(ConfigurationError):
            NodeStyle(font_type="heavy")

    def test_invalid_overflow_policy(self):
        with pytest.raises(ConfigurationError):
            TableOptions(overflow="shrink")

    def test_invalid_page_number_location(self):
        with pytest.raises(ConfigurationError):
            PageNumberOptions(location="middle")


class TestTable:
    def test_scalars_become_text_cells(self):
        table = Table(widths=[50, "*"], body=[["a", 3]])

        cells = table.body[0]
        assert all(isinstance(cell, TableCell) for cell in cells)
        assert [cell.content.text for cell in cells] == ["a", "3"]

    def test_invalid_width_entry(self):
        with pytest.raises(ConfigurationError):
            Table(widths=[50, "auto"])

    def test_invalid_cell_value(self):
        with pytest.raises(ConfigurationError):
            Table(widths=[50], body=[[None]])

    def test_row_groups_order(self):
        table = Table(widths=[50], header=[["h"]], body=[["b"]], footer=[["f"]])
        assert [group for group, _ in table.row_groups()] == ["header", "body", "footer"]


class TestDocument:
    def test_iter_image_refs_includes_table_cells(self):
        top = ImageRef(url="https://img.example.com/a.png")
        in_header = ImageRef(url="https://img.example.com/b.png")
        in_footer = ImageRef(url="https://img.example.com/c.png")
        table = Table(
            widths=[50],
            header=[[TableCell(content=ImageNode(image=in_header))]],
            footer=[[TableCell(content=ImageNode(image=in_footer))]],
        )
        document = Document(content=[ImageNode(image=top), TextNode(text="x"), TableNode(table=table)])

        assert list(document.iter_image_refs()) == [top, in_header, in_footer]


class TestDocumentOptions:
    def test_defaults(self):
        options = DocumentOptions()
        assert options.page_size == pytest.approx((612, 792))
        assert options.page_margins.top == 72

    def test_landscape(self):
        width, height = DocumentOptions(size="A4", layout="landscape").page_size
        assert width > height

    def test_custom_size(self):
        assert DocumentOptions(size=[300, 200]).page_size == (300.0, 200.0)

    def test_margin_wins_over_margins(self):
        options = DocumentOptions(margin=10, margins=PageMargins(top=50))
        assert options.page_margins == PageMargins.uniform(10)

    def test_unknown_size(self):
        with pytest.raises(ConfigurationError):
            DocumentOptions(size="B99")
