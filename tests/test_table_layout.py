"""
Tests for the table layout engine: column widths, row heights, pagination
and row-group order.
"""

import logging

import pytest

from pdf_creator.components import (
    CellStyle,
    ImageNode,
    ImageProperties,
    ImageRef,
    ListNode,
    Table,
    TableCell,
    TableNode,
    TableOptions,
    TextNode,
)
from pdf_creator.document_builder import ComponentRenderer, TableLayoutEngine, resolve_column_widths
from pdf_creator.document_builder.cursor import Cursor
from pdf_creator.exceptions import ConfigurationError

LONG_TEXT = " ".join(["layout"] * 40)


def text_cell(text, **style):
    return TableCell(content=TextNode(text=text), style=CellStyle(**style))


class TestResolveColumnWidths:
    """Wildcard width distribution."""

    def test_wildcard_takes_remaining_width(self):
        assert resolve_column_widths([100, "*", 100], 400) == [100.0, 200.0, 100.0]

    def test_fixed_only(self):
        assert resolve_column_widths([50], 400) == [50.0]

    def test_wildcards_share_remaining_width_equally(self):
        widths = resolve_column_widths(["*", 100, "*"], 400)
        assert widths == [150.0, 100.0, 150.0]
        assert sum(widths) == pytest.approx(400)

    def test_zero_fixed_width_fails(self):
        with pytest.raises(ConfigurationError, match="widths required"):
            resolve_column_widths(["*", "*"], 400)

        with pytest.raises(ConfigurationError):
            resolve_column_widths([0, "*"], 400)

    def test_overflow_fallback_uses_default_width(self, caplog):
        with caplog.at_level(logging.WARNING):
            widths = resolve_column_widths([300, "*"], 200)

        assert widths == [300.0, 25.0]
        assert any("exceed usable width" in record.message for record in caplog.records)

    def test_no_remaining_width_uses_fallback(self):
        assert resolve_column_widths([200, "*"], 200) == [200.0, 25.0]

    def test_overflow_error_policy(self):
        with pytest.raises(ConfigurationError):
            resolve_column_widths([300, "*"], 200, overflow="error")


class TestRowHeight:
    """Row heights grow to fit content unless the table clips it."""

    def test_short_content_keeps_configured_height(self, renderer):
        engine = TableLayoutEngine(renderer)
        row = [text_cell("a"), text_cell("b")]

        assert engine.row_height(row, [100.0, 100.0], 25.0, 5.0, is_ellipsis=False) == 25.0

    def test_row_grows_to_tallest_cell(self, renderer):
        engine = TableLayoutEngine(renderer)
        row = [text_cell("short"), text_cell(LONG_TEXT)]

        tallest = engine.measure_cell(row[1], 90.0)
        height = engine.row_height(row, [100.0, 100.0], 25.0, 5.0, is_ellipsis=False)

        assert tallest > 25.0
        assert height == pytest.approx(tallest + 10.0)

    def test_ellipsis_mode_keeps_configured_height(self, renderer):
        engine = TableLayoutEngine(renderer)
        row = [text_cell(LONG_TEXT)]

        assert engine.row_height(row, [100.0], 25.0, 5.0, is_ellipsis=True) == 25.0

    def test_list_height_is_first_item_times_count(self, renderer, surface):
        engine = TableLayoutEngine(renderer)
        cell = TableCell(content=ListNode(items=["one", "two", "three"]))

        assert engine.measure_cell(cell, 90.0) == pytest.approx(surface.line_height() * 3)


class TestTableRendering:
    """End-to-end table drawing on a surface."""

    def test_cursor_returns_to_start_x_and_ends_below_table(self, surface):
        renderer = ComponentRenderer(surface)
        node = TableNode(x=100, y=100, table=Table(widths=[100, "*"], body=[["a", "b"], ["c", "d"]]))

        end = renderer.render(node)

        # header gap + two 25pt rows + body gap + footer gap
        assert end.y == pytest.approx(100 + 5 + 50 + 5 + 5)
        assert surface.x == 100
        assert surface.y == pytest.approx(end.y)

    def test_wildcard_column_fills_usable_width(self, surface):
        renderer = ComponentRenderer(surface)
        node = TableNode(table=Table(widths=[100, "*"], body=[["a", "b"]]))

        renderer.render(node)

        rects = [op for op in surface.page.ops if op.kind == "rect"]
        assert [rect.width for rect in rects] == [100.0, pytest.approx(612 - 144 - 100)]
        assert rects[1].x == pytest.approx(72 + 100)

    def test_overflowing_row_moves_wholly_to_new_page(self, make_surface):
        surface = make_surface(size=[200, 200], margin=10)
        renderer = ComponentRenderer(surface)
        body = [[f"r{i}", f"s{i}"] for i in range(4)]
        node = TableNode(table=Table(widths=[80, 80], height=50, body=body))

        renderer.render(node)

        assert len(surface.pages) == 2
        first_page = [op for op in surface.pages[0].ops if op.kind == "rect"]
        second_page = [op for op in surface.pages[1].ops if op.kind == "rect"]

        assert sorted({op.y for op in first_page}) == [15.0, 65.0, 115.0]
        assert len(second_page) == 2
        assert {op.y for op in second_page} == {10.0}
        assert {op.x for op in second_page} == {10.0, 90.0}

    def test_row_groups_drawn_in_order_body_once(self, surface):
        renderer = ComponentRenderer(surface)
        table = Table(widths=[100], header=[["H"]], body=[["B1"], ["B2"]], footer=[["F"]])

        renderer.render(TableNode(table=table))

        texts = [
            line[2]
            for op in surface.page.ops if op.kind == "text"
            for line in op.data["lines"]
        ]
        assert texts == ["H", "B1", "B2", "F"]

    def test_cell_style_overrides_table_base_style(self, surface):
        renderer = ComponentRenderer(surface)
        options = TableOptions(cell_style=CellStyle(fill_color="#eeeeee", line_width=2))
        table = Table(widths=[100, 100], options=options,
                      body=[[text_cell("a"), text_cell("b", fill_color="#ff0000")]])

        renderer.render(TableNode(table=table))

        rects = [op for op in surface.page.ops if op.kind == "rect"]
        assert [rect.data["fill_color"] for rect in rects] == ["#eeeeee", "#ff0000"]
        assert {rect.state.line_width for rect in rects} == {2}
        # Opacities are reset after every cell border
        assert surface.state.fill_opacity == 1.0
        assert surface.state.stroke_opacity == 1.0

    def test_ellipsis_table_clips_long_text(self, surface):
        renderer = ComponentRenderer(surface)
        table = Table(widths=[100], options=TableOptions(is_ellipsis=True), body=[[LONG_TEXT]])

        renderer.render(TableNode(table=table))

        text_op = next(op for op in surface.page.ops if op.kind == "text")
        lines = [line[2] for line in text_op.data["lines"]]
        assert len(lines) == 1
        assert lines[0].endswith("…")

    def test_bottom_justified_cell(self, surface):
        renderer = ComponentRenderer(surface)
        table = Table(widths=[100], height=60, body=[[text_cell("x", justify="bottom")]])

        renderer.render(TableNode(x=72, y=72, table=table))

        text_op = next(op for op in surface.page.ops if op.kind == "text")
        line_h = surface.line_height()
        # inner box: 50pt high starting 5pt below the row top (row starts after the header gap)
        assert text_op.y == pytest.approx(72 + 5 + 5 + 50 - line_h)

    def test_image_cell_capped_to_inner_width(self, surface, temp_dir, png_bytes):
        path = temp_dir / "wide.png"
        path.write_bytes(png_bytes(400, 100))

        ref = ImageRef(url="https://img.example.com/wide.png",
                       properties=ImageProperties(path=str(path), width=400, height=100))
        table = Table(widths=[110], body=[[TableCell(content=ImageNode(image=ref))]])

        ComponentRenderer(surface).render(TableNode(table=table))

        image_op = next(op for op in surface.page.ops if op.kind == "image")
        assert image_op.width == pytest.approx(100)
        assert image_op.height == pytest.approx(25)

    def test_row_with_too_many_cells_fails(self, surface):
        renderer = ComponentRenderer(surface)
        table = Table(widths=[100], body=[["a", "b"]])

        with pytest.raises(ConfigurationError):
            renderer.render(TableNode(table=table))

    def test_draw_row_returns_cursor_below_row(self, surface):
        engine = TableLayoutEngine(ComponentRenderer(surface))
        options = TableOptions()

        cursor = engine.draw_row(Cursor(72, 100), [text_cell("a")], [100.0], 25.0, 5.0, options)

        assert cursor == Cursor(72, 125)


def resolved_image_cell(path, width, height, **style):
    ref = ImageRef(url="https://img.example.com/cell.png",
                   properties=ImageProperties(path=str(path), width=width, height=height))
    return TableCell(content=ImageNode(image=ref), style=CellStyle(**style))


class TestCellPlacement:
    """Justification and alignment of content inside the cell padding."""

    # Tables below start at (72, 72); the first body row begins after the
    # header gap, so its inner box starts at y = 72 + 5 + 5.
    INNER_TOP = 82

    def test_center_justified_text(self, surface):
        table = Table(widths=[100], height=60, body=[[text_cell("x")]])

        ComponentRenderer(surface).render(TableNode(x=72, y=72, table=table))

        text_op = next(op for op in surface.page.ops if op.kind == "text")
        assert text_op.y == pytest.approx(self.INNER_TOP + 25 - surface.line_height() / 2)

    def test_center_offset_clamped_to_inner_box(self, surface):
        # The cell's own 10pt padding leaves a 5pt inner box, shorter than one line
        table = Table(widths=[100], body=[[text_cell("x", cell_margin=10)]])

        ComponentRenderer(surface).render(TableNode(x=72, y=72, table=table))

        text_op = next(op for op in surface.page.ops if op.kind == "text")
        assert text_op.y == pytest.approx(72 + 5 + 10)

    def test_center_in_ellipsis_mode_uses_whole_lines(self, surface):
        table = Table(widths=[100], height=60, options=TableOptions(is_ellipsis=True), body=[[LONG_TEXT]])

        ComponentRenderer(surface).render(TableNode(x=72, y=72, table=table))

        text_op = next(op for op in surface.page.ops if op.kind == "text")
        line_h = surface.line_height()
        assert len(text_op.data["lines"]) == 3
        assert text_op.y == pytest.approx(self.INNER_TOP + (50 - 3 * line_h) / 2)

    @pytest.mark.parametrize("align,offset", [("left", 0), ("center", 40), ("right", 80)])
    def test_image_alignment_shifts_by_unused_width(self, surface, temp_dir, png_bytes, align, offset):
        path = temp_dir / "small.png"
        path.write_bytes(png_bytes(20, 10))
        table = Table(widths=[110], body=[[resolved_image_cell(path, 20, 10, align=align)]])

        ComponentRenderer(surface).render(TableNode(x=72, y=72, table=table))

        image_op = next(op for op in surface.page.ops if op.kind == "image")
        assert (image_op.width, image_op.height) == (20, 10)
        assert image_op.x == pytest.approx(72 + 5 + offset)

    def test_small_image_centered_on_drawn_height(self, surface, temp_dir, png_bytes):
        path = temp_dir / "small.png"
        path.write_bytes(png_bytes(20, 10))
        table = Table(widths=[110], body=[[resolved_image_cell(path, 20, 10)]])

        ComponentRenderer(surface).render(TableNode(x=72, y=72, table=table))

        # Row grows to 60pt (image scaled to the 100pt inner width), the image is drawn 10pt high
        image_op = next(op for op in surface.page.ops if op.kind == "image")
        assert image_op.y == pytest.approx(self.INNER_TOP + (50 - 10) / 2)
