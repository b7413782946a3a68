"""Table Layout Engine

Lays out a table node on the drawing surface:

1. Resolve column widths, spreading the free width over "*" columns
2. Measure every cell at its inner width to find each row's height
3. Move a row to a new page when it does not fit on the current one
4. Draw each cell: border/fill rectangle, then content justified and aligned
   inside the cell padding

Row groups are drawn in order (header, body, footer) with a gap of one cell
margin after each group. A table-local cursor is threaded through the row
loop and written back to the surface when the table is done.
"""
import math
from dataclasses import replace
from typing import List, Sequence, Union

from ..components import (
    CellStyle,
    ImageNode,
    ImageProperties,
    ListNode,
    Row,
    Table,
    TableCell,
    TableNode,
    TableOptions,
    TextNode,
    TextOptions,
)
from ..config import DEFAULT_CELL_MARGIN, DEFAULT_ROW_HEIGHT, DEFAULT_WILDCARD_WIDTH, WILDCARD
from ..exceptions import ConfigurationError, InvalidReference
from ..logger import get_logger
from . import coordinate_utils
from .cursor import Cursor

logger = get_logger(__name__)


def resolve_column_widths(
    widths: Sequence[Union[float, str]],
    usable_width: float,
    overflow: str = "fallback"
) -> List[float]:
    """
    Replace "*" entries with concrete widths.

    The width left after the fixed columns is split equally between the "*"
    columns. When nothing is left, ``overflow`` decides: "fallback" gives each
    "*" column DEFAULT_WILDCARD_WIDTH, "error" raises.

    Args:
        widths: Column widths, numbers or "*"
        usable_width: Width available to the table
        overflow: "fallback" or "error"

    Returns:
        Column widths in points, in column order

    Raises:
        ConfigurationError: If no fixed width is given, or the fixed widths
            leave no room and overflow is "error"

    Examples:
        >>> resolve_column_widths([100, "*", 100], 400)
        [100.0, 200.0, 100.0]
        >>> resolve_column_widths([50], 400)
        [50.0]
    """
    total_fixed = sum(width for width in widths if width != WILDCARD)
    wildcard_count = sum(1 for width in widths if width == WILDCARD)

    if total_fixed == 0:
        raise ConfigurationError("Table widths required: at least one column needs a fixed width")

    wildcard_width = 0.0
    if usable_width > total_fixed:
        if wildcard_count:
            wildcard_width = (usable_width - total_fixed) / wildcard_count
    elif wildcard_count or total_fixed > usable_width:
        if overflow == "error":
            raise ConfigurationError(
                f"Fixed table widths ({total_fixed:g}pt) leave no room in {usable_width:g}pt"
            )
        logger.warning(
            f"Fixed table widths ({total_fixed:g}pt) exceed usable width ({usable_width:g}pt); "
            f"using {DEFAULT_WILDCARD_WIDTH:g}pt for {wildcard_count} '*' column(s)"
        )
        wildcard_width = DEFAULT_WILDCARD_WIDTH

    return [wildcard_width if width == WILDCARD else float(width) for width in widths]


class TableLayoutEngine:
    """Draws table nodes through a ComponentRenderer."""

    def __init__(self, renderer):
        self.renderer = renderer
        self.surface = renderer.surface

    def render(self, node: TableNode) -> Cursor:
        """
        Draw a table at the cursor (or at the node's explicit position).

        Returns:
            Cursor at the end of the table (also written to the surface)
        """
        table = node.table
        options = table.options

        self.renderer.apply_style(node.style)
        start = self.renderer.tracker.get_cursor(node.x, node.y)

        widths = resolve_column_widths(table.widths, self.usable_width(table, start.x), options.overflow)
        logger.debug(f"Resolved table widths: {widths}")

        cell_margin = options.cell_margin if options.cell_margin is not None else DEFAULT_CELL_MARGIN
        row_height = table.height or DEFAULT_ROW_HEIGHT

        cursor = Cursor(start.x, start.y)
        for _, rows in table.row_groups():
            for row in rows:
                cursor = self.draw_row(cursor, row, widths, row_height, cell_margin, options)
            cursor.y += cell_margin

        self.surface.x = start.x
        self.surface.y = cursor.y
        return cursor

    def usable_width(self, table: Table, x: float) -> float:
        page_width = table.options.max_width or self.surface.page_width
        margins = table.options.margins or self.surface.margins
        return page_width - margins.left - margins.right - (x - margins.left)

    # Measurement

    def measure_cell(self, cell: TableCell, inner_width: float) -> float:
        """Content height of a cell laid out at ``inner_width``."""
        content = cell.content
        self.renderer.apply_style(content.style)

        if isinstance(content, TextNode):
            return self.surface.measure_text_height(content.text, inner_width, content.options.line_gap)
        if isinstance(content, ListNode):
            if not content.items:
                return 0.0
            first = self.surface.measure_text_height(content.items[0], inner_width, content.options.line_gap)
            return first * len(content.items)
        if isinstance(content, ImageNode):
            properties = self._image_properties(content)
            return coordinate_utils.height_for_width(properties.width, properties.height, inner_width)
        return 0.0

    def row_height(self, row: Row, widths: List[float], base_height: float, cell_margin: float, is_ellipsis: bool) -> float:
        """
        Height of a row: the configured height, grown to fit the tallest cell
        plus padding unless the table clips content (ellipsis mode).
        """
        if is_ellipsis:
            return base_height
        tallest = max(
            (self.measure_cell(cell, width - cell_margin * 2) for cell, width in zip(row, widths)),
            default=0.0,
        )
        return max(base_height, tallest + cell_margin * 2)

    # Drawing

    def draw_row(
        self,
        cursor: Cursor,
        row: Row,
        widths: List[float],
        base_height: float,
        cell_margin: float,
        options: TableOptions
    ) -> Cursor:
        """Draw one row at ``cursor`` and return the cursor below it."""
        if len(row) > len(widths):
            raise ConfigurationError(f"Table row has {len(row)} cells but only {len(widths)} widths")

        height = self.row_height(row, widths, base_height, cell_margin, options.is_ellipsis)

        if not self._fits(cursor.y, height):
            self.surface.add_page()
            logger.debug(f"Table row moved to page {len(self.surface.pages)}")
            cursor = Cursor(cursor.x, self.surface.y)

        x = cursor.x
        for cell, width in zip(row, widths):
            self.draw_cell(Cursor(x, cursor.y), width, height, cell, options, cell_margin)
            x += width

        return Cursor(cursor.x, cursor.y + height)

    def draw_cell(
        self,
        origin: Cursor,
        width: float,
        height: float,
        cell: TableCell,
        options: TableOptions,
        cell_margin: float
    ) -> None:
        style = (
            cell.style
            .merged_over(options.cell_style)
            .merged_over(CellStyle(cell_margin=cell_margin))
            .resolved()
        )
        margin = style.cell_margin
        inner_width = width - margin * 2
        inner_height = height - margin * 2

        self._paint_border(origin, width, height, style)

        content = cell.content
        if isinstance(content, ImageNode):
            image_size = self.image_size(content, inner_width, inner_height, options.is_ellipsis)
            content_height = image_size[1]
        else:
            content_height = self.measure_cell(cell, inner_width)
        line_height = self.surface.line_height(getattr(content, "options", TextOptions()).line_gap)
        whole_lines_height = math.floor(inner_height / line_height) * line_height if line_height else 0.0

        left = origin.x + margin
        top = origin.y + margin

        if style.justify == "bottom":
            if options.is_ellipsis:
                top += inner_height - whole_lines_height
            elif inner_height > content_height:
                top += inner_height - content_height
        elif style.justify == "center":
            down = inner_height / 2
            up = whole_lines_height / 2 if options.is_ellipsis else content_height / 2
            top += down - min(up, down)

        if isinstance(content, ImageNode):
            self._draw_image(content, left, top, inner_width, image_size, style.align)
            return

        base = TextOptions(width=inner_width, height=inner_height, align=style.align, ellipsis=True)
        cell_options = content.options.without_box().merged_over(base)
        self.renderer.render(replace(content, x=left, y=top, width=None, height=None, options=cell_options))

    def image_size(self, content: ImageNode, inner_width: float, inner_height: float, is_ellipsis: bool):
        """
        Drawn (width, height) of an image cell, capped at the inner box.

        Ellipsis mode fixes the image height, otherwise its width.
        """
        properties = self._image_properties(content)
        if is_ellipsis:
            height = min(properties.height, inner_height)
            return coordinate_utils.width_for_height(properties.width, properties.height, height), height
        width = min(properties.width, inner_width)
        return width, coordinate_utils.height_for_width(properties.width, properties.height, width)

    def _draw_image(self, content: ImageNode, left: float, top: float, inner_width: float, size, align: str) -> None:
        width, height = size
        if align == "center":
            left += (inner_width - width) / 2
        elif align == "right":
            left += inner_width - width

        self.renderer.render(replace(content, x=left, y=top, width=width, height=height))

    def _paint_border(self, origin: Cursor, width: float, height: float, style: CellStyle) -> None:
        surface = self.surface
        surface.set_line_join(style.line_join)
        surface.set_line_cap(style.line_cap)
        if style.dash:
            surface.dash(style.dash.length, style.dash.space)
        else:
            surface.undash()
        surface.set_line_width(style.line_width)
        surface.set_stroke_opacity(style.stroke_opacity)
        surface.set_fill_opacity(style.fill_opacity)
        surface.paint_rect(origin.x, origin.y, width, height, style.fill_color, style.stroke_color)
        surface.set_stroke_opacity(1.0)
        surface.set_fill_opacity(1.0)

    def _fits(self, y: float, height: float) -> bool:
        margins = self.surface.margins
        if y <= margins.top:
            # Nothing drawn above on this page: a taller row cannot fit anywhere else
            return True
        return y + height <= self.surface.page_height - (margins.top + margins.bottom)

    def _image_properties(self, content: ImageNode) -> ImageProperties:
        ref = content.image
        properties = ref.properties or self.renderer.images.get(ref.url)
        if properties is None:
            raise InvalidReference(ref.url, "image was not resolved before rendering")
        return properties
