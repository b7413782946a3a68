"""Content Renderer Module

Handles rendering of content nodes (text, lists, images, tables) onto the
drawing surface.
"""
from dataclasses import replace
from typing import Dict, Optional

from ..components import (
    ContentNode,
    ImageNode,
    ImageProperties,
    ListNode,
    NodeStyle,
    TableNode,
    TextNode,
)
from ..config import DEFAULT_FONT_SIZE, DEFAULT_TEXT_COLOR
from ..exceptions import ConfigurationError, InvalidReference
from ..logger import get_logger
from .cursor import CursorTracker
from .font_manager import FontManager

logger = get_logger(__name__)


class ComponentRenderer:
    """Renders content nodes at the cursor (or at their explicit position)."""

    def __init__(
        self,
        surface,
        tracker: Optional[CursorTracker] = None,
        font_manager: Optional[FontManager] = None,
        images: Optional[Dict[str, ImageProperties]] = None,
        default_font_size: float = DEFAULT_FONT_SIZE
    ):
        """
        Initialize content renderer.

        Args:
            surface: Drawing surface to paint on
            tracker: Cursor tracker bound to the same surface
            font_manager: Font registry used to map font variants to fonts
            images: Resolved image cache (url -> ImageProperties), used when a
                    reference carries no injected properties
            default_font_size: Font size for nodes without an explicit one
        """
        self.surface = surface
        self.tracker = tracker or CursorTracker(surface)
        self.font_manager = font_manager or surface.font_manager
        self.images = images if images is not None else {}
        self.default_font_size = default_font_size
        self._table_engine = None

    @property
    def table_engine(self):
        if self._table_engine is None:
            from .table_layout import TableLayoutEngine
            self._table_engine = TableLayoutEngine(self)
        return self._table_engine

    def render(self, node: ContentNode):
        """Dispatch a node to the renderer for its kind."""
        handler = {
            TextNode.kind: self.render_text,
            ListNode.kind: self.render_list,
            ImageNode.kind: self.render_image,
            TableNode.kind: self.render_table,
        }.get(node.kind)

        if handler is None:
            raise ConfigurationError(f"Unknown content node kind: {node.kind!r}")
        return handler(node)

    def apply_style(self, style: Optional[NodeStyle]) -> None:
        """Set text color, font size and font variant on the surface."""
        style = style or NodeStyle()
        self.surface.set_fill_color(style.text_color or DEFAULT_TEXT_COLOR)
        self.surface.set_font_size(style.font_size or self.default_font_size)
        self.surface.set_font(self.font_manager.get_font_name(style.font_type))

    def render_text(self, node: TextNode) -> float:
        self.apply_style(node.style)
        cursor = self.tracker.get_cursor(node.x, node.y)
        return self.surface.paint_text(cursor.x, cursor.y, node.text, self._box_options(node))

    def render_list(self, node: ListNode) -> float:
        self.apply_style(node.style)
        cursor = self.tracker.get_cursor(node.x, node.y)
        return self.surface.paint_list(cursor.x, cursor.y, node.items, self._box_options(node))

    def render_image(self, node: ImageNode):
        """
        Paint a resolved image.

        Without an explicit width or height the image spans the usable width
        to the right of the cursor.

        Raises:
            InvalidReference: If the image was never resolved
        """
        self.apply_style(node.style)
        ref = node.image
        if ref is None:
            raise ConfigurationError("image node has no image reference")

        properties = ref.properties or self.images.get(ref.url)
        if properties is None:
            raise InvalidReference(ref.url, "image was not resolved before rendering")

        cursor = self.tracker.get_cursor(node.x, node.y)
        width, height = node.width, node.height
        if width is None and height is None:
            width = self.usable_width(cursor.x)

        return self.surface.paint_image(cursor.x, cursor.y, properties.path, width, height, ref.options)

    def render_table(self, node: TableNode):
        if node.table is None:
            raise ConfigurationError("table node has no table")
        return self.table_engine.render(node)

    def usable_width(self, x: float) -> float:
        margins = self.surface.margins
        return self.surface.page_width - margins.left - margins.right - (x - margins.left)

    def _box_options(self, node):
        # Node width/height act as the text box when options leave them unset
        options = node.options
        if options.width is None and node.width is not None:
            options = replace(options, width=node.width)
        if options.height is None and node.height is not None:
            options = replace(options, height=node.height)
        return options
