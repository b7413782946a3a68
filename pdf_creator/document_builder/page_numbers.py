"""Page Numbering

Stamps a page label ("n" or "n<separator>total") on every buffered page once
all content has been laid out.
"""
from typing import Optional

from ..components import PageNumberOptions, TextNode, TextOptions
from ..config import PAGE_NUMBER_WIDTH
from ..document_options import DocumentOptions
from ..logger import get_logger

logger = get_logger(__name__)


def page_label(number: int, total: int, options: PageNumberOptions) -> str:
    """
    Label for a page.

    Examples:
        >>> page_label(2, 3, PageNumberOptions())
        '2'
        >>> page_label(2, 3, PageNumberOptions(type="seperator", separator="/"))
        '2/3'
    """
    if options.type == "seperator":
        return f"{number}{options.separator}{total}"
    return f"{number}"


class PageNumberRenderer:
    """Places page labels through a ComponentRenderer."""

    def __init__(self, renderer, document_options: Optional[DocumentOptions] = None):
        self.renderer = renderer
        self.surface = renderer.surface
        self.document_options = document_options or self.surface.options

    def render(self, options: Optional[PageNumberOptions]) -> int:
        """
        Stamp every buffered page.

        Returns:
            Number of pages stamped (0 when page numbers are not configured)
        """
        if options is None:
            return 0

        page_range = self.surface.buffered_page_range()
        end = page_range.start + page_range.count
        for index in range(page_range.start, end):
            self.surface.switch_to_page(index)
            self.render_page(index + 1, end, options)

        logger.debug(f"Stamped page numbers on {page_range.count} page(s)")
        return page_range.count

    def render_page(self, number: int, total: int, options: PageNumberOptions) -> TextNode:
        label = page_label(number, total, options)
        label_width = options.options.width if options.options.width is not None else PAGE_NUMBER_WIDTH
        text_options = options.options.merged_over(TextOptions(width=label_width))

        self.renderer.apply_style(options.style)
        text_height = self.surface.measure_text_height(label, label_width, text_options.line_gap)
        # Fixed box: labels sit in the page margins and never flow
        text_options = text_options.merged_over(TextOptions(height=text_height))

        if options.location == "top":
            y = self._margin("top") - text_height
        else:
            y = self.surface.page_height - self._margin("bottom") - text_height

        if options.align == "center":
            x = self.surface.page_width / 2 - label_width / 2
        elif options.align == "left":
            x = self._margin("left")
        else:
            x = self.surface.page_width - self._margin("right") - label_width
            text_options = TextOptions(align="right").merged_over(text_options)

        node = TextNode(x=x, y=y, text=label, style=options.style, options=text_options)
        self.renderer.render(node)
        return node

    def _margin(self, side: str) -> float:
        if self.document_options.margin is not None:
            return self.document_options.margin
        if self.document_options.margins is not None:
            return getattr(self.document_options.margins, side)
        return 0.0
