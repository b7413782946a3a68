"""Document Options Dataclass

Page geometry and metadata options for a rendered document.
"""
from dataclasses import dataclass, field
from typing import List, Optional, Tuple, Union

from reportlab.lib import pagesizes

from .components import PageMargins
from .config import DEFAULT_FONT_SIZE, DEFAULT_PAGE_MARGIN, DEFAULT_PAGE_SIZE
from .exceptions import ConfigurationError


@dataclass
class DocumentInfo:
    """PDF document information dictionary."""

    title: Optional[str] = None
    author: Optional[str] = None
    subject: Optional[str] = None
    keywords: Optional[str] = None
    creator: Optional[str] = None
    producer: Optional[str] = None


@dataclass
class DocumentOptions:
    """Configuration options for a document render.

    Attributes:
        size: Named page size ("A4", "LETTER", ...) or [width, height] in points
        layout: "portrait" or "landscape"
        margin: Single margin for all page sides (takes precedence over margins)
        margins: Per-side page margins
        font_size: Default font size for nodes without an explicit fontSize
        info: Document information (title, author, ...)
        compress: If True, compress page streams
    """

    size: Union[str, List[float], Tuple[float, float]] = DEFAULT_PAGE_SIZE
    layout: str = "portrait"
    margin: Optional[float] = None
    margins: Optional[PageMargins] = None
    font_size: float = DEFAULT_FONT_SIZE
    info: DocumentInfo = field(default_factory=DocumentInfo)
    compress: bool = True

    def __post_init__(self):
        """Validate configuration options after initialization."""
        if self.layout not in ("portrait", "landscape"):
            raise ConfigurationError(f"layout must be portrait or landscape, got {self.layout!r}")

        if self.margin is not None and self.margin < 0:
            raise ConfigurationError(f"margin must not be negative, got {self.margin}")

        if self.font_size <= 0:
            raise ConfigurationError(f"font_size must be positive, got {self.font_size}")

        # Resolve eagerly so a bad size fails before any drawing
        self.page_size

    @property
    def page_size(self) -> Tuple[float, float]:
        """Page (width, height) in points, with the layout applied."""
        if isinstance(self.size, str):
            size = getattr(pagesizes, self.size.upper(), None)
            if not isinstance(size, tuple):
                raise ConfigurationError(f"Unknown page size: {self.size}")
        elif isinstance(self.size, (list, tuple)) and len(self.size) == 2:
            size = (float(self.size[0]), float(self.size[1]))
        else:
            raise ConfigurationError(f"size must be a page name or [width, height], got {self.size!r}")

        if self.layout == "landscape":
            return pagesizes.landscape(size)
        return size

    @property
    def page_margins(self) -> PageMargins:
        """Margins used for the page content area."""
        if self.margin is not None:
            return PageMargins.uniform(self.margin)
        if self.margins is not None:
            return self.margins
        return PageMargins.uniform(DEFAULT_PAGE_MARGIN)
