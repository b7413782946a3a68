"""Document Builder Module

Orchestrates PDF rendering by coordinating specialized components:
- ImageResolver: Downloads every referenced image before layout
- CursorTracker: Node margins and explicit positions
- ComponentRenderer: Text, list, image and table rendering
- TableLayoutEngine: Column widths, row heights and row pagination
- PageNumberRenderer: Page labels stamped after the content pass
- ReportLabSurface: Buffered pages, exported through a ReportLab canvas
"""
from typing import Dict, Optional, Union

from ..components import Document
from ..document_loader import load_definition
from ..document_options import DocumentOptions
from ..image_resolver import ImageFetcher, ImageResolver
from ..logger import get_logger
from .content_renderer import ComponentRenderer
from .cursor import CursorTracker
from .font_manager import FontManager
from .page_numbers import PageNumberRenderer
from .surface import ReportLabSurface

logger = get_logger(__name__)


class PDFCreator:
    """Build a PDF from a Document.

    A creator renders one document: call ``load()`` once, then ``export()``
    or ``save()``.
    """

    def __init__(
        self,
        document_options: Optional[DocumentOptions] = None,
        surface: Optional[ReportLabSurface] = None,
        resolver: Optional[ImageResolver] = None,
        fetcher: Optional[ImageFetcher] = None,
        font_dir: Optional[str] = None,
        temp_dir: Optional[str] = None,
        max_workers: Optional[int] = None
    ):
        """
        Initialize the creator.

        Args:
            document_options: Page size, margins, default font size and metadata
            surface: Drawing surface (a ReportLabSurface is created otherwise)
            resolver: Image resolver (created from fetcher/temp_dir/max_workers otherwise)
            fetcher: Callable url -> byte chunks used by a created resolver
            font_dir: Directory holding the Roboto TTF files
            temp_dir: Directory for downloaded images
            max_workers: Concurrent image downloads
        """
        self.document_options = document_options or (surface.options if surface else DocumentOptions())
        self.font_manager = surface.font_manager if surface else FontManager(font_dir)
        self.surface = surface or ReportLabSurface(self.document_options, self.font_manager)
        self.resolver = resolver or ImageResolver(temp_dir=temp_dir, fetcher=fetcher, max_workers=max_workers)
        self.tracker = CursorTracker(self.surface)

    def load(self, document: Document) -> "PDFCreator":
        """
        Render a document onto the surface.

        Images are resolved first, content nodes are rendered top to bottom
        with their margins applied, then page numbers are stamped. Downloaded
        images are released whether or not rendering succeeds.

        Returns:
            self, so calls can be chained
        """
        with self.resolver:
            images = self.resolver.resolve(document)
            renderer = ComponentRenderer(
                self.surface,
                tracker=self.tracker,
                font_manager=self.font_manager,
                images=images,
                default_font_size=self.document_options.font_size,
            )

            for node in document.content:
                self.tracker.apply_margin_top(node.margin)
                renderer.render(node)
                self.tracker.apply_margin_bottom(node.margin)

            PageNumberRenderer(renderer, self.document_options).render(document.page_number_options)

        logger.info(f"Rendered {len(document.content)} node(s) on {self.page_count} page(s)")
        return self

    @property
    def page_count(self) -> int:
        return self.surface.buffered_page_range().count

    def export(self, kind: str = "base64") -> Union[str, bytes]:
        """
        Export the rendered document.

        Args:
            kind: "base64" for a base64 string, "bytes" for raw PDF bytes
        """
        if kind == "bytes":
            return self.surface.export()
        if kind == "base64":
            return self.surface.to_base64()
        raise ValueError(f"export kind must be 'base64' or 'bytes', got {kind!r}")

    def save(self, output_path: str) -> str:
        """Save completed document to output path."""
        self.surface.save(output_path)
        logger.info(f"Saved PDF to {output_path}")
        return output_path


def create_pdf_from_definition(
    output_path: str,
    definition: Dict,
    fetcher: Optional[ImageFetcher] = None,
    temp_dir: Optional[str] = None,
    font_dir: Optional[str] = None
) -> str:
    """
    Helper function to create a PDF from a JSON-shaped document definition.

    Args:
        output_path: Where to save the PDF
        definition: Definition with documentOptions, pageNumberOptions and content
        fetcher: Optional image fetcher (HTTP by default)
        temp_dir: Optional directory for downloaded images
        font_dir: Optional directory holding the Roboto TTF files

    Returns:
        Path to created document
    """
    document_options, document = load_definition(definition)
    creator = PDFCreator(document_options, fetcher=fetcher, temp_dir=temp_dir, font_dir=font_dir)
    creator.load(document)
    return creator.save(output_path)
