"""pdf-creator

Renders declarative document definitions (text, lists, images, tables and
page numbers) into paginated PDF files.
"""

from .components import (
    CellStyle,
    Dash,
    Document,
    ImageNode,
    ImageOptions,
    ImageProperties,
    ImageRef,
    ListNode,
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
from .document_options import DocumentInfo, DocumentOptions
from .document_loader import load_definition, load_definition_file, load_document, load_document_options
from .image_resolver import HttpImageFetcher, ImageResolver
from .document_builder import PDFCreator, ReportLabSurface, create_pdf_from_definition
from .pipeline import RenderPipeline
from .render_options import RenderOptions
from .render_result import RenderResult

__all__ = [
    # Orchestration
    'PDFCreator',
    'RenderPipeline',
    'RenderOptions',
    'RenderResult',
    'create_pdf_from_definition',

    # Definitions
    'load_definition',
    'load_definition_file',
    'load_document',
    'load_document_options',

    # Model
    'Document',
    'DocumentOptions',
    'DocumentInfo',
    'TextNode',
    'ListNode',
    'ImageNode',
    'TableNode',
    'TextOptions',
    'ImageOptions',
    'ImageRef',
    'ImageProperties',
    'NodeStyle',
    'Margin',
    'PageMargins',
    'PageNumberOptions',
    'Table',
    'TableCell',
    'TableOptions',
    'CellStyle',
    'Dash',

    # Collaborators
    'ImageResolver',
    'HttpImageFetcher',
    'ReportLabSurface',
]
