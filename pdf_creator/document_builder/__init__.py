"""Document Builder Package

This package lays out a Document on a paginated drawing surface:

Core Classes:
- PDFCreator: Main orchestrator class (from builder.py)
- ReportLabSurface: Buffered pages exported through a ReportLab canvas
- FontManager: Font variant registration with built-in fallbacks
- CursorTracker: Cursor moves for node margins and explicit positions
- ComponentRenderer: Text, list, image and table rendering
- TableLayoutEngine: Column widths, row heights and row pagination
- PageNumberRenderer: Page labels on every page

Utilities:
- coordinate_utils: Coordinate conversion and image scaling functions
- resolve_column_widths: Wildcard column width resolution

Helper Functions:
- create_pdf_from_definition: Create PDF from a JSON-shaped definition
"""

# Import core classes
from .builder import PDFCreator, create_pdf_from_definition
from .surface import ReportLabSurface, DrawOp, GraphicsState, PageRange
from .font_manager import FontManager
from .cursor import Cursor, CursorTracker
from .content_renderer import ComponentRenderer
from .table_layout import TableLayoutEngine, resolve_column_widths
from .page_numbers import PageNumberRenderer, page_label
from . import coordinate_utils

# Expose public API
__all__ = [
    # Main builder class
    'PDFCreator',

    # Helper functions
    'create_pdf_from_definition',
    'resolve_column_widths',
    'page_label',

    # Component classes
    'ReportLabSurface',
    'DrawOp',
    'GraphicsState',
    'PageRange',
    'FontManager',
    'Cursor',
    'CursorTracker',
    'ComponentRenderer',
    'TableLayoutEngine',
    'PageNumberRenderer',

    # Utilities module
    'coordinate_utils',
]
