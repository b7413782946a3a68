"""Configuration Constants

Constants for document layout and rendering configuration.

Runtime overrides are read from the environment (a ``.env`` file is loaded by
``app.py``). An explicit argument always wins over the environment, which wins
over the constants below.
"""

# Environment variable names
ENV_TEMP_DIR = "PDF_CREATOR_TEMP_DIR"
ENV_FONT_DIR = "PDF_CREATOR_FONT_DIR"
ENV_FETCH_TIMEOUT = "PDF_CREATOR_FETCH_TIMEOUT"
ENV_MAX_WORKERS = "PDF_CREATOR_MAX_WORKERS"
ENV_LOG_LEVEL = "PDF_CREATOR_LOG_LEVEL"

# Text Defaults
DEFAULT_FONT_SIZE = 11
DEFAULT_TEXT_COLOR = "#000000"
DEFAULT_FONT_TYPE = "light"
LINE_HEIGHT_FACTOR = 1.2  # Leading is 1.2x font size

# Font variants and the TTF files looked up for each of them
FONT_FILES = {
    "light": "Roboto-Light.ttf",
    "normal": "Roboto-Medium.ttf",
    "regular": "Roboto-Regular.ttf",
    "italic": "Roboto-Italic.ttf",
    "bold": "Roboto-Bold.ttf",
    "bold-italic": "Roboto-BoldItalic.ttf",
}

# Built-in fallbacks (always available in reportlab)
FALLBACK_FONTS = {
    "light": "Helvetica",
    "normal": "Helvetica",
    "regular": "Helvetica",
    "italic": "Helvetica-Oblique",
    "bold": "Helvetica-Bold",
    "bold-italic": "Helvetica-BoldOblique",
}

# Page Defaults (points)
DEFAULT_PAGE_SIZE = "LETTER"
DEFAULT_PAGE_MARGIN = 72.0

# Table Defaults
DEFAULT_ROW_HEIGHT = 25.0
DEFAULT_CELL_MARGIN = 5.0
DEFAULT_WILDCARD_WIDTH = 25.0  # Used when no width is left for "*" columns
WILDCARD = "*"
OVERFLOW_POLICIES = ("fallback", "error")

DEFAULT_CELL_STYLE = {
    "justify": "center",
    "align": "center",
    "line_join": "miter",
    "line_cap": "square",
    "dash": None,
    "line_width": 0.5,
    "stroke_opacity": 1.0,
    "stroke_color": "black",
    "fill_opacity": 0.0,
    "fill_color": "white",
    "cell_margin": DEFAULT_CELL_MARGIN,
}

# List Defaults
LIST_MARKERS = ("bullet", "numbered", "lettered")
BULLET_CHAR = "•"

# Page Number Defaults
PAGE_NUMBER_WIDTH = 30.0
DEFAULT_PAGE_NUMBER_TYPE = "basic"
DEFAULT_PAGE_NUMBER_SEPARATOR = "-"
DEFAULT_PAGE_NUMBER_ALIGN = "right"
DEFAULT_PAGE_NUMBER_LOCATION = "bottom"

# Image Fetching
SUPPORTED_IMAGE_EXTENSIONS = {"png", "jpg", "jpeg", "gif", "bmp", "tif", "tiff", "webp"}
DEFAULT_FETCH_TIMEOUT = 30  # seconds
DEFAULT_MAX_WORKERS = 4
FETCH_CHUNK_SIZE = 64 * 1024
TEMP_DIR_NAME = "pdf_creator_images"

# Definition Files
MAX_DEFINITION_SIZE_MB = 20

# Progress Steps (for UI progress tracking)
PROGRESS_STEPS = {
    "VALIDATE": 0.05,
    "LOAD_DEFINITION": 0.10,
    "RESOLVE_IMAGES": 0.20,
    "RENDER": 0.60,
    "EXPORT": 0.90,
    "COMPLETE": 1.0,
}
