"""Font Manager Module

Handles font variant registration and the built-in fallback chain.
"""
import os
from typing import Dict, Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont, TTFError

from ..config import DEFAULT_FONT_TYPE, ENV_FONT_DIR, FALLBACK_FONTS, FONT_FILES
from ..logger import get_logger

logger = get_logger(__name__)


class FontManager:
    """Maps the document font variants to registered ReportLab fonts.

    This class handles:
    - Font directory lookups (explicit argument, environment, bundled fonts/)
    - TTF registration with ReportLab, one font per variant
    - Falling back to the built-in Helvetica family per variant

    Attributes:
        font_dir: Directory searched for the variant TTF files (may be None)
        fonts: Variant name -> registered ReportLab font name
    """

    def __init__(self, font_dir: Optional[str] = None):
        """
        Initialize FontManager and register the variant fonts.

        Args:
            font_dir: Directory holding Roboto-*.ttf files. If None, reads
                      PDF_CREATOR_FONT_DIR, then the bundled fonts/ directory.
        """
        bundled_dir = os.path.join(os.path.dirname(__file__), '..', 'fonts')
        self.font_dir = font_dir or os.getenv(ENV_FONT_DIR) or bundled_dir
        self.fonts: Dict[str, str] = {}
        self._setup_fonts()

    def _setup_fonts(self):
        """
        Register a font for every variant.

        For each variant the matching TTF in ``font_dir`` is registered under
        a stable name (e.g. 'Roboto-Light'). Variants without a usable file
        fall back to the built-in font from FALLBACK_FONTS.
        """
        missing = []

        for variant, file_name in FONT_FILES.items():
            font_path = os.path.join(self.font_dir, file_name)
            font_name = os.path.splitext(file_name)[0]

            if font_name in pdfmetrics.getRegisteredFontNames():
                self.fonts[variant] = font_name
                continue

            if os.path.exists(font_path):
                try:
                    pdfmetrics.registerFont(TTFont(font_name, font_path))
                    self.fonts[variant] = font_name
                    logger.debug(f"Registered font {font_name} from {font_path}")
                    continue
                except TTFError as e:
                    logger.warning(f"Failed to register font {font_path}: {e}")

            self.fonts[variant] = FALLBACK_FONTS[variant]
            missing.append(variant)

        if missing:
            logger.debug(
                f"No TTF found in {self.font_dir} for {', '.join(missing)}; using built-in fonts"
            )

    def get_font_name(self, font_type: Optional[str] = None) -> str:
        """
        Get the registered font name for a variant.

        Args:
            font_type: Variant name ('light', 'bold', ...). Unknown or missing
                       variants use the default 'light' variant.

        Returns:
            Font name string suitable for use with ReportLab
        """
        return self.fonts.get(font_type or DEFAULT_FONT_TYPE, self.fonts[DEFAULT_FONT_TYPE])
