"""Render Options Dataclass

Configuration options for the PDF render pipeline.
"""
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError

PAGE_NUMBER_MODES = ("keep", "none", "basic", "seperator")


@dataclass
class RenderOptions:
    """Configuration options for a render pipeline run.

    The override fields are applied on top of the definition file, so a user
    interface can change page setup without editing the JSON.

    Attributes:
        definition_path: Path to the JSON document definition

        # Output Options
        output_path: Where to save the PDF (derived from the definition name if None)
        include_base64: If True, the result also carries the PDF as base64

        # Definition Overrides
        page_size: Page size name ("A4", "LETTER", ...) replacing documentOptions.size
        layout: "portrait" or "landscape" replacing documentOptions.layout
        margin: Uniform page margin replacing documentOptions.margin/margins
        page_numbers: "keep" (definition decides), "none", "basic" or "seperator"
        page_number_separator: Separator for "seperator" page numbers

        # Resources
        temp_dir: Directory for downloaded images
        max_workers: Concurrent image downloads
        font_dir: Directory holding the Roboto TTF files
    """

    # Required
    definition_path: str

    # Output Options
    output_path: Optional[str] = None
    include_base64: bool = False

    # Definition Overrides
    page_size: Optional[str] = None
    layout: Optional[str] = None
    margin: Optional[float] = None
    page_numbers: str = "keep"
    page_number_separator: str = "/"

    # Resources
    temp_dir: Optional[str] = None
    max_workers: Optional[int] = None
    font_dir: Optional[str] = None

    def __post_init__(self):
        """Validate configuration options after initialization."""
        if self.page_numbers not in PAGE_NUMBER_MODES:
            raise ConfigurationError(
                f"page_numbers must be one of {', '.join(PAGE_NUMBER_MODES)}, got {self.page_numbers!r}"
            )

        if self.layout is not None and self.layout not in ("portrait", "landscape"):
            raise ConfigurationError(f"layout must be portrait or landscape, got {self.layout!r}")

        if self.margin is not None and self.margin < 0:
            raise ConfigurationError(f"margin must not be negative, got {self.margin}")

        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigurationError(f"max_workers must be at least 1, got {self.max_workers}")
