"""PDF Render Pipeline

Main orchestration logic for the definition-file to PDF workflow.
"""
import base64
import json
import os
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from .config import MAX_DEFINITION_SIZE_MB, PROGRESS_STEPS
from .document_builder import PDFCreator
from .document_loader import load_definition
from .exceptions import InvalidFileError, PDFCreatorError
from .image_resolver import ImageFetcher, ImageResolver
from .logger import get_logger
from .render_options import RenderOptions
from .render_result import RenderResult
from .utils import check_file_size_limit, clean_filename, validate_definition_path

logger = get_logger(__name__)


class RenderPipeline:
    """PDF render pipeline orchestrator.

    This class orchestrates the complete render workflow:
    1. Validation - definition file exists, has a .json extension and fits the size limit
    2. Loading - JSON parsed, UI overrides applied, component model built
    3. Rendering - images resolved, content laid out, page numbers stamped
    4. Export - PDF saved (and optionally base64 encoded)

    Attributes:
        fetcher: Optional image fetcher passed to every resolver
        progress_callback: Optional callback for progress updates (progress, desc)
    """

    def __init__(
        self,
        fetcher: Optional[ImageFetcher] = None,
        progress_callback: Optional[Callable[[float, str], None]] = None
    ):
        """Initialize pipeline with an optional image fetcher and progress callback.

        Args:
            fetcher: Callable url -> byte chunks (HTTP fetcher if None)
            progress_callback: Optional function(progress: float, desc: str) for progress updates
        """
        self.fetcher = fetcher
        self.progress = progress_callback or (lambda p, d: None)

    def process(self, options: RenderOptions) -> RenderResult:
        """Execute the complete render pipeline.

        Args:
            options: Render configuration options

        Returns:
            RenderResult with outputs and status

        Raises:
            Does not raise - all errors are captured in RenderResult.error
        """
        try:
            # Step 1: Validation
            self.progress(PROGRESS_STEPS["VALIDATE"], "Validating definition file...")
            self._validate_file(options.definition_path)

            # Step 2: Load definition
            self.progress(PROGRESS_STEPS["LOAD_DEFINITION"], "Loading document definition...")
            definition = self._read_definition(options.definition_path)
            definition = apply_overrides(definition, options)
            document_options, document = load_definition(definition)

            # Step 3: Resolve images and render
            self.progress(PROGRESS_STEPS["RESOLVE_IMAGES"], "Fetching images...")
            resolver = ImageResolver(
                temp_dir=options.temp_dir,
                fetcher=self.fetcher,
                max_workers=options.max_workers,
            )
            creator = PDFCreator(document_options, resolver=resolver, font_dir=options.font_dir)

            self.progress(PROGRESS_STEPS["RENDER"], "Laying out document...")
            creator.load(document)

            # Step 4: Export
            self.progress(PROGRESS_STEPS["EXPORT"], "Writing PDF...")
            output_path = options.output_path or self._default_output_path(options.definition_path)
            pdf_bytes = creator.export("bytes")
            with open(output_path, "wb") as f:
                f.write(pdf_bytes)

            self.progress(PROGRESS_STEPS["COMPLETE"], "Complete!")

            return RenderResult(
                status="completed",
                status_message=f"✅ PDF created ({creator.page_count} page(s))",
                output_path=output_path,
                base64_output=base64.b64encode(pdf_bytes).decode("ascii") if options.include_base64 else None,
                page_count=creator.page_count,
            )

        except PDFCreatorError as e:
            logger.error(f"Render failed: {e}")
            return RenderResult(
                status="failed",
                status_message=f"Render failed: {str(e)}",
                error=str(e),
                error_type=type(e).__name__,
            )

        except Exception as e:
            logger.exception("Unexpected render failure")
            return RenderResult(
                status="failed",
                status_message=f"Render failed: {str(e)}",
                error=str(e),
                error_type=type(e).__name__,
            )

    def _validate_file(self, definition_path: str) -> float:
        """Validate definition file exists, has correct extension, and is within size limit.

        Returns:
            File size in MB

        Raises:
            InvalidFileError: If file doesn't exist or has wrong extension
            FileSizeLimitExceededError: If file exceeds size limit
        """
        validate_definition_path(definition_path)
        return check_file_size_limit(definition_path, max_mb=MAX_DEFINITION_SIZE_MB)

    def _read_definition(self, definition_path: str) -> Dict[str, Any]:
        try:
            with open(definition_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidFileError(f"Definition is not valid JSON: {e}")

    def _default_output_path(self, definition_path: str) -> str:
        base_name = clean_filename(os.path.basename(definition_path))
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        return f"{base_name}_{timestamp}.pdf"


def apply_overrides(definition: Dict[str, Any], options: RenderOptions) -> Dict[str, Any]:
    """Return a copy of the definition with the option overrides applied.

    Args:
        definition: Parsed JSON definition
        options: Render options carrying the overrides

    Returns:
        New definition dict (the input is not modified)
    """
    if not isinstance(definition, dict):
        return definition

    definition = dict(definition)
    document_options = dict(definition.get("documentOptions") or {})

    if options.page_size:
        document_options["size"] = options.page_size
    if options.layout:
        document_options["layout"] = options.layout
    if options.margin is not None:
        document_options["margin"] = options.margin
        document_options.pop("margins", None)
    definition["documentOptions"] = document_options

    if options.page_numbers == "none":
        definition.pop("pageNumberOptions", None)
    elif options.page_numbers in ("basic", "seperator"):
        page_numbers = dict(definition.get("pageNumberOptions") or {})
        page_numbers["type"] = options.page_numbers
        if options.page_numbers == "seperator":
            page_numbers["seperator"] = options.page_number_separator
        definition["pageNumberOptions"] = page_numbers

    return definition
