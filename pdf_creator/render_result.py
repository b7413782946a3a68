"""Render Result Dataclass

Result outputs from the PDF render pipeline.
"""
from dataclasses import dataclass
from typing import Optional


@dataclass
class RenderResult:
    """Result from the PDF render pipeline.

    Attributes:
        status: Render status ("completed", "failed")
        status_message: Human-readable status message

        # Outputs
        output_path: Path to the saved PDF (None on failure)
        base64_output: PDF as base64 when requested
        page_count: Number of pages rendered

        # Error Handling
        error: Error message if rendering failed (None otherwise)
        error_type: Exception class name of the failure
    """

    # Status
    status: str  # "completed", "failed"
    status_message: str

    # Outputs
    output_path: Optional[str] = None
    base64_output: Optional[str] = None
    page_count: int = 0

    # Error Handling
    error: Optional[str] = None
    error_type: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        """True if rendering completed and the PDF was saved."""
        return self.status == "completed" and self.output_path is not None

    @property
    def is_failed(self) -> bool:
        """True if rendering failed with an error."""
        return self.status == "failed"

    def to_gradio_outputs(self) -> tuple:
        """Convert to Gradio UI outputs format.

        Returns:
            Tuple of (output_file, status)
        """
        if self.is_failed:
            return None, self.status_message
        return self.output_path, self.status_message
