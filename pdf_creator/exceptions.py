"""Custom Exception Hierarchy

Exception hierarchy for pdf-creator providing granular exception types for
the different failure scenarios of a document render.
"""


class PDFCreatorError(Exception):
    """Base exception for all pdf-creator errors.

    This is the root of the exception hierarchy. Catching this exception
    will catch all custom exceptions raised while building a document.
    """
    pass


# Validation Errors
class ValidationError(PDFCreatorError):
    """Raised when input validation fails."""
    pass


class ConfigurationError(ValidationError):
    """Raised when layout configuration is invalid (table widths, margin shape, etc.)."""
    pass


class DefinitionParsingError(ConfigurationError):
    """Raised when a document definition field cannot be turned into a component."""

    def __init__(self, field: str, reason: str):
        self.field = field
        self.reason = reason
        super().__init__(f"Failed to parse definition field '{field}': {reason}")


class InvalidReference(ValidationError):
    """Raised when an image URL is empty or has no recognizable extension."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Invalid image reference '{url}': {reason}")


class InvalidFileError(ValidationError):
    """Raised when file validation fails (doesn't exist, wrong extension, etc.)."""
    pass


class FileSizeLimitExceededError(ValidationError):
    """Raised when a definition file exceeds the size limit."""

    def __init__(self, file_size: float, max_size: float):
        self.file_size = file_size
        self.max_size = max_size
        super().__init__(
            f"File size {file_size:.1f} MB exceeds maximum allowed size {max_size:.1f} MB"
        )


# Image Resolution Errors
class ImageResolutionError(PDFCreatorError):
    """Base class for image prefetch errors."""
    pass


class FetchError(ImageResolutionError):
    """Raised when an image download or its on-disk verification fails."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to fetch image '{url}': {reason}")


# Rendering Errors
class RenderingError(PDFCreatorError):
    """Base class for drawing errors."""
    pass


class DrawSurfaceError(RenderingError):
    """Raised by the drawing surface for paint calls it cannot honour."""
    pass


class FontError(RenderingError):
    """Raised when font setup or registration fails."""
    pass
