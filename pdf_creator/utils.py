"""Utilities Module

Helper functions for definition files and image references.
"""
import os
import re
from urllib.parse import urlparse

from .config import SUPPORTED_IMAGE_EXTENSIONS
from .exceptions import InvalidFileError, FileSizeLimitExceededError, InvalidReference


def validate_definition_path(definition_path: str) -> None:
    """
    Validate definition file exists and has correct extension.

    Args:
        definition_path: Path to JSON definition file

    Raises:
        InvalidFileError: If file doesn't exist or has wrong extension
    """
    if not definition_path:
        raise InvalidFileError("Definition path cannot be empty")

    if not os.path.exists(definition_path):
        raise InvalidFileError(f"File does not exist: {definition_path}")

    if not definition_path.lower().endswith('.json'):
        raise InvalidFileError(f"File must have .json extension: {definition_path}")


def image_extension(url: str) -> str:
    """
    Extract the image extension from a URL.

    The query string and fragment are ignored, so
    ``https://host/a/logo.PNG?v=2`` yields ``png``.

    Args:
        url: Image URL

    Returns:
        Lower-case extension without the dot

    Raises:
        InvalidReference: If the URL is empty or has no recognizable image extension
    """
    if not url or not url.strip():
        raise InvalidReference(url or "", "url must not be empty")

    path = urlparse(url).path or url
    _, extension = os.path.splitext(path)
    extension = extension.lstrip('.').lower()

    if not extension:
        raise InvalidReference(url, "an extension was not found in the url")

    if extension not in SUPPORTED_IMAGE_EXTENSIONS:
        raise InvalidReference(url, f"unsupported image extension '.{extension}'")

    return extension


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in human-readable format.

    Args:
        size_bytes: Size in bytes

    Returns:
        Formatted string (e.g., "45.3 KB")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.1f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def clean_filename(filename: str) -> str:
    """
    Clean filename for safe saving.

    Args:
        filename: Original filename

    Returns:
        Cleaned filename without extension
    """
    # Remove path components
    filename = os.path.basename(filename)

    # Remove extension
    name, _ = os.path.splitext(filename)

    # Replace invalid characters
    name = re.sub(r'[^\w\s-]', '', name)

    # Replace spaces with underscores
    name = re.sub(r'\s+', '_', name)

    # Limit length
    if len(name) > 50:
        name = name[:50]

    return name or 'document'


def check_file_size_limit(file_path: str, max_mb: float) -> float:
    """
    Check if file is within size limit.

    Args:
        file_path: Path to file
        max_mb: Maximum size in MB

    Returns:
        File size in MB

    Raises:
        FileSizeLimitExceededError: If file exceeds size limit
        InvalidFileError: If file size cannot be determined
    """
    try:
        size_bytes = os.path.getsize(file_path)
    except OSError as e:
        raise InvalidFileError(f"Error checking file size: {str(e)}")

    size_mb = size_bytes / (1024 * 1024)
    if size_mb > max_mb:
        raise FileSizeLimitExceededError(size_mb, max_mb)

    return size_mb
