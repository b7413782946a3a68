"""Coordinate Conversion Utilities

Pure helper functions for the two coordinate systems used while building a
document:

- Layout coordinates: points with origin at the top-left of the page, y grows
  downward (the cursor, table rows and every node position use these)
- ReportLab coordinates: points with origin at the bottom-left of the page

plus the aspect-ratio arithmetic used to scale images into boxes.

All functions are pure (no side effects) and can be tested in isolation.
"""

from typing import Optional, Tuple


def flip_y_coordinate(y: float, page_height: float) -> float:
    """
    Flip Y coordinate between top-left and bottom-left origin systems.

    Args:
        y: Y coordinate in source system
        page_height: Height of the page (in same units as y)

    Returns:
        Y coordinate in flipped system

    Examples:
        >>> flip_y_coordinate(0, 792)  # Top becomes bottom
        792.0
        >>> flip_y_coordinate(792, 792)  # Bottom becomes top
        0.0

    Notes:
        This function is its own inverse:
        flip_y_coordinate(flip_y_coordinate(y, h), h) == y
    """
    return float(page_height - y)


def convert_box_to_pdf(
    x: float,
    y: float,
    width: float,
    height: float,
    page_height: float
) -> Tuple[float, float, float, float]:
    """
    Convert a top-left anchored box to ReportLab coordinates.

    Args:
        x, y: Top-left corner in layout coordinates
        width, height: Box size in points
        page_height: Height of the page in points

    Returns:
        Tuple of (x, y, width, height) where (x, y) is the bottom-left corner

    Examples:
        >>> convert_box_to_pdf(10, 20, 100, 50, 792)
        (10.0, 722.0, 100.0, 50.0)
    """
    return float(x), flip_y_coordinate(y + height, page_height), float(width), float(height)


def height_for_width(px_width: Optional[float], px_height: Optional[float], width: float) -> float:
    """
    Height of an image scaled to ``width`` while keeping its aspect ratio.

    Missing or zero dimensions give 0 instead of raising.

    Examples:
        >>> height_for_width(200, 100, 50)
        25.0
    """
    if not px_width or not px_height:
        return 0.0
    return float(px_height) * width / float(px_width)


def width_for_height(px_width: Optional[float], px_height: Optional[float], height: float) -> float:
    """
    Width of an image scaled to ``height`` while keeping its aspect ratio.

    Examples:
        >>> width_for_height(200, 100, 50)
        100.0
    """
    if not px_width or not px_height:
        return 0.0
    return float(px_width) * height / float(px_height)


def fit_within(
    px_width: float,
    px_height: float,
    box_width: float,
    box_height: float
) -> Tuple[float, float]:
    """
    Largest size with the image's aspect ratio that fits inside a box.

    Examples:
        >>> fit_within(400, 200, 100, 100)
        (100.0, 50.0)
        >>> fit_within(100, 400, 100, 100)
        (25.0, 100.0)
    """
    if not px_width or not px_height:
        return 0.0, 0.0
    aspect = px_height / px_width
    if aspect > box_height / box_width:
        return width_for_height(px_width, px_height, box_height), float(box_height)
    return float(box_width), height_for_width(px_width, px_height, box_width)
