"""Coordinate validation against real page bounds."""

import math

from crop_gateway.domain.documents import PageSize
from crop_gateway.domain.errors import invalid_coordinates
from crop_gateway.domain.regions import Rectangle


def coordinate_error(rectangle: Rectangle, page: PageSize) -> str | None:
    """Return a reason the rectangle does not fit the page, or None if it does."""
    x, y, width, height = rectangle.x, rectangle.y, rectangle.width, rectangle.height
    if not all(math.isfinite(value) for value in (x, y, width, height)):
        return "coordinates must be finite numbers"
    if x < 0:
        return "x must be >= 0"
    if y < 0:
        return "y must be >= 0"
    if width <= 0:
        return "width must be > 0"
    if height <= 0:
        return "height must be > 0"
    if x + width > page.width:
        return f"x + width ({x + width:g}) exceeds page width ({page.width:g})"
    if y + height > page.height:
        return f"y + height ({y + height:g}) exceeds page height ({page.height:g})"
    return None


def validate_rectangle(rectangle: Rectangle, page: PageSize) -> Rectangle:
    """Raise INVALID_COORDINATES unless the rectangle lies inside the page."""
    reason = coordinate_error(rectangle, page)
    if reason is not None:
        raise invalid_coordinates(reason)
    return rectangle
