"""Cursor & Margin Tracker

Keeps the drawing cursor of the surface in step with node margins and
explicit node positions.
"""
from dataclasses import dataclass
from typing import Optional

from ..components import Margin


@dataclass
class Cursor:
    x: float
    y: float


class CursorTracker:
    """Reads and moves the cursor of a drawing surface.

    Margins are applied around every rendered node: ``apply_margin_top``
    before drawing and ``apply_margin_bottom`` after it. For the 4-tuple form
    the bottom step moves x back by the left margin; the scalar form moves x
    forward on both steps.
    """

    def __init__(self, surface):
        self.surface = surface

    @property
    def position(self) -> Cursor:
        return Cursor(self.surface.x, self.surface.y)

    def move_to(self, cursor: Cursor) -> None:
        self.surface.x = cursor.x
        self.surface.y = cursor.y

    def apply_margin_top(self, margin: Optional[Margin]) -> None:
        if margin is None:
            return
        self.surface.x += margin.left
        self.surface.y += margin.top

    def apply_margin_bottom(self, margin: Optional[Margin]) -> None:
        if margin is None:
            return
        if margin.uniform:
            self.surface.x += margin.left
            self.surface.y += margin.bottom
        else:
            self.surface.x -= margin.left
            self.surface.y += margin.bottom

    def get_cursor(self, x: Optional[float] = None, y: Optional[float] = None) -> Cursor:
        """
        Position to draw at: explicit coordinates win over the surface cursor.

        Any number, including 0, counts as explicit; only None falls back.
        """
        return Cursor(
            x if x is not None else self.surface.x,
            y if y is not None else self.surface.y,
        )
