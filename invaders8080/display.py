"""Conversion of the Space Invaders video memory into a coloured frame."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import List, Sequence, Tuple

FRAME_WIDTH = 224
FRAME_HEIGHT = 256
SPACE_INVADERS_ASPECT_RATIO = FRAME_WIDTH / FRAME_HEIGHT
FRAME_BUFFER_SIZE = (FRAME_WIDTH * FRAME_HEIGHT) // 8

Frame = List[List[int]]


class Color(IntEnum):
    """Colours of the overlay filter on the arcade screen."""

    BLACK = 0
    WHITE = 1
    RED = 2
    GREEN = 3


@dataclass(frozen=True)
class ScreenPosition:
    """A point on screen: ``x`` is the row (0-255), ``y`` the column (0-223)."""

    x: int
    y: int


@dataclass(frozen=True)
class ColorRegion:
    """A rectangle of the screen, bounds inclusive, tinted with one colour."""

    color: Color
    start: ScreenPosition
    end: ScreenPosition

    def contains(self, x: int, y: int) -> bool:
        """Return whether row ``x``, column ``y`` lies inside the region."""
        return self.start.x <= x <= self.end.x and self.start.y <= y <= self.end.y


COLOR_REGIONS: Tuple[ColorRegion, ...] = (
    # Score display area.
    ColorRegion(Color.WHITE, ScreenPosition(0, 0), ScreenPosition(32, FRAME_WIDTH - 1)),
    # Invader formation area.
    ColorRegion(Color.RED, ScreenPosition(32, 0), ScreenPosition(64, FRAME_WIDTH - 1)),
    # Main gameplay area.
    ColorRegion(Color.WHITE, ScreenPosition(64, 0), ScreenPosition(183, FRAME_WIDTH - 1)),
    # Ship area.
    ColorRegion(Color.GREEN, ScreenPosition(184, 0), ScreenPosition(241, FRAME_WIDTH - 1)),
    # Bottom area: left, middle and right parts.
    ColorRegion(Color.WHITE, ScreenPosition(241, 0), ScreenPosition(FRAME_HEIGHT - 1, 25)),
    ColorRegion(Color.GREEN, ScreenPosition(241, 25), ScreenPosition(FRAME_HEIGHT - 1, 136)),
    ColorRegion(
        Color.WHITE, ScreenPosition(241, 136), ScreenPosition(FRAME_HEIGHT - 1, FRAME_WIDTH - 1)
    ),
)


def get_frame(frame_buffer: Sequence[int]) -> Frame:
    """Turn video memory into a FRAME_HEIGHT x FRAME_WIDTH grid of 0/1 pixels.

    Video memory holds the screen rotated; each byte is eight vertical pixels.
    The bit that would land one row below the frame is dropped, so row 0
    always stays dark.
    """
    if len(frame_buffer) < FRAME_BUFFER_SIZE:
        raise ValueError(
            f"frame buffer holds {len(frame_buffer)} bytes, {FRAME_BUFFER_SIZE} needed"
        )
    bytes_per_column = FRAME_HEIGHT // 8
    frame = [[0] * FRAME_WIDTH for _ in range(FRAME_HEIGHT)]
    for column in range(FRAME_WIDTH):
        start = column * bytes_per_column
        column_bytes = frame_buffer[start:start + bytes_per_column]
        for byte_index, value in enumerate(column_bytes):
            if not value:
                continue
            for bit in range(8):
                row = FRAME_HEIGHT - (byte_index * 8 + bit)
                if row < FRAME_HEIGHT:
                    frame[row][column] = (value >> bit) & 1
    return frame


def pixel_color(x: int, y: int) -> Color:
    """Return the filter colour at row ``x``, column ``y``; the first region listed wins."""
    for region in COLOR_REGIONS:
        if region.contains(x, y):
            return region.color
    raise ValueError(f"position ({x}, {y}) is outside the screen")


_COLOR_MAP: Tuple[Tuple[Color, ...], ...] = tuple(
    tuple(pixel_color(row, column) for column in range(FRAME_WIDTH))
    for row in range(FRAME_HEIGHT)
)


def apply_color_filter(frame: Sequence[Sequence[int]]) -> List[List[Color]]:
    """Colour a binary frame: lit pixels take their region's colour, others are black."""
    if len(frame) != FRAME_HEIGHT or any(len(row) != FRAME_WIDTH for row in frame):
        raise ValueError(f"frame must be {FRAME_HEIGHT} rows of {FRAME_WIDTH} pixels")
    return [
        [color if pixel else Color.BLACK for pixel, color in zip(row, colors)]
        for row, colors in zip(frame, _COLOR_MAP)
    ]


def get_colored_frame(frame_buffer: Sequence[int]) -> List[List[Color]]:
    """Turn video memory straight into a coloured frame."""
    return apply_color_filter(get_frame(frame_buffer))