# viewport.py - the one place the UI asks how wide the screen is

from dataclasses import dataclass
from typing import Protocol

COMPACT_BREAKPOINT = 480
DEFAULT_WIDTH = 1024
COMPACT_WIDTH = 390


class Viewport(Protocol):
    def width(self) -> int:
        ...


@dataclass(frozen=True)
class StaticViewport:
    pixels: int = DEFAULT_WIDTH

    def width(self) -> int:
        return self.pixels


def is_compact(viewport: Viewport) -> bool:
    return viewport.width() <= COMPACT_BREAKPOINT


def viewport_for(compact: bool) -> StaticViewport:
    """Viewport used by the app, chosen from the sidebar layout toggle."""
    return StaticViewport(COMPACT_WIDTH if compact else DEFAULT_WIDTH)
