"""
Welcome Screen
==============

Content and scenery of the opening "case file" screen.

The screen is a noir gradient with falling rain, a badge, the case
title and a single call to action that starts the investigation.
Rendering is left to the UI; this module only produces the values.
"""

import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple


RGB = Tuple[float, float, float]


TITLE = "WELCOME, DETECTIVE"
CASE_FILE = "CASE FILE: THE MIDNIGHT CIPHER"
BODY_LINES = (
    "A series of cryptic messages have surfaced.",
    "Time is running out.",
)
CALL_TO_ACTION = "BEGIN INVESTIGATION"

GRADIENT_START: RGB = (0.1, 0.1, 0.2)
GRADIENT_END: RGB = (0.2, 0.2, 0.3)

RAIN_DROP_COUNT = 50
RAIN_DROP_SIZE = (2, 10)
FADE_IN_SECONDS = 1.5


@dataclass(frozen=True, slots=True)
class RainDrop:
    """A rain streak positioned in screen coordinates."""

    x: float
    y: float
    width: int = RAIN_DROP_SIZE[0]
    height: int = RAIN_DROP_SIZE[1]


@dataclass(frozen=True)
class WelcomeScreen:
    """
    Everything the welcome screen shows.

    Attributes:
        title: Greeting headline
        case_file: Case title line
        body_lines: Story teaser lines
        call_to_action: Label of the start button
        gradient: Background gradient (start, end) as sRGB triples
        rain: Rain streak positions
        fade_in_seconds: Duration of the text fade-in
    """

    title: str = TITLE
    case_file: str = CASE_FILE
    body_lines: Tuple[str, ...] = BODY_LINES
    call_to_action: str = CALL_TO_ACTION
    gradient: Tuple[RGB, RGB] = (GRADIENT_START, GRADIENT_END)
    rain: List[RainDrop] = field(default_factory=list)
    fade_in_seconds: float = FADE_IN_SECONDS

    def text_opacity(self, elapsed: float) -> float:
        """Opacity of the text block `elapsed` seconds after appearing (ease-in)."""
        if self.fade_in_seconds <= 0 or elapsed >= self.fade_in_seconds:
            return 1.0
        if elapsed <= 0:
            return 0.0
        t = elapsed / self.fade_in_seconds
        return t * t

    def render_text(self) -> str:
        """Plain-text version for terminals."""
        lines = [self.title, self.case_file, ""]
        lines.extend(self.body_lines)
        lines.extend(["", f"[ {self.call_to_action} ]"])
        return "\n".join(lines)


def scatter_rain(
    width: float,
    height: float,
    count: int = RAIN_DROP_COUNT,
    seed: Optional[int] = None,
) -> List[RainDrop]:
    """
    Place rain streaks uniformly over a width x height area.

    Args:
        width: Area width
        height: Area height
        count: Number of streaks
        seed: Seed for reproducible placement

    Returns:
        List of RainDrop positions
    """
    rng = random.Random(seed)
    return [
        RainDrop(x=rng.uniform(0, width), y=rng.uniform(0, height))
        for _ in range(count)
    ]


def build_welcome_screen(
    width: float = 390.0,
    height: float = 844.0,
    seed: Optional[int] = None,
) -> WelcomeScreen:
    """Build the welcome screen for a viewport of the given size."""
    return WelcomeScreen(rain=scatter_rain(width, height, seed=seed))
