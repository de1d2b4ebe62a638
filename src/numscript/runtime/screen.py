"""
Screen pixel commands.

get_color(x, y, "name")
    Bind variable `name` to the "#rrggbb" colour of the pixel at (x, y).

color("#rrggbb", x, y, tolerance, "name")
    Bind variable `name` to true when every channel of the pixel at (x, y)
    lies within `tolerance` of the given colour, false otherwise. A screen
    that cannot be captured or a point outside it also gives false.

Frames are numpy arrays of shape (height, width, 3) holding RGB bytes. The
default grabber uses Pillow's ImageGrab; tests and headless hosts inject
their own.
"""

import logging
from typing import Callable, Optional, Tuple

import numpy as np

from .commands import CommandRegistry, expect_arity, expect_int, expect_string
from .context import ExecutionContext
from .values import bool_val, string_val
from ..errors import CommandError

logger = logging.getLogger(__name__)

Grabber = Callable[[], np.ndarray]
RGB = Tuple[int, int, int]


def grab_screen() -> np.ndarray:
    """Capture the primary display as an RGB array."""
    from PIL import ImageGrab  # local import: only needed when sampling

    with ImageGrab.grab() as shot:
        return np.array(shot.convert("RGB"), dtype=np.uint8)


def parse_hex(text: str) -> Optional[RGB]:
    """Parse "#rrggbb" (the '#' is optional) into an (r, g, b) tuple."""
    digits = text[1:] if text.startswith("#") else text
    if len(digits) != 6:
        return None
    try:
        return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))
    except ValueError:
        return None


def format_hex(rgb: RGB) -> str:
    return "#{:02x}{:02x}{:02x}".format(*rgb)


class ScreenSampler:
    """
    Owns the capture state for the pixel commands.

    Every sample grabs a fresh frame. When a grab fails and an earlier
    frame exists, the earlier frame is reused.
    """

    def __init__(self, grab: Optional[Grabber] = None):
        self._grab = grab if grab is not None else grab_screen
        self._frame: Optional[np.ndarray] = None

    @property
    def size(self) -> Optional[Tuple[int, int]]:
        """(width, height) of the last captured frame."""
        if self._frame is None:
            return None
        return self._frame.shape[1], self._frame.shape[0]

    def capture(self) -> np.ndarray:
        try:
            frame = np.asarray(self._grab())
        except OSError as exc:
            if self._frame is None:
                raise
            logger.debug("Screen capture failed (%s), reusing last frame", exc)
            return self._frame

        if frame.ndim != 3 or frame.shape[2] < 3:
            raise ValueError(f"unexpected frame shape {frame.shape}")
        self._frame = frame
        return frame

    def pixel(self, x: int, y: int) -> Optional[RGB]:
        """RGB of the pixel at (x, y), or None when it lies off screen."""
        frame = self.capture()
        height, width = frame.shape[:2]
        if x >= width or y >= height:
            return None
        r, g, b = frame[y, x, :3]
        return int(r), int(g), int(b)

    def matches(self, expected: RGB, x: int, y: int, tolerance: int) -> bool:
        """Is the pixel at (x, y) within `tolerance` of `expected` on every channel?"""
        try:
            actual = self.pixel(x, y)
        except OSError as exc:
            logger.debug("Screen capture failed: %s", exc)
            return False
        if actual is None:
            return False
        return all(abs(a - e) <= tolerance for a, e in zip(actual, expected))


def register_screen_commands(registry: CommandRegistry,
                             sampler: Optional[ScreenSampler] = None) -> ScreenSampler:
    """Register get_color and color against `sampler` (a default one if omitted)."""
    sampler = sampler if sampler is not None else ScreenSampler()

    def _get_color(args, ctx: ExecutionContext) -> None:
        """Store the colour of a screen pixel as "#rrggbb"."""
        expect_arity("get_color", args, 3)
        x = expect_int("get_color", args, 0, "x", minimum=0)
        y = expect_int("get_color", args, 1, "y", minimum=0)
        name = expect_string("get_color", args, 2, "variable name")

        try:
            rgb = sampler.pixel(x, y)
        except OSError as exc:
            raise CommandError(f"screen capture failed: {exc}") from exc
        if rgb is None:
            raise CommandError(f"pixel ({x}, {y}) is off screen")
        ctx.set_variable(name, string_val(format_hex(rgb)))

    def _color(args, ctx: ExecutionContext) -> None:
        """Test whether a screen pixel matches a colour."""
        expect_arity("color", args, 5)
        hex_text = expect_string("color", args, 0, "hex colour")
        expected = parse_hex(hex_text)
        if expected is None:
            raise CommandError(f"invalid hex colour '{hex_text}'")
        x = expect_int("color", args, 1, "x", minimum=0)
        y = expect_int("color", args, 2, "y", minimum=0)
        tolerance = expect_int("color", args, 3, "tolerance", minimum=0)
        name = expect_string("color", args, 4, "variable name")

        ctx.set_variable(name, bool_val(sampler.matches(expected, x, y, tolerance)))

    registry.register("get_color", _get_color)
    registry.register("color", _color)
    return sampler
