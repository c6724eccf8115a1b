from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math
from typing import Literal, Optional

from candlechart.models import ViewportState, clamp_scale

LOGGER = logging.getLogger(__name__)

EventType = Literal[
    "pointer_move",
    "pointer_down",
    "pointer_up",
    "wheel",
    "key_down",
    "key_up",
]
DeltaMode = Literal["lines", "pixels"]
EventStatus = Literal["captured", "ignored"]

BUTTON_LEFT = 0
BUTTON_RIGHT = 1
BUTTON_MIDDLE = 2

ZOOM_BUTTON = BUTTON_MIDDLE
PIXELS_PER_LINE = 50.0
ZOOM_STEP = 0.1


@dataclass(frozen=True)
class InputEvent:
    event_type: EventType
    x: Optional[float] = None
    y: Optional[float] = None
    button: Optional[int] = None
    delta_x: Optional[float] = None
    delta_y: Optional[float] = None
    delta_mode: DeltaMode = "lines"
    key: Optional[str] = None


def scroll_lines(event: InputEvent) -> float:
    delta = float(event.delta_y or 0.0)
    if not math.isfinite(delta):
        return 0.0
    if event.delta_mode == "pixels":
        return delta / PIXELS_PER_LINE
    return delta


def handle_event(
    state: ViewportState,
    event: InputEvent,
    *,
    zoom_button: int = ZOOM_BUTTON,
) -> tuple[ViewportState, EventStatus]:
    """Advance the zoom gesture state machine by one event."""
    if event.event_type == "pointer_down" and event.button == zoom_button:
        return replace(state, button_held=True), "captured"
    if event.event_type == "pointer_up" and event.button == zoom_button:
        return replace(state, button_held=False), "captured"
    if event.event_type == "wheel":
        if not state.button_held:
            return state, "ignored"
        factor = 1.0 + scroll_lines(event) * ZOOM_STEP
        updated = replace(
            state,
            price_scale=clamp_scale(state.price_scale * factor),
            time_scale=clamp_scale(state.time_scale * factor),
        )
        LOGGER.debug(
            "zoom factor=%.4f price_scale=%.4f time_scale=%.4f",
            factor,
            updated.price_scale,
            updated.time_scale,
        )
        return updated, "captured"
    return state, "ignored"
