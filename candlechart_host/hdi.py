from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterable, Literal, Protocol

from candlechart.input import InputEvent


HDIDevice = Literal["keyboard", "mouse", "trackpad"]
HDIStatus = Literal["OK", "NOT_DETECTED", "UNAVAILABLE", "DENIED"]


@dataclass(frozen=True)
class HDIEvent:
    event_id: int
    ts_ns: int
    window_id: str
    device: HDIDevice
    event_type: str
    status: HDIStatus
    payload: object | None


class HDIEventSource(Protocol):
    def poll_events(self, max_events: int) -> list[HDIEvent]:
        ...


class ScriptedHDISource:
    """Replays a fixed list of device events, used by the headless host."""

    def __init__(self, events: Iterable[HDIEvent] = ()) -> None:
        self._queue: deque[HDIEvent] = deque(events)

    def push(self, event: HDIEvent) -> None:
        self._queue.append(event)

    def poll_events(self, max_events: int) -> list[HDIEvent]:
        if max_events <= 0:
            raise ValueError("max_events must be > 0")
        out: list[HDIEvent] = []
        while self._queue and len(out) < max_events:
            out.append(self._queue.popleft())
        return out

    def pending_count(self) -> int:
        return len(self._queue)


def to_input_event(event: HDIEvent) -> InputEvent | None:
    """Translate a raw device event into a chart input event, or None if it carries nothing usable."""
    if event.status != "OK":
        return None
    payload = event.payload if isinstance(event.payload, dict) else {}
    x = _opt_float(payload.get("x"))
    y = _opt_float(payload.get("y"))

    if event.event_type == "click":
        phase = str(payload.get("phase", ""))
        if phase not in ("down", "up"):
            return None
        try:
            button = int(payload.get("button", -1))
        except (TypeError, ValueError):
            return None
        return InputEvent(
            event_type="pointer_down" if phase == "down" else "pointer_up",
            x=x,
            y=y,
            button=button,
        )
    if event.event_type == "scroll":
        default_mode = "pixels" if event.device == "trackpad" else "lines"
        mode = str(payload.get("delta_mode", default_mode))
        if mode not in ("lines", "pixels"):
            return None
        return InputEvent(
            event_type="wheel",
            x=x,
            y=y,
            delta_x=_opt_float(payload.get("delta_x")),
            delta_y=_opt_float(payload.get("delta_y")),
            delta_mode=mode,  # type: ignore[arg-type]
        )
    if event.event_type == "pointer_move":
        return InputEvent(event_type="pointer_move", x=x, y=y)
    if event.event_type in ("key_down", "key_up"):
        return InputEvent(event_type=event.event_type, key=str(payload.get("key", "")))  # type: ignore[arg-type]
    return None


def _opt_float(value: object) -> float | None:
    if value is None:
        return None
    try:
        return float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
