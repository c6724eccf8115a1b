from __future__ import annotations

from dataclasses import dataclass
import importlib.util
import logging
from pathlib import Path
import time
import tomllib
from types import ModuleType
from typing import Any, Callable, Protocol

import torch

from .hdi import HDIEvent, HDIEventSource
from .window_matrix import CallBlitEvent, WindowMatrix, WriteBatch

LOGGER = logging.getLogger(__name__)

MANIFEST_NAME = "app.toml"


class AppLifecycle(Protocol):
    def init(self, ctx: "AppContext") -> None:
        ...

    def loop(self, ctx: "AppContext", dt: float) -> None:
        ...

    def stop(self, ctx: "AppContext") -> None:
        ...


@dataclass(frozen=True)
class AppManifest:
    app_id: str
    entrypoint: str
    title: str | None = None

    @classmethod
    def from_file(cls, path: Path) -> "AppManifest":
        if not path.is_file():
            raise FileNotFoundError(f"app manifest not found: {path}")
        with path.open("rb") as f:
            raw: dict[str, Any] = tomllib.load(f)
        missing = [key for key in ("app_id", "entrypoint") if key not in raw]
        if missing:
            raise ValueError(f"manifest missing required field: {missing[0]}")
        title = raw.get("title")
        if title is not None and not isinstance(title, str):
            raise ValueError("title must be a string if provided")
        manifest = cls(app_id=str(raw["app_id"]), entrypoint=str(raw["entrypoint"]), title=title)
        manifest.entrypoint_parts()
        return manifest

    def entrypoint_parts(self) -> tuple[str, str]:
        module_name, sep, symbol_name = self.entrypoint.partition(":")
        module_name, symbol_name = module_name.strip(), symbol_name.strip()
        if not sep or not module_name or not symbol_name:
            raise ValueError(f"entrypoint must use `module:symbol` format: {self.entrypoint!r}")
        return module_name, symbol_name


@dataclass
class AppContext:
    """What a lifecycle may touch: the window surface and the device event feed."""

    matrix: WindowMatrix
    hdi: HDIEventSource

    def submit_write_batch(self, batch: WriteBatch) -> CallBlitEvent:
        return self.matrix.submit_write_batch(batch)

    def poll_hdi_events(self, max_events: int) -> list[HDIEvent]:
        if max_events <= 0:
            raise ValueError("max_events must be > 0")
        return self.hdi.poll_events(max_events=max_events)

    def read_matrix_snapshot(self) -> torch.Tensor:
        return self.matrix.read_snapshot()


class AppRuntime:
    """Headless host: loads an app folder, drives init/loop/stop, counts presented frames."""

    def __init__(self, matrix: WindowMatrix, hdi: HDIEventSource) -> None:
        self._ctx = AppContext(matrix=matrix, hdi=hdi)
        self._last_error: Exception | None = None
        self._frames_presented = 0

    @property
    def last_error(self) -> Exception | None:
        return self._last_error

    @property
    def frames_presented(self) -> int:
        return self._frames_presented

    def load_manifest(self, app_dir: str | Path) -> AppManifest:
        return AppManifest.from_file(Path(app_dir) / MANIFEST_NAME)

    def run(
        self,
        app_dir: str | Path,
        *,
        max_ticks: int = 1,
        target_fps: int = 60,
        on_tick: Callable[[], None] | None = None,
    ) -> AppManifest:
        """Run `max_ticks` loop iterations, paced to `target_fps`.

        `on_tick` fires before each loop call; hosts use it to inject window
        changes. `stop` always runs once `init` has succeeded.
        """
        if max_ticks <= 0:
            raise ValueError("max_ticks must be > 0")
        if target_fps <= 0:
            raise ValueError("target_fps must be > 0")

        root = Path(app_dir).resolve()
        manifest = self.load_manifest(root)
        lifecycle = load_lifecycle(root, manifest)
        LOGGER.info("running app %s for %d ticks at %d fps", manifest.app_id, max_ticks, target_fps)

        try:
            lifecycle.init(self._ctx)
        except Exception as exc:
            self._fail(manifest, "init", exc)
            raise
        try:
            self._present()
            self._tick_loop(lifecycle, max_ticks, 1.0 / target_fps, on_tick)
        except Exception as exc:
            self._fail(manifest, "loop", exc)
            raise
        finally:
            try:
                lifecycle.stop(self._ctx)
            except Exception as exc:
                self._fail(manifest, "stop", exc)
                raise
        return manifest

    def _tick_loop(
        self,
        lifecycle: AppLifecycle,
        max_ticks: int,
        frame_budget: float,
        on_tick: Callable[[], None] | None,
    ) -> None:
        previous = time.perf_counter()
        for _ in range(max_ticks):
            if on_tick is not None:
                on_tick()
            started = time.perf_counter()
            lifecycle.loop(self._ctx, max(0.0, started - previous))
            previous = started
            self._present()
            remaining = frame_budget - (time.perf_counter() - started)
            if remaining > 0:
                time.sleep(remaining)

    def _present(self) -> None:
        while self._ctx.matrix.pop_call_blit() is not None:
            self._frames_presented += 1

    def _fail(self, manifest: AppManifest, phase: str, exc: Exception) -> None:
        self._last_error = exc
        LOGGER.warning("app %s failed during %s: %s", manifest.app_id, phase, exc)


def load_lifecycle(app_dir: Path, manifest: AppManifest) -> AppLifecycle:
    module_name, symbol_name = manifest.entrypoint_parts()
    module = _import_app_module(app_dir, module_name)
    try:
        factory = getattr(module, symbol_name)
    except AttributeError:
        raise ValueError(f"entrypoint symbol not found: {manifest.entrypoint}") from None
    lifecycle = factory() if callable(factory) else factory
    for hook in ("init", "loop", "stop"):
        if not callable(getattr(lifecycle, hook, None)):
            raise ValueError(f"entrypoint lifecycle missing callable `{hook}`: {manifest.entrypoint}")
    return lifecycle


def _import_app_module(app_dir: Path, module_name: str) -> ModuleType:
    path = app_dir.joinpath(*module_name.split(".")).with_suffix(".py")
    if not path.is_file():
        raise ValueError(f"entrypoint module file not found: {module_name}")
    qualified = f"candlechart_app_{abs(hash((str(app_dir), module_name)))}"
    module_spec = importlib.util.spec_from_file_location(qualified, path)
    if module_spec is None or module_spec.loader is None:
        raise ValueError(f"unable to load entrypoint module: {module_name}")
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module
