from .app_runtime import AppContext, AppLifecycle, AppManifest, AppRuntime, load_lifecycle
from .hdi import HDIEvent, HDIEventSource, ScriptedHDISource, to_input_event
from .window_matrix import CallBlitEvent, FullRewrite, ReplaceRect, WindowMatrix, WriteBatch

__all__ = [
    "AppContext",
    "AppLifecycle",
    "AppManifest",
    "AppRuntime",
    "CallBlitEvent",
    "FullRewrite",
    "HDIEvent",
    "HDIEventSource",
    "ReplaceRect",
    "ScriptedHDISource",
    "WindowMatrix",
    "WriteBatch",
    "load_lifecycle",
    "to_input_event",
]
