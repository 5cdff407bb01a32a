"""Editor package containing buffers, patch helpers and the Qt adapter."""

from importlib import import_module
from typing import Any

from . import buffer, patches

__all__ = ["buffer", "patches"]


def __getattr__(name: str) -> Any:
	if name == "qt_adapter":
		module = import_module(f"{__name__}.{name}")
		globals()[name] = module
		return module
	raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
