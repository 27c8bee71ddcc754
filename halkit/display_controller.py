"""Thin controllers over the vendor display colour APIs.

A controller binds the ``disp_api_*`` entry points of a display library
when it is created. The library is a mapping from entry-point name to
callable, or any object carrying those names as attributes; ``None``
stands for a library that could not be loaded.

Entry points take only their input arguments. Each returns either a
plain status code, or a tuple of the status code followed by its output
values. Zero means success. A controller method raises
``ControllerError`` with the status code when the call fails, and with
``-1`` when the entry point is missing. On success it returns the
outputs: nothing, a single value, or a tuple of values.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

log = logging.getLogger("LiveDisplay-Controller")

MISSING_FUNCTION = -1

LEGACY_MM_LIBRARY = "libmm-disp-apis.so"
SDM_LIBRARY = "libsdm-disp-vndapis.so"
SDM_SYSTEM_LIBRARY = "libsdm-disp-apis.so"


class ControllerError(Exception):
    """A display API call failed or its entry point is missing."""

    def __init__(self, code: int, function: str) -> None:
        super().__init__(f"disp_api_{function} failed with status {code}")
        self.code = code
        self.function = function


def _lookup(library: Any, symbol: str) -> Callable[..., Any] | None:
    if isinstance(library, Mapping):
        candidate = library.get(symbol)
    else:
        candidate = getattr(library, symbol, None)
    return candidate if callable(candidate) else None


class _Controller:
    _FUNCTIONS: tuple[str, ...] = ()

    def __init__(self, library: Any, filename: str) -> None:
        self.filename = filename
        self._functions: dict[str, Callable[..., Any]] = {}
        if library is None:
            log.error("DLOPEN failed for %s", filename)
            return
        for name in self._FUNCTIONS:
            symbol = f"disp_api_{name}"
            function = _lookup(library, symbol)
            if function is None:
                log.error("loadFunction -- failed to load function %s", symbol)
            else:
                self._functions[name] = function

    @property
    def loaded(self) -> frozenset[str]:
        """Names of the entry points that were bound."""
        return frozenset(self._functions)

    def _status(self, name: str, *args: Any) -> tuple[int, tuple[Any, ...]]:
        function = self._functions.get(name)
        if function is None:
            return MISSING_FUNCTION, ()
        result = function(*args)
        if isinstance(result, tuple):
            if not result:
                raise TypeError(f"disp_api_{name} returned an empty tuple")
            return int(result[0]), tuple(result[1:])
        return int(result), ()

    def _call(self, name: str, outputs: int, *args: Any) -> tuple[Any, ...]:
        code, values = self._status(name, *args)
        if code != 0:
            raise ControllerError(code, name)
        if len(values) != outputs:
            raise TypeError(
                f"disp_api_{name} returned {len(values)} values, expected {outputs}"
            )
        return values

    def _call0(self, name: str, *args: Any) -> None:
        self._call(name, 0, *args)

    def _call1(self, name: str, *args: Any) -> Any:
        return self._call(name, 1, *args)[0]


class LegacyMMController(_Controller):
    """Controller for the legacy multimedia display API."""

    _FUNCTIONS = (
        "init",
        "get_color_balance_range",
        "set_color_balance",
        "get_color_balance",
        "get_num_display_modes",
        "get_display_modes",
        "get_active_display_mode",
        "set_active_display_mode",
        "set_default_display_mode",
        "get_default_display_mode",
        "get_pa_range",
        "get_pa_config",
        "set_pa_config",
        "supported",
    )

    def __init__(self, library: Any = None) -> None:
        super().__init__(library, LEGACY_MM_LIBRARY)

    def init(self, initialize: int) -> None:
        self._call0("init", initialize)

    def get_color_balance_range(self, disp_id: int) -> Any:
        return self._call1("get_color_balance_range", disp_id)

    def set_color_balance(self, disp_id: int, warmness: int) -> None:
        self._call0("set_color_balance", disp_id, warmness)

    def get_color_balance(self, disp_id: int) -> int:
        return self._call1("get_color_balance", disp_id)

    def get_num_display_modes(self, disp_id: int, mode_type: int) -> int:
        return self._call1("get_num_display_modes", disp_id, mode_type)

    def get_display_modes(self, disp_id: int, mode_type: int, mode_cnt: int) -> list[Any]:
        """Return at most mode_cnt mode records."""
        modes = self._call1("get_display_modes", disp_id, mode_type, mode_cnt)
        return list(modes)[:mode_cnt]

    def get_active_display_mode(self, disp_id: int) -> tuple[int, int]:
        """Return the active mode id and its mask."""
        mode_id, mask = self._call("get_active_display_mode", 2, disp_id)
        return mode_id, mask

    def set_active_display_mode(self, disp_id: int, mode_id: int) -> None:
        self._call0("set_active_display_mode", disp_id, mode_id)

    def set_default_display_mode(self, disp_id: int, mode_id: int) -> None:
        self._call0("set_default_display_mode", disp_id, mode_id)

    def get_default_display_mode(self, disp_id: int) -> int:
        return self._call1("get_default_display_mode", disp_id)

    def get_pa_range(self, disp_id: int) -> Any:
        return self._call1("get_pa_range", disp_id)

    def get_pa_config(self, disp_id: int) -> Any:
        return self._call1("get_pa_config", disp_id)

    def set_pa_config(self, disp_id: int, cfg: Any) -> None:
        self._call0("set_pa_config", disp_id, cfg)

    def supported(self, disp_id: int, feature_id: int) -> int:
        """Return the raw answer: non-zero means supported, -1 if the entry point is missing."""
        code, _ = self._status("supported", disp_id, feature_id)
        return code


class SDMController(_Controller):
    """Controller for the SDM display API, addressed through a context handle."""

    _FUNCTIONS = (
        "init",
        "deinit",
        "get_global_color_balance_range",
        "set_global_color_balance",
        "get_global_color_balance",
        "get_num_display_modes",
        "get_display_modes",
        "get_active_display_mode",
        "set_active_display_mode",
        "set_default_display_mode",
        "get_default_display_mode",
        "get_global_pa_range",
        "get_global_pa_config",
        "set_global_pa_config",
        "get_feature_version",
    )

    def __init__(self, library: Any = None, *, lives_in_system: bool = False) -> None:
        super().__init__(library, SDM_SYSTEM_LIBRARY if lives_in_system else SDM_LIBRARY)

    def init(self, flags: int) -> int:
        """Open a context and return its handle."""
        return self._call1("init", flags)

    def deinit(self, hctx: int, flags: int) -> None:
        self._call0("deinit", hctx, flags)

    def get_global_color_balance_range(self, hctx: int, disp_id: int) -> Any:
        return self._call1("get_global_color_balance_range", hctx, disp_id)

    def set_global_color_balance(self, hctx: int, disp_id: int, warmness: int, flags: int) -> None:
        self._call0("set_global_color_balance", hctx, disp_id, warmness, flags)

    def get_global_color_balance(self, hctx: int, disp_id: int) -> tuple[int, int]:
        """Return the warmness and flags."""
        warmness, flags = self._call("get_global_color_balance", 2, hctx, disp_id)
        return warmness, flags

    def get_num_display_modes(self, hctx: int, disp_id: int, mode_type: int) -> tuple[int, int]:
        """Return the mode count and flags."""
        count, flags = self._call("get_num_display_modes", 2, hctx, disp_id, mode_type)
        return count, flags

    def get_display_modes(
        self, hctx: int, disp_id: int, mode_type: int, mode_cnt: int
    ) -> tuple[list[Any], int]:
        """Return at most mode_cnt mode records and the flags."""
        modes, flags = self._call("get_display_modes", 2, hctx, disp_id, mode_type, mode_cnt)
        return list(modes)[:mode_cnt], flags

    def get_active_display_mode(self, hctx: int, disp_id: int) -> tuple[int, int, int]:
        """Return the active mode id, its mask and the flags."""
        mode_id, mask, flags = self._call("get_active_display_mode", 3, hctx, disp_id)
        return mode_id, mask, flags

    def set_active_display_mode(self, hctx: int, disp_id: int, mode_id: int, flags: int) -> None:
        self._call0("set_active_display_mode", hctx, disp_id, mode_id, flags)

    def set_default_display_mode(self, hctx: int, disp_id: int, mode_id: int, flags: int) -> None:
        self._call0("set_default_display_mode", hctx, disp_id, mode_id, flags)

    def get_default_display_mode(self, hctx: int, disp_id: int) -> tuple[int, int]:
        """Return the default mode id and the flags."""
        mode_id, flags = self._call("get_default_display_mode", 2, hctx, disp_id)
        return mode_id, flags

    def get_global_pa_range(self, hctx: int, disp_id: int) -> Any:
        return self._call1("get_global_pa_range", hctx, disp_id)

    def get_global_pa_config(self, hctx: int, disp_id: int) -> tuple[int, Any]:
        """Return the enable flag and the configuration."""
        enable, cfg = self._call("get_global_pa_config", 2, hctx, disp_id)
        return enable, cfg

    def set_global_pa_config(self, hctx: int, disp_id: int, enable: int, cfg: Any) -> None:
        self._call0("set_global_pa_config", hctx, disp_id, enable, cfg)

    def get_feature_version(self, hctx: int, feature_id: int) -> tuple[Any, int]:
        """Return the feature version and the flags."""
        version, flags = self._call("get_feature_version", 2, hctx, feature_id)
        return version, flags