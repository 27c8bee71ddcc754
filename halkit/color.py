"""Display colour service that fronts a colour backend.

The backend is created lazily through a factory on first use. Its
features are probed once. Any failing backend call drops the backend, so
the next call connects afresh.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable

from .display_types import (
    BACKEND_ERRORS,
    HSIC,
    ColorBackend,
    DispMode,
    DisplayMode,
    Feature,
    FloatRange,
    HSICRanges,
    Range,
)

log = logging.getLogger("LiveDisplay-HIDL")

BackendFactory = Callable[[], "ColorBackend | None"]


def _to_display_mode(mode: DispMode) -> DisplayMode:
    return DisplayMode(id=mode.id, name=mode.name)


def _invalid_display_mode() -> DisplayMode:
    return DisplayMode(id=-1)


class Color:
    """Thread-safe colour service over a lazily created backend."""

    def __init__(self, backend_factory: BackendFactory) -> None:
        self._factory = backend_factory
        self._backend: ColorBackend | None = None
        self._features = Feature(0)
        self._connected = False
        self._lock = threading.Lock()

    # Connection handling

    def _reset(self) -> None:
        if self._connected and self._backend is not None:
            try:
                self._backend.close()
            except BACKEND_ERRORS as exc:
                log.error("Failed to close backend: %s", exc)
        self._backend = None
        self._features = Feature(0)
        self._connected = False

    def _error(self, message: str | None = None) -> None:
        if message is not None:
            log.error(message)
        self._reset()

    def _connect(self) -> bool:
        if self._connected:
            return True

        self._features = Feature(0)
        backend = self._factory()
        if backend is None:
            log.error("Failed to initialize backend!")
            return False
        self._backend = backend

        bit = 1
        while bit <= Feature.MAX:
            feature = Feature(bit)
            if backend.has_feature(feature):
                self._features |= feature
            bit <<= 1
        self._connected = True
        return bool(self._features)

    def _check(self, feature: Feature) -> bool:
        return self._connect() and bool(self._features & feature)

    def close(self) -> None:
        """Drop the backend, closing it."""
        with self._lock:
            self._reset()

    def __enter__(self) -> Color:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # Features

    def get_supported_features(self) -> Feature:
        with self._lock:
            self._connect()
            return self._features

    # Display modes

    def get_display_modes(self) -> list[DisplayMode]:
        with self._lock:
            if not self._check(Feature.DISPLAY_MODES):
                return []
            try:
                modes = self._backend.get_display_modes()
            except BACKEND_ERRORS:
                self._error("Unable to fetch display modes!")
                return []
            return [_to_display_mode(mode) for mode in modes]

    def _mode_query(self, query: Callable[[ColorBackend], DispMode | None]) -> DisplayMode:
        if not self._check(Feature.DISPLAY_MODES):
            return DisplayMode()
        mode = query(self._backend)
        return _to_display_mode(mode) if mode is not None else _invalid_display_mode()

    def get_current_display_mode(self) -> DisplayMode:
        with self._lock:
            return self._mode_query(lambda backend: backend.get_current_display_mode())

    def get_default_display_mode(self) -> DisplayMode:
        with self._lock:
            return self._mode_query(lambda backend: backend.get_default_display_mode())

    def _apply(self, feature: Feature, action: Callable[[ColorBackend], None], message: str) -> bool:
        if not self._check(feature):
            return False
        try:
            action(self._backend)
        except BACKEND_ERRORS:
            self._error(message)
            return False
        return True

    def set_display_mode(self, mode_id: int, make_default: bool) -> bool:
        with self._lock:
            return self._apply(
                Feature.DISPLAY_MODES,
                lambda backend: backend.set_display_mode(mode_id, make_default),
                "Unable to set display mode!",
            )

    # Adaptive backlight and outdoor mode

    def set_adaptive_backlight_enabled(self, enabled: bool) -> bool:
        with self._lock:
            return self._apply(
                Feature.ADAPTIVE_BACKLIGHT,
                lambda backend: backend.set_adaptive_backlight_enabled(enabled),
                "Unable to set adaptive backlight state!",
            )

    def is_adaptive_backlight_enabled(self) -> bool:
        with self._lock:
            if self._check(Feature.ADAPTIVE_BACKLIGHT):
                return self._backend.is_adaptive_backlight_enabled()
            return False

    def set_outdoor_mode_enabled(self, enabled: bool) -> bool:
        with self._lock:
            return self._apply(
                Feature.OUTDOOR_MODE,
                lambda backend: backend.set_outdoor_mode_enabled(enabled),
                "Unable to toggle outdoor mode!",
            )

    def is_outdoor_mode_enabled(self) -> bool:
        with self._lock:
            if self._check(Feature.OUTDOOR_MODE):
                return self._backend.is_outdoor_mode_enabled()
            return False

    # Colour balance

    def get_color_balance_range(self) -> Range:
        with self._lock:
            if not self._check(Feature.COLOR_BALANCE):
                return Range()
            try:
                return self._backend.get_color_balance_range()
            except BACKEND_ERRORS:
                self._error("Unable to fetch color balance range!")
                return Range(min=0, max=0)

    def get_color_balance(self) -> int:
        with self._lock:
            if self._check(Feature.COLOR_BALANCE):
                return self._backend.get_color_balance()
            return 0

    def set_color_balance(self, value: int) -> bool:
        with self._lock:
            return self._apply(
                Feature.COLOR_BALANCE,
                lambda backend: backend.set_color_balance(value),
                "Unable to set color balance!",
            )

    # Picture adjustment

    def set_picture_adjustment(self, hsic: HSIC) -> bool:
        with self._lock:
            return self._apply(
                Feature.PICTURE_ADJUSTMENT,
                lambda backend: backend.set_picture_adjustment(hsic),
                "Unable to set picture adjustment!",
            )

    def get_picture_adjustment(self) -> HSIC:
        with self._lock:
            if not self._check(Feature.PICTURE_ADJUSTMENT):
                return HSIC()
            try:
                return self._backend.get_picture_adjustment()
            except BACKEND_ERRORS:
                self._error("Unable to get picture adjustment!")
                return HSIC()

    def get_default_picture_adjustment(self) -> HSIC:
        with self._lock:
            if self._check(Feature.PICTURE_ADJUSTMENT):
                return self._backend.get_default_picture_adjustment()
            return HSIC()

    def _ranges(self, what: str) -> HSICRanges:
        if not self._check(Feature.PICTURE_ADJUSTMENT):
            return HSICRanges()
        try:
            return self._backend.get_picture_adjustment_ranges()
        except BACKEND_ERRORS:
            self._error(f"Unable to get {what} range!")
            return HSICRanges()

    def get_hue_range(self) -> Range:
        with self._lock:
            return self._ranges("hue").hue

    def get_saturation_range(self) -> FloatRange:
        with self._lock:
            return self._ranges("saturation").saturation

    def get_intensity_range(self) -> FloatRange:
        with self._lock:
            return self._ranges("intensity").intensity

    def get_contrast_range(self) -> FloatRange:
        with self._lock:
            return self._ranges("contrast").contrast

    def get_saturation_threshold_range(self) -> FloatRange:
        with self._lock:
            return self._ranges("saturation threshold").saturation_threshold