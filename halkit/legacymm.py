"""Colour backend on top of the legacy multimedia display API.

Records exchanged with the display library are mappings (or objects with
attributes) named like the library's structures: a colour balance range
has ``min`` and ``max``; a picture adjustment range has ``min`` and
``max`` records, and a picture adjustment configuration has ``flags``
and ``data``, where each record holds ``hue``, ``saturation``,
``intensity``, ``contrast`` and ``saturationThreshold``; a display mode
has ``id`` and ``name``.
"""

from __future__ import annotations

import errno
import logging
from collections.abc import Mapping
from typing import Any

from .display_controller import ControllerError, LegacyMMController
from .display_types import (
    HSIC,
    ColorBackend,
    DispMode,
    Feature,
    FloatRange,
    HSICRanges,
    Range,
    is_non_zero,
)
from .display_utils import ModeStorage

log = logging.getLogger("LiveDisplay-LegacyMM")

DISPLAY_ID = 0
PA_CONFIG_FLAGS = 0x0F

_FEATURE_IDS = {
    Feature.COLOR_BALANCE: 0,
    Feature.DISPLAY_MODES: 1,
    Feature.PICTURE_ADJUSTMENT: 4,
}

_PA_FIELDS = ("hue", "saturation", "intensity", "contrast", "saturationThreshold")


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def _name(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).partition(b"\0")[0].decode("utf-8", "replace")
    return str(raw)


class LegacyMM(ColorBackend):
    """Colour backend driving a ``LegacyMMController``."""

    def __init__(self, controller: LegacyMMController, storage: ModeStorage | None = None) -> None:
        self._controller = controller
        self._storage = storage if storage is not None else ModeStorage()
        self._default_picture_adjustment = HSIC()
        self._closed = False

        try:
            controller.init(0)
        except ControllerError as exc:
            log.error("Failed to initialize LegacyMMController: %s", exc)
            return

        if self.has_feature(Feature.DISPLAY_MODES):
            self._save_initial_display_mode()
            mode = self.get_default_display_mode()
            if mode is not None:
                try:
                    self.set_display_mode(mode.id, False)
                except ValueError as exc:
                    log.error("Failed to apply default display mode: %s", exc)

    def _save_initial_display_mode(self) -> None:
        try:
            mode_id = self._storage.read_initial_mode_id()
        except (OSError, ValueError):
            mode_id = -1
        if mode_id >= 0:
            return
        try:
            default_id = self._controller.get_default_display_mode(DISPLAY_ID)
        except ControllerError:
            default_id = -1
        try:
            self._storage.write_initial_mode_id(default_id if default_id >= 0 else 0)
        except OSError as exc:
            log.error("Failed to save initial display mode: %s", exc)

    def close(self) -> None:
        """Deinitialize the controller; further calls do nothing."""
        if self._closed:
            return
        self._closed = True
        try:
            self._controller.init(1)
        except ControllerError as exc:
            log.error("Failed to deinitialize LegacyMMController: %s", exc)

    def set_adaptive_backlight_enabled(self, enabled: bool) -> None:
        raise NotImplementedError("adaptive backlight is not supported")

    def is_adaptive_backlight_enabled(self) -> bool:
        return False

    def set_outdoor_mode_enabled(self, enabled: bool) -> None:
        """Outdoor mode has no backing here; reports the device as not initialised."""
        state = "on" if enabled else "off"
        raise OSError(errno.ENODEV, f"cannot switch outdoor mode {state}: not available")

    def is_outdoor_mode_enabled(self) -> bool:
        return False

    def get_color_balance_range(self) -> Range:
        r = self._controller.get_color_balance_range(DISPLAY_ID)
        return Range(int(_field(r, "min")), int(_field(r, "max")))

    def set_color_balance(self, balance: int) -> None:
        self._controller.set_color_balance(DISPLAY_ID, balance)

    def get_color_balance(self) -> int:
        """Return the colour balance, or 0 when it cannot be read."""
        try:
            return int(self._controller.get_color_balance(DISPLAY_ID))
        except ControllerError:
            return 0

    def _num_display_modes(self) -> int:
        try:
            return int(self._controller.get_num_display_modes(DISPLAY_ID, 0))
        except ControllerError:
            return 0

    def get_display_modes(self) -> list[DispMode]:
        count = self._num_display_modes()
        if not count:
            return []
        records = self._controller.get_display_modes(DISPLAY_ID, 0, count)
        return [
            DispMode(id=int(_field(rec, "id")), name=_name(_field(rec, "name")), priv_flags=0)
            for rec in records
        ]

    def _mode_by_id(self, mode_id: int) -> DispMode | None:
        try:
            modes = self.get_display_modes()
        except ControllerError:
            return None
        return next((mode for mode in modes if mode.id == mode_id), None)

    def set_display_mode(self, mode_id: int, make_default: bool) -> None:
        """Activate a mode; raises ValueError if it is unknown or cannot be set."""
        current = self.get_current_display_mode()
        if current is not None and current.id == mode_id:
            return

        if self._mode_by_id(mode_id) is None:
            raise ValueError(f"unknown display mode {mode_id}")
        try:
            self._controller.set_active_display_mode(DISPLAY_ID, mode_id)
        except ControllerError as exc:
            raise ValueError(f"cannot activate display mode {mode_id}") from exc
        if make_default:
            try:
                self._controller.set_default_display_mode(DISPLAY_ID, mode_id)
            except ControllerError as exc:
                raise ValueError(f"cannot make display mode {mode_id} the default") from exc

        try:
            self._default_picture_adjustment = self.get_picture_adjustment()
        except ControllerError:
            pass

    def get_current_display_mode(self) -> DispMode | None:
        try:
            mode_id, _mask = self._controller.get_active_display_mode(DISPLAY_ID)
        except ControllerError:
            return None
        return self._mode_by_id(mode_id) if mode_id >= 0 else None

    def get_default_display_mode(self) -> DispMode | None:
        for read in (self._storage.read_local_mode_id, self._storage.read_initial_mode_id):
            try:
                mode_id = read()
            except (OSError, ValueError):
                continue
            if mode_id >= 0:
                return self._mode_by_id(mode_id)
        try:
            mode_id = self._controller.get_default_display_mode(DISPLAY_ID)
        except ControllerError:
            return None
        return self._mode_by_id(mode_id) if mode_id >= 0 else None

    def get_picture_adjustment_ranges(self) -> HSICRanges:
        r = self._controller.get_pa_range(DISPLAY_ID)
        low, high = _field(r, "min"), _field(r, "max")

        def float_range(name: str) -> FloatRange:
            return FloatRange(float(_field(low, name)), float(_field(high, name)), 1.0)

        return HSICRanges(
            hue=Range(int(_field(low, "hue")), int(_field(high, "hue")), 1),
            saturation=float_range("saturation"),
            intensity=float_range("intensity"),
            contrast=float_range("contrast"),
            saturation_threshold=float_range("saturationThreshold"),
        )

    def get_picture_adjustment(self) -> HSIC:
        data = _field(self._controller.get_pa_config(DISPLAY_ID), "data")
        return HSIC(
            hue=int(_field(data, "hue")),
            saturation=float(_field(data, "saturation")),
            intensity=float(_field(data, "intensity")),
            contrast=float(_field(data, "contrast")),
            saturation_threshold=float(_field(data, "saturationThreshold")),
        )

    def get_default_picture_adjustment(self) -> HSIC:
        return self._default_picture_adjustment

    def set_picture_adjustment(self, hsic: HSIC) -> None:
        values = (
            hsic.hue,
            hsic.saturation,
            hsic.intensity,
            hsic.contrast,
            hsic.saturation_threshold,
        )
        config = {
            "flags": PA_CONFIG_FLAGS,
            "data": {name: int(value) for name, value in zip(_PA_FIELDS, values)},
        }
        self._controller.set_pa_config(DISPLAY_ID, config)

    def has_feature(self, feature: Feature) -> bool:
        feature_id = _FEATURE_IDS.get(feature)
        if feature_id is None:
            return False
        if not self._controller.supported(DISPLAY_ID, feature_id):
            return False

        if feature in (Feature.DISPLAY_MODES, Feature.COLOR_BALANCE):
            # Display modes and colour balance depend on each other.
            if self._num_display_modes() <= 0:
                return False
            if feature is Feature.COLOR_BALANCE:
                try:
                    return is_non_zero(self.get_color_balance_range())
                except ControllerError:
                    return False
            return True

        try:
            return self.get_picture_adjustment_ranges().is_valid()
        except ControllerError:
            return False