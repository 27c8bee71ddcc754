"""Colour backend on top of the SDM display API, with extra sysfs modes.

Records exchanged with the display library are mappings (or objects with
attributes). A picture adjustment range has ``hue``, ``saturation``,
``intensity``, ``contrast`` and ``saturationThreshold`` records, each
with ``min``, ``max`` and ``step``. A picture adjustment configuration
has ``flags`` and ``data``, where ``data`` holds the five components by
the same names. A display mode has ``id`` and ``name``. A feature
version has ``x``, ``y`` and ``z``, or is an ``(x, y, z)`` sequence.
"""

from __future__ import annotations

import errno
import logging
import os
from collections.abc import Mapping, Sequence
from typing import Any

from .display_controller import ControllerError, SDMController
from .display_types import (
    HSIC,
    ColorBackend,
    DispMode,
    Feature,
    FloatRange,
    HSICRanges,
    Range,
)
from .display_utils import (
    DPPS_BUFFER_SIZE,
    DPPS_SOCKET_PATH,
    ModeStorage,
    send_dpps_command,
    write_int,
)

log = logging.getLogger("LiveDisplay-SDM")

DISPLAY_ID = 0

FEATURE_VER_SW_PA_API = 0x00000001
FEATURE_VER_SW_SAVEMODES_API = 0x00000004

FOSS_PROPERTY = "ro.vendor.display.foss"
FOSS_ON = "foss:on"
FOSS_OFF = "foss:off"

# Used when only sysfs modes are available.
STANDARD_NODE_ID = 600

SRGB_NODE = "/sys/class/graphics/fb0/srgb"
SRGB_NODE_ID = 601

DCI_P3_NODE = "/sys/class/graphics/fb0/dci_p3"
DCI_P3_NODE_ID = 602

PRIV_MODE_FLAG_SDM = 1
PRIV_MODE_FLAG_SYSFS = 2

_TRUE_VALUES = frozenset({"1", "y", "yes", "on", "true"})
_FALSE_VALUES = frozenset({"0", "n", "no", "off", "false"})


def _field(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)


def _name(raw: Any) -> str:
    if isinstance(raw, (bytes, bytearray)):
        return bytes(raw).partition(b"\0")[0].decode("utf-8", "replace")
    return str(raw)


def _bool_property(properties: Mapping[str, str], name: str, default: bool) -> bool:
    value = properties.get(name, "").strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return default


def _version_parts(version: Any) -> tuple[int, int, int]:
    if isinstance(version, Sequence) and not isinstance(version, (str, bytes)):
        x, y, z = version
    else:
        x, y, z = (_field(version, part) for part in ("x", "y", "z"))
    return int(x), int(y), int(z)


class SDM(ColorBackend):
    """Colour backend driving an ``SDMController`` plus sRGB and DCI-P3 sysfs nodes."""

    def __init__(
        self,
        controller: SDMController,
        storage: ModeStorage | None = None,
        *,
        properties: Mapping[str, str] | None = None,
        srgb_node: str | os.PathLike[str] = SRGB_NODE,
        dci_p3_node: str | os.PathLike[str] = DCI_P3_NODE,
        dpps_socket: str | os.PathLike[str] = DPPS_SOCKET_PATH,
    ) -> None:
        self._controller = controller
        self._storage = storage if storage is not None else ModeStorage()
        self._srgb_node = os.fspath(srgb_node)
        self._dci_p3_node = os.fspath(dci_p3_node)
        self._dpps_socket = dpps_socket
        self._active_mode_id = -1
        self._default_picture_adjustment = HSIC()
        self._foss_enabled = False
        self._cached_foss_status = False
        self._handle: int | None = None
        self._closed = False

        try:
            self._handle = controller.init(0)
        except ControllerError as exc:
            log.error("Failed to initialize SDMController: %s", exc)
            return

        if self.has_feature(Feature.DISPLAY_MODES):
            try:
                self._save_initial_display_mode()
            except OSError as exc:
                log.error("Failed to save initial display mode! err=%s", exc)
                return
            mode = self.get_default_display_mode()
            if mode is not None:
                try:
                    self.set_display_mode(mode.id, False)
                except (ControllerError, OSError, ValueError) as exc:
                    log.error("Failed to apply default display mode: %s", exc)

        self._foss_enabled = _bool_property(properties or {}, FOSS_PROPERTY, False)

    def close(self) -> None:
        """Release the controller context; further calls do nothing."""
        if self._closed:
            return
        self._closed = True
        if self._handle is None:
            return
        try:
            self._controller.deinit(self._handle, 0)
        except ControllerError as exc:
            log.error("Failed to deinitialize SDMController: %s", exc)

    def _num_sdm_display_modes(self) -> int:
        try:
            count, _flags = self._controller.get_num_display_modes(self._handle, DISPLAY_ID, 0)
        except ControllerError:
            return 0
        return max(int(count), 0)

    def _num_display_modes(self) -> int:
        count = self._num_sdm_display_modes()
        if self._local_srgb_mode() is not None:
            count += 1
        if self._local_dci_p3_mode() is not None:
            count += 1
        return count

    def _sysfs_mode(self, node: str, mode_id: int, name: str) -> DispMode | None:
        if not os.access(node, os.W_OK):
            return None
        return DispMode(id=mode_id, name=name, priv_flags=PRIV_MODE_FLAG_SYSFS, priv_data=node)

    def _local_srgb_mode(self) -> DispMode | None:
        return self._sysfs_mode(self._srgb_node, SRGB_NODE_ID, "srgb")

    def _local_dci_p3_mode(self) -> DispMode | None:
        return self._sysfs_mode(self._dci_p3_node, DCI_P3_NODE_ID, "dci_p3")

    def _mode_by_id(self, mode_id: int) -> DispMode | None:
        try:
            modes = self.get_display_modes()
        except ControllerError:
            return None
        return next((mode for mode in modes if mode.id == mode_id), None)

    def _set_mode_state(self, mode: DispMode, state: bool) -> None:
        if mode.priv_flags == PRIV_MODE_FLAG_SYSFS:
            if mode.id != STANDARD_NODE_ID:
                log.debug("sysfs node: %s state=%s", mode.priv_data, state)
                write_int(mode.priv_data, 1 if state else 0)
            return
        if mode.priv_flags == PRIV_MODE_FLAG_SDM:
            if state:
                self._controller.set_active_display_mode(self._handle, DISPLAY_ID, mode.id, 0)
                return
            try:
                initial = self._storage.read_initial_mode_id()
            except (OSError, ValueError) as exc:
                raise ValueError("no initial display mode to fall back to") from exc
            log.debug("set sdm mode to default: id%d", initial)
            self._controller.set_active_display_mode(self._handle, DISPLAY_ID, initial, 0)
            return
        raise ValueError(f"display mode {mode.id} has unknown flags {mode.priv_flags}")

    def get_display_modes(self) -> list[DispMode]:
        if not self._num_display_modes():
            return []

        sdm_count = self._num_sdm_display_modes()
        if sdm_count == 0:
            # Only sysfs modes exist: offer a standard mode that does nothing.
            profiles = [
                DispMode(
                    id=STANDARD_NODE_ID,
                    name="standard",
                    priv_flags=PRIV_MODE_FLAG_SYSFS,
                    priv_data="",
                )
            ]
        else:
            records, _flags = self._controller.get_display_modes(
                self._handle, DISPLAY_ID, 0, sdm_count
            )
            profiles = [
                DispMode(
                    id=int(_field(rec, "id")),
                    name=_name(_field(rec, "name")),
                    priv_flags=PRIV_MODE_FLAG_SDM,
                )
                for rec in records
            ]

        profiles.extend(
            mode for mode in (self._local_srgb_mode(), self._local_dci_p3_mode()) if mode
        )
        return profiles

    def get_current_display_mode(self) -> DispMode | None:
        return self._mode_by_id(self._active_mode_id)

    def get_default_display_mode(self) -> DispMode | None:
        for read in (self._storage.read_local_mode_id, self._storage.read_initial_mode_id):
            try:
                mode_id = read()
            except (OSError, ValueError):
                continue
            if mode_id >= 0:
                return self._mode_by_id(mode_id)
        return None

    def _save_initial_display_mode(self) -> None:
        try:
            if self._storage.read_initial_mode_id() >= 0:
                return
        except (OSError, ValueError):
            pass
        try:
            default_id, _flags = self._controller.get_default_display_mode(
                self._handle, DISPLAY_ID
            )
        except ControllerError:
            default_id = -1
        self._storage.write_initial_mode_id(default_id if default_id >= 0 else 0)

    def set_display_mode(self, mode_id: int, make_default: bool) -> None:
        """Activate a mode, switching off a previous sysfs mode first."""
        if mode_id == self._active_mode_id:
            return

        mode = self._mode_by_id(mode_id)
        if mode is None:
            raise ValueError(f"unknown display mode {mode_id}")

        log.debug("setDisplayMode: current mode=%d", self._active_mode_id)
        if self._active_mode_id >= 0:
            old = self.get_current_display_mode()
            if old is not None and PRIV_MODE_FLAG_SYSFS in (old.priv_flags, mode.priv_flags):
                log.debug("disabling old mode %d", old.id)
                self._set_mode_state(old, False)

        self._set_mode_state(mode, True)
        self._active_mode_id = mode.id

        if make_default:
            self._storage.write_local_mode_id(mode.id)
            if mode.priv_flags == PRIV_MODE_FLAG_SDM:
                self._controller.set_default_display_mode(self._handle, DISPLAY_ID, mode.id, 0)

        try:
            self._default_picture_adjustment = self.get_picture_adjustment()
        except ControllerError:
            log.error("failed to retrieve picture adjustment after mode setting!")

        log.debug(
            "setDisplayMode: %d default: %s flags: %d", mode_id, make_default, mode.priv_flags
        )

    def set_adaptive_backlight_enabled(self, enabled: bool) -> None:
        """Switch adaptive backlight through the post-processing daemon."""
        if enabled == self._cached_foss_status:
            return
        reply = send_dpps_command(
            FOSS_ON if enabled else FOSS_OFF, DPPS_BUFFER_SIZE, self._dpps_socket
        )
        if not reply.startswith(b"Success"):
            raise ValueError(f"unexpected reply from the post-processing daemon: {reply!r}")
        self._cached_foss_status = enabled

    def is_adaptive_backlight_enabled(self) -> bool:
        return self._cached_foss_status

    def set_outdoor_mode_enabled(self, enabled: bool) -> None:
        """Outdoor mode has no backing here; reports the device as not initialised."""
        state = "on" if enabled else "off"
        raise OSError(errno.ENODEV, f"cannot switch outdoor mode {state}: not available")

    def is_outdoor_mode_enabled(self) -> bool:
        return False

    def get_color_balance_range(self) -> Range:
        raise NotImplementedError("colour balance is not supported")

    def get_color_balance(self) -> int:
        return 0

    def set_color_balance(self, balance: int) -> None:
        raise NotImplementedError("colour balance is not supported")

    def get_picture_adjustment_ranges(self) -> HSICRanges:
        r = self._controller.get_global_pa_range(self._handle, DISPLAY_ID)

        def float_range(name: str) -> FloatRange:
            rec = _field(r, name)
            return FloatRange(
                float(_field(rec, "min")), float(_field(rec, "max")), float(_field(rec, "step"))
            )

        hue = _field(r, "hue")
        return HSICRanges(
            hue=Range(int(_field(hue, "min")), int(_field(hue, "max")), int(_field(hue, "step"))),
            saturation=float_range("saturation"),
            intensity=float_range("intensity"),
            contrast=float_range("contrast"),
            saturation_threshold=float_range("saturationThreshold"),
        )

    def set_picture_adjustment(self, hsic: HSIC) -> None:
        config = {
            "flags": 0,
            "data": {
                "hue": int(hsic.hue),
                "saturation": float(hsic.saturation),
                "intensity": float(hsic.intensity),
                "contrast": float(hsic.contrast),
                "saturationThreshold": float(hsic.saturation_threshold),
            },
        }
        self._controller.set_global_pa_config(self._handle, DISPLAY_ID, 1, config)

    def get_picture_adjustment(self) -> HSIC:
        _enable, config = self._controller.get_global_pa_config(self._handle, DISPLAY_ID)
        data = _field(config, "data")
        return HSIC(
            hue=int(_field(data, "hue")),
            saturation=float(_field(data, "saturation")),
            intensity=float(_field(data, "intensity")),
            contrast=float(_field(data, "contrast")),
            saturation_threshold=float(_field(data, "saturationThreshold")),
        )

    def get_default_picture_adjustment(self) -> HSIC:
        return self._default_picture_adjustment

    def has_feature(self, feature: Feature) -> bool:
        if feature is Feature.ADAPTIVE_BACKLIGHT:
            return self._foss_enabled
        if feature is Feature.DISPLAY_MODES:
            feature_id = FEATURE_VER_SW_SAVEMODES_API
        elif feature is Feature.PICTURE_ADJUSTMENT:
            feature_id = FEATURE_VER_SW_PA_API
        else:
            return False

        try:
            version, _flags = self._controller.get_feature_version(self._handle, feature_id)
        except ControllerError:
            return False
        if all(part <= 0 for part in _version_parts(version)):
            return False

        if feature is Feature.DISPLAY_MODES:
            return self._num_display_modes() > 0
        try:
            return self.get_picture_adjustment_ranges().is_valid()
        except ControllerError:
            return False