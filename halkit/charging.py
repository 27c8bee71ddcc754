"""Charging control through sysfs nodes: toggle, bypass and deadline."""

from __future__ import annotations

import logging
import os
import time
from collections.abc import Sequence
from dataclasses import dataclass
from enum import IntFlag
from typing import TextIO

log = logging.getLogger("vendor.lineage.health-service.default")


@dataclass(frozen=True)
class ChargingEnabledNode:
    """A sysfs file and the values meaning charging on and off."""

    path: str
    value_true: str
    value_false: str


DEFAULT_ENABLED_NODES: tuple[ChargingEnabledNode, ...] = (
    ChargingEnabledNode("/sys/class/power_supply/battery/battery_charging_enabled", "1", "0"),
    ChargingEnabledNode("/sys/class/power_supply/battery/charging_enabled", "1", "0"),
    ChargingEnabledNode("/sys/class/power_supply/battery/input_suspend", "0", "1"),
    ChargingEnabledNode("/sys/class/qcom-battery/input_suspend", "0", "1"),
)

DEFAULT_DEADLINE_NODES: tuple[str, ...] = (
    "/sys/class/power_supply/battery/charge_deadline",
)


class SupportedMode(IntFlag):
    """Charging control features the device offers."""

    NONE = 0
    TOGGLE = 1
    BYPASS = 2
    DEADLINE = 4


class IllegalStateError(RuntimeError):
    """A charging node could not be read, written or understood."""


class UnsupportedOperationError(NotImplementedError):
    """The requested feature is not configured."""


def _wait_for(candidates: Sequence, path_of, poll_interval: float):
    """Return the first candidate whose path is readable and writable, waiting if none is."""
    if not candidates:
        raise ValueError("no candidate nodes given")
    while True:
        for candidate in candidates:
            path = path_of(candidate)
            if os.access(path, os.R_OK | os.W_OK):
                return candidate
            log.warning("Failed to access() file %s", path)
            time.sleep(poll_interval)


class ChargingControl:
    """Charging control over the first usable node of each configured kind.

    ``enabled_nodes`` turns on toggle support and ``deadline_nodes``
    deadline support; construction waits until one node of each
    configured kind is readable and writable.
    """

    def __init__(
        self,
        enabled_nodes: Sequence[ChargingEnabledNode] | None = None,
        deadline_nodes: Sequence[str] | None = None,
        *,
        bypass: bool = False,
        poll_interval: float = 0.1,
    ) -> None:
        self.bypass = bypass
        self.enabled_node: ChargingEnabledNode | None = None
        self.deadline_node: str | None = None
        if enabled_nodes is not None:
            self.enabled_node = _wait_for(enabled_nodes, lambda n: n.path, poll_interval)
        if deadline_nodes is not None:
            self.deadline_node = _wait_for(deadline_nodes, lambda p: p, poll_interval)

    def _require_toggle(self) -> ChargingEnabledNode:
        if self.enabled_node is None:
            raise UnsupportedOperationError("charging toggle is not supported")
        return self.enabled_node

    def get_charging_enabled(self) -> bool:
        node = self._require_toggle()
        try:
            with open(node.path, encoding="utf-8") as handle:
                content = handle.read().strip()
        except OSError as exc:
            log.error("Failed to read current charging enabled value")
            raise IllegalStateError("failed to read charging enabled node") from exc
        if content == node.value_true:
            return True
        if content == node.value_false:
            return False
        log.error("Unknown value %s", content)
        raise IllegalStateError(f"unknown value {content!r}")

    def set_charging_enabled(self, enabled: bool) -> None:
        node = self._require_toggle()
        value = node.value_true if enabled else node.value_false
        try:
            with open(node.path, "w", encoding="utf-8") as handle:
                handle.write(value)
        except OSError as exc:
            log.error("Failed to write to charging enable node: %s", exc.strerror)
            raise IllegalStateError("failed to write charging enabled node") from exc

    def set_charging_deadline(self, deadline: int) -> None:
        if self.deadline_node is None:
            raise UnsupportedOperationError("charging deadline is not supported")
        try:
            with open(self.deadline_node, "w", encoding="utf-8") as handle:
                handle.write(str(int(deadline)))
        except OSError as exc:
            log.error("Failed to write to charging deadline node: %s", exc.strerror)
            raise IllegalStateError("failed to write charging deadline node") from exc

    def get_supported_mode(self) -> SupportedMode:
        mode = SupportedMode.NONE
        if self.enabled_node is not None:
            mode |= SupportedMode.TOGGLE
        if self.bypass:
            mode |= SupportedMode.BYPASS
        if self.deadline_node is not None:
            mode |= SupportedMode.DEADLINE
        return mode

    def dump(self, stream: TextIO) -> None:
        """Write a short description of the selected nodes and state."""
        if self.enabled_node is not None:
            try:
                enabled = self.get_charging_enabled()
            except IllegalStateError:
                enabled = False
            stream.write(f"Charging control node selected: {self.enabled_node.path}\n")
            stream.write(f"Charging enabled: {'true' if enabled else 'false'}\n")
        if self.deadline_node is not None:
            stream.write(f"Charging deadline node selected: {self.deadline_node}\n")
        stream.write(f"Charging control supported mode: {int(self.get_supported_mode())}\n")