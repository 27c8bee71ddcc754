"""Fastboot HAL: partition types, device variant and OEM commands.

Two flavours are offered. ``Fastboot`` reports failures as a
``FastbootResult`` next to the value. ``AidlFastboot`` returns the value
and raises ``FastbootError`` on failure.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum

OEM_GET_PROP = "getprop"


class Status(Enum):
    """Outcome of a fastboot HAL request."""

    SUCCESS = "success"
    NOT_SUPPORTED = "not_supported"
    INVALID_ARGUMENT = "invalid_argument"
    FAILURE_UNKNOWN = "failure_unknown"


class FileSystemType(Enum):
    """File system reported for a partition."""

    RAW = "raw"


@dataclass(frozen=True)
class FastbootResult:
    """Status of a request together with a human-readable message."""

    status: Status
    message: str = ""

    @property
    def ok(self) -> bool:
        return self.status is Status.SUCCESS


_OK = FastbootResult(Status.SUCCESS, "")


class FastbootError(Exception):
    """A fastboot request failed."""

    def __init__(self, status: Status, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


def get_prop(args: Sequence[str], properties: Mapping[str, str]) -> FastbootResult:
    """Look up the property named by the first argument.

    An unset property and one set to the empty string are both reported
    as failures.
    """
    if not args:
        return FastbootResult(Status.INVALID_ARGUMENT, "Property unspecified")
    name = args[0]
    value = properties.get(name, "")
    if value:
        return FastbootResult(Status.SUCCESS, f"{name}: {value}")
    return FastbootResult(Status.FAILURE_UNKNOWN, "Unable to get property")


class _FastbootBase:
    def __init__(self, properties: Mapping[str, str] | None = None) -> None:
        self.properties: Mapping[str, str] = {} if properties is None else properties

    def _oem_handlers(self) -> dict[str, Callable[[Sequence[str]], FastbootResult]]:
        return {OEM_GET_PROP: lambda args: get_prop(args, self.properties)}


class Fastboot(_FastbootBase):
    """Fastboot HAL returning each value alongside a ``FastbootResult``."""

    def get_partition_type(self, partition_name: str) -> tuple[FileSystemType, FastbootResult]:
        return FileSystemType.RAW, _OK

    def do_oem_command(self, oem_cmd: str) -> FastbootResult:
        """Run ``oem <command> [args...]``."""
        args = oem_cmd.split(" ")
        if len(args) < 2:
            return FastbootResult(Status.INVALID_ARGUMENT, "Invalid OEM command")
        handler = self._oem_handlers().get(args[1])
        if handler is None:
            return FastbootResult(Status.FAILURE_UNKNOWN, "Unknown OEM command")
        return handler(args[2:])

    def get_variant(self) -> tuple[str, FastbootResult]:
        return "NA", _OK

    def get_off_mode_charge_state(self) -> tuple[bool, FastbootResult]:
        return False, _OK

    def get_battery_voltage_flashing_threshold(self) -> tuple[int, FastbootResult]:
        return 0, _OK

    def do_oem_specific_erase(self) -> FastbootResult:
        return FastbootResult(Status.NOT_SUPPORTED, "Command not supported")


class AidlFastboot(_FastbootBase):
    """Fastboot HAL returning plain values and raising ``FastbootError``."""

    def get_partition_type(self, partition_name: str) -> FileSystemType:
        if not partition_name:
            raise FastbootError(Status.INVALID_ARGUMENT, "Invalid partition name")
        return FileSystemType.RAW

    def do_oem_command(self, oem_cmd: str) -> str:
        """Run ``oem <command> [args...]``; a successful getprop yields ''."""
        args = oem_cmd.split(" ")
        if len(args) < 2:
            raise FastbootError(Status.INVALID_ARGUMENT, "Invalid OEM command")
        handler = self._oem_handlers().get(args[1])
        if handler is None:
            raise FastbootError(Status.FAILURE_UNKNOWN, "Unknown OEM Command")
        result = handler(args[2:])
        if not result.ok:
            raise FastbootError(result.status, result.message)
        return ""

    def get_variant(self) -> str:
        return "NA"

    def get_off_mode_charge_state(self) -> bool:
        return False

    def get_battery_voltage_flashing_threshold(self) -> int:
        return 0

    def do_oem_specific_erase(self) -> None:
        raise FastbootError(
            Status.NOT_SUPPORTED, "Command not supported in default implementation"
        )