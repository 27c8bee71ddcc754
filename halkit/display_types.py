"""Value types shared by the display colour backends, and the backend interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntFlag
from typing import Union

from .display_controller import ControllerError


class Feature(IntFlag):
    """Display colour features a backend may offer."""

    DISPLAY_MODES = 0x1
    COLOR_BALANCE = 0x2
    OUTDOOR_MODE = 0x4
    ADAPTIVE_BACKLIGHT = 0x8
    PICTURE_ADJUSTMENT = 0x10
    MAX = PICTURE_ADJUSTMENT


# Exceptions a backend raises when an operation fails.
BACKEND_ERRORS: tuple[type[Exception], ...] = (
    ControllerError,
    OSError,
    ValueError,
    NotImplementedError,
)


@dataclass(frozen=True)
class Range:
    """An integer range with a step."""

    min: int = 0
    max: int = 0
    step: int = 0


@dataclass(frozen=True)
class FloatRange:
    """A floating-point range with a step."""

    min: float = 0.0
    max: float = 0.0
    step: float = 0.0


def is_non_zero(r: Union[Range, FloatRange]) -> bool:
    """Tell whether either bound of a range differs from zero."""
    return r.min != 0 or r.max != 0


@dataclass(frozen=True)
class HSIC:
    """Picture adjustment: hue, saturation, intensity, contrast and saturation threshold."""

    hue: int = 0
    saturation: float = 0.0
    intensity: float = 0.0
    contrast: float = 0.0
    saturation_threshold: float = 0.0


@dataclass(frozen=True)
class HSICRanges:
    """The allowed range of each picture adjustment component."""

    hue: Range = field(default_factory=Range)
    saturation: FloatRange = field(default_factory=FloatRange)
    intensity: FloatRange = field(default_factory=FloatRange)
    contrast: FloatRange = field(default_factory=FloatRange)
    saturation_threshold: FloatRange = field(default_factory=FloatRange)

    def is_valid(self) -> bool:
        """Hue, saturation, intensity and contrast must all be non-zero ranges."""
        return (
            is_non_zero(self.hue)
            and is_non_zero(self.saturation)
            and is_non_zero(self.intensity)
            and is_non_zero(self.contrast)
        )


@dataclass
class DispMode:
    """A display mode as known to a backend, with backend-private data."""

    id: int = -1
    name: str = ""
    priv_flags: int = 0
    priv_data: str = ""


@dataclass(frozen=True)
class DisplayMode:
    """A display mode as reported to clients."""

    id: int = -1
    name: str = ""


class ColorBackend(ABC):
    """Interface of a display colour backend.

    Failing operations raise one of ``BACKEND_ERRORS``.
    """

    @abstractmethod
    def set_adaptive_backlight_enabled(self, enabled: bool) -> None: ...

    @abstractmethod
    def is_adaptive_backlight_enabled(self) -> bool: ...

    @abstractmethod
    def set_outdoor_mode_enabled(self, enabled: bool) -> None: ...

    @abstractmethod
    def is_outdoor_mode_enabled(self) -> bool: ...

    @abstractmethod
    def get_color_balance_range(self) -> Range: ...

    @abstractmethod
    def set_color_balance(self, balance: int) -> None: ...

    @abstractmethod
    def get_color_balance(self) -> int: ...

    @abstractmethod
    def get_display_modes(self) -> list[DispMode]: ...

    @abstractmethod
    def set_display_mode(self, mode_id: int, make_default: bool) -> None: ...

    @abstractmethod
    def get_current_display_mode(self) -> DispMode | None: ...

    @abstractmethod
    def get_default_display_mode(self) -> DispMode | None: ...

    @abstractmethod
    def get_picture_adjustment_ranges(self) -> HSICRanges: ...

    @abstractmethod
    def get_picture_adjustment(self) -> HSIC: ...

    @abstractmethod
    def get_default_picture_adjustment(self) -> HSIC: ...

    @abstractmethod
    def set_picture_adjustment(self, hsic: HSIC) -> None: ...

    @abstractmethod
    def has_feature(self, feature: Feature) -> bool: ...

    def close(self) -> None:
        """Release the backend; the default does nothing."""

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()