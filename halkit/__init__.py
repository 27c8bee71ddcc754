"""Device service logic: fastboot, charging control, display colour tuning and string helpers."""

__version__ = "0.1.0"

__all__ = [
    "jstring",
    "quadfloat",
    "fastboot",
    "charging",
    "display_controller",
    "display_types",
    "display_utils",
    "legacymm",
    "sdm",
    "color",
]