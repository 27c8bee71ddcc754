# halkit

halkit holds the logic behind a small set of device services: a fastboot
service, charging control through sysfs-style files, and a display colour
service. It also has helpers for modified UTF-8 and binary128 comparison.
Every part takes its hardware access as a parameter: file paths, a property
mapping, or the display library's entry points as callables. This means all
of it can run and be tested without a device.

## Modules

- `halkit.jstring` converts between UTF-16 code units, given as lists of
  ints, and the modified UTF-8 used by JNI, given as bytes:
  - `strnlen16to8`, `strncpy16to8` and `strndup16to8` encode. Each unit is
    encoded on its own. An embedded NUL becomes `0xc0 0x80`.
  - `strlen8to16`, `strcpy8to16` and `strdup8to16` decode up to the first
    NUL byte. Invalid sequences become U+FFFD. Code points above U+FFFF
    become surrogate pairs.
  - `starts_with` compares NUL-terminated strings.
  - `strncpy16` copies at most `n` units. It keeps only the low byte of each
    unit and stops at a zero byte.
- `halkit.quadfloat` has `lttf2(a_bits, b_bits)`. It compares two IEEE
  binary128 values given as unsigned 128-bit integers and returns a
  `LeResult`. NaN operands give `LeResult.UNORDERED`, which has the same
  value as `GREATER`.
- `halkit.fastboot` provides the fastboot service:
  - `Fastboot` returns each value together with a `FastbootResult`, a
    `Status` and a message.
  - `AidlFastboot` returns plain values and raises `FastbootError` on
    failure.
  - Both look up properties in the `properties` mapping given to them.
  - The only OEM command is `getprop`. It is also available on its own as
    `get_prop(args, properties)`.
- `halkit.charging` provides `ChargingControl`:
  - It uses the first readable and writable node out of `enabled_nodes`
    (`ChargingEnabledNode` values) and the first out of `deadline_nodes`.
  - While no node of a configured kind is usable, construction keeps
    polling.
  - `get_supported_mode()` returns a `SupportedMode` flag.
  - `dump(stream)` writes a short status report.
  - Failures raise `IllegalStateError`. Features that are not configured
    raise `UnsupportedOperationError`.
- `halkit.display_controller` has `LegacyMMController` and `SDMController`:
  - You build either one from a mapping, or an object, that holds
    `disp_api_*` callables.
  - Entry points that are missing are logged. Calling one raises
    `ControllerError` with code `-1`.
  - A non-zero status also raises `ControllerError`.
- `halkit.display_types` has the shared value types: `Feature`, `Range`,
  `FloatRange`, `HSIC`, `HSICRanges` (see `is_valid()`), `DispMode` and
  `DisplayMode`. It also has `is_non_zero` and the abstract `ColorBackend`.
- `halkit.display_utils` has these helpers:
  - `read_int` and `write_int` read and write integer files.
  - `send_dpps_command` sends a command over a Unix stream socket.
  - `ModeStorage` keeps the local and initial display mode ids in a
    directory.
- `halkit.legacymm.LegacyMM` and `halkit.sdm.SDM` are colour backends over
  those two controllers. Besides the modes the controller reports, `SDM`
  offers sRGB and DCI-P3 modes through writable sysfs files.
- `halkit.color.Color` fronts a backend:
  - It creates the backend on first use from a factory.
  - It records which `Feature`s the backend has.
  - It returns neutral values for features the backend lacks.
  - When the backend fails, it drops the backend, so that the next call
    connects again.

## Install

```
pip install .
pip install ".[test]"   # with pytest
```

## Examples

```python
from halkit.jstring import strndup16to8, strdup8to16

strndup16to8([0x48, 0x00, 0x20AC], 3)  # b"H\xc0\x80\xe2\x82\xac"
strdup8to16(b"\xf0\x9f\x98\x80")       # [0xD83D, 0xDE00]
```

```python
from halkit.fastboot import Fastboot, Status

fb = Fastboot(properties={"ro.product.name": "demo"})
result = fb.do_oem_command("oem getprop ro.product.name")
result.status is Status.SUCCESS  # True
result.message                   # 'ro.product.name: demo'
```

## What it does not do

halkit has no service process or command line. It does not register with
any service manager, and it does not read a system property store, since
properties are passed in as mappings. It does not load the vendor display
libraries itself: you hand each controller the entry points as callables,
or `None` when they are not available.

## Tests

```
pytest
```