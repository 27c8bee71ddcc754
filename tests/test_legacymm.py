import pytest

from halkit.display_controller import ControllerError, LegacyMMController
from halkit.display_types import HSIC, Feature
from halkit.display_utils import ModeStorage
from halkit.legacymm import PA_CONFIG_FLAGS, LegacyMM

_NAMES = (
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

PA_MAX = {"hue": 180, "saturation": 100, "intensity": 100, "contrast": 100, "saturationThreshold": 50}
PA_MIN = {"hue": -180, "saturation": -100, "intensity": -100, "contrast": -100, "saturationThreshold": 0}


class FakeMM:
    def __init__(self, modes=((0, "standard"), (1, "vivid")), default=1, active=0,
                 supported=(0, 1, 4), balance_range=(-5, 5)):
        self.modes = [{"id": i, "name": n} for i, n in modes]
        self.default = default
        self.active = active
        self.supported_ids = set(supported)
        self.balance_range = balance_range
        self.balance = 2
        self.init_calls = []
        self.failing = set()
        self.pa_config = {"flags": 0, "data": {"hue": 1, "saturation": 2, "intensity": 3,
                                               "contrast": 4, "saturationThreshold": 5}}

    def library(self):
        return {f"disp_api_{name}": self._wrap(name) for name in _NAMES}

    def _wrap(self, name):
        method = getattr(self, name)

        def call(*args):
            if name in self.failing:
                return 5
            return method(*args)

        return call

    def init(self, value):
        self.init_calls.append(value)
        return 0

    def get_color_balance_range(self, disp):
        low, high = self.balance_range
        return 0, {"max": high, "min": low}

    def set_color_balance(self, disp, warmness):
        self.balance = warmness
        return 0

    def get_color_balance(self, disp):
        return 0, self.balance

    def get_num_display_modes(self, disp, mode_type):
        return 0, len(self.modes)

    def get_display_modes(self, disp, mode_type, count):
        return 0, list(self.modes)

    def get_active_display_mode(self, disp):
        return 0, self.active, 0

    def set_active_display_mode(self, disp, mode_id):
        self.active = mode_id
        return 0

    def set_default_display_mode(self, disp, mode_id):
        self.default = mode_id
        return 0

    def get_default_display_mode(self, disp):
        return 0, self.default

    def get_pa_range(self, disp):
        return 0, {"max": dict(PA_MAX), "min": dict(PA_MIN)}

    def get_pa_config(self, disp):
        return 0, {"flags": self.pa_config["flags"], "data": dict(self.pa_config["data"])}

    def set_pa_config(self, disp, cfg):
        self.pa_config = cfg
        return 0

    def supported(self, disp, feature_id):
        return 1 if feature_id in self.supported_ids else 0


def make(fake, tmp_path):
    return LegacyMM(LegacyMMController(fake.library()), ModeStorage(tmp_path))


def test_init_and_close(tmp_path):
    fake = FakeMM()
    backend = make(fake, tmp_path)
    assert fake.init_calls == [0]
    backend.close()
    backend.close()
    assert fake.init_calls == [0, 1]


def test_context_manager_closes(tmp_path):
    fake = FakeMM()
    with make(fake, tmp_path):
        pass
    assert fake.init_calls == [0, 1]


def test_construction_saves_and_applies_initial_mode(tmp_path):
    fake = FakeMM(default=1, active=0)
    make(fake, tmp_path)
    assert ModeStorage(tmp_path).read_initial_mode_id() == 1
    assert fake.active == 1


def test_local_mode_takes_priority(tmp_path):
    ModeStorage(tmp_path).write_local_mode_id(0)
    fake = FakeMM(default=1, active=1)
    backend = make(fake, tmp_path)
    assert fake.active == 0
    assert backend.get_default_display_mode().id == 0


def test_get_display_modes(tmp_path):
    backend = make(FakeMM(), tmp_path)
    modes = backend.get_display_modes()
    assert [(m.id, m.name, m.priv_flags) for m in modes] == [(0, "standard", 0), (1, "vivid", 0)]


def test_byte_names_are_decoded(tmp_path):
    backend = make(FakeMM(modes=((3, b"cinema\0junk"),), default=3), tmp_path)
    assert [m.name for m in backend.get_display_modes()] == ["cinema"]


def test_current_display_mode(tmp_path):
    fake = FakeMM()
    backend = make(fake, tmp_path)
    assert backend.get_current_display_mode().id == fake.active


@pytest.mark.parametrize(
    "feature", [Feature.DISPLAY_MODES, Feature.COLOR_BALANCE, Feature.PICTURE_ADJUSTMENT]
)
def test_supported_features(tmp_path, feature):
    assert make(FakeMM(), tmp_path).has_feature(feature) is True


@pytest.mark.parametrize("feature", [Feature.ADAPTIVE_BACKLIGHT, Feature.OUTDOOR_MODE])
def test_unmapped_features(tmp_path, feature):
    assert make(FakeMM(), tmp_path).has_feature(feature) is False


def test_unsupported_feature(tmp_path):
    backend = make(FakeMM(supported=()), tmp_path)
    assert backend.has_feature(Feature.DISPLAY_MODES) is False
    assert backend.has_feature(Feature.PICTURE_ADJUSTMENT) is False


def test_color_balance_needs_non_zero_range(tmp_path):
    assert make(FakeMM(balance_range=(0, 0)), tmp_path).has_feature(Feature.COLOR_BALANCE) is False


def test_color_balance_needs_display_modes(tmp_path):
    assert make(FakeMM(modes=()), tmp_path).has_feature(Feature.COLOR_BALANCE) is False


def test_color_balance_range(tmp_path):
    r = make(FakeMM(balance_range=(-5, 5)), tmp_path).get_color_balance_range()
    assert (r.min, r.max) == (-5, 5)


def test_color_balance_get_and_set(tmp_path):
    fake = FakeMM()
    backend = make(fake, tmp_path)
    backend.set_color_balance(4)
    assert fake.balance == 4
    assert backend.get_color_balance() == 4
    fake.failing.add("get_color_balance")
    assert backend.get_color_balance() == 0


def test_picture_adjustment_ranges(tmp_path):
    ranges = make(FakeMM(), tmp_path).get_picture_adjustment_ranges()
    assert (ranges.hue.min, ranges.hue.max, ranges.hue.step) == (PA_MIN["hue"], PA_MAX["hue"], 1)
    assert ranges.saturation_threshold.max == PA_MAX["saturationThreshold"]
    assert ranges.contrast.step == 1
    assert ranges.is_valid()


def test_get_picture_adjustment(tmp_path):
    fake = FakeMM()
    backend = make(fake, tmp_path)
    data = fake.pa_config["data"]
    assert backend.get_picture_adjustment() == HSIC(
        data["hue"], data["saturation"], data["intensity"], data["contrast"],
        data["saturationThreshold"],
    )


def test_set_picture_adjustment(tmp_path):
    fake = FakeMM()
    backend = make(fake, tmp_path)
    backend.set_picture_adjustment(HSIC(10, 20.0, 30.0, 40.0, 50.0))
    assert fake.pa_config == {
        "flags": PA_CONFIG_FLAGS,
        "data": {"hue": 10, "saturation": 20, "intensity": 30, "contrast": 40,
                 "saturationThreshold": 50},
    }


def test_set_unknown_display_mode(tmp_path):
    with pytest.raises(ValueError):
        make(FakeMM(), tmp_path).set_display_mode(9, False)


def test_set_display_mode_makes_default_and_updates_adjustment(tmp_path):
    fake = FakeMM(default=1)
    backend = make(fake, tmp_path)
    fake.pa_config["data"] = {"hue": 7, "saturation": 8, "intensity": 9, "contrast": 10,
                              "saturationThreshold": 11}
    backend.set_display_mode(0, True)
    assert fake.active == 0
    assert fake.default == 0
    assert backend.get_default_picture_adjustment() == HSIC(7, 8.0, 9.0, 10.0, 11.0)


def test_set_current_mode_is_noop(tmp_path):
    fake = FakeMM(default=1)
    backend = make(fake, tmp_path)
    fake.failing.add("set_active_display_mode")
    backend.set_display_mode(1, False)
    with pytest.raises(ValueError):
        backend.set_display_mode(0, False)
    assert fake.active == 1


def test_missing_library(tmp_path):
    backend = LegacyMM(LegacyMMController(None), ModeStorage(tmp_path))
    assert backend.has_feature(Feature.DISPLAY_MODES) is False
    assert backend.get_display_modes() == []
    assert backend.get_current_display_mode() is None
    with pytest.raises(ControllerError) as info:
        backend.get_color_balance_range()
    assert info.value.code == -1