from notedesk.settings import get_bool, get_int, get_str


class FakeSettings:
    def __init__(self, values):
        self.values = values

    def value(self, key, default=None):
        return self.values.get(key, default)


class BrokenSettings:
    def value(self, key, default=None):
        raise RuntimeError("settings backend gone")


def test_get_str():
    s = FakeSettings({"k": 5})
    assert get_str(s, "k", "d") == "5"
    assert get_str(s, "missing", "d") == "d"
    assert get_str(BrokenSettings(), "k", "d") == "d"


def test_get_int():
    s = FakeSettings({"k": "12", "bad": "x"})
    assert get_int(s, "k", 0) == 12
    assert get_int(s, "bad", 3) == 3


def test_get_bool_accepts_qsettings_strings():
    s = FakeSettings({"t": "true", "f": "false", "one": 1, "real": True, "junk": "maybe"})
    assert get_bool(s, "t", False) is True
    assert get_bool(s, "f", True) is False
    assert get_bool(s, "one", False) is True
    assert get_bool(s, "real", False) is True
    assert get_bool(s, "junk", True) is True
    assert get_bool(BrokenSettings(), "t", False) is False


def test_left_pane_width_survives_ini_round_trip(tmp_path):
    from PySide6.QtCore import QSettings

    from notedesk.settings import SettingsKeys, safe_set_setting

    path = str(tmp_path / "notedesk.ini")
    writer = QSettings(path, QSettings.IniFormat)
    safe_set_setting(writer, SettingsKeys.UI_LEFT_WIDTH, 240)
    writer.sync()

    # the ini backend reads numbers back as strings
    assert get_int(QSettings(path, QSettings.IniFormat), SettingsKeys.UI_LEFT_WIDTH, 0) == 240
