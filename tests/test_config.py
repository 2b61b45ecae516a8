import pytest

from config import ConfigurationManager, get_config


def test_defaults_come_from_settings_file():
    assert get_config("schema.variant") == "cms1500"
    assert get_config("extraction.quorum") == 3


def test_missing_keys_fall_back_to_default():
    assert get_config("extraction.nope", 7) == 7
    assert get_config("schema.variant.deeper", "x") == "x"


def test_custom_settings_file(tmp_path):
    settings = tmp_path / "settings.yaml"
    settings.write_text("schema:\n  variant: cms1500_legacy\npaths:\n  output_dir: out\n", encoding="utf-8")

    ConfigurationManager(str(settings))

    assert get_config("schema.variant") == "cms1500_legacy"
    assert get_config("paths.output_dir").endswith("out")
    assert get_config("paths.output_dir") != "out"


def test_settings_file_must_hold_a_mapping(tmp_path):
    settings = tmp_path / "settings.yaml"
    settings.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError):
        ConfigurationManager(str(settings))


def test_missing_settings_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ConfigurationManager(str(tmp_path / "absent.yaml"))
