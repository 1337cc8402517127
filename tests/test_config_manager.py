"""
YAML configuration loading, validation and fallback.
"""

import textwrap

import pytest

from nyancat.exceptions import ConfigError
from nyancat.managers import ConfigManager
from nyancat.models.config import AppConfig, TelnetSettings


def write_yaml(path, text):
    path.write_text(textwrap.dedent(text), encoding="utf-8")
    return path


def test_packaged_config_matches_defaults():
    manager = ConfigManager()
    config = manager.load()

    assert not manager.used_fallback
    assert config == AppConfig()


def test_values_from_file(tmp_path):
    path = write_yaml(tmp_path / "nyancat.yaml", """
        animation:
          tick_interval_ms: 50
          frame_limit: 200
        display:
          show_counter: false
        telnet:
          port: 2323
          negotiation_timeout: 1
        http:
          port: 8080
        logging:
          level: DEBUG
    """)

    config = ConfigManager(path).load()

    assert config.animation.tick_interval == 0.05
    assert config.animation.frame_limit == 200
    assert config.display.show_counter is False
    assert config.display.clear_screen is True
    assert config.telnet.port == 2323
    assert config.telnet.negotiation_timeout == 1.0
    assert config.telnet.host == "0.0.0.0"
    assert config.http.port == 8080
    assert config.logging.level == "DEBUG"


def test_unknown_keys_are_ignored(tmp_path):
    path = write_yaml(tmp_path / "nyancat.yaml", """
        telnet:
          port: 2323
          colour: rainbow
        sound:
          enabled: true
    """)

    manager = ConfigManager(path)
    config = manager.load()

    assert not manager.used_fallback
    assert config.telnet.port == 2323


def test_empty_file_gives_defaults(tmp_path):
    path = write_yaml(tmp_path / "empty.yaml", "")

    assert ConfigManager(path).load() == AppConfig()


@pytest.mark.parametrize("text", [
    "telnet:\n  port: twenty-three\n",
    "telnet:\n  port: -1\n",
    "display:\n  show_counter: 1\n",
    "animation:\n  tick_interval_ms: true\n",
    "http: [1, 2]\n",
    "- just\n- a list\n",
])
def test_invalid_values_fall_back_to_factory_defaults(tmp_path, text):
    path = write_yaml(tmp_path / "bad.yaml", text)

    manager = ConfigManager(path)
    config = manager.load()

    assert manager.used_fallback
    assert config == AppConfig()


def test_yaml_syntax_error_falls_back(tmp_path):
    path = write_yaml(tmp_path / "broken.yaml", "telnet: [unclosed\n")

    manager = ConfigManager(path)
    manager.load()

    assert manager.used_fallback


def test_missing_file_falls_back(tmp_path):
    manager = ConfigManager(tmp_path / "nope.yaml")

    assert manager.load() == AppConfig()
    assert manager.used_fallback


def test_from_dict_reports_warnings():
    config, warnings = AppConfig.from_dict({"telnet": {"port": 99, "baud": 9600}, "extra": {}})

    assert config.telnet == TelnetSettings(port=99)
    assert warnings == ["Unknown key 'telnet.baud'", "Unknown section 'extra'"]


def test_from_dict_rejects_null_for_required_value():
    with pytest.raises(ConfigError):
        AppConfig.from_dict({"http": {"host": None}})


def test_overrides_only_touch_given_values():
    config = AppConfig().with_overrides(frame_limit=10, show_counter=False, telnet_port=2323)

    assert config.animation.frame_limit == 10
    assert config.display.show_counter is False
    assert config.display.clear_screen is True
    assert config.telnet.port == 2323
    assert config.http == AppConfig().http


def test_config_is_immutable():
    config = AppConfig()

    with pytest.raises(AttributeError):
        config.telnet.port = 1
