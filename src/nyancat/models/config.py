"""
Configuration models

Each YAML section maps onto one frozen dataclass. AppConfig.from_dict() does
the type checking; ConfigManager owns the file handling.
"""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple

from nyancat.exceptions import ConfigError


@dataclass(frozen=True)
class AnimationSettings:
    tick_interval_ms: int = 100
    frame_limit: Optional[int] = None

    @property
    def tick_interval(self) -> float:
        """Tick interval in seconds"""
        return self.tick_interval_ms / 1000.0


@dataclass(frozen=True)
class DisplaySettings:
    show_counter: bool = True
    clear_screen: bool = True


@dataclass(frozen=True)
class TelnetSettings:
    host: str = "0.0.0.0"
    port: int = 23
    default_width: int = 80
    default_height: int = 24
    negotiation_attempts: int = 5
    negotiation_timeout: float = 2.0
    line_ending: str = "\r\n"


@dataclass(frozen=True)
class HttpSettings:
    host: str = "127.0.0.1"
    port: int = 3000


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    use_colors: bool = True


SECTIONS = {
    "animation": AnimationSettings,
    "display": DisplaySettings,
    "telnet": TelnetSettings,
    "http": HttpSettings,
    "logging": LoggingSettings,
}


def _check_type(section: str, key: str, value: Any, default: Any) -> Any:
    """Validate a single value against the type of its dataclass default."""
    if value is None:
        if default is None:
            return None
        raise ConfigError(f"{section}.{key} must not be null")

    if default is None:
        # Only frame_limit is nullable and it is an int
        expected: Tuple[type, ...] = (int,)
    elif isinstance(default, bool):
        expected = (bool,)
    elif isinstance(default, float):
        expected = (int, float)
    else:
        expected = (type(default),)

    # bool is an int subclass; reject it for numeric fields
    if isinstance(value, bool) and bool not in expected:
        raise ConfigError(f"{section}.{key} must be {expected[0].__name__}, got bool")
    if not isinstance(value, expected):
        raise ConfigError(
            f"{section}.{key} must be {expected[0].__name__}, got {type(value).__name__}"
        )
    if isinstance(value, int) and not isinstance(value, bool) and value < 0:
        raise ConfigError(f"{section}.{key} must not be negative")
    return float(value) if float in expected else value


@dataclass(frozen=True)
class AppConfig:
    """Complete application configuration"""
    animation: AnimationSettings = field(default_factory=AnimationSettings)
    display: DisplaySettings = field(default_factory=DisplaySettings)
    telnet: TelnetSettings = field(default_factory=TelnetSettings)
    http: HttpSettings = field(default_factory=HttpSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Tuple["AppConfig", List[str]]:
        """
        Build config from parsed YAML.

        Returns:
            (config, warnings) - warnings name every ignored unknown key

        Raises:
            ConfigError: on a value of the wrong type
        """
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError("Top-level configuration must be a mapping")

        warnings: List[str] = []
        sections: Dict[str, Any] = {}

        for name, raw in data.items():
            settings_cls = SECTIONS.get(name)
            if settings_cls is None:
                warnings.append(f"Unknown section '{name}'")
                continue
            if raw is None:
                continue
            if not isinstance(raw, dict):
                raise ConfigError(f"Section '{name}' must be a mapping")

            defaults = settings_cls()
            known = {f.name for f in fields(settings_cls)}
            values = {}
            for key, value in raw.items():
                if key not in known:
                    warnings.append(f"Unknown key '{name}.{key}'")
                    continue
                values[key] = _check_type(name, key, value, getattr(defaults, key))
            sections[name] = settings_cls(**values)

        return cls(**sections), warnings

    def with_overrides(
        self,
        *,
        frame_limit: Optional[int] = None,
        show_counter: Optional[bool] = None,
        clear_screen: Optional[bool] = None,
        telnet_host: Optional[str] = None,
        telnet_port: Optional[int] = None,
        http_host: Optional[str] = None,
        http_port: Optional[int] = None,
    ) -> "AppConfig":
        """Return a copy with every non-None override applied (CLI flags)."""
        animation = self.animation
        if frame_limit is not None:
            animation = replace(animation, frame_limit=frame_limit)

        display = self.display
        if show_counter is not None:
            display = replace(display, show_counter=show_counter)
        if clear_screen is not None:
            display = replace(display, clear_screen=clear_screen)

        telnet = self.telnet
        if telnet_host is not None:
            telnet = replace(telnet, host=telnet_host)
        if telnet_port is not None:
            telnet = replace(telnet, port=telnet_port)

        http = self.http
        if http_host is not None:
            http = replace(http, host=http_host)
        if http_port is not None:
            http = replace(http, port=http_port)

        return AppConfig(
            animation=animation,
            display=display,
            telnet=telnet,
            http=http,
            logging=self.logging,
        )
