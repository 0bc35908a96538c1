"""Configuration models and loading."""

from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Mapping, Optional
from pathlib import Path
import yaml
import os
from dotenv import load_dotenv

from perfguard.utils.validation import (
    ValidationError,
    validate_positive,
    validate_non_negative,
    validate_selector,
    coerce_number,
    coerce_bool,
)


# Flat option keys accepted by PerformanceConfig.from_mapping. The camelCase
# names match the options object of the browser controller this replaces.
_OPTION_ALIASES: Dict[str, str] = {
    "minFPS": "min_fps",
    "fpsWindowDuration": "fps_window_ms",
    "fpsCheckDuration": "fps_window_ms",
    "longTaskThreshold": "long_task_threshold_ms",
    "longTaskTolerance": "long_task_tolerance",
    "recoveryCheckInterval": "recovery_check_interval_ms",
    "recoveryDuration": "recovery_duration_ms",
    "actuatorSelector": "actuator_selector",
    "videoSelector": "actuator_selector",
    "statsInterval": "stats_interval_ms",
}


@dataclass(frozen=True)
class PerformanceConfig:
    """Controller thresholds. Immutable per controller instance."""
    min_fps: float = 25.0
    fps_window_ms: float = 2000.0
    long_task_threshold_ms: float = 100.0
    long_task_tolerance: int = 3
    recovery_check_interval_ms: float = 3000.0
    recovery_duration_ms: float = 5000.0
    actuator_selector: Any = "video"  # passed as-is to the locator

    debug: bool = False
    stats_interval_ms: float = 10000.0

    @classmethod
    def from_mapping(cls, options: Optional[Mapping[str, Any]] = None) -> "PerformanceConfig":
        """Build a config from a flat key -> value mapping.

        Both the camelCase option names (``minFPS``, ``recoveryDuration``...)
        and the dataclass field names are accepted. Missing keys keep their
        defaults; unknown keys raise ValidationError.
        """
        if not options:
            return cls()

        known = {f.name: f for f in fields(cls)}
        values: Dict[str, Any] = {}

        for key, raw in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValidationError(f"Unknown performance option: {key}")

            if name == "actuator_selector":
                values[name] = raw
            elif name == "debug":
                values[name] = coerce_bool(raw)
            elif name == "long_task_tolerance":
                number = coerce_number(key, raw)
                if number != int(number):
                    raise ValidationError(f"{key} must be a whole number, got {raw!r}")
                values[name] = int(number)
            else:
                values[name] = coerce_number(key, raw)

        return cls(**values)

    def with_overrides(self, options: Mapping[str, Any]) -> "PerformanceConfig":
        """Return a copy with the given flat options applied."""
        overrides = PerformanceConfig.from_mapping(options)
        changed = {
            _OPTION_ALIASES.get(key, key): getattr(overrides, _OPTION_ALIASES.get(key, key))
            for key in options
        }
        return replace(self, **changed)


@dataclass
class HostConfig:
    """Host signal source configuration."""
    refresh_hz: float = 60.0
    stall_probe_interval_seconds: float = 0.05
    stall_min_report_ms: float = 50.0


@dataclass
class SystemConfig:
    """Main system configuration."""
    debug_mode: bool = False
    log_level: str = "INFO"
    log_dir: str = "data/logs"

    performance: PerformanceConfig = field(default_factory=PerformanceConfig)
    host: HostConfig = field(default_factory=HostConfig)


# Environment variable -> flat performance option
_ENV_OPTIONS = {
    "MIN_FPS": "min_fps",
    "FPS_WINDOW_MS": "fps_window_ms",
    "LONG_TASK_THRESHOLD_MS": "long_task_threshold_ms",
    "LONG_TASK_TOLERANCE": "long_task_tolerance",
    "RECOVERY_CHECK_INTERVAL_MS": "recovery_check_interval_ms",
    "RECOVERY_DURATION_MS": "recovery_duration_ms",
    "ACTUATOR_SELECTOR": "actuator_selector",
    "STATS_INTERVAL_MS": "stats_interval_ms",
}


def load_config(config_path: Optional[str] = None) -> SystemConfig:
    """Load configuration from environment and files.

    Precedence (lowest to highest): dataclass defaults, YAML file, environment.
    """
    load_dotenv()

    config = SystemConfig()

    # Load from YAML if exists
    yaml_path = Path(config_path or os.getenv("PERFGUARD_CONFIG", "config/perfguard.yaml"))
    if yaml_path.exists():
        with open(yaml_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        config.debug_mode = coerce_bool(data.get("debug_mode", config.debug_mode))
        config.log_level = str(data.get("log_level", config.log_level))
        config.log_dir = str(data.get("log_dir", config.log_dir))

        if data.get("performance"):
            config.performance = config.performance.with_overrides(data["performance"])

        host = data.get("host") or {}
        for key in ("refresh_hz", "stall_probe_interval_seconds", "stall_min_report_ms"):
            if key in host:
                setattr(config.host, key, coerce_number(key, host[key]))

    # Load from environment
    config.debug_mode = coerce_bool(os.getenv("DEBUG_MODE", str(config.debug_mode)))
    config.log_level = os.getenv("LOG_LEVEL", config.log_level)
    config.log_dir = os.getenv("LOG_DIR", config.log_dir)

    env_options = {
        option: os.environ[name]
        for name, option in _ENV_OPTIONS.items()
        if name in os.environ
    }
    if config.debug_mode:
        env_options["debug"] = True
    if env_options:
        config.performance = config.performance.with_overrides(env_options)

    if "REFRESH_HZ" in os.environ:
        config.host.refresh_hz = coerce_number("REFRESH_HZ", os.environ["REFRESH_HZ"])

    return config


def validate_performance_config(config: PerformanceConfig) -> List[str]:
    """Validate controller thresholds and return errors."""
    errors = []

    for name in (
        "min_fps",
        "fps_window_ms",
        "long_task_threshold_ms",
        "long_task_tolerance",
        "recovery_check_interval_ms",
        "recovery_duration_ms",
    ):
        if not validate_positive(getattr(config, name)):
            errors.append(f"{name} must be greater than 0 (got {getattr(config, name)!r})")

    if not validate_non_negative(config.stats_interval_ms):
        errors.append("stats_interval_ms must be 0 (disabled) or positive")

    if not validate_selector(config.actuator_selector):
        errors.append("actuator_selector must not be empty")

    return errors


def validate_config(config: SystemConfig) -> List[str]:
    """Validate configuration and return errors."""
    errors = validate_performance_config(config.performance)

    if not validate_positive(config.host.refresh_hz):
        errors.append("refresh_hz must be greater than 0")

    if not validate_positive(config.host.stall_probe_interval_seconds):
        errors.append("stall_probe_interval_seconds must be greater than 0")

    if not validate_non_negative(config.host.stall_min_report_ms):
        errors.append("stall_min_report_ms must be 0 or positive")

    if config.log_level.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        errors.append(f"Unknown log_level: {config.log_level}")

    return errors
