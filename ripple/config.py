"""
Config system - Layered typed configuration with validation.

Merge precedence (later overrides earlier):
    config files (JSON/YAML) > .env file > environment variables > overrides
"""

from typing import Any, Dict, Optional, get_type_hints
from dataclasses import dataclass, fields
from pathlib import Path
import os
import json

from .decoding.naming import CONVENTIONS
from .faults import ConfigInvalidFault
from .serializers import SERIALIZERS


@dataclass
class RippleConfig:
    """Runtime settings for decoding and outbound encoding."""

    naming: str = "snake"
    detect_cycles: bool = True
    log_level: str = "WARNING"
    serializer: str = "json"
    signing_key: Optional[str] = None
    signing_key_version: int = 4


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files > defaults
    """

    def __init__(self, env_prefix: str = "RIPPLE_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}
        # Unparsed env strings by dotted key, for string-typed settings
        self.raw_env: Dict[str, str] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[list[str]] = None,
        env_prefix: str = "RIPPLE_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> "ConfigLoader":
        """
        Load configuration from multiple sources with proper merge strategy.

        Args:
            paths: List of config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        if not paths and Path("ripple.yaml").exists():
            paths = ["ripple.yaml"]

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)
            loader._drop_raw(overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        from glob import glob

        for path_str in sorted(glob(pattern)):
            path = Path(path_str)

            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "config root must be an object")
        self._merge_dict(self.config_data, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        import yaml
        with open(path) as f:
            data = yaml.safe_load(f)
        if data is None:
            return
        if not isinstance(data, dict):
            raise ConfigInvalidFault(str(path), "config root must be a mapping")
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        from dotenv import dotenv_values

        env_path = Path(path)
        if not env_path.exists():
            return

        for key, value in dotenv_values(env_path).items():
            if value is not None and key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert RIPPLE_SECTION__KEY to nested dict."""
        key = key[len(self.env_prefix):]

        # Split by double underscore for nested keys
        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)
        self.raw_env[".".join(parts)] = value

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        # Boolean
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        # Number
        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        # JSON
        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _drop_raw(self, source: dict):
        """Forget env strings for keys replaced by ``source``."""
        for key in source:
            for raw_key in [k for k in self.raw_env if k == key or k.startswith(f"{key}.")]:
                del self.raw_env[raw_key]

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        parts = path.split(".")
        current = self.config_data

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def build(self) -> RippleConfig:
        """
        Build a validated ``RippleConfig`` from the merged data.

        Raises:
            ConfigInvalidFault: A value has the wrong type or is not allowed.
        """
        hints = get_type_hints(RippleConfig)
        kwargs = {}

        for field_info in fields(RippleConfig):
            name = field_info.name
            if name not in self.config_data:
                continue
            value = self._coerce(name, self.config_data[name], hints[name])
            if not self._check_type(value, hints[name]):
                raise ConfigInvalidFault(
                    name, f"expected {getattr(hints[name], '__name__', hints[name])}, got {type(value).__name__}"
                )
            kwargs[name] = value

        config = RippleConfig(**kwargs)

        if config.naming not in CONVENTIONS:
            raise ConfigInvalidFault("naming", f"unknown convention {config.naming!r}; expected one of {sorted(CONVENTIONS)}")
        if config.serializer not in SERIALIZERS:
            raise ConfigInvalidFault(
                "serializer", f"unknown serializer {config.serializer!r}; expected one of {sorted(SERIALIZERS)}"
            )
        if config.signing_key_version < 0:
            raise ConfigInvalidFault("signing_key_version", "must not be negative")

        return config

    def _coerce(self, name: str, value: Any, expected_type: Any) -> Any:
        """String settings read from the environment keep the raw string."""
        accepts_str = expected_type is str or str in getattr(expected_type, "__args__", ())
        if accepts_str and name in self.raw_env:
            return self.raw_env[name]
        return value

    def _check_type(self, value: Any, expected_type: Any) -> bool:
        """Basic type checking."""
        # Optional[X] accepts None
        if getattr(expected_type, "__origin__", None) is not None:
            args = [a for a in expected_type.__args__ if a is not type(None)]
            if value is None:
                return True
            return any(self._check_type(value, a) for a in args)

        # bool is a subclass of int but not a valid int setting
        if expected_type is int and isinstance(value, bool):
            return False
        return isinstance(value, expected_type)

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


def load_config(**kwargs: Any) -> RippleConfig:
    """Shortcut for ``ConfigLoader.load(**kwargs).build()``."""
    return ConfigLoader.load(**kwargs).build()
