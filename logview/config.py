"""Configuration: YAML file merged over built-in defaults."""

import copy
import logging
import os
from dataclasses import dataclass

import yaml

from logview.templates import Template, resolve_template

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.yaml"

LOG_TYPES = ("stdout", "stderr")


@dataclass(frozen=True)
class LogSource:
    """A supervised program's log files and the template they are written in."""

    name: str
    log_path: str
    error_log_path: str | None = None
    template: Template = Template.DEFAULT

    def path_for(self, log_type: str = "stdout") -> str | None:
        """Return the stdout or stderr log path (None if not configured)."""
        if log_type not in LOG_TYPES:
            raise ValueError(f"log_type must be one of {LOG_TYPES}, got {log_type!r}")
        if log_type == "stderr":
            return self.error_log_path
        return self.log_path


class Config:
    """Configuration manager that loads from YAML and merges with defaults."""

    DEFAULTS = {
        "reader": {
            "max_lines": 500,
            "limit": 500,
            "tail_lines": 100,
        },
        "tail": {
            "poll_interval": 2.0,
        },
        "logging": {
            "level": "INFO",
            "format": "%(asctime)s [LOGVIEW] %(levelname)s %(message)s",
        },
        "sources": {},
    }

    def __init__(self, config_path=None):
        self._config = copy.deepcopy(self.DEFAULTS)

        if config_path is not None:
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    user_config = yaml.safe_load(f)

                if user_config and isinstance(user_config, dict):
                    self._config = self._deep_merge(self._config, user_config)
                logger.debug("Loaded config from %s", config_path)
            except FileNotFoundError:
                logger.debug("Config file %s not found, using defaults", config_path)
            except yaml.YAMLError as e:
                logger.warning("Invalid YAML in %s, using defaults: %s", config_path, e)

    @classmethod
    def from_env(cls, config_path=None):
        """Load from config_path, else $CONFIG_PATH, else ./config.yaml."""
        return cls(config_path or os.environ.get("CONFIG_PATH", DEFAULT_CONFIG_PATH))

    @staticmethod
    def _deep_merge(base, override):
        """Recursively merge override dict into base dict."""
        result = copy.deepcopy(base)
        for key, value in override.items():
            if (
                key in result
                and isinstance(result[key], dict)
                and isinstance(value, dict)
            ):
                result[key] = Config._deep_merge(result[key], value)
            else:
                result[key] = copy.deepcopy(value)
        return result

    def get(self, key, default=None):
        """Get a top-level config key."""
        return self._config.get(key, default)

    def __getitem__(self, key):
        return self._config[key]

    def __contains__(self, key):
        return key in self._config

    def source_names(self) -> list[str]:
        return sorted(self._config.get("sources") or {})

    def source(self, name: str) -> LogSource:
        """Build the LogSource configured under sources.<name>.

        Raises KeyError for unknown names or entries without a log_path.
        """
        sources = self._config.get("sources") or {}
        if name not in sources:
            raise KeyError(f"Unknown log source: {name}")
        entry = sources[name] or {}
        if not entry.get("log_path"):
            raise KeyError(f"Log source {name} has no log_path")
        return LogSource(
            name=name,
            log_path=entry["log_path"],
            error_log_path=entry.get("error_log_path") or None,
            template=resolve_template(entry.get("template")),
        )
