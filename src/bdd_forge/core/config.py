import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .exceptions import ConfigurationError

CONFIG_ENV_VAR = "BDD_FORGE_CONFIG"

DEFAULT_CONFIG: Dict[str, Any] = {
    "general": {
        "log_level": "INFO",
    },
    "generator": {
        "default_package": "com.example.test",
        "template": None,  # integration, web, data
        "spring_boot_annotations": [],
        "custom_imports": [],
    },
    "executor": {
        "grace_period": 5.0,
        "estimated_duration": 60.0,
        "progress_cap": 90.0,
    },
}


class ConfigManager:
    """
    Layered settings for BDD Forge.

    The file is located through ``BDD_FORGE_CONFIG``, then ``./bdd-forge.yaml``,
    ``./.bdd-forge/config.yaml`` and ``~/.bdd-forge/config.yaml``. Each section
    of the file is merged over the built-in defaults, so a file only needs the
    keys it changes.
    """

    def __init__(self, config_path: Optional[Path] = None):
        self.config_path = Path(config_path) if config_path else self._find_config_path()
        self._config = self._load_config()

    @staticmethod
    def _find_config_path() -> Path:
        env_path = os.getenv(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)

        candidates = [
            Path.cwd() / "bdd-forge.yaml",
            Path.cwd() / ".bdd-forge" / "config.yaml",
            Path.home() / ".bdd-forge" / "config.yaml",
        ]
        return next((path for path in candidates if path.exists()), candidates[-1])

    def _load_config(self) -> Dict[str, Any]:
        config = copy.deepcopy(DEFAULT_CONFIG)
        if not self.config_path.exists():
            return config

        suffix = self.config_path.suffix
        if suffix not in (".yaml", ".yml", ".json"):
            raise ConfigurationError(f"Unsupported config format: {suffix}")

        with open(self.config_path, "r", encoding="utf-8") as f:
            loaded = json.load(f) if suffix == ".json" else yaml.safe_load(f)

        if loaded is None:
            return config
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {self.config_path}")

        for section, values in loaded.items():
            if isinstance(values, dict) and isinstance(config.get(section), dict):
                config[section].update(values)
            else:
                config[section] = values
        return config

    def get(self, key: str, default: Any = None) -> Any:
        """Look up a dotted key such as ``executor.grace_period``"""
        value: Any = self._config
        for part in key.split("."):
            if not isinstance(value, dict) or part not in value:
                return default
            value = value[part]
        return value

    def set(self, key: str, value: Any) -> None:
        *parents, last = key.split(".")
        section = self._config
        for part in parents:
            section = section.setdefault(part, {})
        section[last] = value

    def save(self) -> None:
        self.config_path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.config_path, "w", encoding="utf-8") as f:
            if self.config_path.suffix == ".json":
                json.dump(self._config, f, indent=2)
            else:
                yaml.safe_dump(self._config, f, default_flow_style=False)

    def get_module_config(self, module_name: str) -> Dict[str, Any]:
        """Copy of one module's section, suitable for ``load_module``"""
        return copy.deepcopy(self.get(module_name, {}) or {})
