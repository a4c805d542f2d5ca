import os
import yaml

from settings_schema import AppSettings, validate_settings

APP_VERSION = "1.0.0"


class YamlConfig:
    """Load and save host settings to a YAML file."""

    ENV_OVERRIDES = {
        "PROGRESSION_DB": "db_path",
    }

    def __init__(self, path: str = "settings.yaml") -> None:
        self.path = path

    def load(self) -> dict:
        if not os.path.exists(self.path):
            return {}
        with open(self.path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}

    def save(self, data: dict) -> None:
        with open(self.path, "w", encoding="utf-8") as f:
            yaml.safe_dump(dict(data), f)

    def settings(self) -> AppSettings:
        """Return validated settings with environment overrides applied."""
        data = self.load()
        for env, key in self.ENV_OVERRIDES.items():
            value = os.environ.get(env)
            if value:
                data[key] = value
        return validate_settings(data)
