import os
from typing import Optional

from pydantic import BaseModel, Field, ValidationError

from config import YamlConfig


class SettingsSchema(BaseModel):
    endpoint_url: str = ""
    timeout: float = Field(15.0, gt=0)
    lock_timeout: float = Field(10.0, gt=0)
    scope: str = "default"
    db_path: str = "rehab.db"
    catalog_path: str = ""
    language: str = "zh-TW"


def validate_settings(data: dict) -> None:
    try:
        SettingsSchema(**data)
    except ValidationError as e:
        raise ValueError(str(e))


def load_settings(path: Optional[str] = None) -> SettingsSchema:
    """Settings from YAML, with ``DB_PATH``/``REHAB_ENDPOINT``/``CATALOG_PATH`` overrides."""
    data = YamlConfig(path or os.environ.get("YAML_PATH", "settings.yaml")).load()
    validate_settings(data)
    settings = SettingsSchema(**data)
    overrides = {
        "db_path": os.environ.get("DB_PATH"),
        "endpoint_url": os.environ.get("REHAB_ENDPOINT"),
        "catalog_path": os.environ.get("CATALOG_PATH"),
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v})


def save_settings(path: Optional[str] = None, **values: object) -> SettingsSchema:
    """Validate and store changed settings; ``""`` clears a key.

    Nothing is written when the merged result is invalid.
    """
    config = YamlConfig(path or os.environ.get("YAML_PATH", "settings.yaml"))
    merged = config.load()
    for key, value in values.items():
        if value == "":
            merged.pop(key, None)
        elif value is not None:
            merged[key] = value
    validate_settings(merged)
    return SettingsSchema(**config.update(values))
