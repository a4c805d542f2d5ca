from typing import Literal

from pydantic import BaseModel, ValidationError


class AppSettings(BaseModel):
    db_path: str = "progression.db"
    storage_key: str = "solo-leveling-irl-offline"
    export_dir: str = "."
    weight_unit: Literal["kg", "lb"] = "kg"
    language: Literal["en", "es"] = "en"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


def validate_settings(data: dict) -> AppSettings:
    try:
        return AppSettings(**data)
    except ValidationError as e:
        raise ValueError(str(e))
