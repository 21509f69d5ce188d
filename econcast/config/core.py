"""Runtime settings.

Precedence (highest first): explicit keyword overrides, ``ECONCAST_*``
environment variables (nested with ``__``, e.g. ``ECONCAST_DATABASE__PATH``),
the YAML file passed to ``load_settings``, then the defaults below. The
layers are pydantic-settings sources; YAML is read by ``YamlSettingsSource``.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, ClassVar, Dict, Optional, Tuple

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from econcast.scoring.params import ScoringParams


def _project_root() -> Path:
    return Path(__file__).resolve().parents[2]


def _data_dir() -> Path:
    return _project_root() / "data"


class DatabaseSettings(BaseModel):
    path: str = Field(default_factory=lambda: str(_data_dir() / "econcast.db"))
    echo: bool = False


class LoggingSettings(BaseModel):
    level: str = "INFO"
    json_logs: bool = False
    log_dir: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _alias_json(cls, data: Any) -> Any:
        if isinstance(data, dict) and "json" in data and "json_logs" not in data:
            data = dict(data)
            data["json_logs"] = data.pop("json")
        return data


def _read_yaml(path: str | os.PathLike[str]) -> Dict[str, Any]:
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"settings file {path} must contain a mapping")
    return data


class YamlSettingsSource(PydanticBaseSettingsSource):
    """Settings layer read from a YAML file; lowest priority above defaults."""

    def __init__(self, settings_cls: type[BaseSettings], yaml_file: Optional[str] = None):
        super().__init__(settings_cls)
        self._data = _read_yaml(yaml_file) if yaml_file is not None else {}

    def get_field_value(self, field: FieldInfo, field_name: str) -> Tuple[Any, str, bool]:
        return self._data.get(field_name), field_name, False

    def __call__(self) -> Dict[str, Any]:
        return {
            name: value
            for name, value in self._data.items()
            if name in self.settings_cls.model_fields
        }


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ECONCAST_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    yaml_file: ClassVar[Optional[str]] = None

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    scoring: ScoringParams = Field(default_factory=ScoringParams)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlSettingsSource(settings_cls, cls.yaml_file),
        )


def load_settings(yaml_path: str | os.PathLike[str] | None = None, **overrides: Any) -> Settings:
    """Build Settings from defaults, an optional YAML file, env and overrides."""
    if yaml_path is None:
        return Settings(**overrides)

    class FileSettings(Settings):
        yaml_file = os.fspath(yaml_path)

    return FileSettings(**overrides)


def sanitize_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Copy of a settings dump safe to log."""
    redacted = {"password", "secret", "token", "api_key"}
    out: Dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            out[key] = sanitize_dict(value)
        elif any(r in key.lower() for r in redacted):
            out[key] = "***"
        else:
            out[key] = value
    return out


__all__ = [
    "DatabaseSettings",
    "LoggingSettings",
    "Settings",
    "load_settings",
    "sanitize_dict",
]
