from __future__ import annotations

import os
from pathlib import Path
from typing import ClassVar

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic_settings.sources import PydanticBaseSettingsSource, YamlConfigSettingsSource

from domain.models import (
    DEFAULT_PALETTE,
    MONOCHROME_PALETTE,
    LayoutConfig,
    StructogramPalette,
)

DEFAULT_CONFIG_PATH = Path("config/structogram.yaml")
CONFIG_PATH_ENV = "STRUCTOGRAM_CONFIG_PATH"


class StructogramSettings(BaseModel):
    font_size: int = Field(12, gt=0)
    char_width: int = Field(7, gt=0)
    row_height: int = Field(30, gt=0)
    header_height: int = Field(30, gt=0)
    section_header_height: int = Field(24, gt=0)
    if_header_height: int = Field(40, gt=0)
    text_padding_x: int = Field(10, ge=0)
    text_baseline_offset: int = Field(8, ge=0)
    min_content_width: int = Field(64, ge=0)
    canvas_padding: int = Field(12, ge=0)
    loop_body_inset_width: int = Field(28, ge=0)
    label_text_offset_y: int = Field(6, ge=0)
    condition_top_padding: int = Field(5, ge=0)
    stroke_width: int = Field(1, gt=0)
    monochrome: bool = False
    input_dir: Path = Path("data/class_models")
    output_dir: Path = Path("data/structograms")
    excalidraw_base_url: str = "https://excalidraw.com"
    excalidraw_max_url_length: int = Field(8000, gt=0)

    @field_validator("excalidraw_base_url", mode="before")
    @classmethod
    def normalize_base_url(cls, value: object) -> str:
        return str(value or "").strip().rstrip("/")

    def to_layout_config(self) -> LayoutConfig:
        return LayoutConfig(
            font_size=self.font_size,
            char_width=self.char_width,
            row_height=self.row_height,
            header_height=self.header_height,
            section_header_height=self.section_header_height,
            if_header_height=self.if_header_height,
            text_padding_x=self.text_padding_x,
            text_baseline_offset=self.text_baseline_offset,
            min_content_width=self.min_content_width,
            canvas_padding=self.canvas_padding,
            loop_body_inset_width=self.loop_body_inset_width,
            label_text_offset_y=self.label_text_offset_y,
            condition_top_padding=self.condition_top_padding,
            stroke_width=self.stroke_width,
        )

    def palette(self) -> StructogramPalette:
        return MONOCHROME_PALETTE if self.monochrome else DEFAULT_PALETTE


class AppSettings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STRUCTOGRAM_", env_nested_delimiter="__")

    structogram: StructogramSettings = StructogramSettings()

    _yaml_path: ClassVar[Path | None] = None

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        sources: list[PydanticBaseSettingsSource] = [
            init_settings,
            env_settings,
            dotenv_settings,
            file_secret_settings,
        ]
        if cls._yaml_path:
            sources.append(YamlConfigSettingsSource(settings_cls, yaml_file=cls._yaml_path))
        return tuple(sources)


def load_settings(config_path: Path | None = None) -> AppSettings:
    env_path = os.getenv(CONFIG_PATH_ENV)
    resolved_path: Path | None = None

    if config_path is not None:
        resolved_path = config_path
    elif env_path:
        resolved_path = Path(env_path)
    elif DEFAULT_CONFIG_PATH.exists():
        resolved_path = DEFAULT_CONFIG_PATH

    previous = AppSettings._yaml_path
    try:
        if resolved_path is not None:
            if not resolved_path.exists():
                msg = f"Config file not found: {resolved_path}"
                raise FileNotFoundError(msg)
            AppSettings._yaml_path = resolved_path
        return AppSettings()
    finally:
        AppSettings._yaml_path = previous
