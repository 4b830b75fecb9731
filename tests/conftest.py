from __future__ import annotations

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest

from adapters.layout.structogram import StructogramLayoutEngine
from app.config import AppSettings, StructogramSettings
from domain.models import LayoutConfig
from domain.services.present_structogram import StructogramPresenter
from domain.services.render_structogram import StructogramRenderer


def _clear_structogram_env() -> None:
    for key in list(os.environ):
        if key.startswith("STRUCTOGRAM_"):
            os.environ.pop(key, None)


_clear_structogram_env()


@pytest.fixture(autouse=True)
def clear_structogram_env() -> Generator[None, None, None]:
    _clear_structogram_env()
    yield
    _clear_structogram_env()


@pytest.fixture
def layout_config() -> LayoutConfig:
    return LayoutConfig()


@pytest.fixture
def layout_engine(layout_config: LayoutConfig) -> StructogramLayoutEngine:
    return StructogramLayoutEngine(layout_config)


@pytest.fixture
def renderer(layout_config: LayoutConfig) -> StructogramRenderer:
    return StructogramRenderer(layout_config)


@pytest.fixture
def presenter(
    layout_engine: StructogramLayoutEngine, renderer: StructogramRenderer
) -> StructogramPresenter:
    return StructogramPresenter(layout_engine, renderer)


@pytest.fixture
def structogram_settings(tmp_path: Path) -> StructogramSettings:
    return StructogramSettings(
        input_dir=tmp_path / "class_models",
        output_dir=tmp_path / "structograms",
        excalidraw_base_url="http://testserver/excalidraw",
    )


@pytest.fixture
def structogram_settings_factory(
    structogram_settings: StructogramSettings,
) -> Callable[..., StructogramSettings]:
    def _factory(**overrides: object) -> StructogramSettings:
        return structogram_settings.model_copy(update=overrides)

    return _factory


@pytest.fixture
def app_settings(structogram_settings: StructogramSettings) -> AppSettings:
    return AppSettings(structogram=structogram_settings)
