from __future__ import annotations

import logging
from collections.abc import Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import orjson
import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape

from adapters.excalidraw.repository import FileSystemExcalidrawRepository
from adapters.excalidraw.url_encoder import build_excalidraw_url
from adapters.filesystem.class_model_repository import FileSystemClassModelRepository
from adapters.filesystem.view_repository import FileSystemViewRepository
from adapters.layout.structogram import StructogramLayoutEngine
from adapters.svg.repository import FileSystemSvgRepository
from app.config import AppSettings, load_settings
from domain.models import ClassModel, MethodModel, StructogramView
from domain.services.convert_scene_to_excalidraw import StructogramToExcalidrawConverter
from domain.services.convert_scene_to_svg import StructogramToSvgConverter
from domain.services.present_structogram import StructogramPresenter
from domain.services.render_structogram import StructogramRenderer

logger = logging.getLogger(__name__)

app = typer.Typer(no_args_is_help=True)
render_app = typer.Typer(no_args_is_help=True)
app.add_typer(render_app, name="render")
console = Console()

ConfigOption = typer.Option(None, "--config", help="YAML settings file.")
InputArgument = typer.Argument(
    None, help="Class-model JSON file or directory (defaults to structogram.input_dir)."
)
OutputOption = typer.Option(
    None, "--output-dir", help="Directory for rendered files (defaults to structogram.output_dir)."
)
MethodOption = typer.Option(None, "--method", "-m", help="Only render methods with this name.")


@dataclass(frozen=True)
class RenderedMethod:
    view: StructogramView
    stem: str


def _settings(config_path: Path | None) -> AppSettings:
    try:
        return load_settings(config_path)
    except (FileNotFoundError, ValidationError) as exc:
        console.print(f"[red]Invalid configuration:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _presenter(settings: AppSettings) -> StructogramPresenter:
    layout_config = settings.structogram.to_layout_config()
    return StructogramPresenter(
        StructogramLayoutEngine(layout_config),
        StructogramRenderer(layout_config, settings.structogram.palette()),
    )


def _load_models(input_path: Path) -> list[tuple[Path, ClassModel]]:
    repo = FileSystemClassModelRepository()
    if not input_path.exists():
        console.print(f"[red]Input not found:[/] {input_path}")
        raise typer.Exit(code=1)
    try:
        if input_path.is_dir():
            return repo.load_all_with_paths(input_path)
        return [(input_path, repo.load_by_path(input_path))]
    except (ValidationError, orjson.JSONDecodeError) as exc:
        console.print(f"[red]Invalid class model:[/] {escape(str(exc))}")
        raise typer.Exit(code=1) from exc


def _render_methods(
    settings: AppSettings, input_path: Path | None, method_name: str | None
) -> Iterator[RenderedMethod]:
    presenter = _presenter(settings)
    source = input_path or settings.structogram.input_dir
    pairs = _load_models(source)
    if not pairs:
        console.print(f"[yellow]No class-model files found in {source}[/]")
        raise typer.Exit(code=0)

    for path, method, stem in _named_methods(pairs, method_name):
        logger.debug("Rendering %s from %s", stem, path)
        yield RenderedMethod(view=presenter.present(method), stem=stem)


def _named_methods(
    pairs: list[tuple[Path, ClassModel]], method_name: str | None
) -> Iterator[tuple[Path, MethodModel, str]]:
    used_stems: set[str] = set()
    for path, model in pairs:
        class_name = model.name or path.stem
        for method in model.methods:
            if method_name and method.display_name() != method_name:
                continue
            yield path, method, _unique_stem(f"{class_name}.{method.display_name()}", used_stems)


def _unique_stem(base: str, used: set[str]) -> str:
    # Overloaded methods share a display name.
    stem = base
    counter = 2
    while stem in used:
        stem = f"{base}_{counter}"
        counter += 1
    used.add(stem)
    return stem


@render_app.command("svg")
def render_svg(
    input_path: Optional[Path] = InputArgument,
    output_dir: Optional[Path] = OutputOption,
    method_name: Optional[str] = MethodOption,
    no_declaration: bool = typer.Option(
        False, "--no-declaration", help="Omit the declaration caption above the diagram."
    ),
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _settings(config_path)
    target_dir = output_dir or settings.structogram.output_dir
    converter = StructogramToSvgConverter(settings.structogram.to_layout_config())
    svg_repo = FileSystemSvgRepository()
    for rendered in _render_methods(settings, input_path, method_name):
        target_path = target_dir / f"{rendered.stem}.svg"
        svg_repo.save(converter.convert(rendered.view, include_declaration=not no_declaration), target_path)
        console.print(f"[green]Wrote[/] {target_path}")


@render_app.command("excalidraw")
def render_excalidraw(
    input_path: Optional[Path] = InputArgument,
    output_dir: Optional[Path] = OutputOption,
    method_name: Optional[str] = MethodOption,
    config_path: Optional[Path] = ConfigOption,
) -> None:
    settings = _settings(config_path)
    target_dir = output_dir or settings.structogram.output_dir
    converter = StructogramToExcalidrawConverter(settings.structogram.to_layout_config())
    excal_repo = FileSystemExcalidrawRepository()
    for rendered in _render_methods(settings, input_path, method_name):
        target_path = target_dir / f"{rendered.stem}.excalidraw"
        excal_repo.save(converter.convert(rendered.view), target_path)
        console.print(f"[green]Wrote[/] {target_path}")


@render_app.command("json")
def render_json(
    input_path: Optional[Path] = InputArgument,
    output_dir: Optional[Path] = OutputOption,
    method_name: Optional[str] = MethodOption,
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Write the positioned primitives of each method as JSON."""
    settings = _settings(config_path)
    target_dir = output_dir or settings.structogram.output_dir
    view_repo = FileSystemViewRepository()
    for rendered in _render_methods(settings, input_path, method_name):
        target_path = target_dir / f"{rendered.stem}.json"
        view_repo.save(rendered.view, target_path)
        console.print(f"[green]Wrote[/] {target_path}")


@app.command("url")
def excalidraw_url(
    input_path: Optional[Path] = InputArgument,
    method_name: Optional[str] = MethodOption,
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Print an Excalidraw link that opens each structogram in the browser."""
    settings = _settings(config_path)
    converter = StructogramToExcalidrawConverter(settings.structogram.to_layout_config())
    for rendered in _render_methods(settings, input_path, method_name):
        try:
            url = build_excalidraw_url(
                settings.structogram.excalidraw_base_url,
                converter.convert(rendered.view),
                max_length=settings.structogram.excalidraw_max_url_length,
            )
        except ValueError as exc:
            console.print(f"[yellow]Skipped {rendered.stem}:[/] {escape(str(exc))}")
            continue
        console.print(f"[bold]{rendered.stem}[/]")
        console.print(url, soft_wrap=True)


@app.command("validate")
def validate(
    input_path: Path = typer.Argument(..., help="Class-model JSON file or directory to validate."),
) -> None:
    pairs = _load_models(input_path)
    for path, model in pairs:
        with_tree = sum(1 for method in model.methods if method.control_tree is not None)
        console.print(
            f"[green]Valid class model:[/] {path} "
            f"({len(model.methods)} method(s), {with_tree} with control tree)"
        )


@app.command("clean")
def clean(
    input_path: Optional[Path] = InputArgument,
    output_dir: Optional[Path] = OutputOption,
    config_path: Optional[Path] = ConfigOption,
) -> None:
    """Remove the files rendered for the given class models from the output directory."""
    settings = _settings(config_path)
    source = input_path or settings.structogram.input_dir
    target_dir = output_dir or settings.structogram.output_dir
    source_dir = source if source.is_dir() else source.parent
    if target_dir.resolve() == source_dir.resolve():
        console.print(
            f"[red]Refusing to clean {target_dir}:[/] it holds the input class models"
        )
        raise typer.Exit(code=1)
    stems = [stem for _, _, stem in _named_methods(_load_models(source), None)]
    removed = FileSystemViewRepository().remove_rendered(target_dir, stems)
    console.print(f"[green]Removed[/] {len(removed)} file(s) from {target_dir}")


if __name__ == "__main__":
    app()
