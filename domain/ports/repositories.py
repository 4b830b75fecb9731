from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from domain.models import ClassModel, ExcalidrawDocument, StructogramView


class ClassModelRepository(Protocol):
    def load_all(self, directory: Path) -> Sequence[ClassModel]: ...

    def load_all_with_paths(self, directory: Path) -> Sequence[tuple[Path, ClassModel]]: ...

    def load_by_path(self, path: Path) -> ClassModel: ...


class ExcalidrawRepository(Protocol):
    def save(self, document: ExcalidrawDocument, path: Path) -> None: ...


class ViewRepository(Protocol):
    def save(self, view: StructogramView, path: Path) -> None: ...


class SvgRepository(Protocol):
    def save(self, svg: str, path: Path) -> None: ...
