from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path

from filelock import FileLock

from adapters.filesystem.json_utils import write_json_atomic
from domain.models import StructogramView
from domain.ports.repositories import ViewRepository

RENDERED_SUFFIXES = (".svg", ".excalidraw", ".json")


def lock_path_for(path: Path) -> Path:
    return path.with_suffix(f"{path.suffix}.lock")


class FileSystemViewRepository(ViewRepository):
    """Writes presented structograms as JSON and prunes rendered outputs by method stem."""

    def save(self, view: StructogramView, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with FileLock(str(lock_path_for(path))):
            write_json_atomic(path, view.to_dict())

    def remove_rendered(self, directory: Path, stems: Iterable[str]) -> list[Path]:
        """Delete ``<stem>.svg|.excalidraw|.json`` and their lock files; other files stay."""
        if not directory.is_dir():
            return []
        removed: list[Path] = []
        for stem in sorted(set(stems)):
            for suffix in RENDERED_SUFFIXES:
                target = directory / f"{stem}{suffix}"
                if target.is_file():
                    target.unlink()
                    removed.append(target)
                lock_path = lock_path_for(target)
                if lock_path.is_file():
                    lock_path.unlink()
        return removed
