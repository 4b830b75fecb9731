from __future__ import annotations

from pathlib import Path

from filelock import FileLock

from domain.ports.repositories import SvgRepository


class FileSystemSvgRepository(SvgRepository):
    def load(self, path: Path) -> str:
        return path.read_text(encoding="utf-8")

    def save(self, svg: str, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        lock_path = path.with_suffix(f"{path.suffix}.lock")
        tmp_path = path.with_suffix(f"{path.suffix}.tmp")
        with FileLock(str(lock_path)):
            tmp_path.write_text(svg, encoding="utf-8")
            tmp_path.replace(path)
