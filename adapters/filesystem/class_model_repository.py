from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Iterable, List

from adapters.filesystem.json_utils import load_json_document
from domain.models import ClassModel, MethodModel
from domain.ports.repositories import ClassModelRepository

logger = logging.getLogger(__name__)


class FileSystemClassModelRepository(ClassModelRepository):
    """Loads analyzer output: a class model, a single method, or a list of methods."""

    def load_all(self, directory: Path) -> List[ClassModel]:
        return [model for _, model in self.load_all_with_paths(directory)]

    def load_all_with_paths(self, directory: Path) -> List[tuple[Path, ClassModel]]:
        models: List[tuple[Path, ClassModel]] = []
        for path in sorted(self._iter_paths(directory)):
            models.append((path, self.load_by_path(path)))
        return models

    def load_by_path(self, path: Path) -> ClassModel:
        content = load_json_document(path)
        model = self.parse(content, default_name=path.stem)
        logger.debug("Loaded %d method(s) from %s", len(model.methods), path)
        return model

    def parse(self, content: Any, default_name: str = "") -> ClassModel:
        if isinstance(content, list):
            return ClassModel(
                name=default_name,
                methods=[MethodModel.model_validate(item) for item in content],
            )
        if isinstance(content, dict) and "methods" not in content and self._looks_like_method(content):
            return ClassModel(name=default_name, methods=[MethodModel.model_validate(content)])
        model = ClassModel.model_validate(content)
        if not model.name:
            model = model.model_copy(update={"name": default_name})
        return model

    def _looks_like_method(self, content: dict[str, Any]) -> bool:
        return any(key in content for key in ("signature", "controlTree", "control_tree"))

    def _iter_paths(self, directory: Path) -> Iterable[Path]:
        yield from directory.glob("*.json")
