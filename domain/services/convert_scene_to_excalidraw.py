from __future__ import annotations

import random
import uuid
from typing import Dict, List

from domain.models import (
    CUSTOM_DATA_KEY,
    METADATA_SCHEMA_VERSION,
    ExcalidrawDocument,
    LayoutConfig,
    LinePrimitive,
    Primitive,
    RectPrimitive,
    StructogramView,
    TextPrimitive,
)

TEXT_ALIGN_BY_ANCHOR = {"start": "left", "middle": "center", "end": "right"}
TITLE_GAP = 16.0


class StructogramToExcalidrawConverter:
    def __init__(self, config: LayoutConfig | None = None) -> None:
        self.config = config or LayoutConfig()
        self.namespace = uuid.uuid5(uuid.NAMESPACE_DNS, "structogram-convertor")

    def convert(self, view: StructogramView) -> ExcalidrawDocument:
        elements: List[dict] = []
        base_metadata = {
            "schema_version": METADATA_SCHEMA_VERSION,
            "method": view.method_name,
            "declaration": view.declaration,
        }
        frame_id = self._stable_id("frame", view.method_name)
        title_size = float(self.config.font_size + 4)
        elements.append(
            self._text_element(
                element_id=self._stable_id("title", view.method_name),
                text=view.declaration,
                x=0.0,
                y=-(title_size * 1.3 + TITLE_GAP),
                align="left",
                font_size=title_size,
                color="#1e1e1e",
                frame_id=None,
                metadata=self._with_base_metadata({"role": "declaration"}, base_metadata),
            )
        )

        if not view.has_diagram:
            elements.append(
                self._text_element(
                    element_id=self._stable_id("message", view.method_name),
                    text=view.message or "",
                    x=0.0,
                    y=0.0,
                    align="left",
                    font_size=float(self.config.font_size),
                    color="#1e1e1e",
                    frame_id=None,
                    metadata=self._with_base_metadata({"role": "message"}, base_metadata),
                )
            )
            return ExcalidrawDocument(elements=elements, app_state=self._app_state(), files={})

        elements.append(
            self._base_shape(
                element_id=frame_id,
                type_name="frame",
                x=0.0,
                y=0.0,
                width=float(view.width),
                height=float(view.height),
                metadata=self._with_base_metadata({"role": "frame"}, base_metadata),
                extra={
                    "name": view.method_name,
                    "strokeColor": "#1e1e1e",
                    "backgroundColor": "transparent",
                    "fillStyle": "solid",
                },
            )
        )
        role_counts: Dict[str, int] = {}
        for primitive in view.primitives:
            index = role_counts.get(primitive.role, 0)
            role_counts[primitive.role] = index + 1
            element_id = self._stable_id(view.method_name, primitive.role, str(index))
            metadata = self._with_base_metadata({"role": primitive.role}, base_metadata)
            elements.append(self._primitive_element(primitive, element_id, frame_id, metadata))
        return ExcalidrawDocument(elements=elements, app_state=self._app_state(), files={})

    def _primitive_element(
        self, primitive: Primitive, element_id: str, frame_id: str, metadata: dict
    ) -> dict:
        if isinstance(primitive, RectPrimitive):
            return self._base_shape(
                element_id=element_id,
                type_name="rectangle",
                x=primitive.x,
                y=primitive.y,
                width=primitive.width,
                height=primitive.height,
                frame_id=frame_id,
                metadata=metadata,
                extra={
                    "strokeColor": primitive.stroke or "transparent",
                    "backgroundColor": primitive.fill,
                    "fillStyle": "solid",
                },
            )
        if isinstance(primitive, LinePrimitive):
            dx = primitive.x2 - primitive.x1
            dy = primitive.y2 - primitive.y1
            return self._base_shape(
                element_id=element_id,
                type_name="line",
                x=primitive.x1,
                y=primitive.y1,
                width=abs(dx),
                height=abs(dy),
                frame_id=frame_id,
                metadata=metadata,
                extra={
                    "strokeColor": primitive.stroke,
                    "backgroundColor": "transparent",
                    "fillStyle": "solid",
                    "points": [[0, 0], [dx, dy]],
                    "startBinding": None,
                    "endBinding": None,
                },
            )
        if isinstance(primitive, TextPrimitive):
            width = self._text_width(primitive.text)
            x = primitive.x
            if primitive.anchor == "middle":
                x -= width / 2
            elif primitive.anchor == "end":
                x -= width
            return self._text_element(
                element_id=element_id,
                text=primitive.text,
                x=x,
                y=primitive.y - primitive.font_size,
                align=TEXT_ALIGN_BY_ANCHOR[primitive.anchor],
                font_size=float(primitive.font_size),
                color=primitive.fill,
                frame_id=frame_id,
                metadata=metadata,
            )
        raise TypeError(f"Unsupported primitive: {type(primitive).__name__}")

    def _text_width(self, text: str) -> float:
        return float(max(1, len(text)) * self.config.char_width)

    def _text_element(
        self,
        element_id: str,
        text: str,
        x: float,
        y: float,
        align: str,
        font_size: float,
        color: str,
        frame_id: str | None,
        metadata: dict,
    ) -> dict:
        height = font_size * 1.3
        return {
            "id": element_id,
            "type": "text",
            "x": x,
            "y": y,
            "width": self._text_width(text) * font_size / self.config.font_size,
            "height": height,
            "angle": 0,
            "strokeColor": color,
            "backgroundColor": "transparent",
            "fillStyle": "solid",
            "strokeWidth": 1,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": [],
            "frameId": frame_id,
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "text": text,
            "fontSize": font_size,
            "fontFamily": 3,
            "textAlign": align,
            "verticalAlign": "top",
            "baseline": font_size,
            "containerId": None,
            "customData": {CUSTOM_DATA_KEY: metadata},
        }

    def _base_shape(
        self,
        element_id: str,
        type_name: str,
        x: float,
        y: float,
        width: float,
        height: float,
        metadata: dict,
        frame_id: str | None = None,
        extra: dict | None = None,
    ) -> dict:
        return {
            "id": element_id,
            "type": type_name,
            "x": x,
            "y": y,
            "width": width,
            "height": height,
            "angle": 0,
            "strokeWidth": self.config.stroke_width,
            "strokeStyle": "solid",
            "roughness": 0,
            "opacity": 100,
            "groupIds": [],
            "roundness": None,
            "seed": self._rand_seed(),
            "version": 1,
            "versionNonce": self._rand_seed(),
            "isDeleted": False,
            "boundElements": [],
            "locked": False,
            "frameId": frame_id,
            "customData": {CUSTOM_DATA_KEY: metadata},
            **(extra or {}),
        }

    def _app_state(self) -> dict:
        return {
            "viewBackgroundColor": "#ffffff",
            "gridSize": None,
            "currentItemFontFamily": 3,
            "currentItemFontSize": self.config.font_size,
            "currentItemStrokeColor": "#1e1e1e",
        }

    def _stable_id(self, *parts: str) -> str:
        return str(uuid.uuid5(self.namespace, "|".join(parts)))

    def _rand_seed(self) -> int:
        return random.randint(1, 2**31 - 1)

    def _with_base_metadata(self, metadata: dict, base: dict) -> dict:
        merged = dict(base)
        merged.update(metadata)
        return merged
