from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, ClassVar, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

METADATA_SCHEMA_VERSION = "1.0"
CUSTOM_DATA_KEY = "nsd"

POST_CONDITION_LOOP_KIND = "doWhile"

EMPTY_BODY_LABEL = "(empty)"
NO_ELSE_LABEL = "(no else)"
DEFAULT_CASE_LABEL = "default"
ASSIGNMENT_SYMBOL = "←"
NO_CONTROL_TREE_MESSAGE = "No control-tree data available for this method."


def _none_to_list(value: object) -> object:
    return [] if value is None else value


class SourceRange(BaseModel):
    model_config = ConfigDict(extra="ignore")

    start_line: int = Field(0, validation_alias=AliasChoices("start_line", "startLine"))
    start_column: int = Field(0, validation_alias=AliasChoices("start_column", "startColumn"))
    end_line: int = Field(0, validation_alias=AliasChoices("end_line", "endLine"))
    end_column: int = Field(0, validation_alias=AliasChoices("end_column", "endColumn"))


class ControlTreeNode(BaseModel):
    model_config = ConfigDict(extra="ignore")

    kind: str = Field(..., min_length=1)
    text: Optional[str] = None
    condition: Optional[str] = None
    loop_kind: Optional[str] = Field(None, validation_alias=AliasChoices("loop_kind", "loopKind"))
    range: Optional[SourceRange] = None
    children: List[ControlTreeNode] = Field(default_factory=list)
    then_branch: List[ControlTreeNode] = Field(
        default_factory=list, validation_alias=AliasChoices("then_branch", "thenBranch")
    )
    else_branch: List[ControlTreeNode] = Field(
        default_factory=list, validation_alias=AliasChoices("else_branch", "elseBranch")
    )
    switch_cases: List[SwitchCase] = Field(
        default_factory=list, validation_alias=AliasChoices("switch_cases", "switchCases")
    )
    catches: List[CatchClause] = Field(default_factory=list)
    finally_branch: List[ControlTreeNode] = Field(
        default_factory=list, validation_alias=AliasChoices("finally_branch", "finallyBranch")
    )

    @field_validator(
        "children",
        "then_branch",
        "else_branch",
        "switch_cases",
        "catches",
        "finally_branch",
        mode="before",
    )
    @classmethod
    def ensure_lists(cls, value: object) -> object:
        return _none_to_list(value)


class SwitchCase(BaseModel):
    model_config = ConfigDict(extra="ignore")

    label: Optional[str] = None
    body: List[ControlTreeNode] = Field(default_factory=list)

    @field_validator("body", mode="before")
    @classmethod
    def ensure_body(cls, value: object) -> object:
        return _none_to_list(value)


class CatchClause(BaseModel):
    model_config = ConfigDict(extra="ignore")

    exception: Optional[str] = None
    body: List[ControlTreeNode] = Field(default_factory=list)

    @field_validator("body", mode="before")
    @classmethod
    def ensure_body(cls, value: object) -> object:
        return _none_to_list(value)


ControlTreeNode.model_rebuild()


class MethodParam(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    type: str = ""


class MethodModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    signature: str = ""
    name: Optional[str] = None
    return_type: Optional[str] = Field(
        None, validation_alias=AliasChoices("return_type", "returnType")
    )
    params: List[MethodParam] = Field(default_factory=list)
    visibility: Optional[str] = None
    is_static: bool = Field(False, validation_alias=AliasChoices("is_static", "isStatic"))
    is_abstract: bool = Field(False, validation_alias=AliasChoices("is_abstract", "isAbstract"))
    is_main: bool = Field(False, validation_alias=AliasChoices("is_main", "isMain"))
    range: Optional[SourceRange] = None
    control_tree: Optional[ControlTreeNode] = Field(
        None, validation_alias=AliasChoices("control_tree", "controlTree")
    )

    @field_validator("params", mode="before")
    @classmethod
    def ensure_params(cls, value: object) -> object:
        return _none_to_list(value)

    def display_name(self) -> str:
        if self.name and self.name.strip():
            return self.name.strip()
        name_part = self.signature.split("(", 1)[0].strip()
        pieces = name_part.split()
        return pieces[-1] if pieces else self.signature


class ClassModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    name: str = ""
    methods: List[MethodModel] = Field(default_factory=list)

    @field_validator("methods", mode="before")
    @classmethod
    def ensure_methods(cls, value: object) -> object:
        return _none_to_list(value)


@dataclass(frozen=True)
class LayoutConfig:
    font_size: int = 12
    char_width: int = 7
    row_height: int = 30
    header_height: int = 30
    section_header_height: int = 24
    if_header_height: int = 40
    text_padding_x: int = 10
    text_baseline_offset: int = 8
    min_content_width: int = 64
    canvas_padding: int = 12
    loop_body_inset_width: int = 28
    label_text_offset_y: int = 6
    condition_top_padding: int = 5
    stroke_width: int = 1


@dataclass(frozen=True)
class StructogramPalette:
    border: str
    text: str
    muted_text: str
    body: str
    loop_header: str
    if_header: str
    switch_header: str
    try_wrapper: str
    condition: str
    branch: str


DEFAULT_PALETTE = StructogramPalette(
    border="#3a3a3a",
    text="#1e1e1e",
    muted_text="#6b7280",
    body="#ffffff",
    loop_header="#dbeafe",
    if_header="#fef3c7",
    switch_header="#ede9fe",
    try_wrapper="#dcfce7",
    condition="#fde2e4",
    branch="#f5f5f5",
)

MONOCHROME_PALETTE = StructogramPalette(
    border="#3a3a3a",
    text="#1e1e1e",
    muted_text="#6b7280",
    body="#ffffff",
    loop_header="#ffffff",
    if_header="#ffffff",
    switch_header="#ffffff",
    try_wrapper="#ffffff",
    condition="#ffffff",
    branch="#ffffff",
)


@dataclass(frozen=True)
class StatementLayout:
    kind: ClassVar[str] = "statement"

    text: str
    width: int
    height: int


@dataclass(frozen=True)
class SequenceLayout:
    kind: ClassVar[str] = "sequence"

    children: tuple[LayoutNode, ...]
    width: int
    height: int


@dataclass(frozen=True)
class IfLayout:
    kind: ClassVar[str] = "if"

    condition: str
    then_branch: LayoutNode
    else_branch: LayoutNode
    header_height: int
    width: int
    height: int

    @property
    def branch_height(self) -> int:
        return self.height - self.header_height


@dataclass(frozen=True)
class LoopLayout:
    kind: ClassVar[str] = "loop"

    header: str
    footer: str | None
    body_inset_width: int
    body: LayoutNode
    header_height: int
    width: int
    height: int

    @property
    def is_post_condition(self) -> bool:
        return self.footer is not None

    @property
    def body_band_height(self) -> int:
        footer_height = self.header_height if self.footer is not None else 0
        return self.height - self.header_height - footer_height


@dataclass(frozen=True)
class SwitchCaseLayout:
    label: str
    caption: str
    body: LayoutNode
    width: int


@dataclass(frozen=True)
class SwitchLayout:
    kind: ClassVar[str] = "switch"

    expression: str
    cases: tuple[SwitchCaseLayout, ...]
    selector_band_height: int
    label_band_height: int
    width: int
    height: int

    @property
    def branch_height(self) -> int:
        return self.height - self.selector_band_height - self.label_band_height


@dataclass(frozen=True)
class CatchLayout:
    exception: str
    body: LayoutNode

    @property
    def caption(self) -> str:
        return f"catch ({self.exception})"


@dataclass(frozen=True)
class TryLayout:
    kind: ClassVar[str] = "try"

    body: LayoutNode
    catches: tuple[CatchLayout, ...]
    finally_branch: LayoutNode | None
    header_height: int
    section_header_height: int
    width: int
    height: int


LayoutNode = Union[
    StatementLayout, SequenceLayout, IfLayout, LoopLayout, SwitchLayout, TryLayout
]

TextAnchor = Literal["start", "middle", "end"]


@dataclass(frozen=True)
class RectPrimitive:
    primitive_type: ClassVar[str] = "rect"

    x: float
    y: float
    width: float
    height: float
    fill: str
    stroke: str | None
    role: str


@dataclass(frozen=True)
class LinePrimitive:
    primitive_type: ClassVar[str] = "line"

    x1: float
    y1: float
    x2: float
    y2: float
    stroke: str
    role: str


@dataclass(frozen=True)
class TextPrimitive:
    primitive_type: ClassVar[str] = "text"

    x: float
    y: float
    text: str
    anchor: TextAnchor
    fill: str
    font_size: int
    role: str


Primitive = Union[RectPrimitive, LinePrimitive, TextPrimitive]


@dataclass(frozen=True)
class StructogramView:
    method_name: str
    declaration: str
    primitives: tuple[Primitive, ...]
    width: float
    height: float
    message: str | None = None

    @property
    def has_diagram(self) -> bool:
        return self.message is None

    def to_dict(self) -> dict[str, Any]:
        return {
            "schema_version": METADATA_SCHEMA_VERSION,
            "method": self.method_name,
            "declaration": self.declaration,
            "width": self.width,
            "height": self.height,
            "message": self.message,
            "primitives": [
                {"type": primitive.primitive_type, **asdict(primitive)}
                for primitive in self.primitives
            ],
        }


@dataclass(frozen=True)
class ExcalidrawDocument:
    elements: List[dict]
    app_state: dict
    files: dict

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": "excalidraw",
            "version": 2,
            "source": "structogram-convertor",
            "elements": self.elements,
            "appState": self.app_state,
            "files": self.files,
        }
