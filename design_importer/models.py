"""
Data models and schemas for the design import pipeline.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ComponentType(str, Enum):
    """Closed vocabulary of editor components."""
    FLEX = "Flex"
    GRID = "Grid"
    SPACE = "Space"
    HEADING = "Heading"
    TEXT = "Text"
    IMAGE = "Image"
    BUTTON = "Button"
    DIVIDER = "Divider"


CONTAINER_TYPES = frozenset({ComponentType.FLEX, ComponentType.GRID})


class Component(BaseModel):
    """One node of the typed component tree."""
    type: ComponentType
    props: Dict[str, Any] = Field(default_factory=dict)
    children: Optional[List["Component"]] = None

    @model_validator(mode="after")
    def _only_containers_have_children(self) -> "Component":
        if self.children and self.type not in CONTAINER_TYPES:
            raise ValueError(f"{self.type.value} cannot have children")
        return self

    @property
    def is_container(self) -> bool:
        return self.type in CONTAINER_TYPES

    def to_dict(self) -> Dict[str, Any]:
        """Plain JSON-shaped dict (children omitted for leaves)."""
        data: Dict[str, Any] = {"type": self.type.value, "props": dict(self.props)}
        if self.children is not None:
            data["children"] = [child.to_dict() for child in self.children]
        return data


def components_to_json(components: List[Component]) -> List[Dict[str, Any]]:
    """Convert a component forest into JSON-shaped dicts."""
    return [component.to_dict() for component in components]


class EditorNode(BaseModel):
    """Serialized editor node; ``props['id']`` holds its id."""
    type: str
    props: Dict[str, Any] = Field(default_factory=dict)

    @property
    def id(self) -> str:
        return self.props["id"]


class EditorDocument(BaseModel):
    """Flat editor document: top-level content plus zone-keyed children."""
    content: List[EditorNode] = Field(default_factory=list)
    root: Dict[str, Any] = Field(default_factory=lambda: {"props": {}})
    zones: Optional[Dict[str, List[EditorNode]]] = None


class BoundingBox(BaseModel):
    """Bounding box coordinates."""
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0

    def same_size(self, other: "BoundingBox", tolerance: float = 2.0) -> bool:
        return (
            abs(self.width - other.width) < tolerance and
            abs(self.height - other.height) < tolerance
        )


class Color(BaseModel):
    """RGBA color with channels in 0..1 (design source convention)."""
    r: float = 0.0
    g: float = 0.0
    b: float = 0.0
    a: float = 1.0


class Paint(BaseModel):
    """A single fill paint of a design node."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    type: str = "SOLID"
    visible: bool = True
    opacity: float = 1.0
    color: Optional[Color] = None
    image_ref: Optional[str] = Field(default=None, alias="imageRef")

    @property
    def is_image(self) -> bool:
        return self.type == "IMAGE"

    @property
    def is_gradient(self) -> bool:
        return self.type.startswith("GRADIENT_")

    @property
    def is_solid(self) -> bool:
        return self.type == "SOLID"

    @property
    def effective_alpha(self) -> float:
        color_alpha = self.color.a if self.color is not None else 1.0
        return color_alpha * self.opacity


class TypeStyle(BaseModel):
    """Subset of text style attributes used for layout summaries."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    font_family: Optional[str] = Field(default=None, alias="fontFamily")
    font_size: Optional[float] = Field(default=None, alias="fontSize")
    font_weight: Optional[float] = Field(default=None, alias="fontWeight")


class DesignNode(BaseModel):
    """A node of the design source's geometric node graph (read-only)."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str
    name: str = ""
    type: str = "FRAME"
    visible: bool = True
    box: BoundingBox = Field(default_factory=BoundingBox, alias="absoluteBoundingBox")
    fills: List[Paint] = Field(default_factory=list)
    children: List["DesignNode"] = Field(default_factory=list)
    layout_mode: Optional[str] = Field(default=None, alias="layoutMode")
    item_spacing: Optional[float] = Field(default=None, alias="itemSpacing")
    padding_top: Optional[float] = Field(default=None, alias="paddingTop")
    padding_right: Optional[float] = Field(default=None, alias="paddingRight")
    padding_bottom: Optional[float] = Field(default=None, alias="paddingBottom")
    padding_left: Optional[float] = Field(default=None, alias="paddingLeft")
    corner_radius: Optional[float] = Field(default=None, alias="cornerRadius")
    style: Optional[TypeStyle] = None
    characters: Optional[str] = None

    @field_validator("box", mode="before")
    @classmethod
    def _missing_box(cls, value: Any) -> Any:
        return BoundingBox() if value is None else value

    @field_validator("fills", mode="before")
    @classmethod
    def _fills_list(cls, value: Any) -> Any:
        # Mixed-fill text nodes report a non-list value
        return value if isinstance(value, list) else []

    def visible_fills(self) -> List[Paint]:
        return [fill for fill in self.fills if fill.visible]

    def has_image_fill(self) -> bool:
        return any(fill.is_image for fill in self.visible_fills())

    def has_gradient_fill(self) -> bool:
        return any(fill.is_gradient for fill in self.visible_fills())

    def has_padding(self) -> bool:
        return any(
            value is not None for value in (
                self.padding_top, self.padding_right, self.padding_bottom, self.padding_left
            )
        )


class PaddingBox(BaseModel):
    top: float = 0.0
    right: float = 0.0
    bottom: float = 0.0
    left: float = 0.0


class LayoutChild(BaseModel):
    """Per-child facts of a layout summary."""
    model_config = ConfigDict(frozen=True)

    name: str
    type: str
    x: int
    y: int
    width: int
    height: int
    padding: Optional[PaddingBox] = None
    item_spacing: Optional[int] = None
    corner_radius: Optional[float] = None
    fills: Optional[List[str]] = None
    font_size: Optional[float] = None
    font_weight: Optional[float] = None
    text_content: Optional[str] = None


class LayoutInfo(BaseModel):
    """Box-model summary of one design node subtree."""
    model_config = ConfigDict(frozen=True)

    width: int
    height: int
    padding: Optional[PaddingBox] = None
    item_spacing: Optional[int] = None
    layout_mode: Optional[str] = None  # "vertical" | "horizontal"
    children: List[LayoutChild] = Field(default_factory=list)


class DesignAsset(BaseModel):
    """An exported raster image or vector/graphic asset."""
    node_id: str
    node_name: str
    image_url: str
    width: int
    height: int
    is_vector: bool = False


class HostedImage(BaseModel):
    """Result of a permanent upload to the asset host."""
    url: str
    id: str
    delete_url: Optional[str] = None


class ImportStatus(str, Enum):
    DONE = "done"
    FAILED = "failed"


class ImportResult(BaseModel):
    """Final outcome of one design import request."""
    request_id: str
    status: ImportStatus
    components: List[Component] = Field(default_factory=list)
    html: str = ""
    editor_document: Optional[EditorDocument] = None
    refinement_calls: int = 0
    rehost_failures: Dict[str, str] = Field(default_factory=dict)
    history: List[Dict[str, Any]] = Field(default_factory=list)
    error: Optional[str] = None
    completed_at: datetime = Field(default_factory=datetime.now)

    @property
    def ok(self) -> bool:
        return self.status == ImportStatus.DONE

    def raise_for_status(self) -> None:
        """Raise the fatal generation error of a failed run."""
        if self.status == ImportStatus.FAILED:
            from design_importer.pipeline.generation import MalformedOracleOutput
            raise MalformedOracleOutput(self.error or "Design import failed")
