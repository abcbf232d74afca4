"""Pydantic models for debug-server payloads and the tool-calling API."""
from enum import Enum
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from models import ColorSample, Rectangle


class ResponseFormat(str, Enum):
    MARKDOWN = "markdown"
    JSON = "json"


class _Payload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class FramePayload(_Payload):
    x: float = 0
    y: float = 0
    width: float
    height: float

    def to_rectangle(self) -> Rectangle:
        return Rectangle(x=self.x, y=self.y, width=self.width, height=self.height)


class InteractiveElementPayload(_Payload):
    view_id: str = Field(alias="viewId")
    type: str
    label: Optional[str] = None
    frame: Optional[FramePayload] = None


class TouchTargetPayload(_Payload):
    view_id: str = Field(alias="viewId")
    accessibility_label: Optional[str] = Field(default=None, alias="accessibilityLabel")
    frame: FramePayload
    # Upstream values are accepted but recomputed during classification
    touchable_area: Optional[float] = Field(default=None, alias="touchableArea")
    meets_minimum: Optional[bool] = Field(default=None, alias="meetsMinimum")
    recommendation: Optional[str] = None


class ColorPayload(_Payload):
    hex: str
    alpha: Optional[float] = None

    @field_validator("hex")
    @classmethod
    def check_hex(cls, value: str) -> str:
        ColorSample.from_hex(value)
        return value

    def to_sample(self) -> ColorSample:
        return ColorSample.from_hex(self.hex)


class ContrastPayload(_Payload):
    view_id: str = Field(alias="viewId")
    foreground_color: ColorPayload = Field(alias="foregroundColor")
    background_color: ColorPayload = Field(alias="backgroundColor")
    contrast_ratio: float = Field(alias="contrastRatio")
    meets_wcag_aa: Optional[bool] = Field(default=None, alias="meetsWCAG_AA")
    meets_wcag_aaa: Optional[bool] = Field(default=None, alias="meetsWCAG_AAA")
    text: Optional[str] = None
    font_size: Optional[float] = Field(default=None, alias="fontSize")
    font_weight: Optional[Union[float, str]] = Field(default=None, alias="fontWeight")


class LayoutIssuePayload(_Payload):
    view_id: str = Field(alias="viewId")
    issue: str
    has_ambiguous_layout: bool = Field(default=False, alias="hasAmbiguousLayout")
    translates_autoresizing_mask_into_constraints: bool = Field(
        default=False, alias="translatesAutoresizingMaskIntoConstraints"
    )


class ToolRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    response_format: ResponseFormat = ResponseFormat.MARKDOWN


class TextContent(BaseModel):
    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    content: List[TextContent]
    is_error: bool = False

    @classmethod
    def text(cls, text: str, is_error: bool = False) -> "ToolResult":
        return cls(content=[TextContent(text=text)], is_error=is_error)


class ToolInfo(BaseModel):
    name: str
    title: str
    description: str
