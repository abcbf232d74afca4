from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class Severity(str, Enum):
    """Ordered severity levels; declaration order is the rendering order"""
    HIGH = "high"
    MEDIUM = "medium"


class CategoryStatus(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"


class AuditCategory(str, Enum):
    TOUCH_TARGETS = "touch_targets"
    CONTRAST = "contrast"
    LAYOUT = "layout"
    ACCESSIBILITY = "accessibility"


def format_points(value: float) -> str:
    """Render a point value without a trailing '.0' for whole numbers"""
    value = float(value)
    if value.is_integer():
        return str(int(value))
    return f"{round(value, 2)}"


@dataclass(frozen=True)
class Rectangle:
    """Frame in device points. Dimensions are untrusted and may be zero or negative."""
    x: float
    y: float
    width: float
    height: float

    @property
    def area(self) -> float:
        return self.width * self.height

    def to_dict(self) -> Dict[str, float]:
        return {'x': self.x, 'y': self.y, 'width': self.width, 'height': self.height}


@dataclass(frozen=True)
class ColorSample:
    hex: str
    r: int
    g: int
    b: int

    @classmethod
    def from_hex(cls, value: str) -> "ColorSample":
        """Parse '#RGB', '#RRGGBB' or '#RRGGBBAA' (alpha is ignored)"""
        digits = value.strip().lstrip('#')
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        if len(digits) not in (6, 8):
            raise ValueError(f"Invalid hex color: {value!r}")
        try:
            r, g, b = (int(digits[i:i + 2], 16) for i in (0, 2, 4))
        except ValueError:
            raise ValueError(f"Invalid hex color: {value!r}") from None
        return cls(hex=value.strip(), r=r, g=g, b=b)

    def to_dict(self) -> Dict[str, Any]:
        return {'hex': self.hex, 'rgb': {'r': self.r, 'g': self.g, 'b': self.b}}


@dataclass
class InteractiveElement:
    """A candidate tappable control reported by the debug server"""
    view_id: str
    element_type: str
    label: Optional[str]
    frame: Rectangle

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view_id': self.view_id,
            'type': self.element_type,
            'label': self.label,
            'frame': self.frame.to_dict()
        }


@dataclass
class TouchTargetFinding:
    view_id: str
    label: Optional[str]
    frame: Rectangle
    touchable_area: float
    meets_minimum: bool
    recommendation: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view_id': self.view_id,
            'label': self.label,
            'frame': self.frame.to_dict(),
            'touchable_area': self.touchable_area,
            'meets_minimum': self.meets_minimum,
            'recommendation': self.recommendation
        }


@dataclass
class ContrastFinding:
    view_id: str
    foreground: ColorSample
    background: ColorSample
    contrast_ratio: float
    meets_aa: bool
    meets_aaa: bool
    large_text: bool
    text: Optional[str] = None
    font_size: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view_id': self.view_id,
            'foreground': self.foreground.to_dict(),
            'background': self.background.to_dict(),
            'contrast_ratio': self.contrast_ratio,
            'meets_aa': self.meets_aa,
            'meets_aaa': self.meets_aaa,
            'large_text': self.large_text,
            'text': self.text,
            'font_size': self.font_size
        }


@dataclass
class LayoutFinding:
    view_id: str
    issue: str
    has_ambiguous_layout: bool
    translates_autoresizing_mask_into_constraints: bool

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view_id': self.view_id,
            'issue': self.issue,
            'has_ambiguous_layout': self.has_ambiguous_layout,
            'translates_autoresizing_mask_into_constraints': self.translates_autoresizing_mask_into_constraints
        }


@dataclass
class AccessibilityFinding:
    """Derived finding; severity comes from the rule that produced it"""
    view_id: str
    element_type: str
    issue: str
    severity: Severity

    def to_dict(self) -> Dict[str, Any]:
        return {
            'view_id': self.view_id,
            'type': self.element_type,
            'issue': self.issue,
            'severity': self.severity.value
        }


@dataclass
class CategoryResult(Generic[T]):
    """Outcome of one category: findings when available, a reason when not.

    An available result with no findings means "no issues"; it is never
    used to stand in for a category that could not be checked.
    """
    category: AuditCategory
    status: CategoryStatus
    findings: List[T] = field(default_factory=list)
    reason: Optional[str] = None

    @classmethod
    def available(cls, category: AuditCategory, findings: List[T]) -> "CategoryResult[T]":
        return cls(category=category, status=CategoryStatus.OK, findings=list(findings))

    @classmethod
    def unavailable(cls, category: AuditCategory, reason: str) -> "CategoryResult[T]":
        return cls(category=category, status=CategoryStatus.UNAVAILABLE, reason=reason)

    @property
    def is_available(self) -> bool:
        return self.status is CategoryStatus.OK


@dataclass
class CategorySummary:
    """Per-category line of the full audit"""
    category: AuditCategory
    status: CategoryStatus
    checked: int
    issues: int
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'status': self.status.value,
            'checked': self.checked,
            'issues': self.issues,
            'summary': self.message
        }


@dataclass
class AuditReport:
    """Aggregate of all category results for one full audit"""
    touch_targets: CategoryResult[TouchTargetFinding]
    contrast: CategoryResult[ContrastFinding]
    layout: CategoryResult[LayoutFinding]
    accessibility: CategoryResult[AccessibilityFinding]
    summaries: Dict[AuditCategory, CategorySummary]
    total_issues: int

    @property
    def results(self) -> List[CategoryResult]:
        return [self.touch_targets, self.contrast, self.layout, self.accessibility]

    @property
    def per_category_status(self) -> Dict[AuditCategory, CategoryStatus]:
        return {result.category: result.status for result in self.results}
