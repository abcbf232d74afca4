"""
Rendering of audit results for tool callers.

Every entry point takes the caller's response format: ``json`` serializes the
findings or report as-is, ``markdown`` renders a deterministic text layout.
"""
import json
from typing import Any, Callable, Dict, List, Optional, Sequence

from color_contrast_analyzer import ColorContrastAnalyzer
from config import Config
from models import (
    AccessibilityFinding,
    AuditCategory,
    AuditReport,
    CategoryStatus,
    ContrastFinding,
    InteractiveElement,
    LayoutFinding,
    Severity,
    TouchTargetFinding,
    format_points,
)
from schemas import ResponseFormat

TRUNCATION_MARKER = "\n\n... [Response truncated. Use more specific queries or pagination.]"

CATEGORY_TITLES = {
    AuditCategory.TOUCH_TARGETS: "Touch Targets",
    AuditCategory.CONTRAST: "Color Contrast",
    AuditCategory.LAYOUT: "Auto Layout",
    AuditCategory.ACCESSIBILITY: "Accessibility",
}

SEVERITY_HEADINGS = {
    Severity.HIGH: "## ❌ High Severity",
    Severity.MEDIUM: "## ⚠️ Medium Severity",
}

_contrast_analyzer = ColorContrastAnalyzer()


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def truncate_response(text: str, limit: Optional[int] = None) -> str:
    """Truncate response if too long"""
    limit = Config.CHARACTER_LIMIT if limit is None else limit
    if len(text) <= limit:
        return text
    return text[:limit - 100] + TRUNCATION_MARKER


def format_response(data: Any, response_format: ResponseFormat,
                    to_structured: Callable[[Any], Any],
                    to_markdown: Callable[[Any], str],
                    limit: Optional[int] = None) -> str:
    """Render data in the requested format; only markdown is truncated"""
    if response_format == ResponseFormat.JSON:
        return to_json(to_structured(data))
    return truncate_response(to_markdown(data), limit)


def findings_to_dicts(findings: Sequence[Any]) -> List[Dict[str, Any]]:
    return [finding.to_dict() for finding in findings]


def report_to_dict(report: AuditReport) -> Dict[str, Any]:
    """Structured form of a full audit; unavailable categories keep their reason"""
    categories = {}
    for result in report.results:
        entry = report.summaries[result.category].to_dict()
        if result.status is CategoryStatus.OK:
            entry['findings'] = findings_to_dicts(result.findings)
        else:
            entry['reason'] = result.reason
        categories[result.category.value] = entry

    return {
        'total_issues': report.total_issues,
        'per_category_status': {
            category.value: status.value for category, status in report.per_category_status.items()
        },
        'categories': categories
    }


def _text_preview(text: Optional[str], fallback: str) -> str:
    if not text:
        return fallback
    return f"\"{text[:30]}{'...' if len(text) > 30 else ''}\""


def format_touch_target_audit_markdown(findings: Sequence[TouchTargetFinding]) -> str:
    lines = ["# Touch Target Audit\n"]

    failing = [f for f in findings if not f.meets_minimum]
    passing = [f for f in findings if f.meets_minimum]

    if not failing:
        lines.append("✅ **All touch targets meet minimum size requirements (44×44pt)**\n")
    else:
        lines.append(f"⚠️ **{len(failing)} touch targets are below minimum size**\n")
        lines.append("## Issues\n")
        for item in failing:
            lines.append(f"### {item.label or item.view_id}")
            lines.append(
                f"- **Size:** {format_points(item.frame.width)}×{format_points(item.frame.height)}pt "
                f"(area: {format_points(item.touchable_area)}pt²)"
            )
            lines.append(f"- **Position:** ({format_points(item.frame.x)}, {format_points(item.frame.y)})")
            if item.recommendation:
                lines.append(f"- **Recommendation:** {item.recommendation}")
            lines.append("")

    lines.append(f"\n**Summary:** {len(passing)} passing, {len(failing)} failing")
    return "\n".join(lines)


def format_contrast_audit_markdown(findings: Sequence[ContrastFinding]) -> str:
    lines = ["# Color Contrast Audit\n"]

    failing = [f for f in findings if not f.meets_aa]
    aa_only = [f for f in findings if f.meets_aa and not f.meets_aaa]
    aaa = [f for f in findings if f.meets_aa and f.meets_aaa]

    if failing:
        lines.append("## ❌ Failing WCAG AA\n")
        for item in failing:
            aa_ratio, aaa_ratio = _contrast_analyzer.required_ratios(item.large_text)
            lines.append(f"### {_text_preview(item.text, item.view_id)}")
            lines.append(f"- **Contrast Ratio:** {item.contrast_ratio:.2f}:1")
            lines.append(f"- **Colors:** {item.foreground.hex} on {item.background.hex}")
            if item.font_size is not None:
                lines.append(f"- **Font Size:** {format_points(item.font_size)}pt")
            lines.append(f"- **Required:** {format_points(aa_ratio)}:1 (AA) / {format_points(aaa_ratio)}:1 (AAA)")
            lines.append("")

    if aa_only:
        lines.append("## ✅ Passing AA (not AAA)\n")
        for item in aa_only:
            lines.append(
                f"- {_text_preview(item.text, item.view_id)}: {item.contrast_ratio:.2f}:1 "
                f"({item.foreground.hex}/{item.background.hex})"
            )
        lines.append("")

    lines.append(f"\n**Summary:** {len(aaa)} AAA, {len(aa_only)} AA only, {len(failing)} failing")
    return "\n".join(lines)


def format_layout_audit_markdown(findings: Sequence[LayoutFinding]) -> str:
    if not findings:
        return "✅ No Auto Layout issues detected."

    lines = ["# Auto Layout Issues\n"]
    for item in findings:
        lines.append(f"## {item.view_id}")
        lines.append(f"- **Issue:** {item.issue}")
        lines.append(f"- **Ambiguous:** {str(item.has_ambiguous_layout).lower()}")
        lines.append(
            "- **translatesAutoresizingMaskIntoConstraints:** "
            f"{str(item.translates_autoresizing_mask_into_constraints).lower()}"
        )
        lines.append("")
    return "\n".join(lines)


def format_accessibility_audit_markdown(findings: Sequence[AccessibilityFinding]) -> str:
    if not findings:
        return "✅ No accessibility issues detected."

    lines = ["# Accessibility Audit\n"]
    counts = []
    for severity in Severity:
        group = [f for f in findings if f.severity is severity]
        counts.append(f"{len(group)} {severity.value}")
        if not group:
            continue
        lines.append(f"{SEVERITY_HEADINGS[severity]}\n")
        for item in group:
            lines.append(f"- **{item.element_type}** ({item.view_id}): {item.issue}")
        lines.append("")

    lines.append(f"\n**Total Issues:** {len(findings)} ({', '.join(counts)})")
    return "\n".join(lines)


def format_interactive_elements_markdown(elements: Sequence[InteractiveElement]) -> str:
    lines = ["# Interactive Elements\n"]
    for element in elements:
        lines.append(
            f"- **{element.element_type}** \"{element.label or element.view_id}\" "
            f"at ({format_points(element.frame.x)}, {format_points(element.frame.y)})"
        )
    if not elements:
        lines.append("No interactive elements found.")
    return "\n".join(lines)


def format_full_audit_markdown(report: AuditReport) -> str:
    lines = ["# Full UI/UX Audit Report\n"]

    for result in report.results:
        summary = report.summaries[result.category]
        if summary.status is CategoryStatus.UNAVAILABLE:
            icon = "❓"
        elif summary.issues == 0:
            icon = "✅"
        else:
            icon = "⚠️"
        lines.append(f"## {CATEGORY_TITLES[result.category]}")
        lines.append(f"{icon} {summary.message}")
        lines.append("")

    unavailable = [category.value for category, status in report.per_category_status.items()
                   if status is CategoryStatus.UNAVAILABLE]

    lines.append("---")
    lines.append(f"**Total Issues Found:** {report.total_issues}")
    if unavailable:
        lines.append(f"**Unavailable Categories:** {', '.join(unavailable)}")
    lines.append("\n*Run individual audits for detailed information.*")
    return "\n".join(lines)
