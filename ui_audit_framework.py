import asyncio
import logging
from typing import Any, Callable, Dict, List, Sequence, Tuple

from fastapi.concurrency import run_in_threadpool
from pydantic import TypeAdapter, ValidationError

from color_contrast_analyzer import ColorContrastAnalyzer
from errors import TelemetryUnavailableError
from models import (
    AccessibilityFinding,
    AuditCategory,
    AuditReport,
    CategoryResult,
    CategoryStatus,
    CategorySummary,
    ContrastFinding,
    InteractiveElement,
    LayoutFinding,
    Rectangle,
    Severity,
    TouchTargetFinding,
    format_points,
)
from schemas import ContrastPayload, InteractiveElementPayload, LayoutIssuePayload, TouchTargetPayload
from telemetry_client import TelemetryCategory, TelemetryResponse

_INTERACTIVE_ELEMENTS = TypeAdapter(List[InteractiveElementPayload])
_TOUCH_TARGETS = TypeAdapter(List[TouchTargetPayload])
_CONTRAST_SAMPLES = TypeAdapter(List[ContrastPayload])
_LAYOUT_ISSUES = TypeAdapter(List[LayoutIssuePayload])

# Which findings count as issues, per category
_ISSUE_PREDICATES: Dict[AuditCategory, Callable[[Any], bool]] = {
    AuditCategory.TOUCH_TARGETS: lambda finding: not finding.meets_minimum,
    AuditCategory.CONTRAST: lambda finding: not finding.meets_aa,
    AuditCategory.LAYOUT: lambda finding: True,
    AuditCategory.ACCESSIBILITY: lambda finding: True,
}

# (passing, failing) summary templates
SUMMARY_TEMPLATES: Dict[AuditCategory, Tuple[str, str]] = {
    AuditCategory.TOUCH_TARGETS: ("All touch targets meet minimum size", "{count} elements below 44×44pt"),
    AuditCategory.CONTRAST: ("All text meets WCAG AA contrast", "{count} elements fail WCAG AA"),
    AuditCategory.LAYOUT: ("No layout issues", "{count} layout issues detected"),
    AuditCategory.ACCESSIBILITY: ("No accessibility issues", "{count} accessibility issues detected"),
}


def count_issues(result: CategoryResult) -> int:
    """Countable issues in one category; unavailable categories count zero"""
    if not result.is_available:
        return 0
    is_issue = _ISSUE_PREDICATES[result.category]
    return sum(1 for finding in result.findings if is_issue(finding))


class UIAuditAnalyzer:
    def __init__(self, client):
        """
        Initialize analyzer with a telemetry source

        Args:
            client: Object with a ``request(TelemetryCategory) -> TelemetryResponse``
                method, normally a DebugServerClient
        """
        self.logger = logging.getLogger(__name__)
        self.client = client

        self.contrast_analyzer = ColorContrastAnalyzer()

        # Constants
        self.MIN_TOUCH_TARGET_PT = 44
        self.GENERIC_CONTAINER_TYPE = 'UIView'

    # Classifiers

    def analyze_touch_targets(self, targets: Sequence[TouchTargetPayload]) -> List[TouchTargetFinding]:
        """Classify touch targets against the 44x44pt minimum, preserving input order"""
        findings = []
        for target in targets:
            frame = target.frame.to_rectangle()
            meets_minimum = frame.width >= self.MIN_TOUCH_TARGET_PT and frame.height >= self.MIN_TOUCH_TARGET_PT

            recommendation = None
            if not meets_minimum:
                recommendation = target.recommendation or (
                    f"Increase touch target to at least {self.MIN_TOUCH_TARGET_PT}×{self.MIN_TOUCH_TARGET_PT}pt "
                    f"(currently {format_points(frame.width)}×{format_points(frame.height)}pt)"
                )

            findings.append(TouchTargetFinding(
                view_id=target.view_id,
                label=target.accessibility_label,
                frame=frame,
                touchable_area=frame.area,
                meets_minimum=meets_minimum,
                recommendation=recommendation
            ))
        return findings

    def analyze_layout(self, issues: Sequence[LayoutIssuePayload]) -> List[LayoutFinding]:
        return [
            LayoutFinding(
                view_id=issue.view_id,
                issue=issue.issue,
                has_ambiguous_layout=issue.has_ambiguous_layout,
                translates_autoresizing_mask_into_constraints=issue.translates_autoresizing_mask_into_constraints
            )
            for issue in issues
        ]

    def analyze_accessibility(self, elements: Sequence[InteractiveElement],
                              touch_targets: Sequence[TouchTargetFinding]) -> List[AccessibilityFinding]:
        """
        Derive accessibility findings from interactive elements and touch-target results

        Missing labels come first (high severity), then undersized touch
        targets (medium severity), each in discovery order.
        """
        findings = []

        for element in elements:
            has_label = bool(element.label and element.label.strip())
            if not has_label and element.element_type != self.GENERIC_CONTAINER_TYPE:
                findings.append(AccessibilityFinding(
                    view_id=element.view_id,
                    element_type=element.element_type,
                    issue="Missing accessibility label",
                    severity=Severity.HIGH
                ))

        for target in touch_targets:
            if not target.meets_minimum:
                findings.append(AccessibilityFinding(
                    view_id=target.view_id,
                    element_type="touch_target",
                    issue=(
                        f"Touch target too small: {format_points(target.frame.width)}×"
                        f"{format_points(target.frame.height)}pt "
                        f"(minimum {self.MIN_TOUCH_TARGET_PT}×{self.MIN_TOUCH_TARGET_PT}pt)"
                    ),
                    severity=Severity.MEDIUM
                ))

        return findings

    # Telemetry

    async def _fetch(self, category: TelemetryCategory) -> TelemetryResponse:
        """Request one category off the event loop; transport errors become failed responses"""
        try:
            return await run_in_threadpool(self.client.request, category)
        except Exception as e:
            self.logger.error(f"Telemetry request for {category.name} failed: {str(e)}")
            return TelemetryResponse(success=False, error=str(e) or type(e).__name__)

    def _validate(self, name: str, response: TelemetryResponse, adapter: TypeAdapter) -> list:
        if not response.success:
            raise TelemetryUnavailableError(name, response.error or "Unknown debug server error")
        if response.data is None:
            raise TelemetryUnavailableError(name, f"Debug server returned no {name} data")
        try:
            return adapter.validate_python(response.data)
        except ValidationError as e:
            first = e.errors()[0]
            location = '.'.join(str(part) for part in first['loc']) or 'payload'
            raise TelemetryUnavailableError(
                name,
                f"Malformed {name} telemetry ({e.error_count()} validation errors, first at {location}: {first['msg']})"
            ) from e

    def _unavailable(self, category: AuditCategory, reason: str) -> CategoryResult:
        self.logger.warning(f"{category.value} audit unavailable: {reason}")
        return CategoryResult.unavailable(category, reason)

    def interactive_elements(self, response: TelemetryResponse) -> List[InteractiveElement]:
        """Validated interactive elements; raises TelemetryUnavailableError"""
        payloads = self._validate("interactive_elements", response, _INTERACTIVE_ELEMENTS)
        return [
            InteractiveElement(
                view_id=payload.view_id,
                element_type=payload.type,
                label=payload.label,
                frame=payload.frame.to_rectangle() if payload.frame else Rectangle(0, 0, 0, 0)
            )
            for payload in payloads
        ]

    def build_touch_targets(self, response: TelemetryResponse) -> CategoryResult[TouchTargetFinding]:
        category = AuditCategory.TOUCH_TARGETS
        try:
            payloads = self._validate(category.value, response, _TOUCH_TARGETS)
        except TelemetryUnavailableError as e:
            return self._unavailable(category, e.reason)
        return CategoryResult.available(category, self.analyze_touch_targets(payloads))

    def build_contrast(self, response: TelemetryResponse) -> CategoryResult[ContrastFinding]:
        category = AuditCategory.CONTRAST
        try:
            payloads = self._validate(category.value, response, _CONTRAST_SAMPLES)
        except TelemetryUnavailableError as e:
            return self._unavailable(category, e.reason)
        return CategoryResult.available(category, self.contrast_analyzer.analyze_contrast(payloads))

    def build_layout(self, response: TelemetryResponse) -> CategoryResult[LayoutFinding]:
        category = AuditCategory.LAYOUT
        try:
            payloads = self._validate(category.value, response, _LAYOUT_ISSUES)
        except TelemetryUnavailableError as e:
            return self._unavailable(category, e.reason)
        return CategoryResult.available(category, self.analyze_layout(payloads))

    def build_accessibility(self, interactive_response: TelemetryResponse,
                            touch_result: CategoryResult[TouchTargetFinding]) -> CategoryResult[AccessibilityFinding]:
        """Accessibility needs both interactive elements and touch-target results"""
        category = AuditCategory.ACCESSIBILITY
        try:
            elements = self.interactive_elements(interactive_response)
        except TelemetryUnavailableError as e:
            return self._unavailable(category, e.reason)
        if not touch_result.is_available:
            return self._unavailable(category, f"Touch target audit unavailable: {touch_result.reason}")
        return CategoryResult.available(category, self.analyze_accessibility(elements, touch_result.findings))

    # Single-category audits fail fast

    @staticmethod
    def _require(result: CategoryResult) -> list:
        if not result.is_available:
            raise TelemetryUnavailableError(result.category.value, result.reason)
        return result.findings

    async def get_interactive_elements(self) -> List[InteractiveElement]:
        return self.interactive_elements(await self._fetch(TelemetryCategory.INTERACTIVE_ELEMENTS))

    async def audit_touch_targets(self) -> List[TouchTargetFinding]:
        return self._require(self.build_touch_targets(await self._fetch(TelemetryCategory.TOUCH_TARGETS)))

    async def audit_contrast(self) -> List[ContrastFinding]:
        return self._require(self.build_contrast(await self._fetch(TelemetryCategory.CONTRAST)))

    async def audit_layout(self) -> List[LayoutFinding]:
        return self._require(self.build_layout(await self._fetch(TelemetryCategory.LAYOUT)))

    async def audit_accessibility(self) -> List[AccessibilityFinding]:
        interactive, touch = await asyncio.gather(
            self._fetch(TelemetryCategory.INTERACTIVE_ELEMENTS),
            self._fetch(TelemetryCategory.TOUCH_TARGETS)
        )
        return self._require(self.build_accessibility(interactive, self.build_touch_targets(touch)))

    # Full audit degrades per category

    def summarize(self, result: CategoryResult) -> CategorySummary:
        if not result.is_available:
            return CategorySummary(
                category=result.category,
                status=CategoryStatus.UNAVAILABLE,
                checked=0,
                issues=0,
                message=f"Unavailable: {result.reason}"
            )

        issues = count_issues(result)
        passing, failing = SUMMARY_TEMPLATES[result.category]
        return CategorySummary(
            category=result.category,
            status=CategoryStatus.OK,
            checked=len(result.findings),
            issues=issues,
            message=passing if issues == 0 else failing.format(count=issues)
        )

    def generate_report(self, touch_targets: CategoryResult[TouchTargetFinding],
                        contrast: CategoryResult[ContrastFinding],
                        layout: CategoryResult[LayoutFinding],
                        accessibility: CategoryResult[AccessibilityFinding]) -> AuditReport:
        """Merge category results; only available categories contribute to the total"""
        results = [touch_targets, contrast, layout, accessibility]
        summaries = {result.category: self.summarize(result) for result in results}

        total_issues = 0
        for summary in summaries.values():
            if summary.status is CategoryStatus.OK:
                total_issues += summary.issues

        return AuditReport(
            touch_targets=touch_targets,
            contrast=contrast,
            layout=layout,
            accessibility=accessibility,
            summaries=summaries,
            total_issues=total_issues
        )

    async def run_full_audit(self) -> AuditReport:
        """Run all audits concurrently; a failed category never fails the report"""
        interactive, touch, contrast, layout = await asyncio.gather(
            self._fetch(TelemetryCategory.INTERACTIVE_ELEMENTS),
            self._fetch(TelemetryCategory.TOUCH_TARGETS),
            self._fetch(TelemetryCategory.CONTRAST),
            self._fetch(TelemetryCategory.LAYOUT)
        )

        touch_result = self.build_touch_targets(touch)
        report = self.generate_report(
            touch_targets=touch_result,
            contrast=self.build_contrast(contrast),
            layout=self.build_layout(layout),
            accessibility=self.build_accessibility(interactive, touch_result)
        )

        unavailable = [category.value for category, status in report.per_category_status.items()
                       if status is CategoryStatus.UNAVAILABLE]
        self.logger.info(
            f"Full audit complete: {report.total_issues} issues, "
            f"unavailable categories: {', '.join(unavailable) or 'none'}"
        )
        return report
