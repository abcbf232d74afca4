import asyncio
import json

import pytest

from conftest import FakeTelemetryClient, failed, ok
from models import AccessibilityFinding, LayoutFinding, Severity
from report_formatter import (
    TRUNCATION_MARKER,
    findings_to_dicts,
    format_accessibility_audit_markdown,
    format_contrast_audit_markdown,
    format_full_audit_markdown,
    format_interactive_elements_markdown,
    format_layout_audit_markdown,
    format_response,
    format_touch_target_audit_markdown,
    report_to_dict,
    truncate_response,
)
from schemas import ResponseFormat
from telemetry_client import TelemetryCategory
from ui_audit_framework import UIAuditAnalyzer


@pytest.fixture
def analyzer(healthy_client):
    return UIAuditAnalyzer(healthy_client)


@pytest.fixture
def report(analyzer):
    return asyncio.run(analyzer.run_full_audit())


def test_touch_targets_list_only_failing(analyzer, touch_targets):
    findings = analyzer.build_touch_targets(ok(touch_targets)).findings
    text = format_touch_target_audit_markdown(findings)

    assert "⚠️ **2 touch targets are below minimum size**" in text
    assert "### btn1" in text
    assert "### Close" in text
    assert "### Save" not in text
    assert "- **Size:** 30×30pt (area: 900pt²)" in text
    assert "- **Position:** (10, 20)" in text
    assert text.endswith("**Summary:** 1 passing, 2 failing")
    assert text.index("### btn1") < text.index("### Close")


def test_touch_targets_all_passing():
    text = format_touch_target_audit_markdown([])
    assert "All touch targets meet minimum size requirements" in text
    assert text.endswith("**Summary:** 0 passing, 0 failing")


def test_contrast_groups(analyzer, contrast_samples):
    findings = analyzer.build_contrast(ok(contrast_samples)).findings
    text = format_contrast_audit_markdown(findings)

    assert text.index("## ❌ Failing WCAG AA") < text.index("## ✅ Passing AA (not AAA)")
    assert '### "Terms and conditions apply to ..."' in text
    assert "- **Contrast Ratio:** 2.85:1" in text
    assert "- **Colors:** #999999 on #FFFFFF" in text
    assert "- **Font Size:** 12pt" in text
    assert "- **Required:** 4.5:1 (AA) / 7:1 (AAA)" in text
    assert "- subtitle: 4.54:1 (#767676/#FFFFFF)" in text
    assert "Welcome back" not in text
    assert text.endswith("**Summary:** 1 AAA, 1 AA only, 1 failing")


def test_layout_empty_and_populated():
    assert format_layout_audit_markdown([]) == "✅ No Auto Layout issues detected."

    text = format_layout_audit_markdown([
        LayoutFinding("header", "Ambiguous width", True, False),
        LayoutFinding("footer", "Autoresizing mask", False, True),
    ])
    assert text.count("- **Issue:**") == 2
    assert text.index("## header") < text.index("## footer")
    assert "- **Ambiguous:** true" in text


def test_accessibility_groups_by_severity_in_discovery_order():
    findings = [
        AccessibilityFinding("t1", "touch_target", "Touch target too small: 30×30pt (minimum 44×44pt)", Severity.MEDIUM),
        AccessibilityFinding("b1", "UIButton", "Missing accessibility label", Severity.HIGH),
        AccessibilityFinding("b2", "UISwitch", "Missing accessibility label", Severity.HIGH),
    ]
    text = format_accessibility_audit_markdown(findings)

    assert text.index("## ❌ High Severity") < text.index("## ⚠️ Medium Severity")
    assert text.index("(b1)") < text.index("(b2)") < text.index("(t1)")
    assert text.endswith("**Total Issues:** 3 (2 high, 1 medium)")


def test_accessibility_empty():
    assert format_accessibility_audit_markdown([]) == "✅ No accessibility issues detected."


def test_interactive_elements(analyzer, interactive_elements):
    elements = analyzer.interactive_elements(ok(interactive_elements))
    text = format_interactive_elements_markdown(elements)
    assert '- **UIButton** "btn1" at (10, 20)' in text
    assert '- **UIButton** "Save" at (100, 400)' in text


def test_full_audit_markdown(report):
    text = format_full_audit_markdown(report)
    assert "## Touch Targets\n⚠️ 2 elements below 44×44pt" in text
    assert "## Auto Layout\n⚠️ 1 layout issues detected" in text
    assert "**Total Issues Found:** 7" in text
    assert "Unavailable Categories" not in text


def test_full_audit_marks_unavailable_categories(touch_targets, interactive_elements):
    client = FakeTelemetryClient({
        TelemetryCategory.INTERACTIVE_ELEMENTS: ok(interactive_elements),
        TelemetryCategory.TOUCH_TARGETS: ok(touch_targets),
        TelemetryCategory.CONTRAST: failed("HTTP 503: Service Unavailable"),
        TelemetryCategory.LAYOUT: ok([]),
    })
    report = asyncio.run(UIAuditAnalyzer(client).run_full_audit())

    text = format_full_audit_markdown(report)
    assert "## Color Contrast\n❓ Unavailable: HTTP 503: Service Unavailable" in text
    assert "## Auto Layout\n✅ No layout issues" in text
    assert "**Unavailable Categories:** contrast" in text

    data = report_to_dict(report)
    assert data["total_issues"] == 5
    assert data["per_category_status"]["contrast"] == "unavailable"
    assert data["categories"]["contrast"]["reason"] == "HTTP 503: Service Unavailable"
    assert "findings" not in data["categories"]["contrast"]
    assert data["categories"]["layout"]["findings"] == []


def test_rendering_is_deterministic(report):
    assert format_full_audit_markdown(report) == format_full_audit_markdown(report)
    first = format_response(report, ResponseFormat.JSON, report_to_dict, format_full_audit_markdown)
    second = format_response(report, ResponseFormat.JSON, report_to_dict, format_full_audit_markdown)
    assert first == second


def test_json_format_serializes_findings(analyzer, touch_targets):
    findings = analyzer.build_touch_targets(ok(touch_targets)).findings
    text = format_response(findings, ResponseFormat.JSON, findings_to_dicts, format_touch_target_audit_markdown)

    data = json.loads(text)
    assert [item["view_id"] for item in data] == ["btn1", "close", "save"]
    assert data[0]["meets_minimum"] is False
    assert data[0]["touchable_area"] == 900


def test_truncate_response():
    assert truncate_response("short", limit=1000) == "short"

    text = truncate_response("x" * 5000, limit=1000)
    assert text.endswith(TRUNCATION_MARKER)
    assert text.startswith("x" * 900)
    assert len(text) == 900 + len(TRUNCATION_MARKER)


def test_json_output_is_never_truncated(analyzer):
    targets = [
        {"viewId": f"icon{i}", "accessibilityLabel": f"Icon {i}", "frame": {"x": i, "y": i, "width": 20, "height": 20}}
        for i in range(400)
    ]
    findings = analyzer.build_touch_targets(ok(targets)).findings

    text = format_response(findings, ResponseFormat.JSON, findings_to_dicts,
                           format_touch_target_audit_markdown, limit=1000)

    assert len(text) > 1000
    assert len(json.loads(text)) == 400

    markdown = format_response(findings, ResponseFormat.MARKDOWN, findings_to_dicts,
                               format_touch_target_audit_markdown, limit=1000)
    assert markdown.endswith(TRUNCATION_MARKER)
