import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, Iterator, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.concurrency import run_in_threadpool

from config import Config
from errors import TelemetryUnavailableError, UnknownToolError
from report_formatter import (
    findings_to_dicts,
    format_accessibility_audit_markdown,
    format_contrast_audit_markdown,
    format_full_audit_markdown,
    format_interactive_elements_markdown,
    format_layout_audit_markdown,
    format_response,
    format_touch_target_audit_markdown,
    report_to_dict,
)
from schemas import ResponseFormat, ToolInfo, ToolRequest, ToolResult
from telemetry_client import DebugServerClient
from ui_audit_framework import UIAuditAnalyzer

logger = logging.getLogger(__name__)

app = FastAPI(title="iOS Simulator UI Audit")

REQUIRES_DEBUG_SERVER = "**REQUIRES:** the debug server must be integrated into the running iOS app."


@dataclass
class Tool:
    info: ToolInfo
    handler: Callable[[UIAuditAnalyzer, ResponseFormat], Awaitable[str]]


async def _audit_touch_targets(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    findings = await analyzer.audit_touch_targets()
    return format_response(findings, response_format, findings_to_dicts, format_touch_target_audit_markdown)


async def _audit_contrast(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    findings = await analyzer.audit_contrast()
    return format_response(findings, response_format, findings_to_dicts, format_contrast_audit_markdown)


async def _audit_layout(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    findings = await analyzer.audit_layout()
    return format_response(findings, response_format, findings_to_dicts, format_layout_audit_markdown)


async def _audit_accessibility(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    findings = await analyzer.audit_accessibility()
    return format_response(findings, response_format, findings_to_dicts, format_accessibility_audit_markdown)


async def _audit_all(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    report = await analyzer.run_full_audit()
    return format_response(report, response_format, report_to_dict, format_full_audit_markdown)


async def _get_interactive_elements(analyzer: UIAuditAnalyzer, response_format: ResponseFormat) -> str:
    elements = await analyzer.get_interactive_elements()
    return format_response(elements, response_format, findings_to_dicts, format_interactive_elements_markdown)


TOOLS: Dict[str, Tool] = {
    tool.info.name: tool for tool in [
        Tool(ToolInfo(
            name="ios_audit_touch_targets",
            title="Audit Touch Targets",
            description=(
                "Audit all interactive elements for minimum touch target size (44×44pt).\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _audit_touch_targets),
        Tool(ToolInfo(
            name="ios_audit_contrast",
            title="Audit Color Contrast",
            description=(
                "Audit text elements for WCAG color contrast compliance (AA and AAA).\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _audit_contrast),
        Tool(ToolInfo(
            name="ios_audit_layout",
            title="Audit Auto Layout Issues",
            description=(
                "Find views with ambiguous layouts, unsatisfiable constraints, or "
                "translatesAutoresizingMaskIntoConstraints still enabled.\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _audit_layout),
        Tool(ToolInfo(
            name="ios_audit_accessibility",
            title="Audit Accessibility",
            description=(
                "Check interactive elements for missing accessibility labels and undersized touch targets.\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _audit_accessibility),
        Tool(ToolInfo(
            name="ios_audit_all",
            title="Run Full UI/UX Audit",
            description=(
                "Run touch target, contrast, layout and accessibility audits together. "
                "Categories that cannot be checked are reported as unavailable.\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _audit_all),
        Tool(ToolInfo(
            name="ios_get_interactive_elements",
            title="Get Interactive Elements",
            description=(
                "List tappable elements with their labels and positions.\n\n"
                f"{REQUIRES_DEBUG_SERVER}"
            )
        ), _get_interactive_elements),
    ]
}


def resolve_tool(name: str) -> Tool:
    try:
        return TOOLS[name]
    except KeyError:
        raise UnknownToolError(name) from None


def get_telemetry_client() -> Iterator[DebugServerClient]:
    client = DebugServerClient(
        host=Config.DEBUG_SERVER_HOST,
        port=Config.DEBUG_SERVER_PORT,
        timeout=Config.DEBUG_SERVER_TIMEOUT
    )
    try:
        yield client
    finally:
        client.close()


@app.get("/health")
async def health_check(client: DebugServerClient = Depends(get_telemetry_client)):
    reachable = await run_in_threadpool(client.ping)
    return {"status": "healthy", "debug_server": "reachable" if reachable else "unreachable"}


@app.get("/tools", response_model=List[ToolInfo])
async def list_tools():
    return [tool.info for tool in TOOLS.values()]


@app.post("/invoke/{tool_name}", response_model=ToolResult)
async def invoke_tool(tool_name: str, request_body: Optional[ToolRequest] = None,
                      client: DebugServerClient = Depends(get_telemetry_client)):
    try:
        tool = resolve_tool(tool_name)
    except UnknownToolError as e:
        raise HTTPException(status_code=404, detail=str(e))

    request_body = request_body or ToolRequest()
    analyzer = UIAuditAnalyzer(client)
    try:
        text = await tool.handler(analyzer, request_body.response_format)
    except TelemetryUnavailableError as e:
        logger.warning(f"{tool_name} failed: {e.reason}")
        return ToolResult.text(f"Error: {e.reason}", is_error=True)

    return ToolResult.text(text)


def main():
    import uvicorn
    Config.validate()
    logging.basicConfig(
        level=Config.LOG_LEVEL.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    uvicorn.run(app, host=Config.HOST, port=Config.PORT, log_level=Config.LOG_LEVEL.lower())


if __name__ == "__main__":
    main()
