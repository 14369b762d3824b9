"""Incident Worker -- 只读根因分析

不产出变更计划，结果直接为 completed，操作为 acknowledge / dismiss。
"""

import structlog
from fleetagent.core.models import (
    READ_ONLY_ACTIONS,
    AgentResult,
    AgentStatus,
    ParseMethod,
    TaskSpec,
    TaskType,
)
from fleetagent.planner import WARN_SYNTHESIZED, parse_model
from fleetagent.tools.results import AssetInventory, read_result
from pydantic import BaseModel, ConfigDict, Field

from ..base import BaseWorker, parse_risk, render_context

log = structlog.get_logger()

# 分析成功 / 失败时的质量分
ANALYSIS_QUALITY = 80.0
FALLBACK_QUALITY = 40.0


class IncidentAnalysis(BaseModel):
    """LLM 根因分析输出"""

    model_config = ConfigDict(extra="allow")

    severity: str = "medium"
    summary: str = ""
    root_cause: str = ""
    contributing_factors: list[str] = Field(default_factory=list)
    timeline: list[str] = Field(default_factory=list)
    recommendations: list[str] = Field(default_factory=list)


ANALYSIS_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "severity": "low|medium|high|critical",
  "summary": "One paragraph incident summary",
  "root_cause": "Most likely root cause",
  "contributing_factors": ["..."],
  "timeline": ["..."],
  "recommendations": ["..."]
}"""


class IncidentWorker(BaseWorker):
    name = "incident_agent"
    description = "Investigates incidents and performs root cause analysis"
    supported_tasks = (TaskType.INCIDENT_INVESTIGATION,)
    model_alias = "analyst"
    required_tools = ("query_assets", "query_alerts", "get_drift_status", "get_compliance_status")
    system_prompt = (
        "You are an SRE incident investigator. Correlate alerts, drift and compliance "
        "signals to find the root cause. Output ONLY valid JSON."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or "state:running"},
            essential=False,
            placeholder=[],
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        alerts = await run.tool(
            "query_alerts",
            {"status": "open"},
            essential=False,
            placeholder=[],
            evidence_key="alerts",
        )
        drift = await run.tool("get_drift_status", essential=False, placeholder={}, evidence_key="drift_status")
        compliance = await run.tool(
            "get_compliance_status",
            essential=False,
            placeholder={},
            evidence_key="compliance_status",
        )

        prompt = "\n".join(
            [
                "You are the FleetAgent Incident Worker. Perform root cause analysis.",
                "",
                self.task_block(task),
                "",
                "## Active Alerts",
                render_context(alerts),
                "",
                "## Drift Status",
                render_context(drift),
                "",
                "## Compliance Status",
                render_context(compliance),
                "",
                f"## Related Assets ({asset_count})",
                "",
                ANALYSIS_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        outcome = parse_model(content, IncidentAnalysis)

        if outcome.ok:
            analysis = outcome.value
            method, warning, quality = outcome.method, outcome.warning, ANALYSIS_QUALITY
        else:
            log.warning("incident_analysis_unparsed", task_id=task.id, errors=outcome.errors[:5])
            analysis = IncidentAnalysis(summary="Automated analysis unavailable; manual triage required")
            method, warning, quality = ParseMethod.LENIENT, WARN_SYNTHESIZED, FALLBACK_QUALITY

        run.evidence["analysis"] = analysis.model_dump()
        severity = parse_risk(analysis.severity)
        return run.build(
            plan=None,
            summary=f"Incident analysis completed for {asset_count} assets. Severity: {severity.value}",
            affected_assets=asset_count,
            risk=severity,
            parse_method=method,
            parse_warning=warning,
            status=AgentStatus.COMPLETED,
            actions=READ_ONLY_ACTIONS,
            quality_score=quality,
        )
