"""Vulnerability Worker -- CVE 响应与修复发布计划

CVE 编号取自 context.metadata["cve_id"]，否则从 goal / user_intent 中识别。
优先级按紧急度：>= 90 p1，>= 70 p2，>= 40 p3，其余 p4。
"""

import re

import structlog
from fleetagent.core.models import AgentResult, RiskLevel, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, BlastRadius, CVEDetails, read_result

from ..base import PLAN_JSON_INSTRUCTIONS, BaseWorker, decision_actions, parse_risk, render_context

log = structlog.get_logger()

_CVE_RE = re.compile(r"CVE-\d{4}-\d{4,}", re.IGNORECASE)

# 影响面工具降级时的占位对象，按身份判断
BLAST_RADIUS_UNAVAILABLE = {"status": "blast_radius_unavailable"}


def find_cve_id(task: TaskSpec) -> str:
    explicit = task.context.metadata.get("cve_id")
    if isinstance(explicit, str) and explicit:
        return explicit.upper()
    match = _CVE_RE.search(f"{task.goal} {task.user_intent}")
    return match.group(0).upper() if match else ""


def priority_for(urgency: int) -> str:
    if urgency >= 90:
        return "p1"
    if urgency >= 70:
        return "p2"
    if urgency >= 40:
        return "p3"
    return "p4"


def risk_for(details: CVEDetails, fallback: RiskLevel) -> RiskLevel:
    """严重度映射风险等级；已被在野利用的 high 提升为 critical"""
    risk = parse_risk(details.severity, fallback)
    if details.exploited_in_wild and risk == RiskLevel.HIGH:
        return RiskLevel.CRITICAL
    return risk


class VulnerabilityWorker(BaseWorker):
    name = "vulnerability_agent"
    description = "Triages CVEs and generates prioritized patch rollout plans"
    supported_tasks = (TaskType.VULNERABILITY_RESPONSE,)
    required_tools = ("get_cve_details", "query_assets", "get_cve_blast_radius", "calculate_risk_score")

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)
        cve_id = find_cve_id(task)

        raw_details = await run.tool("get_cve_details", {"cve_id": cve_id}, evidence_key="cve")
        details = read_result(CVEDetails, raw_details) or CVEDetails(cve_id=cve_id or "unknown")

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or f"cve:{details.cve_id}"},
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        blast = await run.tool(
            "get_cve_blast_radius",
            {"cve_id": details.cve_id},
            essential=False,
            placeholder=BLAST_RADIUS_UNAVAILABLE,
            evidence_key="blast_radius",
        )
        blast_radius = None if blast is BLAST_RADIUS_UNAVAILABLE else read_result(BlastRadius, blast)
        await run.tool(
            "calculate_risk_score",
            {"environment": task.environment, "asset_count": asset_count},
            essential=False,
            placeholder={"risk_level": "medium", "score": 50},
            evidence_key="risk_score",
        )

        risk = risk_for(details, task.risk_level)
        priority = priority_for(details.urgency_score)
        run.evidence["priority"] = priority

        prompt = "\n".join(
            [
                "You are the FleetAgent Vulnerability Response Worker. Generate a prioritized",
                "remediation rollout for the vulnerability below.",
                "",
                self.task_block(task),
                "",
                "## Vulnerability",
                render_context(raw_details),
                "",
                f"## Priority: {priority} (urgency {details.urgency_score})",
                "",
                f"## Affected Assets ({asset_count})",
                render_context(assets),
                "",
                "## Blast Radius",
                render_context(blast),
                "",
                "Patch to the fixed version with a canary phase, progressive waves and rollback.",
                "",
                PLAN_JSON_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_plan(content, run.fallback_plan(asset_count, risk))

        if blast_radius is None:
            production = ", blast radius unavailable"
        else:
            production = f", {blast_radius.production_count} in production"
        return run.build_from_resolution(
            resolution,
            summary=(
                f"{details.cve_id} ({details.severity}, {priority}): remediation plan for "
                f"{asset_count} assets{production}"
            ),
            affected_assets=asset_count,
            risk=risk,
            actions=decision_actions(
                ("Approve & Patch", "Approve the plan and begin patching affected assets"),
                ("Modify Plan", "Edit the remediation plan before execution"),
                ("Reject", "Reject and cancel the vulnerability response"),
            ),
        )
