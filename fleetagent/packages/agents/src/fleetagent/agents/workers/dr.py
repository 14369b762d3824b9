"""DR Worker -- 灾备演练 / 预案 / 就绪评估

操作类型按关键词判定：drill / test / execute -> drill；
runbook / procedure / document -> runbook；其余 assessment。
就绪度 >= 90 为 low 风险，>= 70 为 medium，其余 high。
"""

import structlog
from fleetagent.core.models import AgentResult, RiskLevel, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, DRStatus, read_result

from ..base import PLAN_JSON_INSTRUCTIONS, BaseWorker, contains_any, decision_actions, render_context

log = structlog.get_logger()

APPROVE_LABELS = {
    "drill": "Approve & Execute Drill",
    "runbook": "Approve Runbook",
    "assessment": "Approve Assessment",
}


def determine_operation(text: str) -> str:
    if contains_any(text, ("drill", "test", "execute")):
        return "drill"
    if contains_any(text, ("runbook", "procedure", "document")):
        return "runbook"
    return "assessment"


def readiness_risk(score: float) -> RiskLevel:
    if score >= 90:
        return RiskLevel.LOW
    if score >= 70:
        return RiskLevel.MEDIUM
    return RiskLevel.HIGH


class DRWorker(BaseWorker):
    name = "dr_agent"
    description = "Plans disaster recovery drills, runbooks and readiness assessments"
    supported_tasks = (TaskType.DR_DRILL,)
    required_tools = ("query_assets", "get_dr_status", "generate_dr_runbook", "simulate_failover")

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)
        operation = determine_operation(task.intent_text)
        run.evidence["operation_type"] = operation

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or "state:running"},
            essential=False,
            placeholder=[],
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        status_raw = await run.tool(
            "get_dr_status",
            essential=False,
            placeholder={"status": "unknown"},
            evidence_key="dr_status",
        )
        status = read_result(DRStatus, status_raw) or DRStatus()

        runbook = None
        if operation in ("drill", "runbook"):
            runbook = await run.tool(
                "generate_dr_runbook",
                essential=False,
                placeholder={"status": "generation_failed"},
                evidence_key="runbook",
            )
        simulation = None
        if operation == "drill":
            simulation = await run.tool(
                "simulate_failover",
                {"dry_run": True},
                essential=False,
                placeholder={"status": "simulation_failed"},
                evidence_key="failover_simulation",
            )

        risk = readiness_risk(status.readiness_score)
        run.evidence["readiness_score"] = status.readiness_score

        prompt = "\n".join(
            [
                "You are the FleetAgent Disaster Recovery Worker. Generate a DR plan.",
                "",
                self.task_block(task),
                "",
                f"## Operation Type: {operation}",
                "",
                f"## Current DR Status (readiness {status.readiness_score:.0f}%)",
                render_context(status_raw),
                "",
                "## Runbook",
                render_context(runbook),
                "",
                "## Failover Simulation",
                render_context(simulation),
                "",
                "Include RTO/RPO targets, failover and failback steps, and validation checks.",
                "",
                PLAN_JSON_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_plan(content, run.fallback_plan(asset_count, risk))

        return run.build_from_resolution(
            resolution,
            summary=(
                f"DR {operation} plan generated. Readiness: {status.readiness_score:.0f}%. "
                f"Assets: {asset_count}"
            ),
            affected_assets=asset_count,
            risk=risk,
            actions=decision_actions(
                (APPROVE_LABELS[operation], "Approve and proceed with DR operation"),
                ("Modify Plan", "Edit the DR plan before execution"),
                ("Cancel", "Cancel the DR operation"),
            ),
        )
