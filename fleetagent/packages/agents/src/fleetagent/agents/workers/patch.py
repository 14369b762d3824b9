"""Patch Worker -- 分阶段补丁发布计划

资产查询为必要工具；金丝雀镜像、风险评分与发布模拟失败时降级为占位值。
"""

import structlog
from fleetagent.core.models import AgentResult, TaskSpec, TaskType
from fleetagent.planner import compute_sizing
from fleetagent.tools.results import AssetInventory, RiskScore, read_result

from ..base import PLAN_JSON_INSTRUCTIONS, BaseWorker, decision_actions, parse_risk, render_context

log = structlog.get_logger()

DEFAULT_ASSET_FILTER = "state:running"


class PatchWorker(BaseWorker):
    name = "patch_agent"
    description = "Orchestrates patch rollouts across infrastructure"
    supported_tasks = (TaskType.PATCH_ROLLOUT,)
    required_tools = ("query_assets", "get_golden_image", "calculate_risk_score", "simulate_rollout")
    system_prompt = (
        "You are an infrastructure patch management specialist. Generate safe, validated "
        "rollout plans. Output ONLY valid JSON, no markdown or explanation."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or DEFAULT_ASSET_FILTER},
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0
        log.info("patch_assets_found", task_id=task.id, count=asset_count)

        golden = await run.tool(
            "get_golden_image",
            {"environment": task.environment},
            essential=False,
            placeholder={"status": "using_latest"},
            evidence_key="golden_image",
        )
        risk_raw = await run.tool(
            "calculate_risk_score",
            {"environment": task.environment, "asset_count": asset_count},
            essential=False,
            placeholder={"risk_level": "medium", "score": 50},
            evidence_key="risk_assessment",
        )
        risk_score = read_result(RiskScore, risk_raw) or RiskScore()
        risk = parse_risk(risk_score.risk_level)

        sizing = compute_sizing(asset_count, risk, run.constraints)
        prompt = "\n".join(
            [
                "You are the FleetAgent Patch Worker. Generate a safe, phased patch rollout plan.",
                "",
                self.task_block(task),
                "",
                "## Assessed Risk",
                f"{risk.value} (score {risk_score.score:.0f})",
                "",
                f"## Current Assets ({asset_count})",
                render_context(assets),
                "",
                "## Target Golden Image",
                render_context(golden),
                "",
                "## Rollout Requirements",
                "1. Pre-flight checks (connectivity, disk space, backup status)",
                f"2. Canary phase ({sizing.canary_pct}% of assets)",
                f"3. Progressive waves (at most {sizing.wave_size} assets per wave)",
                "4. Health checks between each phase",
                "5. Rollback triggers and procedures",
                "6. Post-rollout validation",
                "",
                PLAN_JSON_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_plan(content, run.fallback_plan(asset_count, risk))

        await run.tool(
            "simulate_rollout",
            {"plan": resolution.plan.model_dump(mode="json"), "environment": task.environment},
            essential=False,
            placeholder={"status": "simulation_skipped"},
            evidence_key="simulation",
        )

        return run.build_from_resolution(
            resolution,
            summary=(
                f"Generated patch rollout plan for {asset_count} assets "
                f"(risk: {risk.value}, score: {risk_score.score:.0f})"
            ),
            affected_assets=asset_count,
            risk=risk,
            actions=decision_actions(
                ("Approve & Execute", "Approve the plan and begin phased rollout"),
                ("Modify Plan", "Edit the rollout plan before execution"),
                ("Reject", "Reject and cancel the patch rollout"),
            ),
        )
