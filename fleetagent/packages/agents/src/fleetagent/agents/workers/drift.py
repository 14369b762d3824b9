"""Drift Worker -- 配置漂移检测与修复计划"""

import structlog
from fleetagent.core.models import AgentResult, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, GoldenImage, read_result

from ..base import PLAN_JSON_INSTRUCTIONS, BaseWorker, render_context

log = structlog.get_logger()


class DriftWorker(BaseWorker):
    name = "drift_agent"
    description = "Detects configuration drift and generates remediation plans"
    supported_tasks = (TaskType.DRIFT_REMEDIATION,)
    required_tools = ("query_assets", "get_drift_status", "get_golden_image", "compare_versions")

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter, "environment": task.environment},
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        drift_status = await run.tool(
            "get_drift_status",
            {"environment": task.environment},
            evidence_key="drift_status",
        )
        golden = await run.tool(
            "get_golden_image",
            {"environment": task.environment},
            evidence_key="golden_image",
        )
        image = read_result(GoldenImage, golden)
        comparison = await run.tool(
            "compare_versions",
            {"target_version": image.version if image else ""},
            essential=False,
            placeholder={"status": "comparison_skipped"},
            evidence_key="version_comparison",
        )

        constraints = run.constraints
        prompt = "\n".join(
            [
                "You are the FleetAgent Drift Remediation Worker. Generate a safe remediation plan.",
                "",
                self.task_block(task),
                "",
                "## Current Drift Status",
                render_context(drift_status),
                "",
                "## Target Golden Image",
                render_context(golden),
                "",
                "## Version Comparison",
                render_context(comparison),
                "",
                f"## Affected Assets ({asset_count})",
                render_context(assets),
                "",
                "## Rollout Requirements",
                f"- Max batch size: {constraints.max_batch_size or 'default'}",
                f"- Canary required: {constraints.require_canary}",
                "- Canary phase first, then progressive waves with health checks between phases",
                "- Explicit rollback criteria",
                "",
                PLAN_JSON_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_plan(content, run.fallback_plan(asset_count))

        log.info(
            "drift_plan_ready",
            task_id=task.id,
            asset_count=asset_count,
            parse_method=resolution.method.value,
        )
        return run.build_from_resolution(
            resolution,
            summary=f"Generated drift remediation plan for {asset_count} assets",
            affected_assets=asset_count,
        )
