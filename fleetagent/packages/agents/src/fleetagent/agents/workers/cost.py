"""Cost Worker -- 成本优化建议"""

from fleetagent.core.models import AgentResult, RiskLevel, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, read_result

from ..base import BaseWorker, decision_actions, render_context

REPORT_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "summary": "Executive summary",
  "potential_monthly_savings": "$1,234",
  "savings_percentage": 15,
  "recommendations": [
    {"type": "rightsizing|idle|reserved|storage", "resource": "...", "action": "...", "monthly_savings": "$..."}
  ]
}"""


class CostWorker(BaseWorker):
    name = "cost_agent"
    description = "Analyzes infrastructure spend and recommends cost optimizations"
    supported_tasks = (TaskType.COST_OPTIMIZATION,)
    model_alias = "analyst"
    required_tools = ("query_assets",)
    system_prompt = (
        "You are a FinOps analyst. Recommend safe, concrete cost optimizations. "
        "Output ONLY valid JSON."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or "state:running"},
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        prompt = "\n".join(
            [
                "You are the FleetAgent Cost Optimization Worker. Analyze the assets below.",
                "",
                self.task_block(task),
                "",
                f"## Running Assets ({asset_count})",
                render_context(assets),
                "",
                "Identify rightsizing, idle resources, reserved capacity and storage savings.",
                "",
                REPORT_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_report(content, run.fallback_plan(asset_count, RiskLevel.LOW))

        savings = resolution.plan.report.get("potential_monthly_savings", "unknown")
        return run.build_from_resolution(
            resolution,
            summary=(
                f"Cost optimization analysis: {asset_count} assets analyzed. "
                f"Potential savings: {savings}"
            ),
            affected_assets=asset_count,
            risk=RiskLevel.LOW,
            actions=decision_actions(
                ("Apply Recommendations", "Apply the cost optimization recommendations"),
                ("Modify Recommendations", "Edit recommendations before applying"),
                ("Dismiss", "Dismiss recommendations without action"),
            ),
        )
