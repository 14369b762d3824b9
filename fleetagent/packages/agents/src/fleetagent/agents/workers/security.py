"""Security Worker -- 安全扫描评估

整体风险：存在 critical 发现 -> critical；存在 high -> high；其余 medium。
"""

from fleetagent.core.models import AgentResult, RiskLevel, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, ComplianceStatus, read_result

from ..base import BaseWorker, decision_actions, render_context

REPORT_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "summary": "Security posture summary",
  "findings": [{"severity": "critical|high|medium|low", "title": "...", "assets": [], "remediation": "..."}],
  "priorities": ["..."]
}"""


def overall_risk(status: ComplianceStatus) -> RiskLevel:
    if status.critical_count > 0:
        return RiskLevel.CRITICAL
    if status.high_count > 0:
        return RiskLevel.HIGH
    return RiskLevel.MEDIUM


class SecurityWorker(BaseWorker):
    name = "security_agent"
    description = "Scans infrastructure for security issues and prioritizes remediation"
    supported_tasks = (TaskType.SECURITY_SCAN,)
    model_alias = "analyst"
    required_tools = ("query_assets", "get_compliance_status")
    system_prompt = (
        "You are a cloud security engineer. Assess findings and prioritize remediation. "
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

        status_raw = await run.tool(
            "get_compliance_status",
            essential=False,
            placeholder={"status": "unknown"},
            evidence_key="compliance_status",
        )
        status = read_result(ComplianceStatus, status_raw) or ComplianceStatus()
        risk = overall_risk(status)

        prompt = "\n".join(
            [
                "You are the FleetAgent Security Worker. Assess the security scan results.",
                "",
                self.task_block(task),
                "",
                f"## Findings (critical {status.critical_count}, high {status.high_count}, "
                f"medium {status.medium_count})",
                render_context(status_raw),
                "",
                f"## Scanned Assets ({asset_count})",
                render_context(assets),
                "",
                REPORT_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)
        resolution = run.resolve_report(content, run.fallback_plan(asset_count, risk))

        return run.build_from_resolution(
            resolution,
            summary=(
                f"Security scan: {asset_count} assets scanned. Critical: {status.critical_count}, "
                f"High: {status.high_count}. Overall risk: {risk.value}"
            ),
            affected_assets=asset_count,
            risk=risk,
            actions=decision_actions(
                ("Approve & Remediate", "Approve findings and generate remediation plan"),
                ("Modify Assessment", "Edit security assessment findings"),
                ("Dismiss", "Dismiss without action"),
            ),
        )
