"""Compliance Worker -- 合规审计报告

按关键词识别框架（默认 CIS），逐框架执行 check_control，
合规分 = passed * 100 // (passed + failed)。
"""

import structlog
from fleetagent.core.models import AgentResult, RiskLevel, TaskSpec, TaskType
from fleetagent.tools.results import AssetInventory, ControlCheck, read_result

from ..base import BaseWorker, decision_actions, render_context

log = structlog.get_logger()

# 关键词 -> 框架，按顺序匹配并去重
FRAMEWORK_KEYWORDS: tuple[tuple[str, str], ...] = (
    ("cis", "CIS"),
    ("soc2", "SOC2"),
    ("soc 2", "SOC2"),
    ("hipaa", "HIPAA"),
    ("pci", "PCI-DSS"),
    ("gdpr", "GDPR"),
    ("nist", "NIST"),
    ("iso", "ISO27001"),
    ("fedramp", "FedRAMP"),
)
DEFAULT_FRAMEWORK = "CIS"

# (下限, 合规等级, 风险等级)
COMPLIANCE_BANDS: tuple[tuple[int, str, RiskLevel], ...] = (
    (95, "compliant", RiskLevel.LOW),
    (80, "minor_issues", RiskLevel.MEDIUM),
    (60, "needs_attention", RiskLevel.HIGH),
)

REPORT_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "summary": "Executive summary",
  "findings": [{"framework": "CIS", "control": "1.1", "severity": "high", "finding": "..."}],
  "remediations": [{"control": "1.1", "action": "...", "effort": "low|medium|high"}],
  "attestation": "Statement suitable for auditors"
}"""


def parse_frameworks(text: str) -> list[str]:
    frameworks: list[str] = []
    for keyword, framework in FRAMEWORK_KEYWORDS:
        if keyword in text and framework not in frameworks:
            frameworks.append(framework)
    return frameworks or [DEFAULT_FRAMEWORK]


def compliance_score(passed: int, failed: int) -> int:
    total = passed + failed
    if total == 0:
        return 0
    return passed * 100 // total


def compliance_band(score: int) -> tuple[str, RiskLevel]:
    for floor, level, risk in COMPLIANCE_BANDS:
        if score >= floor:
            return level, risk
    return "critical", RiskLevel.CRITICAL


class ComplianceWorker(BaseWorker):
    name = "compliance_agent"
    description = "Audits infrastructure against compliance frameworks and prepares evidence"
    supported_tasks = (TaskType.COMPLIANCE_AUDIT,)
    model_alias = "analyst"
    required_tools = (
        "query_assets",
        "get_compliance_status",
        "check_control",
        "generate_compliance_evidence",
    )
    system_prompt = (
        "You are a compliance auditor for cloud infrastructure. Produce precise, "
        "evidence-backed audit reports. Output ONLY valid JSON."
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)

        assets = await run.tool(
            "query_assets",
            {"filter": task.context.asset_filter or "state:running"},
            essential=False,
            placeholder={"assets": [], "total": 0},
            evidence_key="assets",
        )
        inventory = read_result(AssetInventory, assets)
        asset_count = inventory.count if inventory else 0

        status = await run.tool(
            "get_compliance_status",
            essential=False,
            placeholder={"status": "unknown"},
            evidence_key="compliance_status",
        )

        frameworks = parse_frameworks(task.intent_text)
        control_results: dict[str, object] = {}
        passed = failed = 0
        for framework in frameworks:
            raw = await run.tool(
                "check_control",
                {"framework": framework},
                essential=False,
                placeholder={"framework": framework, "status": "error"},
                evidence_key=f"check_control:{framework}",
            )
            control_results[framework] = raw
            check = read_result(ControlCheck, raw)
            if check is not None:
                passed += check.passed
                failed += check.failed

        score = compliance_score(passed, failed)
        level, risk = compliance_band(score)

        prompt = "\n".join(
            [
                "You are the FleetAgent Compliance Worker. Write the audit report.",
                "",
                self.task_block(task),
                "",
                f"## Frameworks: {', '.join(frameworks)}",
                "",
                "## Current Compliance Status",
                render_context(status),
                "",
                f"## Control Results ({passed} passed, {failed} failed)",
                render_context(control_results),
                "",
                f"## Assets in Scope ({asset_count})",
                "",
                REPORT_INSTRUCTIONS,
            ]
        )
        content = await run.complete(prompt)

        summary = (
            f"Compliance audit: {score}% compliant ({passed} passed, {failed} failed) "
            f"across {len(frameworks)} frameworks"
        )
        resolution = run.resolve_report(content, run.fallback_plan(asset_count, risk, summary))

        await run.tool(
            "generate_compliance_evidence",
            {"frameworks": frameworks},
            essential=False,
            placeholder={"status": "generation_failed"},
            evidence_key="evidence_package",
        )
        run.evidence["metrics"] = {
            "compliance_score": score,
            "compliance_level": level,
            "total_passed": passed,
            "total_failed": failed,
            "frameworks": frameworks,
        }

        return run.build_from_resolution(
            resolution,
            summary=summary,
            affected_assets=asset_count,
            risk=risk,
            actions=decision_actions(
                ("Approve & Export", "Approve the compliance report and generate evidence package"),
                ("Modify Report", "Edit findings before export"),
                ("Reject", "Reject and discard the audit"),
            ),
        )
