"""Certificate Worker -- 证书扫描 / 分析 / 轮换 / 握手校验

意图按关键词判定，user_intent 优先于 goal：
    scan:     scan / expir / find / list
    analyze:  analyz / detail / inspect / impact
    rotate:   rotat / renew / replac / fix
    validate: validat / test / check / verify
均未命中时默认 scan。到期分桶：<= 7 天 critical，<= 14 天 high，其余 medium。
"""

from typing import Any

import structlog
from fleetagent.core.models import (
    READ_ONLY_ACTIONS,
    AgentResult,
    AgentStatus,
    RiskLevel,
    TaskSpec,
    TaskType,
)
from fleetagent.tools.results import (
    BlastRadius,
    CertificateListing,
    CertificateSummary,
    TLSValidation,
    read_result,
)

from ..base import (
    PLAN_JSON_INSTRUCTIONS,
    BaseWorker,
    WorkerRun,
    contains_any,
    decision_actions,
    parse_risk,
    render_context,
)

log = structlog.get_logger()

DEFAULT_EXPIRY_DAYS = 30
VALIDATION_QUALITY = 90.0

_INTENT_KEYWORDS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("scan", ("scan", "expir", "find", "list")),
    ("analyze", ("analyz", "detail", "inspect", "impact")),
    ("rotate", ("rotat", "renew", "replac", "fix")),
    ("validate", ("validat", "test", "check", "verify")),
)

REPORT_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "summary": "One paragraph summary",
  "recommendations": ["..."]
}"""


def classify_intent(user_intent: str, goal: str) -> str:
    intent = user_intent.lower()
    for name, keywords in _INTENT_KEYWORDS:
        if contains_any(intent, keywords):
            return name
    goal = goal.lower()
    if contains_any(goal, ("scan", "expir")):
        return "scan"
    if contains_any(goal, ("rotat", "renew")):
        return "rotate"
    return "scan"


def bucket_certificates(certs: list[CertificateSummary]) -> dict[str, list[CertificateSummary]]:
    buckets: dict[str, list[CertificateSummary]] = {"critical": [], "high": [], "medium": []}
    for cert in certs:
        if cert.days_until_expiry <= 7:
            buckets["critical"].append(cert)
        elif cert.days_until_expiry <= 14:
            buckets["high"].append(cert)
        else:
            buckets["medium"].append(cert)
    return buckets


def bucket_risk(buckets: dict[str, list[CertificateSummary]]) -> RiskLevel:
    if buckets["critical"]:
        return RiskLevel.CRITICAL
    if buckets["high"]:
        return RiskLevel.HIGH
    if buckets["medium"]:
        return RiskLevel.MEDIUM
    return RiskLevel.LOW


class CertificateWorker(BaseWorker):
    name = "certificate_agent"
    description = "Finds expiring certificates and plans safe rotations"
    supported_tasks = (TaskType.CERTIFICATE_ROTATION,)
    required_tools = (
        "list_certificates",
        "get_certificate_details",
        "map_certificate_usage",
        "generate_cert_renewal_plan",
        "validate_tls_handshake",
    )

    async def execute(self, task: TaskSpec) -> AgentResult:
        run = self.new_run(task)
        intent = classify_intent(task.user_intent, task.goal)
        run.evidence["intent"] = intent
        log.info("certificate_intent_classified", task_id=task.id, intent=intent)

        if intent == "analyze":
            return await self._analyze(run)
        if intent == "rotate":
            return await self._rotate(run)
        if intent == "validate":
            return await self._validate(run)
        return await self._scan(run)

    def _certificate_id(self, run: WorkerRun) -> str:
        return str(run.task.context.metadata.get("certificate_id", ""))

    async def _scan(self, run: WorkerRun) -> AgentResult:
        days = run.constraints.expiry_threshold_days or DEFAULT_EXPIRY_DAYS
        raw = await run.tool(
            "list_certificates",
            {"expiring_within_days": days},
            evidence_key="certificates",
        )
        listing = read_result(CertificateListing, raw) or CertificateListing()
        buckets = bucket_certificates(listing.certificates)
        risk = bucket_risk(buckets)
        counts = {k: len(v) for k, v in buckets.items()}
        run.evidence["buckets"] = {k: [c.id for c in v] for k, v in buckets.items()}

        content = await run.complete(
            "\n".join(
                [
                    "You are the FleetAgent Certificate Worker. Summarize the expiring certificates",
                    "and recommend a rotation order.",
                    "",
                    self.task_block(run.task),
                    "",
                    f"## Expiring within {days} days (critical {counts['critical']}, high {counts['high']}, "
                    f"medium {counts['medium']})",
                    render_context(raw),
                    "",
                    REPORT_INSTRUCTIONS,
                ]
            ),
            model_alias="summarizer",
        )
        total = len(listing.certificates)
        summary = (
            f"Found {total} certificates requiring attention: {counts['critical']} critical, "
            f"{counts['high']} high priority, {counts['medium']} medium priority"
        )
        resolution = run.resolve_report(content, run.fallback_plan(total, risk, summary))
        return run.build_from_resolution(
            resolution,
            summary=summary,
            affected_assets=total,
            risk=risk,
            actions=decision_actions(
                ("Generate Rotation Plan", "Create a phased rotation plan for all expiring certificates"),
                ("Modify Scope", "Adjust which certificates are included"),
                ("Dismiss", "Dismiss the scan results"),
            ),
        )

    async def _analyze(self, run: WorkerRun) -> AgentResult:
        cert_id = self._certificate_id(run)
        details = await run.tool(
            "get_certificate_details",
            {"certificate_id": cert_id},
            evidence_key="certificate",
        )
        usage = await run.tool(
            "map_certificate_usage",
            {"certificate_id": cert_id},
            essential=False,
            placeholder={"status": "usage_unavailable"},
            evidence_key="usage",
        )
        blast = read_result(BlastRadius, usage)
        risk = parse_risk(blast.risk_level) if blast else RiskLevel.MEDIUM
        affected = blast.total_usages if blast else 0

        content = await run.complete(
            "\n".join(
                [
                    "You are the FleetAgent Certificate Worker. Analyze the rotation impact.",
                    "",
                    self.task_block(run.task),
                    "",
                    "## Certificate",
                    render_context(details),
                    "",
                    "## Usage",
                    render_context(usage),
                    "",
                    REPORT_INSTRUCTIONS,
                ]
            )
        )
        summary = f"Certificate {cert_id} is used by {affected} endpoints (risk: {risk.value})"
        resolution = run.resolve_report(content, run.fallback_plan(affected, risk, summary))
        return run.build_from_resolution(
            resolution,
            summary=summary,
            affected_assets=affected,
            risk=risk,
            actions=decision_actions(
                ("Rotate Certificate", "Generate and execute rotation plan"),
                ("Schedule Rotation", "Schedule rotation for a future time"),
                ("No Action", "Acknowledge without taking action"),
            ),
        )

    async def _rotate(self, run: WorkerRun) -> AgentResult:
        cert_id = self._certificate_id(run)
        renewal = await run.tool(
            "generate_cert_renewal_plan",
            {"certificate_id": cert_id},
            evidence_key="renewal_plan",
        )
        usage = await run.tool(
            "map_certificate_usage",
            {"certificate_id": cert_id},
            essential=False,
            placeholder={"status": "usage_unavailable"},
            evidence_key="usage",
        )
        blast = read_result(BlastRadius, usage)
        affected = blast.total_usages if blast else 0
        risk = RiskLevel.HIGH if blast and blast.production_count > 0 else run.task.risk_level

        content = await run.complete(
            "\n".join(
                [
                    "You are the FleetAgent Certificate Worker. Produce a safe rotation plan that",
                    "deploys the renewed certificate in phases and verifies TLS after each phase.",
                    "",
                    self.task_block(run.task),
                    "",
                    "## Renewal Plan",
                    render_context(renewal),
                    "",
                    "## Usage",
                    render_context(usage),
                    "",
                    PLAN_JSON_INSTRUCTIONS,
                ]
            )
        )
        resolution = run.resolve_plan(content, run.fallback_plan(affected, risk))
        return run.build_from_resolution(
            resolution,
            summary=f"Rotation plan for certificate {cert_id} across {affected} endpoints",
            affected_assets=affected,
            risk=risk,
            actions=decision_actions(
                ("Approve & Execute", "Approve the plan and begin rotation"),
                ("Modify Plan", "Edit the plan before execution"),
                ("Reject", "Cancel the rotation"),
            ),
        )

    async def _validate(self, run: WorkerRun) -> AgentResult:
        endpoints: list[Any] = run.task.context.metadata.get("endpoints") or []
        results: list[TLSValidation] = []
        for endpoint in endpoints:
            raw = await run.tool(
                "validate_tls_handshake",
                {"endpoint": str(endpoint)},
                essential=False,
                placeholder={"endpoint": str(endpoint), "valid": False, "error": "validation_unavailable"},
                evidence_key=f"tls:{endpoint}",
            )
            results.append(read_result(TLSValidation, raw) or TLSValidation(endpoint=str(endpoint)))

        failed = [r.endpoint for r in results if not r.valid]
        run.evidence["failed_endpoints"] = failed
        return run.build(
            plan=None,
            summary=f"Validated {len(results)} endpoints: {len(results) - len(failed)} passed, {len(failed)} failed",
            affected_assets=len(results),
            risk=RiskLevel.HIGH if failed else RiskLevel.LOW,
            status=AgentStatus.COMPLETED,
            actions=READ_ONLY_ACTIONS[:1],
            quality_score=VALIDATION_QUALITY,
        )
