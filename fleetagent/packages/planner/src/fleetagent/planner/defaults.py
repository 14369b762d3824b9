"""Default plan by category -- 按任务类型统一构建兜底计划

发布类（drift / patch / vulnerability）委托 Synthesizer；
编写类（image / sop / terraform）与报告类使用固定阶段模板。
所有兜底计划都带显式回滚策略，并标记 provenance=synthesized。
"""

from enum import StrEnum

from fleetagent.core.config import get_notify_channel
from fleetagent.core.models import (
    NotificationMatrix,
    Phase,
    Plan,
    PlanProvenance,
    RiskLevel,
    RollbackPolicy,
    TaskConstraints,
    TaskType,
)

from .synthesizer import synthesize_rollout_plan


class PlanCategory(StrEnum):
    ROLLOUT = "rollout"
    AUTHORING = "authoring"
    REPORT = "report"


CATEGORY_BY_TASK: dict[TaskType, PlanCategory] = {
    TaskType.DRIFT_REMEDIATION: PlanCategory.ROLLOUT,
    TaskType.PATCH_ROLLOUT: PlanCategory.ROLLOUT,
    TaskType.VULNERABILITY_RESPONSE: PlanCategory.ROLLOUT,
    TaskType.IMAGE_MANAGEMENT: PlanCategory.AUTHORING,
    TaskType.SOP_AUTHORING: PlanCategory.AUTHORING,
    TaskType.TERRAFORM_GENERATION: PlanCategory.AUTHORING,
    TaskType.COMPLIANCE_AUDIT: PlanCategory.REPORT,
    TaskType.COST_OPTIMIZATION: PlanCategory.REPORT,
    TaskType.SECURITY_SCAN: PlanCategory.REPORT,
    TaskType.INCIDENT_INVESTIGATION: PlanCategory.REPORT,
    TaskType.DR_DRILL: PlanCategory.REPORT,
    TaskType.CERTIFICATE_ROTATION: PlanCategory.REPORT,
}

# (名称, 类型, 检查项, 失败回滚, 耗时分钟)
_PhaseSpec = tuple[str, str, list[str], bool, int]

_TEMPLATES: dict[TaskType, list[_PhaseSpec]] = {
    TaskType.IMAGE_MANAGEMENT: [
        ("Contract Validation", "validation", ["schema", "base_image", "compliance_profile"], False, 5),
        ("Template Generation", "generation", ["packer_syntax", "ansible_lint"], False, 10),
        ("Image Build", "build", ["build_success"], True, 45),
        ("Compliance Testing", "validation", ["cis_benchmark", "vulnerability_scan"], True, 20),
        ("SBOM Generation", "generation", ["sbom_complete"], False, 5),
        ("Image Signing", "signing", ["signature_valid"], True, 5),
    ],
    TaskType.SOP_AUTHORING: [
        ("SOP Validation", "validation", ["schema", "step_references", "approvals"], False, 5),
        ("Dry-Run Simulation", "simulation", ["step_outcomes"], False, 15),
        ("SOP Registration", "registration", ["catalog_entry"], True, 5),
    ],
    TaskType.TERRAFORM_GENERATION: [
        ("Module Validation", "validation", ["terraform_validate", "tflint"], False, 5),
        ("Plan Generation", "plan", ["terraform_plan", "cost_estimate"], False, 10),
        ("Infrastructure Provisioning", "execution", ["apply_success", "state_consistent"], True, 30),
    ],
    TaskType.COMPLIANCE_AUDIT: [
        ("Evidence Review", "review", ["evidence_complete"], False, 30),
        ("Control Remediation", "remediation", ["failed_controls_addressed"], True, 60),
        ("Re-Audit", "validation", ["controls_pass"], False, 30),
    ],
    TaskType.COST_OPTIMIZATION: [
        ("Recommendation Review", "review", ["owner_signoff"], False, 30),
        ("Apply Savings", "execution", ["rightsizing_applied", "idle_resources_removed"], True, 60),
        ("Verify Savings", "validation", ["spend_delta"], False, 15),
    ],
    TaskType.SECURITY_SCAN: [
        ("Findings Review", "review", ["severity_triage"], False, 30),
        ("Remediation", "remediation", ["critical_findings_fixed"], True, 60),
        ("Verification Scan", "validation", ["rescan_clean"], False, 20),
    ],
    TaskType.INCIDENT_INVESTIGATION: [
        ("Triage", "review", ["alerts_correlated"], False, 15),
        ("Root Cause Analysis", "analysis", ["timeline", "contributing_factors"], False, 30),
        ("Follow-up Actions", "remediation", ["tickets_created"], False, 15),
    ],
    TaskType.DR_DRILL: [
        ("Preparation", "validation", ["replication_lag", "backup_status", "runbook_current"], False, 15),
        ("Failover Drill", "drill", ["rto_met", "rpo_met"], True, 60),
        ("Failback & Report", "validation", ["primary_restored", "report_generated"], False, 30),
    ],
    TaskType.CERTIFICATE_ROTATION: [
        ("Renewal Preparation", "validation", ["csr_generated", "ca_reachable"], False, 10),
        ("Certificate Deployment", "execution", ["certificate_installed"], True, 20),
        ("Handshake Verification", "validation", ["tls_handshake", "chain_valid"], False, 10),
    ],
}


def _template_plan(task_type: TaskType, asset_count: int, summary: str) -> Plan:
    specs = _TEMPLATES[task_type]
    count = len(specs)
    phases = [
        Phase(
            name=name,
            type=phase_type,
            asset_percentage=(i + 1) * 100 / count,
            asset_count=asset_count,
            checks=checks,
            rollback_on_failure=rollback,
            duration_minutes=minutes,
        )
        for i, (name, phase_type, checks, rollback, minutes) in enumerate(specs)
    ]
    channel = get_notify_channel()
    total = sum(spec[4] for spec in specs)

    return Plan(
        name=f"{task_type.value}-default",
        summary=summary or f"Default {task_type.value.replace('_', ' ')} plan",
        phases=phases,
        rollback_policy=RollbackPolicy(
            type="manual",
            triggers=["phase_failure", "manual"],
            procedure="Halt at the failing phase and restore the last approved state",
        ),
        notifications=NotificationMatrix(
            on_start=[channel],
            on_failure=[channel, "email"],
            on_complete=[channel],
        ),
        estimated_duration=f"{total} minutes",
        provenance=PlanProvenance.SYNTHESIZED,
    )


def default_plan(
    task_type: TaskType,
    asset_count: int = 0,
    risk: RiskLevel = RiskLevel.MEDIUM,
    constraints: TaskConstraints | None = None,
    summary: str = "",
) -> Plan:
    """按任务类型构建兜底计划

    Args:
        task_type: 任务类型
        asset_count: 涉及资产数
        risk: 风险等级（发布类决定金丝雀/波次比例）
        constraints: 发布类的约束覆盖
        summary: 计划摘要

    Returns:
        Plan，provenance=synthesized，至少一个阶段且带回滚策略
    """
    if CATEGORY_BY_TASK[task_type] == PlanCategory.ROLLOUT:
        return synthesize_rollout_plan(
            asset_count,
            risk,
            constraints,
            name=f"{task_type.value}-default",
            summary=summary,
        )
    return _template_plan(task_type, asset_count, summary)
