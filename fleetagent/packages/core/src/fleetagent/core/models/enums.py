"""枚举定义 -- 任务类型、风险等级、结果状态、解析方式

包含 TaskType 封闭枚举、RiskLevel、AgentStatus 结果生命周期、
ActionType 人工操作类型、ParseMethod 解析层级与 PlanProvenance 计划来源。
"""

from enum import StrEnum


class TaskType(StrEnum):
    """任务类型 -- 封闭集合，扩展需新增 Worker 并注册"""

    DRIFT_REMEDIATION = "drift_remediation"
    PATCH_ROLLOUT = "patch_rollout"
    COMPLIANCE_AUDIT = "compliance_audit"
    INCIDENT_INVESTIGATION = "incident_investigation"
    DR_DRILL = "dr_drill"
    COST_OPTIMIZATION = "cost_optimization"
    SECURITY_SCAN = "security_scan"
    IMAGE_MANAGEMENT = "image_management"
    SOP_AUTHORING = "sop_authoring"
    TERRAFORM_GENERATION = "terraform_generation"
    CERTIFICATE_ROTATION = "certificate_rotation"
    VULNERABILITY_RESPONSE = "vulnerability_response"


class RiskLevel(StrEnum):
    """风险等级"""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# 需要强制人工审批的风险等级
HIGH_RISK_LEVELS: frozenset[RiskLevel] = frozenset({RiskLevel.HIGH, RiskLevel.CRITICAL})


class AgentStatus(StrEnum):
    """结果生命周期状态

    产出计划的 Worker 初始状态为 PENDING_APPROVAL；
    只读调查类 Worker 可直接终止于 COMPLETED。
    后续流转由外部审批流驱动。
    """

    PENDING_APPROVAL = "pending_approval"
    APPROVED = "approved"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ActionType(StrEnum):
    """人工操作类型"""

    APPROVE = "approve"
    MODIFY = "modify"
    REJECT = "reject"
    # 只读 Worker 的终态操作
    ACKNOWLEDGE = "acknowledge"
    DISMISS = "dismiss"


class ParseMethod(StrEnum):
    """计划解析层级 -- 作为信任信号"""

    DIRECT = "direct"
    EXTRACTED = "extracted"
    LENIENT = "lenient"
    FAILED = "failed"


# 非直接解析的层级（强制 HITL）
UNTRUSTED_PARSE_METHODS: frozenset[ParseMethod] = frozenset(
    {ParseMethod.EXTRACTED, ParseMethod.LENIENT}
)


class PlanProvenance(StrEnum):
    """计划来源"""

    GENERATED = "generated"
    SYNTHESIZED = "synthesized"


class QualityLevel(StrEnum):
    """质量等级"""

    EXCELLENT = "excellent"
    GOOD = "good"
    FAIR = "fair"
    POOR = "poor"
