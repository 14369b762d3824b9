"""FleetAgent Core Domain Models -- 公共类型导出

所有公共模型类型从此入口导入。
"""

from .enums import (
    HIGH_RISK_LEVELS,
    UNTRUSTED_PARSE_METHODS,
    ActionType,
    AgentStatus,
    ParseMethod,
    PlanProvenance,
    QualityLevel,
    RiskLevel,
    TaskType,
)
from .plan import NotificationMatrix, Phase, Plan, RiskAssessment, RollbackPolicy
from .result import (
    DEFAULT_ACTIONS,
    READ_ONLY_ACTIONS,
    Action,
    AgentError,
    AgentResult,
    ToolInvocation,
    WorkerDescriptor,
    new_result,
    with_actions,
    with_error,
    with_parse_outcome,
    with_plan,
    with_quality,
    with_status,
    with_tokens,
)
from .task import TaskConstraints, TaskContext, TaskSpec

__all__ = [
    # 枚举
    "TaskType",
    "RiskLevel",
    "AgentStatus",
    "ActionType",
    "ParseMethod",
    "PlanProvenance",
    "QualityLevel",
    "HIGH_RISK_LEVELS",
    "UNTRUSTED_PARSE_METHODS",
    # Task
    "TaskSpec",
    "TaskContext",
    "TaskConstraints",
    # Plan
    "Plan",
    "Phase",
    "RollbackPolicy",
    "NotificationMatrix",
    "RiskAssessment",
    # Result
    "AgentResult",
    "Action",
    "AgentError",
    "ToolInvocation",
    "WorkerDescriptor",
    "DEFAULT_ACTIONS",
    "READ_ONLY_ACTIONS",
    # Builders
    "new_result",
    "with_plan",
    "with_quality",
    "with_tokens",
    "with_error",
    "with_parse_outcome",
    "with_actions",
    "with_status",
]
