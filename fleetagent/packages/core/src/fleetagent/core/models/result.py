"""AgentResult -- 结果/响应信封

每次任务执行产出一个 AgentResult。模型为 frozen，
组装阶段只能通过本模块的 builder 函数返回新副本。
"""

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .enums import (
    ActionType,
    AgentStatus,
    ParseMethod,
    QualityLevel,
    RiskLevel,
)
from .plan import Plan


class Action(BaseModel):
    """可供人工执行的操作"""

    model_config = ConfigDict(frozen=True)

    type: ActionType = Field(description="操作类型")
    label: str = Field(description="展示文案")
    description: str = Field(default="", description="操作说明")


class AgentError(BaseModel):
    """执行过程中记录的错误"""

    model_config = ConfigDict(frozen=True)

    code: str = Field(description="错误码")
    message: str = Field(description="错误描述")
    details: dict[str, Any] = Field(default_factory=dict, description="附加信息")


class ToolInvocation(BaseModel):
    """单次工具调用的审计记录 -- 不由本核心持久化"""

    model_config = ConfigDict(frozen=True)

    tool_name: str = Field(description="工具名称")
    parameters: dict[str, Any] = Field(default_factory=dict, description="调用参数")
    result: Any = Field(default=None, description="调用结果（失败时为 None）")
    error: str = Field(default="", description="错误描述，成功时为空")
    essential: bool = Field(default=True, description="是否为必要工具")
    duration_ms: int = Field(default=0, ge=0, description="耗时（毫秒）")
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC), description="调用时间")


class WorkerDescriptor(BaseModel):
    """Worker 描述信息 -- 启动时注册，此后只读"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="唯一名称")
    description: str = Field(default="", description="用途描述")
    version: str = Field(default="1.0.0", description="版本")
    supported_tasks: list[str] = Field(default_factory=list, description="支持的任务类型")
    required_tools: list[str] = Field(default_factory=list, description="依赖的工具名称")


DEFAULT_ACTIONS: tuple[Action, ...] = (
    Action(
        type=ActionType.APPROVE,
        label="Approve & Execute",
        description="Approve the plan and begin execution",
    ),
    Action(
        type=ActionType.MODIFY,
        label="Modify Plan",
        description="Edit the plan before execution",
    ),
    Action(
        type=ActionType.REJECT,
        label="Reject",
        description="Reject and cancel the task",
    ),
)

READ_ONLY_ACTIONS: tuple[Action, ...] = (
    Action(
        type=ActionType.ACKNOWLEDGE,
        label="Acknowledge",
        description="Acknowledge the findings",
    ),
    Action(
        type=ActionType.DISMISS,
        label="Dismiss",
        description="Dismiss the findings",
    ),
)


class AgentResult(BaseModel):
    """结果/响应信封

    quality_score / quality_level / hitl_required 为派生字段，
    由 planner.gate.finalize() 统一计算，Worker 不直接设置。
    """

    model_config = ConfigDict(frozen=True)

    # 身份
    task_id: str = Field(description="任务 ID")
    agent_name: str = Field(description="产出本结果的 Worker 名称")
    version: str = Field(default="1.0.0", description="Worker 版本")

    # 状态与计划
    status: AgentStatus = Field(default=AgentStatus.PENDING_APPROVAL, description="生命周期状态")
    plan: Plan | None = Field(default=None, description="修复计划，只读 Worker 可为空")
    summary: str = Field(default="", description="人类可读摘要")
    affected_assets: int = Field(default=0, ge=0, description="受影响资产数")

    # 评估
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM, description="风险等级")
    quality_score: float = Field(default=0.0, ge=0.0, le=100.0, description="质量分 [0,100]")
    quality_level: QualityLevel = Field(default=QualityLevel.POOR, description="质量等级")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="置信度")
    hitl_required: bool = Field(default=True, description="是否需要人工审批")

    # Token 使用
    tokens_used: int = Field(default=0, ge=0, description="总 token 数")
    tokens_input: int = Field(default=0, ge=0, description="输入 token 数")
    tokens_output: int = Field(default=0, ge=0, description="输出 token 数")

    # 审计
    tool_calls: list[ToolInvocation] = Field(default_factory=list, description="工具调用记录")
    evidence: dict[str, Any] = Field(default_factory=dict, description="原始工具/LLM 输出")
    errors: list[AgentError] = Field(default_factory=list, description="错误列表")
    actions: list[Action] = Field(default_factory=lambda: list(DEFAULT_ACTIONS), description="可用操作")

    # 解析来源
    raw_llm_response: str = Field(default="", description="原始 LLM 响应（截断）")
    parse_method: ParseMethod = Field(default=ParseMethod.DIRECT, description="计划解析层级")
    parse_warning: str = Field(default="", description="解析告警")


# ============================================================
# Builder 函数 -- 组装阶段返回新副本
# ============================================================


def new_result(task_id: str, agent_name: str, version: str = "1.0.0") -> AgentResult:
    """创建 PENDING_APPROVAL 初始结果，带默认 approve/modify/reject 操作"""
    return AgentResult(task_id=task_id, agent_name=agent_name, version=version)


def with_plan(result: AgentResult, plan: Plan | None) -> AgentResult:
    return result.model_copy(update={"plan": plan})


def with_quality(result: AgentResult, score: float, risk: RiskLevel) -> AgentResult:
    """设置 Worker 计算的原始质量分与风险等级（截断前）"""
    clamped = min(max(score, 0.0), 100.0)
    return result.model_copy(update={"quality_score": clamped, "risk_level": risk})


def with_tokens(result: AgentResult, input_tokens: int, output_tokens: int) -> AgentResult:
    """设置 token 统计，tokens_used = input + output"""
    return result.model_copy(
        update={
            "tokens_input": input_tokens,
            "tokens_output": output_tokens,
            "tokens_used": input_tokens + output_tokens,
        }
    )


def with_error(
    result: AgentResult,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> AgentResult:
    error = AgentError(code=code, message=message, details=details or {})
    return result.model_copy(update={"errors": [*result.errors, error]})


def with_parse_outcome(
    result: AgentResult,
    method: ParseMethod,
    warning: str = "",
) -> AgentResult:
    """记录解析层级与告警"""
    return result.model_copy(update={"parse_method": method, "parse_warning": warning})


def with_actions(result: AgentResult, actions: list[Action] | tuple[Action, ...]) -> AgentResult:
    return result.model_copy(update={"actions": list(actions)})


def with_status(result: AgentResult, status: AgentStatus) -> AgentResult:
    return result.model_copy(update={"status": status})
