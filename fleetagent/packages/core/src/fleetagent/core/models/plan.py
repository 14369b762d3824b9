"""Plan Domain Model -- 分阶段修复计划

计划有两种来源：generated（从 LLM 输出抽取并通过 schema 校验）
与 synthesized（确定性合成）。
不变式：返回给调用方的每个 Plan 至少包含一个阶段，且带显式回滚策略。
"""

import json
from typing import Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    computed_field,
    field_validator,
    model_validator,
)

from ..config import get_notify_channel
from .enums import PlanProvenance, RiskLevel


class Phase(BaseModel):
    """单个执行阶段"""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(min_length=1, description="阶段名称")
    type: str = Field(default="wave", description="阶段类型（validation/canary/wave/...）")
    description: str = Field(default="", description="阶段说明")
    asset_percentage: float = Field(
        default=0.0,
        ge=0.0,
        le=100.0,
        validation_alias=AliasChoices("asset_percentage", "batch_percent", "percentage"),
        description="累计覆盖的资产百分比",
    )
    asset_count: int = Field(default=0, ge=0, description="本阶段资产数")
    checks: list[str] = Field(default_factory=list, description="阶段检查项")
    success_criteria: dict[str, str] = Field(default_factory=dict, description="成功判据")
    rollback_on_failure: bool = Field(default=True, description="失败时是否回滚")
    duration_minutes: int = Field(
        default=0,
        ge=0,
        validation_alias=AliasChoices("duration_minutes", "wait_minutes"),
        description="预计耗时（分钟）",
    )
    health_check_wait_minutes: int | None = Field(default=None, ge=0, description="健康检查等待（分钟）")

    @field_validator("success_criteria", mode="before")
    @classmethod
    def _stringify_criteria(cls, value: Any) -> Any:
        """判据值统一为字符串，如 {"error_rate": 0.01} -> {"error_rate": "0.01"}"""
        if not isinstance(value, dict):
            return value
        return {str(k): v if isinstance(v, str) else json.dumps(v) for k, v in value.items()}


class RollbackPolicy(BaseModel):
    """回滚策略"""

    type: str = Field(default="automatic", description="automatic / manual")
    triggers: list[str] = Field(default_factory=list, description="回滚触发条件")
    threshold: float | None = Field(default=None, ge=0.0, description="错误率阈值")
    window_minutes: int | None = Field(default=None, ge=0, description="观察窗口（分钟）")
    procedure: str = Field(default="", description="回滚步骤说明")
    estimated_minutes: int | None = Field(default=None, ge=0, description="预计回滚耗时（分钟）")


class NotificationMatrix(BaseModel):
    """通知矩阵 -- 各事件对应的通知渠道

    LLM 输出常见 {"on_start": true, "slack_channel": "#ops"} 形式，
    布尔值统一归一化为渠道列表。
    """

    on_start: list[str] = Field(default_factory=list)
    on_phase_complete: list[str] = Field(default_factory=list)
    on_failure: list[str] = Field(default_factory=list)
    on_complete: list[str] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _normalize_flags(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        channel = data.get("slack_channel") or get_notify_channel()
        normalized = dict(data)
        for key in ("on_start", "on_phase_complete", "on_failure", "on_complete"):
            value = normalized.get(key)
            if isinstance(value, bool):
                normalized[key] = [channel] if value else []
            elif isinstance(value, str):
                normalized[key] = [value]
        return normalized


class RiskAssessment(BaseModel):
    """计划自带的风险评估"""

    level: RiskLevel | None = Field(default=None, description="风险等级")
    factors: list[str] = Field(default_factory=list, description="风险因素")
    mitigations: list[str] = Field(default_factory=list, description="缓解措施")


class Plan(BaseModel):
    """修复计划

    phases 至少一个，rollback_policy 必填；缺失时校验失败，
    由调用方转入确定性合成兜底。
    """

    model_config = ConfigDict(coerce_numbers_to_str=True)

    name: str = Field(default="remediation-plan", description="计划名称")
    summary: str = Field(default="", description="计划摘要")
    phases: list[Phase] = Field(min_length=1, description="有序阶段列表")
    rollback_policy: RollbackPolicy = Field(description="回滚策略")
    notifications: NotificationMatrix = Field(
        default_factory=NotificationMatrix,
        description="通知矩阵",
    )
    estimated_duration: str = Field(default="", description="预计总耗时")
    risk_assessment: RiskAssessment | None = Field(default=None, description="风险评估")
    report: dict[str, Any] = Field(
        default_factory=dict,
        description="报告类 Worker 的透传内容（审计用，不做 schema 约束）",
    )
    provenance: PlanProvenance = Field(default=PlanProvenance.GENERATED, description="计划来源")

    @model_validator(mode="before")
    @classmethod
    def _unwrap_envelope(cls, data: Any) -> Any:
        """兼容 {"plan": {...}, "summary": ..., "risk_assessment": ...} 外层包装"""
        if not isinstance(data, dict):
            return data
        inner = data.get("plan")
        if isinstance(inner, dict) and "phases" not in data:
            merged = dict(inner)
            for key in ("summary", "risk_assessment", "estimated_duration"):
                if key in data and key not in merged:
                    merged[key] = data[key]
            return merged
        return data

    @computed_field
    @property
    def total_phases(self) -> int:
        return len(self.phases)
