"""TaskSpec -- 一个工作单元的不可变描述

由上游调用方创建，派发后不可变；Worker 只读不写。
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from ulid import ULID

from ..config import get_default_timeout_minutes
from .enums import RiskLevel, TaskType


class TaskContext(BaseModel):
    """任务上下文：目标平台、区域、资产过滤表达式及自由标签"""

    model_config = ConfigDict(frozen=True)

    platforms: list[str] = Field(default_factory=list, description="目标平台（aws/azure/gcp/vsphere/k8s）")
    regions: list[str] = Field(default_factory=list, description="目标区域")
    asset_filter: str = Field(default="", description="资产过滤表达式，如 state:running")
    tags: dict[str, str] = Field(default_factory=dict, description="自由标签")
    metadata: dict[str, Any] = Field(default_factory=dict, description="自由元数据")


class TaskConstraints(BaseModel):
    """constraints 中核心会解释的键的强类型视图

    其余键原样保留在 TaskSpec.constraints 中，仅用于 prompt 展示。
    """

    model_config = ConfigDict(extra="ignore")

    max_batch_size: int | None = Field(default=None, ge=1, description="单波次最大资产数")
    canary_size: int | None = Field(default=None, ge=1, le=100, description="金丝雀百分比")
    require_canary: bool = Field(default=True, description="是否要求金丝雀阶段")
    expiry_threshold_days: int | None = Field(default=None, ge=1, description="证书到期扫描窗口（天）")
    dry_run: bool = Field(default=False, description="仅演练，不变更")


class TaskSpec(BaseModel):
    """任务规格

    不可变（frozen），Worker 执行期间不得修改。
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(ULID()), description="任务 ID，默认 ULID")
    task_type: TaskType = Field(description="任务类型")
    goal: str = Field(description="自然语言目标")
    user_intent: str = Field(default="", description="用户原始意图")
    org_id: str = Field(description="组织 ID")
    user_id: str = Field(default="", description="发起用户 ID")
    environment: str = Field(default="staging", description="目标环境（staging/production 等）")
    context: TaskContext = Field(default_factory=TaskContext, description="任务上下文")
    tools_required: list[str] = Field(default_factory=list, description="调用方声明的工具需求")
    risk_level: RiskLevel = Field(default=RiskLevel.MEDIUM, description="风险提示")
    hitl_required: bool = Field(default=True, description="调用方是否强制人工审批")
    timeout_minutes: int = Field(
        default_factory=get_default_timeout_minutes,
        ge=1,
        description="执行超时（分钟）",
    )
    constraints: dict[str, Any] = Field(default_factory=dict, description="开放约束映射")

    @property
    def typed_constraints(self) -> TaskConstraints:
        """constraints 的强类型视图

        Raises:
            ValidationError: constraints 中已知键的值非法
        """
        return TaskConstraints.model_validate(self.constraints)

    @property
    def intent_text(self) -> str:
        """goal + user_intent 的小写拼接，供关键词意图分类使用"""
        return f"{self.goal} {self.user_intent}".lower()
