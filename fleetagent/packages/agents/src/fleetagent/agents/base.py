"""Specialist Worker 契约与单次执行上下文

BaseWorker 是无状态的：同一实例可被多个任务并发执行。
每次 execute() 创建一个 WorkerRun，工具调用记录、token 统计、
错误与证据都只存在于 WorkerRun 中，执行结束后组装为 AgentResult。
"""

import json
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import structlog
from fleetagent.core.config import RAW_RESPONSE_PREVIEW_LENGTH, get_planner_alias
from fleetagent.core.models import (
    Action,
    ActionType,
    AgentError,
    AgentResult,
    AgentStatus,
    ParseMethod,
    Plan,
    RiskLevel,
    TaskConstraints,
    TaskSpec,
    TaskType,
    ToolInvocation,
    WorkerDescriptor,
    new_result,
    with_actions,
    with_parse_outcome,
    with_plan,
    with_quality,
    with_status,
    with_tokens,
)
from fleetagent.planner import (
    PlanResolution,
    default_plan,
    resolve_plan,
    resolve_report,
    score_plan,
)
from fleetagent.provider import CompletionRequest, CompletionService, Message, ProviderError
from fleetagent.tools import ToolError, ToolRegistry
from pydantic import ValidationError

from .exceptions import CompletionFailedError, EssentialToolError

log = structlog.get_logger()

# prompt 中嵌入单个工具结果的最大字符数
CONTEXT_PREVIEW_LENGTH = 3000

PLAN_JSON_INSTRUCTIONS = """Output ONLY valid JSON with this structure:
{
  "name": "short plan name",
  "summary": "Brief plan description",
  "estimated_duration": "e.g. 2h 30m",
  "phases": [
    {
      "name": "Phase name",
      "type": "validation|canary|wave|execution",
      "description": "What happens in this phase",
      "asset_percentage": 0,
      "checks": ["..."],
      "success_criteria": {"error_rate": "<1%"},
      "rollback_on_failure": true,
      "duration_minutes": 15
    }
  ],
  "rollback_policy": {
    "type": "automatic",
    "triggers": ["error_rate > 5%", "health_check_failure", "manual"],
    "procedure": "Description of rollback steps"
  },
  "notifications": {"on_start": ["slack"], "on_failure": ["slack", "email"]},
  "risk_assessment": {"level": "low|medium|high|critical", "factors": [], "mitigations": []}
}"""


def render_context(value: Any, limit: int = CONTEXT_PREVIEW_LENGTH) -> str:
    """把工具结果渲染为 prompt 片段（JSON，超长截断）"""
    text = json.dumps(value, default=str, ensure_ascii=False, indent=2)
    if len(text) > limit:
        return text[:limit] + "\n... (truncated)"
    return text


def contains_any(text: str, keywords: tuple[str, ...]) -> bool:
    return any(k in text for k in keywords)


def decision_actions(
    approve: tuple[str, str],
    modify: tuple[str, str],
    reject: tuple[str, str],
) -> list[Action]:
    """Worker 自定义文案的 approve / modify / reject 操作，参数为 (label, description)"""
    return [
        Action(type=ActionType.APPROVE, label=approve[0], description=approve[1]),
        Action(type=ActionType.MODIFY, label=modify[0], description=modify[1]),
        Action(type=ActionType.REJECT, label=reject[0], description=reject[1]),
    ]


def parse_risk(value: Any, default: RiskLevel = RiskLevel.MEDIUM) -> RiskLevel:
    """宽松解析风险等级字符串，无法识别时返回默认值"""
    if isinstance(value, RiskLevel):
        return value
    try:
        return RiskLevel(str(value).strip().lower())
    except ValueError:
        return default


class WorkerRun:
    """单次任务执行的可变上下文

    Args:
        worker: 执行中的 Worker
        task: 当前任务（只读）
    """

    def __init__(self, worker: "BaseWorker", task: TaskSpec) -> None:
        self.worker = worker
        self.task = task
        self.tool_calls: list[ToolInvocation] = []
        self.evidence: dict[str, Any] = {}
        self.errors: list[AgentError] = []
        self.input_tokens = 0
        self.output_tokens = 0
        self.raw_responses: list[str] = []
        self._constraints: TaskConstraints | None = None

    @property
    def constraints(self) -> TaskConstraints:
        """constraints 强类型视图；非法值记录错误并使用默认约束"""
        if self._constraints is None:
            try:
                self._constraints = self.task.typed_constraints
            except ValidationError as e:
                log.warning("invalid_task_constraints", task_id=self.task.id, error=str(e))
                self.add_error("INVALID_CONSTRAINTS", "task constraints rejected, defaults applied")
                self._constraints = TaskConstraints()
        return self._constraints

    def add_error(self, code: str, message: str, details: dict[str, Any] | None = None) -> None:
        self.errors.append(AgentError(code=code, message=message, details=details or {}))

    async def tool(
        self,
        name: str,
        params: dict[str, Any] | None = None,
        *,
        essential: bool = True,
        placeholder: Any = None,
        evidence_key: str | None = None,
    ) -> Any:
        """调用工具并记录审计信息

        org_id 自动注入。必要工具失败抛 EssentialToolError；
        可选工具失败记录 warning，返回 placeholder。

        Args:
            name: 工具名称
            params: 工具参数
            essential: 是否为必要工具
            placeholder: 可选工具失败时的占位值
            evidence_key: 写入 evidence 的键，默认为工具名

        Returns:
            工具结果或占位值

        Raises:
            EssentialToolError: 必要工具未注册或执行失败
        """
        full_params = {"org_id": self.task.org_id, **(params or {})}
        key = evidence_key or name
        start = time.monotonic()
        try:
            result = await self.worker.tools.execute(name, full_params)
        except ToolError as e:
            duration_ms = int((time.monotonic() - start) * 1000)
            self.tool_calls.append(
                ToolInvocation(
                    tool_name=name,
                    parameters=full_params,
                    error=str(e),
                    essential=essential,
                    duration_ms=duration_ms,
                )
            )
            if essential:
                log.error(
                    "tool_call_failed",
                    worker=self.worker.name,
                    task_id=self.task.id,
                    tool=name,
                    error=str(e),
                )
                raise EssentialToolError(name, e) from e

            log.warning(
                "optional_tool_degraded",
                worker=self.worker.name,
                task_id=self.task.id,
                tool=name,
                error=str(e),
            )
            self.evidence[key] = placeholder
            return placeholder

        self.tool_calls.append(
            ToolInvocation(
                tool_name=name,
                parameters=full_params,
                result=result,
                essential=essential,
                duration_ms=int((time.monotonic() - start) * 1000),
            )
        )
        self.evidence[key] = result
        return result

    async def complete(
        self,
        prompt: str,
        *,
        model_alias: str | None = None,
    ) -> str:
        """调用补全服务，累计 token 并保留原始响应

        alias 优先级：调用参数 > Worker 类属性 > FLEETAGENT_PLANNER_ALIAS。
        降级模型产出的响应在 evidence 中标记 llm_fallback。

        Raises:
            CompletionFailedError: 补全服务失败
        """
        request = CompletionRequest(
            system_prompt=self.worker.system_prompt,
            messages=[Message(role="user", content=prompt)],
            model_alias=model_alias or self.worker.model_alias or get_planner_alias(),
        )
        try:
            response = await self.worker.completion.complete(request)
        except ProviderError as e:
            log.error(
                "completion_failed",
                worker=self.worker.name,
                task_id=self.task.id,
                error=str(e),
            )
            raise CompletionFailedError(e) from e

        self.input_tokens += response.usage.prompt_tokens
        self.output_tokens += response.usage.completion_tokens
        self.raw_responses.append(response.content)
        if response.is_fallback:
            self.evidence["llm_fallback"] = True
        log.debug(
            "completion_received",
            worker=self.worker.name,
            task_id=self.task.id,
            stop_reason=response.stop_reason,
            tokens=response.usage.total_tokens,
            is_fallback=response.is_fallback,
        )
        return response.content

    def resolve_plan(self, text: str, fallback: Callable[[], Plan]) -> PlanResolution:
        """解析生成计划，失败时使用 fallback"""
        resolution = resolve_plan(text, fallback)
        if resolution.synthesized:
            self.evidence["plan_errors"] = resolution.errors[:10]
        return resolution

    def resolve_report(self, text: str, fallback: Callable[[], Plan]) -> PlanResolution:
        """解析报告类输出，报告内容挂到默认计划的 report 字段"""
        resolution = resolve_report(text, fallback)
        if resolution.errors:
            self.evidence["plan_errors"] = resolution.errors[:10]
        return resolution

    def fallback_plan(self, asset_count: int = 0, risk: RiskLevel | None = None, summary: str = "") -> Callable[[], Plan]:
        """按任务类型的默认计划构造器"""
        task_type = self.task.task_type
        constraints = self.constraints
        level = risk or self.task.risk_level

        def _build() -> Plan:
            return default_plan(task_type, asset_count, level, constraints, summary=summary)

        return _build

    def build(
        self,
        *,
        plan: Plan | None,
        summary: str,
        affected_assets: int = 0,
        risk: RiskLevel | None = None,
        parse_method: ParseMethod = ParseMethod.DIRECT,
        parse_warning: str = "",
        status: AgentStatus = AgentStatus.PENDING_APPROVAL,
        actions: list[Action] | tuple[Action, ...] | None = None,
        quality_score: float | None = None,
    ) -> AgentResult:
        """组装 AgentResult

        quality_score 缺省时按计划完整度评分；
        上限截断与 HITL 判定由 Dispatcher 统一执行。
        """
        score = quality_score if quality_score is not None else score_plan(plan)
        result = new_result(self.task.id, self.worker.name, self.worker.version)
        result = with_plan(result, plan)
        result = with_quality(result, score, risk or self.task.risk_level)
        result = with_tokens(result, self.input_tokens, self.output_tokens)
        result = with_parse_outcome(result, parse_method, parse_warning)
        if actions is not None:
            result = with_actions(result, actions)
        result = with_status(result, status)

        raw = "\n---\n".join(self.raw_responses)
        return result.model_copy(
            update={
                "summary": summary,
                "affected_assets": max(affected_assets, 0),
                "confidence": round(min(max(score, 0.0), 100.0) / 100, 2),
                "tool_calls": list(self.tool_calls),
                "evidence": dict(self.evidence),
                "errors": list(self.errors),
                "raw_llm_response": raw[:RAW_RESPONSE_PREVIEW_LENGTH],
            }
        )

    def build_from_resolution(
        self,
        resolution: PlanResolution,
        *,
        summary: str,
        affected_assets: int = 0,
        risk: RiskLevel | None = None,
        actions: list[Action] | tuple[Action, ...] | None = None,
    ) -> AgentResult:
        return self.build(
            plan=resolution.plan,
            summary=summary,
            affected_assets=affected_assets,
            risk=risk,
            parse_method=resolution.method,
            parse_warning=resolution.warning,
            actions=actions,
        )


class BaseWorker(ABC):
    """Specialist Worker 基类

    子类设置类属性并实现 execute()。实例只持有只读依赖，
    执行状态全部放在 WorkerRun 中。
    """

    name: str = ""
    description: str = ""
    version: str = "1.0.0"
    supported_tasks: tuple[TaskType, ...] = ()
    required_tools: tuple[str, ...] = ()
    # None 表示使用规划 alias
    model_alias: str | None = None
    system_prompt: str = (
        "You are an infrastructure remediation specialist. "
        "Generate safe, validated plans. Output ONLY valid JSON, no markdown or explanation."
    )

    def __init__(self, completion: CompletionService, tools: ToolRegistry) -> None:
        self.completion = completion
        self.tools = tools

    def descriptor(self) -> WorkerDescriptor:
        return WorkerDescriptor(
            name=self.name,
            description=self.description,
            version=self.version,
            supported_tasks=[t.value for t in self.supported_tasks],
            required_tools=list(self.required_tools),
        )

    def new_run(self, task: TaskSpec) -> WorkerRun:
        log.info("worker_execution_started", worker=self.name, task_id=task.id, task_type=task.task_type.value)
        return WorkerRun(self, task)

    def task_block(self, task: TaskSpec) -> str:
        """prompt 公共段落：目标、环境、约束"""
        lines = [
            "## User Goal",
            task.goal,
        ]
        if task.user_intent:
            lines += ["", "## User Intent", task.user_intent]
        lines += [
            "",
            "## Environment",
            task.environment,
            "",
            "## Risk Hint",
            task.risk_level.value,
        ]
        if task.context.platforms:
            lines += ["", "## Platforms", ", ".join(task.context.platforms)]
        if task.constraints:
            lines += ["", "## Constraints", render_context(task.constraints)]
        return "\n".join(lines)

    @abstractmethod
    async def execute(self, task: TaskSpec) -> AgentResult:
        """执行任务

        Raises:
            EssentialToolError: 必要工具失败
            CompletionFailedError: 补全服务失败
        """
        ...
