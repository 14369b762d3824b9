"""Domain Models 单元测试

测试内容：
1. 枚举取值
2. TaskSpec 不可变与约束视图
3. Plan schema 校验（外层包装、别名、通知归一化）
4. AgentResult builder 语义
"""

import pytest
from fleetagent.core.models import (
    DEFAULT_ACTIONS,
    ActionType,
    AgentStatus,
    NotificationMatrix,
    ParseMethod,
    Plan,
    RiskLevel,
    TaskSpec,
    TaskType,
    new_result,
    with_error,
    with_parse_outcome,
    with_quality,
    with_tokens,
)
from pydantic import ValidationError


class TestEnums:
    """枚举取值测试"""

    def test_task_type_closed_set(self):
        """TaskType 共 12 种"""
        assert len(list(TaskType)) == 12
        assert TaskType("vulnerability_response") == TaskType.VULNERABILITY_RESPONSE

    def test_risk_level_includes_critical(self):
        """RiskLevel 包含 critical"""
        assert RiskLevel("critical") == RiskLevel.CRITICAL

    def test_agent_status_values(self):
        """AgentStatus 生命周期取值"""
        assert {s.value for s in AgentStatus} == {
            "pending_approval",
            "approved",
            "executing",
            "completed",
            "failed",
            "cancelled",
        }


class TestTaskSpec:
    """TaskSpec 测试"""

    def test_default_id_is_ulid(self, task_factory):
        """未指定 id 时生成 26 位 ULID"""
        task = task_factory()
        assert len(task.id) == 26

    def test_frozen(self, task_factory):
        """派发后不可修改"""
        task = task_factory()
        with pytest.raises(ValidationError):
            task.goal = "changed"

    def test_typed_constraints(self, task_factory):
        """constraints 强类型视图"""
        task = task_factory(constraints={"max_batch_size": 20, "canary_size": 10, "note": "x"})
        typed = task.typed_constraints
        assert typed.max_batch_size == 20
        assert typed.canary_size == 10
        assert typed.require_canary is True

    def test_invalid_constraint_raises(self, task_factory):
        """非法约束值校验失败"""
        task = task_factory(constraints={"max_batch_size": 0})
        with pytest.raises(ValidationError):
            _ = task.typed_constraints

    def test_intent_text_lowercase(self):
        """intent_text 拼接 goal 与 user_intent 并转小写"""
        task = TaskSpec(
            task_type=TaskType.IMAGE_MANAGEMENT,
            goal="Promote Image",
            user_intent="To PROD",
            org_id="org-1",
        )
        assert task.intent_text == "promote image to prod"


class TestPlan:
    """Plan schema 校验测试"""

    def test_requires_phase(self):
        """phases 为空时校验失败"""
        with pytest.raises(ValidationError):
            Plan.model_validate({"phases": [], "rollback_policy": {"triggers": ["manual"]}})

    def test_requires_rollback_policy(self):
        """缺少 rollback_policy 时校验失败"""
        with pytest.raises(ValidationError):
            Plan.model_validate({"phases": [{"name": "canary"}]})

    def test_unwraps_plan_envelope(self):
        """兼容 {"plan": {...}, "summary": ...} 外层包装"""
        plan = Plan.model_validate(
            {
                "plan": {
                    "name": "p",
                    "phases": [{"name": "canary", "batch_percent": 5, "wait_minutes": 10}],
                    "rollback_policy": {"type": "automatic", "threshold": 0.05},
                },
                "summary": "outer summary",
                "risk_assessment": {"level": "medium"},
            }
        )
        assert plan.summary == "outer summary"
        assert plan.phases[0].asset_percentage == 5
        assert plan.phases[0].duration_minutes == 10
        assert plan.risk_assessment.level == RiskLevel.MEDIUM

    def test_wrong_phase_types_rejected(self):
        """阶段字段类型错误时校验失败"""
        with pytest.raises(ValidationError):
            Plan.model_validate(
                {
                    "phases": [{"name": "canary", "batch_percent": "a lot"}],
                    "rollback_policy": {},
                }
            )

    def test_notification_flags_normalized(self):
        """布尔通知标记归一化为渠道列表"""
        matrix = NotificationMatrix.model_validate(
            {"slack_channel": "#ops-alerts", "on_start": True, "on_failure": False}
        )
        assert matrix.on_start == ["#ops-alerts"]
        assert matrix.on_failure == []

    def test_notification_default_channel_from_env(self, monkeypatch):
        """未给 slack_channel 时使用配置的通知渠道"""
        monkeypatch.setenv("FLEETAGENT_NOTIFY_CHANNEL", "pagerduty")
        matrix = NotificationMatrix.model_validate({"on_failure": True})
        assert matrix.on_failure == ["pagerduty"]

    def test_numeric_cosmetic_fields_coerced(self):
        """数值型耗时与成功判据被转为字符串，计划仍然可用"""
        plan = Plan.model_validate(
            {
                "phases": [
                    {"name": "canary", "success_criteria": {"error_rate": 0.01, "healthy": True}},
                ],
                "rollback_policy": {"triggers": ["manual"]},
                "estimated_duration": 45,
            }
        )
        assert plan.estimated_duration == "45"
        assert plan.phases[0].success_criteria == {"error_rate": "0.01", "healthy": "true"}

    def test_total_phases_serialized(self):
        """total_phases 出现在序列化结果中"""
        plan = Plan.model_validate(
            {"phases": [{"name": "canary"}, {"name": "wave"}], "rollback_policy": {}}
        )
        dumped = plan.model_dump(mode="json")
        assert dumped["total_phases"] == 2
        assert Plan.model_validate(dumped).total_phases == 2


class TestAgentResultBuilders:
    """AgentResult builder 测试"""

    def test_new_result_defaults(self):
        """初始状态 pending_approval，默认三种操作"""
        result = new_result("t-1", "drift_agent")
        assert result.status == AgentStatus.PENDING_APPROVAL
        assert [a.type for a in result.actions] == [
            ActionType.APPROVE,
            ActionType.MODIFY,
            ActionType.REJECT,
        ]
        assert result.actions[0].label == DEFAULT_ACTIONS[0].label == "Approve & Execute"

    def test_with_tokens_sums(self):
        """tokens_used = input + output"""
        result = with_tokens(new_result("t-1", "a"), 120, 30)
        assert result.tokens_used == 150
        assert result.tokens_input == 120
        assert result.tokens_output == 30

    def test_builders_return_copies(self):
        """builder 返回新副本，原对象不变"""
        base = new_result("t-1", "a")
        updated = with_error(base, "TOOL_FAILED", "boom")
        assert base.errors == []
        assert updated.errors[0].code == "TOOL_FAILED"

    def test_with_quality_clamps(self):
        """质量分被限制在 [0,100]"""
        result = with_quality(new_result("t-1", "a"), 140.0, RiskLevel.LOW)
        assert result.quality_score == 100.0
        assert result.risk_level == RiskLevel.LOW

    def test_with_parse_outcome(self):
        """记录解析层级与告警"""
        result = with_parse_outcome(
            new_result("t-1", "a"),
            ParseMethod.EXTRACTED,
            "JSON was extracted from markdown code block",
        )
        assert result.parse_method == ParseMethod.EXTRACTED
        assert "markdown" in result.parse_warning
