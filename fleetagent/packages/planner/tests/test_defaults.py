"""按类别默认计划测试"""

import pytest
from fleetagent.core.models import PlanProvenance, RiskLevel, TaskType
from fleetagent.planner import CATEGORY_BY_TASK, PlanCategory, default_plan


class TestDefaultPlan:
    """default_plan 测试"""

    def test_every_task_type_covered(self):
        assert set(CATEGORY_BY_TASK) == set(TaskType)

    @pytest.mark.parametrize("task_type", list(TaskType))
    def test_plan_is_valid_and_synthesized(self, task_type):
        """所有类别的兜底计划都有阶段和回滚策略"""
        plan = default_plan(task_type, asset_count=12, risk=RiskLevel.MEDIUM)
        assert plan.phases
        assert plan.rollback_policy.triggers
        assert plan.provenance == PlanProvenance.SYNTHESIZED

    def test_rollout_delegates_to_synthesizer(self):
        plan = default_plan(TaskType.PATCH_ROLLOUT, asset_count=100)
        assert plan.phases[1].name == "Canary Deployment"
        assert CATEGORY_BY_TASK[TaskType.PATCH_ROLLOUT] == PlanCategory.ROLLOUT

    def test_sop_phases(self):
        plan = default_plan(TaskType.SOP_AUTHORING)
        assert [p.name for p in plan.phases] == [
            "SOP Validation",
            "Dry-Run Simulation",
            "SOP Registration",
        ]

    def test_report_summary_passthrough(self):
        plan = default_plan(TaskType.COMPLIANCE_AUDIT, summary="CIS audit")
        assert plan.summary == "CIS audit"
        assert plan.phases[-1].asset_percentage == 100
