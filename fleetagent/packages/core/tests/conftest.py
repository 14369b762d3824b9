"""packages/core 测试配置 -- 核心层 fixture"""

import pytest
from fleetagent.core.models import TaskSpec, TaskType


@pytest.fixture
def task_factory():
    """构造测试用 TaskSpec 的工厂"""

    def _make(**overrides) -> TaskSpec:
        fields = {
            "task_type": TaskType.DRIFT_REMEDIATION,
            "goal": "Remediate drift on web tier",
            "org_id": "org-test",
            "environment": "staging",
        }
        fields.update(overrides)
        return TaskSpec(**fields)

    return _make
