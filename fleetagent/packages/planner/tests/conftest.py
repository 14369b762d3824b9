"""packages/planner 测试配置"""

import json

import pytest


@pytest.fixture
def plan_payload() -> dict:
    """合法计划 JSON"""
    return {
        "name": "drift-fix",
        "summary": "Fix drift on 40 web servers",
        "phases": [
            {"name": "Canary", "type": "canary", "batch_percent": 5, "checks": ["health"]},
            {"name": "Wave 1", "type": "wave", "batch_percent": 100, "checks": ["health"]},
        ],
        "rollback_policy": {"type": "automatic", "triggers": ["error_rate > 5%"]},
        "notifications": {"on_failure": ["slack"]},
        "estimated_duration": "45 minutes",
    }


@pytest.fixture
def plan_json(plan_payload) -> str:
    return json.dumps(plan_payload)
