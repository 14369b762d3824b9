"""packages/agents 测试 fixtures

补全服务用 AsyncMock 替身；工具注册表使用带参数模型的 FunctionTool，
默认返回固定数据，可按名称注入失败或覆盖返回值。
"""

import json
from typing import Any
from unittest.mock import AsyncMock

import pytest
from fleetagent.core.models import TaskSpec, TaskType
from fleetagent.provider import CompletionResponse, TokenUsage
from fleetagent.tools import PARAMS_BY_TOOL, FunctionTool, ToolRegistry

CANNED_RESULTS: dict[str, Any] = {
    "query_assets": {"assets": [{"id": f"i-{n}"} for n in range(40)], "total": 40},
    "get_drift_status": {"drifted": 12, "total": 40},
    "get_golden_image": {"family": "web", "version": "2.4.1", "image_id": "ami-123"},
    "compare_versions": {"packages_changed": ["openssl"]},
    "calculate_risk_score": {"risk_level": "medium", "score": 42},
    "simulate_rollout": {"status": "ok", "predicted_failures": 0},
    "get_compliance_status": {"status": "partial", "critical_count": 0, "high_count": 2, "medium_count": 5},
    "check_control": {"passed": 90, "failed": 10},
    "generate_compliance_evidence": {"package": "evidence-2024.zip"},
    "query_alerts": [{"id": "a-1", "severity": "high"}],
    "get_dr_status": {"readiness_score": 92, "sites": [{"id": "dr-east"}]},
    "generate_dr_runbook": {"steps": ["fence primary", "promote replica"]},
    "simulate_failover": {"rto_minutes": 12, "rpo_minutes": 1},
    "list_certificates": {
        "certificates": [
            {"id": "c-1", "common_name": "api.example.com", "days_until_expiry": 3},
            {"id": "c-2", "common_name": "www.example.com", "days_until_expiry": 10},
            {"id": "c-3", "common_name": "int.example.com", "days_until_expiry": 25},
        ]
    },
    "get_certificate_details": {"id": "c-1", "issuer": "Let's Encrypt"},
    "map_certificate_usage": {"risk_level": "high", "total_usages": 7, "production_count": 2},
    "generate_cert_renewal_plan": {"strategy": "rolling", "steps": 4},
    "generate_image_contract": {"contract": {"name": "ubuntu-web-server", "os": "ubuntu"}},
    "generate_packer_template": {"template": "packer.pkr.hcl"},
    "generate_ansible_playbook": {"playbook": "site.yml"},
    "promote_image": {"status": "promoted"},
    "list_images": [{"family": "web", "version": "2.4.1"}],
    "generate_sop": {"sop": {"name": "restart-nginx", "steps": ["drain", "restart", "verify"]}},
    "validate_sop": {"valid": True},
    "simulate_sop": {"status": "ok"},
    "get_cve_details": {
        "cve_id": "CVE-2024-3094",
        "severity": "high",
        "urgency_score": 95,
        "exploited_in_wild": True,
    },
    "get_cve_blast_radius": {"affected_assets": 12, "production_count": 4},
}

PLAN_PAYLOAD: dict[str, Any] = {
    "name": "generated-plan",
    "summary": "Remediate in two phases",
    "phases": [
        {"name": "Canary", "type": "canary", "asset_percentage": 5, "checks": ["health"]},
        {"name": "Wave 1", "type": "wave", "asset_percentage": 100, "checks": ["health"]},
    ],
    "rollback_policy": {"type": "automatic", "triggers": ["error_rate > 5%", "manual"]},
    "notifications": {"on_failure": ["slack"]},
    "estimated_duration": "45 minutes",
    "risk_assessment": {"level": "medium"},
}


async def _tls_handshake(params: dict) -> dict:
    endpoint = params["endpoint"]
    if "bad" in endpoint:
        return {"endpoint": endpoint, "valid": False, "error": "certificate expired"}
    return {"endpoint": endpoint, "valid": True}


def _canned(name: str, value: Any):
    async def _handler(params: dict) -> Any:
        return value

    return _handler


def _failing(name: str):
    async def _handler(params: dict) -> Any:
        raise RuntimeError(f"{name} backend unavailable")

    return _handler


@pytest.fixture
def plan_json() -> str:
    return json.dumps(PLAN_PAYLOAD)


@pytest.fixture
def make_tools():
    """构造工具注册表

    Args:
        fail: 执行时抛异常的工具名
        missing: 不注册的工具名
        overrides: 工具名 -> 固定返回值
    """

    def _make(
        fail: tuple[str, ...] = (),
        missing: tuple[str, ...] = (),
        overrides: dict[str, Any] | None = None,
    ) -> ToolRegistry:
        results = {**CANNED_RESULTS, **(overrides or {})}
        registry = ToolRegistry()
        for name, params_model in PARAMS_BY_TOOL.items():
            if name in missing:
                continue
            if name in fail:
                handler = _failing(name)
            elif name == "validate_tls_handshake" and name not in (overrides or {}):
                handler = _tls_handshake
            else:
                handler = _canned(name, results.get(name, {}))
            registry.register(FunctionTool(name, handler, params_model=params_model))
        return registry

    return _make


@pytest.fixture
def make_completion():
    """构造补全服务替身，按顺序返回给定内容"""

    def _make(
        *contents: str,
        prompt_tokens: int = 100,
        completion_tokens: int = 50,
        is_fallback: bool = False,
    ) -> AsyncMock:
        service = AsyncMock()
        service.complete.side_effect = [
            CompletionResponse(
                content=content,
                usage=TokenUsage(
                    prompt_tokens=prompt_tokens,
                    completion_tokens=completion_tokens,
                    total_tokens=prompt_tokens + completion_tokens,
                ),
                stop_reason="stop",
                is_fallback=is_fallback,
            )
            for content in contents
        ]
        return service

    return _make


@pytest.fixture
def task_factory():
    def _make(task_type: TaskType = TaskType.DRIFT_REMEDIATION, **overrides) -> TaskSpec:
        fields: dict[str, Any] = {
            "task_type": task_type,
            "goal": "Remediate drift on web tier",
            "org_id": "org-test",
            "environment": "staging",
            "hitl_required": False,
        }
        fields.update(overrides)
        return TaskSpec(**fields)

    return _make
