"""apps/gateway 测试配置 -- httpx ASGITransport + 手动初始化 app.state

ASGITransport 不触发 lifespan，组件直接注入 app.state：
补全服务为 AsyncMock，工具为进程内 FunctionTool。
"""

import json
from collections.abc import AsyncGenerator
from typing import Any
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio
from fleetagent.agents import Dispatcher, WorkerRegistry, default_workers
from fleetagent.provider import CompletionResponse, TokenUsage
from fleetagent.tools import PARAMS_BY_TOOL, FunctionTool, ToolRegistry
from httpx import ASGITransport, AsyncClient

PLAN = {
    "name": "drift-fix",
    "summary": "Fix drift on 40 web servers",
    "phases": [
        {"name": "Canary", "type": "canary", "asset_percentage": 5, "checks": ["health"]},
        {"name": "Wave 1", "type": "wave", "asset_percentage": 100, "checks": ["health"]},
    ],
    "rollback_policy": {"type": "automatic", "triggers": ["error_rate > 5%"]},
    "notifications": {"on_failure": ["slack"]},
    "estimated_duration": "45 minutes",
    "risk_assessment": {"level": "low"},
}

TOOL_RESULTS: dict[str, Any] = {
    "query_assets": {"assets": [{"id": f"i-{n}"} for n in range(40)], "total": 40},
    "get_drift_status": {"drifted": 12},
    "get_golden_image": {"family": "web", "version": "2.4.1"},
    "compare_versions": {"packages_changed": ["openssl"]},
}


def _handler(value: Any):
    async def _run(params: dict) -> Any:
        return value

    return _run


async def _unavailable(params: dict) -> Any:
    raise ConnectionError("tools backend unreachable")


@pytest.fixture
def completion() -> AsyncMock:
    service = AsyncMock()
    service.complete.return_value = CompletionResponse(
        content=json.dumps(PLAN),
        usage=TokenUsage(prompt_tokens=300, completion_tokens=120, total_tokens=420),
        stop_reason="stop",
    )
    return service


@pytest.fixture
def tool_registry() -> ToolRegistry:
    """drift 相关工具返回固定数据，其余工具不可达"""
    registry = ToolRegistry()
    for name, params_model in PARAMS_BY_TOOL.items():
        handler = _handler(TOOL_RESULTS[name]) if name in TOOL_RESULTS else _unavailable
        registry.register(FunctionTool(name, handler, params_model=params_model))
    return registry


@pytest.fixture
def app(completion, tool_registry, monkeypatch):
    """创建测试用 FastAPI app 实例（绕过 lifespan）"""
    monkeypatch.setenv("FLEETAGENT_LLM_MODE", "echo")

    from fleetagent.gateway.main import create_app

    application = create_app()
    application.state.tool_registry = tool_registry
    application.state.litellm_client = None
    application.state.dispatcher = Dispatcher(WorkerRegistry(default_workers(completion, tool_registry)))
    return application


@pytest_asyncio.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """提供 httpx AsyncClient 用于测试"""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac


@pytest.fixture
def drift_task() -> dict:
    return {
        "task_type": "drift_remediation",
        "goal": "Remediate drift on web tier",
        "org_id": "org-test",
        "environment": "staging",
        "risk_level": "low",
        "hitl_required": False,
    }
