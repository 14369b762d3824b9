"""全局 pytest 配置 -- 环境变量隔离 + structlog 上下文清理"""

import pytest
import structlog

# 测试期间不应受宿主环境影响的配置项
_ISOLATED_ENV_VARS = (
    "FLEETAGENT_DEFAULT_TIMEOUT_MINUTES",
    "FLEETAGENT_NOTIFY_CHANNEL",
    "FLEETAGENT_PLANNER_ALIAS",
    "FLEETAGENT_LLM_MODE",
    "FLEETAGENT_LLM_TIMEOUT_S",
    "FLEETAGENT_LLM_ECHO_FALLBACK",
    "FLEETAGENT_TOOLS_URL",
    "FLEETAGENT_TOOLS_TIMEOUT_S",
    "LITELLM_PROXY_URL",
    "LITELLM_PROXY_KEY",
)


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    """清除宿主环境中的 FleetAgent 配置"""
    for name in _ISOLATED_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def _clear_log_context():
    """每个测试前后清理 structlog contextvars"""
    structlog.contextvars.clear_contextvars()
    yield
    structlog.contextvars.clear_contextvars()
