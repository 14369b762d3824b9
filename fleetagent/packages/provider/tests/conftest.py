"""Provider 包测试 fixtures"""

from unittest.mock import MagicMock

import pytest


@pytest.fixture
def sample_messages() -> list[dict[str, str]]:
    """标准 messages 格式测试数据"""
    return [
        {"role": "system", "content": "You are an infrastructure remediation specialist."},
        {"role": "user", "content": "Generate a plan for 10 assets"},
    ]


@pytest.fixture
def litellm_response_factory():
    """构造 Mock LiteLLM ModelResponse 的工厂"""

    def _make(
        content: str = "{}",
        model: str = "gpt-4o-mini",
        prompt_tokens: int = 10,
        completion_tokens: int = 20,
        total_tokens: int = 30,
        finish_reason: str = "stop",
        hidden_params: dict | None = None,
    ):
        response = MagicMock()
        response.model = model

        choice = MagicMock()
        choice.message.content = content
        choice.finish_reason = finish_reason
        response.choices = [choice]

        usage = MagicMock()
        usage.prompt_tokens = prompt_tokens
        usage.completion_tokens = completion_tokens
        usage.total_tokens = total_tokens
        response.usage = usage

        response._hidden_params = (
            hidden_params
            if hidden_params is not None
            else {"custom_llm_provider": "openai", "response_cost": 0.001}
        )
        return response

    return _make
