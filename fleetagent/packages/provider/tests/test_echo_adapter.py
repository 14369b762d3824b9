"""EchoMessageAdapter 单元测试"""

import pytest
from fleetagent.provider.echo_adapter import EchoMessageAdapter
from fleetagent.provider.models import ModelCallResult


@pytest.fixture
def adapter():
    return EchoMessageAdapter()


class TestEchoMessageAdapter:
    """Echo 后端测试"""

    async def test_echoes_last_user_message(self, adapter, sample_messages):
        """回声最后一条 user message"""
        result = await adapter.complete(sample_messages)

        assert isinstance(result, ModelCallResult)
        assert result.content == "Echo: Generate a plan for 10 assets"
        assert result.provider == "echo"
        assert result.finish_reason == "stop"

    async def test_prompt_tokens_count_all_messages(self, adapter, sample_messages):
        """prompt token 计入系统消息"""
        result = await adapter.complete(sample_messages)

        expected_prompt = sum(len(m["content"].split()) for m in sample_messages)
        assert result.token_usage.prompt_tokens == expected_prompt
        assert result.token_usage.total_tokens == (
            result.token_usage.prompt_tokens + result.token_usage.completion_tokens
        )

    async def test_empty_messages(self, adapter):
        """空 messages 返回 (empty) 回声"""
        result = await adapter.complete([])
        assert result.content == "Echo: (empty)"
