"""LiteLLMClient 单元测试

Mock litellm.acompletion()，验证 complete() 返回 ModelCallResult、
连接类错误映射为 ProxyUnreachableError、业务错误映射为 ProviderError、
health_check() 返回 bool。
"""

from unittest.mock import MagicMock, patch

import httpx
import pytest
from fleetagent.provider.client import LiteLLMClient
from fleetagent.provider.exceptions import ModelRejectedError, ProviderError, ProxyUnreachableError
from fleetagent.provider.models import ModelCallResult


@pytest.fixture
def client():
    return LiteLLMClient(
        proxy_base_url="http://localhost:4000/",
        proxy_api_key="sk-test",
        timeout_s=30,
    )


class TestLiteLLMClientComplete:
    """complete() 方法测试"""

    @patch("fleetagent.provider.client.acompletion")
    async def test_successful_call(self, mock_acompletion, client, litellm_response_factory):
        """成功调用返回完整 ModelCallResult"""
        mock_acompletion.return_value = litellm_response_factory(content='{"ok": true}')

        result = await client.complete(
            messages=[{"role": "user", "content": "Hello"}],
            model_alias="main",
        )

        assert isinstance(result, ModelCallResult)
        assert result.content == '{"ok": true}'
        assert result.model_alias == "main"
        assert result.model_name == "gpt-4o-mini"
        assert result.provider == "openai"
        assert result.finish_reason == "stop"
        assert result.is_fallback is False

    @patch("fleetagent.provider.client.acompletion")
    async def test_call_kwargs(self, mock_acompletion, client, litellm_response_factory):
        """model 带 openai/ 前缀，api_base 去除尾部斜杠，max_tokens 透传"""
        mock_acompletion.return_value = litellm_response_factory()

        await client.complete(
            messages=[{"role": "user", "content": "test"}],
            model_alias="cheap",
            max_tokens=256,
        )

        kwargs = mock_acompletion.call_args.kwargs
        assert kwargs["model"] == "openai/cheap"
        assert kwargs["api_base"] == "http://localhost:4000"
        assert kwargs["max_tokens"] == 256
        assert kwargs["timeout"] == 30

    @patch("fleetagent.provider.client.acompletion")
    async def test_token_usage_parsed(self, mock_acompletion, client, litellm_response_factory):
        """Token 使用数据正确解析"""
        mock_acompletion.return_value = litellm_response_factory(
            prompt_tokens=50, completion_tokens=100, total_tokens=150
        )

        result = await client.complete(messages=[{"role": "user", "content": "test"}])

        assert result.token_usage.prompt_tokens == 50
        assert result.token_usage.completion_tokens == 100
        assert result.token_usage.total_tokens == 150

    @patch("fleetagent.provider.client.acompletion")
    async def test_connection_error_raises_proxy_unreachable(self, mock_acompletion, client):
        """连接错误抛出 ProxyUnreachableError"""
        mock_acompletion.side_effect = ConnectionError("Connection refused")

        with pytest.raises(ProxyUnreachableError) as exc_info:
            await client.complete(messages=[{"role": "user", "content": "test"}])
        assert "localhost:4000" in str(exc_info.value)

    @patch("fleetagent.provider.client.acompletion")
    async def test_business_error_raises_provider_error(self, mock_acompletion, client):
        """业务错误抛出 ProviderError（非 ProxyUnreachableError）"""
        mock_acompletion.side_effect = ValueError("model not found")

        with pytest.raises(ProviderError) as exc_info:
            await client.complete(messages=[{"role": "user", "content": "test"}])
        assert not isinstance(exc_info.value, ProxyUnreachableError)
        assert isinstance(exc_info.value, ModelRejectedError)
        assert exc_info.value.recoverable is False

    @patch("fleetagent.provider.client.acompletion")
    async def test_rate_limit_is_recoverable(self, mock_acompletion, client):
        """限流类拒绝可恢复"""

        class RateLimitError(Exception):
            pass

        mock_acompletion.side_effect = RateLimitError("quota exceeded")

        with pytest.raises(ModelRejectedError) as exc_info:
            await client.complete(messages=[{"role": "user", "content": "test"}], model_alias="main")
        assert exc_info.value.recoverable is True
        assert exc_info.value.model_alias == "main"
        assert "RateLimitError" in str(exc_info.value)


class TestLiteLLMClientHealthCheck:
    """health_check() 方法测试"""

    @patch("httpx.AsyncClient.get")
    async def test_healthy_proxy(self, mock_get, client):
        """Proxy 可达时返回 True"""
        mock_response = MagicMock()
        mock_response.status_code = 200
        mock_get.return_value = mock_response

        assert await client.health_check() is True

    @patch("httpx.AsyncClient.get")
    async def test_unreachable_proxy(self, mock_get, client):
        """Proxy 不可达时返回 False"""
        mock_get.side_effect = httpx.ConnectError("Connection refused")

        assert await client.health_check() is False

    @patch("httpx.AsyncClient.get")
    async def test_server_error(self, mock_get, client):
        """非 200 返回 False"""
        mock_response = MagicMock()
        mock_response.status_code = 500
        mock_get.return_value = mock_response

        assert await client.health_check() is False
