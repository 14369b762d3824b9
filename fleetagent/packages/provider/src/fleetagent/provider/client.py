"""LiteLLMClient -- LiteLLM Proxy 调用封装

通过 litellm.acompletion() 调用 Proxy，解析成本、token 与结束原因。
"""

import time

import httpx
import structlog
from litellm import acompletion

from . import cost
from .exceptions import ModelRejectedError, ProxyUnreachableError
from .models import ModelCallResult

log = structlog.get_logger()

# 健康检查超时（秒）
HEALTH_CHECK_TIMEOUT_S = 5

# 连接类异常（映射为 ProxyUnreachableError）
_CONNECTION_ERROR_TYPES = (
    ConnectionError,
    OSError,
    TimeoutError,
    httpx.ConnectError,
    httpx.TimeoutException,
)


def _is_connection_error(e: Exception) -> bool:
    """判断异常是否为连接类错误"""
    if isinstance(e, _CONNECTION_ERROR_TYPES):
        return True
    # LiteLLM 的连接/超时异常不继承标准库类型，按类名识别
    return type(e).__name__ in ("APIConnectionError", "APITimeoutError", "Timeout")


class LiteLLMClient:
    """LiteLLM Proxy 客户端"""

    def __init__(
        self,
        proxy_base_url: str = "http://localhost:4000",
        proxy_api_key: str = "",
        timeout_s: int = 30,
    ) -> None:
        """
        Args:
            proxy_base_url: Proxy 基础 URL
            proxy_api_key: Proxy 访问密钥（不是 LLM provider API key）
            timeout_s: 请求超时（秒）
        """
        self._proxy_base_url = proxy_base_url.rstrip("/")
        self._proxy_api_key = proxy_api_key
        self._timeout_s = timeout_s

    @property
    def proxy_base_url(self) -> str:
        return self._proxy_base_url

    async def complete(
        self,
        messages: list[dict[str, str]],
        model_alias: str = "main",
        temperature: float = 0.2,
        max_tokens: int | None = None,
        **kwargs,
    ) -> ModelCallResult:
        """发送 chat completion 请求

        Args:
            messages: [{"role": ..., "content": ...}] 列表
            model_alias: 运行时 group（由 AliasRegistry.resolve() 提供）
            temperature: 采样温度
            max_tokens: 最大生成 token 数，None 使用模型默认
            **kwargs: 透传给 litellm 的其他参数

        Returns:
            ModelCallResult

        Raises:
            ProxyUnreachableError: Proxy 连接失败或超时
            ModelRejectedError: Proxy 拒绝请求（模型不可用、配额耗尽等）
        """
        start_time = time.monotonic()

        call_kwargs = {
            "model": f"openai/{model_alias}",
            "messages": messages,
            "api_base": self._proxy_base_url,
            "api_key": self._proxy_api_key or "no-key",
            "temperature": temperature,
            "timeout": self._timeout_s,
            **kwargs,
        }
        if max_tokens is not None:
            call_kwargs["max_tokens"] = max_tokens

        log.debug("litellm_call_start", model_alias=model_alias, message_count=len(messages))

        try:
            response = await acompletion(**call_kwargs)
        except Exception as e:
            duration_ms = int((time.monotonic() - start_time) * 1000)
            log.error(
                "litellm_call_failed",
                model_alias=model_alias,
                error=str(e),
                error_type=type(e).__name__,
                duration_ms=duration_ms,
            )
            if _is_connection_error(e):
                raise ProxyUnreachableError(
                    proxy_url=self._proxy_base_url,
                    original_error=e,
                ) from e
            raise ModelRejectedError(model_alias, e) from e

        duration_ms = int((time.monotonic() - start_time) * 1000)
        content = response.choices[0].message.content or ""
        cost_usd, cost_unavailable = cost.calculate_cost(response)
        model_name, provider = cost.extract_model_info(response)

        log.info(
            "litellm_call_completed",
            model_alias=model_alias,
            model_name=model_name,
            provider=provider,
            duration_ms=duration_ms,
            cost_usd=cost_usd,
        )

        return ModelCallResult(
            content=content,
            model_alias=model_alias,
            model_name=model_name,
            provider=provider,
            finish_reason=cost.extract_finish_reason(response),
            duration_ms=duration_ms,
            token_usage=cost.parse_usage(response),
            cost_usd=cost_usd,
            cost_unavailable=cost_unavailable,
        )

    async def health_check(self) -> bool:
        """GET {proxy_base_url}/health/liveliness

        不抛异常，不可达或非 200 时返回 False。
        """
        url = f"{self._proxy_base_url}/health/liveliness"
        try:
            async with httpx.AsyncClient() as http_client:
                resp = await http_client.get(url, timeout=HEALTH_CHECK_TIMEOUT_S)
                return resp.status_code == 200
        except Exception as e:
            log.debug("health_check_failed", url=url, error=str(e))
            return False
