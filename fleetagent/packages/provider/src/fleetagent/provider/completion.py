"""CompletionService -- Worker 面向的补全服务

请求 = 系统指令 + 有序消息；响应 = 自由文本 + token 统计 + 结束原因。
本层不做重试，失败以 ProviderError 上抛给 Worker。
"""

import structlog

from .alias import AliasRegistry
from .client import LiteLLMClient
from .config import ProviderConfig
from .echo_adapter import EchoMessageAdapter
from .fallback import FallbackManager
from .models import CompletionRequest, CompletionResponse

log = structlog.get_logger()


class CompletionService:
    """补全服务：alias 解析 + FallbackManager 调用 + 响应归一化"""

    def __init__(
        self,
        fallback_manager: FallbackManager,
        alias_registry: AliasRegistry | None = None,
    ) -> None:
        self._fallback_manager = fallback_manager
        self._alias_registry = alias_registry or AliasRegistry()

    async def complete(self, request: CompletionRequest) -> CompletionResponse:
        """执行一次补全

        Raises:
            ProviderError: 后端调用失败
        """
        runtime_group = self._alias_registry.resolve(request.model_alias)
        kwargs: dict = {"temperature": request.temperature}
        if request.max_tokens is not None:
            kwargs["max_tokens"] = request.max_tokens

        result = await self._fallback_manager.call_with_fallback(
            messages=request.to_chat_messages(),
            model_alias=runtime_group,
            **kwargs,
        )

        log.debug(
            "completion_finished",
            model_alias=request.model_alias,
            runtime_group=runtime_group,
            total_tokens=result.token_usage.total_tokens,
            is_fallback=result.is_fallback,
        )

        return CompletionResponse(
            content=result.content,
            usage=result.token_usage,
            stop_reason=result.finish_reason,
            model_name=result.model_name,
            provider=result.provider,
            duration_ms=result.duration_ms,
            cost_usd=result.cost_usd,
            is_fallback=result.is_fallback,
        )


def build_completion_service(
    config: ProviderConfig,
) -> tuple[CompletionService, LiteLLMClient | None]:
    """按配置组装补全服务

    Returns:
        (CompletionService, LiteLLMClient 或 None)；后者供健康检查使用
    """
    if config.llm_mode == "echo":
        log.info("completion_service_initialized", mode="echo")
        return CompletionService(FallbackManager(primary=EchoMessageAdapter())), None

    litellm_client = LiteLLMClient(
        proxy_base_url=config.proxy_base_url,
        proxy_api_key=config.proxy_api_key.get_secret_value(),
        timeout_s=config.timeout_s,
    )
    fallback = EchoMessageAdapter() if config.echo_fallback else None
    log.info(
        "completion_service_initialized",
        mode="litellm",
        proxy_url=config.proxy_base_url,
        timeout_s=config.timeout_s,
        echo_fallback=config.echo_fallback,
    )
    return (
        CompletionService(FallbackManager(primary=litellm_client, fallback=fallback)),
        litellm_client,
    )
