"""FallbackManager -- 后端降级链

每次调用先尝试 primary，失败且配置了 fallback 时切换；
不维护显式的"降级状态"。未配置 fallback 时 primary 的失败直接上抛。
"""

import structlog

from .exceptions import ProviderError
from .models import ModelCallResult

log = structlog.get_logger()


class FallbackManager:
    """降级管理器

    primary / fallback 均需提供 async complete(messages, model_alias, **kwargs)。
    """

    def __init__(self, primary, fallback=None) -> None:
        """
        Args:
            primary: 主后端（LiteLLMClient 或 EchoMessageAdapter）
            fallback: 降级后端，None 表示不降级
        """
        self._primary = primary
        self._fallback = fallback

    async def call_with_fallback(
        self,
        messages: list[dict[str, str]],
        model_alias: str = "main",
        **kwargs,
    ) -> ModelCallResult:
        """带降级的调用

        Returns:
            ModelCallResult；来自 fallback 时 is_fallback=True 并带 fallback_reason

        Raises:
            ProviderError: primary 失败且无 fallback，或两者均失败
        """
        try:
            return await self._primary.complete(
                messages=messages,
                model_alias=model_alias,
                **kwargs,
            )
        except ProviderError as e:
            if self._fallback is None:
                raise
            primary_error: Exception = e
        except Exception as e:
            if self._fallback is None:
                raise ProviderError(
                    f"Primary 调用失败且无 fallback 配置: {e}",
                    recoverable=False,
                ) from e
            primary_error = e

        log.warning(
            "primary_failed_attempting_fallback",
            error=str(primary_error),
            model_alias=model_alias,
        )

        try:
            result = await self._fallback.complete(messages=messages, model_alias=model_alias)
        except Exception as fallback_error:
            log.error(
                "both_primary_and_fallback_failed",
                primary_error=str(primary_error),
                fallback_error=str(fallback_error),
            )
            raise ProviderError(
                f"Primary 和 Fallback 均失败。Primary: {primary_error}; Fallback: {fallback_error}",
                recoverable=False,
            ) from fallback_error

        log.info("fallback_activated", fallback_reason=str(primary_error), model_alias=model_alias)
        return result.model_copy(
            update={"is_fallback": True, "fallback_reason": f"Primary 失败: {primary_error}"}
        )
