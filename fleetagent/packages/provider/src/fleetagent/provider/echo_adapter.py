"""EchoMessageAdapter -- 本地回声后端

开发与离线模式使用：返回最后一条 user message 的回声，
不产生结构化输出，Worker 会据此走确定性合成兜底。
"""

import asyncio
import time

from .models import ModelCallResult, TokenUsage


class EchoMessageAdapter:
    """Echo 后端，接口与 LiteLLMClient.complete() 一致"""

    async def complete(
        self,
        messages: list[dict[str, str]],
        model_alias: str = "echo",
        **kwargs,
    ) -> ModelCallResult:
        """返回 "Echo: {content}" 回声

        token 按空白分词粗略估算，prompt 侧计入全部消息。
        """
        start_time = time.monotonic()
        user_content = self._extract_last_user_content(messages)

        await asyncio.sleep(0)

        response_text = f"Echo: {user_content}"
        prompt_tokens = sum(len(m.get("content", "").split()) for m in messages)
        completion_tokens = len(response_text.split())

        return ModelCallResult(
            content=response_text,
            model_alias=model_alias,
            model_name="echo",
            provider="echo",
            finish_reason="stop",
            duration_ms=int((time.monotonic() - start_time) * 1000),
            token_usage=TokenUsage(
                prompt_tokens=prompt_tokens,
                completion_tokens=completion_tokens,
                total_tokens=prompt_tokens + completion_tokens,
            ),
        )

    @staticmethod
    def _extract_last_user_content(messages: list[dict[str, str]]) -> str:
        """最后一条 user message 的 content，无消息时返回 "(empty)" """
        for msg in reversed(messages):
            if msg.get("role") == "user":
                return msg.get("content", "")
        if messages:
            return messages[-1].get("content", "(empty)")
        return "(empty)"
