"""LiteLLM 响应解析 -- 成本、token、模型信息、结束原因

成本计算双通道：completion_cost() -> _hidden_params["response_cost"] -> (0.0, True)。
本模块所有函数不抛异常，解析失败时返回零值。
"""

import contextlib

import structlog
from litellm import completion_cost

from .models import TokenUsage

log = structlog.get_logger()


def calculate_cost(response) -> tuple[float, bool]:
    """计算 USD 成本

    Args:
        response: LiteLLM ModelResponse 对象

    Returns:
        (cost_usd, cost_unavailable) 元组
    """
    try:
        cost = completion_cost(completion_response=response)
        if cost is not None and cost >= 0:
            return float(cost), False
    except Exception as e:
        log.debug("completion_cost_failed", error=str(e))

    hidden = getattr(response, "_hidden_params", None)
    if isinstance(hidden, dict):
        cost = hidden.get("response_cost")
        if isinstance(cost, int | float) and cost >= 0:
            return float(cost), False

    log.warning("cost_unavailable")
    return 0.0, True


def parse_usage(response) -> TokenUsage:
    """解析 token 使用数据，失败时返回全零"""
    usage = getattr(response, "usage", None)
    if usage is None:
        return TokenUsage()
    try:
        prompt = getattr(usage, "prompt_tokens", 0) or 0
        completion = getattr(usage, "completion_tokens", 0) or 0
        total = getattr(usage, "total_tokens", 0) or (prompt + completion)
        return TokenUsage(
            prompt_tokens=prompt,
            completion_tokens=completion,
            total_tokens=total,
        )
    except Exception as e:
        log.debug("parse_usage_failed", error=str(e))
        return TokenUsage()


def extract_model_info(response) -> tuple[str, str]:
    """提取 (model_name, provider)"""
    model_name = ""
    provider = ""

    with contextlib.suppress(Exception):
        model_name = getattr(response, "model", "") or ""

    with contextlib.suppress(Exception):
        hidden = getattr(response, "_hidden_params", None)
        if isinstance(hidden, dict):
            provider = hidden.get("custom_llm_provider", "") or ""

    return model_name, provider


def extract_finish_reason(response) -> str:
    """提取首个 choice 的 finish_reason"""
    with contextlib.suppress(Exception):
        reason = response.choices[0].finish_reason
        if isinstance(reason, str):
            return reason
    return ""
