"""ProviderConfig -- 补全服务配置加载

从环境变量加载，不硬编码 provider/模型名。
"""

import os
from typing import Literal

import structlog
from pydantic import BaseModel, Field, SecretStr

log = structlog.get_logger()


class ProviderConfig(BaseModel):
    """补全服务配置

    环境变量:
        LITELLM_PROXY_URL: Proxy 地址（默认 http://localhost:4000）
        LITELLM_PROXY_KEY: Proxy 访问密钥
        FLEETAGENT_LLM_MODE: 运行模式（litellm/echo）
        FLEETAGENT_LLM_TIMEOUT_S: 调用超时（秒，默认 60）
        FLEETAGENT_LLM_ECHO_FALLBACK: litellm 模式下是否降级到 echo（默认 false）
    """

    proxy_base_url: str = Field(default="http://localhost:4000", description="LiteLLM Proxy 基础 URL")
    proxy_api_key: SecretStr = Field(default=SecretStr(""), description="Proxy 访问密钥")
    llm_mode: Literal["litellm", "echo"] = Field(default="litellm", description="运行模式")
    timeout_s: int = Field(default=60, ge=1, description="调用超时（秒）")
    echo_fallback: bool = Field(default=False, description="litellm 失败时是否降级到 echo")


def load_provider_config() -> ProviderConfig:
    """从环境变量加载 ProviderConfig

    非法的超时值记录 warning 并使用默认值，不阻塞启动。
    """
    kwargs: dict = {}

    if val := os.environ.get("LITELLM_PROXY_URL"):
        kwargs["proxy_base_url"] = val

    if val := os.environ.get("LITELLM_PROXY_KEY"):
        kwargs["proxy_api_key"] = SecretStr(val)

    if val := os.environ.get("FLEETAGENT_LLM_MODE"):
        kwargs["llm_mode"] = val

    if val := os.environ.get("FLEETAGENT_LLM_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = int(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="FLEETAGENT_LLM_TIMEOUT_S",
                value=val,
                fallback=60,
            )

    if val := os.environ.get("FLEETAGENT_LLM_ECHO_FALLBACK"):
        kwargs["echo_fallback"] = val.lower() in ("1", "true", "yes")

    return ProviderConfig(**kwargs)
