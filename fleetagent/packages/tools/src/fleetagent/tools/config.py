"""ToolsConfig -- 远端工具服务配置"""

import os

import structlog
from pydantic import BaseModel, Field

log = structlog.get_logger()


class ToolsConfig(BaseModel):
    """远端工具服务配置

    环境变量:
        FLEETAGENT_TOOLS_URL: 工具服务基础 URL（为空时不注册远端工具）
        FLEETAGENT_TOOLS_TIMEOUT_S: 单次工具调用超时（秒，默认 30）
    """

    base_url: str = Field(default="", description="工具服务基础 URL")
    timeout_s: float = Field(default=30.0, gt=0, description="单次调用超时（秒）")


def load_tools_config() -> ToolsConfig:
    kwargs: dict = {}

    if val := os.environ.get("FLEETAGENT_TOOLS_URL"):
        kwargs["base_url"] = val.rstrip("/")

    if val := os.environ.get("FLEETAGENT_TOOLS_TIMEOUT_S"):
        try:
            kwargs["timeout_s"] = float(val)
        except ValueError:
            log.warning(
                "invalid_timeout_config",
                env_var="FLEETAGENT_TOOLS_TIMEOUT_S",
                value=val,
                fallback=30.0,
            )

    return ToolsConfig(**kwargs)
