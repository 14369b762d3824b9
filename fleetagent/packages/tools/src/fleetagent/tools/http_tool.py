"""HTTPTool -- 远端工具服务适配

POST {base_url}/tools/{name}，请求体 {"parameters": {...}}，
响应体 {"result": ...}；非 2xx 或连接失败映射为 ToolExecutionError。
"""

from typing import Any

import httpx
import structlog

from .base import Tool
from .config import ToolsConfig
from .exceptions import ToolExecutionError
from .params import PARAMS_BY_TOOL, ToolParams
from .registry import ToolRegistry

log = structlog.get_logger()


class HTTPTool(Tool):
    """通过共享 httpx.AsyncClient 调用远端工具服务"""

    def __init__(
        self,
        name: str,
        client: httpx.AsyncClient,
        params_model: type[ToolParams] | None = None,
        description: str = "",
    ) -> None:
        self.name = name
        self.description = description or f"remote tool {name}"
        self.params_model = params_model
        self._client = client

    async def execute(self, params: dict[str, Any]) -> Any:
        payload = {"parameters": self.validate_params(params)}
        try:
            resp = await self._client.post(f"/tools/{self.name}", json=payload)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ToolExecutionError(self.name, f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise ToolExecutionError(self.name, e) from e

        body = resp.json()
        if isinstance(body, dict) and "result" in body:
            return body["result"]
        return body


def build_remote_registry(config: ToolsConfig, client: httpx.AsyncClient) -> ToolRegistry:
    """为全部已知工具名注册 HTTPTool

    client 需以 config.base_url 为 base_url 创建，生命周期由调用方管理。
    """
    registry = ToolRegistry()
    for name, params_model in PARAMS_BY_TOOL.items():
        registry.register(HTTPTool(name, client, params_model=params_model))
    log.info("remote_tools_registered", base_url=config.base_url, count=len(PARAMS_BY_TOOL))
    return registry
