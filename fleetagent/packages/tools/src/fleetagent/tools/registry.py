"""ToolRegistry -- 按名称查找工具的门面

启动时注册，之后只读。get() 返回 (tool, found) 二元组；
execute() 统一记录日志并把非 ToolError 异常包装为 ToolExecutionError。
"""

from typing import Any

import structlog

from .base import Tool
from .exceptions import ToolError, ToolExecutionError, ToolNotFoundError

log = structlog.get_logger()


class ToolRegistry:
    """工具注册表"""

    def __init__(self, tools: list[Tool] | None = None) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools or []:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        """注册工具，同名覆盖"""
        self._tools[tool.name] = tool
        log.debug("tool_registered", tool=tool.name)

    def get(self, name: str) -> tuple[Tool | None, bool]:
        tool = self._tools.get(name)
        return tool, tool is not None

    def __contains__(self, name: str) -> bool:
        return name in self._tools

    def list_tools(self) -> list[str]:
        """按名称排序的工具列表"""
        return sorted(self._tools)

    async def execute(self, name: str, params: dict[str, Any]) -> Any:
        """按名称执行工具

        Raises:
            ToolNotFoundError: 未注册
            ToolParameterError: 参数校验失败
            ToolExecutionError: 执行失败
        """
        tool, found = self.get(name)
        if not found:
            raise ToolNotFoundError(name)

        log.info("tool_execution_started", tool=name)
        try:
            result = await tool.execute(params)
        except ToolError as e:
            log.error("tool_execution_failed", tool=name, error=str(e))
            raise
        except Exception as e:
            log.error("tool_execution_failed", tool=name, error=str(e), error_type=type(e).__name__)
            raise ToolExecutionError(name, e) from e

        log.info("tool_execution_completed", tool=name)
        return result
