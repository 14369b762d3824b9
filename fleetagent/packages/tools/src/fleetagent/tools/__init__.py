"""FleetAgent Tools -- 工具调用门面

packages/tools 的公开接口导出。
"""

from .base import FunctionTool, Tool
from .config import ToolsConfig, load_tools_config
from .exceptions import ToolError, ToolExecutionError, ToolNotFoundError, ToolParameterError
from .http_tool import HTTPTool, build_remote_registry
from .params import PARAMS_BY_TOOL, ToolParams
from .registry import ToolRegistry
from .results import read_result

__all__ = [
    # 契约
    "Tool",
    "FunctionTool",
    "HTTPTool",
    "ToolParams",
    "PARAMS_BY_TOOL",
    # 注册表
    "ToolRegistry",
    "build_remote_registry",
    # 结果读取
    "read_result",
    # 配置
    "ToolsConfig",
    "load_tools_config",
    # 异常
    "ToolError",
    "ToolNotFoundError",
    "ToolParameterError",
    "ToolExecutionError",
]
