"""Tools 异常体系"""


class ToolError(Exception):
    """tools 包基础异常"""

    def __init__(self, message: str, tool_name: str = "", recoverable: bool = True) -> None:
        """
        Args:
            message: 错误描述
            tool_name: 相关工具名称
            recoverable: 调用方是否可降级处理
        """
        super().__init__(message)
        self.tool_name = tool_name
        self.recoverable = recoverable


class ToolNotFoundError(ToolError):
    """工具未注册"""

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"tool not found: {tool_name}", tool_name=tool_name, recoverable=False)


class ToolParameterError(ToolError):
    """工具参数校验失败"""

    def __init__(self, tool_name: str, detail: str) -> None:
        super().__init__(f"invalid parameters for {tool_name}: {detail}", tool_name=tool_name, recoverable=False)


class ToolExecutionError(ToolError):
    """工具执行失败（远端错误、超时、连接失败等）"""

    def __init__(self, tool_name: str, original_error: Exception | str) -> None:
        super().__init__(f"tool {tool_name} failed: {original_error}", tool_name=tool_name)
        self.original_error = original_error
