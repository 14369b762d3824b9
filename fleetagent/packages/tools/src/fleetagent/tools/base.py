"""Tool -- 工具契约

每个工具暴露名称、说明、可选参数模型，以及 async execute(params) -> 结果。
本核心只依赖 名称 -> 可调用 的契约。
"""

from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import BaseModel, ValidationError

from .exceptions import ToolParameterError


class Tool(ABC):
    """工具基类

    子类设置类属性并实现 execute()；params_model 非空时 validate_params()
    会据此校验并规范化参数。
    """

    name: str = ""
    description: str = ""
    params_model: type[BaseModel] | None = None

    def validate_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """按 params_model 校验参数

        Raises:
            ToolParameterError: 参数不符合模型
        """
        if self.params_model is None:
            return dict(params)
        try:
            return self.params_model.model_validate(params).model_dump(exclude_none=True)
        except ValidationError as e:
            raise ToolParameterError(self.name, str(e)) from e

    @abstractmethod
    async def execute(self, params: dict[str, Any]) -> Any:
        """执行工具"""
        ...


ToolHandler = Callable[[dict[str, Any]], Awaitable[Any]]


class FunctionTool(Tool):
    """以 async 函数实现的工具（进程内工具与测试替身使用）"""

    def __init__(
        self,
        name: str,
        handler: ToolHandler,
        description: str = "",
        params_model: type[BaseModel] | None = None,
    ) -> None:
        self.name = name
        self.description = description
        self.params_model = params_model
        self._handler = handler

    async def execute(self, params: dict[str, Any]) -> Any:
        return await self._handler(self.validate_params(params))
