"""Provider 异常体系

补全服务失败分两类：Proxy 不可达（可恢复，调用方可重新派发）
与模型拒绝请求（是否可恢复取决于拒绝原因）。
Worker 只捕获 ProviderError 基类。
"""

# LiteLLM 异常类名 -> 重新派发是否可能成功
_RECOVERABLE_REJECTIONS = frozenset({"RateLimitError", "ServiceUnavailableError", "InternalServerError"})


class ProviderError(Exception):
    """补全服务调用失败"""

    def __init__(self, message: str, recoverable: bool = True) -> None:
        super().__init__(message)
        self.recoverable = recoverable


class ProxyUnreachableError(ProviderError):
    """LiteLLM Proxy 连接失败或超时"""

    def __init__(self, proxy_url: str, original_error: Exception) -> None:
        super().__init__(f"LiteLLM Proxy 不可达: {proxy_url} -- {original_error}", recoverable=True)
        self.proxy_url = proxy_url
        self.original_error = original_error


class ModelRejectedError(ProviderError):
    """Proxy 可达但拒绝了请求（模型不存在、配额耗尽、上下文超长、内容策略等）

    限流与服务端临时错误视为可恢复，其余不可恢复。
    """

    def __init__(self, model_alias: str, original_error: Exception) -> None:
        error_type = type(original_error).__name__
        super().__init__(
            f"model group {model_alias} rejected request ({error_type}): {original_error}",
            recoverable=error_type in _RECOVERABLE_REJECTIONS,
        )
        self.model_alias = model_alias
        self.error_type = error_type
