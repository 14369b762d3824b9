"""structlog 配置模块

dev 模式：pretty print 可读输出
json 模式：结构化 JSON 输出
"""

import logging
import os

import structlog

_NOISY_LOGGERS = ("LiteLLM", "LiteLLM Router", "LiteLLM Proxy", "httpx", "httpcore")


def setup_logging() -> None:
    """初始化 structlog 配置

    根据 FLEETAGENT_LOG_FORMAT 环境变量选择渲染模式：
    - "json": 结构化 JSON 输出（生产环境）
    - "dev" (默认): pretty print 可读输出

    日志级别取 FLEETAGENT_LOG_LEVEL，非法值回退 INFO。
    """
    log_format = os.environ.get("FLEETAGENT_LOG_FORMAT", "dev")
    log_level = os.environ.get("FLEETAGENT_LOG_LEVEL", "INFO")

    # 基础处理器链
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if log_format == "json":
        renderer = structlog.processors.JSONRenderer(ensure_ascii=False)
    else:
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # 标准库 logging 桥接（litellm / httpx 日志同样经过 structlog 渲染）
    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    handler = logging.StreamHandler()
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

    # 第三方库逐请求日志只保留 warning 以上
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
