"""配置常量模块 -- 可通过环境变量覆盖

包含任务默认超时、通知渠道、规划 alias 等可配置项。
非法数值记录 warning 并回退默认值，不阻塞启动。
"""

import os

import structlog

log = structlog.get_logger()

DEFAULT_TIMEOUT_MINUTES = 30


def _int_env(name: str, default: int) -> int:
    """读取整型环境变量，非法或非正数时回退默认值"""
    val = os.environ.get(name)
    if not val:
        return default
    try:
        parsed = int(val)
    except ValueError:
        log.warning("invalid_int_config", env_var=name, value=val, fallback=default)
        return default
    if parsed < 1:
        log.warning("invalid_int_config", env_var=name, value=val, fallback=default)
        return default
    return parsed


def get_default_timeout_minutes() -> int:
    """任务默认超时（分钟）"""
    return _int_env("FLEETAGENT_DEFAULT_TIMEOUT_MINUTES", DEFAULT_TIMEOUT_MINUTES)


def get_notify_channel() -> str:
    """默认通知渠道（计划通知矩阵使用）"""
    return os.environ.get("FLEETAGENT_NOTIFY_CHANNEL", "slack")


def get_planner_alias() -> str:
    """Worker 调用 LLM 时使用的语义 alias"""
    return os.environ.get("FLEETAGENT_PLANNER_ALIAS", "planner")


# 非直接解析结果的质量分上限
PARSE_QUALITY_CAP: float = 60.0

# 低于该分数强制 HITL
HITL_QUALITY_THRESHOLD: float = 50.0

# 合成计划的波次硬上限
MAX_ROLLOUT_WAVES: int = 10

# 原始 LLM 响应在 evidence 中保留的最大字符数
RAW_RESPONSE_PREVIEW_LENGTH: int = 4000
