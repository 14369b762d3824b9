"""FleetAgent Planner -- 计划提取、合成与审批门

包含分层 JSON 提取、确定性分阶段发布合成、
按任务类别的默认计划以及质量/风险 HITL 门。
"""

from .defaults import CATEGORY_BY_TASK, PlanCategory, default_plan
from .extractor import (
    WARN_FENCED,
    WARN_LENIENT,
    WARN_SURROUNDED,
    WARN_SYNTHESIZED,
    JSONExtraction,
    ParseOutcome,
    ParseStatus,
    PlanResolution,
    extract_json,
    find_json_segment,
    parse_model,
    repair_json,
    resolve_plan,
    resolve_report,
)
from .gate import (
    apply_parse_cap,
    finalize,
    quality_level,
    score_plan,
    should_require_hitl,
)
from .synthesizer import (
    RolloutSizing,
    compute_sizing,
    default_percentages,
    split_waves,
    synthesize_rollout_plan,
)

__all__ = [
    # 提取
    "JSONExtraction",
    "ParseOutcome",
    "ParseStatus",
    "PlanResolution",
    "extract_json",
    "find_json_segment",
    "parse_model",
    "repair_json",
    "resolve_plan",
    "resolve_report",
    "WARN_FENCED",
    "WARN_SURROUNDED",
    "WARN_LENIENT",
    "WARN_SYNTHESIZED",
    # 合成
    "RolloutSizing",
    "compute_sizing",
    "default_percentages",
    "split_waves",
    "synthesize_rollout_plan",
    # 默认计划
    "PlanCategory",
    "CATEGORY_BY_TASK",
    "default_plan",
    # 审批门
    "quality_level",
    "score_plan",
    "apply_parse_cap",
    "should_require_hitl",
    "finalize",
]
