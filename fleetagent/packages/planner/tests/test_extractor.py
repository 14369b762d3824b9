"""Resilient Plan Extractor 测试

覆盖各解析层级：direct / extracted（代码块、前后文）/ lenient / failed，
以及 schema 校验失败与合成兜底。
"""

import json

from fleetagent.core.models import ParseMethod, Phase, Plan, PlanProvenance, RollbackPolicy
from fleetagent.planner import (
    WARN_FENCED,
    WARN_LENIENT,
    WARN_SURROUNDED,
    WARN_SYNTHESIZED,
    ParseStatus,
    extract_json,
    find_json_segment,
    parse_model,
    resolve_plan,
)


def _fallback_plan() -> Plan:
    return Plan(
        name="fallback",
        phases=[Phase(name="Pre-flight Checks", type="validation")],
        rollback_policy=RollbackPolicy(triggers=["manual"]),
    )


class TestExtractJson:
    """JSON 层级提取测试"""

    def test_direct(self, plan_json):
        """整段合法 JSON -> direct，无告警"""
        result = extract_json(plan_json)
        assert result.method == ParseMethod.DIRECT
        assert result.warning == ""
        assert result.data["name"] == "drift-fix"

    def test_fenced_block(self, plan_json):
        """markdown 代码块 -> extracted"""
        text = f"Here is the plan:\n```json\n{plan_json}\n```\nLet me know."
        result = extract_json(text)
        assert result.method == ParseMethod.EXTRACTED
        assert result.warning == WARN_FENCED

    def test_surrounding_prose(self):
        """前后文中的 JSON -> extracted"""
        text = 'Sure! {"name": "p", "note": "braces } in strings"} Hope this helps.'
        result = extract_json(text)
        assert result.method == ParseMethod.EXTRACTED
        assert result.warning == WARN_SURROUNDED
        assert result.data["note"] == "braces } in strings"

    def test_bracket_in_prose_before_object(self, plan_json):
        """正文中的 [production] 不会成为片段起点"""
        result = extract_json(f"Target [production] web tier:\n{plan_json}")
        assert result.method == ParseMethod.EXTRACTED
        assert result.warning == WARN_SURROUNDED
        assert result.data["name"] == "drift-fix"

    def test_non_json_fence_before_plan(self, plan_json):
        """非 JSON 代码块在前时从全文定位计划"""
        text = f"First run:\n```bash\nkubectl get pods\n```\nThen apply this plan:\n{plan_json}"
        result = extract_json(text)
        assert result.method == ParseMethod.EXTRACTED
        assert result.data["name"] == "drift-fix"

    def test_second_fence_holds_json(self, plan_json):
        """多个代码块时取首个可解析的"""
        text = f"```bash\nkubectl get pods\n```\nPlan:\n```json\n{plan_json}\n```"
        result = extract_json(text)
        assert result.method == ParseMethod.EXTRACTED
        assert result.warning == WARN_FENCED

    def test_trailing_comma_is_lenient(self):
        """尾逗号需要容错修复 -> lenient"""
        result = extract_json('{"name": "p", "phases": [1, 2,],}')
        assert result.method == ParseMethod.LENIENT
        assert result.warning == WARN_LENIENT
        assert result.data["phases"] == [1, 2]

    def test_single_quotes_and_bare_keys(self):
        """单引号与未加引号的 key"""
        result = extract_json("{name: 'p', phases: []}")
        assert result.method == ParseMethod.LENIENT
        assert result.data == {"name": "p", "phases": []}

    def test_comments_removed(self):
        """注释被移除，URL 不受影响"""
        text = '{\n  "url": "https://example.com", // endpoint\n  /* block */ "n": 1\n}'
        result = extract_json(text)
        assert result.ok
        assert result.data == {"url": "https://example.com", "n": 1}

    def test_truncated_fails(self):
        """被截断的 JSON 不可恢复"""
        result = extract_json('Plan: {"name": "p", "phases": [{"name": "canary"')
        assert result.method == ParseMethod.FAILED
        assert not result.ok

    def test_empty(self):
        result = extract_json("   ")
        assert result.method == ParseMethod.FAILED
        assert result.error == "empty response"

    def test_scalar_is_not_a_plan(self):
        """标量 JSON 不被接受"""
        assert extract_json("42").method == ParseMethod.FAILED


class TestFindSegment:
    """括号深度匹配测试"""

    def test_nested(self):
        assert find_json_segment('x {"a": {"b": [1]}} y') == '{"a": {"b": [1]}}'

    def test_escaped_quote(self):
        text = r'{"a": "say \"}\" now"}'
        assert find_json_segment(text) == text

    def test_unclosed(self):
        assert find_json_segment('{"a": [1, 2') == ""


class TestParseModel:
    """schema 校验测试"""

    def test_parsed(self, plan_json):
        outcome = parse_model(plan_json, Plan)
        assert outcome.ok
        assert outcome.status == ParseStatus.PARSED
        assert outcome.value.total_phases == 2

    def test_validation_failed(self):
        """可解析但不满足 schema -> VALIDATION_FAILED"""
        outcome = parse_model('{"name": "p", "phases": []}', Plan)
        assert outcome.status == ParseStatus.VALIDATION_FAILED
        assert outcome.method == ParseMethod.DIRECT
        assert outcome.errors

    def test_not_found(self):
        outcome = parse_model("no json here", Plan)
        assert outcome.status == ParseStatus.NOT_FOUND
        assert outcome.method == ParseMethod.FAILED


class TestResolvePlan:
    """计划解析 + 兜底测试"""

    def test_generated_plan(self, plan_json):
        resolution = resolve_plan(plan_json, _fallback_plan)
        assert resolution.method == ParseMethod.DIRECT
        assert resolution.plan.provenance == PlanProvenance.GENERATED
        assert not resolution.synthesized

    def test_extracted_plan_keeps_warning(self, plan_json):
        resolution = resolve_plan(f"```\n{plan_json}\n```", _fallback_plan)
        assert resolution.method == ParseMethod.EXTRACTED
        assert resolution.warning == WARN_FENCED

    def test_garbage_falls_back(self):
        """无法提取 -> 合成计划，标记 lenient"""
        resolution = resolve_plan("I cannot help with that.", _fallback_plan)
        assert resolution.synthesized
        assert resolution.plan.name == "fallback"
        assert resolution.method == ParseMethod.LENIENT
        assert resolution.warning == WARN_SYNTHESIZED

    def test_missing_rollback_falls_back(self):
        """缺少回滚策略的生成计划不可用"""
        resolution = resolve_plan('{"phases": [{"name": "canary"}]}', _fallback_plan)
        assert resolution.synthesized
        assert any("rollback_policy" in e for e in resolution.errors)

    def test_plan_after_bracketed_prose_is_generated(self, plan_json):
        resolution = resolve_plan(f"Target [production] web tier:\n{plan_json}", _fallback_plan)
        assert not resolution.synthesized
        assert resolution.plan.provenance == PlanProvenance.GENERATED
        assert resolution.method == ParseMethod.EXTRACTED

    def test_numeric_durations_keep_generated_plan(self, plan_payload):
        """数值型 estimated_duration / success_criteria 不触发兜底"""
        plan_payload["estimated_duration"] = 45
        plan_payload["phases"][0]["success_criteria"] = {"error_rate": 0.01}
        resolution = resolve_plan(json.dumps(plan_payload), _fallback_plan)
        assert not resolution.synthesized
        assert resolution.plan.estimated_duration == "45"
