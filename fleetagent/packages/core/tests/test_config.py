"""配置常量模块测试"""

from fleetagent.core.config import (
    DEFAULT_TIMEOUT_MINUTES,
    get_default_timeout_minutes,
    get_notify_channel,
    get_planner_alias,
)


class TestConfig:
    """环境变量覆盖测试"""

    def test_defaults(self, monkeypatch):
        """未设置环境变量时使用默认值"""
        monkeypatch.delenv("FLEETAGENT_DEFAULT_TIMEOUT_MINUTES", raising=False)
        monkeypatch.delenv("FLEETAGENT_NOTIFY_CHANNEL", raising=False)
        monkeypatch.delenv("FLEETAGENT_PLANNER_ALIAS", raising=False)
        assert get_default_timeout_minutes() == DEFAULT_TIMEOUT_MINUTES
        assert get_notify_channel() == "slack"
        assert get_planner_alias() == "planner"

    def test_timeout_override(self, monkeypatch):
        """FLEETAGENT_DEFAULT_TIMEOUT_MINUTES 覆盖默认超时"""
        monkeypatch.setenv("FLEETAGENT_DEFAULT_TIMEOUT_MINUTES", "5")
        assert get_default_timeout_minutes() == 5

    def test_invalid_timeout_falls_back(self, monkeypatch):
        """非法值回退默认值，不抛异常"""
        monkeypatch.setenv("FLEETAGENT_DEFAULT_TIMEOUT_MINUTES", "abc")
        assert get_default_timeout_minutes() == DEFAULT_TIMEOUT_MINUTES
        monkeypatch.setenv("FLEETAGENT_DEFAULT_TIMEOUT_MINUTES", "0")
        assert get_default_timeout_minutes() == DEFAULT_TIMEOUT_MINUTES
