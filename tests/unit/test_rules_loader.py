"""
Rules loader and validator tests.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from marketing_console.components.analytics import config_from_rules
from marketing_console.rules.loader import load_rules
from marketing_console.rules.models import Rules

PROJECT_ROOT = Path(__file__).parent.parent.parent


class TestLoadRules:
    def test_load_project_rules_file(self) -> None:
        rules = load_rules(PROJECT_ROOT / "rules.yaml")
        assert rules.project.slug == "marketing-console"
        assert rules.analytics.date_presets == {"7d": 7, "30d": 30, "90d": 90}
        assert rules.filters.decision_page_size == 25
        assert rules.exports.media_type == "text/csv; charset=utf-8"

    def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/rules.yaml"))

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("analytics: [unclosed", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("", encoding="utf-8")
        assert load_rules(path) == Rules()

    def test_partial_file_keeps_other_defaults(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("analytics:\n  timezone: Europe/Berlin\n  currency: EUR\n", encoding="utf-8")
        rules = load_rules(path)
        assert rules.analytics.timezone == "Europe/Berlin"
        assert rules.analytics.top_limit == 10

    @pytest.mark.parametrize(
        "body",
        [
            "analytics:\n  timezone: Mars/Olympus\n",
            "analytics:\n  default_granularity: month\n",
            "filters:\n  decision_page_size: lots\n",
        ],
    )
    def test_schema_errors_raise(self, tmp_path: Path, body: str) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text(body, encoding="utf-8")
        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(path)


class TestConfigFromRules:
    def test_maps_analytics_section(self, rules: Rules) -> None:
        config = config_from_rules(rules)
        assert config.currency == "USD"
        assert config.top_limit == 10
        assert "purchase" in config.ecommerce_types
        assert config.web_series == ("page_view", "session_start", "form_submit")
