"""
Tests for loading and validating rules.yaml (fail-fast on bad input).
"""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from trailmark.rules.loader import load_rules


class TestLoadRules:
    """Test rules file loading."""

    def test_load_actual_rules_file(self, project_root: Path) -> None:
        """Load the shipped rules.yaml."""
        rules = load_rules(project_root / "rules.yaml")

        assert rules.project.slug == "trailmark"
        assert "bot" in rules.classifier.bot_patterns
        assert "curl" in rules.classifier.server_patterns
        assert "t.co" in rules.attribution.social_markers
        assert rules.privacy.default_retention_days == 365
        assert rules.query.report_row_cap == 100

    def test_missing_file_raises(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_rules(Path("/nonexistent/rules.yaml"))

    def test_invalid_yaml_raises(self, tmp_path: Path) -> None:
        path = tmp_path / "rules.yaml"
        path.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_rules(path)

    def test_missing_section_raises(self, project_root: Path, tmp_path: Path) -> None:
        """A rules file without the query section fails validation."""
        data = yaml.safe_load((project_root / "rules.yaml").read_text())
        del data["query"]
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump(data))

        with pytest.raises(ValueError, match="Rules validation failed"):
            load_rules(path)

    def test_patterns_lowercased(self, project_root: Path, tmp_path: Path) -> None:
        data = yaml.safe_load((project_root / "rules.yaml").read_text())
        data["classifier"]["bot_patterns"] = ["GoogleBot", ""]
        path = tmp_path / "rules.yaml"
        path.write_text(yaml.safe_dump(data))

        assert load_rules(path).classifier.bot_patterns == ["googlebot"]

    def test_strips_markdown_fences(self, project_root: Path, tmp_path: Path) -> None:
        body = (project_root / "rules.yaml").read_text()
        path = tmp_path / "rules.md"
        path.write_text(f"## rules\n\n```yaml\n{body}\n```\n")

        assert load_rules(path).project.slug == "trailmark"
