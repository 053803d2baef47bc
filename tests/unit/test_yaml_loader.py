# Copyright (C) 2025 Global Digital Labs (gdlabs.io)
# SPDX-License-Identifier: LGPL-3.0-or-later
"""Unit tests for the YAML loader."""

from pathlib import Path

import pytest

from src.core.config.yaml_loader import YAMLLoadError, load_yaml


class TestLoadYaml:
    """Tests for load_yaml function."""

    def test_load_valid_yaml_file(self, tmp_path: Path) -> None:
        """Test loading a stage-like mapping."""
        yaml_file = tmp_path / "stages.yaml"
        yaml_file.write_text("stages:\n  early_elementary:\n    age_range: [5, 8]\n")

        result = load_yaml(yaml_file)

        assert result == {"stages": {"early_elementary": {"age_range": [5, 8]}}}

    def test_load_empty_yaml_file_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that empty YAML files return empty dict."""
        yaml_file = tmp_path / "empty.yaml"
        yaml_file.write_text("")

        assert load_yaml(yaml_file) == {}

    def test_load_yaml_with_only_comments_returns_empty_dict(self, tmp_path: Path) -> None:
        """Test that comment-only files return empty dict."""
        yaml_file = tmp_path / "comments.yaml"
        yaml_file.write_text("# Thresholds go here\n")

        assert load_yaml(yaml_file) == {}

    def test_load_yaml_with_list_root_raises_error(self, tmp_path: Path) -> None:
        """Test that a list root is rejected."""
        yaml_file = tmp_path / "vocabulary.yaml"
        yaml_file.write_text("- happy\n- sad\n")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "YAML root must be a mapping" in str(exc_info.value)

    def test_load_nonexistent_file_raises_error(self, tmp_path: Path) -> None:
        """Test that a missing file raises error."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path / "missing.yaml")

        assert "File does not exist" in str(exc_info.value)

    def test_load_directory_raises_error(self, tmp_path: Path) -> None:
        """Test that a directory is not accepted as a file."""
        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(tmp_path)

        assert "File does not exist" in str(exc_info.value)

    def test_load_invalid_yaml_syntax_raises_error(self, tmp_path: Path) -> None:
        """Test that invalid YAML syntax raises error."""
        yaml_file = tmp_path / "invalid.yaml"
        yaml_file.write_text("key: value\n  invalid indentation")

        with pytest.raises(YAMLLoadError) as exc_info:
            load_yaml(yaml_file)

        assert "Invalid YAML syntax" in str(exc_info.value)

    def test_quoted_phrase_keys_are_preserved(self, tmp_path: Path) -> None:
        """Test that lexicon-style quoted keys with apostrophes load intact."""
        yaml_file = tmp_path / "lexicon.yaml"
        yaml_file.write_text('phrases:\n  "i\'m good at": [strength_acknowledgment]\n')

        result = load_yaml(yaml_file)

        assert result["phrases"] == {"i'm good at": ["strength_acknowledgment"]}


class TestYAMLLoadError:
    """Tests for YAMLLoadError exception."""

    def test_error_contains_path_and_reason(self) -> None:
        """Test that error message contains path and reason."""
        path = Path("/some/path/thresholds.yaml")

        error = YAMLLoadError(path, "File not found")

        assert str(path) in str(error)
        assert "File not found" in str(error)
        assert error.path == path
        assert error.reason == "File not found"
