"""Tests for Settings, PipelineConfig and the strategy enum."""

from __future__ import annotations

import pytest

from taskcapture.config import Settings, get_settings
from taskcapture.pipeline_config import ExtractionStrategy, PipelineConfig

# ---------------------------------------------------------------------------
# Enum tests
# ---------------------------------------------------------------------------


class TestExtractionStrategy:
    def test_values(self) -> None:
        assert ExtractionStrategy.DIRECT_REQUEST.value == "direct_request"
        assert ExtractionStrategy.HOUSEHOLD_TASK.value == "household_task"

    def test_eight_strategies(self) -> None:
        assert len(ExtractionStrategy) == 8

    def test_from_string(self) -> None:
        assert ExtractionStrategy("reminder") is ExtractionStrategy.REMINDER

    def test_invalid_raises(self) -> None:
        with pytest.raises(ValueError):
            ExtractionStrategy("invalid")

    def test_is_str_subclass(self) -> None:
        """Enum values behave as plain strings for JSON serialization."""
        assert isinstance(ExtractionStrategy.DEADLINE, str)


# ---------------------------------------------------------------------------
# PipelineConfig tests
# ---------------------------------------------------------------------------


class TestPipelineConfig:
    def test_defaults(self) -> None:
        cfg = PipelineConfig()
        assert cfg.category_normalizer == 3.0
        assert cfg.strong_keyword_weight == 2.0
        assert cfg.weak_keyword_weight == 1.0
        assert cfg.category_hint_confidence == 0.5

    def test_immutable(self) -> None:
        cfg = PipelineConfig()
        with pytest.raises(AttributeError):
            cfg.category_normalizer = 1.0  # type: ignore[misc]

    def test_rejects_non_positive_normalizer(self) -> None:
        with pytest.raises(ValueError, match="category_normalizer"):
            PipelineConfig(category_normalizer=0.0)

    def test_rejects_hint_confidence_out_of_range(self) -> None:
        with pytest.raises(ValueError, match="category_hint_confidence"):
            PipelineConfig(category_hint_confidence=1.5)

    def test_from_settings(self) -> None:
        settings = Settings(_env_file=None, category_normalizer=5.0, weak_keyword_weight=0.5)  # type: ignore[call-arg]
        cfg = PipelineConfig.from_settings(settings)
        assert cfg.category_normalizer == 5.0
        assert cfg.weak_keyword_weight == 0.5
        assert cfg.strong_keyword_weight == settings.strong_keyword_weight

    def test_from_settings_carries_hint_confidence(self) -> None:
        settings = Settings(_env_file=None, category_hint_confidence=0.3)  # type: ignore[call-arg]
        assert PipelineConfig.from_settings(settings).category_hint_confidence == 0.3

    def test_hint_confidence_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TASKCAPTURE_CATEGORY_HINT_CONFIDENCE", "0.25")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert PipelineConfig.from_settings(settings).category_hint_confidence == 0.25


# ---------------------------------------------------------------------------
# Settings tests
# ---------------------------------------------------------------------------


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.min_confidence == 0.4
        assert settings.max_input_chars == 10_000
        assert settings.log_level == "INFO"

    def test_env_prefix(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TASKCAPTURE_MIN_CONFIDENCE", "0.7")
        monkeypatch.setenv("TASKCAPTURE_CATEGORY_NORMALIZER", "4")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.min_confidence == 0.7
        assert settings.category_normalizer == 4.0

    def test_get_settings_is_cached(self) -> None:
        assert get_settings() is get_settings()
