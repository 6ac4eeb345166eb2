from __future__ import annotations

import os
from dataclasses import asdict, dataclass, replace
from typing import Any, Optional


def _env_str(key: str, default: Optional[str] = None) -> Optional[str]:
    v = os.getenv(key)
    if v is None:
        return default
    v = v.strip()
    return v if v else default


def _env_int(key: str, default: Optional[int]) -> Optional[int]:
    v = _env_str(key)
    if v is None:
        return default
    try:
        return int(v)
    except ValueError:
        return default


def _env_bool(key: str, default: bool) -> bool:
    v = _env_str(key)
    if v is None:
        return default
    return v.lower() in {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class EngineConfig:
    """Numeric thresholds for every stage of the engine.

    The multiple-choice and rating heuristics were tuned on a narrow set of
    survey exports; they are configuration, not constants.
    """

    # Question classifier
    mc_max_distinct: int = 10
    mc_max_distinct_ratio: float = 0.2
    mc_ratio_min_responses: int = 20
    mc_max_value_length: int = 30
    long_text_length: int = 60

    # Summaries / selector gating
    min_responses: int = 3
    small_sample_responses: int = 3
    histogram_max_bins: int = 10

    # Visualization selector cardinality cutoffs
    pie_max_categories: int = 5
    proportion_pie_max_categories: int = 6
    ranked_bar_max_categories: int = 15

    # Relationship analyzer
    categorical_pair_max_distinct: int = 20
    box_top_categories: int = 8
    box_min_group_size: int = 5
    tukey_factor: float = 1.5
    strength_bands: tuple[float, float, float, float] = (0.1, 0.3, 0.5, 0.7)
    theme_min_shared_terms: int = 2
    theme_min_term_length: int = 4
    theme_min_group_size: int = 3
    repeated_terms_top: int = 3

    # Text pattern analyzer
    metrics_min_evidence: int = 3
    comparison_min_connectives: int = 2
    comparison_min_bullets: int = 3
    time_min_years: int = 2
    time_min_trend_words: int = 2
    categorical_min_evidence: int = 2
    ranking_min_words: int = 3
    ranking_min_items: int = 3
    min_series_points: int = 2
    pie_max_slices: int = 5
    comparison_default_delta: float = 10.0
    word_min_length: int = 4
    word_top_n: int = 50
    word_cloud_max_words: int = 25

    # Runtime
    seed: Optional[int] = None
    log_level: str = "INFO"
    log_json: bool = False

    @staticmethod
    def from_env() -> "EngineConfig":
        """Read `SURVEY_VIZ_*` overrides; malformed values keep the defaults."""
        base = EngineConfig()
        return replace(
            base,
            seed=_env_int("SURVEY_VIZ_SEED", base.seed),
            min_responses=_env_int("SURVEY_VIZ_MIN_RESPONSES", base.min_responses) or base.min_responses,
            log_level=(_env_str("SURVEY_VIZ_LOG_LEVEL", base.log_level) or base.log_level).upper(),
            log_json=_env_bool("SURVEY_VIZ_LOG_JSON", base.log_json),
        )

    def with_overrides(self, **changes: Any) -> "EngineConfig":
        clean = {k: v for k, v in changes.items() if v is not None}
        return replace(self, **clean) if clean else self

    def as_dict(self) -> dict[str, Any]:
        d = asdict(self)
        d["strength_bands"] = list(self.strength_bands)
        return d
