"""Pairwise relationships and thematic grouping of questions."""

from .analyzer import RelationshipAnalyzer
from .correlation import band_strength, pearson
from .themes import group_by_theme

__all__ = ["RelationshipAnalyzer", "band_strength", "group_by_theme", "pearson"]
