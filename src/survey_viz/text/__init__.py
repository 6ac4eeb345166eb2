"""Pattern detectors that turn prose into a small chartable series."""

from .analyzer import TextPatternAnalyzer
from .detectors import Detector, default_detectors, detector_names

__all__ = ["Detector", "TextPatternAnalyzer", "default_detectors", "detector_names"]
