from .context import DataContext
from .selector import VisualizationSelector

__all__ = ["DataContext", "VisualizationSelector"]
