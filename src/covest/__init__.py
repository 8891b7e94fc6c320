"""Static, heuristic coverage estimation and reporting."""

from covest.config import TrackerConfig, load_config, validate_config
from covest.tracker import CoverageTracker, SaveResult

__version__ = "0.1.0"

__all__ = [
    "CoverageTracker",
    "SaveResult",
    "TrackerConfig",
    "__version__",
    "load_config",
    "validate_config",
]
