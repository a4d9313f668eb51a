from .errors import EmptyCandidatesError, ThemifyError
from .models import CandidateColor, InvalidCandidate, Theme, parse_candidate
from .pipeline import ThemePipeline, ThemeResult
from .theme import AssignerConfig, assign_theme

__all__ = [
    "AssignerConfig",
    "CandidateColor",
    "EmptyCandidatesError",
    "InvalidCandidate",
    "Theme",
    "ThemePipeline",
    "ThemeResult",
    "ThemifyError",
    "assign_theme",
    "parse_candidate",
]
