"""Project directory resolution for the focused IDE window."""

from .editor_recents import EditorRecentsResolver
from .family import classify
from .focused_project import FocusedProjectResolver
from .jetbrains_recents import JetBrainsRecentProjectsResolver, MatchTier
from .models import (
    EditorFamily,
    RecentProjectCandidate,
    ResolvedContext,
    ResolverAttempt,
    WindowSnapshot,
)
from .path_heuristics import normalize_project_path
from .strategies import STRATEGY_ORDER, Strategy, StrategyName, build_live_strategies, strategy_sequence

__all__ = [
    'EditorFamily',
    'EditorRecentsResolver',
    'FocusedProjectResolver',
    'JetBrainsRecentProjectsResolver',
    'MatchTier',
    'RecentProjectCandidate',
    'ResolvedContext',
    'ResolverAttempt',
    'STRATEGY_ORDER',
    'Strategy',
    'StrategyName',
    'WindowSnapshot',
    'build_live_strategies',
    'classify',
    'normalize_project_path',
    'strategy_sequence',
]
