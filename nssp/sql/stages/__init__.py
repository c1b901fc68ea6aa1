"""SQL stage orchestrators, one per SQL file."""

from .base import StageOrchestrator, select_view, view_columns
from .load import LoadStage, BASE_TABLE
from .sanity import SanityStage
from .grain import GrainStage
from .period import PeriodStage
from .ranking import RankingStage
from .composition import CompositionStage
from .eda import EdaStage

__all__ = [
    "StageOrchestrator",
    "select_view",
    "view_columns",
    "BASE_TABLE",
    "LoadStage",
    "SanityStage",
    "GrainStage",
    "PeriodStage",
    "RankingStage",
    "CompositionStage",
    "EdaStage",
]
