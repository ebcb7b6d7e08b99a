"""
Domain models and value objects.

Contains the search entities: PellSolution, CandidateGrid, CheckpointState,
SearchConfig.
"""

from src.core.domain.candidate_grid import CandidateGrid
from src.core.domain.checkpoint_state import CheckpointState
from src.core.domain.pell_solution import (
    SIGN_COMBINATIONS,
    PellSolution,
    sign_variants,
)
from src.core.domain.search_config import (
    DEFAULT_CHECKPOINT_PATH,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_LOG_INTERVAL,
    ExecutorKind,
    SearchConfig,
)

__all__ = [
    # Pell solution model
    "PellSolution",
    "SIGN_COMBINATIONS",
    "sign_variants",
    # Candidate grid model
    "CandidateGrid",
    # Checkpoint state model
    "CheckpointState",
    # Search config model
    "DEFAULT_CHECKPOINT_PATH",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_LOG_INTERVAL",
    "ExecutorKind",
    "SearchConfig",
]
