"""Search — обход дискриминантов, checkpoint и параллельное выполнение.

- Discriminant Sweep Driver (последовательный)
- Parallel Coordinator (ProcessPool / ThreadPool)
- Checkpoint Store (возобновление после прерывания)
- Candidate reporting
"""

from .checkpoint import CheckpointStore
from .coordinator import ChunkResult, ParallelCoordinator, iter_chunks, process_chunk
from .reporting import CandidateReporter, candidate_record, format_candidate
from .sweep import (
    CandidateCallback,
    DiscriminantResult,
    DiscriminantSweepDriver,
    DiscriminantWorker,
    SweepSummary,
    resolve_start,
)

__all__ = [
    "CheckpointStore",
    "ChunkResult",
    "ParallelCoordinator",
    "iter_chunks",
    "process_chunk",
    "CandidateReporter",
    "candidate_record",
    "format_candidate",
    "CandidateCallback",
    "DiscriminantResult",
    "DiscriminantSweepDriver",
    "DiscriminantWorker",
    "SweepSummary",
    "resolve_start",
]
