"""Parallel Coordinator — распределение диапазона D по пулу воркеров.

Диапазон [start, d_max] режется на подряд идущие chunks по chunk_size D.
Каждый chunk обрабатывается воркером пула (процесс или поток) со своим
DiscriminantWorker и своим буфером решений; буферы никогда не делятся
между D, обрабатываемыми одновременно.

Координирующий поток:
- суммирует количество принятых кандидатов (reduction под lock-ом)
- ведёт frontier — наименьший ещё не завершённый D; chunks, завершённые
  выше незакрытого разрыва, ждут, пока разрыв не закроется
- каждые log_interval обработанных D сохраняет checkpoint
  (next_d = frontier, total = кандидаты всех D < frontier)
- в конце обязательно сохраняет next_d = d_max + 1

Ограничение in-flight задач: workers * IN_FLIGHT_PER_WORKER chunks.
"""

import logging
import threading
from concurrent.futures import (
    FIRST_COMPLETED,
    Future,
    ProcessPoolExecutor,
    ThreadPoolExecutor,
    wait,
)
from dataclasses import dataclass
from typing import Final, Iterator, Optional

from src.core.domain.candidate_grid import CandidateGrid
from src.core.domain.checkpoint_state import CheckpointState
from src.core.domain.search_config import ExecutorKind, SearchConfig
from src.pell.assembler import CandidateAssembler
from src.pell.generator import SolutionBufferAllocationError
from src.search.checkpoint import CheckpointStore
from src.search.sweep import (
    CandidateCallback,
    DiscriminantWorker,
    SweepSummary,
    resolve_start,
)

logger = logging.getLogger(__name__)

# Максимум chunks в полёте на одного воркера
IN_FLIGHT_PER_WORKER: Final[int] = 4


# =============================================================================
# WORKER SIDE
# =============================================================================

# Состояние воркера пула: по одному на процесс (ProcessPool) или поток (ThreadPool)
_WORKER_LOCAL = threading.local()


def _init_worker(pell_limit: int, assembler: Optional[CandidateAssembler]) -> None:
    _WORKER_LOCAL.params = (pell_limit, assembler)
    _WORKER_LOCAL.worker = None


def _local_worker() -> DiscriminantWorker:
    """DiscriminantWorker текущего потока; буфер выделяется при первом chunk.

    Выделение откладывается до задачи, чтобы SolutionBufferAllocationError
    дошла до координатора через future, а не сломала пул в initializer.
    """
    worker = _WORKER_LOCAL.worker
    if worker is None:
        pell_limit, assembler = _WORKER_LOCAL.params
        worker = DiscriminantWorker(pell_limit, assembler)
        _WORKER_LOCAL.worker = worker
    return worker


@dataclass(frozen=True)
class ChunkResult:
    """Результат обработки chunk [start, end]."""

    start: int
    end: int
    solutions: int
    pairs_examined: int
    grids: tuple[tuple[int, CandidateGrid], ...]

    @property
    def count(self) -> int:
        return self.end - self.start + 1

    @property
    def found(self) -> int:
        return len(self.grids)


def process_chunk(start: int, end: int) -> ChunkResult:
    """Обработка D ∈ [start, end] воркером текущего потока/процесса."""
    worker = _local_worker()

    solutions = 0
    pairs = 0
    grids = []
    for d in range(start, end + 1):
        result = worker.process(d)
        solutions += result.solutions
        pairs += result.pairs_examined
        grids.extend((d, grid) for grid in result.grids)

    return ChunkResult(
        start=start,
        end=end,
        solutions=solutions,
        pairs_examined=pairs,
        grids=tuple(grids),
    )


def iter_chunks(start: int, d_max: int, chunk_size: int) -> Iterator[tuple[int, int]]:
    """
    Разбиение [start, d_max] на chunks.

    Examples:
        >>> list(iter_chunks(0, 9, 4))
        [(0, 3), (4, 7), (8, 9)]
    """
    if chunk_size <= 0:
        raise ValueError(f"chunk_size must be positive, got {chunk_size}")

    for a in range(start, d_max + 1, chunk_size):
        yield a, min(a + chunk_size - 1, d_max)


# =============================================================================
# COORDINATOR
# =============================================================================


class ParallelCoordinator:
    """Параллельный sweep по D с checkpoint по завершённому frontier."""

    def __init__(
        self,
        config: SearchConfig,
        store: Optional[CheckpointStore] = None,
        assembler: Optional[CandidateAssembler] = None,
    ):
        """
        Args:
            config: Параметры поиска (workers, executor, chunk_size, log_interval)
            store: Checkpoint store (None → без сохранения прогресса)
            assembler: Assembler, передаётся воркерам; для ProcessPool должен
                сериализоваться pickle
        """
        self.config = config
        self.store = store
        self.assembler = assembler

        self._lock = threading.Lock()
        self._reset(CheckpointState(next_d=config.d_min, total_candidates=0))

    def _reset(self, state: CheckpointState) -> None:
        self._frontier = state.next_d
        self._committed_total = state.total_candidates
        self._pending: dict[int, ChunkResult] = {}
        self._processed = 0
        self._solutions = 0
        self._pairs = 0
        self._next_checkpoint_at = self.config.log_interval

    @property
    def frontier(self) -> int:
        """Наименьший D, который ещё не завершён."""
        return self._frontier

    @property
    def committed_total(self) -> int:
        return self._committed_total

    def _executor(self):
        cfg = self.config
        pool_cls = ProcessPoolExecutor if cfg.executor == ExecutorKind.PROCESS else ThreadPoolExecutor
        return pool_cls(
            max_workers=cfg.workers,
            initializer=_init_worker,
            initargs=(cfg.pell_limit, self.assembler),
        )

    def _initial_state(self) -> CheckpointState:
        if self.store is None:
            return CheckpointState(next_d=self.config.d_min, total_candidates=0)
        return resolve_start(self.store.open(), self.config.d_min, self.config.d_max)

    def _save(self, state: CheckpointState) -> None:
        if self.store is not None:
            self.store.save(state)

    def merge(self, result: ChunkResult, on_candidate: Optional[CandidateCallback] = None) -> None:
        """
        Учёт завершённого chunk: сумма, frontier, периодический checkpoint.

        Потокобезопасно; checkpoint записывается под тем же lock-ом.
        """
        with self._lock:
            self._processed += result.count
            self._solutions += result.solutions
            self._pairs += result.pairs_examined

            self._pending[result.start] = result
            while self._frontier in self._pending:
                done = self._pending.pop(self._frontier)
                self._committed_total += done.found
                self._frontier = done.end + 1

            if self._processed >= self._next_checkpoint_at:
                interval = self.config.log_interval
                self._next_checkpoint_at = (self._processed // interval + 1) * interval
                logger.info(
                    "Processed %d discriminants, completed up to D=%d",
                    self._processed,
                    self._frontier - 1,
                )
                self._save(
                    CheckpointState(
                        next_d=self._frontier,
                        total_candidates=self._committed_total,
                    )
                )

        if on_candidate is not None:
            for d, grid in result.grids:
                on_candidate(d, grid)

    def run(self, on_candidate: Optional[CandidateCallback] = None) -> SweepSummary:
        """
        Параллельный обход [start, d_max].

        Returns:
            SweepSummary; total_candidates включает количество из checkpoint

        Raises:
            SolutionBufferAllocationError: Если буфер воркера не выделен
        """
        cfg = self.config
        state = self._initial_state()
        self._reset(state)
        start_d = state.next_d

        logger.info(
            "Starting parallel sweep: D=[%d, %d], workers=%d, executor=%s, chunk_size=%d",
            start_d,
            cfg.d_max,
            cfg.workers,
            cfg.executor.value,
            cfg.chunk_size,
        )

        chunks = iter_chunks(start_d, cfg.d_max, cfg.chunk_size)
        max_in_flight = cfg.workers * IN_FLIGHT_PER_WORKER

        try:
            with self._executor() as pool:
                in_flight: set[Future] = set()

                def refill() -> None:
                    while len(in_flight) < max_in_flight:
                        chunk = next(chunks, None)
                        if chunk is None:
                            return
                        in_flight.add(pool.submit(process_chunk, *chunk))

                refill()
                try:
                    while in_flight:
                        done, in_flight = wait(in_flight, return_when=FIRST_COMPLETED)
                        for future in done:
                            self.merge(future.result(), on_candidate)
                        refill()
                except SolutionBufferAllocationError as e:
                    logger.critical("Memory allocation failed: %s", e)
                    for future in in_flight:
                        future.cancel()
                    raise

            self._save(
                CheckpointState(
                    next_d=cfg.d_max + 1,
                    total_candidates=self._committed_total,
                )
            )
        finally:
            if self.store is not None:
                self.store.close()

        logger.info(
            "Parallel sweep finished: D=[%d, %d], processed=%d, total_candidates=%d",
            start_d,
            cfg.d_max,
            self._processed,
            self._committed_total,
        )
        return SweepSummary(
            start_d=start_d,
            end_d=cfg.d_max,
            discriminants_processed=self._processed,
            solutions_found=self._solutions,
            pairs_examined=self._pairs,
            new_candidates=self._committed_total - state.total_candidates,
            total_candidates=self._committed_total,
            resumed=start_d != cfg.d_min,
        )
