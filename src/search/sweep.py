"""Discriminant Sweep Driver — последовательный обход D ∈ [d_min, d_max].

Для каждого D:
1. Generator заполняет буфер воркера решениями N² = D + 2M²
2. Нет решений → следующий D (нормальный исход, не ошибка)
3. Assembler вызывается для всех упорядоченных пар (i, j)
4. Принятые кандидаты считаются и передаются в on_candidate

Начальный D — d_min или значение из checkpoint (вне [d_min, d_max] →
d_min). Checkpoint сохраняется каждые log_interval обработанных D и
обязательно в конце (next_d = d_max + 1).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

from src.core.domain.candidate_grid import CandidateGrid
from src.core.domain.checkpoint_state import CheckpointState
from src.core.domain.search_config import SearchConfig
from src.pell.assembler import CandidateAssembler
from src.pell.generator import (
    PellSolutionGenerator,
    SolutionBuffer,
    SolutionBufferAllocationError,
)
from src.search.checkpoint import CheckpointStore

logger = logging.getLogger(__name__)

# Callback принятого кандидата: (D, grid)
CandidateCallback = Callable[[int, CandidateGrid], None]


# =============================================================================
# RESULTS
# =============================================================================


@dataclass(frozen=True)
class DiscriminantResult:
    """Результат обработки одного D."""

    d: int
    solutions: int
    pairs_examined: int
    grids: tuple[CandidateGrid, ...]

    @property
    def found(self) -> int:
        return len(self.grids)


@dataclass(frozen=True)
class SweepSummary:
    """Итог sweep (последовательного или параллельного)."""

    start_d: int
    end_d: int
    discriminants_processed: int
    solutions_found: int
    pairs_examined: int
    new_candidates: int
    total_candidates: int
    resumed: bool


# =============================================================================
# WORKER
# =============================================================================


class DiscriminantWorker:
    """Generator + Assembler для одного воркера с собственным буфером.

    Буфер выделяется один раз (4 * pell_limit слотов) и переиспользуется
    для каждого D; экземпляр нельзя делить между потоками.
    """

    def __init__(self, pell_limit: int, assembler: Optional[CandidateAssembler] = None):
        """
        Raises:
            SolutionBufferAllocationError: Если буфер не выделен (фатально)
        """
        self.generator = PellSolutionGenerator(pell_limit)
        self.assembler = assembler or CandidateAssembler()
        self.buffer = SolutionBuffer.for_limit(pell_limit)

    def process(self, d: int) -> DiscriminantResult:
        count = self.generator.fill(d, self.buffer)
        if count == 0:
            return DiscriminantResult(d=d, solutions=0, pairs_examined=0, grids=())

        grids = []
        assemble = self.assembler.assemble
        for sol_i in self.buffer:
            for sol_j in self.buffer:
                grid = assemble(sol_i, sol_j)
                if grid is not None:
                    grids.append(grid)

        logger.debug("D=%d: solutions=%d, accepted=%d", d, count, len(grids))
        return DiscriminantResult(
            d=d,
            solutions=count,
            pairs_examined=count * count,
            grids=tuple(grids),
        )


# =============================================================================
# RESUME
# =============================================================================


def resolve_start(state: CheckpointState, d_min: int, d_max: int) -> CheckpointState:
    """
    Ограничение сохранённого состояния диапазоном [d_min, d_max].

    Если next_d вне диапазона, sweep начинается с d_min и сохранённый
    total отбрасывается: он относится к другому диапазону.
    """
    if d_min <= state.next_d <= d_max:
        return state

    if state.next_d != d_min or state.total_candidates != 0:
        logger.warning(
            "Checkpoint D=%d is outside [%d, %d]; starting from D=%d",
            state.next_d,
            d_min,
            d_max,
            d_min,
        )
    return CheckpointState(next_d=d_min, total_candidates=0)


# =============================================================================
# DRIVER
# =============================================================================


class DiscriminantSweepDriver:
    """Последовательный sweep по D с периодическим checkpoint."""

    def __init__(
        self,
        config: SearchConfig,
        store: Optional[CheckpointStore] = None,
        assembler: Optional[CandidateAssembler] = None,
    ):
        """
        Args:
            config: Параметры поиска
            store: Checkpoint store (None → без сохранения прогресса)
            assembler: Assembler (default: CandidateAssembler())
        """
        self.config = config
        self.store = store
        self.assembler = assembler

    def _initial_state(self) -> CheckpointState:
        if self.store is None:
            return CheckpointState(next_d=self.config.d_min, total_candidates=0)
        return resolve_start(self.store.open(), self.config.d_min, self.config.d_max)

    def _save(self, state: CheckpointState) -> None:
        if self.store is not None:
            self.store.save(state)

    def run(self, on_candidate: Optional[CandidateCallback] = None) -> SweepSummary:
        """
        Обход [start, d_max].

        Returns:
            SweepSummary; total_candidates включает количество из checkpoint

        Raises:
            SolutionBufferAllocationError: Если буфер воркера не выделен
        """
        cfg = self.config
        state = self._initial_state()
        start_d = state.next_d
        total = state.total_candidates

        processed = 0
        solutions = 0
        pairs = 0
        new_candidates = 0

        try:
            try:
                worker = DiscriminantWorker(cfg.pell_limit, self.assembler)
            except SolutionBufferAllocationError as e:
                logger.critical("Memory allocation failed: %s", e)
                raise

            for d in range(start_d, cfg.d_max + 1):
                result = worker.process(d)

                processed += 1
                solutions += result.solutions
                pairs += result.pairs_examined
                new_candidates += result.found
                total += result.found

                if on_candidate is not None:
                    for grid in result.grids:
                        on_candidate(d, grid)

                if processed % cfg.log_interval == 0:
                    logger.info("Processed D=%d", d)
                    self._save(CheckpointState(next_d=d + 1, total_candidates=total))

            self._save(CheckpointState(next_d=cfg.d_max + 1, total_candidates=total))
        finally:
            if self.store is not None:
                self.store.close()

        logger.info(
            "Sweep finished: D=[%d, %d], processed=%d, total_candidates=%d",
            start_d,
            cfg.d_max,
            processed,
            total,
        )
        return SweepSummary(
            start_d=start_d,
            end_d=cfg.d_max,
            discriminants_processed=processed,
            solutions_found=solutions,
            pairs_examined=pairs,
            new_candidates=new_candidates,
            total_candidates=total,
            resumed=start_d != cfg.d_min,
        )
