"""Тесты для Discriminant Sweep Driver.

Coverage:
- Полный обход [d_min, d_max] и итоговый checkpoint d_max + 1
- Возобновление из checkpoint (внутри и вне диапазона)
- Возобновлённый прогон находит те же кандидаты, что и свежий
- Периодичность checkpoint (каждые log_interval D + финальный)
- Фатальная ошибка выделения буфера
"""

import logging

import pytest

from src.core.domain.candidate_grid import CandidateGrid
from src.core.domain.checkpoint_state import CheckpointState
from src.core.domain.pell_solution import PellSolution
from src.core.domain.search_config import SearchConfig
from src.pell.assembler import CandidateAssembler
from src.pell.generator import SolutionBufferAllocationError, generate_pell_solutions
from src.search.checkpoint import CheckpointStore
from src.search.sweep import (
    DiscriminantSweepDriver,
    DiscriminantWorker,
    resolve_start,
)


LO_SHU = CandidateGrid(
    a=0, c=0, e=0,
    A=2, B=7, C=6,
    D=9, E=5, F=1,
    G=4, H=3, I=8,
)


class MirrorPairAssembler(CandidateAssembler):
    """Принимает пары (n, m), (-n, m) при n > 0; даёт детерминированные находки."""

    def assemble(self, sol_i: PellSolution, sol_j: PellSolution):
        if sol_i.n > 0 and sol_j.n == -sol_i.n and sol_j.m == sol_i.m:
            return LO_SHU
        return None


class SpyStore:
    """Store, запоминающий сохранённые состояния."""

    def __init__(self, initial: CheckpointState):
        self.initial = initial
        self.saved = []
        self.closed = False

    def open(self):
        return self.initial

    def save(self, state):
        self.saved.append(state)
        return True

    def close(self):
        self.closed = True


def _config(tmp_path, **overrides):
    params = dict(
        pell_limit=20,
        d_min=0,
        d_max=50,
        log_interval=10,
        checkpoint_path=str(tmp_path / "checkpoint.txt"),
    )
    params.update(overrides)
    return SearchConfig(**params)


def _store(config):
    return CheckpointStore(config.checkpoint_path, d_min=config.d_min)


def _collect(driver):
    found = []
    summary = driver.run(on_candidate=lambda d, grid: found.append(d))
    return summary, found


# =============================================================================
# FULL SWEEP
# =============================================================================


class TestFullSweep:
    """Обход без checkpoint."""

    def test_processes_whole_range(self, tmp_path):
        config = _config(tmp_path)

        summary = DiscriminantSweepDriver(config, _store(config)).run()

        assert summary.start_d == 0
        assert summary.end_d == 50
        assert summary.discriminants_processed == 51
        assert summary.total_candidates == 0
        assert summary.new_candidates == 0
        assert not summary.resumed

    def test_final_checkpoint_written(self, tmp_path):
        config = _config(tmp_path)
        DiscriminantSweepDriver(config, _store(config)).run()

        assert (tmp_path / "checkpoint.txt").read_text(encoding="utf-8") == "51 0\n"

    def test_solution_counts_match_generator(self, tmp_path):
        config = _config(tmp_path)

        summary = DiscriminantSweepDriver(config).run()

        expected = [len(generate_pell_solutions(d, 20)) for d in range(0, 51)]
        assert summary.solutions_found == sum(expected)
        assert summary.pairs_examined == sum(n * n for n in expected)

    def test_zero_pell_limit_finds_nothing(self, tmp_path):
        config = _config(tmp_path, pell_limit=0, d_max=20)

        summary = DiscriminantSweepDriver(config, _store(config)).run()

        assert summary.discriminants_processed == 21
        assert summary.solutions_found == 0
        assert summary.pairs_examined == 0
        assert (tmp_path / "checkpoint.txt").read_text(encoding="utf-8") == "21 0\n"

    def test_without_store(self, tmp_path):
        config = _config(tmp_path, d_max=5)

        summary = DiscriminantSweepDriver(config, store=None).run()

        assert summary.discriminants_processed == 6
        assert not (tmp_path / "checkpoint.txt").exists()

    def test_single_discriminant(self, tmp_path):
        config = _config(tmp_path, d_min=7, d_max=7)

        summary = DiscriminantSweepDriver(config, _store(config)).run()

        assert summary.discriminants_processed == 1
        assert summary.solutions_found == len(generate_pell_solutions(7, 20))

    def test_candidates_reported_with_discriminant(self, tmp_path):
        config = _config(tmp_path, d_max=30)
        driver = DiscriminantSweepDriver(config, assembler=MirrorPairAssembler())

        summary, found = _collect(driver)

        assert summary.new_candidates == len(found) > 0
        assert summary.total_candidates == len(found)
        assert found == sorted(found)
        for d in set(found):
            roots = {(abs(s.n), abs(s.m)) for s in generate_pell_solutions(d, 20)}
            assert found.count(d) == 2 * len([r for r in roots if r[0] > 0])


class TestWorker:
    """DiscriminantWorker."""

    def test_no_solutions_is_normal(self):
        result = DiscriminantWorker(10).process(0)

        assert result.solutions == 0
        assert result.pairs_examined == 0
        assert result.found == 0

    def test_all_ordered_pairs_examined(self):
        result = DiscriminantWorker(5).process(7)

        assert result.solutions == 8
        assert result.pairs_examined == 64
        assert result.grids == ()


# =============================================================================
# RESUME
# =============================================================================


class TestResume:
    """Возобновление из checkpoint."""

    def test_resolve_start_in_range(self):
        state = CheckpointState(next_d=30, total_candidates=4)
        assert resolve_start(state, 0, 50) == state

    def test_resolve_start_out_of_range(self, caplog):
        with caplog.at_level(logging.WARNING, logger="src.search.sweep"):
            state = resolve_start(CheckpointState(next_d=500, total_candidates=7), 0, 50)

        assert state == CheckpointState(next_d=0, total_candidates=0)
        assert "outside" in caplog.text

    def test_resume_continues_from_checkpoint(self, tmp_path):
        config = _config(tmp_path)
        (tmp_path / "checkpoint.txt").write_text("30 4\n", encoding="utf-8")

        summary = DiscriminantSweepDriver(config, _store(config)).run()

        assert summary.start_d == 30
        assert summary.discriminants_processed == 21
        assert summary.total_candidates == 4
        assert summary.resumed
        assert (tmp_path / "checkpoint.txt").read_text(encoding="utf-8") == "51 4\n"

    def test_out_of_range_checkpoint_restarts(self, tmp_path):
        config = _config(tmp_path)
        (tmp_path / "checkpoint.txt").write_text("500 7\n", encoding="utf-8")

        summary = DiscriminantSweepDriver(config, _store(config)).run()

        assert summary.start_d == 0
        assert summary.discriminants_processed == 51
        assert summary.total_candidates == 0
        assert not summary.resumed

    def test_resumed_run_matches_fresh_run(self, tmp_path):
        """Прогон с checkpoint D0 находит те же D, что и свежий прогон с d_min = D0."""
        d0 = 17
        resumed_config = _config(tmp_path, d_max=40)
        (tmp_path / "checkpoint.txt").write_text(f"{d0} 0\n", encoding="utf-8")
        resumed = DiscriminantSweepDriver(
            resumed_config, _store(resumed_config), assembler=MirrorPairAssembler()
        )

        fresh_config = _config(tmp_path, d_min=d0, d_max=40,
                               checkpoint_path=str(tmp_path / "fresh.txt"))
        fresh = DiscriminantSweepDriver(
            fresh_config, _store(fresh_config), assembler=MirrorPairAssembler()
        )

        resumed_summary, resumed_found = _collect(resumed)
        fresh_summary, fresh_found = _collect(fresh)

        assert resumed_found == fresh_found
        assert resumed_found
        assert resumed_summary.total_candidates == fresh_summary.total_candidates


# =============================================================================
# CHECKPOINT CADENCE
# =============================================================================


class TestCheckpointCadence:
    """Checkpoint каждые log_interval D и в конце."""

    def test_periodic_and_final_saves(self, tmp_path):
        config = _config(tmp_path, d_max=24)
        store = SpyStore(CheckpointState(next_d=0, total_candidates=0))

        DiscriminantSweepDriver(config, store).run()

        assert [s.next_d for s in store.saved] == [10, 20, 25]
        assert store.closed

    def test_saved_totals_include_candidates(self, tmp_path):
        config = _config(tmp_path, d_max=24)
        store = SpyStore(CheckpointState(next_d=0, total_candidates=2))

        summary = DiscriminantSweepDriver(
            config, store, assembler=MirrorPairAssembler()
        ).run()

        totals = [s.total_candidates for s in store.saved]
        assert totals == sorted(totals)
        assert totals[0] >= 2
        assert totals[-1] == summary.total_candidates == 2 + summary.new_candidates


# =============================================================================
# FATAL ERRORS
# =============================================================================


class TestAllocationFailure:
    """Невыделяемый буфер прерывает sweep."""

    def test_raises_and_logs_critical(self, tmp_path, caplog):
        config = _config(tmp_path, pell_limit=10**19)
        store = _store(config)

        with caplog.at_level(logging.CRITICAL, logger="src.search.sweep"):
            with pytest.raises(SolutionBufferAllocationError):
                DiscriminantSweepDriver(config, store).run()

        assert "Memory allocation failed" in caplog.text
        assert not store.is_open
        assert not (tmp_path / "checkpoint.txt").exists()
