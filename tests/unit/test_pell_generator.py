"""Тесты для Pell Solution Generator и SolutionBuffer.

Coverage:
- Каждое решение удовлетворяет N² = D + 2M²
- Знаковые варианты без дубликатов при нулевой компоненте
- Конкретный сценарий D = 7, limit = 5
- Отрицательные D + 2M² не передаются в Oracle
- Ёмкость и переиспользование буфера
- Фатальная ошибка выделения буфера
"""

import pytest

from src.core.domain.pell_solution import PellSolution
from src.core.math.perfect_squares import is_square_root
from src.pell.generator import (
    PellSolutionGenerator,
    SolutionBuffer,
    SolutionBufferAllocationError,
    generate_pell_solutions,
)


def _pairs(solutions):
    return [s.as_tuple() for s in solutions]


class TestPellEquation:
    """Корректность решений."""

    def test_every_solution_satisfies_equation(self):
        """N² = D + 2M² точно для всех выданных пар."""
        limit = 40
        for d in range(0, 300):
            for sol in generate_pell_solutions(d, limit):
                assert sol.n * sol.n == d + 2 * sol.m * sol.m
                assert 1 <= abs(sol.m) <= limit

    def test_d7_limit5_exact_list(self):
        """D = 7: M=1 → 9 = 3², M=3 → 25 = 5²; M=2,4,5 не дают квадратов."""
        solutions = generate_pell_solutions(7, 5)

        assert _pairs(solutions) == [
            (3, 1), (-3, 1), (3, -1), (-3, -1),
            (5, 3), (-5, 3), (5, -3), (-5, -3),
        ]

    def test_d1_limit12(self):
        """D = 1: M=2 → 9, M=12 → 289."""
        solutions = generate_pell_solutions(1, 12)

        assert _pairs(solutions) == [
            (3, 2), (-3, 2), (3, -2), (-3, -2),
            (17, 12), (-17, 12), (17, -12), (-17, -12),
        ]

    def test_d0_has_no_solutions(self):
        """2M² никогда не квадрат при M >= 1."""
        assert generate_pell_solutions(0, 200) == []

    def test_zero_limit_has_no_solutions(self):
        assert generate_pell_solutions(7, 0) == []

    def test_large_discriminant(self):
        """Решения для D за пределами 64 бит остаются точными."""
        m = 3
        n = 10**20 + 1
        d = n * n - 2 * m * m

        solutions = generate_pell_solutions(d, 3)

        assert (n, m) in _pairs(solutions)
        for sol in solutions:
            assert sol.satisfies(d)


class TestSignVariants:
    """Знаковые варианты и нулевые компоненты."""

    def test_full_four_way_set(self):
        """N != 0 и M != 0 → ровно 4 варианта на корневую пару."""
        solutions = generate_pell_solutions(7, 5)
        roots = {(abs(s.n), abs(s.m)) for s in solutions}

        for n, m in roots:
            variants = {s.as_tuple() for s in solutions if (abs(s.n), abs(s.m)) == (n, m)}
            assert variants == {(n, m), (-n, m), (n, -m), (-n, -m)}

    def test_zero_n_not_duplicated(self):
        """D = -2, M = 1 → N = 0: только (0, 1) и (0, -1)."""
        solutions = generate_pell_solutions(-2, 3)

        assert _pairs(solutions) == [
            (0, 1), (0, -1),
            (4, 3), (-4, 3), (4, -3), (-4, -3),
        ]

    def test_no_duplicates_anywhere(self):
        """Ни одна пара не выдаётся дважды."""
        for d in range(-50, 200):
            pairs = _pairs(generate_pell_solutions(d, 30))
            assert len(pairs) == len(set(pairs))


class TestNegativeCandidates:
    """Отрицательные D + 2M² пропускаются без обращения к Oracle."""

    def test_negative_candidates_never_reach_oracle(self):
        calls = []

        def spy(x):
            calls.append(x)
            return is_square_root(x)

        generator = PellSolutionGenerator(2, square_root=spy)

        # D + 2·1² = -8, D + 2·2² = -2
        assert generator.generate(-10) == []
        assert calls == []

    def test_oracle_sees_only_non_negative(self):
        calls = []

        def spy(x):
            calls.append(x)
            return is_square_root(x)

        generator = PellSolutionGenerator(5, square_root=spy)
        generator.generate(-9)

        # M = 1, 2 дают отрицательные значения; M = 3, 4, 5 неотрицательны
        assert calls == [9, 23, 41]
        assert all(x >= 0 for x in calls)

    def test_negative_limit_rejected(self):
        with pytest.raises(ValueError, match="limit must be non-negative"):
            PellSolutionGenerator(-1)


class TestSolutionBuffer:
    """Тесты SolutionBuffer."""

    def test_capacity_for_limit(self):
        buffer = SolutionBuffer.for_limit(25)
        assert buffer.capacity == 100
        assert len(buffer) == 0

    def test_solution_count_bounded_by_capacity(self):
        """Количество решений <= 4 * limit."""
        limit = 30
        generator = PellSolutionGenerator(limit)
        buffer = SolutionBuffer.for_limit(limit)

        for d in range(-100, 300):
            count = generator.fill(d, buffer)
            assert count == len(buffer) <= 4 * limit

    def test_buffer_reused_between_discriminants(self):
        """fill() очищает буфер перед следующим D."""
        generator = PellSolutionGenerator(5)
        buffer = SolutionBuffer.for_limit(5)

        assert generator.fill(7, buffer) == 8
        assert generator.fill(0, buffer) == 0
        assert list(buffer) == []
        assert generator.fill(7, buffer) == 8
        assert buffer[0] == PellSolution(n=3, m=1)

    def test_snapshot_is_independent_copy(self):
        generator = PellSolutionGenerator(5)
        buffer = SolutionBuffer.for_limit(5)
        generator.fill(7, buffer)

        snapshot = buffer.snapshot()
        generator.fill(0, buffer)

        assert len(snapshot) == 8
        assert len(buffer) == 0

    def test_overflow_raises(self):
        buffer = SolutionBuffer(1)
        buffer.append(PellSolution(n=3, m=1))

        with pytest.raises(OverflowError, match="overflow"):
            buffer.append(PellSolution(n=-3, m=1))

    def test_index_out_of_range(self):
        buffer = SolutionBuffer(4)
        with pytest.raises(IndexError):
            buffer[0]

    def test_negative_capacity_rejected(self):
        with pytest.raises(ValueError):
            SolutionBuffer(-1)

    def test_allocation_failure_is_fatal_error(self):
        """Невыделяемый буфер → SolutionBufferAllocationError."""
        with pytest.raises(SolutionBufferAllocationError):
            SolutionBuffer.for_limit(10**19)

    def test_allocation_error_is_memory_error(self):
        assert issubclass(SolutionBufferAllocationError, MemoryError)
