"""
Candidate Assembler — сборка кандидата 3×3 из пары решений Пелля

По двум решениям (Y, X) и (V, U) одного дискриминанта:

    e1 = Y² + 2X²,  e2 = V² + 2U²          (должны совпасть)
    e  = e1 / 2
    a  = (Y² - 2X²) / 2,  c = (V² - 2U²) / 2

    b² = 3e² - a² - c²     d² = e² - a² + c²     f² = e² + a² - c²
    h² = a² + c² - e²      i² = 2e² - a²          g² = 2e² - c²

Ячейки: A=a², B=b², C=c², D=d², E=e², F=f², G=g², H=h², I=i².

Порядок проверок:
1. SELF_PAIR — (Y, X) == (V, U) (только точное равенство)
2. NORM_MISMATCH — e1 != e2
3. ODD_NORM — e1 нечётно
4. ODD_ROOT — Y² - 2X² или V² - 2U² нечётно
5. NON_SQUARE_CELL — одна из b², d², f², h², i², g² не квадрат
6. DUPLICATE_CELL — есть совпадающие ячейки

Нарушения preconditions (2-4) — это отказ кандидата, а не exception.
Assembler — чистая функция: между вызовами не хранится никакого состояния.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

from src.core.domain.candidate_grid import CandidateGrid
from src.core.domain.pell_solution import PellSolution
from src.core.math.perfect_squares import exact_half, is_square


class RejectReason(str, Enum):
    """Причина отказа кандидата."""

    SELF_PAIR = "self_pair"
    NORM_MISMATCH = "norm_mismatch"
    ODD_NORM = "odd_norm"
    ODD_ROOT = "odd_root"
    NON_SQUARE_CELL = "non_square_cell"
    DUPLICATE_CELL = "duplicate_cell"


@dataclass(frozen=True)
class AssemblyResult:
    """Результат сборки кандидата."""

    accepted: bool
    reject_reason: Optional[RejectReason]
    grid: Optional[CandidateGrid]

    # Для отладки
    details: str


class CandidateAssembler:
    """Сборка и проверка кандидата по паре решений Пелля.

    Пары перебираются вызывающим кодом: все упорядоченные (i, j), включая
    i == j (отсекается проверкой SELF_PAIR).
    """

    def __init__(self, square_test: Callable[[int], bool] = is_square):
        """
        Args:
            square_test: Проверка на квадрат для производных ячеек
                (default: is_square)
        """
        self._square_test = square_test

    def assemble(
        self,
        sol_i: PellSolution,
        sol_j: PellSolution,
    ) -> Optional[CandidateGrid]:
        """
        Сборка кандидата.

        Returns:
            CandidateGrid если все проверки пройдены, иначе None
        """
        _, grid, _ = self._build(sol_i, sol_j)
        return grid

    def evaluate(self, sol_i: PellSolution, sol_j: PellSolution) -> AssemblyResult:
        """
        Сборка кандидата с диагностикой причины отказа.

        Returns:
            AssemblyResult (accepted, reject_reason, grid, details)
        """
        reason, grid, context = self._build(sol_i, sol_j)
        if reason is None:
            return AssemblyResult(
                accepted=True,
                reject_reason=None,
                grid=grid,
                details=f"PASS: a={grid.a}, e={grid.e}, c={grid.c}",
            )
        return AssemblyResult(
            accepted=False,
            reject_reason=reason,
            grid=None,
            details=_describe_rejection(reason, context),
        )

    def _build(
        self,
        sol_i: PellSolution,
        sol_j: PellSolution,
    ) -> tuple[Optional[RejectReason], Optional[CandidateGrid], tuple]:
        """Возвращает (reason, grid, context); context форматируется только в evaluate."""
        y, x = sol_i.n, sol_i.m
        v, u = sol_j.n, sol_j.m

        # 1. Самопара
        if y == v and x == u:
            return RejectReason.SELF_PAIR, None, (y, x)

        y2, x2 = y * y, 2 * x * x
        v2, u2 = v * v, 2 * u * u

        # 2. Нормы обоих решений должны совпасть
        e1 = y2 + x2
        e2 = v2 + u2
        if e1 != e2:
            return RejectReason.NORM_MISMATCH, None, (e1, e2)

        # 3. e = e1 / 2
        e = exact_half(e1)
        if e is None:
            return RejectReason.ODD_NORM, None, (e1,)

        # 4. a, c
        a = exact_half(y2 - x2)
        c = exact_half(v2 - u2)
        if a is None or c is None:
            return RejectReason.ODD_ROOT, None, (y2 - x2, v2 - u2)

        ee, aa, cc = e * e, a * a, c * c

        # 5. Производные ячейки
        b2 = 3 * ee - aa - cc
        d2 = ee - aa + cc
        f2 = ee + aa - cc
        h2 = aa + cc - ee
        i2 = 2 * ee - aa
        g2 = 2 * ee - cc

        # 6. Все производные ячейки являются квадратами (отрицательные отсекает Oracle)
        for name, value in (("b²", b2), ("d²", d2), ("f²", f2), ("h²", h2), ("i²", i2), ("g²", g2)):
            if not self._square_test(value):
                return RejectReason.NON_SQUARE_CELL, None, (name, value)

        # 7. Сборка
        grid = CandidateGrid(
            a=a, c=c, e=e,
            A=aa, B=b2, C=cc,
            D=d2, E=ee, F=f2,
            G=g2, H=h2, I=i2,
        )

        # 8. Попарная различность
        if not grid.has_distinct_cells():
            return RejectReason.DUPLICATE_CELL, None, grid.cells

        return None, grid, ()


def _describe_rejection(reason: RejectReason, context: tuple) -> str:
    if reason == RejectReason.SELF_PAIR:
        return f"Self pair ({context[0]}, {context[1]})"
    if reason == RejectReason.NORM_MISMATCH:
        return f"e1={context[0]} != e2={context[1]}"
    if reason == RejectReason.ODD_NORM:
        return f"e1={context[0]} is odd"
    if reason == RejectReason.ODD_ROOT:
        return f"Odd root dividend: Y²-2X²={context[0]}, V²-2U²={context[1]}"
    if reason == RejectReason.NON_SQUARE_CELL:
        return f"{context[0]}={context[1]} is not a square"
    return f"Duplicate cells: {list(context)}"
