"""
CandidateGrid — кандидат 3×3 в магический квадрат из квадратов

Immutable модель: корни a, c, e и девять ячеек в фиксированных позициях

    A B C
    D E F
    G H I

Инвариант принятого кандидата:
- все девять ячеек — точные квадраты, попарно различные, неотрицательные
- B = 3E - A - C, D = E + C - A, F = E + A - C,
  G = 2E - C, H = A + C - E, I = 2E - A
(из этих соотношений все строки, столбцы и диагонали дают сумму 3E)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class CandidateGrid:
    """Кандидат 3×3: корни и ячейки в row-major порядке."""

    # Корни (a² = A, c² = C, e² = E)
    a: int
    c: int
    e: int

    # Ячейки
    A: int
    B: int
    C: int
    D: int
    E: int
    F: int
    G: int
    H: int
    I: int  # noqa: E741

    @property
    def cells(self) -> tuple[int, ...]:
        """Девять ячеек в row-major порядке."""
        return (self.A, self.B, self.C, self.D, self.E, self.F, self.G, self.H, self.I)

    @property
    def magic_sum(self) -> int:
        return 3 * self.E

    def rows(self) -> list[tuple[int, int, int]]:
        return [
            (self.A, self.B, self.C),
            (self.D, self.E, self.F),
            (self.G, self.H, self.I),
        ]

    def columns(self) -> list[tuple[int, int, int]]:
        return [
            (self.A, self.D, self.G),
            (self.B, self.E, self.H),
            (self.C, self.F, self.I),
        ]

    def diagonals(self) -> list[tuple[int, int, int]]:
        return [
            (self.A, self.E, self.I),
            (self.C, self.E, self.G),
        ]

    def is_magic(self) -> bool:
        """Все строки, столбцы и обе диагонали дают magic_sum."""
        target = self.magic_sum
        lines = self.rows() + self.columns() + self.diagonals()
        return all(sum(line) == target for line in lines)

    def has_distinct_cells(self) -> bool:
        return len(set(self.cells)) == len(self.cells)
