"""
PellSolution — решение обобщённого уравнения Пелля

Пара (N, M) с N² = D + 2M² для дискриминанта D, для которого она была
сгенерирована. Используется только внутри обработки одного D и не хранится.

Модель — frozen dataclass, а не Pydantic: решения создаются в горячем цикле
(до 4 * pell_limit на каждый D) и валидация на каждом экземпляре не нужна.
"""

from dataclasses import dataclass
from typing import Final


# =============================================================================
# SIGN ENUMERATION
# =============================================================================

# Порядок знаковых вариантов фиксирован: (+N, +M), (-N, +M), (+N, -M), (-N, -M)
SIGN_COMBINATIONS: Final[tuple[tuple[int, int], ...]] = (
    (1, 1),
    (-1, 1),
    (1, -1),
    (-1, -1),
)


@dataclass(frozen=True)
class PellSolution:
    """Решение (n, m) уравнения n² = D + 2m²."""

    n: int
    m: int

    def norm(self) -> int:
        """n² + 2m² (одинакова для всех знаковых вариантов)."""
        return self.n * self.n + 2 * self.m * self.m

    def discriminant(self) -> int:
        """D = n² - 2m², для которого пара является решением."""
        return self.n * self.n - 2 * self.m * self.m

    def satisfies(self, d: int) -> bool:
        return self.n * self.n == d + 2 * self.m * self.m

    def as_tuple(self) -> tuple[int, int]:
        return (self.n, self.m)


def sign_variants(n: int, m: int) -> list[PellSolution]:
    """
    Все различные знаковые варианты корневой пары (n, m).

    Перебор по SIGN_COMBINATIONS; вариант пропускается, если он меняет знак
    нулевой компоненты (иначе получился бы дубликат).

    Returns:
        4 решения если n != 0 и m != 0, 2 если ровно одна компонента ноль,
        1 если обе ноль

    Examples:
        >>> [s.as_tuple() for s in sign_variants(3, 1)]
        [(3, 1), (-3, 1), (3, -1), (-3, -1)]
        >>> [s.as_tuple() for s in sign_variants(0, 1)]
        [(0, 1), (0, -1)]
    """
    variants = []
    for sign_n, sign_m in SIGN_COMBINATIONS:
        if sign_n < 0 and n == 0:
            continue
        if sign_m < 0 and m == 0:
            continue
        variants.append(PellSolution(n=sign_n * n, m=sign_m * m))
    return variants
