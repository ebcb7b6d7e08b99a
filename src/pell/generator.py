"""
Pell Solution Generator — решения N² = D + 2M²

Для фиксированного дискриминанта D перебирает M = 1 .. limit и собирает все
пары (N, M), для которых D + 2M² — точный квадрат, вместе с их знаковыми
вариантами.

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Каждое выданное (N, M) удовлетворяет N² = D + 2M² точно
2. M = 0 никогда не проверяется (перебор начинается с M = 1)
3. Отрицательные D + 2M² пропускаются без обращения к Oracle
4. Количество решений на один D <= 4 * limit (ёмкость SolutionBuffer)
5. Порядок: по возрастанию M, затем SIGN_COMBINATIONS

SolutionBuffer — scratch-буфер, принадлежащий ровно одному воркеру.
Два D, обрабатываемые параллельно, никогда не делят один буфер.
"""

from typing import Callable, Iterator, Optional

from src.core.domain.pell_solution import PellSolution, sign_variants
from src.core.math.perfect_squares import is_square_root


# =============================================================================
# EXCEPTIONS
# =============================================================================


class SolutionBufferAllocationError(MemoryError):
    """
    Не удалось выделить scratch-буфер решений для воркера.

    Единственная фатальная ошибка поиска: продолжать без буфера нельзя,
    процесс должен завершиться после логирования.
    """
    pass


# =============================================================================
# SOLUTION BUFFER
# =============================================================================


class SolutionBuffer:
    """
    Scratch-буфер решений Пелля фиксированной ёмкости.

    Ёмкость задаётся заранее (4 * pell_limit) и не меняется; слоты
    выделяются один раз при создании и переиспользуются для каждого D.
    """

    def __init__(self, capacity: int):
        """
        Args:
            capacity: Максимальное количество решений (обычно 4 * pell_limit)

        Raises:
            ValueError: Если capacity < 0
            SolutionBufferAllocationError: Если память не выделена
        """
        if capacity < 0:
            raise ValueError(f"capacity must be non-negative, got {capacity}")

        try:
            self._slots: list[Optional[PellSolution]] = [None] * capacity
        except (MemoryError, OverflowError) as e:
            raise SolutionBufferAllocationError(
                f"Cannot allocate solution buffer of capacity {capacity}: {e}"
            ) from e

        self._capacity = capacity
        self._size = 0

    @classmethod
    def for_limit(cls, pell_limit: int) -> "SolutionBuffer":
        """Буфер, достаточный для любого D при данном pell_limit."""
        return cls(4 * pell_limit)

    @property
    def capacity(self) -> int:
        return self._capacity

    def clear(self) -> None:
        """Сброс перед следующим D (слоты не освобождаются)."""
        for idx in range(self._size):
            self._slots[idx] = None
        self._size = 0

    def append(self, solution: PellSolution) -> None:
        """
        Raises:
            OverflowError: Если буфер заполнен (ошибка расчёта ёмкости)
        """
        if self._size >= self._capacity:
            raise OverflowError(
                f"Solution buffer overflow: capacity={self._capacity}"
            )
        self._slots[self._size] = solution
        self._size += 1

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, idx: int) -> PellSolution:
        if not 0 <= idx < self._size:
            raise IndexError(f"Solution index {idx} out of range [0, {self._size})")
        return self._slots[idx]

    def __iter__(self) -> Iterator[PellSolution]:
        for idx in range(self._size):
            yield self._slots[idx]

    def snapshot(self) -> list[PellSolution]:
        """Копия текущего содержимого (буфер можно переиспользовать)."""
        return list(self._slots[: self._size])


# =============================================================================
# GENERATOR
# =============================================================================


class PellSolutionGenerator:
    """
    Генератор решений N² = D + 2M² для M в [1, limit].

    Stateless относительно D: один экземпляр можно использовать для любого
    количества дискриминантов, состояние живёт только в переданном буфере.
    """

    def __init__(
        self,
        limit: int,
        square_root: Callable[[int], tuple[bool, int]] = is_square_root,
    ):
        """
        Args:
            limit: Верхняя граница M (включительно)
            square_root: Oracle (x -> (is_square, root)), default is_square_root
        """
        if limit < 0:
            raise ValueError(f"limit must be non-negative, got {limit}")

        self.limit = limit
        self._square_root = square_root

    @property
    def max_solutions(self) -> int:
        return 4 * self.limit

    def fill(self, d: int, buffer: SolutionBuffer) -> int:
        """
        Заполнение буфера решениями для дискриминанта d.

        Args:
            d: Дискриминант (любой int, включая отрицательные)
            buffer: Буфер воркера (очищается перед заполнением)

        Returns:
            Количество решений в буфере
        """
        buffer.clear()

        for m in range(1, self.limit + 1):
            candidate = d + 2 * m * m
            if candidate < 0:
                continue

            found, n = self._square_root(candidate)
            if not found:
                continue

            for solution in sign_variants(n, m):
                buffer.append(solution)

        return len(buffer)

    def generate(self, d: int, buffer: Optional[SolutionBuffer] = None) -> list[PellSolution]:
        """
        Список решений для дискриминанта d.

        Args:
            d: Дискриминант
            buffer: Буфер для переиспользования (optional, иначе создаётся новый)

        Returns:
            Решения в порядке (M по возрастанию, затем SIGN_COMBINATIONS)
        """
        if buffer is None:
            buffer = SolutionBuffer(self.max_solutions)
        self.fill(d, buffer)
        return buffer.snapshot()


def generate_pell_solutions(
    d: int,
    limit: int,
    buffer: Optional[SolutionBuffer] = None,
) -> list[PellSolution]:
    """
    Все решения N² = d + 2M² для M в [1, limit] со знаковыми вариантами.

    Examples:
        >>> [s.as_tuple() for s in generate_pell_solutions(7, 3)]
        [(3, 1), (-3, 1), (3, -1), (-3, -1), (5, 3), (-5, 3), (5, -3), (-5, -3)]
    """
    return PellSolutionGenerator(limit).generate(d, buffer)
