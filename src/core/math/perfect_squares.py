"""
Perfect-Square Oracle — точная проверка квадратов

Модуль обеспечивает точную целочисленную арифметику для поиска:
- Проверка, является ли целое число точным квадратом
- Извлечение точного целого корня (без float)
- Безопасное деление пополам с проверкой чётности

КРИТИЧЕСКИЕ ИНВАРИАНТЫ:
1. Float никогда не используется (math.isqrt, а не math.sqrt)
2. Отрицательный вход → False, а не exception
3. Корень всегда подтверждается: root * root == x
4. Все операции детерминированы и работают для int произвольной длины
"""

import math
from typing import Final, Optional

# =============================================================================
# КОНСТАНТЫ
# =============================================================================

# Корень, возвращаемый для не-квадратов
NO_ROOT: Final[int] = 0


# =============================================================================
# ВАЛИДАЦИЯ ВХОДА
# =============================================================================


def _require_int(value: int, name: str = "value") -> None:
    """
    Проверка, что значение — int (bool и float отклоняются).

    float потерял бы точность на значениях > 2**53, поэтому он запрещён явно.

    Raises:
        TypeError: Если value не int
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")


# =============================================================================
# ORACLE
# =============================================================================


def is_square_root(x: int) -> tuple[bool, int]:
    """
    Проверка на точный квадрат с возвратом корня.

    Args:
        x: Проверяемое целое (любой знак, любая длина)

    Returns:
        (True, root) если x == root**2, root >= 0
        (False, NO_ROOT) иначе (включая отрицательные x)

    Raises:
        TypeError: Если x не int

    Examples:
        >>> is_square_root(49)
        (True, 7)
        >>> is_square_root(50)
        (False, 0)
        >>> is_square_root(-4)
        (False, 0)
        >>> is_square_root(0)
        (True, 0)
    """
    _require_int(x, "x")

    if x < 0:
        return False, NO_ROOT

    root = math.isqrt(x)
    if root * root == x:
        return True, root
    return False, NO_ROOT


def is_square(x: int) -> bool:
    """
    Проверка, является ли x точным квадратом.

    Examples:
        >>> is_square(10**40)
        True
        >>> is_square(10**40 + 1)
        False
        >>> is_square(-1)
        False
    """
    return is_square_root(x)[0]


def exact_half(x: int) -> Optional[int]:
    """
    Деление пополам только для чётных значений.

    Нечётное делимое означает нарушение precondition у вызывающего кода;
    вместо округления возвращается None.

    Examples:
        >>> exact_half(10)
        5
        >>> exact_half(-6)
        -3
        >>> exact_half(7) is None
        True
    """
    _require_int(x, "x")

    if x % 2 != 0:
        return None
    return x // 2
