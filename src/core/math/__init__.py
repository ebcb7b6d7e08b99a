"""
Core math modules

Точные целочисленные примитивы для поиска магических квадратов из квадратов.
"""

# Perfect-Square Oracle
from src.core.math.perfect_squares import (
    NO_ROOT,
    exact_half,
    is_square,
    is_square_root,
)

__all__ = [
    # Perfect-Square Oracle: constants
    "NO_ROOT",
    # Perfect-Square Oracle: functions
    "exact_half",
    "is_square",
    "is_square_root",
]
