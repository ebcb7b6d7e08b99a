"""
SearchConfig — Параметры запуска поиска

Immutable Pydantic модель с параметрами sweep:
- pell_limit, d_min, d_max (обязательные параметры поиска)
- параметры параллелизма (workers, executor, chunk_size)
- интервал checkpoint/логирования
- пути к checkpoint и к JSONL отчёту кандидатов

Соответствует схеме src/core/contracts/schema/search_config.json.
"""

from enum import Enum
from typing import Final

from pydantic import BaseModel, Field, field_validator


# =============================================================================
# DEFAULTS
# =============================================================================

# Интервал (в обработанных D) между сохранениями checkpoint
DEFAULT_LOG_INTERVAL: Final[int] = 1000

# Количество подряд идущих D в одной задаче пула
DEFAULT_CHUNK_SIZE: Final[int] = 64

DEFAULT_CHECKPOINT_PATH: Final[str] = "magic_square_checkpoint.txt"


# =============================================================================
# ENUMS
# =============================================================================


class ExecutorKind(str, Enum):
    """Тип пула воркеров"""

    PROCESS = "process"
    THREAD = "thread"


# =============================================================================
# SEARCH CONFIG MODEL
# =============================================================================


class SearchConfig(BaseModel):
    """
    Параметры поиска.

    Immutable модель (frozen=True). Диапазон [d_min, d_max] включительный.
    """

    # Параметры поиска
    pell_limit: int = Field(..., ge=0, description="Верхняя граница M для каждого D (0 → решений нет)")
    d_min: int = Field(..., ge=0, description="Минимальный дискриминант (включительно)")
    d_max: int = Field(..., ge=0, description="Максимальный дискриминант (включительно)")

    # Параллелизм
    workers: int = Field(default=1, ge=1, description="Количество воркеров")
    executor: ExecutorKind = Field(
        default=ExecutorKind.PROCESS, description="Тип пула (process/thread)"
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE, gt=0, description="D на одну задачу пула"
    )

    # Checkpoint и отчёты
    log_interval: int = Field(
        default=DEFAULT_LOG_INTERVAL, gt=0, description="D между checkpoint"
    )
    checkpoint_path: str = Field(
        default=DEFAULT_CHECKPOINT_PATH, min_length=1, description="Файл checkpoint"
    )
    candidates_path: str | None = Field(
        default=None, description="JSONL файл для принятых кандидатов (optional)"
    )

    model_config = {"frozen": True}

    @field_validator("d_max")
    @classmethod
    def validate_d_max_not_below_min(cls, v: int, info) -> int:
        """Проверка, что d_max >= d_min"""
        if "d_min" in info.data:
            d_min = info.data["d_min"]
            if v < d_min:
                raise ValueError(f"d_max {v} must be >= d_min {d_min}")
        return v

    @property
    def discriminant_count(self) -> int:
        """Количество D в диапазоне [d_min, d_max]."""
        return self.d_max - self.d_min + 1

    @property
    def buffer_capacity(self) -> int:
        """Максимальное количество решений Пелля на один D."""
        return 4 * self.pell_limit
