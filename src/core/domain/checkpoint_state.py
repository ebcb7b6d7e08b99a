"""
CheckpointState — минимальное состояние для возобновления поиска

Immutable Pydantic модель: (next_d, total_candidates).
- next_d: последний полностью обработанный D плюс один
- total_candidates: количество принятых кандидатов для всех D < next_d

Единственная сущность, переживающая перезапуск процесса.
"""

from pydantic import BaseModel, Field


class CheckpointState(BaseModel):
    """
    Состояние checkpoint.

    Сериализуется в одну строку "<next_d> <total_candidates>".
    """

    next_d: int = Field(..., ge=0, description="Следующий необработанный дискриминант")
    total_candidates: int = Field(
        ..., ge=0, description="Количество принятых кандидатов для D < next_d"
    )

    model_config = {"frozen": True}

    def to_line(self) -> str:
        """Текстовое представление для файла checkpoint."""
        return f"{self.next_d} {self.total_candidates}\n"
