"""Checkpoint Store — сохранение прогресса sweep между перезапусками.

Формат файла: одна строка "<next_d> <total_candidates>\\n".

Обработка ошибок (fail soft):
- отсутствующий или повреждённый файл → CheckpointState(d_min, 0), WARNING
- ошибка записи → ERROR в лог, save() возвращает False; следующая
  периодическая попытка может пройти

Запись сериализована lock-ом и атомарна (temp файл + os.replace), поэтому
прерванный процесс не оставляет наполовину записанный checkpoint.
"""

import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional

from pydantic import ValidationError

from src.core.domain.checkpoint_state import CheckpointState

logger = logging.getLogger(__name__)


class CheckpointStore:
    """Файловое хранилище CheckpointState.

    Путь передаётся при создании. Жизненный цикл: open() в начале sweep,
    save() периодически, close() в конце (или with-блок).
    """

    def __init__(self, path: str | Path, d_min: int = 0):
        """
        Args:
            path: Путь к файлу checkpoint
            d_min: Начало диапазона (используется для состояния по умолчанию)
        """
        self.path = Path(path)
        self.d_min = d_min

        self._lock = threading.Lock()
        self._is_open = False
        self._last_saved: Optional[CheckpointState] = None

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def open(self) -> CheckpointState:
        """Открытие хранилища в начале sweep; возвращает загруженное состояние."""
        self._is_open = True
        self._last_saved = None
        return self.load()

    def close(self) -> None:
        self._is_open = False
        if self._last_saved is not None:
            logger.debug(
                "Checkpoint store closed: next_d=%d, total_candidates=%d",
                self._last_saved.next_d,
                self._last_saved.total_candidates,
            )

    def __enter__(self) -> "CheckpointStore":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_open(self) -> bool:
        return self._is_open

    @property
    def last_saved(self) -> Optional[CheckpointState]:
        return self._last_saved

    def default_state(self) -> CheckpointState:
        return CheckpointState(next_d=self.d_min, total_candidates=0)

    # -------------------------------------------------------------------------
    # Load / Save
    # -------------------------------------------------------------------------

    def load(self) -> CheckpointState:
        """
        Чтение checkpoint.

        Returns:
            Сохранённое состояние, либо default_state() если файла нет или
            он повреждён (никогда не бросает exception)
        """
        try:
            text = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            logger.info("No checkpoint file found at %s. Starting from beginning.", self.path)
            return self.default_state()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Cannot read checkpoint file %s: %s. Starting from beginning.", self.path, e)
            return self.default_state()

        state = self._parse(text)
        if state is None:
            logger.warning("Error reading checkpoint file %s. Starting from beginning.", self.path)
            return self.default_state()

        logger.info(
            "Resuming from D=%d, total_candidates=%d",
            state.next_d,
            state.total_candidates,
        )
        return state

    def save(self, state: CheckpointState) -> bool:
        """
        Атомарная запись checkpoint.

        Returns:
            True если записано, False при ошибке ввода-вывода (не бросает)
        """
        with self._lock:
            try:
                self._write_atomic(state.to_line())
            except OSError as e:
                logger.error("Error writing checkpoint file %s: %s", self.path, e)
                return False

            self._last_saved = state

        logger.info(
            "Checkpoint saved: next_d=%d, total_candidates=%d",
            state.next_d,
            state.total_candidates,
        )
        return True

    def _write_atomic(self, payload: str) -> None:
        directory = self.path.parent
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=directory
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.path)
        except OSError:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    @staticmethod
    def _parse(text: str) -> Optional[CheckpointState]:
        parts = text.split()
        if len(parts) != 2:
            return None

        try:
            next_d, total = int(parts[0]), int(parts[1])
        except ValueError:
            return None

        try:
            return CheckpointState(next_d=next_d, total_candidates=total)
        except ValidationError:
            return None
