"""Candidate reporting — текстовая и JSON запись о принятом кандидате.

Отчёт только наблюдательный: источником истины для количества найденных
кандидатов является checkpoint, а не отчёт.
"""

import json
import logging
import threading
from pathlib import Path
from typing import Any, Dict, Optional, TextIO

from src.core.contracts import validate_candidate_report
from src.core.domain.candidate_grid import CandidateGrid

logger = logging.getLogger(__name__)


def format_candidate(d: int, grid: CandidateGrid) -> str:
    """
    Текстовая запись: корни a, e, c и девять ячеек в row-major порядке.

    Формат:
        Candidate: D=<d>, a=<a>, e=<e>, c=<c>, square=[A, B, C, D, E, F, G, H, I]
    """
    cells = ", ".join(str(v) for v in grid.cells)
    return f"Candidate: D={d}, a={grid.a}, e={grid.e}, c={grid.c}, square=[{cells}]"


def candidate_record(d: int, grid: CandidateGrid) -> Dict[str, Any]:
    """JSON-совместимая запись по контракту candidate_report.json."""
    return {
        "discriminant": d,
        "a": grid.a,
        "e": grid.e,
        "c": grid.c,
        "cells": list(grid.cells),
        "magic_sum": grid.magic_sum,
    }


class CandidateReporter:
    """Callback для принятых кандидатов: stdout + лог + optional JSONL файл.

    Текстовая запись печатается в stdout независимо от уровня логирования
    (echo=False отключает печать).

    Вызывается из координирующего потока; запись в файл под lock-ом, так как
    thread-пул может вызывать callback конкурентно.
    """

    def __init__(
        self,
        jsonl_path: Optional[str | Path] = None,
        validate: bool = True,
        echo: bool = True,
    ):
        self.jsonl_path = Path(jsonl_path) if jsonl_path is not None else None
        self.validate = validate
        self.echo = echo
        self.reported = 0

        self._lock = threading.Lock()
        self._stream: Optional[TextIO] = None

    def __call__(self, d: int, grid: CandidateGrid) -> None:
        line = format_candidate(d, grid)
        logger.info(line)

        with self._lock:
            self.reported += 1
            if self.echo:
                print(line, flush=True)
            if self.jsonl_path is None:
                return

            record = candidate_record(d, grid)
            if self.validate:
                validate_candidate_report(record)

            if self._stream is None:
                self._stream = open(self.jsonl_path, "a", encoding="utf-8")
            self._stream.write(json.dumps(record, sort_keys=True) + "\n")
            self._stream.flush()

    def close(self) -> None:
        with self._lock:
            if self._stream is not None:
                self._stream.close()
                self._stream = None

    def __enter__(self) -> "CandidateReporter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
