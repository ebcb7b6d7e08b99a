"""CLI — запуск поиска магических квадратов из квадратов.

Пример:
    pell-magic-search --pell-limit 1000 --d-min 0 --d-max 100000 \\
        --workers 8 --checkpoint run/checkpoint.txt --candidates-out run/found.jsonl

Параметры берутся из --config (JSON, проверяется по search_config.json),
флаги командной строки имеют приоритет.

Коды выхода:
    0 — sweep завершён
    1 — не удалось выделить буфер решений (фатально)
    2 — неверная конфигурация
"""

import argparse
import json
import logging
import sys
from typing import Any, Dict, List, Optional

import jsonschema
from pydantic import ValidationError

from src.core.contracts import load_search_config_file
from src.core.domain.search_config import ExecutorKind, SearchConfig
from src.pell.generator import SolutionBufferAllocationError
from src.search.checkpoint import CheckpointStore
from src.search.coordinator import ParallelCoordinator
from src.search.reporting import CandidateReporter
from src.search.sweep import DiscriminantSweepDriver, SweepSummary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FATAL = 1
EXIT_CONFIG = 2

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Флаг CLI → поле SearchConfig
_CLI_FIELDS = {
    "pell_limit": "pell_limit",
    "d_min": "d_min",
    "d_max": "d_max",
    "workers": "workers",
    "executor": "executor",
    "chunk_size": "chunk_size",
    "log_interval": "log_interval",
    "checkpoint": "checkpoint_path",
    "candidates_out": "candidates_path",
}


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="pell-magic-search",
        description="Search for 3x3 magic squares of distinct perfect squares "
                    "via solutions of N^2 = D + 2M^2.",
    )
    ap.add_argument("--config", type=str, default=None, help="JSON config file (search_config.json)")
    ap.add_argument("--pell-limit", dest="pell_limit", type=int, default=None, help="Upper bound on M per discriminant")
    ap.add_argument("--d-min", dest="d_min", type=int, default=None, help="First discriminant (inclusive)")
    ap.add_argument("--d-max", dest="d_max", type=int, default=None, help="Last discriminant (inclusive)")
    ap.add_argument("--workers", type=int, default=None, help="Worker count (1 = sequential driver)")
    ap.add_argument("--executor", choices=[k.value for k in ExecutorKind], default=None)
    ap.add_argument("--chunk-size", dest="chunk_size", type=int, default=None, help="Discriminants per pool task")
    ap.add_argument("--log-interval", dest="log_interval", type=int, default=None, help="Discriminants between checkpoints")
    ap.add_argument("--checkpoint", type=str, default=None, help="Checkpoint file path")
    ap.add_argument("--candidates-out", dest="candidates_out", type=str, default=None, help="JSONL file for accepted grids")
    ap.add_argument("--log-level", dest="log_level", default="INFO",
                    choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    ap.add_argument("--log-file", dest="log_file", type=str, default=None)
    return ap


def configure_logging(level: str, log_file: Optional[str] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file))
    logging.basicConfig(level=getattr(logging, level), format=LOG_FORMAT, handlers=handlers, force=True)


def resolve_config(args: argparse.Namespace) -> SearchConfig:
    """
    Сборка SearchConfig из --config и флагов.

    Raises:
        jsonschema.ValidationError: Файл не соответствует search_config.json
        pydantic.ValidationError: Итоговые параметры невалидны
        OSError, json.JSONDecodeError: Файл не читается
    """
    data: Dict[str, Any] = {}
    if args.config:
        data.update(load_search_config_file(args.config))

    for arg_name, field_name in _CLI_FIELDS.items():
        value = getattr(args, arg_name)
        if value is not None:
            data[field_name] = value

    return SearchConfig(**data)


def run_search(config: SearchConfig) -> SweepSummary:
    """Запуск sweep: последовательный при workers == 1, иначе параллельный."""
    store = CheckpointStore(config.checkpoint_path, d_min=config.d_min)

    with CandidateReporter(config.candidates_path) as reporter:
        if config.workers == 1:
            runner = DiscriminantSweepDriver(config, store)
        else:
            runner = ParallelCoordinator(config, store)
        return runner.run(on_candidate=reporter)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        config = resolve_config(args)
    except (ValidationError, jsonschema.ValidationError, OSError, json.JSONDecodeError) as e:
        logger.error("Invalid configuration: %s", e)
        return EXIT_CONFIG

    logger.info(
        "Search parameters: pell_limit=%d, D=[%d, %d], workers=%d",
        config.pell_limit,
        config.d_min,
        config.d_max,
        config.workers,
    )

    try:
        summary = run_search(config)
    except SolutionBufferAllocationError as e:
        logger.critical("Aborting search: %s", e)
        return EXIT_FATAL

    print(f"Total candidates: {summary.total_candidates}")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
