"""
Contract Validation Module

Модуль для валидации JSON контрактов: файла конфигурации поиска и
JSONL отчёта о кандидатах.
"""

from .validators import (
    CandidateReportValidator,
    ContractValidator,
    SchemaLoader,
    SearchConfigValidator,
    load_search_config_file,
    validate_candidate_report,
    validate_search_config,
)

__all__ = [
    # Classes
    "SchemaLoader",
    "ContractValidator",
    "SearchConfigValidator",
    "CandidateReportValidator",
    # Functions
    "validate_search_config",
    "validate_candidate_report",
    "load_search_config_file",
]
