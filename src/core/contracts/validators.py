"""
JSON Schema Contract Validators

Модуль для валидации JSON данных согласно формальным JSON Schema контрактам.
Использует библиотеку jsonschema для проверки соответствия данных схемам.

Схемы:
- search_config.json (файл конфигурации поиска)
- candidate_report.json (JSONL отчёт о принятом кандидате)
"""

import json
from pathlib import Path
from typing import Any, Dict

import jsonschema
from jsonschema import Draft202012Validator, ValidationError


# =============================================================================
# SCHEMA LOADER
# =============================================================================


class SchemaLoader:
    """
    Загрузчик JSON Schema файлов.

    Схемы лежат в schema/ рядом с этим модулем и устанавливаются вместе
    с пакетом (package data).
    """

    def __init__(self):
        # schema/ рядом с validators.py
        self._schema_dir = Path(__file__).resolve().parent / "schema"
        if not self._schema_dir.exists():
            raise RuntimeError(f"Schema directory not found: {self._schema_dir}")

        # Кэш загруженных схем
        self._schemas: Dict[str, Dict[str, Any]] = {}

    @property
    def schema_dir(self) -> Path:
        return self._schema_dir

    def load_schema(self, schema_name: str) -> Dict[str, Any]:
        """
        Загрузка JSON Schema файла.

        Args:
            schema_name: Имя схемы без расширения (например, 'search_config')

        Returns:
            Загруженная схема как dict

        Raises:
            FileNotFoundError: Если файл схемы не найден
            json.JSONDecodeError: Если файл не является валидным JSON
        """
        if schema_name in self._schemas:
            return self._schemas[schema_name]

        schema_path = self._schema_dir / f"{schema_name}.json"
        if not schema_path.exists():
            raise FileNotFoundError(f"Schema not found: {schema_path}")

        with open(schema_path, "r", encoding="utf-8") as f:
            schema = json.load(f)

        # Валидируем саму схему (meta-validation)
        try:
            Draft202012Validator.check_schema(schema)
        except jsonschema.SchemaError as e:
            raise ValueError(f"Invalid JSON Schema in {schema_name}.json: {e}")

        self._schemas[schema_name] = schema
        return schema


# Глобальный экземпляр загрузчика
_SCHEMA_LOADER = SchemaLoader()


# =============================================================================
# CONTRACT VALIDATORS
# =============================================================================


class ContractValidator:
    """
    Базовый класс для валидаторов контрактов.

    Инкапсулирует логику валидации данных против JSON Schema.
    """

    def __init__(self, schema_name: str):
        """
        Инициализация валидатора.

        Args:
            schema_name: Имя схемы для валидации
        """
        self.schema_name = schema_name
        self.schema = _SCHEMA_LOADER.load_schema(schema_name)
        self.validator = Draft202012Validator(self.schema)

    def validate(self, data: Dict[str, Any]) -> None:
        """
        Валидация данных против схемы.

        Raises:
            ValidationError: Если данные не соответствуют схеме
        """
        self.validator.validate(data)

    def is_valid(self, data: Dict[str, Any]) -> bool:
        """Проверка валидности данных без exception."""
        return self.validator.is_valid(data)

    def iter_errors(self, data: Dict[str, Any]):
        """Итератор по всем ошибкам валидации."""
        return self.validator.iter_errors(data)


class SearchConfigValidator(ContractValidator):
    """Валидатор для search_config контракта."""

    def __init__(self):
        super().__init__("search_config")


class CandidateReportValidator(ContractValidator):
    """Валидатор для candidate_report контракта."""

    def __init__(self):
        super().__init__("candidate_report")


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================


def validate_search_config(data: Dict[str, Any]) -> None:
    """
    Валидация search_config данных.

    Args:
        data: Данные для валидации

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    SearchConfigValidator().validate(data)


def validate_candidate_report(data: Dict[str, Any]) -> None:
    """
    Валидация candidate_report данных.

    Args:
        data: Данные для валидации

    Raises:
        ValidationError: Если данные не соответствуют схеме
    """
    CandidateReportValidator().validate(data)


def load_search_config_file(path: str | Path) -> Dict[str, Any]:
    """
    Загрузка JSON файла конфигурации с валидацией по search_config.json.

    Raises:
        OSError: Если файл не читается
        json.JSONDecodeError: Если файл не является валидным JSON
        ValidationError: Если данные не соответствуют схеме
    """
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValidationError(f"search_config must be a JSON object, got {type(data).__name__}")

    validate_search_config(data)
    return data
