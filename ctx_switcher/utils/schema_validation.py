"""
JSON Schema validation for ctx configuration files.
Path: ctx_switcher/utils/schema_validation.py
"""

from typing import Dict, Any, Optional, Union
import json
from pathlib import Path
from jsonschema import Draft7Validator

from ctx_switcher.utils.logging import get_logger

logger = get_logger()

SCHEMA_DIR = Path(__file__).resolve().parent.parent / "schemas"
CONFIG_SCHEMA = SCHEMA_DIR / "config_v1.json"


class SchemaValidator:
    """
    Validates normalized configuration dictionaries against the bundled schema.
    """

    _schema_cache: Dict[str, Dict[str, Any]] = {}

    @classmethod
    def _load_schema(cls, schema_path: Union[str, Path]) -> Dict[str, Any]:
        schema_path_str = str(schema_path)
        if schema_path_str not in cls._schema_cache:
            with open(schema_path, 'r') as f:
                cls._schema_cache[schema_path_str] = json.load(f)
        return cls._schema_cache[schema_path_str]

    @classmethod
    def validate_config(cls,
                        config: Dict[str, Any],
                        schema_path: Optional[Union[str, Path]] = None) -> Optional[str]:
        """
        Validate a normalized configuration.

        Args:
            config: Normalized configuration dictionary
            schema_path: Optional custom schema path

        Returns:
            None when valid, otherwise a message describing the first error
            (located by its path inside the document)
        """
        schema = cls._load_schema(schema_path or CONFIG_SCHEMA)
        validator = Draft7Validator(schema)
        errors = sorted(validator.iter_errors(config), key=lambda e: [str(p) for p in e.path])
        if not errors:
            return None

        error = errors[0]
        location = ".".join(str(p) for p in error.path) if error.path else "root"
        logger.error("schema.validation_failed",
                     location=location,
                     error=error.message,
                     error_count=len(errors))
        return f"{location}: {error.message}"
