"""
Configuration loading for ctx.
Path: ctx_switcher/config.py

HCL files (the default ~/.ctx.hcl) are parsed with python-hcl2, YAML files
with PyYAML. Both are normalized to one dictionary shape, validated against
schemas/config_v1.json and turned into the read-only context tree.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

import hcl2
import yaml

from ctx_switcher.context.models import ConfigRoot, Context, EnvDefinition, ResolutionKind
from ctx_switcher.exceptions import ConfigError
from ctx_switcher.utils.logging import get_logger
from ctx_switcher.utils.schema_validation import SchemaValidator

logger = get_logger()

CONFIG_ENV = "CTX_CONFIG"
DEFAULT_CONFIG_NAME = ".ctx.hcl"
YAML_SUFFIXES = (".yaml", ".yml")


def default_config_path(environ: Optional[Mapping[str, str]] = None) -> Path:
    """$CTX_CONFIG if set, otherwise ~/.ctx.hcl."""
    if environ is None:
        environ = os.environ
    override = environ.get(CONFIG_ENV)
    if override:
        return Path(override).expanduser()
    return Path.home() / DEFAULT_CONFIG_NAME


def _unquote(value: Any) -> Any:
    """
    Decode a string literal as python-hcl2 returns it.

    python-hcl2 keeps the quotes and escape sequences of string values and
    labels; HCL escapes are a superset of JSON's, so the literal is decoded
    with json. A literal json rejects keeps its raw inner text.
    """
    if not (isinstance(value, str) and len(value) >= 2 and value[0] == value[-1] == '"'):
        return value
    try:
        decoded = json.loads(value)
    except ValueError:
        return value[1:-1]
    return decoded if isinstance(decoded, str) else value[1:-1]


def _labelled_blocks(blocks: Any) -> List[tuple]:
    """
    Flatten hcl2's block representation into (label, body) pairs.

    `context "a" {..}` repeated twice decodes to [{"a": {..}}, {"b": {..}}].
    """
    if isinstance(blocks, dict):
        blocks = [blocks]
    pairs = []
    for block in blocks or []:
        if not isinstance(block, dict):
            raise ConfigError(f"expected a labelled block, got {block!r}")
        for label, body in block.items():
            if label.startswith("__"):
                continue
            pairs.append((_unquote(label), body))
    return pairs


def _normalize_hcl_body(body: Dict[str, Any], block: str) -> Dict[str, Any]:
    normalized: Dict[str, Any] = {}
    for key, value in body.items():
        if key.startswith("__"):
            continue
        if block == "context" and key == "context":
            normalized["contexts"] = [
                {"name": label, **_normalize_hcl_body(child, "context")}
                for label, child in _labelled_blocks(value)
            ]
        elif block == "context" and key == "env":
            normalized["env"] = [
                {"name": label, **_normalize_hcl_body(child, "env")}
                for label, child in _labelled_blocks(value)
            ]
        else:
            normalized[key] = _unquote(value)
    return normalized


def normalize_hcl(document: Dict[str, Any]) -> Dict[str, Any]:
    """
    Convert a python-hcl2 document into the normalized configuration shape.

    Top level `context` blocks become `contexts`; inside a context, `env`
    blocks become a list of {name, type, source} and nested `context` blocks
    become `contexts`.
    """
    normalized: Dict[str, Any] = {}
    for key, value in document.items():
        if key.startswith("__"):
            continue
        if key == "context":
            normalized["contexts"] = [
                {"name": label, **_normalize_hcl_body(body, "context")}
                for label, body in _labelled_blocks(value)
            ]
        else:
            normalized[key] = _unquote(value)
    return normalized


def _build_context(data: Dict[str, Any]) -> Context:
    environments = tuple(
        EnvDefinition(
            name=env["name"],
            source=env["source"],
            kind=env.get("type") or ResolutionKind.STATIC.value
        )
        for env in data.get("env", [])
    )
    return Context(
        name=data["name"],
        prompt=data.get("prompt"),
        environments=environments,
        contexts=tuple(_build_context(child) for child in data.get("contexts", []))
    )


def build_config(data: Dict[str, Any], path: Optional[Path] = None) -> ConfigRoot:
    """
    Validate a normalized configuration dictionary and build the context tree.

    Raises:
        ConfigError: If the dictionary does not match the configuration schema
    """
    error = SchemaValidator.validate_config(data)
    if error:
        where = f"{path}: " if path else ""
        raise ConfigError(f"{where}invalid configuration: {error}")

    return ConfigRoot(
        shell=data.get("shell"),
        contexts=tuple(_build_context(c) for c in data.get("contexts", [])),
        path=path
    )


def parse_config_text(text: str, fmt: str = "hcl") -> Dict[str, Any]:
    """
    Parse configuration text into the normalized dictionary shape.

    Args:
        text: File contents
        fmt: "hcl" or "yaml"
    """
    if fmt == "yaml":
        data = yaml.safe_load(text)
        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigError("configuration must be a mapping at the top level")
        return data
    return normalize_hcl(hcl2.loads(text))


def load_config(config_path: Union[str, Path]) -> ConfigRoot:
    """
    Load and validate a configuration file.

    Args:
        config_path: Path to an HCL or YAML file

    Returns:
        The configuration tree

    Raises:
        ConfigError: If the file is missing, unreadable, unparsable or invalid
    """
    path_obj = Path(config_path)
    if not path_obj.exists():
        logger.error("config.load.file_not_found", path=str(path_obj))
        raise ConfigError(
            f"configuration file not found: {path_obj}\n"
            "if config file not found try `ctx edit` to create it first"
        )

    fmt = "yaml" if path_obj.suffix.lower() in YAML_SUFFIXES else "hcl"
    try:
        text = path_obj.read_text()
    except OSError as e:
        logger.error("config.load.unreadable", path=str(path_obj), error=str(e))
        raise ConfigError(f"cannot read configuration file {path_obj}: {e}") from e

    try:
        data = parse_config_text(text, fmt)
    except ConfigError:
        raise
    except yaml.YAMLError as e:
        logger.error("config.load.yaml_error", path=str(path_obj), error=str(e))
        raise ConfigError(f"invalid YAML in config file {path_obj}: {e}") from e
    except Exception as e:
        # python-hcl2 surfaces lark parse errors of several types
        logger.error("config.load.hcl_error", path=str(path_obj), error=str(e))
        raise ConfigError(f"invalid HCL in config file {path_obj}: {e}") from e

    config = build_config(data, path_obj)
    logger.info("config.load.success",
                path=str(path_obj),
                format=fmt,
                contexts=[c.name for c in config.contexts])
    return config


def read_config_text(config_path: Union[str, Path]) -> str:
    """Raw file contents, for `ctx dump`."""
    try:
        return Path(config_path).read_text()
    except OSError as e:
        logger.error("config.dump.unreadable", path=str(config_path), error=str(e))
        raise ConfigError(f"cannot read configuration file {config_path}: {e}") from e
