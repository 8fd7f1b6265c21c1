from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..contracts import validate
from .errors import ScriptError
from .exit_codes import ERR_CONFIG

CONFIG_FILENAMES = ("litdoc.yaml", "litdoc.yml")
DEFAULT_TAGS = ("doc", "assert")


@dataclass(frozen=True)
class FormatSettings:
    compact: bool = True
    max_length: int = 80
    indent_size: int = 4


@dataclass(frozen=True)
class SdkSettings:
    base_url: str = "https://api.litdoc.dev"
    api_key_env: str = "LITDOC_API_KEY"
    timeout: float = 30.0


@dataclass(frozen=True)
class LitdocConfig:
    contexts: dict[str, dict[str, str]] = field(default_factory=dict)
    default_context: str = "dev"
    tags: tuple[str, ...] = DEFAULT_TAGS
    format: FormatSettings = field(default_factory=FormatSettings)
    sdk: SdkSettings = field(default_factory=SdkSettings)
    timeout: float | None = None
    source: Path | None = None

    @classmethod
    def from_mapping(cls, raw: dict[str, Any], source: Path | None = None) -> "LitdocConfig":
        validate("litdoc.config.v1", raw, code=ERR_CONFIG)
        contexts = {
            str(name): {str(k): str(v) for k, v in (row.get("env") or {}).items()}
            for name, row in (raw.get("contexts") or {}).items()
        }
        return cls(
            contexts=contexts,
            default_context=str(raw.get("default_context", "dev")),
            tags=tuple(raw.get("tags", DEFAULT_TAGS)),
            format=FormatSettings(**(raw.get("format") or {})),
            sdk=SdkSettings(**(raw.get("sdk") or {})),
            timeout=raw.get("timeout"),
            source=source,
        )


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        with path.open("r", encoding="utf-8") as handle:
            data = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ScriptError(f"invalid YAML in {path}: {exc}", ERR_CONFIG, "config_parse") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ScriptError(f"{path}: root must be mapping", ERR_CONFIG, "config_parse")
    return data


def _read_pyproject(path: Path) -> dict[str, Any] | None:
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ScriptError(f"invalid TOML in {path}: {exc}", ERR_CONFIG, "config_parse") from exc
    section = payload.get("tool", {}).get("litdoc")
    return section if isinstance(section, dict) else None


def find_config(cwd: Path) -> Path | None:
    for name in CONFIG_FILENAMES:
        candidate = cwd / name
        if candidate.is_file():
            return candidate
    pyproject = cwd / "pyproject.toml"
    if pyproject.is_file() and _read_pyproject(pyproject) is not None:
        return pyproject
    return None


def load_config(path: str | Path | None = None, cwd: Path | None = None) -> LitdocConfig:
    if path is not None:
        resolved = Path(path)
        if not resolved.is_file():
            raise ScriptError(f"config file not found: {resolved}", ERR_CONFIG, "config_missing")
    else:
        resolved = find_config(cwd or Path.cwd())
        if resolved is None:
            return LitdocConfig()
    if resolved.suffix == ".toml":
        raw = _read_pyproject(resolved) or {}
    else:
        raw = _read_yaml(resolved)
    return LitdocConfig.from_mapping(raw, source=resolved)
