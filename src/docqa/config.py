"""docqa configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site, not in this module)
  2. Environment variables  (DOCQA_GENERATION_MODEL, DOCQA_EMBEDDING_MODEL, DOCQA_STORE)
  3. Per-project docqa.yaml  (current working directory)
  4. Global ~/.docqa/config.yaml  (model defaults only, no API keys)
  5. Hardcoded defaults

Config files must never contain API keys; use environment variables instead.
All YAML reads use yaml.safe_load(), never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_DIR: Path = Path.home() / ".docqa"
_GLOBAL_CONFIG_PATH: Path = _GLOBAL_CONFIG_DIR / "config.yaml"
_PROJECT_CONFIG_NAME: str = "docqa.yaml"

# Fields that suggest an API key are forbidden in any config file.
# Does NOT match legitimate keys like max_chars, top_k, max_bytes.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"  # api_key, api-key, api_secret, apikey
    r"|_token$"                  # access_token, auth_token (suffix)
    r"|^token$"                  # exactly "token" (standalone)
    r"|_secret$"                 # client_secret (suffix)
    r"|^secret$"                 # exactly "secret" (standalone)
    r"|passw(?:ord|d)"           # password, passwd
    r"|credential",              # credential, credentials
    re.IGNORECASE,
)

# Known top-level sections; unknown keys produce a warning
_KNOWN_SECTIONS: frozenset[str] = frozenset(
    ["embedding", "generation", "retrieval", "chunking", "storage", "upload"]
)


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class EmbeddingCfg:
    """Embedding model configuration (docqa.yaml: embedding:)."""

    model: str = "openai/text-embedding-3-small"


@dataclass
class GenerationCfg:
    """Chat completion configuration (docqa.yaml: generation:)."""

    model: str = "openai/gpt-4o-mini"


@dataclass
class RetrievalCfg:
    """Context assembly configuration (docqa.yaml: retrieval:)."""

    max_chars: int = 6_000
    top_k: int = 12


@dataclass
class ChunkingCfg:
    """Chunk window in characters (docqa.yaml: chunking:)."""

    chunk_size: int = 600
    overlap: int = 100


@dataclass
class StorageCfg:
    """Durable blob store (docqa.yaml: storage:).

    Attributes:
        path: SQLite file backing the blob store. None runs cache-only:
            documents live only as long as the process.
    """

    path: str | None = None


@dataclass
class UploadCfg:
    """Upload limits (docqa.yaml: upload:)."""

    max_bytes: int = 10 * 1024 * 1024


@dataclass
class DocqaConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    embedding: EmbeddingCfg = field(default_factory=EmbeddingCfg)
    generation: GenerationCfg = field(default_factory=GenerationCfg)
    retrieval: RetrievalCfg = field(default_factory=RetrievalCfg)
    chunking: ChunkingCfg = field(default_factory=ChunkingCfg)
    storage: StorageCfg = field(default_factory=StorageCfg)
    upload: UploadCfg = field(default_factory=UploadCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any API-key-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Config '{source}' contains a forbidden key '{full}'.\n"
                        f"  API keys must be set via environment variables, not config files.\n"
                        f"  Remove '{full}' from {source.name} and use:\n"
                        f"    export {str(k).upper().replace('-', '_')}=<value>"
                    )
                _scan(v, full)

    _scan(data, "")


def _warn_unknown_keys(data: dict[str, Any], source: Path) -> None:
    """Emit a UserWarning for unrecognised top-level keys."""
    for key in data:
        if key not in _KNOWN_SECTIONS:
            warnings.warn(
                f"Unknown config key '{key}' in '{source}' (ignored).",
                UserWarning,
                stacklevel=4,
            )


def _read_yaml(path: Path) -> dict[str, Any]:
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Config '{path}' must be a mapping at the top level.")
    _check_no_api_keys(raw, path)
    _warn_unknown_keys(raw, path)
    return raw


# ---------------------------------------------------------------------------
# Merge + build
# ---------------------------------------------------------------------------


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Return a new dict that is *base* deep-merged with *override*."""
    result = dict(base)
    for k, v in override.items():
        if k in result and isinstance(result[k], dict) and isinstance(v, dict):
            result[k] = _deep_merge(result[k], v)
        else:
            result[k] = v
    return result


def _as_int(section: str, key: str, value: Any, minimum: int = 0) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{section}.{key} must be an integer, got {value!r}") from exc
    if number < minimum:
        raise ConfigError(f"{section}.{key} must be >= {minimum}, got {number}")
    return number


def _cfg_from_dict(data: dict[str, Any]) -> DocqaConfig:
    """Build a *DocqaConfig* from a merged raw YAML dict."""
    cfg = DocqaConfig()

    if "embedding" in data:
        e = data["embedding"] or {}
        cfg.embedding = EmbeddingCfg(model=str(e.get("model", cfg.embedding.model)))

    if "generation" in data:
        g = data["generation"] or {}
        cfg.generation = GenerationCfg(model=str(g.get("model", cfg.generation.model)))

    if "retrieval" in data:
        r = data["retrieval"] or {}
        cfg.retrieval = RetrievalCfg(
            max_chars=_as_int("retrieval", "max_chars", r.get("max_chars", cfg.retrieval.max_chars)),
            top_k=_as_int("retrieval", "top_k", r.get("top_k", cfg.retrieval.top_k), minimum=1),
        )

    if "chunking" in data:
        c = data["chunking"] or {}
        chunk_size = _as_int(
            "chunking", "chunk_size", c.get("chunk_size", cfg.chunking.chunk_size), minimum=1
        )
        overlap = _as_int("chunking", "overlap", c.get("overlap", cfg.chunking.overlap))
        if overlap >= chunk_size:
            raise ConfigError(
                f"chunking.overlap ({overlap}) must be smaller than chunking.chunk_size ({chunk_size})"
            )
        cfg.chunking = ChunkingCfg(chunk_size=chunk_size, overlap=overlap)

    if "storage" in data:
        s = data["storage"] or {}
        path = s.get("path")
        cfg.storage = StorageCfg(path=str(path) if path else None)

    if "upload" in data:
        u = data["upload"] or {}
        cfg.upload = UploadCfg(
            max_bytes=_as_int("upload", "max_bytes", u.get("max_bytes", cfg.upload.max_bytes), minimum=1)
        )

    return cfg


def _apply_env_overrides(cfg: DocqaConfig) -> DocqaConfig:
    """Apply DOCQA_* environment variable overrides."""
    if model := os.environ.get("DOCQA_GENERATION_MODEL"):
        cfg.generation.model = model
    if model := os.environ.get("DOCQA_EMBEDDING_MODEL"):
        cfg.embedding.model = model
    if store := os.environ.get("DOCQA_STORE"):
        cfg.storage.path = store
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> DocqaConfig:
    """Load and return a merged *DocqaConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *docqa.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Raises:
        ConfigError: If a config file contains API-key-like fields or
            invalid numeric values.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        merged = _deep_merge(merged, _read_yaml(global_path))

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        merged = _deep_merge(merged, _read_yaml(project_cfg_path))

    cfg = _cfg_from_dict(merged)
    return _apply_env_overrides(cfg)
