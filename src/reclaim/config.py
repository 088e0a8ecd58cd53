"""reclaim configuration loader.

Priority (high → low):
  1. CLI flags           (handled at call site — not in this module)
  2. Environment variables  (RECLAIM_VECTOR_BACKEND, RECLAIM_BATCH_SIZE,
                             RECLAIM_LOG_LEVEL)
  3. Per-project reclaim.yaml
  4. Global ~/.reclaim/config.yaml  (defaults only — no credentials)
  5. Hardcoded defaults

Credentials (the Qdrant API key) are read from QDRANT_API_KEY only.
All YAML reads use yaml.safe_load() — never yaml.load().
"""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from reclaim.logging_setup import normalize_level

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

_GLOBAL_CONFIG_PATH: Path = Path.home() / ".reclaim" / "config.yaml"
_PROJECT_CONFIG_NAME: str = "reclaim.yaml"

# Hard ceiling of the vector index's delete endpoint.
MAX_DELETE_BATCH: int = 500

VECTOR_BACKENDS: frozenset[str] = frozenset(["sqlite-vec", "qdrant"])

# Key names that suggest a credential; forbidden in global config.
_API_KEY_RE: re.Pattern[str] = re.compile(
    r"api[_\-]?(?:key|secret)"
    r"|_token$"
    r"|^token$"
    r"|_secret$"
    r"|^secret$"
    r"|passw(?:ord|d)"
    r"|credential",
    re.IGNORECASE,
)

_KNOWN_SECTIONS: frozenset[str] = frozenset(["database", "vector", "qdrant", "logging"])


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class ConfigError(ValueError):
    """Raised when a config file contains an invalid or forbidden value."""


# ---------------------------------------------------------------------------
# Data model
# ---------------------------------------------------------------------------


@dataclass
class DatabaseCfg:
    """Relational store location (reclaim.yaml: database:)."""

    path: str = ".reclaim.db"


@dataclass
class VectorCfg:
    """Vector index settings (reclaim.yaml: vector:).

    Attributes:
        backend: ``sqlite-vec`` (local vec0 table) or ``qdrant`` (HTTP).
        batch_size: IDs per delete call for chat documents and images.
        library_batch_size: IDs per delete call for library documents.
        model: Embedding model; names the local vec0 table.
    """

    backend: str = "sqlite-vec"
    batch_size: int = MAX_DELETE_BATCH
    library_batch_size: int = 100
    model: str = "openai/text-embedding-3-small"


@dataclass
class QdrantCfg:
    """Qdrant connection settings (reclaim.yaml: qdrant:)."""

    url: str = "http://localhost:6333"
    collection: str = "chat-assets"
    library_collection: str | None = None  # falls back to collection
    timeout: float = 10.0


@dataclass
class LoggingCfg:
    """Log verbosity (reclaim.yaml: logging:)."""

    level: str = "WARNING"


@dataclass
class ReclaimConfig:
    """Root configuration object, built by load_config() from merged YAML layers."""

    database: DatabaseCfg = field(default_factory=DatabaseCfg)
    vector: VectorCfg = field(default_factory=VectorCfg)
    qdrant: QdrantCfg = field(default_factory=QdrantCfg)
    logging: LoggingCfg = field(default_factory=LoggingCfg)


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------


def _check_no_api_keys(data: dict[str, Any], source: Path) -> None:
    """Raise ConfigError if *data* contains any credential-like key names."""

    def _scan(obj: Any, path: str) -> None:
        if isinstance(obj, dict):
            for k, v in obj.items():
                full = f"{path}.{k}" if path else k
                if _API_KEY_RE.search(str(k)):
                    raise ConfigError(
                        f"Global config '{source}' contains a forbidden key '{full}'.\n"
                        f"  Credentials must be set via environment variables, not config files.\n"
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
                f"Unknown config key '{key}' in '{source}' — ignored.",
                UserWarning,
                stacklevel=4,
            )


def _validate(cfg: ReclaimConfig) -> None:
    if cfg.vector.backend not in VECTOR_BACKENDS:
        raise ConfigError(
            f"vector.backend must be one of {sorted(VECTOR_BACKENDS)}, "
            f"got '{cfg.vector.backend}'."
        )
    for name in ("batch_size", "library_batch_size"):
        value = getattr(cfg.vector, name)
        if not 1 <= value <= MAX_DELETE_BATCH:
            raise ConfigError(
                f"vector.{name} must be between 1 and {MAX_DELETE_BATCH}, got {value}."
            )
    if cfg.qdrant.timeout <= 0:
        raise ConfigError(f"qdrant.timeout must be positive, got {cfg.qdrant.timeout}.")
    try:
        normalize_level(cfg.logging.level)
    except ValueError as exc:
        raise ConfigError(f"logging.level: {exc}") from None


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


def _as_int(value: Any, name: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigError(f"{name} must be an integer, got '{value}'.") from None


def _cfg_from_dict(data: dict[str, Any]) -> ReclaimConfig:
    """Build a *ReclaimConfig* from a merged raw YAML dict."""
    cfg = ReclaimConfig()

    if "database" in data:
        d = data["database"] or {}
        cfg.database = DatabaseCfg(path=str(d.get("path", cfg.database.path)))

    if "vector" in data:
        v = data["vector"] or {}
        cfg.vector = VectorCfg(
            backend=str(v.get("backend", cfg.vector.backend)),
            batch_size=_as_int(v.get("batch_size", cfg.vector.batch_size), "vector.batch_size"),
            library_batch_size=_as_int(
                v.get("library_batch_size", cfg.vector.library_batch_size),
                "vector.library_batch_size",
            ),
            model=str(v.get("model", cfg.vector.model)),
        )

    if "qdrant" in data:
        q = data["qdrant"] or {}
        cfg.qdrant = QdrantCfg(
            url=str(q.get("url", cfg.qdrant.url)),
            collection=str(q.get("collection", cfg.qdrant.collection)),
            library_collection=q.get("library_collection") or cfg.qdrant.library_collection,
            timeout=float(q.get("timeout", cfg.qdrant.timeout)),
        )

    if "logging" in data:
        lg = data["logging"] or {}
        cfg.logging = LoggingCfg(level=str(lg.get("level", cfg.logging.level)))

    return cfg


def _apply_env_overrides(cfg: ReclaimConfig) -> ReclaimConfig:
    """Apply RECLAIM_* environment variable overrides."""
    if backend := os.environ.get("RECLAIM_VECTOR_BACKEND"):
        cfg.vector.backend = backend
    if batch := os.environ.get("RECLAIM_BATCH_SIZE"):
        cfg.vector.batch_size = _as_int(batch, "RECLAIM_BATCH_SIZE")
    if level := os.environ.get("RECLAIM_LOG_LEVEL"):
        cfg.logging.level = level
    return cfg


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def load_config(
    project_dir: Path | None = None,
    *,
    global_config_path: Path | None = None,
) -> ReclaimConfig:
    """Load and return a merged *ReclaimConfig*.

    Applies layers in order: global → per-project → env vars.
    CLI flag overrides must be applied by the caller after this function.

    Args:
        project_dir: Directory to search for *reclaim.yaml*. Defaults to CWD.
        global_config_path: Override the global config path (for testing).

    Returns:
        Fully merged and validated *ReclaimConfig*.

    Raises:
        ConfigError: If global config contains credential-like fields, or a
            value is out of range.
    """
    global_path = global_config_path if global_config_path is not None else _GLOBAL_CONFIG_PATH
    search_dir = project_dir if project_dir is not None else Path.cwd()

    merged: dict[str, Any] = {}

    if global_path.exists():
        raw_global = yaml.safe_load(global_path.read_text(encoding="utf-8")) or {}
        _check_no_api_keys(raw_global, global_path)
        _warn_unknown_keys(raw_global, global_path)
        merged = _deep_merge(merged, raw_global)

    project_cfg_path = search_dir / _PROJECT_CONFIG_NAME
    if project_cfg_path.exists():
        raw_project = yaml.safe_load(project_cfg_path.read_text(encoding="utf-8")) or {}
        _warn_unknown_keys(raw_project, project_cfg_path)
        merged = _deep_merge(merged, raw_project)

    cfg = _apply_env_overrides(_cfg_from_dict(merged))
    _validate(cfg)
    return cfg


def default_project_config() -> str:
    """Return the reclaim.yaml template written by ``reclaim init``."""
    return (
        "# reclaim project configuration.\n"
        "# NEVER store credentials here — use environment variables:\n"
        "#   export QDRANT_API_KEY=...\n"
        "\n"
        "database:\n"
        "  path: .reclaim.db\n"
        "\n"
        "vector:\n"
        "  backend: sqlite-vec        # or: qdrant\n"
        f"  batch_size: {MAX_DELETE_BATCH}\n"
        "  library_batch_size: 100\n"
        "\n"
        "logging:\n"
        "  level: WARNING\n"
    )
