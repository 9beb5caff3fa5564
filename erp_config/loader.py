"""
Configuration Loader (``erp_config.loader``).

Responsibility
--------------
Loads a YAML configuration file and parses it into the frozen
``erp_config.schema`` dataclasses.  Runtime code obtains configuration
through ``erp_config.get_active_config()``.

Invariants enforced
-------------------
* Unknown top-level or section keys raise ``ValueError`` -- a typo never
  silently falls back to a default.
* ``compute_checksum`` produces a deterministic SHA-256 hash of the parsed
  configuration for identity and change detection.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid values  -> ``ValueError`` from schema ``__post_init__``.
"""

from __future__ import annotations

import dataclasses
import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from erp_config.schema import (
    DEFAULT_PREFIXES,
    COLLECTIONS,
    CashFlowSettings,
    ErpConfig,
    LedgerPolicy,
    NumberingSettings,
    PersistenceSettings,
)

_TOP_LEVEL_KEYS = frozenset({"name", "currency", "ledger", "cashflow", "numbering", "persistence"})


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        ValueError: if the document is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"{path}: configuration root must be a mapping")
    return data


def _section(data: dict[str, Any], name: str, allowed: set[str]) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ValueError(f"{name} must be a mapping")
    unknown = set(section) - allowed
    if unknown:
        raise ValueError(f"Unknown {name} keys: {sorted(unknown)}")
    return section


def parse_config(data: dict[str, Any]) -> ErpConfig:
    """Parse an ``ErpConfig`` from a dict (as produced by ``yaml.safe_load``)."""
    unknown = set(data) - _TOP_LEVEL_KEYS
    if unknown:
        raise ValueError(f"Unknown configuration keys: {sorted(unknown)}")

    ledger = _section(data, "ledger", {"allow_overpayment", "lock_original_amount_after_payment"})
    cashflow = _section(data, "cashflow", {"window_days"})
    numbering = _section(data, "numbering", set(COLLECTIONS))
    persistence = _section(data, "persistence", {"database_url", "keys"})

    keys = persistence.get("keys") or {}
    if not isinstance(keys, dict):
        raise ValueError("persistence.keys must be a mapping")

    return ErpConfig(
        name=str(data.get("name", "default")),
        currency=str(data.get("currency", "BRL")),
        ledger=LedgerPolicy(**ledger),
        cashflow=CashFlowSettings(**cashflow),
        numbering=NumberingSettings(prefixes={**DEFAULT_PREFIXES, **numbering}),
        persistence=PersistenceSettings(
            database_url=persistence.get("database_url"),
            keys={**{c: c for c in COLLECTIONS}, **keys},
        ),
    )


def load_config(path: Path) -> ErpConfig:
    """Load and parse a configuration file."""
    return parse_config(load_yaml_file(path))


def compute_checksum(config: ErpConfig) -> str:
    """Deterministic SHA-256 of the parsed configuration."""
    canonical = json.dumps(dataclasses.asdict(config), sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
