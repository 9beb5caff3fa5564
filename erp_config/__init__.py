"""
erp_config -- single public entrypoint for configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Services receive the resulting ``ErpConfig``
    by injection and never read files or environment variables themselves.

Failure modes:
    - ``FileNotFoundError`` -- the configuration file does not exist.
    - ``ValueError`` -- unknown keys or invalid values.

Audit relevance:
    Every successful ``get_active_config()`` call emits an
    ``ERP_CONFIG_TRACE`` log entry with the config name, currency, ledger
    policy and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from erp_config.loader import compute_checksum, load_config, parse_config
from erp_config.schema import (
    COLLECTIONS,
    CashFlowSettings,
    ErpConfig,
    LedgerPolicy,
    NumberingSettings,
    PersistenceSettings,
)
from erp_kernel.logging_config import get_logger

_logger = get_logger("config")

_DEFAULT_CONFIG_FILE = Path(__file__).parent / "sets" / "default.yaml"
CONFIG_ENV_VAR = "ERP_CONFIG_FILE"


def get_active_config(config_path: Path | str | None = None) -> ErpConfig:
    """The ONLY public configuration entrypoint.

    Resolution order: explicit ``config_path``, then the ``ERP_CONFIG_FILE``
    environment variable, then the bundled ``sets/default.yaml``.
    """
    if config_path is None:
        config_path = os.environ.get(CONFIG_ENV_VAR) or _DEFAULT_CONFIG_FILE
    path = Path(config_path)

    config = load_config(path)
    _logger.info(
        "ERP_CONFIG_TRACE",
        extra={
            "trace_type": "ERP_CONFIG_TRACE",
            "config_name": config.name,
            "config_path": str(path),
            "currency": config.currency,
            "allow_overpayment": config.ledger.allow_overpayment,
            "lock_original_amount_after_payment": config.ledger.lock_original_amount_after_payment,
            "persistent": config.persistence.database_url is not None,
            "checksum": compute_checksum(config),
        },
    )
    return config


__all__ = [
    "COLLECTIONS",
    "CashFlowSettings",
    "ErpConfig",
    "LedgerPolicy",
    "NumberingSettings",
    "PersistenceSettings",
    "compute_checksum",
    "get_active_config",
    "load_config",
    "parse_config",
]
