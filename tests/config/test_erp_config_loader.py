"""
Tests for configuration loading.

Covers:
- The bundled default configuration
- Resolution order of get_active_config
- Rejection of unknown keys and invalid values
- Deterministic checksums and the ERP_CONFIG_TRACE audit record
"""

import pytest
import yaml

from erp_config import (
    CashFlowSettings,
    ErpConfig,
    LedgerPolicy,
    compute_checksum,
    get_active_config,
    load_config,
    parse_config,
)
from erp_config.loader import load_yaml_file


def write_config(tmp_path, text: str):
    path = tmp_path / "erp.yaml"
    path.write_text(text, encoding="utf-8")
    return path


class TestDefaultConfig:

    def test_bundled_defaults_match_dataclass_defaults(self, monkeypatch):
        monkeypatch.delenv("ERP_CONFIG_FILE", raising=False)
        assert get_active_config() == ErpConfig()

    def test_default_values(self):
        config = ErpConfig()
        assert config.currency == "BRL"
        assert config.ledger.allow_overpayment is False
        assert config.ledger.lock_original_amount_after_payment is True
        assert config.cashflow.window_days == 30
        assert config.numbering.prefix_for("sales_orders") == "SO"
        assert config.persistence.database_url is None
        assert config.persistence.key_for("payables") == "payables"


class TestResolution:

    def test_explicit_path(self, tmp_path):
        path = write_config(tmp_path, "name: explicit\n")
        assert get_active_config(path).name == "explicit"

    def test_environment_variable(self, tmp_path, monkeypatch):
        path = write_config(tmp_path, "name: from-env\n")
        monkeypatch.setenv("ERP_CONFIG_FILE", str(path))
        assert get_active_config().name == "from-env"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            get_active_config(tmp_path / "absent.yaml")

    def test_trace_logged(self, tmp_path, captured_logs):
        path = write_config(tmp_path, "name: traced\nledger:\n  allow_overpayment: true\n")
        config = get_active_config(path)
        traces = [r for r in captured_logs() if r["message"] == "ERP_CONFIG_TRACE"]
        assert traces[0]["config_name"] == "traced"
        assert traces[0]["allow_overpayment"] is True
        assert traces[0]["checksum"] == compute_checksum(config)


class TestParsing:

    def test_partial_sections_merge_with_defaults(self, tmp_path):
        path = write_config(tmp_path, (
            "currency: usd\n"
            "cashflow:\n  window_days: 45\n"
            "numbering:\n  payables: CP\n"
            "persistence:\n  database_url: sqlite:///erp.db\n"
        ))
        config = load_config(path)
        assert config.currency == "USD"
        assert config.cashflow.window_days == 45
        assert config.numbering.prefix_for("payables") == "CP"
        assert config.numbering.prefix_for("receivables") == "AR"
        assert config.persistence.database_url == "sqlite:///erp.db"

    def test_empty_file_gives_defaults(self, tmp_path):
        assert load_config(write_config(tmp_path, "")) == ErpConfig()

    @pytest.mark.parametrize("data", [
        {"colour": "blue"},
        {"ledger": {"allow_over_payment": True}},
        {"numbering": {"invoices": "INV"}},
        {"persistence": {"keys": {"journal": "j"}}},
    ])
    def test_unknown_keys_rejected(self, data):
        with pytest.raises(ValueError):
            parse_config(data)

    @pytest.mark.parametrize("data", [
        {"currency": "ZZZ"},
        {"ledger": {"allow_overpayment": "yes"}},
        {"cashflow": {"window_days": 0}},
        {"numbering": {"quotes": " "}},
        {"persistence": {"keys": {"quotes": "payables"}}},
        {"persistence": {"database_url": ""}},
        {"ledger": ["not", "a", "mapping"]},
    ])
    def test_invalid_values_rejected(self, data):
        with pytest.raises(ValueError):
            parse_config(data)

    def test_root_must_be_mapping(self, tmp_path):
        with pytest.raises(ValueError):
            load_yaml_file(write_config(tmp_path, "- a\n- b\n"))

    def test_malformed_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            load_config(write_config(tmp_path, "ledger: [unclosed\n"))


class TestSchema:

    def test_frozen(self):
        with pytest.raises(AttributeError):
            ErpConfig().currency = "USD"

    def test_window_must_be_int(self):
        with pytest.raises(ValueError):
            CashFlowSettings(window_days=1.5)

    def test_checksum_deterministic_and_sensitive(self):
        assert compute_checksum(ErpConfig()) == compute_checksum(ErpConfig())
        lenient = ErpConfig(ledger=LedgerPolicy(allow_overpayment=True))
        assert compute_checksum(lenient) != compute_checksum(ErpConfig())
