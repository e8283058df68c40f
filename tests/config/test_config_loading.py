"""
Tests for insurance_config: schema validation, YAML loading, environment
overrides, the cached active configuration and the batch bridge.
"""

from decimal import Decimal
from pathlib import Path

import pytest
import yaml

from insurance_config import (
    AgencyConfig,
    LoggingSettings,
    PaymentSettings,
    ReconciliationSettings,
    get_active_config,
    load_config,
    reset_active_config,
)
from insurance_config.bridges import payment_service, reconciliation_policy
from insurance_config.loader import (
    DEFAULT_CONFIG_PATH,
    apply_env_overrides,
    compute_checksum,
    load_yaml_file,
    parse_config,
)


@pytest.fixture(autouse=True)
def _fresh_active_config():
    reset_active_config()
    yield
    reset_active_config()


def _write(tmp_path: Path, data) -> Path:
    path = tmp_path / "agency.yaml"
    path.write_text(yaml.safe_dump(data, allow_unicode=True), encoding="utf-8")
    return path


class TestSchema:

    def test_defaults(self):
        config = AgencyConfig()
        assert config.payments.currency == "RUB"
        assert config.reconciliation.unpaid_threshold_days == 7
        assert config.reconciliation.renewal_window_days == 30
        assert config.reconciliation.expire_problematic_contracts is True

    def test_currency_normalised(self):
        assert PaymentSettings(currency=" usd ").currency == "USD"

    @pytest.mark.parametrize("currency", ["", "RUBL", "R1B"])
    def test_currency_rejected(self, currency):
        with pytest.raises(ValueError):
            PaymentSettings(currency=currency)

    def test_level_normalised(self):
        assert LoggingSettings(level="debug").level == "DEBUG"

    def test_unknown_level_rejected(self):
        with pytest.raises(ValueError):
            LoggingSettings(level="chatty")

    @pytest.mark.parametrize(
        "field,value",
        [
            ("unpaid_threshold_days", -1),
            ("renewal_window_days", -1),
            ("interval_seconds", 0),
            ("start_delay_seconds", -5),
        ],
    )
    def test_reconciliation_ranges(self, field, value):
        with pytest.raises(ValueError):
            ReconciliationSettings(**{field: value})


class TestParseConfig:

    def test_missing_sections_take_defaults(self):
        config = parse_config({"name": "branch-office"})
        assert config.name == "branch-office"
        assert config.reconciliation == ReconciliationSettings()

    def test_unknown_section_rejected(self):
        with pytest.raises(ValueError, match="Unknown configuration sections"):
            parse_config({"reconcilation": {}})

    def test_bool_is_not_an_int(self):
        with pytest.raises(ValueError, match="must be an integer"):
            parse_config({"reconciliation": {"renewal_window_days": True}})

    def test_string_is_not_a_bool(self):
        with pytest.raises(ValueError):
            parse_config({"reconciliation": {"expire_problematic_contracts": "no"}})

    def test_section_must_be_mapping(self):
        with pytest.raises(ValueError):
            parse_config({"database": "sqlite://"})

    def test_checksum_deterministic(self):
        a = {"name": "x", "payments": {"currency": "RUB"}}
        b = {"payments": {"currency": "RUB"}, "name": "x"}
        assert compute_checksum(a) == compute_checksum(b)
        assert parse_config(a).checksum == compute_checksum(a)
        assert compute_checksum(a) != compute_checksum({"name": "y"})


class TestLoading:

    def test_packaged_defaults(self):
        config = load_config(environ={})
        assert DEFAULT_CONFIG_PATH.exists()
        assert config.name == "insurance-agency"
        assert config.reconciliation.interval_seconds == 3600
        assert config.reconciliation.start_delay_seconds == 30

    def test_load_file(self, tmp_path):
        path = _write(tmp_path, {
            "name": "test-agency",
            "reconciliation": {"unpaid_threshold_days": 3, "expire_problematic_contracts": False},
            "logging": {"level": "warning"},
        })

        config = load_config(path, environ={})

        assert config.name == "test-agency"
        assert config.reconciliation.unpaid_threshold_days == 3
        assert config.reconciliation.expire_problematic_contracts is False
        assert config.logging.level == "WARNING"

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / "absent.yaml", environ={})

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError, match="mapping"):
            load_yaml_file(path)

    def test_empty_file_is_all_defaults(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_config(path, environ={}).name == "insurance-agency"


class TestEnvironmentOverrides:

    def test_overrides_applied(self):
        config = apply_env_overrides(
            AgencyConfig(),
            {"INSURANCE_DATABASE_URL": "postgresql://db/insurance", "INSURANCE_LOG_LEVEL": "debug"},
        )
        assert config.database.url == "postgresql://db/insurance"
        assert config.logging.level == "DEBUG"

    def test_empty_values_ignored(self):
        config = apply_env_overrides(AgencyConfig(), {"INSURANCE_DATABASE_URL": ""})
        assert config.database.url == AgencyConfig().database.url

    def test_invalid_level_override_rejected(self):
        with pytest.raises(ValueError):
            apply_env_overrides(AgencyConfig(), {"INSURANCE_LOG_LEVEL": "loud"})


class TestActiveConfig:

    def test_cached_until_reset(self, tmp_path, captured_logs):
        first_path = _write(tmp_path, {"name": "first"})

        first = get_active_config(first_path)
        assert get_active_config(tmp_path / "ignored.yaml") is first

        traces = [r for r in captured_logs() if r["message"] == "INSURANCE_CONFIG_TRACE"]
        assert len(traces) == 1
        assert traces[0]["config_name"] == "first"
        assert traces[0]["checksum"] == first.checksum

        reset_active_config()
        assert get_active_config().name == "insurance-agency"


class TestBridges:

    def test_reconciliation_policy(self):
        config = parse_config({
            "reconciliation": {
                "unpaid_threshold_days": 10,
                "renewal_window_days": 14,
                "expire_problematic_contracts": False,
            },
        })

        policy = reconciliation_policy(config)

        assert policy.unpaid_threshold_days == 10
        assert policy.renewal_window_days == 14
        assert policy.expire_problematic_contracts is False

    def test_payment_service_charges_configured_currency(
        self, repos, clock, gateway, verified_client, make_contract,
    ):
        config = parse_config({"payments": {"currency": "usd"}})
        contract = make_contract()

        outcome = payment_service(config, repos, gateway=gateway, clock=clock).initiate_payment(
            contract.id, "10000",
        ).unwrap()

        assert gateway.calls == [(Decimal("10000.00"), "USD", str(outcome.payment_id))]
        assert repos.payments.get_by_id(outcome.payment_id).currency == "USD"
