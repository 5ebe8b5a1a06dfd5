"""
Tests for reconciliation policy loading.

Covers:
- The packaged policy.yaml
- Parsing and validation of policy documents
- Checksums
- Path resolution through RECEIVABLES_POLICY_PATH
"""

from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
import yaml

from receivables_config import (
    DEFAULT_POLICY_PATH,
    POLICY_PATH_ENV,
    get_active_policy,
    parse_policy,
)
from receivables_config.loader import compute_checksum, load_policy, load_yaml_file
from receivables_kernel.domain.records import ReturnStatus
from receivables_kernel.domain.values import Currency
from receivables_kernel.exceptions import PolicyValidationError


def _doc(**overrides) -> dict:
    data = {
        "config_id": "test-policy",
        "version": 2,
        "currency": "LKR",
        "credit_return_statuses": ["approved", "processed"],
        "cheque_status_aliases": {"bounced": "returned"},
    }
    data.update(overrides)
    return data


def _write(tmp_path: Path, data: dict) -> Path:
    path = tmp_path / "policy.yaml"
    path.write_text(yaml.safe_dump(data), encoding="utf-8")
    return path


class TestPackagedPolicy:
    """Tests for the policy shipped with the package."""

    def test_packaged_policy_loads(self):
        policy = load_policy(DEFAULT_POLICY_PATH)

        assert policy.config_id == "agency-receivables"
        assert policy.currency == Currency("LKR")
        assert policy.credit_return_statuses == {ReturnStatus.APPROVED, ReturnStatus.PROCESSED}
        assert policy.cheque_status_aliases == {"bounced": "returned"}
        assert len(policy.checksum) == 64
        assert policy.timezone == ZoneInfo("Asia/Colombo")


class TestParsePolicy:
    """Tests for parse_policy validation."""

    def test_valid(self):
        policy = parse_policy(_doc())

        assert policy.version == 2
        assert policy.config_id == "test-policy"

    def test_statuses_normalized(self):
        policy = parse_policy(_doc(credit_return_statuses=[" Approved "]))
        assert policy.credit_return_statuses == {ReturnStatus.APPROVED}

    def test_version_defaults_to_one(self):
        data = _doc()
        del data["version"]
        assert parse_policy(data).version == 1

    def test_aliases_optional(self):
        data = _doc()
        del data["cheque_status_aliases"]
        assert parse_policy(data).cheque_status_aliases == {}

    def test_missing_currency_raises_key_error(self):
        data = _doc()
        del data["currency"]
        with pytest.raises(KeyError):
            parse_policy(data)

    def test_missing_config_id_raises_key_error(self):
        data = _doc()
        del data["config_id"]
        with pytest.raises(KeyError):
            parse_policy(data)

    def test_errors_collected(self):
        """All problems are reported together."""
        with pytest.raises(PolicyValidationError) as exc_info:
            parse_policy(_doc(
                currency="XYZ",
                credit_return_statuses=["approved", "shipped"],
                cheque_status_aliases={"bounced": "lost"},
            ))

        errors = exc_info.value.errors
        assert len(errors) == 3
        assert exc_info.value.code == "POLICY_INVALID"

    def test_empty_credit_statuses_rejected(self):
        with pytest.raises(PolicyValidationError, match="must not be empty"):
            parse_policy(_doc(credit_return_statuses=[]))

    def test_timezone_defaults_to_utc(self):
        assert str(parse_policy(_doc()).timezone) == "UTC"

    def test_timezone_parsed(self):
        assert parse_policy(_doc(timezone="Asia/Kolkata")).timezone == ZoneInfo("Asia/Kolkata")

    def test_unknown_timezone_rejected(self):
        with pytest.raises(PolicyValidationError, match="unknown timezone"):
            parse_policy(_doc(timezone="Mars/Olympus_Mons"))


class TestChecksum:
    def test_key_order_irrelevant(self):
        assert compute_checksum({"a": 1, "b": 2}) == compute_checksum({"b": 2, "a": 1})

    def test_changes_with_content(self):
        assert parse_policy(_doc()).checksum != parse_policy(_doc(version=3)).checksum


class TestLoading:
    def test_load_from_file(self, tmp_path):
        policy = load_policy(_write(tmp_path, _doc(currency="INR")))
        assert policy.currency == Currency("INR")

    def test_empty_file_reads_as_empty_dict(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert load_yaml_file(path) == {}

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_policy(tmp_path / "absent.yaml")

    def test_explicit_path_wins(self, tmp_path, monkeypatch):
        monkeypatch.setenv(POLICY_PATH_ENV, str(DEFAULT_POLICY_PATH))
        policy = get_active_policy(_write(tmp_path, _doc(config_id="explicit")))
        assert policy.config_id == "explicit"

    def test_env_override(self, tmp_path, monkeypatch):
        monkeypatch.setenv(POLICY_PATH_ENV, str(_write(tmp_path, _doc(config_id="from-env"))))
        assert get_active_policy().config_id == "from-env"

    def test_default_path(self, monkeypatch):
        monkeypatch.delenv(POLICY_PATH_ENV, raising=False)
        assert get_active_policy().config_id == "agency-receivables"

    def test_config_trace_logged(self, captured_logs, monkeypatch):
        monkeypatch.delenv(POLICY_PATH_ENV, raising=False)
        get_active_policy()

        traces = [r for r in captured_logs() if r["message"] == "RECEIVABLES_CONFIG_TRACE"]
        assert traces[-1]["config_id"] == "agency-receivables"
        assert traces[-1]["currency"] == "LKR"
