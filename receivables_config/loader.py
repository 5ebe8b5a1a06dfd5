"""
Policy loader (``receivables_config.loader``).

Responsibility
--------------
Loads a reconciliation policy YAML document and parses it into a frozen
``ReconciliationPolicy``. Runtime callers go through
``receivables_config.get_active_policy()``.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing required keys  -> ``KeyError`` propagates.
* Unknown currency, status or timezone values  -> ``PolicyValidationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

import yaml

from receivables_config.schema import ReconciliationPolicy
from receivables_kernel.domain.records import ChequeStatus, ReturnStatus
from receivables_kernel.domain.values import Currency
from receivables_kernel.exceptions import InvalidCurrencyError, PolicyValidationError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a single YAML file; an empty document reads as ``{}``."""
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def parse_policy(data: dict[str, Any]) -> ReconciliationPolicy:
    """
    Parse a ``ReconciliationPolicy`` from a dict.

    Raises:
        KeyError: if ``config_id``, ``currency`` or
            ``credit_return_statuses`` is missing.
        PolicyValidationError: if any value is not recognised.
    """
    errors: list[str] = []

    currency: Currency | None = None
    try:
        currency = Currency(str(data["currency"]))
    except InvalidCurrencyError as e:
        errors.append(str(e))

    credit_statuses: set[ReturnStatus] = set()
    raw_statuses = data["credit_return_statuses"]
    if not raw_statuses:
        errors.append("credit_return_statuses must not be empty")
    for raw in raw_statuses or ():
        try:
            credit_statuses.add(ReturnStatus(str(raw).strip().lower()))
        except ValueError:
            errors.append(f"unknown return status in credit_return_statuses: {raw!r}")

    aliases: dict[str, str] = {}
    for legacy, canonical in (data.get("cheque_status_aliases") or {}).items():
        try:
            aliases[str(legacy).strip().lower()] = ChequeStatus(str(canonical).strip().lower()).value
        except ValueError:
            errors.append(f"cheque status alias {legacy!r} maps to unknown status {canonical!r}")

    zone: ZoneInfo | None = None
    try:
        zone = ZoneInfo(str(data.get("timezone", "UTC")))
    except (ZoneInfoNotFoundError, ValueError):
        errors.append(f"unknown timezone: {data.get('timezone')!r}")

    if errors:
        raise PolicyValidationError(errors)

    return ReconciliationPolicy(
        config_id=str(data["config_id"]),
        version=int(data.get("version", 1)),
        currency=currency,
        credit_return_statuses=frozenset(credit_statuses),
        cheque_status_aliases=aliases,
        timezone=zone,
        checksum=compute_checksum(data),
    )


def load_policy(path: Path) -> ReconciliationPolicy:
    """Load and parse a policy document from ``path``."""
    return parse_policy(load_yaml_file(Path(path)))
