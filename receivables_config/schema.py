"""
Reconciliation policy schema (``receivables_config.schema``).

Frozen dataclasses produced by ``receivables_config.loader``. Nothing here
reads files; the loader does that.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, tzinfo

from receivables_kernel.domain.records import ReturnStatus
from receivables_kernel.domain.values import Currency


@dataclass(frozen=True)
class ReconciliationPolicy:
    """
    Policy knobs for receivables reconciliation.

    Attributes:
        config_id: Identifier of the policy document.
        version: Document version.
        currency: Currency every amount is recorded in.
        credit_return_statuses: Return statuses that count as credits.
        cheque_status_aliases: Legacy status -> canonical ChequeStatus.
        timezone: Zone the agency keeps its books in; the default clock
            takes "today" from it.
        checksum: SHA-256 of the parsed document.
    """

    config_id: str
    version: int
    currency: Currency
    credit_return_statuses: frozenset[ReturnStatus]
    cheque_status_aliases: Mapping[str, str] = field(default_factory=dict)
    timezone: tzinfo = UTC
    checksum: str = ""

