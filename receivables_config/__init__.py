"""
receivables_config -- single public entrypoint for reconciliation policy.

Responsibility:
    Provides ``get_active_policy()``, the one way runtime code obtains the
    reconciliation policy. YAML parsing lives in ``loader``.

Architecture position:
    Configuration -- sits above ``receivables_kernel`` and below
    ``receivables_services``. The kernel and the engines MUST NEVER import
    from ``receivables_config``; services translate the policy into plain
    engine arguments.

Failure modes:
    - ``FileNotFoundError`` -- the policy file does not exist.
    - ``PolicyValidationError`` -- the document has unknown values.
"""

from __future__ import annotations

import os
from pathlib import Path

from receivables_config.loader import load_policy, parse_policy
from receivables_config.schema import ReconciliationPolicy
from receivables_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULT_POLICY_PATH = Path(__file__).parent / "policy.yaml"
POLICY_PATH_ENV = "RECEIVABLES_POLICY_PATH"


def get_active_policy(policy_path: Path | None = None) -> ReconciliationPolicy:
    """
    Load the active reconciliation policy.

    Resolution order: ``policy_path`` argument, then the
    ``RECEIVABLES_POLICY_PATH`` environment variable, then the packaged
    ``policy.yaml``. The result is not cached; callers hold on to it for
    the duration of a request.
    """
    path = policy_path or Path(os.environ.get(POLICY_PATH_ENV) or DEFAULT_POLICY_PATH)
    policy = load_policy(path)
    _logger.info(
        "RECEIVABLES_CONFIG_TRACE",
        extra={
            "trace_type": "RECEIVABLES_CONFIG_TRACE",
            "config_id": policy.config_id,
            "config_version": policy.version,
            "checksum": policy.checksum,
            "currency": policy.currency.code,
            "timezone": str(policy.timezone),
            "path": str(path),
        },
    )
    return policy


__all__ = [
    "DEFAULT_POLICY_PATH",
    "POLICY_PATH_ENV",
    "ReconciliationPolicy",
    "get_active_policy",
    "load_policy",
    "parse_policy",
]
