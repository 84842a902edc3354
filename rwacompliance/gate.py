"""
RWA Compliance Transfer Gate

The enforcement point between the bookkeeping layer and the evaluator.
Any movement of units to a recipient must pass through the gate first:

    NO UNITS ARE CREDITED TO AN INELIGIBLE RECIPIENT

Only the recipient is evaluated. The sender's eligibility is never
checked, so units already held can always be moved out (redemptions,
administrative exits).
"""

import functools
import logging
from typing import Callable, Optional

from .errors import TransferDenied
from .evaluator import ComplianceEvaluator
from .logging_config import audit_log

logger = logging.getLogger(__name__)


class TransferGate:
    """
    Usage:
        gate = TransferGate(evaluator)

        gate.require(recipient, asset_id)   # raises TransferDenied

        @gate.protect(asset_id=2)
        def deliver(recipient, amount):
            # Only runs when recipient is eligible for asset 2
            ...
    """

    def __init__(self, evaluator: ComplianceEvaluator):
        self.evaluator = evaluator

    def check(self, recipient: Optional[str], asset_id: int) -> bool:
        return self.evaluator.is_compliant(recipient, asset_id)

    def require(self, recipient: Optional[str], asset_id: int) -> None:
        """
        Raise TransferDenied unless recipient may receive asset_id.

        The exception carries the full EligibilityReport for diagnostics.
        """
        if self.check(recipient, asset_id):
            return
        report = self.evaluator.explain(recipient, asset_id)
        audit_log.transfer_denied(
            recipient=recipient,
            asset_id=asset_id,
            failed_checks=[c.check_id for c in report.failed_checks()],
        )
        raise TransferDenied(recipient, asset_id, report)

    def protect(self, asset_id: int):
        """
        Decorator gating a delivery function on its first argument.

        The wrapped function must take the recipient as its first
        positional argument.
        """
        def decorator(func: Callable):
            @functools.wraps(func)
            def wrapper(recipient, *args, **kwargs):
                self.require(recipient, asset_id)
                return func(recipient, *args, **kwargs)
            return wrapper
        return decorator
