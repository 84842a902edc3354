"""
RWA Compliance Errors

Every error is raised synchronously before any state is touched, so a
failed call leaves registry, catalog and ledger exactly as they were.
"""

from typing import Any, Optional


class ComplianceError(Exception):
    """Base class for all compliance errors."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class Unauthorized(ComplianceError):
    """Caller lacks the role required for the operation."""

    def __init__(self, caller: Optional[str], role: str):
        self.caller = caller
        self.role = role
        super().__init__("caller", f"{caller!r} is not {role}")


class InvalidIdentity(ComplianceError):
    """A null or zero identity was supplied."""

    def __init__(self, field: str = "identity", message: str = "must not be null"):
        super().__init__(field, message)


class InvalidHolder(InvalidIdentity):
    """A null or zero holder was supplied to a profile write."""

    def __init__(self, message: str = "must not be null"):
        super().__init__("holder", message)


class NotAVerifier(ComplianceError):
    """Removal of an identity that was never granted verifier rights."""

    def __init__(self, identity: str):
        self.identity = identity
        super().__init__("identity", f"{identity!r} is not a verifier")


class InvalidJurisdiction(ComplianceError):
    def __init__(self, code: Any):
        self.code = code
        super().__init__("jurisdiction", f"invalid code {code!r}")


class InvalidPayload(ComplianceError):
    """A profile or requirement payload failed validation."""


class UnsupportedSchemaVersion(InvalidPayload):
    def __init__(self, version: Any):
        self.version = version
        super().__init__("schema_version", f"unsupported version {version!r}")


class UnknownAsset(ComplianceError):
    def __init__(self, asset_id: Any):
        self.asset_id = asset_id
        super().__init__("asset_id", f"no asset registered under {asset_id!r}")


class TransferDenied(ComplianceError):
    """Raised when the recipient of a transfer is not eligible for the asset."""

    def __init__(self, recipient: str, asset_id: int, report=None):
        self.recipient = recipient
        self.asset_id = asset_id
        self.report = report
        super().__init__(
            "recipient",
            f"{recipient!r} is not eligible to receive asset {asset_id}",
        )


class InsufficientBalance(ComplianceError):
    def __init__(self, holder: str, balance: int, amount: int):
        self.holder = holder
        self.balance = balance
        self.amount = amount
        super().__init__("amount", f"{holder!r} holds {balance}, needs {amount}")
