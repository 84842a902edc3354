"""
RWA Compliance Asset Registry and Unit Ledger

Thin collaborators around the compliance core:

- AssetRegistry assigns asset ids (1, 2, 3, ... never reused), stores
  asset metadata and writes each asset's requirement set to the catalog.
- UnitLedger is an in-memory balance book for one asset. Every credit to
  a recipient goes through the TransferGate first; debits are never gated.
"""

import logging
import threading
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from .access import is_null_identity
from .attributes import RequirementSet
from .audit import AuditEventType
from .catalog import RequirementCatalog
from .errors import (
    InsufficientBalance,
    InvalidIdentity,
    InvalidPayload,
    Unauthorized,
    UnknownAsset,
)
from .gate import TransferGate
from .logging_config import audit_log

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AssetRecord:
    asset_id: int
    name: str
    symbol: str
    asset_type: str
    description: str
    document_uri: str
    created_by: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "asset_id": self.asset_id,
            "name": self.name,
            "symbol": self.symbol,
            "asset_type": self.asset_type,
            "description": self.description,
            "document_uri": self.document_uri,
            "created_by": self.created_by,
        }


class UnitLedger:
    """
    Balances of a single asset.

    Supply caps are not modelled. Amounts are positive integers in the
    asset's smallest unit.
    """

    def __init__(self, asset_id: int, gate: TransferGate, admin: str):
        if is_null_identity(admin):
            raise InvalidIdentity("admin")
        self.asset_id = asset_id
        self.gate = gate
        self.admin = admin
        self._balances: Dict[str, int] = {}
        self._lock = threading.Lock()

    @property
    def total_supply(self) -> int:
        with self._lock:
            return sum(self._balances.values())

    def balance_of(self, holder: str) -> int:
        with self._lock:
            return self._balances.get(holder, 0)

    def mint(self, caller: str, to: str, amount: int):
        with self._lock:
            self._require_admin(caller, "mint")
            self._validate(to, amount)
            self.gate.require(to, self.asset_id)
            self._balances[to] = self._balances.get(to, 0) + amount
        logger.info("Minted %d units of asset %s to %s", amount, self.asset_id, to)

    def transfer(self, sender: str, to: str, amount: int):
        """Move units from sender to an eligible recipient. The sender is not evaluated."""
        with self._lock:
            self._validate(to, amount)
            self._require_balance(sender, amount)
            self.gate.require(to, self.asset_id)
            self._move(sender, to, amount)
        logger.info("Transferred %d units of asset %s from %s to %s", amount, self.asset_id, sender, to)

    def force_transfer(self, caller: str, source: str, to: str, amount: int):
        """Administrative move out of any holding. The recipient is still gated."""
        with self._lock:
            self._require_admin(caller, "force_transfer")
            self._validate(to, amount)
            self._require_balance(source, amount)
            self.gate.require(to, self.asset_id)
            self._move(source, to, amount)
        logger.info("Force-transferred %d units of asset %s from %s to %s", amount, self.asset_id, source, to)

    def burn(self, caller: str, holder: str, amount: int):
        with self._lock:
            self._require_admin(caller, "burn")
            self._validate(holder, amount)
            self._require_balance(holder, amount)
            remaining = self._balances[holder] - amount
            if remaining:
                self._balances[holder] = remaining
            else:
                del self._balances[holder]
        logger.info("Burned %d units of asset %s from %s", amount, self.asset_id, holder)

    def _move(self, source: str, to: str, amount: int):
        remaining = self._balances[source] - amount
        if remaining:
            self._balances[source] = remaining
        else:
            del self._balances[source]
        self._balances[to] = self._balances.get(to, 0) + amount

    def _require_admin(self, caller: str, operation: str):
        if caller != self.admin or is_null_identity(caller):
            audit_log.unauthorized_attempt(caller=caller, operation=operation, role="asset admin")
            raise Unauthorized(caller, "asset admin")

    def _require_balance(self, holder: str, amount: int):
        balance = self._balances.get(holder, 0)
        if balance < amount:
            raise InsufficientBalance(holder, balance, amount)

    @staticmethod
    def _validate(holder: str, amount: int):
        if is_null_identity(holder):
            raise InvalidIdentity("holder")
        if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
            raise InvalidPayload("amount", "must be a positive integer")


class AssetRegistry:
    """
    Creates asset classes and keeps their metadata.

    Creating an asset writes its requirement set through the catalog, so
    the creating identity must be the catalog owner. Without a requirement
    set the catalog entry is left as it is, so requirements configured
    ahead of creation stay in force. When a gate is configured a
    UnitLedger administered by the creator is opened too.
    """

    def __init__(self, catalog: RequirementCatalog, gate: Optional[TransferGate] = None):
        self.catalog = catalog
        self.gate = gate
        self._assets: Dict[int, AssetRecord] = {}
        self._ledgers: Dict[int, UnitLedger] = {}
        self._next_id = 1
        self._lock = threading.Lock()

    def create_asset(
        self,
        caller: str,
        name: str,
        symbol: str,
        requirements: Union[RequirementSet, Mapping[str, Any], None] = None,
        asset_type: str = "",
        description: str = "",
        document_uri: str = ""
    ) -> AssetRecord:
        with self._lock:
            if not isinstance(name, str) or not name.strip():
                raise InvalidPayload("name", "cannot be empty")
            if not isinstance(symbol, str) or not symbol.strip():
                raise InvalidPayload("symbol", "cannot be empty")
            asset_id = self._next_id
            # both raise before the id is consumed
            if requirements is None:
                self.catalog.require_owner(caller, "create_asset")
            else:
                self.catalog.set_requirements(caller, asset_id, requirements)

            record = AssetRecord(
                asset_id=asset_id,
                name=name,
                symbol=symbol,
                asset_type=asset_type,
                description=description,
                document_uri=document_uri,
                created_by=caller,
            )
            self._assets[asset_id] = record
            if self.gate is not None:
                self._ledgers[asset_id] = UnitLedger(asset_id, self.gate, admin=caller)
            self._next_id += 1
            self.catalog.audit_trail.emit(AuditEventType.ASSET_CREATED, asset_id)

        logger.info("Asset %s created: %s (%s)", asset_id, name, symbol)
        return record

    def get_asset(self, asset_id: int) -> AssetRecord:
        with self._lock:
            record = self._assets.get(asset_id)
        if record is None:
            raise UnknownAsset(asset_id)
        return record

    def ledger(self, asset_id: int) -> UnitLedger:
        with self._lock:
            ledger = self._ledgers.get(asset_id)
        if ledger is None:
            raise UnknownAsset(asset_id)
        return ledger

    def asset_count(self) -> int:
        with self._lock:
            return len(self._assets)

    def list_assets(self) -> List[AssetRecord]:
        with self._lock:
            return [self._assets[k] for k in sorted(self._assets)]
