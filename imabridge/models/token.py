"""
Token metadata snapshots and the editable clone token draft
"""

from dataclasses import dataclass, replace
from typing import Optional

from .result import RemoteStatus
from ..exceptions import InputValidationError
from ..validation import require_address


@dataclass(frozen=True)
class TokenMetadata:
    """Symbol/name/decimals of one token contract, fetched once per (address, chain)"""
    address: str
    chain_id: int
    status: RemoteStatus
    symbol: Optional[str] = None
    name: Optional[str] = None
    decimals: Optional[int] = None
    error: Optional[str] = None

    @classmethod
    def loading(cls, address: str, chain_id: int) -> "TokenMetadata":
        return cls(address=address, chain_id=chain_id, status=RemoteStatus.LOADING)

    @classmethod
    def failed(cls, address: str, chain_id: int, error: str) -> "TokenMetadata":
        return cls(address=address, chain_id=chain_id, status=RemoteStatus.ERROR, error=error)

    @property
    def is_loading(self) -> bool:
        return self.status is RemoteStatus.LOADING

    @property
    def is_success(self) -> bool:
        return self.status is RemoteStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is RemoteStatus.ERROR

    def matches(self, address: Optional[str], chain_id: int) -> bool:
        return bool(address) and self.address.lower() == address.lower() and self.chain_id == chain_id


@dataclass
class CloneTokenDraft:
    """
    Clone token form owned by one workflow session.

    address_dirty is set by manual address entry and cleared with the address.
    manual_override is set by the first manual entry and never cleared; it
    blocks deploy-then-fill for the rest of the session.
    address_locked is set once a deployed address was filled in; manual edits
    are rejected from then on.
    """
    name: Optional[str] = None
    symbol: Optional[str] = None
    clone_contract_address: Optional[str] = None
    decimals: Optional[int] = None
    address_dirty: bool = False
    address_locked: bool = False
    manual_override: bool = False
    name_dirty: bool = False
    symbol_dirty: bool = False
    submitted: bool = False

    def _check_unlocked(self) -> None:
        if self.address_locked:
            raise InputValidationError(
                "Clone address is fixed to the deployed contract",
                field='cloneContractAddress'
            )

    def set_address(self, address: str) -> None:
        """Manual address entry"""
        self._check_unlocked()
        self.clone_contract_address = require_address(address, 'cloneContractAddress')
        self.address_dirty = True
        self.manual_override = True

    def clear_address(self) -> None:
        self._check_unlocked()
        self.clone_contract_address = None
        self.address_dirty = False

    def fill_deployed_address(self, address: str) -> bool:
        """Fill in a freshly deployed address; any manual entry this session wins"""
        if self.manual_override:
            return False
        self.clone_contract_address = require_address(address, 'cloneContractAddress')
        self.address_locked = True
        return True

    @property
    def metadata_fixed(self) -> bool:
        """Name and symbol follow the clone contract once an address is chosen"""
        return self.address_locked or self.manual_override

    def _check_editable(self, field: str) -> None:
        if self.metadata_fixed:
            raise InputValidationError(
                "Clone name and symbol are read from the clone contract", field=field
            )

    def edit_name(self, name: str) -> None:
        self._check_editable('name')
        self.name = name or None
        self.name_dirty = True

    def edit_symbol(self, symbol: str) -> None:
        self._check_editable('symbol')
        self.symbol = symbol or None
        self.symbol_dirty = True

    def apply_suggestion(self, name: Optional[str], symbol: Optional[str]) -> bool:
        """Auto-fill derived fields. No-op after submission, over manual edits or a chosen clone."""
        if self.submitted or self.metadata_fixed:
            return False
        if not self.name_dirty:
            self.name = name
        if not self.symbol_dirty:
            self.symbol = symbol
        return True

    def copy(self) -> "CloneTokenDraft":
        return replace(self)
