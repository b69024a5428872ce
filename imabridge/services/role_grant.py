"""
Role assigner - grant any *_ROLE of a managed contract to an address.

Role hashes are read from the contract itself (e.g. MINTER_ROLE()) and cached
per (contract, role). A role name the contract does not expose is never read
or granted.
"""

import asyncio
import logging
from typing import Dict, List, Optional, Tuple

from ..exceptions import InputValidationError, RoleGrantError, UnknownContractError
from ..models import Remote
from ..validation import is_valid_bytes32, require_address
from .gateway import ChainContext, ContractGateway
from .registry import ContractDescriptor, ContractRegistry

MULTISIG_CONTRACT_ID = "SCHAIN_MULTISIG_WALLET"


class RoleGrantWorkflow:
    def __init__(self, gateway: ContractGateway, registry: ContractRegistry, chain_context: ChainContext):
        self.gateway = gateway
        self.registry = registry
        self.chain_context = chain_context
        self.logger = logging.getLogger('ima_bridge')
        self._role_hashes: Dict[Tuple[str, str], str] = {}
        self.grant: Optional[Remote] = None
        self.error: Optional[RoleGrantError] = None

    def _chain_id(self) -> int:
        chain = self.chain_context.current_chain
        if chain is None:
            raise InputValidationError("Connect a wallet to a chain first", field='chain')
        return chain.id

    def is_supported(self) -> bool:
        """Role assignment is only offered on SKALE chains"""
        chain = self.chain_context.current_chain
        return chain is not None and chain.is_skale

    def contracts_with_roles(self) -> List[ContractDescriptor]:
        return [descriptor for descriptor in self.registry.contracts() if descriptor.role_names()]

    def list_roles(self, contract_id: str) -> List[str]:
        return self.registry.resolve(contract_id).role_names()

    async def resolve_role_hash(self, contract_id: str, role_name: str) -> Remote:
        descriptor = self.registry.resolve(contract_id)
        key = (descriptor.id.upper(), role_name)
        if key in self._role_hashes:
            return Remote.ok(self._role_hashes[key])

        if role_name not in descriptor.role_names():
            return Remote.err(f"{descriptor.id} has no {role_name} function")

        try:
            result = await self.gateway.read(self._chain_id(), descriptor.address, descriptor.abi, role_name)
        except (asyncio.CancelledError, InputValidationError):
            raise
        except Exception as e:
            result = Remote.err(str(e))

        if result.is_error:
            self.logger.warning(f"Could not resolve {role_name} on {descriptor.id}: {result.error}")
            return result

        role_hash = result.value
        if isinstance(role_hash, (bytes, bytearray)):
            role_hash = '0x' + bytes(role_hash).hex()
        if not is_valid_bytes32(role_hash):
            return Remote.err(f"{role_name} did not return a bytes32 role hash")

        self._role_hashes[key] = role_hash
        return Remote.ok(role_hash)

    def my_address(self) -> Optional[str]:
        return self.chain_context.account

    def multisig_address(self) -> Optional[str]:
        try:
            return self.registry.resolve(MULTISIG_CONTRACT_ID).address
        except UnknownContractError:
            return None

    @property
    def is_pending(self) -> bool:
        return self.grant is not None and self.grant.is_loading

    async def grant_role(self, contract_id: str, role_hash: Optional[str], grantee: str) -> Remote:
        """Submit grantRole(role_hash, grantee). Failures are kept in self.error, not retried."""
        require_address(grantee, 'assigneeAddress')
        if not is_valid_bytes32(role_hash):
            raise InputValidationError("Role hash is unresolved", field='role')
        if self.is_pending:
            raise InputValidationError("A role grant is already pending", field='role')

        descriptor = self.registry.resolve(contract_id)
        chain_id = self._chain_id()
        self.grant = Remote.pending()
        self.error = None
        self.logger.info(f"Granting {role_hash} on {descriptor.id} to {grantee}")

        try:
            config = self.gateway.prepare(chain_id, descriptor.abi, descriptor.address, 'grantRole', (role_hash, grantee))
            result = await self.gateway.write(config)
        except asyncio.CancelledError:
            self.grant = None
            raise
        except Exception as e:
            result = Remote.err(str(e))

        if result.is_error:
            self.error = RoleGrantError(result.error, descriptor.id)
            self.logger.error(str(self.error))
        else:
            self.logger.info(f"Role granted on {descriptor.id} (tx {result.value.tx_hash})")
        self.grant = result
        return result

    async def assign(self, contract_id: str, role_name: str, grantee: str) -> Remote:
        """Form submit: resolve the role hash, then grant. Unresolved hash blocks the grant."""
        require_address(grantee, 'assigneeAddress')
        role_hash = await self.resolve_role_hash(contract_id, role_name)
        if not role_hash.is_success:
            raise InputValidationError(f"Role hash is unresolved: {role_hash.error}", field='role')
        return await self.grant_role(contract_id, role_hash.value, grantee)

    def reset(self) -> None:
        if self.is_pending:
            raise InputValidationError("Cannot reset while a role grant is pending", field='role')
        self.grant = None
        self.error = None
