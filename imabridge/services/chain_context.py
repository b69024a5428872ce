"""
Chain context for operator scripts: a fixed chain list, one signing account,
IMA connections made through TokenManagerLinker on the current chain.
"""

import logging
from typing import Dict, List, Optional

from ..abi import TOKEN_MANAGER_LINKER_ABI
from ..models import ChainInfo, Remote
from .gateway import ContractGateway
from .registry import ContractRegistry

TOKEN_MANAGER_LINKER_ID = "TOKEN_MANAGER_LINKER"


class StaticChainContext:
    def __init__(
        self,
        chains: List[ChainInfo],
        current_chain_id: int,
        gateway: ContractGateway,
        registry: ContractRegistry,
        account: Optional[str] = None
    ):
        self._chains = list(chains)
        self._current = next((c for c in self._chains if c.id == current_chain_id), None)
        self.gateway = gateway
        self.registry = registry
        self._account = account
        self.logger = logging.getLogger('ima_bridge')
        self._statuses: Dict[str, str] = {}

    @property
    def current_chain(self) -> Optional[ChainInfo]:
        return self._current

    @property
    def chains(self) -> List[ChainInfo]:
        return list(self._chains)

    @property
    def account(self) -> Optional[str]:
        return self._account

    def connection_status(self, chain_name: str) -> str:
        """none | pending | connected | error"""
        return self._statuses.get(chain_name, "none")

    async def refresh_connections(self) -> Dict[str, str]:
        """Ask TokenManagerLinker which chains are already connected"""
        if self._current is None:
            self.logger.warning("No current chain, connection status not refreshed")
            return dict(self._statuses)
        linker = self.registry.resolve(TOKEN_MANAGER_LINKER_ID)
        for chain in self._chains:
            if chain.id == self._current.id:
                continue
            result = await self.gateway.read(
                self._current.id, linker.address, TOKEN_MANAGER_LINKER_ABI, 'hasSchain', (chain.name,)
            )
            if result.is_success:
                self._statuses[chain.name] = "connected" if result.value else "none"
            else:
                self.logger.warning(f"Could not read connection status of {chain.name}: {result.error}")
        return dict(self._statuses)

    async def connect(self, chain_name: str) -> Remote:
        if self._current is None:
            return Remote.err("No current chain to connect from")
        linker = self.registry.resolve(TOKEN_MANAGER_LINKER_ID)
        self._statuses[chain_name] = "pending"
        result = None
        try:
            config = self.gateway.prepare(
                self._current.id, TOKEN_MANAGER_LINKER_ABI, linker.address, 'connectSchain', (chain_name,)
            )
            result = await self.gateway.write(config)
        except Exception as e:
            self.logger.error(f"Could not connect {chain_name}: {e}")
            result = Remote.err(str(e))
        finally:
            # never leave a connection pending, cancellation included
            self._statuses[chain_name] = "connected" if result is not None and result.is_success else "error"
        return result

    def reset_connect(self, chain_name: str) -> None:
        if self._statuses.get(chain_name) in ("pending", "error"):
            self._statuses.pop(chain_name)
