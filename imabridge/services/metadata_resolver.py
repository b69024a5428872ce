"""
Token metadata resolver - symbol, name and decimals for (address, chain).

Last request wins: a result that arrives after a newer resolve() call was
issued is returned to its caller but never becomes `current`.
"""

import asyncio
import logging
from typing import Optional

from ..abi import ERC20_METADATA_ABI
from ..cache import LookupCache
from ..exceptions import ContractReadError
from ..models import Remote, RemoteStatus, TokenMetadata
from ..validation import is_valid_address
from .gateway import ContractGateway

NOT_A_CONTRACT = "Address does not belong to a contract."


class TokenMetadataResolver:
    """One resolver per displayed token slot"""

    def __init__(self, gateway: ContractGateway, cache: Optional[LookupCache] = None):
        self.gateway = gateway
        self.cache = cache if cache is not None else LookupCache()
        self.logger = logging.getLogger('ima_bridge')
        self._seq = 0
        self._current: Optional[TokenMetadata] = None

    @property
    def current(self) -> Optional[TokenMetadata]:
        return self._current

    def reset(self) -> None:
        """Forget the current value and supersede anything still in flight"""
        self._seq += 1
        self._current = None

    async def resolve(self, address: str, chain_id: int) -> TokenMetadata:
        self._seq += 1
        seq = self._seq

        if not is_valid_address(address):
            result = TokenMetadata.failed(address or '', chain_id, "Address is invalid")
            self._current = result
            return result

        key = LookupCache.key(address, chain_id)
        cached = self.cache.get(key)
        if cached is not None:
            self._current = cached
            return cached

        self._current = TokenMetadata.loading(address, chain_id)
        ticket = self.cache.issue(key)

        result = await self._fetch(address, chain_id)

        if result.is_success:
            self.cache.store(key, ticket, result)

        if seq != self._seq:
            self.logger.debug(f"Discarding stale metadata for {address} on chain {chain_id}")
            return result

        self._current = result
        return result

    async def _read(self, chain_id: int, address: str, method: str) -> Remote:
        try:
            return await self.gateway.read(chain_id, address, ERC20_METADATA_ABI, method)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            return Remote.err(str(ContractReadError(str(e), address, method)))

    async def _fetch(self, address: str, chain_id: int) -> TokenMetadata:
        symbol, name, decimals = await asyncio.gather(
            self._read(chain_id, address, 'symbol'),
            self._read(chain_id, address, 'name'),
            self._read(chain_id, address, 'decimals'),
        )

        failed = [r for r in (symbol, name, decimals) if not r.is_success]
        if failed:
            self.logger.warning(f"Metadata read failed for {address} on chain {chain_id}: {failed[0].error}")
            return TokenMetadata.failed(address, chain_id, NOT_A_CONTRACT)

        try:
            decimals_value = int(decimals.value)
        except (TypeError, ValueError):
            return TokenMetadata.failed(address, chain_id, NOT_A_CONTRACT)

        self.logger.info(f"Resolved {symbol.value} ({name.value}) at {address} on chain {chain_id}")
        return TokenMetadata(
            address=address,
            chain_id=chain_id,
            status=RemoteStatus.SUCCESS,
            symbol=symbol.value,
            name=name.value,
            decimals=decimals_value,
        )
