"""
web3.py implementation of the contract gateway.

One AsyncWeb3 connection per configured chain. Without a private key the
gateway runs read-only and every write comes back as an error.
"""

import asyncio
import logging
import time
from typing import Any, Dict, Optional, Sequence

from eth_account import Account
from eth_utils import to_checksum_address
from web3 import AsyncWeb3, Web3
from web3.exceptions import ContractLogicError

from ..exceptions import InputValidationError
from ..models import Remote
from .gateway import TxConfig, TxReceipt


class Web3Gateway:
    def __init__(
        self,
        rpc_urls: Dict[int, str],
        private_key: Optional[str] = None,
        gas_limit: int = 6500000,
        tx_timeout: int = 300
    ):
        self.logger = logging.getLogger('ima_bridge')
        self.gas_limit = gas_limit
        self.tx_timeout = tx_timeout
        self._connections: Dict[int, AsyncWeb3] = {
            chain_id: AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(url))
            for chain_id, url in rpc_urls.items()
        }

        if private_key:
            if not private_key.startswith('0x'):
                private_key = '0x' + private_key
            self.account = Account.from_key(private_key)
            self.logger.info(f"Signing account: {self.account.address}")
        else:
            self.account = None
            self.logger.warning("No private key - gateway is read-only")

        # Nonce tracking per chain, for back-to-back transactions
        self.nonce_lock = asyncio.Lock()
        self._last_nonce: Dict[int, int] = {}
        self._last_nonce_time: Dict[int, float] = {}

    @property
    def address(self) -> Optional[str]:
        return self.account.address if self.account else None

    def w3(self, chain_id: int) -> AsyncWeb3:
        connection = self._connections.get(chain_id)
        if connection is None:
            raise InputValidationError(f"No RPC configured for chain {chain_id}", field='chain')
        return connection

    @staticmethod
    def _reason(error: Exception) -> str:
        if isinstance(error, ContractLogicError):
            return error.message or "execution reverted"
        return str(error) or error.__class__.__name__

    async def read(
        self,
        chain_id: int,
        address: str,
        abi: Sequence[Dict[str, Any]],
        method: str,
        args: Sequence[Any] = ()
    ) -> Remote:
        try:
            contract = self.w3(chain_id).eth.contract(address=to_checksum_address(address), abi=abi)
            value = await getattr(contract.functions, method)(*args).call()
        except InputValidationError:
            raise
        except Exception as e:
            self.logger.debug(f"Read {method} on {address} (chain {chain_id}) failed: {e}")
            return Remote.err(self._reason(e))
        if isinstance(value, (bytes, bytearray)):
            value = Web3.to_hex(value)
        return Remote.ok(value)

    def prepare(
        self,
        chain_id: int,
        abi: Sequence[Dict[str, Any]],
        address: str,
        function_name: str,
        args: Sequence[Any] = ()
    ) -> TxConfig:
        return TxConfig(
            chain_id=chain_id,
            abi=abi,
            args=tuple(args),
            address=to_checksum_address(address),
            function_name=function_name,
        )

    def prepare_deploy(self, chain_id: int, artifact, args: Sequence[Any] = ()) -> TxConfig:
        return TxConfig(chain_id=chain_id, abi=artifact.abi, args=tuple(args), bytecode=artifact.bytecode)

    async def _next_nonce(self, w3: AsyncWeb3, chain_id: int) -> int:
        async with self.nonce_lock:
            now = time.time()
            last = self._last_nonce.get(chain_id)
            if last is not None and (now - self._last_nonce_time.get(chain_id, 0)) < 5:
                nonce = last + 1
            else:
                nonce = await w3.eth.get_transaction_count(self.account.address, 'pending')
            self._last_nonce[chain_id] = nonce
            self._last_nonce_time[chain_id] = now
            return nonce

    async def _fee_params(self, w3: AsyncWeb3) -> Dict[str, Any]:
        latest_block = await w3.eth.get_block('latest')
        base_fee = latest_block.get('baseFeePerGas')
        if base_fee is None:
            # SKALE chains and other legacy-fee chains
            return {'gasPrice': await w3.eth.gas_price}
        max_priority_fee = Web3.to_wei(1, 'gwei')
        return {
            'maxFeePerGas': int(base_fee * 1.2) + max_priority_fee,
            'maxPriorityFeePerGas': max_priority_fee,
            'type': 2,
        }

    async def write(self, config: TxConfig) -> Remote:
        if self.account is None:
            return Remote.err("No signing key configured - gateway is read-only")

        try:
            w3 = self.w3(config.chain_id)
            if config.is_deploy:
                call = w3.eth.contract(abi=config.abi, bytecode=config.bytecode).constructor(*config.args)
                label = "deployment"
            else:
                contract = w3.eth.contract(address=config.address, abi=config.abi)
                call = getattr(contract.functions, config.function_name)(*config.args)
                label = config.function_name

            tx_params = {
                'from': self.account.address,
                'gas': self.gas_limit,
                'chainId': config.chain_id,
                'nonce': await self._next_nonce(w3, config.chain_id),
            }
            tx_params.update(await self._fee_params(w3))

            tx = await call.build_transaction(tx_params)
            signed = self.account.sign_transaction(tx)
            tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
            tx_hash_hex = Web3.to_hex(tx_hash)
            self.logger.info(f"{label} sent on chain {config.chain_id}: {tx_hash_hex}")

            receipt = await w3.eth.wait_for_transaction_receipt(tx_hash, timeout=self.tx_timeout)
        except InputValidationError:
            raise
        except Exception as e:
            reason = self._reason(e)
            self.logger.error(f"Transaction failed on chain {config.chain_id}: {reason}")
            return Remote.err(reason)

        if receipt['status'] != 1:
            return Remote.err(f"Transaction reverted: {tx_hash_hex}")

        return Remote.ok(TxReceipt(
            tx_hash=tx_hash_hex,
            success=True,
            contract_address=receipt.get('contractAddress'),
            block_number=receipt.get('blockNumber'),
        ))
