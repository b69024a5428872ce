"""
Interfaces of the collaborators the workflow talks to.

The workflow only ever sees these protocols; Web3Gateway and
StaticChainContext are the concrete versions used by the operator scripts.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Protocol, Sequence, Tuple

from ..models import ChainInfo, Remote


@dataclass(frozen=True)
class TxConfig:
    """A prepared transaction: contract call, or deployment when bytecode is set"""
    chain_id: int
    abi: Sequence[Dict[str, Any]]
    args: Tuple[Any, ...] = ()
    address: Optional[str] = None
    function_name: Optional[str] = None
    bytecode: Optional[str] = None

    @property
    def is_deploy(self) -> bool:
        return self.bytecode is not None


@dataclass(frozen=True)
class TxReceipt:
    tx_hash: str
    success: bool
    contract_address: Optional[str] = None
    block_number: Optional[int] = None


class ContractGateway(Protocol):
    async def read(
        self,
        chain_id: int,
        address: str,
        abi: Sequence[Dict[str, Any]],
        method: str,
        args: Sequence[Any] = (),
    ) -> Remote:
        ...

    def prepare(
        self,
        chain_id: int,
        abi: Sequence[Dict[str, Any]],
        address: str,
        function_name: str,
        args: Sequence[Any] = (),
    ) -> TxConfig:
        ...

    def prepare_deploy(self, chain_id: int, artifact, args: Sequence[Any] = ()) -> TxConfig:
        ...

    async def write(self, config: TxConfig) -> Remote:
        ...


class ChainContext(Protocol):
    @property
    def current_chain(self) -> Optional[ChainInfo]:
        ...

    @property
    def chains(self) -> List[ChainInfo]:
        ...

    @property
    def account(self) -> Optional[str]:
        ...

    def connection_status(self, chain_name: str) -> str:
        ...

    async def connect(self, chain_name: str) -> Remote:
        ...

    def reset_connect(self, chain_name: str) -> None:
        ...
