"""
Chain descriptors handed out by the chain context
"""

from dataclasses import dataclass

SKALE_NETWORK = "skale"


@dataclass(frozen=True)
class ChainInfo:
    """A chain the wallet knows about"""
    id: int
    name: str
    network: str = SKALE_NETWORK  # skale, mainnet, ...

    @property
    def is_skale(self) -> bool:
        return self.network == SKALE_NETWORK
