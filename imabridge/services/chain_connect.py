"""
Connect-chain onboarding step: pick a chain not yet connected and connect it
before mapping tokens to it.
"""

import logging
from typing import List, Optional

from ..exceptions import InputValidationError
from ..models import ChainInfo, Remote
from .gateway import ChainContext

NOT_CONNECTED = "none"


class ChainConnectService:
    def __init__(self, chain_context: ChainContext):
        self.chain_context = chain_context
        self.logger = logging.getLogger('ima_bridge')
        self.selected: Optional[str] = None
        self.connect_result: Optional[Remote] = None

    def available_chains(self) -> List[ChainInfo]:
        """Chains other than the current one that are not connected yet"""
        current = self.chain_context.current_chain
        return [
            chain for chain in self.chain_context.chains
            if (current is None or chain.name != current.name)
            and self.chain_context.connection_status(chain.name) == NOT_CONNECTED
        ]

    @property
    def is_pending(self) -> bool:
        return self.connect_result is not None and self.connect_result.is_loading

    def select(self, chain_name: str) -> None:
        if self.is_pending:
            raise InputValidationError("A connection is already in progress", field='chain')
        if chain_name not in [chain.name for chain in self.available_chains()]:
            raise InputValidationError(f"{chain_name} cannot be connected", field='chain')
        self.selected = chain_name

    async def connect(self, chain_name: Optional[str] = None) -> Optional[str]:
        """
        Connect the selected chain.

        Returns the chain name to open the token mapping wizard for, or None
        when the connection failed (see connect_result.error).
        """
        if chain_name is not None:
            self.select(chain_name)
        if not self.selected:
            raise InputValidationError("Select a chain to connect", field='chain')
        if self.is_pending:
            raise InputValidationError("A connection is already in progress", field='chain')

        name = self.selected
        self.connect_result = Remote.pending()
        self.logger.info(f"Connecting chain {name}")

        try:
            result = await self.chain_context.connect(name)
        except InputValidationError:
            self.connect_result = None
            raise
        except Exception as e:
            result = Remote.err(str(e))

        self.connect_result = result
        if result.is_error:
            self.logger.error(f"Could not connect {name}: {result.error}")
            return None

        self.chain_context.reset_connect(name)
        self.logger.info(f"Chain {name} connected")
        return name
