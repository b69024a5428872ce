"""
Standard clone deployer - idle -> pending -> success | error.

A failed attempt stays failed until reset() is called; deploy() never retries
on its own.
"""

import asyncio
import logging
from datetime import datetime
from typing import Optional

from ..exceptions import DeploymentError, InputValidationError
from ..models import (
    CloneDeploymentRequest,
    DeploymentResult,
    DeploymentStatus,
    Remote,
    TokenStandard,
    describe,
)
from ..validation import is_valid_address
from .gateway import ContractGateway
from .registry import ContractRegistry


class CloneDeployer:
    def __init__(self, gateway: ContractGateway, registry: ContractRegistry, chain_id: int):
        self.gateway = gateway
        self.registry = registry
        self.chain_id = chain_id
        self.logger = logging.getLogger('ima_bridge')
        self._result = DeploymentResult()

    @property
    def result(self) -> DeploymentResult:
        return self._result

    def blocked_reason(
        self,
        name: Optional[str],
        symbol: Optional[str],
        decimals: Optional[int],
        manual_override: bool = False,
        standard=TokenStandard.ERC20
    ) -> Optional[str]:
        """Why deploy is disabled right now, None when it is allowed"""
        if self._result.is_pending:
            return "Deployment already in progress"
        if self._result.is_error:
            return "Reset the failed deployment to try again"
        if self._result.is_success:
            return "Clone already deployed"
        if manual_override:
            return "A manually entered clone address takes precedence over deployment"
        missing = [label for label, value in (('name', name), ('symbol', symbol)) if not value]
        if decimals is None:
            missing.append('decimals')
        if missing:
            return f"Missing clone token fields: {', '.join(missing)}"
        if not describe(standard).supports_deploy:
            return f"Standard deploy is not available for {TokenStandard.parse(standard).value}"
        return None

    def can_deploy(self, name, symbol, decimals, manual_override: bool = False, standard=TokenStandard.ERC20) -> bool:
        return self.blocked_reason(name, symbol, decimals, manual_override, standard) is None

    async def deploy(
        self,
        name: str,
        symbol: str,
        decimals: int,
        standard=TokenStandard.ERC20
    ) -> DeploymentResult:
        """Deploy the standard clone template; chain failures end up in result, not raised"""
        reason = self.blocked_reason(name, symbol, decimals, standard=standard)
        if reason:
            if self._result.is_error:
                raise DeploymentError(reason)
            raise InputValidationError(reason, field='deploy')

        standard = TokenStandard.parse(standard)
        artifact = self.registry.artifact(describe(standard).clone_artifact)
        request = CloneDeploymentRequest(
            name=name, symbol=symbol, decimals=int(decimals), chain_id=self.chain_id, standard=standard
        )

        # Templates take (name, symbol) or (name, symbol, decimals)
        args = (name, symbol, int(decimals)) if len(artifact.constructor_inputs()) >= 3 else (name, symbol)

        self.logger.info(f"Deploying {artifact.name} clone {name} ({symbol}) on chain {self.chain_id}")
        self._result = DeploymentResult(status=DeploymentStatus.PENDING, request=request)

        try:
            config = self.gateway.prepare_deploy(self.chain_id, artifact, args)
            receipt = await self.gateway.write(config)
        except asyncio.CancelledError:
            self._result = DeploymentResult()
            raise
        except Exception as e:
            receipt = Remote.err(str(e))

        if receipt.is_error:
            self.logger.error(f"Clone deployment failed: {receipt.error}")
            self._result = DeploymentResult(
                status=DeploymentStatus.ERROR, request=request, error_reason=receipt.error
            )
            return self._result

        tx = receipt.value
        if not tx.contract_address or not is_valid_address(tx.contract_address):
            self.logger.error(f"Deployment receipt {tx.tx_hash} has no contract address")
            self._result = DeploymentResult(
                status=DeploymentStatus.ERROR,
                request=request,
                tx_hash=tx.tx_hash,
                error_reason="Transaction receipt has no contract address",
            )
            return self._result

        self.logger.info(f"Clone deployed at {tx.contract_address} (tx {tx.tx_hash})")
        self._result = DeploymentResult(
            status=DeploymentStatus.SUCCESS,
            request=request,
            address=tx.contract_address,
            tx_hash=tx.tx_hash,
            deployed_at=datetime.now(),
        )
        return self._result

    def reset(self) -> None:
        """Explicit user reset after a failure"""
        if self._result.is_pending:
            raise InputValidationError("Cannot reset while a deployment is pending", field='deploy')
        if self._result.is_error:
            self.logger.info("Deployment reset to idle")
            self._result = DeploymentResult()
