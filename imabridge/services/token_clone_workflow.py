"""
Token clone workflow - the "clone token" step of the IMA token mapping wizard.

Two paths lead to the same gate:

    PreDeployed:    user enters an existing clone address
                    -> metadata + role check run concurrently
                    -> READY | INVALID
    StandardDeploy: origin metadata -> suggested clone name/symbol
                    -> deploy the standard template (or enter an address)
                    -> metadata + role check on the clone
                    -> READY | INVALID

READY needs clone metadata resolved AND both minter and burner roles granted.
A successful deployment on its own never makes the step ready.

Every chain result is applied only if it still matches the current input and
the session has not been closed.
"""

import asyncio
import logging
from typing import List, Optional

from ..cache import LookupCache
from ..exceptions import ImaBridgeError, InputValidationError
from ..models import (
    CloneTokenDraft,
    DeploymentResult,
    MappingSnapshot,
    RolePair,
    TokenMetadata,
    TokenStandard,
    WorkflowPath,
    WorkflowStage,
    WorkflowState,
    describe,
)
from .clone_deployer import CloneDeployer
from .clone_metadata import derive_clone_metadata
from .gateway import ChainContext, ContractGateway
from .metadata_resolver import NOT_A_CONTRACT, TokenMetadataResolver
from .registry import ContractRegistry
from .role_verifier import RoleVerifier


class TokenCloneWorkflow:
    """One session per (origin chain, target chain, origin token)"""

    def __init__(
        self,
        chain_context: ChainContext,
        gateway: ContractGateway,
        registry: ContractRegistry,
        origin_chain_id: int,
        target_chain_id: int,
        origin_address: Optional[str] = None,
        standard=TokenStandard.ERC20,
        grantee: Optional[str] = None,
        cache: Optional[LookupCache] = None
    ):
        self.chain_context = chain_context
        self.gateway = gateway
        self.registry = registry
        self.origin_chain_id = origin_chain_id
        self.target_chain_id = target_chain_id
        self.origin_address = origin_address
        self.standard = TokenStandard.parse(standard)
        self.cache = cache if cache is not None else LookupCache()
        self.logger = logging.getLogger('ima_bridge')

        self.origin_resolver = TokenMetadataResolver(gateway, self.cache)
        self.clone_resolver = TokenMetadataResolver(gateway, self.cache)
        self.role_verifier = RoleVerifier(gateway)
        self.grantee = grantee if grantee is not None else self._default_grantee()

        self._tasks = set()
        self._generation = 0
        self._closed = False
        self._start_session()

    def _start_session(self) -> None:
        self.path: Optional[WorkflowPath] = None
        self.stage = WorkflowStage.SELECT_PATH
        self.draft = CloneTokenDraft()
        self.deployer = CloneDeployer(self.gateway, self.registry, self.target_chain_id)
        self.roles: Optional[RolePair] = None
        self._validation_seq = 0
        self.clone_resolver.reset()

    def _default_grantee(self) -> Optional[str]:
        """The IMA token manager for the standard, when the registry knows it"""
        token_manager_id = describe(self.standard).token_manager_id
        if self.registry.has(token_manager_id):
            return self.registry.resolve(token_manager_id).address
        return None

    # ------------------------------------------------------------------
    # Session plumbing
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def _ensure_open(self) -> None:
        if self._closed:
            raise InputValidationError("Workflow session is closed")

    async def _run(self, coro):
        """Track in-flight work so close() can cancel it"""
        self._ensure_open()
        generation = self._generation
        task = asyncio.ensure_future(coro)
        self._tasks.add(task)
        try:
            return await task
        except asyncio.CancelledError:
            # cancelled by close()/reset(), not by our caller
            if task.cancelled() and (self._closed or generation != self._generation):
                return None
            raise
        finally:
            self._tasks.discard(task)

    def _cancel_in_flight(self) -> None:
        self._generation += 1
        for task in list(self._tasks):
            task.cancel()

    def close(self) -> None:
        """User navigated away - cancel everything, ignore late results"""
        if self._closed:
            return
        self._closed = True
        self._cancel_in_flight()
        self.origin_resolver.reset()
        self.clone_resolver.reset()
        self.logger.info("Token clone workflow closed")

    def reset(self) -> None:
        """Restart the wizard step from path selection"""
        self._ensure_open()
        self._cancel_in_flight()
        self._start_session()
        self.logger.info("Token clone workflow restarted")

    def _target_name(self) -> str:
        for chain in self.chain_context.chains:
            if chain.id == self.target_chain_id:
                return chain.name
        return str(self.target_chain_id)

    def _require_path(self, *allowed: WorkflowPath) -> None:
        if self.path is None:
            raise InputValidationError("Choose between a deployed contract and a standard deploy first", field='path')
        if allowed and self.path not in allowed:
            raise InputValidationError(f"Not available on the {self.path.value} path", field='path')

    # ------------------------------------------------------------------
    # Origin token + derivation
    # ------------------------------------------------------------------

    async def select_path(self, path) -> WorkflowState:
        self._ensure_open()
        path = WorkflowPath(path)
        if path is not self.path:
            self._cancel_in_flight()
            self._start_session()
            self.path = path
        self.stage = (
            WorkflowStage.AWAITING_ADDRESS if path is WorkflowPath.PRE_DEPLOYED
            else WorkflowStage.DERIVING_METADATA
        )
        self.logger.info(f"Clone path selected: {path.value}")
        if self.origin_address:
            await self.refresh_origin()
        return self.state

    async def set_origin_address(self, address: str) -> WorkflowState:
        self._ensure_open()
        self.origin_address = address
        await self.refresh_origin()
        return self.state

    async def refresh_origin(self) -> Optional[TokenMetadata]:
        if not self.origin_address:
            raise InputValidationError("Origin token address is required", field='originContractAddress')
        metadata = await self._run(self.origin_resolver.resolve(self.origin_address, self.origin_chain_id))
        if self._closed or metadata is not self.origin_resolver.current:
            return metadata
        if self.path is WorkflowPath.STANDARD_DEPLOY:
            self._apply_derivation(metadata)
        return metadata

    def _apply_derivation(self, metadata: TokenMetadata) -> None:
        if self.draft.submitted or self.draft.metadata_fixed:
            return
        if not metadata.is_success:
            self.draft.apply_suggestion(None, None)
            self.draft.decimals = None
            return
        suggestion = derive_clone_metadata(metadata)
        self.draft.apply_suggestion(suggestion.name, suggestion.symbol)
        self.draft.decimals = metadata.decimals
        if self.stage is WorkflowStage.DERIVING_METADATA:
            self.stage = WorkflowStage.AWAITING_DEPLOY_OR_MANUAL_ADDRESS
        self.logger.info(f"Suggested clone {suggestion.name} ({suggestion.symbol}), {metadata.decimals} decimals")

    def edit_name(self, name: str) -> None:
        self._require_path(WorkflowPath.STANDARD_DEPLOY)
        self.draft.edit_name(name)

    def edit_symbol(self, symbol: str) -> None:
        self._require_path(WorkflowPath.STANDARD_DEPLOY)
        self.draft.edit_symbol(symbol)

    # ------------------------------------------------------------------
    # Clone address: manual entry or deployment
    # ------------------------------------------------------------------

    async def enter_clone_address(self, address: str) -> WorkflowState:
        """Manual address entry; permanently disables deploy-then-fill"""
        self._ensure_open()
        self._require_path()
        if not address:
            raise InputValidationError(
                f"Fill address for cloned token on {self._target_name()}", field='cloneContractAddress'
            )
        self.draft.set_address(address)
        return await self.validate()

    def clear_clone_address(self) -> None:
        self._ensure_open()
        self.draft.clear_address()
        self._validation_seq += 1
        self.clone_resolver.reset()
        self.roles = None
        self.stage = (
            WorkflowStage.AWAITING_ADDRESS if self.path is WorkflowPath.PRE_DEPLOYED
            else WorkflowStage.AWAITING_DEPLOY_OR_MANUAL_ADDRESS
        )

    def deploy_blocked_reason(self) -> Optional[str]:
        if self.path is not WorkflowPath.STANDARD_DEPLOY:
            return "Standard deploy path not selected"
        return self.deployer.blocked_reason(
            self.draft.name, self.draft.symbol, self.draft.decimals,
            manual_override=self.draft.manual_override, standard=self.standard
        )

    @property
    def can_deploy(self) -> bool:
        return self.deploy_blocked_reason() is None

    async def deploy_clone(self) -> DeploymentResult:
        """Explicit deploy action. Role verification starts only after success."""
        self._ensure_open()
        self._require_path(WorkflowPath.STANDARD_DEPLOY)
        if self.draft.manual_override:
            raise InputValidationError(
                "A manually entered clone address takes precedence over deployment",
                field='cloneContractAddress'
            )

        previous_stage = self.stage
        self.stage = WorkflowStage.DEPLOYING
        try:
            result = await self._run(
                self.deployer.deploy(self.draft.name, self.draft.symbol, self.draft.decimals, self.standard)
            )
        except ImaBridgeError:
            self.stage = previous_stage
            raise

        if self._closed or result is None:
            return self.deployer.result

        if result.is_success:
            if self.draft.fill_deployed_address(result.address):
                await self.validate()
            else:
                self.logger.info(f"Keeping manually entered address, deployed clone at {result.address} ignored")
                if self.stage is WorkflowStage.DEPLOYING:
                    self.stage = WorkflowStage.AWAITING_DEPLOY_OR_MANUAL_ADDRESS
        elif self.stage is WorkflowStage.DEPLOYING:
            self.stage = WorkflowStage.AWAITING_DEPLOY_OR_MANUAL_ADDRESS
        return result

    def reset_deployment(self) -> None:
        self._ensure_open()
        self.deployer.reset()

    # ------------------------------------------------------------------
    # Validation gate
    # ------------------------------------------------------------------

    async def validate(self) -> WorkflowState:
        """Resolve clone metadata and check roles concurrently, then decide READY/INVALID"""
        self._ensure_open()
        address = self.draft.clone_contract_address
        if not address:
            raise InputValidationError(
                f"Fill address for cloned token on {self._target_name()}", field='cloneContractAddress'
            )

        self._validation_seq += 1
        seq = self._validation_seq
        self.stage = WorkflowStage.VALIDATING
        self.roles = None

        outcome = await self._run(self._check_clone(address))

        if self._closed or outcome is None:
            return self.state
        if seq != self._validation_seq or address != self.draft.clone_contract_address:
            self.logger.debug(f"Discarding stale validation for {address}")
            return self.state

        metadata, roles = outcome
        self.roles = roles
        self.stage = WorkflowStage.READY if metadata.is_success and roles.ready else WorkflowStage.INVALID
        self.logger.info(f"Clone {address} validated: {self.stage.value}")
        return self.state

    async def _check_clone(self, address: str):
        return await asyncio.gather(
            self.clone_resolver.resolve(address, self.target_chain_id),
            self.role_verifier.check_roles(self.target_chain_id, self.standard, address, self.grantee),
        )

    async def reverify_roles(self) -> WorkflowState:
        """Re-run the gate, e.g. after roles were granted on the clone"""
        return await self.validate()

    @property
    def errors(self) -> List[str]:
        errors = []
        origin = self.origin_resolver.current
        if self.path is WorkflowPath.STANDARD_DEPLOY and origin is not None and origin.is_error:
            errors.append(f"Origin token: {origin.error}")

        deployment = self.deployer.result
        if deployment.is_error:
            errors.append(f"Could not deploy the token - {deployment.error_reason}")

        clone = self.clone_resolver.current
        if clone is not None and not clone.is_loading:
            if clone.is_error:
                errors.append(NOT_A_CONTRACT)
            elif self.roles is not None and not self.roles.ready:
                errors.append(self.roles.describe_missing())
        return errors

    @property
    def is_ready(self) -> bool:
        clone = self.clone_resolver.current
        return (
            self.stage is WorkflowStage.READY
            and clone is not None
            and clone.is_success
            and clone.matches(self.draft.clone_contract_address, self.target_chain_id)
            and self.roles is not None
            and self.roles.ready
        )

    @property
    def state(self) -> WorkflowState:
        return WorkflowState(
            path=self.path,
            stage=self.stage,
            draft=self.draft.copy(),
            deployment=self.deployer.result,
            origin=self.origin_resolver.current,
            clone=self.clone_resolver.current,
            roles=self.roles,
            errors=tuple(self.errors),
            step_ready=self.is_ready,
        )

    def advance(self) -> MappingSnapshot:
        """Hand the confirmed clone to the parent mapping wizard"""
        self._ensure_open()
        if not self.is_ready:
            raise InputValidationError(
                '; '.join(self.errors) or "Clone token is not ready for mapping", field='cloneContractAddress'
            )
        self.draft.submitted = True
        clone = self.clone_resolver.current
        deployed = self.deployer.result.is_success and self.draft.address_locked
        return MappingSnapshot(
            origin_chain_id=self.origin_chain_id,
            target_chain_id=self.target_chain_id,
            origin_address=self.origin_address or '',
            standard=self.standard,
            clone_address=self.draft.clone_contract_address,
            name=clone.name,
            symbol=clone.symbol,
            decimals=clone.decimals,
            roles=self.roles,
            deployed=deployed,
        )
