"""
Token clone workflow state snapshots
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple

from .deployment import DeploymentResult
from .roles import RolePair
from .standards import TokenStandard
from .token import CloneTokenDraft, TokenMetadata


class WorkflowPath(Enum):
    PRE_DEPLOYED = "preDeployed"
    STANDARD_DEPLOY = "standardDeploy"


class WorkflowStage(Enum):
    """
    SELECT_PATH -> PreDeployed:    AWAITING_ADDRESS -> VALIDATING -> READY | INVALID
                -> StandardDeploy: DERIVING_METADATA -> AWAITING_DEPLOY_OR_MANUAL_ADDRESS
                                   -> (DEPLOYING ->) VALIDATING -> READY | INVALID
    """
    SELECT_PATH = "select_path"
    AWAITING_ADDRESS = "awaiting_address"
    DERIVING_METADATA = "deriving_metadata"
    AWAITING_DEPLOY_OR_MANUAL_ADDRESS = "awaiting_deploy_or_manual_address"
    DEPLOYING = "deploying"
    VALIDATING = "validating"
    READY = "ready"
    INVALID = "invalid"


@dataclass(frozen=True)
class WorkflowState:
    """Read-only view of a workflow session"""
    path: Optional[WorkflowPath]
    stage: WorkflowStage
    draft: CloneTokenDraft
    deployment: DeploymentResult
    origin: Optional[TokenMetadata] = None
    clone: Optional[TokenMetadata] = None
    roles: Optional[RolePair] = None
    errors: Tuple[str, ...] = ()
    step_ready: bool = False


@dataclass(frozen=True)
class MappingSnapshot:
    """What the parent mapping wizard receives when the clone step completes"""
    origin_chain_id: int
    target_chain_id: int
    origin_address: str
    standard: TokenStandard
    clone_address: str
    name: Optional[str]
    symbol: Optional[str]
    decimals: Optional[int]
    roles: RolePair
    deployed: bool = False
    confirmed_at: datetime = field(default_factory=datetime.now)
