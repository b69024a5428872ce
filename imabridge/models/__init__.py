"""
Data models for the token clone tooling
"""

from .result import Remote, RemoteStatus
from .chain import ChainInfo, SKALE_NETWORK
from .token import TokenMetadata, CloneTokenDraft
from .roles import RolePair
from .standards import TokenStandard, StandardDescriptor, STANDARDS, describe, role_id
from .deployment import CloneDeploymentRequest, DeploymentResult, DeploymentStatus
from .workflow import WorkflowPath, WorkflowStage, WorkflowState, MappingSnapshot

__all__ = [
    "Remote",
    "RemoteStatus",
    "ChainInfo",
    "SKALE_NETWORK",
    "TokenMetadata",
    "CloneTokenDraft",
    "RolePair",
    "TokenStandard",
    "StandardDescriptor",
    "STANDARDS",
    "describe",
    "role_id",
    "CloneDeploymentRequest",
    "DeploymentResult",
    "DeploymentStatus",
    "WorkflowPath",
    "WorkflowStage",
    "WorkflowState",
    "MappingSnapshot",
]
