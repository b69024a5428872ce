"""
Clone deployment request and result models
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .standards import TokenStandard


class DeploymentStatus(Enum):
    IDLE = "idle"
    PENDING = "pending"
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class CloneDeploymentRequest:
    """Represents a standard clone deployment request"""
    name: str
    symbol: str
    decimals: int
    chain_id: int
    standard: TokenStandard = TokenStandard.ERC20
    requested_at: datetime = field(default_factory=datetime.now)


@dataclass(frozen=True)
class DeploymentResult:
    """One per deployment attempt"""
    status: DeploymentStatus = DeploymentStatus.IDLE
    request: Optional[CloneDeploymentRequest] = None
    address: Optional[str] = None
    tx_hash: Optional[str] = None
    error_reason: Optional[str] = None
    deployed_at: Optional[datetime] = None

    @property
    def is_idle(self) -> bool:
        return self.status is DeploymentStatus.IDLE

    @property
    def is_pending(self) -> bool:
        return self.status is DeploymentStatus.PENDING

    @property
    def is_success(self) -> bool:
        return self.status is DeploymentStatus.SUCCESS

    @property
    def is_error(self) -> bool:
        return self.status is DeploymentStatus.ERROR
