"""
Minter/burner role pair for a clone token
"""

from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class RolePair:
    """Result of one role check; ready only when both roles are granted"""
    holder: Optional[str] = None
    minter_role_id: Optional[str] = None
    burner_role_id: Optional[str] = None
    minter_granted: bool = False
    burner_granted: bool = False
    minter_error: Optional[str] = None
    burner_error: Optional[str] = None

    @property
    def ready(self) -> bool:
        return self.minter_granted and self.burner_granted

    @property
    def missing_roles(self) -> List[str]:
        missing = []
        if not self.minter_granted:
            missing.append('minter')
        if not self.burner_granted:
            missing.append('burner')
        return missing

    def describe_missing(self) -> Optional[str]:
        """User facing message naming the absent role(s), None when ready"""
        if self.ready:
            return None
        mintable = '✓' if self.minter_granted else '✗'
        burnable = '✓' if self.burner_granted else '✗'
        roles = ' and '.join(self.missing_roles)
        return (
            f"Contract is not using required OpenZeppelin access control: "
            f"{mintable} Mintable | {burnable} Burnable (missing {roles} role)"
        )
