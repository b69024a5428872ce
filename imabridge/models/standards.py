"""
Supported token standards and what the bridge needs from each of them
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from web3 import Web3

from ..exceptions import ConfigurationError, InputValidationError


class TokenStandard(Enum):
    ERC20 = "erc20"
    ERC721 = "erc721"
    ERC1155 = "erc1155"

    @classmethod
    def parse(cls, value) -> "TokenStandard":
        """Accept a TokenStandard or a case-insensitive name like 'ERC20'"""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise InputValidationError(f"Unsupported token standard: {value}", field='standard')


def role_id(role_name: str) -> str:
    """OpenZeppelin role identifier: keccak256 of the role name"""
    return Web3.to_hex(Web3.keccak(text=role_name))


@dataclass(frozen=True)
class StandardDescriptor:
    standard: TokenStandard
    token_manager_id: str  # registry id of the IMA token manager that mints/burns clones
    clone_artifact: Optional[str] = None  # deploy template, None when standard deploy is unsupported
    minter_role: str = "MINTER_ROLE"
    burner_role: str = "BURNER_ROLE"

    @property
    def minter_role_id(self) -> str:
        return role_id(self.minter_role)

    @property
    def burner_role_id(self) -> str:
        return role_id(self.burner_role)

    @property
    def supports_deploy(self) -> bool:
        return self.clone_artifact is not None


STANDARDS: Dict[TokenStandard, StandardDescriptor] = {
    TokenStandard.ERC20: StandardDescriptor(
        TokenStandard.ERC20, "TOKEN_MANAGER_ERC20", clone_artifact="ERC20OnChain"
    ),
    TokenStandard.ERC721: StandardDescriptor(TokenStandard.ERC721, "TOKEN_MANAGER_ERC721"),
    TokenStandard.ERC1155: StandardDescriptor(TokenStandard.ERC1155, "TOKEN_MANAGER_ERC1155"),
}


def _check_standards() -> None:
    missing = [s.value for s in TokenStandard if s not in STANDARDS]
    if missing:
        raise ConfigurationError(f"No descriptor for token standards: {missing}")


_check_standards()


def describe(standard) -> StandardDescriptor:
    return STANDARDS[TokenStandard.parse(standard)]
