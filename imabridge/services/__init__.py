"""
Services for the IMA token tooling

- TokenMetadataResolver: symbol/name/decimals with last-request-wins
- RoleVerifier: minter/burner role check
- CloneDeployer: standard clone deployment
- TokenCloneWorkflow: the clone token wizard step
- RoleGrantWorkflow: grant roles on managed contracts
- ChainConnectService: connect-chain onboarding
- Web3Gateway / StaticChainContext: web3.py backed collaborators
"""

from .gateway import ChainContext, ContractGateway, TxConfig, TxReceipt
from .registry import ContractArtifact, ContractDescriptor, ContractRegistry
from .clone_metadata import CloneSuggestion, derive_clone_metadata, derive_name, derive_symbol
from .metadata_resolver import NOT_A_CONTRACT, TokenMetadataResolver
from .role_verifier import RoleVerifier
from .clone_deployer import CloneDeployer
from .token_clone_workflow import TokenCloneWorkflow
from .role_grant import RoleGrantWorkflow
from .chain_connect import ChainConnectService
from .web3_gateway import Web3Gateway
from .chain_context import StaticChainContext

__all__ = [
    "ChainContext",
    "ContractGateway",
    "TxConfig",
    "TxReceipt",
    "ContractArtifact",
    "ContractDescriptor",
    "ContractRegistry",
    "CloneSuggestion",
    "derive_clone_metadata",
    "derive_name",
    "derive_symbol",
    "NOT_A_CONTRACT",
    "TokenMetadataResolver",
    "RoleVerifier",
    "CloneDeployer",
    "TokenCloneWorkflow",
    "RoleGrantWorkflow",
    "ChainConnectService",
    "Web3Gateway",
    "StaticChainContext",
]
