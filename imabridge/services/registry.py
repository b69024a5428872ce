"""
Contract registry: managed contracts and deploy artifacts by identifier.

Entries are validated when the registry is built, so lookups never hand out
a descriptor with a malformed address or ABI.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..exceptions import ConfigurationError, UnknownContractError
from ..validation import is_valid_address


@dataclass(frozen=True)
class ContractDescriptor:
    id: str
    address: str
    abi: List[Dict[str, Any]] = field(default_factory=list)

    def function_names(self) -> List[str]:
        return [entry['name'] for entry in self.abi if entry.get('type') == 'function' and entry.get('name')]

    def role_names(self) -> List[str]:
        """Functions following the *_ROLE naming convention"""
        return [name for name in self.function_names() if '_ROLE' in name]


@dataclass(frozen=True)
class ContractArtifact:
    """ABI + creation bytecode of a deployable template"""
    name: str
    abi: List[Dict[str, Any]]
    bytecode: str

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for entry in self.abi:
            if entry.get('type') == 'constructor':
                return entry.get('inputs', [])
        return []


def _check_abi(owner: str, abi) -> None:
    if not isinstance(abi, list) or not all(isinstance(e, dict) and 'type' in e for e in abi):
        raise ConfigurationError(f"Invalid ABI for {owner}")


class ContractRegistry:
    """Lookup table from contract id (or address) to a typed descriptor"""

    def __init__(
        self,
        contracts: Optional[Dict[str, ContractDescriptor]] = None,
        artifacts: Optional[Dict[str, ContractArtifact]] = None
    ):
        self.logger = logging.getLogger('ima_bridge')
        self._contracts: Dict[str, ContractDescriptor] = {}
        self._artifacts: Dict[str, ContractArtifact] = {}

        for contract_id, descriptor in (contracts or {}).items():
            if not is_valid_address(descriptor.address):
                raise ConfigurationError(f"Invalid address for {contract_id}: {descriptor.address}")
            _check_abi(contract_id, descriptor.abi)
            self._contracts[contract_id.upper()] = descriptor

        for name, artifact in (artifacts or {}).items():
            _check_abi(name, artifact.abi)
            if not isinstance(artifact.bytecode, str) or not artifact.bytecode.startswith('0x'):
                raise ConfigurationError(f"Invalid bytecode for artifact {name}")
            self._artifacts[name] = artifact

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractRegistry":
        """Build from {"contracts": {id: {address, abi}}, "artifacts": {name: {abi, bytecode}}}"""
        try:
            contracts = {
                contract_id: ContractDescriptor(contract_id, entry['address'], entry.get('abi', []))
                for contract_id, entry in data.get('contracts', {}).items()
            }
            artifacts = {
                name: ContractArtifact(name, entry['abi'], entry['bytecode'])
                for name, entry in data.get('artifacts', {}).items()
            }
        except (KeyError, TypeError, AttributeError) as e:
            raise ConfigurationError(f"Malformed contract manifest: {e}")
        return cls(contracts, artifacts)

    @classmethod
    def from_manifest(cls, path) -> "ContractRegistry":
        path = Path(path)
        if not path.exists():
            raise ConfigurationError(f"Contract manifest not found: {path}")
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Contract manifest is not valid JSON: {e}")
        registry = cls.from_dict(data)
        registry.logger.info(
            f"Loaded {len(registry._contracts)} contracts and {len(registry._artifacts)} artifacts from {path}"
        )
        return registry

    def resolve(self, identifier: str) -> ContractDescriptor:
        """Find a contract by id or by address"""
        if not identifier:
            raise UnknownContractError(str(identifier))
        descriptor = self._contracts.get(identifier.upper())
        if descriptor:
            return descriptor
        contract_id = self.contract_id_from_address(identifier)
        if contract_id:
            return self._contracts[contract_id]
        raise UnknownContractError(identifier)

    def contract_id_from_address(self, address: str) -> Optional[str]:
        if not is_valid_address(address):
            return None
        for contract_id, descriptor in self._contracts.items():
            if descriptor.address.lower() == address.lower():
                return contract_id
        return None

    def has(self, identifier: str) -> bool:
        try:
            self.resolve(identifier)
            return True
        except UnknownContractError:
            return False

    def contracts(self) -> List[ContractDescriptor]:
        return list(self._contracts.values())

    def artifact(self, name: str) -> ContractArtifact:
        artifact = self._artifacts.get(name)
        if artifact is None:
            raise UnknownContractError(name)
        return artifact
