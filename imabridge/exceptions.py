"""
Exceptions for IMA token tooling

Hierarchy:
    ImaBridgeError
    ├── InputValidationError   - bad address / missing field / disabled action
    │   └── UnknownContractError - registry has no such contract
    ├── ContractReadError      - read call reverted, timed out or hit no contract
    ├── DeploymentError        - clone deploy rejected or reverted
    ├── RoleGrantError         - grantRole transaction failed
    └── ConfigurationError     - missing env vars or broken manifest
"""

from typing import Optional, Dict, Any


class ImaBridgeError(Exception):
    """Base error, carries a human readable message plus debug details"""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class InputValidationError(ImaBridgeError):
    """Caught client side before any chain call is made"""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else None
        super().__init__(message, details)
        self.field = field


class UnknownContractError(InputValidationError):
    """Contract identifier or address is not in the registry"""

    def __init__(self, identifier: str):
        super().__init__(f"Unknown contract: {identifier}", field="contract")
        self.identifier = identifier


class ContractReadError(ImaBridgeError):
    """Read call failed - the address has no matching interface or the call reverted"""

    def __init__(self, message: str, address: Optional[str] = None, method: Optional[str] = None):
        details = {}
        if address:
            details["address"] = address
        if method:
            details["method"] = method
        super().__init__(message, details)
        self.address = address
        self.method = method


class DeploymentError(ImaBridgeError):
    """Clone deployment failed, the user has to reset before trying again"""

    def __init__(self, reason: str, tx_hash: Optional[str] = None):
        details = {"tx_hash": tx_hash} if tx_hash else None
        super().__init__(f"Could not deploy the token - {reason}", details)
        self.reason = reason
        self.tx_hash = tx_hash


class RoleGrantError(ImaBridgeError):
    """grantRole transaction failed"""

    def __init__(self, reason: str, contract_id: Optional[str] = None):
        details = {"contract_id": contract_id} if contract_id else None
        super().__init__(f"Could not grant role - {reason}", details)
        self.reason = reason
        self.contract_id = contract_id


class ConfigurationError(ImaBridgeError):
    """Raised at startup only"""
