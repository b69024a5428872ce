"""
Minter/burner role verification for clone tokens.

Never raises: a failed read or a missing role both mean "not granted".
"""

import asyncio
import logging
from typing import Optional, Tuple

from ..abi import ACCESS_CONTROL_ABI
from ..exceptions import ContractReadError, InputValidationError
from ..models import RolePair, describe
from ..validation import is_valid_address
from .gateway import ContractGateway


class RoleVerifier:
    def __init__(self, gateway: ContractGateway):
        self.gateway = gateway
        self.logger = logging.getLogger('ima_bridge')

    async def check_roles(
        self,
        chain_id: int,
        standard,
        token_address: str,
        grantee: Optional[str] = None
    ) -> RolePair:
        """
        Check MINTER_ROLE and BURNER_ROLE on token_address.

        The holder checked is grantee when given, otherwise the token contract
        itself (self-custodial mint/burn).
        """
        try:
            descriptor = describe(standard)
        except InputValidationError as e:
            return RolePair(minter_error=e.message, burner_error=e.message)

        if not is_valid_address(token_address):
            return RolePair(minter_error="Address is invalid", burner_error="Address is invalid")
        if grantee is not None and not is_valid_address(grantee):
            return RolePair(minter_error="Grantee address is invalid", burner_error="Grantee address is invalid")

        holder = grantee or token_address
        minter_id = descriptor.minter_role_id
        burner_id = descriptor.burner_role_id

        (minter_granted, minter_error), (burner_granted, burner_error) = await asyncio.gather(
            self._has_role(chain_id, token_address, minter_id, holder),
            self._has_role(chain_id, token_address, burner_id, holder),
        )

        pair = RolePair(
            holder=holder,
            minter_role_id=minter_id,
            burner_role_id=burner_id,
            minter_granted=minter_granted,
            burner_granted=burner_granted,
            minter_error=minter_error,
            burner_error=burner_error,
        )
        self.logger.info(
            f"Roles on {token_address} for {holder}: "
            f"minter={'yes' if minter_granted else 'no'} burner={'yes' if burner_granted else 'no'}"
        )
        return pair

    async def _has_role(
        self,
        chain_id: int,
        token_address: str,
        role: str,
        holder: str
    ) -> Tuple[bool, Optional[str]]:
        try:
            result = await self.gateway.read(chain_id, token_address, ACCESS_CONTROL_ABI, 'hasRole', (role, holder))
        except asyncio.CancelledError:
            raise
        except Exception as e:
            error = ContractReadError(str(e), token_address, 'hasRole')
            self.logger.warning(f"hasRole read failed: {error}")
            return False, error.message

        if result.is_error:
            self.logger.warning(f"hasRole read failed on {token_address}: {result.error}")
            return False, result.error
        return bool(result.value), None
