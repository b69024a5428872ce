#!/usr/bin/env python3
"""
Role Assigner
Grants a *_ROLE of a managed contract on the target chain, e.g. MINTER_ROLE of a
clone token to the token manager before mapping.

Uses the same .env settings as ima_token_mapper.py.
Run: python role_assigner.py
"""

import asyncio
from typing import Optional

from imabridge.exceptions import ImaBridgeError
from imabridge.services import RoleGrantWorkflow

from ima_token_mapper import ImaTokenMapper


def choose(prompt: str, options: list) -> Optional[str]:
    for index, option in enumerate(options, 1):
        print(f"   [{index}] {option}")
    answer = input(prompt).strip()
    if not answer.isdigit() or not 1 <= int(answer) <= len(options):
        return None
    return options[int(answer) - 1]


def choose_grantee(workflow: RoleGrantWorkflow) -> str:
    shortcuts = []
    if workflow.my_address():
        shortcuts.append(("My address", workflow.my_address()))
    if workflow.multisig_address():
        shortcuts.append(("Pre-deployed multisig", workflow.multisig_address()))
    for label, address in shortcuts:
        print(f"   {label}: {address}")

    answer = input("Assignee address (0x..., 'me' or 'multisig'): ").strip()
    if answer.lower() == 'me' and workflow.my_address():
        return workflow.my_address()
    if answer.lower() == 'multisig' and workflow.multisig_address():
        return workflow.multisig_address()
    return answer


async def main():
    """Interactive role grant on the target chain"""
    try:
        mapper = ImaTokenMapper()
    except ImaBridgeError as e:
        print(f"\n❌ CONFIGURATION ERROR: {e}")
        return

    context = mapper.chain_context(mapper.target_chain.id)
    workflow = RoleGrantWorkflow(mapper.gateway, mapper.registry, context)

    if not workflow.is_supported():
        print(f"❌ Role assignment is only available on SKALE chains ({mapper.target_chain.name} is not)")
        return

    contracts = [descriptor.id for descriptor in workflow.contracts_with_roles()]
    if not contracts:
        print("❌ No contract in the manifest exposes any *_ROLE function")
        return

    print("\n📜 Contract:")
    contract_id = choose("Select contract: ", contracts)
    if not contract_id:
        print("❌ Invalid selection")
        return

    print(f"\n🔑 Roles of {contract_id}:")
    role_name = choose("Select role: ", workflow.list_roles(contract_id))
    if not role_name:
        print("❌ Invalid selection")
        return

    role_hash = await workflow.resolve_role_hash(contract_id, role_name)
    if not role_hash.is_success:
        print(f"❌ Could not resolve {role_name}: {role_hash.error}")
        return
    print(f"   {role_name} = {role_hash.value}")

    grantee = choose_grantee(workflow)
    confirm = input(f"\n⚠️  Grant {role_name} on {contract_id} to {grantee}? (y/N): ")
    if confirm.lower() != 'y':
        print("❌ Cancelled")
        return

    try:
        result = await workflow.grant_role(contract_id, role_hash.value, grantee)
    except ImaBridgeError as e:
        print(f"❌ {e.message}")
        return

    if result.is_success:
        print(f"✅ Role assigned (tx {result.value.tx_hash})")
    else:
        print(f"❌ {workflow.error.message}")


if __name__ == "__main__":
    asyncio.run(main())
