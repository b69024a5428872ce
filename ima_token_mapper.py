#!/usr/bin/env python3
"""
IMA Token Mapper - clone token step
Registers or deploys the clone of an origin-chain ERC20 on the target chain and
checks that the clone grants MINTER_ROLE and BURNER_ROLE before mapping.

Usage:
- Set up your .env file with PRIVATE_KEY, ORIGIN_RPC_URL, TARGET_RPC_URL,
  ORIGIN_CHAIN_ID, TARGET_CHAIN_ID and CONTRACT_MANIFEST
- Run: python ima_token_mapper.py
"""

import asyncio
import logging
import os
from typing import Optional

from dotenv import load_dotenv

from imabridge.exceptions import ConfigurationError, ImaBridgeError
from imabridge.models import ChainInfo, WorkflowPath, WorkflowState
from imabridge.services import (
    ChainConnectService,
    ContractRegistry,
    StaticChainContext,
    TokenCloneWorkflow,
    Web3Gateway,
)


class ImaTokenMapper:
    """Wires the workflow to web3 using settings from the environment"""

    def __init__(self):
        load_dotenv()
        self._setup_logging()
        self._load_config()
        self._setup_web3()

        print("🌉 IMA TOKEN MAPPER")
        print("=" * 50)
        print(f"🔗 Origin: {self.origin_chain.name} ({self.origin_chain.id})")
        print(f"🎯 Target: {self.target_chain.name} ({self.target_chain.id})")
        print(f"💳 Account: {self.gateway.address}")
        print("=" * 50)

    def _setup_logging(self):
        """Setup logging"""
        os.makedirs('logs', exist_ok=True)

        self.logger = logging.getLogger('ima_bridge')
        self.logger.setLevel(logging.DEBUG)
        if self.logger.handlers:
            return

        file_handler = logging.FileHandler('logs/ima_bridge.log', encoding='utf-8')
        file_handler.setLevel(logging.DEBUG)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.INFO)
        if os.getenv('DEBUG', 'false').lower() == 'true':
            console_handler.setLevel(logging.DEBUG)

        formatter = logging.Formatter('%(asctime)s | %(levelname)s | %(message)s')
        file_handler.setFormatter(formatter)
        console_handler.setFormatter(formatter)

        self.logger.addHandler(file_handler)
        self.logger.addHandler(console_handler)

    def _load_config(self):
        """Load configuration from environment"""
        required_vars = [
            'PRIVATE_KEY', 'ORIGIN_RPC_URL', 'TARGET_RPC_URL',
            'ORIGIN_CHAIN_ID', 'TARGET_CHAIN_ID', 'CONTRACT_MANIFEST'
        ]
        missing = [var for var in required_vars if not os.getenv(var)]
        if missing:
            raise ConfigurationError(f"Missing required environment variables: {missing}")

        self.private_key = os.getenv('PRIVATE_KEY')
        self.origin_rpc_url = os.getenv('ORIGIN_RPC_URL')
        self.target_rpc_url = os.getenv('TARGET_RPC_URL')
        self.manifest_path = os.getenv('CONTRACT_MANIFEST')

        try:
            origin_id = int(os.getenv('ORIGIN_CHAIN_ID'))
            target_id = int(os.getenv('TARGET_CHAIN_ID'))
            self.gas_limit = int(os.getenv('GAS_LIMIT', '6500000'))
            self.tx_timeout = int(os.getenv('TX_TIMEOUT', '300'))
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}")

        self.origin_chain = ChainInfo(
            origin_id,
            os.getenv('ORIGIN_CHAIN_NAME', str(origin_id)),
            os.getenv('ORIGIN_NETWORK', 'skale'),
        )
        self.target_chain = ChainInfo(
            target_id,
            os.getenv('TARGET_CHAIN_NAME', str(target_id)),
            os.getenv('TARGET_NETWORK', 'skale'),
        )

    def _setup_web3(self):
        """Setup gateway, registry and chain context"""
        self.registry = ContractRegistry.from_manifest(self.manifest_path)
        self.gateway = Web3Gateway(
            {
                self.origin_chain.id: self.origin_rpc_url,
                self.target_chain.id: self.target_rpc_url,
            },
            private_key=self.private_key,
            gas_limit=self.gas_limit,
            tx_timeout=self.tx_timeout,
        )
        self.context = self.chain_context(self.origin_chain.id)

    def chain_context(self, current_chain_id: int) -> StaticChainContext:
        return StaticChainContext(
            [self.origin_chain, self.target_chain],
            current_chain_id,
            self.gateway,
            self.registry,
            account=self.gateway.address,
        )

    def new_workflow(self, origin_address: Optional[str] = None) -> TokenCloneWorkflow:
        return TokenCloneWorkflow(
            self.context,
            self.gateway,
            self.registry,
            origin_chain_id=self.origin_chain.id,
            target_chain_id=self.target_chain.id,
            origin_address=origin_address,
        )

    async def ensure_connected(self) -> bool:
        """Offer to connect the target chain when the linker does not know it yet"""
        statuses = await self.context.refresh_connections()
        if statuses.get(self.target_chain.name) == "connected":
            print(f"✅ {self.target_chain.name} already connected")
            return True

        confirm = input(f"\n⚠️  {self.target_chain.name} is not connected. Connect it now? (y/N): ")
        if confirm.lower() != 'y':
            return False

        connector = ChainConnectService(self.context)
        connected = await connector.connect(self.target_chain.name)
        if connected:
            print(f"✅ Connected {connected}")
            return True
        print(f"❌ Could not connect: {connector.connect_result.error}")
        return False


def print_state(state: WorkflowState):
    draft = state.draft
    print(f"\n📋 Stage: {state.stage.value}")
    if state.origin and state.origin.is_success:
        print(f"   Origin: {state.origin.symbol} ({state.origin.name}), {state.origin.decimals} decimals")
    if draft.symbol or draft.name:
        print(f"   Clone:  {draft.symbol} ({draft.name})")
    if draft.clone_contract_address:
        print(f"   Clone address: {draft.clone_contract_address}")
    if state.roles:
        print(f"   Minter role: {'✅' if state.roles.minter_granted else '❌'}")
        print(f"   Burner role: {'✅' if state.roles.burner_granted else '❌'}")
    for error in state.errors:
        print(f"   ❌ {error}")


async def run_pre_deployed(workflow: TokenCloneWorkflow) -> WorkflowState:
    await workflow.select_path(WorkflowPath.PRE_DEPLOYED)
    address = input("Deployed clone contract address (0x...): ").strip()
    return await workflow.enter_clone_address(address)


async def run_standard_deploy(workflow: TokenCloneWorkflow) -> WorkflowState:
    state = await workflow.select_path(WorkflowPath.STANDARD_DEPLOY)
    print_state(state)

    name = input(f"Clone name [{workflow.draft.name}]: ").strip()
    if name:
        workflow.edit_name(name)
    symbol = input(f"Clone symbol [{workflow.draft.symbol}]: ").strip()
    if symbol:
        workflow.edit_symbol(symbol)

    reason = workflow.deploy_blocked_reason()
    if reason:
        print(f"❌ Cannot deploy: {reason}")
        return workflow.state

    confirm = input("\n⚠️  This will deploy a real token contract on the target chain! Continue? (y/N): ")
    if confirm.lower() != 'y':
        print("❌ Deployment cancelled")
        return workflow.state

    while True:
        result = await workflow.deploy_clone()
        if result.is_success:
            print(f"✅ Contract successfully deployed at {result.address}")
            return workflow.state
        print(f"❌ Could not deploy the token - {result.error_reason}")
        retry = input("Reset to try again? (y/N): ")
        if retry.lower() != 'y':
            return workflow.state
        workflow.reset_deployment()


async def main():
    """Interactive clone token step"""
    try:
        mapper = ImaTokenMapper()
    except ImaBridgeError as e:
        print(f"\n❌ CONFIGURATION ERROR: {e}")
        print("   Please ensure you have a .env file with all required variables.")
        return

    if not await mapper.ensure_connected():
        return

    origin_address = input(f"\nOrigin token address on {mapper.origin_chain.name} (0x...): ").strip()
    workflow = mapper.new_workflow(origin_address)

    try:
        choice = input("[1] Clone already deployed  [2] Deploy default clone: ").strip()
        if choice == '1':
            state = await run_pre_deployed(workflow)
        else:
            state = await run_standard_deploy(workflow)

        while True:
            print_state(state)
            if state.step_ready:
                break
            retry = input("\nRe-check roles after granting them? (y/N): ")
            if retry.lower() != 'y':
                print("\n❌ Clone token is not ready for mapping.")
                return
            state = await workflow.reverify_roles()

        snapshot = workflow.advance()
        print("\n🎉 CLONE READY FOR MAPPING!")
        print(f"   Origin: {snapshot.origin_address} on {snapshot.origin_chain_id}")
        print(f"   Clone:  {snapshot.clone_address} on {snapshot.target_chain_id}")
        print(f"   Token:  {snapshot.symbol} ({snapshot.name}), {snapshot.decimals} decimals")
    except ImaBridgeError as e:
        print(f"\n❌ {e.message}")
    finally:
        workflow.close()


if __name__ == "__main__":
    asyncio.run(main())
