"""
In-memory stand-ins for the chain: a contract gateway and a wallet/chain context
"""

import asyncio
from typing import Dict, List, Optional, Set, Tuple

from imabridge.abi import TOKEN_MANAGER_LINKER_ABI
from imabridge.models import ChainInfo, Remote, role_id
from imabridge.services import TxConfig, TxReceipt

EUROPA = ChainInfo(2046399126, "elated-tan-skat")
CALYPSO = ChainInfo(1564830818, "honorable-steel-rasalhague")
NEBULA = ChainInfo(1482601649, "green-giddy-denebola")
SEPOLIA = ChainInfo(11155111, "sepolia", network="ethereum")

ORIGIN_TOKEN = "0x" + "11" * 20
CLONE_TOKEN = "0x" + "22" * 20
DEPLOYED_TOKEN = "0x" + "33" * 20
OTHER_TOKEN = "0x" + "55" * 20
ACCOUNT = "0x" + "aa" * 20
GRANTEE = "0x" + "bb" * 20

TOKEN_MANAGER_LINKER = "0xD2aAA008" + "0" * 32
TOKEN_MANAGER_ERC20 = "0xD2aAA005" + "0" * 32
CONFIG_CONTROLLER = "0xD2002000" + "0" * 30 + "D2"
MULTISIG_WALLET = "0xD2445190" + "0" * 32

MINTER_ROLE = role_id("MINTER_ROLE")
BURNER_ROLE = role_id("BURNER_ROLE")


class FakeGateway:
    """
    Answers read calls from dictionaries and applies writes to them.

    Reads against an address in read_gates wait for the event to be set, so a
    test can hold one request back while a newer one completes.
    """

    def __init__(self):
        self.tokens: Dict[Tuple[int, str], Dict] = {}
        self.roles: Set[Tuple[int, str, str, str]] = set()
        self.role_functions: Dict[Tuple[str, str], object] = {}
        self.linked: Set[str] = set()
        self.read_gates: Dict[str, asyncio.Event] = {}
        self.read_errors: Dict[str, str] = {}
        self.reads: List[Tuple[int, str, str, tuple]] = []
        self.writes: List[TxConfig] = []
        self.deploy_address = DEPLOYED_TOKEN
        self.deploy_error: Optional[str] = None
        self.write_error: Optional[str] = None
        self.write_gate: Optional[asyncio.Event] = None

    def add_token(self, chain_id: int, address: str, symbol: str, name: str, decimals: int = 18) -> None:
        self.tokens[(chain_id, address.lower())] = {'symbol': symbol, 'name': name, 'decimals': decimals}

    def grant(self, chain_id: int, token: str, role: str, holder: str) -> None:
        self.roles.add((chain_id, token.lower(), role, holder.lower()))

    def reads_of(self, method: str) -> int:
        return len([call for call in self.reads if call[2] == method])

    async def read(self, chain_id, address, abi, method, args=()):
        self.reads.append((chain_id, address.lower(), method, tuple(args)))
        gate = self.read_gates.get(address.lower())
        if gate is not None:
            await gate.wait()
        else:
            await asyncio.sleep(0)

        if address.lower() in self.read_errors:
            return Remote.err(self.read_errors[address.lower()])

        token = self.tokens.get((chain_id, address.lower()))
        if method in ('symbol', 'name', 'decimals'):
            if token is None:
                return Remote.err("execution reverted")
            return Remote.ok(token[method])
        if method == 'hasRole':
            if token is None:
                return Remote.err("execution reverted")
            role, holder = args
            return Remote.ok((chain_id, address.lower(), role, holder.lower()) in self.roles)
        if method == 'hasSchain':
            return Remote.ok(args[0] in self.linked)
        if (address.lower(), method) in self.role_functions:
            return Remote.ok(self.role_functions[(address.lower(), method)])
        return Remote.err(f"{method} reverted")

    def prepare(self, chain_id, abi, address, function_name, args=()):
        return TxConfig(chain_id=chain_id, abi=abi, args=tuple(args), address=address, function_name=function_name)

    def prepare_deploy(self, chain_id, artifact, args=()):
        return TxConfig(chain_id=chain_id, abi=artifact.abi, args=tuple(args), bytecode=artifact.bytecode)

    async def write(self, config: TxConfig):
        self.writes.append(config)
        if self.write_gate is not None:
            await self.write_gate.wait()
        else:
            await asyncio.sleep(0)

        tx_hash = "0x" + f"{len(self.writes):064x}"
        if config.is_deploy:
            if self.deploy_error:
                return Remote.err(self.deploy_error)
            name, symbol = config.args[0], config.args[1]
            decimals = config.args[2] if len(config.args) > 2 else 18
            self.add_token(config.chain_id, self.deploy_address, symbol, name, decimals)
            return Remote.ok(TxReceipt(tx_hash, True, contract_address=self.deploy_address, block_number=1))

        if self.write_error:
            return Remote.err(self.write_error)
        if config.function_name == 'grantRole':
            role, grantee = config.args
            self.grant(config.chain_id, config.address, role, grantee)
        elif config.function_name == 'connectSchain':
            self.linked.add(config.args[0])
        return Remote.ok(TxReceipt(tx_hash, True, block_number=1))


class FakeChainContext:
    def __init__(self, chains=None, current_chain_id: int = EUROPA.id, account: Optional[str] = ACCOUNT):
        self._chains = list(chains) if chains is not None else [EUROPA, CALYPSO, NEBULA]
        self._current = next((c for c in self._chains if c.id == current_chain_id), None)
        self._account = account
        self.statuses: Dict[str, str] = {}
        self.connect_error: Optional[str] = None
        self.connected: List[str] = []
        self.reset_calls: List[str] = []

    @property
    def current_chain(self):
        return self._current

    @property
    def chains(self):
        return list(self._chains)

    @property
    def account(self):
        return self._account

    def connection_status(self, chain_name):
        return self.statuses.get(chain_name, "none")

    async def connect(self, chain_name):
        self.statuses[chain_name] = "pending"
        await asyncio.sleep(0)
        if self.connect_error:
            self.statuses[chain_name] = "error"
            return Remote.err(self.connect_error)
        self.statuses[chain_name] = "connected"
        self.connected.append(chain_name)
        return Remote.ok(chain_name)

    def reset_connect(self, chain_name):
        self.reset_calls.append(chain_name)


def _role_function(name):
    return {
        "type": "function",
        "name": name,
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "bytes32"}],
    }


CONFIG_CONTROLLER_ABI = [
    _role_function("DEPLOYER_ROLE"),
    _role_function("DEPLOYER_ADMIN_ROLE"),
    _role_function("MTM_ADMIN_ROLE"),
    {
        "type": "function",
        "name": "grantRole",
        "stateMutability": "nonpayable",
        "inputs": [{"name": "role", "type": "bytes32"}, {"name": "account", "type": "address"}],
        "outputs": [],
    },
]

ERC20_ON_CHAIN_ABI = [
    {
        "type": "constructor",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "contractName", "type": "string"},
            {"name": "contractSymbol", "type": "string"},
            {"name": "contractDecimals", "type": "uint8"},
        ],
    },
]


def manifest(with_token_manager=False):
    contracts = {
        "TOKEN_MANAGER_LINKER": {"address": TOKEN_MANAGER_LINKER, "abi": TOKEN_MANAGER_LINKER_ABI},
        "CONFIG_CONTROLLER": {"address": CONFIG_CONTROLLER, "abi": CONFIG_CONTROLLER_ABI},
        "SCHAIN_MULTISIG_WALLET": {"address": MULTISIG_WALLET, "abi": []},
    }
    if with_token_manager:
        contracts["TOKEN_MANAGER_ERC20"] = {"address": TOKEN_MANAGER_ERC20, "abi": []}
    return {
        "contracts": contracts,
        "artifacts": {"ERC20OnChain": {"abi": ERC20_ON_CHAIN_ABI, "bytecode": "0x6080"}},
    }
