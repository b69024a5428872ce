import asyncio

import pytest

from imabridge.exceptions import InputValidationError, RoleGrantError, UnknownContractError
from imabridge.models import role_id
from imabridge.services import RoleGrantWorkflow

from fakes import (
    ACCOUNT,
    CONFIG_CONTROLLER,
    EUROPA,
    GRANTEE,
    MULTISIG_WALLET,
    SEPOLIA,
    FakeChainContext,
)

DEPLOYER_ROLE = role_id("DEPLOYER_ROLE")


@pytest.fixture
def workflow(gateway, registry, chain_context):
    gateway.role_functions[(CONFIG_CONTROLLER.lower(), "DEPLOYER_ROLE")] = bytes.fromhex(DEPLOYER_ROLE[2:])
    return RoleGrantWorkflow(gateway, registry, chain_context)


def test_lists_contracts_and_roles(workflow):
    assert [c.id for c in workflow.contracts_with_roles()] == ["CONFIG_CONTROLLER"]
    assert workflow.list_roles("config_controller") == ["DEPLOYER_ROLE", "DEPLOYER_ADMIN_ROLE", "MTM_ADMIN_ROLE"]
    assert workflow.list_roles(CONFIG_CONTROLLER) == workflow.list_roles("CONFIG_CONTROLLER")


def test_unknown_contract(workflow):
    with pytest.raises(UnknownContractError):
        workflow.list_roles("MESSAGE_PROXY_FOR_SCHAIN")


def test_role_hash_is_read_once(workflow, gateway):
    first = asyncio.run(workflow.resolve_role_hash("CONFIG_CONTROLLER", "DEPLOYER_ROLE"))
    second = asyncio.run(workflow.resolve_role_hash("config_controller", "DEPLOYER_ROLE"))

    assert first.value == DEPLOYER_ROLE
    assert second.value == DEPLOYER_ROLE
    assert gateway.reads_of("DEPLOYER_ROLE") == 1


def test_role_missing_from_abi_is_never_read(workflow, gateway):
    result = asyncio.run(workflow.resolve_role_hash("CONFIG_CONTROLLER", "MINTER_ROLE"))

    assert result.is_error
    assert "no MINTER_ROLE function" in result.error
    assert gateway.reads == []


def test_failed_role_read_is_not_cached(workflow, gateway):
    assert asyncio.run(workflow.resolve_role_hash("CONFIG_CONTROLLER", "MTM_ADMIN_ROLE")).is_error

    gateway.role_functions[(CONFIG_CONTROLLER.lower(), "MTM_ADMIN_ROLE")] = role_id("MTM_ADMIN_ROLE")
    assert asyncio.run(workflow.resolve_role_hash("CONFIG_CONTROLLER", "MTM_ADMIN_ROLE")).is_success


def test_non_bytes32_role_value(workflow, gateway):
    gateway.role_functions[(CONFIG_CONTROLLER.lower(), "DEPLOYER_ADMIN_ROLE")] = "0x1234"

    result = asyncio.run(workflow.resolve_role_hash("CONFIG_CONTROLLER", "DEPLOYER_ADMIN_ROLE"))

    assert result.is_error
    assert "bytes32" in result.error


def test_grant_role(workflow, gateway):
    result = asyncio.run(workflow.grant_role("CONFIG_CONTROLLER", DEPLOYER_ROLE, GRANTEE))

    assert result.is_success
    assert workflow.error is None
    assert (EUROPA.id, CONFIG_CONTROLLER.lower(), DEPLOYER_ROLE, GRANTEE.lower()) in gateway.roles
    config = gateway.writes[0]
    assert config.function_name == "grantRole"
    assert config.args == (DEPLOYER_ROLE, GRANTEE)


@pytest.mark.parametrize("role_hash,grantee,field", [
    (DEPLOYER_ROLE, "0x1234", "assigneeAddress"),
    (DEPLOYER_ROLE, "", "assigneeAddress"),
    (None, GRANTEE, "role"),
    ("DEPLOYER_ROLE", GRANTEE, "role"),
])
def test_grant_is_rejected_locally(workflow, gateway, role_hash, grantee, field):
    with pytest.raises(InputValidationError) as exc:
        asyncio.run(workflow.grant_role("CONFIG_CONTROLLER", role_hash, grantee))

    assert exc.value.field == field
    assert gateway.writes == []


def test_failed_grant_is_kept_not_retried(workflow, gateway):
    gateway.write_error = "AccessControl: sender must be an admin to grant"

    result = asyncio.run(workflow.grant_role("CONFIG_CONTROLLER", DEPLOYER_ROLE, GRANTEE))

    assert result.is_error
    assert isinstance(workflow.error, RoleGrantError)
    assert workflow.error.message == "Could not grant role - AccessControl: sender must be an admin to grant"
    assert workflow.error.contract_id == "CONFIG_CONTROLLER"
    assert len(gateway.writes) == 1

    workflow.reset()
    assert workflow.error is None
    assert workflow.grant is None


def test_assign_resolves_then_grants(workflow, gateway):
    result = asyncio.run(workflow.assign("CONFIG_CONTROLLER", "DEPLOYER_ROLE", workflow.my_address()))

    assert result.is_success
    assert gateway.writes[0].args == (DEPLOYER_ROLE, ACCOUNT)


def test_assign_with_unresolved_role(workflow, gateway):
    with pytest.raises(InputValidationError) as exc:
        asyncio.run(workflow.assign("CONFIG_CONTROLLER", "MTM_ADMIN_ROLE", GRANTEE))

    assert "unresolved" in exc.value.message
    assert gateway.writes == []


def test_grantee_shortcuts(workflow):
    assert workflow.my_address() == ACCOUNT
    assert workflow.multisig_address() == MULTISIG_WALLET


def test_only_supported_on_skale(gateway, registry):
    assert RoleGrantWorkflow(gateway, registry, FakeChainContext()).is_supported()

    mainnet = FakeChainContext(chains=[SEPOLIA, EUROPA], current_chain_id=SEPOLIA.id)
    assert not RoleGrantWorkflow(gateway, registry, mainnet).is_supported()

    disconnected = FakeChainContext(current_chain_id=0)
    assert not RoleGrantWorkflow(gateway, registry, disconnected).is_supported()
