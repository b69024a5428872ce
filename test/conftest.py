import pytest

from imabridge.services import ContractRegistry

from fakes import FakeChainContext, FakeGateway, manifest


@pytest.fixture
def registry():
    return ContractRegistry.from_dict(manifest())


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def chain_context():
    return FakeChainContext()
