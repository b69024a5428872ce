import asyncio

from imabridge.cache import LookupCache
from imabridge.services import NOT_A_CONTRACT, TokenMetadataResolver

from fakes import CALYPSO, CLONE_TOKEN, ORIGIN_TOKEN, OTHER_TOKEN


def test_resolve_success(gateway):
    gateway.add_token(CALYPSO.id, CLONE_TOKEN, "USDC", "USD Coin", 6)
    resolver = TokenMetadataResolver(gateway)

    result = asyncio.run(resolver.resolve(CLONE_TOKEN, CALYPSO.id))

    assert result.is_success
    assert (result.symbol, result.name, result.decimals) == ("USDC", "USD Coin", 6)
    assert resolver.current is result


def test_invalid_address_makes_no_chain_call(gateway):
    resolver = TokenMetadataResolver(gateway)

    result = asyncio.run(resolver.resolve("0x1234", CALYPSO.id))

    assert result.is_error
    assert result.error == "Address is invalid"
    assert gateway.reads == []


def test_address_without_erc20_interface(gateway):
    resolver = TokenMetadataResolver(gateway)

    result = asyncio.run(resolver.resolve(OTHER_TOKEN, CALYPSO.id))

    assert result.is_error
    assert result.error == NOT_A_CONTRACT


def test_loading_state_while_reads_are_in_flight(gateway):
    gateway.add_token(CALYPSO.id, CLONE_TOKEN, "USDC", "USD Coin", 6)
    gate = gateway.read_gates[CLONE_TOKEN.lower()] = asyncio.Event()
    resolver = TokenMetadataResolver(gateway)

    async def scenario():
        task = asyncio.ensure_future(resolver.resolve(CLONE_TOKEN, CALYPSO.id))
        await asyncio.sleep(0)
        assert resolver.current.is_loading
        gate.set()
        return await task

    assert asyncio.run(scenario()).is_success
    assert resolver.current.is_success


def test_last_request_wins(gateway):
    gateway.add_token(CALYPSO.id, CLONE_TOKEN, "USDC", "USD Coin", 6)
    gateway.add_token(CALYPSO.id, OTHER_TOKEN, "SKL", "Skale", 18)
    slow = gateway.read_gates[CLONE_TOKEN.lower()] = asyncio.Event()
    resolver = TokenMetadataResolver(gateway)

    async def scenario():
        first = asyncio.ensure_future(resolver.resolve(CLONE_TOKEN, CALYPSO.id))
        await asyncio.sleep(0)
        second = await resolver.resolve(OTHER_TOKEN, CALYPSO.id)
        slow.set()
        stale = await first
        return stale, second

    stale, second = asyncio.run(scenario())

    assert stale.symbol == "USDC"
    assert resolver.current is second
    assert resolver.current.symbol == "SKL"


def test_successful_results_are_cached(gateway):
    token = "0x" + "aB" * 20
    gateway.add_token(CALYPSO.id, token, "USDC", "USD Coin", 6)
    cache = LookupCache()
    first = TokenMetadataResolver(gateway, cache)
    second = TokenMetadataResolver(gateway, cache)

    asyncio.run(first.resolve(token, CALYPSO.id))
    result = asyncio.run(second.resolve(token.lower(), CALYPSO.id))

    assert result.symbol == "USDC"
    assert gateway.reads_of('symbol') == 1


def test_errors_are_not_cached(gateway):
    resolver = TokenMetadataResolver(gateway)

    assert asyncio.run(resolver.resolve(CLONE_TOKEN, CALYPSO.id)).is_error
    gateway.add_token(CALYPSO.id, CLONE_TOKEN, "USDC", "USD Coin", 6)

    assert asyncio.run(resolver.resolve(CLONE_TOKEN, CALYPSO.id)).is_success


def test_cache_is_keyed_by_chain(gateway):
    gateway.add_token(CALYPSO.id, ORIGIN_TOKEN, "USDC", "USD Coin", 6)
    resolver = TokenMetadataResolver(gateway)

    assert asyncio.run(resolver.resolve(ORIGIN_TOKEN, CALYPSO.id)).is_success
    assert asyncio.run(resolver.resolve(ORIGIN_TOKEN, CALYPSO.id + 1)).is_error


def test_stale_ticket_cannot_overwrite_cache():
    cache = LookupCache()
    key = LookupCache.key(CLONE_TOKEN, CALYPSO.id)
    old = cache.issue(key)
    new = cache.issue(key)

    assert not cache.store(key, old, "old")
    assert cache.store(key, new, "new")
    assert cache.get(key) == "new"
    assert cache.invalidate() == 1
    assert len(cache) == 0
