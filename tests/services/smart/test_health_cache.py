"""
Tests for SmartHealthCache TTL, failure caching and miss coalescing.
"""

import asyncio
from unittest.mock import AsyncMock, Mock

import pytest

from storage_telemetry.core.exceptions import ProbeError
from storage_telemetry.models import SmartRecord
from storage_telemetry.services.smart.health_cache import SMART_CACHE_TTL_SECONDS, SmartHealthCache


def make_prober(**kwargs):
    prober = Mock()
    prober.probe = AsyncMock(**kwargs)
    return prober


def test_default_ttl_is_one_minute():
    assert SMART_CACHE_TTL_SECONDS == 60.0
    assert SmartHealthCache(make_prober()).ttl_seconds == 60.0


@pytest.mark.asyncio
async def test_hit_within_ttl_does_not_probe_again(clock, passed_record):
    prober = make_prober(return_value=passed_record)
    cache = SmartHealthCache(prober, clock=clock)

    first = await cache.get("/dev/sda")
    clock.advance(59.9)
    second = await cache.get("/dev/sda")

    assert first == passed_record
    assert second == passed_record
    prober.probe.assert_awaited_once_with("/dev/sda")


@pytest.mark.asyncio
async def test_expired_entry_probes_again(clock, passed_record, failed_record):
    prober = make_prober(side_effect=[passed_record, failed_record])
    cache = SmartHealthCache(prober, clock=clock)

    await cache.get("/dev/sda")
    clock.advance(60.0)
    refreshed = await cache.get("/dev/sda")

    assert refreshed == failed_record
    assert prober.probe.await_count == 2


@pytest.mark.asyncio
async def test_keys_are_independent(clock, passed_record):
    prober = make_prober(return_value=passed_record)
    cache = SmartHealthCache(prober, clock=clock)

    await cache.get("/dev/sda")
    await cache.get("/dev/sdb")

    assert prober.probe.await_count == 2


@pytest.mark.asyncio
async def test_probe_failure_caches_empty_record(clock):
    prober = make_prober(side_effect=ProbeError("/dev/sda", "exited with code 2"))
    cache = SmartHealthCache(prober, clock=clock)

    first = await cache.get("/dev/sda")
    clock.advance(30)
    second = await cache.get("/dev/sda")

    assert first == SmartRecord()
    assert first.is_empty
    assert second.is_empty
    prober.probe.assert_awaited_once()


@pytest.mark.asyncio
async def test_failed_device_recovers_after_ttl(clock, passed_record):
    prober = make_prober(side_effect=[ProbeError("/dev/sda", "timed out"), passed_record])
    cache = SmartHealthCache(prober, clock=clock)

    assert (await cache.get("/dev/sda")).is_empty
    clock.advance(61)

    assert await cache.get("/dev/sda") == passed_record


@pytest.mark.asyncio
async def test_concurrent_misses_share_one_probe(passed_record):
    async def slow_probe(device_path):
        await asyncio.sleep(0.05)
        return passed_record

    prober = make_prober(side_effect=slow_probe)
    cache = SmartHealthCache(prober)

    results = await asyncio.gather(*(cache.get("/dev/sda") for _ in range(5)))

    assert all(result == passed_record for result in results)
    prober.probe.assert_awaited_once()


@pytest.mark.asyncio
async def test_cache_info_reports_entries(clock, passed_record):
    cache = SmartHealthCache(make_prober(return_value=passed_record), clock=clock)
    await cache.get("/dev/sda")
    clock.advance(10)

    info = cache.get_cache_info()

    assert info["ttl_seconds"] == 60.0
    assert info["devices"]["/dev/sda"] == {"age_seconds": 10.0, "is_valid": True, "is_empty": False}

    cache.clear()
    assert cache.get_cache_info()["devices"] == {}
