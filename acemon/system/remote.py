"""Remote engine config (spawn rate & rare power multipliers).

The endpoint answers ``GET`` with::

    {"spawnRate": 0.15, "multipliers": {"hp": 3.5, "atk": 3.5}, "status": "active"}

Fetching is one-shot: no retries, and any failure is replaced by the fallback
values so the game never waits on the network.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Mapping
import math
import requests
from acemon.core.logging import logger
from acemon.core.errors import RemoteConfigError

@dataclass(frozen=True)
class RemoteConfig:
    spawn_rate: float
    hp_multiplier: float
    atk_multiplier: float
    source: str = "default"

# Values in effect before any fetch completes
OFFLINE_DEFAULTS = RemoteConfig(spawn_rate=0.05, hp_multiplier=2.0, atk_multiplier=2.0, source="offline")
# Values substituted when the endpoint cannot be used
FALLBACK = RemoteConfig(spawn_rate=0.04, hp_multiplier=1.8, atk_multiplier=1.8, source="fallback")

def _number(value: Any, name: str, url: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise RemoteConfigError(url, f"{name} is not a number")
    try:
        number = float(value)
    except OverflowError:
        number = math.inf
    if not math.isfinite(number):
        raise RemoteConfigError(url, f"{name} is not finite")
    return number

def parse_payload(payload: Any, url: str = "<payload>") -> RemoteConfig:
    if not isinstance(payload, Mapping):
        raise RemoteConfigError(url, "payload is not an object")
    status = payload.get("status", "active")
    if status != "active":
        raise RemoteConfigError(url, f"endpoint status {status!r}")
    spawn = _number(payload.get("spawnRate"), "spawnRate", url)
    if not 0.0 <= spawn <= 1.0:
        raise RemoteConfigError(url, f"spawnRate {spawn} outside [0, 1]")
    mult = payload.get("multipliers")
    if not isinstance(mult, Mapping):
        raise RemoteConfigError(url, "multipliers missing")
    hp = _number(mult.get("hp"), "multipliers.hp", url)
    # older endpoints only send hp; it then scales attack too
    atk = _number(mult.get("atk", hp), "multipliers.atk", url)
    if hp < 1.0 or atk < 1.0:
        raise RemoteConfigError(url, "multipliers must be >= 1.0")
    return RemoteConfig(spawn_rate=spawn, hp_multiplier=hp, atk_multiplier=atk, source=url)

def fetch_remote_config(url: str, timeout: float = 2.0, *, session: requests.Session | None = None) -> RemoteConfig:
    """Fetch engine config once; return FALLBACK on any failure."""
    getter = session.get if session is not None else requests.get
    try:
        response = getter(url, timeout=timeout)
        response.raise_for_status()
        config = parse_payload(response.json(), url)
    except (requests.RequestException, ValueError, RemoteConfigError) as e:
        logger.warn("RemoteConfigUnavailable", url=url, error=str(e))
        return FALLBACK
    logger.info("RemoteConfigLoaded", url=url, spawn_rate=config.spawn_rate, hp=config.hp_multiplier, atk=config.atk_multiplier)
    return config

__all__ = ["RemoteConfig", "OFFLINE_DEFAULTS", "FALLBACK", "parse_payload", "fetch_remote_config"]
