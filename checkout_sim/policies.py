# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# policies.py
# -----------------------------------------------------------------------------
# Purpose:
#   Load-balancing strategies used by the balancer to pick a cashier:
#   round robin, shortest queue first and uniform random.
#
# Design notes:
#   - Keep pure functions to ease testing (state -> decision).
#   - Shortest queue first ranks cashiers by the balancer's cumulative
#     assignment counters, not by live queue depth. Counters are never
#     decremented when a service completes.
#
# Usage:
#   from checkout_sim.policies import Policy, pick_cashier
# -----------------------------------------------------------------------------

from __future__ import annotations
from enum import Enum
from typing import Sequence, Union

from .errors import ConfigError

class Policy(Enum):
    ROUND_ROBIN = 0
    SHORTEST_QUEUE = 1
    RANDOM = 2

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, value: Union[str, int, "Policy"]) -> "Policy":
        """Accept a Policy, a config name ('round_robin', 'shortest-queue',
        'Random'...) or the integer strategy codes 0/1/2."""
        if isinstance(value, Policy):
            return value
        if isinstance(value, bool):
            raise ConfigError("balancer.strategy", f"unrecognised strategy {value!r}")
        if isinstance(value, int):
            try:
                return cls(value)
            except ValueError:
                raise ConfigError("balancer.strategy", f"unrecognised strategy code {value}") from None
        if isinstance(value, str):
            key = value.strip().lower().replace("-", "_").replace(" ", "_")
            key = _ALIASES.get(key, key)
            try:
                return cls[key.upper()]
            except KeyError:
                raise ConfigError("balancer.strategy", f"unrecognised strategy {value!r}") from None
        raise ConfigError("balancer.strategy", f"unrecognised strategy {value!r}")

_LABELS = {
    Policy.ROUND_ROBIN: "Round Robin",
    Policy.SHORTEST_QUEUE: "Shortest Queue",
    Policy.RANDOM: "Random",
}

_ALIASES = {
    "rr": "round_robin",
    "roundrobin": "round_robin",
    "sqf": "shortest_queue",
    "shortest_queue_first": "shortest_queue",
    "shortestqueue": "shortest_queue",
}

def pick_round_robin(cursor: int, n: int) -> int:
    return cursor % n

def pick_shortest_queue(loads: Sequence[int]) -> int:
    """Index of the smallest load; ties go to the lowest index."""
    best = 0
    for i in range(1, len(loads)):
        if loads[i] < loads[best]:
            best = i
    return best

def pick_random(n: int, sampler) -> int:
    return sampler.uniform_int(0, n - 1)

def pick_cashier(policy: Policy, cursor: int, loads: Sequence[int], sampler) -> int:
    n = len(loads)
    if policy is Policy.ROUND_ROBIN:
        return pick_round_robin(cursor, n)
    if policy is Policy.SHORTEST_QUEUE:
        return pick_shortest_queue(loads)
    return pick_random(n, sampler)
