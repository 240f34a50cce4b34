# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# network.py
# -----------------------------------------------------------------------------
# Purpose:
#   Balancer (router) transitions. Decides which cashier receives each
#   arriving customer and keeps the per-cashier assignment counters used for
#   shortest-queue routing and balancing efficiency.
#
# Design notes:
#   - The policy is fixed for the run; validate it when building RouterState.
#   - Forwarding is a zero-delay Assigned event so the hand-off goes through
#     the FEL like any other event.
#
# Usage:
#   state = make_router(cfg)
#   state, effects = on_arrival(state, customer, sampler)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Tuple

from .effects import Effects, Notify, RecordSeries, Schedule
from .entities import Assigned, Customer, RouterState
from .errors import ConfigError
from .policies import Policy, pick_cashier

def make_router(policy, num_servers: int) -> RouterState:
    if not isinstance(num_servers, int) or isinstance(num_servers, bool) or num_servers <= 0:
        raise ConfigError("cashiers.count", f"must be a positive integer, got {num_servers!r}")
    return RouterState(policy=Policy.parse(policy), num_servers=num_servers)

def select_server(state: RouterState, sampler) -> int:
    """Pick a cashier index in [0, N) and advance the round-robin cursor."""
    idx = pick_cashier(state.policy, state.cursor, state.assignments, sampler)
    if state.policy is Policy.ROUND_ROBIN:
        state.cursor += 1
    return idx

def on_arrival(state: RouterState, customer: Customer, sampler) -> Tuple[RouterState, Effects]:
    idx = select_server(state, sampler)
    state.assignments[idx] += 1
    state.forwarded += 1
    effects: Effects = [
        RecordSeries("loadBalancing", idx),
        Notify(f"Customer #{customer.cid} -> Cashier {idx} ({state.policy.label} strategy)"),
        Schedule(0.0, Assigned(idx, customer)),
    ]
    return state, effects

def balancing_efficiency(state: RouterState) -> float:
    """min/max assignment ratio in percent; 100 when nobody was assigned."""
    hi = max(state.assignments)
    if hi <= 0:
        return 100.0
    return min(state.assignments) / hi * 100.0
