# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# arrivals.py
# -----------------------------------------------------------------------------
# Purpose:
#   Shop (customer generator) transitions. Produces a Poisson arrival stream:
#   exponential inter-arrival gaps with a configured mean, basket sizes drawn
#   uniformly from an integer range.
#
# Design notes:
#   - The generator owns a single timer ("generator"); each tick creates one
#     customer, forwards it to the balancer and re-arms the timer.
#   - The first arrival is scheduled FIRST_ARRIVAL_OFFSET seconds after start.
#
# Usage:
#   state = make_generator(mean_interval=5.0)
#   effects = start(state)
#   state, effects = on_generate(state, now, sampler)
# -----------------------------------------------------------------------------

from __future__ import annotations
from typing import Optional, Tuple

from .effects import Effects, Notify, RecordSeries, Schedule
from .entities import Arrival, Customer, GenerateCustomer, GeneratorState
from .errors import ConfigError

FIRST_ARRIVAL_OFFSET = 0.1
GENERATOR_TIMER = "generator"

def make_generator(mean_interval: float, items_min: int = 1, items_max: int = 25,
                   max_customers: Optional[int] = None) -> GeneratorState:
    if mean_interval is None or float(mean_interval) <= 0:
        raise ConfigError("shop.arrival_interval", f"must be > 0, got {mean_interval!r}")
    if int(items_min) < 1 or int(items_max) < int(items_min):
        raise ConfigError("shop.items_min", f"need 1 <= items_min <= items_max, got [{items_min}, {items_max}]")
    if max_customers is not None and int(max_customers) < 0:
        raise ConfigError("shop.max_customers", f"must be >= 0, got {max_customers!r}")
    return GeneratorState(
        mean_interval=float(mean_interval),
        items_min=int(items_min),
        items_max=int(items_max),
        max_customers=None if max_customers is None else int(max_customers),
    )

def new_customer(state: GeneratorState, now: float, items: int) -> Customer:
    """Mint the next customer id; used by the timer tick and scripted arrivals."""
    cust = Customer(cid=state.next_id, items=items, arrival_time=now)
    state.next_id += 1
    state.generated += 1
    return cust

def start(state: GeneratorState) -> Effects:
    if state.exhausted:
        return []
    return [Schedule(FIRST_ARRIVAL_OFFSET, GenerateCustomer(), timer=GENERATOR_TIMER)]

def on_generate(state: GeneratorState, now: float, sampler) -> Tuple[GeneratorState, Effects]:
    items = sampler.uniform_int(state.items_min, state.items_max)
    cust = new_customer(state, now, items)
    effects: Effects = [
        RecordSeries("customerGenerated", state.generated),
        Notify(f"New Customer #{cust.cid}: {items} items in basket"),
        Schedule(0.0, Arrival(cust)),
    ]
    if state.exhausted:
        return state, effects
    gap = sampler.exponential(state.mean_interval)
    effects.append(RecordSeries("interArrivalTime", gap))
    effects.append(Schedule(gap, GenerateCustomer(), timer=GENERATOR_TIMER))
    return state, effects
