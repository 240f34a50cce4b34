# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# stations.py
# -----------------------------------------------------------------------------
# Purpose:
#   Cashier bank: N independent single-server FIFO queues. Each cashier
#   serves one customer at a time and accounts for its busy and idle time.
#
# Design notes:
#   - Per cashier the state machine is Idle -> Busy -> Idle -> ...; a cashier
#     holds at most one outstanding completion timer, keyed ("cashier", i).
#   - Service time is the sum of one uniform(lo, hi) scan per item, so it
#     grows with the basket and is strictly positive.
#   - Served count, items and service time are folded in at completion; a
#     customer still at the till when the run ends is not counted as served.
#
# Usage:
#   bank = make_bank(3); scan = ScanTime(0.5, 2.0)
#   server, effects = arrive(bank[0], customer, now, sampler, scan)
#   server, effects = complete_service(bank[0], now, sampler, scan)
#   close_out(bank[0], T_end)
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import List, Tuple

from .effects import Effects, Notify, RecordSeries, Schedule
from .entities import Customer, ServerState, ServiceComplete
from .errors import ConfigError

@dataclass(frozen=True)
class ScanTime:
    """Per-item scan time distribution, uniform on [lo, hi] seconds."""
    lo: float = 0.5
    hi: float = 2.0

    def __post_init__(self):
        if not (0 < self.lo <= self.hi):
            raise ConfigError("cashiers.item_time_min", f"need 0 < item_time_min <= item_time_max, got [{self.lo}, {self.hi}]")

    def draw(self, items: int, sampler) -> float:
        return sum(sampler.uniform_real(self.lo, self.hi) for _ in range(items))

def make_bank(n: int) -> List[ServerState]:
    if not isinstance(n, int) or isinstance(n, bool) or n <= 0:
        raise ConfigError("cashiers.count", f"must be a positive integer, got {n!r}")
    return [ServerState(index=i) for i in range(n)]

def cashier_timer(index: int) -> Tuple[str, int]:
    return ("cashier", index)

def _series(server: ServerState, name: str, value: float) -> RecordSeries:
    return RecordSeries(f"cashier{server.index}.{name}", value)

def arrive(server: ServerState, customer: Customer, now: float, sampler,
           scan: ScanTime) -> Tuple[ServerState, Effects]:
    server.queue.append(customer)
    server.assigned += 1
    effects: Effects = [_series(server, "queueLength", len(server.queue))]
    if not server.busy:
        head = server.queue.popleft()
        effects.append(_series(server, "queueLength", len(server.queue)))
        effects.extend(begin_service(server, head, now, sampler, scan))
    return server, effects

def begin_service(server: ServerState, customer: Customer, now: float, sampler,
                  scan: ScanTime) -> Effects:
    effects: Effects = []
    if not server.busy:
        idle = now - server.idle_start
        server.idle_time += idle
        effects.append(_series(server, "idleTime", idle))
    server.busy = True
    server.current = customer
    customer.service_start = now
    customer.service_duration = scan.draw(customer.items, sampler)
    effects += [
        _series(server, "waitingTime", customer.wait),
        _series(server, "serviceTime", customer.service_duration),
        Notify(f"Cashier {server.index} serving Customer #{customer.cid}: "
               f"{customer.items} items ({customer.service_duration:.1f}s)"),
        Schedule(customer.service_duration, ServiceComplete(server.index), timer=cashier_timer(server.index)),
    ]
    return effects

def complete_service(server: ServerState, now: float, sampler,
                     scan: ScanTime) -> Tuple[ServerState, Effects]:
    cust = server.current
    if cust is None or not server.busy:
        raise RuntimeError(f"cashier {server.index} completed a service while idle at t={now}")
    server.served += 1
    server.items_processed += cust.items
    server.service_time += cust.service_duration
    server.total_wait += cust.wait
    server.current = None
    server.idle_start = now
    effects: Effects = [
        _series(server, "departures", cust.cid),
        Notify(f"Cashier {server.index} finished Customer #{cust.cid}: "
               f"{cust.items} items, {cust.wait:.2f}s wait"),
    ]
    if server.queue:
        nxt = server.queue.popleft()
        effects.append(_series(server, "queueLength", len(server.queue)))
        effects.extend(begin_service(server, nxt, now, sampler, scan))
    else:
        server.busy = False
    return server, effects

def close_out(server: ServerState, end: float) -> ServerState:
    """Close the trailing span at run end (idempotent)."""
    if server.closed:
        return server
    if server.busy and server.current is not None:
        server.open_busy_time = end - server.current.service_start
    else:
        server.idle_time += end - server.idle_start
        server.idle_start = end
    server.closed = True
    return server
