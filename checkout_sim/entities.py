# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# entities.py
# -----------------------------------------------------------------------------
# Purpose:
#   Entity and state definitions for the checkout DES: Customer, the explicit
#   state of each component (shop, balancer, cashier), and the tagged events
#   that drive their transitions.
#
# Design notes:
#   - State objects are plain dataclasses owned by the Simulation context and
#     handed to the transition functions in arrivals/network/stations.
#   - A Customer is owned by exactly one cashier while queued or in service.
#
# Usage:
#   from checkout_sim.entities import Customer, ServerState, Assigned
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Deque, List, Optional
from collections import deque

if TYPE_CHECKING:
    from .policies import Policy

@dataclass
class Customer:
    cid: int                          # unique, monotonic from 1
    items: int                        # basket size, >= 1
    arrival_time: float
    service_start: Optional[float] = None
    service_duration: Optional[float] = None

    @property
    def wait(self) -> Optional[float]:
        if self.service_start is None:
            return None
        return self.service_start - self.arrival_time

    @property
    def departure_time(self) -> Optional[float]:
        if self.service_start is None or self.service_duration is None:
            return None
        return self.service_start + self.service_duration

@dataclass
class ServerState:
    """One cashier: FIFO queue, in-service slot and busy/idle bookkeeping.

    `queue` holds waiting customers only; the customer being served sits in
    `current`. `idle_start` is meaningful only while `busy` is False.
    """
    index: int
    queue: Deque[Customer] = field(default_factory=deque)
    current: Optional[Customer] = None
    busy: bool = False
    service_time: float = 0.0         # completed services only
    idle_time: float = 0.0
    idle_start: float = 0.0
    open_busy_time: float = 0.0       # in-progress span closed out at run end
    served: int = 0
    items_processed: int = 0
    assigned: int = 0
    total_wait: float = 0.0
    closed: bool = False

    @property
    def in_system(self) -> int:
        return len(self.queue) + (1 if self.current is not None else 0)

@dataclass
class RouterState:
    policy: "Policy"
    num_servers: int
    cursor: int = 0
    # Cumulative assignments, never decremented on completion.
    assignments: List[int] = field(default_factory=list)
    forwarded: int = 0

    def __post_init__(self):
        if not self.assignments:
            self.assignments = [0] * self.num_servers

@dataclass
class GeneratorState:
    mean_interval: float
    items_min: int = 1
    items_max: int = 25
    max_customers: Optional[int] = None
    next_id: int = 1
    generated: int = 0

    @property
    def exhausted(self) -> bool:
        return self.max_customers is not None and self.generated >= self.max_customers

# -----------------------------------------------------------------------------
# Tagged events
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class GenerateCustomer:
    """Shop timer tick: create the next customer."""

@dataclass(frozen=True)
class Arrival:
    """A customer reaches the balancer."""
    customer: Customer

@dataclass(frozen=True)
class Assigned:
    """The balancer hands a customer to cashier `server`."""
    server: int
    customer: Customer

@dataclass(frozen=True)
class ServiceComplete:
    server: int
