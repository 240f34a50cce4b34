# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# metrics.py
# -----------------------------------------------------------------------------
# Purpose:
#   Record scalars and time series during a run and summarise KPIs at the
#   end: utilisation, idle rate, service and wait times, balancing efficiency.
#
# Design notes:
#   - Recorder is the sink for RecordScalar/RecordSeries effects.
#   - Metrics.finish() returns the run-end scalars as RecordScalar effects
#     for the caller to apply, like every other transition.
#   - Metrics.finish() runs once, strictly at run end, after every cashier
#     has had its trailing span closed out.
#   - A service still in progress at run end counts toward utilisation
#     (open_busy_time) but not toward served count or average service time,
#     so idle + busy covers the whole run for every cashier.
#   - Summaries return JSON-serializable dicts for easy tabulation.
#
# Usage:
#   M = Metrics(recorder); apply(M.finish(T_end, bank, router, shop)); M.summary()
# -----------------------------------------------------------------------------

from __future__ import annotations
from collections import defaultdict
from typing import Any, Dict, List, Tuple

from .effects import Effects, RecordScalar
from .entities import GeneratorState, RouterState, ServerState
from .network import balancing_efficiency

class Recorder:
    def __init__(self):
        self.scalars: Dict[str, float] = {}
        self.series: Dict[str, List[Tuple[float, float]]] = defaultdict(list)

    def record_scalar(self, name: str, value: float):
        self.scalars[name] = float(value)

    def record_series(self, name: str, value: float, t: float):
        self.series[name].append((t, float(value)))

    def values(self, name: str) -> List[float]:
        return [v for _, v in self.series.get(name, [])]

# (scalar name suffix, cashier_stats key)
_CASHIER_SCALARS = [
    ("customersServed", "customers_served"),
    ("totalServiceTime", "total_service_time"),
    ("totalIdleTime", "total_idle_time"),
    ("utilizationRate", "utilization_rate"),
    ("idleRate", "idle_rate"),
    ("averageServiceTime", "avg_service_time"),
    ("averageWaitingTime", "avg_wait"),
    ("queueLengthAtEnd", "queue_length_at_end"),
    ("totalItemsProcessed", "items_processed"),
]

def _pct(part: float, whole: float) -> float:
    return part / whole * 100.0 if whole > 0 else 0.0

def cashier_stats(server: ServerState, elapsed: float) -> Dict[str, Any]:
    busy = server.service_time + server.open_busy_time
    served = server.served
    return {
        "index": server.index,
        "customers_served": served,
        "customers_assigned": server.assigned,
        "total_service_time": server.service_time,
        "open_busy_time": server.open_busy_time,
        "total_idle_time": server.idle_time,
        "utilization_rate": _pct(busy, elapsed),
        "idle_rate": _pct(server.idle_time, elapsed),
        "avg_service_time": server.service_time / served if served > 0 else 0.0,
        "avg_wait": server.total_wait / served if served > 0 else 0.0,
        "items_processed": server.items_processed,
        "queue_length_at_end": len(server.queue),
        "in_service_at_end": server.current is not None,
    }

class Metrics:
    def __init__(self, recorder: Recorder):
        self.recorder = recorder
        self._summary: Dict[str, Any] = {}
        self.finished = False

    def finish(self, end: float, bank: List[ServerState], router: RouterState,
               shop: GeneratorState) -> Effects:
        """Compute the run-end KPIs; return the scalars as RecordScalar effects."""
        if self.finished:
            return []
        effects: Effects = []
        cashiers = []
        for srv in bank:
            st = cashier_stats(srv, end)
            cashiers.append(st)
            prefix = f"cashier{srv.index}."
            effects += [RecordScalar(prefix + name, st[key]) for name, key in _CASHIER_SCALARS]

        efficiency = balancing_efficiency(router)
        effects.append(RecordScalar("customersGenerated", shop.generated))
        effects.append(RecordScalar("customersForwarded", router.forwarded))
        effects.append(RecordScalar("balancingEfficiency", efficiency))
        for i, n in enumerate(router.assignments):
            effects.append(RecordScalar(f"cashier{i}_assignments", n))

        served = sum(s.served for s in bank)
        total_service = sum(s.service_time for s in bank)
        total_wait = sum(s.total_wait for s in bank)
        self._summary = {
            "policy": router.policy.name.lower(),
            "num_cashiers": len(bank),
            "duration": end,
            "customers_generated": shop.generated,
            "customers_forwarded": router.forwarded,
            "customers_served": served,
            "customers_in_system": sum(s.in_system for s in bank),
            "balancing_efficiency": efficiency,
            "assignments": list(router.assignments),
            "avg_wait": total_wait / served if served > 0 else 0.0,
            "avg_service_time": total_service / served if served > 0 else 0.0,
            "mean_utilization": (sum(c["utilization_rate"] for c in cashiers) / len(cashiers)) if cashiers else 0.0,
            "cashiers": cashiers,
        }
        self.finished = True
        return effects

    def summary(self) -> Dict[str, Any]:
        if not self.finished:
            raise RuntimeError("summary() is only available after finish()")
        return {**self._summary, "scalars": dict(self.recorder.scalars)}
