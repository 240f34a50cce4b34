# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# simulation.py
# -----------------------------------------------------------------------------
# Purpose:
#   Simulate a single replication: build the shop, balancer and cashier bank
#   from config, run the event loop for the configured duration, close out
#   every cashier and return the summary.
#
# Design notes:
#   - The Simulation owns all component state and the timers. Events are
#     dispatched to the pure transition functions; the returned effects are
#     applied here (schedule/cancel on Env, record on Recorder, notify on the
#     log).
#   - At most one outstanding timer per key ("generator", ("cashier", i)).
#     All outstanding timers are cancelled in finish().
#   - Replication loops and scenario sweeps live outside, in experiments/.
#
# Usage:
#   from checkout_sim.simulation import run_once
#   results = run_once(cfg)
# -----------------------------------------------------------------------------

from __future__ import annotations
import logging
from typing import Any, Dict, Hashable, Optional

from . import arrivals, network, stations
from .config import validate_cfg
from .effects import Cancel, Effects, Notify, RecordScalar, RecordSeries, Schedule
from .entities import Arrival, Assigned, Customer, GenerateCustomer, ServiceComplete
from .metrics import Metrics, Recorder
from .queues import Env, Event
from .sampling import Sampler

logger = logging.getLogger(__name__)

class Simulation:
    def __init__(self, cfg: Dict, sampler: Optional[Any] = None, generate: bool = True):
        validate_cfg(cfg)
        self.cfg = cfg
        sim_cfg, shop_cfg, cash_cfg = cfg["sim"], cfg["shop"], cfg["cashiers"]
        self.duration = float(sim_cfg["duration"])
        self.sampler = sampler if sampler is not None else Sampler(sim_cfg.get("seed"))
        self.generate = generate

        self.shop = arrivals.make_generator(
            shop_cfg["arrival_interval"],
            items_min=shop_cfg.get("items_min", 1),
            items_max=shop_cfg.get("items_max", 25),
            max_customers=shop_cfg.get("max_customers"),
        )
        self.router = network.make_router(cfg["balancer"]["strategy"], cash_cfg["count"])
        self.bank = stations.make_bank(cash_cfg["count"])
        self.scan = stations.ScanTime(float(cash_cfg["item_time_min"]), float(cash_cfg["item_time_max"]))

        self.recorder = Recorder()
        self.metrics = Metrics(self.recorder)
        self.env = Env(self._handle)
        self.timers: Dict[Hashable, Event] = {}
        self._owners: Dict[Event, Hashable] = {}
        self.started = False
        self.finished = False

    @property
    def now(self) -> float:
        return self.env.now

    # -------------------- lifecycle --------------------

    def start(self):
        if self.started:
            return
        self.started = True
        logger.info(
            "run start: %d cashiers, strategy=%s, mean arrival interval=%.3fs, duration=%.1fs",
            len(self.bank), self.router.policy.label, self.shop.mean_interval, self.duration,
        )
        if self.generate:
            self._apply(arrivals.start(self.shop))

    def inject_arrival(self, at: float, items: int) -> Customer:
        """Schedule a scripted customer reaching the balancer at time `at`.

        `at` must lie in [now, duration] so the customer is forwarded before
        the run ends; nothing is minted when the request is rejected.
        """
        if items < 1:
            raise ValueError("items must be >= 1")
        if self.finished:
            raise ValueError("cannot inject arrivals after finish()")
        if not (self.env.now <= at <= self.duration):
            raise ValueError(f"arrival time {at} outside [{self.env.now}, {self.duration}]")
        cust = arrivals.new_customer(self.shop, at, items)
        self.env.schedule_at(at, Arrival(cust))
        return cust

    def run(self) -> Dict:
        self.start()
        self.env.run_until(self.duration)
        self.finish()
        return self.metrics.summary()

    def finish(self):
        """Release timers, close every cashier's trailing span, compute KPIs."""
        if self.finished:
            return
        end = self.env.now
        self._apply([Cancel(key) for key in list(self.timers)])
        for srv in self.bank:
            stations.close_out(srv, end)
        self._apply(self.metrics.finish(end, self.bank, self.router, self.shop))
        self.finished = True
        s = self.metrics.summary()
        logger.info(
            "run finished at t=%.1fs: generated=%d served=%d efficiency=%.1f%%",
            end, s["customers_generated"], s["customers_served"], s["balancing_efficiency"],
        )

    # -------------------- dispatch --------------------

    def _handle(self, ev: Event):
        key = self._owners.pop(ev, None)
        if key is not None:
            self.timers.pop(key, None)
        payload = ev.payload
        now = self.env.now
        if isinstance(payload, GenerateCustomer):
            _, effects = arrivals.on_generate(self.shop, now, self.sampler)
        elif isinstance(payload, Arrival):
            _, effects = network.on_arrival(self.router, payload.customer, self.sampler)
        elif isinstance(payload, Assigned):
            _, effects = stations.arrive(self.bank[payload.server], payload.customer, now, self.sampler, self.scan)
        elif isinstance(payload, ServiceComplete):
            _, effects = stations.complete_service(self.bank[payload.server], now, self.sampler, self.scan)
        else:
            raise TypeError(f"unknown event payload {payload!r}")
        self._apply(effects)

    def _apply(self, effects: Effects):
        for eff in effects:
            if isinstance(eff, Schedule):
                self._schedule(eff)
            elif isinstance(eff, Cancel):
                ev = self.timers.pop(eff.timer, None)
                if ev is not None:
                    self.env.cancel(ev)
                    self._owners.pop(ev, None)
            elif isinstance(eff, RecordSeries):
                self.recorder.record_series(eff.name, eff.value, self.env.now)
            elif isinstance(eff, RecordScalar):
                self.recorder.record_scalar(eff.name, eff.value)
            elif isinstance(eff, Notify):
                self.notify(eff.text)
            else:
                raise TypeError(f"unknown effect {eff!r}")

    def _schedule(self, eff: Schedule):
        if eff.timer is None:
            self.env.schedule(eff.delay, eff.event)
            return
        if eff.timer in self.timers:
            raise RuntimeError(f"timer {eff.timer!r} is already armed")
        ev = self.env.schedule(eff.delay, eff.event)
        self.timers[eff.timer] = ev
        self._owners[ev] = eff.timer

    def notify(self, text: str):
        logger.debug("[t=%.3f] %s", self.env.now, text)

def run_once(cfg: Dict) -> Dict:
    return Simulation(cfg).run()
