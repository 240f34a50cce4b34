# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# effects.py
# -----------------------------------------------------------------------------
# Purpose:
#   Effect values returned by the component transition functions. The
#   Simulation context interprets them against the event kernel, the recorder
#   and the notification log.
#
# Design notes:
#   - Transitions never touch the kernel directly; they describe what should
#     happen (schedule/cancel/record/notify) and the context carries it out.
#   - Timers are named by a hashable key so the owner can be cancelled at
#     teardown and duplicate completion timers are detected.
#
# Usage:
#   from checkout_sim.effects import Schedule, RecordSeries, Notify
# -----------------------------------------------------------------------------

from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Hashable, List, Optional, Union

@dataclass(frozen=True)
class Schedule:
    delay: float
    event: Any
    timer: Optional[Hashable] = None   # None -> fire-and-forget (zero-delay forwards)

@dataclass(frozen=True)
class Cancel:
    timer: Hashable

@dataclass(frozen=True)
class RecordScalar:
    name: str
    value: float

@dataclass(frozen=True)
class RecordSeries:
    name: str
    value: float

@dataclass(frozen=True)
class Notify:
    text: str

Effect = Union[Schedule, Cancel, RecordScalar, RecordSeries, Notify]
Effects = List[Effect]
