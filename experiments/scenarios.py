"""
experiments/scenarios.py

Holds scenario definitions (decision variables) to sweep during experiments.
One scenario per balancing strategy at baseline load, plus the same three
strategies with a faster arrival stream.
"""

from __future__ import annotations

ROUND_ROBIN = {
    "name": "round_robin",
    "overrides": {"balancer": {"strategy": "round_robin"}},
}

SHORTEST_QUEUE = {
    "name": "shortest_queue",
    "overrides": {"balancer": {"strategy": "shortest_queue"}},
}

RANDOM = {
    "name": "random",
    "overrides": {"balancer": {"strategy": "random"}},
}

# Roughly 95% offered load per cashier with the default scan times.
HIGH_LOAD = {
    "shop": {"arrival_interval": 5.7},
}

SCENARIOS = [ROUND_ROBIN, SHORTEST_QUEUE, RANDOM]

HIGH_LOAD_SCENARIOS = [
    {"name": f"{sc['name']}_high_load", "overrides": {**sc["overrides"], **HIGH_LOAD}}
    for sc in SCENARIOS
]
