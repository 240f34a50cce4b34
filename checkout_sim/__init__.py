"""
checkout_sim package initializer.

This package contains the event kernel, the shop (customer generator), the
balancer with its load-balancing policies, the cashier bank and the metric
collection used to compare checkout load-distribution strategies.
"""
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "entities", "effects", "queues", "sampling", "arrivals", "policies",
    "network", "stations", "metrics", "config", "errors", "simulation",
]
