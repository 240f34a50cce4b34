# Copyright (c) 2025
# MIT License
# -----------------------------------------------------------------------------
# errors.py
# -----------------------------------------------------------------------------
# Purpose:
#   Shared exception types. Configuration faults are fatal and are raised
#   while the model is being built, before the first event is processed.
#
# Usage:
#   from checkout_sim.errors import ConfigError
# -----------------------------------------------------------------------------

from __future__ import annotations


class ConfigError(ValueError):
    """Invalid run configuration (bad cashier count, interval, strategy...)."""

    def __init__(self, key: str, message: str):
        super().__init__(f"{key}: {message}")
        self.key = key
        self.message = message
