"""Scenario definitions and the replication harness for comparing strategies."""
