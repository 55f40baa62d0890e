"""Core mathematics and configuration for the virtual betting engine.

This package contains pure, side-effect-free building blocks:

- ``odds_math``: normalisation, margin, decimal odds and parlay products
- ``markets``: the closed set of bet markets and their evaluation
- ``engine_config``: every tunable engine constant in one place
- ``sim_interface``: ABC and DTOs for swappable match simulators

Nothing in this package imports from ``betsim.services``.
All modules are unit-testable in isolation.
"""
