"""
metaexchange — best-execution planner across several crypto exchanges.

Splits a buy or sell request across the resting orders of multiple
exchanges so that the weighted average fill price is the best available,
without exceeding any exchange's funds or any order's remaining size.
"""

__version__ = "0.1.0"
