"""
Swap venue adapters.

Each venue maps its own API onto the aggregator's normalized quote shape.
"""
