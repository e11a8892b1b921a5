"""
Quote aggregation engine.

Fans a swap quote request out to every registered venue, caches the
per-venue results briefly and selects the best quote.
"""
