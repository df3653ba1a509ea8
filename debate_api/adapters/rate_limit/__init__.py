"""Rate limiting adapters.

Limiters live behind a small interface so route handlers only care about the
admission decision, not where the counters are kept.
"""
