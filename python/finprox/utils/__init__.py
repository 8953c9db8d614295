"""Internal helpers shared across finprox modules."""
