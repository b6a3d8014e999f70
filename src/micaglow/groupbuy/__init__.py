"""Pooled buying: sub-groups, batches and their per-product vial targets."""
