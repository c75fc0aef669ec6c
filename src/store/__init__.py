"""History index layer.

This module keeps per-handle version chains sorted by start time.
It powers point-in-time lookups for reusable handles.
"""
