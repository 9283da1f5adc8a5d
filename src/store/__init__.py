"""Storage and versioning layer.

This module persists immutable, sequentially numbered inventory snapshots.
It powers latest-version lookup for diffs and bounded history retention.
"""
