"""MongoDB inventory sampling.

This module captures databases, users, and replica-set state through
pymongo and formats them into a deterministic line-oriented text block.
"""
