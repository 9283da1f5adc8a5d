"""Drift check orchestration.

This module sequences sampling, comparison, reporting, persistence,
and retention for one drift check run.
"""
