"""Line diff engine.

This module computes minimal line edit scripts between inventory texts.
It groups changes into context-bounded hunks and renders unified diffs.
"""
