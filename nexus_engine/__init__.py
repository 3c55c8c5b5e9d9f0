"""
Nexus Intelligence Engine

Scoring-and-synthesis core for regional development intelligence reports:
composite indices, staged diagnose → simulate → architect pipeline, and the
NSIL report assembler.
"""

__version__ = "1.0.0"
