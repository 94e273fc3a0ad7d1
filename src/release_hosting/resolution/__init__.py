"""
Resolution of queries to a single artifact.

- engine.py: ResolutionEngine (transport + selection)
- selection.py: Pure release/artifact selection rules
- exceptions.py: ResolutionError family
"""

from .engine import ResolutionEngine
from .exceptions import Ambiguous, NoMatchingArtifact, NoMatchingRelease, ResolutionError
from .selection import select_artifact, select_release

__all__ = [
    "ResolutionEngine",
    "select_release",
    "select_artifact",
    "ResolutionError",
    "NoMatchingRelease",
    "NoMatchingArtifact",
    "Ambiguous",
]
