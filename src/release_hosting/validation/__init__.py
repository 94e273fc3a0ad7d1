"""
Rule validation for wire models and resolution queries.

- pipeline.py: Ordered checks, fail-fast or collect-all
- rules.py: The checks (identity, versions, targets, integrity, uniqueness)
- version.py: Version grammar, precedence and ranges
- target.py: Target descriptor grammar and fallback chain
"""

from .exceptions import Rule, ValidationError
from .pipeline import ValidationPipeline
from .target import TargetDescriptor, parse_target
from .version import Version, VersionRange, parse_range, parse_version

__all__ = [
    "ValidationPipeline",
    "ValidationError",
    "Rule",
    "Version",
    "VersionRange",
    "parse_version",
    "parse_range",
    "TargetDescriptor",
    "parse_target",
]
