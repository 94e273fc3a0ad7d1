"""
Enumerations for release-hosting data models.

All enums are closed sets - no values outside these sets are permitted.
"""

from enum import Enum


class ChecksumAlgorithm(str, Enum):
    """
    Allow-list of checksum algorithms accepted for artifacts.

    Each algorithm fixes the length of its hex digest.
    """

    SHA256 = "sha256"
    SHA384 = "sha384"
    SHA512 = "sha512"

    @property
    def digest_length(self) -> int:
        """Number of hex characters in a digest for this algorithm."""
        return {
            ChecksumAlgorithm.SHA256: 64,
            ChecksumAlgorithm.SHA384: 96,
            ChecksumAlgorithm.SHA512: 128,
        }[self]


class SelectorKind(str, Enum):
    """How a resolution query chooses among a package's releases."""

    EXACT = "exact"
    LATEST = "latest"
    RANGE = "range"
