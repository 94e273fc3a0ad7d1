"""
Validation Pipeline: ordered rule checks.

Runs the checks from rules.CHECKS in order. Two modes:

- validate(): fail-fast, raises the first violation (default for producer
  calls, so the caller gets one actionable message)
- collect(): returns every violation, in check order
"""

import logging
from typing import Iterator

from pydantic import BaseModel

from .exceptions import ValidationError
from .rules import CHECKS, Check, check_key

logger = logging.getLogger(__name__)


class ValidationPipeline:
    """
    Pure validator for wire models and resolution queries.

    Has no network or filesystem side effects.
    """

    def __init__(self, checks: tuple[Check, ...] = CHECKS):
        self.checks = checks

    def _violations(self, instance: BaseModel) -> Iterator[ValidationError]:
        for check in self.checks:
            yield from check(instance)

    def validate(self, instance: BaseModel) -> None:
        """
        Validate an instance, stopping at the first violation.

        Args:
            instance: Release, Artifact, Package, ReleaseSummary, Ack or ResolutionQuery

        Raises:
            ValidationError: The first violated rule
        """
        for violation in self._violations(instance):
            logger.debug(
                f"Validation failed for {type(instance).__name__}: "
                f"{violation.field} ({violation.rule.value})"
            )
            raise violation
        logger.debug(f"{type(instance).__name__} passed validation")

    def collect(self, instance: BaseModel) -> list[ValidationError]:
        """
        Validate an instance and return every violation.

        Returns:
            Violations in check order (empty when the instance is valid)
        """
        violations = list(self._violations(instance))
        if violations:
            logger.debug(
                f"{type(instance).__name__} has {len(violations)} violation(s): "
                f"{[v.field for v in violations[:3]]}{'...' if len(violations) > 3 else ''}"
            )
        return violations

    def is_valid(self, instance: BaseModel) -> bool:
        return next(self._violations(instance), None) is None

    def validate_key(self, package: str, version: str | None = None) -> None:
        """
        Validate a lookup key (package name, optionally a version).

        Raises:
            ValidationError: The first violated rule
        """
        for violation in check_key(package, version):
            raise violation
