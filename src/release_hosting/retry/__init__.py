"""
Retry policy and failure classification.

- failures.py: Retryable / Fatal classification of a failed attempt
- policy.py: RetryPolicy deciding Retry(delay) or GiveUp
"""

from .failures import ClassifiedFailure, FailureReason, Fatal, Retryable
from .policy import GiveUp, Retry, RetryDecision, RetryPolicy

__all__ = [
    "RetryPolicy",
    "Retry",
    "GiveUp",
    "RetryDecision",
    "FailureReason",
    "Retryable",
    "Fatal",
    "ClassifiedFailure",
]
