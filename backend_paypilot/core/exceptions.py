"""
Application-level exceptions.

Validation errors reach the caller untouched. Policy and explanation failures
are recovered inside the evaluation flow. Persistence failures end the request
with the transaction rolled back.
"""


class PayPilotError(Exception):
    """Base class for all PayPilot errors."""


class ValidationError(PayPilotError):
    """Caller input rejected before any side effect (e.g. missing userId)."""


class PolicyUnavailable(PayPilotError):
    """Decision policy could not be reached or returned an unusable answer."""


class ExplanationUnavailable(PayPilotError):
    """Explainer failed: missing credential, timeout, error or empty text."""


class PersistenceFailure(PayPilotError):
    """User record could not be loaded or saved."""


class ConcurrentUpdateError(PersistenceFailure):
    """Stored user record changed between load and save."""


class InvariantViolation(PayPilotError):
    """Computed state broke an engine invariant (score range, tier)."""
