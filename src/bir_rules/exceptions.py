"""Custom exceptions for the BIR rules engine.

All exceptions inherit from BirRulesError, making it easy to catch every
engine-specific error in one place. Rule modules themselves never raise
for business reasons: a well-formed RuleInput always produces a complete
assessment. These exceptions cover the lookup and configuration surfaces
around the pipeline.

Example:
    try:
        explanation = get_rule_explanation(rule_id)
    except RuleModuleNotFoundError as e:
        return {"error": e.message, "available": e.available_ids}
"""

from typing import Any, Optional


class BirRulesError(Exception):
    """Base exception for all rules engine errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context.
        recoverable: Whether the caller can fix the problem and retry.
    """

    def __init__(
        self,
        message: str,
        *,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        """Return string representation of the error."""
        return self.message

    def __repr__(self) -> str:
        """Return detailed representation of the error."""
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, "
            f"details={self.details!r}, "
            f"recoverable={self.recoverable!r})"
        )


class RuleModuleNotFoundError(BirRulesError):
    """Raised when a rule module identifier does not name a known module.

    Attributes:
        rule_module_id: The identifier that was requested.
        available_ids: Identifiers of every registered rule module.

    Example:
        >>> raise RuleModuleNotFoundError(
        ...     "Rule module not found: VAT_COMPUTATION",
        ...     rule_module_id="VAT_COMPUTATION",
        ...     available_ids=["REGIME_DETERMINATION", "TAX_COMPUTATION"],
        ... )
        RuleModuleNotFoundError: Rule module not found: VAT_COMPUTATION
    """

    def __init__(
        self,
        message: str,
        *,
        rule_module_id: Optional[str] = None,
        available_ids: Optional[list[str]] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = True,
    ) -> None:
        """Initialize RuleModuleNotFoundError.

        Args:
            message: Human-readable error description.
            rule_module_id: The unknown identifier.
            available_ids: Identifiers the caller may use instead.
            details: Optional dictionary with additional context.
            recoverable: Defaults to True since the caller can retry with
                one of the available identifiers.
        """
        super().__init__(message, details=details, recoverable=recoverable)
        self.rule_module_id = rule_module_id
        self.available_ids = available_ids or []

        if rule_module_id:
            self.details["rule_module_id"] = rule_module_id
        if self.available_ids:
            self.details["available_ids"] = self.available_ids


class ConfigurationError(BirRulesError):
    """Raised when runtime configuration is invalid.

    Attributes:
        config_key: The configuration key that is problematic.
        expected: Description of the expected value or format.
        actual: The actual value found (if any).
    """

    def __init__(
        self,
        message: str,
        *,
        config_key: Optional[str] = None,
        expected: Optional[str] = None,
        actual: Optional[Any] = None,
        details: Optional[dict[str, Any]] = None,
        recoverable: bool = False,
    ) -> None:
        super().__init__(message, details=details, recoverable=recoverable)
        self.config_key = config_key
        self.expected = expected
        self.actual = actual

        if config_key:
            self.details["config_key"] = config_key
        if expected:
            self.details["expected"] = expected
        if actual is not None:
            self.details["actual"] = actual


__all__ = [
    "BirRulesError",
    "RuleModuleNotFoundError",
    "ConfigurationError",
]
