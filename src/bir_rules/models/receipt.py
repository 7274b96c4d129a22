"""Reasoning receipt models for auditing an assessment run.

The receipt records, in order, what each rule module was given, what it
produced and a one-sentence explanation, plus an assessment of how
complete the taxpayer's input was. It lets the explanation layer narrate
an assessment without re-deriving any computation.

Receipts carry no timestamps so that identical input always yields an
identical receipt.
"""

from typing import Any, Optional

from pydantic import BaseModel, Field


class ReasoningStep(BaseModel):
    """One pipeline stage as recorded in the receipt.

    Attributes:
        step_number: 1-based position in the pipeline
        rule_module_id: Identifier of the rule module that ran
        rule_module_version: Version of that rule module
        input_digest: Small summary of what the module consumed
        output_digest: Small summary of what the module produced
        explanation: One-sentence natural-language explanation
    """

    model_config = {"frozen": True}

    step_number: int = Field(ge=1)
    rule_module_id: str
    rule_module_version: str
    input_digest: dict[str, Any] = Field(default_factory=dict)
    output_digest: dict[str, Any] = Field(default_factory=dict)
    explanation: str

    @property
    def explanation_id(self) -> str:
        """Stable key for the static explanation of this module version."""
        return f"{self.rule_module_id}_v{self.rule_module_version}"


class CompletenessAssessment(BaseModel):
    """How complete the taxpayer's input data was.

    Attributes:
        score: 0-100, lower means more missing data
        missing_fields: Required data that was absent
        warnings: Data quality issues that did not block the assessment
    """

    model_config = {"frozen": True}

    score: int = Field(ge=0, le=100)
    missing_fields: list[str] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """True when nothing is missing and nothing was flagged."""
        return not self.missing_fields and not self.warnings


class ReasoningReceipt(BaseModel):
    """Ordered reasoning steps plus the completeness assessment."""

    model_config = {"frozen": True}

    steps: list[ReasoningStep] = Field(default_factory=list)
    explanation_ids: list[str] = Field(default_factory=list)
    completeness: CompletenessAssessment

    def get_step_for_module(self, rule_module_id: str) -> Optional[ReasoningStep]:
        """Return the step recorded for a rule module, if it ran."""
        for step in self.steps:
            if step.rule_module_id == rule_module_id:
                return step
        return None

    def summary(self) -> dict[str, object]:
        """Generate a summary of the receipt.

        Returns:
            Dictionary with summary statistics
        """
        return {
            "step_count": len(self.steps),
            "modules": [s.rule_module_id for s in self.steps],
            "completeness_score": self.completeness.score,
            "missing_field_count": len(self.completeness.missing_fields),
            "warning_count": len(self.completeness.warnings),
        }


class ReasoningTrail:
    """Collects reasoning steps during a single assessment run.

    A trail is created per run and discarded once the receipt is built,
    so concurrent runs never share step numbering.
    """

    def __init__(self) -> None:
        self._steps: list[ReasoningStep] = []

    def add_step(
        self,
        rule_module_id: str,
        rule_module_version: str,
        explanation: str,
        input_digest: Optional[dict[str, Any]] = None,
        output_digest: Optional[dict[str, Any]] = None,
    ) -> ReasoningStep:
        """Record the next pipeline step.

        Args:
            rule_module_id: Identifier of the module that ran
            rule_module_version: Version of the module
            explanation: One-sentence explanation of the outcome
            input_digest: Small summary of the module input
            output_digest: Small summary of the module output

        Returns:
            The created ReasoningStep
        """
        step = ReasoningStep(
            step_number=len(self._steps) + 1,
            rule_module_id=rule_module_id,
            rule_module_version=rule_module_version,
            input_digest=input_digest or {},
            output_digest=output_digest or {},
            explanation=explanation,
        )
        self._steps.append(step)
        return step

    @property
    def steps(self) -> list[ReasoningStep]:
        """Steps recorded so far, in order."""
        return list(self._steps)

    def build(self, completeness: CompletenessAssessment) -> ReasoningReceipt:
        """Freeze the trail into a ReasoningReceipt."""
        return ReasoningReceipt(
            steps=list(self._steps),
            explanation_ids=[s.explanation_id for s in self._steps],
            completeness=completeness,
        )
