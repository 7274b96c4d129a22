"""Rules engine orchestrating the assessment pipeline.

The engine runs its five rule modules in a fixed order, resolves the
effective tax regime once after regime determination, and records one
reasoning step per module. Given the same input it always produces the
same output: there is no clock, randomness or shared mutable state.

Usage:
    from bir_rules import RulesEngine

    engine = RulesEngine()
    output = engine.run_assessment(rule_input)
    print(output.computed_values.net_tax_payable)
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Union

import structlog

from .config import RulesEngineConfig
from .explanations import RuleExplanation, get_all_rule_explanations, get_rule_explanation
from .models import (
    AssessmentOutput,
    CompletenessAssessment,
    ReasoningStep,
    ReasoningTrail,
    RiskLevel,
    RuleInput,
    TaxRegime,
)
from .rules import (
    DeadlineCalculationRule,
    FilingObligationsRule,
    RegimeDeterminationRule,
    RiskAssessmentRule,
    RuleModuleId,
    TaxComputationRule,
)

logger = structlog.get_logger()

ENGINE_VERSION = "1.0.0"

# Completeness scoring: each missing field costs one check, each warning half
COMPLETENESS_CHECKS = Decimal("10")
WARNING_WEIGHT = Decimal("0.5")

MISSING_TIN = "TIN (Tax Identification Number)"
MISSING_INCOME_STREAMS = "Income streams"
WARNING_REGIME_NOT_SELECTED = "Tax regime not selected - using recommended regime"
WARNING_MISSING_2307 = "Some withholding taxes lack Form 2307 documentation"


class RulesEngine:
    """
    Deterministic tax assessment pipeline.

    Rule modules are stateless, so one engine instance can serve any number
    of concurrent assessments. Per-run identifiers and the reasoning trail
    are created inside each call.
    """

    def __init__(self, config: Optional[RulesEngineConfig] = None):
        """
        Initialize the engine and its rule module registry.

        Args:
            config: Operational settings (default: built-in defaults)
        """
        self.config = config or RulesEngineConfig()
        self.regime_rule = RegimeDeterminationRule()
        self.computation_rule = TaxComputationRule()
        self.obligations_rule = FilingObligationsRule()
        self.deadline_rule = DeadlineCalculationRule()
        self.risk_rule = RiskAssessmentRule()
        self.registry = (
            self.regime_rule,
            self.computation_rule,
            self.obligations_rule,
            self.deadline_rule,
            self.risk_rule,
        )

    def run_assessment(self, rule_input: RuleInput) -> AssessmentOutput:
        """
        Run the full assessment pipeline.

        Args:
            rule_input: Validated taxpayer snapshot for one tax year

        Returns:
            AssessmentOutput with every module's result and the reasoning receipt
        """
        logger.info(
            "assessment_started",
            tax_year=rule_input.tax_year,
            user_type=rule_input.user_type.value,
            income_streams=len(rule_input.income_streams),
            expenses=len(rule_input.expenses),
        )
        trail = ReasoningTrail()

        # Step 1: regime determination
        regime_comparison = self.regime_rule.execute(rule_input)
        self._record(
            trail,
            self.regime_rule,
            explanation=regime_comparison.recommendation_reason,
            input_digest={
                "user_type": rule_input.user_type.value,
                "gross_income": rule_input.gross_income,
                "has_employment_income": rule_input.has_employment_income,
            },
            output_digest={
                "eligible_8_percent": regime_comparison.eligible_8_percent,
                "recommendation": regime_comparison.recommendation.value,
            },
        )

        effective_regime = self.resolve_effective_regime(
            rule_input.selected_regime, regime_comparison.recommendation
        )

        # Step 2: tax computation
        computed_values = self.computation_rule.execute(rule_input, effective_regime)
        method = (
            "8% flat rate"
            if effective_regime == TaxRegime.EIGHT_PERCENT_FLAT
            else "graduated rates with deductions"
        )
        self._record(
            trail,
            self.computation_rule,
            explanation=f"Tax computed using {method}.",
            input_digest={
                "regime": effective_regime.value,
                "gross_income": computed_values.gross_income,
                "deductions": computed_values.total_deductions,
            },
            output_digest={
                "taxable_income": computed_values.taxable_income,
                "estimated_tax": computed_values.estimated_tax,
                "net_tax_payable": computed_values.net_tax_payable,
            },
        )

        # Step 3: filing obligations
        obligations = self.obligations_rule.execute(rule_input, effective_regime)
        applicable_forms = [o.form_code for o in obligations if o.is_applicable]
        self._record(
            trail,
            self.obligations_rule,
            explanation=f"Identified {len(applicable_forms)} applicable filing obligations.",
            input_digest={
                "user_type": rule_input.user_type.value,
                "regime": effective_regime.value,
                "has_employment_income": rule_input.has_employment_income,
            },
            output_digest={
                "applicable_obligations": applicable_forms,
                "total_obligations": len(obligations),
            },
        )

        # Step 4: deadlines
        deadlines = self.deadline_rule.execute(rule_input, obligations)
        next_due = str(deadlines[0].due_date) if deadlines else "None"
        self._record(
            trail,
            self.deadline_rule,
            explanation=(
                f"Calculated {len(deadlines)} filing deadlines for tax year {rule_input.tax_year}."
            ),
            input_digest={
                "tax_year": rule_input.tax_year,
                "obligations": applicable_forms,
            },
            output_digest={
                "total_deadlines": len(deadlines),
                "next_deadline": next_due,
            },
        )

        # Step 5: risk assessment
        risk_flags = self.risk_rule.execute(rule_input, effective_regime)
        critical = sum(1 for f in risk_flags if f.level == RiskLevel.CPA_REVIEW_REQUIRED)
        warnings = sum(1 for f in risk_flags if f.level == RiskLevel.WARNING)
        self._record(
            trail,
            self.risk_rule,
            explanation=(
                f"Identified {len(risk_flags)} risk flags, including {critical} requiring CPA review."
            ),
            input_digest={
                "registration_status": rule_input.registration_status.value,
                "total_income": computed_values.gross_income,
                "has_withholding": rule_input.has_withholding,
            },
            output_digest={
                "total_flags": len(risk_flags),
                "critical_flags": critical,
                "warning_flags": warnings,
            },
        )

        # Completeness is judged on what the taxpayer declared, not the resolved regime
        receipt = trail.build(self.assess_completeness(rule_input))

        output = AssessmentOutput(
            effective_regime=effective_regime,
            regime_comparison=regime_comparison,
            computed_values=computed_values,
            obligations=obligations,
            deadlines=deadlines,
            risk_flags=risk_flags,
            reasoning_receipt=receipt,
            rules_engine_version=ENGINE_VERSION,
        )

        logger.info(
            "assessment_completed",
            tax_year=rule_input.tax_year,
            effective_regime=effective_regime.value,
            net_tax_payable=str(computed_values.net_tax_payable),
            applicable_obligations=len(applicable_forms),
            deadlines=len(deadlines),
            risk_flags=len(risk_flags),
            completeness_score=receipt.completeness.score,
        )
        return output

    def _record(
        self,
        trail: ReasoningTrail,
        rule,
        explanation: str,
        input_digest: dict,
        output_digest: dict,
    ) -> ReasoningStep:
        """Add a reasoning step for a rule module and log it."""
        step = trail.add_step(
            rule_module_id=rule.module_id.value,
            rule_module_version=rule.version,
            explanation=explanation,
            input_digest=input_digest,
            output_digest=output_digest,
        )
        if self.config.is_debug:
            logger.debug(
                "rule_module_executed",
                step=step.step_number,
                rule_module_id=step.rule_module_id,
                input_digest={k: str(v) for k, v in input_digest.items()},
                output_digest={k: str(v) for k, v in output_digest.items()},
            )
        else:
            logger.debug(
                "rule_module_executed",
                step=step.step_number,
                rule_module_id=step.rule_module_id,
            )
        return step

    @staticmethod
    def resolve_effective_regime(
        selected_regime: Optional[TaxRegime],
        recommendation: TaxRegime,
    ) -> TaxRegime:
        """A concrete declared regime wins; otherwise the recommendation is used."""
        if selected_regime is not None and selected_regime.is_concrete:
            return selected_regime
        return recommendation

    @staticmethod
    def assess_completeness(rule_input: RuleInput) -> CompletenessAssessment:
        """
        Score how complete the declared input is.

        Args:
            rule_input: The original input (before regime resolution)

        Returns:
            CompletenessAssessment with a 0-100 score
        """
        missing_fields: list[str] = []
        warnings: list[str] = []

        if not rule_input.tin:
            missing_fields.append(MISSING_TIN)
        if not rule_input.income_streams:
            missing_fields.append(MISSING_INCOME_STREAMS)

        if not rule_input.regime_choice.is_concrete:
            warnings.append(WARNING_REGIME_NOT_SELECTED)
        if any(s.missing_certificate for s in rule_input.income_streams):
            warnings.append(WARNING_MISSING_2307)

        passed = COMPLETENESS_CHECKS - len(missing_fields) - len(warnings) * WARNING_WEIGHT
        raw_score = (passed / COMPLETENESS_CHECKS * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP)
        score = int(min(Decimal("100"), max(Decimal("0"), raw_score)))

        return CompletenessAssessment(
            score=score,
            missing_fields=missing_fields,
            warnings=warnings,
        )

    @staticmethod
    def get_version() -> str:
        """Version of the rules engine."""
        return ENGINE_VERSION

    @staticmethod
    def get_rule_explanation(rule_module_id: Union[RuleModuleId, str]) -> RuleExplanation:
        """Plain-language explanation of one rule module."""
        return get_rule_explanation(rule_module_id)

    @staticmethod
    def get_all_rule_explanations() -> list[RuleExplanation]:
        """Plain-language explanations of every rule module, in pipeline order."""
        return get_all_rule_explanations()


def run_assessment(rule_input: RuleInput, config: Optional[RulesEngineConfig] = None) -> AssessmentOutput:
    """
    Convenience function to run one assessment.

    Args:
        rule_input: Validated taxpayer snapshot
        config: Optional engine configuration

    Returns:
        AssessmentOutput
    """
    engine = RulesEngine(config)
    return engine.run_assessment(rule_input)
