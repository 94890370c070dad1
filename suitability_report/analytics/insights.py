"""Rule-based insight generation from headline KPIs."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .models import KPISet


class Severity(str, Enum):
    """Insight severity levels."""

    GREEN = "green"  # Good / On track
    AMBER = "amber"  # Warning / Needs attention
    RED = "red"  # Critical / Action required
    INFO = "info"  # No data to judge


@dataclass(frozen=True)
class Insight:
    """Single insight with description, severity, and recommendation."""

    rule_id: str
    description: str
    severity: Severity
    recommendation: str
    metrics: dict[str, Any] | None = None


@dataclass
class InsightThresholds:
    """Configurable thresholds for insight rules.

    Suitability thresholds are on the 0-100 scale.
    """

    # Above this the campaign ran in highly suitable inventory
    high_suitability_pct: float = 80.0

    # Above this (and up to high) suitability is moderate
    moderate_suitability_pct: float = 60.0


class InsightEngine:
    """Threshold rules over a KPISet.

    One rule per KPI, evaluated in a fixed order (suitability, budget,
    lift). Every rule always fires exactly one branch, including a "no data"
    branch when its KPI is 0, so output is deterministic and never raises.

    Usage:
        engine = InsightEngine(kpis)
        messages = engine.generate_insights()
    """

    def __init__(
        self,
        kpis: KPISet,
        thresholds: InsightThresholds | None = None,
        currency_symbol: str = "¥",
    ):
        self.kpis = kpis
        self.thresholds = thresholds or InsightThresholds()
        self.currency_symbol = currency_symbol

    def generate_all_insights(self) -> list[Insight]:
        """Run all insight rules in order."""
        return [
            self._check_suitability(),
            self._check_budget(),
            self._check_lift(),
        ]

    def generate_insights(self, max_count: int = 3) -> list[str]:
        """Insight sentences, at most `max_count` of them."""
        return [insight.description for insight in self.generate_all_insights()[:max_count]]

    def _check_suitability(self) -> Insight:
        """Grade the brand suitability rate."""
        rate = self.kpis.final_suitability
        metrics = {"final_suitability": rate}

        if rate > self.thresholds.high_suitability_pct:
            return Insight(
                rule_id="suitability_high",
                description=(
                    f"Brand suitability reached {rate:.1f}%, "
                    f"keeping ads in highly suitable content."
                ),
                severity=Severity.GREEN,
                recommendation="Maintain the current exclusion lists and targeting.",
                metrics=metrics,
            )
        if rate > self.thresholds.moderate_suitability_pct:
            return Insight(
                rule_id="suitability_moderate",
                description=(
                    f"Brand suitability is {rate:.1f}%, a moderate level "
                    f"with room to tighten placements."
                ),
                severity=Severity.AMBER,
                recommendation="Review the categories with the highest unsuitable share.",
                metrics=metrics,
            )
        if rate > 0:
            return Insight(
                rule_id="suitability_low",
                description=(
                    f"Brand suitability is {rate:.1f}% and needs improvement."
                ),
                severity=Severity.RED,
                recommendation=(
                    "Expand exclusion lists and revisit targeting for the riskiest "
                    "categories."
                ),
                metrics=metrics,
            )
        return Insight(
            rule_id="suitability_no_data",
            description="No suitability data was available for this period.",
            severity=Severity.INFO,
            recommendation="Upload a suitability report to grade placements.",
            metrics=metrics,
        )

    def _check_budget(self) -> Insight:
        """Report spend avoided by excluding unsuitable inventory."""
        savings = self.kpis.budget_optimization
        metrics = {
            "budget_optimization": savings,
            "total_exclusions": self.kpis.total_exclusions,
        }

        if savings > 0:
            return Insight(
                rule_id="budget_saved",
                description=(
                    f"Excluding unsuitable placements saved an estimated "
                    f"{self.currency_symbol}{savings:,.0f} in media spend."
                ),
                severity=Severity.GREEN,
                recommendation="Reinvest the saved budget in the best-performing categories.",
                metrics=metrics,
            )
        return Insight(
            rule_id="budget_no_data",
            description="No exclusion data was available to estimate savings.",
            severity=Severity.INFO,
            recommendation="Upload an exclusion report to estimate avoided spend.",
            metrics=metrics,
        )

    def _check_lift(self) -> Insight:
        """Compare suitability against the historical baseline."""
        lift = self.kpis.lift
        metrics = {"lift": lift}

        if lift > 0:
            return Insight(
                rule_id="lift_positive",
                description=(
                    f"Suitability ran {lift:.1f} points above the baseline, "
                    f"improving visibility in safe content."
                ),
                severity=Severity.GREEN,
                recommendation="Keep the current suitability settings.",
                metrics=metrics,
            )
        if lift < 0:
            return Insight(
                rule_id="lift_negative",
                description=(
                    f"Suitability ran {abs(lift):.1f} points below the baseline, "
                    f"leaving room for improvement."
                ),
                severity=Severity.AMBER,
                recommendation="Tighten suitability settings to reach the baseline.",
                metrics=metrics,
            )
        return Insight(
            rule_id="lift_no_data",
            description="No lift could be measured for this period.",
            severity=Severity.INFO,
            recommendation="Upload a suitability report to measure lift.",
            metrics=metrics,
        )

    def to_dict(self, insights: list[Insight]) -> list[dict[str, Any]]:
        """Convert insights to JSON-serializable dicts."""
        return [
            {
                "rule_id": i.rule_id,
                "description": i.description,
                "severity": i.severity.value,
                "recommendation": i.recommendation,
                "metrics": i.metrics,
            }
            for i in insights
        ]
