"""Tests for rule-based insights."""

import pytest

from suitability_report.analytics import InsightEngine, InsightThresholds, KPISet, Severity


def kpis(
    final_suitability: float = 0.0,
    lift: float = 0.0,
    total_exclusions: float = 0.0,
    budget_optimization: float = 0.0,
) -> KPISet:
    return KPISet(
        final_suitability=final_suitability,
        lift=lift,
        total_exclusions=total_exclusions,
        budget_optimization=budget_optimization,
    )


class TestSuitabilityRule:
    """Tests for the suitability grade."""

    @pytest.mark.parametrize(
        "rate, rule_id, severity",
        [
            (95.0, "suitability_high", Severity.GREEN),
            (80.01, "suitability_high", Severity.GREEN),
            (80.0, "suitability_moderate", Severity.AMBER),
            (60.01, "suitability_moderate", Severity.AMBER),
            (60.0, "suitability_low", Severity.RED),
            (0.5, "suitability_low", Severity.RED),
            (0.0, "suitability_no_data", Severity.INFO),
        ],
    )
    def test_boundaries(self, rate, rule_id, severity):
        """Each band maps to one rule."""
        insight = InsightEngine(kpis(final_suitability=rate))._check_suitability()
        assert insight.rule_id == rule_id
        assert insight.severity is severity

    def test_custom_thresholds(self):
        """Thresholds are configurable."""
        engine = InsightEngine(
            kpis(final_suitability=75.0),
            thresholds=InsightThresholds(high_suitability_pct=70.0),
        )
        assert engine._check_suitability().rule_id == "suitability_high"


class TestBudgetRule:
    """Tests for the savings message."""

    def test_savings(self):
        """Positive savings are reported in the configured currency."""
        insight = InsightEngine(kpis(budget_optimization=15000), currency_symbol="¥")._check_budget()
        assert insight.rule_id == "budget_saved"
        assert "¥15,000" in insight.description

    def test_no_data(self):
        insight = InsightEngine(kpis())._check_budget()
        assert insight.rule_id == "budget_no_data"


class TestLiftRule:
    """Tests for the lift message."""

    @pytest.mark.parametrize(
        "lift, rule_id",
        [(2.69, "lift_positive"), (-6.4, "lift_negative"), (0.0, "lift_no_data")],
    )
    def test_branches(self, lift, rule_id):
        assert InsightEngine(kpis(lift=lift))._check_lift().rule_id == rule_id


class TestGenerateInsights:
    """Tests for the combined output."""

    def test_at_most_three_in_order(self):
        """Suitability, budget and lift, in that order."""
        engine = InsightEngine(kpis(final_suitability=90, lift=3.6, budget_optimization=100))
        messages = engine.generate_insights()

        assert len(messages) == 3
        assert "90.0%" in messages[0]
        assert "saved" in messages[1]
        assert "above the baseline" in messages[2]

    def test_max_count(self):
        assert len(InsightEngine(kpis()).generate_insights(max_count=1)) == 1

    def test_zero_kpis_do_not_raise(self):
        """Every rule has a no-data branch."""
        insights = InsightEngine(kpis()).generate_all_insights()
        assert [i.severity for i in insights] == [Severity.INFO] * 3

    def test_deterministic(self):
        values = kpis(final_suitability=70, lift=-1, budget_optimization=5)
        assert InsightEngine(values).generate_insights() == InsightEngine(values).generate_insights()

    def test_to_dict(self):
        engine = InsightEngine(kpis(final_suitability=90))
        rows = engine.to_dict(engine.generate_all_insights())
        assert rows[0]["severity"] == "green"
        assert rows[0]["metrics"] == {"final_suitability": 90}
