"""Tests for SynthesisEngine."""

from __future__ import annotations

import pytest

from demandsynth.signals.schema import InsightType, QualifiedInsight, SignalBundle
from demandsynth.synthesis import recommendations as rec
from demandsynth.synthesis.config import SynthesisConfig, Thresholds, Weights
from demandsynth.synthesis.engine import (
    SynthesisEngine,
    find_related_conversions,
    rank_insights,
)


def _engine(synthesis_config: SynthesisConfig, **thresholds: float) -> SynthesisEngine:
    if thresholds:
        synthesis_config = synthesis_config.model_copy(
            update={"thresholds": Thresholds(**thresholds)}
        )
    return SynthesisEngine(synthesis_config)


class TestSynthesizeInsights:
    """End-to-end synthesis behavior."""

    def test_no_signals(self, synthesis_config) -> None:
        """Test an empty bundle produces no insights."""
        engine = SynthesisEngine(synthesis_config)
        assert engine.synthesize_insights(SignalBundle()) == []
        assert engine.synthesize_insights() == []

    def test_single_query_qualifies(self, synthesis_config, make_search_row) -> None:
        """Test one strong search row yields a query insight."""
        engine = _engine(synthesis_config, min_impressions=100, min_score=0.5)
        insights = engine.synthesize_insights(
            SignalBundle(
                search_signals=[
                    make_search_row(
                        query="test query",
                        page="/page1",
                        impressions=1000,
                        clicks=50,
                        ctr=0.05,
                        position=5,
                    )
                ]
            )
        )

        query_insights = [i for i in insights if i.type == InsightType.QUERY]
        assert len(query_insights) >= 1
        assert query_insights[0].name == "test query"
        assert query_insights[0].score == pytest.approx(0.5)

    def test_low_impressions_filtered(self, synthesis_config, make_search_row) -> None:
        """Test rows below min_impressions yield neither query nor page insights."""
        engine = _engine(synthesis_config, min_impressions=100, min_score=0.5)
        insights = engine.synthesize_insights(
            SignalBundle(search_signals=[make_search_row(impressions=10, clicks=50)])
        )
        assert [i for i in insights if i.type in (InsightType.QUERY, InsightType.PAGE)] == []

    def test_sorted_by_score(self, synthesis_config, make_search_row) -> None:
        """Test the high-performing query ranks first."""
        engine = _engine(synthesis_config, min_impressions=100, min_score=0.0)
        insights = engine.synthesize_insights(
            SignalBundle(
                search_signals=[
                    make_search_row(
                        query="weak query", page="/weak", impressions=500, clicks=10, position=20
                    ),
                    make_search_row(
                        query="strong query",
                        page="/strong",
                        impressions=10000,
                        clicks=500,
                        position=3,
                    ),
                ]
            )
        )

        scores = [i.score for i in insights]
        assert scores == sorted(scores, reverse=True)
        query_names = [i.name for i in insights if i.type == InsightType.QUERY]
        assert query_names == ["strong query", "weak query"]

    def test_weak_query_dropped_at_default_threshold(
        self, synthesis_config, make_search_row
    ) -> None:
        """Test the weak group is rejected at min_score 0.5."""
        engine = SynthesisEngine(synthesis_config)
        insights = engine.synthesize_insights(
            SignalBundle(
                search_signals=[
                    make_search_row(query="strong", impressions=10000, clicks=500, position=3),
                    make_search_row(query="weak", impressions=500, clicks=10, position=20),
                ]
            )
        )
        assert "weak" not in [i.name for i in insights if i.type == InsightType.QUERY]

    def test_all_types_concatenated(
        self, synthesis_config, make_search_row, make_transition, make_ads_row
    ) -> None:
        """Test every insight type is produced from a full bundle."""
        engine = SynthesisEngine(synthesis_config)
        insights = engine.synthesize_insights(
            SignalBundle(
                search_signals=[make_search_row(clicks=100)],
                lifecycle_events=[make_transition() for _ in range(50)],
                ads_performance=[make_ads_row(conversions=20.0)],
            )
        )
        assert {i.type for i in insights} == set(InsightType)
        assert all(i.score == pytest.approx(1.0) for i in insights)
        # Equal scores keep query, page, journey, message order
        assert [i.type for i in insights] == [
            InsightType.QUERY,
            InsightType.PAGE,
            InsightType.JOURNEY,
            InsightType.MESSAGE,
        ]

    @pytest.mark.parametrize("min_score", [0.0, 0.2, 0.4, 0.6, 0.8, 1.0])
    def test_threshold_monotonic(
        self, synthesis_config, make_search_row, make_transition, make_ads_row, min_score
    ) -> None:
        """Test raising min_score never increases the qualified count."""
        bundle = SignalBundle(
            search_signals=[
                make_search_row(query=f"q{n}", page=f"/p{n}", clicks=n * 15) for n in range(8)
            ],
            lifecycle_events=[make_transition(to_stage=f"s{n % 3}") for n in range(40)],
            ads_performance=[
                make_ads_row(campaign_name=f"c{n}", conversions=float(n * 3)) for n in range(1, 8)
            ],
        )
        counts = [
            len(_engine(synthesis_config, min_score=score).synthesize_insights(bundle))
            for score in (min_score, min(min_score + 0.1, 1.0))
        ]
        assert counts[1] <= counts[0]


class TestQueryInsights:
    """Tests for query insight generation."""

    def test_related_conversions_attached(
        self, synthesis_config, make_search_row, make_conversion
    ) -> None:
        """Test conversions whose campaign mentions the query are attached."""
        engine = SynthesisEngine(synthesis_config)
        bundle = SignalBundle(
            search_signals=[make_search_row(query="CRM Software", clicks=100)],
            conversions=[
                make_conversion(campaign="best crm software deals"),
                make_conversion(campaign="erp"),
                make_conversion(campaign=None),
            ],
        )
        [insight] = engine.generate_query_insights(bundle.search_signals, bundle)
        assert [c.campaign for c in insight.signals.conversions] == ["best crm software deals"]
        assert insight.signals.search == tuple(bundle.search_signals)

    def test_recommendations(self, synthesis_config, make_search_row) -> None:
        """Test poor position and CTR add recommendations before the default."""
        engine = _engine(synthesis_config, min_score=0.0)
        bundle = SignalBundle(
            search_signals=[make_search_row(impressions=5000, clicks=40, position=15)]
        )
        [insight] = engine.generate_query_insights(bundle.search_signals, bundle)
        assert insight.recommendations == (
            rec.OPTIMIZE_RANKING,
            rec.IMPROVE_CTR,
            rec.CREATE_QUERY_EVENT,
        )

    def test_metrics(self, synthesis_config, make_search_row) -> None:
        """Test query metrics aggregate the group's rows."""
        engine = SynthesisEngine(synthesis_config)
        rows = [
            make_search_row(impressions=600, clicks=40, position=4),
            make_search_row(page="/other", impressions=400, clicks=30, position=8),
        ]
        [insight] = engine.generate_query_insights(rows, SignalBundle(search_signals=rows))
        assert insight.metrics.total_impressions == 1000
        assert insight.metrics.total_clicks == 70
        assert insight.metrics.avg_position == pytest.approx(6.0)


class TestPageInsights:
    """Tests for page insight generation."""

    def test_scored_with_matching_events(
        self, synthesis_config, make_search_row, make_event
    ) -> None:
        """Test only GA4 events on the same page contribute."""
        engine = _engine(synthesis_config, min_score=0.0)
        rows = [make_search_row(page="/pricing", clicks=100)]
        events = [make_event(page="/pricing")] * 10 + [make_event(page="/blog")] * 90
        bundle = SignalBundle(search_signals=rows, ga4_events=events)

        [insight] = engine.generate_page_insights(rows, bundle)
        expected = (0.20 * 1.0 + 0.25 * 0.1) / (0.20 + 0.25)
        assert insight.score == pytest.approx(expected)
        assert len(insight.signals.ga4) == 10

    def test_without_ga4(self, synthesis_config, make_search_row) -> None:
        """Test pages score on search alone when GA4 is not configured."""
        engine = SynthesisEngine(synthesis_config)
        rows = [make_search_row(page="/pricing", clicks=80)]
        [insight] = engine.generate_page_insights(rows, SignalBundle(search_signals=rows))
        assert insight.score == pytest.approx(0.8)
        assert insight.signals.ga4 is None

    def test_ab_testing_recommendation(self, synthesis_config, make_search_row) -> None:
        """Test high-click pages get the A/B testing recommendation."""
        engine = SynthesisEngine(synthesis_config)
        rows = [make_search_row(clicks=101)]
        [insight] = engine.generate_page_insights(rows, SignalBundle(search_signals=rows))
        assert insight.recommendations == (rec.LANDING_PAGE_CAMPAIGN, rec.AB_TESTING)


class TestJourneyInsights:
    """Tests for journey insight generation."""

    def test_no_metric_gate(self, synthesis_config, make_transition) -> None:
        """Test a single transition qualifies when min_score allows it."""
        engine = _engine(synthesis_config, min_impressions=10**9, min_score=0.0)
        [insight] = engine.generate_journey_insights([make_transition()])
        assert insight.name == "lead → marketingqualifiedlead"
        assert insight.score == pytest.approx(1 / 50)
        assert insight.metrics.total_conversions == 1

    def test_score_threshold(self, synthesis_config, make_transition) -> None:
        """Test journeys need 25 transitions to reach the default threshold."""
        engine = SynthesisEngine(synthesis_config)
        assert engine.generate_journey_insights([make_transition()] * 24) == []
        assert len(engine.generate_journey_insights([make_transition()] * 25)) == 1

    def test_fixed_recommendations(self, synthesis_config, make_transition) -> None:
        """Test every journey gets the same two recommendations."""
        engine = SynthesisEngine(synthesis_config)
        transitions = [make_transition()] * 30 + [make_transition(to_stage="customer")] * 30
        insights = engine.generate_journey_insights(transitions)
        assert len(insights) == 2
        for insight in insights:
            assert insight.recommendations == (rec.NURTURE_CAMPAIGN, rec.COMMON_TOUCHPOINTS)


class TestMessageInsights:
    """Tests for message insight generation."""

    def test_conversion_gate(self, synthesis_config, make_ads_row) -> None:
        """Test campaigns below min_conversions are skipped."""
        engine = _engine(synthesis_config, min_conversions=1, min_score=0.0)
        assert engine.generate_message_insights([make_ads_row(conversions=0.5)]) == []

    def test_scale_recommendation(self, synthesis_config, make_ads_row) -> None:
        """Test roi above 2 adds the scale recommendation."""
        engine = SynthesisEngine(synthesis_config)
        [insight] = engine.generate_message_insights(
            [make_ads_row(conversions=20.0, cost=100.0)]
        )
        assert insight.metrics.roi == pytest.approx(19.0)
        assert insight.recommendations == (rec.SCALE_CAMPAIGN, rec.APPLY_MESSAGING)

    def test_zero_cost(self, synthesis_config, make_ads_row) -> None:
        """Test zero-cost campaigns have no roi and no scale recommendation."""
        engine = SynthesisEngine(synthesis_config)
        [insight] = engine.generate_message_insights([make_ads_row(conversions=20.0, cost=0.0)])
        assert insight.metrics.roi is None
        assert insight.recommendations == (rec.APPLY_MESSAGING,)

    def test_weights_affect_only_present_family(self, synthesis_config, make_ads_row) -> None:
        """Test a lone family scores the same regardless of its weight."""
        config = synthesis_config.model_copy(update={"weights": Weights(ads=0.01)})
        [insight] = SynthesisEngine(config).generate_message_insights(
            [make_ads_row(conversions=15.0)]
        )
        assert insight.score == pytest.approx(0.75)


class TestRanking:
    """Tests for rank_insights() and find_related_conversions()."""

    def test_stable_for_ties(self) -> None:
        """Test equal scores keep their input order."""
        insights = [
            QualifiedInsight(type=InsightType.PAGE, name="a", score=0.7),
            QualifiedInsight(type=InsightType.QUERY, name="b", score=0.9),
            QualifiedInsight(type=InsightType.JOURNEY, name="c", score=0.7),
            QualifiedInsight(type=InsightType.MESSAGE, name="d", score=0.7),
        ]
        assert [i.name for i in rank_insights(insights)] == ["b", "a", "c", "d"]

    def test_does_not_mutate_input(self) -> None:
        """Test ranking returns a new list."""
        insights = [
            QualifiedInsight(type=InsightType.PAGE, name="a", score=0.1),
            QualifiedInsight(type=InsightType.PAGE, name="b", score=0.2),
        ]
        rank_insights(insights)
        assert [i.name for i in insights] == ["a", "b"]

    def test_related_conversions_none(self) -> None:
        """Test absent conversions yield an empty list."""
        assert find_related_conversions(None, "crm") == []
