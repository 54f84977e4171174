"""
Unit tests for context derivation, scoring and action execution
"""

import random
from dataclasses import asdict

import pytest

from agents import Business, FinanceAgent, create_agent
from policy import (
    ACTION_ORDER,
    ActionLabel,
    DecisionContext,
    base_scores,
    choose_action,
    decide,
    derive_context,
    execute_action,
    score_actions,
)

NO_JITTER = [0.5, 0.5, 0.5, 0.5]


class TestContext:

    def test_emergency_months_is_cash_over_costs(self):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        agent.cash = 4500.0

        assert derive_context(agent).emergency_months == pytest.approx(3.0)

    def test_negative_cash_gives_negative_runway(self):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        agent.cash = -750.0

        assert derive_context(agent).emergency_months == pytest.approx(-0.5)

    def test_zero_costs_fail_fast(self):
        agent = FinanceAgent(
            name="Free", risk_tolerance=0.5, discipline=0.5, intelligence=0.5,
            rent=0.0, food=0.0, other_expenses=0.0
        )

        with pytest.raises(ValueError, match="monthly costs"):
            derive_context(agent)


class TestScoring:

    def test_canonical_order(self):
        assert [a.value for a in ACTION_ORDER] == ["save", "invest", "start_business", "job_search"]

    def test_base_scores_with_thin_buffer(self):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        agent.cash = 3000.0  # 2 months of runway

        scores = base_scores(agent, derive_context(agent))

        assert scores[ActionLabel.SAVE] == pytest.approx((3 - 2) * 20 + 0.7 * 10 - 0.5 * 5)
        assert scores[ActionLabel.INVEST] == -100.0
        assert scores[ActionLabel.START_BUSINESS] == -100.0
        assert scores[ActionLabel.JOB_SEARCH] == -100.0

    def test_base_scores_with_comfortable_buffer(self):
        agent = create_agent("Risky", 0.9, 0.3, 0.7)
        agent.cash = 6000.0  # 4 months of runway

        scores = base_scores(agent, derive_context(agent))

        assert scores[ActionLabel.SAVE] == pytest.approx((3 - 4) * 20 + 0.3 * 10 - 0.9 * 5)
        assert scores[ActionLabel.INVEST] == pytest.approx(4 * 5 + 0.3 * 10)
        assert scores[ActionLabel.START_BUSINESS] == pytest.approx(0.9 * 30)

    def test_invest_requires_runway_strictly_above_target(self):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        scores = base_scores(agent, DecisionContext(emergency_months=3.0))

        assert scores[ActionLabel.INVEST] == -100.0

    def test_business_forbidden_once_owned(self):
        agent = create_agent("Risky", 0.9, 0.3, 0.7)
        agent.cash = 20000.0
        agent.business = Business(revenue=1000.0)

        scores = base_scores(agent, derive_context(agent))

        assert scores[ActionLabel.START_BUSINESS] == -100.0

    def test_business_requires_cash_strictly_above_threshold(self):
        agent = create_agent("Risky", 0.9, 0.3, 0.7)
        agent.cash = 5000.0

        scores = base_scores(agent, derive_context(agent))

        assert scores[ActionLabel.START_BUSINESS] == -100.0

    def test_jitter_is_bounded(self, scripted_rng):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        context = derive_context(agent)
        base = base_scores(agent, context)

        low = score_actions(agent, context, scripted_rng([0.0] * 4))
        high = score_actions(agent, context, scripted_rng([0.999999] * 4))

        for label in ACTION_ORDER:
            assert low[label] == pytest.approx(base[label] - 2.5)
            assert high[label] == pytest.approx(base[label] + 2.5, abs=1e-5)
            assert high[label] < base[label] + 2.5

    def test_jitter_draws_follow_canonical_order(self, scripted_rng):
        agent = create_agent("Balanced", 0.5, 0.7, 0.8)
        context = derive_context(agent)
        base = base_scores(agent, context)

        scores = score_actions(agent, context, scripted_rng([0.0, 0.2, 0.4, 0.6]))

        assert scores[ActionLabel.SAVE] - base[ActionLabel.SAVE] == pytest.approx(-2.5)
        assert scores[ActionLabel.INVEST] - base[ActionLabel.INVEST] == pytest.approx(-1.5)
        assert scores[ActionLabel.START_BUSINESS] - base[ActionLabel.START_BUSINESS] == pytest.approx(-0.5)
        assert scores[ActionLabel.JOB_SEARCH] - base[ActionLabel.JOB_SEARCH] == pytest.approx(0.5)

    def test_unemployed_agent_with_no_runway_searches_for_work(self):
        """A 200-point gap cannot be closed by +/-2.5 jitter"""
        for seed in range(200):
            agent = create_agent("Unlucky", 0.5, 0.7, 0.8)
            agent.employed = False
            agent.cash = 100.0
            context = derive_context(agent)

            assert context.emergency_months == pytest.approx(100.0 / 1500.0)
            assert decide(agent, context, random.Random(seed)) is ActionLabel.JOB_SEARCH
            assert agent.employed is True


class TestChooseAction:

    def test_highest_score_wins(self):
        scores = {
            ActionLabel.SAVE: 1.0,
            ActionLabel.INVEST: 5.0,
            ActionLabel.START_BUSINESS: 3.0,
            ActionLabel.JOB_SEARCH: -100.0,
        }

        assert choose_action(scores) is ActionLabel.INVEST

    def test_ties_resolve_to_first_in_canonical_order(self):
        assert choose_action({label: 0.0 for label in ACTION_ORDER}) is ActionLabel.SAVE

        scores = {
            ActionLabel.SAVE: -1.0,
            ActionLabel.INVEST: 7.0,
            ActionLabel.START_BUSINESS: 2.0,
            ActionLabel.JOB_SEARCH: 7.0,
        }
        assert choose_action(scores) is ActionLabel.INVEST


class TestExecuteAction:

    def test_save_changes_nothing(self):
        agent = create_agent("Saver", 0.2, 0.9, 0.8)
        before = asdict(agent)

        execute_action(agent, ActionLabel.SAVE)

        assert asdict(agent) == before

    def test_invest_moves_twenty_percent_of_cash(self):
        agent = create_agent("Investor", 0.5, 0.7, 0.8)
        agent.cash = 8000.0
        agent.investments = 100.0

        execute_action(agent, ActionLabel.INVEST)

        assert agent.investments == pytest.approx(100.0 + 1600.0)
        assert agent.cash == pytest.approx(6400.0)

    def test_invest_with_negative_cash_is_not_clamped(self):
        agent = create_agent("Investor", 0.5, 0.7, 0.8)
        agent.cash = -500.0

        execute_action(agent, ActionLabel.INVEST)

        assert agent.investments == pytest.approx(-100.0)
        assert agent.cash == pytest.approx(-400.0)

    def test_start_business_costs_cash_and_creates_revenue(self):
        agent = create_agent("Founder", 0.9, 0.3, 0.7)
        agent.cash = 7000.0

        execute_action(agent, ActionLabel.START_BUSINESS)

        assert agent.cash == pytest.approx(2000.0)
        assert agent.business == Business(revenue=1000.0)

    def test_second_business_has_no_effect(self):
        agent = create_agent("Founder", 0.9, 0.3, 0.7)
        agent.cash = 12000.0
        execute_action(agent, ActionLabel.START_BUSINESS)
        first = agent.business

        execute_action(agent, ActionLabel.START_BUSINESS)

        assert agent.business is first
        assert agent.cash == pytest.approx(7000.0)

    def test_job_search_always_employs(self):
        agent = create_agent("Worker", 0.5, 0.7, 0.8)

        execute_action(agent, ActionLabel.JOB_SEARCH)
        assert agent.employed is True

        agent.employed = False
        execute_action(agent, ActionLabel.JOB_SEARCH)
        assert agent.employed is True


class TestDecide:

    def test_decide_executes_the_winner(self, scripted_rng):
        agent = create_agent("Bold", 1.0, 0.0, 0.5)
        agent.cash = 20000.0
        rng = scripted_rng(NO_JITTER)

        action = decide(agent, derive_context(agent), rng)

        # invest = 13.33 * 5 = 66.7 beats start_business = 30
        assert action is ActionLabel.INVEST
        assert agent.investments == pytest.approx(4000.0)
        assert agent.cash == pytest.approx(16000.0)
        assert rng.calls == 4

    def test_decide_can_open_a_business(self, scripted_rng):
        agent = create_agent("Bold", 1.0, 0.0, 0.5)
        agent.cash = 5100.0  # 3.4 months: invest = 17, business = 30

        action = decide(agent, derive_context(agent), scripted_rng(NO_JITTER))

        assert action is ActionLabel.START_BUSINESS
        assert agent.business.revenue == 1000.0
        assert agent.cash == pytest.approx(100.0)
