"""
Decision policy for finance agents.

Agents score each candidate action from their traits and a derived context,
add a small jitter so behavior is less predictable, and execute the winner.
Negative scores mean "forbidden"; the -100 sentinel keeps an action from
winning except under pathological jitter.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional

from agents import Business, FinanceAgent
from config import CONFIG, SimulationConfig

logger = logging.getLogger(__name__)


class ActionLabel(str, Enum):
    """Candidate actions. Declaration order is the canonical tie-break order."""
    SAVE = "save"
    INVEST = "invest"
    START_BUSINESS = "start_business"
    JOB_SEARCH = "job_search"


ACTION_ORDER = tuple(ActionLabel)


@dataclass(frozen=True)
class DecisionContext:
    """Signals derived from agent state before deciding."""
    emergency_months: float  # months of fixed costs covered by cash


def require_positive_costs(agent: FinanceAgent) -> float:
    """Return the agent's fixed monthly costs, failing if they cannot divide runway."""
    costs = agent.monthly_costs
    if costs <= 0:
        raise ValueError(
            f"monthly costs must be positive to derive emergency runway, got {costs} for {agent.name}"
        )
    return costs


def derive_context(agent: FinanceAgent) -> DecisionContext:
    costs = require_positive_costs(agent)
    return DecisionContext(emergency_months=agent.cash / costs)


def base_scores(
    agent: FinanceAgent,
    context: DecisionContext,
    config: Optional[SimulationConfig] = None,
) -> Dict[ActionLabel, float]:
    """Jitter-free action scores."""
    config = config or CONFIG
    p = config.policy
    months = context.emergency_months

    # Saving matters more when the emergency buffer is small
    save = (
        (p.emergency_target_months - months) * p.save_runway_weight
        + agent.discipline * p.save_discipline_weight
        - agent.risk_tolerance * p.save_risk_penalty
    )

    if months > p.emergency_target_months:
        invest = months * p.invest_runway_weight + agent.discipline * p.invest_discipline_weight
    else:
        invest = p.forbidden_score

    if agent.cash > p.business_cash_threshold and agent.business is None:
        start_business = agent.risk_tolerance * p.business_risk_weight
    else:
        start_business = p.forbidden_score

    job_search = p.job_search_score if not agent.employed else p.forbidden_score

    return {
        ActionLabel.SAVE: save,
        ActionLabel.INVEST: invest,
        ActionLabel.START_BUSINESS: start_business,
        ActionLabel.JOB_SEARCH: job_search,
    }


def score_actions(
    agent: FinanceAgent,
    context: DecisionContext,
    rng: random.Random,
    config: Optional[SimulationConfig] = None,
) -> Dict[ActionLabel, float]:
    """Base scores plus independent uniform jitter, drawn in canonical order."""
    config = config or CONFIG
    half = config.policy.jitter_amplitude / 2.0
    scores = base_scores(agent, context, config)
    for label in ACTION_ORDER:
        scores[label] += rng.uniform(-half, half)
    return scores


def choose_action(scores: Dict[ActionLabel, float]) -> ActionLabel:
    """Pick the first action, in canonical order, whose score no other action exceeds."""
    best = ACTION_ORDER[0]
    for label in ACTION_ORDER[1:]:
        if scores[label] > scores[best]:
            best = label
    return best


def execute_action(
    agent: FinanceAgent,
    action: ActionLabel,
    config: Optional[SimulationConfig] = None,
) -> None:
    """Apply the immediate, deterministic effect of an action."""
    config = config or CONFIG
    a = config.actions

    if action is ActionLabel.INVEST:
        amount = agent.cash * a.invest_fraction
        agent.investments += amount
        agent.cash -= amount
    elif action is ActionLabel.START_BUSINESS:
        if agent.business is not None:
            logger.debug("%s already owns a business; start_business ignored", agent.name)
            return
        agent.cash -= a.business_startup_cost
        agent.business = Business(revenue=a.business_revenue)
        logger.info("%s opened a business (revenue %.0f/month)", agent.name, a.business_revenue)
    elif action is ActionLabel.JOB_SEARCH:
        agent.employed = True
    # SAVE: no other mutating action is taken


def decide(
    agent: FinanceAgent,
    context: DecisionContext,
    rng: random.Random,
    config: Optional[SimulationConfig] = None,
) -> ActionLabel:
    """Score, choose and execute one action, returning its label."""
    scores = score_actions(agent, context, rng, config)
    action = choose_action(scores)
    execute_action(agent, action, config)
    return action
