"""
Random life and economic events.

A single uniform draw per agent-month selects at most one shock. Bands are
checked in a fixed priority order and the first match wins, so under a
recession the ordinary job-loss band is shadowed by the wider recession band.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from agents import FinanceAgent
from config import CONFIG, SimulationConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EconomyState:
    """Economy-wide conditions, passed explicitly to the event model."""
    recession: bool = False


class EventKind(str, Enum):
    RECESSION_JOB_LOSS = "recession_job_loss"
    JOB_LOSS = "job_loss"
    UNEXPECTED_EXPENSE = "unexpected_expense"


def _lose_job(agent: FinanceAgent, config: SimulationConfig) -> None:
    agent.employed = False
    agent.stress += config.events.job_loss_stress


def apply_events(
    agent: FinanceAgent,
    economy: EconomyState,
    rng: random.Random,
    config: Optional[SimulationConfig] = None,
) -> Optional[EventKind]:
    """
    Apply at most one random shock to the agent.

    Returns the event that fired, or None. Never touches `alive`.
    """
    config = config or CONFIG
    events = config.events
    r = rng.random()

    if economy.recession and r < events.recession_job_loss_threshold:
        _lose_job(agent, config)
        kind = EventKind.RECESSION_JOB_LOSS
    elif r < events.job_loss_threshold:
        _lose_job(agent, config)
        kind = EventKind.JOB_LOSS
    elif r < events.unexpected_expense_threshold:
        # medical, car, etc.
        agent.cash -= events.unexpected_expense_amount
        kind = EventKind.UNEXPECTED_EXPENSE
    else:
        return None

    logger.debug("%s: event %s (draw=%.4f)", agent.name, kind.value, r)
    return kind
