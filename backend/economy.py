"""
Economy Simulation Engine

This module implements the monthly transition for a single agent and the
population driver that advances every living agent one month at a time.

Each month follows a strict phase ordering:
1. Income (salary, side hustle, business revenue)
2. Fixed expenses
3. Random events
4. Context derivation and decision (which executes the chosen action)
5. Investment returns
6. Stress update
7. Insolvency check

Agents never interact. All randomness comes from the injected random source,
drawn per agent in this order: side hustle (if any), event draw, one jitter
per action, investment return.
"""

import logging
import random
from dataclasses import asdict, dataclass, field
from typing import Dict, List, Optional, Union

import numpy as np

from agents import FinanceAgent
from config import CONFIG, SimulationConfig
from events import EconomyState, EventKind, apply_events
from policy import ActionLabel, decide, derive_context, require_positive_costs

logger = logging.getLogger(__name__)

BANKRUPT = "BANKRUPT"


@dataclass(frozen=True)
class MonthResult:
    action: ActionLabel
    event: Optional[EventKind] = None
    became_bankrupt: bool = False


@dataclass(frozen=True)
class AgentSnapshot:
    """Per-agent view handed to display consumers after a month."""
    name: str
    color: str
    cash: float
    investments: float
    net_worth: float
    stress: float
    employed: bool
    has_business: bool
    alive: bool
    action: str
    event: Optional[str] = None


@dataclass(frozen=True)
class MonthSnapshot:
    month: int  # 1-based
    actions: Dict[str, str]
    agents: List[AgentSnapshot] = field(default_factory=list)

    @property
    def label(self) -> str:
        return f"M{self.month}"

    def to_dict(self) -> Dict:
        data = asdict(self)
        data["label"] = self.label
        return data


def run_month(
    agent: FinanceAgent,
    economy: EconomyState,
    rng: random.Random,
    config: Optional[SimulationConfig] = None,
) -> MonthResult:
    """
    Apply a full month cycle to one living agent.

    Raises:
        ValueError: if the agent is already bankrupt or has no fixed costs;
            the agent is left untouched in both cases
    """
    if not agent.alive:
        raise ValueError(f"{agent.name} is bankrupt and cannot be simulated further")
    require_positive_costs(agent)
    config = config or CONFIG

    agent.receive_income(rng, config)
    agent.pay_expenses()

    event = apply_events(agent, economy, rng, config)

    context = derive_context(agent)
    action = decide(agent, context, rng, config)

    agent.apply_investment_return(rng, config)
    agent.update_stress(config)

    became_bankrupt = agent.check_insolvency()
    if became_bankrupt:
        logger.info("%s went bankrupt (cash %.2f)", agent.name, agent.cash)

    return MonthResult(action=action, event=event, became_bankrupt=became_bankrupt)


def snapshot_agent(agent: FinanceAgent, action: str, event: Optional[EventKind] = None) -> AgentSnapshot:
    return AgentSnapshot(
        name=agent.name,
        color=agent.color,
        cash=agent.cash,
        investments=agent.investments,
        net_worth=agent.net_worth,
        stress=agent.stress,
        employed=agent.employed,
        has_business=agent.has_business,
        alive=agent.alive,
        action=action,
        event=event.value if event is not None else None,
    )


class Economy:
    """
    Population driver.

    Advances every living agent by one month per step, in population order.
    Bankrupt agents are skipped but still reported with the BANKRUPT label.
    """

    def __init__(
        self,
        agents: List[FinanceAgent],
        economy_state: Optional[EconomyState] = None,
        rng: Optional[random.Random] = None,
        config: Optional[SimulationConfig] = None,
        total_months: Optional[int] = None,
    ):
        """
        Initialize the economy with pre-constructed agents.

        Args:
            agents: Agents in display order; names must be unique
            economy_state: Economy conditions (defaults to config.recession)
            rng: Random source; a fresh unseeded one is used when omitted
            config: Simulation configuration (defaults to CONFIG)
            total_months: Horizon override (defaults to config.time.total_months)
        """
        self.config = config or CONFIG
        names = [agent.name for agent in agents]
        if len(set(names)) != len(names):
            raise ValueError(f"agent names must be unique, got {names}")

        self.agents = agents
        self.economy_state = economy_state or EconomyState(recession=self.config.recession)
        self.rng = rng or random.Random()
        self.total_months = total_months if total_months is not None else self.config.time.total_months
        if self.total_months <= 0:
            raise ValueError(f"total_months must be positive, got {self.total_months}")

        self.current_month = 0

    @property
    def is_finished(self) -> bool:
        return self.current_month >= self.total_months

    def step(self) -> MonthSnapshot:
        """Execute one simulated month for the whole population."""
        if self.is_finished:
            raise RuntimeError(f"simulation already reached its horizon of {self.total_months} months")

        # Validate the whole population first so a failing month changes nothing
        for agent in self.agents:
            if agent.alive:
                require_positive_costs(agent)

        self.current_month += 1
        actions: Dict[str, str] = {}
        snapshots: List[AgentSnapshot] = []

        for agent in self.agents:
            if agent.alive:
                result = run_month(agent, self.economy_state, self.rng, self.config)
                label = result.action.value
                event = result.event
            else:
                label = BANKRUPT
                event = None
            actions[agent.name] = label
            snapshots.append(snapshot_agent(agent, label, event))

        return MonthSnapshot(month=self.current_month, actions=actions, agents=snapshots)

    def run(self) -> List[MonthSnapshot]:
        """Step until the horizon and return every monthly snapshot."""
        history = []
        while not self.is_finished:
            history.append(self.step())
        return history


def compute_population_stats(agents: List[FinanceAgent]) -> Dict[str, Union[int, float]]:
    """Vectorized snapshot of population metrics."""
    if not agents:
        return {
            "agents": 0,
            "alive": 0,
            "bankrupt": 0,
            "mean_net_worth": 0.0,
            "median_net_worth": 0.0,
            "max_net_worth": 0.0,
            "min_net_worth": 0.0,
            "mean_stress": 0.0,
            "unemployment_rate": 0.0,
            "business_owners": 0,
        }

    net_worth = np.array([a.net_worth for a in agents], dtype=float)
    stress = np.array([a.stress for a in agents], dtype=float)
    alive = np.array([a.alive for a in agents], dtype=bool)
    employed = np.array([a.employed for a in agents], dtype=bool)
    owners = np.array([a.has_business for a in agents], dtype=bool)

    return {
        "agents": len(agents),
        "alive": int(alive.sum()),
        "bankrupt": int((~alive).sum()),
        "mean_net_worth": float(net_worth.mean()),
        "median_net_worth": float(np.median(net_worth)),
        "max_net_worth": float(net_worth.max()),
        "min_net_worth": float(net_worth.min()),
        "mean_stress": float(stress.mean()),
        "unemployment_rate": float(1.0 - employed.mean()),
        "business_owners": int(owners.sum()),
    }
