"""
Rent Runway Agent System

This module defines the autonomous agents whose monthly finances the
simulation evolves. Agents hold state plus the small bookkeeping steps of a
month (income, expenses, returns, stress, insolvency); choosing what to do
lives in policy.py and shocks live in events.py.
"""

import random
from dataclasses import dataclass
from typing import Optional

from config import CONFIG, SimulationConfig


@dataclass(frozen=True)
class Business:
    """An owned business. Revenue is fixed for the rest of the simulation."""
    revenue: float


@dataclass(slots=True)
class FinanceAgent:
    """
    Represents one simulated person managing rent, savings and risk.

    Traits are fixed at creation and only act as multipliers in scoring.
    Once `alive` turns False the agent is bankrupt for good.
    """

    # Identification and traits
    name: str
    risk_tolerance: float  # 0.0 to 1.0
    discipline: float  # 0.0 to 1.0
    intelligence: float  # 0.0 to 1.0, carried but not used by any action
    color: str = "#ffffff"  # display only

    # Financial state
    cash: float = 5000.0
    salary: float = 2000.0
    rent: float = 800.0
    food: float = 400.0
    other_expenses: float = 300.0
    investments: float = 0.0

    # Employment and extra income
    employed: bool = True
    side_hustle: bool = False
    business: Optional[Business] = None

    # Derived / mutable
    stress: float = 0.0
    alive: bool = True

    def __post_init__(self):
        """Validate invariants after initialization."""
        for trait in ("risk_tolerance", "discipline", "intelligence"):
            value = getattr(self, trait)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{trait} must be in [0,1], got {value}")
        for cost in ("rent", "food", "other_expenses"):
            value = getattr(self, cost)
            if value < 0:
                raise ValueError(f"{cost} cannot be negative, got {value}")
        if self.salary < 0:
            raise ValueError(f"salary cannot be negative, got {self.salary}")

    @property
    def monthly_costs(self) -> float:
        return self.rent + self.food + self.other_expenses

    @property
    def net_worth(self) -> float:
        return self.cash + self.investments

    @property
    def has_business(self) -> bool:
        return self.business is not None

    def receive_income(self, rng: random.Random, config: Optional[SimulationConfig] = None) -> float:
        """
        Add salary, side hustle and business revenue to cash.

        The three sources are independent and additive. Returns the total
        amount received this month.
        """
        config = config or CONFIG
        income = 0.0
        if self.employed:
            income += self.salary
        if self.side_hustle:
            income += rng.uniform(config.market.side_hustle_min, config.market.side_hustle_max)
        if self.business is not None:
            income += self.business.revenue
        self.cash += income
        return income

    def pay_expenses(self) -> float:
        """Subtract fixed living costs from cash, unconditionally."""
        costs = self.monthly_costs
        self.cash -= costs
        return costs

    def apply_investment_return(self, rng: random.Random, config: Optional[SimulationConfig] = None) -> float:
        """Grow or shrink investments by a small uniform market return."""
        config = config or CONFIG
        rate = rng.uniform(config.market.investment_return_min, config.market.investment_return_max)
        self.investments *= 1.0 + rate
        return rate

    def update_stress(self, config: Optional[SimulationConfig] = None) -> None:
        """Penalize a rent shortfall, then apply monthly recovery with a floor of 0."""
        config = config or CONFIG
        if self.cash < self.rent:
            self.stress += config.stress.rent_shortfall_penalty
        self.stress = max(0.0, self.stress - config.stress.monthly_recovery)

    def check_insolvency(self) -> bool:
        """Mark the agent bankrupt if cash is negative. Returns True on the transition."""
        if self.alive and self.cash < 0:
            self.alive = False
            return True
        return False


def create_agent(
    name: str,
    risk_tolerance: float,
    discipline: float,
    intelligence: float,
    color: str = "#ffffff",
    side_hustle: bool = False,
    config: Optional[SimulationConfig] = None,
) -> FinanceAgent:
    """Create an agent with the configured starting finances."""
    config = config or CONFIG
    defaults = config.agents
    return FinanceAgent(
        name=name,
        risk_tolerance=risk_tolerance,
        discipline=discipline,
        intelligence=intelligence,
        color=color,
        cash=defaults.starting_cash,
        salary=defaults.salary,
        rent=defaults.rent,
        food=defaults.food,
        other_expenses=defaults.other_expenses,
        side_hustle=side_hustle,
    )


def create_population(config: Optional[SimulationConfig] = None, profiles=None):
    """Build agents from (name, risk, discipline, intelligence, color) profiles."""
    config = config or CONFIG
    if profiles is None:
        profiles = config.profiles
    return [
        create_agent(name, risk, discipline, intelligence, color, config=config)
        for name, risk, discipline, intelligence, color in profiles
    ]
