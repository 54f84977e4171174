"""
Simulation Configuration

Centralizes all tunable parameters for the personal finance simulation.
Probabilities and multipliers are illustrative constants, not calibrated
against real financial data.
"""

from dataclasses import dataclass, field
from typing import List, Tuple


# (name, risk_tolerance, discipline, intelligence, color)
AgentProfile = Tuple[str, float, float, float, str]


def _default_profiles() -> List[AgentProfile]:
    return [
        ("Conservative", 0.2, 0.9, 0.8, "#4caf50"),  # saves more, low risk
        ("Balanced", 0.5, 0.7, 0.8, "#2196f3"),
        ("Risky", 0.9, 0.3, 0.7, "#ff9800"),  # chancier moves, less disciplined
    ]


@dataclass
class TimeConfig:
    """Time-related constants."""
    total_months: int = 60  # One tick = one month
    tick_delay_seconds: float = 0.8  # Cadence used by the CLI and websocket loop


@dataclass
class AgentDefaultsConfig:
    """Starting finances for every newly created agent."""
    starting_cash: float = 5000.0
    salary: float = 2000.0
    rent: float = 800.0
    food: float = 400.0
    other_expenses: float = 300.0


@dataclass
class EventConfig:
    """Random life/economic shocks.

    Thresholds are compared against a single uniform draw in priority order,
    so they are cumulative band edges rather than independent probabilities.
    """
    recession_job_loss_threshold: float = 0.08
    job_loss_threshold: float = 0.03
    unexpected_expense_threshold: float = 0.06
    job_loss_stress: float = 20.0
    unexpected_expense_amount: float = 2000.0


@dataclass
class PolicyConfig:
    """Action scoring weights."""
    emergency_target_months: float = 3.0

    # save
    save_runway_weight: float = 20.0
    save_discipline_weight: float = 10.0
    save_risk_penalty: float = 5.0

    # invest (only when runway exceeds the target)
    invest_runway_weight: float = 5.0
    invest_discipline_weight: float = 10.0

    # start_business
    business_cash_threshold: float = 5000.0
    business_risk_weight: float = 30.0

    # job_search
    job_search_score: float = 100.0

    forbidden_score: float = -100.0  # Sentinel for "heavily discouraged"
    jitter_amplitude: float = 5.0  # Jitter is uniform in [-amplitude/2, amplitude/2)


@dataclass
class ActionConfig:
    """Deterministic action effects."""
    invest_fraction: float = 0.2  # Share of current cash moved into investments
    business_startup_cost: float = 5000.0
    business_revenue: float = 1000.0  # Fixed monthly revenue once opened


@dataclass
class MarketConfig:
    """Variable income and investment returns."""
    side_hustle_min: float = 300.0
    side_hustle_max: float = 700.0
    investment_return_min: float = -0.05
    investment_return_max: float = 0.05


@dataclass
class StressConfig:
    """Stress dynamics."""
    rent_shortfall_penalty: float = 15.0  # Added when cash < rent after the month
    monthly_recovery: float = 5.0  # Flat decay applied every month
    display_ceiling: float = 100.0  # Stress bars clamp here; state does not


@dataclass
class SimulationConfig:
    """Master configuration for the entire simulation."""

    time: TimeConfig = field(default_factory=TimeConfig)
    agents: AgentDefaultsConfig = field(default_factory=AgentDefaultsConfig)
    events: EventConfig = field(default_factory=EventConfig)
    policy: PolicyConfig = field(default_factory=PolicyConfig)
    actions: ActionConfig = field(default_factory=ActionConfig)
    market: MarketConfig = field(default_factory=MarketConfig)
    stress: StressConfig = field(default_factory=StressConfig)

    # Economy default used when the caller does not supply one
    recession: bool = True
    profiles: List[AgentProfile] = field(default_factory=_default_profiles)

    def __post_init__(self):
        """Validation and derived values."""
        if self.time.total_months <= 0:
            raise ValueError("total_months must be positive")
        if self.time.tick_delay_seconds < 0:
            raise ValueError("tick_delay_seconds cannot be negative")

        for name in ("recession_job_loss_threshold", "job_loss_threshold", "unexpected_expense_threshold"):
            value = getattr(self.events, name)
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be in [0, 1], got {value}")

        costs = (self.agents.rent, self.agents.food, self.agents.other_expenses)
        if any(cost < 0 for cost in costs):
            raise ValueError("monthly costs cannot be negative")
        if sum(costs) <= 0:
            raise ValueError("total monthly costs must be positive")

        if not (0.0 <= self.actions.invest_fraction <= 1.0):
            raise ValueError("invest_fraction must be in [0, 1]")
        if self.market.side_hustle_min > self.market.side_hustle_max:
            raise ValueError("side_hustle_min cannot exceed side_hustle_max")
        if self.market.investment_return_min > self.market.investment_return_max:
            raise ValueError("investment_return_min cannot exceed investment_return_max")


# Global configuration instance
CONFIG = SimulationConfig()
