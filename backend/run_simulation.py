"""
Run the Rent Runway simulation from the command line.

Creates the configured population and advances it month by month, printing
an action feed, a net worth scoreboard and stress bars after every month,
followed by a final summary.
"""

import argparse
import random
import time
from typing import List, Optional

from agents import create_population
from config import CONFIG, SimulationConfig
from economy import Economy, MonthSnapshot, compute_population_stats
from events import EconomyState

BAR_WIDTH = 20


def render_stress_bar(stress: float, ceiling: float = 100.0, width: int = BAR_WIDTH) -> str:
    """Render stress as a fixed-width bar, clamped to the display ceiling."""
    fraction = max(0.0, min(stress, ceiling)) / ceiling
    filled = int(round(fraction * width))
    return "[" + "#" * filled + "-" * (width - filled) + "]"


def format_month(snapshot: MonthSnapshot, ceiling: float = 100.0) -> str:
    """Action feed, scoreboard and stress panel for one month."""
    name_width = max((len(a.name) for a in snapshot.agents), default=0)
    lines = [f"Month {snapshot.month}"]

    lines.append("  Actions:")
    for agent in snapshot.agents:
        lines.append(f"    {agent.name:<{name_width}}  {snapshot.actions[agent.name]}")

    lines.append("  Scoreboard:")
    for agent in snapshot.agents:
        lines.append(f"    {agent.name:<{name_width}}  ${round(agent.net_worth):,}")

    lines.append("  Stress Levels:")
    for agent in snapshot.agents:
        bar = render_stress_bar(agent.stress, ceiling)
        lines.append(f"    {agent.name:<{name_width}}  {bar} {min(agent.stress, ceiling):5.1f}")

    return "\n".join(lines)


def main(
    total_months: Optional[int] = None,
    recession: Optional[bool] = None,
    seed: Optional[int] = None,
    delay: float = 0.0,
    quiet: bool = False,
    config: Optional[SimulationConfig] = None,
) -> List[MonthSnapshot]:
    """Run the simulation with configurable horizon and economy."""
    config = config or CONFIG
    if total_months is None:
        total_months = config.time.total_months
    if recession is None:
        recession = config.recession
    print("=" * 60)
    print(f"RENT RUNWAY SIMULATION ({total_months} months, recession={'on' if recession else 'off'})")
    print("=" * 60)
    print()

    agents = create_population(config)
    economy = Economy(
        agents,
        economy_state=EconomyState(recession=recession),
        rng=random.Random(seed),
        config=config,
        total_months=total_months,
    )

    history = []
    while not economy.is_finished:
        snapshot = economy.step()
        history.append(snapshot)
        if not quiet:
            print(format_month(snapshot, config.stress.display_ceiling))
            print("-" * 60)
        if delay > 0:
            time.sleep(delay)

    stats = compute_population_stats(agents)
    print()
    print("=" * 60)
    print("FINAL SUMMARY")
    print("=" * 60)
    print(f"{'Agent':<15} | {'Net Worth':>12} | {'Stress':>7} | {'Business':>8} | Status")
    print("-" * 60)
    for agent in agents:
        status = "alive" if agent.alive else "BANKRUPT"
        print(f"{agent.name:<15} | ${agent.net_worth:>11,.0f} | {agent.stress:7.1f} | "
              f"{'yes' if agent.has_business else 'no':>8} | {status}")
    print()
    print(f"  Mean net worth:   ${stats['mean_net_worth']:,.0f}")
    print(f"  Median net worth: ${stats['median_net_worth']:,.0f}")
    print(f"  Bankrupt agents:  {stats['bankrupt']}/{stats['agents']}")
    print(f"  Unemployment:     {stats['unemployment_rate']:.0%}")
    print()

    return history


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Run the Rent Runway simulation.")
    parser.add_argument("--months", type=int, default=CONFIG.time.total_months, help="Number of months to simulate")
    parser.add_argument(
        "--recession",
        action=argparse.BooleanOptionalAction,
        default=CONFIG.recession,
        help="Simulate a recession (higher chance of job loss)"
    )
    parser.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")
    parser.add_argument("--delay", type=float, default=0.0, help="Seconds to wait between months")
    parser.add_argument("--quiet", action="store_true", help="Only print the final summary")
    args = parser.parse_args()

    if args.months <= 0:
        parser.error("--months must be positive")

    main(
        total_months=args.months,
        recession=args.recession,
        seed=args.seed,
        delay=args.delay,
        quiet=args.quiet,
    )
