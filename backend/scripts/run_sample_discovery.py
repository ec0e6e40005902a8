from __future__ import annotations

import argparse
import logging

from driverlens.models import Scenario, SelectionCriteria, SelectionProfile
from driverlens.services.discovery import discover_from_report
from driverlens.services.normalizer import normalize_report
from driverlens.services.sample_report import build_sample_report
from driverlens.services.scenarios import generate_scenario_forecast


def main() -> None:
    parser = argparse.ArgumentParser(description="Run driver discovery and forecasting on the synthetic report.")
    parser.add_argument("--months", type=int, default=18)
    parser.add_argument("--horizon", type=int, default=12)
    parser.add_argument(
        "--profile",
        choices=[profile.value for profile in SelectionProfile],
        default=SelectionProfile.production.value,
    )
    args = parser.parse_args()

    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")

    report = normalize_report(build_sample_report(months=args.months))
    result = discover_from_report(report, SelectionCriteria.preset(args.profile))

    print(f"Drivers found: {result.summary.drivers_found} (coverage {result.summary.business_coverage_percent:.1f}%)")
    for driver in result.drivers:
        print(
            f"  {driver.name:<28} {driver.classification.value:<18} "
            f"score={driver.score.composite:.3f} method={driver.method.method}"
        )
    if result.consolidated_items:
        print(f"Consolidated: {', '.join(result.consolidated_items)}")
    if result.excluded_items:
        print(f"Excluded: {', '.join(result.excluded_items)}")
    if not result.drivers:
        return

    comparison = generate_scenario_forecast(result, args.horizon)
    for scenario in Scenario:
        summary = comparison.forecasts[scenario].summary
        print(
            f"{scenario.value:<9} revenue={summary.total_projected_revenue} "
            f"net={summary.total_net_income} runway={summary.projected_runway_months}"
        )


if __name__ == "__main__":
    main()
