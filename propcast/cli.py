"""CLI for running a postcode forecast from the terminal.

Usage:
    python -m propcast.cli "SW1A 1AA"
    python -m propcast.cli M1 --offline --seed 42
"""

import argparse
import asyncio
import logging
import random
import sys

from propcast.config import settings
from propcast.data.provider import RealTimeDataProvider
from propcast.engine.forecast import forecast_postcode
from propcast.engine.predictor import PredictionEngine
from propcast.errors import ComputationError, ValidationError


def print_report(report) -> None:
    info = report.area_info
    rec = report.recommendation

    print(f"\n{'=' * 60}")
    print(f"  Forecast: {report.postcode}")
    print(f"{'=' * 60}")
    print(f"  Area:             {info.area_code} ({info.region}, {info.coverage})")
    print(f"  Data source:      {report.data_source}")
    print(f"  Data quality:     {info.data_quality:.0%}")
    if report.error:
        print(f"  Note:             {report.error}")
    print()

    print(f"  {'Year':>6}  {'Price':>12}  {'Change':>8}  {'Yield':>7}  {'Conf':>6}")
    for p in report.predictions:
        print(
            f"  {p.year:>6}  £{p.predicted_price:>11,}  {p.price_change_percent:>7.2f}%"
            f"  {p.predicted_yield:>6.2f}%  {p.confidence:>6.0%}"
        )
    print()

    print(f"  Risk score:       {report.risk_score}/10")
    print(f"  Recommendation:   {rec.label.value} (score {rec.score}, confidence {rec.confidence}%)")
    print(f"  Economy:          {rec.economic_context}")
    for reason in rec.reasoning:
        print(f"    - {reason}")
    print()


async def main() -> None:
    parser = argparse.ArgumentParser(description="UK property investment forecast CLI")
    parser.add_argument("postcode", help="UK postcode or outward code, e.g. 'SW1A 1AA' or 'M1'")
    parser.add_argument("--offline", action="store_true", help="Skip real-time sources; area baselines only")
    parser.add_argument("--seed", type=int, default=None, help="Seed the local-variation jitter")

    args = parser.parse_args()
    logging.basicConfig(level=settings.log_level, format="%(levelname)s %(name)s: %(message)s")

    engine = PredictionEngine(rng=random.Random(args.seed))
    provider = None if args.offline else RealTimeDataProvider()

    try:
        report = await forecast_postcode(args.postcode, provider, engine)
    except ValidationError as e:
        parser.error(str(e))
    except ComputationError as e:
        print(f"Prediction failed: {e}", file=sys.stderr)
        sys.exit(1)

    print_report(report)


def run() -> None:
    asyncio.run(main())


if __name__ == "__main__":
    run()
