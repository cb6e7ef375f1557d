#!/usr/bin/env python3
"""
Print a campaign's KPIs as the dashboard computes them.

Goes through the backend proxy (BACKEND_URL) exactly like the UI does,
so it doubles as an end-to-end check of the reporting path.

Usage:
    python scripts/kpi_report.py camp1
    python scripts/kpi_report.py camp2 --period 24h --cid 123-456-7890
    python scripts/kpi_report.py camp1 --backend http://localhost:3002 --json
"""
import asyncio
import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.config import APIConfig, config
from core.exceptions import UpstreamUnavailableError, ValidationError
from core.models import AggregatedKPI, RequestContext
from core.observability import correlation_context, setup_logging
from core.reporting import ReportingClient
from core.validators import VALID_PERIODS, validate_customer_id


def format_report(campaign_id: str, kpi: AggregatedKPI) -> str:
    """Human readable KPI table."""
    window = f"{kpi.period} (bucket {kpi.bucket})"
    lines = [f"Campaign {campaign_id} - {window}"]
    if kpi.approximated:
        lines.append(f"  note: {kpi.period} is served from the {kpi.bucket} bucket")

    lines += [
        f"  Impressions        {kpi.impressions:>14,}",
        f"  Clicks             {kpi.clicks:>14,}",
        f"  Cost               {kpi.cost:>14,.2f}",
        f"  Conversions        {kpi.conversions:>14,.2f}",
        f"  Conversion value   {kpi.conversion_value:>14,.2f}",
        f"  Views              {kpi.views:>14,}",
        f"  CTR                {kpi.ctr:>13.2f}%",
        f"  CPC                {kpi.cpc:>14.2f}",
        f"  CPV                {kpi.cpv:>14.4f}",
        f"  ROAS               {kpi.roas:>14.2f}",
        f"  Conversion rate    {kpi.conversion_rate:>13.2f}%",
        f"  Cost / conversion  {kpi.cost_per_conversion:>14.2f}",
        f"  View rate          {kpi.view_rate:>13.2f}%",
    ]
    if kpi.youtube is not None:
        lines += [
            f"  YouTube views      {kpi.youtube.views:>14,}",
            f"  YouTube likes      {kpi.youtube.likes:>14,}",
            f"  Subscribers        {kpi.youtube.subscribers:>14,}",
            f"  Playlist adds      {kpi.youtube.playlist_adds:>14,}",
        ]
    return "\n".join(lines)


async def run(
    campaign_id: str,
    period: str,
    customer_id: Optional[str],
    backend_url: Optional[str],
    as_json: bool,
) -> int:
    """Fetch and print one KPI report; returns the process exit code."""
    api_config = APIConfig(backend_url=backend_url) if backend_url else config.api
    context = RequestContext(customer_id=customer_id)

    # One correlation ID per run, forwarded to the backend as X-Request-ID
    with correlation_context() as request_id:
        try:
            async with ReportingClient(api_config=api_config) as client:
                kpi = await client.get_kpi_by_period(campaign_id, period, context)
        except UpstreamUnavailableError as e:
            print(f"Error ({e.status}): {e.message} [request {request_id}]", file=sys.stderr)
            return 1

    if as_json:
        print(json.dumps(kpi.to_dict(), indent=2))
    else:
        print(format_report(campaign_id, kpi))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show Google Ads KPIs for one campaign")
    parser.add_argument("campaign_id", help="Campaign ID (camp1 in mock mode)")
    parser.add_argument(
        "--period",
        default="7j",
        choices=VALID_PERIODS,
        help="Dashboard period (default: 7j)"
    )
    parser.add_argument("--cid", default=None, help="Google Ads customer ID (X-Google-Ads-CID)")
    parser.add_argument("--backend", default=None, help="Backend URL (default: BACKEND_URL)")
    parser.add_argument("--json", action="store_true", help="Print the raw KPI JSON")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(level="WARNING")

    try:
        customer_id = validate_customer_id(args.cid)
    except ValidationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    return asyncio.run(run(args.campaign_id, args.period, customer_id, args.backend, args.json))


if __name__ == "__main__":
    sys.exit(main())
