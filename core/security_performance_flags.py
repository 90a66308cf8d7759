"""Security performance interpretive flags for agent-oriented responses."""

from __future__ import annotations

import math
from typing import Any


# personal yield (percentage points) above which sustainability is questioned
HIGH_PERSONAL_YIELD_PCT = 6.0
# growth trends fitted with less reliability are reported but not trusted
MIN_GROWTH_RELIABILITY = 0.5


def _to_float(value: Any) -> float | None:
    """Convert to finite float; return None for missing/invalid values."""
    if value is None:
        return None
    try:
        numeric = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(numeric):
        return None
    return numeric


def generate_security_performance_flags(snapshot: dict) -> list[dict]:
    """Generate severity-tagged flags from ``SecurityPerformanceResult.get_agent_snapshot()``."""
    flags: list[dict] = []
    if not isinstance(snapshot, dict):
        snapshot = {}

    if snapshot.get("status", "error") != "success":
        flags.append({
            "flag": "calculation_error",
            "severity": "error",
            "message": snapshot.get("error") or "Security performance could not be computed",
        })
        return _sort_flags(flags)

    returns = snapshot.get("returns") or {}
    holding = snapshot.get("holding") or {}
    income = snapshot.get("income") or {}
    growth = snapshot.get("growth") or {}
    periodicity = snapshot.get("periodicity", "unknown")

    irr_pct = _to_float(returns.get("irr_pct"))
    shares_held = _to_float(holding.get("shares_held")) or 0.0
    personal_yield = _to_float(income.get("personal_yield_pct"))
    growth_rate = _to_float(growth.get("rate_pct"))
    reliability = _to_float(growth.get("reliability"))
    growth_years = int(growth.get("years") or 0)

    if irr_pct is not None and irr_pct < 0:
        flags.append({
            "flag": "negative_return",
            "severity": "warning",
            "message": f"Money-weighted return is {irr_pct:.1f}% p.a.",
        })

    if periodicity == "irregular":
        flags.append({
            "flag": "irregular_dividends",
            "severity": "warning",
            "message": f"{income.get('event_count', 0)} dividend events in the last 12 months; expected income not extrapolated",
        })
    elif periodicity == "indefinite":
        flags.append({
            "flag": "unconfirmed_cadence",
            "severity": "info",
            "message": "No dividend history before the last 12 months; cadence unconfirmed",
        })
    elif periodicity == "none" and shares_held > 0:
        flags.append({
            "flag": "no_dividend_income",
            "severity": "info",
            "message": "Position paid no dividend in the last 12 months",
        })

    if growth_years > 0 and growth_rate is not None:
        if growth_rate < 0:
            flags.append({
                "flag": "shrinking_dividend",
                "severity": "warning",
                "message": f"Dividend per share trending {growth_rate:.1f}% p.a. over {growth_years} years",
            })
        if reliability is not None and abs(reliability) < MIN_GROWTH_RELIABILITY:
            flags.append({
                "flag": "unreliable_growth_trend",
                "severity": "info",
                "message": f"Dividend growth trend fits poorly (reliability {reliability:.2f})",
            })

    if personal_yield is not None and personal_yield >= HIGH_PERSONAL_YIELD_PCT:
        flags.append({
            "flag": "high_personal_yield",
            "severity": "info",
            "message": f"Yield on cost {personal_yield:.1f}%; verify dividend sustainability",
        })

    if not flags:
        expected = _to_float(income.get("expected_annual")) or 0.0
        flags.append({
            "flag": "on_track",
            "severity": "success",
            "message": f"{periodicity.capitalize()} dividends, {expected:,.2f}/yr expected income",
        })

    return _sort_flags(flags)


def _sort_flags(flags):
    order = {"error": 0, "warning": 1, "info": 2, "success": 3}
    return sorted(flags, key=lambda f: order.get(f.get("severity", "info"), 2))
