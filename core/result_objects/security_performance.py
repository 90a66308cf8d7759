"""Security performance result objects."""

from typing import Dict, Any, Optional, List
from datetime import date, datetime, UTC
from dataclasses import dataclass, field

from security_performance_engine import config
from security_performance_engine._vendor import make_json_safe
from security_performance_engine.constants import Periodicity
from security_performance_engine.performance_record import (
    ReportingPeriod,
    SecurityPerformanceRecord,
)


_RETURN_KEYS = ("irr", "irr_div", "true_time_weighted_rate_of_return", "delta", "market_value")
_COST_KEYS = ("fifo_cost", "shares_held", "fifo_cost_per_shares_held", "realized_delta",
              "stock_amount", "stock_shares", "stock_price")
_DIVIDEND_KEYS = ("sum_of_dividends", "dividend_event_count", "last_dividend_payment",
                  "div_event_count", "div_amount", "total_rate_of_return_div")
_TRAILING_KEYS = ("date_from", "date_to", "div12_amount", "div12_mean_shares", "div12_per_share",
                  "div12_cost", "div12_event_count", "cost12_amount", "personal_div")
_PROJECTION_KEYS = ("div24_amount", "div60_amount", "div120_amount", "div_increasing_rate",
                    "div_increasing_reliability", "div_increasing_years")


@dataclass
class SecurityPerformanceResult:
    """
    Performance and dividend income metrics for one security over one period.

    Built from a calculated ``SecurityPerformanceRecord`` (``from_record``) or
    from a failed calculation (``from_error``), in which case every metric
    group holds its zero defaults and ``status`` is ``"error"``.

    Metric groups:
    - **returns**: money-weighted IRR, dividend-adjusted IRR, time-weighted
      return, delta, market value
    - **cost_basis**: cost basis, shares held, cost per share
    - **dividends**: unwindowed dividend totals and event counts
    - **trailing_income**: trailing-12-month window, income and mean shares
    - **projection**: expected annual income, 5- and 10-year projections and
      the growth trend behind them

    Amounts are integers in minor currency units, shares in the fractional
    share unit; ``to_cli_report`` converts both for display.

    Example:
        ```python
        result = analyze_security_performance("ACME", transactions, period)
        result.periodicity                       # Periodicity.QUARTERLY
        result.trailing_income["div12_amount"]   # 40000 (400.00)
        api_data = result.to_api_response()
        ```
    """

    security: str
    period: ReportingPeriod
    status: str
    periodicity: Periodicity
    returns: Dict[str, Any]
    cost_basis: Dict[str, Any]
    dividends: Dict[str, Any]
    trailing_income: Dict[str, Any]
    projection: Dict[str, Any]
    analysis_date: datetime
    transaction_count: int = 0
    error: Optional[str] = None
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def from_record(cls, record: SecurityPerformanceRecord, period: ReportingPeriod) -> "SecurityPerformanceResult":
        """Snapshot a calculated record into grouped metric dicts."""
        values = {
            key: getattr(record, key)
            for key in _RETURN_KEYS + _COST_KEYS + _DIVIDEND_KEYS + _TRAILING_KEYS + _PROJECTION_KEYS
        }
        warnings = []
        if record.periodicity == Periodicity.IRREGULAR:
            warnings.append("Irregular dividend cadence; expected income not extrapolated")
        if record.periodicity == Periodicity.INDEFINITE:
            warnings.append("No dividend history before the trailing window; cadence unconfirmed")

        return cls(
            security=record.security_name,
            period=period,
            status="success",
            periodicity=record.periodicity,
            returns={k: values[k] for k in _RETURN_KEYS},
            cost_basis={k: values[k] for k in _COST_KEYS},
            dividends={k: values[k] for k in _DIVIDEND_KEYS},
            trailing_income={k: values[k] for k in _TRAILING_KEYS},
            projection={k: values[k] for k in _PROJECTION_KEYS},
            analysis_date=datetime.now(UTC),
            transaction_count=len(record.transactions),
            warnings=warnings,
        )

    @classmethod
    def from_error(cls, record: SecurityPerformanceRecord, period: ReportingPeriod, error: Exception) -> "SecurityPerformanceResult":
        """Result for a record that could not be computed."""
        result = cls.from_record(record, period)
        result.status = "error"
        result.error = f"{type(error).__name__}: {error}"
        result.warnings = []
        return result

    @property
    def is_success(self) -> bool:
        return self.status == "success"

    def get_summary(self) -> Dict[str, Any]:
        """Get key performance and income metrics summary."""
        return {
            "status": self.status,
            "irr": self.returns.get("irr", 0.0),
            "irr_div": self.returns.get("irr_div", 0.0),
            "ttwror": self.returns.get("true_time_weighted_rate_of_return", 0.0),
            "delta": self.returns.get("delta", 0),
            "shares_held": self.cost_basis.get("shares_held", 0),
            "sum_of_dividends": self.dividends.get("sum_of_dividends", 0),
            "periodicity": self.periodicity.value,
            "expected_annual_income": self.projection.get("div24_amount", 0),
        }

    def get_agent_snapshot(self) -> Dict[str, Any]:
        """Compact metrics payload for agent-oriented responses (rates in percent)."""
        r = self.returns or {}
        c = self.cost_basis or {}
        t = self.trailing_income or {}
        p = self.projection or {}

        return make_json_safe({
            "security": self.security,
            "status": self.status,
            "error": self.error,
            "period": {
                "start_date": self.period.start_date,
                "end_date": self.period.end_date,
            },
            "periodicity": self.periodicity.value,
            "returns": {
                "irr_pct": r.get("irr", 0.0) * 100,
                "irr_div_pct": r.get("irr_div", 0.0) * 100,
                "ttwror_pct": r.get("true_time_weighted_rate_of_return", 0.0) * 100,
                "delta": _to_units(r.get("delta", 0)),
            },
            "holding": {
                "shares_held": c.get("shares_held", 0) / config.SHARE_FACTOR,
                "cost_basis": _to_units(c.get("fifo_cost", 0)),
            },
            "income": {
                "trailing_12m": _to_units(t.get("div12_amount", 0)),
                "event_count": t.get("div12_event_count", 0),
                "personal_yield_pct": t.get("personal_div", 0.0) * 100,
                "expected_annual": _to_units(p.get("div24_amount", 0)),
            },
            "growth": {
                "rate_pct": p.get("div_increasing_rate", 0.0) * 100,
                "reliability": p.get("div_increasing_reliability", 0.0),
                "years": p.get("div_increasing_years", 0),
                "projected_5y": _to_units(p.get("div60_amount", 0)),
                "projected_10y": _to_units(p.get("div120_amount", 0)),
            },
        })

    def to_api_response(self) -> Dict[str, Any]:
        """
        Convert to a JSON-serializable API payload.

        RESPONSE STRUCTURE:
        - security, status, error, warnings
        - period: {start_date, end_date} (YYYY-MM-DD)
        - analysis_date: ISO-8601 UTC
        - periodicity: {value, sort_rank, has_dividends}
        - returns / cost_basis / dividends / trailing_income / projection:
          metric dicts (amounts in minor units, shares in share units,
          rates as fractions)
        - summary: ``get_summary()``
        """
        return make_json_safe({
            "security": self.security,
            "status": self.status,
            "error": self.error,
            "warnings": list(self.warnings),
            "period": {
                "start_date": self.period.start_date,
                "end_date": self.period.end_date,
            },
            "analysis_date": self.analysis_date,
            "transaction_count": self.transaction_count,
            "periodicity": {
                "value": self.periodicity.value,
                "sort_rank": self.periodicity.sort_rank,
                "has_dividends": self.periodicity.has_dividends,
            },
            "returns": self.returns,
            "cost_basis": self.cost_basis,
            "dividends": self.dividends,
            "trailing_income": self.trailing_income,
            "projection": self.projection,
            "summary": self.get_summary(),
        })

    def to_cli_report(self) -> str:
        """Generate complete CLI formatted report."""
        sections = [self._format_header()]
        if self.is_success:
            sections.append(self._format_returns())
            sections.append(self._format_dividends())
        else:
            sections.append(f"❌ Calculation failed: {self.error}")
        return "\n".join(sections)

    def _format_header(self) -> str:
        lines = [f"📊 Security Performance: {self.security}"]
        lines.append("=" * 50)
        lines.append(f"📅 Reporting period: {_fmt_date(self.period.start_date)} to {_fmt_date(self.period.end_date)}")
        lines.append(f"🧾 Transactions: {self.transaction_count}")
        for warning in self.warnings:
            lines.append(f"⚠️  {warning}")
        return "\n".join(lines)

    def _format_returns(self) -> str:
        r = self.returns
        c = self.cost_basis
        lines = ["", "📈 Returns"]
        lines.append(f"  IRR:                    {r['irr']:.2%}")
        lines.append(f"  True time-weighted:     {r['true_time_weighted_rate_of_return']:.2%}")
        lines.append(f"  Dividend-adjusted IRR:  {r['irr_div']:.2%}")
        lines.append(f"  Delta:                  {_fmt_amount(r['delta'])}")
        lines.append(f"  Market value:           {_fmt_amount(r['market_value'])}")
        lines.append(f"  Shares held:            {_fmt_shares(c['shares_held'])}")
        lines.append(f"  Cost basis:             {_fmt_amount(c['fifo_cost'])}")
        lines.append(f"  Cost per share:         {_fmt_amount(c['fifo_cost_per_shares_held'])}")
        return "\n".join(lines)

    def _format_dividends(self) -> str:
        d = self.dividends
        t = self.trailing_income
        p = self.projection
        lines = ["", "💰 Dividends"]
        lines.append(f"  Total received:         {_fmt_amount(d['sum_of_dividends'])} ({d['dividend_event_count']} payments)")
        lines.append(f"  Last payment:           {_fmt_date(d['last_dividend_payment'])}")
        lines.append(f"  Cadence:                {self.periodicity.value}")
        if t["date_to"] is not None and t["date_from"] is not None:
            lines.append(f"  Trailing window:        {_fmt_date(t['date_from'])} to {_fmt_date(t['date_to'])}")
        lines.append(f"  Trailing 12m income:    {_fmt_amount(t['div12_amount'])}")
        lines.append(f"  Personal yield:         {t['personal_div']:.2%}")
        lines.append(f"  Expected annual income: {_fmt_amount(p['div24_amount'])}")
        if p["div_increasing_years"] > 0:
            lines.append(
                f"  Growth trend:           {p['div_increasing_rate']:.2%} p.a. over "
                f"{p['div_increasing_years']} years (reliability {p['div_increasing_reliability']:.2f})"
            )
        lines.append(f"  Projected in 5 years:   {_fmt_amount(p['div60_amount'])}")
        lines.append(f"  Projected in 10 years:  {_fmt_amount(p['div120_amount'])}")
        return "\n".join(lines)


def _to_units(amount: int) -> float:
    return amount / config.AMOUNT_DIVIDER


def _fmt_amount(amount: int) -> str:
    return f"{_to_units(amount):,.2f}"


def _fmt_shares(shares: int) -> str:
    return f"{shares / config.SHARE_FACTOR:,.4f}"


def _fmt_date(value: Optional[date]) -> str:
    return value.isoformat() if value is not None else "N/A"
