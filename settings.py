#Value scaling and dividend window settings for security performance analysis
import os
from pathlib import Path

# Ensure local ".env" is loaded even for direct Python invocations.
try:
    from dotenv import load_dotenv

    load_dotenv(Path(__file__).resolve().parent / ".env", override=False)
except Exception:
    # Fail open: settings still support explicit process env.
    pass


# Fixed-point scaling
# Amounts are stored in minor currency units (cents), shares in a fractional
# share unit. Every per-share rounding uses SHARE_FACTOR.
AMOUNT_DIVIDER = int(os.getenv("SPE_AMOUNT_DIVIDER", "100"))
SHARE_FACTOR = int(os.getenv("SPE_SHARE_FACTOR", "1000000"))

# Dividend analysis windows
#
# Payment dates drift from year to year and from bank to bank, so the
# freshness window is one year plus half a quarter (365 + 45 = 410 days) and
# the accrual window is one year minus half a quarter (365 - 45 = 320 days).
# Example: quarterly payments on 15 Feb, 15 May, 15 Aug and 15 Nov span 270
# days; 320 days leaves room for late payments without catching the previous
# year's February payment.
DIVIDEND_DEFAULTS = {
    "event_gap_days": 30,                 # payments closer than this belong to one dividend event
    "freshness_window_days": 410,         # latest payment must fall within this many days before period end
    "accrual_window_days": 320,           # payments this close to the latest one count as trailing 12 months
    "share_weighting_anchor_days": 365,   # start of the day-weighted mean share count
    "min_years_for_growth": 3,            # continuous payment history required for a growth trend
    "growth_days_per_year": 365.25,       # year length used for the growth regression x-axis
}

# Internal rate of return solver
IRR_DEFAULTS = {
    "initial_guess": 0.1,      # seed for the Newton iteration (10% p.a.)
    "max_iterations": 500,     # hard cap so every record calculation terminates
    "tolerance": 1e-10,        # convergence tolerance on the rate
    "days_per_year": 365.0,    # cash-flow dates are converted to year fractions
    "bracket_low": -0.9999,    # bisection fallback bracket (rate > -100%)
    "bracket_high": 100.0,
}
