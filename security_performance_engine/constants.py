"""
Core Constants Module

Centralized definitions for dividend cadence classification so the
calculations, result objects and tests agree on one vocabulary.
"""

from enum import Enum


# Dividend Periodicity
# ====================
# Cadence of dividend payments observed over the trailing-12-month window.
# Declaration order is the sort order used by reports. Display labels belong
# to the presentation layer.

class Periodicity(Enum):
    UNKNOWN = "unknown"         # not calculated yet
    NONE = "none"               # no payment in the trailing window
    INDEFINITE = "indefinite"   # payments, but no history before the window to confirm the cadence
    ANNUAL = "annual"
    SEMIANNUAL = "semiannual"
    QUARTERLY = "quarterly"
    IRREGULAR = "irregular"     # any other event count

    @property
    def sort_rank(self) -> int:
        return _PERIODICITY_ORDER.index(self)

    @property
    def events_per_year(self) -> int:
        return EVENTS_PER_YEAR.get(self, 0)

    @property
    def has_dividends(self) -> bool:
        return self not in (Periodicity.UNKNOWN, Periodicity.NONE)


_PERIODICITY_ORDER = list(Periodicity)


# Event counts
# ============
# Number of dividend events in the trailing window that identifies a cadence.

EVENT_COUNT_TO_PERIODICITY = {
    0: Periodicity.NONE,
    1: Periodicity.ANNUAL,
    2: Periodicity.SEMIANNUAL,
    4: Periodicity.QUARTERLY,
}

EVENTS_PER_YEAR = {
    Periodicity.ANNUAL: 1,
    Periodicity.SEMIANNUAL: 2,
    Periodicity.QUARTERLY: 4,
}

# Cadences regular enough to extrapolate the trailing income to a full year.
# Irregular payments may contain one-off distributions and are left out.
PROJECTABLE_PERIODICITIES = frozenset({
    Periodicity.ANNUAL,
    Periodicity.SEMIANNUAL,
    Periodicity.QUARTERLY,
    Periodicity.INDEFINITE,
})


def classify_periodicity(event_count: int, last_event_before_window: int) -> Periodicity:
    """Map the number of events in the trailing window to a cadence."""
    if event_count > 0 and last_event_before_window == 0:
        return Periodicity.INDEFINITE
    return EVENT_COUNT_TO_PERIODICITY.get(event_count, Periodicity.IRREGULAR)
