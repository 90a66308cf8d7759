"""Pytest configuration and fixtures."""

from datetime import date, timedelta

import pytest

from security_performance_engine.providers import set_performance_index_provider
from tests.factories import dividend, initial


@pytest.fixture(autouse=True)
def clear_performance_index_provider():
    """Make sure no test leaks a globally registered index provider."""
    set_performance_index_provider(None)
    yield
    set_performance_index_provider(None)


@pytest.fixture
def quarterly_history():
    """
    100 shares bought before the first payment, five quarterly dividends
    91 days apart. The first payment falls before the trailing window, the
    other four inside it.
    """
    first = date(2021, 1, 10)
    transactions = [initial(date(2021, 1, 1), 100, 100_000)]
    payments = [dividend(first + timedelta(days=91 * k), 2_500) for k in range(5)]
    transactions.extend(payments)
    end_date = date(2022, 1, 31)
    return transactions, payments, end_date
