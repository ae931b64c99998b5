"""Monthly finance summary tests.

Covers:
- monthly_stats() month scoping by date prefix
- malformed amounts and dates
- current_month_stats() / monthly_breakdown()
- recent_records() ordering and ties
- format_amount()
"""
from datetime import date

from business.finance_summary import (
    MonthlyStats,
    current_month_stats,
    format_amount,
    month_key_of,
    monthly_breakdown,
    monthly_stats,
    recent_records,
)


MARCH_RECORDS = [
    {"date": "2024-03-01", "type": "income", "amount": 1000},
    {"date": "2024-03-15", "type": "expense", "amount": 400},
    {"date": "2024-04-01", "type": "income", "amount": 9999},
]


class TestMonthlyStats:
    """Test monthly_stats()."""

    def test_march_totals(self):
        stats = monthly_stats(MARCH_RECORDS, "2024-03")
        assert stats.to_dict() == {
            "totalIncome": 1000,
            "totalExpense": 400,
            "netProfit": 600,
            "totalRecords": 2,
        }

    def test_empty_input(self):
        assert monthly_stats([], "2024-03") == MonthlyStats()
        assert monthly_stats(None, "2024-03").total_records == 0

    def test_malformed_amount_counts_as_zero(self, loguru_messages):
        records = MARCH_RECORDS + [
            {"id": "bad", "date": "2024-03-20", "type": "income", "amount": "abc"}
        ]
        stats = monthly_stats(records, "2024-03")
        assert stats.total_income == 1000
        assert stats.total_records == 3
        assert any("abc" in m for m in loguru_messages)

    def test_missing_and_comma_amounts(self):
        records = [
            {"date": "2024-03-01", "type": "income", "amount": None},
            {"date": "2024-03-02", "type": "income", "amount": "1,500"},
            {"date": "2024-03-03", "type": "expense"},
        ]
        stats = monthly_stats(records, "2024-03")
        assert stats.total_income == 1500
        assert stats.total_expense == 0
        assert stats.total_records == 3

    def test_malformed_date_excluded(self):
        records = MARCH_RECORDS + [
            {"date": "03/20/2024", "type": "income", "amount": 50},
            {"date": None, "type": "income", "amount": 50},
        ]
        assert monthly_stats(records, "2024-03").total_income == 1000

    def test_unknown_type_counted_but_not_summed(self):
        records = [{"date": "2024-03-01", "type": "refund", "amount": 70}]
        stats = monthly_stats(records, "2024-03")
        assert stats.total_records == 1
        assert stats.total_income == 0
        assert stats.total_expense == 0

    def test_date_objects_supported(self):
        records = [{"date": date(2024, 3, 5), "type": "income", "amount": 10}]
        assert monthly_stats(records, "2024-03").total_income == 10

    def test_negative_net_profit(self):
        records = [{"date": "2024-03-01", "type": "expense", "amount": 300}]
        assert monthly_stats(records, "2024-03").net_profit == -300

    def test_idempotent(self):
        first = monthly_stats(MARCH_RECORDS, "2024-03")
        second = monthly_stats(MARCH_RECORDS, "2024-03")
        assert first == second
        assert first.to_dict() == second.to_dict()


class TestMonthKey:
    """Test month_key_of()."""

    def test_prefix(self):
        assert month_key_of("2024-03-15") == "2024-03"
        assert month_key_of(date(2024, 3, 15)) == "2024-03"
        assert month_key_of(None) == ""


class TestCurrentMonthAndBreakdown:
    """Test current_month_stats() and monthly_breakdown()."""

    def test_current_month_uses_today(self):
        stats = current_month_stats(MARCH_RECORDS, today=date(2024, 4, 20))
        assert stats.total_income == 9999
        assert stats.total_records == 1

    def test_breakdown_newest_first(self):
        rows = monthly_breakdown(MARCH_RECORDS)
        assert [r["month"] for r in rows] == ["2024-04", "2024-03"]
        assert rows[1]["netProfit"] == 600

    def test_breakdown_skips_malformed_dates(self):
        rows = monthly_breakdown([{"date": "bad", "type": "income", "amount": 1}])
        assert rows == []

    def test_breakdown_empty(self):
        assert monthly_breakdown(None) == []


class TestRecentRecords:
    """Test recent_records()."""

    def test_newest_first(self):
        records = [{"date": "2024-01-01"}, {"date": "2024-03-01"},
                   {"date": "2024-02-01"}]
        result = recent_records(records, 2)
        assert [r["date"] for r in result] == ["2024-03-01", "2024-02-01"]

    def test_ties_keep_original_order(self):
        records = [{"id": "a", "date": "2024-03-01"},
                   {"id": "b", "date": "2024-03-01"},
                   {"id": "c", "date": "2024-02-01"}]
        assert [r["id"] for r in recent_records(records, 3)] == ["a", "b", "c"]

    def test_missing_dates_last(self):
        records = [{"id": "x"}, {"id": "y", "date": "2024-01-01"}]
        assert [r["id"] for r in recent_records(records, 2)] == ["y", "x"]

    def test_limit_larger_than_input(self):
        assert len(recent_records(MARCH_RECORDS, 10)) == 3

    def test_empty_and_zero_limit(self):
        assert recent_records([], 5) == []
        assert recent_records(None, 5) == []
        assert recent_records(MARCH_RECORDS, 0) == []

    def test_input_not_mutated(self):
        records = [{"date": "2024-01-01"}, {"date": "2024-03-01"}]
        recent_records(records, 1)
        assert records[0]["date"] == "2024-01-01"


class TestFormatAmount:
    """Test format_amount()."""

    def test_thousands_separator(self):
        assert format_amount(1234567) == "1,234,567"
        assert format_amount(0) == "0"

    def test_decimals(self):
        assert format_amount(1234.5) == "1,234.5"
        assert format_amount(1234.567) == "1,234.57"
        assert format_amount(12.0) == "12"

    def test_negative(self):
        assert format_amount(-5000) == "-5,000"

    def test_malformed(self):
        assert format_amount("abc") == "0"
        assert format_amount(None) == "0"
        assert format_amount("50000") == "50,000"
