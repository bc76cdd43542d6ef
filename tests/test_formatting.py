import math
import unittest
from datetime import datetime

from quoteboard.schemas.quote import DisplayRecord
from quoteboard.services.formatting import format_currency, format_time, format_variation


def _record(pct: float, var: float) -> DisplayRecord:
    return DisplayRecord(
        id="USD",
        pair="USD/BRL",
        name="Dólar Americano",
        price=5.0,
        variation_percent=pct,
        variation_absolute=var,
        last_update="2024-01-01 10:00:00",
    )


class FormattingTest(unittest.TestCase):
    def test_format_currency_uses_comma_decimal(self):
        self.assertEqual(format_currency(5.0), "R$ 5,00")
        self.assertEqual(format_currency(312456.789), "R$ 312456,79")
        self.assertEqual(format_currency(math.nan), "R$ --")

    def test_format_time(self):
        self.assertEqual(format_time("2024-01-01 10:05:00"), "10:05")
        self.assertEqual(format_time(datetime(2024, 1, 1, 9, 30)), "09:30")
        self.assertEqual(format_time("not a date"), "--:--")
        self.assertEqual(format_time(""), "--:--")
        self.assertEqual(format_time(None), "--:--")

    def test_format_variation_direction(self):
        self.assertEqual(format_variation(_record(1.5, 0.07)), "▲ 1.5% (R$ 0.07)")
        self.assertEqual(format_variation(_record(-0.25, -0.012)), "▼ -0.25% (R$ -0.01)")
        self.assertEqual(format_variation(_record(0.0, 0.0)), "▲ 0% (R$ 0.00)")

    def test_format_variation_keeps_full_precision(self):
        self.assertEqual(format_variation(_record(0.1234567, 0.5)), "▲ 0.1234567% (R$ 0.50)")
        self.assertEqual(format_variation(_record(1234567.0, 2.0)), "▲ 1234567% (R$ 2.00)")
        self.assertEqual(format_variation(_record(math.nan, math.nan)), "▼ --% (R$ --)")

    def test_non_finite_currency_is_placeholder(self):
        self.assertEqual(format_currency(math.inf), "R$ --")


if __name__ == "__main__":
    unittest.main()
