import math
import unittest

from quoteboard.schemas.quote import DisplayRecord
from quoteboard.services.normalizer import filter_records, normalize_payload, short_name

USD_PAYLOAD = {
    "USDBRL": {
        "code": "USD",
        "codein": "BRL",
        "name": "Dólar Americano/Real Brasileiro",
        "bid": "5.00",
        "pctChange": "1.5",
        "varBid": "0.07",
        "create_date": "2024-01-01 10:00:00",
    }
}


def _row(code: str, **overrides) -> dict:
    row = {
        "code": code,
        "codein": "BRL",
        "name": f"{code} name/Real Brasileiro",
        "high": "1.1",
        "low": "0.9",
        "bid": "1.0",
        "ask": "1.01",
        "varBid": "0.01",
        "pctChange": "0.5",
        "timestamp": "1704103200",
        "create_date": "2024-01-01 10:00:00",
    }
    row.update(overrides)
    return row


class NormalizerTest(unittest.TestCase):
    def test_usd_brl_maps_to_expected_display_record(self):
        records = normalize_payload(USD_PAYLOAD)

        self.assertEqual(
            records,
            [
                DisplayRecord(
                    id="USD",
                    pair="USD/BRL",
                    name="Dólar Americano",
                    price=5.00,
                    variation_percent=1.5,
                    variation_absolute=0.07,
                    last_update="2024-01-01 10:00:00",
                )
            ],
        )

    def test_records_missing_name_or_bid_are_dropped(self):
        payload = {
            "USDBRL": _row("USD"),
            "EURBRL": _row("EUR", name=""),
            "BTCBRL": _row("BTC", bid=None),
            "GBPBRL": {k: v for k, v in _row("GBP").items() if k != "bid"},
            "JPYBRL": {k: v for k, v in _row("JPY").items() if k != "name"},
        }

        records = normalize_payload(payload)

        self.assertEqual([r.id for r in records], ["USD"])

    def test_non_numeric_bid_is_dropped_without_placeholder(self):
        payload = {"USDBRL": _row("USD", bid="n/a"), "EURBRL": _row("EUR")}

        records = normalize_payload(payload)

        self.assertEqual([r.id for r in records], ["EUR"])

    def test_non_object_values_are_skipped(self):
        payload = {"status": 200, "USDBRL": _row("USD"), "list": [1, 2]}

        self.assertEqual(len(filter_records(payload)), 1)

    def test_order_follows_payload_iteration(self):
        payload = {"GBPBRL": _row("GBP"), "USDBRL": _row("USD"), "BTCBRL": _row("BTC")}

        self.assertEqual([r.id for r in normalize_payload(payload)], ["GBP", "USD", "BTC"])

    def test_same_payload_twice_gives_equal_but_distinct_sequences(self):
        payload = {"USDBRL": _row("USD"), "EURBRL": _row("EUR")}

        first = normalize_payload(payload)
        second = normalize_payload(payload)

        self.assertEqual(first, second)
        self.assertIsNot(first, second)

    def test_unparseable_variation_becomes_nan(self):
        records = normalize_payload({"USDBRL": _row("USD", pctChange="", varBid="x")})

        self.assertTrue(math.isnan(records[0].variation_percent))
        self.assertTrue(math.isnan(records[0].variation_absolute))
        self.assertEqual(records[0].price, 1.0)

    def test_infinite_values_are_treated_as_unparseable(self):
        payload = {
            "USDBRL": _row("USD", pctChange="Infinity", varBid="1e999"),
            "EURBRL": _row("EUR", bid="inf"),
            "BTCBRL": _row("BTC", bid="-1e999"),
        }

        records = normalize_payload(payload)

        self.assertEqual([r.id for r in records], ["USD"])
        self.assertTrue(math.isnan(records[0].variation_percent))
        self.assertTrue(math.isnan(records[0].variation_absolute))

    def test_numeric_json_values_are_accepted_as_text(self):
        records = normalize_payload({"USDBRL": _row("USD", bid=5.25, pctChange=-0.3)})

        self.assertEqual(records[0].price, 5.25)
        self.assertEqual(records[0].variation_percent, -0.3)
        self.assertFalse(records[0].is_positive)

    def test_missing_code_falls_back_to_payload_key(self):
        row = _row("USD")
        del row["code"]

        record = normalize_payload({"USDBRL": row})[0]

        self.assertEqual(record.id, "USDBRL")
        self.assertEqual(record.pair, "USDBRL")

    def test_short_name_without_separator_keeps_whole_string(self):
        self.assertEqual(short_name("Bitcoin"), "Bitcoin")
        self.assertEqual(short_name("Euro/Real Brasileiro"), "Euro")

    def test_last_update_is_parsed_lazily(self):
        record = normalize_payload(USD_PAYLOAD)[0]
        bad = record.model_copy(update={"last_update": "yesterday"})

        self.assertEqual(record.last_update_at.hour, 10)
        self.assertIsNone(bad.last_update_at)


if __name__ == "__main__":
    unittest.main()
