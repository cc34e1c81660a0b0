import unittest
from unittest.mock import patch

from pipechat.core import (
    PricingTable,
    TokenAccountant,
    TokenizerUnavailableError,
    Turn,
    UnpricedModelError,
    UsageSummary,
)

from .test_base import WordEncoding


class TestTokenAccountant(unittest.TestCase):
    def setUp(self):
        self.accountant = TokenAccountant(encoding=WordEncoding())

    def test_count(self):
        self.assertEqual(self.accountant.count("one two three"), 3)
        self.assertEqual(self.accountant.count(""), 0)

    def test_count_sequence_is_additive(self):
        turns = [Turn.user("a b"), Turn.assistant("c"), Turn.user("d e f")]
        self.assertEqual(
            self.accountant.count_sequence(turns),
            sum(self.accountant.count(t.text) for t in turns),
        )
        self.assertEqual(
            self.accountant.count_sequence(reversed(turns)),
            self.accountant.count_sequence(turns),
        )
        self.assertEqual(self.accountant.count_sequence([]), 0)

    @patch("pipechat.core.usage.tiktoken.get_encoding")
    def test_loads_tiktoken_encoding(self, mock_get_encoding):
        mock_get_encoding.return_value.encode.return_value = [1, 2]

        accountant = TokenAccountant()

        mock_get_encoding.assert_called_once_with("cl100k_base")
        self.assertEqual(accountant.count("hello there"), 2)
        mock_get_encoding.return_value.encode.assert_called_once_with(
            "hello there", allowed_special="all"
        )

    @patch("pipechat.core.usage.tiktoken.get_encoding", side_effect=ValueError("missing"))
    def test_unavailable_tokenizer_fails_construction(self, _mock_get_encoding):
        with self.assertRaises(TokenizerUnavailableError):
            TokenAccountant()


class TestPricingTable(unittest.TestCase):
    def setUp(self):
        self.pricing = PricingTable()

    def test_rates(self):
        self.assertAlmostEqual(self.pricing.price("gpt-3.5-turbo", 1000, 1000), 0.3)
        self.assertAlmostEqual(self.pricing.price("gpt-4", 1000, 1000), 9.0)
        self.assertAlmostEqual(self.pricing.price("gpt-4-turbo", 1000, 1000), 4.0)
        self.assertEqual(self.pricing.price("gpt-4", 0, 0), 0)

    def test_price_is_linear(self):
        for model in ("gpt-3.5-turbo", "gpt-4", "gpt-4-turbo"):
            self.assertAlmostEqual(
                self.pricing.price(model, 120 + 80, 40),
                self.pricing.price(model, 120, 40) + self.pricing.price(model, 80, 0),
            )
            self.assertAlmostEqual(
                self.pricing.price(model, 10, 30 + 7),
                self.pricing.price(model, 10, 30) + self.pricing.price(model, 0, 7),
            )

    def test_unknown_model(self):
        self.assertNotIn("gpt-5", self.pricing)
        with self.assertRaises(UnpricedModelError) as cm:
            self.pricing.price("gpt-5", 1, 1)
        self.assertEqual(cm.exception.model, "gpt-5")

    def test_custom_table(self):
        pricing = PricingTable({"local": (0.5, 1.0)})
        self.assertAlmostEqual(pricing.price("local", 2000, 1000), 2.0)


class TestUsageSummary(unittest.TestCase):
    def test_render(self):
        summary = UsageSummary.compute(PricingTable(), "gpt-4", 100, 50)
        self.assertEqual(summary.total_tokens, 150)
        self.assertEqual(
            summary.render(),
            "Prompt Tokens: 100 | Completion Tokens: 50 | Total Tokens: 150 | Price: 0.60000p",
        )

    def test_unpriced_model_renders_na(self):
        with self.assertLogs("pipechat.core.usage", level="WARNING"):
            summary = UsageSummary.compute(PricingTable({}), "gpt-4", 1, 1)
        self.assertIsNone(summary.price)
        self.assertTrue(summary.render().endswith("Price: n/a"))
