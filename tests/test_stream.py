import io
import unittest

from rich.console import Console

from pipechat.core import Fragment, StreamAggregator


class TestStreamAggregator(unittest.TestCase):
    def setUp(self):
        self.output = io.StringIO()
        self.aggregator = StreamAggregator(Console(file=self.output, width=200))

    def test_concatenates_content(self):
        text = self.aggregator.run(Fragment.text(t) for t in ["Hel", "lo", ", world"])
        self.assertEqual(text, "Hello, world")
        self.assertEqual(self.output.getvalue(), "Hello, world")
        self.assertTrue(self.aggregator.done)

    def test_error_does_not_truncate(self):
        """An error fragment is shown inline and accumulation carries on"""
        fragments = [Fragment.text("Hel"), Fragment.failure("boom"), Fragment.text("lo")]

        text = self.aggregator.run(fragments)

        self.assertEqual(text, "Hello")
        self.assertEqual(self.aggregator.errors, ["boom"])
        output = self.output.getvalue()
        hel = output.index("Hel")
        error = output.index("An error occurred: boom")
        lo = output.rindex("lo")
        self.assertLess(hel, error)
        self.assertLess(error, lo)
        self.assertIn("[error]", output)

    def test_content_is_written_before_next_fragment_is_pulled(self):
        seen = []

        def fragments():
            yield Fragment.text("a")
            seen.append(self.output.getvalue())
            yield Fragment.text("b")
            seen.append(self.output.getvalue())

        self.aggregator.run(fragments())

        self.assertEqual(seen, ["a", "ab"])

    def test_markup_in_content_is_literal(self):
        text = self.aggregator.run([Fragment.text("[bold]x[/bold]")])
        self.assertEqual(text, "[bold]x[/bold]")
        self.assertEqual(self.output.getvalue(), "[bold]x[/bold]")

    def test_empty_stream(self):
        self.assertEqual(self.aggregator.run([]), "")
        self.assertTrue(self.aggregator.done)

    def test_feed_after_done(self):
        self.aggregator.run([])
        with self.assertRaises(RuntimeError):
            self.aggregator.feed(Fragment.text("late"))
