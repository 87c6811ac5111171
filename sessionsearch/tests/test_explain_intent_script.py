import unittest

from sessionsearch.scripts import explain_intent
from sessionsearch.tests.fixtures import CorpusTestCase


class ExplainIntentScriptTests(CorpusTestCase):
    def _run(self, *argv: str) -> dict:
        args = explain_intent.build_parser().parse_args(
            [*argv, "--data-dir", str(self.data_dir), "--files", "andrewwang.json, dianalu.json"]
        )
        return explain_intent.run(args)

    def test_reports_intent_with_date_filter(self) -> None:
        report = self._run("what did andrewwang work on between 2025-11-01 and 2025-11-05")

        self.assertEqual(report["intent"]["type"], "user")
        self.assertEqual(report["intent"]["value"], "andrewwang")
        self.assertEqual(report["intent"]["dateFilter"], {"from": "2025-11-01", "to": "2025-11-05"})
        self.assertTrue(report["context"].startswith("**Search Results for User: andrewwang**"))
        self.assertIn("Total Messages: 3", report["context"])
        self.assertEqual(report["store"]["sourcesLoaded"], ["andrewwang.json", "dianalu.json"])

    def test_general_question_gets_summary(self) -> None:
        report = self._run("hello there")
        self.assertEqual(report["intent"]["type"], "general")
        self.assertTrue(report["context"].startswith("**Available Data Summary:**"))
        self.assertIn("Total Messages: 10", report["context"])


if __name__ == "__main__":
    unittest.main()
