import json
import sys
import unittest
from http.client import BadStatusLine, IncompleteRead
from pathlib import Path
from unittest import mock
from urllib.error import URLError

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from store_commissions.domain.goals import Goal, TeamGoalSet
from store_commissions.services import report_assistant as ra
from store_commissions.services.commissions import team_commissions

CONFIG = {"api_key": "test-key", "model": "gemini-test", "timeout_s": 5}
USERS = [
    {"id": "m", "name": "Admin", "role": "manager", "assigned_hours": 40, "avatar_url": "x"},
    {"id": "s", "name": "Ana", "role": "seller", "assigned_hours": 35, "avatar_url": "y"},
]


def _response(payload: dict) -> mock.MagicMock:
    response = mock.MagicMock()
    response.__enter__.return_value.read.return_value = json.dumps(payload).encode("utf-8")
    return response


class ReportAssistantTests(unittest.TestCase):
    def setUp(self) -> None:
        self.goal = Goal(month="2024-05", team_goal=TeamGoalSet(amount=100000))
        self.payload = ra.build_month_payload(
            USERS,
            self.goal,
            [{"id": "r1", "date": "2024-05-02", "amount": 5000}, {"id": "r2", "date": "2024-04-02", "amount": 1}],
            [{"id": "v1", "seller_id": "s", "amount": 5000, "date": "2024-05-02"}],
            "2024-05",
        )

    def test_payload_is_scoped_to_month(self) -> None:
        self.assertEqual(len(self.payload["store_progress"]), 1)
        self.assertNotIn("id", self.payload["store_progress"][0])
        self.assertNotIn("avatar_url", self.payload["team"][0])
        self.assertEqual(self.payload["goals"]["team_goal"]["amount"], 100000)

    def test_blank_objective_skips_the_service(self) -> None:
        with mock.patch.object(ra, "urlopen") as urlopen:
            self.assertEqual(ra.get_coaching_plan("   ", self.payload, CONFIG), ra.EMPTY_OBJECTIVE_MESSAGE)
        urlopen.assert_not_called()

    def test_coaching_plan_success(self) -> None:
        body = {"candidates": [{"content": {"parts": [{"text": "**Plan** "}, {"text": "listo"}]}}]}
        with mock.patch.object(ra, "urlopen", return_value=_response(body)) as urlopen:
            plan = ra.get_coaching_plan("Vender más medias", self.payload, CONFIG)
        self.assertEqual(plan, "**Plan** listo")
        request = urlopen.call_args[0][0]
        self.assertIn("gemini-test:generateContent", request.full_url)
        self.assertEqual(request.get_header("X-goog-api-key"), "test-key")
        self.assertEqual(urlopen.call_args[1]["timeout"], 5)
        sent = json.loads(request.data.decode("utf-8"))
        self.assertIn("Vender más medias", sent["contents"][0]["parts"][0]["text"])

    def test_service_failure_returns_apology(self) -> None:
        with mock.patch.object(ra, "urlopen", side_effect=URLError("offline")):
            with self.assertLogs(ra.LOGGER, level="ERROR"):
                self.assertEqual(ra.get_coaching_plan("Subir ticket", self.payload, CONFIG), ra.COACHING_ERROR_MESSAGE)
                self.assertEqual(ra.get_report_analysis(self.payload, CONFIG), ra.REPORT_ERROR_MESSAGE)

    def test_malformed_or_empty_response_returns_apology(self) -> None:
        bodies = (
            {"candidates": []},
            {"candidates": [{"content": {"parts": [{"text": "  "}]}}]},
            {"candidates": [{"content": {"parts": ["texto"]}}]},
            {"candidates": [{"content": None}]},
        )
        for body in bodies:
            with self.subTest(body=body):
                with mock.patch.object(ra, "urlopen", return_value=_response(body)):
                    self.assertEqual(ra.get_report_analysis(self.payload, CONFIG), ra.REPORT_ERROR_MESSAGE)

    def test_truncated_response_returns_apology(self) -> None:
        response = mock.MagicMock()
        response.__enter__.return_value.read.side_effect = IncompleteRead(b"{")
        with mock.patch.object(ra, "urlopen", return_value=response):
            with self.assertLogs(ra.LOGGER, level="ERROR"):
                self.assertEqual(ra.get_report_analysis(self.payload, CONFIG), ra.REPORT_ERROR_MESSAGE)
        with mock.patch.object(ra, "urlopen", side_effect=BadStatusLine("garbage")):
            self.assertEqual(ra.get_coaching_plan("Subir ticket", self.payload, CONFIG), ra.COACHING_ERROR_MESSAGE)

    def test_missing_api_key_returns_apology(self) -> None:
        with mock.patch.object(ra, "urlopen") as urlopen:
            result = ra.get_report_analysis(self.payload, {"api_key": ""})
        self.assertEqual(result, ra.REPORT_ERROR_MESSAGE)
        urlopen.assert_not_called()

    def test_config_from_environment(self) -> None:
        env = {"STORE_COMMISSIONS_GEMINI_API_KEY": "k", "STORE_COMMISSIONS_AI_TIMEOUT_S": "nope"}
        with mock.patch.dict("os.environ", env, clear=True):
            config = ra.load_ai_config()
        self.assertEqual(config, {"api_key": "k", "model": ra.DEFAULT_MODEL, "timeout_s": ra.DEFAULT_TIMEOUT_S})

    def test_report_markdown(self) -> None:
        team = team_commissions(USERS, self.goal, [], [], "2024-05")
        markdown = ra.build_report_markdown("2024-05", {"total_revenue": 5000}, team, "Todo bien.")
        self.assertTrue(markdown.startswith("# Informe de rendimiento · mayo de 2024"))
        self.assertIn("| Admin | Encargado | 0.0% | 170,000 |", markdown)
        self.assertIn("| Ana | Vendedor | - | - |", markdown)
        self.assertIn("Todo bien.", markdown)
        self.assertIn("No hay metas definidas", ra.build_report_markdown("2024-05", {}, None, ""))


if __name__ == "__main__":
    unittest.main()
