import json
import unittest
from unittest.mock import patch

import httpx
from fastapi.testclient import TestClient

from client import AuthorityClient, run_session
from server.app import SessionManager, app


def snapshot_body(is_end, timestamp=0):
    return {
        "token": "abc",
        "timestamp": timestamp,
        "elevators": [{"id": 0, "floor": 1, "passengers": [], "status": "STOPPED"}],
        "calls": [{"id": 1, "timestamp": 0, "start": 1, "end": 4}],
        "is_end": is_end,
    }


class ScriptedAuthority:
    """Mock transport handler replaying a short session"""

    def __init__(self, fail_on=None):
        self.fail_on = fail_on
        self.actions = []
        self.tokens = []
        self.polls = 0

    def __call__(self, request):
        path = request.url.path
        if path == self.fail_on:
            raise httpx.ConnectError("authority unreachable", request=request)
        if path.startswith("/start/"):
            return httpx.Response(
                200, json={"token": "abc", "problem": 0, "elevator_count": 1, "max_height": 5}
            )
        self.tokens.append(request.headers.get("X-Auth-Token"))
        if path == "/oncalls":
            self.polls += 1
            return httpx.Response(200, json=snapshot_body(is_end=self.polls > 1, timestamp=self.polls - 1))
        if path == "/action":
            self.actions.append(json.loads(request.content))
            return httpx.Response(
                200,
                json={
                    "token": "abc",
                    "timestamp": len(self.actions),
                    "elevators": snapshot_body(False)["elevators"],
                    "is_end": False,
                },
            )
        return httpx.Response(404)


class TestRunSession(unittest.TestCase):
    """Outer transport loop against scripted authorities"""

    def make_client(self, handler):
        http = httpx.Client(transport=httpx.MockTransport(handler), base_url="http://authority")
        return AuthorityClient("http://authority", http=http)

    def test_runs_until_authority_ends_session(self):
        authority = ScriptedAuthority()
        summary = run_session(self.make_client(authority), "tester", 0, 1)

        self.assertTrue(summary.ended)
        self.assertEqual(summary.cycles, 1)
        self.assertEqual(summary.timestamp, 1)
        self.assertEqual(authority.actions, [{"commands": [{"elevator_id": 0, "command": "OPEN"}]}])
        self.assertTrue(all(token == "abc" for token in authority.tokens))

    def test_transport_failure_is_logged_and_ends_loop(self):
        authority = ScriptedAuthority(fail_on="/action")
        with self.assertLogs("client.session", level="ERROR") as logs:
            summary = run_session(self.make_client(authority), "tester", 0, 1)
        self.assertFalse(summary.ended)
        self.assertEqual(summary.cycles, 0)
        self.assertIn("transport failure", logs.output[0])

    def malformed_oncalls(self, body):
        def handler(request):
            if request.url.path.startswith("/start/"):
                return httpx.Response(
                    200, json={"token": "abc", "problem": 0, "elevator_count": 1, "max_height": 5}
                )
            return httpx.Response(200, content=body, headers={"content-type": "application/json"})

        return handler

    def test_non_json_snapshot_is_logged_and_ends_loop(self):
        handler = self.malformed_oncalls(b"<html>gateway error</html>")
        with self.assertLogs("client.session", level="ERROR") as logs:
            summary = run_session(self.make_client(handler), "tester", 0, 1)
        self.assertFalse(summary.ended)
        self.assertEqual(summary.cycles, 0)
        self.assertIn("transport failure", logs.output[0])

    def test_snapshot_not_matching_schema_is_logged_and_ends_loop(self):
        handler = self.malformed_oncalls(json.dumps({"error": "session expired"}).encode())
        with self.assertLogs("client.session", level="ERROR") as logs:
            summary = run_session(self.make_client(handler), "tester", 0, 1)
        self.assertFalse(summary.ended)
        self.assertIn("OnCallsResponse", "\n".join(logs.output))

    def test_malformed_body_surfaces_as_decoding_error(self):
        client = self.make_client(self.malformed_oncalls(b"not json"))
        with self.assertRaises(httpx.DecodingError):
            client.on_calls()

    def test_http_error_status_ends_loop(self):
        def handler(request):
            if request.url.path.startswith("/start/"):
                return httpx.Response(500, json={"detail": "boom"})
            return httpx.Response(404)

        with self.assertLogs("client.session", level="ERROR"):
            summary = run_session(self.make_client(handler), "tester", 0, 1)
        self.assertFalse(summary.ended)

    def test_against_local_authority(self):
        with patch("server.app.manager", SessionManager(max_ticks=60)):
            client = AuthorityClient("http://testserver", http=TestClient(app))
            summary = run_session(client, "tester", 1, 3, engine_name="strict")
        self.assertTrue(summary.ended)
        self.assertEqual(summary.cycles, 60)
        self.assertEqual(summary.timestamp, 60)


if __name__ == "__main__":
    unittest.main()
