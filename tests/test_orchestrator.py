"""
Tests for the Sync Orchestrator

Covers the create-or-update decision, abort-on-failure behaviour and a full
run through the default wiring with a mocked HTTP session.

Run with:
    python -m pytest tests/test_orchestrator.py -v
"""

import unittest
from unittest import mock

from iss_loc import orchestrator
from iss_loc.dns_repository import CloudflareRecordRepository
from iss_loc.errors import UpstreamAPIError, UpstreamHTTPError, ValidationError
from iss_loc.loc_encoder import encode
from iss_loc.models import DNSRecord, Position, SyncResult
from iss_loc.orchestrator import SyncOrchestrator, SyncState
from iss_loc.position_source import PositionSource

ZONE_ID = "xoxoxo"
RECORD_NAME = "iss.example.com"
ISS_POSITION = Position(latitude=33.070531, longitude=-124.767058, altitude=419.493)


class TestSyncOrchestrator(unittest.TestCase):
    """Test suite for SyncOrchestrator.run with collaborator doubles."""

    def setUp(self):
        self.source = mock.Mock(spec=PositionSource)
        self.source.fetch.return_value = ISS_POSITION
        self.repository = mock.Mock(spec=CloudflareRecordRepository)
        self.orchestrator = SyncOrchestrator(self.source, self.repository)
        self.fields = encode(ISS_POSITION)

    def test_updates_existing_record(self):
        self.repository.find.return_value = DNSRecord(id="record-123", type="LOC", name=RECORD_NAME)
        self.repository.update.return_value = DNSRecord(id="record-123", type="LOC", name=RECORD_NAME)

        result = self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.assertEqual(result, SyncResult(id="record-123", created=False))
        self.repository.find.assert_called_once_with(ZONE_ID, RECORD_NAME)
        self.repository.update.assert_called_once_with(ZONE_ID, "record-123", self.fields)
        self.repository.create.assert_not_called()
        self.assertEqual(self.orchestrator.state, SyncState.DONE)

    def test_creates_missing_record(self):
        self.repository.find.return_value = None
        self.repository.create.return_value = DNSRecord(id="record-new", type="LOC", name=RECORD_NAME)

        result = self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.assertEqual(result, SyncResult(id="record-new", created=True))
        self.repository.create.assert_called_once_with(ZONE_ID, RECORD_NAME, self.fields, 120)
        self.repository.update.assert_not_called()

    def test_fetch_failure_never_touches_dns(self):
        self.source.fetch.side_effect = UpstreamHTTPError(
            "Failed to fetch ISS position: 500 Internal Server Error", status_code=500
        )

        with self.assertRaises(UpstreamHTTPError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.repository.find.assert_not_called()
        self.repository.create.assert_not_called()
        self.repository.update.assert_not_called()
        self.assertEqual(self.orchestrator.state, SyncState.FAILED)

    def test_invalid_position_never_touches_dns(self):
        self.source.fetch.side_effect = ValidationError("Invalid ISS API response")

        with self.assertRaises(ValidationError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.repository.find.assert_not_called()

    def test_lookup_failure_aborts_before_write(self):
        self.repository.find.side_effect = UpstreamHTTPError(
            "Failed to list DNS records: 401 Unauthorized", status_code=401
        )

        with self.assertRaises(UpstreamHTTPError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.repository.create.assert_not_called()
        self.repository.update.assert_not_called()

    def test_unexpected_error_marks_run_failed(self):
        self.repository.find.side_effect = KeyError(0)

        with self.assertRaises(KeyError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.assertEqual(self.orchestrator.state, SyncState.FAILED)
        self.repository.create.assert_not_called()
        self.repository.update.assert_not_called()

    def test_update_failure_is_reported(self):
        self.repository.find.return_value = DNSRecord(id="record-123", type="LOC", name=RECORD_NAME)
        self.repository.update.side_effect = UpstreamAPIError("Cloudflare API error: Invalid record")

        with self.assertRaises(UpstreamAPIError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.assertEqual(self.orchestrator.state, SyncState.FAILED)

    def test_runs_are_independent(self):
        """A failed run leaves nothing behind for the next one."""
        self.repository.find.return_value = None
        self.repository.create.return_value = DNSRecord(id="record-new", type="LOC", name=RECORD_NAME)
        self.source.fetch.side_effect = [ValidationError("Invalid ISS API response"), ISS_POSITION]

        with self.assertRaises(ValidationError):
            self.orchestrator.run(ZONE_ID, RECORD_NAME)
        result = self.orchestrator.run(ZONE_ID, RECORD_NAME)

        self.assertTrue(result.created)
        self.assertEqual(self.orchestrator.state, SyncState.DONE)


def _response(status_code=200, reason="OK", payload=None):
    response = mock.Mock()
    response.status_code = status_code
    response.reason = reason
    response.ok = 200 <= status_code < 300
    response.json.return_value = payload
    return response


def _envelope(result):
    return {"success": True, "errors": [], "messages": [], "result": result}


class TestRunEntryPoint(unittest.TestCase):
    """The stateless entry point wired to a mocked requests.Session."""

    def setUp(self):
        patcher = mock.patch("iss_loc.orchestrator.requests.Session")
        session_cls = patcher.start()
        self.addCleanup(patcher.stop)
        self.session = mock.MagicMock()
        session_cls.return_value.__enter__.return_value = self.session

    def test_update_flow(self):
        self.session.get.return_value = _response(
            payload={"latitude": 33.070531, "longitude": -124.767058, "altitude": 419.493}
        )
        self.session.request.side_effect = [
            _response(payload=_envelope([{"id": "record-123", "type": "LOC", "name": RECORD_NAME}])),
            _response(payload=_envelope({"id": "record-123", "type": "LOC", "name": RECORD_NAME})),
        ]

        result = orchestrator.run(ZONE_ID, RECORD_NAME, "test-api-token")

        self.assertEqual(result, SyncResult(id="record-123", created=False))
        methods = [c.args[0] for c in self.session.request.call_args_list]
        self.assertEqual(methods, ["GET", "PATCH"])

    def test_create_flow(self):
        self.session.get.return_value = _response(
            payload={"latitude": 33.070531, "longitude": -124.767058, "altitude": 419.493}
        )
        self.session.request.side_effect = [
            _response(payload=_envelope([])),
            _response(payload=_envelope({"id": "record-new", "type": "LOC", "name": RECORD_NAME})),
        ]

        result = orchestrator.run(ZONE_ID, RECORD_NAME, "test-api-token")

        self.assertEqual(result, SyncResult(id="record-new", created=True))
        post = self.session.request.call_args_list[1]
        self.assertEqual(post.args[0], "POST")
        self.assertEqual(post.kwargs["json"]["data"]["altitude"], 419493)

    def test_telemetry_server_error_makes_no_dns_call(self):
        self.session.get.return_value = _response(status_code=500, reason="Internal Server Error")

        with self.assertRaises(UpstreamHTTPError):
            orchestrator.run(ZONE_ID, RECORD_NAME, "test-api-token")

        self.session.request.assert_not_called()


if __name__ == "__main__":
    unittest.main()
