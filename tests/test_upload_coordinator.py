# tests/test_upload_coordinator.py
"""
Client-side upload retry and the required-category gate. The HTTP client
is a MagicMock; sleeping is recorded instead of performed.
"""

from unittest.mock import MagicMock, call

import pytest
import requests

from ssrportal.client.http import PortalRequestError
from ssrportal.client.upload_coordinator import (
    LocalFile, SubmissionGateError, UploadCoordinator, UploadError, check_required_categories,
)


def ok(name):
    return {"url": f"https://cdn.test/{name}", "filename": name, "type": "application/pdf", "size": 10}


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def client():
    return MagicMock()


@pytest.fixture
def coordinator(client, sleeps):
    return UploadCoordinator(client, backoff_unit=2.0, sleep=sleeps.append)


report = LocalFile("report.pdf", "application/pdf", data=b"%PDF-1.4")
poster = LocalFile("poster.png", "image/png", data=b"\x89PNG")


class TestUploadOne:

    def test_first_try_success_does_not_sleep(self, coordinator, client, sleeps):
        client.upload.return_value = ok("report.pdf")
        result = coordinator.upload_one(report)

        assert result.url == "https://cdn.test/report.pdf"
        assert [a.attempt for a in result.attempts] == [1]
        assert sleeps == []

    def test_succeeds_on_third_attempt(self, coordinator, client, sleeps):
        client.upload.side_effect = [
            requests.exceptions.ConnectionError("reset"),
            PortalRequestError(500, "Failed to upload file"),
            ok("report.pdf"),
        ]
        result = coordinator.upload_one(report, max_attempts=4)

        assert client.upload.call_count == 3
        assert [a.ok for a in result.attempts] == [False, False, True]
        assert sleeps == [2.0, 4.0]

    def test_exhausted_attempts_raise_with_history(self, coordinator, client, sleeps):
        client.upload.side_effect = requests.exceptions.Timeout("timed out")
        with pytest.raises(UploadError) as exc:
            coordinator.upload_one(report, max_attempts=3)

        err = exc.value
        assert err.filename == "report.pdf"
        assert len(err.attempts) == 3
        assert isinstance(err.cause, requests.exceptions.Timeout)
        # no sleep after the final attempt
        assert sleeps == [2.0, 4.0]
        assert "Failed to upload report.pdf after 3 attempts" in str(err)
        assert "internet connection" in str(err)

    def test_client_errors_are_retried_too(self, coordinator, client, sleeps):
        client.upload.side_effect = PortalRequestError(400, "Invalid file type")
        with pytest.raises(UploadError):
            coordinator.upload_one(report, max_attempts=2)
        assert client.upload.call_count == 2

    def test_backoff_unit_scales_delays(self, client):
        delays = []
        coordinator = UploadCoordinator(client, backoff_unit=0.5, sleep=delays.append)
        client.upload.side_effect = OSError("no route")
        with pytest.raises(UploadError):
            coordinator.upload_one(report, max_attempts=4)
        assert delays == [0.5, 1.0, 1.5]

    def test_zero_attempts_rejected(self, coordinator, client):
        with pytest.raises(ValueError):
            coordinator.upload_one(report, max_attempts=0)
        client.upload.assert_not_called()


class TestUploadMany:

    def test_uploads_in_order(self, coordinator, client):
        client.upload.side_effect = [ok("report.pdf"), ok("poster.png")]
        results = coordinator.upload_many([report, poster])

        assert [r.file.filename for r in results] == ["report.pdf", "poster.png"]
        assert client.upload.call_args_list == [call(report), call(poster)]

    def test_aborts_at_first_exhausted_file(self, coordinator, client):
        third = LocalFile("slides.pptx", "application/vnd.ms-powerpoint", data=b"x")
        client.upload.side_effect = [ok("report.pdf")] + [requests.exceptions.ConnectionError("down")] * 2

        with pytest.raises(UploadError) as exc:
            coordinator.upload_many([report, poster, third], max_attempts=2)

        assert exc.value.filename == "poster.png"
        assert [r.file.filename for r in exc.value.completed] == ["report.pdf"]
        assert third not in [c.args[0] for c in client.upload.call_args_list]

    def test_zero_attempts_rejected_before_any_upload(self, coordinator, client):
        with pytest.raises(ValueError):
            coordinator.upload_many([report, poster], max_attempts=0)
        client.upload.assert_not_called()


class TestSubmissionGate:

    def test_blocks_missing_categories(self):
        with pytest.raises(SubmissionGateError) as exc:
            check_required_categories({"report": [report], "poster": [], "ppt": []}, {"poster": ""})
        assert exc.value.missing == ["poster", "ppt"]
        assert "Poster, PPT" in str(exc.value)

    def test_existing_reference_satisfies_category(self):
        check_required_categories(
            {"report": [report], "poster": [], "ppt": []},
            {"poster": ["https://cdn.test/p.png"], "ppt": "https://cdn.test/s.pptx"},
        )

    def test_gate_runs_before_network(self, client):
        from ssrportal.client.proposal_form import ProposalForm

        form = ProposalForm(client, UploadCoordinator(client, sleep=lambda s: None))
        form.select("report", [report])
        with pytest.raises(SubmissionGateError):
            form.submit("Water audit", "x" * 120)
        client.upload.assert_not_called()
        client.post_json.assert_not_called()
