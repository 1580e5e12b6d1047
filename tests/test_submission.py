"""Tests for sanitisation, payload building, the HTTP transport and the wizard."""

import asyncio
import uuid
from datetime import datetime, timezone

import httpx
import pytest

from src.config import settings
from src.core import (
    DomainException,
    DuplicateSubmissionError,
    InsecureRandomSourceError,
    SubmissionFailedError,
    ValidationException,
)
from src.intake.application import (
    GENERIC_FAILURE_MESSAGE,
    ISubmissionTransport,
    IntakeWizard,
    SubmissionService,
    build_submission_payload,
    escape_html,
    generate_idempotency_key,
    sanitize_record,
    sanitize_text,
)
from src.intake.application import services
from src.intake.domain import IntakeRecord, Severity, SubmissionStatus
from src.intake.infrastructure import HttpSubmissionTransport
from src.triage.domain import classify

ENDPOINT = "https://intake.example.org/api/intake"


class RecordingTransport(ISubmissionTransport):
    """In-memory transport that records calls and can be told to fail."""

    def __init__(self, fail_with: Exception | None = None):
        self.fail_with = fail_with
        self.calls = []

    async def send(self, payload, headers):
        self.calls.append((payload, headers))
        if self.fail_with:
            raise self.fail_with
        return {"success": True}


class SlowTransport(ISubmissionTransport):
    """Transport that never answers in time."""

    async def send(self, payload, headers):
        await asyncio.sleep(10)
        return {"success": True}


# ========== Sanitisation ==========

class TestSanitize:

    def test_escapes_markup(self):
        assert escape_html("<b>\"Tom's\" a/b</b>") == (
            "&lt;b&gt;&quot;Tom&#x27;s&quot; a&#x2F;b&lt;&#x2F;b&gt;"
        )

    def test_bare_ampersand_escaped(self):
        assert escape_html("Fish & chips") == "Fish &amp; chips"

    def test_existing_entities_left_alone(self):
        assert escape_html("&lt;already&gt; &amp; &#39; &#x2F;") == "&lt;already&gt; &amp; &#39; &#x2F;"

    @pytest.mark.parametrize("value", [
        "<script>alert('x')</script>",
        "Tom & Jerry / \"quoted\"",
        "  padded  ",
        "&lt; is less-than",
    ])
    def test_sanitize_is_idempotent(self, value):
        once = sanitize_text(value)
        assert sanitize_text(once) == once

    def test_trims(self):
        assert sanitize_text("  hello \n") == "hello"

    def test_caps_length(self):
        assert len(sanitize_text("a" * 6000)) == 5000

    def test_truncation_never_splits_an_entity(self):
        value = "a" * 4998 + "<b"
        once = sanitize_text(value)

        assert once == "a" * 4998
        assert sanitize_text(once) == once

    def test_sanitize_record_blanks_empty_optional_text(self, complete_record):
        complete_record.pronouns = ""
        complete_record.availability = "   "

        data = sanitize_record(complete_record)

        assert data["pronouns"] is None
        assert data["availability"] == ""
        assert data["concernDetails"] == "Struggling with bills since &lt;March&gt;."

    def test_sanitize_record_leaves_record_untouched(self, complete_record):
        sanitize_record(complete_record)
        assert complete_record.concern_details == "Struggling with bills since <March>."


# ========== Payload ==========

def test_idempotency_key_is_uuid4():
    key = generate_idempotency_key()
    assert uuid.UUID(key).version == 4
    assert generate_idempotency_key() != key


def test_missing_random_source_is_fatal(monkeypatch):
    def no_entropy():
        raise NotImplementedError("no urandom")

    monkeypatch.setattr(services.uuid, "uuid4", no_entropy)

    with pytest.raises(InsecureRandomSourceError):
        generate_idempotency_key()


def test_payload_has_triage_timestamp_and_schema(complete_record):
    submitted_at = datetime(2026, 1, 5, 10, 15, tzinfo=timezone.utc)
    triage = classify(complete_record)

    payload = build_submission_payload(complete_record, triage, submitted_at)

    assert payload["triage"] == {
        "riskScore": 2,
        "buckets": ["Mental Health & Addiction", "Money/Debt Advice"],
        "priority": "Low",
    }
    assert payload["submittedAt"] == "2026-01-05T10:15:00+00:00"
    assert payload["schemaVersion"] == 1
    assert payload["email"] == "sam.taylor@example.org"


# ========== Submission service ==========

class TestSubmissionService:

    async def test_submit_sends_headers_and_payload(self, complete_record):
        transport = RecordingTransport()

        receipt = await SubmissionService(transport).submit(complete_record, csrf_token="tok")

        payload, headers = transport.calls[0]
        assert headers["Content-Type"] == "application/json"
        assert headers["X-Idempotency-Key"] == receipt.submission_id
        assert headers["X-CSRF-Token"] == "tok"
        assert payload["triage"] == receipt.triage.to_dict()
        assert receipt.response == {"success": True}

    async def test_csrf_header_omitted_without_token(self, complete_record):
        transport = RecordingTransport()

        await SubmissionService(transport).submit(complete_record)

        assert "X-CSRF-Token" not in transport.calls[0][1]

    async def test_invalid_record_never_reaches_transport(self):
        transport = RecordingTransport()

        with pytest.raises(ValidationException) as exc_info:
            await SubmissionService(transport).submit(IntakeRecord())

        assert "privacy" in exc_info.value.errors
        assert transport.calls == []

    async def test_each_submission_gets_a_fresh_key(self, complete_record):
        transport = RecordingTransport()
        service = SubmissionService(transport)

        first = await service.submit(complete_record)
        second = await service.submit(complete_record)

        assert first.submission_id != second.submission_id


# ========== HTTP transport ==========

class TestHttpSubmissionTransport:

    async def test_success_returns_json_body(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["key"] = request.headers["X-Idempotency-Key"]
            seen["body"] = request.read()
            return httpx.Response(200, json={"success": True, "message": "ok"})

        transport = HttpSubmissionTransport(ENDPOINT, transport=httpx.MockTransport(handler))

        body = await transport.send({"firstName": "Sam"}, {"X-Idempotency-Key": "abc"})
        await transport.close()

        assert body == {"success": True, "message": "ok"}
        assert seen["key"] == "abc"
        assert b"Sam" in seen["body"]

    async def test_rejection_message_is_surfaced(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(400, json={"message": "Email already registered"})

        transport = HttpSubmissionTransport(
            ENDPOINT, max_retries=3, backoff_seconds=0,
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(SubmissionFailedError) as exc_info:
            await transport.send({}, {})

        assert exc_info.value.user_message == "Email already registered"
        assert exc_info.value.status_code == 400
        assert len(calls) == 1

    async def test_rejection_without_message_reports_status(self):
        transport = HttpSubmissionTransport(
            ENDPOINT, transport=httpx.MockTransport(lambda r: httpx.Response(422, text="nope")),
        )

        with pytest.raises(SubmissionFailedError) as exc_info:
            await transport.send({}, {})

        assert exc_info.value.user_message == "Server returned 422"

    async def test_server_errors_retry_with_same_key(self):
        keys = []

        def handler(request):
            keys.append(request.headers["X-Idempotency-Key"])
            if len(keys) < 3:
                return httpx.Response(503, json={"message": "busy"})
            return httpx.Response(201, json={"id": 7})

        transport = HttpSubmissionTransport(
            ENDPOINT, max_retries=3, backoff_seconds=0,
            transport=httpx.MockTransport(handler),
        )

        body = await transport.send({}, {"X-Idempotency-Key": "same"})

        assert body == {"id": 7}
        assert keys == ["same", "same", "same"]

    async def test_network_error_gives_generic_message(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        transport = HttpSubmissionTransport(
            ENDPOINT, max_retries=2, backoff_seconds=0,
            transport=httpx.MockTransport(handler),
        )

        with pytest.raises(SubmissionFailedError) as exc_info:
            await transport.send({}, {})

        assert exc_info.value.user_message == GENERIC_FAILURE_MESSAGE
        assert "connection refused" not in exc_info.value.user_message

    def test_explicit_arguments_are_respected(self):
        transport = HttpSubmissionTransport(ENDPOINT, timeout_seconds=0, max_retries=1)

        assert transport.timeout_seconds == 0
        assert transport.max_retries == 1

    def test_unset_arguments_fall_back_to_settings(self):
        transport = HttpSubmissionTransport(ENDPOINT)

        assert transport.timeout_seconds == settings.submission_timeout_seconds
        assert transport.max_retries == settings.submission_max_retries

    @pytest.mark.parametrize("max_retries", [0, -1])
    def test_non_positive_retries_rejected(self, max_retries):
        with pytest.raises(ValueError):
            HttpSubmissionTransport(ENDPOINT, max_retries=max_retries)

    async def test_unconfigured_endpoint_fails(self):
        transport = HttpSubmissionTransport()
        transport.endpoint_url = None

        with pytest.raises(SubmissionFailedError):
            await transport.send({}, {})


# ========== Wizard ==========

class TestIntakeWizard:

    def test_next_blocks_on_errors(self):
        wizard = IntakeWizard()

        assert wizard.next() is False
        assert wizard.step == 1
        assert set(wizard.errors) == {"firstName", "lastName", "email"}

    def test_walks_all_steps(self, complete_record):
        wizard = IntakeWizard(complete_record)

        for expected in (2, 3, 4, 5):
            assert wizard.next() is True
            assert wizard.step == expected

        assert wizard.next() is True
        assert wizard.step == 5
        assert wizard.progress == 100

    def test_prev_clears_errors_and_stops_at_one(self):
        wizard = IntakeWizard()
        wizard.next()

        wizard.prev()

        assert wizard.step == 1
        assert wizard.errors == {}

    def test_live_triage_follows_edits(self):
        wizard = IntakeWizard()
        assert wizard.triage.risk_score == 0

        wizard.record.severity = Severity.CRISIS
        wizard.record.risk_flags.self_harm = True

        assert wizard.triage.risk_score == 12
        assert wizard.triage.priority.value == "Immediate"

    async def test_transport_failure_keeps_record_for_retry(self, complete_record):
        before = complete_record.to_dict()
        failing = RecordingTransport(fail_with=SubmissionFailedError("Server returned 500", 500))
        wizard = IntakeWizard(complete_record)

        assert await wizard.submit(SubmissionService(failing)) is False

        assert wizard.status == SubmissionStatus.ERROR
        assert wizard.submit_error == "Server returned 500"
        assert wizard.record is complete_record
        assert wizard.record.to_dict() == before

        assert await wizard.submit(SubmissionService(RecordingTransport())) is True
        assert wizard.status == SubmissionStatus.SUCCESS

    async def test_success_releases_record(self, complete_record):
        wizard = IntakeWizard(complete_record)

        assert await wizard.submit(SubmissionService(RecordingTransport())) is True

        assert wizard.receipt is not None
        with pytest.raises(DomainException):
            wizard.record
        with pytest.raises(DuplicateSubmissionError):
            await wizard.submit(SubmissionService(RecordingTransport()))

    async def test_rejects_submit_while_in_flight(self, complete_record):
        wizard = IntakeWizard(complete_record)
        wizard.status = SubmissionStatus.SUBMITTING

        with pytest.raises(DuplicateSubmissionError):
            await wizard.submit(SubmissionService(RecordingTransport()))

    async def test_consent_errors_block_submission(self, complete_record):
        complete_record.consent.privacy_policy_accepted = False
        transport = RecordingTransport()
        wizard = IntakeWizard(complete_record)

        assert await wizard.submit(SubmissionService(transport)) is False

        assert "privacy" in wizard.errors
        assert wizard.status == SubmissionStatus.IDLE
        assert transport.calls == []

    async def test_earlier_step_errors_surface_from_final_gate(self, complete_record):
        complete_record.email = "broken"
        wizard = IntakeWizard(complete_record)

        assert await wizard.submit(SubmissionService(RecordingTransport())) is False

        assert wizard.errors == {"email": "Enter a valid email address"}
        assert wizard.status == SubmissionStatus.IDLE

    async def test_timed_out_submission_can_be_retried(self, complete_record):
        wizard = IntakeWizard(complete_record)

        with pytest.raises(asyncio.TimeoutError):
            await asyncio.wait_for(wizard.submit(SubmissionService(SlowTransport())), 0.05)

        assert wizard.status == SubmissionStatus.ERROR
        assert wizard.submit_error == GENERIC_FAILURE_MESSAGE
        assert wizard.record is complete_record

        assert await wizard.submit(SubmissionService(RecordingTransport())) is True
        assert wizard.status == SubmissionStatus.SUCCESS

    async def test_unexpected_transport_error_can_be_retried(self, complete_record):
        wizard = IntakeWizard(complete_record)

        with pytest.raises(RuntimeError):
            await wizard.submit(SubmissionService(RecordingTransport(fail_with=RuntimeError("boom"))))

        assert wizard.status == SubmissionStatus.ERROR
        assert wizard.submit_error == GENERIC_FAILURE_MESSAGE

        assert await wizard.submit(SubmissionService(RecordingTransport())) is True

    async def test_missing_random_source_aborts(self, complete_record, monkeypatch):
        def no_entropy():
            raise NotImplementedError

        monkeypatch.setattr(services.uuid, "uuid4", no_entropy)
        transport = RecordingTransport()
        wizard = IntakeWizard(complete_record)

        with pytest.raises(InsecureRandomSourceError):
            await wizard.submit(SubmissionService(transport))

        assert wizard.status == SubmissionStatus.ERROR
        assert transport.calls == []
