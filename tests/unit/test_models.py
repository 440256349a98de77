"""Tests for wire models, request validation and error responses."""

import pytest
from pydantic import ValidationError

from convconv.models.api import ConvertRequest, JobStatusResponse
from convconv.models.errors import ErrorResponse, JobStateError, NotFoundError
from convconv.models.events import ClientMessage, ClientMessageType, EventType, JobEvent
from convconv.models.job import TERMINAL_STATUSES, Job, JobStatus
from convconv.models.test_source import TestSourceOptions


class TestJob:
    def test_terminal_statuses(self):
        assert TERMINAL_STATUSES == {JobStatus.COMPLETED, JobStatus.FAILED, JobStatus.CANCELLED}
        assert not JobStatus.PENDING.is_terminal
        assert not JobStatus.PROCESSING.is_terminal

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            Job(job_id="j", input_path="a", output_path="b", progress=101)

    def test_status_response_omits_missing_fields(self):
        job = Job(job_id="j", input_path="a", output_path="b")
        assert JobStatusResponse.from_job(job).to_wire() == {"jobId": "j", "status": "pending"}


class TestConvertRequest:
    def test_camel_case_input(self):
        request = ConvertRequest.model_validate(
            {"file": "uploads/a.mov", "outputFormat": "mp4", "options": {"customArgs": ["-an"]}}
        )
        assert request.output_format == "mp4"
        assert request.options.custom_args == ["-an"]

    def test_defaults(self):
        request = ConvertRequest.model_validate({"file": "a.mov", "outputFormat": "mkv"})
        assert request.options.codec is None
        assert request.options.custom_args == []

    @pytest.mark.parametrize("fmt", ["", "mp4;rm", "../mp4", "m p4"])
    def test_rejects_unsafe_format(self, fmt):
        with pytest.raises(ValidationError):
            ConvertRequest.model_validate({"file": "a.mov", "outputFormat": fmt})

    def test_requires_file(self):
        with pytest.raises(ValidationError):
            ConvertRequest.model_validate({"outputFormat": "mp4"})


class TestEvents:
    def test_serialize_uses_camel_case(self):
        event = JobEvent(type=EventType.SUBSCRIBED, job_id="abc")
        assert event.serialize() == '{"type":"subscribed","jobId":"abc"}'

    def test_client_message(self):
        message = ClientMessage.model_validate_json('{"type":"unsubscribe","jobId":"abc"}')
        assert message.type == ClientMessageType.UNSUBSCRIBE
        assert message.job_id == "abc"

    @pytest.mark.parametrize(
        "raw",
        ['{"type":"subscribe"}', '{"type":"shout","jobId":"a"}', '{"type":"subscribe","jobId":""}', "nope"],
    )
    def test_bad_client_messages(self, raw):
        with pytest.raises(ValidationError):
            ClientMessage.model_validate_json(raw)


class TestTestSourceOptions:
    def test_accepts_camel_case(self):
        options = TestSourceOptions.model_validate(
            {
                "pattern": "ebu",
                "resolution": "720x576",
                "duration": 5,
                "audioType": "white-noise",
                "audioChannel": "mono",
                "sampleRate": 44100,
                "bitDepth": 24,
                "format": "mov",
                "showTimecode": True,
            }
        )
        assert options.show_timecode is True
        assert options.frame_rate is None

    @pytest.mark.parametrize(
        "override",
        [
            {"resolution": "big"},
            {"duration": 0},
            {"duration": 3601},
            {"sampleRate": 22050},
            {"bitDepth": 8},
            {"audioFrequency": 5},
            {"format": "mp4 -y"},
        ],
    )
    def test_rejects_out_of_range(self, override):
        base = {
            "pattern": "smpte",
            "resolution": "1280x720",
            "duration": 10,
            "audioType": "sine",
            "audioChannel": "stereo",
            "sampleRate": 48000,
            "bitDepth": 16,
            "format": "mp4",
        }
        with pytest.raises(ValidationError):
            TestSourceOptions.model_validate({**base, **override})


class TestErrorResponse:
    def test_from_exception(self):
        exc = NotFoundError("Job x not found", details={"job_id": "x"})
        response = ErrorResponse.from_exception(exc, guidance="Check the ID")
        assert response.to_wire() == {
            "success": False,
            "error": "Job x not found",
            "errorType": "NotFoundError",
            "component": "lookup",
            "details": {"job_id": "x"},
            "actionableGuidance": "Check the ID",
            "retryPossible": False,
        }

    def test_error_keeps_message(self):
        exc = JobStateError("already completed")
        assert str(exc) == "already completed"
        assert exc.component == "jobs"
        assert exc.details == {}
