import json
import pytest
from unittest.mock import Mock
from lambda_functions.status_callback import handler
from src.core.exceptions import (
    ConflictException,
    DatabaseException,
    InvalidTransitionException,
    UploadNotFoundException
)
from src.models.upload_status import UploadStatus
from src.services.status_transition_service import StatusTransitionService


def sqs_event(*bodies) -> dict:
    return {
        "Records": [
            {"messageId": f"msg-{index}", "body": body if isinstance(body, str) else json.dumps(body)}
            for index, body in enumerate(bodies)
        ]
    }


class TestStatusCallbackLambda:
    def test_applies_transitions(self, upload_repository, make_record):
        upload_repository.create(make_record("u-1"))
        service = StatusTransitionService(upload_repository)

        result = handler(
            sqs_event(
                {"upload_id": "u-1", "status": "processing"},
                {"upload_id": "u-1", "status": "failed", "error_message": "no text layer"}
            ),
            None,
            transition_service=service
        )

        assert result == {"batchItemFailures": []}
        record = upload_repository.get_by_id("u-1")
        assert record.status == UploadStatus.FAILED
        assert record.error_message == "no text layer"

    def test_default_service_uses_configured_table(self, upload_repository, make_record):
        upload_repository.create(make_record("u-1"))

        result = handler(sqs_event({"upload_id": "u-1", "status": "processing"}), None)

        assert result == {"batchItemFailures": []}
        assert upload_repository.get_by_id("u-1").status == UploadStatus.PROCESSING

    def test_invalid_transition_dropped(self, upload_repository, make_record):
        upload_repository.create(make_record("u-1"))

        result = handler(
            sqs_event({"upload_id": "u-1", "status": "completed"}),
            None,
            transition_service=StatusTransitionService(upload_repository)
        )

        assert result == {"batchItemFailures": []}
        assert upload_repository.get_by_id("u-1").status == UploadStatus.PENDING

    @pytest.mark.parametrize("body", [
        "not json",
        {"status": "processing"},
        {"upload_id": "u-1"},
        {"upload_id": "u-1", "status": "archived"},
        {"upload_id": 5, "status": "processing"},
        {"upload_id": "u-1", "status": "failed", "error_message": 42},
        {"upload_id": "u-1", "status": "failed", "error_message": ["no", "text"]},
        {"upload_id": "u-3", "status": "processing", "expected_version": "1"},
        {"upload_id": "u-3", "status": "processing", "expected_version": True},
    ])
    def test_malformed_messages_dropped(self, body):
        service = Mock()

        result = handler(sqs_event(body), None, transition_service=service)

        assert result == {"batchItemFailures": []}
        service.transition.assert_not_called()

    def test_malformed_message_does_not_stop_batch(self, upload_repository, make_record):
        upload_repository.create(make_record("u-1", status=UploadStatus.PROCESSING))
        upload_repository.create(make_record("u-2"))

        result = handler(
            sqs_event(
                {"upload_id": "u-1", "status": "failed", "error_message": 42},
                {"upload_id": "u-2", "status": "processing", "expected_version": 1}
            ),
            None,
            transition_service=StatusTransitionService(upload_repository)
        )

        assert result == {"batchItemFailures": []}
        assert upload_repository.get_by_id("u-1").status == UploadStatus.PROCESSING
        assert upload_repository.get_by_id("u-2").status == UploadStatus.PROCESSING

    def test_stale_expected_version_dropped(self, upload_repository, make_record):
        upload_repository.create(make_record("u-1"))
        upload_repository.update("u-1", {"priority": 2})

        result = handler(
            sqs_event({"upload_id": "u-1", "status": "processing", "expected_version": 1}),
            None,
            transition_service=StatusTransitionService(upload_repository)
        )

        assert result == {"batchItemFailures": []}
        assert upload_repository.get_by_id("u-1").status == UploadStatus.PENDING

    def test_permanent_errors_dropped(self):
        service = Mock()
        service.transition.side_effect = [
            InvalidTransitionException("completed is terminal"),
            UploadNotFoundException("gone")
        ]

        result = handler(
            sqs_event(
                {"upload_id": "u-1", "status": "pending"},
                {"upload_id": "u-2", "status": "processing"}
            ),
            None,
            transition_service=service
        )

        assert result == {"batchItemFailures": []}

    def test_transient_errors_reported_for_retry(self):
        updated = Mock(status=UploadStatus.COMPLETED)
        service = Mock()
        service.transition.side_effect = [
            DatabaseException("throttled"),
            updated,
            ConflictException("status changed meanwhile")
        ]

        result = handler(
            sqs_event(
                {"upload_id": "u-1", "status": "processing"},
                {"upload_id": "u-2", "status": "completed"},
                {"upload_id": "u-3", "status": "completed"}
            ),
            None,
            transition_service=service
        )

        assert result == {"batchItemFailures": [{"itemIdentifier": "msg-0"}, {"itemIdentifier": "msg-2"}]}
        service.transition.assert_any_call(
            "u-3", UploadStatus.COMPLETED, error_message=None, expected_version=None
        )

    def test_empty_event(self):
        assert handler({}, None, transition_service=Mock()) == {"batchItemFailures": []}

    def test_pinned_version_conflict_not_retried(self):
        service = Mock()
        service.transition.side_effect = ConflictException("stale version")

        result = handler(
            sqs_event({"upload_id": "u-3", "status": "completed", "expected_version": 2}),
            None,
            transition_service=service
        )

        assert result == {"batchItemFailures": []}
        service.transition.assert_called_once_with(
            "u-3", UploadStatus.COMPLETED, error_message=None, expected_version=2
        )
