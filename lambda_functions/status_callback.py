"""
Lambda function applying status reports from the extraction worker.
Triggered by an SQS queue; each message body is
{"upload_id": ..., "status": ..., "error_message": ..., "expected_version": ...}
where the last two are optional.
"""
import json
import logging
from src.core import config
from src.core.exceptions import (
    ConflictException,
    DatabaseException,
    InvalidTransitionException,
    UploadNotFoundException,
    ValidationException
)
from src.core.logging_config import setup_logging
from src.models.upload_status import UploadStatus
from src.repositories.dynamo_upload_repository import DynamoUploadRepository
from src.services.status_transition_service import StatusTransitionService

setup_logging(config.settings.log_level)
logger = logging.getLogger(__name__)


def handler(event, context, transition_service: StatusTransitionService = None):
    """
    Lambda handler for worker status messages.

    Args:
        event: SQS event
        context: Lambda context object
        transition_service: Injected for tests

    Returns:
        dict: SQS partial batch response; only transient failures are listed
    """
    transition_service = transition_service or StatusTransitionService(DynamoUploadRepository())
    failures = []

    for record in event.get('Records', []):
        message_id = record.get('messageId')
        try:
            message = json.loads(record['body'])
            upload_id = message['upload_id']
            if not isinstance(upload_id, str) or not upload_id:
                raise TypeError("upload_id must be a non-empty string")
            target = UploadStatus(message['status'])
            error_message = message.get('error_message')
            expected_version = message.get('expected_version')
            if error_message is not None and not isinstance(error_message, str):
                raise TypeError(f"error_message must be a string, got {type(error_message).__name__}")
            if expected_version is not None and (
                isinstance(expected_version, bool) or not isinstance(expected_version, int)
            ):
                raise TypeError(f"expected_version must be an integer, got {type(expected_version).__name__}")
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Dropping malformed status message %s: %s", message_id, e)
            continue

        try:
            updated = transition_service.transition(
                upload_id,
                target,
                error_message=error_message,
                expected_version=expected_version
            )
            logger.info("Upload %s is now %s", upload_id, updated.status.value)

        except (InvalidTransitionException, ValidationException, UploadNotFoundException) as e:
            logger.error("Rejected status %s for upload %s: %s", target.value, upload_id, e.message)

        except ConflictException as e:
            # A pinned version never matches again; an unpinned conflict is a status race
            if expected_version is not None:
                logger.error("Dropping stale status %s for upload %s: %s", target.value, upload_id, e.message)
                continue
            logger.warning("Status %s for upload %s will be retried: %s", target.value, upload_id, e.message)
            failures.append({'itemIdentifier': message_id})

        except DatabaseException as e:
            logger.warning("Status %s for upload %s will be retried: %s", target.value, upload_id, e.message)
            failures.append({'itemIdentifier': message_id})

    return {'batchItemFailures': failures}
