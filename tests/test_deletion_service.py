"""
Unit tests for DeletionService.
"""
import pytest
from unittest.mock import Mock, call
from src.core.exceptions import (
    DatabaseException,
    StorageException,
    UnauthorizedException,
    UploadNotFoundException
)
from src.services.deletion_service import DeletionService


@pytest.fixture
def storage():
    """Parent mock so blob and record calls share one call history."""
    parent = Mock()
    parent.blob.key_from_locator.return_value = None
    return parent


@pytest.fixture
def service(storage):
    return DeletionService(storage.blob, storage.records)


class TestDeletionService:
    def test_blob_deleted_before_record(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", owner_id="alice")

        service.delete(alice, "u-1")

        assert storage.mock_calls[-2:] == [
            call.blob.delete_object("pending/u-1.pdf"),
            call.records.delete("u-1"),
        ]

    def test_blob_failure_still_deletes_record(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", owner_id="alice")
        storage.blob.delete_object.side_effect = StorageException("access denied")

        service.delete(alice, "u-1")

        storage.records.delete.assert_called_once_with("u-1")

    def test_record_without_locator_skips_blob(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", storage_locator=None)

        service.delete(alice, "u-1")

        storage.blob.delete_object.assert_not_called()
        storage.records.delete.assert_called_once_with("u-1")

    def test_key_derived_from_locator(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", storage_key=None)
        storage.blob.key_from_locator.return_value = "pending/u-1.pdf"

        service.delete(alice, "u-1")

        storage.blob.delete_object.assert_called_once_with("pending/u-1.pdf")

    def test_foreign_locator_skips_blob(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record(
            "u-1", storage_key=None, storage_locator="https://elsewhere.example.com/u-1.pdf"
        )

        service.delete(alice, "u-1")

        storage.blob.delete_object.assert_not_called()
        storage.records.delete.assert_called_once_with("u-1")

    def test_other_users_upload_not_found(self, service, storage, bob, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", owner_id="alice")

        with pytest.raises(UploadNotFoundException):
            service.delete(bob, "u-1")

        storage.blob.delete_object.assert_not_called()
        storage.records.delete.assert_not_called()

    def test_admin_deletes_any_upload(self, service, storage, admin, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", owner_id="alice")

        service.delete(admin, "u-1")

        storage.records.delete.assert_called_once_with("u-1")

    def test_missing_upload(self, service, storage, alice):
        storage.records.get_by_id.return_value = None

        with pytest.raises(UploadNotFoundException):
            service.delete(alice, "missing")

    def test_requires_actor(self, service, storage):
        with pytest.raises(UnauthorizedException):
            service.delete(None, "u-1")

        storage.records.get_by_id.assert_not_called()

    def test_record_delete_failure_propagates(self, service, storage, alice, make_record):
        storage.records.get_by_id.return_value = make_record("u-1", owner_id="alice")
        storage.records.delete.side_effect = DatabaseException("table unavailable")

        with pytest.raises(DatabaseException):
            service.delete(alice, "u-1")

        storage.blob.delete_object.assert_called_once_with("pending/u-1.pdf")

    def test_deletes_from_s3_and_dynamodb(self, s3_repository, upload_repository, alice, make_record, pdf_bytes):
        locator = s3_repository.put_object("pending/u-1.pdf", pdf_bytes, "application/pdf")
        upload_repository.create(make_record("u-1", storage_locator=locator))
        service = DeletionService(s3_repository, upload_repository)

        service.delete(alice, "u-1")

        assert upload_repository.get_by_id("u-1") is None
        with pytest.raises(StorageException):
            s3_repository.get_file("pending/u-1.pdf")
        with pytest.raises(UploadNotFoundException):
            service.delete(alice, "u-1")
