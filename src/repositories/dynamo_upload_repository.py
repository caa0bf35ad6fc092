"""
DynamoDB Repository for upload records.
Handles CRUD and queue-ordered queries for upload tracking.

Table layout:
    hash key ``upload_id``
    GSI ``OwnerIndex``: ``owner_id`` / ``created_at`` (owner listings, newest first)
    GSI ``ProcessingQueueIndex``: ``queue`` / ``queue_key`` where queue_key is
    ``"{priority:02d}#{created_at}"``, so ascending order is (priority, created_at).
"""
from datetime import datetime
from typing import List, Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import (
    ConflictException,
    DatabaseException,
    UploadNotFoundException,
    ValidationException
)
from src.models.upload_record import UploadRecord, utcnow
from src.models.upload_status import UploadStatus
from src.repositories.upload_repository import UploadRepository

QUEUE_PARTITION = "UPLOADS"


class DynamoUploadRepository(UploadRepository):
    """Repository for upload record DynamoDB operations."""

    MUTABLE_FIELDS = {
        'status',
        'error_message',
        'priority',
        'extracted_title',
        'extracted_authors',
        'extracted_abstract'
    }

    def __init__(self):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table = self.dynamodb.Table(config.settings.uploads_table_name)
        self.owner_index = config.settings.uploads_owner_index
        self.queue_index = config.settings.uploads_queue_index

    def create(self, record: UploadRecord) -> None:
        """
        Create a new upload record.

        Raises:
            ConflictException: If a record with the same id already exists
            DatabaseException: If create operation fails
        """
        try:
            self.table.put_item(
                Item=self._record_to_item(record),
                ConditionExpression='attribute_not_exists(upload_id)'
            )
        except ClientError as e:
            if self._is_conditional_failure(e):
                raise ConflictException(f"Upload '{record.upload_id}' already exists") from e
            raise DatabaseException(f"Failed to create upload record: {str(e)}") from e
        except BotoCoreError as e:
            raise DatabaseException(f"Unexpected error creating upload record: {str(e)}") from e

    def get_by_id(self, upload_id: str) -> Optional[UploadRecord]:
        """
        Retrieve an upload record by ID.

        Returns:
            UploadRecord or None if not found

        Raises:
            DatabaseException: If the read fails
        """
        try:
            response = self.table.get_item(Key={'upload_id': upload_id})
        except (ClientError, BotoCoreError) as e:
            raise DatabaseException(f"Failed to get upload record: {str(e)}") from e

        if 'Item' not in response:
            return None
        return self._item_to_record(response['Item'])

    def get_by_owner(self, owner_id: str) -> List[UploadRecord]:
        """
        Retrieve all records of one owner, newest first.

        Raises:
            DatabaseException: If query fails
        """
        query_kwargs = {
            'IndexName': self.owner_index,
            'KeyConditionExpression': '#owner_id = :owner_id',
            'ExpressionAttributeNames': {'#owner_id': 'owner_id'},
            'ExpressionAttributeValues': {':owner_id': owner_id},
            'ScanIndexForward': False
        }
        return self._query_all(query_kwargs)

    def list_for_processing(
        self,
        status: Optional[UploadStatus] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[UploadRecord]:
        """
        Retrieve records in processing order.

        Order is priority ascending (1 is most urgent), then created_at
        ascending. Pagination is offset based over that order.

        Args:
            status: Optional status filter
            limit: Maximum number of records to return
            offset: Number of records to skip

        Raises:
            DatabaseException: If query fails
        """
        query_kwargs = {
            'IndexName': self.queue_index,
            'KeyConditionExpression': '#queue = :queue',
            'ExpressionAttributeNames': {'#queue': 'queue'},
            'ExpressionAttributeValues': {':queue': QUEUE_PARTITION},
            'ScanIndexForward': True
        }
        if status is not None:
            query_kwargs['FilterExpression'] = '#status = :status'
            query_kwargs['ExpressionAttributeNames']['#status'] = 'status'
            query_kwargs['ExpressionAttributeValues'][':status'] = UploadStatus(status).value

        records = self._query_all(query_kwargs, stop_after=offset + limit)
        return records[offset:offset + limit]

    def update(
        self,
        upload_id: str,
        changes: dict,
        expected_version: Optional[int] = None,
        expected_status: Optional[UploadStatus] = None
    ) -> UploadRecord:
        """
        Apply a partial update.

        Only keys present in ``changes`` are written. A value of None (or an
        empty error_message) removes the attribute. updated_at is always
        stamped and version incremented.

        Args:
            upload_id: Upload identifier
            changes: Fields to update
            expected_version: If given, the write only succeeds at this version
            expected_status: If given, the write only succeeds while the record has this status

        Returns:
            The updated record

        Raises:
            ValidationException: If a field is not updatable
            UploadNotFoundException: If the record does not exist
            ConflictException: If expected_version or expected_status does not match
            DatabaseException: If update operation fails
        """
        unknown = set(changes) - self.MUTABLE_FIELDS
        if unknown:
            raise ValidationException(f"Fields cannot be updated: {', '.join(sorted(unknown))}")

        changes = dict(changes)
        if 'priority' in changes:
            current = self.get_by_id(upload_id)
            if current is None:
                raise UploadNotFoundException(f"Upload '{upload_id}' not found")
            changes['queue_key'] = self._queue_key(changes['priority'], current.created_at)

        names = {'#upload_id': 'upload_id', '#updated_at': 'updated_at', '#version': 'version'}
        values = {':updated_at': self._format_timestamp(utcnow()), ':zero': 0, ':one': 1}
        set_parts = ['#updated_at = :updated_at', '#version = if_not_exists(#version, :zero) + :one']
        remove_parts = []

        for key, value in changes.items():
            names[f"#{key}"] = key
            value = self._to_attribute(key, value)
            if value is None:
                remove_parts.append(f"#{key}")
            else:
                set_parts.append(f"#{key} = :{key}")
                values[f":{key}"] = value

        update_expression = "SET " + ", ".join(set_parts)
        if remove_parts:
            update_expression += " REMOVE " + ", ".join(remove_parts)

        condition = 'attribute_exists(#upload_id)'
        if expected_version is not None:
            condition += ' AND #version = :expected_version'
            values[':expected_version'] = expected_version
        if expected_status is not None:
            condition += ' AND #status = :expected_status'
            names['#status'] = 'status'
            values[':expected_status'] = UploadStatus(expected_status).value

        try:
            response = self.table.update_item(
                Key={'upload_id': upload_id},
                UpdateExpression=update_expression,
                ConditionExpression=condition,
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues='ALL_NEW'
            )
        except ClientError as e:
            if self._is_conditional_failure(e):
                guarded = expected_version is not None or expected_status is not None
                if guarded and self.get_by_id(upload_id) is not None:
                    raise ConflictException(f"Upload '{upload_id}' was modified concurrently") from e
                raise UploadNotFoundException(f"Upload '{upload_id}' not found") from e
            raise DatabaseException(f"Failed to update upload record: {str(e)}") from e
        except BotoCoreError as e:
            raise DatabaseException(f"Unexpected error updating upload record: {str(e)}") from e

        return self._item_to_record(response['Attributes'])

    def delete(self, upload_id: str) -> None:
        """
        Delete an upload record.

        Raises:
            UploadNotFoundException: If the record does not exist
            DatabaseException: If delete operation fails
        """
        try:
            self.table.delete_item(
                Key={'upload_id': upload_id},
                ConditionExpression='attribute_exists(upload_id)'
            )
        except ClientError as e:
            if self._is_conditional_failure(e):
                raise UploadNotFoundException(f"Upload '{upload_id}' not found") from e
            raise DatabaseException(f"Failed to delete upload record: {str(e)}") from e
        except BotoCoreError as e:
            raise DatabaseException(f"Unexpected error deleting upload record: {str(e)}") from e

    def _query_all(self, query_kwargs: dict, stop_after: Optional[int] = None) -> List[UploadRecord]:
        """Follow LastEvaluatedKey until exhausted or enough records are collected."""
        records = []
        try:
            while True:
                response = self.table.query(**query_kwargs)
                records.extend(self._item_to_record(item) for item in response.get('Items', []))
                if 'LastEvaluatedKey' not in response:
                    break
                if stop_after is not None and len(records) >= stop_after:
                    break
                query_kwargs['ExclusiveStartKey'] = response['LastEvaluatedKey']
        except (ClientError, BotoCoreError) as e:
            raise DatabaseException(f"Failed to query upload records: {str(e)}") from e
        return records

    @staticmethod
    def _is_conditional_failure(error: ClientError) -> bool:
        return error.response.get('Error', {}).get('Code') == 'ConditionalCheckFailedException'

    @staticmethod
    def _format_timestamp(value: datetime) -> str:
        return value.isoformat(timespec='microseconds')

    def _queue_key(self, priority: int, created_at: datetime) -> str:
        """Sort key for the processing queue index."""
        return f"{int(priority):02d}#{self._format_timestamp(created_at)}"

    def _to_attribute(self, key: str, value):
        if value is None:
            return None
        if key == 'status':
            return UploadStatus(value).value
        if key == 'error_message' and value == "":
            return None
        return value

    def _record_to_item(self, record: UploadRecord) -> dict:
        """Convert UploadRecord domain model to a DynamoDB item."""
        item = {
            'upload_id': record.upload_id,
            'owner_id': record.owner_id,
            'original_filename': record.original_filename,
            'size_bytes': record.size_bytes,
            'status': record.status.value,
            'priority': record.priority,
            'created_at': self._format_timestamp(record.created_at),
            'updated_at': self._format_timestamp(record.updated_at),
            'version': record.version,
            'queue': QUEUE_PARTITION,
            'queue_key': self._queue_key(record.priority, record.created_at)
        }
        optional = {
            'storage_key': record.storage_key,
            'storage_locator': record.storage_locator,
            'error_message': record.error_message,
            'extracted_title': record.extracted_title,
            'extracted_authors': record.extracted_authors,
            'extracted_abstract': record.extracted_abstract
        }
        item.update({key: value for key, value in optional.items() if value is not None})
        return item

    def _item_to_record(self, item: dict) -> UploadRecord:
        """Convert DynamoDB item to UploadRecord domain model."""
        authors = item.get('extracted_authors')
        return UploadRecord(
            upload_id=item['upload_id'],
            owner_id=item['owner_id'],
            original_filename=item['original_filename'],
            size_bytes=int(item.get('size_bytes', 0)),
            storage_key=item.get('storage_key'),
            storage_locator=item.get('storage_locator'),
            status=UploadStatus(item['status']),
            error_message=item.get('error_message'),
            extracted_title=item.get('extracted_title'),
            extracted_authors=list(authors) if authors is not None else None,
            extracted_abstract=item.get('extracted_abstract'),
            priority=int(item['priority']),
            created_at=datetime.fromisoformat(item['created_at']),
            updated_at=datetime.fromisoformat(item.get('updated_at', item['created_at'])),
            version=int(item.get('version', 1))
        )
