"""
Shared test fixtures and utilities.
"""
import os

# Environment must be in place before src.core.config is imported
os.environ['AWS_ACCESS_KEY_ID'] = 'testing'
os.environ['AWS_SECRET_ACCESS_KEY'] = 'testing'
os.environ['AWS_SECURITY_TOKEN'] = 'testing'
os.environ['AWS_SESSION_TOKEN'] = 'testing'
os.environ['AWS_DEFAULT_REGION'] = 'us-east-1'
os.environ['AWS_REGION'] = 'us-east-1'
os.environ['S3_BUCKET_NAME'] = 'test-bucket'
os.environ['UPLOADS_TABLE_NAME'] = 'Uploads-test'
os.environ['USERS_TABLE_NAME'] = 'Users-test'
os.environ['ENVIRONMENT'] = 'test'
os.environ['JWT_SECRET'] = 'test-secret-key-for-unit-tests-only-32b'
os.environ['RECORD_WRITE_BACKOFF_SECONDS'] = '0'

import boto3
import pytest
from datetime import datetime, timedelta, timezone
from moto import mock_aws
from src.core import config, dependencies
from src.models.actor import Actor, Role
from src.models.upload_record import UploadRecord
from src.services.auth_service import create_access_token

PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def create_uploads_table(dynamodb):
    return dynamodb.create_table(
        TableName='Uploads-test',
        KeySchema=[{'AttributeName': 'upload_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[
            {'AttributeName': 'upload_id', 'AttributeType': 'S'},
            {'AttributeName': 'owner_id', 'AttributeType': 'S'},
            {'AttributeName': 'created_at', 'AttributeType': 'S'},
            {'AttributeName': 'queue', 'AttributeType': 'S'},
            {'AttributeName': 'queue_key', 'AttributeType': 'S'}
        ],
        GlobalSecondaryIndexes=[
            {
                'IndexName': 'OwnerIndex',
                'KeySchema': [
                    {'AttributeName': 'owner_id', 'KeyType': 'HASH'},
                    {'AttributeName': 'created_at', 'KeyType': 'RANGE'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            },
            {
                'IndexName': 'ProcessingQueueIndex',
                'KeySchema': [
                    {'AttributeName': 'queue', 'KeyType': 'HASH'},
                    {'AttributeName': 'queue_key', 'KeyType': 'RANGE'}
                ],
                'Projection': {'ProjectionType': 'ALL'}
            }
        ],
        BillingMode='PAY_PER_REQUEST'
    )


def create_users_table(dynamodb):
    return dynamodb.create_table(
        TableName='Users-test',
        KeySchema=[{'AttributeName': 'username', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'username', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )


@pytest.fixture
def aws():
    """Mocked S3 bucket and DynamoDB tables; yields the DynamoDB resource."""
    with mock_aws():
        config.settings = config.Settings()
        dependencies.clear_caches()

        s3 = boto3.client('s3', region_name='us-east-1')
        s3.create_bucket(Bucket='test-bucket')

        dynamodb = boto3.resource('dynamodb', region_name='us-east-1')
        create_uploads_table(dynamodb)
        create_users_table(dynamodb)

        yield dynamodb

        dependencies.clear_caches()
    config.settings = config.Settings()


@pytest.fixture
def upload_repository(aws):
    return dependencies.get_upload_repository()


@pytest.fixture
def s3_repository(aws):
    return dependencies.get_s3_repository()


@pytest.fixture
def client(aws):
    from fastapi.testclient import TestClient
    from src.main import app
    return TestClient(app)


@pytest.fixture
def make_headers():
    """Build Authorization headers for a user id and role."""
    def _make(username: str, role: Role = Role.USER) -> dict:
        return {"Authorization": f"Bearer {create_access_token(username, role)}"}
    return _make


@pytest.fixture
def alice():
    return Actor("alice", Role.USER)


@pytest.fixture
def bob():
    return Actor("bob", Role.USER)


@pytest.fixture
def admin():
    return Actor("root", Role.ADMIN)


@pytest.fixture
def make_record():
    """Build UploadRecord objects with increasing created_at timestamps."""
    base = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    counter = {'n': 0}

    def _make(upload_id: str = None, owner_id: str = "alice", priority: int = 5, **overrides) -> UploadRecord:
        counter['n'] += 1
        upload_id = upload_id or f"upload-{counter['n']}"
        fields = dict(
            upload_id=upload_id,
            owner_id=owner_id,
            original_filename=f"{upload_id}.pdf",
            size_bytes=len(PDF_BYTES),
            storage_key=f"pending/{upload_id}.pdf",
            storage_locator=f"https://test-bucket.s3.us-east-1.amazonaws.com/pending/{upload_id}.pdf",
            priority=priority,
            created_at=base + timedelta(seconds=counter['n'])
        )
        fields.update(overrides)
        return UploadRecord(**fields)
    return _make


@pytest.fixture
def pdf_bytes():
    return PDF_BYTES
