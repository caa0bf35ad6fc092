import pytest
from unittest.mock import Mock
from src.core.exceptions import DatabaseException
from src.core.retry import RetryPolicy
from src.repositories.user_repository import UserRepository


class TestUserRepository:
    @pytest.fixture
    def user_repository(self, aws):
        from src.core import dependencies
        return dependencies.get_user_repository()

    def test_get_by_username(self, aws, user_repository):
        aws.Table('Users-test').put_item(Item={'username': 'alice', 'password_hash': 'x', 'role': 'user'})

        assert user_repository.get_by_username('alice')['role'] == 'user'
        assert user_repository.get_by_username('nobody') is None

    def test_get_identities(self, aws, user_repository):
        table = aws.Table('Users-test')
        table.put_item(Item={
            'username': 'alice', 'name': 'Alice Liddell', 'email': 'alice@example.com', 'password_hash': 'x'
        })
        table.put_item(Item={'username': 'bob', 'email': 'bob@example.com'})

        identities = user_repository.get_identities(['alice', 'bob', 'alice', 'ghost'])

        assert identities == {
            'alice': {'name': 'Alice Liddell', 'email': 'alice@example.com'},
            'bob': {'name': None, 'email': 'bob@example.com'}
        }

    def test_get_identities_more_than_one_batch(self, aws, user_repository):
        with aws.Table('Users-test').batch_writer() as batch:
            for index in range(150):
                batch.put_item(Item={'username': f'user-{index:03d}', 'name': f'User {index}'})

        identities = user_repository.get_identities(f'user-{index:03d}' for index in range(150))

        assert len(identities) == 150
        assert identities['user-149']['name'] == 'User 149'

    def test_get_identities_empty(self, user_repository):
        assert user_repository.get_identities([]) == {}

    def test_missing_table(self, aws, user_repository):
        aws.Table('Users-test').delete()

        with pytest.raises(DatabaseException):
            user_repository.get_by_username('alice')
        with pytest.raises(DatabaseException):
            user_repository.get_identities(['alice'])

    def test_unprocessed_keys_retried_with_backoff(self, aws):
        sleep = Mock()
        repository = UserRepository(retry_policy=RetryPolicy(max_attempts=4, backoff_seconds=0.5), sleep=sleep)
        repository.dynamodb = Mock()
        leftover = {'Users-test': {'Keys': [{'username': 'bob'}]}}
        repository.dynamodb.batch_get_item.side_effect = [
            {'Responses': {'Users-test': [{'username': 'alice', 'name': 'Alice'}]}, 'UnprocessedKeys': leftover},
            {'Responses': {'Users-test': []}, 'UnprocessedKeys': leftover},
            {'Responses': {'Users-test': [{'username': 'bob', 'email': 'bob@example.com'}]}, 'UnprocessedKeys': {}}
        ]

        identities = repository.get_identities(['alice', 'bob'])

        assert identities == {
            'alice': {'name': 'Alice', 'email': None},
            'bob': {'name': None, 'email': 'bob@example.com'}
        }
        assert [c.args[0] for c in sleep.call_args_list] == [0.5, 1.0]
        assert repository.dynamodb.batch_get_item.call_args_list[1].kwargs == {'RequestItems': leftover}

    def test_keys_left_unprocessed_raise(self, aws):
        sleep = Mock()
        repository = UserRepository(retry_policy=RetryPolicy(max_attempts=3, backoff_seconds=0.1), sleep=sleep)
        repository.dynamodb = Mock()
        repository.dynamodb.batch_get_item.return_value = {
            'Responses': {},
            'UnprocessedKeys': {'Users-test': {'Keys': [{'username': 'alice'}]}}
        }

        with pytest.raises(DatabaseException):
            repository.get_identities(['alice'])

        assert repository.dynamodb.batch_get_item.call_count == 3
        assert sleep.call_count == 2
