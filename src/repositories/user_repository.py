"""
User Repository for the DynamoDB users table.
Provides credential lookup and the minimal owner identity shown to administrators.
"""
import logging
import time
from typing import Callable, Dict, Iterable, Optional
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from src.core import config
from src.core.exceptions import DatabaseException
from src.core.retry import RetryPolicy

logger = logging.getLogger(__name__)

# DynamoDB BatchGetItem accepts at most 100 keys per request
BATCH_GET_LIMIT = 100


class UserRepository:
    """Repository for user lookups."""

    def __init__(self, retry_policy: RetryPolicy = None, sleep: Callable[[float], None] = time.sleep):
        self.dynamodb = boto3.resource('dynamodb', region_name=config.settings.aws_region)
        self.table_name = config.settings.users_table_name
        self.table = self.dynamodb.Table(self.table_name)
        self.retry_policy = retry_policy or RetryPolicy(max_attempts=5, backoff_seconds=0.05)
        self._sleep = sleep

    def get_by_username(self, username: str) -> Optional[dict]:
        """
        Retrieve a user item by username.

        Returns:
            User item or None if not found

        Raises:
            DatabaseException: If the read fails
        """
        try:
            response = self.table.get_item(Key={'username': username})
        except (ClientError, BotoCoreError) as e:
            raise DatabaseException(f"Failed to get user: {str(e)}") from e
        return response.get('Item')

    def get_identities(self, usernames: Iterable[str]) -> Dict[str, dict]:
        """
        Look up name and email for several users at once.

        Unprocessed keys are re-requested with exponential backoff, at most
        retry_policy.max_attempts rounds per batch.

        Args:
            usernames: User ids to resolve

        Returns:
            Mapping of username to {'name', 'email'}; unknown users are absent

        Raises:
            DatabaseException: If the batch read fails or keys stay unprocessed
        """
        unique = sorted(set(usernames))
        identities = {}
        try:
            for start in range(0, len(unique), BATCH_GET_LIMIT):
                keys = [{'username': username} for username in unique[start:start + BATCH_GET_LIMIT]]
                request = {
                    self.table_name: {
                        'Keys': keys,
                        'ProjectionExpression': '#username, #name, #email',
                        'ExpressionAttributeNames': {
                            '#username': 'username',
                            '#name': 'name',
                            '#email': 'email'
                        }
                    }
                }
                for attempt in range(1, self.retry_policy.max_attempts + 1):
                    response = self.dynamodb.batch_get_item(RequestItems=request)
                    for item in response.get('Responses', {}).get(self.table_name, []):
                        identities[item['username']] = {
                            'name': item.get('name'),
                            'email': item.get('email')
                        }
                    request = response.get('UnprocessedKeys')
                    if not request:
                        break
                    if attempt == self.retry_policy.max_attempts:
                        raise DatabaseException("User lookup throttled: keys left unprocessed")
                    delay = self.retry_policy.delay_for(attempt)
                    logger.warning("User lookup throttled, retrying unprocessed keys in %.2fs", delay)
                    self._sleep(delay)
        except (ClientError, BotoCoreError) as e:
            raise DatabaseException(f"Failed to look up users: {str(e)}") from e
        return identities
