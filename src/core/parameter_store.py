"""
AWS Systems Manager Parameter Store helper.
Fetches secrets with caching to minimize API calls.
"""
import boto3
from botocore.exceptions import BotoCoreError, ClientError
from functools import lru_cache
from src.core.exceptions import ConfigurationException


@lru_cache(maxsize=10)
def get_parameter(parameter_name: str, region: str = "us-east-1") -> str:
    """
    Fetch a parameter from Parameter Store with caching.

    Args:
        parameter_name: Full parameter name (e.g., /paper-uploads/dev/jwt-secret)
        region: AWS region

    Returns:
        Parameter value (decrypted if SecureString)

    Raises:
        ConfigurationException: If the parameter cannot be read
    """
    try:
        ssm = boto3.client('ssm', region_name=region)
        response = ssm.get_parameter(Name=parameter_name, WithDecryption=True)
        return response['Parameter']['Value']
    except (ClientError, BotoCoreError) as e:
        raise ConfigurationException(f"Failed to read parameter {parameter_name}: {str(e)}") from e
