"""
Logging setup for the Paper Upload API.
"""
import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger for the application.
    Call once at startup (API entry point or Lambda module import).
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - [%(levelname)s] - %(message)s",
        stream=sys.stdout,
    )
    # Silence noisy libraries
    for noisy in ("boto3", "botocore", "urllib3", "s3transfer"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
