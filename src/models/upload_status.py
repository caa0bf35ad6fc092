"""
Upload status values.
A document moves pending -> processing -> completed | failed; failed may be retried.
"""
from enum import Enum


class UploadStatus(str, Enum):
    """Processing state of an uploaded document."""
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
