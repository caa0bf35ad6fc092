"""
Custom exceptions for the Paper Upload API.
Provides specific error types for different failure scenarios.
"""


class UploadPipelineException(Exception):
    """Base exception for all application errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)


class ValidationException(UploadPipelineException):
    """Raised when input validation fails."""
    pass


class UnauthorizedException(UploadPipelineException):
    """Raised when the request carries no valid identity."""
    pass


class ForbiddenException(UploadPipelineException):
    """Raised when the actor is known but lacks the required privilege."""
    pass


class UploadNotFoundException(UploadPipelineException):
    """Raised when an upload record is missing or not visible to the actor."""
    pass


class InvalidTransitionException(UploadPipelineException):
    """Raised when a status change is not allowed by the transition table."""
    pass


class ConflictException(UploadPipelineException):
    """Raised when a conditional write loses against a concurrent change."""
    pass


class StorageException(UploadPipelineException):
    """Raised when an S3 operation fails."""
    pass


class DatabaseException(UploadPipelineException):
    """Raised when a DynamoDB operation fails."""
    pass


class ConfigurationException(UploadPipelineException):
    """Raised when a configuration value cannot be resolved."""
    pass
