"""
Core layer - Raw types and HTTP client.

This layer provides:
- Typed dataclasses for the Bankrs OS request and response bodies
- Low-level HTTP client with session headers, retries and error handling
- Structured logging configuration
"""

from bos_cli.core.client import (
    APIClient,
    APIError,
    CLIError,
    ErrorItem,
    RetryPolicy,
    SessionError,
    ValidationError,
)
from bos_cli.core.types import (
    Access,
    Account,
    ChallengeAnswer,
    Job,
    JobStage,
    JobStatus,
    PaginatedResponse,
    Transaction,
    Transfer,
)

__all__ = [
    "APIClient",
    "APIError",
    "Access",
    "Account",
    "CLIError",
    "ChallengeAnswer",
    "ErrorItem",
    "Job",
    "JobStage",
    "JobStatus",
    "PaginatedResponse",
    "RetryPolicy",
    "SessionError",
    "Transaction",
    "Transfer",
    "ValidationError",
]
