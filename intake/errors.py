# intake/errors.py
from typing import List, Optional


class IntakeError(Exception):
    """Base class for errors that map onto a client-facing HTTP status."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnknownSubmissionKindError(IntakeError):
    status_code = 400

    def __init__(self, kind):
        super().__init__(f"unknown submission kind: {kind}")
        self.kind = kind


class ValidationError(IntakeError):
    status_code = 400


class NotFoundError(IntakeError):
    status_code = 404


class AssetWriteError(IntakeError):
    status_code = 500


class PersistenceError(IntakeError):
    """Raised when the relational store rejects a write or read.

    orphaned_assets lists relative paths of files that were stored for the
    failed submission and are now referenced by no row.
    """
    status_code = 500

    def __init__(self, message: str, table: Optional[str] = None, orphaned_assets: Optional[List[str]] = None):
        super().__init__(message)
        self.table = table
        self.orphaned_assets = list(orphaned_assets or [])


class GatewayError(IntakeError):
    status_code = 502


class SchemaConfigError(Exception):
    """A registry entry failed its startup self-check."""
