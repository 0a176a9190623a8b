"""Domain Ports - Abstract Contracts for Clinical Data Access.

This module defines the Port interface that storage adapters must implement,
together with the Result type used to communicate success or failure and the
exception hierarchy shared by every layer.

Security Impact:
    - Ports require parameterized queries; caller values never reach SQL text
    - Failures are reported as Result objects so handlers decide the HTTP status
    - The child identifier (nisn) is never included in error details

Architecture:
    - Pure abstract interfaces with zero infrastructure dependencies
    - Adapters (DuckDB, PostgreSQL) implement these ports
    - Route handlers depend on the port, never on a concrete driver
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar, Union

# Type variable for Result generic
T = TypeVar('T')

Row = dict[str, Any]


# ============================================================================
# Result Type for Success/Failure Communication
# ============================================================================

@dataclass(frozen=True)
class Result(Generic[T]):
    """Result type for communicating success or failure without exceptions.

    Attributes:
        success: True if the operation succeeded, False otherwise
        value: The successful result value (only present if success=True)
        error: Error information (only present if success=False)
        error_type: Type of error (StorageError, ValidationError, etc.)
        error_details: Additional error context (operation, table, etc.)

    Example:
        ```python
        result = storage.list_children()
        if result.is_success():
            render(result.value)
        else:
            logger.error(result.error)
        ```
    """

    success: bool
    value: Optional[T] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    error_details: Optional[dict] = None

    @classmethod
    def success_result(cls, value: T) -> 'Result[T]':
        """Create a successful result.

        Parameters:
            value: The successful result value

        Returns:
            Result: Success result with the value
        """
        return cls(
            success=True,
            value=value,
            error=None,
            error_type=None,
            error_details=None
        )

    @classmethod
    def failure_result(
        cls,
        error: Union[str, Exception],
        error_type: Optional[str] = None,
        error_details: Optional[dict] = None
    ) -> 'Result[T]':
        """Create a failure result.

        Parameters:
            error: Error message or exception
            error_type: Type of error (e.g., "StorageError")
            error_details: Additional context (operation, table, etc.)

        Returns:
            Result: Failure result with error information
        """
        error_message = str(error) if isinstance(error, Exception) else error
        error_type_name = error_type or (type(error).__name__ if isinstance(error, Exception) else "UnknownError")

        return cls(
            success=False,
            value=None,
            error=error_message,
            error_type=error_type_name,
            error_details=error_details or {}
        )

    def is_success(self) -> bool:
        """Check if result is successful."""
        return self.success

    def is_failure(self) -> bool:
        """Check if result is a failure."""
        return not self.success


# ============================================================================
# Custom Exception Hierarchy
# ============================================================================

class ClinicalDataError(Exception):
    """Base exception for all application errors."""
    pass


class StorageError(ClinicalDataError):
    """Raised when a database operation fails.

    Attributes:
        operation: The storage operation that failed (query, connect, etc.)
        details: Additional error details (never contains credentials)
    """

    def __init__(self, message: str, operation: Optional[str] = None, details: Optional[dict] = None):
        super().__init__(message)
        self.operation = operation
        self.details = details or {}


class ValidationError(ClinicalDataError):
    """Raised when request input fails validation.

    Attributes:
        errors: Field-level validation messages keyed by field name
    """

    def __init__(self, message: str, errors: Optional[dict] = None):
        super().__init__(message)
        self.errors = errors or {}


class AnonymizationError(ClinicalDataError):
    """Raised when a record cannot be anonymized (missing key, bad config)."""
    pass


# ============================================================================
# Storage Port
# ============================================================================

class ClinicalStoragePort(ABC):
    """Abstract contract for the children / clinical trial store.

    Every method issues exactly one parameterized statement and returns a
    Result. Implementations must not retry and must not return partial rows
    on failure.

    Security Impact:
        - All statements are parameterized (no interpolation of caller input)
        - Driver errors are logged by the adapter and surfaced as StorageError
    """

    @abstractmethod
    def initialize_schema(self) -> Result[None]:
        """Create the anak, medicine and clinical_trials tables if absent."""
        pass

    @abstractmethod
    def ping(self) -> Result[bool]:
        """Run a trivial query to check connectivity."""
        pass

    @abstractmethod
    def list_children(self) -> Result[list[Row]]:
        """Return every child ordered by enrollment year, name, birth date.

        Returns:
            Result[list[Row]]: Rows from the anak table
        """
        pass

    @abstractmethod
    def get_child(self, nisn: str) -> Result[Optional[Row]]:
        """Return the child with the given nisn.

        Parameters:
            nisn: National student identifier

        Returns:
            Result[Optional[Row]]: The row, or a success with None when the
            child does not exist. A failure means the query itself failed.
        """
        pass

    @abstractmethod
    def list_trials_for_child(self, nisn: str) -> Result[list[Row]]:
        """Return the child's trials left-joined with their medicine.

        Each row carries ``medicine_kode`` and ``medicine_name`` taken from the
        medicine table; both are None when no medicine matches.
        """
        pass

    @abstractmethod
    def update_trial_checkpoint(self, trial_id: int, fields: dict[str, Any]) -> Result[None]:
        """Overwrite the twelve "24" checkpoint fields of one trial.

        Parameters:
            trial_id: Surrogate id of the clinical trial row
            fields: Mapping holding every checkpoint field name

        Returns:
            Result[None]: Success or failure. Affected row count is not checked.
        """
        pass

    @abstractmethod
    def list_all_trials(self) -> Result[list[Row]]:
        """Return every clinical trial row, unfiltered, for export."""
        pass

    @abstractmethod
    def close(self) -> None:
        """Release connections held by the adapter."""
        pass
