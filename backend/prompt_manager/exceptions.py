"""Custom exception hierarchy for the prompt manager."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Tree structure errors
    ITEM_NOT_FOUND = "ITEM_NOT_FOUND"
    PARENT_NOT_FOUND = "PARENT_NOT_FOUND"
    NOT_A_FOLDER = "NOT_A_FOLDER"
    TARGET_NOT_FOLDER = "TARGET_NOT_FOLDER"
    CYCLIC_MOVE = "CYCLIC_MOVE"

    # Version errors
    VERSION_NOT_FOUND = "VERSION_NOT_FOUND"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Persistence and transport errors
    STORAGE_ERROR = "STORAGE_ERROR"
    REMOTE_BACKEND_ERROR = "REMOTE_BACKEND_ERROR"

    # Rate limiting
    RATE_LIMITED = "RATE_LIMITED"


class PromptManagerException(Exception):
    """
    Base exception for all prompt manager errors.

    Provides structured error responses with:
    - Human-readable message
    - Machine-readable error code
    - HTTP status code
    - Optional additional details
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize exception.

        Args:
            message: Human-readable error message
            error_code: Machine-readable error code
            status_code: HTTP status code to return
            details: Optional additional context/details
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for JSON response.

        Returns:
            Dictionary with error, message, and details fields
        """
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class ItemNotFoundError(PromptManagerException):
    """Item id does not resolve anywhere in the forest."""

    def __init__(self, item_id: str):
        super().__init__(
            f"Item not found: {item_id}",
            ErrorCode.ITEM_NOT_FOUND,
            status_code=404,
            details={"item_id": item_id}
        )


class ParentNotFoundError(PromptManagerException):
    """Parent id given for an insertion does not resolve."""

    def __init__(self, parent_id: str):
        super().__init__(
            f"Parent not found: {parent_id}",
            ErrorCode.PARENT_NOT_FOUND,
            status_code=404,
            details={"parent_id": parent_id}
        )


class NotAFolderError(PromptManagerException):
    """Parent id given for an insertion resolves to a leaf item."""

    def __init__(self, parent_id: str):
        super().__init__(
            f"Parent is not a folder: {parent_id}",
            ErrorCode.NOT_A_FOLDER,
            status_code=400,
            details={"parent_id": parent_id}
        )


class TargetNotFolderError(PromptManagerException):
    """Move target is missing or is not a folder."""

    def __init__(self, target_id: str):
        super().__init__(
            f"Target is not a folder: {target_id}",
            ErrorCode.TARGET_NOT_FOLDER,
            status_code=400,
            details={"target_id": target_id}
        )


class CyclicMoveError(PromptManagerException):
    """Moving an item into itself or one of its descendants."""

    def __init__(self, item_id: str, target_id: str):
        super().__init__(
            f"Cannot move {item_id} into its own subtree ({target_id})",
            ErrorCode.CYCLIC_MOVE,
            status_code=409,
            details={"item_id": item_id, "target_id": target_id}
        )


class VersionNotFoundError(PromptManagerException):
    """Version id is not recorded on the item."""

    def __init__(self, item_id: str, version_id: str):
        super().__init__(
            f"Version not found: {version_id}",
            ErrorCode.VERSION_NOT_FOUND,
            status_code=404,
            details={"item_id": item_id, "version_id": version_id}
        )


class ValidationError(PromptManagerException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class StorageError(PromptManagerException):
    """Reading or writing the persisted forest failed."""

    def __init__(self, message: str, original_error: Optional[Exception] = None):
        details = {}
        if original_error:
            details["original_error"] = str(original_error)

        super().__init__(
            message,
            ErrorCode.STORAGE_ERROR,
            status_code=500,
            details=details
        )


class RemoteBackendError(PromptManagerException):
    """The remote item service could not be reached or answered unexpectedly."""

    def __init__(self, message: str, status_code: int = 0):
        super().__init__(
            message,
            ErrorCode.REMOTE_BACKEND_ERROR,
            status_code=502,
            details={"upstream_status": status_code} if status_code else {}
        )


# Error code -> exception factory, used by the remote backend to re-raise
# structured errors received over HTTP.
ERROR_FACTORIES = {
    ErrorCode.ITEM_NOT_FOUND: lambda d, m: ItemNotFoundError(d.get("item_id", "")),
    ErrorCode.PARENT_NOT_FOUND: lambda d, m: ParentNotFoundError(d.get("parent_id", "")),
    ErrorCode.NOT_A_FOLDER: lambda d, m: NotAFolderError(d.get("parent_id", "")),
    ErrorCode.TARGET_NOT_FOLDER: lambda d, m: TargetNotFolderError(d.get("target_id", "")),
    ErrorCode.CYCLIC_MOVE: lambda d, m: CyclicMoveError(d.get("item_id", ""), d.get("target_id", "")),
    ErrorCode.VERSION_NOT_FOUND: lambda d, m: VersionNotFoundError(d.get("item_id", ""), d.get("version_id", "")),
    ErrorCode.VALIDATION_ERROR: lambda d, m: ValidationError(m, field=d.get("field")),
    ErrorCode.STORAGE_ERROR: lambda d, m: StorageError(m),
}
