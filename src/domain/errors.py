"""Domain errors for annotation extraction and Capacities sync operations."""


class CapacitiesError(Exception):
    """Base class for errors raised while talking to the Capacities API."""


class CapacitiesNotConfiguredError(CapacitiesError):
    """
    Raised when the Capacities API token or space ID is missing.

    Attributes:
        missing: Name of the missing setting ('apiToken' or 'spaceId')
    """

    def __init__(self, missing: str) -> None:
        self.missing = missing
        label = "API token" if missing == "apiToken" else "Space ID"
        super().__init__(f"Capacities {label} not configured")


class CapacitiesAPIError(CapacitiesError):
    """
    Raised when the Capacities API answers with a non-success status or cannot be reached.

    Attributes:
        status: HTTP status code (0 when the request never got a response)
        message: Error message embedding status text and raw response body
    """

    def __init__(self, status: int, message: str) -> None:
        self.status = status
        self.message = message
        super().__init__(message)


class CapacitiesRateLimitError(CapacitiesAPIError):
    """
    Raised when the Capacities API rejects a request with HTTP 429.

    Attributes:
        retry_after: Seconds to wait before retrying (from Retry-After header, optional)
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(429, message)


class PreferenceWriteError(Exception):
    """
    Raised when the preference store cannot be persisted.

    Attributes:
        path: Preference file path
    """

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to save preferences to {path}: {reason}")


class ZoteroDatabaseLockedError(Exception):
    """
    Raised when Zotero database is locked and cannot be accessed.

    Attributes:
        db_path: Path to Zotero database file
        hint: Actionable hint for resolution
    """

    def __init__(self, db_path: str, hint: str | None = None) -> None:
        self.db_path = db_path
        self.hint = hint
        msg = f"Zotero database is locked: {db_path}"
        if hint:
            msg += f". {hint}"
        super().__init__(msg)


class ZoteroDatabaseNotFoundError(Exception):
    """
    Raised when Zotero database file does not exist.

    Attributes:
        db_path: Path to Zotero database file that was not found
        hint: Actionable hint for resolution
    """

    def __init__(self, db_path: str, hint: str | None = None) -> None:
        self.db_path = db_path
        self.hint = hint
        msg = f"Zotero database not found: {db_path}"
        if hint:
            msg += f". {hint}"
        super().__init__(msg)


class ZoteroProfileNotFoundError(Exception):
    """
    Raised when Zotero profile directory cannot be found.

    Attributes:
        profile_dir: Expected profile directory path
        hint: Actionable hint for resolution
    """

    def __init__(self, profile_dir: str, hint: str | None = None) -> None:
        self.profile_dir = profile_dir
        self.hint = hint
        msg = f"Zotero profile not found: {profile_dir}"
        if hint:
            msg += f". {hint}"
        super().__init__(msg)


class ZoteroLibraryReadError(Exception):
    """
    Raised when the local Zotero database cannot be queried.

    Attributes:
        operation: What was being read (e.g. 'annotations')
        key: Item key involved (optional)
    """

    def __init__(self, operation: str, reason: str, key: str | None = None) -> None:
        self.operation = operation
        self.reason = reason
        self.key = key
        target = f" for {key}" if key else ""
        super().__init__(f"Failed to read {operation}{target} from Zotero database: {reason}")


class ZoteroConnectionError(Exception):
    """
    Raised when the Zotero Web API client cannot be initialized.

    Attributes:
        message: Error message
        reason: Detailed reason (optional)
    """

    def __init__(self, message: str, reason: str | None = None) -> None:
        self.message = message
        self.reason = reason
        super().__init__(f"{message}: {reason}" if reason else message)


class ZoteroAPIError(Exception):
    """
    Raised when a Zotero Web API request fails after retries.

    Attributes:
        message: Error message
        details: Extra context (attempt counts, last error)
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ZoteroRateLimitError(ZoteroAPIError):
    """
    Raised when the Zotero Web API rate limit is hit.

    Attributes:
        retry_after: Seconds to wait before retrying
    """

    def __init__(self, message: str, retry_after: int | None = None) -> None:
        self.retry_after = retry_after
        super().__init__(message, details={"retry_after": retry_after})
