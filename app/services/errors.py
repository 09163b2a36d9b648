class ProfileStoreError(Exception):
    """Base class for failures of the profile store operations."""


class NoCreditsError(ProfileStoreError):
    def __init__(self, message: str = "You have no analysis credits remaining."):
        super().__init__(message)


class PermissionDeniedError(ProfileStoreError):
    def __init__(self, path: str, operation: str, request_data: dict | None = None):
        self.path = path
        self.operation = operation
        self.request_data = request_data
        super().__init__(f"Missing or insufficient permissions: {operation} on {path}")


class DocumentNotFoundError(ProfileStoreError):
    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Document does not exist: {path}")


class CreditAlreadyClaimedError(ProfileStoreError):
    def __init__(self, message: str = "The social credit has already been claimed."):
        super().__init__(message)
