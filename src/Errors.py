class ChatServiceError(Exception):
    """Base class for failures raised by the chat services."""


class ValidationError(ChatServiceError):
    """Request is missing a field or carries an unusable value."""


class UpstreamError(ChatServiceError):
    """The answering service failed or returned something unusable."""


class StorageError(ChatServiceError):
    """A read or write against the chat collection failed."""


class NotFoundError(ChatServiceError):
    """No chat entry exists for the given id."""
