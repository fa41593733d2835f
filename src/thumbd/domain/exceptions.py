"""Domain exceptions for the thumbnail worker."""


class DomainException(Exception):
    """Base exception for all domain errors."""
    pass


class TransportError(DomainException):
    """Raised when the queue cannot be reached during receive."""
    pass


class DecodeError(DomainException):
    """Raised when a message body is neither JSON nor base64-wrapped JSON."""
    pass


class DownloadError(DomainException):
    """Raised when the source image cannot be fetched."""
    pass


class RenderError(DomainException):
    """Raised when a rendition cannot be produced."""
    pass


class UploadError(DomainException):
    """Raised when a rendition cannot be written to storage."""
    pass


class AckError(DomainException):
    """Raised when a processed message cannot be deleted from the queue."""
    pass


class ConfigurationError(DomainException):
    """Raised when configuration is invalid."""
    pass
