"""Custom exceptions for AudioSync."""

from typing import Optional


class AudioSyncError(Exception):
    """Base exception for AudioSync."""
    pass

class ConfigError(AudioSyncError):
    """Invalid configuration value."""
    pass

class ValidationError(AudioSyncError):
    """Invalid input parameters."""
    pass

class CacheError(AudioSyncError):
    """Error reading or writing the local lyrics store."""
    pass

class ProviderError(AudioSyncError):
    """A lyrics provider could not answer a request."""
    pass

class NetworkError(ProviderError):
    """Provider unreachable, timed out, or answered with a non-2xx status."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code

class DecodeError(ProviderError):
    """Provider answered with a payload we could not decode."""
    pass

class OriginalNameError(AudioSyncError):
    """Original-language name lookup failed."""
    pass

class ManualSelectionTimeout(AudioSyncError):
    """Nobody picked a candidate before the selection window closed."""
    pass
