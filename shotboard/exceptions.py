"""
shotboard.exceptions - Custom exception classes.

All Shotboard-specific exceptions inherit from ShotboardError.
"""


class ShotboardError(Exception):
    """Base exception for all Shotboard errors."""

    pass


class ConfigError(ShotboardError):
    """Configuration loading or validation error."""

    pass


class SegmentationError(ShotboardError):
    """Script could not be split into shots."""

    pass


class SceneNotFoundError(ShotboardError):
    """No scene with the given identifier in the current scene set."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"Unknown shot: {identifier}")


class BatchInProgressError(ShotboardError):
    """A batch for the current scene set is already running."""

    pass


class CredentialRequiredError(ShotboardError):
    """No usable API credential is available."""

    pass


class GenerationError(ShotboardError):
    """Image generation or edit request failed."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CredentialError(GenerationError):
    """The service rejected the API credential."""

    pass


class InvalidCredentialError(CredentialError):
    """API key is malformed or not accepted."""

    pass


class CredentialRevokedError(CredentialError):
    """API key was not found or has been revoked."""

    pass


class RateLimitedError(GenerationError):
    """Service refused the request because of rate limits."""

    pass


class ServiceError(GenerationError):
    """Generic service-side failure."""

    pass


class NoImageProducedError(GenerationError):
    """Service answered but returned no image."""

    pass
