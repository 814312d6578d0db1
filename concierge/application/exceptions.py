class ServiceError(RuntimeError):
    """Base for backend failures that callers absorb with a local fallback."""
    pass


class NetworkFailure(ServiceError):
    """Raised when a backend call fails (connection errors, HTTP errors, provider unavailable)."""
    pass


class InvalidResponseShape(ServiceError):
    """Raised when a backend answers with bad JSON, a wrong shape or empty content."""
    pass


class ServiceTimeout(ServiceError):
    """Raised when a backend call exceeds its time budget."""
    pass


class SpeechError(RuntimeError):
    """Base for speech capability failures."""
    pass


class SpeechUnsupported(SpeechError):
    """Raised when the platform has no speech recognition or synthesis."""
    pass


class SpeechPermissionDenied(SpeechError):
    """Raised when microphone access is refused."""
    pass


class RecognitionError(SpeechError):
    """Raised when a recognition session ends in an error (no speech, aborted, network)."""
    pass
