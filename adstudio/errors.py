class AdStudioError(Exception):
    """Raise for user-facing errors that should become JSON responses."""

    status = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str, status: int = None, code: str = None) -> None:
        super().__init__(message)
        self.message = message
        if status is not None:
            self.status = status
        if code is not None:
            self.code = code

    def to_payload(self) -> dict:
        return {"error": self.message, "code": self.code}


class ConfigError(AdStudioError):
    """A credential or setting the provider proxy needs is missing."""

    status = 500
    code = "CONFIG_MISSING"


class UpstreamError(AdStudioError):
    """The language-model or text-to-speech provider answered with a failure."""

    status = 502
    code = "UPSTREAM_ERROR"


class VoiceUnavailableError(AdStudioError):
    """The chosen voice is restricted for the caller's account tier."""

    status = 403
    code = "FREE_USER_RESTRICTED"


class ValidationError(AdStudioError):
    """A required field is missing; raised before any network call."""

    status = 400
    code = "VALIDATION_ERROR"


class NetworkError(AdStudioError):
    """The proxy could not be reached at all."""

    status = 503
    code = "NETWORK_ERROR"


ERRORS_BY_CODE = {
    cls.code: cls
    for cls in (ConfigError, UpstreamError, VoiceUnavailableError, ValidationError, NetworkError)
}
