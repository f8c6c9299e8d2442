class GreenPulseError(Exception): ...


class SeriesError(GreenPulseError): ...


class DataUnavailable(GreenPulseError): ...


class NetworkFailure(GreenPulseError): ...


class HttpStatusError(NetworkFailure):
    """The server answered, but with a non-2xx status."""

    def __init__(self, message: str, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class InvalidResponse(GreenPulseError): ...


def require(condition: bool, message: str, exc: type[GreenPulseError] = GreenPulseError):
    """Raise the given exception if condition is False."""
    if not condition:
        raise exc(message)
