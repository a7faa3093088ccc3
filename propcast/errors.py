"""Exception taxonomy shared by the data sources, the engine and the API."""


class ValidationError(ValueError):
    """Missing or malformed postcode supplied by the caller."""


class UpstreamError(Exception):
    """An external data source was unreachable or returned an unusable payload."""

    def __init__(self, source: str, message: str):
        super().__init__(f"{source}: {message}")
        self.source = source


class ComputationError(RuntimeError):
    """Both the real-time and the fallback forecast failed."""
