"""Failure taxonomy for domain resolution.

The resolver only classifies failures. Mapping them onto responses is left to
the boundary layer, which checks for ``UserCorrectableException`` to decide
between a client error and a generic server failure.
"""


class ResolutionException(Exception):
    """
    Base class for every failure raised while resolving a domain.

    Messages carry a stable error code prefix so they can be grepped in logs
    and error reports regardless of the domain that triggered them.
    """


class UserCorrectableException(ResolutionException):
    """The caller supplied bad input and can fix it by asking again."""


class MissingParameter(UserCorrectableException):
    """A required input was absent or empty."""

    def __init__(self, parameter: str) -> None:
        super().__init__(f"missing mandatory parameter: {parameter}")
        self.parameter = parameter
        self.code = "error-resolve-1000"


class InvalidInput(UserCorrectableException):
    """The domain string could not be parsed as a URI."""

    def __init__(self, value: str) -> None:
        super().__init__(f"not an url: {value}")
        self.value = value
        self.code = "error-resolve-1001"


class FetchError(ResolutionException):
    """
    A discovery hop failed.

    Raised for network failures, unexpected status codes and response bodies
    that do not decode into the expected document. The remote domain is at
    fault, so nothing about it is user-correctable.
    """

    def __init__(self, url: str, reason: str) -> None:
        super().__init__(f"error-resolve-1002 failed to fetch {url}: {reason}")
        self.url = url
        self.reason = reason
        self.code = "error-resolve-1002"
