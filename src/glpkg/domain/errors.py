from typing import Optional

import httpx


class GlpkgError(Exception):
    """base class for exceptions in glpkg."""
    pass


class InvalidArgumentError(GlpkgError, ValueError):
    """raised when an argument can't be used to build a request."""
    pass


class RequestBuildError(GlpkgError):
    """raised when a request can't be constructed from the given inputs."""
    pass


class ConfigError(GlpkgError):
    """raised when configuration can't be read, written or understood."""
    pass


class APIError(GlpkgError):
    """raised when the registry answers with a non-success status code."""
    def __init__(self, response: httpx.Response, message: Optional[str] = None):
        self.response = response
        self.status_code = response.status_code
        self.message = message
        request = response.request
        text = f"{request.method} {request.url}: {response.status_code}"
        if message:
            text += f" {message}"
        super().__init__(text)
