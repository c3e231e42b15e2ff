from .client import (
    AuthType,
    Client,
    RequestContext,
    RequestModifier,
    check_response,
    with_header,
    with_headers,
    with_sudo,
    with_token,
    with_upload_file,
)
from .generic_packages import GenericPackagesService
from .paths import package_file_path

__all__ = [
    "AuthType",
    "Client",
    "RequestContext",
    "RequestModifier",
    "check_response",
    "with_header",
    "with_headers",
    "with_sudo",
    "with_token",
    "with_upload_file",
    "GenericPackagesService",
    "package_file_path",
]
