"""
generic packages api.

GitLab docs: https://docs.gitlab.com/ee/user/packages/generic_packages/index.html
"""
import io
import logging
from contextlib import closing
from typing import IO, Iterable, Optional

from ..domain.ids import parse_project_id
from ..domain.models import (
    DownloadResult,
    PackageCoordinate,
    PublishOptions,
    PublishResult,
)
from .client import Client, RequestModifier, with_upload_file
from .paths import package_file_path

logger = logging.getLogger(__name__)


class GenericPackagesService:
    """handles the generic package endpoints of a project."""

    def __init__(self, client: Client):
        self.client = client

    def _coordinate(self, pid, package_name: str, package_version: str, file_name: str) -> PackageCoordinate:
        return PackageCoordinate(
            project=parse_project_id(pid),
            package_name=package_name,
            package_version=package_version,
            file_name=file_name,
        )

    def download_package_file(
        self,
        pid,
        package_name: str,
        package_version: str,
        file_name: str,
        options: Iterable[RequestModifier] = (),
    ) -> DownloadResult:
        """
        download a package file into memory.

        args:
            pid: project id (int) or namespaced path (str)
            package_name: name of the package
            package_version: version of the package
            file_name: file inside the package
            options: request modifiers applied in order

        returns:
            DownloadResult with the whole file content and the response

        raises:
            InvalidArgumentError: if pid isn't a usable project identifier
            RequestBuildError: if the request can't be constructed
            APIError: if the registry answers with an error status
        """
        coordinate = self._coordinate(pid, package_name, package_version, file_name)
        path = package_file_path(coordinate)

        request = self.client.new_request("GET", path, None, list(options))

        buffer = io.BytesIO()
        response = self.client.do(request, buffer)
        content = buffer.getvalue()
        logger.debug(f"downloaded {len(content)} bytes from {path}")
        return DownloadResult(content=content, response=response)

    def publish_package_file(
        self,
        pid,
        package_name: str,
        package_version: str,
        file_name: str,
        content: IO[bytes],
        opt: Optional[PublishOptions] = None,
        options: Iterable[RequestModifier] = (),
    ) -> PublishResult:
        """
        upload a file to the project's package registry.

        content is read to the end and closed before this returns or raises,
        whatever the outcome.

        args:
            pid: project id (int) or namespaced path (str)
            package_name: name of the package
            package_version: version of the package
            file_name: name the file is stored under
            content: readable binary stream with the file data
            opt: publish options, e.g. PublishOptions(status=PackageStatus.HIDDEN)
            options: request modifiers applied in order, before the upload body

        returns:
            PublishResult with the download url, the response body and the response
        """
        with closing(content):
            coordinate = self._coordinate(pid, package_name, package_version, file_name)
            path = package_file_path(coordinate)

            # the body must be the raw file, not the json encoding of opt
            modifiers = list(options)
            modifiers.append(with_upload_file(content))

            request = self.client.new_request("PUT", path, opt, modifiers)

            buffer = io.BytesIO()
            response = self.client.do(request, buffer)

        download_url = self.client.base_url + path
        logger.debug(f"published {file_name} to {download_url}")
        return PublishResult(download_url=download_url, body=buffer.getvalue(), response=response)
