from enum import Enum
from typing import Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from .ids import ProjectID


class PackageStatus(str, Enum):
    """visibility of a generic package in the registry."""
    DEFAULT = "default"
    HIDDEN = "hidden"


class PackageCoordinate(BaseModel):
    """identifies a single file stored in a project's generic package registry."""
    model_config = ConfigDict(frozen=True)

    project: ProjectID
    package_name: str
    package_version: str
    file_name: str


class PublishOptions(BaseModel):
    """options accepted when publishing a package file."""
    status: Optional[PackageStatus] = None

    def query_params(self) -> Dict[str, str]:
        # unset fields are left out so the server applies its own default
        params = {}
        if self.status is not None:
            params["status"] = self.status.value
        return params


class DownloadResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    content: bytes
    response: httpx.Response


class PublishResult(BaseModel):
    model_config = ConfigDict(arbitrary_types_allowed=True)

    download_url: str
    body: bytes
    response: httpx.Response
