"""domain types shared by the registry client and the cli."""
from .errors import GlpkgError, InvalidArgumentError, RequestBuildError, APIError, ConfigError
from .ids import NumericID, PathID, ProjectID, parse_project_id
from .models import PackageCoordinate, PackageStatus, PublishOptions, DownloadResult, PublishResult

__all__ = [
    "GlpkgError",
    "InvalidArgumentError",
    "RequestBuildError",
    "APIError",
    "ConfigError",
    "NumericID",
    "PathID",
    "ProjectID",
    "parse_project_id",
    "PackageCoordinate",
    "PackageStatus",
    "PublishOptions",
    "DownloadResult",
    "PublishResult",
]
