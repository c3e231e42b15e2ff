from ..domain.models import PackageCoordinate
from ..utils.escape import path_escape


def package_file_path(coordinate: PackageCoordinate) -> str:
    """render the resource path of a generic package file, relative to the api base url."""
    return "projects/{}/packages/generic/{}/{}/{}".format(
        coordinate.project.resolve(),
        path_escape(coordinate.package_name),
        path_escape(coordinate.package_version),
        path_escape(coordinate.file_name),
    )
