from typing import Union

from pydantic import BaseModel, ConfigDict

from ..utils.escape import path_escape
from .errors import InvalidArgumentError


class NumericID(BaseModel):
    """a project referenced by its numeric id."""
    model_config = ConfigDict(frozen=True)

    value: int

    def resolve(self) -> str:
        return str(self.value)


class PathID(BaseModel):
    """a project referenced by its namespaced path, e.g. group/sub/project."""
    model_config = ConfigDict(frozen=True)

    value: str

    def resolve(self) -> str:
        return path_escape(self.value)


ProjectID = Union[NumericID, PathID]


def parse_project_id(pid) -> ProjectID:
    """
    turn a user supplied project identifier into a ProjectID.

    args:
        pid: an int id, a namespaced path string, or an existing ProjectID

    returns:
        NumericID or PathID

    raises:
        InvalidArgumentError: if pid can't identify a project
    """
    if isinstance(pid, (NumericID, PathID)):
        return pid

    # bool is an int subclass but never a project id
    if isinstance(pid, bool):
        raise InvalidArgumentError(f"invalid project id {pid!r}: expected int or str")

    if isinstance(pid, int):
        if pid <= 0:
            raise InvalidArgumentError(f"invalid project id {pid}: must be positive")
        return NumericID(value=pid)

    if isinstance(pid, str):
        if not pid.strip():
            raise InvalidArgumentError("invalid project id: empty path")
        return PathID(value=pid)

    raise InvalidArgumentError(
        f"invalid project id {pid!r} of type {type(pid).__name__}: expected int or str"
    )
