import logging
from enum import Enum
from typing import IO, Any, Callable, Dict, Iterable, Mapping, Optional

import httpx

from .. import __version__
from ..domain.errors import APIError, RequestBuildError

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://gitlab.com/api/v4/"
API_VERSION_PATH = "api/v4/"
USER_AGENT = f"glpkg/{__version__}"


class AuthType(str, Enum):
    """how the token is presented to the server."""
    PRIVATE_TOKEN = "private_token"
    JOB_TOKEN = "job_token"
    OAUTH = "oauth"


def auth_headers(auth_type: AuthType, token: Optional[str]) -> Dict[str, str]:
    if not token:
        return {}
    if auth_type == AuthType.JOB_TOKEN:
        return {"JOB-TOKEN": token}
    if auth_type == AuthType.OAUTH:
        return {"Authorization": f"Bearer {token}"}
    return {"PRIVATE-TOKEN": token}


def normalize_base_url(url: str) -> str:
    """make sure the url ends with exactly one slash and points at the v4 api."""
    url = url.rstrip("/") + "/"
    if not url.endswith(API_VERSION_PATH):
        url += API_VERSION_PATH
    return url


class RequestContext:
    """mutable state of a request while modifiers are applied to it."""

    def __init__(self, method: str, path: str):
        self.method = method
        self.path = path
        self.params: Dict[str, str] = {}
        self.headers: Dict[str, str] = {}
        self.json: Any = None
        self.content: Optional[IO[bytes]] = None


RequestModifier = Callable[[RequestContext], None]


def with_header(name: str, value: str) -> RequestModifier:
    def apply(ctx: RequestContext) -> None:
        ctx.headers[name] = value
    return apply


def with_headers(headers: Mapping[str, str]) -> RequestModifier:
    def apply(ctx: RequestContext) -> None:
        ctx.headers.update(headers)
    return apply


def with_sudo(uid) -> RequestModifier:
    """run the request as another user (admin tokens only)."""
    return with_header("Sudo", str(uid))


def with_token(auth_type: AuthType, token: str) -> RequestModifier:
    """authenticate a single request with a different token."""
    def apply(ctx: RequestContext) -> None:
        for name in ("PRIVATE-TOKEN", "JOB-TOKEN", "Authorization"):
            ctx.headers.pop(name, None)
        ctx.headers.update(auth_headers(auth_type, token))
    return apply


def with_upload_file(content: IO[bytes]) -> RequestModifier:
    """send content as the raw request body instead of encoding options as json."""
    def apply(ctx: RequestContext) -> None:
        ctx.content = content
    return apply


class Client:
    """thin synchronous wrapper around httpx for the GitLab REST api."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = DEFAULT_BASE_URL,
        auth_type: AuthType = AuthType.PRIVATE_TOKEN,
        timeout: float = 30.0,
        http_client: Optional[httpx.Client] = None,
        user_agent: str = USER_AGENT,
    ):
        """
        initialize the client.

        args:
            token: access token, or None for anonymous requests
            base_url: api root, e.g. https://gitlab.example.com/api/v4/
            auth_type: header used to send the token
            timeout: request timeout in seconds, ignored when http_client is given
            http_client: preconfigured httpx client (tests inject a MockTransport here)
            user_agent: value of the User-Agent header
        """
        self.token = token
        self.auth_type = AuthType(auth_type)
        self.user_agent = user_agent
        self._base_url = normalize_base_url(base_url)
        self._owns_http_client = http_client is None
        self.http = http_client or httpx.Client(timeout=timeout, follow_redirects=True)
        self.http.event_hooks["request"].append(self._strip_foreign_auth)

    @property
    def base_url(self) -> str:
        return self._base_url

    def _strip_foreign_auth(self, request: httpx.Request) -> None:
        # downloads may redirect to object storage, which must not see the token
        if request.url.host != httpx.URL(self._base_url).host:
            for name in ("PRIVATE-TOKEN", "JOB-TOKEN", "Authorization", "Sudo"):
                request.headers.pop(name, None)

    def new_request(
        self,
        method: str,
        path: str,
        opt: Any = None,
        options: Iterable[RequestModifier] = (),
    ) -> httpx.Request:
        """
        build a request for path relative to the base url.

        options are encoded as query parameters for GET, HEAD and PUT and as a
        json body otherwise. modifiers run in order after the defaults are set,
        so a later modifier overrides an earlier one.

        raises:
            RequestBuildError: if httpx can't construct the request
        """
        method = method.upper()
        ctx = RequestContext(method, path.lstrip("/"))
        ctx.headers["Accept"] = "application/json"
        ctx.headers["User-Agent"] = self.user_agent
        ctx.headers.update(auth_headers(self.auth_type, self.token))

        if opt is not None:
            if method in ("GET", "HEAD", "PUT"):
                ctx.params.update(opt.query_params())
            else:
                ctx.json = opt.model_dump(mode="json", exclude_none=True)

        for modifier in options:
            modifier(ctx)

        kwargs: Dict[str, Any] = {"params": ctx.params or None}
        if ctx.content is not None:
            ctx.headers["Content-Type"] = "application/octet-stream"
            kwargs["content"] = ctx.content
        elif ctx.json is not None:
            kwargs["json"] = ctx.json

        try:
            return self.http.build_request(
                method, self._base_url + ctx.path, headers=ctx.headers, **kwargs
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestBuildError(f"failed to build {method} request for {ctx.path}: {e}") from e

    def do(self, request: httpx.Request, out: Optional[IO[bytes]] = None) -> httpx.Response:
        """
        send request and check the response status.

        args:
            request: request built by new_request
            out: optional writable binary stream that receives the body

        returns:
            the response; its body is already read unless it went to out

        raises:
            APIError: on a non-2xx status
            httpx.TransportError: on network failure, unchanged
        """
        logger.debug(f"{request.method} {request.url}")
        response = self.http.send(request, stream=True, follow_redirects=True)
        try:
            logger.debug(f"{request.method} {request.url} -> {response.status_code}")
            if not response.is_success:
                response.read()
                check_response(response)
            if out is None:
                response.read()
            else:
                for chunk in response.iter_bytes():
                    out.write(chunk)
        finally:
            response.close()
        return response

    def close(self):
        if self._owns_http_client:
            self.http.close()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *exc_info):
        self.close()


def check_response(response: httpx.Response) -> None:
    """raise APIError unless the response has a 2xx status."""
    if response.is_success:
        return

    message = None
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        detail = data.get("message") or data.get("error")
        if detail is not None:
            message = str(detail)
    elif response.content:
        message = response.text.strip()[:200] or None

    raise APIError(response, message)
