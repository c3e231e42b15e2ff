"""test suite for GenericPackagesService."""
import io
import pytest
import httpx
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from glpkg.domain.errors import APIError, InvalidArgumentError
from glpkg.domain.models import PackageStatus, PublishOptions
from glpkg.registry.client import Client, with_header
from glpkg.registry.generic_packages import GenericPackagesService

from conftest import BASE_URL

PATH = "projects/42/packages/generic/pkg/1.0.0/a.txt"


class TrackingStream(io.BytesIO):
    """BytesIO that remembers whether close() was called."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.close_calls = 0

    def close(self):
        self.close_calls += 1
        super().close()


class TestDownloadPackageFile:
    @pytest.fixture
    def service(self, client):
        return GenericPackagesService(client)

    def test_download_success(self, service, spy):
        spy.content = b"hello"
        result = service.download_package_file(42, "pkg", "1.0.0", "a.txt")

        assert result.content == b"hello"
        assert result.response.status_code == 200
        assert spy.call_count == 1
        request = spy.requests[0]
        assert request.method == "GET"
        assert str(request.url) == BASE_URL + PATH
        assert spy.bodies[0] == b""

    def test_download_by_namespaced_path(self, service, spy):
        service.download_package_file("group/sub project", "my pkg", "1.0.0", "dir/a.txt")
        assert spy.requests[0].url.raw_path == (
            b"/api/v4/projects/group%2Fsub%20project/packages/generic/my%20pkg/1.0.0/dir%2Fa.txt"
        )

    def test_download_modifiers_forwarded(self, service, spy):
        service.download_package_file(42, "pkg", "1.0.0", "a.txt", options=[with_header("X-Request-Id", "abc")])
        assert spy.requests[0].headers["X-Request-Id"] == "abc"

    @pytest.mark.parametrize("bad", ["", 0, None, 1.5, object()])
    def test_download_invalid_project(self, service, spy, bad):
        with pytest.raises(InvalidArgumentError):
            service.download_package_file(bad, "pkg", "1.0.0", "a.txt")
        assert spy.call_count == 0

    def test_download_not_found(self, service, spy):
        spy.status_code = 404
        spy.content = b'{"message": "404 Not Found"}'
        spy.headers = {"X-Request-Id": "r-1"}

        with pytest.raises(APIError) as exc_info:
            service.download_package_file(42, "pkg", "1.0.0", "a.txt")

        err = exc_info.value
        assert err.status_code == 404
        assert err.response.headers["X-Request-Id"] == "r-1"
        assert spy.call_count == 1

    def test_download_network_error(self, service, spy):
        spy.error = httpx.ConnectTimeout("timed out")
        with pytest.raises(httpx.ConnectTimeout):
            service.download_package_file(42, "pkg", "1.0.0", "a.txt")


class TestPublishPackageFile:
    @pytest.fixture
    def service(self, client):
        return GenericPackagesService(client)

    @pytest.fixture
    def created(self, spy):
        spy.status_code = 201
        spy.content = b"{}"
        return spy

    def test_publish_success(self, service, created):
        result = service.publish_package_file(42, "pkg", "1.0.0", "a.txt", io.BytesIO(b"file data"))

        assert result.download_url == "https://gitlab.example.com/api/v4/projects/42/packages/generic/pkg/1.0.0/a.txt"
        assert result.body == b"{}"
        assert result.response.status_code == 201

        request = created.requests[0]
        assert request.method == "PUT"
        assert str(request.url) == BASE_URL + PATH
        assert request.headers["Content-Type"] == "application/octet-stream"
        assert created.bodies[0] == b"file data"

    def test_download_url_matches_request_path(self, service, created):
        result = service.publish_package_file(
            "group/proj", "my pkg", "2.0 rc", "ü.bin", io.BytesIO(b"x")
        )
        assert result.download_url == str(created.requests[0].url)

    def test_same_path_as_download(self, service, created):
        service.publish_package_file("a/b", "n m", "1", "f g", io.BytesIO(b""))
        service.download_package_file("a/b", "n m", "1", "f g")
        put, get = created.requests
        assert put.url.raw_path == get.url.raw_path

    def test_hidden_status_sent_once(self, service, created):
        opt = PublishOptions(status=PackageStatus.HIDDEN)
        service.publish_package_file(42, "pkg", "1.0.0", "a.txt", io.BytesIO(b"x"), opt)
        assert created.requests[0].url.params.get_list("status") == ["hidden"]

    def test_status_omitted_when_unset(self, service, created):
        service.publish_package_file(42, "pkg", "1.0.0", "a.txt", io.BytesIO(b"x"), PublishOptions())
        service.publish_package_file(42, "pkg", "1.0.0", "a.txt", io.BytesIO(b"x"))
        for request in created.requests:
            assert "status" not in request.url.params
            assert str(request.url) == BASE_URL + PATH

    def test_body_is_raw_not_json(self, service, created):
        data = bytes(range(256))
        opt = PublishOptions(status=PackageStatus.DEFAULT)
        service.publish_package_file(42, "pkg", "1.0.0", "a.bin", io.BytesIO(data), opt)
        assert created.bodies[0] == data

    def test_stream_closed_on_success(self, service, created):
        stream = TrackingStream(b"data")
        service.publish_package_file(42, "pkg", "1.0.0", "a.txt", stream)
        assert stream.close_calls == 1

    @pytest.mark.parametrize("bad", ["", -1, True, None])
    def test_publish_invalid_project(self, service, spy, bad):
        stream = TrackingStream(b"data")
        with pytest.raises(InvalidArgumentError):
            service.publish_package_file(bad, "pkg", "1.0.0", "a.txt", stream)
        assert spy.call_count == 0
        assert stream.close_calls == 1

    def test_publish_server_error(self, service, spy):
        spy.status_code = 400
        spy.content = b'{"message": "400 Bad request - Version is invalid"}'
        stream = TrackingStream(b"data")

        with pytest.raises(APIError) as exc_info:
            service.publish_package_file(42, "pkg", "bad version", "a.txt", stream)

        assert exc_info.value.status_code == 400
        assert "Version is invalid" in str(exc_info.value)
        assert stream.close_calls == 1

    def test_publish_network_error(self, service, spy):
        error = httpx.ConnectError("connection refused")
        spy.error = error
        stream = TrackingStream(b"data")

        with pytest.raises(httpx.ConnectError) as exc_info:
            service.publish_package_file(42, "pkg", "1.0.0", "a.txt", stream)

        assert exc_info.value is error
        assert stream.close_calls == 1

    def test_download_url_uses_normalized_base(self, spy):
        spy.status_code = 201
        http = httpx.Client(transport=httpx.MockTransport(spy))
        client = Client(base_url="https://gitlab.example.com/api/v4", http_client=http)
        service = GenericPackagesService(client)

        result = service.publish_package_file(42, "pkg", "1.0.0", "a.txt", io.BytesIO(b"x"))
        assert result.download_url == BASE_URL + PATH


class TestRedirects:
    @pytest.fixture
    def storage(self):
        """gitlab redirects the download to object storage, which serves the bytes."""
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if request.url.host == "gitlab.example.com":
                return httpx.Response(302, headers={"Location": "https://objects.example.com/blob"})
            return httpx.Response(200, content=b"hello")

        return requests, handler

    def test_download_follows_redirect(self, storage):
        requests, handler = storage
        http = httpx.Client(transport=httpx.MockTransport(handler))
        service = GenericPackagesService(Client(token="secret-token", base_url=BASE_URL, http_client=http))

        result = service.download_package_file(42, "pkg", "1.0.0", "a.txt")

        assert result.content == b"hello"
        assert result.response.status_code == 200
        assert [r.url.host for r in requests] == ["gitlab.example.com", "objects.example.com"]

    def test_token_not_sent_to_other_host(self, storage):
        requests, handler = storage
        http = httpx.Client(transport=httpx.MockTransport(handler))
        service = GenericPackagesService(Client(token="secret-token", base_url=BASE_URL, http_client=http))

        service.download_package_file(42, "pkg", "1.0.0", "a.txt")

        first, redirected = requests
        assert first.headers["PRIVATE-TOKEN"] == "secret-token"
        assert "PRIVATE-TOKEN" not in redirected.headers

    def test_owned_client_follows_redirects(self):
        client = Client(base_url=BASE_URL)
        try:
            assert client.http.follow_redirects is True
        finally:
            client.close()


class TestDotSegments:
    @pytest.fixture
    def service(self, client):
        return GenericPackagesService(client)

    @pytest.mark.parametrize("field", ["package_name", "package_version", "file_name"])
    def test_dot_dot_stays_in_path(self, service, spy, field):
        spy.status_code = 201
        coordinate = {"package_name": "pkg", "package_version": "1.0.0", "file_name": "a.txt"}
        coordinate[field] = ".."

        result = service.publish_package_file(
            42, coordinate["package_name"], coordinate["package_version"], coordinate["file_name"],
            io.BytesIO(b"x"),
        )

        request = spy.requests[0]
        assert b"%2E%2E" in request.url.raw_path
        assert result.download_url == str(request.url)
