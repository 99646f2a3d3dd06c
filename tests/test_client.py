"""Unit tests for the core HTTP client."""

import http.client
import io
import json
import urllib.error

import pytest

from bos_cli.core.client import (
    APIClient,
    APIError,
    ErrorItem,
    RetryPolicy,
    default_environment,
    escape,
    job_path,
)

pytestmark = pytest.mark.usefixtures("isolated_env")


class TestRequests:
    def test_get_builds_https_url_with_query(self, api, transport):
        transport.reply({"ok": True})

        result = api.get("/v1/providers", {"q": "bank of test", "skip": None})

        assert result == {"ok": True}
        assert transport.last.get_method() == "GET"
        assert transport.last.full_url == "https://api.sandbox.bankrs.com/v1/providers?q=bank+of+test"

    def test_address_with_scheme_is_used_as_is(self, transport):
        client = APIClient(addr="http://localhost:8080/")
        transport.reply({})

        client.get("/v1/categories")

        assert transport.last.full_url == "http://localhost:8080/v1/categories"

    def test_post_sends_json_body(self, api, transport):
        transport.reply({"token": "t"})

        api.post("/v1/developers/login", {"email": "a@b.c", "password": "pw"})

        assert transport.last.get_method() == "POST"
        assert transport.last.get_header("Content-type") == "application/json"
        assert transport.body() == {"email": "a@b.c", "password": "pw"}

    def test_empty_response_body(self, api, transport):
        transport.reply(raw=b"")

        assert api.post("/v1/developers/logout") == {"success": True}

    def test_delete_with_body(self, api, transport):
        transport.reply({"deleted_user_id": "u1"})

        api.delete("/v1/users", {"password": "pw"})

        assert transport.last.get_method() == "DELETE"
        assert transport.body() == {"password": "pw"}

    def test_timeout_is_passed_to_urlopen(self, transport):
        client = APIClient(addr="api.sandbox.bankrs.com", timeout=7)
        transport.reply({})

        client.get("/v1/categories")

        assert transport.timeouts == [7]


class TestHeaders:
    def test_default_user_agent(self, api, transport):
        transport.reply({})

        api.get("/v1/categories")

        assert transport.last.get_header("User-agent") == "bosgo-bankrs-os-client/0.1.0"
        assert transport.last.get_header("X-token") is None
        assert transport.last.get_header("X-environment") is None

    def test_extra_user_agent_and_client_id(self, transport):
        client = APIClient(addr="api.sandbox.bankrs.com", user_agent="bosh", client_id="cid-1")
        transport.reply({})

        client.get("/v1/categories")

        assert transport.last.get_header("User-agent") == "bosgo-bankrs-os-client/0.1.0 bosh"
        assert transport.last.get_header("X-client-id") == "cid-1"

    def test_session_headers(self, api, transport):
        user = api.with_session(application_id="app-1").with_session(token="tok-1")
        transport.reply({})

        user.get("/v1/accesses")

        assert transport.last.get_header("X-token") == "tok-1"
        assert transport.last.get_header("X-application-id") == "app-1"
        # the parent client keeps no session headers
        assert api.session_headers == {}
        assert user.token == "tok-1"
        assert user.application_id == "app-1"

    def test_per_request_headers(self, api, transport):
        transport.reply({})

        api.get("/v1/developers/users", headers={"x-application-id": "app-2"})

        assert transport.last.get_header("X-application-id") == "app-2"

    def test_environment_header_for_custom_host(self, transport):
        client = APIClient(addr="localhost:8443")
        transport.reply({})

        client.get("/v1/categories")

        assert transport.last.get_header("X-environment") == "sandbox"

    def test_environment_from_env_var(self, monkeypatch, transport):
        monkeypatch.setenv("BOS_ENVIRONMENT", "staging")
        client = APIClient(addr="api.bankrs.com")
        transport.reply({})

        client.get("/v1/categories")

        assert transport.last.get_header("X-environment") == "staging"


class TestSettings:
    def test_defaults(self):
        client = APIClient()

        assert client.addr == "api.sandbox.bankrs.com"
        assert client.timeout == 60
        assert client.insecure is False
        assert client.retry_policy.max_retries == 0

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("BOS_ADDR", "localhost:9000")
        monkeypatch.setenv("BOS_TIMEOUT", "5")
        monkeypatch.setenv("BOS_INSECURE", "true")
        monkeypatch.setenv("BOS_RETRIES", "3")

        client = APIClient()

        assert client.addr == "localhost:9000"
        assert client.timeout == 5
        assert client.insecure is True
        assert client.retry_policy.max_retries == 3

    def test_explicit_arguments_win(self, monkeypatch):
        monkeypatch.setenv("BOS_ADDR", "localhost:9000")
        monkeypatch.setenv("BOS_INSECURE", "1")

        client = APIClient(addr="api.bankrs.com", insecure=False)

        assert client.addr == "api.bankrs.com"
        assert client.insecure is False

    def test_insecure_context_skips_verification(self):
        context = APIClient(insecure=True)._ssl_context()

        assert context is not None
        assert context.check_hostname is False

    @pytest.mark.parametrize(
        ("addr", "expected"),
        [
            ("api.bankrs.com", ""),
            ("api.sandbox.bankrs.com", ""),
            ("https://api.bankrs.com", ""),
            ("localhost:8443", "sandbox"),
            ("http://127.0.0.1:8080", "sandbox"),
        ],
    )
    def test_default_environment(self, addr, expected):
        assert default_environment(addr) == expected


class TestErrors:
    def test_single_error_with_message(self, api, transport):
        transport.fail(
            400,
            {"errors": [{"code": "invalid_password", "message": "password too short"}]},
            reason="Bad Request",
            headers={"X-Request-Id": "req-1"},
        )

        with pytest.raises(APIError) as exc_info:
            api.post("/v1/developers", {"email": "a@b.c", "password": "x"})

        err = exc_info.value
        assert err.status == 400
        assert err.request_id == "req-1"
        assert err.codes == ["invalid_password"]
        assert err.message == (
            "invalid_password: password too short "
            "[request-id: req-1; Status: 400 Bad Request; URL: https://api.sandbox.bankrs.com/v1/developers]"
        )

    def test_single_error_without_message(self, api, transport):
        transport.fail(401, {"errors": [{"code": "unauthorized"}]}, reason="Unauthorized", headers={"X-Request-Id": "r2"})

        with pytest.raises(APIError) as exc_info:
            api.get("/v1/accesses")

        assert exc_info.value.message == (
            "unauthorized: 401 Unauthorized [request-id: r2; URL: https://api.sandbox.bankrs.com/v1/accesses]"
        )

    def test_several_errors(self, api, transport):
        transport.fail(422, {"errors": [{"code": "a"}, {"code": "b"}]}, reason="Unprocessable Entity")

        with pytest.raises(APIError) as exc_info:
            api.get("/v1/accesses")

        assert exc_info.value.message.startswith("request failed with status 422 Unprocessable Entity [")
        assert exc_info.value.codes == ["a", "b"]

    def test_unparseable_error_body(self, api, transport):
        transport.fail(502, raw=b"<html>\r\nBad gateway\n</html>\x00trailing", reason="Bad Gateway")

        with pytest.raises(APIError) as exc_info:
            api.post("/v1/users/login", {})

        item = exc_info.value.errors[0]
        assert item.code == "unable_to_unmarshal_error_response"
        assert item.message == "received <html>  Bad gateway </html>"

    @pytest.mark.parametrize(
        "body",
        [b'{"errors": ["bad_input"]}', b'{"errors": {"code": "x"}}', b"[1]", b'"oops"'],
    )
    def test_error_body_with_unexpected_shape(self, body):
        err = APIError.from_response(400, "Bad Request", None, body, "https://api.sandbox.bankrs.com/v1/accounts")

        assert err.status == 400
        assert err.codes == ["unable_to_unmarshal_error_response"]
        assert err.errors[0].message == f"received {body.decode()}"

    def test_unparseable_success_body(self, api, transport):
        transport.reply(raw=b"not json", headers={"X-Request-Id": "r3"})

        with pytest.raises(APIError) as exc_info:
            api.get("/v1/accounts")

        assert exc_info.value.codes == ["unable_to_unmarshal_json_response"]
        assert exc_info.value.request_id == "r3"

    def test_connection_error(self, api, transport):
        transport.raise_(urllib.error.URLError("connection refused"))

        with pytest.raises(APIError) as exc_info:
            api.get("/v1/accounts")

        assert exc_info.value.status == 0
        assert "connection refused" in exc_info.value.message

    @pytest.mark.parametrize(
        "error",
        [
            http.client.RemoteDisconnected("Remote end closed connection without response"),
            ConnectionResetError(104, "Connection reset by peer"),
            http.client.IncompleteRead(b"par", 10),
        ],
        ids=["remote_disconnected", "connection_reset", "incomplete_read"],
    )
    def test_dropped_connection(self, api, transport, error):
        transport.raise_(error)

        with pytest.raises(APIError) as exc_info:
            api.get("/v1/accounts")

        assert exc_info.value.status == 0
        assert exc_info.value.message.startswith("Connection error: ")
        assert exc_info.value.__cause__ is error

    def test_timeout(self, api, transport):
        transport.raise_(TimeoutError())

        with pytest.raises(APIError, match="timed out"):
            api.get("/v1/accounts")

    def test_to_dict(self):
        err = APIError(status=404, errors=[ErrorItem("not_found")], request_id="r", url="u", status_text="404 Not Found")

        assert err.to_dict() == {
            "error": "not_found: 404 Not Found [request-id: r; URL: u]",
            "status": 404,
            "errors": [{"code": "not_found"}],
            "request_id": "r",
        }


class TestRetries:
    def test_get_is_retried_on_503(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=2))
        transport.fail(503, reason="Service Unavailable").fail(503).reply({"ok": True})

        assert client.get("/v1/accounts") == {"ok": True}
        assert len(transport.requests) == 3
        assert no_sleep == pytest.approx([0.3, 0.6])

    def test_retries_are_limited(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=1))
        transport.fail(502).fail(502)

        with pytest.raises(APIError) as exc_info:
            client.get("/v1/accounts")

        assert exc_info.value.status == 502
        assert len(transport.requests) == 2

    def test_client_errors_are_not_retried(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=3))
        transport.fail(404, {"errors": [{"code": "not_found"}]})

        with pytest.raises(APIError):
            client.get("/v1/accounts/1")

        assert len(transport.requests) == 1
        assert no_sleep == []

    def test_post_is_not_retried_by_default(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=3))
        transport.fail(503)

        with pytest.raises(APIError):
            client.post("/v1/transfers", {})

        assert len(transport.requests) == 1

    def test_connection_errors_are_retried(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=1))
        transport.raise_(urllib.error.URLError("reset")).reply([])

        assert client.get("/v1/accounts") == []

    def test_dropped_connections_are_retried(self, transport, no_sleep):
        client = APIClient(addr="api.sandbox.bankrs.com", retry_policy=RetryPolicy(max_retries=2))
        transport.raise_(http.client.RemoteDisconnected("Remote end closed connection without response"))
        transport.raise_(ConnectionResetError(104, "Connection reset by peer")).reply({"ok": True})

        assert client.get("/v1/accounts") == {"ok": True}
        assert len(transport.requests) == 3
        assert len(no_sleep) == 2

    def test_backoff_is_capped(self):
        policy = RetryPolicy(max_retries=10, backoff=0.3, max_backoff=1.0)

        assert [policy.delay(i) for i in range(4)] == pytest.approx([0.3, 0.6, 1.0, 1.0])


class TestPagination:
    def test_bare_list(self, api, transport):
        transport.reply([{"id": 1}, {"id": 2}])

        page = api.page("/v1/transactions", {"limit": 10, "offset": 20}, parser=lambda d: d["id"])

        assert page.data == [1, 2]
        assert page.offset == 20
        assert page.limit == 10
        assert page.total_count == 22
        assert not page.has_more

    def test_envelope(self, api, transport):
        transport.reply({"data": [{"id": 1}], "total": 5})

        page = api.page("/v1/transactions", {"limit": 1, "offset": 0})

        assert page.data == [{"id": 1}]
        assert page.total_count == 5
        assert page.has_more

    def test_fetch_list(self, api, transport):
        transport.reply([{"id": "a"}])

        assert api.fetch_list("/v1/webhooks", lambda d: d["id"]) == ["a"]


class TestHelpers:
    @pytest.mark.parametrize(
        ("uri", "expected"),
        [
            ("/jobs/abc", "/v1/jobs/abc"),
            ("jobs/abc", "/v1/jobs/abc"),
            ("/v1/jobs/abc", "/v1/jobs/abc"),
        ],
    )
    def test_job_path(self, uri, expected):
        assert job_path(uri) == expected

    def test_escape(self):
        assert escape("a/b c") == "a%2Fb%20c"
        assert escape(42) == "42"

    def test_http_error_without_body(self):
        error = urllib.error.HTTPError("u", 500, "Internal Server Error", None, io.BytesIO(b""))

        api_error = APIError.from_response(error.code, error.reason, error.headers, error.read(), "u")

        assert api_error.message == "request failed with status 500 Internal Server Error [request-id: ; URL: u]"
        assert json.dumps(api_error.to_dict())
