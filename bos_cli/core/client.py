"""
Core HTTP client for the Bankrs OS API.

Handles session headers, request/response, retries, pagination, and error handling.
"""

import copy
import http.client
import json
import os
import ssl
import time
import urllib.error
import urllib.parse
import urllib.request
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any, TypeVar

from bos_cli import __version__
from bos_cli.core.logging import get_logger
from bos_cli.core.types import PaginatedResponse

# Configuration
SANDBOX_ADDR = "api.sandbox.bankrs.com"
PRODUCTION_ADDR = "api.bankrs.com"
DEFAULT_ADDR = SANDBOX_ADDR
DEFAULT_TIMEOUT = 60
DEFAULT_USER_AGENT = f"bosgo-bankrs-os-client/{__version__}"
API_PREFIX = "/v1"

RETRYABLE_STATUSES = frozenset({429, 502, 503, 504})

T = TypeVar("T")

log = get_logger(__name__)


class CLIError(Exception):
    """Base error class for CLI errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result: dict[str, Any] = {"error": self.message}
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorItem:
    """A single error reported by the service."""

    code: str = ""
    message: str = ""
    payload: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ErrorItem":
        """Create from API response dict."""
        return cls(
            code=data.get("code") or "",
            message=data.get("message") or "",
            payload=data.get("payload") or {},
        )

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {"code": self.code}
        if self.message:
            result["message"] = self.message
        if self.payload:
            result["payload"] = self.payload
        return result


def _flatten_body(body: bytes) -> str:
    """Render an unparseable error body as a single line."""
    text = body.split(b"\x00", 1)[0].decode("utf-8", errors="replace")
    return text.replace("\r", " ").replace("\n", " ")


def _error_items(data: Any) -> list[ErrorItem]:
    """Decode the errors of an error body; raises ValueError if the body has another shape."""
    if not isinstance(data, dict):
        raise ValueError("error body is not an object")
    raw = data.get("errors") or []
    if not isinstance(raw, list) or not all(isinstance(e, dict) for e in raw):
        raise ValueError("errors is not a list of objects")
    return [ErrorItem.from_dict(e) for e in raw]


class APIError(CLIError):
    """API error with status, the service's error items and the request id."""

    def __init__(
        self,
        message: str = "",
        status: int = 0,
        details: dict | None = None,
        errors: list[ErrorItem] | None = None,
        request_id: str = "",
        url: str = "",
        status_text: str = "",
    ):
        self.status = status
        self.status_text = status_text or (str(status) if status else "")
        self.errors = errors or []
        self.request_id = request_id
        self.url = url
        super().__init__(message or self._describe(), details)

    def _describe(self) -> str:
        """Build the message the same way the service's own clients do."""
        trailer = f"request-id: {self.request_id}; URL: {self.url}"
        if len(self.errors) == 1:
            item = self.errors[0]
            if not item.message:
                return f"{item.code}: {self.status_text} [{trailer}]"
            return f"{item.code}: {item.message} [request-id: {self.request_id}; Status: {self.status_text}; URL: {self.url}]"
        return f"request failed with status {self.status_text} [{trailer}]"

    @property
    def codes(self) -> list[str]:
        return [item.code for item in self.errors]

    @classmethod
    def from_response(cls, status: int, reason: str, headers: Any, body: bytes, url: str) -> "APIError":
        """Decode an error response body into an APIError."""
        request_id = (headers.get("X-Request-Id") if headers else None) or ""
        status_text = f"{status} {reason}".strip()
        try:
            items = _error_items(json.loads(body.decode("utf-8")) if body else {})
        except ValueError:
            items = [ErrorItem("unable_to_unmarshal_error_response", f"received {_flatten_body(body)}")]
        return cls(status=status, errors=items, request_id=request_id, url=url, status_text=status_text)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for JSON output."""
        result = super().to_dict()
        if self.status:
            result["status"] = self.status
        if self.errors:
            result["errors"] = [e.to_dict() for e in self.errors]
        if self.request_id:
            result["request_id"] = self.request_id
        return result


class ValidationError(CLIError):
    """Validation error for local input/data issues (not API errors)."""


class SessionError(CLIError):
    """Raised when an operation needs a session that has not been established."""


@dataclass
class RetryPolicy:
    """Exponential backoff for requests that are safe to repeat."""

    max_retries: int = 0
    backoff: float = 0.3
    max_backoff: float = 5.0
    statuses: frozenset[int] = RETRYABLE_STATUSES

    def delay(self, attempt: int) -> float:
        return min(self.backoff * (2**attempt), self.max_backoff)

    def should_retry(self, error: APIError, attempt: int) -> bool:
        if attempt >= self.max_retries:
            return False
        # status 0 means the request never got a response
        return error.status == 0 or error.status in self.statuses


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "t", "true", "y", "yes", "on")


def default_environment(addr: str) -> str:
    """Return the environment header value for hosts other than the public ones."""
    host = urllib.parse.urlsplit(addr).netloc if "://" in addr else addr
    if host in (SANDBOX_ADDR, PRODUCTION_ADDR):
        return ""
    return "sandbox"


class APIClient:
    """
    Low-level HTTP client for the Bankrs OS API.

    Handles:
    - Session headers (developer token, application id, user token)
    - HTTP methods (GET, POST, PUT, DELETE)
    - Error handling and response parsing
    - Retries for idempotent requests
    - Pagination for list endpoints
    """

    def __init__(
        self,
        addr: str | None = None,
        user_agent: str | None = None,
        environment: str | None = None,
        client_id: str | None = None,
        timeout: float | None = None,
        insecure: bool | None = None,
        retry_policy: RetryPolicy | None = None,
    ):
        """
        Initialize the API client.

        Args:
            addr: API host, optionally with scheme (or BOS_ADDR env var)
            user_agent: Extra text appended to the User-Agent header
            environment: Value of the X-Environment header (or BOS_ENVIRONMENT env var)
            client_id: Value of the X-Client-Id header
            timeout: Request timeout in seconds (or BOS_TIMEOUT env var)
            insecure: Skip TLS certificate verification (or BOS_INSECURE env var)
            retry_policy: Retry policy for retryable requests (or BOS_RETRIES env var)

        """
        self.addr = (addr or os.environ.get("BOS_ADDR") or DEFAULT_ADDR).rstrip("/")
        self.user_agent = user_agent or ""
        env_environment = os.environ.get("BOS_ENVIRONMENT")
        if environment is not None:
            self.environment = environment
        elif env_environment is not None:
            self.environment = env_environment
        else:
            self.environment = default_environment(self.addr)
        self.client_id = client_id
        self.timeout = timeout or float(os.environ.get("BOS_TIMEOUT") or DEFAULT_TIMEOUT)
        self.insecure = _env_flag("BOS_INSECURE") if insecure is None else insecure
        self.retry_policy = retry_policy or RetryPolicy(max_retries=int(os.environ.get("BOS_RETRIES") or 0))
        self.session_headers: dict[str, str] = {}

    def with_session(self, token: str | None = None, application_id: str | None = None) -> "APIClient":
        """Return a copy of this client that sends the given session headers."""
        clone = copy.copy(self)
        clone.session_headers = dict(self.session_headers)
        if token is not None:
            clone.session_headers["x-token"] = token
        if application_id is not None:
            clone.session_headers["x-application-id"] = application_id
        return clone

    @property
    def token(self) -> str:
        return self.session_headers.get("x-token", "")

    @property
    def application_id(self) -> str:
        return self.session_headers.get("x-application-id", "")

    @property
    def full_user_agent(self) -> str:
        if not self.user_agent:
            return DEFAULT_USER_AGENT
        return f"{DEFAULT_USER_AGENT} {self.user_agent}"

    def _build_url(self, path: str, params: dict[str, Any] | None = None) -> str:
        """Build full URL from path and query parameters."""
        base = self.addr if "://" in self.addr else f"https://{self.addr}"
        url = f"{base}{path}"
        if params:
            # Filter out None values and URL-encode
            filtered_params = {k: v for k, v in params.items() if v is not None}
            if filtered_params:
                separator = "&" if "?" in path else "?"
                url = f"{url}{separator}{urllib.parse.urlencode(filtered_params, doseq=True)}"
        return url

    def _headers(self, extra: dict[str, str] | None = None, has_body: bool = False) -> dict[str, str]:
        headers = {"User-Agent": self.full_user_agent, "Accept": "application/json"}
        if has_body:
            headers["Content-Type"] = "application/json"
        if self.client_id:
            headers["X-Client-Id"] = self.client_id
        if self.environment:
            headers["X-Environment"] = self.environment
        headers.update(self.session_headers)
        if extra:
            headers.update(extra)
        return headers

    def _ssl_context(self) -> ssl.SSLContext | None:
        if not self.insecure:
            return None
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        return ctx

    def _make_request(
        self,
        method: str,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        retryable: bool | None = None,
        timeout: float | None = None,
    ) -> Any:
        """
        Make an HTTP request to the API.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: API path (e.g., /v1/accesses)
            data: Request body, encoded as JSON
            params: Query parameters
            headers: Extra headers for this request
            retryable: Whether the request may be repeated (defaults to True for GET)
            timeout: Request timeout override

        Returns:
            Parsed JSON response

        Raises:
            APIError: On HTTP or parsing errors

        """
        url = self._build_url(path, params)
        body = json.dumps(data).encode("utf-8") if data is not None else None
        request_headers = self._headers(headers, has_body=body is not None)
        if retryable is None:
            retryable = method == "GET"

        attempt = 0
        while True:
            try:
                return self._send(method, url, body, request_headers, timeout or self.timeout)
            except APIError as e:
                if not retryable or not self.retry_policy.should_retry(e, attempt):
                    raise
                delay = self.retry_policy.delay(attempt)
                log.warning("api_request_retry", method=method, path=path, attempt=attempt + 1, status=e.status, delay=delay)
                time.sleep(delay)
                attempt += 1

    def _send(self, method: str, url: str, body: bytes | None, headers: dict[str, str], timeout: float) -> Any:
        path = urllib.parse.urlsplit(url).path
        log.debug("api_request_started", method=method, path=path)
        start = time.monotonic()

        try:
            req = urllib.request.Request(url, data=body, headers=headers, method=method)
            with urllib.request.urlopen(req, timeout=timeout, context=self._ssl_context()) as response:
                response_data = response.read()
                status = response.status
                request_id = response.headers.get("X-Request-Id") or ""

        except urllib.error.HTTPError as e:
            error = APIError.from_response(e.code, e.reason or "", e.headers, e.read() or b"", url)
            log.warning(
                "api_request_failed",
                method=method,
                path=path,
                status=e.code,
                error_codes=error.codes,
                request_id=error.request_id,
                duration_ms=round((time.monotonic() - start) * 1000, 2),
            )
            raise error from e

        except urllib.error.URLError as e:
            log.warning("api_request_failed", method=method, path=path, error=str(e.reason))
            raise APIError(f"Connection error: {e.reason}", url=url) from e

        except TimeoutError as e:
            log.warning("api_request_failed", method=method, path=path, error="timeout")
            raise APIError(f"Request timed out after {timeout} seconds", url=url) from e

        # urllib leaves failures while reading the response unwrapped
        except (http.client.HTTPException, OSError) as e:
            log.warning("api_request_failed", method=method, path=path, error=str(e) or type(e).__name__)
            raise APIError(f"Connection error: {str(e) or type(e).__name__}", url=url) from e

        log.debug(
            "api_request_completed",
            method=method,
            path=path,
            status=status,
            request_id=request_id,
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )

        if not response_data:
            return {"success": True}
        try:
            return json.loads(response_data.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise APIError(
                status=status,
                errors=[ErrorItem("unable_to_unmarshal_json_response", str(e))],
                request_id=request_id,
                url=url,
            ) from e

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def get(self, path: str, params: dict[str, Any] | None = None, headers: dict[str, str] | None = None) -> Any:
        """Make a GET request."""
        return self._make_request("GET", path, params=params, headers=headers)

    def post(
        self,
        path: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
        retryable: bool = False,
    ) -> Any:
        """Make a POST request."""
        return self._make_request("POST", path, data, headers=headers, retryable=retryable)

    def put(self, path: str, data: Any = None) -> Any:
        """Make a PUT request."""
        return self._make_request("PUT", path, data)

    def delete(self, path: str, data: Any = None) -> Any:
        """Make a DELETE request."""
        return self._make_request("DELETE", path, data)

    # =========================================================================
    # Pagination
    # =========================================================================

    def page(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        parser: Callable[[dict[str, Any]], T] | None = None,
    ) -> PaginatedResponse[T]:
        """
        Fetch a single page and return a PaginatedResponse.

        The service answers list endpoints either with a bare array or with a
        {"data": [...], "total": n} envelope; both are accepted.

        Args:
            path: API path
            params: Query parameters, including limit/offset when paging
            parser: Optional function to parse each item

        Returns:
            PaginatedResponse with data and metadata

        """
        params = params or {}
        result = self.get(path, params)

        if isinstance(result, list):
            data, total = result, None
        else:
            data = result.get("data") or []
            total = result.get("total")
        if parser:
            data = [parser(item) for item in data]

        offset = int(params.get("offset") or 0)
        return PaginatedResponse(
            data=data,
            total_count=total if total is not None else offset + len(data),
            offset=offset,
            limit=int(params.get("limit") or 0),
        )

    def fetch_list(self, path: str, parser: Callable[[dict[str, Any]], T]) -> list[T]:
        """Fetch an unpaged list endpoint."""
        return self.page(path, parser=parser).data


def job_path(uri: str) -> str:
    """Return the request path for a job URI."""
    if uri.startswith(API_PREFIX + "/"):
        return uri
    if not uri.startswith("/"):
        uri = "/" + uri
    return API_PREFIX + uri


def escape(segment: Any) -> str:
    """Escape a value for use as a single path segment."""
    return urllib.parse.quote(str(segment), safe="")
