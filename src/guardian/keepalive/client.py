"""HTTP client for the backend's authentication API.

The keep-alive cycle talks to three endpoints:

    POST <base>/api/auth/login    body {"email", "password"}
    GET  <base>/api/auth/me
    POST <base>/api/auth/logout

The session cookie set by login is carried by the ``requests.Session``
cookie jar, so verify and logout act on the session login created.
"""

from typing import Any

import requests

from guardian.exceptions import AuthenticationError, ServerError, TransportError
from guardian.logging import get_logger

LOG = get_logger(__name__)

LOGIN_PATH = "/api/auth/login"
ME_PATH = "/api/auth/me"
LOGOUT_PATH = "/api/auth/logout"


def _server_message(response: requests.Response) -> str | None:
    """Extract the error message the server put in its JSON body, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict):
        message = data.get("message")
        if isinstance(message, str) and message:
            return message
    return None


class BackendClient:
    """Cookie-carrying client for the backend's login/me/logout endpoints.

    Every failure surfaces as a KeepaliveError subclass:

    - ``TransportError`` when the request did not complete
    - ``AuthenticationError`` for a 401 response
    - ``ServerError`` for any other non-success response

    Example:
        >>> with BackendClient("https://api.example.com") as client:
        ...     client.login("bot@example.com", "secret")
        ...     client.me()["email"]
        ...     client.logout()
        'bot@example.com'
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Backend base URL; trailing slashes are ignored.
            timeout: Timeout in seconds for each request.
            session: Optional pre-built session (mainly for tests).
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._session = session or requests.Session()

    def __enter__(self) -> "BackendClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        LOG.debug("backend_request", method=method, path=path)
        try:
            response = self._session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            LOG.warning("backend_request_failed", method=method, path=path, error=str(exc))
            raise TransportError(str(exc) or exc.__class__.__name__) from exc

        LOG.debug(
            "backend_response",
            method=method,
            path=path,
            status_code=response.status_code,
        )

        if not response.ok:
            message = _server_message(response) or (
                f"Request failed with status code {response.status_code}"
            )
            error_cls = AuthenticationError if response.status_code == 401 else ServerError
            raise error_cls(
                message,
                status_code=response.status_code,
                status_text=response.reason or None,
            )

        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    def login(self, email: str, password: str) -> dict[str, Any]:
        """Create a backend session.

        Returns:
            The login response body (at least the account identity).
        """
        return self._request("POST", LOGIN_PATH, json={"email": email, "password": password})

    def me(self) -> dict[str, Any]:
        """Confirm the session is active and fetch the account identity."""
        return self._request("GET", ME_PATH)

    def logout(self) -> None:
        """Terminate the backend session."""
        self._request("POST", LOGOUT_PATH)
