"""Token-signed HTTP client for the GitHub REST API.

Requests are sent once: there is no retry or backoff. Non-2xx answers are
raised as RemoteError (NotFoundError for 404) so callers can decide per
repository whether the failure is fatal.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

import requests

from ghpm.errors import NotFoundError, RemoteError

from .config import ACCEPT, API_VERSION, BASE_URL, PER_PAGE, REQUEST_TIMEOUT, USER_AGENT


def error_message(resp: requests.Response) -> str:
    """Pull the API's `message` out of an error body, falling back to raw text."""
    try:
        body = resp.json()
    except ValueError:
        body = {"text": (resp.text or "")[:300]}
    if not isinstance(body, dict):
        body = {"text": str(body)[:300]}
    return str(body.get("message") or body.get("error") or body.get("text") or "")


class GitHubClient:
    """Thin wrapper around a requests session signed with one bearer token."""

    def __init__(
        self,
        token: str,
        base_url: str = BASE_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Accept": ACCEPT,
                "X-GitHub-Api-Version": API_VERSION,
                "User-Agent": USER_AGENT,
                "Authorization": f"Bearer {token}",
            }
        )

    def url(self, path: str) -> str:
        path = path if path.startswith("/") else f"/{path}"
        return f"{self.base_url}{path}"

    def do(self, method: str, url: str, body: Optional[Dict[str, Any]] = None) -> Any:
        """Send one request and return the decoded JSON body.

        Raises NotFoundError on 404, RemoteError on any other non-2xx status, and
        lets requests.RequestException (timeouts, connection errors) propagate.
        """
        resp = self.session.request(method, url, json=body, timeout=self.timeout)
        if 200 <= resp.status_code < 300:
            if resp.status_code == 204 or not resp.content:
                return None
            return resp.json()

        if resp.status_code == 404:
            raise NotFoundError(error_message(resp), url)
        raise RemoteError(resp.status_code, error_message(resp), url)

    def paged_get(self, url: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        """Retrieve list pages until the API returns a short or empty page."""
        results: List[Dict[str, Any]] = []
        page = 1
        query = dict(params or {})
        while True:
            query.update({"per_page": PER_PAGE, "page": page})
            sep = "&" if "?" in url else "?"
            page_url = f"{url}{sep}" + "&".join(f"{key}={value}" for key, value in query.items())
            batch = self.do("GET", page_url)
            if not isinstance(batch, list) or not batch:
                break

            results.extend(batch)
            if len(batch) < PER_PAGE:
                break

            page += 1
        return results


__all__ = [
    "GitHubClient",
    "error_message",
]
