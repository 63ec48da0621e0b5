"""Shared plumbing for the WordPress REST API."""

from __future__ import annotations

import json
from typing import Any, Mapping

import requests

from ...settings import PublishSettings


class WordPressApiError(RuntimeError):
    """Raised when WordPress API calls fail."""

    def __init__(self, message: str, *, details: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        self.details = dict(details or {})

    def __str__(self) -> str:
        base = super().__str__()
        if not self.details:
            return base
        try:
            detail_repr = json.dumps(self.details, ensure_ascii=False)
        except TypeError:
            detail_repr = str(self.details)
        return f"{base} | details: {detail_repr}"


class WordPressApiClient:
    """Base client holding the site URL, basic-auth credentials and HTTP session."""

    _API_PREFIX = "/wp-json/wp/v2"

    def __init__(
        self,
        settings: PublishSettings,
        *,
        session: requests.Session | None = None,
    ) -> None:
        self._settings = settings
        self._session = session or requests.Session()
        self._timeout = settings.timeout

    def endpoint(self, resource: str) -> str:
        return f"{self._settings.url}{self._API_PREFIX}/{resource}"

    def _post(self, resource: str, *, action: str, **kwargs: Any) -> requests.Response:
        url = self.endpoint(resource)
        try:
            response = self._session.post(
                url,
                auth=self._settings.auth,
                timeout=self._timeout,
                **kwargs,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise WordPressApiError(
                f"{action} failed",
                details={"url": url, "reason": str(exc)},
            ) from exc
        return response

    def _decode(self, response: requests.Response, *, action: str) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError as exc:
            raise WordPressApiError(
                f"Failed to parse WordPress response to {action}",
                details={"response": response.text[:200]},
            ) from exc
        if not isinstance(data, dict):
            raise WordPressApiError(
                f"Unexpected WordPress response to {action}",
                details={"response": response.text[:200]},
            )
        return data
