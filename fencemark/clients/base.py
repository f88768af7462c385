"""
Typed HTTP client base.

Front ends talk to the API through these wrappers instead of raw HTTP.
Failures are reported by return value, not exceptions: reads and writes
return None, deletes return False, and the server's error message is
kept on ``last_error``.
"""
from typing import Any, Generic, Optional, Type, TypeVar, Union

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from fencemark.utils.logging import get_logger

logger = get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)
Payload = Union[BaseModel, dict]


def build_http_client(base_url: str, token: Optional[str] = None, **kwargs) -> httpx.Client:
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.Client(base_url=base_url, headers=headers, timeout=kwargs.pop("timeout", 30.0), **kwargs)


def to_json(payload: Payload, partial: bool = False) -> dict:
    if isinstance(payload, BaseModel):
        return payload.model_dump(mode="json", exclude_unset=partial)
    return payload


class BaseClient:
    """Shared request plumbing: error capture and response parsing."""

    def __init__(self, http: httpx.Client):
        self.http = http
        self.last_error: Optional[str] = None

    def _request(self, method: str, url: str, **kwargs) -> Optional[httpx.Response]:
        self.last_error = None
        try:
            response = self.http.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"{method} {url} failed: {e}")
            self.last_error = str(e)
            return None

        if response.is_success:
            return response

        self.last_error = self._error_message(response)
        logger.warning(f"{method} {url} returned {response.status_code}: {self.last_error}")
        return None

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text or response.reason_phrase
        if isinstance(body, dict):
            return str(body.get("error") or body.get("detail") or body)
        return str(body)

    def _parse(self, response: Optional[httpx.Response], model: Any):
        if response is None:
            return None
        try:
            return TypeAdapter(model).validate_python(response.json())
        except (ValueError, ValidationError) as e:
            logger.error(f"Could not parse response from {response.request.url}: {e}")
            self.last_error = str(e)
            return None


class ApiClient(BaseClient, Generic[ModelT]):
    """
    CRUD client for one resource collection under /api.

    Subclasses set ``path`` and ``model``.
    """
    path: str = ""
    model: Type[ModelT]

    def _url(self, suffix: str = "") -> str:
        return f"/api/{self.path}{suffix}"

    def _get_list(self, suffix: str = "") -> Optional[list[ModelT]]:
        return self._parse(self._request("GET", self._url(suffix)), list[self.model])

    def get_all(self) -> Optional[list[ModelT]]:
        return self._get_list()

    def get_by_id(self, object_id: str) -> Optional[ModelT]:
        return self._parse(self._request("GET", self._url(f"/{object_id}")), self.model)

    def create(self, payload: Payload) -> Optional[ModelT]:
        response = self._request("POST", self._url(), json=to_json(payload))
        return self._parse(response, self.model)

    def update(self, object_id: str, payload: Payload) -> Optional[ModelT]:
        response = self._request("PUT", self._url(f"/{object_id}"), json=to_json(payload, partial=True))
        return self._parse(response, self.model)

    def delete(self, object_id: str) -> bool:
        return self._request("DELETE", self._url(f"/{object_id}")) is not None
