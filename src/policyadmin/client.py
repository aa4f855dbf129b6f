"""REST client for the entity collections of the backend."""

from __future__ import annotations

import logging
from typing import Any, Mapping, NoReturn
from urllib.parse import urlparse

import requests

from .config import ApiConfig
from .consts import MSG_OPERATION_FAILED
from .enums import FieldType
from .errors import ApiError, ConnectivityError, PolicyAdminException
from .schema import EntitySchema
from .validation import is_blank, parse_number

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def coerce_payload(schema: EntitySchema, values: Mapping[str, Any]) -> dict:
    """Build the request body for a create or update.

    Number fields and selectRef foreign keys are sent as numbers; every
    other field, dates included, is sent as received. Blank values are left
    untouched.
    """
    payload = {}
    for field in schema.fields:
        value = values.get(field.name, "")
        if field.is_numeric and not is_blank(value):
            number = parse_number(value)
            if number is None:
                raise PolicyAdminException(f"Field '{field.name}' is not numeric: {value!r}")
            if field.type == FieldType.SELECT_REF and not number.is_integer():
                raise PolicyAdminException(f"Field '{field.name}' is not a record id: {value!r}")
            value = int(number) if number.is_integer() else number
        payload[field.name] = value
    return payload


def _handle_request_exception(exception: requests.RequestException, operation: str) -> NoReturn:
    """Log a transport failure and raise ConnectivityError.

    Args:
        exception: The RequestException from requests library
        operation: Description of the operation being performed (e.g., "list clientes")

    Raises:
        ConnectivityError: Always raises with formatted error message
    """
    status_code = getattr(exception.response, "status_code", "N/A")
    logger.error(f"Failed to {operation}: status_code={status_code} error={exception}")
    raise ConnectivityError(f"Failed to {operation} (status: {status_code})") from exception


def _decode_error(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return MSG_OPERATION_FAILED

    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return MSG_OPERATION_FAILED


class EntityStoreClient:
    """Client for the list/create/update/delete collection API."""

    def __init__(self, config: ApiConfig):
        """Initialize the client.

        Args:
            config: ApiConfig instance with base_url and timeout settings

        Raises:
            PolicyAdminException: If the base URL format is invalid
        """
        base_url = str(config.base_url).rstrip("/")
        parsed_url = urlparse(base_url)
        if not parsed_url.scheme or not parsed_url.netloc:
            raise PolicyAdminException(f"Invalid API base URL: {base_url}")

        self.base_url = base_url
        self.timeout = config.timeout

        logger.debug(f"EntityStoreClient initialized: base_url={self.base_url}, timeout={self.timeout}")

    def _url(self, endpoint: str, record_id: Any = None) -> str:
        url = f"{self.base_url}/{endpoint.strip('/')}"
        if record_id is not None:
            url = f"{url}/{record_id}"
        return url

    def list(self, endpoint: str) -> list[dict]:
        """Fetch every record of a collection.

        Returns:
            The records; a body that is not a JSON array yields an empty list

        Raises:
            ConnectivityError: If the request fails or the body is not JSON
        """
        url = self._url(endpoint)
        try:
            logger.debug(f"GET {url}")
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.RequestException as e:
            _handle_request_exception(e, f"list {endpoint}")
        except ValueError as e:
            logger.error(f"Invalid JSON from {url}: {e}")
            raise ConnectivityError(f"Failed to decode {endpoint} response") from e

        if not isinstance(data, list):
            logger.warning(f"Expected a list from {url}, got {type(data).__name__}")
            return []
        return data

    def _write(self, method: str, url: str, payload: Mapping[str, Any] | None = None) -> requests.Response:
        send = getattr(requests, method)
        kwargs: dict[str, Any] = {"timeout": self.timeout}
        if payload is not None:
            kwargs["json"] = dict(payload)
            kwargs["headers"] = JSON_HEADERS

        try:
            logger.info(f"{method.upper()} {url}")
            response = send(url, **kwargs)
        except requests.RequestException as e:
            _handle_request_exception(e, f"{method} {url}")

        if not response.ok:
            message = _decode_error(response)
            logger.warning(f"{method.upper()} {url} rejected: status={response.status_code} error={message}")
            raise ApiError(message, status_code=response.status_code)
        return response

    def create(self, endpoint: str, payload: Mapping[str, Any]) -> dict:
        """Create a record and return the backend's copy of it (empty if none was sent)."""
        response = self._write("post", self._url(endpoint), payload)
        try:
            body = response.json()
        except ValueError:
            return {}
        return body if isinstance(body, dict) else {}

    def update(self, endpoint: str, record_id: Any, payload: Mapping[str, Any]) -> None:
        self._write("put", self._url(endpoint, record_id), payload)

    def remove(self, endpoint: str, record_id: Any) -> None:
        """Delete a record. Irreversible; callers must confirm with the user first."""
        self._write("delete", self._url(endpoint, record_id))
