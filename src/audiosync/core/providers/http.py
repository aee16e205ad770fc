"""
HTTP plumbing for provider clients.

This module intentionally contains only network logic:
- requests
- timeouts
- retries on transient failures
- mapping failures onto NetworkError / DecodeError

No provider-specific parsing.
"""

import json
from typing import Any, Optional

import requests

from ...config import PROVIDER_MAX_RETRIES, REQUEST_TIMEOUT, USER_AGENT
from ...exceptions import DecodeError, NetworkError
from ...utils.retry import retry_with_backoff


def _network_error(method: str, url: str, error: requests.exceptions.RequestException) -> NetworkError:
    response = getattr(error, "response", None)
    status = response.status_code if response is not None else None
    return NetworkError(f"{method} {url} failed: {error}", status_code=status)


def create_session(user_agent: str = USER_AGENT) -> requests.Session:
    session = requests.Session()
    session.headers.update({"User-Agent": user_agent})
    return session


@retry_with_backoff(max_retries=PROVIDER_MAX_RETRIES)
def fetch_text(
    url: str,
    *,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> str:
    """GET a URL and return the body as text.

    Raises:
        NetworkError: connection failure, timeout or non-2xx status
    """
    sess = session or requests
    try:
        resp = sess.get(url, params=params, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise _network_error("GET", url, e) from e
    resp.encoding = resp.encoding or "utf-8"
    return resp.text


@retry_with_backoff(max_retries=PROVIDER_MAX_RETRIES)
def fetch_bytes(
    url: str,
    *,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> bytes:
    """GET a URL and return the raw body."""
    sess = session or requests
    try:
        resp = sess.get(url, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise _network_error("GET", url, e) from e
    return resp.content


def decode_json(text: str, source: str = "response") -> Any:
    try:
        return json.loads(text)
    except ValueError as e:
        raise DecodeError(f"Malformed JSON in {source}: {e}") from e


def fetch_json(
    url: str,
    *,
    params: Optional[dict] = None,
    headers: Optional[dict] = None,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """GET a URL and decode the body as JSON."""
    text = fetch_text(url, params=params, headers=headers, timeout=timeout, session=session)
    return decode_json(text, url)


@retry_with_backoff(max_retries=PROVIDER_MAX_RETRIES)
def post_json(
    url: str,
    payload: dict,
    *,
    headers: Optional[dict] = None,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> Any:
    """POST a JSON payload and decode the JSON answer."""
    sess = session or requests
    try:
        resp = sess.post(url, json=payload, headers=headers, timeout=timeout)
        resp.raise_for_status()
    except requests.exceptions.RequestException as e:
        raise _network_error("POST", url, e) from e
    return decode_json(resp.text, url)
