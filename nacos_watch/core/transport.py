"""
Shared HTTP plumbing for talking to the configuration server.
"""

from typing import Dict, Optional

import requests

from nacos_watch.exceptions import (
    NotFoundError,
    ServerError,
    TransportError,
    UnauthorizedError,
)

CONTENT_TYPE = 'application/x-www-form-urlencoded;charset=utf-8'


def base_headers() -> Dict[str, str]:
    return {'Content-Type': CONTENT_TYPE}


def send(
    http: requests.Session,
    method: str,
    url: str,
    timeout: float,
    params: Optional[Dict[str, str]] = None,
    data: Optional[Dict[str, str]] = None,
    headers: Optional[Dict[str, str]] = None
) -> requests.Response:
    """
    Issue one request.

    Raises:
        TransportError: On any connection, timeout or IO failure
    """
    try:
        return http.request(
            method,
            url,
            params=params,
            data=data,
            headers=headers,
            timeout=timeout
        )
    except requests.exceptions.RequestException as e:
        raise TransportError(f"{method} {url} failed: {e}") from e


def check_status(response: requests.Response, action: str) -> str:
    """
    Reject anything but a 200, whatever the body says.

    Args:
        response: Server response
        action: Short description used in the error message

    Returns:
        Response body text

    Raises:
        UnauthorizedError: On 401/403
        NotFoundError: On 404
        ServerError: On any other non-200 status
    """
    body = response.text
    status = response.status_code
    if status == 200:
        return body

    message = f"{action} failed with status {status}: {body}"
    if status in (401, 403):
        raise UnauthorizedError(message, status_code=status, body=body)
    if status == 404:
        raise NotFoundError(message, status_code=status, body=body)
    raise ServerError(message, status_code=status, body=body)
