"""Headers the ingress proxy sends along with a failed request."""
from __future__ import annotations

from collections.abc import Mapping

FORMAT_HEADER = "X-Format"
CODE_HEADER = "X-Code"
CONTENT_TYPE = "Content-Type"
ORIGINAL_URI = "X-Original-URI"
NAMESPACE = "X-Namespace"
INGRESS_NAME = "X-Ingress-Name"
SERVICE_NAME = "X-Service-Name"
SERVICE_PORT = "X-Service-Port"
REQUEST_ID = "X-Request-ID"
ACCEPT = "Accept"

# Echoed back verbatim when DEBUG is set.
DEBUG_ECHO_HEADERS = (
    FORMAT_HEADER,
    CODE_HEADER,
    CONTENT_TYPE,
    ORIGINAL_URI,
    NAMESPACE,
    INGRESS_NAME,
    SERVICE_NAME,
    SERVICE_PORT,
    REQUEST_ID,
)


def debug_headers(request_headers: Mapping[str, str]) -> dict[str, str]:
    """Copy the informational request headers for the response.

    Missing headers are echoed as empty values so the full set is always present.
    """
    return {name: request_headers.get(name, "") for name in DEBUG_ECHO_HEADERS}
