"""CORS handling for browser clients."""

from typing import Dict

from starlette.datastructures import Headers
from starlette.middleware.cors import CORSMiddleware
from starlette.responses import Response

# Sent on every OPTIONS answer, including ones without an Origin header
PREFLIGHT_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, OPTIONS",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}


class EmptyPreflightCORSMiddleware(CORSMiddleware):
    """CORSMiddleware whose preflight answers carry no body.

    Starlette replies to preflights with a plain-text "OK"; the headers and
    status are kept and the body is dropped.
    """

    def preflight_response(self, request_headers: Headers) -> Response:
        """Build the preflight response without a body.

        Args:
            request_headers: Headers of the incoming preflight request

        Returns:
            Response with the CORS headers and an empty body
        """
        response = super().preflight_response(request_headers=request_headers)
        headers = {
            key: value
            for key, value in response.headers.items()
            if key not in ("content-length", "content-type")
        }
        return Response(status_code=response.status_code, headers=headers)
