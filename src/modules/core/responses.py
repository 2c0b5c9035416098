"""Uniform response envelope helpers."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(data: Any, status: int = http_status.HTTP_200_OK) -> Response:
    return Response({"success": True, "data": data}, status=status)


def error_body(
    message: str, details: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "error": message}
    if details:
        body["details"] = details
    return body
