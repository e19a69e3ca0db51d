# hospital_core/common/api/exceptions.py
from __future__ import annotations

import uuid
from typing import Any

from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException, NotAuthenticated, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler


def ensure_request_id(request) -> str:
    """
    Ensures request has a stable request_id attribute and returns it.
    Safe to call from middleware and DRF exception handler.
    """
    rid = getattr(request, "request_id", None) if request is not None else None
    if not rid:
        rid = uuid.uuid4().hex
        if request is not None:
            setattr(request, "request_id", rid)
    return rid


def build_error_envelope(*, request=None, code: str, message: str, details: Any = None) -> dict[str, Any]:
    """
    Canonical error envelope.
    Reusable from Django middleware (JsonResponse), DRF handler and views (Response).
    """
    rid = ensure_request_id(request)
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "request_id": rid,
        }
    }


def error_response(request, *, status_code: int, code: str, message: str, details: Any = None) -> Response:
    """
    For typed results a view turns into an error without raising
    (details may carry nulls and lists that DRF exceptions would stringify).
    """
    return Response(
        build_error_envelope(request=request, code=code, message=message, details=details),
        status=status_code,
    )


class ConflictError(APIException):
    """
    409 Conflict that still flows through the global exception handler.
    Use when business rules block an action.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = "Conflict."
    default_code = "conflict"

    def __init__(self, detail=None, code=None):
        super().__init__(detail=detail or self.default_detail, code=code or self.default_code)


class InvalidTransitionError(ConflictError):
    """Status change that the lifecycle does not allow (no skipping, no going back)."""
    default_detail = "This status change is not allowed."
    default_code = "invalid_transition"


class InsufficientStockError(ConflictError):
    """Dispense asks for more units than the usable batches hold."""
    default_detail = "Not enough stock to dispense this quantity."
    default_code = "insufficient_stock"


class PaymentRequiredError(APIException):
    """
    Lab workflow step blocked until the linked bill is fully paid.
    Raised before any write happens.
    """
    status_code = status.HTTP_402_PAYMENT_REQUIRED
    default_detail = "Payment required before this lab order can proceed."
    default_code = "payment_required"


def _code_for(exc: Exception, http_status: int) -> str:
    if isinstance(exc, ValidationError):
        return "validation_error"
    if isinstance(exc, NotAuthenticated):
        return "not_authenticated"
    if isinstance(exc, PermissionDenied):
        return "permission_denied"
    if isinstance(exc, Http404):
        return "not_found"
    if isinstance(exc, APIException):
        return getattr(exc, "default_code", "api_error") or "api_error"
    if http_status >= 500:
        return "server_error"
    return "error"


def api_exception_handler(exc: Exception, context: dict[str, Any]):
    request = context.get("request")

    # Scoped .get() misses surface as 404, same as DRF's get_object_or_404.
    from django.core.exceptions import ObjectDoesNotExist

    if isinstance(exc, ObjectDoesNotExist):
        exc = Http404(str(exc))

    response = drf_exception_handler(exc, context)

    # Truly unhandled error
    if response is None:
        return Response(
            build_error_envelope(
                request=request,
                code="server_error",
                message="Unexpected server error.",
                details=None,
            ),
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    http_status = response.status_code
    code = _code_for(exc, http_status)

    data = response.data

    # Message + details rules:
    # 1) {"detail": "..."} only -> message=detail, details=None
    # 2) {"detail": "...", ...} -> message=detail, details={...without detail}
    # 3) Otherwise -> message="Request failed.", details=data
    message = "Request failed."
    details = data

    if isinstance(data, dict) and "detail" in data:
        message = str(data.get("detail"))
        rest = {k: v for k, v in data.items() if k != "detail"}
        details = rest or None
    elif isinstance(data, list) and len(data) == 1:
        message = str(data[0])
        details = None

    return Response(
        build_error_envelope(
            request=request,
            code=code,
            message=message,
            details=details,
        ),
        status=http_status,
        headers=response.headers,
    )
