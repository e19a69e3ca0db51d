from __future__ import annotations

from django.http import JsonResponse
from django.utils.deprecation import MiddlewareMixin

from hospital_core.common.api.exceptions import build_error_envelope
from hospital_core.iam.scope import INVALID_SCOPE_MSG, MISSING_SCOPE_MSG, META_HOSPITAL, Scope, parse_uuid


class HospitalScopeMiddleware(MiddlewareMixin):
    """
    Enforces hospital scope for API requests.

    Behavior:
      - Enforced for /api/v1/*.
      - For most endpoints: X-Hospital-Id is required (400 if missing).
      - For /me/: the header is OPTIONAL, but if provided it must be valid
        and the user must be a member.
      - Auth endpoints (login/refresh/logout): scope is ignored.
      - Docs/schema/admin endpoints: public.
      - Invalid UUID -> 400, not a member -> 403.
      - On success -> attaches request.scope and request.hospital_id.

    JWT users are only known once DRF authenticates, so this layer mostly
    sees session users; the JWT authentication class applies the same
    checks for token requests.
    """

    ENFORCED_PREFIXES = ("/api/v1/",)

    PUBLIC_PATH_PREFIXES = (
        "/admin/",
        "/api/docs/",
        "/api/schema/",
    )

    AUTH_PATH_SUFFIXES = (
        "/auth/login/",
        "/auth/refresh/",
        "/auth/logout/",
    )

    ALLOW_NO_SCOPE_EXACT_PATHS = ("/api/v1/",)

    ALLOW_NO_SCOPE_SUFFIXES = ("/me/",)

    def _starts_with_any(self, path: str, prefixes: tuple[str, ...]) -> bool:
        return any(path.startswith(p) for p in prefixes)

    def _endswith_any(self, path: str, suffixes: tuple[str, ...]) -> bool:
        return any(path.endswith(s) for s in suffixes)

    def _json_error(self, request, *, status_code: int, code: str, message: str) -> JsonResponse:
        return JsonResponse(
            build_error_envelope(request=request, code=code, message=message, details=None),
            status=status_code,
        )

    def process_request(self, request):
        request.scope = None
        request.hospital_id = None

        path = getattr(request, "path", "") or ""

        if self._starts_with_any(path, self.PUBLIC_PATH_PREFIXES):
            return None

        if not self._starts_with_any(path, self.ENFORCED_PREFIXES):
            return None

        if path in self.ALLOW_NO_SCOPE_EXACT_PATHS:
            return None

        if self._endswith_any(path, self.AUTH_PATH_SUFFIXES):
            return None

        # Unauthenticated here: leave it to DRF authentication.
        user = getattr(request, "user", None)
        if not user or not user.is_authenticated:
            return None

        raw = request.META.get(META_HOSPITAL)

        if not raw:
            if self._endswith_any(path, self.ALLOW_NO_SCOPE_SUFFIXES):
                return None
            return self._json_error(request, status_code=400, code="validation_error", message=MISSING_SCOPE_MSG)

        hospital_id = parse_uuid(raw)
        if hospital_id is None:
            return self._json_error(request, status_code=400, code="validation_error", message=INVALID_SCOPE_MSG)

        from hospital_core.iam.services.membership import is_user_member_of_hospital

        if not is_user_member_of_hospital(user_id=user.id, hospital_id=hospital_id):
            return self._json_error(
                request,
                status_code=403,
                code="permission_denied",
                message="You do not have access to the selected hospital.",
            )

        request.scope = Scope(hospital_id=hospital_id)
        request.hospital_id = hospital_id
        return None
