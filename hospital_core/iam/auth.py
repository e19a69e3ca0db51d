# hospital_core/iam/auth.py
from __future__ import annotations

from django.conf import settings
from rest_framework_simplejwt.authentication import JWTAuthentication

from hospital_core.iam.scope import apply_scope_from_headers


def access_cookie_name() -> str:
    return settings.SIMPLE_JWT.get("AUTH_COOKIE", "hc_access")


class CookieOrHeaderJWTAuthentication(JWTAuthentication):
    """
    Staff JWT from the Authorization header (API clients) or the HttpOnly
    access cookie (the ward and desk browsers). The header wins when both
    are sent.

    Once the user is known, X-Hospital-Id is checked against their
    memberships and stamped on the request as the hospital scope.
    """

    def _raw_token_from_request(self, request):
        header = self.get_header(request)
        if header is not None:
            return self.get_raw_token(header)
        return request.COOKIES.get(access_cookie_name())

    def authenticate(self, request):
        raw_token = self._raw_token_from_request(request)
        if raw_token is None:
            return None

        validated_token = self.get_validated_token(raw_token)
        user = self.get_user(validated_token)

        apply_scope_from_headers(request, user=user)
        return user, validated_token
