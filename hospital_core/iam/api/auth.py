# hospital_core/iam/api/auth.py

from __future__ import annotations

from datetime import timedelta
from typing import Any

from django.conf import settings
from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import AllowAny, IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView
from rest_framework_simplejwt.serializers import TokenObtainPairSerializer, TokenRefreshSerializer

from hospital_core.iam.api.schema_serializers import DetailResponseSerializer, LoginRequestSerializer


def _seconds(value: Any) -> int:
    """
    JWT lifetime setting in seconds (timedelta or number).
    """
    if isinstance(value, timedelta):
        return int(value.total_seconds())
    return int(value)


def _cookie_names() -> tuple[str, str]:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    return jwt_cfg.get("AUTH_COOKIE", "hc_access"), jwt_cfg.get("AUTH_COOKIE_REFRESH", "hc_refresh")


def _set_auth_cookies(response: Response, *, access: str, refresh: str) -> None:
    jwt_cfg = getattr(settings, "SIMPLE_JWT", {}) or {}
    access_name, refresh_name = _cookie_names()

    secure = bool(jwt_cfg.get("AUTH_COOKIE_SECURE", False))
    samesite = jwt_cfg.get("AUTH_COOKIE_SAMESITE", "Lax")

    response.set_cookie(
        access_name,
        access,
        max_age=_seconds(jwt_cfg.get("ACCESS_TOKEN_LIFETIME", timedelta(minutes=10))),
        httponly=True,
        secure=secure,
        samesite=samesite,
        path="/",
    )
    response.set_cookie(
        refresh_name,
        refresh,
        max_age=_seconds(jwt_cfg.get("REFRESH_TOKEN_LIFETIME", timedelta(days=14))),
        httponly=True,
        secure=secure,
        samesite=samesite,
        path="/",
    )


def _clear_auth_cookies(response: Response) -> None:
    access_name, refresh_name = _cookie_names()
    response.delete_cookie(access_name, path="/")
    response.delete_cookie(refresh_name, path="/")


class LoginView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=LoginRequestSerializer, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        serializer = TokenObtainPairSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        res = Response({"detail": "login ok"}, status=status.HTTP_200_OK)
        _set_auth_cookies(
            res,
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data["refresh"],
        )
        return res


class RefreshView(APIView):
    permission_classes = [AllowAny]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        _, refresh_name = _cookie_names()
        refresh = request.COOKIES.get(refresh_name) or request.data.get("refresh")

        serializer = TokenRefreshSerializer(data={"refresh": refresh})
        serializer.is_valid(raise_exception=True)

        res = Response({"detail": "refreshed"}, status=status.HTTP_200_OK)
        _set_auth_cookies(
            res,
            access=serializer.validated_data["access"],
            refresh=serializer.validated_data.get("refresh", refresh),
        )
        return res


class LogoutView(APIView):
    permission_classes = [IsAuthenticated]

    @extend_schema(request=None, responses={200: DetailResponseSerializer}, tags=["IAM"])
    def post(self, request):
        res = Response({"detail": "logged out"}, status=status.HTTP_200_OK)
        _clear_auth_cookies(res)
        return res
