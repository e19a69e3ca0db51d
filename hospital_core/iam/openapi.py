# hospital_core/iam/openapi.py
from drf_spectacular.extensions import OpenApiAuthenticationExtension
from drf_spectacular.plumbing import build_bearer_security_scheme_object


class CookieOrHeaderJWTAuthenticationScheme(OpenApiAuthenticationExtension):
    target_class = "hospital_core.iam.auth.CookieOrHeaderJWTAuthentication"
    name = "BearerOrCookieJWT"

    def get_security_definition(self, auto_schema):
        scheme = build_bearer_security_scheme_object(
            header_name="AUTHORIZATION",
            token_prefix="Bearer",
            bearer_format="JWT",
        )
        scheme["description"] = (
            "Staff access token from /auth/login/, sent as `Authorization: Bearer <token>` "
            "or carried by the HttpOnly `hc_access` cookie. Hospital-scoped endpoints also "
            "need `X-Hospital-Id` naming a hospital the user is a member of."
        )
        return scheme
