"""
DRF authentication that turns a bearer token into an AuthContext.
"""

from rest_framework import authentication, exceptions

from .context import AuthContext


class SessionTokenAuthentication(authentication.BaseAuthentication):
    """
    ``Authorization: Bearer <token>``.

    On success ``request.user`` is the Principal and ``request.auth`` the
    AuthContext that views hand to the workflows.
    """

    keyword = "Bearer"

    def authenticate(self, request):
        auth = authentication.get_authorization_header(request).split()
        if not auth or auth[0].lower() != self.keyword.lower().encode():
            return None

        if len(auth) != 2:
            raise exceptions.AuthenticationFailed("Invalid authorization header")

        try:
            token = auth[1].decode()
        except UnicodeError:
            raise exceptions.AuthenticationFailed("Invalid token characters")

        ctx = AuthContext.from_token(token)
        if ctx is None:
            raise exceptions.AuthenticationFailed("Invalid or expired session token")
        return ctx.principal, ctx

    def authenticate_header(self, request):
        return self.keyword
