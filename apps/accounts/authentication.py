# apps/accounts/authentication.py

from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import InvalidToken, AuthenticationFailed
from django.utils.translation import gettext_lazy as _


class CustomJWTAuthentication(JWTAuthentication):
    """
    JWT Authentication with active user check.
    """

    def authenticate(self, request):
        header = self.get_header(request)
        if header is None:
            return None

        raw_token = self.get_raw_token(header)
        if raw_token is None:
            return None

        try:
            validated_token = self.get_validated_token(raw_token)
        except InvalidToken:
            raise AuthenticationFailed(_('Token is invalid or expired.'))

        user = self.get_user(validated_token)

        if not user or not user.is_active:
            raise AuthenticationFailed(_('User account is disabled.'))

        # Update last login IP
        remote_addr = request.META.get('REMOTE_ADDR')
        if remote_addr and user.last_login_ip != remote_addr:
            user.last_login_ip = remote_addr
            user.save(update_fields=['last_login_ip'])

        return (user, validated_token)
