"""
GitHub App authentication: App JWTs and installation access tokens
"""

from .app_jwt import AppJwt, AppJwtSigner
from .installation_token import InstallationToken
from .token_cache import TokenCache

__all__ = ["AppJwt", "AppJwtSigner", "InstallationToken", "TokenCache"]
