"""Authentication: verify Keycloak access tokens and produce a Principal."""
import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jwt import PyJWKClient
from jwt.exceptions import PyJWKClientConnectionError

from core.config import Settings, get_settings
from schemas.principal import Principal

logger = logging.getLogger(__name__)


# HTTP Bearer token scheme
security = HTTPBearer(auto_error=False)

# Cache for JWKS client (reuse across requests)
_jwks_clients: dict[str, PyJWKClient] = {}


def get_jwks_client(settings: Settings) -> PyJWKClient:
    """Get or create a cached JWKS client for the given settings."""
    if settings.keycloak_jwks_url not in _jwks_clients:
        _jwks_clients[settings.keycloak_jwks_url] = PyJWKClient(
            settings.keycloak_jwks_url,
            cache_jwk_set=True,
            lifespan=3600,  # Cache keys for 1 hour
        )
    return _jwks_clients[settings.keycloak_jwks_url]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def decode_jwt(token: str, settings: Settings) -> dict:
    """
    Decode and validate an access token issued by the Keycloak realm.

    Raises:
        HTTPException: If token is invalid, expired, or has wrong audience/issuer.
    """
    try:
        jwks_client = get_jwks_client(settings)
        signing_key = jwks_client.get_signing_key_from_jwt(token)

        return jwt.decode(
            token,
            signing_key.key,
            algorithms=["RS256"],
            audience=settings.keycloak_audience,
            issuer=settings.keycloak_issuer,
        )

    except PyJWKClientConnectionError as e:
        logger.error("Failed to fetch JWKS from Keycloak: %s", e, exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Could not validate credentials",
        )
    except jwt.ExpiredSignatureError:
        raise _unauthorized("Token has expired")
    except jwt.InvalidAudienceError:
        raise _unauthorized("Invalid audience")
    except jwt.InvalidIssuerError:
        raise _unauthorized("Invalid issuer")
    except jwt.PyJWTError as e:
        # Log full details for debugging (server-side only)
        logger.warning("JWT validation failed: %s", e, exc_info=True)
        raise _unauthorized("Invalid token")


def extract_roles(claims: dict) -> frozenset[str]:
    """Collect realm roles from the `realm_access.roles` claim."""
    realm_access = claims.get("realm_access") or {}
    roles = realm_access.get("roles") or []
    return frozenset(role for role in roles if isinstance(role, str))


def principal_from_claims(claims: dict, settings: Settings) -> Principal:
    """
    Build the Principal from verified token claims.

    Raises:
        HTTPException: If the token has no `sub` claim.
    """
    subject_id = claims.get("sub")
    if not subject_id:
        raise _unauthorized("Invalid token: missing sub claim")
    return Principal(
        subject_id=subject_id,
        roles=extract_roles(claims),
        admin_role=settings.admin_role,
    )


def get_dev_principal(settings: Settings) -> Principal:
    """Principal used in DEV_MODE."""
    return Principal(
        subject_id=settings.dev_subject_id,
        roles=settings.dev_roles,
        admin_role=settings.admin_role,
    )


async def get_current_principal(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    settings: Settings = Depends(get_settings),
) -> Principal:
    """
    Dependency that verifies the bearer token and returns the caller's Principal.

    In DEV_MODE, bypasses verification and returns the development principal.
    """
    if settings.dev_mode:
        return get_dev_principal(settings)

    if credentials is None:
        raise _unauthorized("Not authenticated")

    claims = decode_jwt(credentials.credentials, settings)
    return principal_from_claims(claims, settings)
