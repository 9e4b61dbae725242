from typing import Any, Dict, Optional, Protocol

import jwt
from jwcrypto import jwk

from app.core.config import JWTSettings
from app.core.errors import AuthInvalid, AuthMissing


class TokenVerifier(Protocol):
    async def verify(self, token: str) -> Dict[str, Any]: ...


def parse_bearer(authorization: Optional[str]) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise AuthMissing(detail="no Authorization header")
    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token or " " in token:
        raise AuthMissing(detail="Authorization header is not 'Bearer <token>'")
    return token


class JWTVerifier:
    """Verifies identity-provider bearer tokens.

    HS256 tokens are checked with the shared secret; RS256 tokens with a PEM
    public key or a JSON key set (selected by the token's ``kid`` header).
    """

    def __init__(self, cfg: JWTSettings):
        self.cfg = cfg
        self.algorithm = cfg.resolved_algorithm
        self._pem: Optional[bytes] = None
        self._keyset: Optional[jwk.JWKSet] = None
        self._setup_keys()

    def _setup_keys(self):
        if self.cfg.public_key:
            key = jwk.JWK.from_pem(self.cfg.public_key.encode("utf-8"))
            self._pem = key.export_to_pem(private_key=False, password=None)
        elif self.cfg.jwks:
            self._keyset = jwk.JWKSet.from_json(self.cfg.jwks)

    @property
    def configured(self) -> bool:
        if self.algorithm.startswith("HS"):
            return bool(self.cfg.secret)
        return self._pem is not None or self._keyset is not None

    def _decode_key(self, token: str):
        if self.algorithm.startswith("HS"):
            return self.cfg.secret
        if self._pem is not None:
            return self._pem

        kid = jwt.get_unverified_header(token).get("kid")
        keys = list(self._keyset["keys"]) if self._keyset is not None else []
        if kid is not None:
            match = self._keyset.get_key(kid) if self._keyset is not None else None
        else:
            match = keys[0] if len(keys) == 1 else None
        if match is None:
            raise AuthInvalid(detail=f"no verification key for kid {kid!r}")
        return match.export_to_pem(private_key=False, password=None)

    async def verify(self, token: str) -> Dict[str, Any]:
        """Verify and decode a JWT token"""
        if not self.configured:
            raise AuthInvalid(detail="no token verification key configured")
        try:
            return jwt.decode(
                token,
                self._decode_key(token),
                algorithms=[self.algorithm],
                audience=self.cfg.audience,
                issuer=self.cfg.issuer,
                options={
                    "verify_aud": self.cfg.audience is not None,
                    "verify_iss": self.cfg.issuer is not None,
                    "require": ["exp"],
                },
            )
        except jwt.ExpiredSignatureError as e:
            raise AuthInvalid("Token has expired", detail=str(e)) from e
        except jwt.PyJWTError as e:
            raise AuthInvalid(detail=f"Invalid token: {e}") from e

