"""
Security helpers for password hashing, bearer tokens and ownership.

Passwords are hashed with PBKDF2-HMAC-SHA256 using a random 16-byte
salt per call.  The stored digest records the algorithm, iteration
count, salt and hash separated by ``$`` so it can be verified later
even if the configured iteration count changes.

Tokens are compact JSON Web Tokens signed with HMAC-SHA256
(``header.payload.signature``, each part base64url encoded without
padding).  The payload carries the user id as ``sub``, the user's
``email`` and an absolute ``exp`` timestamp.  There is no revocation
list: a token stays valid until it expires.

Any reason a token is rejected (missing header, wrong scheme, bad
signature, expiry) surfaces as the same ``Unauthorized`` error so a
caller cannot tell a forged token from an expired one.
"""

import base64
import hashlib
import hmac
import json
import logging
import os
import time
import uuid
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Header, Request

from .errors import Forbidden, InternalError, Unauthorized
from .store import Post

logger = logging.getLogger(__name__)

PASSWORD_ALGORITHM = "pbkdf2_sha256"
DEFAULT_ITERATIONS = 100_000
BEARER_PREFIX = "Bearer "


# ---------------------------------------------------------------------------
# Password hashing
# ---------------------------------------------------------------------------

def hash_password(password: str, iterations: int = DEFAULT_ITERATIONS) -> str:
    """Hash a password using PBKDF2-HMAC with SHA-256.

    Parameters
    ----------
    password : str
        The plain text password to hash.
    iterations : int
        PBKDF2 work factor.  Higher is slower and harder to brute force.

    Returns
    -------
    str
        ``pbkdf2_sha256$<iterations>$<salt hex>$<hash hex>``.
    """
    try:
        salt = os.urandom(16)
        dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)
    except (ValueError, OverflowError) as exc:
        raise InternalError(f"Password hashing failed: {exc}") from exc
    return f"{PASSWORD_ALGORITHM}${iterations}${salt.hex()}${dk.hex()}"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a stored digest.

    Recomputes the PBKDF2 digest with the stored salt and iteration
    count and compares in constant time.

    Returns
    -------
    bool
        True if the password matches, otherwise False.

    Raises
    ------
    InternalError
        If ``hashed_password`` is not a digest produced by
        ``hash_password``.
    """
    try:
        algorithm, iterations_str, salt_hex, hash_hex = hashed_password.split("$")
        if algorithm != PASSWORD_ALGORITHM:
            raise ValueError(f"unsupported algorithm {algorithm!r}")
        iterations = int(iterations_str)
        if iterations < 1:
            raise ValueError(f"invalid iteration count {iterations}")
        salt = bytes.fromhex(salt_hex)
        stored_hash = bytes.fromhex(hash_hex)
    except ValueError as exc:
        raise InternalError(f"Malformed password digest: {exc}") from exc
    try:
        password_bytes = plain_password.encode("utf-8")
    except UnicodeEncodeError:
        # Unencodable input (lone surrogates) can never match a stored hash.
        return False
    dk = hashlib.pbkdf2_hmac("sha256", password_bytes, salt, iterations)
    return hmac.compare_digest(dk, stored_hash)


# ---------------------------------------------------------------------------
# Tokens
# ---------------------------------------------------------------------------

def _b64_url_encode(data: bytes) -> str:
    """Base64-url encode bytes without padding."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("utf-8")


def _b64_url_decode(data: str) -> bytes:
    """Decode base64-url encoded string, adding padding if necessary."""
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _json_segment(obj: Dict[str, object]) -> str:
    return _b64_url_encode(json.dumps(obj, separators=(",", ":")).encode("utf-8"))


@dataclass(frozen=True)
class TokenIdentity:
    """Identity embedded in a valid token."""

    user_id: uuid.UUID
    email: str


class TokenService:
    """Issue and validate signed, time-limited bearer tokens.

    ``clock`` returns the current time as epoch seconds; tests replace
    it to move past a token's expiry.
    """

    header = {"alg": "HS256", "typ": "JWT"}

    def __init__(
        self,
        secret: str,
        lifetime_seconds: int = 24 * 60 * 60,
        clock: Callable[[], float] = time.time,
    ) -> None:
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret.encode("utf-8")
        self.lifetime_seconds = lifetime_seconds
        self._clock = clock

    def _sign(self, message: bytes) -> bytes:
        return hmac.new(self._secret, message, hashlib.sha256).digest()

    def issue(self, user_id: uuid.UUID, email: str) -> str:
        """Create a token for ``user_id`` expiring ``lifetime_seconds`` from now."""
        payload = {
            "sub": str(user_id),
            "email": email,
            "exp": int(self._clock()) + self.lifetime_seconds,
        }
        try:
            signing_input = f"{_json_segment(self.header)}.{_json_segment(payload)}"
            signature = self._sign(signing_input.encode("utf-8"))
        except (TypeError, ValueError) as exc:
            raise InternalError(f"Token creation failed: {exc}") from exc
        return f"{signing_input}.{_b64_url_encode(signature)}"

    def decode(self, token: str) -> Optional[TokenIdentity]:
        """Verify ``token`` and return its identity, or ``None`` if invalid."""
        parts = token.split(".")
        if len(parts) != 3:
            return None
        header_b64, payload_b64, signature_b64 = parts
        try:
            expected_sig = _b64_url_encode(self._sign(f"{header_b64}.{payload_b64}".encode("utf-8")))
            # Compare the encoded form so that every character of the
            # signature is significant, including base64 padding bits.
            if not hmac.compare_digest(expected_sig.encode("utf-8"), signature_b64.encode("utf-8")):
                return None
            header = json.loads(_b64_url_decode(header_b64).decode("utf-8"))
            payload = json.loads(_b64_url_decode(payload_b64).decode("utf-8"))
            if not isinstance(header, dict) or header.get("alg") != "HS256":
                return None
            if not isinstance(payload, dict):
                return None
            exp = payload.get("exp")
            if not isinstance(exp, int) or exp <= int(self._clock()):
                return None
            email = payload.get("email")
            if not isinstance(email, str):
                return None
            return TokenIdentity(user_id=uuid.UUID(str(payload.get("sub"))), email=email)
        except (ValueError, TypeError, UnicodeDecodeError):
            # binascii.Error and json.JSONDecodeError are ValueErrors.
            return None

    def authenticate(self, authorization: Optional[str]) -> TokenIdentity:
        """Resolve an ``Authorization`` header value to an identity.

        The value must be exactly ``"Bearer "`` followed by the token,
        with no surrounding whitespace.  Anything else is rejected
        without being parsed.

        Raises
        ------
        Unauthorized
            For every kind of failure.
        """
        if not authorization or not authorization.startswith(BEARER_PREFIX):
            raise Unauthorized()
        token = authorization[len(BEARER_PREFIX):]
        if not token or any(ch.isspace() for ch in token):
            raise Unauthorized()
        identity = self.decode(token)
        if identity is None:
            logger.debug("Rejected bearer token")
            raise Unauthorized()
        return identity


# ---------------------------------------------------------------------------
# Authorization policy
# ---------------------------------------------------------------------------

def get_current_identity(
    request: Request,
    authorization: Optional[str] = Header(None),
) -> TokenIdentity:
    """Dependency that authenticates the request's bearer token.

    The raw header is passed to ``TokenService.authenticate`` untouched
    so that the exact ``"Bearer <token>"`` format is enforced.
    """
    tokens: TokenService = request.app.state.tokens
    return tokens.authenticate(authorization)


def ensure_owner(post: Post, identity: TokenIdentity) -> None:
    """Raise ``Forbidden`` unless ``identity`` owns ``post``."""
    if post.user_id != identity.user_id:
        logger.info("User %s denied mutation of post %s", identity.user_id, post.id)
        raise Forbidden()
