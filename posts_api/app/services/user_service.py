"""
Business logic for accounts.

``UserService`` handles signup, login and profile lookup against an
``EntityStore``.  Password hashing is CPU-bound and deliberately slow,
so it runs in the thread pool rather than on the event loop, and no
store lock is held while it runs.

Signup claims the email in the ``EmailIndex`` with an atomic
insert-if-absent before inserting the user.  If two signups race for
the same email exactly one reservation succeeds; the other request
fails with ``UserAlreadyExists``.  Should the user insert itself fail,
the reservation is released again so the index never points at a
user that does not exist.
"""

import logging
import uuid
from datetime import datetime
from typing import Callable

from fastapi.concurrency import run_in_threadpool

from ..core.errors import InvalidCredentials, NotFound, UserAlreadyExists
from ..core.security import DEFAULT_ITERATIONS, TokenIdentity, TokenService, hash_password, verify_password
from ..core.store import EntityStore, User, utc_now
from ..schemas.user import AuthResponse, LoginRequest, SignupRequest, UserRead

logger = logging.getLogger(__name__)


class UserService:
    """Signup, login and profile operations."""

    def __init__(
        self,
        store: EntityStore,
        tokens: TokenService,
        hash_iterations: int = DEFAULT_ITERATIONS,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self.store = store
        self.tokens = tokens
        self.hash_iterations = hash_iterations
        self._clock = clock

    async def signup(self, data: SignupRequest) -> AuthResponse:
        """Create a user and return it with a fresh token.

        Raises ``UserAlreadyExists`` if the email is taken.
        """
        # Cheap early exit; the reservation below is what actually
        # guarantees uniqueness.
        if self.store.email_index.lookup(data.email) is not None:
            raise UserAlreadyExists()

        password_hash = await run_in_threadpool(hash_password, data.password, self.hash_iterations)
        user = User(
            id=uuid.uuid4(),
            email=data.email,
            username=data.username,
            password_hash=password_hash,
            created_at=self._clock(),
        )
        token = self.tokens.issue(user.id, user.email)

        if not self.store.email_index.reserve(user.email, user.id):
            raise UserAlreadyExists()
        try:
            self.store.users.insert(user.id, user)
        except Exception:
            self.store.email_index.release(user.email, user.id)
            raise

        logger.info("New user registered: %s (%s)", user.email, user.id)
        return AuthResponse(token=token, user=UserRead.model_validate(user))

    async def login(self, data: LoginRequest) -> AuthResponse:
        """Check credentials and return a new token.

        Unknown email and wrong password both raise
        ``InvalidCredentials``.
        """
        user = self.store.find_user_by_email(data.email)
        if user is None:
            raise InvalidCredentials()
        valid = await run_in_threadpool(verify_password, data.password, user.password_hash)
        if not valid:
            logger.info("Failed login for %s", data.email)
            raise InvalidCredentials()

        token = self.tokens.issue(user.id, user.email)
        logger.info("User logged in: %s", user.email)
        return AuthResponse(token=token, user=UserRead.model_validate(user))

    async def get_profile(self, identity: TokenIdentity) -> UserRead:
        user = self.store.users.get(identity.user_id)
        if user is None:
            raise NotFound()
        return UserRead.model_validate(user)
