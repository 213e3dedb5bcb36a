# techpedia/services/auth_service.py
import logging
import uuid
from datetime import datetime, timezone

from sqlmodel import Session

from techpedia.core.errors import Conflict, Unauthorized, ValidationError
from techpedia.core.security import (
    REFRESH_TOKEN,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    token_expiry,
    verify_password,
)
from techpedia.models.user import ADMIN, CUSTOMER, User
from techpedia.repositories.token_repo import TokenRepository
from techpedia.repositories.user_repo import UserRepository
from techpedia.schemas.user import (
    AccessTokenResponse,
    AdminCreate,
    AuthResponse,
    LoginRequest,
    MeResponse,
    RegisterRequest,
    UserRead,
)
from techpedia.services.cart_service import CartService
from techpedia.services.order_service import OrderService

logger = logging.getLogger(__name__)

CUSTOMER_HASH_ROUNDS = 10
ADMIN_HASH_ROUNDS = 12
RECENT_ORDERS = 5


class AuthService:
    """
    Business logic for accounts and sessions.

    Responsibilities:
      - registration / admin bootstrap with hashed passwords
      - issuing access and refresh tokens
      - logout via the token revocation store
      - the "me" view (customers also see recent orders and cart)
    """

    def __init__(
        self,
        user_repo: UserRepository,
        token_repo: TokenRepository,
        cart_service: CartService,
        order_service: OrderService,
    ):
        self.user_repo = user_repo
        self.token_repo = token_repo
        self.cart_service = cart_service
        self.order_service = order_service

    # ----- Registration / login -----

    def register(self, session: Session, payload: RegisterRequest) -> AuthResponse:
        """
        Create a CUSTOMER account and log it in.

        Raises:
            ValidationError: if the email is already registered.
        """
        if self.user_repo.get_by_email(session, payload.email):
            raise ValidationError("User with this email already exists")

        user = self.user_repo.create(
            session,
            User(
                name=payload.name,
                email=payload.email,
                password=hash_password(payload.password, CUSTOMER_HASH_ROUNDS),
                role=CUSTOMER,
            ),
        )
        logger.info("Registered customer %s", user.id)
        return AuthResponse(
            user=UserRead.model_validate(user),
            access_token=create_access_token(user.id, user.email, user.role),
        )

    def login(self, session: Session, payload: LoginRequest) -> AuthResponse:
        user = self.user_repo.get_by_email(session, payload.email)
        if user is None or not verify_password(payload.password, user.password):
            raise Unauthorized("Invalid email or password")

        return AuthResponse(
            user=UserRead.model_validate(user),
            access_token=create_access_token(user.id, user.email, user.role),
            refresh_token=create_refresh_token(user.id),
        )

    def refresh(self, session: Session, refresh_token: str | None) -> AccessTokenResponse:
        """
        Exchange a refresh token for a new access token.

        Raises:
            Unauthorized: missing, invalid, revoked or expired refresh token,
                or the user no longer exists.
        """
        if not refresh_token:
            raise Unauthorized("Refresh token not found")
        if self.token_repo.is_revoked(session, refresh_token, datetime.now(timezone.utc)):
            raise Unauthorized("Invalid refresh token")

        payload = decode_token(refresh_token, REFRESH_TOKEN)
        try:
            user_id = uuid.UUID(payload.get("sub", ""))
        except ValueError:
            raise Unauthorized("Invalid refresh token")

        user = self.user_repo.get_by_id(session, user_id)
        if user is None:
            raise Unauthorized("Invalid refresh token")

        return AccessTokenResponse(
            access_token=create_access_token(user.id, user.email, user.role)
        )

    # ----- Logout -----

    def logout(
        self,
        session: Session,
        user: User,
        access_token: str,
        refresh_token: str | None = None,
    ) -> None:
        """
        Revoke the caller's access token (and refresh token, if sent) until
        their own expiry, then purge entries that have already expired.
        """
        self._revoke(session, user.id, decode_token(access_token), access_token)

        if refresh_token and self.token_repo.get(session, refresh_token) is None:
            try:
                payload = decode_token(refresh_token, REFRESH_TOKEN)
            except Unauthorized:
                # already unusable; nothing to revoke
                payload = None
            if payload is not None:
                self._revoke(session, user.id, payload, refresh_token)

        self.sweep_expired_tokens(session)
        logger.info("User %s logged out", user.id)

    def _revoke(self, session: Session, user_id: uuid.UUID, payload: dict, token: str) -> None:
        self.token_repo.revoke(session, token, user_id, token_expiry(payload))

    def sweep_expired_tokens(self, session: Session) -> int:
        removed = self.token_repo.sweep_expired(session, datetime.now(timezone.utc))
        if removed:
            logger.info("Swept %d expired revoked tokens", removed)
        return removed

    # ----- Current user -----

    def me(self, session: Session, user: User) -> MeResponse:
        """
        Profile of the caller. Customers also get their last
        RECENT_ORDERS orders (with items) and current cart.
        """
        me = MeResponse.model_validate(user, from_attributes=True)
        if user.role == CUSTOMER:
            me.orders = self.order_service.recent_user_orders(session, user.id, RECENT_ORDERS)
            me.cart = self.cart_service.list_items(session, user.id)
        return me

    # ----- Admin bootstrap -----

    def create_admin(self, session: Session, payload: AdminCreate) -> User:
        """
        Create another ADMIN account (admin only).

        Raises:
            Conflict: if the email is already registered.
        """
        if self.user_repo.get_by_email(session, payload.email):
            raise Conflict("Email already registered")

        admin = self.user_repo.create(
            session,
            User(
                name=payload.name,
                email=payload.email,
                password=hash_password(payload.password, ADMIN_HASH_ROUNDS),
                role=ADMIN,
            ),
        )
        logger.info("Admin %s created", admin.id)
        return admin

    def list_admins(self, session: Session) -> list[User]:
        users, _ = self.user_repo.list_filtered(session, role=ADMIN, limit=1000)
        return users
