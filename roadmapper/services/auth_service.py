"""
Roadmapper: Authentication
==========================
Credential sign-in, registration and first-login provisioning for
federated (Google / GitHub) identities. Sessions and cookies are handled
by the front end; this module only answers "who is this" and "may they in".
"""

import asyncio
import logging
from typing import Optional

import bcrypt

from roadmapper.core.config import settings
from roadmapper.core.errors import AuthConfigError, SignInError, UserExistsError
from roadmapper.schemas.user import MAX_PASSWORD_BYTES, FederatedProfile, PublicUser, UserRecord
from roadmapper.services.user_service import UserRepository

logger = logging.getLogger(__name__)

CREDENTIALS_PROVIDER = "credentials"
DEFAULT_ROLE = "user"


# ── Passwords ────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, hashed: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        # bcrypt refuses these; no stored hash can match one
        return False
    return bcrypt.checkpw(encoded, hashed.encode("utf-8"))


def _public(user: UserRecord) -> PublicUser:
    return PublicUser(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        role=user.role,
    )


# ── Credentials ──────────────────────────────────────────────────────────────

async def authorize_credentials(
    users: UserRepository,
    email: Optional[str],
    password: Optional[str],
    role: Optional[str] = None,
) -> PublicUser:
    """Check an email/password pair (and the role, when one is given)."""
    if not email or not password:
        raise SignInError("Please provide both email and password")

    user = await users.find_by_email(email, include_password=True)
    if user is None:
        suffix = f" as a {role}" if role else ""
        raise SignInError(f"No account found with this email{suffix}")

    if not user.password:
        # federated-only account
        raise SignInError("Invalid email or password")

    # bcrypt blocks; run it off the event loop
    matched = await asyncio.to_thread(verify_password, password, user.password)
    if not matched:
        raise SignInError("Password did not match")

    if role and user.role != role:
        raise SignInError(
            f"This account is registered as a {user.role}. Please use the correct login option."
        )

    logger.info(f"[AUTH] ✓ Credentials sign-in for {email}")
    return _public(user)


async def register_user(
    users: UserRepository,
    email: str,
    password: str,
    first_name: str = "",
    last_name: str = "",
) -> PublicUser:
    """Create a credentials account. New accounts always get the "user" role."""
    if await users.find_by_email(email) is not None:
        raise UserExistsError()

    hashed = await asyncio.to_thread(hash_password, password)
    created = await users.create(
        UserRecord(
            email=email,
            first_name=first_name,
            last_name=last_name,
            password=hashed,
            role=DEFAULT_ROLE,
        )
    )
    return _public(created)


# ── Federated providers ──────────────────────────────────────────────────────

def _provider_credentials(provider: str) -> Optional[tuple]:
    if provider == "google":
        return settings.GOOGLE_CLIENT_ID, settings.GOOGLE_CLIENT_SECRET
    if provider == "github":
        return settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET
    return None


def split_name(name: Optional[str]) -> tuple:
    parts = (name or "").split(" ")
    first = parts[0] if parts else ""
    last = parts[1] if len(parts) > 1 else ""
    return first, last


async def handle_federated_sign_in(users: UserRepository, profile: FederatedProfile) -> bool:
    """
    Decide whether a sign-in through ``profile.provider`` may proceed.
    The first Google/GitHub login for an email creates a "user" account.
    Unknown providers are refused.
    """
    provider = profile.provider.lower()
    if provider == CREDENTIALS_PROVIDER:
        return True

    credentials = _provider_credentials(provider)
    if credentials is None:
        logger.warning(f"[AUTH] Refused sign-in through unknown provider '{provider}'")
        return False

    client_id, client_secret = credentials
    if not client_id or not client_secret:
        raise AuthConfigError(f"{provider.capitalize()} sign-in is not configured")

    if not profile.email:
        raise SignInError("The identity provider did not share an email address")

    if await users.find_by_email(profile.email) is None:
        first_name, last_name = split_name(profile.name)
        try:
            await users.create(
                UserRecord(
                    email=profile.email,
                    first_name=first_name,
                    last_name=last_name,
                    name=profile.name,
                    image=profile.image,
                    auth_provider_id=profile.id,
                    role=DEFAULT_ROLE,
                )
            )
        except UserExistsError:
            # another request provisioned the same account first
            logger.info(f"[AUTH] {profile.email} already provisioned concurrently")
        else:
            logger.info(f"[AUTH] ✓ Provisioned {provider} user {profile.email}")
    return True
