"""Owner account actions: sign-in, profile, branding, password and billing."""

import asyncio
from datetime import datetime, timezone
from typing import Any, Optional

from structlog import get_logger

from src.aws import LogoStorage, LogoUploadError
from src.aws.logo_storage import ALLOWED_CONTENT_TYPES
from src.clients import (
    AuthClient,
    AuthClientError,
    InvalidCredentialsError,
    NotAuthenticatedError,
    RedisSessionStore,
    StoreAuthenticationError,
    StoreClient,
    StoreClientError,
    StoreQuery,
)
from src.config import settings
from src.models.store import OwnerKyc, OwnerProfile
from src.services.actions import (
    SIGN_IN_MESSAGE,
    ActionResult,
    BillingForm,
    FormValidationError,
    PasswordChangeForm,
    ProfileForm,
    SignInForm,
    validate_form,
)
from src.services.entity_fetcher import EntityFetcher
from src.services.session import OwnerIdentity

logger = get_logger(__name__)

# Auth service message fragment -> message shown to the owner
SIGN_IN_ERRORS = (
    ("Invalid login credentials", "Invalid email or password"),
    ("Email not confirmed", "Please check your email and confirm your account"),
    ("Too many requests", "Too many login attempts. Please try again later"),
)


def sign_in_error_message(service_message: str) -> str:
    """Translate an auth service refusal into an owner-facing message."""
    for fragment, message in SIGN_IN_ERRORS:
        if fragment.lower() in (service_message or "").lower():
            return message
    return service_message or "An error occurred during login"


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AccountService:
    """Account and settings actions for the signed-in owner."""

    def __init__(
        self,
        auth_client: Optional[AuthClient] = None,
        store_client: Optional[StoreClient] = None,
        session_store: Optional[RedisSessionStore] = None,
        logo_storage: Optional[LogoStorage] = None,
    ):
        self.auth_client = auth_client or AuthClient()
        self.store_client = store_client or StoreClient()
        self.session_store = session_store
        self._logo_storage = logo_storage

    @property
    def logo_storage(self) -> LogoStorage:
        """Created on first use so report-only callers never build an S3 client."""
        if self._logo_storage is None:
            self._logo_storage = LogoStorage()
        return self._logo_storage

    async def _update_owner(self, identity: OwnerIdentity, values: dict[str, Any]) -> list[dict]:
        return await self.store_client.update(
            StoreQuery("hotel_owners").eq("id", identity.owner_id),
            {**values, "updated_at": _now()},
            identity.access_token,
        )

    async def _verify_password(self, identity: OwnerIdentity, password: str) -> bool:
        """Re-check the owner's password without replacing the current session."""
        try:
            await self.auth_client.sign_in_with_password(identity.email or "", password)
        except InvalidCredentialsError:
            return False
        return True

    async def _remove_logo_object(self, key: Optional[str]) -> None:
        """Best-effort delete of a logo object no profile points at."""
        if not key:
            return
        try:
            await asyncio.to_thread(self.logo_storage.remove, key)
        except LogoUploadError as e:
            logger.warning("Failed to remove logo object", key=key, error=str(e))

    async def sign_in(self, email: str, password: str) -> ActionResult:
        """Sign in with email and password.

        On success the session is cached and the owner profile loaded.
        ``data`` holds the session, the profile (None when the owner has not
        set one up yet) and ``profile_setup_required``.
        """
        try:
            form = validate_form(SignInForm, {"email": email, "password": password})
        except FormValidationError as e:
            return e.to_result()

        try:
            session = await self.auth_client.sign_in_with_password(form.email, form.password)
        except InvalidCredentialsError as e:
            message = sign_in_error_message(str(e))
            return ActionResult.failure(message, title="Login Failed", field_errors={"general": message})
        except AuthClientError as e:
            logger.error("Sign-in failed", error=str(e))
            return ActionResult.failure("An error occurred during login", title="Login Failed")

        if self.session_store is not None:
            await self.session_store.save(session)

        profile: Optional[OwnerProfile] = None
        try:
            fetcher = EntityFetcher(self.store_client, session.access_token)
            profile = await fetcher.fetch_owner_profile(session.user.id)
        except StoreClientError as e:
            logger.warning("Failed to load owner profile", owner_id=session.user.id, error=str(e))

        return ActionResult.success(
            "Welcome back to WriteMyTrip",
            title="Login Successful!",
            data={
                "session": session,
                "profile": profile,
                "profile_setup_required": profile is None,
            },
        )

    async def sign_out(self, identity: OwnerIdentity) -> ActionResult:
        """Revoke the session and forget the cached copy."""
        try:
            await self.auth_client.sign_out(identity.access_token)
        except AuthClientError as e:
            logger.error("Sign-out failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to logout. Please try again.")
        finally:
            if self.session_store is not None:
                await self.session_store.clear()
        return ActionResult.success("Signed out")

    async def load_settings(self, identity: OwnerIdentity) -> ActionResult:
        """Profile and billing details for the settings screen."""
        fetcher = EntityFetcher(self.store_client, identity.access_token)
        try:
            profile = await fetcher.fetch_owner_profile(identity.owner_id)
            kyc = await fetcher.fetch_owner_kyc(identity.owner_id)
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to load settings", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to load user data")
        return ActionResult.success("Loaded", data={"profile": profile, "billing": kyc})

    async def update_profile(self, identity: OwnerIdentity, **fields: Any) -> ActionResult:
        try:
            form = validate_form(ProfileForm, fields)
        except FormValidationError as e:
            return e.to_result()

        try:
            await self._update_owner(identity, form.model_dump())
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Profile update failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to update profile")
        return ActionResult.success("Profile updated successfully")

    async def update_branding(
        self, identity: OwnerIdentity, business_name: Optional[str]
    ) -> ActionResult:
        """Set the business name shown on the dashboard."""
        try:
            await self._update_owner(
                identity, {"business_name": (business_name or "").strip() or None}
            )
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Customization update failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to update customization")
        return ActionResult.success("Customization updated successfully")

    async def upload_logo(
        self, identity: OwnerIdentity, content: bytes, content_type: str
    ) -> ActionResult:
        """Store a new logo, point the profile at it and remove the previous one."""
        if len(content) > settings.storage.max_logo_bytes:
            return ActionResult.failure(
                "File size must be less than 5MB", field_errors={"logo": "File size must be less than 5MB"}
            )
        if content_type not in ALLOWED_CONTENT_TYPES:
            return ActionResult.failure(
                "Logo must be a PNG, JPEG, WebP or GIF image",
                field_errors={"logo": "Unsupported image type"},
            )

        fetcher = EntityFetcher(self.store_client, identity.access_token)
        try:
            profile = await fetcher.fetch_owner_profile(identity.owner_id)
            logo_url = await asyncio.to_thread(
                self.logo_storage.upload, identity.owner_id, content, content_type
            )
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except (StoreClientError, LogoUploadError) as e:
            logger.error("Logo upload failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to upload logo")

        new_key = self.logo_storage.key_from_url(logo_url)
        try:
            await self._update_owner(identity, {"logo_url": logo_url})
        except StoreClientError as e:
            logger.error("Logo upload failed", owner_id=identity.owner_id, error=str(e))
            # The profile still points at the previous logo
            await self._remove_logo_object(new_key)
            if isinstance(e, StoreAuthenticationError):
                return ActionResult.failure(SIGN_IN_MESSAGE)
            return ActionResult.failure("Failed to upload logo")

        old_key = self.logo_storage.key_from_url(profile.logo_url if profile else None)
        if old_key != new_key:
            await self._remove_logo_object(old_key)

        return ActionResult.success("Logo uploaded successfully", data={"logo_url": logo_url})

    async def remove_logo(self, identity: OwnerIdentity) -> ActionResult:
        fetcher = EntityFetcher(self.store_client, identity.access_token)
        try:
            profile = await fetcher.fetch_owner_profile(identity.owner_id)
            if profile is None or not profile.logo_url:
                return ActionResult.failure("No logo to remove")

            key = self.logo_storage.key_from_url(profile.logo_url)
            if key:
                await asyncio.to_thread(self.logo_storage.remove, key)
            await self._update_owner(identity, {"logo_url": None})
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except (StoreClientError, LogoUploadError) as e:
            logger.error("Logo removal failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to remove logo")
        return ActionResult.success("Logo removed successfully")

    async def change_password(
        self,
        identity: OwnerIdentity,
        current_password: str,
        new_password: str,
        confirm_password: str,
    ) -> ActionResult:
        """Change the password after re-verifying the current one."""
        try:
            form = validate_form(
                PasswordChangeForm,
                {
                    "current_password": current_password,
                    "new_password": new_password,
                    "confirm_password": confirm_password,
                },
            )
        except FormValidationError as e:
            return e.to_result()

        try:
            if not await self._verify_password(identity, form.current_password):
                return ActionResult.failure(
                    "Current password is incorrect",
                    field_errors={"current_password": "Current password is incorrect"},
                )
            await self.auth_client.update_password(identity.access_token, form.new_password)
        except NotAuthenticatedError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except AuthClientError as e:
            logger.error("Password update failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to update password")

        return ActionResult.success("Password updated successfully")

    async def save_billing(
        self, identity: OwnerIdentity, password: str, **fields: Any
    ) -> ActionResult:
        """Upsert payout bank and PAN details after password re-confirmation.

        Nothing is written when the submitted details match what is stored.
        """
        try:
            form = validate_form(BillingForm, fields)
        except FormValidationError as e:
            return e.to_result()

        fetcher = EntityFetcher(self.store_client, identity.access_token)
        try:
            current = await fetcher.fetch_owner_kyc(identity.owner_id)
        except StoreAuthenticationError:
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except StoreClientError as e:
            logger.error("Failed to load billing details", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure("Failed to load user data")

        stored = BillingForm(**current.model_dump()) if current else BillingForm()
        if form == stored:
            return ActionResult.failure(
                "No changes detected in billing information", title="No Changes"
            )

        if not password:
            return ActionResult.failure(
                "Please enter your password to confirm changes",
                field_errors={"password": "Password is required"},
            )

        try:
            if not await self._verify_password(identity, password):
                return ActionResult.failure(
                    "Password is incorrect", field_errors={"password": "Password is incorrect"}
                )
            saved = await self.store_client.insert(
                "owner_kyc",
                [{**form.model_dump(), "user_id": identity.owner_id, "updated_at": _now()}],
                identity.access_token,
                on_conflict="user_id",
            )
        except (NotAuthenticatedError, StoreAuthenticationError):
            return ActionResult.failure(SIGN_IN_MESSAGE)
        except (AuthClientError, StoreClientError) as e:
            logger.error("Billing update failed", owner_id=identity.owner_id, error=str(e))
            return ActionResult.failure(f"Failed to update billing information: {str(e)}")

        logger.info("Billing details saved", owner_id=identity.owner_id)
        return ActionResult.success(
            "Billing information updated successfully",
            data=OwnerKyc(**saved[0]) if saved else None,
        )
