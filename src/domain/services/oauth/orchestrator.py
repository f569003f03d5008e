"""OAuth Orchestrator.

Drives one login through its fixed sequence: state validation, code
exchange, profile fetch, reconciliation and credential issuance. The flow is
identical for every authorization-code provider, the provider-specific parts
live behind `IProviderAdapter`. Any failure ends the flow; the client starts
over from a fresh authorization URL.
"""

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from structlog import get_logger

from src.core.exceptions import InvalidStateError, UnsupportedProviderError
from src.domain.entities.user import User
from src.domain.interfaces.oauth import IProviderAdapter, IStateStore, ITelegramVerifier
from src.domain.interfaces.token_management import ICredentialIssuer
from src.domain.services.oauth.reconciliation import IdentityReconciler
from src.domain.value_objects.credentials import CredentialPair
from src.domain.value_objects.oauth_provider import OAuthProviderType
from src.domain.value_objects.oauth_state import OAuthState

logger = get_logger(__name__)


@dataclass(frozen=True)
class LoginResult:
    account: User
    credentials: CredentialPair


class OAuthOrchestrator:
    """Coordinates the state store, provider adapters, reconciliation and issuing.

    Attributes:
        state_store: Issues and consumes single-use states.
        adapters: One adapter per configured authorization-code provider.
        reconciler: Maps external profiles to local accounts.
        issuer: Mints the application's credentials.
        telegram_verifier: Present only when a Telegram bot is configured.
    """

    def __init__(
        self,
        state_store: IStateStore,
        adapters: Mapping[OAuthProviderType, IProviderAdapter],
        reconciler: IdentityReconciler,
        issuer: ICredentialIssuer,
        telegram_verifier: Optional[ITelegramVerifier] = None,
    ):
        self.state_store = state_store
        self.adapters = dict(adapters)
        self.reconciler = reconciler
        self.issuer = issuer
        self.telegram_verifier = telegram_verifier

    def adapter_for(self, provider: str) -> IProviderAdapter:
        """Select the adapter named by a route parameter.

        Raises:
            UnsupportedProviderError: Unknown provider, a provider without a
                code flow, or one that is not configured.
        """
        try:
            provider_type = OAuthProviderType.parse(provider)
        except ValueError as e:
            raise UnsupportedProviderError(f"Unsupported provider: {provider}") from e
        adapter = self.adapters.get(provider_type)
        if adapter is None:
            raise UnsupportedProviderError(f"Provider {provider_type.value} is not available")
        return adapter

    async def build_authorization_url(self, provider: str) -> str:
        adapter = self.adapter_for(provider)
        state = await self.state_store.issue()
        url = await adapter.authorization_url(state.value)
        await logger.ainfo(
            "Authorization URL issued",
            provider=adapter.provider.value,
            state=state.mask_for_logging(),
            step="issued",
        )
        return url

    async def complete_login(
        self,
        provider: str,
        code: str,
        state: str,
        requested_role: Optional[str] = None,
    ) -> LoginResult:
        """Finish an authorization-code login.

        Args:
            provider: Route name of the provider.
            code: Authorization code returned by the provider.
            state: The state echoed back by the provider.
            requested_role: `master` or `client` for first-time accounts.

        Returns:
            LoginResult: The resolved account and its fresh credentials.

        Raises:
            UnsupportedProviderError, InvalidStateError, ProviderExchangeError,
            ProviderProfileError, InvalidIdentityAssertionError,
            EmailAlreadyLinkedError, EmailNotVerifiedError
        """
        adapter = self.adapter_for(provider)
        log = logger.bind(provider=adapter.provider.value, state=self._mask(state))

        await self._consume_state(state)
        await log.ainfo("OAuth state validated", step="state_validated")

        tokens = await adapter.exchange_code(code)
        await log.ainfo("Authorization code exchanged", step="tokens_exchanged")

        profile = await adapter.fetch_profile(tokens)
        await log.ainfo("Profile fetched", step="profile_fetched", **profile.mask_for_logging())

        return await self._finish(profile, requested_role, log)

    async def complete_telegram_login(
        self,
        telegram_id: int,
        payload: Mapping[str, Any],
        requested_role: Optional[str] = None,
    ) -> LoginResult:
        """Finish a Telegram login widget callback.

        Raises:
            UnsupportedProviderError: No Telegram bot is configured.
            TelegramUserNotFoundError: The bot API does not know the user.
        """
        if self.telegram_verifier is None:
            raise UnsupportedProviderError("Provider telegram is not available")
        log = logger.bind(provider=OAuthProviderType.TELEGRAM.value)

        profile = await self.telegram_verifier.verify(telegram_id, payload)
        await log.ainfo("Telegram identity verified", step="profile_fetched")

        return await self._finish(profile, requested_role, log)

    async def _finish(self, profile, requested_role: Optional[str], log) -> LoginResult:
        account = await self.reconciler.resolve(profile, requested_role)
        await log.ainfo("Identity reconciled", step="reconciled", user_id=account.id)

        credentials = await self.issuer.issue(account)
        await log.ainfo("Credentials issued", step="credentials_issued", user_id=account.id)
        return LoginResult(account=account, credentials=credentials)

    async def _consume_state(self, state: str) -> None:
        if not state or not state.strip():
            raise InvalidStateError()
        if not await self.state_store.exists(state):
            raise InvalidStateError()
        # A concurrent callback may have consumed it between the two calls.
        if not await self.state_store.consume(state):
            raise InvalidStateError()

    @staticmethod
    def _mask(state: str) -> str:
        if OAuthState.is_well_formed(state):
            return OAuthState(value=state).mask_for_logging()
        return "***"
