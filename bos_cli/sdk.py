"""
Bankrs OS SDK - session clients with typed operations.

The API has three nested session levels. BOSClient is anonymous and hands out
a DevClient on developer login, or an AppClient for an application id. An
AppClient hands out a UserClient on user login. Each client groups its
operations into sub-clients, all built on top of the core APIClient.
"""

import builtins
import time
from collections.abc import Iterable, Iterator
from datetime import date, datetime
from typing import Any

from bos_cli.core.client import APIClient, APIError, ValidationError, escape, job_path
from bos_cli.core.logging import get_logger
from bos_cli.core.types import (
    Access,
    Account,
    ApplicationKey,
    ApplicationMetadata,
    ApplicationSettings,
    Category,
    ChallengeAnswer,
    Credential,
    CredentialProvider,
    DeletedUser,
    DeveloperProfile,
    DevUserInfo,
    IBANDetails,
    Job,
    JobStatus,
    MerchantsStats,
    MoneyAmount,
    PaginatedResponse,
    Provider,
    ProviderSearchResult,
    ProvidersStats,
    RecurrenceRule,
    RecurringTransfer,
    RepeatedTransaction,
    RequestsStats,
    ResetUsersResponse,
    Transaction,
    Transfer,
    TransferAddress,
    TransferIntent,
    TransfersStats,
    TransferType,
    UserListPage,
    UsersStats,
    UserToken,
    Webhook,
    WebhookTestResult,
)

log = get_logger(__name__)


def _answers(answers: Iterable[ChallengeAnswer] | None) -> builtins.list[dict[str, Any]]:
    return [a.to_dict() for a in answers or []]


def _date_param(value: date | str | None) -> str | None:
    if value is None or isinstance(value, str):
        return value
    return value.strftime("%Y-%m-%d")


class BOSClient:
    """
    Anonymous Bankrs OS API client.

    Example:
        client = BOSClient(addr="api.sandbox.bankrs.com")

        # Developer session
        dev = client.login("dev@example.com", "secret")
        apps = dev.applications.list()

        # User session within an application
        user = client.with_application_id(apps[0].application_id).users.login("alice", "secret")
        job = user.accesses.add("DE-BIN-BLZ-12345678", answers)
        status = user.jobs.wait(job.uri)

    """

    def __init__(
        self,
        addr: str | None = None,
        user_agent: str | None = None,
        environment: str | None = None,
        client_id: str | None = None,
        timeout: float | None = None,
        insecure: bool | None = None,
        client: APIClient | None = None,
    ):
        """
        Initialize the anonymous client.

        Args:
            addr: API host (or BOS_ADDR env var)
            user_agent: Extra text appended to the User-Agent header
            environment: X-Environment header value (or BOS_ENVIRONMENT env var)
            client_id: X-Client-Id header value
            timeout: Request timeout in seconds (or BOS_TIMEOUT env var)
            insecure: Skip TLS certificate verification (or BOS_INSECURE env var)
            client: A preconfigured APIClient, overriding the other arguments

        """
        self._client = client or APIClient(
            addr=addr,
            user_agent=user_agent,
            environment=environment,
            client_id=client_id,
            timeout=timeout,
            insecure=insecure,
        )

    @property
    def addr(self) -> str:
        return self._client.addr

    def _credentials(self, path: str, email: str, password: str) -> "DevClient":
        result = self._client.post(path, {"email": email, "password": password})
        return DevClient(self._client.with_session(token=result.get("token") or ""))

    def create_developer(self, email: str, password: str) -> "DevClient":
        """Create a developer account and return its session."""
        return self._credentials("/v1/developers", email, password)

    def login(self, email: str, password: str) -> "DevClient":
        """Log a developer in and return its session."""
        return self._credentials("/v1/developers/login", email, password)

    def lost_password(self, email: str) -> None:
        """Start the lost password process for a developer."""
        self._client.post("/v1/developers/lost_password", {"email": email})

    def reset_password(self, password: str, token: str) -> None:
        """Set a new developer password using a token from the lost password mail."""
        self._client.post("/v1/developers/reset_password", {"password": password, "token": token})

    def with_application_id(self, application_id: str) -> "AppClient":
        """Return an application client for the given application id."""
        return AppClient(self._client.with_session(application_id=application_id))

    def with_developer_token(self, token: str) -> "DevClient":
        """Resume a developer session from an existing token."""
        return DevClient(self._client.with_session(token=token))


# =============================================================================
# Developer Session
# =============================================================================


class DevClient:
    """Client for services that require a developer session."""

    def __init__(self, client: APIClient):
        self._client = client

        self.applications = ApplicationOperations(client)
        self.application_keys = ApplicationKeyOperations(client)
        self.stats = StatsOperations(client)
        self.webhooks = WebhookOperations(client)
        self.credentials = CredentialOperations(client)

    @property
    def session_token(self) -> str:
        """Get the developer session token."""
        return self._client.token

    def logout(self) -> None:
        """End the developer session."""
        self._client.post("/v1/developers/logout")

    def delete(self) -> None:
        """Delete the developer account."""
        self._client.delete("/v1/developers")

    def change_password(self, old_password: str, new_password: str) -> None:
        """Change the developer's password."""
        self._client.post("/v1/developers/password", {"old_password": old_password, "new_password": new_password})

    def profile(self) -> DeveloperProfile:
        """Get the developer's company profile."""
        return DeveloperProfile.from_dict(self._client.get("/v1/developers/profile"))

    def set_profile(self, profile: DeveloperProfile) -> None:
        """Replace the developer's company profile."""
        self._client.put("/v1/developers/profile", profile.to_dict())


class ApplicationOperations:
    """Operations on the developer's applications and their users."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[ApplicationMetadata]:
        """List all applications of the developer."""
        return self._client.fetch_list("/v1/developers/applications", ApplicationMetadata.from_dict)

    def create(self, label: str) -> ApplicationMetadata:
        """
        Create a new application.

        Args:
            label: Human readable label

        Returns:
            ApplicationMetadata with the new application id

        """
        result = self._client.post("/v1/developers/applications", {"label": label})
        return ApplicationMetadata(application_id=result.get("id") or "", label=label)

    def update(self, application_id: str, label: str) -> None:
        """Change the label of an application."""
        self._client.put(f"/v1/developers/applications/{escape(application_id)}", {"label": label})

    def delete(self, application_id: str) -> None:
        """Delete an application."""
        self._client.delete(f"/v1/developers/applications/{escape(application_id)}")

    def list_keys(self, application_id: str) -> builtins.list[ApplicationKey]:
        """List the API keys of an application."""
        return self._client.fetch_list(
            f"/v1/developers/applications/{escape(application_id)}/keys", ApplicationKey.from_dict
        )

    def create_key(self, application_id: str) -> ApplicationKey:
        """Issue a new API key for an application."""
        result = self._client.post(f"/v1/developers/applications/{escape(application_id)}/keys")
        return ApplicationKey.from_dict(result)

    def list_users(self, application_id: str, cursor: str = "", limit: int = 0) -> UserListPage:
        """
        List one page of users of an application.

        Args:
            application_id: Application whose users are listed
            cursor: Cursor returned as next_cursor by the previous page
            limit: Maximum number of users; 0 fetches the first page with the
                service's default size and ignores the cursor

        Returns:
            UserListPage with user names and the cursor of the next page

        Raises:
            ValidationError: If limit is negative

        """
        if limit < 0:
            raise ValidationError("limit must not be negative", details={"limit": limit})
        headers = {"x-application-id": application_id}
        if limit == 0:
            result = self._client.get("/v1/developers/users", headers=headers)
        else:
            result = self._client.post(
                "/v1/developers/users",
                {"cursor": cursor, "limit": limit},
                headers=headers,
                retryable=True,
            )
        return UserListPage.from_dict(result)

    def iter_users(self, application_id: str, limit: int = 100) -> Iterator[str]:
        """Iterate over all user names of an application, following cursors."""
        cursor = ""
        while True:
            page = self.list_users(application_id, cursor=cursor, limit=limit)
            yield from page.users
            if not page.next_cursor or not page.users:
                break
            cursor = page.next_cursor

    def user_info(self, application_id: str, user_id: str) -> DevUserInfo:
        """Get information about a single user of an application."""
        result = self._client.get(f"/v1/developers/user/{escape(user_id)}", headers={"x-application-id": application_id})
        return DevUserInfo.from_dict(result)

    def reset_users(self, application_id: str, usernames: builtins.list[str]) -> ResetUsersResponse:
        """Reset users of an application to their initial state."""
        result = self._client.post(
            "/v1/developers/users/reset",
            {"usernames": usernames},
            headers={"x-application-id": application_id},
        )
        return ResetUsersResponse.from_dict(result)

    def settings(self, application_id: str) -> ApplicationSettings:
        """Get the settings of an application."""
        result = self._client.get(f"/v1/developers/applications/{escape(application_id)}/settings")
        return ApplicationSettings.from_dict(result)

    def update_settings(self, application_id: str, background_refresh: bool | None = None) -> ApplicationSettings:
        """Update the settings of an application; None leaves a setting unchanged."""
        data: dict[str, Any] = {}
        if background_refresh is not None:
            data["background_refresh"] = background_refresh
        result = self._client.put(f"/v1/developers/applications/{escape(application_id)}/settings", data)
        return ApplicationSettings.from_dict(result)

    def create_credential(self, application_id: str, provider: str, keys: dict[str, str]) -> str:
        """Register provider credentials for an application and return their id."""
        result = self._client.post(
            f"/v1/developers/applications/{escape(application_id)}/credentials",
            {"provider": provider, "keys": keys},
        )
        return result.get("id") or ""

    def list_credentials(self, application_id: str) -> builtins.list[Credential]:
        """List the provider credentials of an application."""
        return self._client.fetch_list(
            f"/v1/developers/applications/{escape(application_id)}/credentials", Credential.from_dict
        )


class ApplicationKeyOperations:
    def __init__(self, client: APIClient):
        self._client = client

    def delete(self, key: str) -> None:
        """Revoke an application key."""
        self._client.delete(f"/v1/developers/application_keys/{escape(key)}")


class StatsOperations:
    """Usage statistics for the developer's applications."""

    def __init__(self, client: APIClient, environment: str = "sandbox"):
        self._client = client
        self.environment = environment

    def _get(self, kind: str, from_date: date | str | None, to_date: date | str | None) -> dict[str, Any]:
        params: dict[str, Any] = {"environment": self.environment}
        if from_date is not None and to_date is not None:
            params["from_date"] = _date_param(from_date)
            params["to_date"] = _date_param(to_date)
        return self._client.get(f"/v1/stats/{kind}", params)

    def merchants(self, from_date: date | str | None = None, to_date: date | str | None = None) -> MerchantsStats:
        return MerchantsStats.from_dict(self._get("merchants", from_date, to_date))

    def providers(self, from_date: date | str | None = None, to_date: date | str | None = None) -> ProvidersStats:
        return ProvidersStats.from_dict(self._get("providers", from_date, to_date))

    def transfers(self, from_date: date | str | None = None, to_date: date | str | None = None) -> TransfersStats:
        return TransfersStats.from_dict(self._get("transfers", from_date, to_date))

    def users(self, from_date: date | str | None = None, to_date: date | str | None = None) -> UsersStats:
        return UsersStats.from_dict(self._get("users", from_date, to_date))

    def requests(self, from_date: date | str | None = None, to_date: date | str | None = None) -> RequestsStats:
        return RequestsStats.from_dict(self._get("requests", from_date, to_date))


class WebhookOperations:
    """Operations for webhook subscriptions."""

    def __init__(self, client: APIClient):
        self._client = client

    def create(self, api_version: int, url: str, events: builtins.list[str]) -> str:
        """
        Subscribe a URL to events.

        Args:
            api_version: API version of the payloads to deliver
            url: Receiver URL
            events: Event types, e.g. ["access.refresh.done"]

        Returns:
            The new webhook id

        """
        result = self._client.post("/v1/webhooks", {"api_version": api_version, "url": url, "events": events})
        return result.get("id") or ""

    def get(self, webhook_id: str) -> Webhook:
        return Webhook.from_dict(self._client.get(f"/v1/webhooks/{escape(webhook_id)}"))

    def list(self) -> builtins.list[Webhook]:
        return self._client.fetch_list("/v1/webhooks", Webhook.from_dict)

    def update(
        self,
        webhook_id: str,
        api_version: int,
        url: str,
        events: builtins.list[str],
        enabled: bool = True,
    ) -> None:
        """Replace a webhook subscription."""
        self._client.put(
            f"/v1/webhooks/{escape(webhook_id)}",
            {"api_version": api_version, "url": url, "events": events, "enabled": enabled},
        )

    def delete(self, webhook_id: str) -> None:
        self._client.delete(f"/v1/webhooks/{escape(webhook_id)}")

    def test(self, webhook_id: str, event: str) -> WebhookTestResult:
        """Ask the service to deliver a sample event and report the receiver's response."""
        result = self._client.post(f"/v1/webhooks/{escape(webhook_id)}", {"event": event})
        return WebhookTestResult.from_dict(result)


class CredentialOperations:
    """Operations on provider credentials registered by the developer."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self, credential_id: str) -> Credential:
        return Credential.from_dict(self._client.get(f"/v1/developers/credentials/{escape(credential_id)}"))

    def delete(self, credential_id: str) -> None:
        self._client.delete(f"/v1/developers/credentials/{escape(credential_id)}")

    def update(self, credential_id: str, keys: dict[str, str]) -> None:
        self._client.put(f"/v1/developers/credentials/{escape(credential_id)}", {"keys": keys})

    def list_providers(self) -> builtins.list[CredentialProvider]:
        """List providers that accept developer supplied credentials."""
        return self._client.fetch_list("/v1/developers/credentials/providers", CredentialProvider.from_dict)


# =============================================================================
# Application Session
# =============================================================================


class AppClient:
    """Client for services that require an application id."""

    def __init__(self, client: APIClient):
        self._client = client

        self.categories = CategoryOperations(client)
        self.providers = ProviderOperations(client)
        self.users = UserOperations(client)
        self.iban = IBANOperations(client)

    @property
    def application_id(self) -> str:
        return self._client.application_id


class CategoryOperations:
    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[Category]:
        """List transaction categories."""
        return self._client.fetch_list("/v1/categories", Category.from_dict)


class ProviderOperations:
    """Operations for looking up financial providers."""

    def __init__(self, client: APIClient):
        self._client = client

    def search(self, query: str) -> builtins.list[ProviderSearchResult]:
        """Search providers by name, BLZ or BIC."""
        return self._client.page("/v1/providers", {"q": query}, ProviderSearchResult.from_dict).data

    def get(self, provider_id: str) -> Provider:
        return Provider.from_dict(self._client.get(f"/v1/providers/{escape(provider_id)}"))


class UserOperations:
    """Operations for creating and logging in users of an application."""

    def __init__(self, client: APIClient):
        self._client = client

    def _session(self, path: str, username: str, password: str) -> "UserClient":
        result = self._client.post(path, {"username": username, "password": password})
        token = UserToken.from_dict(result)
        return UserClient(self._client.with_session(token=token.token), user_id=token.id)

    def create(self, username: str, password: str) -> "UserClient":
        """Create a user and return its session."""
        return self._session("/v1/users", username, password)

    def login(self, username: str, password: str) -> "UserClient":
        """Log a user in and return its session."""
        return self._session("/v1/users/login", username, password)

    def reset_password(self, username: str, password: str) -> None:
        self._client.post("/v1/users/reset_password", {"username": username, "password": password})


class IBANOperations:
    def __init__(self, client: APIClient):
        self._client = client

    def validate(self, iban: str) -> IBANDetails:
        """Validate an IBAN and look up the banks behind it."""
        return IBANDetails.from_dict(self._client.get("/v1/iban/validate", {"iban": iban}))


# =============================================================================
# User Session
# =============================================================================


class UserClient:
    """Client for services that require a user session."""

    def __init__(self, client: APIClient, user_id: str = ""):
        self._client = client
        self.user_id = user_id

        self.accesses = AccessOperations(client)
        self.jobs = JobOperations(client)
        self.accounts = AccountOperations(client)
        self.transactions = TransactionOperations(client)
        self.scheduled_transactions = ScheduledTransactionOperations(client)
        self.repeated_transactions = RepeatedTransactionOperations(client)
        self.transfers = TransferOperations(client)
        self.recurring_transfers = RecurringTransferOperations(client)

    @property
    def session_token(self) -> str:
        """Get the user session token."""
        return self._client.token

    def logout(self) -> None:
        """End the user session."""
        self._client.post("/v1/users/logout")

    def delete(self, password: str) -> DeletedUser:
        """Delete the user; the password is required as confirmation."""
        return DeletedUser.from_dict(self._client.delete("/v1/users", {"password": password}))


class AccessOperations:
    """Operations on the user's bank accesses."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[Access]:
        return self._client.fetch_list("/v1/accesses", Access.from_dict)

    def add(self, provider_id: str, answers: Iterable[ChallengeAnswer] | None = None) -> Job:
        """
        Start adding a bank access.

        Args:
            provider_id: Provider to connect to
            answers: Initial challenge answers, usually login and PIN

        Returns:
            Job to poll with jobs.get() or jobs.wait()

        """
        result = self._client.post(
            "/v1/accesses",
            {"provider_id": provider_id, "challenge_answers": _answers(answers)},
        )
        return Job.from_dict(result)

    def get(self, access_id: int) -> Access:
        return Access.from_dict(self._client.get(f"/v1/accesses/{int(access_id)}"))

    def update(self, access_id: int, answers: Iterable[ChallengeAnswer] | None = None) -> Access:
        """Replace the stored challenge answers of an access."""
        result = self._client.post(f"/v1/accesses/{int(access_id)}", {"challenge_answers": _answers(answers)})
        return Access.from_dict(result)

    def delete(self, access_id: int) -> str:
        """Delete an access and return the id the service reports as deleted."""
        result = self._client.delete(f"/v1/accesses/{int(access_id)}")
        return str(result.get("deleted_access_id") or "")

    def refresh(self, access_id: int) -> Job:
        """Start importing new transactions for one access."""
        return Job.from_dict(self._client.post(f"/v1/accesses/{int(access_id)}/refresh"))

    def refresh_all(self) -> builtins.list[Job]:
        """Start importing new transactions for all accesses."""
        result = self._client.post("/v1/accesses/refresh")
        return [Job.from_dict(j) for j in result] if isinstance(result, builtins.list) else []


class JobOperations:
    """Operations on long-running jobs and their challenges."""

    def __init__(self, client: APIClient):
        self._client = client

    def get(self, uri: str) -> JobStatus:
        """Get the current status of a job."""
        return JobStatus.from_dict(self._client.get(job_path(uri)))

    def answer(self, uri: str, answers: Iterable[ChallengeAnswer]) -> None:
        """Submit answers to the challenge a job is waiting for."""
        self._client.put(job_path(uri), {"challenge_answers": _answers(answers)})

    def cancel(self, uri: str) -> None:
        self._client.delete(job_path(uri))

    def wait(self, uri: str, poll_interval: float = 1.0, timeout: float = 120.0) -> JobStatus:
        """
        Wait until a job is finished or needs challenge answers.

        Args:
            uri: Job URI returned when the job was started
            poll_interval: Seconds between status checks
            timeout: Maximum seconds to wait

        Returns:
            JobStatus that is finished or awaiting a challenge

        Raises:
            APIError: On timeout or error status

        """
        start = time.time()
        while True:
            status = self.get(uri)
            log.debug("job_poll", uri=uri, stage=status.stage, finished=status.finished)

            if status.finished or status.awaiting_challenge:
                return status

            if time.time() - start > timeout:
                raise APIError(
                    f"Timeout waiting for job (stage: {status.stage or 'unknown'})",
                    details={"uri": uri, "stage": status.stage},
                )

            time.sleep(poll_interval)


class AccountOperations:
    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> builtins.list[Account]:
        return self._client.fetch_list("/v1/accounts", Account.from_dict)

    def get(self, account_id: int) -> Account:
        return Account.from_dict(self._client.get(f"/v1/accounts/{int(account_id)}"))


class TransactionOperations:
    """Operations on booked transactions."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(
        self,
        account_id: int | None = None,
        access_id: int | None = None,
        since: datetime | None = None,
        limit: int | None = None,
        offset: int | None = None,
    ) -> PaginatedResponse[Transaction]:
        """
        List transactions, optionally filtered.

        Args:
            account_id: Only transactions of this account
            access_id: Only transactions of this access
            since: Only transactions changed after this time
            limit: Page size
            offset: Number of transactions to skip

        Returns:
            PaginatedResponse of Transaction

        """
        params = {
            "account_id": account_id,
            "access_id": access_id,
            "since": since.isoformat() if since else None,
            "limit": limit,
            "offset": offset,
        }
        return self._client.page("/v1/transactions", params, Transaction.from_dict)

    def iterate(
        self,
        account_id: int | None = None,
        access_id: int | None = None,
        since: datetime | None = None,
        limit: int = 100,
    ) -> Iterator[Transaction]:
        """Iterate over all matching transactions, page by page."""
        offset = 0
        while True:
            page = self.list(account_id, access_id, since, limit=limit, offset=offset)
            yield from page.data
            offset += len(page.data)
            # Bare arrays carry no total; a short page is the last one
            if not page.data or (not page.has_more and len(page.data) < limit):
                break

    def get(self, transaction_id: int) -> Transaction:
        return Transaction.from_dict(self._client.get(f"/v1/transactions/{int(transaction_id)}"))

    def categorise(self, categories: dict[int, int]) -> None:
        """Assign categories, given as a mapping of transaction id to category id."""
        self._client.put(
            "/v1/transactions/categorise",
            [{"id": tx_id, "category_id": cat_id} for tx_id, cat_id in categories.items()],
        )


class ScheduledTransactionOperations:
    def __init__(self, client: APIClient):
        self._client = client

    def list(self) -> PaginatedResponse[Transaction]:
        return self._client.page("/v1/scheduled_transactions", parser=Transaction.from_dict)

    def get(self, transaction_id: int) -> Transaction:
        return Transaction.from_dict(self._client.get(f"/v1/scheduled_transactions/{int(transaction_id)}"))


class RepeatedTransactionOperations:
    """Operations on standing orders."""

    def __init__(self, client: APIClient):
        self._client = client

    def list(self, account_id: int | None = None, access_id: int | None = None) -> PaginatedResponse[RepeatedTransaction]:
        params = {"account_id": account_id, "access_id": access_id}
        return self._client.page("/v1/repeated_transactions", params, RepeatedTransaction.from_dict)

    def get(self, transaction_id: int) -> RepeatedTransaction:
        return RepeatedTransaction.from_dict(self._client.get(f"/v1/repeated_transactions/{int(transaction_id)}"))

    def update(
        self,
        transaction_id: int,
        to: TransferAddress,
        amount: MoneyAmount,
        schedule: RecurrenceRule,
        usage: str = "",
        answers: Iterable[ChallengeAnswer] | None = None,
    ) -> RecurringTransfer:
        """Change a standing order; the bank may ask for a challenge before applying it."""
        data: dict[str, Any] = {
            "to": to.to_dict(),
            "amount": amount.to_dict(),
            "schedule": schedule.to_dict(),
            "usage": usage,
            "challenge_answers": _answers(answers),
        }
        result = self._client.put(f"/v1/repeated_transaction/{int(transaction_id)}", data)
        return RecurringTransfer.from_dict(result)

    def delete(self, transaction_id: int, answers: Iterable[ChallengeAnswer] | None = None) -> RecurringTransfer:
        """Delete a standing order."""
        result = self._client.delete(
            f"/v1/repeated_transaction/{int(transaction_id)}", {"challenge_answers": _answers(answers)}
        )
        return RecurringTransfer.from_dict(result)


class TransferOperations:
    """Operations for single payment transfers."""

    transfer_type = TransferType.REGULAR
    result_type: type[Transfer] = Transfer

    def __init__(self, client: APIClient):
        self._client = client

    def _create(self, data: dict[str, Any]) -> Transfer:
        data["type"] = self.transfer_type.value
        return self.result_type.from_dict(self._client.post("/v1/transfers", data))

    def create(
        self,
        from_account: int,
        to: TransferAddress,
        amount: MoneyAmount,
        entry_date: str = "",
        usage: str = "",
        answers: Iterable[ChallengeAnswer] | None = None,
    ) -> Transfer:
        """
        Start a transfer.

        Args:
            from_account: Id of the user's account to pay from
            to: Recipient
            amount: Amount and currency
            entry_date: Optional execution date (YYYY-MM-DD)
            usage: Remittance information
            answers: Challenge answers, if already known

        Returns:
            Transfer whose step tells what the service needs next

        """
        data: dict[str, Any] = {"from": from_account, "to": to.to_dict(), "amount": amount.to_dict(), "usage": usage}
        if entry_date:
            data["entry_date"] = entry_date
        if answers:
            data["challenge_answers"] = _answers(answers)
        return self._create(data)

    def process(
        self,
        transfer_id: str,
        intent: TransferIntent | str,
        version: int,
        confirm: bool = False,
        answers: Iterable[ChallengeAnswer] | None = None,
    ) -> Transfer:
        """Carry on with a transfer by answering the step the service asked for."""
        data: dict[str, Any] = {
            "intent": TransferIntent(intent).value,
            "version": version,
            "type": self.transfer_type.value,
        }
        if confirm:
            data["confirm"] = True
        if answers:
            data["challenge_answers"] = _answers(answers)
        return self.result_type.from_dict(self._client.post(f"/v1/transfers/{escape(transfer_id)}", data))

    def cancel(self, transfer_id: str, version: int) -> Transfer:
        data = {"version": version, "type": self.transfer_type.value}
        return self.result_type.from_dict(self._client.post(f"/v1/transfers/{escape(transfer_id)}/cancel", data))


class RecurringTransferOperations(TransferOperations):
    """Operations for standing orders created through the API."""

    transfer_type = TransferType.RECURRING
    result_type = RecurringTransfer

    def create(  # type: ignore[override]
        self,
        from_account: int,
        to: TransferAddress,
        amount: MoneyAmount,
        schedule: RecurrenceRule,
        usage: str = "",
        answers: Iterable[ChallengeAnswer] | None = None,
    ) -> RecurringTransfer:
        """Start a recurring transfer with the given schedule."""
        data: dict[str, Any] = {
            "from": from_account,
            "to": to.to_dict(),
            "amount": amount.to_dict(),
            "schedule": schedule.to_dict(),
            "usage": usage,
        }
        if answers:
            data["challenge_answers"] = _answers(answers)
        return self._create(data)  # type: ignore[return-value]
