"""
Core types for the Bankrs OS API.

These dataclasses mirror the JSON bodies exchanged with the service. Every
type decodes from a response dict with from_dict(); types that are also sent
to the service provide to_dict().
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


def _items(data: dict[str, Any], key: str) -> list[Any]:
    """Return a list field, treating null as empty."""
    return data.get(key) or []


# =============================================================================
# Enumerations
# =============================================================================


class JobStage(str, Enum):
    UNAUTHENTICATED = "unauthenticated"
    AUTHENTICATED = "authenticated"
    CHALLENGE = "challenge"
    IMPORTED = "imported"
    CANCELLED = "cancelled"
    PROBLEM = "problem"


class ChallengeType(str, Enum):
    ALPHA = "alpha"
    NUMERIC = "numeric"
    ALPHANUMERIC = "alphanumeric"


class AccountType(str, Enum):
    CURRENT = "current"
    SAVINGS = "savings"
    CREDIT_CARD = "creditcard"
    LOAN = "loan"


class Frequency(str, Enum):
    ONCE = "once"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransferType(str, Enum):
    RECURRING = "recurring"
    REGULAR = "regular"


class TransferState(str, Enum):
    ONGOING = "ongoing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELLED = "cancelled"


class TransferIntent(str, Enum):
    PROVIDE_PIN = "provide_pin"
    PROVIDE_CREDENTIALS = "provide_credentials"
    SELECT_AUTH_METHOD = "select_auth_method"
    PROVIDE_CHALLENGE_ANSWER = "provide_challenge_answer"
    CONFIRM_SIMILAR_TRANSFER = "confirm_similar_transfer"


class TANType(str, Enum):
    PAYMENT_PIN4 = "paymentPIN4"
    OPTICAL = "optical"
    ITAN = "itan"
    MOBILE = "mobile"
    CHIP = "chip"
    PUSH = "push"
    OTP = "otp"
    USB = "usb"
    PHOTO = "photo"
    UNKNOWN = "unknown"


# =============================================================================
# Pagination
# =============================================================================


@dataclass
class PaginatedResponse(Generic[T]):
    """Offset paginated API response."""

    data: list[T]
    total_count: int
    offset: int = 0
    limit: int = 0

    @property
    def has_more(self) -> bool:
        """Check if there are more results."""
        return self.offset + len(self.data) < self.total_count


# =============================================================================
# Developer Types
# =============================================================================


@dataclass
class DeveloperProfile:
    """Company details of a developer account."""

    company: str = ""
    has_production_access: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeveloperProfile":
        """Create from API response dict."""
        return cls(
            company=data.get("company") or "",
            has_production_access=bool(data.get("has_production_access", False)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"company": self.company, "has_production_access": self.has_production_access}


@dataclass
class ApplicationMetadata:
    """A registered application."""

    application_id: str = ""
    label: str = ""
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationMetadata":
        """Create from API response dict."""
        return cls(
            application_id=data.get("id") or "",
            label=data.get("label") or "",
            created_at=data.get("created_at"),
        )


@dataclass
class ApplicationKey:
    """An API key issued for an application."""

    key: str = ""
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationKey":
        """Create from API response dict."""
        return cls(key=data.get("key") or "", created_at=data.get("created_at"))


@dataclass
class ApplicationSettings:
    """Per-application behaviour switches."""

    background_refresh: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ApplicationSettings":
        """Create from API response dict."""
        return cls(background_refresh=bool(data.get("background_refresh", False)))


@dataclass
class UserListPage:
    """A page of user names, continued with next_cursor."""

    users: list[str] = field(default_factory=list)
    next_cursor: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserListPage":
        """Create from API response dict."""
        return cls(users=list(_items(data, "users")), next_cursor=data.get("next") or "")


@dataclass
class Problem:
    """A problem reported by the service or a bank."""

    domain: str = ""
    code: str = ""
    info: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Problem":
        """Create from API response dict."""
        return cls(
            domain=data.get("domain") or "",
            code=data.get("code") or "",
            info=data.get("info") or {},
        )


@dataclass
class ResetUserOutcome:
    """The result of resetting a single user."""

    username: str = ""
    problems: list[Problem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResetUserOutcome":
        """Create from API response dict."""
        return cls(
            username=data.get("username") or "",
            problems=[Problem.from_dict(p) for p in _items(data, "problems")],
        )


@dataclass
class ResetUsersResponse:
    """Outcome of a bulk user reset."""

    users: list[ResetUserOutcome] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ResetUsersResponse":
        """Create from API response dict."""
        return cls(users=[ResetUserOutcome.from_dict(u) for u in _items(data, "users")])


@dataclass
class DevUserInfo:
    """Information a developer may see about a user."""

    username: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DevUserInfo":
        """Create from API response dict."""
        return cls(username=data.get("username") or "")


@dataclass
class Credential:
    """Provider credentials registered for an application."""

    id: str = ""
    provider: str = ""
    keys: dict[str, str] = field(default_factory=dict)
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Credential":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            provider=data.get("provider") or "",
            keys=data.get("keys") or {},
            created_at=data.get("created_at"),
        )


@dataclass
class CredentialProvider:
    """A provider that accepts developer credentials."""

    id: str = ""
    name: str = ""
    keys: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CredentialProvider":
        """Create from API response dict."""
        return cls(id=data.get("id") or "", name=data.get("name") or "", keys=list(_items(data, "keys")))


# =============================================================================
# Stats Types
# =============================================================================


@dataclass
class NameValue:
    name: str = ""
    value: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "NameValue":
        return cls(name=data.get("name") or "", value=data.get("value") or 0)


@dataclass
class StatsMoneyAmount:
    value: float = 0.0
    currency: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "StatsMoneyAmount":
        data = data or {}
        return cls(value=float(data.get("value") or 0), currency=data.get("currency") or "")


@dataclass
class StatsPeriod:
    """The period and domain a statistics report covers."""

    from_date: str = ""
    to_date: str = ""
    domain: str = ""

    @classmethod
    def period_kwargs(cls, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "from_date": data.get("from_date") or "",
            "to_date": data.get("to_date") or "",
            "domain": data.get("domain") or "",
        }


@dataclass
class DailyUsersStats:
    date: str = ""
    users_total: int = 0
    new_users: int = 0
    active_users: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyUsersStats":
        return cls(
            date=data.get("date") or "",
            users_total=data.get("users_total") or 0,
            new_users=data.get("new_users") or 0,
            active_users=data.get("active_users") or 0,
        )


@dataclass
class UsersStats(StatsPeriod):
    users_total: int = 0
    users_today: int = 0
    stats: list[DailyUsersStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UsersStats":
        return cls(
            **cls.period_kwargs(data),
            users_total=(data.get("users_total") or {}).get("value", 0),
            users_today=(data.get("users_today") or {}).get("value", 0),
            stats=[DailyUsersStats.from_dict(s) for s in _items(data, "stats")],
        )


@dataclass
class DailyTransfersStats:
    date: str = ""
    out: StatsMoneyAmount = field(default_factory=StatsMoneyAmount)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyTransfersStats":
        return cls(date=data.get("date") or "", out=StatsMoneyAmount.from_dict(data.get("out")))


@dataclass
class TransfersStats(StatsPeriod):
    total_out: StatsMoneyAmount = field(default_factory=StatsMoneyAmount)
    today_out: StatsMoneyAmount = field(default_factory=StatsMoneyAmount)
    stats: list[DailyTransfersStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TransfersStats":
        return cls(
            **cls.period_kwargs(data),
            total_out=StatsMoneyAmount.from_dict(data.get("total_out")),
            today_out=StatsMoneyAmount.from_dict(data.get("today_out")),
            stats=[DailyTransfersStats.from_dict(s) for s in _items(data, "stats")],
        )


@dataclass
class DailyMerchantsStats:
    date: str = ""
    merchants: list[NameValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyMerchantsStats":
        return cls(
            date=data.get("date") or "",
            merchants=[NameValue.from_dict(m) for m in _items(data, "merchants")],
        )


@dataclass
class MerchantsStats(StatsPeriod):
    stats: list[DailyMerchantsStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MerchantsStats":
        return cls(
            **cls.period_kwargs(data),
            stats=[DailyMerchantsStats.from_dict(s) for s in _items(data, "stats")],
        )


@dataclass
class DailyProvidersStats:
    date: str = ""
    providers: list[NameValue] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyProvidersStats":
        return cls(
            date=data.get("date") or "",
            providers=[NameValue.from_dict(p) for p in _items(data, "providers")],
        )


@dataclass
class ProvidersStats(StatsPeriod):
    stats: list[DailyProvidersStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProvidersStats":
        return cls(
            **cls.period_kwargs(data),
            stats=[DailyProvidersStats.from_dict(s) for s in _items(data, "stats")],
        )


@dataclass
class DailyRequestsStats:
    date: str = ""
    requests_total: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DailyRequestsStats":
        return cls(date=data.get("date") or "", requests_total=data.get("requests_total") or 0)


@dataclass
class RequestsStats(StatsPeriod):
    requests_total: int = 0
    requests_today: int = 0
    stats: list[DailyRequestsStats] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RequestsStats":
        return cls(
            **cls.period_kwargs(data),
            requests_total=(data.get("requests_total") or {}).get("value", 0),
            requests_today=(data.get("requests_today") or {}).get("value", 0),
            stats=[DailyRequestsStats.from_dict(s) for s in _items(data, "stats")],
        )


# =============================================================================
# Webhook Types
# =============================================================================


@dataclass
class Webhook:
    """A webhook subscription."""

    id: str = ""
    url: str = ""
    events: list[str] = field(default_factory=list)
    api_version: int = 0
    enabled: bool = False
    environment: str = ""
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Webhook":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            url=data.get("url") or "",
            events=list(_items(data, "events")),
            api_version=data.get("api_version") or 0,
            enabled=bool(data.get("enabled", False)),
            environment=data.get("environment") or "",
            created_at=data.get("created_at"),
        )


@dataclass
class Event:
    id: str = ""
    type: str = ""
    url: str = ""
    api_version: int = 0
    environment: str = ""
    created_at: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Event":
        return cls(
            id=data.get("id") or "",
            type=data.get("type") or "",
            url=data.get("url") or "",
            api_version=data.get("api_version") or 0,
            environment=data.get("environment") or "",
            created_at=data.get("created_at"),
        )


@dataclass
class WebhookTestResult:
    """The payload sent by a webhook test and the receiver's response."""

    event: Event = field(default_factory=Event)
    data: dict[str, Any] = field(default_factory=dict)
    response_id: str = ""
    response_code: int = 0
    response_status: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WebhookTestResult":
        """Create from API response dict."""
        payload = data.get("payload") or {}
        response = data.get("response") or {}
        return cls(
            event=Event.from_dict(payload.get("event") or {}),
            data=payload.get("data") or {},
            response_id=response.get("id") or "",
            response_code=response.get("code") or 0,
            response_status=response.get("status") or "",
        )


# =============================================================================
# Provider Types
# =============================================================================


@dataclass
class Category:
    """A transaction classification category."""

    id: int = 0
    names: dict[str, str] = field(default_factory=dict)
    group: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        """Create from API response dict."""
        return cls(id=data.get("id") or 0, names=data.get("names") or {}, group=data.get("group") or "")


@dataclass
class ChallengeSpec:
    """A challenge a provider asks for when adding an access."""

    id: str = ""
    description: str = ""
    type: str = ""
    secure: bool = False
    unstoreable: bool = False
    info: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChallengeSpec":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            # Older API versions used 'desc'
            description=data.get("description") or data.get("desc") or "",
            type=data.get("type") or "",
            secure=bool(data.get("secure", False)),
            unstoreable=bool(data.get("unstoreable", False)),
            info=data.get("info") or data.get("options") or {},
        )


@dataclass
class Provider:
    """A financial provider (bank)."""

    id: str = ""
    name: str = ""
    description: str = ""
    country: str = ""
    url: str = ""
    address: str = ""
    postal_code: str = ""
    challenges: list[ChallengeSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Provider":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            name=data.get("name") or "",
            description=data.get("description") or "",
            country=data.get("country") or "",
            url=data.get("url") or "",
            address=data.get("address") or "",
            postal_code=data.get("postal_code") or "",
            challenges=[ChallengeSpec.from_dict(c) for c in _items(data, "challenges")],
        )


@dataclass
class ProviderSearchResult:
    score: float = 0.0
    provider: Provider = field(default_factory=Provider)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ProviderSearchResult":
        return cls(score=float(data.get("score") or 0), provider=Provider.from_dict(data.get("provider") or {}))


@dataclass
class IBANBank:
    id: str = ""
    label: str = ""
    country: str = ""
    provider: str = ""
    service_context: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IBANBank":
        return cls(
            id=data.get("id") or "",
            label=data.get("label") or "",
            country=data.get("country") or "",
            provider=data.get("provider") or "",
            service_context=data.get("service_context") or "",
        )


@dataclass
class IBANDetails:
    """Result of validating an IBAN."""

    iban: str = ""
    provider: str = ""
    banks: list[IBANBank] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "IBANDetails":
        """Create from API response dict."""
        account = data.get("acc_ref") or {}
        return cls(
            iban=account.get("IBAN") or "",
            provider=account.get("provider") or "",
            banks=[IBANBank.from_dict(b) for b in _items(data, "fis")],
        )


# =============================================================================
# Session Types
# =============================================================================


@dataclass
class UserToken:
    """Identifier and session token of a user."""

    id: str = ""
    token: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserToken":
        """Create from API response dict."""
        return cls(id=data.get("id") or "", token=data.get("token") or "")


@dataclass
class DeletedUser:
    deleted_user_id: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DeletedUser":
        return cls(deleted_user_id=data.get("deleted_user_id") or "")


# =============================================================================
# Challenge Types
# =============================================================================


@dataclass
class ChallengeAnswer:
    """An answer to a challenge, optionally stored by the service."""

    id: str
    value: str
    store: bool = False
    valid_until: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChallengeAnswer":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            value=data.get("value") or "",
            store=bool(data.get("store", False)),
            valid_until=data.get("valid_until"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"id": self.id, "value": self.value, "store": self.store}
        if self.valid_until:
            result["valid_until"] = self.valid_until
        return result


@dataclass
class ChallengeField:
    """A single input requested by a pending challenge."""

    id: str = ""
    description: str = ""
    type: str = ""
    previous: str = ""
    stored: bool = False
    reset: bool = False
    secure: bool = False
    optional: bool = False
    unstoreable: bool = False
    methods: list[str] = field(default_factory=list)
    info: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChallengeField":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or "",
            description=data.get("description") or "",
            type=data.get("type") or "",
            previous=data.get("previous") or "",
            stored=bool(data.get("stored", False)),
            reset=bool(data.get("reset", False)),
            secure=bool(data.get("secure", False)),
            optional=bool(data.get("optional", False)),
            unstoreable=bool(data.get("unstoreable", False)),
            methods=list(_items(data, "methods")),
            info=data.get("info") or {},
        )


@dataclass
class Challenge:
    """The inputs a job is waiting for and the problems with the last answers."""

    next_challenges: list[ChallengeField] = field(default_factory=list)
    last_problems: list[Problem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Challenge":
        """Create from API response dict."""
        return cls(
            next_challenges=[ChallengeField.from_dict(c) for c in _items(data, "next_challenges")],
            last_problems=[Problem.from_dict(p) for p in _items(data, "last_problems")],
        )


# =============================================================================
# Job Types
# =============================================================================


@dataclass
class Job:
    """A reference to a server-side asynchronous task."""

    uri: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Job":
        """Create from API response dict."""
        return cls(uri=data.get("uri") or "")


@dataclass
class JobAccount:
    id: int = 0
    name: str = ""
    number: str = ""
    iban: str = ""
    errors: list[Problem] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobAccount":
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            number=data.get("number") or "",
            iban=data.get("iban") or "",
            errors=[Problem.from_dict(p) for p in _items(data, "errors")],
        )


@dataclass
class JobAccess:
    id: int = 0
    provider_id: str = ""
    name: str = ""
    accounts: list[JobAccount] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobAccess":
        return cls(
            id=data.get("id") or 0,
            provider_id=data.get("provider_id") or "",
            name=data.get("name") or "",
            accounts=[JobAccount.from_dict(a) for a in _items(data, "accounts")],
        )


@dataclass
class JobStatus:
    """The current state of a job."""

    finished: bool = False
    stage: str = ""
    challenge: Challenge | None = None
    uri: str = ""
    errors: list[Problem] = field(default_factory=list)
    access: JobAccess | None = None

    @property
    def awaiting_challenge(self) -> bool:
        """Check if the job cannot proceed without challenge answers."""
        return not self.finished and self.challenge is not None and bool(self.challenge.next_challenges)

    @property
    def is_complete(self) -> bool:
        """Check if the job reached a terminal stage."""
        return self.finished or self.stage in (JobStage.IMPORTED, JobStage.CANCELLED, JobStage.PROBLEM)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobStatus":
        """Create from API response dict."""
        challenge = data.get("challenge")
        access = data.get("access")
        return cls(
            finished=bool(data.get("finished", False)),
            stage=data.get("stage") or "",
            challenge=Challenge.from_dict(challenge) if challenge else None,
            uri=data.get("uri") or "",
            errors=[Problem.from_dict(p) for p in _items(data, "errors")],
            access=JobAccess.from_dict(access) if access else None,
        )


# =============================================================================
# Access & Account Types
# =============================================================================


@dataclass
class Period:
    type: str = ""
    repeat: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Period":
        return cls(type=data.get("type") or "", repeat=data.get("repeat") or 0)


@dataclass
class RecurringTransferCapabilities:
    periods: list[Period] = field(default_factory=list)
    minimum_lead_time_create: int = 0
    maximum_lead_time_create: int = 0
    minimum_lead_time_edit: int = 0
    maximum_lead_time_edit: int = 0
    minimum_lead_time_delete: int = 0
    maximum_lead_time_delete: int = 0
    last_day_of_month_enabled: bool = False
    first_scheduled_date_modifiable: bool = False
    time_unit_modifiable: bool = False
    period_length_modifiable: bool = False
    scheduled_date_modifiable: bool = False
    last_schedule_date_modifiable: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RecurringTransferCapabilities":
        kwargs: dict[str, Any] = {
            name: data.get(name, default)
            for name, default in (
                ("minimum_lead_time_create", 0),
                ("maximum_lead_time_create", 0),
                ("minimum_lead_time_edit", 0),
                ("maximum_lead_time_edit", 0),
                ("minimum_lead_time_delete", 0),
                ("maximum_lead_time_delete", 0),
                ("last_day_of_month_enabled", False),
                ("first_scheduled_date_modifiable", False),
                ("time_unit_modifiable", False),
                ("period_length_modifiable", False),
                ("scheduled_date_modifiable", False),
                ("last_schedule_date_modifiable", False),
            )
        }
        return cls(periods=[Period.from_dict(p) for p in _items(data, "periods")], **kwargs)


@dataclass
class AccessCapabilities:
    recurring_transfer: RecurringTransferCapabilities = field(default_factory=RecurringTransferCapabilities)
    scheduled_transfer_supported: bool = False
    trading: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccessCapabilities":
        return cls(
            recurring_transfer=RecurringTransferCapabilities.from_dict(data.get("recurring_transfer") or {}),
            scheduled_transfer_supported=bool((data.get("scheduled_transfer") or {}).get("supported", False)),
            trading=bool(data.get("trading", False)),
        )


@dataclass
class AccountCapabilities:
    account_statement: list[str] = field(default_factory=list)
    transfer: list[str] = field(default_factory=list)
    recurring_transfer: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AccountCapabilities":
        return cls(
            account_statement=list(_items(data, "account_statement")),
            transfer=list(_items(data, "transfer")),
            recurring_transfer=list(_items(data, "recurring_transfer")),
        )


@dataclass
class AllowedOperations:
    payment_transfer: bool = False
    account_statement: bool = False
    account_balance: bool = False
    create_recurring_transfer: bool = False
    read_recurring_transfer: bool = False
    update_recurring_transfer: bool = False
    delete_recurring_transfer: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AllowedOperations":
        return cls(
            payment_transfer=bool(data.get("transfer", False)),
            account_statement=bool(data.get("statement", False)),
            account_balance=bool(data.get("balance", False)),
            create_recurring_transfer=bool(data.get("create_recurring_transfer", False)),
            read_recurring_transfer=bool(data.get("read_recurring_transfer", False)),
            update_recurring_transfer=bool(data.get("update_recurring_transfer", False)),
            delete_recurring_transfer=bool(data.get("delete_recurring_transfer", False)),
        )


@dataclass
class Account:
    """A bank account imported through an access."""

    id: int = 0
    provider_id: str = ""
    bank_access_id: int = 0
    name: str = ""
    type: str = ""
    number: str = ""
    balance: str = ""
    balance_date: str | None = None
    available_balance: str = ""
    credit_line: str = ""
    removed: bool = False
    currency: str = ""
    iban: str = ""
    alias: str = ""
    bin: str = ""
    capabilities: AccountCapabilities = field(default_factory=AccountCapabilities)
    allowed_operations: AllowedOperations = field(default_factory=AllowedOperations)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Account":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or 0,
            provider_id=data.get("provider_id") or "",
            bank_access_id=data.get("bank_access_id") or 0,
            name=data.get("name") or "",
            type=data.get("type") or "",
            number=data.get("number") or "",
            balance=data.get("balance") or "",
            balance_date=data.get("balance_date"),
            available_balance=data.get("available_balance") or "",
            credit_line=data.get("credit_line") or "",
            removed=bool(data.get("removed", False)),
            currency=data.get("currency") or "",
            iban=data.get("iban") or "",
            alias=data.get("alias") or "",
            bin=data.get("bin") or "",
            capabilities=AccountCapabilities.from_dict(data.get("capabilities") or {}),
            allowed_operations=AllowedOperations.from_dict(data.get("allowed_operations") or {}),
        )


@dataclass
class Access:
    """A user's access to a bank, holding one or more accounts."""

    id: int = 0
    name: str = ""
    enabled: bool = False
    is_pin_saved: bool = False
    auth_possible: bool = False
    provider_id: str = ""
    accounts: list[Account] = field(default_factory=list)
    capabilities: AccessCapabilities = field(default_factory=AccessCapabilities)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Access":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or 0,
            name=data.get("name") or "",
            enabled=bool(data.get("enabled", False)),
            is_pin_saved=bool(data.get("is_pin_saved", False)),
            auth_possible=bool(data.get("auth_possible", False)),
            provider_id=data.get("provider_id") or "",
            accounts=[Account.from_dict(a) for a in _items(data, "accounts")],
            capabilities=AccessCapabilities.from_dict(data.get("capabilities") or {}),
        )


# =============================================================================
# Transaction Types
# =============================================================================


@dataclass
class MoneyAmount:
    """A decimal amount, kept as the string the service sent."""

    currency: str = ""
    value: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "MoneyAmount | None":
        """Create from API response dict."""
        if not data:
            return None
        return cls(currency=data.get("currency") or "", value=str(data.get("value") or ""))

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        return {"currency": self.currency, "value": self.value}


@dataclass
class OriginalAmount:
    value: MoneyAmount | None = None
    exchange_rate: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "OriginalAmount | None":
        if not data:
            return None
        return cls(value=MoneyAmount.from_dict(data.get("value")), exchange_rate=data.get("exchange_rate") or "")


@dataclass
class AccountRef:
    """A reference to an account, ours or a counterparty's."""

    provider_id: str = ""
    iban: str = ""
    label: str = ""
    number: str = ""
    type: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "AccountRef":
        data = data or {}
        return cls(
            provider_id=data.get("provider_id") or "",
            iban=data.get("iban") or "",
            label=data.get("label") or "",
            number=data.get("id") or "",
            type=data.get("type") or "",
        )


@dataclass
class Counterparty:
    name: str = ""
    account: AccountRef = field(default_factory=AccountRef)
    merchant: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "Counterparty":
        data = data or {}
        merchant = data.get("merchant")
        return cls(
            name=data.get("name") or "",
            account=AccountRef.from_dict(data.get("account")),
            merchant=merchant.get("name") if merchant else None,
        )


@dataclass
class Transaction:
    """A booked or scheduled transaction."""

    id: int = 0
    access_id: int = 0
    user_account_id: int = 0
    user_account: AccountRef = field(default_factory=AccountRef)
    category_id: int = 0
    repeated_transaction_id: int = 0
    counterparty: Counterparty = field(default_factory=Counterparty)
    remote_id: str = ""
    entry_date: str | None = None
    settlement_date: str | None = None
    amount: MoneyAmount | None = None
    original_amount: OriginalAmount | None = None
    usage: str = ""
    transaction_type: str = ""
    gvcode: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or 0,
            access_id=data.get("user_bank_access_id") or 0,
            user_account_id=data.get("user_bank_account_id") or 0,
            user_account=AccountRef.from_dict(data.get("user_account")),
            category_id=data.get("category_id") or 0,
            repeated_transaction_id=data.get("repeated_transaction_id") or 0,
            counterparty=Counterparty.from_dict(data.get("counterparty")),
            remote_id=data.get("remote_id") or "",
            entry_date=data.get("entry_date"),
            settlement_date=data.get("settlement_date"),
            amount=MoneyAmount.from_dict(data.get("amount")),
            original_amount=OriginalAmount.from_dict(data.get("original_amount")),
            usage=data.get("usage") or "",
            transaction_type=data.get("transaction_type") or "",
            gvcode=data.get("gvcode") or "",
        )


@dataclass
class RecurrenceRule:
    """When a recurring transfer executes."""

    start: str | None = None
    until: str | None = None
    frequency: str = Frequency.MONTHLY.value
    interval: int = 1
    by_day: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "RecurrenceRule | None":
        """Create from API response dict."""
        if not data:
            return None
        return cls(
            start=data.get("start"),
            until=data.get("until"),
            frequency=data.get("frequency") or "",
            interval=data.get("interval") or 0,
            by_day=data.get("by_day") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"frequency": self.frequency, "interval": self.interval, "by_day": self.by_day}
        if self.start:
            result["start"] = self.start
        if self.until:
            result["until"] = self.until
        return result


@dataclass
class RepeatedTransaction:
    """A standing order detected or imported for an account."""

    id: int = 0
    access_id: int = 0
    user_account_id: int = 0
    user_account: AccountRef = field(default_factory=AccountRef)
    remote_account: AccountRef = field(default_factory=AccountRef)
    remote_id: str = ""
    schedule: RecurrenceRule | None = None
    amount: MoneyAmount | None = None
    usage: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RepeatedTransaction":
        """Create from API response dict."""
        return cls(
            id=data.get("id") or 0,
            access_id=data.get("user_bank_access_id") or 0,
            user_account_id=data.get("user_bank_account_id") or 0,
            user_account=AccountRef.from_dict(data.get("user_account")),
            remote_account=AccountRef.from_dict(data.get("remote_account")),
            remote_id=data.get("remote_id") or "",
            schedule=RecurrenceRule.from_dict(data.get("schedule")),
            amount=MoneyAmount.from_dict(data.get("amount")),
            usage=data.get("usage") or "",
        )


# =============================================================================
# Transfer Types
# =============================================================================


@dataclass
class TransferAddress:
    """The source or destination of a transfer."""

    name: str = ""
    iban: str = ""
    access_id: int = 0
    account_id: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransferAddress":
        """Create from API response dict."""
        data = data or {}
        return cls(
            name=data.get("name") or "",
            iban=data.get("iban") or "",
            access_id=data.get("bank_access_id") or 0,
            account_id=data.get("bank_account_id") or 0,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API request."""
        result: dict[str, Any] = {"name": self.name, "iban": self.iban}
        if self.access_id:
            result["bank_access_id"] = self.access_id
        if self.account_id:
            result["bank_account_id"] = self.account_id
        return result


@dataclass
class AuthMethod:
    id: str = ""
    description: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "AuthMethod":
        return cls(id=data.get("id") or "", description=data.get("description") or "")


@dataclass
class TransferStepData:
    """Details for the next step of a transfer, such as TAN options."""

    auth_methods: list[AuthMethod] = field(default_factory=list)
    challenge: str = ""
    challenge_message: str = ""
    tan_type: str = ""
    confirm: bool = False
    transfers: list["Transfer"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransferStepData | None":
        """Create from API response dict."""
        if not data:
            return None
        return cls(
            auth_methods=[AuthMethod.from_dict(m) for m in _items(data, "auth_methods")],
            challenge=data.get("challenge") or "",
            challenge_message=data.get("challenge_message") or "",
            tan_type=data.get("tan_type") or "",
            confirm=bool(data.get("confirm", False)),
            transfers=[Transfer.from_dict(t) for t in _items(data, "transfers")],
        )


@dataclass
class TransferStep:
    """What the service needs next to carry on with a transfer."""

    intent: str = ""
    data: TransferStepData | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> "TransferStep":
        data = data or {}
        return cls(intent=data.get("intent") or "", data=TransferStepData.from_dict(data.get("data")))


@dataclass
class Transfer:
    """A single payment transfer and its progress."""

    id: str = ""
    from_address: TransferAddress = field(default_factory=TransferAddress)
    to_address: TransferAddress = field(default_factory=TransferAddress)
    amount: MoneyAmount | None = None
    usage: str = ""
    version: int = 0
    step: TransferStep = field(default_factory=TransferStep)
    state: str = ""
    schedule: RecurrenceRule | None = None
    entry_date: str | None = None
    settlement_date: str | None = None
    created: str | None = None
    updated: str | None = None
    remote_id: str = ""
    challenge_answers: dict[str, ChallengeAnswer] = field(default_factory=dict)
    errors: list[Problem] = field(default_factory=list)

    @property
    def is_complete(self) -> bool:
        """Check if the transfer reached a terminal state."""
        return self.state in (TransferState.SUCCEEDED, TransferState.FAILED, TransferState.CANCELLED)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transfer":
        """Create from API response dict."""
        answers = data.get("challenge_answers") or {}
        return cls(
            id=data.get("id") or "",
            from_address=TransferAddress.from_dict(data.get("from")),
            to_address=TransferAddress.from_dict(data.get("to")),
            amount=MoneyAmount.from_dict(data.get("amount")),
            usage=data.get("usage") or "",
            version=data.get("version") or 0,
            step=TransferStep.from_dict(data.get("step")),
            state=data.get("state") or "",
            schedule=RecurrenceRule.from_dict(data.get("schedule")),
            entry_date=data.get("booking_date"),
            settlement_date=data.get("effective_date"),
            created=data.get("created"),
            updated=data.get("updated"),
            remote_id=data.get("remote_id") or "",
            challenge_answers={k: ChallengeAnswer.from_dict(v) for k, v in answers.items()},
            errors=[Problem.from_dict(p) for p in _items(data, "errors")],
        )


@dataclass
class RecurringTransfer(Transfer):
    """A standing order created or changed through the API."""


# =============================================================================
# Output
# =============================================================================


def to_json(value: Any) -> Any:
    """Convert dataclasses (and lists of them) to JSON-compatible values."""
    if isinstance(value, list):
        return [to_json(v) for v in value]
    if hasattr(value, "__dataclass_fields__"):
        return asdict(value)
    return value
