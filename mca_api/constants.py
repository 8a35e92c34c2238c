"""System-wide enumerations shared by models, schemas and the security layer."""

from __future__ import annotations

from enum import Enum


class PortalType(str, Enum):
    """Which front-end portal a principal signed in through."""

    ADMIN = "admin"
    FUNDER = "funder"
    BOOKKEEPER = "bookkeeper"
    SYNDICATOR = "syndicator"
    ISO = "iso"
    LENDER = "lender"
    MERCHANT = "merchant"


class EntityKind(str, Enum):
    """Owner kinds that data access is scoped by."""

    FUNDER = "funder"
    LENDER = "lender"
    ISO = "iso"
    SYNDICATOR = "syndicator"
    MERCHANT = "merchant"


class Role(str, Enum):
    ADMIN = "admin"
    BOOKKEEPER = "bookkeeper"
    FUNDER_MANAGER = "funder_manager"
    FUNDER_USER = "funder_user"
    ISO_MANAGER = "iso_manager"
    ISO_SALES = "iso_sales"
    SYNDICATOR = "syndicator"
    MERCHANT = "merchant"
    LENDER = "lender"
    PENDING_USER = "pending_user"


# Role assumed when the token does not carry one.
PORTAL_DEFAULT_ROLES: dict[PortalType, Role] = {
    PortalType.ADMIN: Role.ADMIN,
    PortalType.BOOKKEEPER: Role.BOOKKEEPER,
    PortalType.FUNDER: Role.FUNDER_USER,
    PortalType.ISO: Role.ISO_SALES,
    PortalType.MERCHANT: Role.MERCHANT,
    PortalType.SYNDICATOR: Role.SYNDICATOR,
    PortalType.LENDER: Role.LENDER,
}


class PortalOperation(str, Enum):
    LOGIN = "LOGIN"
    LOGOUT = "LOGOUT"
    SESSION_TIMEOUT = "SESSION_TIMEOUT"


class AccountType(str, Enum):
    CHECKING = "CHECKING"
    SAVING = "SAVING"
    CASH = "CASH"
    OTHER = "OTHER"


class ApplicationType(str, Enum):
    NEW = "NEW"
    RENEWAL = "RENEWAL"
    RESUBMISSION = "RESUBMISSION"
    RENEWAL_RESUBMISSION = "RENEWAL_RESUBMISSION"


class FundingType(str, Enum):
    NEW = "NEW"
    RENEWAL = "RENEWAL"
    REFINANCE = "REFINANCE"
    BUYOUT = "BUYOUT"
    OTHER = "OTHER"


class PaymentMethod(str, Enum):
    ACH = "ACH"
    WIRE = "WIRE"
    CHECK = "CHECK"
    OTHER = "OTHER"


class PaybackStatus(str, Enum):
    SUBMITTED = "SUBMITTED"
    PROCESSING = "PROCESSING"
    BOUNCED = "BOUNCED"
    SUCCEED = "SUCCEED"
    FAILED = "FAILED"
    DISPUTED = "DISPUTED"


class SyndicationStatus(str, Enum):
    ACTIVE = "ACTIVE"
    CLOSED = "CLOSED"
