"""Import every model so `Base.metadata` knows all tables."""

from .access_logs import AccessLog
from .accounts import FunderAccount, ISOAccount, LenderAccount, MerchantAccount, SyndicatorAccount
from .catalog import ExpenseType, FeeType
from .fundings import Application, Funding, Payback, Payout, Syndication
from .parties import (
    ISO,
    Funder,
    ISOFunder,
    ISOMerchant,
    Lender,
    Merchant,
    MerchantFunder,
    Syndicator,
    SyndicatorFunder,
    SyndicatorLender,
)
from .principals import (
    Admin,
    Bookkeeper,
    Contact,
    ContactMerchant,
    Representative,
    RepresentativeISO,
    User,
    UserFunder,
    UserLender,
)

__all__ = [
    "AccessLog",
    "Admin",
    "Application",
    "Bookkeeper",
    "Contact",
    "ContactMerchant",
    "ExpenseType",
    "FeeType",
    "Funder",
    "FunderAccount",
    "Funding",
    "ISO",
    "ISOAccount",
    "ISOFunder",
    "ISOMerchant",
    "Lender",
    "LenderAccount",
    "Merchant",
    "MerchantAccount",
    "MerchantFunder",
    "Payback",
    "Payout",
    "Representative",
    "RepresentativeISO",
    "Syndication",
    "Syndicator",
    "SyndicatorAccount",
    "SyndicatorFunder",
    "SyndicatorLender",
    "User",
    "UserFunder",
    "UserLender",
]
