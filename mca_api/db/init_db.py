from __future__ import annotations

from datetime import date

from sqlalchemy import select
from sqlalchemy.orm import Session

from mca_api.constants import PaybackStatus
from mca_api.db.base import Base
from mca_api.db.session import SessionLocal, engine
from mca_api.models import (
    ISO,
    Admin,
    Application,
    Bookkeeper,
    Contact,
    ContactMerchant,
    ExpenseType,
    FeeType,
    Funder,
    FunderAccount,
    Funding,
    ISOFunder,
    ISOMerchant,
    Lender,
    Merchant,
    MerchantFunder,
    Payback,
    Payout,
    Representative,
    RepresentativeISO,
    Syndication,
    Syndicator,
    SyndicatorFunder,
    SyndicatorLender,
    User,
    UserFunder,
)
from mca_api.settings import get_settings


def init_db() -> None:
    """
    Create tables and, when `MCA_SEED_DEMO_DATA` is on, seed a small book.

    Seed ids are fixed strings so demo tokens can reference them directly
    (e.g. a funder-portal token with `funder_list: ["fund-acme"]`).
    """

    Base.metadata.create_all(bind=engine)

    if not get_settings().seed_demo_data:
        return

    with SessionLocal() as db:
        if _has_seed_data(db):
            return
        _seed(db)


def _has_seed_data(db: Session) -> bool:
    return db.execute(select(Funder.id).limit(1)).first() is not None


def _seed(db: Session) -> None:
    # Funders and their lenders
    acme = Funder(id="fund-acme", name="Acme Capital", email="ops@acme.example.com")
    beacon = Funder(id="fund-beacon", name="Beacon Funding", email="ops@beacon.example.com")
    db.add_all([acme, beacon])
    db.flush()

    acme_lender = Lender(id="lend-acme", funder_id=acme.id, name="Acme Capital LLC")
    acme_partner = Lender(id="lend-acme-partner", funder_id=acme.id, name="Harbor Partners", internal=False)
    beacon_lender = Lender(id="lend-beacon", funder_id=beacon.id, name="Beacon Funding LLC")
    db.add_all([acme_lender, acme_partner, beacon_lender])

    # Brokers, merchants, syndicators
    brokers = ISO(id="iso-brokers", name="Main Street Brokers")
    velocity = ISO(id="iso-velocity", name="Velocity ISO")
    bakery = Merchant(id="merch-bakery", name="Corner Bakery Inc", dba_name="Corner Bakery")
    garage = Merchant(id="merch-garage", name="Eastside Auto LLC", dba_name="Eastside Garage")
    diner = Merchant(id="merch-diner", name="Route 9 Diner Corp")
    sam = Syndicator(id="synd-sam", name="Sam Participations", first_name="Sam", last_name="Lee")
    ria = Syndicator(id="synd-ria", name="Ria Holdings", first_name="Ria", last_name="Patel")
    db.add_all([brokers, velocity, bakery, garage, diner, sam, ria])
    db.flush()

    # Who works with whom
    db.add_all(
        [
            ISOFunder(iso_id=brokers.id, funder_id=acme.id),
            ISOFunder(iso_id=velocity.id, funder_id=beacon.id),
            ISOMerchant(iso_id=brokers.id, merchant_id=bakery.id),
            ISOMerchant(iso_id=brokers.id, merchant_id=garage.id),
            ISOMerchant(iso_id=velocity.id, merchant_id=diner.id),
            MerchantFunder(merchant_id=bakery.id, funder_id=acme.id),
            MerchantFunder(merchant_id=garage.id, funder_id=acme.id),
            MerchantFunder(merchant_id=diner.id, funder_id=beacon.id),
            SyndicatorFunder(syndicator_id=sam.id, funder_id=acme.id),
            SyndicatorFunder(syndicator_id=ria.id, funder_id=beacon.id),
            SyndicatorLender(syndicator_id=sam.id, lender_id=acme_lender.id),
            SyndicatorLender(syndicator_id=ria.id, lender_id=beacon_lender.id),
        ]
    )

    # Portal logins
    db.add_all(
        [
            Admin(
                id="admin-alice",
                first_name="Alice",
                last_name="Admin",
                email="alice@mca.example.com",
                super_admin=True,
            ),
            Bookkeeper(id="bk-bob", first_name="Bob", last_name="Books", email="bob@mca.example.com"),
            User(
                id="user-mona",
                first_name="Mona",
                last_name="Manager",
                email="mona@acme.example.com",
                type="funder_manager",
            ),
            User(
                id="user-fred",
                first_name="Fred",
                last_name="Funder",
                email="fred@beacon.example.com",
                type="funder_user",
                permission_list=["funding:create"],
            ),
            Representative(
                id="rep-ivan",
                first_name="Ivan",
                last_name="Broker",
                email="ivan@brokers.example.com",
                type="iso_manager",
            ),
            Contact(id="contact-carla", first_name="Carla", last_name="Baker", email="carla@bakery.example.com"),
        ]
    )
    db.flush()
    db.add_all(
        [
            UserFunder(user_id="user-mona", funder_id=acme.id),
            UserFunder(user_id="user-fred", funder_id=beacon.id),
            RepresentativeISO(representative_id="rep-ivan", iso_id=brokers.id),
            ContactMerchant(contact_id="contact-carla", merchant_id=bakery.id),
        ]
    )

    # Catalog and accounts
    db.add_all(
        [
            FeeType(funder_id=acme.id, name="Origination", upfront=True),
            FeeType(funder_id=beacon.id, name="Wire fee", upfront=True),
            ExpenseType(funder_id=acme.id, name="ISO commission", commission=True),
            FunderAccount(
                funder_id=acme.id, name="Acme operating", bank="First National", available_balance=250_000_00
            ),
            FunderAccount(
                funder_id=beacon.id, name="Beacon operating", bank="Harbor Bank", available_balance=90_000_00
            ),
        ]
    )
    db.flush()

    # Book of business (amounts in cents)
    app1 = Application(
        id="app-bakery",
        name="Corner Bakery working capital",
        funder_id=acme.id,
        merchant_id=bakery.id,
        iso_id=brokers.id,
        request_amount=50_000_00,
    )
    app2 = Application(
        id="app-diner",
        name="Route 9 Diner renovation",
        funder_id=beacon.id,
        merchant_id=diner.id,
        iso_id=velocity.id,
        request_amount=30_000_00,
    )
    db.add_all([app1, app2])
    db.flush()

    f1 = Funding(
        id="fnd-bakery",
        name="Corner Bakery #1",
        identifier="ACME-0001",
        funder_id=acme.id,
        lender_id=acme_lender.id,
        merchant_id=bakery.id,
        iso_id=brokers.id,
        application_id=app1.id,
        funded_amount=40_000_00,
        payback_amount=54_000_00,
    )
    f2 = Funding(
        id="fnd-diner",
        name="Route 9 Diner #1",
        identifier="BCN-0001",
        funder_id=beacon.id,
        lender_id=beacon_lender.id,
        merchant_id=diner.id,
        iso_id=velocity.id,
        application_id=app2.id,
        funded_amount=25_000_00,
        payback_amount=33_750_00,
    )
    db.add_all([f1, f2])
    db.flush()

    db.add_all(
        [
            Payback(
                funding_id=f1.id,
                funder_id=acme.id,
                lender_id=acme_lender.id,
                merchant_id=bakery.id,
                due_date=date(2026, 1, 5),
                processed_date=date(2026, 1, 5),
                payback_amount=1_350_00,
                status=PaybackStatus.SUCCEED,
            ),
            Payback(
                funding_id=f1.id,
                funder_id=acme.id,
                lender_id=acme_lender.id,
                merchant_id=bakery.id,
                due_date=date(2026, 1, 12),
                payback_amount=1_350_00,
            ),
            Payback(
                funding_id=f2.id,
                funder_id=beacon.id,
                lender_id=beacon_lender.id,
                merchant_id=diner.id,
                due_date=date(2026, 1, 6),
                payback_amount=900_00,
            ),
        ]
    )

    s1 = Syndication(
        id="syn-bakery-sam",
        funding_id=f1.id,
        funder_id=acme.id,
        lender_id=f1.lender_id,
        syndicator_id=sam.id,
        participate_amount=10_000_00,
        participate_percent=0.25,
        start_date=date(2025, 12, 1),
    )
    db.add(s1)
    db.flush()

    db.add(
        Payout(
            syndication_id=s1.id,
            funding_id=f1.id,
            funder_id=acme.id,
            lender_id=acme_lender.id,
            syndicator_id=sam.id,
            payout_amount=337_50,
            fee_amount=10_00,
            redeemed_date=date(2026, 1, 6),
            pending=False,
        )
    )

    db.commit()
