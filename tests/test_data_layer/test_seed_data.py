"""
Tests for the demo seed.

Uses db_session fixture: in-memory SQLite, rolled back after each test.
"""
from __future__ import annotations

from sqlalchemy import func, select

from mca_api.constants import EntityKind, PortalType
from mca_api.db.init_db import _has_seed_data, _seed
from mca_api.models import Funding, Lender, Syndication, UserFunder
from mca_api.security.principal import Principal
from mca_api.security.resolver import ScopeResolver
from mca_api.services.relationships import RelationshipStore


def test_seed_is_consistent(db_session):
    assert not _has_seed_data(db_session)
    _seed(db_session)
    assert _has_seed_data(db_session)

    # Every funding's lender belongs to the funding's funder.
    for funding in db_session.scalars(select(Funding)).all():
        assert db_session.get(Lender, funding.lender_id).funder_id == funding.funder_id

    for syndication in db_session.scalars(select(Syndication)).all():
        assert syndication.lender_id == db_session.get(Funding, syndication.funding_id).lender_id

    assert db_session.scalar(select(func.count()).select_from(Funding)) == 2


def test_seeded_broker_scope(db_session):
    _seed(db_session)
    principal = Principal(id="rep-ivan", portal=PortalType.ISO, role="iso_manager", iso_list=("iso-brokers",))
    resolver = ScopeResolver(principal, RelationshipStore(db_session))

    assert resolver.scope(EntityKind.FUNDER).ids == frozenset({"fund-acme"})
    assert resolver.scope(EntityKind.MERCHANT).ids == frozenset({"merch-bakery", "merch-garage"})


def test_seeded_users_belong_to_their_funders(db_session):
    _seed(db_session)
    memberships = db_session.execute(select(UserFunder.user_id, UserFunder.funder_id)).all()
    assert sorted(tuple(m) for m in memberships) == [("user-fred", "fund-beacon"), ("user-mona", "fund-acme")]
