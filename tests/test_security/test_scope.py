"""Tests for scopes and the role/scope resolver (no database)."""

from __future__ import annotations

import pytest

from mca_api.constants import EntityKind, PortalType
from mca_api.security.principal import Principal
from mca_api.security.resolver import SCOPE_RULES, ScopeResolver, ScopeRule, resolve_scope
from mca_api.security.scope import Scope, ScopeMap, ScopeMode


class FakeLookup:
    """In-memory relationship lookup that records every call."""

    def __init__(self, links: dict[tuple[EntityKind, EntityKind], dict[str, list[str]]]):
        self.links = links
        self.calls: list[tuple[EntityKind, tuple[str, ...], EntityKind]] = []

    def list_related_ids(self, owner_kind, owner_ids, target_kind):
        self.calls.append((owner_kind, tuple(owner_ids), target_kind))
        table = self.links.get((owner_kind, target_kind), {})
        found: set[str] = set()
        for owner_id in owner_ids:
            found.update(table.get(owner_id, []))
        return sorted(found)


def test_scope_of_empty_collapses_to_none():
    assert Scope.of([]).mode is ScopeMode.NONE
    assert Scope.of([None, ""]).mode is ScopeMode.NONE


def test_scope_allows():
    scope = Scope.of(["f1", "f2"])
    assert scope.allows("f1")
    assert not scope.allows("f3")
    assert not scope.allows(None)
    assert Scope.all().allows("anything")
    assert not Scope.none().allows("f1")


def test_scope_describe():
    assert Scope.all().describe() == "all"
    assert Scope.none().describe() == "none"
    assert Scope.of(["b", "a"]).describe() == ["a", "b"]


def test_admin_is_unrestricted_everywhere():
    scopes = resolve_scope(Principal(id="a1", portal=PortalType.ADMIN, role="admin"))
    assert scopes == ScopeMap.unrestricted()


def test_admin_ignores_lists_in_token():
    admin = Principal(id="a1", portal=PortalType.ADMIN, role="admin", funder_list=("f1",))
    assert resolve_scope(admin).funder.unrestricted


def test_funder_with_no_funders_gets_none():
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user")
    lookup = FakeLookup({})
    scopes = resolve_scope(principal, lookup)
    assert scopes.funder.mode is ScopeMode.NONE
    assert scopes.iso.mode is ScopeMode.NONE
    assert scopes.merchant.mode is ScopeMode.NONE
    assert scopes.syndicator.mode is ScopeMode.NONE
    # Derived kinds with an empty source never hit the store.
    assert lookup.calls == []


def test_funder_lender_scope_depends_on_grant():
    granted = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",), lender_list=("l1",))
    ungranted = Principal(id="u2", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))
    empty = Principal(id="u3", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",), lender_list=())

    lookup = FakeLookup({})
    assert ScopeResolver(granted, lookup).scope(EntityKind.LENDER).ids == frozenset({"l1"})
    assert ScopeResolver(ungranted, lookup).scope(EntityKind.LENDER).unrestricted
    assert ScopeResolver(empty, lookup).scope(EntityKind.LENDER).mode is ScopeMode.NONE


def test_funder_derives_isos_from_its_funders():
    lookup = FakeLookup({(EntityKind.FUNDER, EntityKind.ISO): {"f1": ["i1", "i2"], "f2": ["i3"]}})
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))

    scope = ScopeResolver(principal, lookup).scope(EntityKind.ISO)

    assert scope.mode is ScopeMode.SET
    assert scope.ids == frozenset({"i1", "i2"})


def test_iso_portal():
    lookup = FakeLookup(
        {
            (EntityKind.ISO, EntityKind.FUNDER): {"i1": ["f1"]},
            (EntityKind.ISO, EntityKind.MERCHANT): {"i1": ["m1", "m2"]},
        }
    )
    principal = Principal(id="r1", portal=PortalType.ISO, role="iso_sales", iso_list=("i1",))
    scopes = resolve_scope(principal, lookup)

    assert scopes.iso.ids == frozenset({"i1"})
    assert scopes.funder.ids == frozenset({"f1"})
    assert scopes.merchant.ids == frozenset({"m1", "m2"})
    assert scopes.lender.unrestricted
    assert scopes.syndicator.mode is ScopeMode.NONE


def test_syndicator_portal():
    lookup = FakeLookup(
        {
            (EntityKind.SYNDICATOR, EntityKind.FUNDER): {"s1": ["f1"]},
            (EntityKind.SYNDICATOR, EntityKind.LENDER): {"s1": ["l1"]},
        }
    )
    principal = Principal(id="s1", portal=PortalType.SYNDICATOR, role="syndicator", syndicator_list=("s1",))
    scopes = resolve_scope(principal, lookup)

    assert scopes.syndicator.ids == frozenset({"s1"})
    assert scopes.funder.ids == frozenset({"f1"})
    assert scopes.lender.ids == frozenset({"l1"})
    assert scopes.iso.mode is ScopeMode.NONE
    assert scopes.merchant.mode is ScopeMode.NONE


def test_syndicator_without_lender_links_gets_none_for_lenders():
    lookup = FakeLookup({(EntityKind.SYNDICATOR, EntityKind.FUNDER): {"s1": ["f1"]}})
    principal = Principal(id="s1", portal=PortalType.SYNDICATOR, role="syndicator", syndicator_list=("s1",))

    assert ScopeResolver(principal, lookup).scope(EntityKind.LENDER).mode is ScopeMode.NONE


def test_merchant_portal():
    lookup = FakeLookup(
        {
            (EntityKind.MERCHANT, EntityKind.FUNDER): {"m1": ["f1"]},
            (EntityKind.MERCHANT, EntityKind.ISO): {"m1": ["i1"]},
        }
    )
    principal = Principal(id="c1", portal=PortalType.MERCHANT, role="merchant", merchant_list=("m1",))
    scopes = resolve_scope(principal, lookup)

    assert scopes.merchant.ids == frozenset({"m1"})
    assert scopes.funder.ids == frozenset({"f1"})
    assert scopes.iso.ids == frozenset({"i1"})
    assert scopes.syndicator.mode is ScopeMode.NONE


def test_bookkeeper_portal():
    principal = Principal(id="b1", portal=PortalType.BOOKKEEPER, role="bookkeeper", funder_list=("f1",))
    scopes = resolve_scope(principal)

    assert scopes.funder.ids == frozenset({"f1"})
    assert scopes.lender.unrestricted
    assert scopes.iso.unrestricted


def test_lender_portal():
    lookup = FakeLookup(
        {
            (EntityKind.LENDER, EntityKind.FUNDER): {"l1": ["f1"]},
            (EntityKind.LENDER, EntityKind.SYNDICATOR): {"l1": ["s1"]},
        }
    )
    principal = Principal(id="lu1", portal=PortalType.LENDER, role="lender", lender_list=("l1",))
    scopes = resolve_scope(principal, lookup)

    assert scopes.lender.ids == frozenset({"l1"})
    assert scopes.funder.ids == frozenset({"f1"})
    assert scopes.syndicator.ids == frozenset({"s1"})
    assert scopes.iso.mode is ScopeMode.NONE


def test_resolver_memoizes_per_kind():
    lookup = FakeLookup({(EntityKind.FUNDER, EntityKind.ISO): {"f1": ["i1"]}})
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))
    resolver = ScopeResolver(principal, lookup)

    first = resolver.scope(EntityKind.ISO)
    second = resolver.scope(EntityKind.ISO)
    resolver.resolve()

    assert first is second
    assert lookup.calls.count((EntityKind.FUNDER, ("f1",), EntityKind.ISO)) == 1


def test_new_resolver_sees_new_links():
    links = {(EntityKind.FUNDER, EntityKind.ISO): {"f1": ["i1"]}}
    lookup = FakeLookup(links)
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))

    assert ScopeResolver(principal, lookup).scope(EntityKind.ISO).ids == frozenset({"i1"})
    links[(EntityKind.FUNDER, EntityKind.ISO)]["f1"].append("i2")
    assert ScopeResolver(principal, lookup).scope(EntityKind.ISO).ids == frozenset({"i1", "i2"})


def test_derived_scope_without_lookup_raises():
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))
    with pytest.raises(RuntimeError):
        ScopeResolver(principal).scope(EntityKind.ISO)


def test_related_rule_without_source_kind_raises(monkeypatch):
    monkeypatch.setitem(SCOPE_RULES[PortalType.FUNDER], EntityKind.ISO, ScopeRule("related"))
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("f1",))
    with pytest.raises(RuntimeError):
        ScopeResolver(principal, FakeLookup({})).scope(EntityKind.ISO)


def test_every_portal_resolves_every_kind():
    lookup = FakeLookup({})
    for portal in PortalType:
        principal = Principal(id="p", portal=portal, role="x")
        scopes = resolve_scope(principal, lookup)
        for kind in EntityKind:
            assert scopes.scope(kind).mode in set(ScopeMode)
