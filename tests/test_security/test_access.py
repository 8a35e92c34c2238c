"""Tests for the post-fetch access gate."""

from __future__ import annotations

from types import SimpleNamespace

import pytest

from mca_api.constants import EntityKind, PortalType
from mca_api.errors import Forbidden, NotFound
from mca_api.security.access import assert_access, extract_id, owner_references
from mca_api.security.context import AuthContext
from mca_api.security.principal import Principal
from mca_api.security.scope import Scope, ScopeMap


def _scopes(**overrides: Scope) -> ScopeMap:
    values = {kind.value: Scope.all() for kind in EntityKind}
    values.update(overrides)
    return ScopeMap(**values)


def test_funding_inside_funder_scope_with_unrestricted_lender_passes():
    funding = {"funder": "F1", "lender": "L9"}
    assert_access(_scopes(funder=Scope.of(["F1"])), funding, "funding")


def test_funding_with_lender_outside_scope_is_forbidden():
    funding = {"funder": "F1", "lender": "L9"}
    with pytest.raises(Forbidden) as exc_info:
        assert_access(_scopes(funder=Scope.of(["F1"]), lender=Scope.of(["L1"])), funding, "funding")
    assert exc_info.value.detail == "You do not have permission to access this funding"


def test_missing_entity_is_not_found():
    with pytest.raises(NotFound) as exc_info:
        assert_access(_scopes(), None, "funding")
    assert exc_info.value.status_code == 404
    assert exc_info.value.detail == "Funding not found"


def test_entity_without_owner_references_passes():
    restricted = _scopes(funder=Scope.of(["F1"]), lender=Scope.none())
    assert_access(restricted, {}, "funding")
    assert_access(restricted, SimpleNamespace(), "funding")


def test_every_present_reference_must_be_in_scope():
    scopes = _scopes(funder=Scope.of(["F1"]), merchant=Scope.of(["M1"]))
    assert_access(scopes, {"funder_id": "F1", "merchant_id": "M1"})
    with pytest.raises(Forbidden):
        assert_access(scopes, {"funder_id": "F1", "merchant_id": "M2"})


def test_absent_reference_is_not_checked():
    scopes = _scopes(funder=Scope.of(["F1"]), iso=Scope.none())
    assert_access(scopes, {"funder_id": "F1", "iso_id": None}, "funding")


def test_none_scope_denies_a_present_reference():
    with pytest.raises(Forbidden):
        assert_access(_scopes(syndicator=Scope.none()), {"syndicator_id": "S1"}, "syndication")


def test_populated_references_and_orm_objects():
    funder = SimpleNamespace(id="F1", name="Acme")
    funding = SimpleNamespace(funder=funder, lender={"_id": "L1"})
    assert_access(_scopes(funder=Scope.of(["F1"]), lender=Scope.of(["L1"])), funding, "funding")

    other = SimpleNamespace(funder=SimpleNamespace(id="F2"))
    with pytest.raises(Forbidden):
        assert_access(_scopes(funder=Scope.of(["F1"])), other, "funding")


def test_multi_valued_reference_passes_when_any_id_in_scope():
    scopes = _scopes(funder=Scope.of(["F2"]))
    assert_access(scopes, {"funder_list": ["F1", "F2"]}, "merchant")
    with pytest.raises(Forbidden):
        assert_access(scopes, {"funder_list": ["F3", "F4"]}, "merchant")


def test_unreadable_reference_is_denied():
    with pytest.raises(Forbidden):
        assert_access(_scopes(funder=Scope.of(["F1"])), {"funder": {"name": "no id"}}, "funding")


def test_extract_id():
    assert extract_id("F1") == "F1"
    assert extract_id(7) == "7"
    assert extract_id({"id": "F1"}) == "F1"
    assert extract_id({"_id": "F1"}) == "F1"
    assert extract_id(SimpleNamespace(id="F1")) == "F1"
    assert extract_id(None) is None
    assert extract_id("") is None


def test_owner_references_prefers_single_fields():
    entity = {"funder_id": "F1", "funder_list": ["F2"]}
    assert owner_references(entity, EntityKind.FUNDER) == (["F1"], False)
    assert owner_references({"funder_ids": ["F1", "F2"]}, EntityKind.FUNDER) == (["F1", "F2"], True)
    assert owner_references({}, EntityKind.FUNDER) is None


def test_auth_context_require_uses_resolver():
    principal = Principal(id="u1", portal=PortalType.FUNDER, role="funder_user", funder_list=("F1",))
    ctx = AuthContext.build(principal, lookup=None)

    ctx.require({"funder_id": "F1"}, "funding")
    with pytest.raises(Forbidden):
        ctx.require({"funder_id": "F2"}, "funding")
