"""End-to-end tests for the remaining routes: parties, catalog, accounts, admin and self-service."""
from __future__ import annotations

from mca_api.constants import PortalOperation, PortalType
from mca_api.models import AccessLog, FeeType, FunderAccount, ISOFunder


def _manager(headers_for):
    return headers_for("U1", "funder", role="funder_manager", filter={"funder_list": ["F1"]})


def test_health_is_public(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_me_requires_authentication(client, book):
    assert client.get("/me").status_code == 401


def test_me_describes_scope_and_permissions(client, book, headers_for):
    response = client.get("/me", headers=_manager(headers_for))
    assert response.status_code == 200
    body = response.json()

    assert body["principal"]["id"] == "U1"
    assert body["principal"]["portal"] == "funder"
    assert body["principal"]["funder_list"] == ["F1"]
    assert body["principal"]["lender_list"] is None
    assert body["scopes"] == {
        "funder": ["F1"],
        "lender": "all",
        "iso": ["I1"],
        "syndicator": ["S1"],
        "merchant": ["M1"],
    }
    assert "funding:create" in body["permissions"]
    assert body["permissions"] == sorted(body["permissions"])


def test_me_for_admin(client, book, headers_for):
    body = client.get("/me", headers=headers_for("A1", "admin")).json()
    assert set(body["scopes"].values()) == {"all"}


def test_funders_list_is_scoped(client, book, headers_for):
    response = client.get("/funders", headers=_manager(headers_for))
    assert [f["id"] for f in response.json()["docs"]] == ["F1"]

    assert client.get("/funders/F2", headers=_manager(headers_for)).status_code == 403
    assert client.get("/funders", params={"id": "F2"}, headers=_manager(headers_for)).status_code == 403


def test_lenders_of_other_funders_are_hidden(client, book, headers_for):
    response = client.get("/lenders", headers=_manager(headers_for))
    assert response.status_code == 200
    assert sorted(lender["id"] for lender in response.json()["docs"]) == ["L1", "L1X"]


def test_merchant_sees_only_itself(client, book, headers_for):
    headers = headers_for("C1", "merchant", filter={"merchant_list": ["M1"]})
    response = client.get("/merchants", headers=headers)
    assert [m["id"] for m in response.json()["docs"]] == ["M1"]
    assert client.get("/merchants/M2", headers=headers).status_code == 403


def test_funder_creates_iso_linked_to_its_funder(client, book, headers_for, db_session):
    response = client.post("/isos", json={"name": "New Brokers"}, headers=_manager(headers_for))
    assert response.status_code == 400

    response = client.post("/isos", json={"name": "New Brokers", "funder_id": "F1"}, headers=_manager(headers_for))
    assert response.status_code == 201
    iso_id = response.json()["id"]
    assert db_session.query(ISOFunder).filter_by(iso_id=iso_id, funder_id="F1").count() == 1

    # The new ISO is visible on the next request.
    assert client.get(f"/isos/{iso_id}", headers=_manager(headers_for)).status_code == 200

    response = client.post("/isos", json={"name": "Elsewhere", "funder_id": "F2"}, headers=_manager(headers_for))
    assert response.status_code == 403


def test_fee_types_are_scoped_by_funder(client, book, headers_for, db_session):
    db_session.add_all(
        [
            FeeType(id="FT1", funder_id="F1", name="Origination"),
            FeeType(id="FT2", funder_id="F2", name="Wire"),
        ]
    )
    db_session.commit()

    response = client.get("/fee-types", headers=_manager(headers_for))
    assert [f["id"] for f in response.json()["docs"]] == ["FT1"]

    response = client.get("/fee-types/FT2", headers=_manager(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this fee type"

    response = client.post("/fee-types", json={"funder_id": "F2", "name": "Sneaky"}, headers=_manager(headers_for))
    assert response.status_code == 403


def test_accounts_are_scoped_by_owner(client, book, headers_for, db_session):
    db_session.add_all(
        [
            FunderAccount(id="FA1", funder_id="F1", name="Operating", available_balance=1_000_00),
            FunderAccount(id="FA2", funder_id="F2", name="Operating"),
        ]
    )
    db_session.commit()

    response = client.get("/funder-accounts", headers=_manager(headers_for))
    docs = response.json()["docs"]
    assert [a["id"] for a in docs] == ["FA1"]
    assert docs[0]["funder_id"] == "F1"
    assert docs[0]["available_balance"] == 1000.0

    assert client.get("/funder-accounts/FA2", headers=_manager(headers_for)).status_code == 403

    payload = {"owner_id": "F1", "name": "Reserve", "available_balance": 250.25}
    response = client.post("/funder-accounts", json=payload, headers=_manager(headers_for))
    assert response.status_code == 201
    assert response.json()["available_balance"] == 250.25


def test_admin_routes_need_admin_permissions(client, book, headers_for):
    assert client.get("/admins", headers=_manager(headers_for)).status_code == 403

    response = client.get("/admins", headers=headers_for("A1", "admin"))
    assert response.status_code == 200
    assert [a["id"] for a in response.json()["docs"]] == ["A1"]

    payload = {"first_name": "Ada", "last_name": "Root", "email": "ada@example.com"}
    response = client.post("/admins", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 201

    response = client.delete(f"/admins/{response.json()['id']}", headers=headers_for("A1", "admin"))
    assert response.json()["inactive"] is True


def test_access_logs_are_limited_to_self_without_permission(client, book, headers_for, db_session):
    db_session.add_all(
        [
            AccessLog(portal=PortalType.FUNDER, principal_id="U1", operation=PortalOperation.LOGIN),
            AccessLog(portal=PortalType.FUNDER, principal_id="U2", operation=PortalOperation.LOGIN),
            AccessLog(portal=PortalType.ADMIN, principal_id="A1", operation=PortalOperation.LOGOUT),
        ]
    )
    db_session.commit()

    own = client.get("/access-logs", headers=_manager(headers_for)).json()
    assert [log["principal_id"] for log in own["docs"]] == ["U1"]

    everything = client.get("/access-logs", headers=headers_for("A1", "admin")).json()
    assert everything["pagination"]["total"] == 3

    logins = client.get("/access-logs", params={"operation": "LOGIN"}, headers=headers_for("A1", "admin")).json()
    assert logins["pagination"]["total"] == 2


def test_invalid_sort_field_is_400(client, book, headers_for):
    response = client.get("/fundings", params={"sort": "-salary"}, headers=headers_for("A1", "admin"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid sort field: salary"
