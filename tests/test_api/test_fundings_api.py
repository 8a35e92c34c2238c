"""End-to-end tests for funding routes: authentication, permissions and scoping."""
from __future__ import annotations

from datetime import date

from mca_api.models import ISOFunder, MerchantFunder, Payout, Syndication, Syndicator, SyndicatorFunder


def _funder_user(headers_for, **claims):
    claims.setdefault("filter", {"funder_list": ["F1"]})
    return headers_for("U1", "funder", role="funder_manager", **claims)


def test_list_requires_authentication(client, book):
    response = client.get("/fundings")
    assert response.status_code == 401
    assert response.json()["detail"] == "Authentication required"


def test_malformed_authorization_header_is_400(client, book):
    response = client.get("/fundings", headers={"Authorization": "Token abc"})
    assert response.status_code == 400


def test_bad_token_is_401(client, book):
    response = client.get("/fundings", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401


def test_admin_sees_everything(client, book, headers_for):
    response = client.get("/fundings", headers=headers_for("A1", "admin"))
    assert response.status_code == 200
    body = response.json()
    assert sorted(f["id"] for f in body["docs"]) == ["FN1", "FN2"]
    assert body["pagination"]["total"] == 2


def test_funder_user_sees_only_own_fundings(client, book, headers_for):
    response = client.get("/fundings", headers=_funder_user(headers_for))
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["docs"]] == ["FN1"]


def test_requesting_out_of_scope_funder_is_403(client, book, headers_for):
    response = client.get("/fundings", params={"funder": "F2"}, headers=_funder_user(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this funder"


def test_requesting_a_list_of_funders_is_intersected(client, book, headers_for):
    response = client.get("/fundings", params=[("funder", "F1"), ("funder", "F2")], headers=_funder_user(headers_for))
    assert response.status_code == 200
    assert [f["id"] for f in response.json()["docs"]] == ["FN1"]


def test_get_out_of_scope_funding_is_403_naming_funding(client, book, headers_for):
    response = client.get("/fundings/FN2", headers=_funder_user(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this funding"


def test_get_missing_funding_is_404(client, book, headers_for):
    response = client.get("/fundings/nope", headers=headers_for("A1", "admin"))
    assert response.status_code == 404
    assert response.json()["detail"] == "Funding not found"


def test_lender_grant_restricts_fundings(client, book, headers_for):
    headers = _funder_user(headers_for, filter={"funder_list": ["F1"], "lender_list": ["L1X"]})
    response = client.get("/fundings/FN1", headers=headers)
    assert response.status_code == 403


def test_funder_user_role_cannot_create(client, book, headers_for):
    headers = headers_for("U2", "funder", role="funder_user", filter={"funder_list": ["F1"]})
    payload = {"name": "New", "funder_id": "F1", "lender_id": "L1", "merchant_id": "M1"}
    response = client.post("/fundings", json=payload, headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "Not authorized to perform this action"


def test_extra_permission_from_token_allows_create(client, book, headers_for, db_session):
    headers = headers_for(
        "U2", "funder", role="funder_user", filter={"funder_list": ["F1"]}, permission_list=["funding:create"]
    )
    payload = {"name": "Bakery #2", "funder_id": "F1", "lender_id": "L1", "merchant_id": "M1", "funded_amount": 1500.5}
    response = client.post("/fundings", json=payload, headers=headers)
    assert response.status_code == 201
    assert response.json()["funded_amount"] == 1500.5


def test_create_in_another_funder_is_403(client, book, headers_for):
    payload = {"name": "Sneaky", "funder_id": "F2", "lender_id": "L2", "merchant_id": "M2"}
    response = client.post("/fundings", json=payload, headers=_funder_user(headers_for))
    assert response.status_code == 403


def test_create_with_foreign_lender_is_400(client, book, headers_for):
    payload = {"name": "Mixed", "funder_id": "F1", "lender_id": "L2", "merchant_id": "M1"}
    response = client.post("/fundings", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 400
    assert response.json()["detail"] == "Lender does not belong to the funder"


def test_create_links_merchant_and_iso_to_funder(client, book, headers_for, db_session):
    payload = {"name": "Cross", "funder_id": "F2", "lender_id": "L2", "merchant_id": "M1", "iso_id": "I1"}
    response = client.post("/fundings", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 201

    assert db_session.query(MerchantFunder).filter_by(merchant_id="M1", funder_id="F2").count() == 1
    assert db_session.query(ISOFunder).filter_by(iso_id="I1", funder_id="F2").count() == 1

    # The next request resolves scope again and sees the new link.
    iso_headers = headers_for("R1", "iso", filter={"iso_list": ["I1"]})
    response = client.get("/fundings", headers=iso_headers)
    assert response.status_code == 200
    assert response.json()["pagination"]["total"] == 2


def test_delete_is_soft(client, book, headers_for):
    response = client.delete("/fundings/FN1", headers=_funder_user(headers_for))
    assert response.status_code == 200
    assert response.json()["inactive"] is True

    listed = client.get("/fundings", headers=_funder_user(headers_for)).json()
    assert listed["docs"] == []
    listed = client.get("/fundings", params={"include_inactive": "true"}, headers=_funder_user(headers_for)).json()
    assert [f["id"] for f in listed["docs"]] == ["FN1"]


def test_syndicator_without_lenders_gets_empty_payouts(client, book, headers_for, db_session):
    db_session.add(Syndicator(id="S2", name="No Lenders LLC"))
    db_session.flush()
    db_session.add_all(
        [
            SyndicatorFunder(syndicator_id="S2", funder_id="F1"),
            Syndication(
                id="SY1",
                funding_id="FN1",
                funder_id="F1",
                lender_id="L1",
                syndicator_id="S1",
                start_date=date(2026, 1, 1),
            ),
            Syndication(
                id="SY2",
                funding_id="FN1",
                funder_id="F1",
                lender_id="L1",
                syndicator_id="S2",
                start_date=date(2026, 1, 1),
            ),
        ]
    )
    db_session.flush()
    db_session.add_all(
        [
            Payout(
                syndication_id="SY1",
                funding_id="FN1",
                funder_id="F1",
                lender_id="L1",
                syndicator_id="S1",
                payout_amount=250_00,
            ),
            Payout(
                syndication_id="SY2",
                funding_id="FN1",
                funder_id="F1",
                lender_id="L1",
                syndicator_id="S2",
                payout_amount=125_00,
            ),
        ]
    )
    db_session.commit()

    response = client.get("/payouts", headers=headers_for("S2", "syndicator"))
    assert response.status_code == 200
    assert response.json()["docs"] == []

    # S1 works with lender L1 and sees only its own payout.
    response = client.get("/payouts", headers=headers_for("S1", "syndicator"))
    assert response.status_code == 200
    docs = response.json()["docs"]
    assert [d["syndicator_id"] for d in docs] == ["S1"]
    assert docs[0]["payout_amount"] == 250.0


def test_inactive_principal_is_rejected(client, book, headers_for, db_session):
    from mca_api.models import User

    db_session.get(User, "U1").inactive = True
    db_session.commit()

    response = client.get("/fundings", headers=_funder_user(headers_for))
    assert response.status_code == 401
