"""End-to-end tests for applications, paybacks, syndications and payouts."""
from __future__ import annotations

from datetime import date

from mca_api.models import ISOMerchant, MerchantFunder, Syndication, SyndicatorLender


def _manager(headers_for, **filters):
    filters.setdefault("funder_list", ["F1"])
    return headers_for("U1", "funder", role="funder_manager", filter=filters)


def _syndication(db_session, id="SY1", funding_id="FN1", funder_id="F1", lender_id="L1", syndicator_id="S1"):
    db_session.add(
        Syndication(
            id=id,
            funding_id=funding_id,
            funder_id=funder_id,
            lender_id=lender_id,
            syndicator_id=syndicator_id,
            participate_amount=5_000_00,
            start_date=date(2026, 1, 1),
        )
    )
    db_session.commit()


# ---- Applications ----------------------------------------------------------------------


def test_application_create_in_another_funder_is_403(client, book, headers_for):
    payload = {"name": "Diner renewal", "funder_id": "F2", "merchant_id": "M2"}
    response = client.post("/applications", json=payload, headers=_manager(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this application"


def test_application_create_links_parties(client, book, headers_for, db_session):
    payload = {
        "name": "Bakery renewal",
        "funder_id": "F1",
        "merchant_id": "M1",
        "iso_id": "I1",
        "request_amount": 20000,
    }
    response = client.post("/applications", json=payload, headers=_manager(headers_for))
    assert response.status_code == 201
    assert response.json()["request_amount"] == 20000.0

    assert db_session.query(MerchantFunder).filter_by(merchant_id="M1", funder_id="F1").count() == 1
    assert db_session.query(ISOMerchant).filter_by(iso_id="I1", merchant_id="M1").count() == 1


def test_application_with_unknown_merchant_is_404(client, book, headers_for, db_session):
    payload = {"name": "Ghost", "funder_id": "F1", "merchant_id": "nope"}
    response = client.post("/applications", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 404
    assert response.json()["detail"] == "Merchant not found"
    assert db_session.query(MerchantFunder).filter_by(merchant_id="nope").count() == 0


def test_funding_with_unknown_iso_is_404(client, book, headers_for):
    payload = {"name": "Ghost", "funder_id": "F1", "lender_id": "L1", "merchant_id": "M1", "iso_id": "nope"}
    response = client.post("/fundings", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 404
    assert response.json()["detail"] == "Iso not found"


# ---- Paybacks --------------------------------------------------------------------------


def test_payback_on_out_of_scope_funding_is_403(client, book, headers_for):
    payload = {"funding_id": "FN2", "due_date": "2026-02-01", "payback_amount": 100}
    response = client.post("/paybacks", json=payload, headers=_manager(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this funding"


def test_payback_copies_owners_and_delete_is_hard(client, book, headers_for):
    payload = {"funding_id": "FN1", "due_date": "2026-02-01", "payback_amount": 100.5}
    response = client.post("/paybacks", json=payload, headers=_manager(headers_for))
    assert response.status_code == 201
    body = response.json()
    assert (body["funder_id"], body["lender_id"], body["merchant_id"]) == ("F1", "L1", "M1")
    assert body["payback_amount"] == 100.5

    response = client.delete(f"/paybacks/{body['id']}", headers=_manager(headers_for))
    assert response.status_code == 204

    response = client.get(f"/paybacks/{body['id']}", headers=_manager(headers_for))
    assert response.status_code == 404
    assert response.json()["detail"] == "Payback not found"


# ---- Syndications ----------------------------------------------------------------------


def test_syndications_follow_the_lender_grant(client, book, headers_for, db_session):
    _syndication(db_session)

    everything = client.get("/syndications", headers=_manager(headers_for))
    assert [s["id"] for s in everything.json()["docs"]] == ["SY1"]
    assert everything.json()["docs"][0]["lender_id"] == "L1"

    # Granted only lender L1X; SY1 runs through L1.
    headers = _manager(headers_for, lender_list=["L1X"])
    assert client.get("/syndications", headers=headers).json()["docs"] == []

    response = client.get("/syndications/SY1", headers=headers)
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this syndication"

    assert client.put("/syndications/SY1", json={"status": "CLOSED"}, headers=headers).status_code == 403
    assert client.delete("/syndications/SY1", headers=headers).status_code == 403


def test_syndications_filter_by_lender(client, book, headers_for, db_session):
    _syndication(db_session)

    response = client.get("/syndications", params={"lender": "L1"}, headers=headers_for("A1", "admin"))
    assert [s["id"] for s in response.json()["docs"]] == ["SY1"]

    response = client.get("/syndications", params={"lender": "L2"}, headers=headers_for("A1", "admin"))
    assert response.json()["docs"] == []


def test_syndication_on_out_of_scope_funding_is_403(client, book, headers_for):
    payload = {"funding_id": "FN2", "syndicator_id": "S1", "participate_amount": 1000}
    response = client.post("/syndications", json=payload, headers=_manager(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this funding"


def test_syndication_create_copies_lender_and_links_syndicator(client, book, headers_for, db_session):
    db_session.query(SyndicatorLender).delete()
    db_session.commit()

    payload = {"funding_id": "FN1", "syndicator_id": "S1", "participate_amount": 1000, "participate_percent": 0.1}
    response = client.post("/syndications", json=payload, headers=_manager(headers_for))
    assert response.status_code == 201
    body = response.json()
    assert (body["funder_id"], body["lender_id"]) == ("F1", "L1")
    assert db_session.query(SyndicatorLender).filter_by(syndicator_id="S1", lender_id="L1").count() == 1

    response = client.delete(f"/syndications/{body['id']}", headers=_manager(headers_for))
    assert response.status_code == 204
    assert client.get(f"/syndications/{body['id']}", headers=_manager(headers_for)).status_code == 404


def test_syndication_with_unknown_syndicator_is_404(client, book, headers_for):
    payload = {"funding_id": "FN1", "syndicator_id": "nope", "participate_amount": 1000}
    response = client.post("/syndications", json=payload, headers=headers_for("A1", "admin"))
    assert response.status_code == 404
    assert response.json()["detail"] == "Syndicator not found"


# ---- Payouts ---------------------------------------------------------------------------


def test_payout_create_and_hard_delete(client, book, headers_for, db_session):
    _syndication(db_session)

    response = client.post(
        "/payouts", json={"syndication_id": "SY1", "payout_amount": 75.25}, headers=_manager(headers_for)
    )
    assert response.status_code == 201
    body = response.json()
    assert (body["funder_id"], body["lender_id"], body["syndicator_id"]) == ("F1", "L1", "S1")

    response = client.delete(f"/payouts/{body['id']}", headers=_manager(headers_for))
    assert response.status_code == 204
    assert client.get(f"/payouts/{body['id']}", headers=_manager(headers_for)).status_code == 404


def test_payout_on_out_of_scope_syndication_is_403(client, book, headers_for, db_session):
    _syndication(db_session, id="SY2", funding_id="FN2", funder_id="F2", lender_id="L2")

    payload = {"syndication_id": "SY2", "payout_amount": 10}
    response = client.post("/payouts", json=payload, headers=_manager(headers_for))
    assert response.status_code == 403
    assert response.json()["detail"] == "You do not have permission to access this syndication"
