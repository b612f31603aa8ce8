# This project was developed with assistance from AI tools.
"""Functional tests: client registration and application matching."""

import pytest
from db import Client

from .personas import GRACE_USER_ID, PAUL_USER_ID, field_officer_grace, field_officer_paul, manager

pytestmark = pytest.mark.functional


class TestClientRegistration:
    def test_field_officer_registers_client(self, make_client, session):
        client = make_client(field_officer_grace(), session)
        resp = client.post(
            "/api/clients/",
            json={"full_name": "  Peter Okot ", "phone_number": "0772000333"},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["full_name"] == "Peter Okot"
        assert body["created_by"] == GRACE_USER_ID
        assert len(session.rows(Client)) == 3

    def test_blank_name_rejected(self, make_client, session):
        resp = make_client(field_officer_grace(), session).post(
            "/api/clients/", json={"full_name": ""}
        )
        assert resp.status_code == 422

    def test_field_officer_sees_only_own_clients(self, make_client, session):
        client = make_client(field_officer_grace(), session)
        assert client.get("/api/clients/1").status_code == 200
        assert client.get("/api/clients/2").status_code == 404

    def test_manager_sees_any_client(self, make_client, session):
        resp = make_client(manager(), session).get("/api/clients/2")
        assert resp.status_code == 200
        assert resp.json()["full_name"] == "Sarah Nakato"


class TestClientApplications:
    def test_matches_ranked_best_first(self, make_client, session):
        resp = make_client(manager(), session).get("/api/clients/1/applications")
        assert resp.status_code == 200
        body = resp.json()

        matched = [(m["application"]["id"], m["match_type"]) for m in body["data"]]
        assert matched == [(101, "exact"), (102, "fuzzy")]
        assert body["data"][0]["score"] == 100.0
        assert body["data"][1]["score"] == pytest.approx(81.82)

    def test_statistics_cover_matched_applications(self, make_client, session):
        body = make_client(manager(), session).get("/api/clients/1/applications").json()
        stats = body["statistics"]
        assert stats["total_applications"] == 2
        assert stats["active_applications"] == 2
        assert stats["approved_loans"] == 0
        assert float(stats["total_loan_amount"]) == 54000000

    def test_unrelated_client_gets_own_applications_only(self, make_client, session):
        body = make_client(manager(), session).get("/api/clients/2/applications").json()
        assert [m["application"]["id"] for m in body["data"]] == [103]

    def test_matching_respects_data_scope(self, make_client, session):
        session.rows(Client)[0].created_by = PAUL_USER_ID
        body = make_client(field_officer_paul(), session).get("/api/clients/1/applications").json()
        assert body["data"] == []
        assert body["statistics"]["total_applications"] == 0

    def test_unknown_client_returns_404(self, make_client, session):
        resp = make_client(manager(), session).get("/api/clients/99/applications")
        assert resp.status_code == 404
