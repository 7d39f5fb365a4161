import pytest

from tests.conftest import broker_payload, create_firm, investor_payload


@pytest.fixture
def broker(client, admin_headers):
    return create_firm(client, admin_headers, broker_payload())


def coverage_form(**overrides) -> dict:
    form = {"tp": "1520.50", "fiscal_year": "2024", "quarter": "1", "recommendation": "Buy"}
    form.update(overrides)
    return form


class TestCreateCoverage:
    """Tests for coverage creation under brokers"""

    def test_create_coverage(self, client, admin_headers, broker):
        response = client.post(
            f"/api/coverages/{broker['id']}", headers=admin_headers, data=coverage_form()
        )

        assert response.status_code == 201
        coverage = response.json()
        assert coverage["firm_id"] == broker["id"]
        assert coverage["tp"] == 1520.5
        assert coverage["recommendation"] == "Buy"
        assert coverage["coverage_file_id"] is None
        assert coverage["coverage_date"] is not None

        firm = client.get(f"/api/firms/{broker['id']}", headers=admin_headers).json()
        assert firm["coverage_ids"] == [coverage["id"]]

    def test_create_with_document(self, client, admin_headers, broker):
        response = client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(),
            files={"coverage": ("report.pdf", b"%PDF-1.4 report", "application/pdf")},
        )

        assert response.status_code == 201
        file_id = response.json()["coverage_file_id"]
        download = client.get(f"/api/files/{file_id}/download", headers=admin_headers)
        assert download.content == b"%PDF-1.4 report"

    def test_duplicate_period(self, client, admin_headers, broker):
        """Test one coverage per broker per fiscal year and quarter"""
        client.post(f"/api/coverages/{broker['id']}", headers=admin_headers, data=coverage_form())

        response = client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(tp="1600", recommendation="Hold"),
        )

        assert response.status_code == 409
        assert response.json()["success"] is False

    def test_same_period_other_broker(self, client, admin_headers, broker):
        other = create_firm(client, admin_headers, broker_payload(name="Zenith Brokers"))
        client.post(f"/api/coverages/{broker['id']}", headers=admin_headers, data=coverage_form())

        response = client.post(
            f"/api/coverages/{other['id']}", headers=admin_headers, data=coverage_form()
        )

        assert response.status_code == 201

    def test_duplicate_rolls_back_document(self, client, admin_headers, db_session, broker):
        """Test a rejected coverage leaves no orphaned file behind"""
        from investtrack.models.file import File

        client.post(f"/api/coverages/{broker['id']}", headers=admin_headers, data=coverage_form())
        client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(),
            files={"coverage": ("report.pdf", b"%PDF-1.4", "application/pdf")},
        )

        assert db_session.query(File).count() == 0

    def test_investor_rejected(self, client, admin_headers):
        investor = create_firm(client, admin_headers, investor_payload())

        response = client.post(
            f"/api/coverages/{investor['id']}", headers=admin_headers, data=coverage_form()
        )

        assert response.status_code == 400

    @pytest.mark.parametrize(
        "field,value",
        [("tp", "0"), ("quarter", "5"), ("recommendation", "Strong Buy")],
    )
    def test_invalid_values(self, client, admin_headers, broker, field, value):
        response = client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(**{field: value}),
        )

        assert response.status_code == 400
        assert response.json()["fields"][0]["field"] == field

    def test_missing_broker(self, client, admin_headers):
        response = client.post("/api/coverages/999", headers=admin_headers, data=coverage_form())

        assert response.status_code == 404


class TestManageCoverage:
    """Tests for reading, updating and deleting coverages"""

    @pytest.fixture
    def coverage(self, client, admin_headers, broker):
        return client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(),
            files={"coverage": ("q1.pdf", b"%PDF q1", "application/pdf")},
        ).json()

    def test_list(self, client, admin_headers, broker, coverage):
        client.post(
            f"/api/coverages/{broker['id']}",
            headers=admin_headers,
            data=coverage_form(quarter="2"),
        )

        response = client.get(f"/api/coverages/{broker['id']}", headers=admin_headers)

        data = response.json()
        assert data["total"] == 2
        assert [c["quarter"] for c in data["coverages"]] == [2, 1]

    def test_get_scoped_to_broker(self, client, admin_headers, coverage):
        other = create_firm(client, admin_headers, broker_payload(name="Zenith Brokers"))

        response = client.get(f"/api/coverages/{other['id']}/{coverage['id']}", headers=admin_headers)

        assert response.status_code == 404

    def test_update_fields(self, client, admin_headers, broker, coverage):
        response = client.put(
            f"/api/coverages/{broker['id']}/{coverage['id']}",
            headers=admin_headers,
            data={"tp": "1700", "recommendation": "Accumulate"},
        )

        assert response.status_code == 200
        assert response.json()["tp"] == 1700.0
        assert response.json()["recommendation"] == "Accumulate"
        assert response.json()["coverage_file_id"] == coverage["coverage_file_id"]

    def test_replace_document(self, client, admin_headers, broker, coverage):
        """Test a new document replaces and deletes the old one"""
        response = client.put(
            f"/api/coverages/{broker['id']}/{coverage['id']}",
            headers=admin_headers,
            files={"coverage": ("q1-v2.pdf", b"%PDF q1 v2", "application/pdf")},
        )

        assert response.status_code == 200
        new_file_id = response.json()["coverage_file_id"]
        assert new_file_id != coverage["coverage_file_id"]
        assert (
            client.get(f"/api/files/{coverage['coverage_file_id']}", headers=admin_headers).status_code
            == 404
        )
        assert client.get(f"/api/files/{new_file_id}/download", headers=admin_headers).content == b"%PDF q1 v2"

    def test_update_into_taken_period(self, client, admin_headers, broker, coverage):
        second = client.post(
            f"/api/coverages/{broker['id']}", headers=admin_headers, data=coverage_form(quarter="2")
        ).json()

        response = client.put(
            f"/api/coverages/{broker['id']}/{second['id']}",
            headers=admin_headers,
            data={"quarter": "1"},
        )

        assert response.status_code == 409

    def test_delete_removes_document(self, client, admin_headers, broker, coverage):
        response = client.delete(f"/api/coverages/{broker['id']}/{coverage['id']}", headers=admin_headers)

        assert response.status_code == 200
        assert client.get(f"/api/coverages/{broker['id']}/{coverage['id']}", headers=admin_headers).status_code == 404
        assert (
            client.get(f"/api/files/{coverage['coverage_file_id']}", headers=admin_headers).status_code
            == 404
        )
        firm = client.get(f"/api/firms/{broker['id']}", headers=admin_headers).json()
        assert firm["coverage_ids"] == []
