"""Tests for the HTTP API."""

from datetime import timedelta
from io import BytesIO

import pandas as pd
import pytest

from utils.timeutils import utc_now

from conftest import BASE_TEXT

NEAR_TEXT = "The recruitment law must pass this year without further delays"
OTHER_TEXT = "Members of the coalition met to discuss the state budget on Monday"


def _iso(days_ago: int) -> str:
    return (utc_now() - timedelta(days=days_ago)).isoformat() + "Z"


@pytest.fixture
def payload(subject):
    return {
        "subject_id": subject.id,
        "content": BASE_TEXT,
        "source_url": "https://news.example.com/article/1",
        "source_platform": "News",
        "source_type": "Primary",
        "comment_date": _iso(1),
    }


class TestCreateCommentRoute:
    """Tests for POST /comments/."""

    def test_primary_then_duplicate(self, client, payload):
        first = client.post("/comments/", json=payload)
        assert first.status_code == 201
        body = first.json()
        assert body["is_duplicate"] is False
        assert body["duplicate_of"] is None
        assert body["duplicate_group"]
        assert body["source_credibility"] == 7
        assert body["keywords"] == ["recruitment law"]

        second = client.post("/comments/", json={**payload, "content": f"  {BASE_TEXT}!! "})
        assert second.status_code == 201
        dup = second.json()
        assert dup["is_duplicate"] is True
        assert dup["duplicate_of"] == body["id"]
        assert dup["duplicate_group"] == body["duplicate_group"]

    def test_off_topic_rejected(self, client, payload):
        resp = client.post("/comments/", json={**payload, "content": "military service is important"})
        assert resp.status_code == 400

    def test_unknown_subject(self, client, payload):
        resp = client.post("/comments/", json={**payload, "subject_id": 999})
        assert resp.status_code == 404

    def test_unknown_subject_wins_over_off_topic(self, client, payload):
        resp = client.post("/comments/", json={
            **payload, "subject_id": 999, "content": "military service is important",
        })
        assert resp.status_code == 404

    def test_store_failure_returns_500(self, lenient_client, payload, db_session, monkeypatch, store_error):
        def fail():
            raise store_error

        monkeypatch.setattr(db_session, "commit", fail)

        resp = lenient_client.post("/comments/", json=payload)

        assert resp.status_code == 500
        assert resp.json() == {"success": False, "detail": "Internal server error"}

    @pytest.mark.parametrize("field,value", [
        ("source_url", "not-a-url"),
        ("source_url", "ftp://example.com/file"),
        ("source_platform", "MySpace"),
        ("source_type", "Tertiary"),
        ("source_credibility", 11),
        ("content", "short"),
        ("comment_date", "yesterday"),
    ])
    def test_validation(self, client, payload, field, value):
        resp = client.post("/comments/", json={**payload, field: value})
        assert resp.status_code == 422


class TestCheckDuplicateRoute:
    """Tests for POST /comments/check-duplicate."""

    def test_fuzzy(self, client, payload, subject):
        created = client.post("/comments/", json=payload).json()

        resp = client.post("/comments/check-duplicate", json={
            "subject_id": subject.id,
            "content": NEAR_TEXT,
        })

        assert resp.status_code == 200
        body = resp.json()
        assert body["is_duplicate"] is True
        assert body["duplicate_of"] == created["id"]
        assert body["similar_comments"][0]["id"] == created["id"]

    def test_blank_content(self, client, subject):
        resp = client.post("/comments/check-duplicate", json={"subject_id": subject.id, "content": "   "})
        assert resp.status_code == 400

    def test_punctuation_only_content(self, client, subject):
        resp = client.post("/comments/check-duplicate", json={"subject_id": subject.id, "content": "?!?!?!"})
        assert resp.status_code == 400


class TestListAndModerateRoutes:
    """Tests for listing, verification and deletion."""

    def test_list_shows_primaries_with_duplicates(self, client, payload, subject):
        c1 = client.post("/comments/", json=payload).json()
        c2 = client.post("/comments/", json={**payload, "source_platform": "Twitter"}).json()
        c3 = client.post("/comments/", json={**payload, "content": NEAR_TEXT}).json()

        resp = client.get("/comments/", params={"subject_id": subject.id})
        body = resp.json()

        assert body["total"] == 1
        assert [c["id"] for c in body["data"]] == [c1["id"]]
        assert [d["id"] for d in body["data"][0]["duplicates"]] == [c2["id"], c3["id"]]

        primaries = client.get(f"/subjects/{subject.id}/primary-comments").json()
        assert [c["id"] for c in primaries] == [c1["id"]]

    def test_verify_and_filter(self, client, payload):
        c1 = client.post("/comments/", json=payload).json()

        resp = client.patch(f"/comments/{c1['id']}/verify", json={"verified": True})
        assert resp.status_code == 200
        assert resp.json()["is_verified"] is True

        listed = client.get("/comments/", params={"verified": "true"}).json()
        assert [c["id"] for c in listed["data"]] == [c1["id"]]

    def test_verify_unknown(self, client):
        assert client.patch("/comments/999/verify", json={"verified": True}).status_code == 404

    def test_delete_orphans_duplicates(self, client, payload):
        c1 = client.post("/comments/", json=payload).json()
        c2 = client.post("/comments/", json={**payload, "source_platform": "Twitter"}).json()

        assert client.delete(f"/comments/{c1['id']}").status_code == 200
        assert client.get(f"/comments/{c1['id']}").status_code == 404

        orphan = client.get(f"/comments/{c2['id']}").json()
        assert orphan["duplicate_of"] is None
        assert orphan["primary_comment"] is None

    def test_delete_unknown(self, client):
        assert client.delete("/comments/31337").status_code == 404

    def test_bulk_endpoints(self, client, payload):
        c1 = client.post("/comments/", json=payload).json()

        verify = client.post("/comments/bulk-verify", json={"comment_ids": [c1["id"]], "verified": True})
        assert verify.json() == {"success": 1, "failed": 0}

        delete = client.post("/comments/bulk-delete", json={"comment_ids": [c1["id"], 555]})
        assert delete.json() == {"success": 1, "failed": 1}

    def test_stats(self, client, payload):
        client.post("/comments/", json=payload)

        stats = client.get("/comments/stats").json()

        assert stats["total"] == 1
        assert stats["by_platform"] == {"News": 1}


class TestSubjectRoutes:
    """Tests for /subjects."""

    def test_create_and_get(self, client):
        created = client.post("/subjects/", json={"name": "New Member", "faction": "Noam"})
        assert created.status_code == 201

        subject_id = created.json()["id"]
        assert client.get(f"/subjects/{subject_id}").json()["name"] == "New Member"
        assert client.get("/subjects/999").status_code == 404

    def test_comment_counts(self, client, payload, subject, other_subject):
        client.post("/comments/", json=payload)
        client.post("/comments/", json={**payload, "source_platform": "Twitter"})

        resp = client.get("/subjects/comment-counts", params={"ids": [subject.id, other_subject.id]})

        assert resp.status_code == 200
        assert resp.json() == {str(subject.id): 1, str(other_subject.id): 0}


class TestExcelUpload:
    """Tests for POST /excel/upload-comments."""

    def _xlsx(self, rows):
        buf = BytesIO()
        pd.DataFrame(rows).to_excel(buf, index=False)
        return buf.getvalue()

    def test_import_links_duplicates(self, client, subject):
        date = utc_now() - timedelta(days=2)
        base = {
            "subject_id": subject.id,
            "source_url": "https://news.example.com/a",
            "source_platform": "News",
            "source_type": "Primary",
            "comment_date": date,
        }
        data = self._xlsx([
            {**base, "content": BASE_TEXT},
            {**base, "content": NEAR_TEXT},
            {**base, "content": "too short"},
            {**base, "content": "Haredi draft exemptions are back on the table", "subject_id": 999},
        ])

        resp = client.post(
            "/excel/upload-comments",
            files={"file": ("comments.xlsx", data, "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet")},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["processed"] == 4
        assert body["saved"] == 2
        assert body["duplicates"] == 1
        assert body["errors"] == 2
        statuses = [d["status"] for d in body["details"]]
        assert statuses == ["saved", "duplicate", "error", "error"]

    def test_rejects_non_excel(self, client):
        resp = client.post("/excel/upload-comments", files={"file": ("c.csv", b"a,b", "text/csv")})
        assert resp.status_code == 400

    def test_blank_filename(self, client):
        data = self._xlsx([{"content": BASE_TEXT}])
        resp = client.post("/excel/upload-comments", files={"file": ("", data, "application/octet-stream")})
        assert resp.status_code in (400, 422)

    def test_reports_blank_content_and_fractional_credibility(self, client, subject):
        base = {
            "subject_id": subject.id,
            "source_url": "https://news.example.com/a",
            "source_platform": "News",
            "source_type": "Primary",
            "comment_date": utc_now() - timedelta(days=2),
        }
        data = self._xlsx([
            {**base, "content": BASE_TEXT, "source_credibility": 7.5},
            {**base, "content": None},
            {**base, "content": OTHER_TEXT, "source_credibility": 9},
        ])

        resp = client.post("/excel/upload-comments", files={"file": ("c.xlsx", data, "application/octet-stream")})

        body = resp.json()
        assert body["processed"] == 3
        assert body["saved"] == 1
        assert body["errors"] == 2
        assert [d["status"] for d in body["details"]] == ["error", "error", "saved"]
        assert "whole number" in body["details"][0]["detail"]
        assert "content" in body["details"][1]["detail"]

    def test_missing_columns(self, client):
        data = self._xlsx([{"content": BASE_TEXT}])
        resp = client.post("/excel/upload-comments", files={"file": ("c.xlsx", data, "application/octet-stream")})
        assert resp.status_code == 400
