"""Tests for admin endpoints."""

import time

from fastapi.testclient import TestClient

from photo_journal.api.app import create_app


def test_admin_pickers_requires_token(container) -> None:
    client = TestClient(create_app(container))

    assert client.get("/admin/pickers").status_code == 401


def test_admin_pickers_lists_watches(container) -> None:
    headers = {"X-Admin-Token": "admin-token"}
    with TestClient(create_app(container)) as client:
        assert client.get("/admin/pickers", headers=headers).json() == {
            "pickers": []
        }
        session = client.post("/api/photos/picker/session").json()
        client.post(f"/api/photos/picker/session/{session['id']}/watch")

        for _ in range(200):
            pickers = client.get("/admin/pickers", headers=headers).json()["pickers"]
            if pickers[0]["photos"]:
                break
            time.sleep(0.01)

    assert pickers[0]["session_id"] == session["id"]
    assert pickers[0]["user_id"] == "default-user"
    assert pickers[0]["state"] == "COMPLETED"
