import pytest
from PIL import Image

import app.routes.face_analysis as face_routes
from app.flows.base import FlowError
from app.flows.types import AnalyzeAndRateFaceOutput, StyleAdviceOutput
from app.models.analysis_result import AnalysisResult
from app.models.subscription import Subscription
from app.services import profile_store
from test_data import IMAGE_URLS, SAMPLE_ANALYSIS, auth_headers, create_test_user, png_bytes, set_credits


def photo_files():
    image = png_bytes()
    return {
        "front": ("front.png", image, "image/png"),
        "left": ("left.png", image, "image/png"),
        "right": ("right.png", image, "image/png"),
    }


@pytest.fixture
def fake_face_flow(monkeypatch):
    calls = []

    def fake(flow_input):
        calls.append(flow_input)
        return AnalyzeAndRateFaceOutput.model_validate(SAMPLE_ANALYSIS)

    monkeypatch.setattr(face_routes, "analyze_and_rate_face", fake)
    return calls


@pytest.fixture
def fake_advice_flow(monkeypatch):
    calls = []

    def fake(flow_input):
        calls.append(flow_input)
        return StyleAdviceOutput(advice="Go for a textured crop.")

    monkeypatch.setattr(face_routes, "get_style_advice", fake)
    return calls


def test_analyze_saves_result_and_spends_credit(client, db, fake_face_flow):
    user = create_test_user(db)

    response = client.post("/analysis/analyze", files=photo_files(), headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["analyses_remaining"] == 0
    assert body["analysis"]["face_shape"]["shape"] == "Oval"
    assert all(url.startswith("data:image/png;base64,") for url in body["analysis"]["image_urls"])
    assert fake_face_flow[0].front_photo_data_uri.startswith("data:image/png;base64,")
    assert db.query(AnalysisResult).filter_by(user_id=user.id).count() == 1


def test_analyze_without_credits_skips_the_model(client, db, fake_face_flow):
    user = create_test_user(db)
    set_credits(db, user, analyses=0)

    response = client.post("/analysis/analyze", files=photo_files(), headers=auth_headers(user))

    assert response.status_code == 402
    assert fake_face_flow == []


def test_analyze_requires_all_three_photos(client, db, fake_face_flow):
    user = create_test_user(db)
    files = photo_files()
    del files["right"]

    response = client.post("/analysis/analyze", files=files, headers=auth_headers(user))

    assert response.status_code == 422


def test_analyze_rejects_non_images(client, db, fake_face_flow):
    user = create_test_user(db)
    files = photo_files()
    files["left"] = ("left.png", b"definitely not a picture", "image/png")

    response = client.post("/analysis/analyze", files=files, headers=auth_headers(user))

    assert response.status_code == 400
    assert fake_face_flow == []


def test_analyze_rejects_oversized_dimensions(client, db, fake_face_flow, monkeypatch):
    user = create_test_user(db)
    files = photo_files()
    files["front"] = ("front.png", png_bytes(size=(64, 64)), "image/png")
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)

    response = client.post("/analysis/analyze", files=files, headers=auth_headers(user))

    assert response.status_code == 400
    assert fake_face_flow == []
    subscription = db.query(Subscription).filter_by(user_id=user.id).one()
    assert subscription.analyses_remaining == 1


def test_flow_failure_keeps_the_credit(client, db, monkeypatch):
    user = create_test_user(db)

    def failing(flow_input):
        raise FlowError("analyzeAndRateFaceFlow", "empty response")

    monkeypatch.setattr(face_routes, "analyze_and_rate_face", failing)
    response = client.post("/analysis/analyze", files=photo_files(), headers=auth_headers(user))

    assert response.status_code == 502
    db.refresh(user.subscription)
    assert user.subscription.analyses_remaining == 1


def test_analyze_requires_authentication(client):
    response = client.post("/analysis/analyze", files=photo_files())
    assert response.status_code == 401


def test_history_get_and_delete(client, db):
    user = create_test_user(db)
    record = profile_store.save_analysis_result(db, user.id, SAMPLE_ANALYSIS, IMAGE_URLS)
    headers = auth_headers(user)

    listing = client.get("/analysis", headers=headers)
    assert listing.status_code == 200
    assert [a["id"] for a in listing.json()["analyses"]] == [record.id]

    single = client.get(f"/analysis/{record.id}", headers=headers)
    assert single.status_code == 200
    assert single.json()["feature_ratings"][0]["name"] == "Jawline"

    deleted = client.delete(f"/analysis/{record.id}", headers=headers)
    assert deleted.status_code == 200
    assert client.get(f"/analysis/{record.id}", headers=headers).status_code == 404


def test_cannot_read_another_users_analysis(client, db):
    owner = create_test_user(db, email="owner@example.com")
    other = create_test_user(db, email="other@example.com")
    record = profile_store.save_analysis_result(db, owner.id, SAMPLE_ANALYSIS, IMAGE_URLS)

    assert client.get(f"/analysis/{record.id}", headers=auth_headers(other)).status_code == 404
    assert client.delete(f"/analysis/{record.id}", headers=auth_headers(other)).status_code == 404


def test_advice_spends_credit_and_returns_answer(client, db, fake_advice_flow):
    user = create_test_user(db)
    record = profile_store.save_analysis_result(db, user.id, SAMPLE_ANALYSIS, IMAGE_URLS)
    set_credits(db, user, advice_chats=2)

    response = client.post(
        f"/analysis/{record.id}/advice",
        json={"query": "Which haircut suits me?"},
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    assert response.json() == {"advice": "Go for a textured crop.", "advice_chats_remaining": 1}
    assert fake_advice_flow[0].analysis_result.face_shape.shape == "Oval"
    assert fake_advice_flow[0].user_query == "Which haircut suits me?"


def test_advice_without_credits_is_refused(client, db, fake_advice_flow):
    user = create_test_user(db)
    record = profile_store.save_analysis_result(db, user.id, SAMPLE_ANALYSIS, IMAGE_URLS)

    response = client.post(
        f"/analysis/{record.id}/advice",
        json={"query": "Which haircut suits me?"},
        headers=auth_headers(user),
    )

    assert response.status_code == 402
    assert fake_advice_flow == []


def test_advice_credit_is_spent_even_if_the_model_fails(client, db, monkeypatch):
    user = create_test_user(db)
    record = profile_store.save_analysis_result(db, user.id, SAMPLE_ANALYSIS, IMAGE_URLS)
    set_credits(db, user, advice_chats=1)

    def failing(flow_input):
        raise FlowError("getStyleAdviceFlow", "model call failed")

    monkeypatch.setattr(face_routes, "get_style_advice", failing)
    response = client.post(
        f"/analysis/{record.id}/advice",
        json={"query": "Which haircut suits me?"},
        headers=auth_headers(user),
    )

    assert response.status_code == 502
    remaining = db.query(Subscription.advice_chats_remaining).filter_by(user_id=user.id).scalar()
    assert remaining == 0


def test_advice_rejects_empty_question(client, db, fake_advice_flow):
    user = create_test_user(db)
    record = profile_store.save_analysis_result(db, user.id, SAMPLE_ANALYSIS, IMAGE_URLS)
    set_credits(db, user, advice_chats=1)

    response = client.post(f"/analysis/{record.id}/advice", json={"query": "   "}, headers=auth_headers(user))

    assert response.status_code == 400
    assert fake_advice_flow == []
