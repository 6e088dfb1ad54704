from datetime import datetime
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from config.settings import EngineSettings, get_engine_settings
from services.trait_engine.engine import TraitEngine
from src.auth.schemas import AuthenticatedUser
from src.auth.supabase import get_current_user
from src.db.models import Prediction
from src.inference.client import InferenceClient, InferenceError, InferenceOutputError, ModelLoadingError
from src.routers import predict as predict_module
from src.routers.predict import (
    STORAGE_WARNING,
    SURVEY_INPUT_CONTENT,
    get_inference_client,
    get_prediction_store,
    get_trait_engine,
    router as predict_router,
)
from src.services.storage import PredictionStore, StorageError

# Create a FastAPI app instance and include the router for testing
app = FastAPI()
app.include_router(predict_router, prefix="/api/v1")

client = TestClient(app)

TEST_USER = AuthenticatedUser(id="user-123", email="user@example.com")
SCHEDULE_TEXT = "I plan and organize my schedule every day with detail and system."


def stored_prediction(**overrides) -> Prediction:
    values = dict(
        id="pred-1",
        public_id="pub-1",
        user_id=TEST_USER.id,
        input_type="text",
        input_content="hello",
        method="text_analysis",
        scores={'O': 0.5, 'C': 0.8, 'E': 0.4, 'A': 0.5, 'N': 0.5},
        percentiles={'O': 50, 'C': 80, 'E': 40, 'A': 50, 'N': 50},
        label="Conscientiousness",
        share=True,
        created_at=datetime(2024, 5, 1, 12, 0, 0),
    )
    values.update(overrides)
    return Prediction(**values)


@pytest.fixture
def mock_store():
    store = MagicMock(spec=PredictionStore)
    store.save.return_value = SimpleNamespace(id="pred-1", public_id="pub-1")
    return store


@pytest.fixture
def overrides(mock_store):
    """Authenticated caller, real engine, no external model, mocked storage."""
    app.dependency_overrides[get_current_user] = lambda: TEST_USER
    app.dependency_overrides[get_trait_engine] = lambda: TraitEngine()
    app.dependency_overrides[get_inference_client] = lambda: None
    app.dependency_overrides[get_prediction_store] = lambda: mock_store
    app.dependency_overrides[get_engine_settings] = lambda: EngineSettings()
    yield app.dependency_overrides
    app.dependency_overrides.clear()


# --- POST /predict: text ---

def test_predict_text(overrides, mock_store):
    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 200
    result = response.json()
    assert result["label"] == "Conscientiousness"
    assert result["percentiles"] == {'O': 50, 'C': 80, 'E': 40, 'A': 50, 'N': 50}
    assert result["method"] == "text_analysis"
    assert result["id"] == "pred-1"
    assert "warning" not in result

    kwargs = mock_store.save.call_args.kwargs
    assert kwargs["user_id"] == TEST_USER.id
    assert kwargs["input_type"] == "text"
    assert kwargs["input_content"] == SCHEDULE_TEXT
    assert kwargs["share"] is False

def test_predict_empty_text(overrides, mock_store):
    response = client.post("/api/v1/predict", json={"type": "text", "text": "   "})

    assert response.status_code == 400
    assert response.json()["detail"]["message"] == "Text input is empty"
    mock_store.save.assert_not_called()

def test_predict_text_below_minimum_words(overrides):
    overrides[get_engine_settings] = lambda: EngineSettings(min_text_words=50)
    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 400
    assert response.json()["detail"]["required"] == 50
    assert response.json()["detail"]["actual"] == 12

def test_predict_text_with_external_model(overrides):
    inference = MagicMock(spec=InferenceClient)
    inference.predict = AsyncMock(return_value={'O': 0.6, 'C': 0.5, 'E': 0.7, 'A': 0.4, 'N': 0.3})
    overrides[get_inference_client] = lambda: inference

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 200
    result = response.json()
    assert result["method"] == "model_enhanced"
    assert result["label"] == "Extraversion"
    assert result["scores"]['C'] == pytest.approx(0.55)
    inference.predict.assert_awaited_once_with(SCHEDULE_TEXT)

def test_predict_model_loading(overrides):
    inference = MagicMock(spec=InferenceClient)
    inference.predict = AsyncMock(side_effect=ModelLoadingError(20))
    overrides[get_inference_client] = lambda: inference

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 503
    assert response.headers["Retry-After"] == "20"
    assert response.json()["detail"]["retryAfter"] == 20

def test_predict_inference_failure(overrides):
    inference = MagicMock(spec=InferenceClient)
    inference.predict = AsyncMock(side_effect=InferenceError("AI model error (500)", status_code=500, detail="boom"))
    overrides[get_inference_client] = lambda: inference

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 502
    assert response.json()["detail"]["error"] == "AI model error (500)"


# --- POST /predict: survey ---

def test_predict_survey(overrides, mock_store):
    responses = [5 if i % 5 == 0 else 3 for i in range(50)]
    response = client.post("/api/v1/predict", json={"type": "survey", "responses": responses, "share": True})

    assert response.status_code == 200
    result = response.json()
    assert result["scores"]['O'] == 1.0
    assert result["label"] == "Openness"
    assert result["method"] == "survey"

    kwargs = mock_store.save.call_args.kwargs
    assert kwargs["input_content"] == SURVEY_INPUT_CONTENT
    assert kwargs["share"] is True

def test_predict_incomplete_survey(overrides):
    response = client.post("/api/v1/predict", json={"type": "survey", "responses": [3] * 49})

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["required"] == 50
    assert detail["actual"] == 49

def test_predict_out_of_range_survey(overrides):
    responses = [3] * 50
    responses[9] = 7
    response = client.post("/api/v1/predict", json={"type": "survey", "responses": responses})

    assert response.status_code == 400
    assert "Response 10" in response.json()["detail"]["message"]

def test_predict_unknown_type(overrides):
    response = client.post("/api/v1/predict", json={"type": "audio", "text": "hi"})
    assert response.status_code == 422


# --- POST /predict: failures around scoring ---

def test_predict_storage_failure_is_a_warning(overrides, mock_store):
    mock_store.save.side_effect = StorageError("database is locked")

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 200
    result = response.json()
    assert result["warning"] == STORAGE_WARNING
    assert result["label"] == "Conscientiousness"
    assert "id" not in result

def test_predict_unexpected_engine_error(overrides):
    engine = MagicMock(spec=TraitEngine)
    engine.analyze_survey.side_effect = Exception("A critical engine failure occurred")
    overrides[get_trait_engine] = lambda: engine

    response = client.post("/api/v1/predict", json={"type": "survey", "responses": [3] * 50})

    assert response.status_code == 500
    assert response.json()["detail"] == "Internal Server Error"

def test_predict_requires_authentication(overrides):
    del overrides[get_current_user]
    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 401
    assert response.json()["detail"]["code"] == "AUTH_001"


# --- Read endpoints ---

def test_survey_items(overrides):
    response = client.get("/api/v1/survey/items")

    assert response.status_code == 200
    items = response.json()
    assert len(items) == 50
    assert items[0]["trait_name"] == "Extraversion"

def test_list_predictions(overrides, mock_store):
    mock_store.list_for_user.return_value = [stored_prediction()]

    response = client.get("/api/v1/predictions?limit=5")

    assert response.status_code == 200
    records = response.json()
    assert records[0]["public_id"] == "pub-1"
    assert "input_content" not in records[0]
    mock_store.list_for_user.assert_called_once_with(TEST_USER.id, limit=5)

def test_list_predictions_limit_validated(overrides):
    assert client.get("/api/v1/predictions?limit=0").status_code == 422
    assert client.get("/api/v1/predictions?limit=101").status_code == 422

def test_list_predictions_storage_unavailable(overrides, mock_store):
    mock_store.list_for_user.side_effect = StorageError("no such table")
    assert client.get("/api/v1/predictions").status_code == 503

def test_prediction_summary(overrides, mock_store):
    mock_store.list_for_user.return_value = [
        stored_prediction(),
        stored_prediction(id="pred-2", public_id="pub-2", label="Openness",
                          scores={'O': 0.7, 'C': 0.4, 'E': 0.4, 'A': 0.5, 'N': 0.3}),
    ]

    response = client.get("/api/v1/predictions/summary")

    assert response.status_code == 200
    summary = response.json()
    assert summary["total_predictions"] == 2
    assert summary["average_scores"]['O'] == pytest.approx(0.6)
    assert summary["trait_distribution"]['C'] == 1
    assert summary["trait_distribution"]['O'] == 1

def test_shared_prediction(overrides, mock_store):
    mock_store.get_shared.return_value = stored_prediction()

    response = client.get("/api/v1/predictions/shared/pub-1")

    assert response.status_code == 200
    assert response.json()["label"] == "Conscientiousness"
    mock_store.get_shared.assert_called_once_with("pub-1")

def test_shared_prediction_not_found(overrides, mock_store):
    mock_store.get_shared.return_value = None
    assert client.get("/api/v1/predictions/shared/missing").status_code == 404

def test_predict_unreadable_model_output(overrides):
    inference = MagicMock(spec=InferenceClient)
    inference.predict = AsyncMock(side_effect=InferenceOutputError("Model returned a non-JSON body: <html>"))
    overrides[get_inference_client] = lambda: inference

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 502

def test_predict_saves_in_threadpool(overrides, mock_store, mocker):
    spy = mocker.spy(predict_module, "run_in_threadpool")

    response = client.post("/api/v1/predict", json={"type": "text", "text": SCHEDULE_TEXT})

    assert response.status_code == 200
    spy.assert_called_once()
    assert spy.call_args.args[0] == mock_store.save
    mock_store.save.assert_called_once()
