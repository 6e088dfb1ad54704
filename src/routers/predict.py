import logging
from functools import lru_cache
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.orm import Session

from config.settings import EngineSettings, get_engine_settings, get_inference_settings
from services.trait_engine.engine import TraitEngine
from services.trait_engine.features import prepare_text
from services.trait_engine.loader import get_default_lexicon, load_lexicon_from_file
from services.trait_engine.models import TraitValidationError
from src.auth.schemas import AuthenticatedUser
from src.auth.supabase import get_current_user
from src.db.database import get_db
from src.inference.client import InferenceClient, InferenceError, ModelLoadingError
from src.schemas.prediction import (
    PredictionRequest,
    PredictionResponse,
    PredictionSummary,
    StoredPrediction,
    SurveyItem,
    ValidationErrorDetail,
)
from src.services.storage import PredictionStore, StorageError
from src.services.summary import summarize_predictions

router = APIRouter()
logger = logging.getLogger(__name__)

SURVEY_INPUT_CONTENT = "IPIP-50 Survey Response"
STORAGE_WARNING = "Results calculated but not saved to database"


@lru_cache(maxsize=None)
def get_trait_engine() -> TraitEngine:
    settings = get_engine_settings()
    lexicon = load_lexicon_from_file(settings.lexicon_path) if settings.lexicon_path else get_default_lexicon()
    return TraitEngine(
        lexicon=lexicon,
        survey_mode=settings.survey_mode,
        max_text_chars=settings.max_text_chars,
    )


def get_inference_client() -> Optional[InferenceClient]:
    settings = get_inference_settings()
    if not settings.enabled:
        return None
    return InferenceClient.from_settings(settings)


def get_prediction_store(db: Session = Depends(get_db)) -> PredictionStore:
    return PredictionStore(db)


@router.post(
    "/predict",
    response_model=PredictionResponse,
    response_model_exclude_none=True,
    responses={400: {"model": ValidationErrorDetail}},
)
async def predict(
    request: PredictionRequest,
    engine: TraitEngine = Depends(get_trait_engine),
    inference: Optional[InferenceClient] = Depends(get_inference_client),
    store: PredictionStore = Depends(get_prediction_store),
    engine_settings: EngineSettings = Depends(get_engine_settings),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """
    Scores a text sample or a 50-item survey, stores the result and returns it.
    Storage failures are reported as a warning on an otherwise successful response.
    """
    min_words = engine_settings.min_text_words or None
    try:
        if request.type == "text":
            text = prepare_text(request.text, max_chars=engine.max_text_chars, min_words=min_words)
            if inference is not None:
                base_scores = await inference.predict(text)
                result = engine.analyze_model_output(text, base_scores)
            else:
                result = engine.analyze_text(text)
            input_content = text
        else:
            result = engine.analyze_survey(request.responses)
            input_content = SURVEY_INPUT_CONTENT
    except TraitValidationError as e:
        logger.info(f"Rejected {request.type} input from user {user.id}: {e}")
        raise HTTPException(status_code=400, detail=e.to_dict())
    except ModelLoadingError as e:
        logger.warning(f"Inference model loading; asked client to retry after {e.retry_after}s")
        raise HTTPException(
            status_code=503,
            detail={"error": e.message, "retryAfter": e.retry_after},
            headers={"Retry-After": str(e.retry_after)},
        )
    except InferenceError as e:
        logger.error(f"Inference provider failed: {e.message} {e.detail}")
        raise HTTPException(status_code=502, detail={"error": e.message, "detail": e.detail})
    except Exception as e:
        logger.exception(f"Unexpected error during prediction: {e}")
        raise HTTPException(status_code=500, detail="Internal Server Error")

    response = PredictionResponse(**result.to_dict())
    try:
        record = await run_in_threadpool(
            store.save,
            user_id=user.id,
            input_type=request.type,
            input_content=input_content,
            result=result,
            share=request.share,
        )
        response.id = record.id
        response.public_id = record.public_id
    except StorageError:
        response.warning = STORAGE_WARNING

    return response


@router.get("/survey/items", response_model=List[SurveyItem])
async def survey_items(engine: TraitEngine = Depends(get_trait_engine)):
    return engine.get_survey_items()


@router.get("/predictions", response_model=List[StoredPrediction])
def list_predictions(
    limit: int = Query(20, ge=1, le=100),
    store: PredictionStore = Depends(get_prediction_store),
    user: AuthenticatedUser = Depends(get_current_user),
):
    try:
        return store.list_for_user(user.id, limit=limit)
    except StorageError:
        raise HTTPException(status_code=503, detail="Prediction history is unavailable")


@router.get("/predictions/summary", response_model=PredictionSummary)
def prediction_summary(
    limit: int = Query(100, ge=1, le=1000),
    store: PredictionStore = Depends(get_prediction_store),
    user: AuthenticatedUser = Depends(get_current_user),
):
    try:
        records = store.list_for_user(user.id, limit=limit)
    except StorageError:
        raise HTTPException(status_code=503, detail="Prediction history is unavailable")
    return summarize_predictions(record.to_dict() for record in records)


@router.get("/predictions/shared/{public_id}", response_model=StoredPrediction)
def shared_prediction(public_id: str, store: PredictionStore = Depends(get_prediction_store)):
    try:
        record = store.get_shared(public_id)
    except StorageError:
        raise HTTPException(status_code=503, detail="Prediction lookup is unavailable")
    if record is None:
        raise HTTPException(status_code=404, detail="Prediction not found")
    return record
