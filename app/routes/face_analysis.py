from fastapi import APIRouter, Depends, HTTPException, UploadFile, File
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel
from sqlalchemy.orm import Session
from app.database import get_db
from app.models.user import User
from app.middleware.auth import get_current_user
from app.flows.base import FlowError
from app.flows.types import AnalyzeAndRateFaceInput, AnalyzeAndRateFaceOutput, StyleAdviceInput
from app.flows.analyze_and_rate_face import analyze_and_rate_face
from app.flows.get_style_advice import get_style_advice
from app.services import profile_store
from app.services.errors import DocumentNotFoundError, NoCreditsError
from app.utils.image_handler import read_photo
import logging

logger = logging.getLogger(__name__)
router = APIRouter()

class AdviceRequest(BaseModel):
    query: str

def record_to_analysis(record) -> AnalyzeAndRateFaceOutput:
    return AnalyzeAndRateFaceOutput.model_validate({
        "face_shape": {
            "shape": record.face_shape,
            "description": record.face_shape_description,
        },
        "feature_ratings": record.feature_ratings,
    })

@router.post("/analyze")
async def analyze_face(
    front: UploadFile = File(...),
    left: UploadFile = File(...),
    right: UploadFile = File(...),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        logger.info(f"Starting face analysis for user: {current_user.id}")

        # Early check so the model is not called for a user with no credits;
        # the save below enforces it transactionally
        subscription = current_user.subscription
        if not subscription or subscription.analyses_remaining <= 0:
            logger.warning(f"No analysis credits for user: {current_user.id}")
            raise HTTPException(
                status_code=402,
                detail="You have no analysis credits remaining. Please upgrade your plan."
            )

        image_urls = [
            await read_photo(front, "front"),
            await read_photo(left, "left"),
            await read_photo(right, "right"),
        ]
        logger.info("Photos read successfully")

        flow_input = AnalyzeAndRateFaceInput(
            front_photo_data_uri=image_urls[0],
            left_photo_data_uri=image_urls[1],
            right_photo_data_uri=image_urls[2],
        )
        analysis = await run_in_threadpool(analyze_and_rate_face, flow_input)
        logger.info("Face analysis completed")

        record = profile_store.save_analysis_result(db, current_user.id, analysis, image_urls)

        return {
            "analysis": record.to_dict(),
            "analyses_remaining": current_user.subscription.analyses_remaining,
        }

    except HTTPException:
        raise
    except NoCreditsError as e:
        raise HTTPException(status_code=402, detail=str(e))
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FlowError as e:
        logger.error(f"Face analysis flow failed: {str(e)}")
        raise HTTPException(status_code=502, detail="The analysis could not be completed. No credit was used.")
    except Exception as e:
        logger.error(f"Error during face analysis: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not save your analysis.")

@router.get("")
async def list_analyses(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    records = profile_store.list_analysis_results(db, current_user.id)
    return {"analyses": [record.to_dict() for record in records]}

@router.get("/{analysis_id}")
async def get_analysis(
    analysis_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        return profile_store.get_analysis_result(db, current_user.id, analysis_id).to_dict()
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

@router.delete("/{analysis_id}")
async def delete_analysis(
    analysis_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        profile_store.delete_analysis_result(db, current_user.id, analysis_id)
        return {"message": "Analysis result has been deleted."}
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")
    except Exception as e:
        logger.error(f"Error deleting analysis {analysis_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not delete the analysis result.")

@router.post("/{analysis_id}/advice")
async def style_advice(
    analysis_id: str,
    payload: AdviceRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Please enter a question")

    try:
        record = profile_store.get_analysis_result(db, current_user.id, analysis_id)
    except DocumentNotFoundError:
        raise HTTPException(status_code=404, detail="Analysis not found")

    subscription = current_user.subscription
    if not subscription or subscription.advice_chats_remaining <= 0:
        logger.warning(f"No advice credits for user: {current_user.id}")
        raise HTTPException(
            status_code=402,
            detail="No advice credits left. Please upgrade your subscription to continue."
        )

    try:
        # The credit is spent before the model call, whatever its outcome
        remaining = profile_store.decrement_advice_chats(db, current_user.id)

        result = await run_in_threadpool(
            get_style_advice,
            StyleAdviceInput(analysis_result=record_to_analysis(record), user_query=query),
        )
        return {"advice": result.advice, "advice_chats_remaining": remaining}

    except NoCreditsError as e:
        raise HTTPException(status_code=402, detail=str(e))
    except DocumentNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except FlowError as e:
        logger.error(f"Style advice flow failed: {str(e)}")
        raise HTTPException(status_code=502, detail="Could not get advice. Please try again.")
    except Exception as e:
        logger.error(f"Error getting style advice: {str(e)}")
        raise HTTPException(status_code=500, detail="Could not get advice. Please try again.")
