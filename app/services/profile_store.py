"""
Reads and writes of user profiles, subscriptions and analysis results.

Every credit mutation runs inside a single transaction on the user's
subscription row, so a credit is never spent twice and the counters never
go below zero.
"""
from typing import List, Optional, Union
import uuid
import logging

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.flows.types import AnalyzeAndRateFaceOutput
from app.models.analysis_result import AnalysisResult
from app.models.processed_session import ProcessedSession
from app.models.subscription import Subscription
from app.models.user import User
from app.services.errors import (
    CreditAlreadyClaimedError,
    DocumentNotFoundError,
    NoCreditsError,
    PermissionDeniedError,
    ProfileStoreError,
)
from app.services.plans import get_plan
from app.utils.error_reporting import report_permission_error

logger = logging.getLogger(__name__)

EDITABLE_PROFILE_FIELDS = ("display_name", "photo_url")


def _user_path(user_id: str) -> str:
    return f"users/{user_id}"


def _analysis_path(user_id: str, analysis_id: str = None) -> str:
    path = f"users/{user_id}/analysisResults"
    return f"{path}/{analysis_id}" if analysis_id else path


def _deny(path: str, operation: str, request_data: dict = None) -> PermissionDeniedError:
    error = PermissionDeniedError(path, operation, request_data)
    report_permission_error(error)
    return error


def get_user_profile(db: Session, user_id: str) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise DocumentNotFoundError(_user_path(user_id))
    return user


def upsert_user_profile(
    db: Session,
    uid: Optional[str],
    email: Optional[str],
    display_name: Optional[str] = None,
    photo_url: Optional[str] = None,
    auth_provider: str = "email",
    google_id: Optional[str] = None,
    password: Optional[str] = None,
) -> User:
    """
    Creates the profile on first sign-in, or refreshes display name and photo.

    An existing profile only gets `display_name` / `photo_url` overwritten
    when a new non-empty value differs from the stored one; credits and
    identity fields are left alone. A new profile starts on the free plan.
    """
    uid = uid or uuid.uuid4().hex
    try:
        user = db.query(User).filter(User.id == uid).with_for_update().first()
        if user:
            changed = False
            if display_name and user.display_name != display_name:
                user.display_name = display_name
                changed = True
            if photo_url and user.photo_url != photo_url:
                user.photo_url = photo_url
                changed = True
            if changed:
                db.commit()
                logger.info(f"Profile refreshed for user {uid}")
            return user

        user = User(
            id=uid,
            email=email,
            display_name=display_name,
            photo_url=photo_url,
            auth_provider=auth_provider,
            google_id=google_id,
        )
        if password:
            user.set_password(password)
        user.subscription = Subscription()
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Profile created for user {uid} ({email})")
        return user

    except IntegrityError as e:
        # Another sign-in created the same profile first
        db.rollback()
        existing = db.query(User).filter(User.id == uid).first()
        if existing:
            return existing
        logger.error(f"Error creating profile for {email}: {str(e)}")
        raise
    except SQLAlchemyError as e:
        logger.error(f"Database error upserting profile {uid}: {str(e)}")
        db.rollback()
        raise


def save_analysis_result(
    db: Session,
    user_id: str,
    analysis: Union[AnalyzeAndRateFaceOutput, dict],
    image_urls: List[str],
) -> AnalysisResult:
    """
    Spends one analysis credit and stores the result in the same transaction.

    The subscription row is locked, the count is checked and then decremented
    with a guarded UPDATE, so with N credits at most N concurrent saves can
    succeed. Any failure rolls back both the decrement and the insert.
    """
    if not isinstance(analysis, AnalyzeAndRateFaceOutput):
        analysis = AnalyzeAndRateFaceOutput.model_validate(analysis)
    if len(image_urls) != 3:
        raise ValueError("Exactly three image references are required (front, left, right)")

    try:
        subscription = db.query(Subscription).filter(
            Subscription.user_id == user_id
        ).with_for_update().first()

        if subscription is None:
            raise DocumentNotFoundError(_user_path(user_id))

        logger.info(f"Analysis credits before save: {subscription.analyses_remaining} (user {user_id})")

        if subscription.analyses_remaining <= 0:
            logger.warning(f"No analysis credits left for user {user_id}")
            raise NoCreditsError()

        result = db.execute(
            update(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.analyses_remaining > 0,
            )
            .values(analyses_remaining=Subscription.analyses_remaining - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            logger.warning(f"Credit spent concurrently for user {user_id}")
            raise NoCreditsError()

        record = AnalysisResult(
            user_id=user_id,
            face_shape=analysis.face_shape.shape,
            face_shape_description=analysis.face_shape.description,
            feature_ratings=[rating.model_dump() for rating in analysis.feature_ratings],
            image_urls=list(image_urls),
        )
        db.add(record)
        db.commit()

    except ProfileStoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Error saving analysis for user {user_id}: {str(e)}")
        db.rollback()
        raise

    db.refresh(record)
    db.refresh(subscription)
    logger.info(f"Analysis {record.id} saved. Credits left: {subscription.analyses_remaining}")
    return record


def list_analysis_results(db: Session, user_id: str) -> List[AnalysisResult]:
    return (
        db.query(AnalysisResult)
        .filter(AnalysisResult.user_id == user_id)
        .order_by(AnalysisResult.created_at.desc())
        .all()
    )


def get_analysis_result(db: Session, user_id: str, analysis_id: str) -> AnalysisResult:
    record = db.query(AnalysisResult).filter(
        AnalysisResult.id == analysis_id,
        AnalysisResult.user_id == user_id,
    ).first()
    if not record:
        raise DocumentNotFoundError(_analysis_path(user_id, analysis_id))
    return record


def delete_analysis_result(db: Session, user_id: str, analysis_id: str) -> None:
    record = get_analysis_result(db, user_id, analysis_id)
    try:
        db.delete(record)
        db.commit()
        logger.info(f"Analysis {analysis_id} deleted for user {user_id}")
    except SQLAlchemyError as e:
        logger.error(f"Error deleting analysis {analysis_id}: {str(e)}")
        db.rollback()
        raise


def delete_all_user_data(db: Session, user_id: str) -> int:
    """Deletes every analysis in the user's namespace; the profile stays."""
    try:
        deleted = (
            db.query(AnalysisResult)
            .filter(AnalysisResult.user_id == user_id)
            .delete(synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        logger.error(f"Error deleting data for user {user_id}: {str(e)}")
        db.rollback()
        raise
    db.expire_all()
    logger.info(f"Deleted {deleted} analyses for user {user_id}")
    return deleted


def delete_user_account(db: Session, acting_user_id: str, user_id: str) -> None:
    if acting_user_id != user_id:
        raise _deny(_user_path(user_id), "delete")

    user = get_user_profile(db, user_id)
    try:
        db.query(AnalysisResult).filter(
            AnalysisResult.user_id == user_id
        ).delete(synchronize_session=False)
        db.delete(user)
        db.commit()
        logger.info(f"Account {user_id} deleted")
    except SQLAlchemyError as e:
        logger.error(f"Error deleting account {user_id}: {str(e)}")
        db.rollback()
        raise


def update_user_profile(db: Session, acting_user_id: str, user_id: str, data: dict) -> User:
    if acting_user_id != user_id:
        raise _deny(_user_path(user_id), "update", data)

    unknown = set(data) - set(EDITABLE_PROFILE_FIELDS)
    if unknown:
        raise ValueError(f"Fields cannot be edited: {sorted(unknown)}")

    user = get_user_profile(db, user_id)
    try:
        for field, value in data.items():
            if value is not None:
                setattr(user, field, value)
        db.commit()
        db.refresh(user)
        return user
    except SQLAlchemyError as e:
        logger.error(f"Error updating profile {user_id}: {str(e)}")
        db.rollback()
        raise


def decrement_advice_chats(db: Session, user_id: str) -> int:
    """
    Spends one advice credit without a precondition check.

    Callers check the balance first. Two requests racing on the last credit
    can still both pass that check; the table constraint then rejects the
    second decrement and it surfaces as NoCreditsError.
    """
    try:
        result = db.execute(
            update(Subscription)
            .where(Subscription.user_id == user_id)
            .values(advice_chats_remaining=Subscription.advice_chats_remaining - 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            raise DocumentNotFoundError(_user_path(user_id))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning(f"No advice credits left for user {user_id}")
        raise NoCreditsError("You have no advice credits remaining.")
    except ProfileStoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Error spending advice credit for user {user_id}: {str(e)}")
        db.rollback()
        raise

    remaining = db.query(Subscription.advice_chats_remaining).filter(
        Subscription.user_id == user_id
    ).scalar()
    logger.info(f"Advice credit spent for user {user_id}. Remaining: {remaining}")
    return remaining


def claim_social_credit(db: Session, user_id: str) -> Subscription:
    try:
        subscription = db.query(Subscription).filter(
            Subscription.user_id == user_id
        ).with_for_update().first()
        if subscription is None:
            raise DocumentNotFoundError(_user_path(user_id))
        if subscription.instagram_credit_claimed:
            raise CreditAlreadyClaimedError()

        subscription.instagram_credit_claimed = True
        subscription.analyses_remaining += 1
        db.commit()
    except ProfileStoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Error claiming social credit for user {user_id}: {str(e)}")
        db.rollback()
        raise

    db.refresh(subscription)
    logger.info(f"Social credit claimed by user {user_id}")
    return subscription


def apply_plan(db: Session, user_id: str, plan_key: str, session_id: str) -> tuple[Subscription, bool]:
    """
    Grants a plan's credits once per checkout session.

    Returns the subscription and whether the grant happened on this call.
    """
    plan = get_plan(plan_key)
    if plan is None:
        raise ValueError(f"Unknown plan: {plan_key}")

    try:
        already = db.query(ProcessedSession).filter(
            ProcessedSession.session_id == session_id
        ).first()
        subscription = db.query(Subscription).filter(
            Subscription.user_id == user_id
        ).with_for_update().first()
        if subscription is None:
            raise DocumentNotFoundError(_user_path(user_id))

        if already:
            logger.info(f"Session {session_id} was already processed")
            db.rollback()
            return subscription, False

        logger.info(f"Credits before plan {plan.name}: {subscription.analyses_remaining}")
        subscription.plan_name = plan.name
        subscription.analyses_remaining += plan.analyses
        subscription.advice_chats_remaining += plan.advice_chats
        db.add(ProcessedSession(session_id=session_id, user_id=user_id, plan_key=plan.key))
        db.commit()

    except IntegrityError:
        # The same session was applied by a concurrent request
        db.rollback()
        return get_user_profile(db, user_id).subscription, False
    except ProfileStoreError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        logger.error(f"Error applying plan {plan_key} for user {user_id}: {str(e)}")
        db.rollback()
        raise

    db.refresh(subscription)
    logger.info(f"Plan {plan.name} applied. Credits after: {subscription.analyses_remaining}")
    return subscription, True
