from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError, OperationalError
from app.models.user import User
import logging

logger = logging.getLogger(__name__)

def authenticate_user(db: Session, email: str, password: str):
    try:
        user = db.query(User).filter(User.email == email).first()
        if not user:
            logger.info(f"User not found: {email}")
            return None, "NOT_FOUND"
        if user.auth_provider != 'email':
            logger.info(f"User {email} signs in with {user.auth_provider}")
            return None, "WRONG_PROVIDER"
        if not user.verify_password(password):
            logger.info(f"Wrong password for user: {email}")
            return None, "INVALID_PASSWORD"
        logger.info(f"User authenticated: {email}")
        return user, "SUCCESS"
    except OperationalError as e:
        logger.error(f"Database connection error: {str(e)}")
        return None, "DB_CONNECTION_ERROR"
    except SQLAlchemyError as e:
        logger.error(f"SQLAlchemy error: {str(e)}")
        return None, "DB_ERROR"
