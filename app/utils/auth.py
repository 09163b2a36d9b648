from datetime import datetime, timedelta
from jose import JWTError, ExpiredSignatureError, jwt
from app.config.settings import settings
import logging

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"

def create_access_token(data: dict, expires_delta: timedelta = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(days=settings.ACCESS_TOKEN_EXPIRE_DAYS))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt

def decode_token(token: str):
    """Returns the user id carried in the token subject, or None."""
    if not token or not isinstance(token, str):
        logger.error("Token missing or not a string")
        return None

    if token.startswith('Bearer '):
        token = token.split(' ')[1]

    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[ALGORITHM])
    except ExpiredSignatureError as e:
        logger.error(f"Expired JWT: {str(e)}")
        return None
    except JWTError as e:
        logger.error(f"Error decoding JWT: {str(e)}")
        return None

    user_id = payload.get("sub")
    if user_id is None:
        logger.error("Subject missing from token payload")
        return None
    return user_id
