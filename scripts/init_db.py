import os
import sys
import logging
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from sqlalchemy import inspect
from app.database import Base, engine
import app.models  # noqa: F401

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

def init_db():
    try:
        logger.info(f"Connecting to database: {engine.url.render_as_string(hide_password=True)}")

        Base.metadata.create_all(bind=engine)

        inspector = inspect(engine)
        logger.info("Tables:")
        for table_name in inspector.get_table_names():
            logger.info(f"- {table_name}")

        logger.info("Database initialized")

    except Exception as e:
        logger.error(f"Error initializing database: {str(e)}")
        raise

if __name__ == "__main__":
    init_db()
