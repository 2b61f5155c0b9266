# freshcart/main.py
from freshcart.api import create_app
from freshcart.data.database import Base, engine
from freshcart.data.seed import seed
from freshcart.utils.logging import get_logger
from freshcart.utils.settings import SEED_DEMO_DATA
import uvicorn

# every model has to be registered before create_all
import freshcart.data.models  # noqa: F401

logger = get_logger(__name__)

logger.info(f"Initializing database, tables: {list(Base.metadata.tables.keys())}")

try:
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")
except Exception as e:
    logger.error(f"Failed to create tables: {e}")
    raise

if SEED_DEMO_DATA:
    seed()


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
