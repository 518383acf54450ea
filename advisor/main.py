# main.py

from advisor.config import API_HOST, API_PORT
from advisor.database import Database
from advisor.errors import AdvisorError
from advisor.handlers.submission_handler import SubmissionHandler
from advisor.logger import logger
from advisor.notifier import Notifier
from advisor.rest_api import create_app
from advisor.services import audit_catalog

database = Database()
submission_handler = SubmissionHandler(database, Notifier())
app = create_app(submission_handler)


def check_catalog() -> bool:
    try:
        audit_catalog(database)
        return True
    except AdvisorError as e:
        logger.error(f"Catalog check failed: {e}")
        return False


if __name__ == "__main__":
    import uvicorn

    if not check_catalog():
        raise SystemExit(1)
    uvicorn.run(app, host=API_HOST, port=API_PORT)
