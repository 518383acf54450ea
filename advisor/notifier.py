# notifier.py

from threading import Thread
from typing import Optional

import requests

from .config import NOTIFY_RETRIES, NOTIFY_TIMEOUT, NOTIFY_URL
from .logger import logger
from .utils import retry


class Notifier:
    """
    Fire-and-forget notification of completed submissions.

    Delivery runs on a daemon thread; failures are logged and never reach
    the caller. Threads are not joined, so a notification still in flight
    when the process exits is dropped.
    """

    def __init__(
        self,
        url: Optional[str] = NOTIFY_URL,
        timeout: float = NOTIFY_TIMEOUT,
        retries: int = NOTIFY_RETRIES,
        retry_delay: float = 1,
    ):
        self.url = url
        self.timeout = timeout
        self.retries = retries
        self.retry_delay = retry_delay

    def notify(self, submission_id: str, summary: Optional[str] = None) -> Optional[Thread]:
        if not self.url:
            logger.info(f"No notification endpoint configured, skipping {submission_id}")
            return None

        payload = {"submission_id": submission_id}
        if summary:
            payload["summary"] = summary

        thread = Thread(target=self.deliver, args=(payload,), daemon=True)
        thread.start()
        return thread

    def deliver(self, payload: dict) -> bool:
        send = retry(
            requests.RequestException,
            tries=self.retries + 1,
            delay=self.retry_delay,
            logger=logger,
        )(self._post)
        try:
            send(payload)
            logger.info(f"Notification sent for submission {payload['submission_id']}")
            return True
        except Exception as e:
            logger.error(
                f"Notification failed for submission {payload['submission_id']}: {str(e)}"
            )
            return False

    def _post(self, payload: dict) -> None:
        response = requests.post(
            self.url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=self.timeout,
        )
        response.raise_for_status()
