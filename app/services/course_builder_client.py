"""HTTP client handing a finished course over to the Course Builder service."""

from __future__ import annotations

import logging
from typing import Any, Dict

import requests

from app.core.config import settings
from app.core.errors import TransferError

logger = logging.getLogger(__name__)

REQUESTER_SERVICE = "content-studio"


class CourseBuilderClient:
    def __init__(self, url: str | None = None, timeout: float | None = None) -> None:
        target = url if url is not None else settings.COURSE_BUILDER_URL
        self.url = str(target).rstrip("/") if target else None
        self.timeout = timeout or settings.COURSE_BUILDER_TIMEOUT_SECONDS

    def is_configured(self) -> bool:
        return bool(self.url)

    @staticmethod
    def build_envelope(payload: Dict[str, Any]) -> Dict[str, Any]:
        return {
            "requester_service": REQUESTER_SERVICE,
            "payload": payload,
            "response": {"answer": ""},
        }

    def send(self, course: Dict[str, Any]) -> None:
        """POST the course projection. Raises TransferError on any failure."""

        if not self.is_configured():
            raise TransferError("Course Builder URL is not configured", error_code="TRANSFER_NOT_CONFIGURED")

        logger.info(
            "Sending course %s (%s topics) to Course Builder",
            course.get("course_id"),
            len(course.get("topics") or []),
        )
        try:
            response = requests.post(
                self.url,
                json=self.build_envelope(course),
                headers={"Content-Type": "application/json", "X-Service-Name": REQUESTER_SERVICE},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise TransferError(f"Course Builder unreachable: {exc}") from exc

        if response.status_code >= 400:
            raise TransferError(
                f"Course Builder rejected the course ({response.status_code})",
                context={"status": response.status_code, "body": response.text[:500]},
            )
        logger.info("Course %s accepted by Course Builder", course.get("course_id"))


course_builder_client = CourseBuilderClient()
