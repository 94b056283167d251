"""
Alimtalk Notification Service

Sends template messages to mobile numbers through the Kakao Alimtalk HTTP API.
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any

import requests

from .base_notifier import BaseNotifier

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://kapi.kakao.com/v2/api/talk/memo/default/send"


class AlimtalkNotifier(BaseNotifier):
    """Template-message notifier backed by the Alimtalk REST API."""

    def __init__(
        self,
        api_key: str | None = None,
        api_url: str | None = None,
        timeout: int = 10,
    ):
        """
        Initialize the Alimtalk notifier.

        Args:
            api_key: API key. If None, reads from ALIMTALK_API_KEY env var.
            api_url: Endpoint URL. If None, reads from ALIMTALK_API_URL env var.
            timeout: Request timeout in seconds
        """
        self.api_key = api_key or os.getenv("ALIMTALK_API_KEY")
        self.api_url = api_url or os.getenv("ALIMTALK_API_URL", DEFAULT_API_URL)
        self.timeout = timeout

        if not self.api_key:
            logger.warning("ALIMTALK_API_KEY not configured - notifications will be disabled")

    def send_notification(self, recipient: str, kind: str, template_vars: dict[str, Any]) -> bool:
        if not self.api_key:
            logger.warning("Cannot send Alimtalk - API key not configured")
            return False

        phone = self.normalize_phone(recipient)
        if not phone:
            logger.warning("Invalid or missing recipient phone number")
            return False

        payload = {
            "template_id": kind,
            "receiver_uuids": json.dumps([phone]),
            **{key: str(value) for key, value in template_vars.items()},
        }
        response = requests.post(
            self.api_url,
            data=payload,
            headers={"Authorization": f"Bearer {self.api_key}"},
            timeout=self.timeout,
        )
        if not response.ok:
            logger.error(f"Alimtalk send failed ({response.status_code}): {response.text}")
            return False

        logger.info(f"Alimtalk {kind} sent to {phone}")
        return True
