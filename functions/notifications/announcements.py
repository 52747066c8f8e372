# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================

from typing import Optional

from dacite import Config, from_dict
from firebase_functions import logger

from notifications.dispatch import PushDispatcher
from notifications.ledger import NotificationLedger, announcement_key
from shared.constants import (
    CLICK_ACTION,
    DEFAULT_ANNOUNCEMENT_TITLE,
    URGENT_ANNOUNCEMENT_TITLE,
    URGENT_CATEGORY,
)
from shared.json_utils import convert_keys
from shared.types import Announcement


def notification_title(announcement: Announcement) -> str:
    if announcement.category == URGENT_CATEGORY:
        return URGENT_ANNOUNCEMENT_TITLE
    return DEFAULT_ANNOUNCEMENT_TITLE


def notification_data(announcement: Announcement) -> dict:
    return {
        "click_action": CLICK_ACTION,
        "message": announcement.message or "",
    }


class AnnouncementNotifier:
    """Broadcasts a push notification for every new announcement."""

    def __init__(
        self,
        dispatcher: PushDispatcher,
        ledger: Optional[NotificationLedger] = None,
    ):
        self._dispatcher = dispatcher
        self._ledger = ledger

    def handle(self, doc_id: str, doc_data: Optional[dict]) -> bool:
        """
        Sends the notification for a newly created announcement.

        Dispatch failures are logged and swallowed; the author of the
        announcement is never affected by them.

        Returns:
            True if a notification was sent.
        """
        if doc_data is None:
            logger.info("No data associated with the event")
            return False

        announcement = from_dict(
            data_class=Announcement,
            data=convert_keys(doc_data, "camel_to_snake"),
            config=Config(check_types=False),
        )

        key = announcement_key(doc_id)
        if self._ledger and not self._ledger.claim(key):
            return False

        try:
            message_id = self._dispatcher.send_to_topic(
                title=notification_title(announcement),
                body=announcement.title,
                data=notification_data(announcement),
            )
        except Exception as e:
            logger.error(f"Error sending notification for announcement {doc_id}: {e}")
            if self._ledger:
                self._ledger.release(key)
            return False

        logger.info(f"Notification sent successfully for announcement {doc_id}: {message_id}")
        return True
