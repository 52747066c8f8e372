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

from datetime import datetime, timedelta, timezone
from typing import Optional

from firebase_functions import logger
from google.api_core import exceptions
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.firebase_constants import NOTIFICATION_LEDGER_COLLECTION


class NotificationLedger:
    """
    Records which notifications were already sent, one marker document per
    event, so repeated trigger deliveries or reruns don't notify twice.

    Markers carry an `expireTimestamp` so a Firestore TTL policy on the
    collection can purge them.
    """

    def __init__(self, db, ttl_days: int):
        self._db = db
        self._ttl = timedelta(days=ttl_days)

    def _marker_ref(self, key: str):
        return self._db.collection(NOTIFICATION_LEDGER_COLLECTION).document(key)

    def claim(self, key: str, now: Optional[datetime] = None) -> bool:
        """
        Creates the marker for `key`. Returns False if it already exists.
        """
        now = now or datetime.now(timezone.utc)
        try:
            self._marker_ref(key).create(
                {
                    "createdTimestamp": SERVER_TIMESTAMP,
                    "expireTimestamp": now + self._ttl,
                }
            )
        except exceptions.AlreadyExists:
            logger.info(f"Notification {key} was already sent, skipping")
            return False
        return True

    def release(self, key: str) -> None:
        """
        Deletes the marker so the notification can be attempted again.

        Only called after a failed send, so a failure here is logged and
        does not replace the send error.
        """
        try:
            self._marker_ref(key).delete()
        except Exception as e:
            logger.error(f"Failed to release notification marker {key}: {e}")


def announcement_key(doc_id: str) -> str:
    return f"announcement_{doc_id}"


def celebration_key(day, user_id: str, kind: str) -> str:
    return f"celebration_{day.isoformat()}_{user_id}_{kind}"
