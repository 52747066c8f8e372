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
from google.cloud.firestore_v1.base_query import FieldFilter

from shared.firebase_constants import LOCATION_HISTORY_COLLECTION, USERS_COLLECTION
from shared.types import CleanupReport, UserFailure


def _as_utc(value) -> Optional[datetime]:
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class LocationHistoryCleaner:
    """
    Deletes location history entries older than the retention window.

    Only the first page (up to `page_size` entries) is deleted per user and
    run. Anything beyond that is picked up by the next daily run.
    """

    def __init__(self, db, retention_days: int, page_size: int):
        self._db = db
        self._retention = timedelta(days=retention_days)
        self._page_size = page_size

    def cutoff(self, now: Optional[datetime] = None) -> datetime:
        return (now or datetime.now(timezone.utc)) - self._retention

    def run(self, now: Optional[datetime] = None) -> CleanupReport:
        cutoff = self.cutoff(now)
        report = CleanupReport()
        logger.info(f"Deleting location history older than {cutoff.isoformat()}")

        for user_doc in self._db.collection(USERS_COLLECTION).stream():
            report.users_scanned += 1
            try:
                deleted = self._cleanup_user(user_doc.id, cutoff)
            except Exception as e:
                logger.error(f"Failed to clean location history for user {user_doc.id}: {e}")
                report.failures.append(UserFailure(user_id=user_doc.id, error=str(e)))
                continue
            if deleted:
                report.users_cleaned += 1
                report.entries_deleted += deleted

        logger.info(
            f"Location history cleanup finished: {report.users_scanned} users scanned, "
            f"{report.entries_deleted} entries deleted from {report.users_cleaned} users, "
            f"{len(report.failures)} failed"
        )
        return report

    def _cleanup_user(self, user_id: str, cutoff: datetime) -> int:
        """Deletes one page of stale entries in a single batch."""
        stale_entries = (
            self._db.collection(USERS_COLLECTION)
            .document(user_id)
            .collection(LOCATION_HISTORY_COLLECTION)
            .where(filter=FieldFilter("timestamp", "<", cutoff))
            .limit(self._page_size)
            .get()
        )

        to_delete = []
        for entry in stale_entries:
            timestamp = _as_utc((entry.to_dict() or {}).get("timestamp"))
            if timestamp is None or timestamp >= cutoff:
                logger.warn(
                    f"Skipping location entry {entry.id} of user {user_id}: "
                    "timestamp is missing or within retention"
                )
                continue
            to_delete.append(entry)

        if not to_delete:
            return 0

        batch = self._db.batch()
        for entry in to_delete:
            batch.delete(entry.reference)
        batch.commit()

        logger.info(f"Deleted {len(to_delete)} location entries for user {user_id}")
        return len(to_delete)
