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

from datetime import date, datetime
from typing import List, Optional
from zoneinfo import ZoneInfo

from dacite import Config, from_dict
from firebase_functions import logger

from notifications.dispatch import PushDispatcher
from notifications.ledger import NotificationLedger, celebration_key
from shared.constants import CELEBRATION_NOTIFICATION_TYPE, CLICK_ACTION
from shared.firebase_constants import USERS_COLLECTION
from shared.json_utils import convert_keys
from shared.types import (
    Celebration,
    CelebrationKind,
    CelebrationReport,
    UserFailure,
    UserRecord,
)


def parse_calendar_date(value) -> Optional[date]:
    """
    Parses the leading YYYY-MM-DD of a stored date string.

    Returns None for anything that isn't a non-empty, parseable string.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return date.fromisoformat(value.strip()[:10])
    except ValueError:
        return None


def _matches_today(day: Optional[date], today: date) -> bool:
    return day is not None and (day.day, day.month) == (today.day, today.month)


def _plural_years(years: int) -> str:
    return f"{years} year" if years == 1 else f"{years} years"


def birthday(name: str) -> Celebration:
    return Celebration(
        kind=CelebrationKind.BIRTHDAY,
        title="🎂 Happy Birthday!",
        body=f"🎉 Wishing {name} a very Happy Birthday!",
    )


def work_anniversary(name: str, years: int) -> Celebration:
    return Celebration(
        kind=CelebrationKind.WORK_ANNIVERSARY,
        title="🏆 Happy Work Anniversary!",
        body=f"🎉 Congratulations {name} on completing {_plural_years(years)} with us!",
        years=years,
    )


def marriage_anniversary(name: str, years: int) -> Celebration:
    year_phrase = f"{years} year " if years > 0 else ""
    return Celebration(
        kind=CelebrationKind.MARRIAGE_ANNIVERSARY,
        title="💍 Happy Anniversary!",
        body=f"💐 Wishing {name} a very happy {year_phrase}wedding anniversary!",
        years=years,
    )


def detect_celebrations(user: UserRecord, today: date) -> List[Celebration]:
    """
    Returns the celebrations that fall on `today` for the given user.

    Only day and month are compared; the year is used to count elapsed years.
    Users without a name never celebrate.
    """
    if not user.name:
        return []

    celebrations = []

    dob = parse_calendar_date(user.dob)
    if _matches_today(dob, today):
        celebrations.append(birthday(user.name))

    joined = parse_calendar_date(user.joining_date)
    if _matches_today(joined, today):
        years = today.year - joined.year
        if years > 0:
            celebrations.append(work_anniversary(user.name, years))

    married = parse_calendar_date(user.marriage_date)
    if _matches_today(married, today):
        years = today.year - married.year
        if years >= 0:
            celebrations.append(marriage_anniversary(user.name, years))

    return celebrations


def celebration_data(user_id: str, celebration: Celebration) -> dict:
    return {
        "type": CELEBRATION_NOTIFICATION_TYPE,
        "uid": user_id,
        "event": str(celebration.kind),
        "click_action": CLICK_ACTION,
    }


class CelebrationNotifier:
    """Sends birthday and anniversary notifications for all employees."""

    def __init__(
        self,
        db,
        dispatcher: PushDispatcher,
        timezone: str,
        ledger: Optional[NotificationLedger] = None,
    ):
        self._db = db
        self._dispatcher = dispatcher
        self._timezone = ZoneInfo(timezone)
        self._ledger = ledger

    def today(self) -> date:
        return datetime.now(self._timezone).date()

    def run(self, today: Optional[date] = None) -> CelebrationReport:
        today = today or self.today()
        report = CelebrationReport()
        logger.info(f"Checking celebrations for {today.isoformat()}")

        for user_doc in self._db.collection(USERS_COLLECTION).stream():
            report.users_scanned += 1
            try:
                self._notify_user(user_doc, today, report)
            except Exception as e:
                logger.error(f"Failed to send celebrations for user {user_doc.id}: {e}")
                report.failures.append(UserFailure(user_id=user_doc.id, error=str(e)))

        logger.info(
            f"Celebration run finished: {report.users_scanned} users scanned, "
            f"{report.notifications_sent} sent, "
            f"{report.duplicates_skipped} duplicates skipped, "
            f"{len(report.failures)} failed"
        )
        return report

    def _notify_user(self, user_doc, today: date, report: CelebrationReport) -> None:
        user = from_dict(
            data_class=UserRecord,
            data=convert_keys(user_doc.to_dict() or {}, "camel_to_snake"),
            config=Config(check_types=False),
        )
        for celebration in detect_celebrations(user, today):
            # A failed send doesn't hold back the user's other celebrations.
            try:
                sent = self._send(user_doc.id, celebration, today)
            except Exception as e:
                logger.error(
                    f"Failed to send {celebration.kind} notification for user {user_doc.id}: {e}"
                )
                report.failures.append(
                    UserFailure(user_id=user_doc.id, error=f"{celebration.kind}: {e}")
                )
                continue
            if not sent:
                report.duplicates_skipped += 1
                continue
            report.notifications_sent += 1
            logger.info(f"Sent {celebration.kind} notification for user {user_doc.id}")

    def _send(self, user_id: str, celebration: Celebration, today: date) -> bool:
        key = celebration_key(today, user_id, celebration.kind)
        if self._ledger and not self._ledger.claim(key):
            return False
        try:
            self._dispatcher.send_to_topic(
                title=celebration.title,
                body=celebration.body,
                data=celebration_data(user_id, celebration),
            )
        except Exception:
            if self._ledger:
                self._ledger.release(key)
            raise
        return True

