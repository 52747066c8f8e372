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
import unittest
from datetime import date
from unittest.mock import MagicMock

from main_testing_utils import MockFirestore
from notifications.celebrations import (
    CelebrationNotifier,
    detect_celebrations,
    parse_calendar_date,
)
from shared.types import CelebrationKind, UserRecord

TODAY = date(2026, 3, 15)


class ParseCalendarDateTest(unittest.TestCase):
    def test_parses_dates_and_timestamps(self):
        self.assertEqual(parse_calendar_date("1990-03-15"), date(1990, 3, 15))
        self.assertEqual(
            parse_calendar_date("2020-03-15T00:00:00.000"), date(2020, 3, 15)
        )

    def test_rejects_invalid_values(self):
        for value in [None, "", "   ", "15/03/1990", "not a date", 19900315, []]:
            with self.subTest(value=value):
                self.assertIsNone(parse_calendar_date(value))


class DetectCelebrationsTest(unittest.TestCase):
    def test_birthday(self):
        celebrations = detect_celebrations(
            UserRecord(name="Asha", dob="1990-03-15"), TODAY
        )

        self.assertEqual(len(celebrations), 1)
        self.assertEqual(celebrations[0].kind, CelebrationKind.BIRTHDAY)
        self.assertEqual(celebrations[0].title, "🎂 Happy Birthday!")
        self.assertEqual(
            celebrations[0].body, "🎉 Wishing Asha a very Happy Birthday!"
        )

    def test_birthday_matches_any_year(self):
        user = UserRecord(name="Asha", dob="1990-03-15")
        for today in [date(2025, 3, 15), date(2031, 3, 15)]:
            with self.subTest(today=today):
                self.assertEqual(len(detect_celebrations(user, today)), 1)

    def test_no_celebration_on_other_days(self):
        user = UserRecord(
            name="Asha",
            dob="1990-03-16",
            joining_date="2020-04-15",
            marriage_date="2015-02-15",
        )
        self.assertEqual(detect_celebrations(user, TODAY), [])

    def test_work_anniversary_after_one_year(self):
        celebrations = detect_celebrations(
            UserRecord(name="Ravi", joining_date="2025-03-15"), TODAY
        )

        self.assertEqual(len(celebrations), 1)
        self.assertEqual(celebrations[0].kind, CelebrationKind.WORK_ANNIVERSARY)
        self.assertEqual(celebrations[0].years, 1)
        self.assertEqual(
            celebrations[0].body,
            "🎉 Congratulations Ravi on completing 1 year with us!",
        )

    def test_work_anniversary_pluralizes_years(self):
        celebrations = detect_celebrations(
            UserRecord(name="Ravi", joining_date="2021-03-15"), TODAY
        )

        self.assertEqual(
            celebrations[0].body,
            "🎉 Congratulations Ravi on completing 5 years with us!",
        )

    def test_no_work_anniversary_on_joining_day(self):
        self.assertEqual(
            detect_celebrations(UserRecord(name="Ravi", joining_date="2026-03-15"), TODAY),
            [],
        )

    def test_marriage_anniversary_with_years(self):
        celebrations = detect_celebrations(
            UserRecord(name="Meera", marriage_date="2016-03-15"), TODAY
        )

        self.assertEqual(len(celebrations), 1)
        self.assertEqual(celebrations[0].kind, CelebrationKind.MARRIAGE_ANNIVERSARY)
        self.assertIn("10 year ", celebrations[0].body)
        self.assertEqual(
            celebrations[0].body,
            "💐 Wishing Meera a very happy 10 year wedding anniversary!",
        )

    def test_marriage_anniversary_in_wedding_year_omits_years(self):
        celebrations = detect_celebrations(
            UserRecord(name="Meera", marriage_date="2026-03-15"), TODAY
        )

        self.assertEqual(len(celebrations), 1)
        self.assertNotIn(" year ", celebrations[0].body)
        self.assertEqual(
            celebrations[0].body, "💐 Wishing Meera a very happy wedding anniversary!"
        )

    def test_all_three_on_the_same_day(self):
        user = UserRecord(
            name="Kiran",
            dob="1988-03-15",
            joining_date="2019-03-15",
            marriage_date="2014-03-15",
        )

        kinds = [c.kind for c in detect_celebrations(user, TODAY)]

        self.assertEqual(
            kinds,
            [
                CelebrationKind.BIRTHDAY,
                CelebrationKind.WORK_ANNIVERSARY,
                CelebrationKind.MARRIAGE_ANNIVERSARY,
            ],
        )

    def test_user_without_name_is_skipped(self):
        for name in [None, ""]:
            with self.subTest(name=name):
                self.assertEqual(
                    detect_celebrations(UserRecord(name=name, dob="1990-03-15"), TODAY),
                    [],
                )

    def test_malformed_dates_are_skipped(self):
        user = UserRecord(name="Asha", dob=12345, joining_date="", marriage_date="??")
        self.assertEqual(detect_celebrations(user, TODAY), [])


class CelebrationNotifierTest(unittest.TestCase):
    def setUp(self):
        self.db = MockFirestore(
            users={
                "u1": {"name": "Asha", "dob": "1990-03-15", "role": "employee"},
                "u2": {
                    "name": "Ravi",
                    "joiningDate": "2024-03-15",
                    "marriageDate": "2020-03-15",
                },
                "u3": {"name": "Meera", "dob": "1992-07-01"},
                "u4": {"dob": "1990-03-15"},
            }
        )
        self.dispatcher = MagicMock()
        self.notifier = CelebrationNotifier(
            self.db.client, self.dispatcher, timezone="Asia/Kolkata"
        )

    def test_sends_one_notification_per_celebration(self):
        report = self.notifier.run(today=TODAY)

        self.assertEqual(report.users_scanned, 4)
        self.assertEqual(report.notifications_sent, 3)
        self.assertEqual(report.failures, [])
        self.assertEqual(self.dispatcher.send_to_topic.call_count, 3)

        first_call = self.dispatcher.send_to_topic.call_args_list[0]
        self.assertEqual(first_call.kwargs["title"], "🎂 Happy Birthday!")
        self.assertEqual(
            first_call.kwargs["data"],
            {
                "type": "celebration",
                "uid": "u1",
                "event": "birthday",
                "click_action": "FLUTTER_NOTIFICATION_CLICK",
            },
        )
        events = [
            (c.kwargs["data"]["uid"], c.kwargs["data"]["event"])
            for c in self.dispatcher.send_to_topic.call_args_list
        ]
        self.assertEqual(
            events,
            [
                ("u1", "birthday"),
                ("u2", "work_anniversary"),
                ("u2", "marriage_anniversary"),
            ],
        )

    def test_failure_for_one_user_does_not_abort_run(self):
        self.dispatcher.send_to_topic.side_effect = [
            RuntimeError("FCM unavailable"),
            "m2",
            "m3",
        ]

        report = self.notifier.run(today=TODAY)

        self.assertEqual(report.notifications_sent, 2)
        self.assertEqual(len(report.failures), 1)
        self.assertEqual(report.failures[0].user_id, "u1")
        self.assertIn("FCM unavailable", report.failures[0].error)

    def test_failed_celebration_does_not_skip_the_next_one(self):
        self.dispatcher.send_to_topic.side_effect = [
            "m1",
            RuntimeError("FCM unavailable"),
            "m3",
        ]

        report = self.notifier.run(today=TODAY)

        self.assertEqual(report.notifications_sent, 2)
        self.assertEqual(self.dispatcher.send_to_topic.call_count, 3)
        self.assertEqual(len(report.failures), 1)
        self.assertEqual(report.failures[0].user_id, "u2")
        self.assertEqual(
            report.failures[0].error, "work_anniversary: FCM unavailable"
        )
        last_call = self.dispatcher.send_to_topic.call_args_list[-1]
        self.assertEqual(last_call.kwargs["data"]["event"], "marriage_anniversary")

    def test_already_sent_celebrations_are_skipped(self):
        ledger = MagicMock()
        ledger.claim.side_effect = lambda key: not key.endswith("_u1_birthday")
        notifier = CelebrationNotifier(
            self.db.client, self.dispatcher, timezone="Asia/Kolkata", ledger=ledger
        )

        report = notifier.run(today=TODAY)

        self.assertEqual(report.notifications_sent, 2)
        self.assertEqual(report.duplicates_skipped, 1)
        ledger.claim.assert_any_call("celebration_2026-03-15_u1_birthday")

    def test_marker_is_released_when_send_fails(self):
        ledger = MagicMock()
        ledger.claim.return_value = True
        self.dispatcher.send_to_topic.side_effect = [RuntimeError("boom"), "m2", "m3"]
        notifier = CelebrationNotifier(
            self.db.client, self.dispatcher, timezone="Asia/Kolkata", ledger=ledger
        )

        notifier.run(today=TODAY)

        ledger.release.assert_called_once_with("celebration_2026-03-15_u1_birthday")

    def test_no_users(self):
        self.db.users.clear()

        report = self.notifier.run(today=TODAY)

        self.assertEqual(report.users_scanned, 0)
        self.dispatcher.send_to_topic.assert_not_called()


if __name__ == "__main__":
    unittest.main()
