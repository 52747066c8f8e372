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

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, List, Optional


@dataclass
class Announcement:
    """An announcement document, created by the admin UI."""

    category: Optional[str] = None
    title: Optional[str] = None
    message: Optional[str] = None


@dataclass
class UserRecord:
    """
    An employee document from the `users` collection.

    Date fields are stored by the app as strings (e.g. "1990-03-15"), but are
    typed as Any since older documents may hold other values.
    """

    name: Optional[str] = None
    dob: Any = None
    joining_date: Any = None
    marriage_date: Any = None
    role: Optional[str] = None
    initial_password: Optional[str] = None
    password_last_changed_by_admin: Optional[bool] = None


class CelebrationKind(StrEnum):
    BIRTHDAY = "birthday"
    WORK_ANNIVERSARY = "work_anniversary"
    MARRIAGE_ANNIVERSARY = "marriage_anniversary"


@dataclass
class Celebration:
    """A celebratory notification detected for a user on a given day."""

    kind: CelebrationKind
    title: str
    body: str
    years: Optional[int] = None


@dataclass
class UserFailure:
    user_id: str
    error: str


@dataclass
class CleanupReport:
    """Result of one run of the location history cleanup job."""

    users_scanned: int = 0
    users_cleaned: int = 0
    entries_deleted: int = 0
    failures: List[UserFailure] = field(default_factory=list)


@dataclass
class CelebrationReport:
    """Result of one run of the celebration notification job."""

    users_scanned: int = 0
    notifications_sent: int = 0
    duplicates_skipped: int = 0
    failures: List[UserFailure] = field(default_factory=list)


@dataclass
class ResetPasswordResult:
    success: bool
    message: str
