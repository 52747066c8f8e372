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

"""
Process-wide wiring of Firebase clients and handlers.

Every handler receives its clients through its constructor; this module
creates them once per process, after `initialize_app()` has run in main.py.
"""

from __future__ import annotations

from dataclasses import dataclass

import firebase_admin
from firebase_admin import App, firestore

from admin.password_reset import AdminPasswordResetter, CredentialStore
from cleanup.location_history import LocationHistoryCleaner
from notifications.announcements import AnnouncementNotifier
from notifications.celebrations import CelebrationNotifier
from notifications.dispatch import PushDispatcher
from notifications.ledger import NotificationLedger
from shared.config import get_settings


@dataclass
class PlatformClients:
    app: App
    db: object


_clients: PlatformClients | None = None
_announcement_notifier: AnnouncementNotifier | None = None
_location_history_cleaner: LocationHistoryCleaner | None = None
_celebration_notifier: CelebrationNotifier | None = None
_password_resetter: AdminPasswordResetter | None = None


def get_clients() -> PlatformClients:
    """
    Return the clients bound to the default Firebase app.
    """
    global _clients
    if _clients:
        return _clients

    app = firebase_admin.get_app()
    _clients = PlatformClients(app=app, db=firestore.client(app))
    return _clients


def _get_dispatcher() -> PushDispatcher:
    return PushDispatcher(get_clients().app, get_settings().notification_topic)


def _get_ledger() -> NotificationLedger | None:
    settings = get_settings()
    if not settings.dedup_notifications:
        return None
    return NotificationLedger(get_clients().db, settings.dedup_marker_ttl_days)


def get_announcement_notifier() -> AnnouncementNotifier:
    global _announcement_notifier
    if _announcement_notifier:
        return _announcement_notifier

    _announcement_notifier = AnnouncementNotifier(_get_dispatcher(), _get_ledger())
    return _announcement_notifier


def get_location_history_cleaner() -> LocationHistoryCleaner:
    global _location_history_cleaner
    if _location_history_cleaner:
        return _location_history_cleaner

    settings = get_settings()
    _location_history_cleaner = LocationHistoryCleaner(
        get_clients().db,
        retention_days=settings.location_retention_days,
        page_size=settings.cleanup_page_size,
    )
    return _location_history_cleaner


def get_celebration_notifier() -> CelebrationNotifier:
    global _celebration_notifier
    if _celebration_notifier:
        return _celebration_notifier

    _celebration_notifier = CelebrationNotifier(
        get_clients().db,
        _get_dispatcher(),
        timezone=get_settings().schedule_timezone,
        ledger=_get_ledger(),
    )
    return _celebration_notifier


def get_password_resetter() -> AdminPasswordResetter:
    global _password_resetter
    if _password_resetter:
        return _password_resetter

    clients = get_clients()
    _password_resetter = AdminPasswordResetter(
        clients.db,
        CredentialStore(clients.app),
        mirror_plaintext=get_settings().mirror_plaintext_password,
    )
    return _password_resetter


def reset() -> None:
    """Drop all cached clients and handlers."""
    global _clients, _announcement_notifier, _location_history_cleaner
    global _celebration_notifier, _password_resetter
    _clients = None
    _announcement_notifier = None
    _location_history_cleaner = None
    _celebration_notifier = None
    _password_resetter = None
