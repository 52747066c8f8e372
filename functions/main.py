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

# Cloud functions for the employee system app - push notifications, scheduled
# housekeeping and admin account management.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
from dataclasses import asdict

# Third-party library imports
from firebase_admin import initialize_app
from firebase_functions import https_fn, logger, scheduler_fn
from firebase_functions.firestore_fn import (
    on_document_created,
    Event,
    DocumentSnapshot,
)

# Local application imports
from shared import dependencies
from shared.config import get_settings
from shared.firebase_constants import ANNOUNCEMENTS_COLLECTION

initialize_app()

settings = get_settings()


@on_document_created(document=ANNOUNCEMENTS_COLLECTION + "/{docId}")
def send_announcement_notification(event: Event[DocumentSnapshot | None]) -> None:
    """
    Broadcasts a push notification to all employees for a new announcement.
    """
    snapshot = event.data
    doc_data = snapshot.to_dict() if snapshot else None
    dependencies.get_announcement_notifier().handle(event.params["docId"], doc_data)


@scheduler_fn.on_schedule(
    schedule=settings.cleanup_schedule,
    timezone=scheduler_fn.Timezone(settings.schedule_timezone),
)
def cleanup_location_history(event: scheduler_fn.ScheduledEvent) -> None:
    """Deletes location history past the retention window."""
    report = dependencies.get_location_history_cleaner().run()
    if report.failures:
        logger.warn(
            f"Location history cleanup failed for {len(report.failures)} users",
            failures=[asdict(failure) for failure in report.failures],
        )


@scheduler_fn.on_schedule(
    schedule=settings.celebration_schedule,
    timezone=scheduler_fn.Timezone(settings.schedule_timezone),
)
def send_celebration_notifications(event: scheduler_fn.ScheduledEvent) -> None:
    """Sends birthday and anniversary notifications for today."""
    report = dependencies.get_celebration_notifier().run()
    if report.failures:
        logger.warn(
            f"Celebration notifications failed for {len(report.failures)} users",
            failures=[asdict(failure) for failure in report.failures],
        )


@https_fn.on_call()
def admin_reset_password(req: https_fn.CallableRequest) -> dict:
    """
    Resets another user's password. Only callable by admins.

    Args:
        req (https_fn.CallableRequest): The request, containing targetUid and
            newPassword.

    Returns:
        A dictionary representation of the ResetPasswordResult object.
    """
    caller_uid = req.auth.uid if req.auth else None
    result = dependencies.get_password_resetter().reset_password(caller_uid, req.data)
    return asdict(result)
