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

from typing import Any, Mapping, Optional

from firebase_admin import App, messaging


class PushDispatcher:
    """Sends push notifications to a single FCM topic."""

    def __init__(self, app: Optional[App], topic: str):
        self._app = app
        self._topic = topic

    def build_message(
        self, title: str, body: str, data: Mapping[str, Any] | None = None
    ) -> messaging.Message:
        # FCM data payloads only accept string values.
        string_data = {
            str(key): "" if value is None else str(value)
            for key, value in (data or {}).items()
        }
        return messaging.Message(
            notification=messaging.Notification(title=title, body=body),
            data=string_data,
            topic=self._topic,
        )

    def send_to_topic(
        self, title: str, body: str, data: Mapping[str, Any] | None = None
    ) -> str:
        """Sends the notification and returns the FCM message id."""
        message = self.build_message(title, body, data)
        return messaging.send(message, app=self._app)
