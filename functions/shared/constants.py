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

URGENT_CATEGORY = "Urgent"
URGENT_ANNOUNCEMENT_TITLE = "🚨 Urgent Update"
DEFAULT_ANNOUNCEMENT_TITLE = "New Announcement"

# Routing hint consumed by the mobile client when a notification is tapped.
CLICK_ACTION = "FLUTTER_NOTIFICATION_CLICK"

CELEBRATION_NOTIFICATION_TYPE = "celebration"

ADMIN_ROLE = "admin"
MIN_PASSWORD_LENGTH = 6
