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
Environment-backed settings for the employee system functions.
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings read from EMPLOYEE_FUNCTIONS_* environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="EMPLOYEE_FUNCTIONS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Schedules
    schedule_timezone: str = Field(default="Asia/Kolkata")
    cleanup_schedule: str = Field(default="every 24 hours")
    celebration_schedule: str = Field(default="0 9 * * *")

    # Push notifications
    notification_topic: str = Field(default="all_employees")
    dedup_notifications: bool = Field(default=True)
    dedup_marker_ttl_days: int = Field(default=7, ge=1)

    # Location history retention
    location_retention_days: int = Field(default=45, ge=1)
    cleanup_page_size: int = Field(default=500, ge=1, le=500)

    # Writes the admin-chosen password back into the user document in
    # cleartext. Off unless the app still depends on `initialPassword`.
    mirror_plaintext_password: bool = Field(default=False)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return cached settings instance."""
    return Settings()
