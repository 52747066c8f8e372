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

from typing import Any, Optional

from firebase_admin import App, auth
from firebase_functions import https_fn, logger
from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from shared.constants import ADMIN_ROLE, MIN_PASSWORD_LENGTH
from shared.firebase_constants import USERS_COLLECTION
from shared.types import ResetPasswordResult


class CredentialStore:
    """Thin wrapper around Firebase Auth password updates."""

    def __init__(self, app: Optional[App] = None):
        self._app = app

    def update_password(self, uid: str, password: str) -> None:
        auth.update_user(uid, password=password, app=self._app)


class AdminPasswordResetter:
    """Lets an admin set a new password for another user."""

    def __init__(self, db, credentials: CredentialStore, mirror_plaintext: bool = False):
        self._db = db
        self._credentials = credentials
        self._mirror_plaintext = mirror_plaintext

    def _require_admin(self, caller_uid: Optional[str]) -> None:
        if not caller_uid:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.UNAUTHENTICATED,
                "You must be signed in to reset passwords.",
            )

        try:
            caller_doc = (
                self._db.collection(USERS_COLLECTION).document(caller_uid).get()
            )
        except Exception as e:
            logger.error(f"Failed to load user record of caller {caller_uid}: {e}")
            raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, str(e))

        caller = caller_doc.to_dict() if caller_doc.exists else None
        if not caller or caller.get("role") != ADMIN_ROLE:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.PERMISSION_DENIED,
                "Only admins can reset passwords.",
            )

    def reset_password(
        self, caller_uid: Optional[str], data: Optional[dict[str, Any]]
    ) -> ResetPasswordResult:
        """
        Sets `newPassword` on the account of `targetUid`.

        Raises:
            https_fn.HttpsError: UNAUTHENTICATED without a caller,
                PERMISSION_DENIED if the caller isn't an admin,
                INVALID_ARGUMENT for a bad payload, INTERNAL if the update fails.
        """
        self._require_admin(caller_uid)

        data = data or {}
        target_uid = data.get("targetUid")
        new_password = data.get("newPassword")

        if not isinstance(target_uid, str) or not target_uid:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                "Must specify targetUid parameter.",
            )
        if not isinstance(new_password, str) or len(new_password) < MIN_PASSWORD_LENGTH:
            raise https_fn.HttpsError(
                https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters.",
            )

        try:
            self._credentials.update_password(target_uid, new_password)

            user_update = {
                "passwordLastChangedByAdmin": True,
                "passwordChangedAt": SERVER_TIMESTAMP,
            }
            if self._mirror_plaintext:
                user_update["initialPassword"] = new_password
            self._db.collection(USERS_COLLECTION).document(target_uid).update(
                user_update
            )
        except Exception as e:
            logger.error(f"Password reset for user {target_uid} failed: {e}")
            raise https_fn.HttpsError(https_fn.FunctionsErrorCode.INTERNAL, str(e))

        logger.info(f"Admin {caller_uid} reset the password of user {target_uid}")
        return ResetPasswordResult(success=True, message="Password updated successfully")
