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

# Helpers that build MagicMock stand-ins for Firestore in tests.

from unittest.mock import MagicMock

from shared.firebase_constants import (
    LOCATION_HISTORY_COLLECTION,
    NOTIFICATION_LEDGER_COLLECTION,
    USERS_COLLECTION,
)


def create_mock_snapshot(doc_id, data, exists=True):
    snapshot = MagicMock()
    snapshot.id = doc_id
    snapshot.exists = exists
    snapshot.to_dict.return_value = data if exists else None
    snapshot.reference = MagicMock(name=f"ref:{doc_id}")
    return snapshot


class MockFirestore:
    """
    A MagicMock-backed Firestore client with a `users` collection, per-user
    `location_history` sub-collections and a notification ledger.

    Query filters are not evaluated: the location history query returns the
    entries given for that user as-is.
    """

    def __init__(self, users=None, location_history=None):
        self.users = users or {}
        self.location_history = location_history or {}
        self.client = MagicMock()
        self.user_refs = {}
        self.history_collections = {}
        self.batches = []
        self.ledger_refs = {}

        self.users_collection = MagicMock()
        self.users_collection.stream.side_effect = lambda: [
            create_mock_snapshot(uid, data) for uid, data in self.users.items()
        ]
        self.users_collection.document.side_effect = self.user_ref

        self.ledger_collection = MagicMock()
        self.ledger_collection.document.side_effect = self.ledger_ref

        collections = {
            USERS_COLLECTION: self.users_collection,
            NOTIFICATION_LEDGER_COLLECTION: self.ledger_collection,
        }
        self.client.collection.side_effect = lambda name: collections[name]
        self.client.batch.side_effect = self._new_batch

    def user_ref(self, uid):
        if uid not in self.user_refs:
            ref = MagicMock(name=f"users/{uid}")
            ref.get.return_value = create_mock_snapshot(
                uid, self.users.get(uid), exists=uid in self.users
            )
            history = MagicMock(name=f"users/{uid}/{LOCATION_HISTORY_COLLECTION}")
            entries = [
                create_mock_snapshot(f"{uid}-loc-{i}", entry)
                for i, entry in enumerate(self.location_history.get(uid, []))
            ]
            history.where.return_value.limit.return_value.get.return_value = entries
            ref.collection.side_effect = lambda name: self.history_collections[uid]
            self.history_collections[uid] = history
            self.user_refs[uid] = ref
        return self.user_refs[uid]

    def ledger_ref(self, key):
        if key not in self.ledger_refs:
            self.ledger_refs[key] = MagicMock(name=f"ledger/{key}")
        return self.ledger_refs[key]

    def _new_batch(self):
        batch = MagicMock()
        self.batches.append(batch)
        return batch

    def deleted_refs(self):
        return [
            call.args[0] for batch in self.batches for call in batch.delete.call_args_list
        ]
