# test_local_store.py
# Unit tests for the client-local certificate store and its storage backends.

import json
import os
import shutil
import tempfile
import unittest
from unittest import mock

from certchain.records import CertificateRecord
from certchain.services.local_store import (
    DEFAULT_STORAGE_KEY,
    JsonFileStorage,
    LocalCertificateStore,
    MemoryStorage,
    SAMPLE_CERTIFICATES,
)


def make_record(certificate_id="CERT-2025-ABC123", issued_at="2025-05-01T09:00:00.000Z", **overrides):
    fields = dict(
        record_id="1746090000000",
        certificate_id=certificate_id,
        recipient_name="Priya Sharma",
        course_name="Data Engineering",
        issuer_name="Open Data Academy",
        issued_at=issued_at,
        blockchain_hash="0x" + "ab" * 32,
        recipient_email="priya@example.com",
        completion_date="2025-04-30",
        description=None,
    )
    fields.update(overrides)
    return CertificateRecord(**fields)


class TestLocalCertificateStore(unittest.TestCase):

    def setUp(self):
        self.storage = MemoryStorage()
        self.store = LocalCertificateStore(self.storage)

    def test_load_empty(self):
        self.assertEqual(self.store.load(), [])

    def test_append_then_load_returns_record_last(self):
        self.store.append(make_record("CERT-2025-AAAAAA"))
        record = make_record("CERT-2025-BBBBBB")
        self.store.append(record)
        loaded = self.store.load()
        self.assertEqual(len(loaded), 2)
        self.assertEqual(loaded[-1], record)

    def test_unparseable_data_loads_as_empty(self):
        self.storage.set_item(DEFAULT_STORAGE_KEY, "{not json")
        self.assertEqual(self.store.load(), [])

    def test_non_list_data_loads_as_empty(self):
        self.storage.set_item(DEFAULT_STORAGE_KEY, json.dumps({"certificateId": "x"}))
        self.assertEqual(self.store.load(), [])

    def test_malformed_entries_are_skipped_not_discarded(self):
        kept = make_record("CERT-2025-KEEPME")
        self.storage.set_item(DEFAULT_STORAGE_KEY, json.dumps([kept.to_dict(), {"recipientName": "no id"}, "junk"]))
        self.assertEqual(self.store.load(), [kept])

        self.store.append(make_record("CERT-2025-NEWONE"))
        self.assertEqual(
            [r.certificate_id for r in self.store.load()],
            ["CERT-2025-KEEPME", "CERT-2025-NEWONE"],
        )
        stored = json.loads(self.storage.get_item(DEFAULT_STORAGE_KEY))
        self.assertEqual(stored[1:3], [{"recipientName": "no id"}, "junk"])

    def test_append_over_unparseable_text_keeps_a_copy(self):
        self.storage.set_item(DEFAULT_STORAGE_KEY, "{not json")
        self.store.append(make_record("CERT-2025-NEWONE"))
        self.assertEqual([r.certificate_id for r in self.store.load()], ["CERT-2025-NEWONE"])
        self.assertEqual(self.storage.get_item(self.store.backup_key), "{not json")

    def test_find_by_certificate_id(self):
        self.store.append(make_record("CERT-2025-AAAAAA", recipient_name="First"))
        self.store.append(make_record("CERT-2025-AAAAAA", recipient_name="Second"))
        found = self.store.find_by_certificate_id("CERT-2025-AAAAAA")
        self.assertEqual(found.recipient_name, "First")
        self.assertIsNone(self.store.find_by_certificate_id("CERT-2025-ZZZZZZ"))

    def test_duplicate_certificate_ids_are_stored(self):
        self.store.append(make_record("CERT-2025-DUPDUP"))
        self.store.append(make_record("CERT-2025-DUPDUP"))
        self.assertEqual(len(self.store.load()), 2)

    def test_sample_data_seeding_is_idempotent(self):
        self.assertTrue(self.store.initialize_sample_data())
        self.assertFalse(self.store.initialize_sample_data())
        records = self.store.load()
        self.assertEqual(len(records), len(SAMPLE_CERTIFICATES))
        self.assertEqual(
            [r.certificate_id for r in records],
            ["CERT-2024-SAMPLE1", "CERT-2024-SAMPLE2"],
        )

    def test_sample_data_not_written_over_existing_records(self):
        self.store.append(make_record())
        self.assertFalse(self.store.initialize_sample_data())
        self.assertEqual(len(self.store.load()), 1)

    def test_clear(self):
        self.store.initialize_sample_data()
        self.store.clear()
        self.assertEqual(self.store.load(), [])

    def test_custom_key_is_isolated(self):
        other = LocalCertificateStore(self.storage, key="other_key")
        other.append(make_record())
        self.assertEqual(self.store.load(), [])
        self.assertEqual(len(other.load()), 1)


class TestSharedStorage(unittest.TestCase):

    def setUp(self):
        self.storage = MemoryStorage()
        self.first = LocalCertificateStore(self.storage)
        self.second = LocalCertificateStore(self.storage)

    def test_second_store_sees_first_stores_append(self):
        record = make_record("CERT-2025-SHARED")
        self.first.append(record)
        self.assertEqual(self.second.find_by_certificate_id("CERT-2025-SHARED"), record)
        self.second.append(make_record("CERT-2025-SECOND"))
        self.assertEqual(len(self.first.load()), 2)

    def test_concurrent_read_modify_write_is_last_write_wins(self):
        self.first.append(make_record("CERT-2025-BASE00"))
        first_view = self.first.load()
        second_view = self.second.load()
        self.first.save(first_view + [make_record("CERT-2025-FIRST0")])
        self.second.save(second_view + [make_record("CERT-2025-SECOND")])
        self.assertEqual(
            [r.certificate_id for r in self.first.load()],
            ["CERT-2025-BASE00", "CERT-2025-SECOND"],
        )


class TestJsonFileStorage(unittest.TestCase):

    def setUp(self):
        self.tmp_dir = tempfile.mkdtemp()
        self.path = os.path.join(self.tmp_dir, "nested", "local_storage.json")

    def tearDown(self):
        shutil.rmtree(self.tmp_dir, ignore_errors=True)

    def test_missing_file_is_empty(self):
        self.assertIsNone(JsonFileStorage(self.path).get_item("anything"))

    def test_values_survive_a_new_instance(self):
        store = LocalCertificateStore(JsonFileStorage(self.path))
        record = make_record()
        store.append(record)
        reopened = LocalCertificateStore(JsonFileStorage(self.path))
        self.assertEqual(reopened.load(), [record])

    def test_corrupt_file_is_treated_as_empty(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("garbage")
        storage = JsonFileStorage(self.path)
        self.assertIsNone(storage.get_item(DEFAULT_STORAGE_KEY))
        storage.set_item("k", "v")
        self.assertEqual(storage.get_item("k"), "v")

    def test_corrupt_file_is_kept_aside_on_write(self):
        os.makedirs(os.path.dirname(self.path))
        with open(self.path, "w", encoding="utf-8") as f:
            f.write("garbage")
        JsonFileStorage(self.path).set_item("k", "v")
        with open(self.path + ".unreadable", encoding="utf-8") as f:
            self.assertEqual(f.read(), "garbage")

    def test_each_write_uses_its_own_temp_file(self):
        storage = JsonFileStorage(self.path)
        with mock.patch("certchain.services.local_store.os.replace", wraps=os.replace) as replace:
            storage.set_item("a", "1")
            JsonFileStorage(self.path).set_item("b", "2")
        sources = [call.args[0] for call in replace.call_args_list]
        self.assertEqual(len(set(sources)), 2)
        self.assertNotIn(self.path + ".tmp", sources)
        self.assertEqual(os.listdir(os.path.dirname(self.path)), ["local_storage.json"])
        self.assertEqual(storage.get_item("b"), "2")

    def test_failed_swap_removes_temp_file(self):
        storage = JsonFileStorage(self.path)
        storage.set_item("a", "1")
        with mock.patch("certchain.services.local_store.os.replace", side_effect=OSError("disk full")):
            with self.assertRaises(OSError):
                storage.set_item("a", "2")
        self.assertEqual(os.listdir(os.path.dirname(self.path)), ["local_storage.json"])
        self.assertEqual(storage.get_item("a"), "1")

    def test_remove_item(self):
        storage = JsonFileStorage(self.path)
        storage.set_item("a", "1")
        storage.set_item("b", "2")
        storage.remove_item("a")
        self.assertIsNone(storage.get_item("a"))
        self.assertEqual(storage.get_item("b"), "2")


if __name__ == '__main__':
    unittest.main()
