"""Unit tests for the record store and its services."""

import json
import shutil
import unittest
from pathlib import Path
from unittest.mock import patch

from credential_rekey.exceptions import FileOperationError, RecordNotFoundError
from credential_rekey.file_manager import FileManager
from credential_rekey.models import UserCardRecord, UserRecord
from credential_rekey.services.record_service import RecordService
from credential_rekey.services.user_card_service import UserCardService
from credential_rekey.services.user_service import UserService
from tests.test_utility import TestDataHelper, TestUtilities


class TestFileManager(unittest.TestCase):
    """Test cases for the JSON record store."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = TestUtilities.create_temp_data_dir()
        self.file_manager = FileManager(self.temp_dir)

    def tearDown(self):
        """Clean up test fixtures."""
        TestUtilities.cleanup_temp_dir(self.temp_dir)

    def test_empty_store(self):
        """Test that missing files read as empty collections."""
        self.assertEqual(self.file_manager.read_users(), [])
        self.assertEqual(self.file_manager.read_user_cards(), [])

    def test_save_and_read_users(self):
        records = [{"id": 1, "username": "a"}, {"id": 2, "username": "b"}]

        self.file_manager.save_users(records)

        self.assertEqual(self.file_manager.read_users(), records)
        data = json.loads(self.file_manager.users_file_path.read_text(encoding="utf-8"))
        self.assertEqual(data["version"], "1.0")

    def test_no_temp_files_left(self):
        self.file_manager.save_user_cards([{"id": 1}])
        self.file_manager.save_user_cards([{"id": 2}])

        names = sorted(p.name for p in Path(self.temp_dir).iterdir())
        self.assertEqual(names, ["user_cards.json"])

    def test_corrupt_file(self):
        self.file_manager.users_file_path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(FileOperationError):
            self.file_manager.read_users()

    def test_malformed_records(self):
        self.file_manager.users_file_path.write_text('{"records": 5}', encoding="utf-8")

        with self.assertRaises(FileOperationError):
            self.file_manager.read_users()

    def test_directory_created_on_first_write_only(self):
        """Test that reading a missing store never creates its directory."""
        data_dir = Path(self.temp_dir) / "nested" / "data"
        file_manager = FileManager(str(data_dir))

        self.assertEqual(file_manager.read_users(), [])
        self.assertFalse(data_dir.exists())

        file_manager.save_users([{"id": 1}])
        self.assertEqual(file_manager.read_users(), [{"id": 1}])

    def test_failed_replace_keeps_previous_file(self):
        """Test that the old file is restored when the new one cannot be moved in."""
        self.file_manager.save_users([{"id": 1, "username": "before"}])
        real_move = shutil.move

        def failing_move(src, dst):
            if src.endswith(".temp"):
                raise OSError("disk full")
            return real_move(src, dst)

        with patch("credential_rekey.file_manager.shutil.move", side_effect=failing_move):
            with self.assertRaises(FileOperationError):
                self.file_manager.save_users([{"id": 1, "username": "after"}])

        self.assertEqual(self.file_manager.read_users(), [{"id": 1, "username": "before"}])
        names = sorted(p.name for p in Path(self.temp_dir).iterdir())
        self.assertEqual(names, ["users.json"])


class TestRecordServices(unittest.TestCase):
    """Test cases for UserService and UserCardService."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = TestUtilities.create_temp_data_dir()
        self.file_manager = TestUtilities.populate_store(
            self.temp_dir,
            users=[
                TestDataHelper.create_user_record(record_id=1, username="a", cat_password="p1"),
                TestDataHelper.create_user_record(record_id=2, username="b", cat_username=None),
                TestDataHelper.create_user_record(record_id=3, username="c", cat_pass_enc="enc3"),
            ],
            cards=[
                TestDataHelper.create_card_record(record_id=10, cat_username=""),
                TestDataHelper.create_card_record(record_id=11, cat_password="p11"),
            ],
        )
        self.user_service = UserService(self.file_manager)
        self.card_service = UserCardService(self.file_manager)

    def tearDown(self):
        """Clean up test fixtures."""
        TestUtilities.cleanup_temp_dir(self.temp_dir)

    def test_list_all_users_with_cat_usernames(self):
        """Test that only users with a catalog login are listed, in order."""
        users = self.user_service.list_all()

        self.assertEqual([u.id for u in users], [1, 3])
        self.assertTrue(all(isinstance(u, UserRecord) for u in users))

    def test_list_all_cards_with_usernames(self):
        cards = self.card_service.list_all()

        self.assertEqual([c.id for c in cards], [11])
        self.assertIsInstance(cards[0], UserCardRecord)

    def test_persist_entity_updates_only_that_record(self):
        user = self.user_service.list_all()[0]
        user.set_raw_cat_password(None)
        user.set_cat_pass_enc("enc1")

        self.user_service.persist_entity(user)

        stored = self.file_manager.read_users()
        self.assertEqual(stored[0]["cat_pass_enc"], "enc1")
        self.assertIsNone(stored[0]["cat_password"])
        self.assertEqual(stored[1]["username"], "b")
        self.assertEqual(stored[2]["cat_pass_enc"], "enc3")

    def test_persist_unknown_record(self):
        with self.assertRaises(RecordNotFoundError):
            self.card_service.persist_entity(TestDataHelper.create_card_record(record_id=99))

    def test_unparseable_record(self):
        self.file_manager.save_users([{"username": "no-id"}])

        with self.assertRaises(FileOperationError):
            self.user_service.list_all()

    def test_service_without_storage_hooks_cannot_be_built(self):
        class IncompleteService(RecordService[UserRecord]):
            _record_type = UserRecord

            def _read(self):
                return []

        with self.assertRaises(TypeError):
            IncompleteService(self.file_manager)
