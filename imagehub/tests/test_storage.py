import re
from unittest import mock

from django.core.files.storage import InMemoryStorage
from django.test import TestCase

from imagehub.storage import IMAGE_STORAGE, ImageStore, sanitize_filename
from importer.exceptions import MalformedStorageLocation
from importer.tests.utils import TEST_STORAGE_URL, create_image_store


class SanitizeFilenameTests(TestCase):
    def test_replaces_unsafe_characters(self):
        self.assertEqual(sanitize_filename("My Photo (1).JPG"), "My_Photo__1_.JPG")
        self.assertEqual(sanitize_filename("a/b\\c.png"), "a_b_c.png")
        self.assertEqual(sanitize_filename("ok-name.1.png"), "ok-name.1.png")
        self.assertEqual(sanitize_filename("café.jpg"), "caf_.jpg")


class ImageStoreTests(TestCase):
    def setUp(self):
        self.store = create_image_store()

    def test_defaults_to_configured_storage_and_folder(self):
        store = ImageStore()
        self.assertIs(store.storage, IMAGE_STORAGE)
        self.assertEqual(store.folder, "imported")

    def test_generate_path(self):
        path = self.store.generate_path("My Photo.jpg", timestamp=1700000000000)
        self.assertRegex(path, r"^imported/1700000000000-[0-9a-f]{8}-My_Photo\.jpg$")

    def test_generate_path_is_unique_for_same_name_and_time(self):
        paths = {
            self.store.generate_path("same.jpg", timestamp=1700000000000)
            for i in range(20)
        }
        self.assertEqual(len(paths), 20)

    def test_put_returns_public_location(self):
        location = self.store.put(
            "imported/1-abcdef12-photo.jpg", iter([b"abc", b"", b"def"]), "image/jpeg"
        )

        self.assertEqual(location, f"{TEST_STORAGE_URL}imported/1-abcdef12-photo.jpg")
        with self.store.storage.open("imported/1-abcdef12-photo.jpg") as f:
            self.assertEqual(f.read(), b"abcdef")

    def test_put_does_not_store_anything_when_stream_fails(self):
        def chunks():
            yield b"partial"
            raise OSError("connection reset")

        with self.assertRaises(OSError):
            self.store.put("imported/1-abcdef12-photo.jpg", chunks(), "image/jpeg")

        self.assertEqual(self.store.list_matching("imported", "photo"), [])

    def test_list_matching(self):
        self.store.put("imported/1-aaaaaaaa-cat.jpg", [b"x"], "image/jpeg")
        self.store.put("imported/2-bbbbbbbb-dog.jpg", [b"x"], "image/jpeg")

        self.assertEqual(
            self.store.list_matching("imported", "cat"), ["1-aaaaaaaa-cat.jpg"]
        )
        self.assertEqual(
            sorted(self.store.list_matching("imported", ".jpg")),
            ["1-aaaaaaaa-cat.jpg", "2-bbbbbbbb-dog.jpg"],
        )

    def test_list_matching_missing_folder(self):
        self.assertEqual(self.store.list_matching("nowhere", "cat"), [])

    def test_remove(self):
        self.store.put("imported/1-aaaaaaaa-cat.jpg", [b"x"], "image/jpeg")

        self.assertTrue(self.store.remove("imported/1-aaaaaaaa-cat.jpg"))
        self.assertFalse(self.store.remove("imported/1-aaaaaaaa-cat.jpg"))
        self.assertEqual(self.store.list_matching("imported", "cat"), [])

    def test_path_from_location(self):
        self.assertEqual(
            self.store.path_from_location(
                "https://bucket.s3.amazonaws.com/imported/1-aaaaaaaa-cat.jpg"
            ),
            "imported/1-aaaaaaaa-cat.jpg",
        )
        # The last occurrence of the folder name is used
        self.assertEqual(
            self.store.path_from_location(
                "https://cdn.example.com/imported/imported/1-aaaaaaaa-my%20cat.jpg"
            ),
            "imported/1-aaaaaaaa-my cat.jpg",
        )

    def test_path_from_malformed_location(self):
        for location in (
            "",
            None,
            "https://cdn.example.com/elsewhere/cat.jpg",
            "https://cdn.example.com/imported/",
            "https://cdn.example.com/imported/sub/cat.jpg",
        ):
            with self.subTest(location=location):
                with self.assertRaises(MalformedStorageLocation):
                    self.store.path_from_location(location)

    def test_exists_matches_exact_filename(self):
        location = self.store.put(
            "imported/1-aaaaaaaa-cat.jpg.bak", [b"x"], "image/jpeg"
        )

        self.assertTrue(self.store.exists(location))
        self.assertFalse(
            self.store.exists(f"{TEST_STORAGE_URL}imported/1-aaaaaaaa-cat.jpg")
        )

    def test_exists_propagates_storage_errors(self):
        storage = mock.MagicMock(spec=InMemoryStorage)
        storage.listdir.side_effect = ConnectionError("storage unavailable")
        store = ImageStore(storage=storage, folder="imported")

        with self.assertRaises(ConnectionError):
            store.exists(f"{TEST_STORAGE_URL}imported/1-aaaaaaaa-cat.jpg")
        storage.listdir.assert_called_once_with("imported")


class GeneratePathFormatTests(TestCase):
    def test_uses_current_time_by_default(self):
        with mock.patch("imagehub.storage.time.time", return_value=1700000000.5):
            path = create_image_store().generate_path("x.png")
        self.assertTrue(re.match(r"^imported/1700000000500-", path), path)
