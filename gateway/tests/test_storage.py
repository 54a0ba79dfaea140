import unittest
from unittest.mock import patch

from botocore.exceptions import ClientError

from gateway.errors import StorageError
from gateway.storage import (
    InMemoryStorageClient,
    S3StorageClient,
    build_object_path,
    is_owned_path,
)


class ObjectPathTests(unittest.TestCase):
    def test_path_is_prefixed_by_owner(self):
        path = build_object_path("uid-1", "My Passport (1).pdf", now_ms=1700000000000)
        self.assertEqual(path, "uid-1/1700000000000_My_Passport_1_.pdf")
        self.assertTrue(is_owned_path("uid-1", path))
        self.assertFalse(is_owned_path("uid-2", path))

    def test_directory_parts_are_dropped(self):
        path = build_object_path("uid-1", "../../uid-2/secret.pdf", now_ms=1)
        self.assertEqual(path, "uid-1/1_secret.pdf")

    def test_empty_name_gets_placeholder(self):
        self.assertEqual(build_object_path("uid-1", "...", now_ms=5), "uid-1/5_file")

    def test_prefix_match_needs_separator(self):
        self.assertFalse(is_owned_path("uid-1", "uid-10/5_file"))

    def test_relative_segments_are_not_owned(self):
        for path in [
            "uid-1/../uid-2/1_passport.pdf",
            "uid-1/./1_passport.pdf",
            "uid-1//1_passport.pdf",
            "uid-1/",
            "uid-1/..",
            "uid-1/a\\..\\b.pdf",
        ]:
            with self.subTest(path=path):
                self.assertFalse(is_owned_path("uid-1", path))
        self.assertTrue(is_owned_path("uid-1", "uid-1/scans/1_passport.pdf"))


class InMemoryStorageClientTests(unittest.TestCase):
    def test_urls_and_delete(self):
        storage = InMemoryStorageClient()
        storage.stored_objects["uid-1/a.pdf"] = b"data"
        self.assertIn("op=put", storage.presign_put("uid-1/a.pdf", expires_in=60))
        self.assertIn("expires=60", storage.presign_get("uid-1/a.pdf", expires_in=60))
        storage.delete_object("uid-1/a.pdf")
        self.assertEqual(storage.stored_objects, {})
        self.assertEqual(storage.deleted, ["uid-1/a.pdf"])


class S3StorageClientTests(unittest.TestCase):
    def setUp(self):
        patcher = patch("gateway.storage.boto3.client")
        self.boto_client = patcher.start()
        self.addCleanup(patcher.stop)
        self.s3 = self.boto_client.return_value
        self.storage = S3StorageClient(
            bucket="documents",
            region="ap-southeast-1",
            endpoint="https://proj.supabase.co/storage/v1/s3",
            access_key_id="key",
            secret_access_key="secret",
        )

    def test_client_uses_path_style(self):
        kwargs = self.boto_client.call_args.kwargs
        self.assertEqual(kwargs["endpoint_url"], "https://proj.supabase.co/storage/v1/s3")
        self.assertEqual(kwargs["config"].s3, {"addressing_style": "path"})

    def test_presign_put_sets_content_type(self):
        self.s3.generate_presigned_url.return_value = "https://signed"
        url = self.storage.presign_put("uid-1/a.pdf", expires_in=300, content_type="application/pdf")
        self.assertEqual(url, "https://signed")
        self.s3.generate_presigned_url.assert_called_once_with(
            ClientMethod="put_object",
            Params={"Bucket": "documents", "Key": "uid-1/a.pdf", "ContentType": "application/pdf"},
            ExpiresIn=300,
        )

    def test_presign_get(self):
        self.storage.presign_get("uid-1/a.pdf")
        self.s3.generate_presigned_url.assert_called_once_with(
            ClientMethod="get_object",
            Params={"Bucket": "documents", "Key": "uid-1/a.pdf"},
            ExpiresIn=3600,
        )

    def test_delete_failure_is_storage_error(self):
        self.s3.delete_object.side_effect = ClientError(
            {"Error": {"Code": "AccessDenied", "Message": "denied"}}, "DeleteObject"
        )
        with self.assertRaises(StorageError):
            self.storage.delete_object("uid-1/a.pdf")

    def test_public_url(self):
        self.assertEqual(
            self.storage.public_url("uid-1/a.pdf"),
            "https://proj.supabase.co/storage/v1/object/public/documents/uid-1/a.pdf",
        )


if __name__ == "__main__":
    unittest.main()
