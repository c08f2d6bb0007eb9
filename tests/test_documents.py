import tempfile
import unittest
from pathlib import Path

from kyc_match.config import UploadSettings
from kyc_match.documents import require_valid_document, validate_document
from kyc_match.models import DocumentValidationError


class TestValidateDocument(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.tmp = Path(self._tmp.name)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_accepts_small_image(self) -> None:
        path = self.tmp / "front.jpg"
        path.write_bytes(b"\xff\xd8\xff" + b"0" * 100)
        check = validate_document(path)
        self.assertTrue(check.valid)
        self.assertEqual(check.mime_type, "image/jpeg")
        self.assertEqual(check.size_bytes, 103)
        self.assertEqual(check.errors, [])

    def test_rejects_non_image(self) -> None:
        path = self.tmp / "front.pdf"
        path.write_bytes(b"%PDF-1.4")
        check = validate_document(path)
        self.assertFalse(check.valid)
        self.assertIn("Invalid file type", check.errors[0])

    def test_rejects_large_file(self) -> None:
        path = self.tmp / "front.png"
        path.write_bytes(b"0" * 11)
        check = validate_document(path, UploadSettings(max_upload_bytes=10))
        self.assertFalse(check.valid)
        self.assertTrue(any("File too large" in e for e in check.errors))

    def test_default_limit_is_five_megabytes(self) -> None:
        path = self.tmp / "front.png"
        path.write_bytes(b"0" * (5 * 1024 * 1024))
        self.assertTrue(validate_document(path).valid)
        path.write_bytes(b"0" * (5 * 1024 * 1024 + 1))
        self.assertIn("smaller than 5MB", validate_document(path).errors[0])

    def test_missing_file(self) -> None:
        check = validate_document(self.tmp / "missing.jpg")
        self.assertFalse(check.valid)
        self.assertIsNone(check.size_bytes)
        self.assertIn("File not found", check.errors[0])

    def test_require_valid_raises(self) -> None:
        path = self.tmp / "notes.txt"
        path.write_text("hello", encoding="utf-8")
        with self.assertRaises(DocumentValidationError) as ctx:
            require_valid_document(path)
        self.assertEqual(len(ctx.exception.errors), 1)


if __name__ == "__main__":
    unittest.main()
