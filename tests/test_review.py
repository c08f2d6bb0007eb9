import asyncio
import json
import tempfile
import unittest
from pathlib import Path

from kyc_match.config import ReviewSettings
from kyc_match.review import InboxWatcher, ReviewQueue, VerdictRecorder, profile_name_from


def _upload(name, profile):
    return {
        "kycStatus": "pending",
        "ocrResult": {"extractedData": {"name": name}},
        "profileName": profile,
    }


class TestProfileNameFrom(unittest.TestCase):
    def test_profile_name_key(self) -> None:
        self.assertEqual(profile_name_from({"profileName": "John Smith"}), "John Smith")

    def test_user_name(self) -> None:
        self.assertEqual(profile_name_from({"user": {"name": "Jane Doe"}}), "Jane Doe")

    def test_missing(self) -> None:
        self.assertIsNone(profile_name_from({"user": "Jane"}))


class TestReviewQueue(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        tmp = Path(self._tmp.name)
        self.inbox = tmp / "inbox"
        self.inbox.mkdir()
        self.output = tmp / "out" / "verdicts.jsonl"
        self.settings = ReviewSettings(inbox=self.inbox, output=self.output)

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def _write(self, name: str, payload) -> Path:
        path = self.inbox / name
        path.write_text(payload if isinstance(payload, str) else json.dumps(payload), encoding="utf-8")
        return path

    def _records(self) -> list[dict]:
        return [json.loads(line) for line in self.output.read_text(encoding="utf-8").splitlines()]

    def test_batch_review(self) -> None:
        self._write("a.json", _upload("SMITH JOHN", "John Smith"))
        self._write("b.json", _upload("JON SMITH", "John Smith"))
        self._write("c.json", "{not json")
        self._write("notes.txt", "ignored")

        queue = ReviewQueue(self.settings, VerdictRecorder(self.output))
        with self.assertLogs("kyc_match.review", level="WARNING"):
            summary = queue.run()

        self.assertEqual(summary.processed, 3)
        self.assertEqual(summary.counts, {"verified": 1, "manual_review": 1, "error": 1})
        self.assertEqual(summary.errors, 1)

        records = self._records()
        self.assertEqual([Path(r["source"]).name for r in records], ["a.json", "b.json", "c.json"])
        self.assertEqual(records[0]["nameMatch"]["reason"], "High similarity match")
        self.assertEqual(records[1]["nameMatch"]["confidence"], 0.5)
        self.assertEqual(records[2]["status"], "error")
        self.assertIn("error", records[2])

    def test_recorder_truncates_previous_output(self) -> None:
        self.output.parent.mkdir(parents=True)
        self.output.write_text("stale\n", encoding="utf-8")
        VerdictRecorder(self.output)
        self.assertEqual(self.output.read_text(encoding="utf-8"), "")

    def test_missing_inbox(self) -> None:
        settings = ReviewSettings(inbox=self.inbox / "nope", output=self.output)
        queue = ReviewQueue(settings, VerdictRecorder(self.output))
        with self.assertLogs("kyc_match.review", level="WARNING"):
            summary = queue.run()
        self.assertEqual(summary.processed, 0)


class TestInboxWatcher(unittest.TestCase):
    def test_same_file_processed_once_per_change(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = ReviewSettings(inbox=tmp, output=tmp / "verdicts.jsonl")
            watcher = InboxWatcher(ReviewQueue(settings, VerdictRecorder(settings.output)))
            path = tmp / "a.json"
            path.write_text(json.dumps(_upload("JOHN SMITH", "John Smith")), encoding="utf-8")

            self.assertTrue(watcher.should_process(path))
            self.assertFalse(watcher.should_process(path))
            self.assertFalse(watcher.should_process(tmp / "missing.json"))

    def test_deleted_file_is_forgotten(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = ReviewSettings(inbox=tmp, output=tmp / "verdicts.jsonl")
            watcher = InboxWatcher(ReviewQueue(settings, VerdictRecorder(settings.output)))
            path = tmp / "a.json"
            path.write_text("{}", encoding="utf-8")

            self.assertTrue(watcher.should_process(path))
            path.unlink()
            self.assertFalse(watcher.should_process(path))
            self.assertNotIn(path, watcher._seen)

    def test_seen_paths_are_pruned(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            settings = ReviewSettings(inbox=tmp, output=tmp / "verdicts.jsonl")
            watcher = InboxWatcher(ReviewQueue(settings, VerdictRecorder(settings.output)))
            watcher.MAX_SEEN_PATHS = 2
            watcher._seen = {tmp / "gone-1.json": 1, tmp / "gone-2.json": 2}
            path = tmp / "a.json"
            path.write_text("{}", encoding="utf-8")

            self.assertTrue(watcher.should_process(path))
            self.assertEqual(list(watcher._seen), [path])


class TestProcessFileWhileWriting(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        tmp = Path(self._tmp.name)
        self.output = tmp / "verdicts.jsonl"
        self.path = tmp / "a.json"
        self.path.write_text('{"ocrResult": {"extractedData"', encoding="utf-8")
        self.queue = ReviewQueue(ReviewSettings(inbox=tmp, output=self.output), VerdictRecorder(self.output))

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def test_partial_file_is_not_recorded_while_changing(self) -> None:
        status = self.queue.process_file(self.path, is_final=lambda _path: False)
        self.assertIsNone(status)
        self.assertEqual(self.output.read_text(encoding="utf-8"), "")
        self.assertEqual(self.queue.summary.processed, 0)

    def test_settled_broken_file_is_recorded(self) -> None:
        with self.assertLogs("kyc_match.review", level="WARNING"):
            status = self.queue.process_file(self.path, is_final=lambda _path: True)
        self.assertEqual(status, "error")
        self.assertEqual(self.queue.summary.errors, 1)


class TestInboxWatcherRun(unittest.IsolatedAsyncioTestCase):
    async def _wait_for_lines(self, output: Path, count: int, timeout: float = 5.0) -> None:
        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout
        while loop.time() < deadline:
            if output.exists() and len(output.read_text(encoding="utf-8").splitlines()) >= count:
                return
            await asyncio.sleep(0.05)

    async def test_file_written_in_two_steps_yields_one_verdict(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            tmp = Path(tmpdir)
            inbox = tmp / "inbox"
            inbox.mkdir()
            output = tmp / "verdicts.jsonl"
            settings = ReviewSettings(inbox=inbox, output=output, settle_seconds=0.5)
            watcher = InboxWatcher(ReviewQueue(settings, VerdictRecorder(output)))
            task = asyncio.create_task(watcher.run())
            try:
                await asyncio.wait_for(watcher.ready.wait(), timeout=5.0)
                text = json.dumps(_upload("SMITH JOHN", "John Smith"))
                half = len(text) // 2
                with (inbox / "a.json").open("w", encoding="utf-8") as handle:
                    handle.write(text[:half])
                    handle.flush()
                    await asyncio.sleep(0.2)
                    handle.write(text[half:])

                await self._wait_for_lines(output, 1)
                # Give late events time to be handled
                await asyncio.sleep(1.0)
                lines = output.read_text(encoding="utf-8").splitlines()
            finally:
                task.cancel()
                await asyncio.gather(task, return_exceptions=True)

        self.assertEqual([json.loads(line)["status"] for line in lines], ["verified"])


if __name__ == "__main__":
    unittest.main()
