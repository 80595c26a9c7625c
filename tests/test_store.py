import os
import tempfile
import threading
import unittest

from backend.errors import ConfigurationError, SessionNotFound, SourceNotFound, VersionNotFound
from backend.models import ORIGINAL, OperationKind, SourceVideo
from backend.store import SessionStore, parse_source_version


class SessionStoreTests(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.store = SessionStore(self.tmp.name)
        self.session = self.store.create_session()
        self.sid = self.session.id

    def tearDown(self):
        self.tmp.cleanup()

    def _add_source(self, source_id="src1", name="clip.mp4"):
        path = os.path.join(self.store.uploads_dir(self.sid), f"{source_id}.mp4")
        with open(path, "wb") as f:
            f.write(b"video")
        return self.store.register_source(self.sid, SourceVideo(
            id=source_id, original_name=name, stored_filename=os.path.basename(path), size=5, path=path,
        ))

    def _append(self, source_version=ORIGINAL, name=None):
        name = name or f"out_{len(self.store.history(self.sid))}.mp4"
        path = os.path.join(self.store.versions_dir(self.sid), name)
        with open(path, "wb") as f:
            f.write(b"out")
        return self.store.append_version(self.sid, OperationKind.AUDIO_MUTE, name, path,
                                         source_version=source_version)

    def test_create_session_layout(self):
        self.assertTrue(os.path.isdir(self.store.uploads_dir(self.sid)))
        self.assertTrue(os.path.isdir(self.store.versions_dir(self.sid)))
        self.assertEqual(self.session.version_counter, 0)

    def test_unknown_session(self):
        with self.assertRaises(SessionNotFound):
            self.store.get_session("missing")

    def test_original_resolves_to_upload(self):
        source = self._add_source()
        self.assertEqual(self.store.resolve_input(self.sid, ORIGINAL), source.path)
        self.assertEqual(self.store.resolve_input(self.sid, "Original"), source.path)

    def test_original_without_upload(self):
        with self.assertRaises(SourceNotFound):
            self.store.resolve_input(self.sid)

    def test_original_needs_source_id_with_several_uploads(self):
        self._add_source("a")
        b = self._add_source("b")
        with self.assertRaises(ConfigurationError):
            self.store.resolve_input(self.sid)
        self.assertEqual(self.store.resolve_input(self.sid, ORIGINAL, source_id="b"), b.path)

    def test_versions_are_numbered_and_resolvable(self):
        source = self._add_source()
        first = self._append()
        second = self._append(source_version=1)
        self.assertEqual((first.version, second.version), (1, 2))
        self.assertEqual(self.store.resolve_input(self.sid, 2), second.output_path)
        self.assertEqual(self.store.resolve_input(self.sid, "1"), first.output_path)
        # the original is never replaced by an edit
        self.assertEqual(self.store.resolve_input(self.sid, ORIGINAL), source.path)

    def test_edits_from_same_version_are_siblings(self):
        self._add_source()
        self._append()
        v2 = self._append(source_version=1)
        v3 = self._append(source_version=1)
        self.assertEqual((v2.source_version, v3.source_version), (1, 1))
        self.assertEqual([v.version for v in self.store.history(self.sid)], [1, 2, 3])

    def test_unknown_version(self):
        self._add_source()
        with self.assertRaises(VersionNotFound):
            self.store.resolve_input(self.sid, 7)
        with self.assertRaises(VersionNotFound):
            self.store.resolve_input(self.sid, "latest")
        with self.assertRaises(VersionNotFound):
            self._append(source_version=3)
        self.assertEqual(self.store.history(self.sid), [])

    def test_concurrent_appends_get_distinct_numbers(self):
        self._add_source()
        threads = [threading.Thread(target=self._append, kwargs={"name": f"t{i}.mp4"}) for i in range(20)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        numbers = [v.version for v in self.store.history(self.sid)]
        self.assertEqual(sorted(numbers), list(range(1, 21)))

    def test_custom_words_are_normalized(self):
        words = self.store.add_custom_words(self.sid, [" Heck ", "", "DARN"])
        self.assertEqual(words, {"heck", "darn"})
        self.assertEqual(self.store.custom_words(self.sid), {"heck", "darn"})

    def test_destroy_removes_files_and_is_idempotent(self):
        source = self._add_source()
        record = self._append()
        workdir = self.session.workdir
        self.assertTrue(self.store.destroy_session(self.sid))
        self.assertFalse(os.path.exists(source.path))
        self.assertFalse(os.path.exists(record.output_path))
        self.assertFalse(os.path.exists(workdir))
        self.assertFalse(self.store.destroy_session(self.sid))
        with self.assertRaises(SessionNotFound):
            self.store.get_session(self.sid)

    def test_flush(self):
        self.store.create_session()
        self.assertEqual(self.store.flush(), 2)
        self.assertEqual(self.store.list_sessions(), [])


class ParseSourceVersionTests(unittest.TestCase):
    def test_values(self):
        self.assertEqual(parse_source_version(None), ORIGINAL)
        self.assertEqual(parse_source_version("ORIGINAL"), ORIGINAL)
        self.assertEqual(parse_source_version(3), 3)
        self.assertEqual(parse_source_version(" 4 "), 4)
        self.assertEqual(parse_source_version("latest"), "latest")


if __name__ == "__main__":
    unittest.main()
