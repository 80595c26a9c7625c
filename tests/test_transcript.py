import json
import os
import tempfile
import unittest

from backend.core.transcript import (
    TranscriptFormat, load_transcript, normalize, parse_srt, parse_whisper_json, srt_time_to_seconds,
)
from backend.errors import TranscriptUnavailable


SRT_SAMPLE = """1
00:00:01,000 --> 00:00:02,500
hello damn world

2
00:01:02,500 --> 00:01:04,000
second line

"""


class SrtParsingTests(unittest.TestCase):
    def test_timestamp_conversion(self):
        self.assertEqual(srt_time_to_seconds("00:01:02,500"), 62.5)
        self.assertEqual(srt_time_to_seconds("01:00:00.250"), 3600.25)
        self.assertEqual(srt_time_to_seconds("00:00:00,5"), 0.5)

    def test_bad_timestamp_raises(self):
        with self.assertRaises(ValueError):
            srt_time_to_seconds("1:2:3")

    def test_parses_blocks_in_order(self):
        entries = parse_srt(SRT_SAMPLE)
        self.assertEqual([e.index for e in entries], [1, 2])
        self.assertEqual(entries[0].start, 1.0)
        self.assertEqual(entries[0].end, 2.5)
        self.assertEqual(entries[0].text, "hello damn world")
        self.assertEqual(entries[1].start, 62.5)

    def test_crlf_line_endings(self):
        entries = parse_srt(SRT_SAMPLE.replace("\n", "\r\n"))
        self.assertEqual(len(entries), 2)

    def test_malformed_timing_is_skipped(self):
        text = "1\nnot a timing line\nlost\n\n2\n00:00:03,000 --> 00:00:04,000\nkept\n\n"
        entries = parse_srt(text)
        self.assertEqual(len(entries), 1)
        self.assertEqual(entries[0].index, 2)
        self.assertEqual(entries[0].text, "kept")

    def test_incomplete_trailing_block_is_skipped(self):
        text = SRT_SAMPLE + "3\n00:00:09,000 --> 00:00:10,000"
        entries = parse_srt(text)
        self.assertEqual([e.index for e in entries], [1, 2])

    def test_empty_input(self):
        self.assertEqual(parse_srt(""), [])


class WhisperJsonTests(unittest.TestCase):
    def _payload(self):
        return {
            "text": "hello damn world. bye",
            "segments": [
                {"id": 0, "start": 0.0, "end": 1.5, "text": " hello damn world.",
                 "words": [{"word": " hello", "start": 0.0, "end": 0.4},
                           {"word": " damn", "start": 0.5, "end": 0.9},
                           {"word": " world.", "start": 1.0, "end": 1.5}]},
                {"id": 1, "start": 1.5, "end": 2.0, "text": " bye"},
            ],
        }

    def test_segments_become_entries(self):
        entries = parse_whisper_json(self._payload())
        self.assertEqual([e.index for e in entries], [1, 2])
        self.assertEqual(entries[0].text, "hello damn world.")
        self.assertEqual([w.word for w in entries[0].words], ["hello", "damn", "world."])
        self.assertEqual(entries[1].words, [])

    def test_accepts_json_text(self):
        entries = normalize(json.dumps(self._payload()), "json")
        self.assertEqual(len(entries), 2)

    def test_segment_without_timing_is_dropped(self):
        payload = self._payload()
        payload["segments"].insert(0, {"text": "no timing"})
        entries = parse_whisper_json(payload)
        self.assertEqual(len(entries), 2)

    def test_invalid_json_raises(self):
        with self.assertRaises(TranscriptUnavailable):
            parse_whisper_json("{not json")

    def test_missing_segments_raises(self):
        with self.assertRaises(TranscriptUnavailable):
            parse_whisper_json({"text": "x"})


class NormalizeTests(unittest.TestCase):
    def test_srt_and_json_give_same_shape(self):
        srt = normalize(SRT_SAMPLE.encode("utf-8"), TranscriptFormat.SRT)
        js = normalize({"segments": [{"start": 1.0, "end": 2.5, "text": "hello damn world"},
                                     {"start": 62.5, "end": 64.0, "text": "second line"}]}, "json")
        self.assertEqual([(e.start, e.end, e.text) for e in srt],
                         [(e.start, e.end, e.text) for e in js])

    def test_unknown_format_raises(self):
        with self.assertRaises(TranscriptUnavailable):
            normalize("", "vtt")

    def test_load_missing_file_raises(self):
        with self.assertRaises(TranscriptUnavailable):
            load_transcript("/nonexistent/transcript.srt", "srt")

    def test_load_srt_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "audio.srt")
            with open(path, "w", encoding="utf-8") as f:
                f.write(SRT_SAMPLE)
            entries = load_transcript(path, "srt")
        self.assertEqual(len(entries), 2)


if __name__ == "__main__":
    unittest.main()
