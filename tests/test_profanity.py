import unittest

from backend.core.profanity import (
    SOURCE_FILTER, SOURCE_LIST, ProfanityDetector, language_family, mask_profanity,
)
from backend.models import TranscriptEntry


def entry(index, start, end, text):
    return TranscriptEntry(index=index, start=start, end=end, text=text)


class ProfanityDetectorTests(unittest.TestCase):
    def setUp(self):
        self.detector = ProfanityDetector()

    def test_listed_word_flags_whole_entry(self):
        transcript = [entry(1, 0.0, 2.0, "hello there"), entry(2, 2.0, 4.5, "hello damn world")]
        report = self.detector.detect(transcript, language="en")

        self.assertEqual(report.profanity_count, 1)
        seg = report.segments[0]
        self.assertEqual((seg.index, seg.start, seg.end), (2, 2.0, 4.5))
        self.assertEqual([hw.word for hw in seg.highlighted_words], ["hello", "damn", "world"])
        self.assertEqual(seg.profane_words, ["damn"])
        self.assertEqual(seg.highlighted_words[1].source, SOURCE_LIST)
        self.assertEqual(report.word_hits, [("damn", 2)])
        self.assertEqual(report.total_duration, 2.5)

    def test_filter_catches_punctuated_token(self):
        report = self.detector.detect([entry(1, 0.0, 1.0, "oh damn!")], language="en")
        hw = report.segments[0].highlighted_words[1]
        self.assertTrue(hw.is_profane)
        self.assertEqual(hw.source, SOURCE_FILTER)

    def test_filter_flags_words_missing_from_static_list(self):
        transcript = [entry(1, 0.0, 1.0, "you sh1t"), entry(2, 1.0, 2.0, "what the fvck")]
        report = self.detector.detect(transcript, language="en")
        self.assertEqual(report.profanity_count, 2)
        for seg in report.segments:
            hw = seg.highlighted_words[-1]
            self.assertNotIn(hw.word.lower(), self.detector.vocabulary("en"))
            self.assertEqual(hw.source, SOURCE_FILTER)

    def test_custom_words_extend_vocabulary(self):
        transcript = [entry(1, 0.0, 1.0, "what the zorp")]
        self.assertEqual(self.detector.detect(transcript, "en").profanity_count, 0)
        report = self.detector.detect(transcript, "en", custom_words=["Zorp"])
        self.assertEqual(report.profanity_count, 1)
        self.assertEqual(report.segments[0].profane_words, ["zorp"])

    def test_hindi_includes_english(self):
        transcript = [entry(1, 0.0, 1.0, "arre chutiya"), entry(2, 1.0, 2.0, "shit yaar")]
        report = self.detector.detect(transcript, language="hi")
        self.assertEqual(report.profanity_count, 2)

    def test_empty_transcript(self):
        report = self.detector.detect([], language="hi")
        self.assertEqual(report.segments, [])
        self.assertEqual(report.total_duration, 0.0)

    def test_overlapping_entries_counted_once(self):
        transcript = [entry(1, 0.0, 2.0, "damn"), entry(2, 1.0, 3.0, "shit")]
        report = self.detector.detect(transcript, language="en")
        self.assertEqual(report.total_duration, 3.0)

    def test_custom_filter(self):
        detector = ProfanityDetector(word_filter=lambda tok, lang: tok.replace("frak", "****"))
        report = detector.detect([entry(1, 0.0, 1.0, "frakking toasters")], language="en")
        self.assertEqual(report.segments[0].highlighted_words[0].source, SOURCE_FILTER)

    def test_report_dict(self):
        report = self.detector.detect([entry(1, 0.0, 1.0, "damn")], language="en")
        data = report.to_dict()
        self.assertEqual(data["profanity_count"], 1)
        self.assertEqual(data["word_hits"], [{"word": "damn", "index": 1}])


class WordFilterTests(unittest.TestCase):
    def test_mask_keeps_clean_tokens(self):
        self.assertEqual(mask_profanity("hello", "en"), "hello")
        self.assertEqual(mask_profanity("class", "en"), "class")

    def test_mask_only_whole_words(self):
        self.assertEqual(mask_profanity("shell", "en"), "shell")
        self.assertEqual(mask_profanity("Damn,", "en"), "****,")

    def test_mask_catches_obfuscated_spelling(self):
        self.assertNotEqual(mask_profanity("sh1t", "en"), "sh1t")
        self.assertNotEqual(mask_profanity("fvck", "hi"), "fvck")

    def test_language_family(self):
        self.assertEqual(language_family("hi"), "hi")
        self.assertEqual(language_family("Hindi"), "hi")
        self.assertEqual(language_family("en-US"), "en")
        self.assertEqual(language_family("fr"), "en")
        self.assertEqual(language_family(None), "en")


if __name__ == "__main__":
    unittest.main()
