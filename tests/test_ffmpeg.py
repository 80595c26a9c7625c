import os
import sys
import tempfile
import unittest

from backend.errors import ConfigurationError, ExecutorFailure
from backend.models import OperationKind, TimeRange
from backend.render.ffmpeg import (
    FFmpegExecutor, MediaOperation, RenderProfile, build_command, build_mute_filter,
    build_multi_join_command,
)


class CommandBuilderTests(unittest.TestCase):
    def test_mute_filter_sums_ranges_in_order(self):
        graph = build_mute_filter([TimeRange(5, 6.25), TimeRange(1, 2)])
        self.assertEqual(graph, "[0:a]volume=enable='between(t,5,6.25)+between(t,1,2)':volume=0[outa]")

    def test_mute_copies_video_stream(self):
        op = MediaOperation(OperationKind.AUDIO_MUTE, "out.mp4", "in.mp4", [TimeRange(1, 2)])
        cmd = build_command(op)
        self.assertEqual(cmd[:4], ["ffmpeg", "-y", "-i", "in.mp4"])
        self.assertIn("0:v", cmd)
        self.assertEqual(cmd[cmd.index("-c:v") + 1], "copy")
        self.assertEqual(cmd[-1], "out.mp4")

    def test_mute_without_ranges_is_stream_copy(self):
        op = MediaOperation(OperationKind.AUDIO_MUTE, "out.mp4", "in.mp4")
        self.assertEqual(build_command(op), ["ffmpeg", "-y", "-i", "in.mp4", "-c", "copy", "out.mp4"])

    def test_single_trim(self):
        op = MediaOperation(OperationKind.TRIM, "out.mp4", "in.mp4", [TimeRange(1.5, 4)])
        cmd = build_command(op, codec="libx265")
        self.assertEqual(cmd[cmd.index("-ss") + 1], "1.5")
        self.assertEqual(cmd[cmd.index("-t") + 1], "2.5")
        self.assertEqual(cmd[cmd.index("-c:v") + 1], "libx265")

    def test_trim_join_concatenates_in_order(self):
        op = MediaOperation(OperationKind.TRIM_JOIN, "out.mp4", "in.mp4",
                            [TimeRange(10, 12), TimeRange(1, 2)], join=True)
        graph = build_command(op)[build_command(op).index("-filter_complex") + 1]
        self.assertLess(graph.index("trim=start=10:end=12"), graph.index("trim=start=1:end=2"))
        self.assertIn("[v0][a0][v1][a1]concat=n=2:v=1:a=1[outv][outa]", graph)

    def test_structural_errors(self):
        bad = [
            MediaOperation(OperationKind.TRIM, "o", "i", [TimeRange(0, 1), TimeRange(2, 3)]),
            MediaOperation(OperationKind.TRIM_JOIN, "o", "i", [TimeRange(0, 1)], join=True),
            MediaOperation(OperationKind.MULTI_JOIN, "o", clips=[("a.mp4", [])]),
        ]
        for op in bad:
            with self.subTest(kind=op.kind):
                with self.assertRaises(ConfigurationError):
                    build_command(op)

    def test_multi_join_normalizes_every_clip(self):
        cmd = build_multi_join_command(
            [("a.mp4", [TimeRange(0, 1)]), ("b.mov", [TimeRange(2, 3), TimeRange(4, 5)])],
            "out.mp4", RenderProfile.original(1921, 1080),
        )
        self.assertEqual(cmd.count("-i"), 2)
        graph = cmd[cmd.index("-filter_complex") + 1]
        self.assertIn("[1:v]trim=start=4:end=5", graph)
        self.assertIn("scale=1920:1080", graph)
        self.assertIn("concat=n=3:v=1:a=1", graph)


class ExecutorTests(unittest.IsolatedAsyncioTestCase):
    async def test_failure_leaves_no_output(self):
        with tempfile.TemporaryDirectory() as tmp:
            out = os.path.join(tmp, "out.mp4")
            op = MediaOperation(OperationKind.AUDIO_MUTE, out, os.path.join(tmp, "missing.mp4"))
            # the Python interpreter rejects ffmpeg's arguments and exits non-zero
            executor = FFmpegExecutor(binary=sys.executable)
            with self.assertRaises(ExecutorFailure):
                await executor.run(op)
            self.assertFalse(os.path.exists(out))

    async def test_missing_binary(self):
        with tempfile.TemporaryDirectory() as tmp:
            op = MediaOperation(OperationKind.AUDIO_MUTE, os.path.join(tmp, "o.mp4"), "in.mp4")
            executor = FFmpegExecutor(binary=os.path.join(tmp, "no-such-ffmpeg"))
            with self.assertRaises(ExecutorFailure):
                await executor.run(op)

    async def test_missing_output_directory_is_not_recreated(self):
        with tempfile.TemporaryDirectory() as tmp:
            versions = os.path.join(tmp, "deleted-session", "versions")
            op = MediaOperation(OperationKind.AUDIO_MUTE, os.path.join(versions, "o.mp4"), "in.mp4")
            executor = FFmpegExecutor(binary=sys.executable)
            with self.assertRaises(ExecutorFailure):
                await executor.run(op)
            self.assertFalse(os.path.exists(versions))


if __name__ == "__main__":
    unittest.main()
