"""
エッジケースのユニットテスト

Image Copy Matcherの各コンポーネントのエッジケースをテストします。
"""

import shutil
import tempfile
import threading
import time
import unittest
from pathlib import Path
from unittest.mock import patch

from image_copy_matcher.copier import Copier
from image_copy_matcher.file_scanner import FileScanner
from image_copy_matcher.indexer import MatchIndex
from image_copy_matcher.models import OutcomeKind
from image_copy_matcher.planner import CopyPlanner


class TestCopierEdgeCases(unittest.TestCase):
    """Copierのエッジケーステスト"""

    def setUp(self):
        """テスト前の準備"""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.low = self.temp_dir / "low"
        self.hi = self.temp_dir / "hi"
        self.dest = self.temp_dir / "dest"
        for d in (self.low, self.hi, self.dest):
            d.mkdir()
        self.copier = Copier()

    def tearDown(self):
        """テスト後のクリーンアップ"""
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _planner(self, match_by_stem_only=True):
        files = FileScanner().scan_image_files(self.hi)
        return CopyPlanner(MatchIndex.build(files, match_by_stem_only), self.low, self.dest)

    def test_empty_source_set(self):
        """低解像度側に画像がない場合"""
        summary = self.copier.copy_files([], self._planner())

        self.assertEqual(summary.total, 0)
        self.assertEqual(summary.done, 0)
        self.assertFalse(summary.cancelled)

    def test_reference_deleted_after_indexing(self):
        """インデックス構築後に参照ファイルが消えた場合はErrorになる"""
        (self.low / "a.jpg").write_bytes(b"low")
        (self.hi / "a.png").write_bytes(b"hi")
        planner = self._planner()
        (self.hi / "a.png").unlink()

        result = self.copier.process_item(self.low / "a.jpg", planner, overwrite=False)

        self.assertEqual(result.kind, OutcomeKind.ERROR)
        self.assertTrue(result.message)
        self.assertFalse((self.dest / "a.png").exists())

    def test_two_sources_resolving_to_same_destination(self):
        """拡張子だけ異なる2つのソースが同じコピー先になる場合"""
        (self.low / "a.jpg").write_bytes(b"low")
        (self.low / "a.png").write_bytes(b"low")
        (self.hi / "a.tif").write_bytes(b"hi")

        summary = self.copier.copy_files(
            FileScanner().scan_image_files(self.low), self._planner(),
            overwrite=False, max_workers=1)

        self.assertEqual(summary.copied, 1)
        self.assertEqual(summary.skipped, 1)
        self.assertEqual((self.dest / "a.tif").read_bytes(), b"hi")

    def test_concurrent_sources_sharing_destination_copy_once(self):
        """同じコピー先を複数ワーカーが同時に処理しても1件だけがコピーされる"""
        for ext in ("jpg", "png", "bmp", "webp"):
            (self.low / f"a.{ext}").write_bytes(b"low")
        (self.hi / "a.tif").write_bytes(b"hi")

        original_copyfileobj = shutil.copyfileobj
        started = threading.Barrier(4, timeout=5)

        def slow_copyfileobj(fsrc, fdst, *args, **kwargs):
            time.sleep(0.2)
            return original_copyfileobj(fsrc, fdst, *args, **kwargs)

        original_exists = Path.exists

        def exists_after_all_started(path_self, *args, **kwargs):
            # 4ワーカーが揃ってから既存チェックを通過させる
            if path_self.name == "a.tif" and path_self.parent == self.dest:
                try:
                    started.wait()
                except threading.BrokenBarrierError:
                    pass
            return original_exists(path_self, *args, **kwargs)

        with patch('image_copy_matcher.copier.shutil.copyfileobj', side_effect=slow_copyfileobj), \
                patch.object(Path, 'exists', exists_after_all_started):
            summary = self.copier.copy_files(
                FileScanner().scan_image_files(self.low), self._planner(),
                overwrite=False, max_workers=4)

        self.assertEqual(summary.total, 4)
        self.assertEqual(summary.copied, 1)
        self.assertEqual(summary.skipped, 3)
        self.assertEqual(summary.failed, 0)
        self.assertEqual((self.dest / "a.tif").read_bytes(), b"hi")

    def test_unexpected_exception_becomes_error_outcome(self):
        """予期しない例外もそのファイルだけのErrorとして記録される"""
        (self.low / "a.jpg").write_bytes(b"low")
        (self.low / "b.jpg").write_bytes(b"low")
        (self.hi / "a.png").write_bytes(b"hi")
        (self.hi / "b.png").write_bytes(b"hi")
        planner = self._planner()
        original_plan = planner.plan

        def flaky_plan(source_path):
            if source_path.name == "a.jpg":
                raise RuntimeError("unexpected")
            return original_plan(source_path)

        with patch.object(planner, 'plan', side_effect=flaky_plan):
            summary = self.copier.copy_files(
                FileScanner().scan_image_files(self.low), planner, max_workers=2)

        self.assertEqual(summary.failed, 1)
        self.assertEqual(summary.copied, 1)
        self.assertEqual(summary.errors, [("a.jpg", "Unexpected error: unexpected")])

    def test_uppercase_extension_in_source_tree(self):
        """ソース側の拡張子が大文字でも列挙・照合される"""
        (self.low / "PHOTO.JPEG").write_bytes(b"low")
        (self.hi / "photo.webp").write_bytes(b"hi")

        summary = self.copier.copy_files(
            FileScanner().scan_image_files(self.low), self._planner())

        self.assertEqual(summary.copied, 1)
        self.assertTrue((self.dest / "photo.webp").exists())

    def test_dotted_stem(self):
        """ファイル名に複数のドットを含む場合は最後の拡張子だけを除く"""
        (self.low / "a.b.jpg").write_bytes(b"low")
        (self.hi / "a.b.png").write_bytes(b"hi")
        (self.hi / "a.png").write_bytes(b"wrong")

        summary = self.copier.copy_files(
            FileScanner().scan_image_files(self.low), self._planner())

        self.assertEqual(summary.copied, 1)
        self.assertEqual((self.dest / "a.b.png").read_bytes(), b"hi")


class TestMatchIndexEdgeCases(unittest.TestCase):
    """MatchIndexのエッジケーステスト"""

    def test_same_name_different_case_in_reference_set(self):
        """参照側に大文字小文字だけが異なるファイルがある場合は後勝ち"""
        index = MatchIndex.build([Path("/hi/a/Photo.png"), Path("/hi/b/PHOTO.png")], True)

        self.assertEqual(index.find("photo"), Path("/hi/b/PHOTO.png"))
        self.assertEqual(index.duplicate_count, 1)


if __name__ == '__main__':
    unittest.main()
