"""
FileScannerのプロパティベーステスト

Property 1: 列挙されるファイルはすべて対象拡張子を持つ
Property 2: 照合キー抽出の一貫性
"""

import os
import tempfile
from pathlib import Path
from hypothesis import given, strategies as st
from hypothesis import settings
import pytest

from image_copy_matcher.file_scanner import FileScanner
from image_copy_matcher.exceptions import DirectoryNotFoundError, EnumerationError


# ファイルシステムで安全に使用できる文字のストラテジー
safe_name_strategy = st.text(
    alphabet='abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789_-',
    min_size=1,
    max_size=20
)

image_extension_strategy = st.sampled_from([
    '.jpg', '.JPG', '.jpeg', '.JPEG', '.png', '.PNG', '.Png',
    '.tif', '.TIF', '.tiff', '.TIFF', '.bmp', '.BMP', '.webp', '.WEBP'
])

other_extension_strategy = st.sampled_from([
    '.txt', '.CR2', '.nef', '.gif', '.json', '.xmp', ''
])


@settings(max_examples=50, deadline=None)
@given(
    image_names=st.lists(st.tuples(safe_name_strategy, image_extension_strategy),
                         max_size=8),
    other_names=st.lists(st.tuples(safe_name_strategy, other_extension_strategy),
                         max_size=8),
    depth=st.integers(min_value=0, max_value=3)
)
def test_enumeration_filters_by_extension_property(image_names, other_names, depth):
    """
    **Property 1: 列挙されるファイルはすべて対象拡張子を持つ**

    任意のディレクトリ構成に対して、列挙結果は対象拡張子（大文字小文字を
    区別しない）を持つファイルすべてであり、それ以外は含まれないべきである。
    """
    scanner = FileScanner()

    with tempfile.TemporaryDirectory() as temp_dir:
        root = Path(temp_dir)
        nested = root
        for level in range(depth):
            nested = nested / f"level{level}"
        nested.mkdir(parents=True, exist_ok=True)

        expected = set()
        for i, (name, ext) in enumerate(image_names):
            path = nested / f"img{i}_{name}{ext}"
            path.write_bytes(b"image")
            expected.add(path)
        for i, (name, ext) in enumerate(other_names):
            (nested / f"other{i}_{name}{ext}").write_bytes(b"other")

        found = scanner.scan_image_files(root)

        assert set(found) == expected
        assert len(found) == len(expected)
        for path in found:
            assert path.is_absolute()
            assert path.suffix.lower() in FileScanner.IMAGE_EXTENSIONS


@settings(max_examples=100)
@given(stem=safe_name_strategy, ext=image_extension_strategy)
def test_match_key_extraction_property(stem, ext):
    """
    **Property 2: 照合キー抽出の一貫性**

    拡張子を除く方式ではファイル名の幹を、そうでない場合は拡張子付きの
    ファイル名を、大文字小文字を保持したまま返すべきである。
    """
    path = Path("/photos/sub") / f"{stem}{ext}"

    assert FileScanner.get_match_key(path, match_by_stem_only=True) == stem
    assert FileScanner.get_match_key(path, match_by_stem_only=False) == f"{stem}{ext}"


class TestFileScanner:
    """FileScannerの単体テスト"""

    def test_enumeration_is_lazy(self):
        """列挙はジェネレーターとして遅延評価される"""
        scanner = FileScanner()
        with tempfile.TemporaryDirectory() as temp_dir:
            (Path(temp_dir) / "a.jpg").write_bytes(b"x")
            iterator = scanner.iter_image_files(Path(temp_dir))
            assert iter(iterator) is iterator
            assert next(iterator).name == "a.jpg"

    def test_missing_root_raises_directory_not_found(self):
        """存在しないルートはDirectoryNotFoundErrorになる"""
        scanner = FileScanner()
        with tempfile.TemporaryDirectory() as temp_dir:
            missing = Path(temp_dir) / "missing"
            with pytest.raises(DirectoryNotFoundError):
                scanner.scan_image_files(missing)

    @pytest.mark.skipif(not hasattr(os, 'geteuid') or os.geteuid() == 0,
                        reason="rootでは権限エラーを再現できない")
    def test_unreadable_subdirectory_propagates(self):
        """読み取れないサブディレクトリは握りつぶさずにエラーとする"""
        scanner = FileScanner()
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            locked = root / "locked"
            locked.mkdir()
            (locked / "a.jpg").write_bytes(b"x")
            os.chmod(locked, 0o000)
            try:
                with pytest.raises(EnumerationError):
                    scanner.scan_image_files(root)
            finally:
                os.chmod(locked, 0o755)

    def test_count_images(self):
        """画像数のカウント（未設定・存在しないフォルダは0）"""
        scanner = FileScanner()
        with tempfile.TemporaryDirectory() as temp_dir:
            root = Path(temp_dir)
            (root / "sub").mkdir()
            (root / "a.JPG").write_bytes(b"x")
            (root / "sub" / "b.webp").write_bytes(b"x")
            (root / "notes.txt").write_text("x")

            assert scanner.count_images(root) == 2
            assert scanner.count_images(str(root)) == 2
            assert scanner.count_images(None) == 0
            assert scanner.count_images("") == 0
            assert scanner.count_images(root / "missing") == 0

    def test_is_image_file_case_insensitive(self):
        scanner = FileScanner()
        assert scanner.is_image_file(Path("a.TiFf"))
        assert scanner.is_image_file(Path("a.b.JPEG"))
        assert not scanner.is_image_file(Path("a.gif"))
        assert not scanner.is_image_file(Path("jpg"))
