"""
ファイルスキャナー

ディレクトリを再帰的に走査して画像ファイルを列挙し、
ファイルパスから照合キーを取り出す機能を提供します。
"""

import os
from pathlib import Path
from typing import Iterator, List, Optional, Set, Union

from .exceptions import DirectoryNotFoundError, EnumerationError


class FileScanner:
    """ディレクトリをスキャンして画像ファイルを検索するクラス"""

    # 画像ファイル拡張子（小文字で比較）
    IMAGE_EXTENSIONS: Set[str] = {
        '.jpg', '.jpeg',
        '.png',
        '.tif', '.tiff',
        '.bmp',
        '.webp',
    }

    def iter_image_files(self, directory: Path) -> Iterator[Path]:
        """
        ディレクトリ以下の画像ファイルを遅延的に列挙

        ルートの存在確認は呼び出し側の責任です。走査中のI/Oエラー
        （サブディレクトリの権限不足など）は握りつぶさずに送出します。

        Args:
            directory: スキャンするルートディレクトリ

        Yields:
            画像ファイルの絶対パス

        Raises:
            DirectoryNotFoundError: ルートディレクトリが存在しない場合
            EnumerationError: 走査中にI/Oエラーが発生した場合
        """
        root = Path(directory).absolute()

        def _raise_walk_error(error: OSError) -> None:
            if isinstance(error, FileNotFoundError) and \
                    Path(error.filename or '') == root:
                raise DirectoryNotFoundError(
                    f"Directory not found: {root}") from error
            raise EnumerationError(
                f"Failed to enumerate {error.filename or root}: "
                f"{error.strerror or error}") from error

        if not root.exists():
            raise DirectoryNotFoundError(f"Directory not found: {root}")

        for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_walk_error):
            # 決定的な順序で走査する
            dirnames.sort()
            for filename in sorted(filenames):
                file_path = Path(dirpath) / filename
                if self.is_image_file(file_path):
                    yield file_path

    def scan_image_files(self, directory: Path) -> List[Path]:
        """
        ディレクトリ以下の画像ファイルをリストとして取得

        Args:
            directory: スキャンするルートディレクトリ

        Returns:
            見つかった画像ファイルのパスのリスト
        """
        return list(self.iter_image_files(directory))

    def count_images(self, directory: Optional[Union[str, Path]]) -> int:
        """
        フォルダ内の画像ファイル数を数える

        未設定、存在しない、または走査できないフォルダは0件として扱います。
        """
        if directory is None or not str(directory).strip():
            return 0
        path = Path(directory)
        if not path.is_dir():
            return 0
        try:
            return sum(1 for _ in self.iter_image_files(path))
        except EnumerationError:
            return 0

    def is_image_file(self, file_path: Path) -> bool:
        """
        ファイルが対象の画像ファイルかどうかを判定

        Args:
            file_path: ファイルパス

        Returns:
            拡張子（大文字小文字を区別しない）が対象に含まれる場合True
        """
        return file_path.suffix.lower() in self.IMAGE_EXTENSIONS

    @staticmethod
    def get_match_key(file_path: Path, match_by_stem_only: bool) -> str:
        """
        ファイルパスから照合キーを取得

        大文字小文字はそのまま保持します（比較はインデックス側で行う）。

        Args:
            file_path: ファイルパス
            match_by_stem_only: Trueの場合は拡張子を除いたファイル名、
                                Falseの場合は拡張子付きのファイル名

        Returns:
            照合キー
        """
        if match_by_stem_only:
            return file_path.stem
        return file_path.name
