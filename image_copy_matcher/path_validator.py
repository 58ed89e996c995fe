"""
パス検証ユーティリティ

実行前のフォルダ検証とクロスプラットフォーム対応を提供します。
"""

import os
import shutil
from pathlib import Path
from typing import Optional, Union

from .exceptions import ValidationError
from .models import RunOptions


class PathValidator:
    """パス検証を行うユーティリティクラス"""

    @staticmethod
    def validate_directory(path: Path) -> None:
        """
        ディレクトリの存在とアクセス権を検証

        Args:
            path: 検証するディレクトリパス

        Raises:
            ValidationError: ディレクトリが存在しない、アクセス不可能、
                           またはディレクトリではない場合
        """
        if not path.exists():
            raise ValidationError(f"Directory not found: {path}")

        if not path.is_dir():
            raise ValidationError(f"Not a directory: {path}")

        # 読み取り権限の確認
        if not os.access(path, os.R_OK):
            raise ValidationError(f"Directory is not readable: {path}")

    @staticmethod
    def validate_run_options(options: RunOptions) -> None:
        """
        実行前の検証を行い、コピー先ディレクトリを作成

        低解像度フォルダ、高解像度フォルダ、コピー先の順に検証し、
        最初に見つかった問題をValidationErrorとして送出します。

        Args:
            options: 実行オプション

        Raises:
            ValidationError: 検証に失敗した場合（メッセージはそのままログ行になる）
        """
        for root, message in ((options.low_res_root, "Low Res folder not found."),
                              (options.hi_res_root, "Hi Res folder not found.")):
            if root is None:
                raise ValidationError(message)
            try:
                PathValidator.validate_directory(root)
            except ValidationError as e:
                raise ValidationError(message) from e

        if options.dest_root is None or not str(options.dest_root).strip():
            raise ValidationError("Destination folder not set.")

        try:
            options.dest_root.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ValidationError(
                f"Destination folder could not be created: {e}") from e

        if not options.dest_root.is_dir():
            raise ValidationError(
                f"Destination is not a directory: {options.dest_root}")

    @staticmethod
    def normalize_path(path_str: Optional[Union[str, Path]]) -> Optional[Path]:
        """
        パス文字列を正規化してPathオブジェクトに変換
        macOSとWindowsの両方のパス形式をサポート

        Args:
            path_str: パス文字列（Noneまたは空白のみの場合は未設定扱い）

        Returns:
            正規化されたPathオブジェクト、未設定の場合はNone
        """
        if path_str is None or not str(path_str).strip():
            return None
        # パス文字列をPathオブジェクトに変換（自動的にOS固有の形式に正規化される）
        return Path(str(path_str).strip()).expanduser().resolve()

    @staticmethod
    def check_disk_space(path: Path, required_bytes: int) -> bool:
        """
        ディスクの空き容量を確認

        Args:
            path: 確認するディレクトリパス
            required_bytes: 必要な容量（バイト）

        Returns:
            十分な空き容量がある場合True

        Raises:
            OSError: 使用量を取得できない場合
        """
        total, used, free = shutil.disk_usage(path)
        return free >= required_bytes
