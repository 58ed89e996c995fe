"""
照合インデックス作成モジュール

高解像度側（参照側）の画像ファイルを照合キーでインデックス化し、
低解像度側のファイルからO(1)で検索できるようにします。
"""

import logging
from pathlib import Path
from typing import Dict, Iterable, Optional

from .file_scanner import FileScanner


class MatchIndex:
    """
    照合キーから参照ファイルのパスを引くインデックス

    キーの比較は大文字小文字を区別しません。同じキーを持つファイルが
    複数ある場合は、最後に追加されたものが残ります。構築が完了した後は
    読み取り専用として扱い、複数スレッドから同時に検索できます。
    """

    def __init__(self, match_by_stem_only: bool):
        """
        MatchIndexを初期化

        Args:
            match_by_stem_only: 拡張子を除いたファイル名で照合する場合True
        """
        self.match_by_stem_only = match_by_stem_only
        self.by_key: Dict[str, Path] = {}
        self.duplicate_count: int = 0
        self.logger = logging.getLogger(__name__)

    @classmethod
    def build(cls, reference_files: Iterable[Path],
              match_by_stem_only: bool) -> 'MatchIndex':
        """
        参照ファイル群からインデックスを構築

        Args:
            reference_files: 参照側（高解像度）のファイルパス
            match_by_stem_only: 拡張子を除いたファイル名で照合する場合True

        Returns:
            構築済みのインデックス
        """
        index = cls(match_by_stem_only)
        for file_path in reference_files:
            index.add(file_path)

        if index.duplicate_count:
            index.logger.warning(
                f"照合キーの重複: {index.duplicate_count}件 "
                f"(後から追加されたファイルを使用)")
        index.logger.debug(f"インデックス構築完了: {len(index)}キー")
        return index

    @staticmethod
    def normalize_key(key: str) -> str:
        """比較用にキーを正規化"""
        return key.lower()

    def add(self, file_path: Path) -> None:
        """
        インデックスに参照ファイルを追加

        Args:
            file_path: 追加するファイルのパス
        """
        key = FileScanner.get_match_key(file_path, self.match_by_stem_only)
        normalized = self.normalize_key(key)

        previous = self.by_key.get(normalized)
        if previous is not None:
            self.duplicate_count += 1
            self.logger.debug(f"キー重複: {key} ({previous} -> {file_path})")

        self.by_key[normalized] = file_path

    def find(self, key: str) -> Optional[Path]:
        """
        照合キーで参照ファイルを検索

        Args:
            key: 照合キー（大文字小文字は区別しない）

        Returns:
            一致した参照ファイルのパス（見つからない場合はNone）
        """
        return self.by_key.get(self.normalize_key(key))

    def find_for(self, file_path: Path) -> Optional[Path]:
        """ファイルパスから照合キーを取り出して検索"""
        return self.find(
            FileScanner.get_match_key(file_path, self.match_by_stem_only))

    def __len__(self) -> int:
        return len(self.by_key)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.normalize_key(key) in self.by_key
