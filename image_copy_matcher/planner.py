"""
コピー計画モジュール

低解像度側のファイルごとに、一致する高解像度ファイルと
コピー先のパスを決定します。
"""

import logging
from pathlib import Path
from typing import Optional

from .indexer import MatchIndex
from .models import CopyPlan


class CopyPlanner:
    """低解像度ファイルに対応するコピー計画を作成するクラス"""

    def __init__(self, index: MatchIndex, source_root: Path, dest_root: Path):
        """
        CopyPlannerを初期化

        Args:
            index: 構築済みの照合インデックス
            source_root: 低解像度側のルートディレクトリ
            dest_root: コピー先のルートディレクトリ
        """
        self.index = index
        self.source_root = Path(source_root)
        self.dest_root = Path(dest_root)
        self.logger = logging.getLogger(__name__)

    def plan(self, source_path: Path) -> Optional[CopyPlan]:
        """
        ソースファイルのコピー計画を作成

        コピー先は「コピー先ルート / ソースの相対ディレクトリ /
        一致した参照ファイルのファイル名」となります。ファイル名は
        ソース側ではなく参照側のものを使います（拡張子も参照側）。

        Args:
            source_path: 低解像度側のファイルパス

        Returns:
            コピー計画（一致する参照ファイルがない場合はNone）
        """
        reference_path = self.index.find_for(source_path)
        if reference_path is None:
            self.logger.debug(f"マッチなし: {source_path.name}")
            return None

        relative_dir = self.relative_directory(source_path)
        relative_destination = relative_dir / reference_path.name

        return CopyPlan(
            source_path=source_path,
            reference_path=reference_path,
            destination_path=self.dest_root / relative_destination,
            relative_destination=relative_destination
        )

    def relative_directory(self, source_path: Path) -> Path:
        """
        ソースルートからの相対ディレクトリを取得

        ルート直下のファイルの場合は空のパス（Path('.')）を返します。
        """
        try:
            return source_path.relative_to(self.source_root).parent
        except ValueError:
            # ルート外のファイルはルート直下として扱う
            self.logger.debug(f"ソースルート外のファイル: {source_path}")
            return Path()
