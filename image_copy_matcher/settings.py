"""
設定ファイル管理モジュール

前回使用したフォルダやオプションをユーザーごとのアプリケーションデータ
ディレクトリにJSON形式で保存します。設定は利便性のためのものなので、
読み書きの失敗で処理を止めることはありません。失敗の内容は結果オブジェクトに
格納され、呼び出し側が必要に応じて確認できます。
"""

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import SettingsError
from .models import RunOptions
from .path_validator import PathValidator

APP_DIR_NAME = 'ImageCopyApp'
SETTINGS_FILE_NAME = 'settings.json'

logger = logging.getLogger(__name__)


def get_default_settings_path() -> Path:
    """
    デフォルトの設定ファイルパスを取得

    WindowsではAPPDATA、それ以外ではXDG_CONFIG_HOME（未設定なら~/.config）
    の下にアプリケーション名のディレクトリを作成して使用します。
    """
    base = os.environ.get('APPDATA') or os.environ.get('XDG_CONFIG_HOME')
    base_dir = Path(base) if base else Path.home() / '.config'
    return base_dir / APP_DIR_NAME / SETTINGS_FILE_NAME


@dataclass
class AppSettings:
    """保存される設定"""
    low_res_folder: Optional[str] = None
    hi_res_folder: Optional[str] = None
    destination_folder: Optional[str] = None
    overwrite: bool = False
    # 名前に反してTrueは「拡張子を除いたファイル名で照合」を意味する
    match_by_name_only: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """JSON保存用の辞書に変換"""
        return {
            'LowResFolder': self.low_res_folder,
            'HiResFolder': self.hi_res_folder,
            'DestinationFolder': self.destination_folder,
            'Overwrite': self.overwrite,
            'MatchByNameOnly': self.match_by_name_only,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'AppSettings':
        """
        辞書から設定を復元

        未知のキーは無視し、存在しないキーはデフォルト値を使います。

        Raises:
            SettingsError: 値の型が不正な場合
        """
        defaults = cls()
        settings = cls(
            low_res_folder=data.get('LowResFolder', defaults.low_res_folder),
            hi_res_folder=data.get('HiResFolder', defaults.hi_res_folder),
            destination_folder=data.get(
                'DestinationFolder', defaults.destination_folder),
            overwrite=data.get('Overwrite', defaults.overwrite),
            match_by_name_only=data.get(
                'MatchByNameOnly', defaults.match_by_name_only),
        )

        for name in ('low_res_folder', 'hi_res_folder', 'destination_folder'):
            value = getattr(settings, name)
            if value is not None and not isinstance(value, str):
                raise SettingsError(f"Invalid value for {name}: {value!r}")
        for name in ('overwrite', 'match_by_name_only'):
            value = getattr(settings, name)
            if not isinstance(value, bool):
                raise SettingsError(f"Invalid value for {name}: {value!r}")

        return settings

    def to_run_options(self, max_workers: Optional[int] = None) -> RunOptions:
        """現在の設定から1回分の実行オプションを作成"""
        return RunOptions(
            low_res_root=PathValidator.normalize_path(self.low_res_folder),
            hi_res_root=PathValidator.normalize_path(self.hi_res_folder),
            dest_root=PathValidator.normalize_path(self.destination_folder),
            overwrite=self.overwrite,
            match_by_stem_only=self.match_by_name_only,
            max_workers=max_workers
        )


@dataclass
class SettingsLoadResult:
    """設定読み込みの結果"""
    settings: AppSettings = field(default_factory=AppSettings)
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class SettingsSaveResult:
    """設定保存の結果"""
    saved: bool
    error: Optional[str] = None


class SettingsStore:
    """設定ファイルの読み書きを行うクラス"""

    def __init__(self, settings_path: Optional[Path] = None):
        """
        SettingsStoreを初期化

        Args:
            settings_path: 設定ファイルのパス（省略時はデフォルトの場所）
        """
        self.settings_path = settings_path or get_default_settings_path()

    def load(self) -> SettingsLoadResult:
        """
        設定を読み込み

        ファイルが存在しない場合はエラーなしでデフォルト値を、
        読み込みや解析に失敗した場合はエラー内容付きでデフォルト値を返します。
        """
        if not self.settings_path.exists():
            logger.debug(f"設定ファイルが存在しません: {self.settings_path}")
            return SettingsLoadResult()

        try:
            with open(self.settings_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise SettingsError("Settings file does not contain a JSON object")
            settings = AppSettings.from_dict(data)
        except (OSError, ValueError, SettingsError) as e:
            logger.debug(f"設定読み込みエラー（デフォルトを使用）: "
                         f"{self.settings_path} - {e}")
            return SettingsLoadResult(error=str(e))

        logger.debug(f"設定を読み込みました: {self.settings_path}")
        return SettingsLoadResult(settings=settings)

    def save(self, settings: AppSettings) -> SettingsSaveResult:
        """
        設定を保存（ディレクトリがなければ作成）

        失敗しても例外は送出せず、結果オブジェクトにエラー内容を格納します。
        """
        try:
            self.settings_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.settings_path, 'w', encoding='utf-8') as f:
                json.dump(settings.to_dict(), f, ensure_ascii=False, indent=2)
        except (OSError, TypeError, ValueError) as e:
            logger.debug(f"設定保存エラー: {self.settings_path} - {e}")
            return SettingsSaveResult(saved=False, error=str(e))

        logger.debug(f"設定を保存しました: {self.settings_path}")
        return SettingsSaveResult(saved=True)
