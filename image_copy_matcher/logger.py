"""
ロギングシステム

Image Copy Matcherのロギング機能を提供します。
標準出力とファイル出力の両方をサポートし、進捗表示とエラーログを管理します。
"""

import logging
import sys
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional

from .models import ProgressSnapshot, RunOptions, RunSummary

LOGGER_NAME = 'image_copy_matcher'


@dataclass
class LogConfig:
    """ログ設定"""
    console_level: int = logging.INFO
    file_level: int = logging.DEBUG
    log_file: Optional[Path] = None
    verbose: bool = False


class ProgressLogger:
    """進捗表示とロギングを管理するクラス"""

    def __init__(self, config: LogConfig):
        self.config = config
        self.logger = self._setup_logger()
        self._start_time: Optional[datetime] = None
        self._last_percent: Optional[int] = None

    def _setup_logger(self) -> logging.Logger:
        """ロガーのセットアップ"""
        logger = logging.getLogger(LOGGER_NAME)
        logger.setLevel(logging.DEBUG)

        # 既存のハンドラーをクリア
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_formatter = logging.Formatter('%(message)s')
        file_formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        )

        # コンソールハンドラー
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(self.config.console_level)
        console_handler.setFormatter(console_formatter)
        logger.addHandler(console_handler)

        # ファイルハンドラー（指定されている場合）
        if self.config.log_file:
            self.config.log_file.parent.mkdir(parents=True, exist_ok=True)

            file_handler = logging.FileHandler(self.config.log_file, encoding='utf-8')
            file_handler.setLevel(self.config.file_level)
            file_handler.setFormatter(file_formatter)
            logger.addHandler(file_handler)

        return logger

    def log_run_start(self, options: RunOptions):
        """処理開始時の表示"""
        self._start_time = datetime.now()
        self._last_percent = None

        self.logger.info("=" * 60)
        self.logger.info("Image Copy Matcher - 処理開始")
        self.logger.info("=" * 60)
        self.logger.info(f"開始時刻: {self._start_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"低解像度フォルダ: {options.low_res_root}")
        self.logger.info(f"高解像度フォルダ: {options.hi_res_root}")
        self.logger.info(f"コピー先フォルダ: {options.dest_root}")
        self.logger.info(f"上書き: {'有効' if options.overwrite else '無効'}")
        self.logger.info(
            f"照合方法: {'拡張子を除いたファイル名' if options.match_by_stem_only else '拡張子を含むファイル名'}")
        self.logger.info("")

    def log_line(self, message: str):
        """処理1件ごとのログ行、または検証メッセージ"""
        if message.startswith("Error"):
            self.logger.error(message)
        else:
            self.logger.info(message)

    def log_progress(self, snapshot: ProgressSnapshot):
        """
        進捗表示

        verboseでない場合は進捗率の整数値が変わったときだけ表示します。
        """
        percent = int(snapshot.percent)
        if not self.config.verbose and percent == self._last_percent \
                and snapshot.done != snapshot.total:
            return
        self._last_percent = percent

        self.logger.info(
            f"進捗: {snapshot.done}/{snapshot.total} ({snapshot.percent:.1f}%) | "
            f"Copied {snapshot.copied} • Missing {snapshot.missing} • "
            f"Skipped {snapshot.skipped} • Errors {snapshot.failed} | {snapshot.eta}")

    def log_summary(self, line: str, summary: Optional[RunSummary] = None):
        """処理完了時のサマリー表示"""
        end_time = datetime.now()
        total_time = (end_time - self._start_time).total_seconds() if self._start_time else 0

        self.logger.info("")
        self.logger.info("=" * 60)
        self.logger.info(line)
        self.logger.info("=" * 60)
        self.logger.info(f"終了時刻: {end_time.strftime('%Y-%m-%d %H:%M:%S')}")
        self.logger.info(f"総処理時間: {total_time:.2f}秒")

        if summary is not None and summary.errors:
            self.logger.info("")
            self.logger.info(f"エラー詳細 ({len(summary.errors)}件):")
            for file_path, error_msg in summary.errors:
                self.log_error(Path(file_path), error_msg)

    def log_error(self, file_path: Path, error_message: str, exception: Optional[Exception] = None):
        """エラーログの詳細記録"""
        error_msg = f"エラー - {file_path}: {error_message}"

        if exception:
            error_msg += f" ({type(exception).__name__}: {str(exception)})"

        self.logger.error(error_msg)

        # 詳細なスタックトレースはファイルログのみに記録
        if exception and self.config.log_file:
            self.logger.debug("スタックトレース:", exc_info=exception)

    def log_warning(self, message: str):
        """警告メッセージのログ"""
        self.logger.warning(f"警告: {message}")

    def log_info(self, message: str):
        """情報メッセージのログ"""
        self.logger.info(message)

    def log_debug(self, message: str):
        """デバッグメッセージのログ"""
        self.logger.debug(message)


def create_default_logger(verbose: bool = False, log_file: Optional[Path] = None) -> ProgressLogger:
    """デフォルトのロガーを作成"""
    config = LogConfig(
        console_level=logging.DEBUG if verbose else logging.INFO,
        file_level=logging.DEBUG,
        log_file=log_file,
        verbose=verbose
    )
    return ProgressLogger(config)


def get_default_log_file() -> Path:
    """デフォルトのログファイルパスを取得"""
    log_dir = Path.home() / '.image_copy_matcher' / 'logs'
    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    return log_dir / f'image_copy_matcher_{timestamp}.log'
