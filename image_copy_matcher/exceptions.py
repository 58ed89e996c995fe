"""
カスタム例外クラス定義

Image Copy Matcherで使用する例外クラスを定義します。
"""


class ProcessingError(Exception):
    """処理エラーの基底クラス"""
    pass


class ValidationError(ProcessingError):
    """実行前の検証エラー（フォルダ未設定・存在しない等）"""
    pass


class EnumerationError(ProcessingError):
    """ディレクトリ走査エラー"""
    pass


class DirectoryNotFoundError(EnumerationError):
    """走査対象のルートディレクトリが存在しない"""
    pass


class FileOperationError(ProcessingError):
    """ファイル操作エラー"""
    pass


class SettingsError(ProcessingError):
    """設定ファイルの読み書きエラー"""
    pass
