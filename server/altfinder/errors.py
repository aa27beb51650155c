"""例外定義."""


class AltFinderError(Exception):
    """アプリケーション例外の基底クラス."""


class ValidationError(AltFinderError):
    """リクエスト内容が不正 (HTTP 400 相当)."""


class ConfigError(AltFinderError):
    """必須の環境変数が不足している."""


class PersistenceError(AltFinderError):
    """Supabase への保存に失敗した. 検索自体は継続する."""
