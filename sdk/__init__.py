from .config import SDK_CONFIG, AppConfig, GestureConfig, Paths

__all__ = ["SDK_CONFIG", "AppConfig", "GestureConfig", "Paths"]
