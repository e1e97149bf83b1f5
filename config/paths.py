# config/paths.py
"""
Centralized, cross-platform path management for gesturedeck.

Design goals
- Single source of truth for the store file, exports and logs
- Honors these env vars (matching the SDK):
    GESTUREDECK_DATA_ROOT, GESTUREDECK_LOGS_ROOT
- Sensible OS defaults when env vars are not provided
- Prefer SDK config if available (sdk.config.SDK_CONFIG.paths)
"""

from __future__ import annotations

import errno
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

EXPORT_FILENAME = "vib34d-gesture-library.json"


# ---------- OS defaults (used only if env vars not set) ----------

def _platform_default_base() -> Path:
    """
    Returns an OS-specific base directory for user data:
    - Windows: %LOCALAPPDATA%/GestureDeck
    - macOS:   ~/Library/Application Support/GestureDeck
    - Linux:   ~/.local/share/gesturedeck
    """
    if sys.platform.startswith("win"):
        base = os.getenv("LOCALAPPDATA") or os.getenv("APPDATA") or str(Path.home() / "AppData" / "Local")
        return Path(base) / "GestureDeck"
    elif sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "GestureDeck"
    else:
        return Path(os.getenv("XDG_DATA_HOME", Path.home() / ".local" / "share")) / "gesturedeck"


def _env_or_default_data_root() -> Path:
    return Path(os.getenv("GESTUREDECK_DATA_ROOT", _platform_default_base() / "data"))


def _env_or_default_logs_root() -> Path:
    return Path(os.getenv("GESTUREDECK_LOGS_ROOT", _platform_default_base() / "logs"))


# ---------- Core dataclass ----------

@dataclass(frozen=True)
class Paths:
    """
    Canonical path container for gesturedeck.

    Most callers should obtain a singleton instance via get_paths().
    """
    data_root: Path
    logs_root: Path

    @staticmethod
    def from_env() -> "Paths":
        return Paths(_env_or_default_data_root(), _env_or_default_logs_root())

    @staticmethod
    def from_sdk_if_available() -> "Paths":
        """
        Env vars win. Otherwise derive from sdk.config.SDK_CONFIG.paths,
        falling back to the OS defaults when the SDK is not importable.
        """
        if os.getenv("GESTUREDECK_DATA_ROOT") or os.getenv("GESTUREDECK_LOGS_ROOT"):
            return Paths.from_env()
        try:
            from sdk.config import SDK_CONFIG  # type: ignore
        except ImportError:
            return Paths.from_env()
        sdk_paths = SDK_CONFIG.paths
        return Paths(Path(sdk_paths.data_root), Path(sdk_paths.logs_root))

    # ----- standard layout helpers -----

    @property
    def store_file(self) -> Path:
        return self.data_root / "gesturedeck-store.json"

    @property
    def exports_root(self) -> Path:
        return self.data_root / "exports"

    @property
    def log_file(self) -> Path:
        return self.logs_root / "gesturedeck.log"

    def export_path(self, name: str = EXPORT_FILENAME) -> Path:
        """Default location of a library export, e.g. exports/vib34d-gesture-library.json."""
        return self.exports_root / name

    # ----- setup / validation -----

    def ensure_all(self) -> None:
        for p in [self.data_root, self.logs_root, self.exports_root]:
            p.mkdir(parents=True, exist_ok=True)

    def verify_writeable(self) -> None:
        """
        Raise OSError if critical roots are not writeable.
        """
        for p in [self.data_root, self.logs_root]:
            try:
                p.mkdir(parents=True, exist_ok=True)
                test = p / ".write_test"
                test.write_text("ok", encoding="utf-8")
                test.unlink(missing_ok=True)
            except OSError as e:
                raise OSError(errno.EACCES, f"Not writeable: {p}", e)


# ---------- Singleton access ----------

_paths_singleton: Optional[Paths] = None

def get_paths(force_refresh: bool = False) -> Paths:
    """
    Return a cached Paths instance (prefers SDK integration when available).
    """
    global _paths_singleton
    if force_refresh or _paths_singleton is None:
        _paths_singleton = Paths.from_sdk_if_available()
        _paths_singleton.ensure_all()
    return _paths_singleton


# ---------- CLI sanity check ----------

if __name__ == "__main__":
    p = get_paths(force_refresh=True)
    try:
        p.verify_writeable()
    except OSError as e:
        print(f"[WARN] Writeability check failed: {e}")

    print("Data root:    ", p.data_root)
    print("Logs root:    ", p.logs_root)
    print("Store file:   ", p.store_file)
    print("Exports root: ", p.exports_root)
