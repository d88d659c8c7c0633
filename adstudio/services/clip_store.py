import threading
import time
import uuid
from datetime import datetime, timedelta
from pathlib import Path
from typing import Optional, Set

from loguru import logger

from adstudio.config import CLIP_DIR, CLIP_MAX_AGE_DAYS


class ClipStore:
    """
    Home for decoded audio clips, shared by every flow in the process.

    Every clip is a uniquely named file that lives until it is released or expires.
    The optional sweeper deletes files older than max_age_days, held or not,
    so clips of sessions that never closed do not pile up.
    """

    def __init__(
        self,
        clip_dir: str = CLIP_DIR,
        max_age_days: float = CLIP_MAX_AGE_DAYS,
        sweep_interval_seconds: Optional[float] = None,
    ):
        self.clip_dir = Path(clip_dir)
        self.max_age_days = max_age_days
        self.clip_dir.mkdir(parents=True, exist_ok=True)
        self._held: Set[str] = set()
        self._lock = threading.Lock()
        self.running = False

        if sweep_interval_seconds:
            self._start_sweeper(sweep_interval_seconds)

    def _start_sweeper(self, interval: float):
        """Run cleanup_old_files every `interval` seconds on a daemon thread."""
        self.running = True

        def run_cleanup_loop():
            while self.running:
                try:
                    self.cleanup_old_files()
                except OSError as e:
                    logger.warning(f"⚠️ Clip sweep error: {e}")
                time.sleep(interval)

        threading.Thread(target=run_cleanup_loop, daemon=True).start()
        logger.info(f"🗑️ Clip sweeper started for {self.clip_dir} (every {interval:.0f}s)")

    @property
    def held(self) -> Set[str]:
        with self._lock:
            return set(self._held)

    def save(self, data: bytes, prefix: str = "clip", suffix: str = ".mp3") -> str:
        """Write audio bytes to a fresh file and return its path."""
        path = self.clip_dir / f"{prefix}_{uuid.uuid4().hex}{suffix}"
        path.write_bytes(data)
        with self._lock:
            self._held.add(str(path))
        logger.debug(f"💾 Saved clip {path.name} ({len(data)} bytes)")
        return str(path)

    def release(self, path: Optional[str]) -> None:
        """Delete a clip. Releasing None or an unknown path is a no-op."""
        if not path:
            return
        with self._lock:
            if path not in self._held:
                return
            self._held.discard(path)
        Path(path).unlink(missing_ok=True)
        logger.debug(f"🗑️ Released clip {Path(path).name}")

    def release_all(self) -> None:
        for path in self.held:
            self.release(path)

    def cleanup_old_files(self) -> int:
        """Delete files older than max_age_days, dropping any still held. Returns the number deleted."""
        if not self.clip_dir.exists():
            return 0

        cutoff = datetime.now() - timedelta(days=self.max_age_days)
        deleted = 0
        for file_path in self.clip_dir.iterdir():
            if not file_path.is_file():
                continue
            if datetime.fromtimestamp(file_path.stat().st_mtime) < cutoff:
                with self._lock:
                    self._held.discard(str(file_path))
                file_path.unlink(missing_ok=True)
                deleted += 1

        if deleted:
            logger.info(f"🗑️ Clip sweep removed {deleted} stale files")
        return deleted

    def stop(self):
        self.running = False
