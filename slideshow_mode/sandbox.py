"""FFmpeg encoder sandbox.

The sandbox owns a private working directory that acts as the encoder's
filesystem, and runs ffmpeg inside it. Loading is lazy and happens once per
handle: concurrent callers of :meth:`EncoderSandbox.ensure_ready` await the
same in-flight load.
"""
from __future__ import annotations

import asyncio
import shutil
import tempfile
import threading
from contextlib import contextmanager
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from logging_utils import get_logger

from .errors import CompileInProgress, EncoderUnavailable, EncodingFailed
from .models import EncodeRequest

logger = get_logger(__name__)

FFMPEG_BASE_ARGS = ["-hide_banner", "-loglevel", "error", "-nostats", "-y"]
STDERR_TAIL_LINES = 50


class SandboxState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"


def _pretty_command(cmd: List[str]) -> str:
    return " ".join(a if " " not in a else f"'{a}'" for a in cmd)


class EncoderSandbox:
    """Lazily loaded ffmpeg instance with its own working directory."""

    def __init__(self, ffmpeg_binary: str = "ffmpeg", work_root: Optional[Path] = None) -> None:
        self.ffmpeg_binary = ffmpeg_binary
        self.work_root = work_root
        self.state = SandboxState.UNINITIALIZED
        self.executable: Optional[str] = None
        self.version: Optional[str] = None
        self._workdir: Optional[Path] = None
        self._load_future: Optional[asyncio.Future] = None
        self._busy = threading.Lock()

    @classmethod
    def from_config(cls, config: Dict[str, Any], work_root: Optional[Path] = None) -> "EncoderSandbox":
        video_cfg = config.get("video", {}) if isinstance(config, dict) else {}
        binary = str((video_cfg or {}).get("ffmpeg_binary") or "ffmpeg")
        return cls(ffmpeg_binary=binary, work_root=work_root)

    @property
    def is_ready(self) -> bool:
        return self.state is SandboxState.READY

    @property
    def workdir(self) -> Path:
        if self._workdir is None:
            raise EncoderUnavailable("Encoder sandbox is not loaded")
        return self._workdir

    # ------------------------------------------------------------------
    # Lifecycle

    async def ensure_ready(self) -> None:
        if self.state is SandboxState.READY:
            return
        if self._load_future is not None and self._load_failed(self._load_future):
            # A cancelled or failed load from an earlier caller; start over.
            self._discard_load(self._load_future)
        if self._load_future is None:
            self.state = SandboxState.LOADING
            self._load_future = asyncio.ensure_future(self._load())
        future = self._load_future
        try:
            await asyncio.shield(future)
        except BaseException:
            if future.done() and self._load_failed(future):
                self._discard_load(future)
            raise
        self.state = SandboxState.READY

    @staticmethod
    def _load_failed(future: asyncio.Future) -> bool:
        return future.done() and (future.cancelled() or future.exception() is not None)

    def _discard_load(self, future: asyncio.Future) -> None:
        if self._load_future is future:
            self._load_future = None
            self.state = SandboxState.UNINITIALIZED

    async def _load(self) -> None:
        executable, version = await self._locate_encoder()
        workdir = self._create_workdir()
        self.version = version
        self.executable = executable
        self._workdir = workdir
        logger.info("Encoder sandbox ready: %s (%s)", workdir, self.version or "unknown version")

    async def _locate_encoder(self) -> tuple[str, Optional[str]]:
        """Locate ffmpeg and return its path and version banner."""
        executable = shutil.which(self.ffmpeg_binary)
        if executable is None:
            raise EncoderUnavailable(f"ffmpeg executable not found: {self.ffmpeg_binary}")

        logger.info("Loading encoder sandbox: %s", executable)
        try:
            proc = await asyncio.create_subprocess_exec(
                executable,
                "-hide_banner",
                "-version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, _ = await proc.communicate()
        except OSError as exc:
            raise EncoderUnavailable(f"Failed to start ffmpeg: {exc}") from exc
        if proc.returncode != 0:
            raise EncoderUnavailable(f"ffmpeg -version failed with exit code {proc.returncode}")

        lines = stdout.decode("utf-8", errors="replace").splitlines()
        return executable, (lines[0].strip() if lines else None)

    def _create_workdir(self) -> Path:
        try:
            if self.work_root is not None:
                self.work_root.mkdir(parents=True, exist_ok=True)
            return Path(tempfile.mkdtemp(prefix="slideshow_", dir=self.work_root))
        except OSError as exc:
            raise EncoderUnavailable(f"Failed to create sandbox directory: {exc}") from exc

    def close(self) -> None:
        """Remove the working directory. The handle must not be used afterwards."""
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            logger.debug("Removed encoder sandbox directory: %s", self._workdir)
        self._workdir = None
        self._load_future = None
        self.state = SandboxState.UNINITIALIZED

    @contextmanager
    def exclusive(self) -> Iterator["EncoderSandbox"]:
        """Claim the sandbox for one compile; fail fast if it is already claimed."""
        if not self._busy.acquire(blocking=False):
            raise CompileInProgress("A video compile is already in progress")
        try:
            yield self
        finally:
            self._busy.release()

    # ------------------------------------------------------------------
    # Filesystem

    def _resolve(self, name: str) -> Path:
        if not name or Path(name).name != name or name in (".", ".."):
            raise ValueError(f"Sandbox file names must be plain names: {name!r}")
        return self.workdir / name

    def write_file(self, name: str, data: bytes) -> None:
        self._resolve(name).write_bytes(data)

    def read_file(self, name: str) -> bytes:
        return self._resolve(name).read_bytes()

    def list_files(self) -> List[str]:
        return sorted(path.name for path in self.workdir.iterdir() if path.is_file())

    def reset(self) -> None:
        """Delete every file in the working directory."""
        if self._workdir is None:
            return
        for path in self._workdir.iterdir():
            if path.is_dir():
                shutil.rmtree(path, ignore_errors=True)
            else:
                path.unlink(missing_ok=True)

    # ------------------------------------------------------------------
    # Encoding

    async def run(self, request: EncodeRequest) -> None:
        """Run ffmpeg for ``request`` inside the working directory."""
        if not self.is_ready or self.executable is None:
            raise EncoderUnavailable("Encoder sandbox is not loaded")

        cmd: List[str] = [self.executable] + FFMPEG_BASE_ARGS + request.to_ffmpeg_args()
        logger.debug("FFmpeg: %s", _pretty_command(cmd))
        try:
            proc = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self.workdir),
                stdout=asyncio.subprocess.DEVNULL,
                stderr=asyncio.subprocess.PIPE,
            )
            _, stderr = await proc.communicate()
        except OSError as exc:
            raise EncodingFailed(f"Failed to start ffmpeg: {exc}", diagnostic=str(exc)) from exc

        if proc.returncode != 0:
            tail = stderr.decode("utf-8", errors="replace").splitlines()[-STDERR_TAIL_LINES:]
            for line in tail:
                logger.error("ffmpeg: %s", line)
            raise EncodingFailed(
                f"ffmpeg failed with exit code {proc.returncode}",
                diagnostic="\n".join(tail),
            )
