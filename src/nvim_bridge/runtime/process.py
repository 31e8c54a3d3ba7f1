"""Launching the editor as an embedded subprocess."""

from __future__ import annotations

import shutil
import subprocess
from dataclasses import dataclass
from typing import IO, Optional, Sequence

from nvim_bridge.errors import EditorSpawnError
from nvim_bridge.runtime import telemetry

EMBED_FLAG = "--embed"


@dataclass(slots=True)
class EditorProcess:
    """Handle on a running editor with its two pipe ends."""

    process: subprocess.Popen[bytes]
    stdin: IO[bytes]
    stdout: IO[bytes]

    @property
    def pid(self) -> int:
        return self.process.pid

    def poll(self) -> Optional[int]:
        return self.process.poll()

    def close(self, timeout: float = 2.0) -> Optional[int]:
        for stream in (self.stdin, self.stdout):
            try:
                stream.close()
            except OSError:
                pass
        try:
            return self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            self.process.terminate()
            return self.process.wait()


def build_argv(binary: str, args: Sequence[str]) -> list[str]:
    return [binary, EMBED_FLAG, *args]


def spawn_editor(args: Sequence[str] = (), *, binary: str = "nvim") -> EditorProcess:
    """Start ``binary --embed args...`` with stdin/stdout wired to pipes."""

    executable = shutil.which(binary)
    if executable is None:
        raise EditorSpawnError(f"couldn't find editor binary '{binary}'")

    argv = build_argv(executable, args)
    try:
        # unbuffered stdout so the decoder sees bytes as soon as they arrive
        process = subprocess.Popen(
            argv,
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            bufsize=0,
        )
    except OSError as exc:
        raise EditorSpawnError(f"couldn't spawn editor: {exc}") from exc

    if process.stdin is None or process.stdout is None:  # pragma: no cover
        process.kill()
        raise EditorSpawnError("pipe allocation failure")

    telemetry.record_event(
        "process.spawned", data={"pid": process.pid, "argv": " ".join(argv)}
    )
    return EditorProcess(process=process, stdin=process.stdin, stdout=process.stdout)


__all__ = ["EditorProcess", "spawn_editor", "build_argv", "EMBED_FLAG"]
