"""
Lightweight logger used across the project.
Color output if colorama is present; degrades gracefully if not.

Messages are short event names followed by key=value extras, e.g.
``logger.info("BattleStart", species="Pidgey", level=4)``.
"""
from __future__ import annotations
import os
import sys
from datetime import datetime, timezone
from typing import Literal, Any, TextIO

Level = Literal["DEBUG","INFO","WARN","ERROR"]

try:
    from colorama import Fore, Style, init as colorama_init
    colorama_init()
    COLORS = {
        "DEBUG": Fore.BLUE,
        "INFO": Fore.GREEN,
        "WARN": Fore.YELLOW,
        "ERROR": Fore.RED
    }
    RESET = Style.RESET_ALL
except Exception:
    COLORS = {"DEBUG":"", "INFO":"", "WARN":"", "ERROR":""}
    RESET = ""

class Logger:
    _order = {"DEBUG":10,"INFO":20,"WARN":30,"ERROR":40}
    def __init__(self, level: Level = "INFO", stream: TextIO | None = None):
        self.threshold = self._order[level]
        self._stream = stream

    @property
    def stream(self) -> TextIO:
        # resolved lazily so pytest's capsys sees the output
        return self._stream or sys.stderr

    def set_level(self, level: str):
        self.threshold = self._order.get(level, 20)

    def is_enabled(self, lvl: Level) -> bool:
        return self._order[lvl] >= self.threshold

    def _emit(self, lvl: Level, msg: str, **extra: Any):
        if not self.is_enabled(lvl):
            return
        ts = datetime.now(timezone.utc).isoformat(timespec="seconds")
        extras = ""
        if extra:
            kv = " ".join(f"{k}={v}" for k,v in extra.items())
            extras = " " + kv
        color = COLORS[lvl]
        self.stream.write(f"{color}{ts} [{lvl}] {msg}{extras}{RESET}\n")

    def debug(self, msg: str, **kw): self._emit("DEBUG", msg, **kw)
    def info(self, msg: str, **kw): self._emit("INFO", msg, **kw)
    def warn(self, msg: str, **kw): self._emit("WARN", msg, **kw)
    def error(self, msg: str, **kw): self._emit("ERROR", msg, **kw)

def _initial_level() -> str:
    lvl = os.environ.get("ACEMON_LOG_LEVEL", "INFO").upper()
    return lvl if lvl in Logger._order else "INFO"

logger = Logger(_initial_level())  # type: ignore[arg-type]
