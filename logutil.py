import os
import config

LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_COLORS = {
    "DEBUG": "\x1b[36m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
}


def enabled(level):
    threshold = getattr(config, "LOG_LEVEL", "INFO")
    if threshold not in LEVELS:
        threshold = "INFO"
    return LEVELS.index(level) >= LEVELS.index(threshold)


def log(scope, msg, level="INFO"):
    if level not in LEVELS:
        raise ValueError(f"unknown log level {level!r}")
    if scope == "CONVERT" and not getattr(config, "LOG_CONVERT_PROGRESS", True):
        return
    if not enabled(level):
        return
    text = f"[{level} {scope}] {msg}"
    use_color = getattr(config, "LOG_COLOR", True) and os.getenv("NO_COLOR") is None
    if use_color and level in _COLORS:
        text = f"{_COLORS[level]}{text}\x1b[0m"
    print(text)
