from __future__ import annotations


def summarize_exception(detail: str, *, max_len: int = 220) -> str:
    text = str(detail or "").strip()
    lines = [ln.strip() for ln in text.splitlines() if ln.strip()]
    if not lines:
        return "Unknown error."
    for ln in reversed(lines):
        if ln.startswith(("File ", "^", "Traceback ")):
            continue
        out = ln
        break
    else:
        out = lines[-1]
    if len(out) > max_len:
        return out[: max_len - 3].rstrip() + "..."
    return out


def hint_for_exception(summary: str) -> str:
    s = str(summary or "").lower()
    if "no module named" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "portaudio" in s or "sounddevice" in s:
        return "Microphone init failed. Check the input device (--list-devices) and app mic permissions."
    if "faster_whisper" in s or "ctranslate2" in s or "huggingface" in s:
        return "Speech model could not be loaded. Check your connection for the first download."
    if "ssl" in s or "certificate" in s:
        return "Secure connection failed. Check the system clock and any proxy that intercepts HTTPS."
    if "connection refused" in s or "max retries exceeded" in s or "timed out" in s:
        return "The server could not be reached. Check --api-url / --translate-url and your network."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    return "Check logs for full traceback."


def describe_failure(detail: str) -> str:
    """One banner line for an unexpected worker failure."""
    summary = summarize_exception(detail)
    return f"{summary} ({hint_for_exception(summary)})"
