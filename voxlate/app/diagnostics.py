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
    if "api_key" in s and "not set" in s:
        return "Export your Gemini API key (GEMINI_API_KEY) or run with --translator stub."
    if "no module named" in s or "is not installed" in s:
        return "A required package is missing in this virtualenv. Reinstall dependencies and retry."
    if "config file not found" in s:
        return "Configured JSON file is missing. Update the config path or restore the file."
    if "portaudio" in s or "microphone" in s or "speech capture" in s:
        return "Microphone init failed. Check input device selection (--list-devices) and mic permissions."
    if "synthesize speech" in s or "playback" in s:
        return "The speech engine failed. Try another voice or check the system TTS installation."
    if "too large" in s:
        return "Trim or re-encode the audio file, or raise --max-upload-bytes."
    if "translation" in s or "gemini" in s:
        return "The translation service did not answer properly. Check network access and retry."
    return "Check logs for full traceback."
