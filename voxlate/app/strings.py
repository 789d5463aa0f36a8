from __future__ import annotations

from typing import Any

UI_STRINGS: dict[str, dict[str, str]] = {
    "en": {
        "ready": "Voxlate ready. Type 'help' for commands.",
        "help": (
            "Commands: record | stop | text <words> | file <path> | replay | swap | cancel |\n"
            "          from <code|auto> | to <code> | voice <auto|male|female> |\n"
            "          languages | status | help | quit"
        ),
        "state.idle": "Ready",
        "state.recording": "Recording... (type 'stop' to finish)",
        "state.processing": "Processing...",
        "state.speaking": "Speaking...",
        "state.error": "Error",
        "original": "Original",
        "original_detected": "Original ({language})",
        "translation": "Translation",
        "error": "Error: {message}",
        "hint": "Hint: {hint}",
        "rejected": "Not now ({state}).",
        "empty": "Nothing to send.",
        "unknown_command": "Unknown command: {command}",
        "auto_detect": "Auto-detect",
        "languages": "{source} -> {target} (voice: {voice})",
        "logs": "Logs: {path}",
    },
    "es": {
        "ready": "Voxlate listo. Escribe 'help' para ver los comandos.",
        "state.idle": "Listo",
        "state.recording": "Grabando... (escribe 'stop' para terminar)",
        "state.processing": "Procesando...",
        "state.speaking": "Hablando...",
        "state.error": "Error",
        "original": "Original",
        "original_detected": "Original ({language})",
        "translation": "Traducción",
        "error": "Error: {message}",
        "hint": "Sugerencia: {hint}",
        "rejected": "Ahora no ({state}).",
        "empty": "No hay nada que enviar.",
        "unknown_command": "Comando desconocido: {command}",
        "auto_detect": "Detectar idioma",
        "languages": "{source} -> {target} (voz: {voice})",
        "logs": "Registros: {path}",
    },
    "ja": {
        "ready": "Voxlate の準備ができました。'help' でコマンド一覧。",
        "state.idle": "待機中",
        "state.recording": "録音中... ('stop' で終了)",
        "state.processing": "処理中...",
        "state.speaking": "読み上げ中...",
        "state.error": "エラー",
        "original": "原文",
        "original_detected": "原文 ({language})",
        "translation": "翻訳",
        "error": "エラー: {message}",
        "empty": "送信する内容がありません。",
        "auto_detect": "自動検出",
    },
}


def ui_text(key: str, language: str = "en", **fmt: Any) -> str:
    table = UI_STRINGS.get(language) or UI_STRINGS["en"]
    template = table.get(key)
    if template is None:
        template = UI_STRINGS["en"].get(key, key)
    return template.format(**fmt) if fmt else template
