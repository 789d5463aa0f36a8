from __future__ import annotations

from typing import Optional, Sequence

from voxlate.contracts import VoiceCandidate
from voxlate.session.state import VoicePreference


def short_subtag(language_code: str) -> str:
    return str(language_code or "").split("-")[0]


def candidate_voices(target_code: str, voices: Sequence[VoiceCandidate]) -> list[VoiceCandidate]:
    short = short_subtag(target_code)
    return [v for v in voices if v.language == target_code or v.language.startswith(short)]


def select_voice(
    target_code: str,
    preference: VoicePreference | str,
    voices: Sequence[VoiceCandidate],
) -> Optional[VoiceCandidate]:
    """
    Pick a synthesis voice for `target_code`.

    Candidates are voices tagged with the exact code or sharing its short subtag,
    kept in snapshot order. A male/female preference picks the first candidate whose
    name contains that word (case-insensitive); otherwise, or when none matches, the
    first candidate wins. Returns None when no voice fits so the engine default is used.
    """
    candidates = candidate_voices(target_code, voices)
    if not candidates:
        return None

    pref = VoicePreference(preference)
    if pref is not VoicePreference.AUTO:
        word = pref.value
        gendered = [v for v in candidates if word in v.name.lower()]
        if gendered:
            return gendered[0]
    return candidates[0]
