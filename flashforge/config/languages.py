"""Language and voice catalogues."""

LANGUAGES = [
    {"code": "en", "name": "English"},
    {"code": "es", "name": "Spanish"},
    {"code": "fr", "name": "French"},
    {"code": "de", "name": "German"},
    {"code": "it", "name": "Italian"},
    {"code": "ja", "name": "Japanese"},
    {"code": "ko", "name": "Korean"},
    {"code": "zh", "name": "Chinese"},
    {"code": "ru", "name": "Russian"},
    {"code": "pt", "name": "Portuguese"},
]

# Edge TTS neural voices bundled for offline use
VOICES = [
    {"id": "en-US-JennyNeural", "name": "Jenny", "language": "en", "gender": "Female"},
    {"id": "en-US-GuyNeural", "name": "Guy", "language": "en", "gender": "Male"},
    {"id": "es-ES-ElviraNeural", "name": "Elvira", "language": "es", "gender": "Female"},
    {"id": "es-ES-AlvaroNeural", "name": "Alvaro", "language": "es", "gender": "Male"},
    {"id": "fr-FR-DeniseNeural", "name": "Denise", "language": "fr", "gender": "Female"},
    {"id": "fr-FR-HenriNeural", "name": "Henri", "language": "fr", "gender": "Male"},
    {"id": "de-DE-KatjaNeural", "name": "Katja", "language": "de", "gender": "Female"},
    {"id": "de-DE-ConradNeural", "name": "Conrad", "language": "de", "gender": "Male"},
]


def language_name(code: str) -> str:
    """Display name for a language code, or the code itself."""
    for lang in LANGUAGES:
        if lang["code"] == code:
            return lang["name"]
    return code
