"""Language-specific configurations."""

LANG_CONFIG = {
    "NL": {
        "label": "NEDERLANDS",
        "voice": "nl-NL-FennaNeural",
        "voice_id": "FENNA",
        "articles": ["de", "het"],
        "available_voices": [
            "nl-NL-FennaNeural",
            "nl-NL-ColetteNeural",
            "nl-NL-MaartenNeural",
        ],
    },
    "DE": {
        "label": "DEUTSCH",
        "voice": "de-DE-ConradNeural",
        "voice_id": "CONRAD",
        "articles": ["der", "die", "das"],
        "available_voices": [
            "de-DE-ConradNeural",
            "de-DE-AmalaNeural",
            "de-DE-KatjaNeural",
            "de-DE-KillianNeural",
        ],
    },
    "EN": {
        "label": "ENGLISH",
        "voice": "en-GB-SoniaNeural",
        "voice_id": "SONIA",
        "articles": ["the", "a", "an"],
        "available_voices": [
            "en-GB-SoniaNeural",
            "en-GB-RyanNeural",
            "en-GB-ThomasNeural",
            "en-GB-LibbyNeural",
        ],
    },
}
