from typing import Dict

DEFAULT_GENRE = "ambient"

GENRE_DESCRIPTORS: Dict[str, str] = {
    "jazz": "smooth jazz, saxophone, piano, relaxing jazz melody",
    "ambient": "ambient, atmospheric, ethereal, meditation music",
    "lofi": "lo-fi hip hop, chill beats, relaxing study music",
    "classical": "classical piano, calming orchestra, serene strings",
}

# 로열티 프리 샘플 (provider 키가 없을 때)
DEMO_AUDIO_URLS: Dict[str, str] = {
    "jazz": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-1.mp3",
    "ambient": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-2.mp3",
    "lofi": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-3.mp3",
    "classical": "https://www.soundhelix.com/examples/mp3/SoundHelix-Song-4.mp3",
}


def genre_descriptor(genre: str) -> str:
    return GENRE_DESCRIPTORS.get(genre, GENRE_DESCRIPTORS[DEFAULT_GENRE])


def enrich_prompt(prompt: str, genre: str) -> str:
    return f"{prompt}, {genre_descriptor(genre)}"


def demo_audio_url(genre: str) -> str:
    return DEMO_AUDIO_URLS.get(genre, DEMO_AUDIO_URLS[DEFAULT_GENRE])
