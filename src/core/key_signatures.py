from functools import lru_cache

import music21

from src.core.sheet_music import KeySignature


def _spell(name: str) -> str:
    return name.replace('-', 'b')


@lru_cache(maxsize=None)
def key_signature_for_fifths(fifths: int) -> KeySignature:
    """Major key for a circle-of-fifths value; values outside -7..7 fall back to C major."""
    if not -7 <= fifths <= 7:
        fifths = 0
    key = music21.key.KeySignature(fifths).asKey('major')
    scale = tuple(_spell(p.name) for p in key.getScale('major').getPitches()[:7])
    return KeySignature(name=f"{_spell(key.tonic.name)} major", fifths=fifths, scale=scale)


C_MAJOR = key_signature_for_fifths(0)
