"""Note name codec.

Notes are written ``<Letter>[#]<Octave>``, e.g. ``C#4`` or ``A0``. The
numeric value follows the MicroBrute's note numbering, where octave 0
starts at 12:

    value = octave * 12 + pitch_class + 12

so ``C0`` is 12, ``C1`` is 24 and ``A4`` is 69. Values 0-11 have no text
form. Black keys are only reachable through ``#``; ``E#`` and ``B#`` are
rejected because they would decode back to a different spelling.
"""

import re

from .exceptions import BadNoteSyntaxError, ValueOutOfBoundError

PITCH_CLASSES = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# Lowest encodable value (C0) and highest MIDI data byte.
LOWEST_NOTE = 12
HIGHEST_NOTE = 127

_NOTE_RE = re.compile(r"^([A-Ga-g])(#?)(\d+)$")

_NAMES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]


def parse_note(text: str) -> int:
    """
    Convert a note name to its numeric value.

    Args:
        text: Note name such as ``C#4``; the letter is case-insensitive

    Returns:
        Note value between 12 and 127

    Raises:
        BadNoteSyntaxError: Text is not a note name
        ValueOutOfBoundError: Note lies above 127
    """
    match = _NOTE_RE.match(text.strip())
    if not match:
        raise BadNoteSyntaxError(text)

    letter, sharp, octave = match.groups()
    letter = letter.upper()
    if sharp and letter in ("E", "B"):
        raise BadNoteSyntaxError(text)

    value = int(octave) * 12 + PITCH_CLASSES[letter] + (1 if sharp else 0) + LOWEST_NOTE
    if value > HIGHEST_NOTE:
        raise ValueOutOfBoundError(text, LOWEST_NOTE, HIGHEST_NOTE)
    return value


def note_name(value: int) -> str:
    """
    Convert a numeric note value to its name.

    Raises:
        ValueOutOfBoundError: Value is below C0 or above 127
    """
    if value < LOWEST_NOTE or value > HIGHEST_NOTE:
        raise ValueOutOfBoundError(str(value), LOWEST_NOTE, HIGHEST_NOTE)
    octave, pitch_class = divmod(value - LOWEST_NOTE, 12)
    return f"{_NAMES[pitch_class]}{octave}"


def is_note(value: int) -> bool:
    """True if ``value`` has a text form."""
    return LOWEST_NOTE <= value <= HIGHEST_NOTE
