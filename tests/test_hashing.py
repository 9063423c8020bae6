from __future__ import annotations

import sys
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from kosei.utils import hash_string


def test_known_values() -> None:
    assert hash_string("") == "0"
    assert hash_string("a") == "61"
    assert hash_string("ab") == "c21"


def test_characters_outside_the_bmp_hash_as_surrogate_pairs() -> None:
    # U+20BB7 is D842 DFB7 in UTF-16
    assert hash_string("𠮷") == "1b0fb5"


def test_long_text_stays_within_32_bits() -> None:
    value = int(hash_string("吾輩は猫である。名前はまだ無い。" * 50), 16)

    assert 0 <= value < 2**32
    assert hash_string("吾輩は猫である。") == hash_string("吾輩は猫である。")
    assert hash_string("吾輩は猫である。") != hash_string("吾輩は犬である。")
