"""Counter words and the nouns they must not be used with."""

from __future__ import annotations

from typing import NamedTuple


class CounterMismatch(NamedTuple):
    counter: str
    invalid_nouns: frozenset[str]
    suggestion: str
    description_ja: str


_PEOPLE = "人 子供 大人 男 女 学生"
_SMALL_ANIMALS = "犬 猫 鳥 魚 虫 蛇 兎 鼠 蟻 蜂"

COUNTER_MISMATCHES: tuple[CounterMismatch, ...] = (
    CounterMismatch(
        "人",
        frozenset("犬 猫 鳥 魚 馬 牛 豚 羊 鶏 虫 蛇 兎 鼠 熊 鹿 猿 象".split()),
        "匹",
        "動物には「匹」または「頭」を使います",
    ),
    CounterMismatch(
        "匹",
        frozenset(f"{_PEOPLE} 先生 社員 客 患者".split()),
        "人",
        "人には「人」を使います",
    ),
    CounterMismatch(
        "本",
        frozenset("紙 皿 切手 写真 葉 布 板 シート カード チケット".split()),
        "枚",
        "薄く平たいものには「枚」を使います",
    ),
    CounterMismatch(
        "枚",
        frozenset("鉛筆 ペン 傘 木 棒 瓶 ビール ワイン 映画 電話".split()),
        "本",
        "細長いものには「本」を使います",
    ),
    CounterMismatch("台", frozenset(_PEOPLE.split()), "人", "人には「人」を使います"),
    CounterMismatch(
        "冊",
        frozenset("紙 レポート 手紙 書類".split()),
        "枚",
        "紙類には「枚」を使います（綴じたものには「冊」）",
    ),
    CounterMismatch("頭", frozenset(_SMALL_ANIMALS.split()), "匹", "小動物には「匹」を使います"),
)
