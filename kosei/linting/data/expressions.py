"""Phrase tables for the dictionary-driven lexical rules."""

from __future__ import annotations

import re
from typing import NamedTuple


class Rewrite(NamedTuple):
    pattern: str
    suggestion: str
    description_ja: str


REDUNDANT_EXPRESSIONS: tuple[Rewrite, ...] = (
    Rewrite("頭痛が痛い", "頭が痛い", "「頭痛」に「痛い」の意味が含まれています"),
    Rewrite("一番最初", "最初", "「一番」と「最初」は同じ意味です"),
    Rewrite("まず最初に", "まず", "「まず」と「最初に」は同じ意味です"),
    Rewrite("後で後悔", "後悔", "「後悔」に「後で」の意味が含まれています"),
    Rewrite("犯罪を犯す", "罪を犯す", "「犯罪」と「犯す」で意味が重複しています"),
    Rewrite("返事を返す", "返事をする", "「返事」と「返す」で意味が重複しています"),
    Rewrite("被害を被る", "被害を受ける", "「被害」と「被る」で意味が重複しています"),
    Rewrite("違和感を感じる", "違和感がある", "「違和感」と「感じる」で意味が重複しています"),
    Rewrite("馬から落馬", "落馬する", "「落馬」に「馬から落ちる」の意味が含まれています"),
    Rewrite("日本に来日", "来日する", "「来日」に「日本に来る」の意味が含まれています"),
    Rewrite("歌を歌う", "歌う", "「歌」と「歌う」で意味が重複しています"),
    Rewrite("挙式を挙げる", "挙式する", "「挙式」と「挙げる」で意味が重複しています"),
    Rewrite("過半数を超える", "半数を超える", "「過半数」に「超える」の意味が含まれています"),
    Rewrite("必ず必要", "必要", "「必ず」と「必要」で意味が重複しています"),
    Rewrite("各々それぞれ", "それぞれ", "「各々」と「それぞれ」は同じ意味です"),
    Rewrite("あらかじめ予約", "予約する", "「予約」に「あらかじめ」の意味が含まれています"),
    Rewrite("今の現状", "現状", "「今の」と「現状」で意味が重複しています"),
    Rewrite("元旦の朝", "元旦", "「元旦」に「朝」の意味が含まれています"),
    Rewrite("最後の切り札", "切り札", "「切り札」に「最後の」の意味が含まれています"),
    Rewrite("射程距離", "射程", "「射程」に「距離」の意味が含まれています"),
    Rewrite("思いがけないハプニング", "ハプニング", "「ハプニング」に「思いがけない」の意味が含まれています"),
    Rewrite("内定が決まる", "内定する", "「内定」に「決まる」の意味が含まれています"),
    Rewrite("旅行に行く", "旅行する", "「旅行」と「行く」で意味が重複しています"),
    Rewrite("断トツの1位", "断トツ", "「断トツ」は「断然トップ」の略で「1位」の意味を含みます"),
    Rewrite("第1号", "1号", "「第」と「号」で序数の意味が重複しています"),
)

_DOUBLE_NEGATIVE = "二重否定は分かりにくいため、肯定表現が推奨されます"
_SHORTER = "より簡潔に表現できます"

VERBOSE_EXPRESSIONS: tuple[Rewrite, ...] = (
    Rewrite("することができる", "できる", "「することができる」は「できる」で十分です"),
    Rewrite("することが可能", "できる", "「することが可能」は「できる」で十分です"),
    Rewrite("することが出来る", "できる", "「することが出来る」は「できる」で十分です"),
    Rewrite("というふうに", "と", "「というふうに」は「と」で十分です"),
    Rewrite("という風に", "と", "「という風に」は「と」で十分です"),
    Rewrite("ということができる", "と言える", _SHORTER),
    Rewrite("というものは", "は", "「というものは」は冗長です"),
    Rewrite("できないわけではない", "できる", _DOUBLE_NEGATIVE),
    Rewrite("ないわけではない", "ある", _DOUBLE_NEGATIVE),
    Rewrite("なくはない", "ある", _DOUBLE_NEGATIVE),
    Rewrite("ないことはない", "ある", _DOUBLE_NEGATIVE),
    Rewrite("しないでもない", "することもある", _DOUBLE_NEGATIVE),
    Rewrite("と言っても過言ではない", "と言える", _SHORTER),
    Rewrite("といっても過言ではない", "といえる", _SHORTER),
    Rewrite("において", "で", "「において」は「で」で十分な場合が多いです"),
    Rewrite("における", "の", "「における」は「の」で十分な場合が多いです"),
    Rewrite("についてですが", "について", "「ですが」は不要です"),
    Rewrite("の方が", "が", "「の方」は不要な場合があります"),
    Rewrite("行うことにする", "行う", _SHORTER),
    Rewrite("であるということ", "であること", "「という」は冗長です"),
    Rewrite("かどうかということ", "かどうか", "「ということ」は冗長です"),
    Rewrite("ようにする", "する", "「ようにする」は冗長な場合があります"),
    Rewrite("的に言えば", "的には", _SHORTER),
)


# ---------------------------------------------------------------------------
# Correlative adverbs and the sentence endings they require
# ---------------------------------------------------------------------------


class Correlative(NamedTuple):
    adverb: str
    category: str
    ending: re.Pattern[str]
    expected_ja: str


CATEGORY_LABELS = {
    "negation": "否定",
    "conjecture": "推測",
    "conditional": "条件",
    "hypothetical": "仮定",
    "concessive": "譲歩",
    "interrogative": "疑問",
    "simile": "比況",
}

NEGATIVE_ENDING = re.compile(r"(?:ない|なかった|なくて|なければ|ぬ|ず|ません(?:でした)?|まい)$")
CONJECTURE_ENDING = re.compile(
    r"(?:だろう|であろう|でしょう|かもしれない|かもしれません|と思われる|に違いない|に違いありません|はずだ|はずです)$"
)
CONDITIONAL_ENDING = re.compile(
    r"(?:れば|ければ|たら|ましたら|なら(?:ば)?|ならば|(?:る|い|す|く|つ|ぬ|む|う|ぶ|ぐ)と)$"
)
HYPOTHETICAL_ENDING = re.compile(
    r"(?:れば|ければ|たら|ましたら|なら(?:ば)?|としても|にしても|としたら|とすれば)$"
)
CONCESSIVE_ENDING = re.compile(
    r"(?:ても|でも|としても|にしても|にせよ|とはいえ|ものの|けれども|けれど|けど)$"
)
INTERROGATIVE_ENDING = re.compile(
    r"(?:か|のか|だろうか|でしょうか|のだろうか|のでしょうか|であろうか)$"
)
SIMILE_ENDING = re.compile(
    r"(?:ようだ|ようです|ような|ように|みたいだ|みたいです|みたいな|みたいに|ごとく|ごとし|ごとき|かのようだ|かのようです)$"
)

_NEGATION_JA = "ない・ぬ・ず・ません 等"
_CONJECTURE_JA = "だろう・でしょう・かもしれない・と思われる 等"
_CONJECTURE_STRONG_JA = "だろう・でしょう・かもしれない・に違いない 等"
_CONDITIONAL_JA = "ば・たら・なら・と 等"
_HYPOTHETICAL_JA = "ば・たら・なら・としても 等"
_CONCESSIVE_JA = "ても・でも・としても 等"
_INTERROGATIVE_JA = "か・のか・だろうか 等"
_SIMILE_JA = "ようだ・みたいだ・ごとく 等"


def _group(adverbs: str, category: str, ending: re.Pattern[str], expected: str) -> list[Correlative]:
    return [Correlative(adverb, category, ending, expected) for adverb in adverbs.split()]


CORRELATIVE_PATTERNS: tuple[Correlative, ...] = tuple(
    _group(
        "決して 全く まったく 必ずしも 少しも 二度と めったに 一向に 断じて 到底 とうてい ちっとも 一切",
        "negation",
        NEGATIVE_ENDING,
        _NEGATION_JA,
    )
    + _group("おそらく 恐らく たぶん 多分", "conjecture", CONJECTURE_ENDING, _CONJECTURE_JA)
    + _group("さぞ さぞかし", "conjecture", CONJECTURE_ENDING, _CONJECTURE_STRONG_JA)
    + _group("もし もしも", "conditional", CONDITIONAL_ENDING, _CONDITIONAL_JA)
    + _group("仮に 万一 万が一", "hypothetical", HYPOTHETICAL_ENDING, _HYPOTHETICAL_JA)
    + _group("たとえ 仮令 いくら", "concessive", CONCESSIVE_ENDING, _CONCESSIVE_JA)
    + _group("なぜ どうして 果たして はたして", "interrogative", INTERROGATIVE_ENDING, _INTERROGATIVE_JA)
    + _group("まるで あたかも さながら", "simile", SIMILE_ENDING, _SIMILE_JA)
)


# ---------------------------------------------------------------------------
# Conjugation errors
# ---------------------------------------------------------------------------

RA_NUKI_STEMS = (
    "見", "食べ", "出", "着", "起き", "寝", "落ち", "逃げ",
    "受け", "開け", "つけ", "やめ", "考え", "答え", "決め", "始め",
)
RA_NUKI_SUFFIXES = ("れる", "れない", "れた", "れれば", "れます", "れました", "れません")

SA_IRE_PAIRS = {
    "休まさせる": "休ませる",
    "読まさせる": "読ませる",
    "行かさせる": "行かせる",
    "書かさせる": "書かせる",
    "飲まさせる": "飲ませる",
    "待たさせる": "待たせる",
    "泣かさせる": "泣かせる",
}

I_NUKI_PAIRS = {
    "持ってる": "持っている",
    "食べてる": "食べている",
    "見てる": "見ている",
    "走ってる": "走っている",
    "読んでる": "読んでいる",
    "遊んでる": "遊んでいる",
    "待ってる": "待っている",
    "歩いてる": "歩いている",
    "飲んでる": "飲んでいる",
    "寝てる": "寝ている",
}


# ---------------------------------------------------------------------------
# Japanese eras: Western year = offset + era year
# ---------------------------------------------------------------------------

ERA_OFFSETS = {
    "令和": 2018,
    "平成": 1988,
    "昭和": 1925,
    "大正": 1911,
    "明治": 1867,
}
