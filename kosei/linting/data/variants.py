"""Spelling variant dictionaries for the document-level consistency rules.

The first variant of every group is the canonical form; it wins ties.
"""

from __future__ import annotations

from typing import NamedTuple


class VariantGroup(NamedTuple):
    id: str
    category: str
    variants: tuple[str, ...]


class AdverbGroup(NamedTuple):
    reading: str
    variants: tuple[str, ...]


VARIANT_CATEGORY_LABELS = {
    "okurigana": "送り仮名",
    "kanji-kana": "漢字・かな",
    "katakana-chouon": "カタカナ長音",
}

VARIANT_CATEGORY_STANDARDS = {
    "okurigana": "文化庁「送り仮名の付け方」(1973, 内閣告示第二号)",
    "kanji-kana": "文化庁「公用文作成の考え方」(2022)",
    "katakana-chouon": "文化庁「外来語の表記」(1991, 内閣告示第二号)",
}


def _groups(category: str, rows: str) -> list[VariantGroup]:
    groups = []
    for row in rows.strip().splitlines():
        group_id, _, variants = row.strip().partition(":")
        groups.append(VariantGroup(group_id, category, tuple(variants.split())))
    return groups


_OKURIGANA = """
uchiawase: 打ち合わせ 打合せ 打合わせ 打ち合せ
uketsuke: 受け付け 受付 受付け 受け付
toriatsukai: 取り扱い 取扱い 取扱
moushikomi: 申し込み 申込み 申込
hikiwatashi: 引き渡し 引渡し 引渡
kumiawase: 組み合わせ 組合せ 組合わせ
warikomi: 割り込み 割込み 割込
tachiai: 立ち会い 立会い 立会
tsukekae: 付け替え 付替え 付替
kumitate: 組み立て 組立て 組立
okonau: 行う 行なう
arawasu: 表す 表わす
kurikaeshi: 繰り返し 繰返し 繰返
moushide: 申し出 申出
uketori: 受け取り 受取り 受取
kirikae: 切り替え 切替え 切替
"""

_KANJI_KANA = """
kodomo: 子供 子ども こども
dekiru: 出来る できる
koto: 事 こと
mono: 物 もの
toki: 時 とき
tokoro: 所 ところ
tame: 為 ため
hodo: 程 ほど
yue: 故 ゆえ
nado: 等 など
kudasai: 下さい ください
itadaku: 頂く いただく
arigatou: 有り難う ありがとう
watashi: 私 わたし わたくし
mottomo: 最も もっとも
sugu: 直ぐ すぐ
subete: 全て すべて
osoraku: 恐らく おそらく
samazama: 様々 さまざま
nazenara: 何故なら なぜなら
mata: 又 また
oyobi: 及び および
narabini: 並びに ならびに
aruiwa: 或いは あるいは
"""

_KATAKANA_CHOUON = """
computer: コンピューター コンピュータ
server: サーバー サーバ
printer: プリンター プリンタ
browser: ブラウザー ブラウザ
user: ユーザー ユーザ
folder: フォルダー フォルダ
parameter: パラメーター パラメータ
manager: マネージャー マネージャ
adapter: アダプター アダプタ
indicator: インジケーター インジケータ
calendar: カレンダー カレンダ
character: キャラクター キャラクタ
elevator: エレベーター エレベータ
editor: エディター エディタ
monitor: モニター モニタ
scanner: スキャナー スキャナ
router: ルーター ルータ
driver: ドライバー ドライバ
filter: フィルター フィルタ
header: ヘッダー ヘッダ
footer: フッター フッタ
buffer: バッファー バッファ
trigger: トリガー トリガ
slider: スライダー スライダ
container: コンテナー コンテナ
counter: カウンター カウンタ
"""

VARIANT_GROUPS: tuple[VariantGroup, ...] = tuple(
    _groups("okurigana", _OKURIGANA)
    + _groups("kanji-kana", _KANJI_KANA)
    + _groups("katakana-chouon", _KATAKANA_CHOUON)
)

ADVERB_VARIANT_GROUPS: tuple[AdverbGroup, ...] = (
    AdverbGroup("マッタク", ("全く", "まったく")),
    AdverbGroup("ホトンド", ("殆ど", "ほとんど")),
    AdverbGroup("タダチニ", ("直ちに", "ただちに")),
    AdverbGroup("アラカジメ", ("予め", "あらかじめ")),
    AdverbGroup("スデニ", ("既に", "すでに")),
    AdverbGroup("オソラク", ("恐らく", "おそらく")),
    AdverbGroup("タトエバ", ("例えば", "たとえば")),
    AdverbGroup("カナラズシモ", ("必ずしも", "かならずしも")),
    AdverbGroup("カナラズ", ("必ず", "かならず")),
    AdverbGroup("ワズカ", ("僅か", "わずか")),
    AdverbGroup("サラニ", ("更に", "さらに")),
    AdverbGroup("モットモ", ("最も", "もっとも")),
    AdverbGroup("トクニ", ("特に", "とくに")),
    AdverbGroup("オオイニ", ("大いに", "おおいに")),
    AdverbGroup("フタタビ", ("再び", "ふたたび")),
    AdverbGroup("ヤハリ", ("矢張り", "やはり", "やっぱり")),
    AdverbGroup("タブン", ("多分", "たぶん")),
    AdverbGroup("イッソウ", ("一層", "いっそう")),
    AdverbGroup("タイヘン", ("大変", "たいへん")),
    AdverbGroup("キワメテ", ("極めて", "きわめて")),
    AdverbGroup("オモニ", ("主に", "おもに")),
    AdverbGroup("タダ", ("只", "ただ")),
    AdverbGroup("スコシ", ("少し", "すこし")),
    AdverbGroup("ソウトウ", ("相当", "そうとう")),
    AdverbGroup("ヒジョウニ", ("非常に", "ひじょうに")),
    AdverbGroup("ジツニ", ("実に", "じつに")),
    AdverbGroup("マサニ", ("正に", "まさに")),
    AdverbGroup("ケッシテ", ("決して", "けっして")),
    AdverbGroup("オヨソ", ("凡そ", "およそ")),
    AdverbGroup("アエテ", ("敢えて", "あえて")),
)
