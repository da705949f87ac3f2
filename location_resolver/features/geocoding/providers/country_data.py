"""国・言語の静的参照データ（CLDR / libphonenumber）"""
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional

import phonenumbers
from babel import Locale
from babel.languages import get_official_languages

from ....shared.logging.config import get_logger

logger = get_logger(__name__)

# ccTLDが国コードと一致しない国
_INTERNET_TLD_OVERRIDES = {
    "GB": "uk",
}


@dataclass(frozen=True)
class CountryInfo:
    """国ごとの参照データ"""

    code: str  # ISO 3166-1 alpha-2
    name: str  # 英語名
    internet: str  # ccTLD（小文字、ドットなし）
    languages: tuple[str, ...]  # 公用語・事実上の公用語の英語名
    phone_code: Optional[str]  # 国番号（例: "+1"）


class CountryData:
    """
    国コードをキーにした読み取り専用の参照テーブル

    国名・言語名はBabel（CLDR）、国番号はphonenumbersのメタデータから
    生成する。インスタンス生成時に一度だけ構築する。
    """

    def __init__(self, display_locale: str = "en") -> None:
        """
        Args:
            display_locale: 国名・言語名の表示ロケール
        """
        self._locale = Locale.parse(display_locale)
        self._countries: dict[str, CountryInfo] = {}

        for code, name in self._locale.territories.items():
            if len(code) != 2 or not code.isalpha():
                # "001"（World）や "419"（Latin America）などの地域コードは除外
                continue
            self._countries[code] = CountryInfo(
                code=code,
                name=name,
                internet=_INTERNET_TLD_OVERRIDES.get(code, code.lower()),
                languages=self._official_language_names(code),
                phone_code=self._phone_code(code),
            )

        logger.info(f"CountryData loaded: {len(self._countries)} countries")

    def get(self, country_code: Optional[str]) -> Optional[CountryInfo]:
        """国コード（大文字小文字は問わない）から参照データを取得"""
        if not country_code:
            return None
        return self._countries.get(country_code.upper())

    def internet_tld(self, country_code: Optional[str]) -> Optional[str]:
        """国コードからccTLDを取得（不明な国はNone）"""
        info = self.get(country_code)
        return info.internet if info else None

    def language_name(self, language_code: str) -> Optional[str]:
        """言語コード（"de"、"zh_Hans"など）から英語名を取得"""
        base_code = language_code.split("_")[0]
        return self._locale.languages.get(base_code) or self._locale.languages.get(
            language_code
        )

    def _official_language_names(self, country_code: str) -> tuple[str, ...]:
        names: list[str] = []
        for language_code in get_official_languages(country_code, de_facto=True):
            name = self.language_name(language_code)
            if name and name not in names:
                names.append(name)
        return tuple(names)

    @staticmethod
    def _phone_code(country_code: str) -> Optional[str]:
        calling_code = phonenumbers.country_code_for_region(country_code)
        # 未知の地域は0が返る
        return f"+{calling_code}" if calling_code else None

    def __len__(self) -> int:
        return len(self._countries)


@lru_cache(maxsize=1)
def get_country_data() -> CountryData:
    """プロセス内で共有する参照テーブルを取得（初回のみ構築）"""
    return CountryData()
