"""
Locale code mappings and utilities.

Locales use the gettext convention: language + underscore + region
(en_US, tr_TR, pt_BR), or a bare language code for a few locales (ja, th).
Catalog files are named after the locale, machine translation providers
receive only the language part.
"""

from typing import Dict, Iterable, List, Optional

# Locale display names
LOCALE_NAMES = {
    'ar': 'Arabic',
    'az': 'Azerbaijani',
    'bg_BG': 'Bulgarian',
    'bn_BD': 'Bengali (Bangladesh)',
    'ca': 'Catalan',
    'cs_CZ': 'Czech',
    'da_DK': 'Danish',
    'de_CH': 'German (Switzerland)',
    'de_DE': 'German',
    'el': 'Greek',
    'en_AU': 'English (Australia)',
    'en_CA': 'English (Canada)',
    'en_GB': 'English (UK)',
    'en_US': 'English (United States)',
    'es_AR': 'Spanish (Argentina)',
    'es_ES': 'Spanish (Spain)',
    'es_MX': 'Spanish (Mexico)',
    'et': 'Estonian',
    'fa_IR': 'Persian',
    'fi': 'Finnish',
    'fr_CA': 'French (Canada)',
    'fr_FR': 'French (France)',
    'he_IL': 'Hebrew',
    'hi_IN': 'Hindi',
    'hr': 'Croatian',
    'hu_HU': 'Hungarian',
    'id_ID': 'Indonesian',
    'it_IT': 'Italian',
    'ja': 'Japanese',
    'ka_GE': 'Georgian',
    'kk': 'Kazakh',
    'ko_KR': 'Korean',
    'lt_LT': 'Lithuanian',
    'lv': 'Latvian',
    'ms_MY': 'Malay',
    'nb_NO': 'Norwegian (Bokmål)',
    'nl_NL': 'Dutch',
    'pl_PL': 'Polish',
    'pt_BR': 'Portuguese (Brazil)',
    'pt_PT': 'Portuguese (Portugal)',
    'ro_RO': 'Romanian',
    'ru_RU': 'Russian',
    'sk_SK': 'Slovak',
    'sl_SI': 'Slovenian',
    'sq': 'Albanian',
    'sr_RS': 'Serbian',
    'sv_SE': 'Swedish',
    'th': 'Thai',
    'tr_TR': 'Turkish',
    'uk': 'Ukrainian',
    'ur': 'Urdu',
    'uz_UZ': 'Uzbek',
    'vi': 'Vietnamese',
    'zh_CN': 'Chinese (China)',
    'zh_HK': 'Chinese (Hong Kong)',
    'zh_TW': 'Chinese (Taiwan)',
}

# Providers expect these codes instead of the plain language part
PROVIDER_LANGUAGE_OVERRIDES = {
    'zh_CN': 'zh-CN',
    'zh_HK': 'zh-TW',
    'zh_TW': 'zh-TW',
    'he_IL': 'iw',
    'nb_NO': 'no',
}

SEARCH_RESULT_LIMIT = 8


def is_valid_locale(locale: str) -> bool:
    """
    Check if a locale is known.

    Examples:
        >>> is_valid_locale('tr_TR')
        True
        >>> is_valid_locale('xx_XX')
        False
    """
    return locale in LOCALE_NAMES


def get_locale_name(locale: str) -> Optional[str]:
    """Get the display name of a locale, or None if unknown."""
    return LOCALE_NAMES.get(locale)


def get_all_locales() -> List[str]:
    return list(LOCALE_NAMES.keys())


def locale_to_language(locale: str) -> str:
    """
    Language code sent to translation providers for a locale.

    Examples:
        >>> locale_to_language('tr_TR')
        'tr'
        >>> locale_to_language('ja')
        'ja'
        >>> locale_to_language('zh_TW')
        'zh-TW'
    """
    if locale in PROVIDER_LANGUAGE_OVERRIDES:
        return PROVIDER_LANGUAGE_OVERRIDES[locale]
    return locale.split('_')[0]


def _contains_word(text: str, keyword: str) -> bool:
    return keyword.casefold() in text.casefold()


def search_locales(
    keyword: str = "",
    values: Optional[Iterable[str]] = None,
    only_supported: bool = False,
    accepted_locales: Optional[Iterable[str]] = None,
    current_locale: Optional[str] = None,
    include_current_locale: bool = False,
) -> List[Dict[str, str]]:
    """
    Find locales for a selection input.

    Args:
        keyword: Case-insensitive fragment of the display name
        values: Exact locales to return (takes precedence over keyword)
        only_supported: Restrict to accepted locales
        accepted_locales: Accepted locales, used with only_supported
        current_locale: The site's own locale
        include_current_locale: Keep current_locale when only_supported is set

    Returns:
        List of {"id": locale, "name": display name}; keyword searches
        return at most SEARCH_RESULT_LIMIT entries, an empty query returns nothing.
    """
    names = dict(LOCALE_NAMES)

    if only_supported:
        accepted = set(accepted_locales or [])
        names = {
            locale: name for locale, name in names.items()
            if (include_current_locale if locale == current_locale else locale in accepted)
        }

    wanted = set(values or [])
    if wanted:
        matches = [(locale, name) for locale, name in names.items() if locale in wanted]
    elif keyword:
        matches = [(locale, name) for locale, name in names.items() if _contains_word(name, keyword)]
        matches = matches[:SEARCH_RESULT_LIMIT]
    else:
        matches = []

    return [{"id": locale, "name": name} for locale, name in matches]
