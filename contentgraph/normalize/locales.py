"""
Localized field resolution.

A field value is a map from locale code to value. Resolution walks the
requested locale's fallback chain and ends at the default locale.
"""

from typing import Any, Dict, Iterable, List, Mapping, Optional

from ..errors import LocaleConfigurationError
from ..models import Locale


def resolve_localized_field(
    field: Mapping[str, Any],
    default_locale_code: str,
    locale: Locale,
    locales_by_code: Optional[Mapping[str, Locale]] = None,
) -> Any:
    """
    Resolve the effective value of ``field`` for ``locale``.

    Precondition: fallback chains are acyclic. ``LocaleSet`` checks this once;
    this function does not.

    Args:
        field: Locale code -> value
        default_locale_code: Code of the default locale
        locale: Locale being materialized
        locales_by_code: Known locales, used to follow a fallback's own fallback

    Returns:
        The localized value, or None when no locale in the chain has one
    """
    if locale.code in field:
        return field[locale.code]
    fallback_code = locale.fallback_code
    if fallback_code:
        fallback = (locales_by_code or {}).get(fallback_code)
        if fallback is not None:
            return resolve_localized_field(field, default_locale_code, fallback, locales_by_code)
        if fallback_code in field:
            return field[fallback_code]
    return field.get(default_locale_code)


class LocaleSet:
    """The locales of one run, with exactly one default and acyclic fallbacks."""

    def __init__(self, locales: Iterable[Locale]):
        self.locales: List[Locale] = list(locales)
        defaults = [locale for locale in self.locales if locale.is_default]
        if len(defaults) != 1:
            raise LocaleConfigurationError(
                f"Expected exactly one default locale, found {len(defaults)}"
            )
        self.default = defaults[0]
        self.by_code: Dict[str, Locale] = {locale.code: locale for locale in self.locales}
        self._check_fallback_chains()

    @property
    def default_code(self) -> str:
        return self.default.code

    def _check_fallback_chains(self) -> None:
        for locale in self.locales:
            seen = {locale.code}
            current = locale
            while current.fallback_code and current.fallback_code in self.by_code:
                if current.fallback_code in seen:
                    raise LocaleConfigurationError(
                        f"Locale fallback cycle starting at '{locale.code}'"
                    )
                seen.add(current.fallback_code)
                current = self.by_code[current.fallback_code]

    def resolve(self, field: Mapping[str, Any], locale: Locale) -> Any:
        return resolve_localized_field(field, self.default_code, locale, self.by_code)

    def __iter__(self):
        return iter(self.locales)

    def __len__(self) -> int:
        return len(self.locales)
