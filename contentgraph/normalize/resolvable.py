"""The set of node IDs a link may legally point at in this run."""

from typing import AbstractSet, FrozenSet, Iterable, Sequence

from ..models import Locale, RawAsset, RawEntry
from .ids import make_id


def build_resolvable_set(
    existing_node_ids: AbstractSet[str],
    grouped_entries: Sequence[Sequence[RawEntry]],
    assets: Iterable[RawAsset],
    default_locale_code: str,
    locales: Sequence[Locale],
) -> FrozenSet[str]:
    """
    Collect every locale-qualified ID of this run's entries and assets,
    together with the IDs of nodes kept from earlier runs.

    The result is frozen: nothing downstream may add to it.
    """
    resolvable = set(existing_node_ids)
    for entries in grouped_entries:
        for entry in entries:
            for locale in locales:
                resolvable.add(make_id(entry.id, default_locale_code, locale.code))
    for asset in assets:
        for locale in locales:
            resolvable.add(make_id(asset.id, default_locale_code, locale.code))
    return frozenset(resolvable)
