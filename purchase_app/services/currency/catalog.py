from __future__ import annotations

"""Country/currency catalog built from the Treasury listing.

Purpose:
    Enumerate every (country, country_currency_desc) pair the Treasury
    publishes so the purchase API can offer and validate countries.

Design:
    - A fixed baseline of popular currencies is inserted first and survives any
      upstream outage.
    - The listing is paged newest-first. Every currency recurs on every
      publication date, so new pairs dry up quickly; loading stops after
      ``max_empty_pages`` consecutive pages without a new pair, at the
      upstream's ``total-pages``, or at ``max_pages``, whichever comes first.
    - Each entry is indexed under both its country and its descriptor.
    - The result is loaded once per process (``CatalogCache``) and never
      mutated afterwards.
"""
import logging
import threading
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from .base import CatalogEntry
from .treasury import PAGE_SIZE, TreasuryClient

logger = logging.getLogger("purchase_app.currency.catalog")

MAX_PAGES = 500
MAX_CONSECUTIVE_EMPTY_PAGES = 5

POPULAR_CURRENCIES: Tuple[Tuple[str, str], ...] = (
    # North America
    ("United States", "United States-Dollar"),
    ("Canada", "Canada-Dollar"),
    ("Mexico", "Mexico-Peso"),
    # Europe
    ("United Kingdom", "United Kingdom-Pound"),
    ("Germany", "Euro Zone-Euro"),
    ("France", "Euro Zone-Euro"),
    ("Italy", "Euro Zone-Euro"),
    ("Spain", "Euro Zone-Euro"),
    ("Netherlands", "Euro Zone-Euro"),
    ("Switzerland", "Switzerland-Franc"),
    # Asia-Pacific
    ("Japan", "Japan-Yen"),
    ("China", "China-Yuan"),
    ("India", "India-Rupee"),
    ("South Korea", "South-Korea-Won"),
    ("Singapore", "Singapore-Dollar"),
    ("Hong Kong", "Hong-Kong-Dollar"),
    ("Australia", "Australia-Dollar"),
    ("New Zealand", "New-Zealand-Dollar"),
    # South America
    ("Brazil", "Brazil-Real"),
    ("Argentina", "Argentina-Peso"),
    ("Chile", "Chile-Peso"),
    ("Colombia", "Colombia-Peso"),
    # Other
    ("South Africa", "South-Africa-Rand"),
)


def popular_entries() -> List[CatalogEntry]:
    return [CatalogEntry.from_descriptor(c, d) for c, d in POPULAR_CURRENCIES]


@dataclass(frozen=True)
class Catalog:
    """Published, read-only catalog.

    ``entries`` holds one entry per distinct (country, descriptor) pair in
    insertion order (baseline first). ``by_key`` maps countries and
    descriptors to entries; a later pair sharing a key wins that key.
    """

    entries: Tuple[CatalogEntry, ...]
    by_key: Mapping[str, CatalogEntry]
    _by_folded_key: Mapping[str, CatalogEntry] = field(repr=False)

    @classmethod
    def build(cls, entries: Iterable[CatalogEntry]) -> "Catalog":
        ordered = tuple(entries)
        index: Dict[str, CatalogEntry] = {}
        folded: Dict[str, CatalogEntry] = {}
        for entry in ordered:
            for key in (entry.country, entry.currency_code):
                index[key] = entry
                folded[key.casefold()] = entry
        return cls(
            entries=ordered,
            by_key=MappingProxyType(index),
            _by_folded_key=MappingProxyType(folded),
        )

    def lookup(self, key: Optional[str]) -> Optional[CatalogEntry]:
        if key is None:
            return None
        key = key.strip()
        if not key:
            return None
        entry = self.by_key.get(key)
        if entry is None:
            entry = self._by_folded_key.get(key.casefold())
        return entry

    def __len__(self) -> int:
        return len(self.entries)

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.lookup(key) is not None


class CatalogLoader:
    def __init__(
        self,
        client: TreasuryClient,
        *,
        max_pages: int = MAX_PAGES,
        max_empty_pages: int = MAX_CONSECUTIVE_EMPTY_PAGES,
        page_size: int = PAGE_SIZE,
        baseline: Callable[[], List[CatalogEntry]] = popular_entries,
    ):
        self._client = client
        self._max_pages = max_pages
        self._max_empty_pages = max_empty_pages
        self._page_size = page_size
        self._baseline = baseline

    def load(self) -> Catalog:
        seen: Set[str] = set()
        entries: List[CatalogEntry] = []

        def add(entry: CatalogEntry) -> bool:
            composite = f"{entry.country}|{entry.currency_code}"
            if composite in seen:
                return False
            seen.add(composite)
            entries.append(entry)
            return True

        for entry in self._baseline():
            add(entry)
        logger.info("added %d popular currencies", len(entries))

        try:
            self._paginate(add)
        except Exception:
            # Keep what we have (baseline at minimum); callers still get a catalog.
            logger.exception(
                "error fetching currencies from treasury; keeping %d entries", len(entries)
            )

        catalog = Catalog.build(entries)
        logger.info(
            "catalog loaded",
            extra={"unique_pairs": len(catalog), "keys": len(catalog.by_key)},
        )
        return catalog

    def _paginate(self, add: Callable[[CatalogEntry], bool]) -> None:
        page_number = 1
        last_page = self._max_pages
        empty_streak = 0
        while page_number <= last_page:
            page = self._client.fetch_currency_page(page_number, self._page_size)

            if page_number == 1:
                total_pages = (page.meta.total_pages if page.meta else None) or 1
                last_page = min(self._max_pages, total_pages)
                logger.info(
                    "treasury pagination: total pages %s, total count %s",
                    total_pages,
                    page.meta.total_count if page.meta else None,
                )

            new_pairs = 0
            if page.data:
                for item in page.data:
                    country = (item.country or "").strip()
                    descriptor = (item.country_currency_desc or "").strip()
                    if country and descriptor:
                        if add(CatalogEntry.from_descriptor(country, descriptor)):
                            new_pairs += 1
            else:
                logger.warning("treasury returned no data for page %d", page_number)

            if new_pairs:
                logger.info("page %d: added %d new currencies", page_number, new_pairs)
                empty_streak = 0
            else:
                empty_streak += 1
                if empty_streak >= self._max_empty_pages:
                    logger.info(
                        "stopped after %d consecutive pages with no new currencies",
                        empty_streak,
                    )
                    return
            page_number += 1


class CatalogCache:
    """Process-wide holder; the loader runs at most once.

    Readers arriving while the load is in progress block on the gate and then
    see the published instance. After publication reads take no lock.
    """

    def __init__(self, loader: CatalogLoader):
        self._loader = loader
        self._gate = threading.Lock()
        self._catalog: Optional[Catalog] = None

    @property
    def loaded(self) -> bool:
        return self._catalog is not None

    def get(self) -> Catalog:
        catalog = self._catalog
        if catalog is not None:
            return catalog
        with self._gate:
            if self._catalog is None:
                self._catalog = self._loader.load()
            return self._catalog
