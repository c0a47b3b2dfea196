"""Candidate records, scoring context and result shapes used by the search engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Tuple

from storefront_search.errors import CandidateFetchError

TAG_TYPES: Tuple[str, ...] = ("MATERIAL", "MOOD_SEASON", "PATTERN", "OCCASION")


def resolve_localized(
    values: Mapping[str, str],
    locale: str,
    default_locale: str,
) -> Optional[str]:
    """Pick a label for ``locale``, then ``default_locale``, then any available one."""
    for key in (locale, default_locale):
        value = values.get(key)
        if value:
            return value
    for value in values.values():
        if value:
            return value
    return None


@dataclass(frozen=True)
class Translation:
    locale: str
    name: str
    description: str = ""


@dataclass(frozen=True)
class CategoryRef:
    slug: str
    names: Dict[str, str] = field(default_factory=dict)

    def display_name(self, locale: str, default_locale: str) -> str:
        return resolve_localized(self.names, locale, default_locale) or self.slug


@dataclass(frozen=True)
class TagRef:
    type: str
    slug: str
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class SizeRef:
    code: str
    labels: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ColorRef:
    code: str
    hex: Optional[str] = None
    labels: Dict[str, str] = field(default_factory=dict)

    def display_label(self, locale: str, default_locale: str) -> str:
        return resolve_localized(self.labels, locale, default_locale) or self.code


@dataclass(frozen=True)
class Variant:
    size: Optional[SizeRef] = None
    color: Optional[ColorRef] = None
    stock: int = 0
    is_active: bool = True


@dataclass(frozen=True)
class Candidate:
    """A read-only product snapshot as delivered by a candidate source."""

    id: str
    slug: str
    category: CategoryRef
    translations: Dict[str, Translation] = field(default_factory=dict)
    tags: List[TagRef] = field(default_factory=list)
    variants: List[Variant] = field(default_factory=list)
    is_featured: bool = False
    sales_count: int = 0
    avg_rating: float = 0.0
    review_count: int = 0
    base_price_minor: int = 0
    image_url: Optional[str] = None

    @property
    def active_variants(self) -> List[Variant]:
        return [variant for variant in self.variants if variant.is_active]

    @property
    def total_stock(self) -> int:
        return sum(max(0, variant.stock) for variant in self.active_variants)

    def distinct_colors(self) -> List[ColorRef]:
        seen: Dict[str, ColorRef] = {}
        for variant in self.active_variants:
            if variant.color is not None and variant.color.code not in seen:
                seen[variant.color.code] = variant.color
        return list(seen.values())

    def distinct_sizes(self) -> List[SizeRef]:
        seen: Dict[str, SizeRef] = {}
        for variant in self.active_variants:
            if variant.size is not None and variant.size.code not in seen:
                seen[variant.size.code] = variant.size
        return list(seen.values())

    def resolve_translation(self, locale: str, default_locale: str) -> Optional[Translation]:
        """First named translation in locale, default locale, then any order."""
        for key in (locale, default_locale):
            translation = self.translations.get(key)
            if translation is not None and translation.name:
                return translation
        for translation in self.translations.values():
            if translation.name:
                return translation
        return None

    def display_name(self, locale: str, default_locale: str) -> str:
        translation = self.resolve_translation(locale, default_locale)
        return translation.name if translation is not None else self.slug

    def display_description(self, locale: str, default_locale: str) -> str:
        translation = self.resolve_translation(locale, default_locale)
        return translation.description if translation is not None else ""


@dataclass(frozen=True)
class ScoringContext:
    """Per-search query view shared by every field score computation."""

    query: str
    query_normalized: str
    query_words: Tuple[str, ...]
    synonyms: FrozenSet[str]


@dataclass(frozen=True)
class ScoredResult:
    id: str
    slug: str
    name: str
    description: str
    price: int
    image_url: str
    rating: float
    review_count: int
    in_stock: bool
    colors: List[str]
    category: str
    score: float
    match_reasons: FrozenSet[str]

    @classmethod
    def from_candidate(
        cls,
        candidate: Candidate,
        *,
        score: float,
        match_reasons: Iterable[str],
        locale: str,
        default_locale: str,
    ) -> "ScoredResult":
        return cls(
            id=candidate.id,
            slug=candidate.slug,
            name=candidate.display_name(locale, default_locale),
            description=candidate.display_description(locale, default_locale),
            price=candidate.base_price_minor,
            image_url=candidate.image_url or "",
            rating=candidate.avg_rating,
            review_count=candidate.review_count,
            in_stock=candidate.total_stock > 0,
            colors=[color.display_label(locale, default_locale) for color in candidate.distinct_colors()],
            category=candidate.category.display_name(locale, default_locale),
            score=max(0.0, score),
            match_reasons=frozenset(match_reasons),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "slug": self.slug,
            "name": self.name,
            "description": self.description,
            "price": self.price,
            "image_url": self.image_url,
            "rating": self.rating,
            "review_count": self.review_count,
            "in_stock": self.in_stock,
            "colors": list(self.colors),
            "category": self.category,
            "score": round(self.score, 4),
            "match_reasons": sorted(self.match_reasons),
        }


def _pick(raw: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


def _parse_labels(raw: Any, value_keys: Tuple[str, ...] = ("label", "name")) -> Dict[str, str]:
    """Accept ``{"EN": "Red"}`` or ``[{"locale": "EN", "label": "Red"}]``."""
    labels: Dict[str, str] = {}
    if isinstance(raw, Mapping):
        for locale, value in raw.items():
            if value:
                labels[str(locale).upper()] = str(value)
    elif isinstance(raw, list):
        for entry in raw:
            if not isinstance(entry, Mapping):
                continue
            locale = entry.get("locale")
            value = _pick(entry, *value_keys)
            if locale and value:
                labels[str(locale).upper()] = str(value)
    return labels


def _parse_translations(raw: Any) -> Dict[str, Translation]:
    translations: Dict[str, Translation] = {}
    if isinstance(raw, Mapping):
        entries = [{"locale": locale, **value} for locale, value in raw.items() if isinstance(value, Mapping)]
    elif isinstance(raw, list):
        entries = [entry for entry in raw if isinstance(entry, Mapping)]
    else:
        entries = []
    for entry in entries:
        locale = str(entry.get("locale") or "").upper()
        if not locale:
            continue
        translations[locale] = Translation(
            locale=locale,
            name=str(entry.get("name") or ""),
            description=str(entry.get("description") or ""),
        )
    return translations


def _parse_category(raw: Any) -> CategoryRef:
    if isinstance(raw, str):
        return CategoryRef(slug=raw)
    if not isinstance(raw, Mapping):
        return CategoryRef(slug="")
    return CategoryRef(
        slug=str(raw.get("slug") or ""),
        names=_parse_labels(_pick(raw, "names", "translations", default={}), ("name", "label")),
    )


def _parse_tag(raw: Mapping[str, Any]) -> TagRef:
    return TagRef(
        type=str(raw.get("type") or "MATERIAL").upper(),
        slug=str(raw.get("slug") or ""),
        labels=_parse_labels(_pick(raw, "labels", "translations", default={})),
    )


def _parse_variant(raw: Mapping[str, Any]) -> Variant:
    size_raw = raw.get("size")
    color_raw = raw.get("color")
    size = None
    if isinstance(size_raw, Mapping) and size_raw.get("code"):
        size = SizeRef(
            code=str(size_raw["code"]),
            labels=_parse_labels(_pick(size_raw, "labels", "translations", default={})),
        )
    color = None
    if isinstance(color_raw, Mapping) and color_raw.get("code"):
        color = ColorRef(
            code=str(color_raw["code"]),
            hex=color_raw.get("hex"),
            labels=_parse_labels(_pick(color_raw, "labels", "translations", default={})),
        )
    return Variant(
        size=size,
        color=color,
        stock=int(raw.get("stock") or 0),
        is_active=bool(_pick(raw, "is_active", "isActive", default=True)),
    )


def candidate_from_mapping(raw: Mapping[str, Any]) -> Candidate:
    """Build a :class:`Candidate` from a source row (snake_case or camelCase keys)."""
    try:
        product_id = str(raw["id"])
        slug = str(raw["slug"])
    except KeyError as exc:
        raise CandidateFetchError(f"Invalid product record: missing {exc}") from exc

    return Candidate(
        id=product_id,
        slug=slug,
        category=_parse_category(raw.get("category")),
        translations=_parse_translations(raw.get("translations")),
        tags=[_parse_tag(tag) for tag in raw.get("tags") or [] if isinstance(tag, Mapping)],
        variants=[
            _parse_variant(variant)
            for variant in raw.get("variants") or []
            if isinstance(variant, Mapping)
        ],
        is_featured=bool(_pick(raw, "is_featured", "isFeatured", default=False)),
        sales_count=int(_pick(raw, "sales_count", "salesCount", default=0)),
        avg_rating=float(_pick(raw, "avg_rating", "avgRating", default=0.0)),
        review_count=int(_pick(raw, "review_count", "reviewCount", default=0)),
        base_price_minor=int(_pick(raw, "base_price_minor", "basePriceMinor", default=0)),
        image_url=_pick(raw, "image_url", "imageUrl"),
    )
