"""Tag-based style matching with fallback tiers and pagination.

Catalog tags are free text in mixed languages, so analysis labels are expanded
into synonym sets and compared by case-insensitive substring containment. This
tolerates compound tags such as a face shape combined with an occasion.
"""

from makeup_studio.domain.analysis import FaceAnalysis
from makeup_studio.domain.styles import MatchTier, StyleEntry, StyleMatch

PAGE_SIZE = 2

# Analysis label -> accepted tag surface forms. Kept verbatim, asymmetries
# included (e.g. "Warm" accepts "Medium" but "Medium" does not accept "Warm").
TAG_SYNONYMS: dict[str, tuple[str, ...]] = {
    # Face shapes
    "Oval": ("鹅蛋脸", "椭圆脸", "Oval"),
    "Round": ("圆脸", "圆形脸", "Round"),
    "Square": ("方脸", "方形脸", "国字脸", "Square"),
    "Heart": ("心形脸", "倒三角", "Heart"),
    "Long": ("长脸", "Long"),
    "Diamond": ("菱形脸", "钻石脸", "Diamond"),
    # Skin tones
    "Fair": ("白皙", "冷白", "Light", "Fair"),
    "Light": ("白皙", "自然偏白", "Light", "Fair"),
    "Medium": ("自然色", "黄皮", "Medium", "Natural"),
    "Tan": ("小麦色", "健康色", "Tan", "Deep"),
    "Deep": ("黑皮", "深肤色", "Deep"),
    "Warm": ("暖皮", "黄皮", "Warm", "Medium"),
    "Cool": ("冷皮", "粉调", "Cool", "Light"),
    "Neutral": ("自然色", "中性皮", "Neutral", "Medium"),
    # Eye shapes
    "Almond": ("杏眼", "Almond", "DoubleMonolid"),
    "Round Eyes": ("圆眼", "Round"),
    "Monolid": ("单眼皮", "Monolid"),
    "Hooded": ("内双", "肿眼泡", "Hooded", "InnerDouble"),
}

_UNSPLASH = "https://images.unsplash.com"
_UNSPLASH_QUERY = "?q=80&w=600&auto=format&fit=crop"

FALLBACK_STYLES: tuple[StyleEntry, ...] = (
    StyleEntry(
        id="1",
        name="Peach Fuzz",
        image_url=f"{_UNSPLASH}/photo-1512413914633-b5043f4041ea{_UNSPLASH_QUERY}",
        tags=("鹅蛋脸", "Oval", "Warm", "Almond"),
        description="Soft peach tones for daily wear.",
    ),
    StyleEntry(
        id="2",
        name="Vintage Red",
        image_url=f"{_UNSPLASH}/photo-1526045612212-70caf35c14df{_UNSPLASH_QUERY}",
        tags=("圆脸", "Round", "Fair", "Classic"),
        description="Timeless red lip with subtle eyes.",
    ),
    StyleEntry(
        id="3",
        name="Smokey Glam",
        image_url=f"{_UNSPLASH}/photo-1487412720507-e7ab37603c6f{_UNSPLASH_QUERY}",
        tags=("方脸", "Square", "Cool", "Hooded"),
        description="Intense eye drama.",
    ),
    StyleEntry(
        id="4",
        name="Nude Glow",
        image_url=f"{_UNSPLASH}/photo-1506956191951-7a88da4435e5{_UNSPLASH_QUERY}",
        tags=("菱形脸", "Diamond", "Medium", "Monolid"),
        description="Sun-kissed natural radiance.",
    ),
)


def synonyms(label: str) -> tuple[str, ...]:
    """Return the accepted tag forms for an analysis label."""
    return TAG_SYNONYMS.get(label, (label,))


def tag_contains(tag: str, keyword: str) -> bool:
    """Return True when the tag contains the keyword, ignoring case."""
    return keyword.casefold() in tag.casefold()


def matches_any(style: StyleEntry, keywords: tuple[str, ...]) -> bool:
    """Return True when any tag of the style contains any keyword."""
    return any(tag_contains(tag, k) for tag in style.tags for k in keywords)


def match_styles(analysis: FaceAnalysis, catalog: list[StyleEntry]) -> StyleMatch:
    """Filter the catalog by face shape and skin tone, relaxing as needed."""
    if not catalog:
        return StyleMatch(tier=MatchTier.NONE, styles=list(FALLBACK_STYLES))

    face_keywords = synonyms(analysis.face_shape)
    skin_keywords = synonyms(analysis.skin_tone)

    strict = [
        style
        for style in catalog
        if matches_any(style, face_keywords) and matches_any(style, skin_keywords)
    ]
    if strict:
        return StyleMatch(tier=MatchTier.STRICT, styles=strict)

    relaxed = [style for style in catalog if matches_any(style, face_keywords)]
    if relaxed:
        return StyleMatch(tier=MatchTier.RELAXED, styles=relaxed)

    return StyleMatch(tier=MatchTier.NONE, styles=list(catalog))


def highlight_tags(
    style: StyleEntry, analysis: FaceAnalysis, limit: int = 3
) -> list[str]:
    """Return the style's tags that matched the face shape or skin tone."""
    keywords = synonyms(analysis.face_shape) + synonyms(analysis.skin_tone)
    matched = [tag for tag in style.tags if any(tag_contains(tag, k) for k in keywords)]
    return matched[:limit]


def next_cursor(cursor: int, total: int) -> int:
    """Advance the page cursor, wrapping to the start past the end."""
    if total <= 0:
        return 0
    advanced = cursor + PAGE_SIZE
    return 0 if advanced >= total else advanced


def page(styles: list[StyleEntry], cursor: int) -> list[StyleEntry]:
    """Return the page at cursor, padded with the first style when short."""
    batch = styles[cursor : cursor + PAGE_SIZE]
    if len(batch) == 1 and len(styles) > 1:
        batch.append(styles[0])
    return batch
