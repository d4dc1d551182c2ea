# utils/comment_constants.py
"""
Static tables for historical comments: topic keywords,
default source credibility and the allowed platform/source type values.
"""

# Topic keywords (Hebrew and English).
# Primary keywords indicate the topic on their own, secondary ones only support it.
RECRUITMENT_LAW_KEYWORDS = {
    "primary": (
        "חוק גיוס",
        "חוק הגיוס",
        "recruitment law",
        "draft law",
        "גיוס חרדים",
        "haredi draft",
    ),
    "secondary": (
        "שירות צבאי",
        'צה"ל',
        "IDF",
        "military service",
    ),
}

# Source credibility (1-10 scale)
SOURCE_CREDIBILITY = {
    "Knesset": 10,
    "Interview": 8,
    "News": 7,
    "YouTube": 6,
    "Twitter": 5,
    "Facebook": 4,
}

DEFAULT_CREDIBILITY = 5

COMMENT_PLATFORMS = (
    "News",
    "Twitter",
    "Facebook",
    "YouTube",
    "Knesset",
    "Interview",
    "Other",
)

SOURCE_TYPES = ("Primary", "Secondary")


def default_credibility(platform: str) -> int:
    return SOURCE_CREDIBILITY.get(platform, DEFAULT_CREDIBILITY)
