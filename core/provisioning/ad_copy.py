"""Responsive search ad copy for provisioned ad groups.

Location campaigns get copy built from the ad group's "<location> — <care type>"
name. Brand campaigns get one company-wide set. Every string is cut to the
platform cap before it leaves this module.
"""

import re
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from core.models.provisioning import (
    DESCRIPTION_MAX_COUNT,
    DESCRIPTION_MAX_LENGTH,
    HEADLINE_MAX_COUNT,
    HEADLINE_MAX_LENGTH,
    PATH_MAX_LENGTH,
    AdCopySet,
    CampaignKind,
)

ELLIPSIS = "..."
AD_GROUP_NAME_SEPARATOR = " — "
DEFAULT_CATEGORY = "Senior Living"

_NON_ALPHANUMERIC = re.compile(r"[^a-zA-Z0-9]")


def truncate_to_limit(text: str, limit: int) -> str:
    """Return ``text`` unchanged if it fits, else cut to ``limit`` with an ellipsis."""
    if len(text) <= limit:
        return text
    return text[: limit - len(ELLIPSIS)] + ELLIPSIS


@dataclass(frozen=True)
class AdCopyProfile:
    company_name: str = "Stage Senior"
    phone: str = "(303) 436-2300"
    region: str = "Colorado"
    communities: Tuple[str, ...] = (
        "Gardens at Columbine",
        "Gardens on Quail",
        "Golden Pond",
        "Stonebridge Senior",
    )


@dataclass(frozen=True)
class AdGroupIdentity:
    location: str
    category: str

    @classmethod
    def from_ad_group_name(cls, name: str) -> "AdGroupIdentity":
        location, _, category = (name or "").partition(AD_GROUP_NAME_SEPARATOR)
        return cls(
            location=location.strip(),
            category=category.strip() or DEFAULT_CATEGORY,
        )


def display_paths(identity: AdGroupIdentity) -> Tuple[str, str]:
    """Display URL segments: care type first, then location."""
    path1 = _NON_ALPHANUMERIC.sub("", identity.category[:PATH_MAX_LENGTH])
    path2 = _NON_ALPHANUMERIC.sub("", identity.location[:PATH_MAX_LENGTH])
    if not path1:
        path1, path2 = path2, ""
    return path1, path2


@dataclass(frozen=True)
class LocationAdCopyGenerator:
    profile: AdCopyProfile = field(default_factory=AdCopyProfile)

    def headlines(self, identity: AdGroupIdentity, destination_url: str) -> List[str]:
        location, category = identity.location, identity.category
        candidates = [
            f"{category} in {location}",
            f"Quality {category}",
            f"{category} Near You",
            f"{location} Senior Living",
            f"Serving {location} Families",
            "Schedule Your Tour Today",
            f"Call {self.profile.phone}",
            f"Visit Us in {location}",
            "Compassionate Care 24/7",
            f"Beautiful {location} Community",
            "Personalized Care Plans",
            "Trusted Local Care",
            "Affordable Care Options",
            "Tour Our Community",
            "Family-Centered Care",
        ]
        return [truncate_to_limit(text, HEADLINE_MAX_LENGTH) for text in candidates]

    def descriptions(self, identity: AdGroupIdentity, destination_url: str) -> List[str]:
        location, category = identity.location, identity.category.lower()
        candidates = [
            f"Personalized {category} in {location} with caring 24/7 staff.",
            f"Our {location} community offers compassionate care and dining. Tour today!",
            f"Call {self.profile.phone} to tour our {location} {category} community.",
            f"{location} senior living with quality care, nutritious meals and activities.",
        ]
        return [truncate_to_limit(text, DESCRIPTION_MAX_LENGTH) for text in candidates]


@dataclass(frozen=True)
class BrandAdCopyGenerator:
    profile: AdCopyProfile = field(default_factory=AdCopyProfile)

    def headlines(self, identity: AdGroupIdentity, destination_url: str) -> List[str]:
        company, region = self.profile.company_name, self.profile.region
        candidates = [
            f"{company} Senior Living",
            f"{region} Senior Living",
            "Trusted Senior Care",
            "Local Senior Living Experts",
            f"{company} Communities",
            f"Quality Senior Care {region}",
            "Family-Owned Senior Care",
            "Compassionate Senior Living",
            f"{company} - Local Care",
            "Award-Winning Senior Care",
            f"Call {self.profile.phone}",
            "Schedule Community Tour",
            "Find Your Community",
            f"{region}'s Trusted Care",
            f"{company} Services",
        ]
        candidates.extend(self.profile.communities)
        return [truncate_to_limit(text, HEADLINE_MAX_LENGTH) for text in candidates]

    def descriptions(self, identity: AdGroupIdentity, destination_url: str) -> List[str]:
        company, region = self.profile.company_name, self.profile.region
        candidates = [
            f"{region}-based senior living: assisted living, memory care and independent living.",
            "Locally-owned senior care with 24/7 professional staff and a family-centered approach.",
            f"{company} provides compassionate care in {region}. Schedule a tour today.",
            f"Call {self.profile.phone} to tour our {region} senior communities today.",
        ]
        return [truncate_to_limit(text, DESCRIPTION_MAX_LENGTH) for text in candidates]


def build_ad_copy(
    kind: CampaignKind,
    ad_group_name: str,
    destination_url: str,
    profile: AdCopyProfile = AdCopyProfile(),
) -> AdCopySet:
    """Pick the generator for ``kind`` and cut its output to the RSA maximums.

    Raises ``AdCopyValidationException`` if the result still breaks a limit.
    """
    identity = AdGroupIdentity.from_ad_group_name(ad_group_name)
    if kind == CampaignKind.BRAND:
        generator = BrandAdCopyGenerator(profile)
    else:
        generator = LocationAdCopyGenerator(profile)

    headlines = _unique(generator.headlines(identity, destination_url))
    descriptions = _unique(generator.descriptions(identity, destination_url))
    path1, path2 = display_paths(identity)
    return AdCopySet(
        headlines=tuple(headlines[:HEADLINE_MAX_COUNT]),
        descriptions=tuple(descriptions[:DESCRIPTION_MAX_COUNT]),
        path1=path1,
        path2=path2,
    )


def _unique(texts: Sequence[str]) -> List[str]:
    seen = set()
    unique = []
    for text in texts:
        key = text.lower()
        if text and key not in seen:
            seen.add(key)
            unique.append(text)
    return unique
