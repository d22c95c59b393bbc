import structlog
from typing import List, Optional
from urllib.parse import urlparse

from adapters.google.mutation.mutation_config import CONFIG
from core.models.provisioning import AdCopySet, KeywordSpec
from exceptions.custom_exceptions import BusinessValidationException

logger = structlog.get_logger(__name__)


class MutationValidator:
    """Centralized validator for Google Ads mutation business rules."""

    # URL VALIDATION
    @staticmethod
    def validate_url(url: Optional[str], field_name: str = "Final URL") -> Optional[str]:
        if not url or not url.strip():
            return f"{field_name} is required"
        if len(url) > CONFIG.URL_MAX_LENGTH:
            return f"{field_name} too long ({len(url)} > {CONFIG.URL_MAX_LENGTH})"
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            return f"{field_name} must be an absolute http(s) URL: '{url}'"
        return None

    # RESPONSIVE SEARCH AD VALIDATION
    @staticmethod
    def validate_ad_copy(ad_copy: AdCopySet) -> List[str]:
        """Check headline/description counts and lengths plus display paths."""
        errors = []

        headlines = CONFIG.HEADLINES
        if not headlines.MIN_COUNT <= len(ad_copy.headlines) <= headlines.MAX_COUNT:
            errors.append(
                f"Need {headlines.MIN_COUNT}-{headlines.MAX_COUNT} headlines, got {len(ad_copy.headlines)}"
            )
        for text in ad_copy.headlines:
            if len(text) > headlines.MAX_LENGTH:
                errors.append(f"Headline too long ({len(text)} > {headlines.MAX_LENGTH}): '{text}'")

        descriptions = CONFIG.DESCRIPTIONS
        if not descriptions.MIN_COUNT <= len(ad_copy.descriptions) <= descriptions.MAX_COUNT:
            errors.append(
                f"Need {descriptions.MIN_COUNT}-{descriptions.MAX_COUNT} descriptions, got {len(ad_copy.descriptions)}"
            )
        for text in ad_copy.descriptions:
            if len(text) > descriptions.MAX_LENGTH:
                errors.append(
                    f"Description too long ({len(text)} > {descriptions.MAX_LENGTH}): '{text}'"
                )

        for name, path in (("path1", ad_copy.path1), ("path2", ad_copy.path2)):
            if path and len(path) > CONFIG.PATHS.MAX_LENGTH:
                errors.append(f"{name} too long ({len(path)} > {CONFIG.PATHS.MAX_LENGTH})")

        return errors

    # KEYWORD VALIDATION
    @staticmethod
    def validate_keyword(keyword: KeywordSpec) -> Optional[str]:
        """Validate keyword text and match type."""
        text = (keyword.text or "").strip()
        if not text:
            return "Keyword text is required"

        limit = CONFIG.KEYWORDS.MAX_LENGTH
        if len(text) > limit:
            return f"Keyword text too long ({len(text)} > {limit})"

        match_type = getattr(keyword.match_type, "value", keyword.match_type)
        if not match_type or str(match_type).upper() not in CONFIG.KEYWORDS.VALID_MATCH_TYPES:
            return (
                f"Invalid match type: '{match_type}'. "
                f"Must be one of: {', '.join(sorted(CONFIG.KEYWORDS.VALID_MATCH_TYPES))}"
            )

        if keyword.final_url:
            return MutationValidator.validate_url(keyword.final_url, "Keyword final URL")
        return None

    @staticmethod
    def ensure_valid_ad(ad_copy: AdCopySet, final_url: str) -> None:
        """Raise BusinessValidationException if the ad cannot be submitted."""
        errors = MutationValidator.validate_ad_copy(ad_copy)
        url_error = MutationValidator.validate_url(final_url)
        if url_error:
            errors.append(url_error)
        if errors:
            logger.error("Responsive search ad validation failed", errors=errors)
            raise BusinessValidationException(
                "Responsive search ad failed validation",
                details={"errors": errors},
            )
