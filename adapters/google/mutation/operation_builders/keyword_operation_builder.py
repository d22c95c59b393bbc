from typing import List, Dict, Any, Sequence
from core.models.provisioning import KeywordSpec
from adapters.google.mutation.mutation_validator import MutationValidator
from exceptions.custom_exceptions import BusinessValidationException
import structlog

logger = structlog.get_logger(__name__)


class KeywordOperationBuilder:
    def __init__(self):
        self.validator = MutationValidator()

    def build_keywords_ops(
        self,
        ad_group_resource_name: str,
        keywords: Sequence[KeywordSpec],
    ) -> List[Dict[str, Any]]:
        """One create operation per keyword; any invalid keyword rejects the batch."""
        operations = []
        errors = []
        for keyword in keywords:
            error = self.validator.validate_keyword(keyword=keyword)
            if error:
                logger.error(
                    "Keyword validation failed",
                    error=error,
                    text=keyword.text,
                    match_type=keyword.match_type,
                )
                errors.append({"text": keyword.text, "error": error})
                continue

            criterion = {
                "adGroup": ad_group_resource_name,
                "status": "ENABLED",
                "keyword": {
                    "text": keyword.text.strip(),
                    "matchType": keyword.match_type.value,
                },
            }
            if keyword.final_url:
                criterion["finalUrls"] = [keyword.final_url]
            operations.append({"create": criterion})

        if errors:
            raise BusinessValidationException(
                f"{len(errors)} of {len(keywords)} keywords failed validation",
                details={"errors": errors},
            )

        logger.info("keyword_operations_built", count=len(operations))
        return operations
