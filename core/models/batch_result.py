from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class CampaignState(str, Enum):
    PENDING = "PENDING"
    BUDGET_CREATED = "BUDGET_CREATED"
    CAMPAIGN_CREATED = "CAMPAIGN_CREATED"
    AD_GROUP_CREATED = "AD_GROUP_CREATED"
    KEYWORDS_ADDED = "KEYWORDS_ADDED"
    AD_CREATED = "AD_CREATED"
    CAMPAIGN_COMPLETE = "CAMPAIGN_COMPLETE"
    CAMPAIGN_FAILED = "CAMPAIGN_FAILED"


@dataclass(frozen=True)
class StepCount:
    attempted: int = 0
    created: int = 0

    def add(self, attempted: int, created: int) -> "StepCount":
        return StepCount(self.attempted + attempted, self.created + created)

    def to_dict(self) -> Dict[str, int]:
        return {"attempted": self.attempted, "created": self.created}


@dataclass(frozen=True)
class CampaignOutcome:
    campaign_name: str
    state: CampaignState = CampaignState.PENDING
    error: Optional[str] = None
    campaign_resource_name: Optional[str] = None
    ad_groups: StepCount = StepCount()
    keywords: StepCount = StepCount()
    ads: StepCount = StepCount()
    warnings: Tuple[str, ...] = ()

    @property
    def succeeded(self) -> bool:
        return self.state == CampaignState.CAMPAIGN_COMPLETE

    def advance(self, state: CampaignState, **changes) -> "CampaignOutcome":
        return replace(self, state=state, **changes)

    def fail(self, error: str) -> "CampaignOutcome":
        return replace(self, state=CampaignState.CAMPAIGN_FAILED, error=error)

    def warn(self, message: str) -> "CampaignOutcome":
        return replace(self, warnings=self.warnings + (message,))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "campaign": self.campaign_name,
            "status": "succeeded" if self.succeeded else "failed",
            "state": self.state.value,
            "error": self.error,
            "resource_name": self.campaign_resource_name,
            "ad_groups": self.ad_groups.to_dict(),
            "keywords": self.keywords.to_dict(),
            "ads": self.ads.to_dict(),
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class BatchResult:
    outcomes: Tuple[CampaignOutcome, ...] = field(default_factory=tuple)

    @property
    def succeeded(self) -> List[CampaignOutcome]:
        return [o for o in self.outcomes if o.succeeded]

    @property
    def failed(self) -> List[CampaignOutcome]:
        return [o for o in self.outcomes if not o.succeeded]

    def outcome_for(self, campaign_name: str) -> Optional[CampaignOutcome]:
        return next(
            (o for o in self.outcomes if o.campaign_name == campaign_name), None
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total": len(self.outcomes),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
            "campaigns": [o.to_dict() for o in self.outcomes],
        }

    def summary_lines(self) -> List[str]:
        total = len(self.outcomes)
        lines = [f"Successful: {len(self.succeeded)}/{total}"]
        for o in self.succeeded:
            lines.append(
                f"  - {o.campaign_name} "
                f"(ad groups {o.ad_groups.created}/{o.ad_groups.attempted}, "
                f"keywords {o.keywords.created}/{o.keywords.attempted}, "
                f"ads {o.ads.created}/{o.ads.attempted})"
            )
        if self.failed:
            lines.append(f"Failed: {len(self.failed)}/{total}")
            for o in self.failed:
                lines.append(f"  - {o.campaign_name}: {o.error}")
        return lines
