"""Business context domain service."""

from typing import Iterable, Optional

from costwise.database.base import Database
from costwise.domain.entities import GENERAL_CATEGORY, BusinessProfile
from costwise.domain.errors import ValidationError


def _clean_names(values: Optional[Iterable[str]]) -> tuple[str, ...]:
    """Strip, drop blanks and de-duplicate while preserving order."""
    seen: list[str] = []
    for value in values or ():
        name = value.strip()
        if name and name not in seen:
            seen.append(name)
    return tuple(seen)


class BusinessContextService:
    """Service for resolving the business profile used by classification."""

    def __init__(self, db: Database):
        """Initialize business context service.

        Args:
            db: Database instance
        """
        self.db = db

    def get_profile(self) -> Optional[BusinessProfile]:
        """Get the stored business profile, or None if onboarding never ran."""
        return self.db.get_business_profile()

    def business_category(self) -> str:
        """Get the profile category, falling back to the wildcard category."""
        profile = self.get_profile()
        if profile is None or not profile.category:
            return GENERAL_CATEGORY
        return profile.category

    def save_profile(
        self,
        category: str,
        business_model: str = "",
        core_activities: Optional[Iterable[str]] = None,
        revenue_streams: Optional[Iterable[str]] = None,
        cost_centers: Optional[Iterable[str]] = None,
        size_scale: Optional[str] = None,
        revenue_range: Optional[str] = None,
    ) -> BusinessProfile:
        """Create or replace the business profile.

        Args:
            category: Business category (e.g., "Manufacturing")
            business_model: Free-text business model
            core_activities: Core activity names
            revenue_streams: Revenue stream names
            cost_centers: Cost center names
            size_scale: Optional size descriptor
            revenue_range: Optional revenue band

        Returns:
            The saved profile

        Raises:
            ValidationError: If category is empty
        """
        if category is None or not category.strip():
            raise ValidationError("Business category is required")

        profile = BusinessProfile(
            category=category.strip(),
            business_model=(business_model or "").strip(),
            core_activities=_clean_names(core_activities),
            revenue_streams=_clean_names(revenue_streams),
            cost_centers=_clean_names(cost_centers),
            size_scale=size_scale,
            revenue_range=revenue_range,
        )
        self.db.save_business_profile(profile)
        return profile
