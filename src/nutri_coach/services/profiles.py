"""Profile and meal template management."""

from dataclasses import dataclass, replace
from uuid import UUID, uuid4

from nutri_coach.domain.meals import FoodItem, QualityScore
from nutri_coach.domain.models import UserData
from nutri_coach.domain.profile import MealTemplate, Theme, UserProfile
from nutri_coach.services.meals import ProfileRequiredError
from nutri_coach.services.nutrition import ProfileInput, build_profile, update_profile
from nutri_coach.services.user_data import UserDataStore


class TemplateNotFoundError(Exception):
    """Raised when a template id is not in the user's profile."""


@dataclass
class ProfileService:
    """Service for onboarding, profile edits and saved templates."""

    store: UserDataStore
    default_timezone: str = "UTC"

    def get_profile(self, user_id: UUID) -> UserProfile | None:
        """Return the user's profile, if onboarding is complete."""
        return self.store.get(user_id).profile

    def complete_onboarding(
        self, user_id: UUID, data: ProfileInput, timezone: str | None = None
    ) -> UserProfile:
        """Create the profile from onboarding answers."""
        profile = replace(
            build_profile(user_id, data), timezone=timezone or self.default_timezone
        )
        self._save_profile(user_id, profile)
        return profile

    def edit_profile(self, user_id: UUID, **changes: object) -> UserProfile:
        """Apply edits; biometric changes refresh the derived targets."""
        profile = update_profile(self._require_profile(user_id), **changes)
        self._save_profile(user_id, profile)
        return profile

    def toggle_theme(self, user_id: UUID) -> UserProfile:
        """Switch between the light and dark themes."""
        profile = self._require_profile(user_id)
        theme = Theme.DARK if profile.theme == Theme.LIGHT else Theme.LIGHT
        return self.edit_profile(user_id, theme=theme)

    def add_template(
        self,
        user_id: UUID,
        name: str,
        items: list[FoodItem],
        quality_score: QualityScore,
    ) -> MealTemplate:
        """Save a named template with precomputed totals."""
        profile = self._require_profile(user_id)
        template = MealTemplate(
            id=uuid4(),
            name=name,
            items=list(items),
            total_calories=sum(item.calories for item in items),
            total_protein_g=sum(item.protein_g for item in items),
            total_carbs_g=sum(item.carbs_g for item in items),
            total_fat_g=sum(item.fat_g for item in items),
            quality_score=quality_score,
        )
        self._save_profile(
            user_id,
            replace(profile, saved_templates=[*profile.saved_templates, template]),
        )
        return template

    def rename_template(
        self, user_id: UUID, template_id: UUID, name: str
    ) -> MealTemplate:
        """Rename a saved template."""
        profile = self._require_profile(user_id)
        renamed: MealTemplate | None = None
        templates = []
        for template in profile.saved_templates:
            if template.id == template_id:
                renamed = replace(template, name=name)
                templates.append(renamed)
            else:
                templates.append(template)
        if renamed is None:
            raise TemplateNotFoundError(str(template_id))
        self._save_profile(user_id, replace(profile, saved_templates=templates))
        return renamed

    def delete_template(self, user_id: UUID, template_id: UUID) -> None:
        """Remove a saved template."""
        profile = self._require_profile(user_id)
        templates = [t for t in profile.saved_templates if t.id != template_id]
        if len(templates) == len(profile.saved_templates):
            raise TemplateNotFoundError(str(template_id))
        self._save_profile(user_id, replace(profile, saved_templates=templates))

    def _require_profile(self, user_id: UUID) -> UserProfile:
        profile = self.store.get(user_id).profile
        if profile is None:
            raise ProfileRequiredError("Complete onboarding first")
        return profile

    def _save_profile(self, user_id: UUID, profile: UserProfile) -> None:
        data = self.store.get(user_id)
        self.store.update(user_id, UserData(profile=profile, logs=data.logs))
