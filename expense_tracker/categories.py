# expense_tracker/categories.py
import enum


class Category(str, enum.Enum):
    """The seven fixed spending buckets tracked per day, in display order."""
    MORNING_TEA = "morning_tea"
    MORNING_BREAKFAST = "morning_breakfast"
    LUNCH = "lunch"
    AFTERNOON_TEA = "afternoon_tea"
    AFTERNOON_BREAKFAST = "afternoon_breakfast"
    DINNER = "dinner"
    EXTRA = "extra"

    @property
    def label(self) -> str:
        return self.value.replace("_", " ").title()


CATEGORIES = tuple(Category)
CATEGORY_FIELDS = tuple(c.value for c in CATEGORIES)
