"""
Icon catalog for budgets and transactions.
Icon names are Feather glyph names rendered by the mobile client.
"""

from typing import Dict, List, NamedTuple, Optional
from enum import Enum


class IconCategory(str, Enum):
    """Groups shown in the icon picker"""
    FOOD = "food"
    TRANSPORT = "transport"
    HOME = "home"
    SHOPPING = "shopping"
    ENTERTAINMENT = "entertainment"
    FINANCE = "finance"
    HEALTH = "health"
    TRAVEL = "travel"
    TECH = "tech"
    PERSONAL = "personal"
    EDUCATION = "education"
    PETS = "pets"
    OTHER = "other"


class BudgetIcon(NamedTuple):
    id: str
    name: str
    label: str
    category: IconCategory


def _icons(category: IconCategory, *entries) -> List[BudgetIcon]:
    return [BudgetIcon(icon_id, icon_id, label, category) for icon_id, label in entries]


ICONS: List[BudgetIcon] = [
    *_icons(IconCategory.FOOD,
            ("coffee", "Coffee"), ("shopping-cart", "Groceries"), ("box", "Takeout")),
    *_icons(IconCategory.SHOPPING,
            ("shopping-bag", "Shopping Bag"), ("gift", "Gifts")),
    *_icons(IconCategory.TRANSPORT,
            ("truck", "Car / Vehicle"), ("navigation", "Navigation"), ("map", "Map"),
            ("map-pin", "Location"), ("compass", "Compass")),
    *_icons(IconCategory.HOME,
            ("home", "Home"), ("zap", "Electricity"), ("wifi", "Internet"),
            ("droplet", "Water"), ("tool", "Maintenance")),
    *_icons(IconCategory.FINANCE,
            ("credit-card", "Credit Card"), ("dollar-sign", "Money"), ("trending-up", "Investments"),
            ("save", "Savings"), ("percent", "Interest"), ("file-text", "Bills")),
    *_icons(IconCategory.ENTERTAINMENT,
            ("film", "Movies"), ("music", "Music"), ("headphones", "Audio"),
            ("play", "Games"), ("tv", "TV")),
    *_icons(IconCategory.HEALTH,
            ("heart", "Health"), ("activity", "Fitness"), ("thermometer", "Medical"),
            ("smile", "Wellbeing")),
    *_icons(IconCategory.TRAVEL,
            ("briefcase", "Travel / Work"), ("airplay", "Flights"), ("sun", "Vacation"),
            ("moon", "Overnight"), ("car", "Taxi")),
    *_icons(IconCategory.EDUCATION,
            ("book", "Books"), ("edit", "Writing"), ("clipboard", "Tasks"), ("calendar", "Calendar")),
    *_icons(IconCategory.TECH,
            ("smartphone", "Phone"), ("tablet", "Tablet"), ("cpu", "Hardware")),
    *_icons(IconCategory.PERSONAL,
            ("user", "Personal"), ("users", "Family"), ("lock", "Security"),
            ("key", "Keys"), ("watch", "Watch")),
    *_icons(IconCategory.OTHER,
            ("bell", "Alerts"), ("star", "Favorites"), ("flag", "Goals"),
            ("archive", "Archive"), ("more-horizontal", "More")),
]

ICONS_BY_ID: Dict[str, BudgetIcon] = {icon.id: icon for icon in ICONS}

DEFAULT_ICON_ID = "more-horizontal"

# Categories used by the transaction seeder, mapped to their icon
SEED_CATEGORIES: List[Dict[str, str]] = [
    {"name": "Food", "icon": "coffee"},
    {"name": "Transport", "icon": "car"},
    {"name": "Entertainment", "icon": "film"},
    {"name": "Shopping", "icon": "shopping-bag"},
    {"name": "Bills", "icon": "file-text"},
    {"name": "Healthcare", "icon": "heart"},
    {"name": "Education", "icon": "book"},
    {"name": "Groceries", "icon": "shopping-cart"},
]


def get_icon(icon_id: Optional[str]) -> BudgetIcon:
    """Look up an icon, falling back to the generic one for unknown ids."""
    return ICONS_BY_ID.get(icon_id or "", ICONS_BY_ID[DEFAULT_ICON_ID])


def get_icons_by_category(category: IconCategory) -> List[BudgetIcon]:
    return [icon for icon in ICONS if icon.category == category]
