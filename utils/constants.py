APP_NAME = "Budget Tracker"
DB_FILE = "budget_tracker.db"
DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"
UPCOMING_DAYS = 7
BACKUP_PREFIX = "budget-backup-"
DEFAULT_EMOJI = "💰"

TRANSACTION_TYPES = ["income", "expense"]

ONE_TIME = "one-time"
DAILY = "daily"
WEEKLY = "weekly"
BI_WEEKLY = "bi-weekly"
MONTHLY = "monthly"
QUARTERLY = "quarterly"
YEARLY = "yearly"

FREQUENCIES = [ONE_TIME, DAILY, WEEKLY, BI_WEEKLY, MONTHLY, QUARTERLY, YEARLY]

FREQUENCY_LABELS = {
    ONE_TIME:  "One-time",
    DAILY:     "Daily",
    WEEKLY:    "Weekly",
    BI_WEEKLY: "Bi-weekly",
    MONTHLY:   "Monthly",
    QUARTERLY: "Quarterly",
    YEARLY:    "Yearly",
}

# Spellings seen in older exports and the desktop app's vocabulary
FREQUENCY_ALIASES = {
    "biweekly":      BI_WEEKLY,
    "every-2-weeks": BI_WEEKLY,
    "once":          ONE_TIME,
    "onetime":       ONE_TIME,
    "annually":      YEARLY,
    "annual":        YEARLY,
}

# Step sizes: day-based cadences in days, month-based cadences in months
WEEK_INTERVALS = {
    WEEKLY:    7,
    BI_WEEKLY: 14,
}
MONTH_INTERVALS = {
    MONTHLY:   1,
    QUARTERLY: 3,
    YEARLY:    12,
}

DEFAULT_CATEGORIES = [
    {"value": "housing",     "label": "Rent/Mortgage",     "emoji": "🏠", "type": "expense"},
    {"value": "utilities",   "label": "Utilities",         "emoji": "🔌", "type": "expense"},
    {"value": "internet",    "label": "Internet/Cable",    "emoji": "🌐", "type": "expense"},
    {"value": "furniture",   "label": "Furniture",         "emoji": "🪑", "type": "expense"},
    {"value": "decor",       "label": "Home Decor",        "emoji": "🛋️", "type": "expense"},
    {"value": "appliances",  "label": "Appliances",        "emoji": "🧰", "type": "expense"},
    {"value": "cleaning",    "label": "Cleaning Supplies", "emoji": "🧹", "type": "expense"},
    {"value": "maintenance", "label": "Home Maintenance",  "emoji": "🛠️", "type": "expense"},
    {"value": "insurance",   "label": "Home Insurance",    "emoji": "🏡", "type": "expense"},
    {"value": "plumbing",    "label": "Plumbing",          "emoji": "🚰", "type": "expense"},
    {"value": "electrical",  "label": "Electrical",        "emoji": "⚡", "type": "expense"},
    {"value": "hvac",        "label": "HVAC",              "emoji": "❄️", "type": "expense"},
    {"value": "kitchen",     "label": "Kitchen Items",     "emoji": "🏺", "type": "expense"},
    {"value": "bathroom",    "label": "Bathroom Items",    "emoji": "🛁", "type": "expense"},
    {"value": "landscaping", "label": "Landscaping",       "emoji": "🌿", "type": "expense"},
    {"value": "storage",     "label": "Storage/Moving",    "emoji": "📦", "type": "expense"},
    {"value": "other",       "label": "Other Housing",     "emoji": "💰", "type": "expense"},
    {"value": "house",       "label": "Household Income",  "emoji": "🏠", "type": "income"},
    {"value": "salary",      "label": "Salary",            "emoji": "💼", "type": "income"},
]

CSV_FIELDS = [
    "id", "type", "name", "amount", "category", "frequency",
    "date", "emoji", "created_at", "updated_at",
]

# Keys used by the browser build before transactions moved to a database
LEGACY_STORAGE_KEYS = {
    "expense": ("budget-tracker-expenses", "dueDate"),
    "income":  ("budget-tracker-income", "receiveDate"),
}
