APP_NAME = "FinTrack"
APP_WIDTH = 1200
APP_HEIGHT = 760
DB_FILE = "fintrack.db"

DATE_FORMAT = "%Y-%m-%d"
MONTH_FORMAT = "%Y-%m"

RECENT_TRANSACTION_COUNT = 5
TRAILING_MONTHS = 6
MIN_PASSWORD_LENGTH = 6

DEFAULT_CATEGORIES = {
    "income":  ["Salary", "Freelance", "Investment", "Gift", "Other"],
    "expense": ["Food", "Transportation", "Entertainment", "Shopping", "Bills", "Healthcare", "Other"],
}

TYPE_COLORS = {
    "income":  "#4CAF50",
    "expense": "#F44336",
}

CHART_COLORS = ["#3B82F6", "#10B981", "#F59E0B", "#EF4444", "#8B5CF6", "#06B6D4"]

SEVERITY_COLORS = {
    "error":   "#F44336",
    "warning": "#FF9800",
    "info":    "#2196F3",
}

TRANSACTION_FILTERS = ["all", "income", "expense"]
TRANSACTION_SORTS = ["date", "amount"]
