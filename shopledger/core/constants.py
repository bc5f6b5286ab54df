from decimal import Decimal


ENTRY_TYPES = ("manual", "auto")
USER_ROLES = ("owner", "staff")

MAX_OWNERS = 2
MAX_SHARE_PERCENTAGE = Decimal("100")

# Fixed slice of net profit set aside before partner distribution
DONATION_RATE = Decimal("0.02")

PRODUCT_COST_CATEGORY = "product_cost"
LOW_STOCK_THRESHOLD = 10

STATS_PERIODS = ("monthly", "quarterly", "yearly")
