"""
Centralized Constants - SINGLE SOURCE OF TRUTH

Marketplace names, goal vocabularies, and display constants used across
services and routes. DO NOT duplicate these definitions in other files.
"""

# =============================================================================
# MARKETPLACES
# =============================================================================

PLATFORM_SHOPEE = 'Shopee'
PLATFORM_TIKTOK = 'TikTok'
PLATFORM_LAZADA = 'Lazada'

# Display/slot order for platform cards
PLATFORM_SLOTS = [PLATFORM_SHOPEE, PLATFORM_TIKTOK, PLATFORM_LAZADA]

# Wire sentinel for "every platform"
PLATFORM_ALL = 'all'

# Lowercased, space-free label -> canonical name
PLATFORM_ALIASES = {
    'shopee': PLATFORM_SHOPEE,
    'tiktok': PLATFORM_TIKTOK,
    'tiktokshop': PLATFORM_TIKTOK,
    'lazada': PLATFORM_LAZADA,
}


def normalize_platform_label(label):
    """
    Map a raw platform label to its canonical name.

    Matching is case-insensitive and ignores whitespace, so 'tik tok',
    'TIKTOK' and 'TikTok Shop' all resolve to 'TikTok'.

    Returns:
        Canonical platform name, or None if the label is not recognized
    """
    if label is None:
        return None
    key = ''.join(str(label).split()).lower()
    return PLATFORM_ALIASES.get(key)


# =============================================================================
# GOALS
# =============================================================================

GOAL_TYPE_REVENUE = 'revenue'
GOAL_TYPE_PROFIT = 'profit'

# Display clamp for progress percentages. Values between 100 and 999 are
# over-achievement and must stay distinguishable from exactly 100.
GOAL_PERCENT_CEILING = 999

# =============================================================================
# DATE BASIS
# =============================================================================

DATE_BASIS_ORDER = 'order'
DATE_BASIS_PAYMENT = 'payment'
DATE_BASES = [DATE_BASIS_ORDER, DATE_BASIS_PAYMENT]

# =============================================================================
# TOP ENTITIES
# =============================================================================

TOP_ENTITY_LIMIT = 5

# Province label the rollup emits for rows without a resolvable province
UNKNOWN_PROVINCE = 'ไม่ระบุจังหวัด'

# Product label fallback when a rollup row has no name
UNKNOWN_PRODUCT = 'ไม่ระบุสินค้า'

# =============================================================================
# MONTH LABELS
# =============================================================================

THAI_MONTHS = [
    'มกราคม', 'กุมภาพันธ์', 'มีนาคม', 'เมษายน', 'พฤษภาคม', 'มิถุนายน',
    'กรกฎาคม', 'สิงหาคม', 'กันยายน', 'ตุลาคม', 'พฤศจิกายน', 'ธันวาคม',
]

THAI_MONTHS_SHORT = [
    'ม.ค.', 'ก.พ.', 'มี.ค.', 'เม.ย.', 'พ.ค.', 'มิ.ย.',
    'ก.ค.', 'ส.ค.', 'ก.ย.', 'ต.ค.', 'พ.ย.', 'ธ.ค.',
]

# Thai Buddhist calendar offset
BUDDHIST_YEAR_OFFSET = 543


def format_month_label(month_key: str) -> str:
    """
    Format a YYYY-MM key as a Thai month label, e.g. '2025-02' -> 'กุมภาพันธ์ 2568'.

    Unparseable keys are returned unchanged.
    """
    try:
        year_str, month_str = month_key.split('-')
        year = int(year_str)
        month_idx = int(month_str) - 1
    except (ValueError, AttributeError):
        return month_key
    if not 0 <= month_idx < 12:
        return month_key
    return f"{THAI_MONTHS[month_idx]} {year + BUDDHIST_YEAR_OFFSET}"


# =============================================================================
# USER-FACING ERROR MESSAGES
# =============================================================================

MSG_TOP_FETCH_FAILED = 'เกิดข้อผิดพลาดในการดึงข้อมูล'
MSG_PRODUCTS_FAILED = 'ไม่สามารถดึงข้อมูลยอดขายสินค้าได้'
MSG_PROVINCES_FAILED = 'ไม่สามารถดึงข้อมูลยอดขายรายจังหวัดได้'
MSG_GOALS_FETCH_FAILED = 'ไม่สามารถดึงข้อมูลเป้าหมายได้'
MSG_GOALS_SAVE_FAILED = 'บันทึกเป้าหมายไม่สำเร็จ'
