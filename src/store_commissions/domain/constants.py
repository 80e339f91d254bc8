from __future__ import annotations


ROLE_MANAGER = "manager"
ROLE_SELLER = "seller"
ROLE_CASHIER = "cashier"

ROLES: tuple[str, ...] = (ROLE_MANAGER, ROLE_SELLER, ROLE_CASHIER)

ROLE_LABELS: dict[str, str] = {
    ROLE_MANAGER: "Encargado",
    ROLE_SELLER: "Vendedor",
    ROLE_CASHIER: "Cajero",
}

# Metric vocabulary shared by goal sets and progress records.
METRIC_AMOUNT = "amount"
METRIC_TICKETS = "tickets"
METRIC_UNITS = "units"
METRIC_FOOTWEAR = "footwear"
METRIC_APPAREL = "apparel"
METRIC_SHIRTS = "shirts"
METRIC_ACCESSORIES = "accessories"
METRIC_SOCKS = "socks"
METRIC_CREDIT_AMOUNT = "credit_amount"
METRIC_CREDIT_UNITS = "credit_units"

STORE_METRICS: tuple[str, ...] = (
    METRIC_AMOUNT,
    METRIC_TICKETS,
    METRIC_UNITS,
    METRIC_FOOTWEAR,
    METRIC_APPAREL,
    METRIC_SHIRTS,
    METRIC_ACCESSORIES,
    METRIC_SOCKS,
    METRIC_CREDIT_AMOUNT,
    METRIC_CREDIT_UNITS,
)

SELLER_METRICS: tuple[str, ...] = (
    METRIC_AMOUNT,
    METRIC_TICKETS,
    METRIC_UNITS,
    METRIC_FOOTWEAR,
    METRIC_APPAREL,
    METRIC_SHIRTS,
    METRIC_ACCESSORIES,
    METRIC_CREDIT_AMOUNT,
    METRIC_CREDIT_UNITS,
)

CASHIER_METRICS: tuple[str, ...] = (
    METRIC_CREDIT_AMOUNT,
    METRIC_CREDIT_UNITS,
    METRIC_SOCKS,
)

METRIC_LABELS: dict[str, str] = {
    METRIC_AMOUNT: "Venta en Pesos",
    METRIC_TICKETS: "Tickets",
    METRIC_UNITS: "Unidades",
    METRIC_FOOTWEAR: "U. Calzado",
    METRIC_APPAREL: "U. Indumentaria",
    METRIC_SHIRTS: "U. Camisetas",
    METRIC_ACCESSORIES: "U. Accesorios",
    METRIC_SOCKS: "U. Medias",
    METRIC_CREDIT_AMOUNT: "$ MC Crédito",
    METRIC_CREDIT_UNITS: "U. MC Crédito",
}

MONETARY_METRICS: frozenset[str] = frozenset({METRIC_AMOUNT, METRIC_CREDIT_AMOUNT})

# Sale categories map onto the per-category unit metrics.
SALE_CATEGORY_METRICS: dict[str, str] = {
    "Calzado": METRIC_FOOTWEAR,
    "Indumentaria": METRIC_APPAREL,
    "Accesorios": METRIC_ACCESSORIES,
    "Camisetas": METRIC_SHIRTS,
    "Medias": METRIC_SOCKS,
}
SALE_CATEGORIES: tuple[str, ...] = tuple(SALE_CATEGORY_METRICS)
SALE_TYPES: tuple[str, ...] = ("Contado", "Credito Personal", "Tarjeta")

ACHIEVEMENT_CAP = 1.2
DISPLAY_CAP_PCT = 100.0

OWN_PERFORMANCE_WEIGHT = 0.7
STORE_PERFORMANCE_WEIGHT = 0.3

MANAGER_WEIGHTS: dict[str, float] = {
    METRIC_AMOUNT: 0.25,
    METRIC_FOOTWEAR: 0.22,
    METRIC_APPAREL: 0.10,
    METRIC_SHIRTS: 0.10,
    METRIC_ACCESSORIES: 0.05,
    METRIC_SOCKS: 0.03,
    METRIC_CREDIT_AMOUNT: 0.125,
    METRIC_CREDIT_UNITS: 0.125,
}

# Own-performance groups: (group key, label, absolute metric weights).
SELLER_OWN_GROUPS: tuple[tuple[str, str, dict[str, float]], ...] = (
    ("money", "Venta en Pesos", {METRIC_AMOUNT: 0.25}),
    (
        "quantities",
        "Cantidades",
        {
            METRIC_FOOTWEAR: 0.25,
            METRIC_APPAREL: 0.10,
            METRIC_SHIRTS: 0.10,
            METRIC_ACCESSORIES: 0.05,
        },
    ),
    ("credit", "Créditos MC", {METRIC_CREDIT_AMOUNT: 0.125, METRIC_CREDIT_UNITS: 0.125}),
)

# Credit sub-score is 0.5/0.5 internally and contributes 0.50; socks contribute 0.25.
# The total is 0.75, kept as defined by the store's commission rules.
CASHIER_OWN_GROUPS: tuple[tuple[str, str, dict[str, float]], ...] = (
    ("socks", "U. Medias", {METRIC_SOCKS: 0.25}),
    ("credit", "Créditos MC", {METRIC_CREDIT_AMOUNT: 0.25, METRIC_CREDIT_UNITS: 0.25}),
)

SCORE_FLOOR = 0.8
SCORE_TARGET = 1.0
SCORE_CEILING = 1.2

TIER_MANAGER = "manager"
TIER_SELLER = "seller"
TIER_SELLER_PART_TIME = "seller_part_time"
TIER_CASHIER = "cashier"

COMMISSION_TIERS: dict[str, dict[str, float]] = {
    TIER_MANAGER: {"min": 170000, "theo": 280000, "max": 384000},
    TIER_SELLER: {"min": 40000, "theo": 140000, "max": 192000},
    TIER_SELLER_PART_TIME: {"min": 20000, "theo": 70000, "max": 96000},
    TIER_CASHIER: {"min": 40000, "theo": 80000, "max": 96000},
}

TIER_LABELS: dict[str, str] = {
    TIER_MANAGER: "Encargado/a",
    TIER_SELLER: "Vendedor/a",
    TIER_SELLER_PART_TIME: "Vendedor/a 4 hs",
    TIER_CASHIER: "Cajero/a",
}

PART_TIME_MAX_HOURS = 20
DEFAULT_ASSIGNED_HOURS = 40
MAX_ASSIGNED_HOURS = 60

WORKDAY_START_HOUR = 9
WORKDAY_END_HOUR = 18
