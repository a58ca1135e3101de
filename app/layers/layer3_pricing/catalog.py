"""
가격 카탈로그(Pricing Catalog) 모듈입니다.

프로젝트 유형별 티어(good / better / best), 추가 기능, 유지보수 플랜을 보관합니다.
카탈로그는 로드 후 변경되지 않으며 계산기에 주입됩니다.
"""

import logging
from decimal import Decimal
from functools import lru_cache
from typing import Iterable, Optional

from app.exceptions import CatalogIntegrityError, NotFoundError
from app.models import FeatureCatalogEntry, MaintenancePlanOption, TierDefinition
from app.utils import normalize_project_type

logger = logging.getLogger(__name__)

FALLBACK_PROJECT_TYPE = "other"
TIER_LEVELS = ("good", "better", "best")


class PricingCatalog:
    """티어/기능/유지보수 플랜 조회용 불변 카탈로그."""

    def __init__(
        self,
        tiers: Iterable[TierDefinition],
        features: Iterable[FeatureCatalogEntry],
        maintenance_plans: Iterable[MaintenancePlanOption],
    ):
        self._tiers: dict[str, TierDefinition] = {}
        self._tiers_by_type: dict[str, list[TierDefinition]] = {}
        for tier in tiers:
            if tier.id in self._tiers:
                raise CatalogIntegrityError(f"중복된 티어 ID: {tier.id}")
            if tier.price_min > tier.price_max:
                raise CatalogIntegrityError(
                    f"티어 가격 범위가 올바르지 않습니다: {tier.id}",
                    details={"price_min": str(tier.price_min), "price_max": str(tier.price_max)},
                )
            self._tiers[tier.id] = tier
            self._tiers_by_type.setdefault(tier.project_type, []).append(tier)

        # (프로젝트 유형, 기능 ID) → 기능. 같은 기능도 유형별로 가격이 다를 수 있음
        self._features: dict[tuple[str, str], FeatureCatalogEntry] = {}
        for feature in features:
            for project_type in feature.project_types:
                key = (project_type, feature.id)
                if key in self._features:
                    raise CatalogIntegrityError(
                        f"중복된 기능 정의: {feature.id} ({project_type})"
                    )
                self._features[key] = feature

        for tier in self._tiers.values():
            missing = [f for f in tier.included_features if (tier.project_type, f) not in self._features]
            if missing:
                raise CatalogIntegrityError(
                    f"티어에 카탈로그에 없는 기능이 포함되어 있습니다: {tier.id}",
                    details={"missing": sorted(missing)},
                )

        self._plans = {plan.id: plan for plan in maintenance_plans}

    @property
    def project_types(self) -> list[str]:
        return list(self._tiers_by_type)

    def resolve_project_type(self, project_type: str) -> str:
        """별칭 정규화 후 카탈로그에 없는 유형은 'other'로."""
        normalized = normalize_project_type(project_type)
        if normalized in self._tiers_by_type:
            return normalized
        return FALLBACK_PROJECT_TYPE

    def tiers_for(self, project_type: str) -> list[TierDefinition]:
        return list(self._tiers_by_type.get(self.resolve_project_type(project_type), []))

    def get_tier(self, tier_id: str) -> TierDefinition:
        tier = self._tiers.get(tier_id)
        if tier is None:
            raise NotFoundError(f"티어를 찾을 수 없습니다: {tier_id}", details={"tier_id": tier_id})
        return tier

    def feature(self, project_type: str, feature_id: str) -> Optional[FeatureCatalogEntry]:
        return self._features.get((project_type, feature_id))

    def features_for(self, project_type: str) -> list[FeatureCatalogEntry]:
        return [f for (ptype, _), f in self._features.items() if ptype == project_type]

    def maintenance_plans(self) -> list[MaintenancePlanOption]:
        return list(self._plans.values())

    def get_maintenance_plan(self, plan_id: str) -> MaintenancePlanOption:
        plan = self._plans.get(plan_id)
        if plan is None:
            raise NotFoundError(
                f"유지보수 플랜을 찾을 수 없습니다: {plan_id}", details={"plan_id": plan_id}
            )
        return plan


# ==================== 기본 카탈로그 데이터 ====================

SITE_TYPES = ("simple-site", "business-site", "portfolio", "ecommerce", "web-app", "other")

# (id, name, price, 적용 유형)
_BASE_FEATURES = [
    ("responsive-design", "Responsive Design", "0", SITE_TYPES),
    ("basic-seo", "Basic SEO Setup", "0", SITE_TYPES),
    ("custom-design", "Custom Design", "800", SITE_TYPES + ("browser-extension",)),
    ("brand-package", "Brand Package", "1500", SITE_TYPES),
    ("contact-form", "Contact Form", "0", SITE_TYPES),
    ("cms", "Content Management System", "600", SITE_TYPES),
    ("analytics", "Analytics Integration", "300", SITE_TYPES),
    ("social-integration", "Social Media Integration", "250", SITE_TYPES),
    ("priority-support", "Priority Support", "500", SITE_TYPES + ("browser-extension",)),
    ("training-session", "Training Session", "200", SITE_TYPES + ("browser-extension",)),
]

_TYPE_FEATURES = {
    "simple-site": [
        ("age-verification", "Age Verification", "150"),
        ("newsletter-signup", "Newsletter Signup", "200"),
    ],
    "business-site": [
        ("blog", "Blog/News Section", "500"),
        ("gallery", "Photo Gallery", "350"),
        ("testimonials", "Testimonials Section", "300"),
        ("booking", "Appointment Booking", "800"),
        ("advanced-seo", "Advanced SEO", "600"),
        ("age-verification", "Age Verification", "150"),
    ],
    "portfolio": [
        ("portfolio-gallery", "Portfolio Gallery", "400"),
        ("case-studies", "Case Study Pages", "500"),
        ("resume-download", "Resume/CV Download", "150"),
        ("blog", "Blog/Articles", "500"),
    ],
    "ecommerce": [
        ("shopping-cart", "Shopping Cart", "0"),
        ("payment-processing", "Payment Processing", "0"),
        ("product-management", "Product Management", "0"),
        ("inventory-management", "Inventory Tracking", "800"),
        ("user-accounts", "Customer Accounts", "600"),
        ("admin-dashboard", "Admin Dashboard", "1200"),
        ("age-verification", "Age Verification", "200"),
        ("discount-codes", "Discount Codes", "400"),
        ("shipping-integration", "Shipping Integration", "500"),
        ("advanced-seo", "Advanced SEO", "600"),
    ],
    "web-app": [
        ("user-authentication", "User Authentication", "0"),
        ("database-integration", "Database Integration", "0"),
        ("basic-dashboard", "Basic Dashboard", "0"),
        ("api-integration", "Third-party API Integration", "1500"),
        ("user-dashboard", "Advanced User Dashboard", "2000"),
        ("admin-panel", "Admin Panel", "3000"),
        ("advanced-security", "Advanced Security", "2500"),
        ("email-notifications", "Email Notifications", "600"),
        ("file-uploads", "File Upload System", "800"),
        ("age-verification", "Age Verification", "200"),
    ],
    "browser-extension": [
        ("popup-interface", "Popup Interface", "0"),
        ("data-storage", "Local Data Storage", "0"),
        ("basic-functionality", "Core Functionality", "0"),
        ("content-modification", "Page Content Modification", "800"),
        ("background-processing", "Background Processing", "600"),
        ("cross-browser", "Cross-browser Compatibility", "2000"),
        ("sync-storage", "Sync Storage", "500"),
        ("api-integration", "API Integration", "1000"),
    ],
    "other": [
        ("user-authentication", "User Authentication", "1500"),
        ("database-integration", "Database Integration", "2000"),
        ("api-integration", "API Integration", "1500"),
        ("admin-panel", "Admin Panel", "3000"),
        ("age-verification", "Age Verification", "200"),
    ],
}

_SITE_GOOD = ["responsive-design", "basic-seo", "contact-form"]

# 유형 → [(level, name, tagline, min, max, 포함 기능)]
_TIERS = {
    "simple-site": [
        ("good", "Foundation", "Essential online presence", 800, 1500,
         _SITE_GOOD + ["social-integration"]),
        ("better", "Professional", "Recommended for most projects", 1500, 2500,
         _SITE_GOOD + ["social-integration", "custom-design", "analytics", "training-session"]),
        ("best", "Premium", "Full-service solution", 2500, 3500,
         _SITE_GOOD + ["social-integration", "custom-design", "analytics", "training-session",
                       "cms", "priority-support"]),
    ],
    "business-site": [
        ("good", "Foundation", "Professional business presence", 2000, 3500,
         _SITE_GOOD + ["social-integration"]),
        ("better", "Professional", "Recommended for growing businesses", 4000, 6000,
         _SITE_GOOD + ["social-integration", "custom-design", "cms", "analytics",
                       "training-session", "blog"]),
        ("best", "Enterprise", "Complete business solution", 5500, 8000,
         _SITE_GOOD + ["social-integration", "custom-design", "cms", "analytics",
                       "training-session", "blog", "brand-package", "priority-support",
                       "advanced-seo"]),
    ],
    "portfolio": [
        ("good", "Starter", "Showcase your work", 1500, 3000,
         _SITE_GOOD + ["portfolio-gallery"]),
        ("better", "Professional", "Recommended for creatives", 3000, 5000,
         _SITE_GOOD + ["portfolio-gallery", "custom-design", "cms", "analytics",
                       "case-studies", "training-session"]),
        ("best", "Premium", "Stand out from the crowd", 5000, 8000,
         _SITE_GOOD + ["portfolio-gallery", "custom-design", "cms", "analytics",
                       "case-studies", "training-session", "brand-package", "blog",
                       "priority-support"]),
    ],
    "ecommerce": [
        ("good", "Starter Store", "Start selling online", 5000, 10000,
         _SITE_GOOD + ["shopping-cart", "payment-processing", "product-management"]),
        ("better", "Professional Store", "Recommended for growing businesses", 10000, 20000,
         _SITE_GOOD + ["shopping-cart", "payment-processing", "product-management",
                       "custom-design", "inventory-management", "user-accounts", "analytics",
                       "training-session"]),
        ("best", "Enterprise Store", "Complete commerce solution", 20000, 35000,
         _SITE_GOOD + ["shopping-cart", "payment-processing", "product-management",
                       "custom-design", "inventory-management", "user-accounts", "analytics",
                       "training-session", "brand-package", "admin-dashboard", "advanced-seo",
                       "priority-support"]),
    ],
    "web-app": [
        ("good", "MVP", "Launch your idea", 10000, 25000,
         ["responsive-design", "user-authentication", "database-integration", "basic-dashboard"]),
        ("better", "Full Application", "Recommended for most apps", 25000, 50000,
         ["responsive-design", "user-authentication", "database-integration", "basic-dashboard",
          "custom-design", "api-integration", "user-dashboard", "analytics", "training-session"]),
        ("best", "Enterprise Application", "Complete platform solution", 50000, 100000,
         ["responsive-design", "user-authentication", "database-integration", "basic-dashboard",
          "custom-design", "api-integration", "user-dashboard", "analytics", "training-session",
          "admin-panel", "priority-support", "advanced-security"]),
    ],
    "browser-extension": [
        ("good", "Basic Extension", "Simple browser tool", 3000, 6000,
         ["popup-interface", "data-storage", "basic-functionality"]),
        ("better", "Advanced Extension", "Recommended for most extensions", 6000, 12000,
         ["popup-interface", "data-storage", "basic-functionality", "content-modification",
          "background-processing", "custom-design", "training-session"]),
        ("best", "Premium Extension", "Enterprise-grade solution", 12000, 20000,
         ["popup-interface", "data-storage", "basic-functionality", "content-modification",
          "background-processing", "custom-design", "training-session", "cross-browser",
          "sync-storage", "priority-support"]),
    ],
    "other": [
        ("good", "Basic", "Essential features", 3000, 8000, list(_SITE_GOOD)),
        ("better", "Standard", "Recommended approach", 8000, 20000,
         _SITE_GOOD + ["custom-design", "analytics", "training-session"]),
        ("best", "Premium", "Complete solution", 20000, 50000,
         _SITE_GOOD + ["custom-design", "analytics", "training-session", "priority-support"]),
    ],
}

_MAINTENANCE_PLANS = [
    ("diy", "DIY", "0", (
        "Documentation provided",
        "Email support for questions",
        "Self-managed hosting",
    )),
    ("essential", "Essential Care", "99", (
        "Monthly security updates",
        "Weekly backups",
        "Email support (48hr response)",
        "Uptime monitoring",
    )),
    ("standard", "Standard Care", "249", (
        "Weekly security updates",
        "Daily backups",
        "Email support (24hr response)",
        "Uptime monitoring",
        "2 hours content updates/month",
        "Performance monitoring",
    )),
    ("premium", "Premium Care", "499", (
        "Continuous security monitoring",
        "Hourly backups",
        "Priority support (4hr response)",
        "Uptime monitoring with alerts",
        "5 hours updates/month",
        "Performance optimization",
        "Monthly analytics reports",
        "Dedicated account manager",
    )),
]


def build_default_tiers() -> list[TierDefinition]:
    tiers = []
    for project_type, levels in _TIERS.items():
        for level, name, tagline, price_min, price_max, included in levels:
            tiers.append(
                TierDefinition(
                    id=f"{project_type}-{level}",
                    name=name,
                    project_type=project_type,
                    price_min=Decimal(price_min),
                    price_max=Decimal(price_max),
                    included_features=frozenset(included),
                    tagline=tagline,
                )
            )
    return tiers


def build_default_features() -> list[FeatureCatalogEntry]:
    features = [
        FeatureCatalogEntry(
            id=feature_id,
            name=name,
            project_types=frozenset(project_types),
            price=Decimal(price),
        )
        for feature_id, name, price, project_types in _BASE_FEATURES
    ]
    for project_type, entries in _TYPE_FEATURES.items():
        features.extend(
            FeatureCatalogEntry(
                id=feature_id,
                name=name,
                project_types=frozenset({project_type}),
                price=Decimal(price),
            )
            for feature_id, name, price in entries
        )
    return features


def build_default_maintenance_plans() -> list[MaintenancePlanOption]:
    return [
        MaintenancePlanOption(id=plan_id, name=name, monthly_price=Decimal(price), features=features)
        for plan_id, name, price, features in _MAINTENANCE_PLANS
    ]


@lru_cache()
def get_pricing_catalog() -> PricingCatalog:
    """기본 가격 카탈로그 (프로세스당 한 번 로드)."""
    catalog = PricingCatalog(
        build_default_tiers(),
        build_default_features(),
        build_default_maintenance_plans(),
    )
    logger.debug(f"[PricingCatalog] 프로젝트 유형 {len(catalog.project_types)}개 로드 완료")
    return catalog
