"""
Built-in domain pattern catalog.

Registration order is the detection tie-break order.
"""

from typing import List

from adaptive_router.models.pattern import Pattern, PatternRequirements
from adaptive_router.models.requirements import Complexity

GENERAL_PATTERN_ID = "general"

STOREFRONT = Pattern(
    id="storefront",
    name="Online Storefront",
    domains=["ecommerce", "storefront", "commerce", "retail"],
    keywords=[
        "shop", "store", "buy", "sell", "product", "products", "cart",
        "checkout", "payment", "order", "inventory", "customer", "delivery",
        "shipping", "ecommerce", "e-commerce", "catalog", "purchase", "retail",
    ],
    phrases=[
        "online store", "sell products", "shopping cart", "payment gateway",
        "product catalog", "customer orders", "inventory management",
    ],
    user_types=["entrepreneur", "business"],
    complexity=Complexity.MEDIUM,
    scale="medium",
    average_token_savings=300,
    requirements=PatternRequirements(
        implicit=[
            "user-authentication", "payment-processing", "ssl-security",
            "product-catalog", "responsive-design", "order-management",
            "inventory-tracking", "admin-dashboard",
        ],
        technical={
            "frontend": "React with e-commerce components",
            "backend": "Node.js with payment integration",
            "database": "PostgreSQL",
        },
    ),
    expansions={
        "scale:large": ["load-balancing", "caching", "cdn"],
        "keyword:subscription": ["subscription-management", "recurring-billing"],
        "keyword:global": ["multi-currency", "multi-language"],
    },
)

CONTENT_PUBLISHING = Pattern(
    id="content-publishing",
    name="Blog and Content Site",
    domains=["blog", "content", "publishing"],
    keywords=[
        "blog", "content", "article", "articles", "post", "posts", "write",
        "publish", "author", "cms", "editorial", "news", "magazine", "journal",
        "story", "publishing", "writer", "reader",
    ],
    phrases=[
        "content management", "blog posts", "article publishing",
        "author platform", "editorial content", "content strategy",
    ],
    user_types=["creative", "blogger", "educator"],
    complexity=Complexity.LOW,
    scale="small",
    average_token_savings=180,
    requirements=PatternRequirements(
        implicit=[
            "content-management", "seo-optimization", "responsive-design",
            "social-sharing", "search-functionality", "comment-system",
            "rss-feeds",
        ],
        technical={
            "frontend": "React with content-focused design",
            "backend": "Static or minimal CMS",
            "database": "Markdown files or headless CMS",
        },
    ),
    expansions={
        "user_type:educator": ["course-integration", "student-portal"],
        "keyword:monetize": ["subscription-paywall", "ad-integration"],
        "scale:large": ["cdn", "caching", "performance-optimization"],
        "goal:audience-building": ["newsletter"],
    },
)

PORTFOLIO = Pattern(
    id="portfolio",
    name="Portfolio Site",
    domains=["portfolio"],
    keywords=[
        "portfolio", "showcase", "gallery", "work", "project", "creative",
        "artist", "designer", "photographer", "freelancer", "resume", "cv",
    ],
    phrases=[
        "showcase work", "personal brand", "creative portfolio",
        "professional showcase", "project gallery", "skill demonstration",
    ],
    user_types=["creative", "freelancer"],
    complexity=Complexity.LOW,
    scale="small",
    average_token_savings=150,
    requirements=PatternRequirements(
        implicit=[
            "responsive-design", "image-optimization", "contact-form",
            "social-links", "project-showcase", "fast-loading",
        ],
        technical={
            "frontend": "React with portfolio design",
            "backend": "Static",
            "database": "JSON files",
        },
    ),
    expansions={
        "goal:lead-generation": ["testimonials"],
    },
)

PERSONAL_UTILITY = Pattern(
    id="personal-utility",
    name="Personal Utility App",
    domains=["utility", "productivity"],
    keywords=[
        "tool", "utility", "calculator", "converter", "tracker", "organizer",
        "planner", "todo", "task", "tasks", "productivity", "helper", "widget",
    ],
    phrases=[
        "simple tool", "quick calculator", "productivity app", "utility tool",
        "helper application", "task manager", "todo list",
    ],
    user_types=["personal", "general"],
    complexity=Complexity.LOW,
    scale="small",
    average_token_savings=200,
    requirements=PatternRequirements(
        implicit=[
            "responsive-design", "local-storage", "simple-ui",
            "offline-capability", "data-export",
        ],
        technical={
            "frontend": "React with hooks",
            "backend": "none",
            "database": "localStorage",
        },
    ),
    expansions={
        "goal:productivity": ["keyboard-shortcuts"],
        "scale:medium": ["user-accounts", "cloud-sync"],
    },
)

SOCIAL_COMMUNITY = Pattern(
    id="social-community",
    name="Social Community",
    domains=["social", "community"],
    keywords=[
        "social", "network", "community", "connect", "share", "follow",
        "friend", "friends", "message", "chat", "feed", "profile", "discussion",
        "forum",
    ],
    phrases=[
        "social network", "community platform", "social media",
        "connect people", "social interaction", "online community",
    ],
    user_types=["nonprofit", "personal", "entrepreneur"],
    complexity=Complexity.HIGH,
    scale="large",
    average_token_savings=250,
    requirements=PatternRequirements(
        implicit=[
            "user-authentication", "real-time-features", "notification-system",
            "privacy-controls", "content-moderation", "responsive-design",
        ],
        technical={
            "frontend": "React with real-time UI",
            "backend": "Node.js with WebSocket support",
            "database": "PostgreSQL with social schema",
        },
    ),
    expansions={
        "scale:large": ["scalable-architecture", "caching"],
    },
)

BUSINESS_SERVICES = Pattern(
    id="business-services",
    name="Business Services Site",
    domains=["business", "services", "corporate"],
    keywords=[
        "business", "company", "corporate", "professional", "service",
        "services", "consulting", "agency", "enterprise", "b2b", "client",
        "clients", "lead", "leads", "crm", "dashboard", "analytics",
    ],
    phrases=[
        "business website", "professional service", "corporate platform",
        "consulting firm", "business solution", "client management",
    ],
    user_types=["entrepreneur", "freelancer"],
    complexity=Complexity.MEDIUM,
    scale="medium",
    average_token_savings=220,
    requirements=PatternRequirements(
        implicit=[
            "professional-design", "contact-forms", "service-pages",
            "testimonials", "case-studies", "seo-optimization",
            "analytics-integration", "lead-generation",
        ],
        technical={
            "frontend": "React with professional design",
            "backend": "Node.js with CRM integration",
            "database": "PostgreSQL",
        },
    ),
    expansions={
        "scale:large": ["client-portal", "role-based-access"],
        "goal:lead-generation": ["lead-capture"],
    },
)

LANDING_PAGE = Pattern(
    id="landing-page",
    name="Landing Page",
    domains=["landing", "marketing"],
    keywords=[
        "landing", "marketing", "campaign", "conversion", "signup", "trial",
        "demo", "promotion", "launch", "cta", "funnel", "waitlist",
    ],
    phrases=[
        "landing page", "marketing campaign", "lead generation",
        "product launch", "conversion funnel", "promotional page",
    ],
    user_types=["entrepreneur", "general"],
    complexity=Complexity.LOW,
    scale="small",
    average_token_savings=160,
    requirements=PatternRequirements(
        implicit=[
            "conversion-optimization", "analytics-tracking", "fast-loading",
            "seo-optimization", "lead-capture", "social-proof",
        ],
        technical={
            "frontend": "React with conversion-focused design",
            "backend": "Minimal backend for form handling",
            "database": "Simple lead storage",
        },
    ),
    expansions={
        "keyword:experiment": ["a/b-testing"],
    },
)

GENERAL = Pattern(
    id=GENERAL_PATTERN_ID,
    name="General Project",
    domains=["general"],
    user_types=["general"],
    requirements=PatternRequirements(
        implicit=["responsive-design"],
    ),
    is_default=True,
)


def default_patterns() -> List[Pattern]:
    """
    Get the built-in pattern catalog.

    Returns:
        Patterns in registration order, default pattern last
    """
    return [
        STOREFRONT,
        CONTENT_PUBLISHING,
        PORTFOLIO,
        PERSONAL_UTILITY,
        SOCIAL_COMMUNITY,
        BUSINESS_SERVICES,
        LANDING_PAGE,
        GENERAL,
    ]
