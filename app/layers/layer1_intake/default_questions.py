"""
기본 인테이크 질문 데이터입니다.
연락처 → 프로젝트 개요 → 기능 → 디자인 → 기술 → 기타 순서로 진행되며,
예산/기능 보기는 프로젝트 유형 답변에 따라 달라집니다.
"""

PROJECT_TYPE_OPTIONS = [
    ("simple-site", "Simple Site (1-2 pages, landing page)"),
    ("business-site", "Small Business Website (5-10 pages)"),
    ("portfolio", "Portfolio Website"),
    ("ecommerce", "E-commerce Store"),
    ("web-app", "Web Application"),
    ("browser-extension", "Browser Extension"),
    ("other", "Other"),
]

_DISCUSS = ("discuss", "Let's discuss")

BUDGET_OPTIONS = {
    "simple-site": [
        ("under-1k", "Under $1,000"),
        ("1k-2k", "$1,000 - $2,000"),
        ("2k-3k", "$2,000 - $3,000"),
        _DISCUSS,
    ],
    "business-site": [
        ("2k-5k", "$2,000 - $5,000"),
        ("5k-8k", "$5,000 - $8,000"),
        ("8k-12k", "$8,000 - $12,000"),
        _DISCUSS,
    ],
    "portfolio": [
        ("1k-3k", "$1,000 - $3,000"),
        ("3k-6k", "$3,000 - $6,000"),
        ("6k-10k", "$6,000 - $10,000"),
        _DISCUSS,
    ],
    "ecommerce": [
        ("5k-10k", "$5,000 - $10,000"),
        ("10k-20k", "$10,000 - $20,000"),
        ("20k-35k", "$20,000 - $35,000"),
        ("35k-plus", "$35,000+"),
        _DISCUSS,
    ],
    "web-app": [
        ("10k-25k", "$10,000 - $25,000"),
        ("25k-50k", "$25,000 - $50,000"),
        ("50k-100k", "$50,000 - $100,000"),
        ("100k-plus", "$100,000+"),
        _DISCUSS,
    ],
    "browser-extension": [
        ("3k-8k", "$3,000 - $8,000"),
        ("8k-15k", "$8,000 - $15,000"),
        ("15k-25k", "$15,000 - $25,000"),
        _DISCUSS,
    ],
    "other": [
        ("under-5k", "Under $5,000"),
        ("5k-15k", "$5,000 - $15,000"),
        ("15k-35k", "$15,000 - $35,000"),
        ("35k-plus", "$35,000+"),
        _DISCUSS,
    ],
}

FEATURE_OPTIONS = {
    "simple-site": [
        ("contact-form", "Contact Form"),
        ("social-links", "Social Media Links"),
        ("analytics", "Analytics Tracking"),
        ("mobile-optimized", "Mobile Optimization"),
        ("basic-only", "Basic Static Pages Only"),
    ],
    "business-site": [
        ("contact-form", "Contact Form"),
        ("blog", "Blog/News Section"),
        ("gallery", "Photo Gallery"),
        ("testimonials", "Customer Testimonials"),
        ("booking", "Appointment Booking"),
        ("cms", "Content Management System"),
        ("seo-pages", "SEO-Optimized Pages"),
    ],
    "portfolio": [
        ("portfolio-gallery", "Project Gallery"),
        ("case-studies", "Case Studies"),
        ("resume-download", "Resume/CV Download"),
        ("contact-form", "Contact Form"),
        ("blog", "Blog/Articles"),
        ("testimonials", "Client Testimonials"),
    ],
    "ecommerce": [
        ("shopping-cart", "Shopping Cart"),
        ("payment-processing", "Payment Processing"),
        ("inventory-management", "Inventory Management"),
        ("user-accounts", "User Accounts/Login"),
        ("admin-dashboard", "Admin Dashboard"),
        ("shipping-calculator", "Shipping Calculator"),
    ],
    "web-app": [
        ("user-authentication", "User Authentication"),
        ("database-integration", "Database Integration"),
        ("api-integration", "Third-party API Integration"),
        ("user-dashboard", "User Dashboard"),
        ("real-time-features", "Real-time Features"),
        ("admin-panel", "Admin Panel"),
    ],
    "browser-extension": [
        ("popup-interface", "Popup Interface"),
        ("content-modification", "Page Content Modification"),
        ("background-processing", "Background Processing"),
        ("data-storage", "Data Storage"),
        ("external-api", "External API Calls"),
        ("cross-browser", "Cross-browser Compatibility"),
    ],
    "other": [
        ("contact-form", "Contact Form"),
        ("user-authentication", "User Authentication"),
        ("database-integration", "Database Integration"),
        ("api-integration", "API Integration"),
        ("admin-panel", "Admin Panel"),
        ("custom", "Custom Features (describe in next step)"),
    ],
}

_YES_NO = [("yes", "Yes"), ("no", "No")]

# 카탈로그 순서 = 리스트 순서 (position은 로드 시 부여)
DEFAULT_QUESTIONS = [
    # 연락처
    {
        "id": "name",
        "prompt": "Hello! Let's gather some information to put together a custom proposal. First, what's your name?",
        "input_kind": "text",
        "placeholder": "Enter your full name",
    },
    {
        "id": "email",
        "prompt": "Nice to meet you, {{name}}! What's your email address so we can send you the project details?",
        "input_kind": "text",
        "placeholder": "your@email.com",
        "pattern": r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
    },
    {
        "id": "company",
        "prompt": "What's your company or organization name?",
        "input_kind": "text",
        "placeholder": "Company name",
    },
    {
        "id": "phone",
        "prompt": "What's the best phone number to reach you?",
        "input_kind": "text",
        "placeholder": "(555) 123-4567",
        "pattern": r"^\+?[\d\s().-]{10,20}$",
    },
    # 프로젝트 개요
    {
        "id": "projectType",
        "prompt": "Great! Now let's talk about your project. What type of project are you looking to build?",
        "input_kind": "single_choice",
        "choices": PROJECT_TYPE_OPTIONS,
    },
    {
        "id": "projectDescription",
        "prompt": "Tell us more about your project. What are your goals and what do you want to achieve?",
        "input_kind": "text",
        "placeholder": "Describe your project goals, target audience, and vision...",
    },
    {
        "id": "timeline",
        "prompt": "What's your ideal timeline for this project?",
        "input_kind": "single_choice",
        "choices": [
            ("asap", "ASAP (Rush job)"),
            ("1-month", "Within 1 month"),
            ("1-3-months", "1-3 months"),
            ("3-6-months", "3-6 months"),
            ("flexible", "Flexible timing"),
        ],
    },
    {
        "id": "budget",
        "prompt": "What's your budget range for this project?",
        "input_kind": "single_choice",
        "dynamic_choices": {"source": "projectType", "options": BUDGET_OPTIONS},
    },
    # 기능
    {
        "id": "features",
        "prompt": "What features do you need? Select all that apply:",
        "input_kind": "multi_choice",
        "dynamic_choices": {"source": "projectType", "options": FEATURE_OPTIONS},
    },
    {
        "id": "customFeatures",
        "prompt": "Please describe the custom features you need:",
        "input_kind": "text",
        "depends_on": ("features", ["custom"]),
        "placeholder": "Describe your custom feature requirements...",
    },
    {
        "id": "hasIntegrations",
        "prompt": "Do you need any third-party integrations? (e.g., PayPal, Stripe, Google Analytics)",
        "input_kind": "single_choice",
        "choices": _YES_NO,
    },
    {
        "id": "integrations",
        "prompt": "Which integrations do you need?",
        "input_kind": "multi_choice",
        "depends_on": ("hasIntegrations", ["yes"]),
        "choices": [
            ("stripe", "Stripe (Payments)"),
            ("paypal", "PayPal"),
            ("google-analytics", "Google Analytics"),
            ("mailchimp", "Mailchimp / Email Marketing"),
            ("crm", "CRM System"),
            ("social", "Social Media Feeds"),
            ("calendar", "Calendar / Booking"),
            ("other", "Other (will specify later)"),
        ],
    },
    # 디자인
    {
        "id": "designLevel",
        "prompt": "What level of design service do you need?",
        "input_kind": "single_choice",
        "choices": [
            ("full-design", "Full Design Service"),
            ("partial-design", "Design Guidance Only"),
            ("have-designs", "I Have Existing Designs"),
        ],
    },
    {
        "id": "brandAssets",
        "prompt": "What brand assets do you already have?",
        "input_kind": "multi_choice",
        "choices": [
            ("logo", "Logo"),
            ("colors", "Brand Colors"),
            ("fonts", "Brand Fonts"),
            ("guidelines", "Brand Guidelines"),
            ("photos", "Professional Photos"),
            ("none", "Need Everything Created"),
        ],
    },
    {
        "id": "hasInspiration",
        "prompt": "Do you have any websites you like for design inspiration?",
        "input_kind": "single_choice",
        "choices": [("yes", "Yes, I have examples"), ("no", "No, open to suggestions")],
    },
    {
        "id": "inspiration",
        "prompt": "Share the website URLs you like (you can list multiple):",
        "input_kind": "text",
        "depends_on": ("hasInspiration", ["yes"]),
        "placeholder": "https://example.com",
    },
    # 기술
    {
        "id": "techComfort",
        "prompt": "What's your technical comfort level for managing the site after launch?",
        "input_kind": "single_choice",
        "choices": [
            ("beginner", "Beginner (prefer simple solutions)"),
            ("intermediate", "Intermediate (comfortable with basic updates)"),
            ("advanced", "Advanced (can handle technical tasks)"),
        ],
    },
    {
        "id": "hasCurrentSite",
        "prompt": "Do you have a current website?",
        "input_kind": "single_choice",
        "choices": _YES_NO,
    },
    {
        "id": "currentSite",
        "prompt": "What's the URL of your current website?",
        "input_kind": "text",
        "depends_on": ("hasCurrentSite", ["yes"]),
        "placeholder": "https://example.com",
    },
    {
        "id": "hasDomain",
        "prompt": "Do you have a domain name for this project?",
        "input_kind": "single_choice",
        "depends_on": ("hasCurrentSite", ["no"]),
        "choices": [
            ("yes", "Yes, I have a domain"),
            ("no", "No, I need help getting one"),
            ("unsure", "Not sure / Need advice"),
        ],
    },
    {
        "id": "domainName",
        "prompt": "What's your domain name?",
        "input_kind": "text",
        "depends_on": ("hasDomain", ["yes"]),
        "placeholder": "example.com",
    },
    {
        "id": "hosting",
        "prompt": "What are your hosting preferences?",
        "input_kind": "single_choice",
        "choices": [
            ("have-hosting", "I already have hosting"),
            ("need-hosting", "I need hosting set up"),
            ("need-recommendation", "I need a recommendation"),
            ("unsure", "Not sure what I need"),
        ],
    },
    {
        "id": "hostingProvider",
        "prompt": "Who is your current hosting provider?",
        "input_kind": "text",
        "depends_on": ("hosting", ["have-hosting"]),
        "placeholder": "e.g., GoDaddy, Bluehost, AWS, etc.",
    },
    # 기타
    {
        "id": "challenges",
        "prompt": "What are your biggest concerns with this project?",
        "input_kind": "multi_choice",
        "choices": [
            ("budget", "Staying within budget"),
            ("timeline", "Meeting the timeline"),
            ("communication", "Clear communication"),
            ("technical", "Technical complexity"),
            ("design", "Getting the design right"),
            ("maintenance", "Ongoing maintenance"),
            ("none", "No major concerns"),
        ],
    },
    {
        "id": "hasAdditionalInfo",
        "prompt": "Is there anything else you'd like us to know?",
        "input_kind": "single_choice",
        "choices": [("yes", "Yes"), ("no", "No, I'm all set")],
    },
    {
        "id": "additionalInfo",
        "prompt": "Please share any additional details:",
        "input_kind": "text",
        "depends_on": ("hasAdditionalInfo", ["yes"]),
        "placeholder": "Additional information",
    },
    {
        "id": "wasReferred",
        "prompt": "Last question! Did someone refer you to us?",
        "input_kind": "single_choice",
        "choices": _YES_NO,
    },
    {
        "id": "referralName",
        "prompt": "Who referred you?",
        "input_kind": "text",
        "depends_on": ("wasReferred", ["yes"]),
        "placeholder": "Name of person or company",
    },
]
