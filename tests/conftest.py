"""공유 pytest fixture 모음."""

from datetime import date
from decimal import Decimal

import pytest

from app.layers.layer1_intake import QuestionCatalog, get_default_catalog
from app.layers.layer3_pricing import ProposalCalculator, ProposalService, get_pricing_catalog
from app.layers.layer5_invoice import InvoiceService
from app.models import Invoice, InvoiceStatus, LineItem
from app.services.notifications import RecordingNotifier
from app.services.repository import FileRepository, InMemoryRepository


# 작은 테스트용 카탈로그: 프로젝트 유형 → 기능(동적 보기) → 쇼핑몰 여부 → 규모 → 이메일
SMALL_QUESTIONS = [
    {
        "id": "projectType",
        "prompt": "What are you building?",
        "input_kind": "single_choice",
        "choices": [("web", "Website"), ("app", "Application"), ("other", "Other")],
    },
    {
        "id": "features",
        "prompt": "Which features?",
        "input_kind": "multi_choice",
        "dynamic_choices": {
            "source": "projectType",
            "options": {
                "web": [("blog", "Blog"), ("shop", "Online Shop")],
                "app": [("auth", "Login"), ("api", "Public API")],
                "other": [("custom", "Custom")],
            },
        },
    },
    {
        "id": "hasShop",
        "prompt": "Do you sell physical goods?",
        "input_kind": "single_choice",
        "depends_on": ("features", ["shop"]),
        "choices": [("yes", "Yes"), ("no", "No")],
    },
    {
        "id": "shopSize",
        "prompt": "How many products?",
        "input_kind": "numeric",
        "depends_on": ("hasShop", ["yes"]),
    },
    {
        "id": "email",
        "prompt": "Where should we send the proposal?",
        "input_kind": "text",
        "pattern": r"^[^\s@]+@[^\s@]+\.[^\s@]+$",
    },
]


@pytest.fixture
def small_catalog():
    """의존 관계가 있는 5문항 카탈로그 fixture."""
    return QuestionCatalog.from_dicts(SMALL_QUESTIONS)


@pytest.fixture
def default_catalog():
    return get_default_catalog()


@pytest.fixture
def pricing_catalog():
    return get_pricing_catalog()


@pytest.fixture
def calculator(pricing_catalog):
    return ProposalCalculator(pricing_catalog)


@pytest.fixture
def repository():
    """InMemoryRepository fixture."""
    return InMemoryRepository()


@pytest.fixture
def file_repository(tmp_path):
    """임시 디렉토리 기반 FileRepository fixture."""
    return FileRepository(base_path=str(tmp_path))


@pytest.fixture
def notifier():
    """발생한 이벤트를 기록하는 notifier fixture."""
    return RecordingNotifier()


@pytest.fixture
def proposal_service(calculator, repository, notifier):
    return ProposalService(calculator, repository, notifier)


@pytest.fixture
def invoice_service(repository, notifier, proposal_service):
    return InvoiceService(repository, notifier, proposal_service)


@pytest.fixture
def sample_line_items():
    """합계 4500.00인 라인 아이템 fixture."""
    return [
        LineItem(description="Design", rate=Decimal("1500.00"), amount=Decimal("1500.00")),
        LineItem(
            description="Development",
            quantity=Decimal("2"),
            rate=Decimal("1500.00"),
            amount=Decimal("3000.00"),
        ),
    ]


@pytest.fixture
def sample_invoice(sample_line_items):
    """draft 상태 Invoice fixture."""
    return Invoice(
        id="inv-001",
        invoice_number="INV-202601-000001",
        client_ref="client@example.com",
        project_ref="Acme",
        status=InvoiceStatus.DRAFT,
        line_items=sample_line_items,
    )


@pytest.fixture
def today():
    return date(2026, 1, 15)


@pytest.fixture
async def client():
    """httpx AsyncClient fixture (FastAPI 테스트용)."""
    from httpx import AsyncClient, ASGITransport
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def default_flow_answers():
    """기본 카탈로그를 끝까지 답하는 답변 순서 (business-site, 예산 2k-5k, blog/booking)."""
    return [
        "Jane Doe",
        "jane@example.com",
        "Acme Bakery",
        "(555) 123-4567",
        "business-site",
        "A site for our bakery with online booking",
        "1-3-months",
        "2k-5k",
        ["blog", "booking"],
        "no",
        "full-design",
        ["logo"],
        "no",
        "beginner",
        "yes",
        "https://acme-bakery.example.com",
        "need-hosting",
        ["budget"],
        "no",
        "no",
    ]
