import threading
from collections.abc import Callable, Iterable

import pytest

from app.exports.exceptions import IssuanceError, RenderError
from app.exports.models import Apartment, Building, ProgressState
from app.issuer.base import BaseTokenIssuer
from app.pdf.base import BaseDocumentRenderer


class FakeTokenIssuer(BaseTokenIssuer):
    """Issues sequential tokens; apartments listed in failing_ids are rejected."""

    def __init__(self, failing_ids: Iterable[str] = ()) -> None:
        self.failing_ids = set(failing_ids)
        self.calls: list[tuple[str, str]] = []
        self.entered = 0
        self.closed = 0

    async def issue_token(self, apartment_id: str, company_id: str) -> str:
        self.calls.append((apartment_id, company_id))
        if apartment_id in self.failing_ids:
            raise IssuanceError("Invalid apartment or company relationship")
        return f"TOKEN-{len(self.calls):04d}"

    async def __aenter__(self) -> "FakeTokenIssuer":
        self.entered += 1
        return self

    async def aclose(self) -> None:
        self.closed += 1


class FakeRenderer(BaseDocumentRenderer):
    """Returns b"PDF:<token>" and records the order of render calls."""

    def __init__(self, failing_ids: Iterable[str] = ()) -> None:
        self.failing_ids = set(failing_ids)
        self.events: list[str] = []
        self._lock = threading.Lock()

    def render(self, token: str, apartment: Apartment, *, strict_qr: bool = False) -> bytes:
        with self._lock:
            self.events.append(f"render:{apartment.id}")
        if apartment.id in self.failing_ids:
            raise RenderError(f"Apartment {apartment.id} has no name")
        return f"PDF:{token}".encode()


@pytest.fixture()
def building() -> Building:
    return Building(
        id="b-1",
        name="Elmstreet 5",
        street="Elmstreet 5",
        company_id="c-1",
        zip_code=10115,
    )


@pytest.fixture()
def make_apartments(building: Building) -> Callable[..., list[Apartment]]:
    """Build apartments a-1..a-n named "Top 1".."Top n" in the given building."""

    def _make(count: int, owner: Building | None = None) -> list[Apartment]:
        owner = owner or building
        return [
            Apartment(id=f"{owner.id}-a-{i}", name=f"Top {i}", building=owner)
            for i in range(1, count + 1)
        ]

    return _make


@pytest.fixture()
def fake_issuer() -> FakeTokenIssuer:
    return FakeTokenIssuer()


@pytest.fixture()
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture()
def progress_events() -> list[ProgressState]:
    return []


@pytest.fixture()
def issuer_cls() -> type[FakeTokenIssuer]:
    return FakeTokenIssuer


@pytest.fixture()
def renderer_cls() -> type[FakeRenderer]:
    return FakeRenderer
