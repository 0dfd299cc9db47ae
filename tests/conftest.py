import pytest
from fastapi.testclient import TestClient

from app.models.account import AccountCreate, AgencyType
from app.models.actor import AgencyAdminActor, CitizenActor, DispatchAdminActor
from app.models.report import IncidentType, ReportCreate
from app.services.advisory.gateway import AdvisoryGateway
from app.services.identity_registry import IdentityRegistry
from app.services.lifecycle_engine import LifecycleEngine, reset_lifecycle_engine
from app.services.seed_data import seed_demo_accounts


@pytest.fixture
def registry():
    registry = IdentityRegistry()
    seed_demo_accounts(registry)
    return registry

@pytest.fixture
def gateway():
    return AdvisoryGateway(providers=[], enabled=True, timeout_seconds=1.0)

@pytest.fixture
def engine(registry, gateway):
    return LifecycleEngine(registry=registry, advisory=gateway)

@pytest.fixture
def dispatch():
    return DispatchAdminActor(account_id="USR-DISPATCH")

@pytest.fixture
def bfp():
    return AgencyAdminActor(account_id="USR-BFP", agency=AgencyType.BFP)

@pytest.fixture
def pnp():
    return AgencyAdminActor(account_id="USR-PNP", agency=AgencyType.PNP)

@pytest.fixture
def pcg():
    return AgencyAdminActor(account_id="USR-PCG", agency=AgencyType.PCG)

@pytest.fixture
def citizen_account(engine):
    return engine.register(AccountCreate(full_name="Amina Salih", email="amina@example.ph", phone="+639171234567"))

@pytest.fixture
def citizen(citizen_account):
    return CitizenActor(account_id=citizen_account.id)

@pytest.fixture
def payload():
    return ReportCreate(
        incident_type=IncidentType.FIRE,
        description="Smoke coming out of a house near the market.",
        latitude=5.0283,
        longitude=119.7731,
        address_landmark="Bongao Public Market",
    )

@pytest.fixture
def client(engine):
    from app.main import app

    reset_lifecycle_engine(engine)
    with TestClient(app) as test_client:
        yield test_client
    reset_lifecycle_engine(None)
