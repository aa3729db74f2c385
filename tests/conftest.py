"""
pytest configuration and fixtures for Price Research System tests
"""

import pytest
import tempfile
import shutil
from pathlib import Path
from datetime import date, timedelta
import sys

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from database import SQLiteStorage, JsonFileStorage
from research_manager import PriceResearchManager
from utils.config_manager import PricingConfig


TODAY = date(2025, 6, 30)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files"""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def pricing_config():
    """Default pricing rules: 180/360 days, 15/30 day thresholds, 3 quotes, CV 25%"""
    return PricingConfig()


def _build_storage(backend: str, directory: Path):
    if backend == 'sqlite':
        return SQLiteStorage(str(directory / "prices.db"))
    return JsonFileStorage(str(directory / "prices.json"))


@pytest.fixture(params=['sqlite', 'json'])
async def storage(request, temp_dir):
    """Each storage backend, initialized on an empty file"""
    backend = _build_storage(request.param, temp_dir)
    await backend.initialize()
    yield backend
    await backend.close()


@pytest.fixture
async def manager(temp_dir):
    """Research manager over a fresh SQLite database"""
    research = PriceResearchManager(SQLiteStorage(str(temp_dir / "prices.db")))
    await research.initialize()
    yield research
    await research.close()


@pytest.fixture
def sample_quotes():
    """Four private quotes, the last far above the others"""
    return [
        {'source': 'Empresa A', 'quote_date': TODAY - timedelta(days=10), 'unit_price': 10.0, 'quote_type': 'private'},
        {'source': 'Empresa B', 'quote_date': TODAY - timedelta(days=20), 'unit_price': 12.0, 'quote_type': 'private'},
        {'source': 'Empresa C', 'quote_date': TODAY - timedelta(days=5), 'unit_price': 11.0, 'quote_type': 'private'},
        {'source': 'Prefeitura X', 'quote_date': TODAY - timedelta(days=40), 'unit_price': 30.0, 'quote_type': 'public'},
    ]


@pytest.fixture
def banco_precos_export():
    """Tab separated Banco de Preços export with two items"""
    return "\n".join([
        "Relatório de Pesquisa de Preços",
        "1\tCaneta esferográfica azul ponta média 1.0mm\t\tUN\t100",
        "1\tPrefeitura de Recife\tPregão 12/2024\tPE\tUASG 1\tAta\tx\t10/01/2025\t1,50",
        "2\tPrefeitura de Olinda\tPregão 3/2025\tPE\tUASG 2\tAta\tx\t15/02/2025\t1,70",
        "3\tComprasNet\t\tsem preço",
        "2\tPapel A4 75g/m² resma com 500 folhas\t\tRESMA\t50",
        "1\tUniversidade Federal\tPregão 8/2024\tPB\tUASG 3\tAta\tx\t20/12/2024\t24,90",
        "2\tTribunal Regional\tPregão 9/2024\tPB\tUASG 4\tAta\tx\tsem data\t25,10",
    ])


# Pytest configuration
def pytest_configure(config):
    """Configure pytest"""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
