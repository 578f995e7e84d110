"""
Shared fixtures for the pricing API tests
Run with: pytest tests/ -v

The app runs against in-memory SQLite; every test gets a fresh database.
"""

import os
import sys
import pytest

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault('DATABASE_URL', 'sqlite://')

from app import create_app
from config.db import db
from services.catalog_store import CatalogStore
from services.macro_service import MacroService


# Roofing line items used by the macro builder samples
SAMPLE_CATALOG_ITEMS = [
    {'item_code': 'RFG LAMI<', 'description': 'Laminated composition shingle roofing - 25 yr', 'unit': 'SQ',
     'material_price': 145.00, 'labor_price': 122.52, 'equipment_price': 0, 'labor_hours': 2.17, 'waste_factor': 10},
    {'item_code': 'RFG FELT15', 'description': 'Roofing felt - 15 lb', 'unit': 'SQ',
     'material_price': 12.50, 'labor_price': 7.37, 'equipment_price': 0, 'labor_hours': 0.13, 'waste_factor': 5},
    {'item_code': 'RFG DRIP', 'description': 'Drip edge - aluminum', 'unit': 'LF',
     'material_price': 1.25, 'labor_price': 1.09, 'equipment_price': 0, 'labor_hours': 0.02, 'waste_factor': 5},
    {'item_code': 'RFG RIDGE', 'description': 'Ridge cap - composition shingles', 'unit': 'LF',
     'material_price': 4.50, 'labor_price': 3.95, 'equipment_price': 0, 'labor_hours': 0.07, 'waste_factor': 5},
    {'item_code': 'RFG PBOOT', 'description': 'Pipe boot/jack - standard', 'unit': 'EA',
     'material_price': 28.00, 'labor_price': 17.67, 'equipment_price': 0, 'labor_hours': 0.31, 'waste_factor': 0},
    {'item_code': 'DMO RFGSHN<', 'description': 'R&R Composition shingles - tear off', 'unit': 'SQ',
     'material_price': 0, 'labor_price': 68.50, 'equipment_price': 0, 'labor_hours': 1.21, 'waste_factor': 0},
]


@pytest.fixture
def app(monkeypatch):
    monkeypatch.setenv('DATABASE_URL', 'sqlite://')
    monkeypatch.setenv('ENVIRONMENT', 'development')
    app = create_app()
    app.config['TESTING'] = True

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def categories(app):
    """Standard trade categories, {code: id}"""
    CatalogStore.initialize_default_categories()
    return CatalogStore.category_id_map()


@pytest.fixture
def seeded_catalog(app, categories):
    """Sample roofing items, {item_code: CatalogItem}"""
    items = {}
    for record in SAMPLE_CATALOG_ITEMS:
        category_code = record['item_code'].split(' ')[0]
        item, _ = CatalogStore.upsert(dict(record, category_id=categories.get(category_code)))
        items[item.item_code] = item
    return items


@pytest.fixture
def roof_macro(seeded_catalog):
    """ROOF-COMP-25: shingles and felt, both priced per total_squares"""
    macro = MacroService.create_macro({
        'macro_code': 'ROOF-COMP-25',
        'macro_name': 'Composition Roof - 25 yr',
        'category': 'Roofing',
        'trade_type': 'roofing',
    })
    for code in ('RFG LAMI<', 'RFG FELT15'):
        MacroService.add_macro_item(macro.id, {
            'catalog_item_id': seeded_catalog[code].id,
            'quantity_type': 'calculated',
            'input_field_name': 'total_squares',
            'quantity_multiplier': 1,
        })
    return macro
