"""
Import Mapper Tests
Run with: pytest tests/test_import_mapper.py -v

Row mapping is pure; the batch import tests use the app fixture.
"""

import os
import sys
import pytest
from sqlalchemy.exc import SQLAlchemyError

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.catalog_item import CatalogItem
from services.catalog_store import CatalogStore
from services.import_mapper import is_blank_row, map_import_row, unit_cost_mismatch
from services.pricing_errors import ImportRowError

CATEGORY_IDS = {'RFG': 1, 'GUT': 2}


def parsed_row(**overrides):
    row = {
        'row': 5,
        'item_code': 'RFG 300S',
        'category_code': 'RFG',
        'selector_code': '300S',
        'description': '3 tab - 25 yr. - composition shingle roofing',
        'unit': 'SQ',
        'unit_cost': 241.87,
        'material_cost': 120.35,
        'labor_cost': 98.42,
        'labor_overhead': 23.10,
        'equipment_cost': 0,
        'labor_minimum': 177.56,
        'useful_life': 25,
        'depreciation_percent': 4,
        'is_taxable': True,
        'raw_data': {'category': 'RFG', 'selector': '300S'},
    }
    row.update(overrides)
    return row


class TestMapImportRow:

    def test_labor_is_labor_cost_plus_overhead(self):
        record = map_import_row(parsed_row(), CATEGORY_IDS)
        assert record['labor_price'] == pytest.approx(121.52)

    def test_defaults_and_pass_through(self):
        record = map_import_row(parsed_row(), CATEGORY_IDS, price_list_region='TXDF8X')

        assert record['waste_factor'] == 0
        assert record['material_price'] == pytest.approx(120.35)
        assert record['equipment_price'] == 0
        assert record['labor_minimum'] == pytest.approx(177.56)
        assert record['useful_life_years'] == 25
        assert record['price_source'] == 'xactimate_import'
        assert record['price_list_region'] == 'TXDF8X'
        assert record['xactimate_data'] == {'category': 'RFG', 'selector': '300S'}
        assert 'unit_price' not in record

    def test_category_resolved_by_exact_code(self):
        assert map_import_row(parsed_row(category_code='GUT'), CATEGORY_IDS)['category_id'] == 2

    @pytest.mark.parametrize("code", ['XYZ', 'rfgx', '', None])
    def test_unknown_category_left_empty(self, code):
        assert map_import_row(parsed_row(category_code=code), CATEGORY_IDS)['category_id'] is None

    @pytest.mark.parametrize("raw_unit,expected", [
        ('EACH', 'EA'),
        ('Squares', 'SQ'),
        ('lf', 'LF'),
        (None, 'EA'),
    ])
    def test_unit_normalization(self, raw_unit, expected):
        assert map_import_row(parsed_row(unit=raw_unit), CATEGORY_IDS)['unit'] == expected

    @pytest.mark.parametrize("overrides,message", [
        ({'item_code': ''}, 'item code'),
        ({'description': '  '}, 'description'),
        ({'material_cost': 'abc'}, 'material_cost'),
        ({'unit': 'FURLONG'}, 'unit'),
        ({'labor_cost': -5, 'labor_overhead': 0}, 'negative'),
        ({'item_code': 'X' * 60}, 'Item code longer than 50'),
        ({'selector_code': 'S' * 60}, 'Selector code longer than 50'),
    ])
    def test_bad_rows_raise_import_row_error(self, overrides, message):
        with pytest.raises(ImportRowError) as exc:
            map_import_row(parsed_row(**overrides), CATEGORY_IDS)
        assert exc.value.row == 5
        assert message in exc.value.message

    def test_currency_strings_are_parsed(self):
        record = map_import_row(parsed_row(material_cost='$1,020.50'), CATEGORY_IDS)
        assert record['material_price'] == pytest.approx(1020.50)

    @pytest.mark.parametrize("value,expected", [('yes', True), ('No', False), (0, False), (6.25, True)])
    def test_taxable_flag(self, value, expected):
        assert map_import_row(parsed_row(is_taxable=value), CATEGORY_IDS)['is_taxable'] is expected


class TestUnitCostMismatch:

    def test_matching_unit_cost(self):
        row = parsed_row(unit_cost=241.87)
        assert unit_cost_mismatch(row, map_import_row(row, CATEGORY_IDS)) is None

    def test_mismatched_unit_cost(self):
        row = parsed_row(unit_cost=250.00)
        warning = unit_cost_mismatch(row, map_import_row(row, CATEGORY_IDS))
        assert '250.00' in warning
        assert '241.87' in warning

    def test_missing_unit_cost(self):
        row = parsed_row(unit_cost=None)
        assert unit_cost_mismatch(row, map_import_row(row, CATEGORY_IDS)) is None


class TestBlankRows:

    @pytest.mark.parametrize("row", [{}, None, {'item_code': '', 'description': '  ', 'unit_cost': None}])
    def test_blank(self, row):
        assert is_blank_row(row) is True

    def test_not_blank(self):
        assert is_blank_row({'description': 'x'}) is False


class TestImportCatalogRows:
    """Batch import with partial failure"""

    def test_partial_failure_report(self, categories):
        rows = [
            parsed_row(row=2),
            parsed_row(row=3, item_code='GUT ALUM', category_code='GUT', description='Gutter - aluminum', unit='LF',
                       unit_cost=None, material_cost=5.10, labor_cost=2.00, labor_overhead=0.50),
            parsed_row(row=4, description=''),
            {'row': 5},
            parsed_row(row=6, item_code='RFG BAD', material_cost='n/a'),
        ]

        result = CatalogStore.import_catalog_rows(rows)

        assert result['created'] == 2
        assert result['updated'] == 0
        assert result['skipped'] == 1
        assert [e['row'] for e in result['errors']] == [4, 6]
        assert result['total_rows'] == 5

        shingles = CatalogItem.query.filter_by(item_code='RFG 300S').one()
        assert float(shingles.unit_price) == pytest.approx(241.87)
        assert float(shingles.labor_price) == pytest.approx(121.52)
        assert shingles.category.category_code == 'RFG'
        assert shingles.price_source == 'xactimate_import'

        gutter = CatalogItem.query.filter_by(item_code='GUT ALUM').one()
        assert float(gutter.unit_price) == pytest.approx(7.60)

    def test_reimport_updates_existing(self, categories):
        CatalogStore.import_catalog_rows([parsed_row()])
        result = CatalogStore.import_catalog_rows([parsed_row(material_cost=130.35, unit_cost=251.87)])

        assert result['created'] == 0
        assert result['updated'] == 1
        assert result['warnings'] == []
        assert float(CatalogItem.query.filter_by(item_code='RFG 300S').one().unit_price) == pytest.approx(251.87)

    def test_unit_cost_and_category_warnings(self, categories):
        result = CatalogStore.import_catalog_rows([
            parsed_row(unit_cost=999.99, category_code='ZZZ'),
        ])

        assert result['created'] == 1
        messages = [w['message'] for w in result['warnings']]
        assert any('999.99' in m for m in messages)
        assert any("Unknown category 'ZZZ'" in m for m in messages)

    def test_duplicate_codes_in_one_batch(self, categories):
        result = CatalogStore.import_catalog_rows([
            parsed_row(row=2),
            parsed_row(row=3, material_cost=125.35, unit_cost=None),
        ])

        assert result['created'] == 1
        assert result['updated'] == 1
        assert CatalogItem.query.filter_by(item_code='RFG 300S').count() == 1

    def test_overlong_code_does_not_abort_batch(self, categories):
        result = CatalogStore.import_catalog_rows([
            parsed_row(row=2),
            parsed_row(row=3, item_code='X' * 60),
            parsed_row(row=4, item_code='RFG 240S', unit_cost=None),
        ])

        assert result['created'] == 2
        assert [e['row'] for e in result['errors']] == [3]
        assert CatalogItem.query.count() == 2
        assert CatalogItem.query.filter_by(item_code='RFG 240S').one() is not None

    def test_database_error_rolls_back_only_that_row(self, categories, monkeypatch):
        real_upsert = CatalogStore.upsert

        def failing_upsert(record, commit=True):
            if record['item_code'] == 'RFG BOOM':
                raise SQLAlchemyError('value too long for type character varying(50)')
            return real_upsert(record, commit=commit)

        monkeypatch.setattr(CatalogStore, 'upsert', staticmethod(failing_upsert))

        result = CatalogStore.import_catalog_rows([
            parsed_row(row=2),
            parsed_row(row=3, item_code='RFG BOOM'),
            parsed_row(row=4, item_code='RFG 240S', unit_cost=None),
        ])

        assert result['created'] == 2
        assert result['errors'] == [{'row': 3, 'message': 'Could not save RFG BOOM'}]
        assert {i.item_code for i in CatalogItem.query.all()} == {'RFG 300S', 'RFG 240S'}
