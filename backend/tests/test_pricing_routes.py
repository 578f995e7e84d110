"""
Pricing API Route Tests
Run with: pytest tests/test_pricing_routes.py -v

Exercises the Flask blueprints end to end against in-memory SQLite.
"""

import io
import os
import sys
import pytest
from openpyxl import Workbook

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from config.db import db
from models.pricing_macro import PricingMacro


class TestHealth:

    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'

    def test_security_headers(self, client):
        response = client.get('/api/health')
        assert response.headers['X-Content-Type-Options'] == 'nosniff'
        assert response.headers['X-Frame-Options'] == 'DENY'


class TestLineItemRoutes:

    def test_create_and_get(self, client, categories):
        response = client.post('/api/xactimate/line-items', json={
            'item_code': 'RFG DRIP',
            'description': 'Drip edge - aluminum',
            'unit': 'lf',
            'category_id': categories['RFG'],
            'material_price': 1.25,
            'labor_price': 1.09,
            'waste_factor': 5,
        })
        assert response.status_code == 201
        item = response.get_json()['item']
        assert item['unit'] == 'LF'
        assert item['unit_price'] == pytest.approx(2.34)
        assert item['category_code'] == 'RFG'

        fetched = client.get(f"/api/xactimate/line-items/{item['id']}")
        assert fetched.status_code == 200
        assert fetched.get_json()['item']['item_code'] == 'RFG DRIP'

    def test_create_missing_fields(self, client):
        response = client.post('/api/xactimate/line-items', json={'material_price': 1})
        assert response.status_code == 400
        body = response.get_json()
        assert body['success'] is False
        fields = {e['field'] for e in body['details']['errors']}
        assert fields == {'item_code', 'description'}

    @pytest.mark.parametrize("payload", [
        {'material_price': -1},
        {'waste_factor': 150},
        {'unit': 'FURLONG'},
        {'labor_price': 'lots'},
    ])
    def test_create_rejects_bad_values(self, client, payload):
        base = {'item_code': 'X 1', 'description': 'x'}
        response = client.post('/api/xactimate/line-items', json=dict(base, **payload))
        assert response.status_code == 400

    def test_duplicate_code(self, client, seeded_catalog):
        response = client.post('/api/xactimate/line-items', json={
            'item_code': 'RFG DRIP', 'description': 'again'
        })
        assert response.status_code == 400

    def test_update_recomputes_unit_price(self, client, seeded_catalog):
        item_id = seeded_catalog['RFG RIDGE'].id
        response = client.put(f'/api/xactimate/line-items/{item_id}', json={'material_price': 5.00})

        assert response.status_code == 200
        assert response.get_json()['item']['unit_price'] == pytest.approx(8.95)

    def test_update_inconsistent_unit_price_conflicts(self, client, seeded_catalog):
        item_id = seeded_catalog['RFG RIDGE'].id
        response = client.put(f'/api/xactimate/line-items/{item_id}', json={'unit_price': 10.00})

        assert response.status_code == 409
        assert response.get_json()['component_total'] == pytest.approx(8.45)

    def test_missing_item_404(self, client):
        assert client.get('/api/xactimate/line-items/999').status_code == 404
        assert client.put('/api/xactimate/line-items/999', json={'labor_price': 1}).status_code == 404
        assert client.delete('/api/xactimate/line-items/999').status_code == 404

    def test_list_search_and_paginate(self, client, seeded_catalog):
        response = client.get('/api/xactimate/line-items?q=shingle&per_page=2&page=1')
        body = response.get_json()

        assert response.status_code == 200
        assert body['total_count'] == 3
        assert body['total_pages'] == 2
        assert [i['item_code'] for i in body['items']] == ['DMO RFGSHN<', 'RFG LAMI<']

    def test_list_bad_category(self, client):
        assert client.get('/api/xactimate/line-items?category_id=abc').status_code == 400

    def test_delete_reports_affected_macro_items(self, client, roof_macro, seeded_catalog):
        response = client.delete(f"/api/xactimate/line-items/{seeded_catalog['RFG FELT15'].id}")

        body = response.get_json()
        assert response.status_code == 200
        assert len(body['affected_macro_items']) == 1
        assert 'warning' in body

    def test_archive_hides_item_and_reimport_revives_it(self, client, roof_macro, seeded_catalog):
        felt_id = seeded_catalog['RFG FELT15'].id
        response = client.delete(f'/api/xactimate/line-items/{felt_id}?archive=true')

        body = response.get_json()
        assert response.status_code == 200
        assert body['archived'] is True
        assert len(body['affected_macro_items']) == 1

        listed = client.get('/api/xactimate/line-items?q=felt').get_json()
        assert listed['total_count'] == 0
        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                           json={'measurements': {'total_squares': 25}}).get_json()['calculation']
        assert calc['totals']['total'] == pytest.approx(7356.80)
        assert [w['type'] for w in calc['warnings']] == ['reference_missing']

        client.post('/api/xactimate/import/rows', json={'rows': [
            {'row': 1, 'item_code': 'RFG FELT15', 'description': 'Roofing felt - 15 lb', 'unit': 'SQ',
             'material_cost': 12.50, 'labor_cost': 7.37, 'labor_overhead': 0},
        ]})
        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                           json={'measurements': {'total_squares': 25}}).get_json()['calculation']
        # imported rows carry no waste factor
        assert calc['totals']['total'] == pytest.approx(7356.80 + 25 * 19.87)
        assert calc['warnings'] == []

    def test_string_flags_are_parsed(self, client, seeded_catalog):
        item_id = seeded_catalog['RFG DRIP'].id

        response = client.put(f'/api/xactimate/line-items/{item_id}', json={'is_taxable': 'false'})
        assert response.status_code == 200
        assert response.get_json()['item']['is_taxable'] is False

        response = client.put(f'/api/xactimate/line-items/{item_id}', json={'is_active': 'maybe'})
        assert response.status_code == 400
        assert response.get_json()['details']['errors'][0]['field'] == 'is_active'


class TestCategoryRoutes:

    def test_seed_and_list(self, client):
        seeded = client.post('/api/xactimate/categories/defaults')
        assert seeded.get_json()['added'] > 0

        response = client.get('/api/xactimate/categories')
        codes = [c['category_code'] for c in response.get_json()['categories']]
        assert 'RFG' in codes

    def test_create_category(self, client):
        response = client.post('/api/xactimate/categories', json={'category_code': 'awn', 'category_name': 'Awnings'})
        assert response.status_code == 201
        assert response.get_json()['category']['category_code'] == 'AWN'

    def test_create_category_requires_name(self, client):
        response = client.post('/api/xactimate/categories', json={'category_code': 'AWN'})
        assert response.status_code == 400


class TestImportRoutes:

    def test_import_rows(self, client, categories):
        response = client.post('/api/xactimate/import/rows', json={
            'price_list_region': 'TXDF8X',
            'rows': [
                {'row': 1, 'item_code': 'RFG 300S', 'category_code': 'RFG', 'description': '3 tab shingles',
                 'unit': 'SQ', 'material_cost': 120.35, 'labor_cost': 98.42, 'labor_overhead': 23.10},
                {'row': 2, 'item_code': '', 'description': 'no code'},
            ]
        })

        result = response.get_json()['result']
        assert response.status_code == 200
        assert result['created'] == 1
        assert result['errors'] == [{'row': 2, 'message': 'Missing item code'}]

    def test_import_rows_requires_list(self, client):
        assert client.post('/api/xactimate/import/rows', json={'rows': 'nope'}).status_code == 400

    def test_import_rows_bad_price_source(self, client):
        response = client.post('/api/xactimate/import/rows', json={'rows': [], 'price_source': 'guess'})
        assert response.status_code == 400

    def test_import_file(self, client, categories, tmp_path, monkeypatch):
        monkeypatch.setattr('controllers.xactimate_pricing_controller.TEMP_UPLOAD_DIR', str(tmp_path / 'uploads'))

        wb = Workbook()
        ws = wb.active
        ws.append(['Cat', 'Sel', 'Description', 'Unit', 'Unit Cost', 'Material', "Worker's Wage", 'Labor Overhead'])
        ws.append(['RFG', 'DRIP', 'Drip edge - aluminum', 'LF', 2.34, 1.25, 1.00, 0.09])
        ws.append([None, None, None, None, None, None, None, None])
        ws.append(['RFG', 'RIDGE', 'Ridge cap', 'LF', 8.45, 4.50, 3.50, 0.45])
        buffer = io.BytesIO()
        wb.save(buffer)
        buffer.seek(0)

        response = client.post(
            '/api/xactimate/import',
            data={'file': (buffer, 'prices.xlsx')},
            content_type='multipart/form-data'
        )

        result = response.get_json()['result']
        assert response.status_code == 200
        assert result['created'] == 2
        assert result['skipped'] == 1
        assert result['errors'] == []
        assert os.listdir(tmp_path / 'uploads') == []

    def test_import_rejects_extension(self, client):
        response = client.post(
            '/api/xactimate/import',
            data={'file': (io.BytesIO(b'data'), 'prices.pdf')},
            content_type='multipart/form-data'
        )
        assert response.status_code == 400

    def test_import_without_file(self, client):
        assert client.post('/api/xactimate/import', data={}, content_type='multipart/form-data').status_code == 400


class TestMacroRoutes:

    def test_create_macro_defaults_inputs(self, client):
        response = client.post('/api/pricing-macros', json={'macro_code': 'ROOF-1', 'macro_name': 'Roof'})

        assert response.status_code == 201
        macro = response.get_json()['macro']
        names = [i['name'] for i in macro['required_inputs']]
        assert names[0] == 'total_squares'
        assert len(names) == 10
        assert macro['items'] == []

    def test_duplicate_input_names_rejected(self, client):
        response = client.post('/api/pricing-macros', json={
            'macro_code': 'ROOF-2', 'macro_name': 'Roof',
            'required_inputs': [{'name': 'ridge_length'}, {'name': 'ridge_length'}]
        })
        assert response.status_code == 400

    def test_duplicate_macro_code_rejected(self, client, roof_macro):
        response = client.post('/api/pricing-macros', json={'macro_code': 'ROOF-COMP-25', 'macro_name': 'Again'})
        assert response.status_code == 400

    def test_calculate_roof_comp_25(self, client, roof_macro):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                               json={'measurements': {'total_squares': 25}})

        calc = response.get_json()['calculation']
        assert response.status_code == 200
        assert calc['totals']['total'] == pytest.approx(7878.39, abs=0.01)
        assert [line['item_code'] for line in calc['lines']] == ['RFG LAMI<', 'RFG FELT15']
        assert calc['lines'][0]['quantity'] == pytest.approx(27.5)
        assert calc['warnings'] == []

    def test_calculate_reads_live_catalog_prices(self, client, roof_macro, seeded_catalog):
        client.put(f"/api/xactimate/line-items/{seeded_catalog['RFG FELT15'].id}", json={'material_price': 22.50})

        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                           json={'measurements': {'total_squares': 10}}).get_json()['calculation']

        assert calc['lines'][1]['unit_price'] == pytest.approx(29.87)

    def test_calculate_missing_measurements_warns(self, client, roof_macro):
        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate', json={}).get_json()['calculation']

        assert calc['totals']['total'] == 0
        assert {w['type'] for w in calc['warnings']} == {'unresolved_input'}

    def test_calculate_rejects_non_numeric_measurement(self, client, roof_macro):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                               json={'measurements': {'total_squares': 'twenty'}})
        assert response.status_code == 400

    def test_calculate_missing_macro(self, client):
        assert client.post('/api/pricing-macros/999/calculate', json={}).status_code == 404

    def test_refresh_totals_writes_snapshot(self, client, roof_macro):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/refresh-totals',
                               json={'measurements': {'total_squares': 25}})

        body = response.get_json()
        assert response.status_code == 200
        assert body['macro']['calculated_total'] == pytest.approx(7878.39, abs=0.01)
        assert body['macro']['totals_refreshed_at'] is not None

    def test_failed_refresh_leaves_snapshot(self, client, roof_macro):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/refresh-totals',
                               json={'measurements': {'total_squares': 'bad'}})

        assert response.status_code == 400
        macro = db.session.get(PricingMacro, roof_macro.id)
        assert macro.totals_refreshed_at is None

    def test_bind_calculated_item_requires_declared_input(self, client, roof_macro, seeded_catalog):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/items', json={
            'catalog_item_id': seeded_catalog['RFG RIDGE'].id,
            'quantity_type': 'calculated',
            'input_field_name': 'ridge_lenght',
        })
        assert response.status_code == 400
        assert response.get_json()['field'] == 'input_field_name'

    def test_bind_fixed_item_and_snapshot(self, client, roof_macro, seeded_catalog):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/items', json={
            'catalog_item_id': seeded_catalog['RFG PBOOT'].id,
            'quantity_type': 'fixed',
            'fixed_quantity': 3,
            'group_name': 'Flashing',
        })

        item = response.get_json()['item']
        assert response.status_code == 201
        assert item['item_code'] == 'RFG PBOOT'
        assert item['unit'] == 'EA'
        assert item['sort_order'] == 2
        assert 'unit_price' not in item

    def test_bind_unknown_catalog_item(self, client, roof_macro):
        response = client.post(f'/api/pricing-macros/{roof_macro.id}/items', json={
            'catalog_item_id': 999, 'quantity_type': 'fixed'
        })
        assert response.status_code == 404

    def test_update_and_remove_macro_item(self, client, roof_macro):
        macro = client.get(f'/api/pricing-macros/{roof_macro.id}').get_json()['macro']
        felt_binding = macro['items'][1]['id']

        excluded = client.put(f'/api/pricing-macros/items/{felt_binding}', json={'is_included': False})
        assert excluded.status_code == 200

        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                           json={'measurements': {'total_squares': 25}}).get_json()['calculation']
        assert calc['totals']['total'] == pytest.approx(7356.80)
        assert len(calc['lines']) == 2

        assert client.delete(f'/api/pricing-macros/items/{felt_binding}').status_code == 200
        assert client.delete(f'/api/pricing-macros/items/{felt_binding}').status_code == 404

    def test_check_reports_missing_reference(self, client, roof_macro, seeded_catalog):
        client.delete(f"/api/xactimate/line-items/{seeded_catalog['RFG LAMI<'].id}")

        report = client.get(f'/api/pricing-macros/{roof_macro.id}/check').get_json()['report']

        assert report['is_clean'] is False
        assert [m['item_code'] for m in report['missing_references']] == ['RFG LAMI<']
        assert report['undeclared_inputs'] == []

    def test_update_inputs_then_check_reports_undeclared(self, client, roof_macro):
        response = client.put(f'/api/pricing-macros/{roof_macro.id}', json={
            'required_inputs': [{'name': 'ridge_length', 'label': 'Ridge', 'unit': 'LF'}]
        })
        assert response.status_code == 200

        report = client.get(f'/api/pricing-macros/{roof_macro.id}/check').get_json()['report']
        assert len(report['undeclared_inputs']) == 2

    def test_soft_delete(self, client, roof_macro):
        assert client.delete(f'/api/pricing-macros/{roof_macro.id}').status_code == 200

        listed = client.get('/api/pricing-macros').get_json()['macros']
        assert listed == []

        all_macros = client.get('/api/pricing-macros?active_only=false').get_json()['macros']
        assert all_macros[0]['is_active'] is False

    def test_null_markup_value_leaves_macro_unchanged(self, client, roof_macro):
        client.put(f'/api/pricing-macros/{roof_macro.id}', json={'markup_type': 'percentage', 'markup_value': 10})

        response = client.put(f'/api/pricing-macros/{roof_macro.id}', json={'markup_value': None})

        macro = response.get_json()['macro']
        assert response.status_code == 200
        assert macro['markup_value'] == 10

    def test_string_false_excludes_macro_item(self, client, roof_macro):
        felt_binding = client.get(f'/api/pricing-macros/{roof_macro.id}').get_json()['macro']['items'][1]['id']

        response = client.put(f'/api/pricing-macros/items/{felt_binding}', json={'is_included': 'false'})
        assert response.status_code == 200
        assert response.get_json()['item']['is_included'] is False

        calc = client.post(f'/api/pricing-macros/{roof_macro.id}/calculate',
                           json={'measurements': {'total_squares': 25}}).get_json()['calculation']
        assert calc['totals']['total'] == pytest.approx(7356.80)

    def test_unrecognized_flag_rejected(self, client, roof_macro):
        felt_binding = client.get(f'/api/pricing-macros/{roof_macro.id}').get_json()['macro']['items'][1]['id']

        response = client.put(f'/api/pricing-macros/items/{felt_binding}', json={'is_included': 'maybe'})

        assert response.status_code == 400
        assert response.get_json()['details']['errors'][0]['field'] == 'is_included'


TARP = {
    'item_code': 'WO-TARP', 'item_name': 'Emergency roof tarp', 'category': 'Repairs', 'unit': 'EA',
    'unit_price': 350.00, 'material_cost': 75.00, 'labor_cost': 275.00, 'pricing_type': 'flat',
}


class TestWorkOrderPricingRoutes:

    def test_create_get_and_list(self, client):
        response = client.post('/api/pricing/work-orders', json=TARP)
        assert response.status_code == 201
        work_order = response.get_json()['work_order']
        assert work_order['unit_price'] == 350.00
        assert work_order['is_active'] is True

        client.post('/api/pricing/work-orders', json={
            'item_code': 'WO-GUTCLN', 'item_name': 'Gutter cleaning', 'category': 'Maintenance',
            'unit': 'LF', 'unit_price': 1.50, 'pricing_type': 'per_unit', 'min_price': 150,
        })

        fetched = client.get(f"/api/pricing/work-orders/{work_order['id']}")
        assert fetched.get_json()['work_order']['item_code'] == 'WO-TARP'

        listed = client.get('/api/pricing/work-orders').get_json()
        assert [w['item_code'] for w in listed['work_orders']] == ['WO-GUTCLN', 'WO-TARP']
        repairs = client.get('/api/pricing/work-orders?category=Repairs').get_json()['work_orders']
        assert [w['item_code'] for w in repairs] == ['WO-TARP']
        searched = client.get('/api/pricing/work-orders?q=gutter').get_json()['work_orders']
        assert [w['item_code'] for w in searched] == ['WO-GUTCLN']

    def test_unit_price_taken_as_entered(self, client):
        response = client.post('/api/pricing/work-orders', json=dict(TARP, unit_price=399.00))
        assert response.get_json()['work_order']['unit_price'] == 399.00

    def test_duplicate_code_rejected(self, client):
        client.post('/api/pricing/work-orders', json=TARP)
        response = client.post('/api/pricing/work-orders', json=TARP)
        assert response.status_code == 400
        assert response.get_json()['field'] == 'item_code'

    def test_range_min_above_max_rejected(self, client):
        response = client.post('/api/pricing/work-orders', json=dict(
            TARP, item_code='WO-LEAK', pricing_type='range', min_price=500, max_price=250
        ))
        assert response.status_code == 400

        created = client.post('/api/pricing/work-orders', json=dict(
            TARP, item_code='WO-LEAK', pricing_type='range', min_price=250, max_price=500
        )).get_json()['work_order']
        response = client.put(f"/api/pricing/work-orders/{created['id']}", json={'min_price': 600})
        assert response.status_code == 400

    def test_bad_pricing_type_rejected(self, client):
        assert client.post('/api/pricing/work-orders', json=dict(TARP, pricing_type='hourly')).status_code == 400

    def test_update_skips_null_required_fields(self, client):
        created = client.post('/api/pricing/work-orders', json=TARP).get_json()['work_order']

        response = client.put(f"/api/pricing/work-orders/{created['id']}",
                              json={'unit_price': None, 'description': 'Up to 20x30'})

        assert response.status_code == 200
        assert response.get_json()['work_order']['unit_price'] == 350.00
        assert response.get_json()['work_order']['description'] == 'Up to 20x30'

    def test_soft_delete(self, client):
        created = client.post('/api/pricing/work-orders', json=TARP).get_json()['work_order']

        assert client.delete(f"/api/pricing/work-orders/{created['id']}").status_code == 200

        assert client.get(f"/api/pricing/work-orders/{created['id']}").status_code == 404
        assert client.get('/api/pricing/work-orders?active_only=false').get_json()['work_orders'] == []
        assert client.delete(f"/api/pricing/work-orders/{created['id']}").status_code == 404
        # the code is free again once deleted
        assert client.post('/api/pricing/work-orders', json=TARP).status_code == 201


class TestLaborRateRoutes:

    def test_filter_by_crew(self, client):
        for crew_id, name, trade in (('crew-7', 'Tear off and install', 'roofing'),
                                     ('crew-7', 'Seamless gutters', 'gutters'),
                                     ('crew-9', 'Tear off and install', 'roofing')):
            response = client.post('/api/pricing/labor-rates', json={
                'crew_id': crew_id, 'rate_name': name, 'trade_type': trade,
                'rate_type': 'per_square', 'rate_amount': 85,
            })
            assert response.status_code == 201

        rates = client.get('/api/pricing/labor-rates?crew_id=crew-7').get_json()['labor_rates']

        assert [r['trade_type'] for r in rates] == ['gutters', 'roofing']
        assert all(r['crew_id'] == 'crew-7' for r in rates)
        assert rates[0]['effective_date'] is not None

    def test_requires_rate_amount(self, client):
        response = client.post('/api/pricing/labor-rates', json={
            'crew_id': 'crew-7', 'rate_name': 'Tear off', 'trade_type': 'roofing'
        })
        assert response.status_code == 400

    def test_expiration_before_effective_rejected(self, client):
        response = client.post('/api/pricing/labor-rates', json={
            'crew_id': 'crew-7', 'rate_name': 'Tear off', 'trade_type': 'roofing', 'rate_amount': 85,
            'effective_date': '2026-06-01', 'expiration_date': '2026-01-01',
        })
        assert response.status_code == 400
        assert response.get_json()['details']['errors'][0]['field'] == 'expiration_date'

    def test_update_and_delete(self, client):
        rate = client.post('/api/pricing/labor-rates', json={
            'crew_id': 'crew-7', 'rate_name': 'Tear off', 'trade_type': 'roofing', 'rate_amount': 85,
        }).get_json()['labor_rate']

        updated = client.put(f"/api/pricing/labor-rates/{rate['id']}",
                             json={'rate_amount': 92.5, 'includes_dump_fees': 'yes'})
        assert updated.status_code == 200
        assert updated.get_json()['labor_rate']['rate_amount'] == 92.5
        assert updated.get_json()['labor_rate']['includes_dump_fees'] is True

        assert client.delete(f"/api/pricing/labor-rates/{rate['id']}").status_code == 200
        assert client.get('/api/pricing/labor-rates?crew_id=crew-7').get_json()['labor_rates'] == []


class TestMaterialPricingRoutes:

    def shingle_bundle(self, **overrides):
        payload = {
            'supplier_id': 'abc-supply', 'product_code': 'GAF-TIM-HDZ', 'product_name': 'Timberline HDZ',
            'manufacturer': 'GAF', 'category': 'Shingles', 'unit': 'SQ', 'unit_price': 128.00,
            'tier1_quantity': 30, 'tier1_price': 121.00,
        }
        payload.update(overrides)
        return payload

    def test_create_linked_to_catalog_item(self, client, seeded_catalog):
        response = client.post('/api/pricing/material-pricing', json=self.shingle_bundle(
            xactimate_item_id=seeded_catalog['RFG LAMI<'].id
        ))

        price = response.get_json()['material_price']
        assert response.status_code == 201
        assert price['xactimate_item_code'] == 'RFG LAMI<'
        assert price['tiers'] == [{'quantity': 30, 'price': 121.00}]

    def test_unknown_catalog_item_rejected(self, client):
        response = client.post('/api/pricing/material-pricing', json=self.shingle_bundle(xactimate_item_id=999))
        assert response.status_code == 400
        assert response.get_json()['field'] == 'xactimate_item_id'

    def test_tier_quantity_needs_price(self, client):
        response = client.post('/api/pricing/material-pricing', json=self.shingle_bundle(tier2_quantity=60))
        assert response.status_code == 400

    def test_filter_by_supplier_and_duplicate_product(self, client):
        client.post('/api/pricing/material-pricing', json=self.shingle_bundle())
        client.post('/api/pricing/material-pricing', json=self.shingle_bundle(supplier_id='beacon', unit_price=131.50))

        duplicate = client.post('/api/pricing/material-pricing', json=self.shingle_bundle())
        assert duplicate.status_code == 400

        prices = client.get('/api/pricing/material-pricing?supplier_id=beacon').get_json()['material_prices']
        assert [p['unit_price'] for p in prices] == [131.50]

    def test_soft_delete(self, client):
        price = client.post('/api/pricing/material-pricing', json=self.shingle_bundle()).get_json()['material_price']

        assert client.delete(f"/api/pricing/material-pricing/{price['id']}").status_code == 200
        assert client.get(f"/api/pricing/material-pricing/{price['id']}").status_code == 404
        assert client.put(f"/api/pricing/material-pricing/{price['id']}", json={'unit_price': 1}).status_code == 404
