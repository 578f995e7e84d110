"""
Vendor Pricing Controller

Work order price list, crew labor rates and supplier material prices.
Deletes are soft: the row is kept with deleted_at set.

Endpoints:
- GET    /api/pricing/work-orders              - List work order prices (?category=&q=)
- POST   /api/pricing/work-orders              - Create work order price
- GET    /api/pricing/work-orders/<id>         - Get work order price
- PUT    /api/pricing/work-orders/<id>         - Update work order price
- DELETE /api/pricing/work-orders/<id>         - Delete work order price
- GET    /api/pricing/labor-rates              - List labor rates (?crew_id=&trade_type=)
- POST   /api/pricing/labor-rates              - Create labor rate
- GET    /api/pricing/labor-rates/<id>         - Get labor rate
- PUT    /api/pricing/labor-rates/<id>         - Update labor rate
- DELETE /api/pricing/labor-rates/<id>         - Delete labor rate
- GET    /api/pricing/material-pricing         - List material prices (?supplier_id=&category=&q=)
- POST   /api/pricing/material-pricing         - Create material price
- GET    /api/pricing/material-pricing/<id>    - Get material price
- PUT    /api/pricing/material-pricing/<id>    - Update material price
- DELETE /api/pricing/material-pricing/<id>    - Delete material price
"""

from flask import request, jsonify
from config.logging import get_logger
from services.pricing_errors import PricingRecordNotFound
from services.vendor_pricing_store import (
    WorkOrderPricingStore, VendorLaborRateStore, VendorMaterialPricingStore
)
from utils.error_responses import validation_error_response, not_found_response, server_error_response
from utils.validators import (
    ValidationError, validate_work_order_pricing, validate_vendor_labor_rate, validate_vendor_material_pricing
)

log = get_logger()


def _active_only() -> bool:
    return request.args.get('active_only', 'true').lower() == 'true'


def _search() -> str:
    return request.args.get('q') or request.args.get('search')


def _get_record(store, key, record_id):
    try:
        record = store.get(record_id)
        return jsonify({'success': True, key: record.to_dict()}), 200
    except PricingRecordNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response(f'Failed to fetch {store.label.lower()}',
                                     f'Error fetching {store.label.lower()} {record_id}', e)


def _create_record(store, key, validate):
    try:
        data = validate(request.get_json(silent=True))
        record = store.create(data)
        return jsonify({
            'success': True,
            'message': f'{store.label} created successfully',
            key: record.to_dict()
        }), 201
    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        return server_error_response(f'Failed to create {store.label.lower()}',
                                     f'Error creating {store.label.lower()}', e)


def _update_record(store, key, validate, record_id):
    try:
        data = validate(request.get_json(silent=True), partial=True)
        record = store.update(record_id, data)
        return jsonify({
            'success': True,
            'message': f'{store.label} updated successfully',
            key: record.to_dict()
        }), 200
    except ValidationError as e:
        return validation_error_response(e)
    except PricingRecordNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response(f'Failed to update {store.label.lower()}',
                                     f'Error updating {store.label.lower()} {record_id}', e)


def _delete_record(store, record_id):
    try:
        store.delete(record_id)
        return jsonify({'success': True, 'message': f'{store.label} deleted successfully'}), 200
    except PricingRecordNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response(f'Failed to delete {store.label.lower()}',
                                     f'Error deleting {store.label.lower()} {record_id}', e)


# ============================================================================
# WORK ORDER PRICING
# ============================================================================

def get_work_order_prices():
    """GET /api/pricing/work-orders - List work order prices."""
    try:
        records = WorkOrderPricingStore.list(
            active_only=_active_only(),
            category=request.args.get('category'),
            search=_search()
        )
        return jsonify({
            'success': True,
            'work_orders': [r.to_dict() for r in records],
            'count': len(records)
        }), 200
    except Exception as e:
        return server_error_response('Failed to fetch work order prices', 'Error fetching work order prices', e)


def get_work_order_price(record_id):
    """GET /api/pricing/work-orders/<id>"""
    return _get_record(WorkOrderPricingStore, 'work_order', record_id)


def create_work_order_price():
    """POST /api/pricing/work-orders"""
    return _create_record(WorkOrderPricingStore, 'work_order', validate_work_order_pricing)


def update_work_order_price(record_id):
    """PUT /api/pricing/work-orders/<id>"""
    return _update_record(WorkOrderPricingStore, 'work_order', validate_work_order_pricing, record_id)


def delete_work_order_price(record_id):
    """DELETE /api/pricing/work-orders/<id>"""
    return _delete_record(WorkOrderPricingStore, record_id)


# ============================================================================
# LABOR RATES
# ============================================================================

def get_labor_rates():
    """GET /api/pricing/labor-rates - List labor rates, optionally for one crew."""
    try:
        records = VendorLaborRateStore.list(
            active_only=_active_only(),
            crew_id=request.args.get('crew_id'),
            trade_type=request.args.get('trade_type')
        )
        return jsonify({
            'success': True,
            'labor_rates': [r.to_dict() for r in records],
            'count': len(records)
        }), 200
    except Exception as e:
        return server_error_response('Failed to fetch labor rates', 'Error fetching labor rates', e)


def get_labor_rate(record_id):
    """GET /api/pricing/labor-rates/<id>"""
    return _get_record(VendorLaborRateStore, 'labor_rate', record_id)


def create_labor_rate():
    """POST /api/pricing/labor-rates"""
    return _create_record(VendorLaborRateStore, 'labor_rate', validate_vendor_labor_rate)


def update_labor_rate(record_id):
    """PUT /api/pricing/labor-rates/<id>"""
    return _update_record(VendorLaborRateStore, 'labor_rate', validate_vendor_labor_rate, record_id)


def delete_labor_rate(record_id):
    """DELETE /api/pricing/labor-rates/<id>"""
    return _delete_record(VendorLaborRateStore, record_id)


# ============================================================================
# MATERIAL PRICING
# ============================================================================

def get_material_prices():
    """GET /api/pricing/material-pricing - List material prices, optionally for one supplier."""
    try:
        records = VendorMaterialPricingStore.list(
            active_only=_active_only(),
            supplier_id=request.args.get('supplier_id'),
            category=request.args.get('category'),
            search=_search()
        )
        return jsonify({
            'success': True,
            'material_prices': [r.to_dict() for r in records],
            'count': len(records)
        }), 200
    except Exception as e:
        return server_error_response('Failed to fetch material prices', 'Error fetching material prices', e)


def get_material_price(record_id):
    """GET /api/pricing/material-pricing/<id>"""
    return _get_record(VendorMaterialPricingStore, 'material_price', record_id)


def create_material_price():
    """POST /api/pricing/material-pricing"""
    return _create_record(VendorMaterialPricingStore, 'material_price', validate_vendor_material_pricing)


def update_material_price(record_id):
    """PUT /api/pricing/material-pricing/<id>"""
    return _update_record(VendorMaterialPricingStore, 'material_price', validate_vendor_material_pricing, record_id)


def delete_material_price(record_id):
    """DELETE /api/pricing/material-pricing/<id>"""
    return _delete_record(VendorMaterialPricingStore, record_id)
