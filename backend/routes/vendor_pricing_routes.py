"""
Vendor Pricing Routes

Routes for the work order price list, crew labor rates and supplier material prices.
"""

from flask import Blueprint
from controllers.vendor_pricing_controller import (
    get_work_order_prices,
    get_work_order_price,
    create_work_order_price,
    update_work_order_price,
    delete_work_order_price,
    get_labor_rates,
    get_labor_rate,
    create_labor_rate,
    update_labor_rate,
    delete_labor_rate,
    get_material_prices,
    get_material_price,
    create_material_price,
    update_material_price,
    delete_material_price,
)

vendor_pricing_routes = Blueprint('vendor_pricing_routes', __name__, url_prefix='/api/pricing')


# ============================================================================
# WORK ORDER PRICING
# ============================================================================

@vendor_pricing_routes.route('/work-orders', methods=['GET'])
def list_work_orders():
    """GET /api/pricing/work-orders?category=Repairs&q=tarp"""
    return get_work_order_prices()


@vendor_pricing_routes.route('/work-orders', methods=['POST'])
def add_work_order():
    return create_work_order_price()


@vendor_pricing_routes.route('/work-orders/<int:record_id>', methods=['GET'])
def get_single_work_order(record_id):
    return get_work_order_price(record_id)


@vendor_pricing_routes.route('/work-orders/<int:record_id>', methods=['PUT'])
def edit_work_order(record_id):
    return update_work_order_price(record_id)


@vendor_pricing_routes.route('/work-orders/<int:record_id>', methods=['DELETE'])
def remove_work_order(record_id):
    return delete_work_order_price(record_id)


# ============================================================================
# LABOR RATES
# ============================================================================

@vendor_pricing_routes.route('/labor-rates', methods=['GET'])
def list_labor_rates():
    """GET /api/pricing/labor-rates?crew_id=crew-7"""
    return get_labor_rates()


@vendor_pricing_routes.route('/labor-rates', methods=['POST'])
def add_labor_rate():
    return create_labor_rate()


@vendor_pricing_routes.route('/labor-rates/<int:record_id>', methods=['GET'])
def get_single_labor_rate(record_id):
    return get_labor_rate(record_id)


@vendor_pricing_routes.route('/labor-rates/<int:record_id>', methods=['PUT'])
def edit_labor_rate(record_id):
    return update_labor_rate(record_id)


@vendor_pricing_routes.route('/labor-rates/<int:record_id>', methods=['DELETE'])
def remove_labor_rate(record_id):
    return delete_labor_rate(record_id)


# ============================================================================
# MATERIAL PRICING
# ============================================================================

@vendor_pricing_routes.route('/material-pricing', methods=['GET'])
def list_material_prices():
    """GET /api/pricing/material-pricing?supplier_id=abc-supply"""
    return get_material_prices()


@vendor_pricing_routes.route('/material-pricing', methods=['POST'])
def add_material_price():
    return create_material_price()


@vendor_pricing_routes.route('/material-pricing/<int:record_id>', methods=['GET'])
def get_single_material_price(record_id):
    return get_material_price(record_id)


@vendor_pricing_routes.route('/material-pricing/<int:record_id>', methods=['PUT'])
def edit_material_price(record_id):
    return update_material_price(record_id)


@vendor_pricing_routes.route('/material-pricing/<int:record_id>', methods=['DELETE'])
def remove_material_price(record_id):
    return delete_material_price(record_id)
