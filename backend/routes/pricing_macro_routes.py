"""
Pricing Macro Routes

Routes for pricing macros, their catalog item bindings and macro calculation.
"""

from flask import Blueprint
from controllers.pricing_macro_controller import (
    get_all_macros,
    get_macro,
    create_macro,
    update_macro,
    delete_macro,
    add_macro_item,
    update_macro_item,
    delete_macro_item,
    calculate_macro,
    refresh_macro_totals,
    check_macro,
)

pricing_macro_routes = Blueprint('pricing_macro_routes', __name__, url_prefix='/api/pricing-macros')


# ============================================================================
# MACROS
# ============================================================================

@pricing_macro_routes.route('', methods=['GET'])
def list_macros():
    """GET /api/pricing-macros"""
    return get_all_macros()


@pricing_macro_routes.route('', methods=['POST'])
def add_macro():
    """POST /api/pricing-macros"""
    return create_macro()


@pricing_macro_routes.route('/<int:macro_id>', methods=['GET'])
def get_single_macro(macro_id):
    """GET /api/pricing-macros/<id>"""
    return get_macro(macro_id)


@pricing_macro_routes.route('/<int:macro_id>', methods=['PUT'])
def edit_macro(macro_id):
    """PUT /api/pricing-macros/<id>"""
    return update_macro(macro_id)


@pricing_macro_routes.route('/<int:macro_id>', methods=['DELETE'])
def remove_macro(macro_id):
    """DELETE /api/pricing-macros/<id>"""
    return delete_macro(macro_id)


# ============================================================================
# MACRO ITEMS
# ============================================================================

@pricing_macro_routes.route('/<int:macro_id>/items', methods=['POST'])
def bind_item(macro_id):
    """POST /api/pricing-macros/<id>/items"""
    return add_macro_item(macro_id)


@pricing_macro_routes.route('/items/<int:macro_item_id>', methods=['PUT'])
def edit_macro_item(macro_item_id):
    """PUT /api/pricing-macros/items/<id>"""
    return update_macro_item(macro_item_id)


@pricing_macro_routes.route('/items/<int:macro_item_id>', methods=['DELETE'])
def unbind_item(macro_item_id):
    """DELETE /api/pricing-macros/items/<id>"""
    return delete_macro_item(macro_item_id)


# ============================================================================
# CALCULATION
# ============================================================================

@pricing_macro_routes.route('/<int:macro_id>/calculate', methods=['POST'])
def calculate(macro_id):
    """POST /api/pricing-macros/<id>/calculate {"measurements": {"total_squares": 25}}"""
    return calculate_macro(macro_id)


@pricing_macro_routes.route('/<int:macro_id>/refresh-totals', methods=['POST'])
def refresh_totals(macro_id):
    """POST /api/pricing-macros/<id>/refresh-totals"""
    return refresh_macro_totals(macro_id)


@pricing_macro_routes.route('/<int:macro_id>/check', methods=['GET'])
def check(macro_id):
    """GET /api/pricing-macros/<id>/check"""
    return check_macro(macro_id)
