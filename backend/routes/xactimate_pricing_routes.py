"""
Xactimate Pricing Routes

Routes for the Xactimate line item catalog, its categories and price list import.
"""

from flask import Blueprint
from controllers.xactimate_pricing_controller import (
    get_categories,
    create_category,
    initialize_default_categories,
    get_line_items,
    get_line_item,
    create_line_item,
    update_line_item,
    delete_line_item,
    import_price_list,
    import_rows,
)

xactimate_pricing_routes = Blueprint('xactimate_pricing_routes', __name__, url_prefix='/api/xactimate')


# ============================================================================
# CATEGORIES
# ============================================================================

@xactimate_pricing_routes.route('/categories', methods=['GET'])
def list_categories():
    """GET /api/xactimate/categories"""
    return get_categories()


@xactimate_pricing_routes.route('/categories', methods=['POST'])
def add_category():
    """POST /api/xactimate/categories"""
    return create_category()


@xactimate_pricing_routes.route('/categories/defaults', methods=['POST'])
def seed_categories():
    """POST /api/xactimate/categories/defaults"""
    return initialize_default_categories()


# ============================================================================
# LINE ITEMS
# ============================================================================

@xactimate_pricing_routes.route('/line-items', methods=['GET'])
def list_line_items():
    """GET /api/xactimate/line-items?q=shingle&category_id=1"""
    return get_line_items()


@xactimate_pricing_routes.route('/line-items/<int:item_id>', methods=['GET'])
def get_single_line_item(item_id):
    """GET /api/xactimate/line-items/<id>"""
    return get_line_item(item_id)


@xactimate_pricing_routes.route('/line-items', methods=['POST'])
def add_line_item():
    """POST /api/xactimate/line-items"""
    return create_line_item()


@xactimate_pricing_routes.route('/line-items/<int:item_id>', methods=['PUT'])
def edit_line_item(item_id):
    """PUT /api/xactimate/line-items/<id>"""
    return update_line_item(item_id)


@xactimate_pricing_routes.route('/line-items/<int:item_id>', methods=['DELETE'])
def remove_line_item(item_id):
    """DELETE /api/xactimate/line-items/<id>"""
    return delete_line_item(item_id)


# ============================================================================
# IMPORT
# ============================================================================

@xactimate_pricing_routes.route('/import', methods=['POST'])
def upload_price_list():
    """POST /api/xactimate/import (multipart, field 'file')"""
    return import_price_list()


@xactimate_pricing_routes.route('/import/rows', methods=['POST'])
def upload_rows():
    """POST /api/xactimate/import/rows"""
    return import_rows()
