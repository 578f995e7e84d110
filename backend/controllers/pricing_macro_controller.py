"""
Pricing Macro Controller

Reusable bundles of catalog line items priced from roof measurements.

Endpoints:
- GET    /api/pricing-macros                      - List macros
- POST   /api/pricing-macros                      - Create macro
- GET    /api/pricing-macros/<id>                 - Get macro with items
- PUT    /api/pricing-macros/<id>                 - Update macro
- DELETE /api/pricing-macros/<id>                 - Soft delete macro
- POST   /api/pricing-macros/<id>/items           - Bind a catalog item
- PUT    /api/pricing-macros/items/<id>           - Update macro item
- DELETE /api/pricing-macros/items/<id>           - Remove macro item
- POST   /api/pricing-macros/<id>/calculate       - Price macro for measurements
- POST   /api/pricing-macros/<id>/refresh-totals  - Recompute and store list-view totals
- GET    /api/pricing-macros/<id>/check           - Undeclared inputs / missing catalog items
"""

from flask import request, jsonify
from config.logging import get_logger
from services.macro_service import MacroService
from services.pricing_errors import CatalogItemNotFound, MacroNotFound, MacroItemNotFound
from utils.error_responses import validation_error_response, not_found_response, server_error_response
from utils.validators import (
    ValidationError, validate_macro, validate_macro_item, validate_measurements
)

log = get_logger()


# ============================================================================
# MACROS CRUD
# ============================================================================

def get_all_macros():
    """GET /api/pricing-macros - List macros."""
    try:
        macros = MacroService.list_macros(
            active_only=request.args.get('active_only', 'true').lower() == 'true',
            category=request.args.get('category'),
            trade_type=request.args.get('trade_type'),
            search=request.args.get('q') or request.args.get('search')
        )
        return jsonify({
            'success': True,
            'macros': [m.to_dict() for m in macros],
            'count': len(macros)
        }), 200
    except Exception as e:
        return server_error_response('Failed to fetch pricing macros', 'Error fetching pricing macros', e)


def get_macro(macro_id):
    """GET /api/pricing-macros/<id> - Get macro with items."""
    try:
        macro = MacroService.get_macro(macro_id)
        return jsonify({'success': True, 'macro': macro.to_dict_full()}), 200
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to fetch pricing macro', f'Error fetching pricing macro {macro_id}', e)


def create_macro():
    """POST /api/pricing-macros - Create macro."""
    try:
        data = validate_macro(request.get_json(silent=True))
        macro = MacroService.create_macro(data)
        return jsonify({
            'success': True,
            'message': 'Pricing macro created successfully',
            'macro': macro.to_dict_full()
        }), 201
    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        return server_error_response('Failed to create pricing macro', 'Error creating pricing macro', e)


def update_macro(macro_id):
    """PUT /api/pricing-macros/<id> - Update macro."""
    try:
        data = validate_macro(request.get_json(silent=True), partial=True)
        macro = MacroService.update_macro(macro_id, data)
        return jsonify({
            'success': True,
            'message': 'Pricing macro updated successfully',
            'macro': macro.to_dict_full()
        }), 200
    except ValidationError as e:
        return validation_error_response(e)
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to update pricing macro', f'Error updating pricing macro {macro_id}', e)


def delete_macro(macro_id):
    """DELETE /api/pricing-macros/<id> - Soft delete macro."""
    try:
        MacroService.delete_macro(macro_id)
        return jsonify({
            'success': True,
            'message': 'Pricing macro deleted successfully'
        }), 200
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to delete pricing macro', f'Error deleting pricing macro {macro_id}', e)


# ============================================================================
# MACRO ITEMS
# ============================================================================

def add_macro_item(macro_id):
    """POST /api/pricing-macros/<id>/items - Bind a catalog item."""
    try:
        data = validate_macro_item(request.get_json(silent=True))
        macro_item = MacroService.add_macro_item(macro_id, data)
        return jsonify({
            'success': True,
            'message': 'Macro item added successfully',
            'item': macro_item.to_dict()
        }), 201
    except ValidationError as e:
        return validation_error_response(e)
    except (MacroNotFound, CatalogItemNotFound) as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to add macro item', f'Error adding item to macro {macro_id}', e)


def update_macro_item(macro_item_id):
    """PUT /api/pricing-macros/items/<id> - Update macro item."""
    try:
        data = validate_macro_item(request.get_json(silent=True), partial=True)
        macro_item = MacroService.update_macro_item(macro_item_id, data)
        return jsonify({
            'success': True,
            'message': 'Macro item updated successfully',
            'item': macro_item.to_dict()
        }), 200
    except ValidationError as e:
        return validation_error_response(e)
    except (MacroItemNotFound, CatalogItemNotFound) as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to update macro item', f'Error updating macro item {macro_item_id}', e)


def delete_macro_item(macro_item_id):
    """DELETE /api/pricing-macros/items/<id> - Remove macro item."""
    try:
        MacroService.remove_macro_item(macro_item_id)
        return jsonify({
            'success': True,
            'message': 'Macro item removed successfully'
        }), 200
    except MacroItemNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to remove macro item', f'Error removing macro item {macro_item_id}', e)


# ============================================================================
# CALCULATION
# ============================================================================

def calculate_macro(macro_id):
    """POST /api/pricing-macros/<id>/calculate - Price macro for measurements."""
    try:
        data = request.get_json(silent=True) or {}
        measurements = validate_measurements(data.get('measurements'))
        result = MacroService.calculate_macro(macro_id, measurements)
        return jsonify({'success': True, 'calculation': result}), 200
    except ValidationError as e:
        return validation_error_response(e)
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to calculate macro', f'Error calculating macro {macro_id}', e)


def refresh_macro_totals(macro_id):
    """POST /api/pricing-macros/<id>/refresh-totals - Recompute and store totals."""
    try:
        data = request.get_json(silent=True) or {}
        measurements = validate_measurements(data.get('measurements'))
        result = MacroService.refresh_macro_totals(macro_id, measurements)
        macro = MacroService.get_macro(macro_id)
        return jsonify({
            'success': True,
            'message': 'Macro totals refreshed',
            'calculation': result,
            'macro': macro.to_dict()
        }), 200
    except ValidationError as e:
        return validation_error_response(e)
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to refresh macro totals', f'Error refreshing totals for macro {macro_id}', e)


def check_macro(macro_id):
    """GET /api/pricing-macros/<id>/check - Data-quality report."""
    try:
        report = MacroService.check_macro(macro_id)
        return jsonify({'success': True, 'report': report}), 200
    except MacroNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to check macro', f'Error checking macro {macro_id}', e)
