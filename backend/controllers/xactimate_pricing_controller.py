"""
Xactimate Pricing Controller

Catalog of priced Xactimate line items and their trade categories.

Endpoints:
- GET    /api/xactimate/categories            - List categories
- POST   /api/xactimate/categories            - Create category
- POST   /api/xactimate/categories/defaults   - Seed the standard categories
- GET    /api/xactimate/line-items            - List / search line items (paginated)
- GET    /api/xactimate/line-items/<id>       - Get single line item
- POST   /api/xactimate/line-items            - Create line item
- PUT    /api/xactimate/line-items/<id>       - Update line item
- DELETE /api/xactimate/line-items/<id>       - Delete line item (unlinks macro items)
                                                 ?archive=true keeps the row and hides it
- POST   /api/xactimate/import                - Import an .xlsx/.csv price list
- POST   /api/xactimate/import/rows           - Import already-parsed rows (JSON)
"""

import os
import uuid
from flask import request, jsonify
from werkzeug.utils import secure_filename
from config.constants import PriceSource, PRICE_SOURCES
from config.logging import get_logger
from services.catalog_store import CatalogStore
from services.pricing_errors import CatalogItemNotFound, InvariantViolation
from utils.error_responses import (
    validation_error_response, not_found_response, invariant_violation_response, server_error_response
)
from utils.validators import (
    ValidationError, validate_catalog_item, validate_file_upload, validate_pagination, sanitize_string
)
from utils.xactimate_excel_parser import parse_xactimate_file

log = get_logger()

TEMP_UPLOAD_DIR = os.getenv('TEMP_UPLOAD_DIR', 'temp_uploads')


def _bool_arg(name: str, default: str = 'true') -> bool:
    return request.args.get(name, default).lower() == 'true'


# ============================================================================
# CATEGORIES
# ============================================================================

def get_categories():
    """GET /api/xactimate/categories - List categories."""
    try:
        categories = CatalogStore.list_categories(active_only=_bool_arg('active_only'))
        return jsonify({
            'success': True,
            'categories': [c.to_dict() for c in categories],
            'count': len(categories)
        }), 200
    except Exception as e:
        return server_error_response('Failed to fetch categories', 'Error fetching Xactimate categories', e)


def create_category():
    """POST /api/xactimate/categories - Create category."""
    try:
        data = request.get_json(silent=True) or {}
        category = CatalogStore.create_category(
            category_code=sanitize_string(data.get('category_code'), max_length=10),
            category_name=sanitize_string(data.get('category_name'), max_length=255),
            description=data.get('description'),
            sort_order=data.get('sort_order', 0)
        )
        return jsonify({
            'success': True,
            'message': 'Category created successfully',
            'category': category.to_dict()
        }), 201
    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        return server_error_response('Failed to create category', 'Error creating Xactimate category', e)


def initialize_default_categories():
    """POST /api/xactimate/categories/defaults - Seed standard categories."""
    try:
        added = CatalogStore.initialize_default_categories()
        return jsonify({
            'success': True,
            'message': f'{added} default categories added',
            'added': added
        }), 200
    except Exception as e:
        return server_error_response('Failed to initialize categories', 'Error initializing default categories', e)


# ============================================================================
# LINE ITEMS CRUD
# ============================================================================

def get_line_items():
    """GET /api/xactimate/line-items - List / search line items."""
    try:
        pagination = validate_pagination(request.args.get('page', 1), request.args.get('per_page', 50))
        category_id = request.args.get('category_id')
        category_id = int(category_id) if category_id else None

        paginated = CatalogStore.list_paginated(
            page=pagination['page'],
            per_page=pagination['per_page'],
            active_only=_bool_arg('active_only'),
            category_id=category_id,
            search=request.args.get('q') or request.args.get('search')
        )

        return jsonify({
            'success': True,
            'items': [item.to_dict() for item in paginated.items],
            'total_count': paginated.total,
            'page': pagination['page'],
            'per_page': pagination['per_page'],
            'total_pages': paginated.pages
        }), 200

    except ValueError:
        return jsonify({
            'success': False,
            'error': 'Invalid parameters',
            'message': 'category_id must be a valid integer'
        }), 400
    except Exception as e:
        return server_error_response('Failed to fetch line items', 'Error fetching line items', e)


def get_line_item(item_id):
    """GET /api/xactimate/line-items/<id> - Get single line item."""
    try:
        item = CatalogStore.get(item_id)
        return jsonify({'success': True, 'item': item.to_dict()}), 200
    except CatalogItemNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to fetch line item', f'Error fetching line item {item_id}', e)


def create_line_item():
    """POST /api/xactimate/line-items - Create line item."""
    try:
        data = validate_catalog_item(request.get_json(silent=True))
        item = CatalogStore.create(data)
        return jsonify({
            'success': True,
            'message': 'Line item created successfully',
            'item': item.to_dict()
        }), 201

    except ValidationError as e:
        return validation_error_response(e)
    except InvariantViolation as e:
        return invariant_violation_response(e)
    except Exception as e:
        return server_error_response('Failed to create line item', 'Error creating line item', e)


def update_line_item(item_id):
    """PUT /api/xactimate/line-items/<id> - Update line item."""
    try:
        data = validate_catalog_item(request.get_json(silent=True), partial=True)
        data['id'] = item_id

        item, _ = CatalogStore.upsert(data)
        return jsonify({
            'success': True,
            'message': 'Line item updated successfully',
            'item': item.to_dict()
        }), 200

    except ValidationError as e:
        return validation_error_response(e)
    except CatalogItemNotFound as e:
        return not_found_response(e)
    except InvariantViolation as e:
        return invariant_violation_response(e)
    except Exception as e:
        return server_error_response('Failed to update line item', f'Error updating line item {item_id}', e)


def delete_line_item(item_id):
    """DELETE /api/xactimate/line-items/<id>?archive=true - Delete or archive line item."""
    try:
        archive = _bool_arg('archive', 'false')
        if archive:
            affected = CatalogStore.archive(item_id)
            body = {
                'success': True,
                'message': 'Line item archived successfully',
                'archived': True,
                'affected_macro_items': affected
            }
            if affected:
                body['warning'] = f'{len(affected)} macro item(s) reference this line item and will price it as missing'
            return jsonify(body), 200

        affected = CatalogStore.remove(item_id)
        body = {
            'success': True,
            'message': 'Line item deleted successfully',
            'affected_macro_items': affected
        }
        if affected:
            body['warning'] = f'{len(affected)} macro item(s) referenced this line item and are now unlinked'
        return jsonify(body), 200

    except CatalogItemNotFound as e:
        return not_found_response(e)
    except Exception as e:
        return server_error_response('Failed to delete line item', f'Error deleting line item {item_id}', e)


# ============================================================================
# IMPORT
# ============================================================================

def _import_options(source):
    price_source = source.get('price_source') or PriceSource.XACTIMATE_IMPORT.value
    if price_source not in PRICE_SOURCES:
        raise ValidationError(f"price_source must be one of {sorted(PRICE_SOURCES)}", field='price_source')
    region = sanitize_string(source.get('price_list_region'), max_length=50) or None
    return price_source, region


def import_price_list():
    """POST /api/xactimate/import - Import an .xlsx/.csv price list."""
    try:
        if 'file' not in request.files:
            return jsonify({'success': False, 'error': 'No file provided'}), 400

        file = request.files['file']
        if file.filename == '':
            return jsonify({'success': False, 'error': 'No file selected'}), 400

        file_content = file.read()
        validate_file_upload(file.filename, len(file_content))
        price_source, region = _import_options(request.form)

        log.info(f"Price list import started: {file.filename} ({len(file_content)} bytes)")

        os.makedirs(TEMP_UPLOAD_DIR, exist_ok=True)
        filename = secure_filename(file.filename)
        temp_path = os.path.join(TEMP_UPLOAD_DIR, f"{uuid.uuid4()}_{filename}")

        with open(temp_path, 'wb') as f:
            f.write(file_content)

        try:
            success, parse_result = parse_xactimate_file(temp_path)
        finally:
            if os.path.exists(temp_path):
                os.remove(temp_path)

        if not success:
            return jsonify({
                'success': False,
                'error': 'Failed to parse price list',
                'errors': parse_result.get('errors', []),
                'warnings': parse_result.get('warnings', [])
            }), 400

        result = CatalogStore.import_catalog_rows(parse_result['rows'], price_source, region)
        result['skipped'] += parse_result['metadata']['skipped_rows']
        result['parse_warnings'] = parse_result.get('warnings', [])
        result['summary'] = parse_result.get('summary', {})

        return jsonify({
            'success': True,
            'message': f"Imported {result['created'] + result['updated']} line items",
            'result': result
        }), 200

    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        return server_error_response('Failed to import price list', 'Error importing price list', e)


def import_rows():
    """POST /api/xactimate/import/rows - Import already-parsed rows."""
    try:
        data = request.get_json(silent=True) or {}
        rows = data.get('rows')
        if not isinstance(rows, list):
            raise ValidationError("rows must be a list", field='rows')
        price_source, region = _import_options(data)

        result = CatalogStore.import_catalog_rows(rows, price_source, region)
        return jsonify({
            'success': True,
            'message': f"Imported {result['created'] + result['updated']} line items",
            'result': result
        }), 200

    except ValidationError as e:
        return validation_error_response(e)
    except Exception as e:
        return server_error_response('Failed to import rows', 'Error importing rows', e)
