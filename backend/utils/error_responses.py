"""
Error Response Helpers

Shared {'success': False, 'error', 'message'} envelopes for the pricing
controllers.
"""

from flask import jsonify
from config.db import db
from config.logging import get_logger

log = get_logger()


def validation_error_response(e):
    """400 for utils.validators.ValidationError"""
    body = {
        'success': False,
        'error': 'Validation failed',
        'message': e.message,
    }
    if e.field:
        body['field'] = e.field
    if e.details:
        body['details'] = e.details
    return jsonify(body), 400


def not_found_response(e):
    """404 for CatalogItemNotFound / MacroNotFound / MacroItemNotFound"""
    return jsonify({
        'success': False,
        'error': 'Not found',
        'message': e.message
    }), 404


def invariant_violation_response(e):
    """409 when an explicit unit_price disagrees with its components"""
    return jsonify({
        'success': False,
        'error': 'Unit price mismatch',
        'message': e.message,
        'item_code': e.item_code,
        'unit_price': e.unit_price,
        'component_total': round(e.component_total, 2)
    }), 409


def server_error_response(error: str, context: str, e: Exception):
    """Roll back, log, and answer 500 without leaking internals"""
    db.session.rollback()
    log.error(f"{context}: {str(e)}")
    return jsonify({
        'success': False,
        'error': error,
        'message': 'An internal error occurred'
    }), 500
