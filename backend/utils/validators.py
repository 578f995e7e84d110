"""
Input Validation Utilities for the pricing API
Provides input validation and sanitization for catalog items, macros, macro items
and the work order / vendor price lists

Usage:
    from utils.validators import validate_catalog_item, ValidationError

    try:
        validated = validate_catalog_item(request.json)
    except ValidationError as e:
        return jsonify({'error': str(e)}), 400
"""

import os
from datetime import date
from typing import Any, Dict, List, Optional
from config.constants import (
    QUANTITY_TYPES, PRICE_SOURCES, WORK_ORDER_PRICING_TYPES, LABOR_RATE_TYPES,
    QuantityType, MarkupType, InputType, normalize_unit
)

MAX_STRING_LENGTH = 255
ALLOWED_IMPORT_EXTENSIONS = {'xlsx', 'csv'}
MAX_IMPORT_FILE_SIZE_MB = int(os.getenv('MAX_IMPORT_FILE_SIZE', 10))


class ValidationError(Exception):
    """Custom validation error with details"""

    def __init__(self, message: str, field: str = None, details: Dict = None):
        self.message = message
        self.field = field
        self.details = details or {}
        super().__init__(self.message)


def sanitize_string(value: Any, max_length: int = None) -> str:
    """
    Sanitize a string input

    Item codes such as 'RFG LAMI<' carry angle brackets, so markup is kept
    as-is; the dashboard escapes on render.

    Args:
        value: The string to sanitize
        max_length: Maximum allowed length (truncates if exceeded)

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value).strip() if value is not None else ""

    value = value.strip().replace('\x00', '')

    if max_length and len(value) > max_length:
        value = value[:max_length]

    return value


def validate_string_length(value: str, field_name: str, min_length: int = 0, max_length: int = None) -> str:
    """
    Validate string length

    Raises:
        ValidationError: If length is invalid
    """
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", field=field_name)

    value = value.strip()

    if len(value) < min_length:
        if min_length == 1:
            raise ValidationError(f"{field_name} is required", field=field_name)
        raise ValidationError(f"{field_name} must be at least {min_length} characters", field=field_name)

    max_len = max_length or MAX_STRING_LENGTH
    if len(value) > max_len:
        raise ValidationError(f"{field_name} must be less than {max_len} characters", field=field_name)

    return value


def validate_number(value: Any, field_name: str = "value", allow_negative: bool = False) -> float:
    """
    Validate that a value is a number

    Args:
        value: Value to validate (numbers or numeric strings)
        field_name: Name of the field for error messages
        allow_negative: If False, rejects values below zero

    Returns:
        Validated number as float

    Raises:
        ValidationError: If value is not a number
    """
    if isinstance(value, bool):
        raise ValidationError(f"{field_name} must be a number", field=field_name)
    try:
        num = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be a number", field=field_name)

    if num != num:  # NaN
        raise ValidationError(f"{field_name} must be a number", field=field_name)

    if not allow_negative and num < 0:
        raise ValidationError(f"{field_name} cannot be negative", field=field_name)

    return num


def validate_percentage(value: Any, field_name: str) -> float:
    """Validate a 0-100 percentage"""
    num = validate_number(value, field_name)
    if num > 100:
        raise ValidationError(f"{field_name} must be between 0 and 100", field=field_name)
    return num


def validate_unit(value: Any, field_name: str = 'unit') -> str:
    unit = normalize_unit(value)
    if unit is None:
        raise ValidationError(f"Unknown unit of measure: {value}", field=field_name)
    return unit


TRUE_STRINGS = {'true', '1', 'yes'}
FALSE_STRINGS = {'false', '0', 'no'}


def validate_boolean(value: Any, field_name: str) -> bool:
    """
    Validate a flag

    Accepts JSON booleans, 0/1 and the strings true/false, yes/no, 1/0
    (case-insensitive). Anything else is rejected rather than coerced.

    Raises:
        ValidationError: If value is not a recognizable boolean
    """
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False
    raise ValidationError(f"{field_name} must be true or false", field=field_name)


def _optional_flag(data: Dict, key: str, errors: List, validated: Dict):
    if key not in data or data[key] is None:
        return
    try:
        validated[key] = validate_boolean(data[key], key)
    except ValidationError as e:
        errors.append({'field': e.field, 'error': e.message})


def _optional_number(data: Dict, key: str, errors: List, validated: Dict, **kwargs):
    if key not in data:
        return
    if data[key] is None or data[key] == '':
        validated[key] = None
        return
    try:
        validated[key] = validate_number(data[key], key, **kwargs)
    except ValidationError as e:
        errors.append({'field': e.field, 'error': e.message})


def _raise_if_errors(errors: List):
    if errors:
        raise ValidationError(
            "Validation failed",
            details={'errors': errors}
        )


def validate_catalog_item(data: Dict, partial: bool = False) -> Dict:
    """
    Validate catalog line item input data

    Args:
        data: Dictionary containing line item data
        partial: True for updates (only supplied fields are validated)

    Returns:
        Validated and sanitized data

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    for key, max_length in (('item_code', 50), ('description', 1000)):
        if key in data:
            try:
                validated[key] = validate_string_length(
                    sanitize_string(data[key]), key, min_length=1, max_length=max_length
                )
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})
        elif not partial:
            errors.append({'field': key, 'error': f'{key} is required'})

    if 'selector_code' in data:
        validated['selector_code'] = sanitize_string(data['selector_code'], max_length=50) or None

    if 'unit' in data:
        try:
            validated['unit'] = validate_unit(data['unit'])
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    for key in ('material_price', 'labor_price', 'equipment_price', 'unit_price',
                'labor_hours', 'labor_minimum', 'useful_life_years'):
        _optional_number(data, key, errors, validated)

    for key in ('waste_factor', 'default_depreciation_percent'):
        if key in data and data[key] is not None and data[key] != '':
            try:
                validated[key] = validate_percentage(data[key], key)
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})

    if 'category_id' in data:
        if data['category_id'] in (None, ''):
            validated['category_id'] = None
        else:
            try:
                validated['category_id'] = int(data['category_id'])
            except (TypeError, ValueError):
                errors.append({'field': 'category_id', 'error': 'category_id must be an integer'})

    if 'price_source' in data and data['price_source']:
        if data['price_source'] not in PRICE_SOURCES:
            errors.append({'field': 'price_source', 'error': f"price_source must be one of {sorted(PRICE_SOURCES)}"})
        else:
            validated['price_source'] = data['price_source']

    for key in ('is_active', 'is_taxable'):
        _optional_flag(data, key, errors, validated)

    _raise_if_errors(errors)
    return validated


def validate_required_inputs(inputs: Any) -> List[Dict]:
    """
    Validate a macro's measurement input declarations

    Returns:
        List of {name, label, unit, type} with unique, non-empty names

    Raises:
        ValidationError: If any entry is malformed or a name repeats
    """
    if not isinstance(inputs, list):
        raise ValidationError("required_inputs must be a list", field='required_inputs')

    validated = []
    seen = set()
    for idx, inp in enumerate(inputs):
        if not isinstance(inp, dict):
            raise ValidationError(f"required_inputs[{idx}] must be an object", field='required_inputs')

        name = sanitize_string(inp.get('name'), max_length=100)
        if not name:
            raise ValidationError(f"required_inputs[{idx}] needs a name", field='required_inputs')
        if name in seen:
            raise ValidationError(f"Duplicate measurement input name: {name}", field='required_inputs')
        seen.add(name)

        input_type = inp.get('type') or InputType.NUMBER.value
        if input_type not in {t.value for t in InputType}:
            raise ValidationError(f"Invalid type for input '{name}': {input_type}", field='required_inputs')

        entry = {
            'name': name,
            'label': sanitize_string(inp.get('label'), max_length=255) or name,
            'unit': validate_unit(inp.get('unit'), field_name='required_inputs'),
            'type': input_type,
        }
        if inp.get('options'):
            entry['options'] = [sanitize_string(o) for o in inp['options']]
        if inp.get('default_value') is not None:
            entry['default_value'] = validate_number(inp['default_value'], 'default_value', allow_negative=True)
        validated.append(entry)

    return validated


def validate_macro(data: Dict, partial: bool = False) -> Dict:
    """
    Validate pricing macro input data

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    for key, max_length in (('macro_code', 50), ('macro_name', 255)):
        if key in data:
            try:
                validated[key] = validate_string_length(
                    sanitize_string(data[key]), key, min_length=1, max_length=max_length
                )
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})
        elif not partial:
            errors.append({'field': key, 'error': f'{key} is required'})

    for key in ('description', 'category', 'trade_type'):
        if key in data:
            validated[key] = sanitize_string(data[key]) or None

    if 'required_inputs' in data and data['required_inputs'] is not None:
        try:
            validated['required_inputs'] = validate_required_inputs(data['required_inputs'])
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    if 'markup_type' in data and data['markup_type']:
        if data['markup_type'] not in {m.value for m in MarkupType}:
            errors.append({'field': 'markup_type', 'error': "markup_type must be 'percentage' or 'flat'"})
        else:
            validated['markup_type'] = data['markup_type']

    _optional_number(data, 'markup_value', errors, validated)

    for key in ('is_active', 'is_template'):
        _optional_flag(data, key, errors, validated)

    if 'tags' in data:
        validated['tags'] = [sanitize_string(t) for t in (data['tags'] or [])]

    _raise_if_errors(errors)
    return validated


def validate_macro_item(data: Dict, partial: bool = False) -> Dict:
    """
    Validate macro item (catalog binding) input data

    Multipliers and fixed quantities may be negative; they are carried
    through to the calculator unchanged.

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    if 'catalog_item_id' in data:
        try:
            validated['catalog_item_id'] = int(data['catalog_item_id'])
        except (TypeError, ValueError):
            errors.append({'field': 'catalog_item_id', 'error': 'catalog_item_id must be an integer'})
    elif not partial:
        errors.append({'field': 'catalog_item_id', 'error': 'catalog_item_id is required'})

    if 'quantity_type' in data:
        if data['quantity_type'] not in QUANTITY_TYPES:
            errors.append({'field': 'quantity_type', 'error': f"quantity_type must be one of {sorted(QUANTITY_TYPES)}"})
        else:
            validated['quantity_type'] = data['quantity_type']
    elif not partial:
        validated['quantity_type'] = QuantityType.CALCULATED.value

    if 'input_field_name' in data:
        validated['input_field_name'] = sanitize_string(data['input_field_name'], max_length=100) or None

    for key in ('fixed_quantity', 'quantity_multiplier'):
        if key in data and data[key] is not None:
            try:
                validated[key] = validate_number(data[key], key, allow_negative=True)
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})

    if 'waste_factor_override' in data:
        if data['waste_factor_override'] in (None, ''):
            validated['waste_factor_override'] = None
        else:
            try:
                validated['waste_factor_override'] = validate_percentage(data['waste_factor_override'], 'waste_factor_override')
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})

    for key in ('price_override', 'material_override', 'labor_override'):
        _optional_number(data, key, errors, validated)

    if 'sort_order' in data and data['sort_order'] is not None:
        try:
            validated['sort_order'] = int(data['sort_order'])
        except (TypeError, ValueError):
            errors.append({'field': 'sort_order', 'error': 'sort_order must be an integer'})

    if 'group_name' in data:
        validated['group_name'] = sanitize_string(data['group_name'], max_length=100) or None

    for key in ('is_included', 'is_optional'):
        _optional_flag(data, key, errors, validated)

    _raise_if_errors(errors)
    return validated


def validate_date(value: Any, field_name: str) -> date:
    """Accepts a date or an ISO 'YYYY-MM-DD' string (a time part is ignored)"""
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValidationError(f"{field_name} must be a date (YYYY-MM-DD)", field=field_name)


def _optional_date(data: Dict, key: str, errors: List, validated: Dict):
    if key not in data:
        return
    if data[key] is None or data[key] == '':
        validated[key] = None
        return
    try:
        validated[key] = validate_date(data[key], key)
    except ValidationError as e:
        errors.append({'field': e.field, 'error': e.message})


def _required_strings(data: Dict, fields, partial: bool, errors: List, validated: Dict):
    for key, max_length in fields:
        if key in data:
            try:
                validated[key] = validate_string_length(
                    sanitize_string(data[key]), key, min_length=1, max_length=max_length
                )
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})
        elif not partial:
            errors.append({'field': key, 'error': f'{key} is required'})


def _optional_strings(data: Dict, fields, validated: Dict):
    for key, max_length in fields:
        if key in data:
            validated[key] = sanitize_string(data[key], max_length=max_length) or None


def _choice(data: Dict, key: str, allowed, errors: List, validated: Dict):
    if key in data and data[key]:
        if data[key] not in allowed:
            errors.append({'field': key, 'error': f"{key} must be one of {sorted(allowed)}"})
        else:
            validated[key] = data[key]


def _check_order(validated: Dict, low_key: str, high_key: str, errors: List):
    low, high = validated.get(low_key), validated.get(high_key)
    if low is not None and high is not None and low > high:
        errors.append({'field': high_key, 'error': f"{high_key} cannot be before {low_key}"
                       if isinstance(low, date) else f"{high_key} must be at least {low_key}"})


def validate_work_order_pricing(data: Dict, partial: bool = False) -> Dict:
    """
    Validate a work order price list entry

    unit_price is taken as entered; it is not checked against
    material_cost + labor_cost.

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    _required_strings(data, (('item_code', 50), ('item_name', 255)), partial, errors, validated)
    _optional_strings(data, (('description', 2000), ('category', 100), ('subcategory', 100),
                             ('trade_type', 50), ('preferred_supplier_id', 64),
                             ('preferred_subcontractor_id', 64)), validated)

    if 'unit' in data:
        try:
            validated['unit'] = validate_unit(data['unit'])
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    for key in ('unit_price', 'material_cost', 'labor_cost', 'labor_hours', 'min_price', 'max_price'):
        _optional_number(data, key, errors, validated)

    _choice(data, 'pricing_type', WORK_ORDER_PRICING_TYPES, errors, validated)

    for key in ('is_active', 'is_taxable'):
        _optional_flag(data, key, errors, validated)

    _check_order(validated, 'min_price', 'max_price', errors)

    _raise_if_errors(errors)
    return validated


def validate_vendor_labor_rate(data: Dict, partial: bool = False) -> Dict:
    """
    Validate a crew labor rate

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    _required_strings(data, (('crew_id', 64), ('rate_name', 255), ('trade_type', 50)), partial, errors, validated)
    _optional_strings(data, (('work_type', 100), ('scope_notes', 2000)), validated)

    _choice(data, 'rate_type', LABOR_RATE_TYPES, errors, validated)

    for key in ('rate_amount', 'minimum_charge', 'overtime_rate', 'weekend_rate'):
        _optional_number(data, key, errors, validated)
    if not partial and validated.get('rate_amount') is None:
        errors.append({'field': 'rate_amount', 'error': 'rate_amount is required'})

    for key in ('includes_materials', 'includes_dump_fees', 'includes_permits', 'is_active'):
        _optional_flag(data, key, errors, validated)

    for key in ('effective_date', 'expiration_date'):
        _optional_date(data, key, errors, validated)
    _check_order(validated, 'effective_date', 'expiration_date', errors)

    _raise_if_errors(errors)
    return validated


def validate_vendor_material_pricing(data: Dict, partial: bool = False) -> Dict:
    """
    Validate a supplier material price

    Tier quantities must come with a tier price.

    Raises:
        ValidationError: If validation fails
    """
    if not data:
        raise ValidationError("No data provided")

    validated = {}
    errors = []

    _required_strings(data, (('supplier_id', 64), ('product_code', 100), ('product_name', 255),
                             ('category', 100)), partial, errors, validated)
    _optional_strings(data, (('manufacturer', 255), ('product_line', 255), ('color', 100),
                             ('subcategory', 100)), validated)

    if 'unit' in data:
        try:
            validated['unit'] = validate_unit(data['unit'])
        except ValidationError as e:
            errors.append({'field': e.field, 'error': e.message})

    _optional_number(data, 'unit_price', errors, validated)
    for tier in (1, 2, 3):
        qty_key, price_key = f'tier{tier}_quantity', f'tier{tier}_price'
        _optional_number(data, qty_key, errors, validated)
        _optional_number(data, price_key, errors, validated)
        price_expected = price_key in data or not partial
        if validated.get(qty_key) is not None and validated.get(price_key) is None and price_expected:
            errors.append({'field': price_key, 'error': f'{price_key} is required with {qty_key}'})

    if 'lead_time_days' in data:
        if data['lead_time_days'] in (None, ''):
            validated['lead_time_days'] = None
        else:
            try:
                validated['lead_time_days'] = int(validate_number(data['lead_time_days'], 'lead_time_days'))
            except ValidationError as e:
                errors.append({'field': e.field, 'error': e.message})

    if 'xactimate_item_id' in data:
        if data['xactimate_item_id'] in (None, ''):
            validated['xactimate_item_id'] = None
        else:
            try:
                validated['xactimate_item_id'] = int(data['xactimate_item_id'])
            except (TypeError, ValueError):
                errors.append({'field': 'xactimate_item_id', 'error': 'xactimate_item_id must be an integer'})

    for key in ('is_active', 'in_stock'):
        _optional_flag(data, key, errors, validated)

    for key in ('price_effective_date', 'price_expiration_date'):
        _optional_date(data, key, errors, validated)
    _check_order(validated, 'price_effective_date', 'price_expiration_date', errors)

    _raise_if_errors(errors)
    return validated


def validate_measurements(measurements: Any) -> Dict[str, Optional[float]]:
    """
    Validate a measurement map {field_name: number}

    Blank values are kept as None (the calculator reads them as 0).

    Raises:
        ValidationError: If the map or any value is not numeric
    """
    if measurements is None:
        return {}
    if not isinstance(measurements, dict):
        raise ValidationError("measurements must be an object", field='measurements')

    validated = {}
    for name, value in measurements.items():
        if value is None or value == '':
            validated[str(name)] = None
            continue
        validated[str(name)] = validate_number(value, str(name), allow_negative=True)
    return validated


def validate_file_upload(filename: str, file_size: int = None) -> bool:
    """
    Validate a price list upload

    Raises:
        ValidationError: If file is invalid
    """
    if not filename:
        raise ValidationError("Filename is required", field="file")

    if '.' not in filename:
        raise ValidationError("File must have an extension", field="file")

    ext = filename.rsplit('.', 1)[1].lower()

    if ext not in ALLOWED_IMPORT_EXTENSIONS:
        raise ValidationError(
            f"File type .{ext} not allowed. Allowed: {', '.join(sorted(ALLOWED_IMPORT_EXTENSIONS))}",
            field="file"
        )

    if file_size is not None:
        max_bytes = MAX_IMPORT_FILE_SIZE_MB * 1024 * 1024
        if file_size > max_bytes:
            raise ValidationError(
                f"File size exceeds {MAX_IMPORT_FILE_SIZE_MB}MB limit",
                field="file"
            )

    return True


def validate_pagination(page: Any = 1, per_page: Any = 50, max_per_page: int = 200) -> Dict:
    """
    Validate pagination parameters

    Returns:
        Dictionary with validated page and per_page
    """
    try:
        page = int(page) if page else 1
        page = max(1, page)
    except (TypeError, ValueError):
        page = 1

    try:
        per_page = int(per_page) if per_page else 50
        per_page = max(1, min(per_page, max_per_page))
    except (TypeError, ValueError):
        per_page = 50

    return {
        'page': page,
        'per_page': per_page
    }
