"""
Macro Calculator Service
Pure cost roll-up for pricing macros

Works on plain dicts (the shapes produced by PricingMacro.to_dict(),
PricingMacroItem.to_dict() and CatalogItem.to_dict()) so it can be called
from controllers, refresh jobs and tests without an app context.

Quantity rules:
    fixed       fixed_quantity x quantity_multiplier
    calculated  measurements[input_field_name] x quantity_multiplier
    per_square  measurements['total_squares'] x quantity_multiplier
then x (1 + waste/100), waste = waste_factor_override, else the catalog
item's waste_factor, else 0.
"""
from typing import Dict, List, Optional
from config.constants import QuantityType, PricingWarning, TOTAL_SQUARES

ZERO_COST = {'material': 0.0, 'labor': 0.0, 'total': 0.0}


def _num(value) -> float:
    """None and blanks read as 0"""
    if value is None or value == '':
        return 0.0
    return float(value)


def _first_set(*values):
    """First value that is not None (0 counts as set)"""
    for value in values:
        if value is not None:
            return value
    return None


def _measurement(measurements: Optional[Dict], name: Optional[str]) -> float:
    if not measurements or not name:
        return 0.0
    return _num(measurements.get(name))


def resolve_catalog_item(binding: Dict, catalog: Dict) -> Optional[Dict]:
    """Look up the live catalog row for a binding (None when the reference is gone)"""
    item_id = binding.get('catalog_item_id')
    if item_id is None or not catalog:
        return None
    return catalog.get(item_id)


def compute_binding_quantity(binding: Dict, measurements: Optional[Dict], catalog_item: Optional[Dict] = None) -> float:
    """
    Effective quantity for one binding, waste included

    Args:
        binding: Macro item dict
        measurements: {input name: number}; missing or None values read as 0
        catalog_item: Catalog item dict, consulted only for its waste_factor

    Returns:
        float: Quantity (negative multipliers are not clamped)
    """
    quantity_type = binding.get('quantity_type')

    if quantity_type == QuantityType.FIXED.value:
        base = _num(binding.get('fixed_quantity'))
    elif quantity_type == QuantityType.CALCULATED.value:
        base = _measurement(measurements, binding.get('input_field_name'))
    elif quantity_type == QuantityType.PER_SQUARE.value:
        base = _measurement(measurements, TOTAL_SQUARES)
    else:
        base = 0.0

    base = base * _num(_first_set(binding.get('quantity_multiplier'), 1))

    waste_factor = _num(_first_set(
        binding.get('waste_factor_override'),
        catalog_item.get('waste_factor') if catalog_item else None,
        0
    ))
    return base * (1 + waste_factor / 100)


def compute_binding_cost(binding: Dict, catalog_item: Optional[Dict], measurements: Optional[Dict]) -> Dict[str, float]:
    """
    Extended material/labor/total for one binding

    total is quantity x (price_override or unit_price) and is not forced to
    equal material + labor when only some overrides are set.
    """
    if not binding.get('is_included', True) or catalog_item is None:
        return dict(ZERO_COST)

    quantity = compute_binding_quantity(binding, measurements, catalog_item)

    material_price = _num(_first_set(binding.get('material_override'), catalog_item.get('material_price')))
    labor_price = _num(_first_set(binding.get('labor_override'), catalog_item.get('labor_price')))
    unit_price = _num(_first_set(binding.get('price_override'), catalog_item.get('unit_price')))

    return {
        'material': quantity * material_price,
        'labor': quantity * labor_price,
        'total': quantity * unit_price,
    }


def compute_macro_totals(macro: Dict, bindings: List[Dict], catalog: Dict, measurements: Optional[Dict]) -> Dict[str, float]:
    """Element-wise sum of compute_binding_cost over every binding"""
    totals = dict(ZERO_COST)
    for binding in bindings:
        cost = compute_binding_cost(binding, resolve_catalog_item(binding, catalog), measurements)
        for key in totals:
            totals[key] += cost[key]
    return totals


def find_unresolved_inputs(bindings: List[Dict], measurements: Optional[Dict]) -> List[Dict]:
    """
    Bindings whose measurement lookup found nothing (the value was read as 0)

    Returns:
        list: Warning dicts, one per affected binding
    """
    measurements = measurements or {}
    warnings = []
    for binding in bindings:
        quantity_type = binding.get('quantity_type')
        if quantity_type == QuantityType.CALCULATED.value:
            input_name = binding.get('input_field_name')
        elif quantity_type == QuantityType.PER_SQUARE.value:
            input_name = TOTAL_SQUARES
        else:
            continue

        if input_name and measurements.get(input_name) is not None:
            continue

        warnings.append({
            'type': PricingWarning.UNRESOLVED_INPUT.value,
            'binding_id': binding.get('id'),
            'item_code': binding.get('item_code'),
            'input_field_name': input_name,
            'message': (f"Measurement '{input_name}' was not supplied; quantity treated as 0"
                        if input_name else "Calculated item has no input field; quantity treated as 0"),
        })
    return warnings


def find_undeclared_inputs(macro: Dict, bindings: List[Dict]) -> List[Dict]:
    """Calculated bindings whose input_field_name is not in the macro's required_inputs"""
    declared = {inp.get('name') for inp in (macro.get('required_inputs') or [])}
    warnings = []
    for binding in bindings:
        if binding.get('quantity_type') != QuantityType.CALCULATED.value:
            continue
        input_name = binding.get('input_field_name')
        if input_name in declared:
            continue
        warnings.append({
            'type': PricingWarning.UNDECLARED_INPUT.value,
            'binding_id': binding.get('id'),
            'item_code': binding.get('item_code'),
            'input_field_name': input_name,
            'message': f"Input '{input_name}' is not declared by macro {macro.get('macro_code')}",
        })
    return warnings


def find_missing_references(bindings: List[Dict], catalog: Dict) -> List[Dict]:
    """Bindings whose catalog item no longer exists"""
    warnings = []
    for binding in bindings:
        if resolve_catalog_item(binding, catalog) is not None:
            continue
        warnings.append({
            'type': PricingWarning.REFERENCE_MISSING.value,
            'binding_id': binding.get('id'),
            'item_code': binding.get('item_code'),
            'catalog_item_id': binding.get('catalog_item_id'),
            'message': f"Catalog item for '{binding.get('item_code')}' is missing; line contributes 0",
        })
    return warnings


def evaluate_macro(macro: Dict, bindings: List[Dict], catalog: Dict, measurements: Optional[Dict]) -> Dict:
    """
    Full breakdown of a macro for a set of measurements

    Args:
        macro: Macro dict (only required_inputs and macro_code are read)
        bindings: Macro item dicts
        catalog: {catalog_item_id: catalog item dict}
        measurements: {input name: number}

    Returns:
        dict: {'lines': [...], 'totals': {material, labor, total},
               'warnings': [...], 'measurements': {...}}
    """
    ordered = sorted(bindings, key=lambda b: (b.get('sort_order') or 0, b.get('id') or 0))

    lines = []
    totals = dict(ZERO_COST)
    for binding in ordered:
        catalog_item = resolve_catalog_item(binding, catalog)
        cost = compute_binding_cost(binding, catalog_item, measurements)
        for key in totals:
            totals[key] += cost[key]

        quantity = compute_binding_quantity(binding, measurements, catalog_item)
        lines.append({
            'binding_id': binding.get('id'),
            'catalog_item_id': binding.get('catalog_item_id'),
            'item_code': binding.get('item_code'),
            'description': binding.get('description'),
            'unit': binding.get('unit'),
            'group_name': binding.get('group_name'),
            'quantity_type': binding.get('quantity_type'),
            'quantity': round(quantity, 4),
            'unit_price': _num(_first_set(binding.get('price_override'), catalog_item.get('unit_price'))) if catalog_item else 0.0,
            'material_price': _num(_first_set(binding.get('material_override'), catalog_item.get('material_price'))) if catalog_item else 0.0,
            'labor_price': _num(_first_set(binding.get('labor_override'), catalog_item.get('labor_price'))) if catalog_item else 0.0,
            'material': round(cost['material'], 2),
            'labor': round(cost['labor'], 2),
            'total': round(cost['total'], 2),
            'is_included': binding.get('is_included', True),
            'is_optional': binding.get('is_optional', False),
            'reference_missing': catalog_item is None,
        })

    warnings = find_missing_references(ordered, catalog) + find_unresolved_inputs(ordered, measurements)

    return {
        'macro_id': macro.get('id'),
        'macro_code': macro.get('macro_code'),
        'measurements': dict(measurements or {}),
        'lines': lines,
        'totals': {key: round(value, 2) for key, value in totals.items()},
        'warnings': warnings,
    }
