"""
Import Mapper
Turns parsed price-list rows into catalog item records

Rows come from XactimateExcelParser (or straight from a JSON body) with keys:
item_code, category_code, selector_code, description, unit, unit_cost,
material_cost, labor_cost, labor_overhead, equipment_cost, labor_minimum,
useful_life, depreciation_percent, is_taxable, raw_data.
"""
from typing import Dict, Optional
from config.constants import PriceSource, PRICE_TOLERANCE, normalize_unit
from services.pricing_errors import ImportRowError

TEXT_FIELDS = ('item_code', 'description', 'selector_code', 'category_code', 'unit')
NUMBER_FIELDS = ('unit_cost', 'material_cost', 'labor_cost', 'labor_overhead',
                 'equipment_cost', 'labor_minimum', 'useful_life', 'depreciation_percent')

# item_code / selector_code column width on xactimate_line_items
CODE_MAX_LENGTH = 50


def is_blank_row(row: Dict) -> bool:
    """True when a row carries no text and no numbers at all"""
    if not row:
        return True
    for key in TEXT_FIELDS + NUMBER_FIELDS:
        value = row.get(key)
        if value is not None and str(value).strip() != '':
            return False
    return True


def _parse_number(row: Dict, key: str, row_number, optional: bool = False) -> Optional[float]:
    value = row.get(key)
    if value is None or (isinstance(value, str) and not value.strip()):
        return None if optional else 0.0
    if isinstance(value, bool):
        raise ImportRowError(row_number, f"{key} must be a number")
    if isinstance(value, str):
        value = value.replace('$', '').replace(',', '').strip()
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ImportRowError(row_number, f"{key} is not a number: {row.get(key)!r}")
    if number != number:  # NaN from empty spreadsheet cells
        return None if optional else 0.0
    return number


def _parse_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ('yes', 'y', 'true', '1')
    if isinstance(value, (int, float)):
        return value > 0
    return bool(value)


def map_import_row(row: Dict, category_ids: Dict[str, int],
                   price_source: str = PriceSource.XACTIMATE_IMPORT.value,
                   price_list_region: str = None, row_number=None) -> Dict:
    """
    Map one parsed row to a catalog item record

    labor_price is labor_cost + labor_overhead. waste_factor is 0 because the
    export has no such column. unit_price is left out so the catalog store
    recomputes it from the components.

    Args:
        row: Parsed row dict
        category_ids: {category_code: category_id}
        price_source: Stored on the record
        price_list_region: Stored on the record
        row_number: Reported in ImportRowError (defaults to row['row'])

    Returns:
        dict: Record accepted by catalog_store.upsert

    Raises:
        ImportRowError: Missing item code/description, bad number or unknown unit
    """
    if row_number is None:
        row_number = row.get('row')

    item_code = str(row.get('item_code') or '').strip()
    if not item_code:
        raise ImportRowError(row_number, "Missing item code")
    if len(item_code) > CODE_MAX_LENGTH:
        raise ImportRowError(row_number, f"Item code longer than {CODE_MAX_LENGTH} characters: {item_code[:20]}...")

    selector_code = str(row.get('selector_code')).strip() if row.get('selector_code') else None
    if selector_code and len(selector_code) > CODE_MAX_LENGTH:
        raise ImportRowError(row_number, f"Selector code longer than {CODE_MAX_LENGTH} characters for {item_code}")

    description = str(row.get('description') or '').strip()
    if not description:
        raise ImportRowError(row_number, f"Missing description for {item_code}")

    unit = normalize_unit(row.get('unit'))
    if unit is None:
        raise ImportRowError(row_number, f"Unknown unit '{row.get('unit')}' for {item_code}")

    labor_price = _parse_number(row, 'labor_cost', row_number) + _parse_number(row, 'labor_overhead', row_number)

    category_code = str(row.get('category_code') or '').strip().upper()

    record = {
        'item_code': item_code,
        'selector_code': selector_code,
        'description': description,
        'unit': unit,
        'category_id': category_ids.get(category_code) if category_code else None,
        'material_price': _parse_number(row, 'material_cost', row_number),
        'labor_price': labor_price,
        'equipment_price': _parse_number(row, 'equipment_cost', row_number),
        'labor_minimum': _parse_number(row, 'labor_minimum', row_number, optional=True),
        'useful_life_years': _parse_number(row, 'useful_life', row_number, optional=True),
        'default_depreciation_percent': _parse_number(row, 'depreciation_percent', row_number, optional=True),
        'waste_factor': 0.0,
        'is_taxable': _parse_bool(row.get('is_taxable', True)),
        'is_active': True,
        'price_source': price_source,
        'price_list_region': price_list_region,
        'xactimate_data': row.get('raw_data'),
    }

    for key in ('material_price', 'labor_price', 'equipment_price'):
        if record[key] < 0:
            raise ImportRowError(row_number, f"{key} cannot be negative for {item_code}")

    return record


def unit_cost_mismatch(row: Dict, record: Dict) -> Optional[str]:
    """
    Compare the sheet's unit cost against the recomputed unit price

    Returns:
        str: Warning text, or None when they agree (or the sheet has no unit cost)
    """
    try:
        sheet_cost = _parse_number(row, 'unit_cost', row.get('row'), optional=True)
    except ImportRowError:
        return None
    if sheet_cost is None:
        return None

    recomputed = round(record['material_price'] + record['labor_price'] + record['equipment_price'], 2)
    if abs(sheet_cost - recomputed) <= PRICE_TOLERANCE:
        return None
    return (f"{record['item_code']}: sheet unit cost {sheet_cost:.2f} differs from "
            f"material + labor + equipment {recomputed:.2f}; using {recomputed:.2f}")
