"""
Excel Parser for Xactimate Price List Import
Parses Xactimate line-item exports (.xlsx or .csv) into import rows
"""
import re
import pandas as pd
import numpy as np
from typing import Dict, List, Any, Optional, Tuple
from config.constants import DEFAULT_CATEGORIES, DEFAULT_CATEGORY_CODE, normalize_unit
from config.logging import get_logger

log = get_logger()

# Header variations seen in Xactimate exports
COLUMN_MAPPINGS = {
    'row_number': ['#', 'row', 'line', 'no', 'number', 'line #', 'line no'],
    'item_code': ['item code', 'line item code', 'xactimate code', 'code'],
    'description': ['desc', 'description', 'item', 'item description', 'line item'],
    'unit_cost': ['unit cost', 'unit price', 'price', 'cost', 'rate'],
    'unit': ['unit', 'uom', 'unit of measure', 'units'],
    'activity': ['activity', 'action', 'type', 'work type'],
    'workers_wage': ["worker's wage", 'workers wage', 'wage', 'labor wage'],
    'labor_burden': ['labor borders', 'labor burden', 'burden'],
    'labor_overhead': ['labor overhead', 'overhead', 'o/h'],
    'material': ['material', 'materials', 'mat', 'material cost'],
    'equipment': ['equipment', 'equip', 'equipment cost'],
    'market_conditions': ['market conditions', 'market cond', 'conditions'],
    'labor_minimum': ['labor minimum', 'labor min', 'min labor'],
    'sales_tax': ['sales tax', 'tax rate', 'tax %'],
    'rcv': ['rcv', 'replacement cost', 'replacement cost value', 'total'],
    'life': ['life', 'useful life', 'lifespan', 'years'],
    'depreciation_type': ['depreciation type', 'dep type', 'depr type'],
    'depreciation_amount': ['depreciation amount', 'dep amount', 'depr amt', 'depreciation'],
    'recoverable': ['recoverable', 'recov', 'recoverable dep'],
    'acv': ['acv', 'actual cash value', 'actual cash', 'net'],
    'tax': ['tax', 'taxable', 'is taxable'],
    'category': ['cat', 'category', 'cat code', 'category code', 'trade'],
    'selector': ['sel', 'selector', 'sel code', 'selector code'],
    'date': ['date', 'effective date', 'price date'],
    'quantity': ['qty', 'quantity', 'amount', 'count'],
}

TEXT_COLUMNS = {'item_code', 'description', 'unit', 'activity', 'depreciation_type',
                'category', 'selector', 'date'}

HEADER_SCAN_ROWS = 6
MIN_HEADER_MATCHES = 3
PREFERRED_SHEET_KEYWORDS = ('estimate', 'line', 'detail')


def normalize_header(header: Any) -> str:
    text = str(header).lower().strip()
    text = re.sub(r"[^a-z0-9\s'#%/]", '', text)
    return re.sub(r'\s+', ' ', text)


def find_field_mapping(header: Any) -> Optional[str]:
    """
    Map a header cell to a field name

    Exact matches win; otherwise the longest variation contained in the
    header decides (so 'Material Cost' maps to material, not unit_cost).
    """
    normalized = normalize_header(header)
    if not normalized:
        return None

    for field, variations in COLUMN_MAPPINGS.items():
        if normalized in (normalize_header(v) for v in variations):
            return field

    best_field, best_length = None, 0
    for field, variations in COLUMN_MAPPINGS.items():
        for variation in variations:
            v = normalize_header(variation)
            if len(v) > 2 and v in normalized and len(v) > best_length:
                best_field, best_length = field, len(v)
    return best_field


def extract_category_code(value: Any) -> str:
    """Leading 2-4 letters of a category cell ('RFG ASPH' -> 'RFG')"""
    if value is None:
        return DEFAULT_CATEGORY_CODE
    match = re.match(r'^([A-Z]{2,4})', str(value).upper().strip())
    return match.group(1) if match else DEFAULT_CATEGORY_CODE


class XactimateExcelParser:
    """Parse Xactimate price list exports for catalog import"""

    def __init__(self, file_path: str):
        """Initialize parser with file path"""
        self.file_path = file_path
        self.df = None
        self.sheet_name = None
        self.errors = []
        self.warnings = []

    def parse(self) -> Tuple[bool, Dict[str, Any]]:
        """
        Parse the file and return import rows

        Returns:
            Tuple of (success: bool, data: Dict)
        """
        try:
            self.df = self._read_frame()
        except Exception as e:
            log.error(f"Error reading price list {self.file_path}: {str(e)}")
            self.errors.append(f"Error reading file: {str(e)}")
            return False, {'errors': self.errors, 'warnings': self.warnings}

        if self.df is None or self.df.empty:
            self.errors.append("No data found in file")
            return False, {'errors': self.errors, 'warnings': self.warnings}

        header_row, column_map = self._find_header_row()
        if header_row is None:
            self.errors.append(
                f"Could not find a header row with at least {MIN_HEADER_MATCHES} known columns "
                f"in the first {HEADER_SCAN_ROWS} rows"
            )
            return False, {'errors': self.errors, 'warnings': self.warnings}

        if 'description' not in column_map:
            self.errors.append("No description column found")
            return False, {'errors': self.errors, 'warnings': self.warnings}

        rows = []
        skipped = 0
        for row_index in range(header_row + 1, len(self.df)):
            raw = self._read_row(row_index, column_map)
            if not raw or not raw.get('description'):
                skipped += 1
                continue
            rows.append(self._to_import_row(raw, len(rows), row_index + 1))

        if not rows:
            self.warnings.append("No line items with a description were found")

        log.info(f"Parsed {len(rows)} price list rows from {self.sheet_name} ({skipped} skipped)")

        return True, {
            'rows': rows,
            'summary': self._summary(rows),
            'metadata': {
                'sheet_name': self.sheet_name,
                'header_row': header_row + 1,
                'columns': sorted(column_map.keys()),
                'total_rows': len(self.df) - header_row - 1,
                'parsed_rows': len(rows),
                'skipped_rows': skipped,
            },
            'errors': self.errors,
            'warnings': self.warnings,
        }

    def _read_frame(self) -> pd.DataFrame:
        """Read the whole sheet without a header; header detection happens afterwards"""
        if self.file_path.lower().endswith('.csv'):
            self.sheet_name = 'csv'
            return pd.read_csv(self.file_path, header=None, dtype=object, skip_blank_lines=False)

        xl_file = pd.ExcelFile(self.file_path, engine='openpyxl')
        try:
            self.sheet_name = self._pick_sheet(xl_file.sheet_names)
            return pd.read_excel(xl_file, sheet_name=self.sheet_name, header=None)
        finally:
            xl_file.close()

    @staticmethod
    def _pick_sheet(sheet_names: List[str]) -> str:
        for name in sheet_names:
            lower = name.lower()
            if any(keyword in lower for keyword in PREFERRED_SHEET_KEYWORDS):
                return name
        return sheet_names[0]

    def _find_header_row(self) -> Tuple[Optional[int], Dict[str, int]]:
        """First of the top rows that maps at least MIN_HEADER_MATCHES columns"""
        for row_index in range(min(HEADER_SCAN_ROWS, len(self.df))):
            column_map = {}
            for col_index, cell in enumerate(self.df.iloc[row_index]):
                if self._is_empty(cell):
                    continue
                field = find_field_mapping(cell)
                if field and field not in column_map:
                    column_map[field] = col_index
            if len(column_map) >= MIN_HEADER_MATCHES:
                return row_index, column_map
        return None, {}

    def _read_row(self, row_index: int, column_map: Dict[str, int]) -> Optional[Dict[str, Any]]:
        row = self.df.iloc[row_index]
        raw = {}
        for field, col_index in column_map.items():
            value = row.iloc[col_index]
            if self._is_empty(value):
                continue
            if field in TEXT_COLUMNS:
                raw[field] = self._get_string_value(value)
            elif field == 'tax':
                raw[field] = value if isinstance(value, str) else self._get_float_value(value)
            else:
                number = self._parse_float(value)
                if number is None:
                    self.warnings.append(f"Row {row_index + 1}: {field} value {str(value)!r} is not a number; read as 0")
                    number = 0.0
                raw[field] = number
        return raw or None

    def _to_import_row(self, raw: Dict[str, Any], index: int, sheet_row: int) -> Dict[str, Any]:
        category_code = extract_category_code(raw.get('category'))
        selector = raw.get('selector')

        if raw.get('item_code'):
            item_code = raw['item_code']
        elif selector:
            item_code = f"{category_code} {selector}".strip()
        else:
            item_code = f"{category_code}-{index + 1:03d}"

        unit = normalize_unit(raw.get('unit'))
        if unit is None:
            # Left as-is; the import mapper reports it against this row
            unit = raw.get('unit')

        material_cost = raw.get('material', 0.0)
        labor_cost = raw.get('workers_wage', 0.0) + raw.get('labor_burden', 0.0)
        labor_overhead = raw.get('labor_overhead', 0.0)
        equipment_cost = raw.get('equipment', 0.0)

        rcv = raw.get('rcv') or (material_cost + labor_cost + labor_overhead + equipment_cost)
        depreciation_amount = raw.get('depreciation_amount', 0.0)
        depreciation_percent = (depreciation_amount / rcv) * 100 if rcv > 0 and depreciation_amount > 0 else 0.0

        tax = raw.get('tax')
        if isinstance(tax, str):
            is_taxable = tax.strip().lower() == 'yes' or self._get_float_value(tax) > 0
        else:
            is_taxable = (tax or 0) > 0

        return {
            'row': sheet_row,
            'item_code': item_code,
            'category_code': category_code,
            'category_name': DEFAULT_CATEGORIES.get(category_code, 'General'),
            'selector_code': selector,
            'description': raw['description'],
            'activity': raw.get('activity') or 'Replace',
            'unit': unit,
            'quantity': raw.get('quantity') or 1,
            'unit_cost': raw.get('unit_cost', 0.0),
            'material_cost': material_cost,
            'labor_cost': labor_cost,
            'labor_overhead': labor_overhead,
            'equipment_cost': equipment_cost,
            'labor_minimum': raw.get('labor_minimum', 0.0),
            'useful_life': raw.get('life'),
            'depreciation_percent': round(depreciation_percent, 2),
            'rcv': rcv,
            'acv': raw.get('acv') or (rcv - depreciation_amount),
            'is_taxable': is_taxable,
            'date': raw.get('date'),
            'raw_data': {k: v for k, v in raw.items()},
        }

    @staticmethod
    def _summary(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
        categories = {}
        for row in rows:
            entry = categories.setdefault(row['category_code'], {
                'code': row['category_code'],
                'name': row['category_name'],
                'item_count': 0,
                'total_rcv': 0.0,
            })
            entry['item_count'] += 1
            entry['total_rcv'] += row['rcv']

        return {
            'total_line_items': len(rows),
            'total_material': round(sum(r['material_cost'] for r in rows), 2),
            'total_labor': round(sum(r['labor_cost'] + r['labor_overhead'] for r in rows), 2),
            'total_equipment': round(sum(r['equipment_cost'] for r in rows), 2),
            'category_summary': sorted(categories.values(), key=lambda c: c['total_rcv'], reverse=True),
        }

    @staticmethod
    def _is_empty(value: Any) -> bool:
        if value is None:
            return True
        if isinstance(value, float) and np.isnan(value):
            return True
        return isinstance(value, str) and not value.strip()

    @staticmethod
    def _get_string_value(value: Any) -> str:
        """Get string value from cell, handling NaN and numeric codes"""
        if pd.isna(value):
            return ''
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value).strip()

    @staticmethod
    def _parse_float(value: Any) -> Optional[float]:
        """Float from a cell; '$1,234.50' and '(12.00)' are understood, None when unparseable"""
        if isinstance(value, (int, float, np.number)):
            return float(value)
        text = re.sub(r'[$,\s]', '', str(value)).replace('(', '-').replace(')', '')
        try:
            return float(text)
        except ValueError:
            return None

    @staticmethod
    def _get_float_value(value: Any) -> float:
        if pd.isna(value):
            return 0.0
        number = XactimateExcelParser._parse_float(value)
        return 0.0 if number is None else number


def parse_xactimate_file(file_path: str) -> Tuple[bool, Dict[str, Any]]:
    """
    Convenience function to parse a price list file

    Args:
        file_path: Path to .xlsx or .csv file

    Returns:
        Tuple of (success, data)
    """
    parser = XactimateExcelParser(file_path)
    return parser.parse()
