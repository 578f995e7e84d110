"""
Pricing Constants and Enums

Units of measure, quantity rules, price sources and the default measurement
inputs shared by the catalog, the macro builder and the spreadsheet importer.
Using constants instead of hardcoded strings keeps the controllers, services
and models agreeing on one spelling of each value.
"""

from enum import Enum


# ==================== UNITS OF MEASURE ====================

class UnitOfMeasure(str, Enum):
    """Xactimate units of measure"""
    EA = 'EA'     # Each
    SF = 'SF'     # Square foot
    SQ = 'SQ'     # Roofing square (100 SF)
    SY = 'SY'     # Square yard
    LF = 'LF'     # Linear foot
    HR = 'HR'     # Hour
    DA = 'DA'     # Day
    WK = 'WK'     # Week
    MO = 'MO'     # Month
    BDL = 'BDL'   # Bundle
    ROL = 'ROL'   # Roll
    PC = 'PC'     # Piece
    GAL = 'GAL'   # Gallon
    CF = 'CF'     # Cubic foot
    CY = 'CY'     # Cubic yard
    TON = 'TON'
    LS = 'LS'     # Lump sum


VALID_UNITS = {u.value for u in UnitOfMeasure}

# Spelled-out units seen in price list exports
UNIT_ALIASES = {
    'EACH': 'EA',
    'SQUARE FOOT': 'SF',
    'SQ FT': 'SF',
    'SQFT': 'SF',
    'LINEAR FOOT': 'LF',
    'LIN FT': 'LF',
    'LINFT': 'LF',
    'SQUARE': 'SQ',
    'SQUARES': 'SQ',
    'SQUARE YARD': 'SY',
    'SQ YD': 'SY',
    'SQYD': 'SY',
    'CUBIC FOOT': 'CF',
    'CU FT': 'CF',
    'CUFT': 'CF',
    'CUBIC YARD': 'CY',
    'CU YD': 'CY',
    'CUYD': 'CY',
    'GALLON': 'GAL',
    'GALLONS': 'GAL',
    'BUNDLE': 'BDL',
    'BUNDLES': 'BDL',
    'ROLL': 'ROL',
    'ROLLS': 'ROL',
    'PIECE': 'PC',
    'PIECES': 'PC',
    'HOUR': 'HR',
    'HOURS': 'HR',
    'DAY': 'DA',
    'DAYS': 'DA',
    'LUMP SUM': 'LS',
}


def normalize_unit(unit: str, default: str = UnitOfMeasure.EA.value):
    """
    Normalize a unit string to a UnitOfMeasure value

    Args:
        unit: Raw unit text (e.g. 'sq', 'Squares', 'EACH')
        default: Returned when unit is blank

    Returns:
        Normalized unit code, or None when the unit is not recognised
    """
    if not unit or not str(unit).strip():
        return default

    upper = str(unit).upper().strip()
    if upper in VALID_UNITS:
        return upper
    return UNIT_ALIASES.get(upper)


# ==================== MACRO ITEM QUANTITY RULES ====================

class QuantityType(str, Enum):
    """How a macro item derives its quantity"""
    FIXED = 'fixed'
    CALCULATED = 'calculated'
    PER_SQUARE = 'per_square'


QUANTITY_TYPES = {q.value for q in QuantityType}

# Measurement every per_square item reads
TOTAL_SQUARES = 'total_squares'


class MarkupType(str, Enum):
    """Macro markup style"""
    PERCENTAGE = 'percentage'
    FLAT = 'flat'


class InputType(str, Enum):
    """Measurement input field type"""
    NUMBER = 'number'
    TEXT = 'text'
    SELECT = 'select'


# ==================== PRICE SOURCES ====================

class PriceSource(str, Enum):
    """Where a catalog price came from"""
    MANUAL = 'manual'
    XACTIMATE_IMPORT = 'xactimate_import'
    SUPPLIER = 'supplier'
    CALCULATED = 'calculated'


PRICE_SOURCES = {p.value for p in PriceSource}


# ==================== WORK ORDER / VENDOR PRICING ====================

class WorkOrderPricingType(str, Enum):
    """How a work order price is charged"""
    FLAT = 'flat'
    PER_UNIT = 'per_unit'
    RANGE = 'range'


WORK_ORDER_PRICING_TYPES = {p.value for p in WorkOrderPricingType}

DEFAULT_WORK_ORDER_CATEGORY = 'Repairs'


class LaborRateType(str, Enum):
    """Basis a crew bills its labor rate on"""
    PER_SQUARE = 'per_square'
    PER_LINEAR_FOOT = 'per_linear_foot'
    HOURLY = 'hourly'
    PER_JOB = 'per_job'
    PER_UNIT = 'per_unit'


LABOR_RATE_TYPES = {r.value for r in LaborRateType}


# ==================== EVALUATION WARNINGS ====================

class PricingWarning(str, Enum):
    """Data-quality findings reported next to macro totals"""
    REFERENCE_MISSING = 'reference_missing'
    UNRESOLVED_INPUT = 'unresolved_input'
    UNDECLARED_INPUT = 'undeclared_input'


# Allowed drift between unit_price and its components
PRICE_TOLERANCE = 0.005


# ==================== DEFAULT MEASUREMENT INPUTS ====================

DEFAULT_MEASUREMENT_INPUTS = [
    {'name': 'total_squares', 'label': 'Total Squares', 'unit': 'SQ', 'type': 'number'},
    {'name': 'ridge_length', 'label': 'Ridge Length', 'unit': 'LF', 'type': 'number'},
    {'name': 'hip_length', 'label': 'Hip Length', 'unit': 'LF', 'type': 'number'},
    {'name': 'valley_length', 'label': 'Valley Length', 'unit': 'LF', 'type': 'number'},
    {'name': 'eave_length', 'label': 'Eave/Starter Length', 'unit': 'LF', 'type': 'number'},
    {'name': 'rake_length', 'label': 'Rake Length', 'unit': 'LF', 'type': 'number'},
    {'name': 'step_flashing_length', 'label': 'Step Flashing', 'unit': 'LF', 'type': 'number'},
    {'name': 'pipe_boots', 'label': 'Pipe Boots', 'unit': 'EA', 'type': 'number'},
    {'name': 'chimneys', 'label': 'Chimneys', 'unit': 'EA', 'type': 'number'},
    {'name': 'skylights', 'label': 'Skylights', 'unit': 'EA', 'type': 'number'},
]


# ==================== DEFAULT CATEGORIES ====================

DEFAULT_CATEGORIES = {
    'RFG': 'Roofing',
    'SFG': 'Soffit/Fascia/Gutters',
    'SDG': 'Siding',
    'GUT': 'Gutters',
    'WDS': 'Windows/Doors/Siding',
    'WND': 'Windows',
    'DOR': 'Doors',
    'INT': 'Interior',
    'EXT': 'Exterior',
    'DRY': 'Drywall',
    'PNT': 'Painting',
    'PLM': 'Plumbing',
    'ELC': 'Electrical',
    'HVC': 'HVAC',
    'FLR': 'Flooring',
    'FNC': 'Fencing',
    'LND': 'Landscaping',
    'DMO': 'Demolition',
    'GEN': 'General',
    'CLN': 'Cleaning',
    'TMP': 'Temporary',
    'FRM': 'Framing',
    'MIL': 'Millwork/Trim',
    'MTL': 'Metal',
}

DEFAULT_CATEGORY_CODE = 'GEN'
