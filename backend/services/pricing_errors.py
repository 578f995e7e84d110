"""
Pricing Errors

Typed failures raised by the catalog store, macro service and import mapper.
Missing catalog references and unresolved measurement inputs are not errors:
the macro calculator reports them as warnings next to the totals.
"""


class PricingError(Exception):
    """Base class for pricing domain errors"""

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)


class CatalogItemNotFound(PricingError):
    def __init__(self, item_id):
        self.item_id = item_id
        super().__init__(f"Catalog item with ID {item_id} not found")


class MacroNotFound(PricingError):
    def __init__(self, macro_id):
        self.macro_id = macro_id
        super().__init__(f"Pricing macro with ID {macro_id} not found")


class MacroItemNotFound(PricingError):
    def __init__(self, macro_item_id):
        self.macro_item_id = macro_item_id
        super().__init__(f"Macro item with ID {macro_item_id} not found")


class PricingRecordNotFound(PricingError):
    """Work order price, labor rate or material price that is missing or deleted"""

    def __init__(self, label: str, record_id):
        self.record_id = record_id
        super().__init__(f"{label} with ID {record_id} not found")


class InvariantViolation(PricingError):
    """Explicit unit_price disagrees with material + labor + equipment"""

    def __init__(self, item_code: str, unit_price: float, component_total: float):
        self.item_code = item_code
        self.unit_price = unit_price
        self.component_total = component_total
        super().__init__(
            f"Unit price {unit_price:.2f} for '{item_code}' does not equal "
            f"material + labor + equipment ({component_total:.2f})"
        )


class ImportRowError(PricingError):
    """One spreadsheet row could not be mapped; the batch continues"""

    def __init__(self, row, message: str):
        self.row = row
        super().__init__(message)

    def to_dict(self):
        return {'row': self.row, 'message': self.message}
