"""
Pricing Macro Service
Macro definitions, their catalog item bindings, and evaluation

Calculations always go through services.macro_calculator with live catalog
prices. The calculated_* columns on PricingMacro are written only by
refresh_macro_totals, after a successful recompute.
"""
import copy
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import or_
from config.db import db
from config.constants import DEFAULT_MEASUREMENT_INPUTS, QuantityType
from config.logging import get_logger
from models.pricing_macro import PricingMacro, PricingMacroItem
from services.catalog_store import CatalogStore
from services.macro_calculator import (
    evaluate_macro, find_missing_references, find_undeclared_inputs
)
from services.pricing_errors import MacroNotFound, MacroItemNotFound
from utils.validators import ValidationError

log = get_logger()

MACRO_FIELDS = (
    'macro_code', 'macro_name', 'description', 'category', 'trade_type',
    'required_inputs', 'markup_type', 'markup_value', 'is_active',
    'is_template', 'tags',
)

# NOT NULL macro columns; a null in an update payload leaves them unchanged
NON_NULL_MACRO_FIELDS = {
    'macro_code', 'macro_name', 'required_inputs', 'markup_type', 'markup_value',
    'is_active', 'is_template',
}

MACRO_ITEM_FIELDS = (
    'quantity_type', 'fixed_quantity', 'input_field_name', 'quantity_multiplier',
    'waste_factor_override', 'price_override', 'material_override', 'labor_override',
    'sort_order', 'is_included', 'is_optional', 'group_name',
)


def _check_input_field(macro: PricingMacro, quantity_type: str, input_field_name: Optional[str]):
    """A calculated item must read one of the macro's declared inputs"""
    if quantity_type != QuantityType.CALCULATED.value:
        return
    if not input_field_name:
        raise ValidationError("input_field_name is required for calculated items", field='input_field_name')
    if input_field_name not in macro.input_names():
        raise ValidationError(
            f"Input '{input_field_name}' is not declared by macro {macro.macro_code}",
            field='input_field_name',
            details={'declared_inputs': macro.input_names()}
        )


class MacroService:
    """CRUD and evaluation for pricing macros"""

    # ==================== MACROS ====================

    @staticmethod
    def get_macro(macro_id: int) -> PricingMacro:
        macro = db.session.get(PricingMacro, macro_id)
        if not macro:
            raise MacroNotFound(macro_id)
        return macro

    @staticmethod
    def list_macros(active_only: bool = True, category: str = None, trade_type: str = None,
                    search: str = None) -> List[PricingMacro]:
        query = PricingMacro.query
        if active_only:
            query = query.filter(PricingMacro.is_active == True)
        if category:
            query = query.filter(PricingMacro.category == category)
        if trade_type:
            query = query.filter(PricingMacro.trade_type == trade_type)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                PricingMacro.macro_code.ilike(pattern),
                PricingMacro.macro_name.ilike(pattern),
                PricingMacro.description.ilike(pattern)
            ))
        return query.order_by(PricingMacro.macro_name.asc()).all()

    @staticmethod
    def create_macro(data: Dict) -> PricingMacro:
        """
        Create a macro from a validated payload

        required_inputs defaults to the standard roofing measurements.
        """
        if PricingMacro.query.filter_by(macro_code=data['macro_code']).first():
            raise ValidationError(f"Macro code '{data['macro_code']}' already exists", field='macro_code')

        macro = PricingMacro()
        for key in MACRO_FIELDS:
            if key in data and data[key] is not None:
                setattr(macro, key, data[key])
        if not data.get('required_inputs'):
            macro.required_inputs = copy.deepcopy(DEFAULT_MEASUREMENT_INPUTS)

        db.session.add(macro)
        db.session.commit()
        log.info(f"Pricing macro created: {macro.macro_code} (id {macro.id})")
        return macro

    @staticmethod
    def update_macro(macro_id: int, data: Dict) -> PricingMacro:
        macro = MacroService.get_macro(macro_id)

        new_code = data.get('macro_code')
        if new_code and new_code != macro.macro_code:
            clash = PricingMacro.query.filter(PricingMacro.macro_code == new_code, PricingMacro.id != macro.id).first()
            if clash:
                raise ValidationError(f"Macro code '{new_code}' already exists", field='macro_code')

        for key in MACRO_FIELDS:
            if key in data:
                if data[key] is None and key in NON_NULL_MACRO_FIELDS:
                    continue
                setattr(macro, key, data[key])

        if data.get('required_inputs') is not None:
            undeclared = find_undeclared_inputs(macro.to_dict(), [item.to_dict() for item in macro.items])
            for warning in undeclared:
                log.warning(f"Macro {macro.macro_code}: {warning['message']}")

        db.session.commit()
        log.info(f"Pricing macro updated: {macro.macro_code}")
        return macro

    @staticmethod
    def delete_macro(macro_id: int) -> PricingMacro:
        """Soft delete"""
        macro = MacroService.get_macro(macro_id)
        macro.is_active = False
        db.session.commit()
        log.info(f"Pricing macro deactivated: {macro.macro_code}")
        return macro

    # ==================== MACRO ITEMS ====================

    @staticmethod
    def get_macro_item(macro_item_id: int) -> PricingMacroItem:
        macro_item = db.session.get(PricingMacroItem, macro_item_id)
        if not macro_item:
            raise MacroItemNotFound(macro_item_id)
        return macro_item

    @staticmethod
    def add_macro_item(macro_id: int, data: Dict) -> PricingMacroItem:
        """
        Bind a catalog item to a macro

        item_code, description and unit are copied from the catalog item for
        display; prices are not copied.

        Raises:
            MacroNotFound, CatalogItemNotFound, ValidationError
        """
        macro = MacroService.get_macro(macro_id)
        catalog_item = CatalogStore.get(data['catalog_item_id'], include_archived=False)

        quantity_type = data.get('quantity_type') or QuantityType.CALCULATED.value
        _check_input_field(macro, quantity_type, data.get('input_field_name'))

        if data.get('sort_order') is None:
            data = dict(data)
            data['sort_order'] = max((item.sort_order or 0 for item in macro.items), default=-1) + 1

        macro_item = PricingMacroItem(
            macro_id=macro.id,
            catalog_item_id=catalog_item.id,
            item_code=catalog_item.item_code,
            description=catalog_item.description,
            unit=catalog_item.unit
        )
        for key in MACRO_ITEM_FIELDS:
            if key in data and data[key] is not None:
                setattr(macro_item, key, data[key])
        macro_item.quantity_type = quantity_type

        db.session.add(macro_item)
        db.session.commit()
        log.info(f"Macro item added: {catalog_item.item_code} -> {macro.macro_code} ({quantity_type})")
        return macro_item

    @staticmethod
    def update_macro_item(macro_item_id: int, data: Dict) -> PricingMacroItem:
        macro_item = MacroService.get_macro_item(macro_item_id)
        macro = macro_item.macro

        quantity_type = data.get('quantity_type', macro_item.quantity_type)
        input_field_name = data.get('input_field_name', macro_item.input_field_name)
        if 'quantity_type' in data or 'input_field_name' in data:
            _check_input_field(macro, quantity_type, input_field_name)

        if data.get('catalog_item_id') and data['catalog_item_id'] != macro_item.catalog_item_id:
            catalog_item = CatalogStore.get(data['catalog_item_id'], include_archived=False)
            macro_item.catalog_item_id = catalog_item.id
            macro_item.item_code = catalog_item.item_code
            macro_item.description = catalog_item.description
            macro_item.unit = catalog_item.unit

        for key in MACRO_ITEM_FIELDS:
            if key in data:
                if data[key] is None and key in ('fixed_quantity', 'quantity_multiplier', 'sort_order',
                                                 'quantity_type', 'is_included', 'is_optional'):
                    continue
                setattr(macro_item, key, data[key])

        db.session.commit()
        log.info(f"Macro item updated: {macro_item.id} in {macro.macro_code}")
        return macro_item

    @staticmethod
    def remove_macro_item(macro_item_id: int):
        macro_item = MacroService.get_macro_item(macro_item_id)
        macro_code = macro_item.macro.macro_code
        db.session.delete(macro_item)
        db.session.commit()
        log.info(f"Macro item {macro_item_id} removed from {macro_code}")

    # ==================== EVALUATION ====================

    @staticmethod
    def _evaluation_inputs(macro: PricingMacro):
        bindings = [item.to_dict() for item in macro.items]
        catalog = CatalogStore.lookup_table(b['catalog_item_id'] for b in bindings)
        return macro.to_dict(), bindings, catalog

    @staticmethod
    def calculate_macro(macro_id: int, measurements: Optional[Dict]) -> Dict:
        """
        Price a macro against a set of measurements

        Returns:
            dict: evaluate_macro() result (lines, totals, warnings)
        """
        macro = MacroService.get_macro(macro_id)
        macro_dict, bindings, catalog = MacroService._evaluation_inputs(macro)
        result = evaluate_macro(macro_dict, bindings, catalog, measurements or {})
        if result['warnings']:
            log.warning(f"Macro {macro.macro_code} calculated with {len(result['warnings'])} warning(s)")
        return result

    @staticmethod
    def refresh_macro_totals(macro_id: int, measurements: Optional[Dict]) -> Dict:
        """Recompute, then store the totals snapshot shown in list views"""
        result = MacroService.calculate_macro(macro_id, measurements)

        macro = MacroService.get_macro(macro_id)
        macro.calculated_material_total = result['totals']['material']
        macro.calculated_labor_total = result['totals']['labor']
        macro.calculated_total = result['totals']['total']
        macro.totals_refreshed_at = datetime.utcnow()
        db.session.commit()

        log.info(f"Macro {macro.macro_code} totals refreshed: {result['totals']['total']:.2f}")
        return result

    @staticmethod
    def check_macro(macro_id: int) -> Dict:
        """Data-quality report: undeclared inputs and missing catalog references"""
        macro = MacroService.get_macro(macro_id)
        macro_dict, bindings, catalog = MacroService._evaluation_inputs(macro)

        undeclared = find_undeclared_inputs(macro_dict, bindings)
        missing = find_missing_references(bindings, catalog)
        return {
            'macro_id': macro.id,
            'macro_code': macro.macro_code,
            'undeclared_inputs': undeclared,
            'missing_references': missing,
            'is_clean': not undeclared and not missing,
        }
