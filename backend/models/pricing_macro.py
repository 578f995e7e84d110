"""
Pricing Macro Models

A macro is a reusable bundle of catalog line items whose quantities are derived
from named roof measurements (total_squares, ridge_length, ...).
Structure: PricingMacro -> PricingMacroItem -> CatalogItem.

calculated_*_total columns are a snapshot for list views only; the macro
calculator never reads them.
"""

from datetime import datetime
from config.db import db
from config.constants import MarkupType, QuantityType


class PricingMacro(db.Model):
    """Named bundle of catalog items plus its declared measurement inputs."""
    __tablename__ = "pricing_macros"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    macro_code = db.Column(db.String(50), nullable=False, unique=True, index=True)
    macro_name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=True, index=True)
    trade_type = db.Column(db.String(50), nullable=True)

    # [{name, label, unit, type}] - names are the keys calculated items look up
    required_inputs = db.Column(db.JSON, nullable=False, default=list)

    markup_type = db.Column(db.String(20), nullable=False, default=MarkupType.PERCENTAGE.value)
    markup_value = db.Column(db.Float, nullable=False, default=0.0)

    # Snapshot of last refresh
    calculated_material_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    calculated_labor_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    calculated_total = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    totals_refreshed_at = db.Column(db.DateTime, nullable=True)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_template = db.Column(db.Boolean, default=False)
    tags = db.Column(db.JSON, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    items = db.relationship(
        "PricingMacroItem",
        backref="macro",
        lazy=True,
        cascade="all, delete-orphan",
        order_by="PricingMacroItem.sort_order"
    )

    def input_names(self):
        return [inp.get('name') for inp in (self.required_inputs or []) if inp.get('name')]

    def to_dict(self):
        return {
            'id': self.id,
            'macro_code': self.macro_code,
            'macro_name': self.macro_name,
            'description': self.description,
            'category': self.category,
            'trade_type': self.trade_type,
            'required_inputs': self.required_inputs or [],
            'markup_type': self.markup_type,
            'markup_value': self.markup_value or 0.0,
            'calculated_material_total': float(self.calculated_material_total or 0),
            'calculated_labor_total': float(self.calculated_labor_total or 0),
            'calculated_total': float(self.calculated_total or 0),
            'totals_refreshed_at': self.totals_refreshed_at.isoformat() if self.totals_refreshed_at else None,
            'is_active': self.is_active,
            'is_template': self.is_template,
            'tags': self.tags or [],
            'items_count': len(self.items),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def to_dict_full(self):
        """Include macro items in sort order."""
        base = self.to_dict()
        base['items'] = [item.to_dict() for item in self.items]
        return base

    def __repr__(self):
        return f"<PricingMacro {self.id}: {self.macro_code}>"


class PricingMacroItem(db.Model):
    """
    Binds one catalog item to a macro with a quantity rule.

    item_code/description/unit are a display snapshot taken at bind time and
    are never used for pricing.
    """
    __tablename__ = "pricing_macro_items"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    macro_id = db.Column(db.Integer, db.ForeignKey("pricing_macros.id", ondelete="CASCADE"), nullable=False, index=True)
    catalog_item_id = db.Column(db.Integer, db.ForeignKey("xactimate_line_items.id", ondelete="SET NULL"), nullable=True, index=True)

    item_code = db.Column(db.String(50), nullable=False)
    description = db.Column(db.Text, nullable=True)
    unit = db.Column(db.String(10), nullable=True)

    quantity_type = db.Column(db.String(20), nullable=False, default=QuantityType.CALCULATED.value)
    fixed_quantity = db.Column(db.Float, nullable=False, default=1.0)
    input_field_name = db.Column(db.String(100), nullable=True)
    quantity_multiplier = db.Column(db.Float, nullable=False, default=1.0)

    waste_factor_override = db.Column(db.Float, nullable=True)
    price_override = db.Column(db.Numeric(15, 2), nullable=True)
    material_override = db.Column(db.Numeric(15, 2), nullable=True)
    labor_override = db.Column(db.Numeric(15, 2), nullable=True)

    sort_order = db.Column(db.Integer, nullable=False, default=0)
    is_included = db.Column(db.Boolean, nullable=False, default=True)
    is_optional = db.Column(db.Boolean, nullable=False, default=False)
    group_name = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    catalog_item = db.relationship("CatalogItem", foreign_keys=[catalog_item_id])

    __table_args__ = (
        db.Index('idx_macro_item_macro_sort', 'macro_id', 'sort_order'),
    )

    def to_dict(self):
        return {
            'id': self.id,
            'macro_id': self.macro_id,
            'catalog_item_id': self.catalog_item_id,
            'item_code': self.item_code,
            'description': self.description,
            'unit': self.unit,
            'quantity_type': self.quantity_type,
            'fixed_quantity': self.fixed_quantity,
            'input_field_name': self.input_field_name,
            'quantity_multiplier': self.quantity_multiplier,
            'waste_factor_override': self.waste_factor_override,
            'price_override': float(self.price_override) if self.price_override is not None else None,
            'material_override': float(self.material_override) if self.material_override is not None else None,
            'labor_override': float(self.labor_override) if self.labor_override is not None else None,
            'sort_order': self.sort_order,
            'is_included': self.is_included,
            'is_optional': self.is_optional,
            'group_name': self.group_name,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<PricingMacroItem {self.id}: macro={self.macro_id}, item={self.catalog_item_id}>"
