"""
Xactimate Catalog Models

Priced line items maintained by the estimating team, grouped by trade category.
Structure: XactimateCategory -> CatalogItem.

Pricing macros link to these items; the macro calculator always resolves prices
live from here unless a macro item overrides them.
"""

from datetime import datetime
from config.db import db
from config.constants import PriceSource, UnitOfMeasure


class XactimateCategory(db.Model):
    """Trade category (e.g. RFG Roofing, GUT Gutters) used to group line items."""
    __tablename__ = "xactimate_categories"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    category_code = db.Column(db.String(10), nullable=False, unique=True, index=True)
    category_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    sort_order = db.Column(db.Integer, default=0, nullable=False)
    is_active = db.Column(db.Boolean, default=True, index=True)
    is_system = db.Column(db.Boolean, default=False)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)

    line_items = db.relationship("CatalogItem", back_populates="category", lazy=True)

    def to_dict(self):
        return {
            'id': self.id,
            'category_code': self.category_code,
            'category_name': self.category_name,
            'description': self.description,
            'sort_order': self.sort_order,
            'is_active': self.is_active,
            'is_system': self.is_system,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<XactimateCategory {self.id}: {self.category_code}>"


class CatalogItem(db.Model):
    """
    Priced Xactimate line item.

    unit_price is always material_price + labor_price + equipment_price;
    recompute_unit_price() is the only place that writes it.
    """
    __tablename__ = "xactimate_line_items"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_code = db.Column(db.String(50), nullable=False, unique=True, index=True)
    selector_code = db.Column(db.String(50), nullable=True)
    category_id = db.Column(db.Integer, db.ForeignKey("xactimate_categories.id", ondelete="SET NULL"), nullable=True, index=True)
    description = db.Column(db.Text, nullable=False)
    unit = db.Column(db.String(10), nullable=False, default=UnitOfMeasure.EA.value)

    # Per-unit prices (USD)
    unit_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    material_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    labor_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    equipment_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    labor_hours = db.Column(db.Float, nullable=False, default=0.0)
    labor_minimum = db.Column(db.Numeric(15, 2), nullable=True)
    waste_factor = db.Column(db.Float, nullable=False, default=0.0)  # percent, 0-100

    # Depreciation defaults carried over from the price list
    useful_life_years = db.Column(db.Float, nullable=True)
    default_depreciation_percent = db.Column(db.Float, nullable=True)

    price_source = db.Column(db.String(30), nullable=False, default=PriceSource.MANUAL.value)
    price_list_region = db.Column(db.String(50), nullable=True)
    price_effective_date = db.Column(db.Date, nullable=True)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_taxable = db.Column(db.Boolean, default=True)
    xactimate_data = db.Column(db.JSON, nullable=True)  # raw imported row

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True)  # set by archive, cleared by re-import

    category = db.relationship("XactimateCategory", back_populates="line_items")

    __table_args__ = (
        db.Index('idx_line_item_active_code', 'is_active', 'item_code'),
        db.Index('idx_line_item_category_active', 'category_id', 'is_active'),
    )

    def component_total(self) -> float:
        return (float(self.material_price or 0)
                + float(self.labor_price or 0)
                + float(self.equipment_price or 0))

    def recompute_unit_price(self):
        self.unit_price = round(self.component_total(), 2)
        return self.unit_price

    def to_dict(self):
        return {
            'id': self.id,
            'item_code': self.item_code,
            'selector_code': self.selector_code,
            'category_id': self.category_id,
            'category_code': self.category.category_code if self.category else None,
            'description': self.description,
            'unit': self.unit,
            'unit_price': float(self.unit_price or 0),
            'material_price': float(self.material_price or 0),
            'labor_price': float(self.labor_price or 0),
            'equipment_price': float(self.equipment_price or 0),
            'labor_hours': self.labor_hours or 0.0,
            'labor_minimum': float(self.labor_minimum) if self.labor_minimum is not None else None,
            'waste_factor': self.waste_factor or 0.0,
            'useful_life_years': self.useful_life_years,
            'default_depreciation_percent': self.default_depreciation_percent,
            'price_source': self.price_source,
            'price_list_region': self.price_list_region,
            'price_effective_date': self.price_effective_date.isoformat() if self.price_effective_date else None,
            'is_active': self.is_active,
            'is_taxable': self.is_taxable,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
            'deleted_at': self.deleted_at.isoformat() if self.deleted_at else None,
        }

    def __repr__(self):
        return f"<CatalogItem {self.id}: {self.item_code}>"
