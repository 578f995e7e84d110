"""
Work Order Pricing Model

Standard prices for small jobs (tarps, leak calls, maintenance) billed outside
an Xactimate estimate. Rows are soft deleted through deleted_at.
"""

from datetime import datetime
from config.db import db
from config.constants import DEFAULT_WORK_ORDER_CATEGORY, UnitOfMeasure, WorkOrderPricingType


class WorkOrderPricing(db.Model):
    """
    Work order price list entry.

    unit_price is entered by the estimator and is not derived from
    material_cost + labor_cost. min_price is the minimum charge for
    per_unit items; range items quote between min_price and max_price.
    """
    __tablename__ = "work_order_pricing"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    item_code = db.Column(db.String(50), nullable=False, index=True)
    item_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    category = db.Column(db.String(100), nullable=False, default=DEFAULT_WORK_ORDER_CATEGORY, index=True)
    subcategory = db.Column(db.String(100), nullable=True)
    trade_type = db.Column(db.String(50), nullable=True)
    unit = db.Column(db.String(10), nullable=False, default=UnitOfMeasure.EA.value)

    unit_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    material_cost = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    labor_cost = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    labor_hours = db.Column(db.Float, nullable=True)
    pricing_type = db.Column(db.String(20), nullable=False, default=WorkOrderPricingType.FLAT.value)
    min_price = db.Column(db.Numeric(15, 2), nullable=True)
    max_price = db.Column(db.Numeric(15, 2), nullable=True)

    # Supplier / subcontractor records live outside this service
    preferred_supplier_id = db.Column(db.String(64), nullable=True)
    preferred_subcontractor_id = db.Column(db.String(64), nullable=True)

    is_active = db.Column(db.Boolean, default=True, index=True)
    is_taxable = db.Column(db.Boolean, default=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'item_code': self.item_code,
            'item_name': self.item_name,
            'description': self.description,
            'category': self.category,
            'subcategory': self.subcategory,
            'trade_type': self.trade_type,
            'unit': self.unit,
            'unit_price': float(self.unit_price or 0),
            'material_cost': float(self.material_cost or 0),
            'labor_cost': float(self.labor_cost or 0),
            'labor_hours': self.labor_hours,
            'pricing_type': self.pricing_type,
            'min_price': float(self.min_price) if self.min_price is not None else None,
            'max_price': float(self.max_price) if self.max_price is not None else None,
            'preferred_supplier_id': self.preferred_supplier_id,
            'preferred_subcontractor_id': self.preferred_subcontractor_id,
            'is_active': self.is_active,
            'is_taxable': self.is_taxable,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<WorkOrderPricing {self.id}: {self.item_code}>"
