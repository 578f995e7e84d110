"""
Vendor Pricing Models

What crews charge us for labor and what suppliers charge us for materials.
crew_id / supplier_id identify records kept by the CRM, not by this service.
Both tables are soft deleted through deleted_at.
"""

from datetime import date, datetime
from config.db import db
from config.constants import LaborRateType, UnitOfMeasure


class VendorLaborRate(db.Model):
    """Labor rate a crew bills for one kind of work"""
    __tablename__ = "vendor_labor_rates"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    crew_id = db.Column(db.String(64), nullable=False, index=True)
    rate_name = db.Column(db.String(255), nullable=False)
    trade_type = db.Column(db.String(50), nullable=False, index=True)
    work_type = db.Column(db.String(100), nullable=True)

    rate_type = db.Column(db.String(20), nullable=False, default=LaborRateType.PER_SQUARE.value)
    rate_amount = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    minimum_charge = db.Column(db.Numeric(15, 2), nullable=True)
    overtime_rate = db.Column(db.Numeric(15, 2), nullable=True)
    weekend_rate = db.Column(db.Numeric(15, 2), nullable=True)

    includes_materials = db.Column(db.Boolean, default=False, nullable=False)
    includes_dump_fees = db.Column(db.Boolean, default=False, nullable=False)
    includes_permits = db.Column(db.Boolean, default=False, nullable=False)
    scope_notes = db.Column(db.Text, nullable=True)

    is_active = db.Column(db.Boolean, default=True, index=True)
    effective_date = db.Column(db.Date, nullable=False, default=date.today)
    expiration_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'crew_id': self.crew_id,
            'rate_name': self.rate_name,
            'trade_type': self.trade_type,
            'work_type': self.work_type,
            'rate_type': self.rate_type,
            'rate_amount': float(self.rate_amount or 0),
            'minimum_charge': float(self.minimum_charge) if self.minimum_charge is not None else None,
            'overtime_rate': float(self.overtime_rate) if self.overtime_rate is not None else None,
            'weekend_rate': float(self.weekend_rate) if self.weekend_rate is not None else None,
            'includes_materials': self.includes_materials,
            'includes_dump_fees': self.includes_dump_fees,
            'includes_permits': self.includes_permits,
            'scope_notes': self.scope_notes,
            'is_active': self.is_active,
            'effective_date': self.effective_date.isoformat() if self.effective_date else None,
            'expiration_date': self.expiration_date.isoformat() if self.expiration_date else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<VendorLaborRate {self.id}: {self.crew_id} {self.rate_name}>"


class VendorMaterialPricing(db.Model):
    """
    Supplier price for a product, with up to three quantity price breaks.

    xactimate_item_id optionally ties the product to the catalog line item
    it supplies.
    """
    __tablename__ = "vendor_material_pricing"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    supplier_id = db.Column(db.String(64), nullable=False, index=True)
    product_code = db.Column(db.String(100), nullable=False, index=True)
    product_name = db.Column(db.String(255), nullable=False)
    manufacturer = db.Column(db.String(255), nullable=True)
    product_line = db.Column(db.String(255), nullable=True)
    color = db.Column(db.String(100), nullable=True)
    category = db.Column(db.String(100), nullable=False, index=True)
    subcategory = db.Column(db.String(100), nullable=True)
    unit = db.Column(db.String(10), nullable=False, default=UnitOfMeasure.EA.value)

    unit_price = db.Column(db.Numeric(15, 2), nullable=False, default=0)
    tier1_quantity = db.Column(db.Float, nullable=True)
    tier1_price = db.Column(db.Numeric(15, 2), nullable=True)
    tier2_quantity = db.Column(db.Float, nullable=True)
    tier2_price = db.Column(db.Numeric(15, 2), nullable=True)
    tier3_quantity = db.Column(db.Float, nullable=True)
    tier3_price = db.Column(db.Numeric(15, 2), nullable=True)

    xactimate_item_id = db.Column(
        db.Integer, db.ForeignKey("xactimate_line_items.id", ondelete="SET NULL"), nullable=True, index=True
    )

    is_active = db.Column(db.Boolean, default=True, index=True)
    in_stock = db.Column(db.Boolean, default=True)
    lead_time_days = db.Column(db.Integer, nullable=True)
    price_effective_date = db.Column(db.Date, nullable=False, default=date.today)
    price_expiration_date = db.Column(db.Date, nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=True)
    deleted_at = db.Column(db.DateTime, nullable=True, index=True)

    xactimate_item = db.relationship("CatalogItem", foreign_keys=[xactimate_item_id])

    def to_dict(self):
        return {
            'id': self.id,
            'supplier_id': self.supplier_id,
            'product_code': self.product_code,
            'product_name': self.product_name,
            'manufacturer': self.manufacturer,
            'product_line': self.product_line,
            'color': self.color,
            'category': self.category,
            'subcategory': self.subcategory,
            'unit': self.unit,
            'unit_price': float(self.unit_price or 0),
            'tiers': [
                {'quantity': qty, 'price': float(price)}
                for qty, price in (
                    (self.tier1_quantity, self.tier1_price),
                    (self.tier2_quantity, self.tier2_price),
                    (self.tier3_quantity, self.tier3_price),
                )
                if qty is not None and price is not None
            ],
            'xactimate_item_id': self.xactimate_item_id,
            'xactimate_item_code': self.xactimate_item.item_code if self.xactimate_item else None,
            'is_active': self.is_active,
            'in_stock': self.in_stock,
            'lead_time_days': self.lead_time_days,
            'price_effective_date': self.price_effective_date.isoformat() if self.price_effective_date else None,
            'price_expiration_date': self.price_expiration_date.isoformat() if self.price_expiration_date else None,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f"<VendorMaterialPricing {self.id}: {self.supplier_id} {self.product_code}>"
