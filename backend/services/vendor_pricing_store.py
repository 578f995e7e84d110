"""
Vendor Pricing Store Service
Work order prices, crew labor rates and supplier material prices

All three lists are soft deleted: delete() stamps deleted_at and the row
drops out of get() and list().
"""
from datetime import datetime
from typing import Dict, List, Optional
from sqlalchemy import or_
from config.db import db
from config.logging import get_logger
from models.vendor_pricing import VendorLaborRate, VendorMaterialPricing
from models.work_order_pricing import WorkOrderPricing
from services.catalog_store import CatalogStore
from services.pricing_errors import CatalogItemNotFound, PricingRecordNotFound
from utils.validators import ValidationError

log = get_logger()


class _SoftDeleteStore:
    """Shared get / create / update / delete for one price list model"""

    model = None
    label = ''
    fields = ()
    # NOT NULL columns; a null in an update payload leaves them unchanged
    non_null_fields = set()

    @classmethod
    def _live(cls):
        return cls.model.query.filter(cls.model.deleted_at.is_(None))

    @classmethod
    def get(cls, record_id: int):
        record = db.session.get(cls.model, record_id)
        if not record or record.deleted_at is not None:
            raise PricingRecordNotFound(cls.label, record_id)
        return record

    @classmethod
    def _check(cls, data: Dict, record=None):
        """Uniqueness and reference checks; raises ValidationError"""

    @classmethod
    def create(cls, data: Dict):
        cls._check(data)
        record = cls.model()
        for key in cls.fields:
            if key in data and data[key] is not None:
                setattr(record, key, data[key])
        db.session.add(record)
        db.session.commit()
        log.info(f"{cls.label} created: {record!r}")
        return record

    @classmethod
    def update(cls, record_id: int, data: Dict):
        record = cls.get(record_id)
        cls._check(data, record)
        for key in cls.fields:
            if key in data:
                if data[key] is None and key in cls.non_null_fields:
                    continue
                setattr(record, key, data[key])
        db.session.commit()
        log.info(f"{cls.label} updated: {record!r}")
        return record

    @classmethod
    def delete(cls, record_id: int):
        record = cls.get(record_id)
        record.deleted_at = datetime.utcnow()
        record.is_active = False
        db.session.commit()
        log.info(f"{cls.label} deleted: {record!r}")
        return record


class WorkOrderPricingStore(_SoftDeleteStore):
    model = WorkOrderPricing
    label = 'Work order price'
    fields = (
        'item_code', 'item_name', 'description', 'category', 'subcategory', 'trade_type',
        'unit', 'unit_price', 'material_cost', 'labor_cost', 'labor_hours', 'pricing_type',
        'min_price', 'max_price', 'preferred_supplier_id', 'preferred_subcontractor_id',
        'is_active', 'is_taxable',
    )
    non_null_fields = {
        'item_code', 'item_name', 'category', 'unit', 'unit_price', 'material_cost',
        'labor_cost', 'pricing_type', 'is_active', 'is_taxable',
    }

    @classmethod
    def list(cls, active_only: bool = True, category: Optional[str] = None,
             search: Optional[str] = None) -> List[WorkOrderPricing]:
        """
        List work order prices

        Args:
            active_only: Skip inactive entries
            category: Restrict to one category (e.g. 'Repairs')
            search: Case-insensitive substring over item_code and item_name

        Returns:
            list: Rows ordered by category, then item_name
        """
        query = cls._live()
        if active_only:
            query = query.filter(WorkOrderPricing.is_active == True)
        if category:
            query = query.filter(WorkOrderPricing.category == category)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                WorkOrderPricing.item_code.ilike(pattern),
                WorkOrderPricing.item_name.ilike(pattern)
            ))
        return query.order_by(WorkOrderPricing.category.asc(), WorkOrderPricing.item_name.asc()).all()

    @classmethod
    def _check(cls, data: Dict, record=None):
        code = data.get('item_code')
        if code and (record is None or code != record.item_code):
            clash = cls._live().filter(WorkOrderPricing.item_code == code)
            if record is not None:
                clash = clash.filter(WorkOrderPricing.id != record.id)
            if clash.first():
                raise ValidationError(f"Work order item code '{code}' already exists", field='item_code')

        # min/max may arrive in separate updates
        if record is not None:
            min_price = data['min_price'] if 'min_price' in data else record.min_price
            max_price = data['max_price'] if 'max_price' in data else record.max_price
            if min_price is not None and max_price is not None and float(min_price) > float(max_price):
                raise ValidationError("max_price must be at least min_price", field='max_price')


class VendorLaborRateStore(_SoftDeleteStore):
    model = VendorLaborRate
    label = 'Labor rate'
    fields = (
        'crew_id', 'rate_name', 'trade_type', 'work_type', 'rate_type', 'rate_amount',
        'minimum_charge', 'overtime_rate', 'weekend_rate', 'includes_materials',
        'includes_dump_fees', 'includes_permits', 'scope_notes', 'is_active',
        'effective_date', 'expiration_date',
    )
    non_null_fields = {
        'crew_id', 'rate_name', 'trade_type', 'rate_type', 'rate_amount', 'includes_materials',
        'includes_dump_fees', 'includes_permits', 'is_active', 'effective_date',
    }

    @classmethod
    def list(cls, active_only: bool = True, crew_id: Optional[str] = None,
             trade_type: Optional[str] = None) -> List[VendorLaborRate]:
        query = cls._live()
        if active_only:
            query = query.filter(VendorLaborRate.is_active == True)
        if crew_id:
            query = query.filter(VendorLaborRate.crew_id == crew_id)
        if trade_type:
            query = query.filter(VendorLaborRate.trade_type == trade_type)
        return query.order_by(VendorLaborRate.trade_type.asc(), VendorLaborRate.rate_name.asc()).all()


class VendorMaterialPricingStore(_SoftDeleteStore):
    model = VendorMaterialPricing
    label = 'Material price'
    fields = (
        'supplier_id', 'product_code', 'product_name', 'manufacturer', 'product_line', 'color',
        'category', 'subcategory', 'unit', 'unit_price',
        'tier1_quantity', 'tier1_price', 'tier2_quantity', 'tier2_price',
        'tier3_quantity', 'tier3_price', 'xactimate_item_id', 'is_active', 'in_stock',
        'lead_time_days', 'price_effective_date', 'price_expiration_date',
    )
    non_null_fields = {
        'supplier_id', 'product_code', 'product_name', 'category', 'unit', 'unit_price',
        'is_active', 'price_effective_date',
    }

    @classmethod
    def list(cls, active_only: bool = True, supplier_id: Optional[str] = None,
             category: Optional[str] = None, search: Optional[str] = None) -> List[VendorMaterialPricing]:
        query = cls._live()
        if active_only:
            query = query.filter(VendorMaterialPricing.is_active == True)
        if supplier_id:
            query = query.filter(VendorMaterialPricing.supplier_id == supplier_id)
        if category:
            query = query.filter(VendorMaterialPricing.category == category)
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                VendorMaterialPricing.product_code.ilike(pattern),
                VendorMaterialPricing.product_name.ilike(pattern),
                VendorMaterialPricing.manufacturer.ilike(pattern)
            ))
        return query.order_by(VendorMaterialPricing.category.asc(), VendorMaterialPricing.product_name.asc()).all()

    @classmethod
    def _check(cls, data: Dict, record=None):
        supplier_id = data.get('supplier_id') or (record.supplier_id if record is not None else None)
        product_code = data.get('product_code') or (record.product_code if record is not None else None)
        if 'supplier_id' in data or 'product_code' in data:
            clash = cls._live().filter(
                VendorMaterialPricing.supplier_id == supplier_id,
                VendorMaterialPricing.product_code == product_code
            )
            if record is not None:
                clash = clash.filter(VendorMaterialPricing.id != record.id)
            if clash.first():
                raise ValidationError(
                    f"Product '{product_code}' is already priced for supplier {supplier_id}", field='product_code'
                )

        item_id = data.get('xactimate_item_id')
        if item_id is not None:
            try:
                CatalogStore.get(item_id, include_archived=False)
            except CatalogItemNotFound as e:
                raise ValidationError(e.message, field='xactimate_item_id')
