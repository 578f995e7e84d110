"""
Catalog Store Service
Reads and writes Xactimate line items and their categories

All writes keep unit_price equal to material + labor + equipment.
Removing an item unlinks the macro items that pointed at it and reports
their ids so callers can warn the user. Archiving keeps the row and the
links but hides the item from listings and calculations.
"""
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple
from sqlalchemy import or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import joinedload
from config.db import db
from config.constants import (
    DEFAULT_CATEGORIES, PRICE_TOLERANCE, PriceSource, UnitOfMeasure
)
from config.logging import get_logger
from models.catalog_item import CatalogItem, XactimateCategory
from models.pricing_macro import PricingMacroItem
from models.vendor_pricing import VendorMaterialPricing
from services.pricing_errors import CatalogItemNotFound, InvariantViolation, ImportRowError
from services.import_mapper import is_blank_row, map_import_row, unit_cost_mismatch
from utils.validators import ValidationError

log = get_logger()

# Columns an upsert may write (unit_price is handled separately)
ITEM_FIELDS = (
    'item_code', 'selector_code', 'category_id', 'description', 'unit',
    'material_price', 'labor_price', 'equipment_price', 'labor_hours',
    'labor_minimum', 'waste_factor', 'useful_life_years',
    'default_depreciation_percent', 'price_source', 'price_list_region',
    'price_effective_date', 'is_active', 'is_taxable', 'xactimate_data',
)

# NOT NULL columns that fall back to their default when given None
NON_NULL_DEFAULTS = {
    'material_price': 0,
    'labor_price': 0,
    'equipment_price': 0,
    'labor_hours': 0.0,
    'waste_factor': 0.0,
    'unit': UnitOfMeasure.EA.value,
    'price_source': PriceSource.MANUAL.value,
}


class CatalogStore:
    """Catalog item and category operations backed by the SQLAlchemy session"""

    # ==================== LINE ITEMS ====================

    @staticmethod
    def get(item_id: int, include_archived: bool = True) -> CatalogItem:
        item = db.session.get(CatalogItem, item_id)
        if not item or (item.deleted_at is not None and not include_archived):
            raise CatalogItemNotFound(item_id)
        return item

    @staticmethod
    def _filtered_query(active_only: bool = True, category_id: Optional[int] = None, search: Optional[str] = None):
        query = CatalogItem.query.options(joinedload(CatalogItem.category)).filter(CatalogItem.deleted_at.is_(None))

        if active_only:
            query = query.filter(CatalogItem.is_active == True)

        if category_id is not None:
            query = query.filter(CatalogItem.category_id == category_id)

        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.filter(or_(
                CatalogItem.item_code.ilike(pattern),
                CatalogItem.description.ilike(pattern)
            ))

        return query.order_by(CatalogItem.item_code.asc())

    @staticmethod
    def list(active_only: bool = True, category_id: Optional[int] = None, search: Optional[str] = None) -> List[CatalogItem]:
        """
        List catalog items

        Args:
            active_only: Skip inactive items
            category_id: Restrict to one category
            search: Case-insensitive substring over item_code and description

        Returns:
            list: CatalogItem rows ordered by item_code
        """
        return CatalogStore._filtered_query(active_only, category_id, search).all()

    @staticmethod
    def list_paginated(page: int = 1, per_page: int = 50, active_only: bool = True,
                       category_id: Optional[int] = None, search: Optional[str] = None):
        query = CatalogStore._filtered_query(active_only, category_id, search)
        return query.paginate(page=page, per_page=per_page, error_out=False)

    @staticmethod
    def upsert(record: Dict, commit: bool = True) -> Tuple[CatalogItem, bool]:
        """
        Create or update a catalog item

        Matches on record['id'] when present, otherwise on item_code.
        When unit_price is missing it is recomputed from the merged component
        prices; when it is supplied it must already agree with them.

        Args:
            record: Field values (validated payload or mapped import row)
            commit: Commit the session; imports pass False and commit once

        Returns:
            tuple: (CatalogItem, created)

        Raises:
            CatalogItemNotFound: record['id'] does not exist
            InvariantViolation: Explicit unit_price disagrees with components
            ValidationError: Missing required fields, unknown category or duplicate code
        """
        item = None
        item_id = record.get('id')
        item_code = (record.get('item_code') or '').strip() or None

        if item_id is not None:
            item = CatalogStore.get(item_id)
        elif item_code:
            item = CatalogItem.query.filter_by(item_code=item_code).first()

        if item is not None and item.deleted_at is not None and item_id is None:
            # Re-importing or re-creating an archived code brings it back
            item.deleted_at = None
            if 'is_active' not in record:
                item.is_active = True

        created = item is None
        if created:
            if not item_code:
                raise ValidationError("item_code is required", field='item_code')
            if not (record.get('description') or '').strip():
                raise ValidationError("description is required", field='description')
            item = CatalogItem()

        if item_code and item_code != item.item_code:
            clash_query = CatalogItem.query.filter(CatalogItem.item_code == item_code)
            if item.id:
                clash_query = clash_query.filter(CatalogItem.id != item.id)
            if clash_query.first():
                raise ValidationError(f"Item code '{item_code}' already exists", field='item_code')

        category_id = record.get('category_id')
        if category_id is not None and not db.session.get(XactimateCategory, category_id):
            raise ValidationError(f"Category with ID {category_id} not found", field='category_id')

        for key in ITEM_FIELDS:
            if key not in record:
                continue
            value = record[key]
            if key == 'item_code':
                value = item_code
            if value is None and key in NON_NULL_DEFAULTS:
                value = NON_NULL_DEFAULTS[key]
            setattr(item, key, value)

        for key, default in NON_NULL_DEFAULTS.items():
            if getattr(item, key) is None:
                setattr(item, key, default)

        explicit_price = record.get('unit_price')
        if explicit_price is not None:
            component_total = item.component_total()
            if abs(float(explicit_price) - component_total) > PRICE_TOLERANCE:
                # Batch imports roll back their own savepoint instead
                if not created and commit:
                    db.session.rollback()
                raise InvariantViolation(item_code or record.get('item_code'), float(explicit_price), component_total)
        item.recompute_unit_price()

        if created:
            db.session.add(item)

        if commit:
            db.session.commit()
            log.info(f"Catalog item {'created' if created else 'updated'}: {item.item_code} (unit price {item.unit_price})")
        else:
            db.session.flush()

        return item, created

    @staticmethod
    def create(record: Dict) -> CatalogItem:
        """Insert a new item; an existing item_code is a ValidationError rather than an update"""
        item_code = (record.get('item_code') or '').strip()
        if item_code and CatalogItem.query.filter_by(item_code=item_code, deleted_at=None).first():
            raise ValidationError(f"Item code '{item_code}' already exists", field='item_code')
        item, _ = CatalogStore.upsert({k: v for k, v in record.items() if k != 'id'})
        return item

    @staticmethod
    def remove(item_id: int) -> List[int]:
        """
        Delete a catalog item

        Macro items that referenced it keep their display snapshot but lose
        the link, so later calculations report them as missing references.

        Returns:
            list: Ids of the affected macro items
        """
        item = CatalogStore.get(item_id)

        affected = PricingMacroItem.query.filter_by(catalog_item_id=item.id).all()
        affected_ids = [binding.id for binding in affected]
        for binding in affected:
            binding.catalog_item_id = None

        VendorMaterialPricing.query.filter_by(xactimate_item_id=item.id).update(
            {VendorMaterialPricing.xactimate_item_id: None}, synchronize_session='fetch'
        )

        item_code = item.item_code
        db.session.delete(item)
        db.session.commit()

        if affected_ids:
            log.warning(f"Catalog item {item_code} removed; {len(affected_ids)} macro item(s) unlinked: {affected_ids}")
        else:
            log.info(f"Catalog item {item_code} removed")
        return affected_ids

    @staticmethod
    def archive(item_id: int) -> List[int]:
        """
        Soft delete a catalog item

        The row stays (deleted_at is set) and macro items keep their link, but
        it drops out of listings and calculations treat it as a missing
        reference until the code is imported or created again.

        Returns:
            list: Ids of the macro items still pointing at it
        """
        item = CatalogStore.get(item_id, include_archived=False)
        item.deleted_at = datetime.utcnow()
        item.is_active = False

        affected_ids = [b.id for b in PricingMacroItem.query.filter_by(catalog_item_id=item.id).all()]
        db.session.commit()

        log.info(f"Catalog item {item.item_code} archived ({len(affected_ids)} macro item(s) reference it)")
        return affected_ids

    @staticmethod
    def lookup_table(ids: Iterable[int]) -> Dict[int, Dict]:
        """{catalog_item_id: item dict} for the ids that still exist and are not archived"""
        ids = {i for i in ids if i is not None}
        if not ids:
            return {}
        items = (CatalogItem.query.options(joinedload(CatalogItem.category))
                 .filter(CatalogItem.id.in_(ids), CatalogItem.deleted_at.is_(None))
                 .all())
        return {item.id: item.to_dict() for item in items}

    # ==================== CATEGORIES ====================

    @staticmethod
    def list_categories(active_only: bool = True) -> List[XactimateCategory]:
        query = XactimateCategory.query
        if active_only:
            query = query.filter(XactimateCategory.is_active == True)
        return query.order_by(XactimateCategory.sort_order.asc(), XactimateCategory.category_code.asc()).all()

    @staticmethod
    def create_category(category_code: str, category_name: str, description: str = None,
                        sort_order: int = 0, is_system: bool = False) -> XactimateCategory:
        code = (category_code or '').strip().upper()
        if not code:
            raise ValidationError("category_code is required", field='category_code')
        if not (category_name or '').strip():
            raise ValidationError("category_name is required", field='category_name')
        if XactimateCategory.query.filter_by(category_code=code).first():
            raise ValidationError(f"Category '{code}' already exists", field='category_code')

        category = XactimateCategory(
            category_code=code,
            category_name=category_name.strip(),
            description=description,
            sort_order=sort_order or 0,
            is_system=is_system
        )
        db.session.add(category)
        db.session.commit()
        log.info(f"Xactimate category created: {code}")
        return category

    @staticmethod
    def initialize_default_categories() -> int:
        """Insert the standard trade categories that are missing; returns how many were added"""
        existing = {code for (code,) in db.session.query(XactimateCategory.category_code).all()}
        added = 0
        for sort_order, (code, name) in enumerate(DEFAULT_CATEGORIES.items()):
            if code in existing:
                continue
            db.session.add(XactimateCategory(
                category_code=code,
                category_name=name,
                sort_order=sort_order,
                is_system=True
            ))
            added += 1
        db.session.commit()
        if added:
            log.info(f"Initialized {added} default Xactimate categories")
        return added

    @staticmethod
    def category_id_map() -> Dict[str, int]:
        return {code: cid for cid, code in db.session.query(XactimateCategory.id, XactimateCategory.category_code).all()}

    # ==================== BULK IMPORT ====================

    @staticmethod
    def import_catalog_rows(rows: List[Dict], price_source: str = PriceSource.XACTIMATE_IMPORT.value,
                            price_list_region: str = None) -> Dict:
        """
        Upsert parsed price-list rows

        A bad row is recorded in 'errors' and the batch carries on; blank
        rows are counted as skipped.

        Returns:
            dict: {'total_rows', 'created', 'updated', 'skipped', 'errors', 'warnings'}
        """
        category_ids = CatalogStore.category_id_map()
        result = {
            'total_rows': len(rows),
            'created': 0,
            'updated': 0,
            'skipped': 0,
            'errors': [],
            'warnings': [],
        }

        for index, row in enumerate(rows, start=1):
            row_number = row.get('row', index) if isinstance(row, dict) else index
            if not isinstance(row, dict) or is_blank_row(row):
                result['skipped'] += 1
                continue

            try:
                record = map_import_row(row, category_ids, price_source, price_list_region, row_number=row_number)
                with db.session.begin_nested():
                    _, created = CatalogStore.upsert(record, commit=False)
            except ImportRowError as e:
                result['errors'].append(e.to_dict())
                continue
            except (ValidationError, InvariantViolation) as e:
                result['errors'].append({'row': row_number, 'message': e.message})
                continue
            except SQLAlchemyError as e:
                log.error(f"Catalog import row {row_number} rejected by database: {str(e)}")
                result['errors'].append({'row': row_number, 'message': f"Could not save {record['item_code']}"})
                continue

            result['created' if created else 'updated'] += 1

            mismatch = unit_cost_mismatch(row, record)
            if mismatch:
                result['warnings'].append({'row': row_number, 'message': mismatch})

            category_code = str(row.get('category_code') or '').strip().upper()
            if category_code and record['category_id'] is None:
                result['warnings'].append({
                    'row': row_number,
                    'message': f"Unknown category '{category_code}' for {record['item_code']}; left uncategorized"
                })

        db.session.commit()
        log.info(
            f"Catalog import ({price_source}): {result['created']} created, {result['updated']} updated, "
            f"{result['skipped']} skipped, {len(result['errors'])} errors"
        )
        return result
