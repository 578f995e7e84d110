from config.db import db
from models.catalog_item import XactimateCategory, CatalogItem
from models.pricing_macro import PricingMacro, PricingMacroItem
from models.work_order_pricing import WorkOrderPricing
from models.vendor_pricing import VendorLaborRate, VendorMaterialPricing

__all__ = [
    'db', 'XactimateCategory', 'CatalogItem', 'PricingMacro', 'PricingMacroItem',
    'WorkOrderPricing', 'VendorLaborRate', 'VendorMaterialPricing',
]
