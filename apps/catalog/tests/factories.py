"""Shared builders for catalog tests."""
from decimal import Decimal
from unittest import mock

from apps.catalog.models import CuratedProduct
from apps.supplier.dtos import SupplierProductDTO, SupplierVariantDTO, WarehouseStockDTO


def make_product(**overrides) -> CuratedProduct:
    fields = {
        'cj_pid': 'CJ1001',
        'cj_vid': 'V1001',
        'product_name': 'Baby Blanket',
        'cj_cost_price': Decimal('10.00'),
        'suggested_price': Decimal('201.60'),
        'custom_price': Decimal('201.60'),
        'stock_quantity': 50,
    }
    fields.update(overrides)
    return CuratedProduct.objects.create(**fields)


def supplier_product(pid='CJ1001', price='10.00', vids=('V1001',)) -> SupplierProductDTO:
    return SupplierProductDTO(
        pid=pid,
        name='Baby Blanket',
        sku='SKU-1',
        price=Decimal(price),
        image='https://img.test/1.jpg',
        category_name='Baby',
        description='',
        variants=[SupplierVariantDTO(vid=v, name='Default', sku='SKU-1', price=Decimal(price)) for v in vids],
    )


def warehouse(cj_inventory, warehouse_id='CN-1', factory_inventory=0) -> WarehouseStockDTO:
    return WarehouseStockDTO(
        warehouse_id=warehouse_id,
        warehouse_name=f'Warehouse {warehouse_id}',
        country_code='CN',
        total_inventory=cj_inventory + factory_inventory,
        cj_inventory=cj_inventory,
        factory_inventory=factory_inventory,
    )


def fake_client(**methods):
    client = mock.Mock()
    for name, value in methods.items():
        setattr(client, name, value)
    return client
