"""Product (inventory) endpoints."""

from fastapi import APIRouter, Depends, Query, status

from pharmapos.api.dependencies import (
    get_manage_product_use_case,
    get_record_stock_take_use_case,
    get_record_store,
    get_reporting_service,
)
from pharmapos.application.dto.requests import (
    CreateProductRequest,
    StockTakeRequest,
    UpdateProductRequest,
)
from pharmapos.application.dto.responses import (
    ErrorResponse,
    ProductListResponse,
    ProductResponse,
    ProductSavedResponse,
    StockTakeResponse,
)
from pharmapos.application.use_cases import ManageProductUseCase, RecordStockTakeUseCase
from pharmapos.core.entities import Product, StockTake
from pharmapos.core.exceptions import ProductNotFoundError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import ReportingService

router = APIRouter(prefix="/api/products", tags=["products"])


def _to_response(product: Product) -> ProductResponse:
    return ProductResponse(**product.model_dump(), is_low_stock=product.is_low_stock)


@router.get("", response_model=ProductListResponse)
async def list_products(
    limit: int = Query(default=100, ge=1, le=1000),
    offset: int = Query(default=0, ge=0),
    store: IRecordStore = Depends(get_record_store),
) -> ProductListResponse:
    """List products by name."""
    total = await store.count("products")
    rows = await store.select("products", order_by="name", limit=limit, offset=offset)
    return ProductListResponse(
        products=[_to_response(Product.model_validate(r)) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(rows) < total,
    )


@router.get("/low-stock", response_model=list[ProductResponse])
async def low_stock(
    threshold: int | None = Query(default=None, ge=0),
    reporting: ReportingService = Depends(get_reporting_service),
) -> list[ProductResponse]:
    """Products at or below their reorder level."""
    return [_to_response(p) for p in await reporting.low_stock(threshold)]


@router.get(
    "/{product_id}",
    response_model=ProductResponse,
    responses={404: {"model": ErrorResponse}},
)
async def get_product(
    product_id: int,
    store: IRecordStore = Depends(get_record_store),
) -> ProductResponse:
    """Get a single product."""
    row = await store.select_one("products", {"id": product_id})
    if row is None:
        raise ProductNotFoundError(product_id)
    return _to_response(Product.model_validate(row))


@router.post(
    "",
    response_model=ProductSavedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid price or duplicate batch"}},
)
async def create_product(
    request: CreateProductRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductSavedResponse:
    """Add a product by hand, priced like an invoice line."""
    product = await use_case.create(request)
    return use_case.to_response(product, created=True)


@router.put(
    "/{product_id}",
    response_model=ProductSavedResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_product(
    product_id: int,
    request: UpdateProductRequest,
    use_case: ManageProductUseCase = Depends(get_manage_product_use_case),
) -> ProductSavedResponse:
    """Edit product details; pricing changes re-price the product."""
    product = await use_case.update(product_id, request)
    return use_case.to_response(product, created=False)


@router.post(
    "/{product_id}/stock-takes",
    response_model=StockTakeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}},
)
async def record_stock_take(
    product_id: int,
    request: StockTakeRequest,
    use_case: RecordStockTakeUseCase = Depends(get_record_stock_take_use_case),
) -> StockTakeResponse:
    """Record a physical count and correct the stock level to it."""
    result = await use_case.execute(product_id, request)
    return use_case.to_response(result)


@router.get("/{product_id}/stock-takes", response_model=list[StockTake])
async def list_stock_takes(
    product_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    store: IRecordStore = Depends(get_record_store),
) -> list[StockTake]:
    """Stock takes for a product, newest first."""
    rows = await store.select(
        "stock_takes",
        {"product_id": product_id},
        order_by="created_at",
        descending=True,
        limit=limit,
    )
    return [StockTake.model_validate(r) for r in rows]
