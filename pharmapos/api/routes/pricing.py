"""Pricing calculator endpoints. Nothing here writes to the database."""

from fastapi import APIRouter, Depends

from pharmapos.api.dependencies import get_app_settings, get_record_store
from pharmapos.application.dto.requests import (
    ComputePricingRequest,
    RescaleSaleLineRequest,
    SaleLineRequest,
)
from pharmapos.application.dto.responses import (
    ErrorResponse,
    PricingResponse,
    SaleLineResponse,
)
from pharmapos.config import Settings
from pharmapos.core.entities import PricedSaleLine, Product
from pharmapos.core.exceptions import ProductNotFoundError
from pharmapos.core.interfaces import IRecordStore
from pharmapos.core.services import (
    build_sale_line,
    compute_pricing,
    minimum_selling_price,
    rescale_sale_line,
)

router = APIRouter(prefix="/api/pricing", tags=["pricing"])


async def _load_product(store: IRecordStore, product_id: int) -> Product:
    row = await store.select_one("products", {"id": product_id})
    if row is None:
        raise ProductNotFoundError(product_id)
    return Product.model_validate(row)


@router.post("/compute", response_model=PricingResponse)
async def compute(request: ComputePricingRequest) -> PricingResponse:
    """Selling price, VAT and margin for a cost price."""
    result = compute_pricing(
        request.cost_price,
        request.supplier_discount_percent,
        request.vat_rate,
    )
    return PricingResponse(**result.to_dict())


@router.post(
    "/sale-line",
    response_model=SaleLineResponse,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def price_sale_line(
    request: SaleLineRequest,
    store: IRecordStore = Depends(get_record_store),
    settings: Settings = Depends(get_app_settings),
) -> SaleLineResponse:
    """Price one cart line against the current product row."""
    product = await _load_product(store, request.product_id)
    margin = settings.pricing.minimum_margin_percent
    line = build_sale_line(
        product,
        request.quantity,
        request.unit_price,
        request.price_type,
        margin,
    )
    return SaleLineResponse(
        line=line,
        minimum_selling_price=minimum_selling_price(product.actual_cost, margin),
    )


@router.post(
    "/sale-line/rescale",
    response_model=PricedSaleLine,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def rescale_line(
    request: RescaleSaleLineRequest,
    store: IRecordStore = Depends(get_record_store),
) -> PricedSaleLine:
    """Change the quantity of a priced line, keeping its unit price."""
    product = await _load_product(store, request.line.product_id)
    return rescale_sale_line(request.line, request.quantity, product.current_stock)
