"""Point-of-sale endpoints."""

from fastapi import APIRouter, Depends, Query, status

from pharmapos.api.dependencies import get_checkout_sale_use_case, get_record_store
from pharmapos.application.dto.requests import CheckoutRequest
from pharmapos.application.dto.responses import CheckoutResponse, ErrorResponse, SaleListResponse
from pharmapos.application.use_cases import CheckoutSaleUseCase
from pharmapos.core.entities import Sale
from pharmapos.core.exceptions import SaleNotFoundError
from pharmapos.core.interfaces import IRecordStore

router = APIRouter(prefix="/api/sales", tags=["sales"])


@router.post(
    "/checkout",
    response_model=CheckoutResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorResponse, "description": "Empty cart, stock or price floor"},
        404: {"model": ErrorResponse},
        500: {"model": ErrorResponse, "description": "Sale failed and was rolled back"},
    },
)
async def checkout(
    request: CheckoutRequest,
    use_case: CheckoutSaleUseCase = Depends(get_checkout_sale_use_case),
) -> CheckoutResponse:
    """Check out a cart."""
    result = await use_case.execute(request)
    return use_case.to_response(result)


@router.get("", response_model=SaleListResponse)
async def list_sales(
    limit: int = Query(default=50, ge=1, le=500),
    offset: int = Query(default=0, ge=0),
    store: IRecordStore = Depends(get_record_store),
) -> SaleListResponse:
    """List sales, newest first."""
    total = await store.count("sales")
    rows = await store.select(
        "sales", order_by="created_at", descending=True, limit=limit, offset=offset
    )
    return SaleListResponse(
        sales=[Sale.model_validate(r) for r in rows],
        total=total,
        limit=limit,
        offset=offset,
        has_more=offset + len(rows) < total,
    )


@router.get(
    "/{sale_id}",
    response_model=Sale,
    responses={404: {"model": ErrorResponse}},
)
async def get_sale(
    sale_id: int,
    store: IRecordStore = Depends(get_record_store),
) -> Sale:
    """Get a sale with its lines."""
    row = await store.select_one("sales", {"id": sale_id})
    if row is None:
        raise SaleNotFoundError(sale_id)
    items = await store.select("sale_items", {"sale_id": sale_id})
    return Sale.model_validate({**row, "items": items})
