"""Product API router."""

from fastapi import APIRouter, Depends

from zyra.common.schemas import MessageResponse
from zyra.common.security import require_user
from zyra.products.schemas import (
    OptimizeAllResponse,
    ProductCreate,
    ProductOut,
    ProductUpdate,
)
from zyra.store.records import User

router = APIRouter()


def _get_service():
    from zyra.deps import get_product_service
    return get_product_service()


@router.get("/products", response_model=list[ProductOut])
async def list_products(user: User = Depends(require_user)):
    products = await _get_service().list_products(user.id)
    return [ProductOut.model_validate(p) for p in products]


@router.post("/products", response_model=ProductOut)
async def create_product(body: ProductCreate, user: User = Depends(require_user)):
    product = await _get_service().create_product(user.id, **body.model_dump())
    return ProductOut.model_validate(product)


# Registered before /products/{product_id} so the literal path wins.
@router.post("/products/optimize-all", response_model=OptimizeAllResponse)
async def optimize_all(user: User = Depends(require_user)):
    result = await _get_service().optimize_all(user.id)
    return OptimizeAllResponse.model_validate(result)


@router.get("/products/{product_id}", response_model=ProductOut)
async def get_product(product_id: str, user: User = Depends(require_user)):
    product = await _get_service().get_product(user.id, product_id)
    return ProductOut.model_validate(product)


@router.patch("/products/{product_id}", response_model=ProductOut)
async def update_product(product_id: str, body: ProductUpdate, user: User = Depends(require_user)):
    product = await _get_service().update_product(
        user.id, product_id, **body.model_dump(exclude_unset=True),
    )
    return ProductOut.model_validate(product)


@router.delete("/products/{product_id}", response_model=MessageResponse)
async def delete_product(product_id: str, user: User = Depends(require_user)):
    await _get_service().delete_product(user.id, product_id)
    return MessageResponse(message="Product deleted")
