from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from app.api.security import require_admin
from app.data.database import get_db
from app.domain.schemas import ProductIn, ProductOut
from app.services.product_catalog import ProductCatalog

router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=List[ProductOut])
def list_products(db: Session = Depends(get_db)):
    return ProductCatalog(db).list_products()


@router.get("/{product_id}", response_model=ProductOut)
def get_product(product_id: int, db: Session = Depends(get_db)):
    return ProductCatalog(db).require_product(product_id)


@router.post("", response_model=ProductOut, status_code=201, dependencies=[Depends(require_admin)])
def create_product(payload: ProductIn, db: Session = Depends(get_db)):
    return ProductCatalog(db).create_product(payload.name, payload.price, payload.description)


@router.put("/{product_id}", response_model=ProductOut, dependencies=[Depends(require_admin)])
def update_product(product_id: int, payload: ProductIn, db: Session = Depends(get_db)):
    return ProductCatalog(db).update_product(product_id, payload.name, payload.price, payload.description)


@router.delete("/{product_id}", status_code=204, dependencies=[Depends(require_admin)])
def delete_product(product_id: int, db: Session = Depends(get_db)):
    ProductCatalog(db).delete_product(product_id)
    return Response(status_code=204)
