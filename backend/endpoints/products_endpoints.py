import json

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from mappify.exceptions import ValidationError
from mappify.session import Session
from models import Product
from deps import get_session

router = APIRouter()


class ProductCreate(BaseModel):
    name: str
    price: float = 0.0
    stock: int = 0
    category_id: int | None = None


class ProductUpdate(BaseModel):
    name: str | None = None
    price: float | None = None
    stock: int | None = None
    category_id: int | None = None


def _parse_where(raw):
    if not raw:
        return {}
    try:
        where = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValidationError(f"'where' is not valid JSON: {e}") from e
    if not isinstance(where, dict):
        raise ValidationError("'where' must be a JSON object")
    return where


@router.get("/api/products")
def get_products(
    session: Session = Depends(get_session),
    where: str = Query(None, description='JSON filter, e.g. {"price": {"gt": 10}}'),
    limit: int = Query(None),
    offset: int = Query(None),
    order: str = Query(None),
):
    products = session.query(Product).find_all(
        where=_parse_where(where), limit=limit, offset=offset, order=order
    )
    return [p.to_dict() for p in products]


@router.get("/api/products/{product_id}")
def get_product(product_id: int, session: Session = Depends(get_session)):
    product = session.query(Product).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product.to_dict()


@router.get("/api/products/{product_id}/tags")
def get_product_tags(product_id: int, session: Session = Depends(get_session)):
    product = session.query(Product).find_by_id(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    product.populate("tags")
    return [t.to_dict() for t in product.tags]


@router.post("/api/products", status_code=201)
def add_product(product: ProductCreate, session: Session = Depends(get_session)):
    new_product = session.create(Product, **product.model_dump())
    return {**new_product.to_dict(), "message": "Product added successfully"}


@router.put("/api/products/{product_id}")
def update_product(product_id: int, product: ProductUpdate, session: Session = Depends(get_session)):
    changes = product.model_dump(exclude_none=True)
    updated = session.query(Product).find_by_id_and_update(product_id, changes)
    if not updated:
        raise HTTPException(status_code=404, detail="Product not found")
    return {**updated.to_dict(), "message": "Product updated"}


@router.delete("/api/products/{product_id}")
def delete_product(product_id: int, session: Session = Depends(get_session)):
    # NotFoundError from the strict finder becomes a 404 in main.py
    session.query(Product).find_by_id_and_delete(product_id)
    return {"message": "Product deleted"}
