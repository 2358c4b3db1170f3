from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from mappify.session import Session
from models import Category
from deps import get_session

router = APIRouter()


class CategoryCreate(BaseModel):
    name: str
    description: str | None = None


@router.get("/api/categories")
def get_categories(session: Session = Depends(get_session)):
    return [c.to_dict() for c in session.query(Category).find_all(order="name ASC")]


@router.post("/api/categories", status_code=201)
def add_category(category: CategoryCreate, session: Session = Depends(get_session)):
    instance, created = session.query(Category).find_or_create(
        {"where": {"name": category.name}}, {"description": category.description}
    )
    return {**instance.to_dict(), "created": created}


@router.get("/api/categories/{category_id}/products")
def get_category_products(category_id: int, session: Session = Depends(get_session)):
    category = session.query(Category).find_by_id(category_id)
    if category is None:
        raise HTTPException(status_code=404, detail="Category not found")
    category.populate("products", exclude=["category_id"])
    return [p.to_dict() for p in category.products]
