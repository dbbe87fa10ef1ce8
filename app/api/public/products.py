from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from app.core.i18n import Translator, get_translator
from app.db.session import get_db
from app.schemas.query import QueryDescriptor
from app.services import catalog
from app.services.envelope import respond

router = APIRouter()


@router.get("")
def get_products(request: Request, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    result = catalog.query_products(db, QueryDescriptor.from_params(request.query_params))
    return respond(result, translator)


@router.get("/{product_id}")
def get_product(product_id: int, db: Session = Depends(get_db), translator: Translator = Depends(get_translator)):
    return respond(catalog.query_product(db, product_id), translator)


@router.get("/{product_id}/reviews")
def get_product_reviews(
    product_id: int,
    request: Request,
    db: Session = Depends(get_db),
    translator: Translator = Depends(get_translator),
):
    # A product without reviews yet is a normal state, not a missing resource.
    result = catalog.query_product_reviews(db, product_id, QueryDescriptor.from_params(request.query_params))
    return respond(result, translator)
