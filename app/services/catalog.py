from __future__ import annotations

import enum
from typing import Any

from sqlalchemy.orm import Session

from app.models.category import Category
from app.models.product import Product
from app.models.review import Review
from app.models.user import User
from app.schemas.query import FieldCondition, QueryDescriptor, ResultSet
from app.services.collections import Collection, SqlCollection
from app.services.envelope import error, success
from app.services.query_features import run_query


class EmptyResultPolicy(str, enum.Enum):
    """What a listing answers when the query matches nothing."""

    NOT_FOUND = "not_found"
    EMPTY_SUCCESS = "empty_success"


def _list_result(
    result: ResultSet,
    data_key: str,
    found_message: str,
    empty_message: str,
    empty_policy: EmptyResultPolicy,
) -> dict[str, Any]:
    if not result.records and empty_policy == EmptyResultPolicy.NOT_FOUND:
        return error(empty_message, 404)
    return success(found_message, **{data_key: result.to_payload()})


def _get_result(collection: Collection, row_id: int, data_key: str, found_message: str, missing_message: str, populate: str | None = None):
    descriptor = QueryDescriptor(limit="1")
    result = run_query(
        descriptor,
        collection,
        populate=populate,
        base_conditions=[FieldCondition(field=collection.identity_field, value=row_id)],
    )
    if not result.records:
        return error(missing_message, 404)
    return success(found_message, **{data_key: result.records[0]})


def query_users(db: Session, descriptor: QueryDescriptor, empty_policy: EmptyResultPolicy = EmptyResultPolicy.NOT_FOUND):
    result = run_query(descriptor, SqlCollection(db, User))
    return _list_result(result, "users", "successfulUsersFound", "noUsersFound", empty_policy)


def query_user(db: Session, user_id: int):
    return _get_result(SqlCollection(db, User), user_id, "user", "successfulUserFound", "noUserFound")


def query_categories(db: Session, descriptor: QueryDescriptor, empty_policy: EmptyResultPolicy = EmptyResultPolicy.NOT_FOUND):
    result = run_query(descriptor, SqlCollection(db, Category))
    return _list_result(result, "categories", "successfulCategoriesFound", "noCategoriesFound", empty_policy)


def query_category(db: Session, category_id: int):
    return _get_result(SqlCollection(db, Category), category_id, "category", "successfulCategoryFound", "noCategoryFound")


def query_products(db: Session, descriptor: QueryDescriptor, empty_policy: EmptyResultPolicy = EmptyResultPolicy.NOT_FOUND):
    result = run_query(descriptor, SqlCollection(db, Product), populate="category")
    return _list_result(result, "products", "successfulProductsFound", "noProductsFound", empty_policy)


def query_product(db: Session, product_id: int):
    return _get_result(
        SqlCollection(db, Product),
        product_id,
        "product",
        "successfulProductFound",
        "noProductFound",
        populate="category",
    )


def query_reviews(db: Session, descriptor: QueryDescriptor, empty_policy: EmptyResultPolicy = EmptyResultPolicy.NOT_FOUND):
    result = run_query(descriptor, SqlCollection(db, Review), populate="product")
    return _list_result(result, "reviews", "successfulReviewsFound", "noReviewsFound", empty_policy)


def query_review(db: Session, review_id: int):
    return _get_result(SqlCollection(db, Review), review_id, "review", "successfulReviewFound", "noReviewFound", populate="user")


def query_product_reviews(
    db: Session,
    product_id: int,
    descriptor: QueryDescriptor,
    empty_policy: EmptyResultPolicy = EmptyResultPolicy.EMPTY_SUCCESS,
):
    if db.get(Product, product_id) is None:
        return error("noProductFound", 404)
    result = run_query(
        descriptor,
        SqlCollection(db, Review),
        populate="user",
        base_conditions=[FieldCondition(field="product_id", value=product_id)],
    )
    return _list_result(result, "reviews", "successfulReviewsFound", "noReviewsFound", empty_policy)


def query_user_reviews(
    db: Session,
    user_id: int,
    descriptor: QueryDescriptor,
    empty_policy: EmptyResultPolicy = EmptyResultPolicy.NOT_FOUND,
):
    if db.get(User, user_id) is None:
        return error("noUserFound", 404)
    result = run_query(
        descriptor,
        SqlCollection(db, Review),
        populate="product",
        base_conditions=[FieldCondition(field="user_id", value=user_id)],
    )
    return _list_result(result, "reviews", "successfulReviewsFound", "noReviewsFound", empty_policy)
