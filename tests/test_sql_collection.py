import unittest
from datetime import date, datetime, timezone

from tests.base import CatalogDatabaseTestCase

from app.core.errors import BadQueryError
from app.models.product import Product
from app.models.review import Review
from app.models.user import User
from app.schemas.query import FieldCondition, QueryDescriptor, SortKey
from app.services.collections import SqlCollection, coerce_value
from app.services.query_features import run_query


class ValueCoercionTests(unittest.TestCase):
    def test_boolean_accepts_string_values(self):
        self.assertTrue(coerce_value("flag", bool, "true"))
        self.assertTrue(coerce_value("flag", bool, "Yes"))
        self.assertFalse(coerce_value("flag", bool, "0"))
        self.assertFalse(coerce_value("flag", bool, "off"))

    def test_boolean_invalid_value_raises_400(self):
        with self.assertRaises(BadQueryError) as ctx:
            coerce_value("flag", bool, "maybe")
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.params, {"field": "flag", "kind": "boolean"})

    def test_numbers_accept_string_values(self):
        self.assertEqual(coerce_value("qty", int, "42"), 42)
        self.assertAlmostEqual(coerce_value("price", float, "3.14"), 3.14)
        self.assertAlmostEqual(coerce_value("price", float, "3,14"), 3.14)

    def test_number_invalid_value_raises_400(self):
        with self.assertRaises(BadQueryError):
            coerce_value("qty", int, "lots")

    def test_fractional_bound_on_integer_field_is_kept(self):
        self.assertEqual(coerce_value("rating", int, "3.5"), 3.5)
        self.assertEqual(coerce_value("rating", int, 3.5), 3.5)
        self.assertEqual(coerce_value("rating", int, "3,5"), 3.5)

    def test_integral_values_on_integer_field_stay_int(self):
        self.assertIs(type(coerce_value("rating", int, "3")), int)
        self.assertIs(type(coerce_value("rating", int, 3.0)), int)
        self.assertEqual(coerce_value("rating", int, "3.0"), 3)

    def test_integer_bound_beyond_64_bits_is_kept_as_float(self):
        value = coerce_value("rating", int, "100000000000000000000")
        self.assertIsInstance(value, float)

    def test_non_finite_numbers_raise_400(self):
        for raw in ("nan", "inf", float("nan"), ""):
            with self.assertRaises(BadQueryError):
                coerce_value("rating", int, raw)

    def test_dates_accept_iso_date_and_datetime(self):
        self.assertEqual(coerce_value("day", date, "2026-02-26"), date(2026, 2, 26))
        self.assertEqual(coerce_value("day", date, "2026-02-26T13:45:00+03:00"), date(2026, 2, 26))

    def test_datetime_date_only_is_timezone_aware_start_of_day(self):
        value = coerce_value("created_at", datetime, "2026-02-26")
        self.assertEqual(value, datetime(2026, 2, 26, tzinfo=timezone.utc))

    def test_text_is_left_as_is(self):
        self.assertEqual(coerce_value("name", str, "abc"), "abc")


class SqlCollectionTests(CatalogDatabaseTestCase):
    def test_hidden_fields_are_not_exposed(self):
        users = SqlCollection(self.db, User)
        self.assertNotIn("password_hash", users.field_names())
        records = users.find([])
        self.assertEqual(len(records), 3)
        self.assertTrue(all("password_hash" not in r for r in records))

    def test_filtering_a_hidden_field_is_rejected(self):
        with self.assertRaises(BadQueryError):
            run_query(QueryDescriptor.from_params({"password_hash": "hash-a"}), SqlCollection(self.db, User))

    def test_count_reflects_conditions(self):
        products = SqlCollection(self.db, Product)
        self.assertEqual(products.count([]), 25)
        self.assertEqual(products.count([FieldCondition(field="price", op="gt", value="100")]), 15)
        self.assertEqual(products.count([FieldCondition(field="genre", op="in", value=["men"])]), 13)

    def test_projection_always_keeps_identity(self):
        records = SqlCollection(self.db, Product).find([], projection=["name", "price", "bogus"], limit=3)
        self.assertEqual([set(r) for r in records], [{"id", "name", "price"}] * 3)

    def test_sort_and_pagination(self):
        records = SqlCollection(self.db, Product).find(
            [], sort=[SortKey(field="genre", direction=1), SortKey(field="price", direction=-1)], skip=0, limit=3
        )
        self.assertEqual([(r["genre"], r["price"]) for r in records], [("men", 250.0), ("men", 230.0), ("men", 210.0)])

    def test_populate_loads_related_row_without_hidden_fields(self):
        records = SqlCollection(self.db, Product).find([], projection=["name"], limit=1, populate="seller")
        self.assertEqual(records[0]["seller"]["username"], "bob")
        self.assertNotIn("password_hash", records[0]["seller"])

    def test_populate_unknown_relation_is_rejected(self):
        with self.assertRaises(BadQueryError) as ctx:
            SqlCollection(self.db, Product).find([], populate="warehouse")
        self.assertEqual(ctx.exception.detail, "unknownRelation")

    def test_datetime_equal_date_uses_day_range(self):
        products = SqlCollection(self.db, Product)
        matched = products.find([FieldCondition(field="created_at", value="2026-02-02")], projection=["name"], limit=100)
        # created_at day is 1 + i % 3, so day 2 holds i = 1, 4, 7, ..., 25
        self.assertEqual(len(matched), 9)

    def test_run_query_metadata_matches_filtered_count(self):
        result = run_query(
            QueryDescriptor.from_params({"filter": '{"price": {"gt": 100}}', "limit": "4", "page": "2", "sort": "price"}),
            SqlCollection(self.db, Product),
        )
        self.assertEqual(result.metadata.total_records, 15)
        self.assertEqual(result.metadata.total_pages, 4)
        self.assertEqual([r["price"] for r in result.records], [150.0, 160.0, 170.0, 180.0])

    def test_run_query_with_base_conditions(self):
        result = run_query(
            QueryDescriptor(),
            SqlCollection(self.db, Review),
            populate="product",
            base_conditions=[FieldCondition(field="user_id", value=self.ids["carol"])],
        )
        self.assertEqual(result.metadata.total_records, 2)
        self.assertEqual(sorted(r["product"]["name"] for r in result.records), ["product-01", "product-02"])

    def test_fractional_threshold_on_integer_column(self):
        reviews = SqlCollection(self.db, Review)
        for params in ({"filter": '{"rating": {"lt": 3.5}}'}, {"rating[lt]": "3.5"}):
            result = run_query(QueryDescriptor.from_params(params), reviews)
            self.assertEqual([r["rating"] for r in result.records], [3, 2])
            self.assertEqual(result.metadata.total_records, 2)

    def test_oversized_page_and_limit_are_clamped(self):
        products = SqlCollection(self.db, Product)
        huge = str(10**19)
        result = run_query(QueryDescriptor.from_params({"page": huge}), products)
        self.assertEqual(result.records, [])
        self.assertEqual(result.metadata.total_records, 25)
        result = run_query(QueryDescriptor.from_params({"limit": huge}), products)
        self.assertEqual(len(result.records), 25)
        self.assertEqual(result.metadata.total_pages, 1)

    def test_boolean_query_string_filter(self):
        result = run_query(QueryDescriptor.from_params({"is_out_of_stock": "true"}), SqlCollection(self.db, Product))
        self.assertEqual([r["quantity"] for r in result.records], [7, 14, 21])


if __name__ == "__main__":
    unittest.main()
