import unittest

from app.core.errors import BadQueryError
from app.services.filter_expression import parse_filter_json, parse_query_params


class FilterJsonTests(unittest.TestCase):
    def test_literal_value_is_equality(self):
        conditions = parse_filter_json('{"status": "active"}')
        self.assertEqual(len(conditions), 1)
        self.assertEqual((conditions[0].field, conditions[0].op, conditions[0].value), ("status", "eq", "active"))

    def test_operator_object_yields_one_condition_per_operator(self):
        conditions = parse_filter_json('{"price": {"gte": 10, "lt": 50}}')
        self.assertEqual([(c.field, c.op, c.value) for c in conditions], [("price", "gte", 10), ("price", "lt", 50)])

    def test_dollar_prefixed_operators_are_accepted(self):
        conditions = parse_filter_json('{"price": {"$gt": 100}}')
        self.assertEqual((conditions[0].op, conditions[0].value), ("gt", 100))

    def test_in_wraps_scalar_into_list(self):
        conditions = parse_filter_json('{"genre": {"in": "men"}}')
        self.assertEqual(conditions[0].value, ["men"])
        conditions = parse_filter_json('{"genre": {"in": ["men", "women"]}}')
        self.assertEqual(conditions[0].value, ["men", "women"])

    def test_operator_words_inside_values_are_not_rewritten(self):
        conditions = parse_filter_json('{"name": "gt lte in", "gt": "in"}')
        self.assertEqual(
            [(c.field, c.op, c.value) for c in conditions],
            [("name", "eq", "gt lte in"), ("gt", "eq", "in")],
        )

    def test_malformed_json_is_bad_request(self):
        with self.assertRaises(BadQueryError) as ctx:
            parse_filter_json('{"price": {"gt": 100}')
        self.assertEqual(ctx.exception.status_code, 400)
        self.assertEqual(ctx.exception.detail, "invalidFilter")

    def test_non_object_root_is_bad_request(self):
        with self.assertRaises(BadQueryError):
            parse_filter_json("[1, 2]")

    def test_nested_object_with_non_operator_keys_is_bad_request(self):
        with self.assertRaises(BadQueryError) as ctx:
            parse_filter_json('{"price": {"between": [1, 2]}}')
        self.assertEqual(ctx.exception.detail, "invalidFilterOperator")
        self.assertEqual(ctx.exception.params, {"field": "price"})

    def test_empty_operator_object_is_bad_request(self):
        with self.assertRaises(BadQueryError):
            parse_filter_json('{"price": {}}')


class QueryParamFilterTests(unittest.TestCase):
    def test_plain_keys_are_equality_filters(self):
        conditions = parse_query_params({"genre": "men", "role": "admin"})
        self.assertEqual([(c.field, c.op, c.value) for c in conditions], [("genre", "eq", "men"), ("role", "eq", "admin")])

    def test_reserved_keys_are_skipped(self):
        params = {"select": "name", "sort": "-price", "page": "2", "limit": "5", "filter": "{}", "genre": "men"}
        conditions = parse_query_params(params)
        self.assertEqual([c.field for c in conditions], ["genre"])

    def test_bracket_operator_syntax(self):
        conditions = parse_query_params({"price[gte]": "100", "genre[in]": "men, women"})
        self.assertEqual(
            [(c.field, c.op, c.value) for c in conditions],
            [("price", "gte", "100"), ("genre", "in", ["men", "women"])],
        )

    def test_unknown_bracket_operator_is_bad_request(self):
        with self.assertRaises(BadQueryError):
            parse_query_params({"price[regex]": "1"})


if __name__ == "__main__":
    unittest.main()
