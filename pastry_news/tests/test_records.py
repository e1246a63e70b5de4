import unittest

from pastry_news.json_utils import camel_to_snake, convert_keys, snake_to_camel
from pastry_news.records import (
    Article,
    ArticleImage,
    ArticleStatus,
    Category,
    User,
    UserRole,
    parse_timestamp,
    record_from_document,
    record_to_document,
    record_to_json,
    utc_now_iso,
)


class KeyConversionTests(unittest.TestCase):
    def test_snake_to_camel(self):
        self.assertEqual(snake_to_camel("view_count"), "viewCount")
        self.assertEqual(snake_to_camel("seo_keywords"), "seoKeywords")
        self.assertEqual(snake_to_camel("_id"), "_id")
        self.assertEqual(snake_to_camel("title"), "title")

    def test_camel_to_snake(self):
        self.assertEqual(camel_to_snake("featuredImage"), "featured_image")
        self.assertEqual(camel_to_snake("passwordResetExpires"), "password_reset_expires")

    def test_convert_keys_recurses(self):
        data = {"images": [{"altText": "x"}], "meta": {"sortOrder": 1}}
        self.assertEqual(
            convert_keys(data, "camel_to_snake"),
            {"images": [{"alt_text": "x"}], "meta": {"sort_order": 1}},
        )

    def test_convert_keys_rejects_unknown_direction(self):
        with self.assertRaises(ValueError):
            convert_keys({}, "sideways")


class RecordSerializationTests(unittest.TestCase):
    def test_document_is_camel_case_without_id_or_none(self):
        article = Article(
            id="a1",
            title="Tart",
            view_count=3,
            status=ArticleStatus.PUBLISHED,
            images=[ArticleImage(url="https://img/1.jpg", alt="tart")],
        )
        doc = record_to_document(article)
        self.assertNotIn("id", doc)
        self.assertNotIn("publishedAt", doc)
        self.assertEqual(doc["viewCount"], 3)
        self.assertEqual(doc["status"], "published")
        self.assertEqual(doc["images"], [{"url": "https://img/1.jpg", "alt": "tart"}])

    def test_record_from_document_casts_enums(self):
        article = record_from_document(
            Article,
            "a1",
            {
                "title": "Tart",
                "status": "archived",
                "isFeatured": True,
                "images": [{"url": "u"}],
                "_id": "ignored",
                "legacyField": 1,
            },
        )
        self.assertEqual(article.id, "a1")
        self.assertEqual(article.status, ArticleStatus.ARCHIVED)
        self.assertTrue(article.is_featured)
        self.assertEqual(article.images[0].url, "u")
        self.assertEqual(article.tags, [])

    def test_record_to_json_adds_both_ids(self):
        payload = record_to_json(Category(id="c1", name="News"))
        self.assertEqual(payload["id"], "c1")
        self.assertEqual(payload["_id"], "c1")
        self.assertEqual(payload["color"], "#8D6E63")

    def test_user_public_dict_hides_secrets(self):
        user = User(
            id="u1",
            first_name="Ada",
            last_name="Baker",
            password="$2b$12$hash",
            password_reset_token="tok",
            role=UserRole.EDITOR,
        )
        payload = user.to_public_dict()
        self.assertNotIn("password", payload)
        self.assertNotIn("passwordResetToken", payload)
        self.assertEqual(payload["fullName"], "Ada Baker")
        self.assertEqual(payload["role"], "editor")


class TimestampTests(unittest.TestCase):
    def test_utc_now_iso_round_trips(self):
        value = utc_now_iso()
        self.assertTrue(value.endswith("Z"))
        self.assertIsNotNone(parse_timestamp(value))

    def test_parse_timestamp(self):
        self.assertIsNone(parse_timestamp(None))
        self.assertIsNone(parse_timestamp("not a date"))
        naive = parse_timestamp("2024-01-01T00:00:00")
        self.assertEqual(naive.utcoffset().total_seconds(), 0)


if __name__ == "__main__":
    unittest.main()
