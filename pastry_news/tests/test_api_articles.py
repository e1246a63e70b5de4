import unittest

from pastry_news.records import ArticleStatus, UserRole
from pastry_news.tests.api_base import ApiTestCase


class PublicArticleApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.author = self.create_user(UserRole.AUTHOR, bio="Pastry chef in Lyon")
        self.category = self.create_category(color="#F8BBD9")

    def test_list_hides_drafts_and_future_articles(self):
        self.create_article(self.author, self.category, "Visible Tart")
        self.create_article(
            self.author, self.category, "Hidden Draft", status=ArticleStatus.DRAFT
        )
        self.create_article(
            self.author,
            self.category,
            "Scheduled Pie",
            published_at="2999-01-01T00:00:00.000Z",
        )

        response = self.client.get("/api/articles")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual([a["title"] for a in payload["articles"]], ["Visible Tart"])
        self.assertEqual(
            payload["pagination"],
            {
                "currentPage": 1,
                "totalPages": 1,
                "total": 1,
                "hasNext": False,
                "hasPrev": False,
            },
        )

    def test_list_populates_author_and_category(self):
        self.create_article(self.author, self.category, "Choux Pastry")
        article = self.client.get("/api/articles").json()["articles"][0]
        self.assertEqual(
            article["author"],
            {
                "_id": self.author.id,
                "firstName": self.author.first_name,
                "lastName": "Baker",
                "avatar": None,
            },
        )
        self.assertEqual(
            article["category"],
            {
                "_id": self.category.id,
                "name": "Pastry Techniques",
                "slug": "pastry-techniques",
                "color": "#F8BBD9",
            },
        )

    def test_list_paginates_newest_first(self):
        for day in range(1, 4):
            self.create_article(
                self.author,
                self.category,
                f"Day {day}",
                published_at=f"2024-01-0{day}T00:00:00.000Z",
            )
        response = self.client.get("/api/articles", params={"limit": 2, "page": 1})
        payload = response.json()
        self.assertEqual([a["title"] for a in payload["articles"]], ["Day 3", "Day 2"])
        self.assertTrue(payload["pagination"]["hasNext"])
        self.assertEqual(payload["pagination"]["totalPages"], 2)

        page_two = self.client.get("/api/articles", params={"limit": 2, "page": 2}).json()
        self.assertEqual([a["title"] for a in page_two["articles"]], ["Day 1"])
        self.assertTrue(page_two["pagination"]["hasPrev"])

    def test_list_filters_by_search_tag_and_category_slug(self):
        other = self.create_category("Industry News")
        self.create_article(self.author, self.category, "Lemon Tart", tags=["Citrus"])
        self.create_article(self.author, other, "Market Report")

        by_search = self.client.get("/api/articles", params={"search": "LEMON"}).json()
        self.assertEqual([a["title"] for a in by_search["articles"]], ["Lemon Tart"])

        by_tag = self.client.get("/api/articles", params={"tag": "citrus"}).json()
        self.assertEqual([a["title"] for a in by_tag["articles"]], ["Lemon Tart"])

        by_category = self.client.get(
            "/api/articles", params={"category": "industry-news"}
        ).json()
        self.assertEqual([a["title"] for a in by_category["articles"]], ["Market Report"])

    def test_list_sorts_by_popularity(self):
        quiet = self.create_article(self.author, self.category, "Quiet")
        popular = self.create_article(self.author, self.category, "Popular")
        self.db.update_record("articles", quiet.id, {"viewCount": 3})
        self.db.update_record("articles", popular.id, {"viewCount": 30})
        payload = self.client.get("/api/articles", params={"sort": "popular"}).json()
        self.assertEqual([a["title"] for a in payload["articles"]], ["Popular", "Quiet"])

    def test_list_rejects_invalid_paging(self):
        response = self.client.get("/api/articles", params={"limit": 500})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Validation error")
        self.assertEqual(response.json()["errors"][0]["field"], "limit")

    def test_status_filter_only_applies_for_moderators(self):
        self.create_article(self.author, self.category, "Live")
        self.create_article(self.author, self.category, "Draft", status=ArticleStatus.DRAFT)
        editor = self.create_user(UserRole.EDITOR)

        as_editor = self.client.get(
            "/api/articles", params={"status": "draft"}, headers=self.auth(editor)
        ).json()
        self.assertEqual([a["title"] for a in as_editor["articles"]], ["Draft"])

        as_author = self.client.get(
            "/api/articles", params={"status": "draft"}, headers=self.auth(self.author)
        ).json()
        self.assertEqual([a["title"] for a in as_author["articles"]], ["Live"])

    def test_featured_articles(self):
        self.create_article(self.author, self.category, "Star", is_featured=True)
        self.create_article(self.author, self.category, "Regular")
        self.create_article(
            self.author,
            self.category,
            "Featured Draft",
            status=ArticleStatus.DRAFT,
            is_featured=True,
        )
        payload = self.client.get("/api/articles/featured").json()
        self.assertEqual([a["title"] for a in payload["articles"]], ["Star"])

    def test_get_by_slug_counts_views_and_includes_bio(self):
        article = self.create_article(self.author, self.category, "Opera Cake")
        response = self.client.get(f"/api/articles/{article.slug}")
        self.assertEqual(response.status_code, 200)
        body = response.json()["article"]
        self.assertEqual(body["slug"], "opera-cake")
        self.assertEqual(body["viewCount"], 1)
        self.assertEqual(body["author"]["bio"], "Pastry chef in Lyon")

        again = self.client.get(f"/api/articles/{article.slug}").json()["article"]
        self.assertEqual(again["viewCount"], 2)

    def test_get_by_slug_hides_drafts(self):
        draft = self.create_article(
            self.author, self.category, "Secret", status=ArticleStatus.DRAFT
        )
        response = self.client.get(f"/api/articles/{draft.slug}")
        self.assertEqual(response.status_code, 404)
        self.assertEqual(response.json(), {"message": "Article not found"})

    def test_category_articles(self):
        self.create_article(self.author, self.category, "Brioche")
        response = self.client.get(f"/api/articles/category/{self.category.slug}")
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(payload["category"]["name"], "Pastry Techniques")
        self.assertEqual([a["title"] for a in payload["articles"]], ["Brioche"])

        missing = self.client.get("/api/articles/category/nope")
        self.assertEqual(missing.status_code, 404)

    def test_search_suggestions(self):
        self.create_article(self.author, self.category, "Caramel Basics")
        self.create_article(self.author, self.category, "Bread Scoring")
        response = self.client.get("/api/articles/search/suggestions", params={"q": "cara"})
        self.assertEqual(
            response.json(),
            {"suggestions": [{"title": "Caramel Basics", "slug": "caramel-basics"}]},
        )
        too_short = self.client.get("/api/articles/search/suggestions", params={"q": "c"})
        self.assertEqual(too_short.status_code, 400)

    def test_related_articles_prefer_same_category(self):
        base = self.create_article(self.author, self.category, "Base", tags=["butter"])
        same = self.create_article(self.author, self.category, "Same Category")
        other_cat = self.create_category("Chef Interviews")
        tagged = self.create_article(self.author, other_cat, "Shared Tag", tags=["butter"])
        self.create_article(self.author, other_cat, "Unrelated")

        payload = self.client.get(f"/api/articles/{base.id}/related").json()
        titles = [a["title"] for a in payload["articles"]]
        self.assertEqual(titles, [same.title, tagged.title])

    def test_like_article(self):
        article = self.create_article(self.author, self.category)
        response = self.client.post(f"/api/articles/{article.id}/like")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["likes"], 1)

        missing = self.client.post("/api/articles/unknown/like")
        self.assertEqual(missing.status_code, 404)


class ArticleManagementApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.author = self.create_user(UserRole.AUTHOR)
        self.editor = self.create_user(UserRole.EDITOR)
        self.category = self.create_category()

    def _payload(self, **overrides):
        payload = {
            "title": "Perfect Puff Pastry",
            "excerpt": "Layers upon layers",
            "content": "<p>" + " ".join(["butter"] * 450) + "</p>",
            "category": self.category.id,
            "featuredImage": "https://img.example.com/puff.jpg",
            "tags": ["Lamination", "lamination", "Butter"],
        }
        payload.update(overrides)
        return payload

    def test_create_requires_token(self):
        response = self.client.post("/api/articles", json=self._payload())
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "No token, authorization denied")

    def test_create_rejects_invalid_token(self):
        response = self.client.post(
            "/api/articles",
            json=self._payload(),
            headers={"Authorization": "Bearer not-a-token"},
        )
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json()["message"], "Token is not valid")

    def test_create_derives_fields(self):
        response = self.client.post(
            "/api/articles",
            json=self._payload(status="published"),
            headers=self.auth(self.author),
        )
        self.assertEqual(response.status_code, 201)
        article = response.json()["article"]
        self.assertEqual(article["slug"], "perfect-puff-pastry")
        self.assertEqual(article["readingTime"], 3)
        self.assertEqual(article["tags"], ["lamination", "butter"])
        self.assertEqual(article["author"]["_id"], self.author.id)
        self.assertEqual(article["viewCount"], 0)
        self.assertEqual(article["likes"], 0)
        self.assertIn("publishedAt", article)

        category = self.categories.find_by_id(self.category.id)
        self.assertEqual(category.article_count, 1)

    def test_create_makes_slug_unique(self):
        headers = self.auth(self.author)
        first = self.client.post("/api/articles", json=self._payload(), headers=headers)
        second = self.client.post("/api/articles", json=self._payload(), headers=headers)
        self.assertEqual(first.json()["article"]["slug"], "perfect-puff-pastry")
        self.assertEqual(second.json()["article"]["slug"], "perfect-puff-pastry-2")

    def test_create_draft_has_no_publish_date(self):
        response = self.client.post(
            "/api/articles", json=self._payload(), headers=self.auth(self.author)
        )
        article = response.json()["article"]
        self.assertEqual(article["status"], "draft")
        self.assertNotIn("publishedAt", article)

    def test_create_validates_body(self):
        response = self.client.post(
            "/api/articles",
            json=self._payload(title="", category="missing"),
            headers=self.auth(self.author),
        )
        self.assertEqual(response.status_code, 400)
        fields = [e["field"] for e in response.json()["errors"]]
        self.assertIn("title", fields)

    def test_create_rejects_unknown_category(self):
        response = self.client.post(
            "/api/articles",
            json=self._payload(category="missing"),
            headers=self.auth(self.author),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["message"], "Category not found")

    def test_author_cannot_edit_others_articles(self):
        article = self.create_article(self.editor, self.category)
        response = self.client.put(
            f"/api/articles/{article.id}",
            json=self._payload(),
            headers=self.auth(self.author),
        )
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json()["message"],
            "Access denied. You can only modify your own articles.",
        )

    def test_update_rederives_slug_and_keeps_publish_date(self):
        article = self.create_article(
            self.author, self.category, published_at="2024-02-01T08:00:00.000Z"
        )
        response = self.client.put(
            f"/api/articles/{article.id}",
            json=self._payload(title="Rough Puff", status="published"),
            headers=self.auth(self.author),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()["article"]
        self.assertEqual(body["slug"], "rough-puff")
        self.assertEqual(body["publishedAt"], "2024-02-01T08:00:00.000Z")

    def test_moving_article_recounts_both_categories(self):
        other = self.create_category("Bread Baking")
        headers = self.auth(self.author)
        created = self.client.post(
            "/api/articles", json=self._payload(status="published"), headers=headers
        )
        article_id = created.json()["article"]["_id"]
        self.assertEqual(self.categories.find_by_id(self.category.id).article_count, 1)
        self.assertEqual(self.categories.find_by_id(other.id).article_count, 0)

        response = self.client.put(
            f"/api/articles/{article_id}",
            json=self._payload(category=other.id, status="published"),
            headers=headers,
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["article"]["category"]["_id"], other.id)
        self.assertEqual(self.categories.find_by_id(self.category.id).article_count, 0)
        self.assertEqual(self.categories.find_by_id(other.id).article_count, 1)

    def test_update_keeps_views_and_likes(self):
        article = self.create_article(self.author, self.category)
        self.client.get(f"/api/articles/{article.slug}")
        self.client.post(f"/api/articles/{article.id}/like")

        response = self.client.put(
            f"/api/articles/{article.id}",
            json=self._payload(title=article.title, status="published"),
            headers=self.auth(self.author),
        )

        body = response.json()["article"]
        self.assertEqual(body["viewCount"], 1)
        self.assertEqual(body["likes"], 1)
        self.assertEqual(body["slug"], article.slug)

    def test_editor_can_archive_any_article(self):
        article = self.create_article(self.author, self.category)
        response = self.client.put(
            f"/api/articles/{article.id}/status",
            json={"status": "archived"},
            headers=self.auth(self.editor),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["article"]["status"], "archived")
        self.assertEqual(self.categories.find_by_id(self.category.id).article_count, 0)

    def test_publishing_sets_publish_date(self):
        article = self.create_article(self.author, self.category, status=ArticleStatus.DRAFT)
        response = self.client.put(
            f"/api/articles/{article.id}/status",
            json={"status": "published"},
            headers=self.auth(self.author),
        )
        self.assertIsNotNone(response.json()["article"].get("publishedAt"))

    def test_delete_article(self):
        article = self.create_article(self.author, self.category)
        response = self.client.delete(
            f"/api/articles/{article.id}", headers=self.auth(self.author)
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.articles.find_by_id(article.id))

        again = self.client.delete(
            f"/api/articles/{article.id}", headers=self.auth(self.author)
        )
        self.assertEqual(again.status_code, 404)

    def test_bulk_delete_requires_moderator(self):
        article = self.create_article(self.author, self.category)
        forbidden = self.client.post(
            "/api/articles/bulk-delete",
            json={"ids": [article.id]},
            headers=self.auth(self.author),
        )
        self.assertEqual(forbidden.status_code, 403)

        response = self.client.post(
            "/api/articles/bulk-delete",
            json={"ids": [article.id, "missing"]},
            headers=self.auth(self.editor),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["deleted"], [article.id])
        self.assertEqual(response.json()["notFound"], ["missing"])

    def test_admin_list_includes_all_statuses(self):
        self.create_article(self.author, self.category, "Live")
        self.create_article(self.author, self.category, "Draft", status=ArticleStatus.DRAFT)
        response = self.client.get(
            "/api/articles/admin", params={"status": ""}, headers=self.auth(self.author)
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["pagination"]["total"], 2)

        drafts = self.client.get(
            "/api/articles/admin",
            params={"status": "draft"},
            headers=self.auth(self.author),
        ).json()
        self.assertEqual([a["title"] for a in drafts["articles"]], ["Draft"])

    def test_dashboard_stats(self):
        self.create_article(self.author, self.category, "Live", is_featured=True)
        self.create_article(self.author, self.category, "Draft", status=ArticleStatus.DRAFT)
        response = self.client.get(
            "/api/articles/dashboard/stats", headers=self.auth(self.editor)
        )
        self.assertEqual(response.status_code, 200)
        payload = response.json()
        self.assertEqual(
            payload["stats"]["articles"],
            {"total": 2, "published": 1, "draft": 1, "archived": 0, "featured": 1},
        )
        self.assertEqual(payload["stats"]["categories"], {"total": 1})
        self.assertEqual(payload["stats"]["users"]["total"], 2)
        self.assertEqual(len(payload["recentArticles"]), 2)
        self.assertNotIn("password", payload["recentUsers"][0])


if __name__ == "__main__":
    unittest.main()
