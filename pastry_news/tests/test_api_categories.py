import unittest

from pastry_news.records import ArticleStatus, UserRole
from pastry_news.tests.api_base import ApiTestCase


class CategoryApiTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.admin = self.create_user(UserRole.ADMIN)
        self.author = self.create_user(UserRole.AUTHOR)

    def test_public_list_sorted_with_live_counts(self):
        techniques = self.create_category("Pastry Techniques", sort_order=2)
        self.create_category("Chef Interviews", sort_order=1)
        self.create_category("Archive", is_active=False)
        self.create_article(self.author, techniques, "Published One")
        self.create_article(
            self.author, techniques, "Draft One", status=ArticleStatus.DRAFT
        )

        response = self.client.get("/api/categories")
        self.assertEqual(response.status_code, 200)
        categories = response.json()["categories"]
        self.assertEqual(
            [c["name"] for c in categories], ["Chef Interviews", "Pastry Techniques"]
        )
        self.assertEqual(categories[1]["articleCount"], 1)
        self.assertEqual(categories[1]["_id"], techniques.id)

    def test_admin_list_includes_inactive(self):
        self.create_category("Archive", is_active=False)
        forbidden = self.client.get("/api/categories/admin", headers=self.auth(self.author))
        self.assertEqual(forbidden.status_code, 403)
        self.assertEqual(
            forbidden.json()["message"], "Access denied. Insufficient permissions."
        )

        response = self.client.get("/api/categories/admin", headers=self.auth(self.admin))
        self.assertEqual([c["name"] for c in response.json()["categories"]], ["Archive"])

    def test_get_by_slug(self):
        self.create_category("Recipe Development")
        response = self.client.get("/api/categories/recipe-development")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["category"]["name"], "Recipe Development")

        inactive = self.create_category("Hidden", is_active=False)
        self.assertEqual(self.client.get(f"/api/categories/{inactive.slug}").status_code, 404)

    def test_related_categories(self):
        base = self.create_category("Base")
        for i in range(5):
            self.create_category(f"Other {i}", sort_order=i)
        response = self.client.get(f"/api/categories/{base.id}/related")
        names = [c["name"] for c in response.json()["categories"]]
        self.assertEqual(names, ["Other 0", "Other 1", "Other 2", "Other 3"])

    def test_create_category(self):
        response = self.client.post(
            "/api/categories",
            json={"name": "Chocolate Work!", "color": "#5D4037", "sortOrder": 3},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 201)
        category = response.json()["category"]
        self.assertEqual(category["slug"], "chocolate-work")
        self.assertEqual(category["color"], "#5D4037")
        self.assertEqual(category["icon"], "🍰")
        self.assertTrue(category["isActive"])
        self.assertEqual(category["articleCount"], 0)

    def test_create_category_validation(self):
        response = self.client.post(
            "/api/categories",
            json={"name": "Bad Color", "color": "brown"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["errors"][0]["field"], "color")

        missing_parent = self.client.post(
            "/api/categories",
            json={"name": "Child", "parentCategory": "nope"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(missing_parent.status_code, 400)
        self.assertEqual(missing_parent.json()["message"], "Parent category not found")

    def test_update_category(self):
        category = self.create_category("Old Name")
        response = self.client.put(
            f"/api/categories/{category.id}",
            json={"name": "New Name", "description": "Fresh"},
            headers=self.auth(self.admin),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()["category"]
        self.assertEqual(body["slug"], "new-name")
        self.assertEqual(body["description"], "Fresh")

        self_parent = self.client.put(
            f"/api/categories/{category.id}",
            json={"name": "New Name", "parentCategory": category.id},
            headers=self.auth(self.admin),
        )
        self.assertEqual(self_parent.status_code, 400)

    def test_delete_blocked_when_articles_reference_category(self):
        category = self.create_category()
        self.create_article(self.author, category)
        response = self.client.delete(
            f"/api/categories/{category.id}", headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("1 articles", response.json()["message"])

    def test_delete_category(self):
        category = self.create_category()
        response = self.client.delete(
            f"/api/categories/{category.id}", headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertIsNone(self.categories.find_by_id(category.id))

    def test_toggle_status(self):
        category = self.create_category()
        response = self.client.put(
            f"/api/categories/{category.id}/status", headers=self.auth(self.admin)
        )
        self.assertEqual(response.status_code, 200)
        self.assertFalse(response.json()["category"]["isActive"])
        self.assertEqual(response.json()["message"], "Category deactivated successfully")


if __name__ == "__main__":
    unittest.main()
