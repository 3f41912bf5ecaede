"""Tests for ProductRepository."""

import json
from concurrent.futures import ThreadPoolExecutor
from unittest.mock import patch

import pytest

from src.db.json_store import JsonDocumentStore
from src.exceptions import NotFoundError, StoreIOError, ValidationError
from src.models.products import ProductCreate, ProductPatch
from src.services.product_service import ProductRepository, next_id


class TestNextId:
    def test_empty_collection(self):
        assert next_id([]) == 1

    def test_highest_id_plus_one(self):
        assert next_id([{"id": 1}, {"id": 5}, {"id": 3}]) == 6

    def test_non_numeric_ids_count_as_zero(self):
        assert next_id([{"id": "x"}]) == 1
        assert next_id([{"title": "no id"}, {"id": None}]) == 1

    def test_numeric_string_ids(self):
        assert next_id([{"id": "7"}, {"id": 2}]) == 8


class TestProductRepository:
    @pytest.fixture
    def db_path(self, tmp_path):
        return tmp_path / "db.json"

    @pytest.fixture
    def store(self, db_path):
        return JsonDocumentStore(db_path)

    @pytest.fixture
    def repository(self, store):
        return ProductRepository(store)

    @pytest.fixture
    def sample_products(self):
        return [
            {
                "id": 1,
                "title": "Office Desk",
                "description": "Solid oak, fits a chair underneath.",
                "price": 150,
                "category": "Home & Garden",
                "subcategory": "Furniture",
                "images": [],
                "likes": 0,
                "dislikes": 0,
                "createdAt": 2000,
            },
            {
                "id": 2,
                "title": "Gaming Chair",
                "description": "Ergonomic chair, adjustable armrests.",
                "price": 50,
                "category": "Home & Garden",
                "subcategory": "Chairs",
                "images": [],
                "likes": 3,
                "dislikes": 0,
                "createdAt": 3000,
            },
            {
                "id": 3,
                "title": "Laptop",
                "description": "16GB RAM",
                "price": 800,
                "category": "Electronics",
                "subcategory": "Computers",
                "images": ["https://example.com/laptop.jpg"],
                "likes": 1,
                "dislikes": 2,
                "createdAt": 1000,
            },
        ]

    @pytest.fixture
    def seeded_store(self, db_path, sample_products):
        db_path.write_text(json.dumps({"products": sample_products}), encoding="utf-8")

    def _stored_products(self, db_path):
        return json.loads(db_path.read_text(encoding="utf-8"))["products"]

    def test_list_default_sort_is_newest_first(self, repository, seeded_store):
        """Test that the default order is descending createdAt."""
        items = repository.list_products()

        assert [p["id"] for p in items] == [2, 1, 3]

    def test_list_unknown_sort_falls_back_to_newest(self, repository, seeded_store):
        items = repository.list_products(sort="alphabetical")

        assert [p["id"] for p in items] == [2, 1, 3]

    def test_list_price_ascending(self, repository, seeded_store):
        items = repository.list_products(sort="price-asc")

        assert [p["price"] for p in items] == [50, 150, 800]

    def test_list_price_descending(self, repository, seeded_store):
        items = repository.list_products(sort="price-desc")

        assert [p["price"] for p in items] == [800, 150, 50]

    def test_list_missing_sort_keys_count_as_zero(self, repository, db_path):
        """Test that products without price or createdAt sort as 0."""
        db_path.write_text(
            json.dumps({"products": [{"id": 1, "price": 10, "createdAt": 5}, {"id": 2}]}),
            encoding="utf-8",
        )

        assert [p["id"] for p in repository.list_products(sort="price-asc")] == [2, 1]
        assert [p["id"] for p in repository.list_products(sort="newest")] == [1, 2]

    def test_list_filter_by_category_is_exact(self, repository, seeded_store):
        """Test category filtering with exact, case-sensitive equality."""
        assert [p["id"] for p in repository.list_products(category="Electronics")] == [3]
        assert repository.list_products(category="electronics") == []

    def test_list_filter_by_subcategory(self, repository, seeded_store):
        assert [p["id"] for p in repository.list_products(subcategory="Furniture")] == [1]

    def test_list_text_query_matches_title_case_insensitively(self, repository, seeded_store):
        """Test that q matches title or description regardless of case."""
        items = repository.list_products(q="CHAIR")

        # "Gaming Chair" by title, "Office Desk" by description
        assert {p["id"] for p in items} == {1, 2}

    def test_list_text_query_matches_description(self, repository, seeded_store):
        assert [p["id"] for p in repository.list_products(q="16gb")] == [3]

    def test_list_text_query_handles_missing_fields(self, repository, db_path):
        db_path.write_text(json.dumps({"products": [{"id": 1}, {"id": 2, "title": "Chair"}]}), encoding="utf-8")

        assert [p["id"] for p in repository.list_products(q="chair")] == [2]

    def test_list_filters_compose(self, repository, seeded_store):
        """Test that filters combine with AND."""
        items = repository.list_products(q="chair", category="Home & Garden", subcategory="Chairs")

        assert [p["id"] for p in items] == [2]

    def test_list_empty_filters_are_ignored(self, repository, seeded_store):
        assert len(repository.list_products(q="", category="", subcategory="")) == 3

    def test_list_does_not_mutate_store(self, repository, seeded_store, db_path, sample_products):
        repository.list_products(sort="price-asc")

        assert self._stored_products(db_path) == sample_products

    def test_list_empty_store(self, repository):
        assert repository.list_products() == []

    def test_create_applies_defaults(self, repository, seeded_store, db_path):
        """Test creating a product with only the required fields."""
        with patch("src.services.product_service.now_ms", return_value=123456):
            product = repository.create_product(ProductCreate(title="Foo", category="Bar"))

        assert product == {
            "id": 4,
            "title": "Foo",
            "description": "",
            "price": 0,
            "category": "Bar",
            "subcategory": "",
            "images": [],
            "likes": 0,
            "dislikes": 0,
            "createdAt": 123456,
        }
        assert self._stored_products(db_path)[-1] == product

    def test_create_in_empty_store_gets_id_one(self, repository, db_path):
        product = repository.create_product(ProductCreate(title="Foo", category="Bar"))

        assert product["id"] == 1
        assert len(self._stored_products(db_path)) == 1

    def test_create_keeps_given_fields(self, repository):
        product = repository.create_product(
            ProductCreate(
                title="Bike",
                description="Road bike",
                price="249.5",
                category="Sports",
                subcategory="Cycling",
                images=["https://example.com/bike.jpg"],
            )
        )

        assert product["price"] == 249.5
        assert product["description"] == "Road bike"
        assert product["subcategory"] == "Cycling"
        assert product["images"] == ["https://example.com/bike.jpg"]

    def test_create_coerces_invalid_price_and_images(self, repository):
        """Test permissive coercion of price and images."""
        product = repository.create_product(
            ProductCreate.model_validate({"title": "Foo", "category": "Bar", "price": "cheap", "images": "a.jpg"})
        )

        assert product["price"] == 0
        assert product["images"] == []

    @pytest.mark.parametrize(
        "payload",
        [
            {"category": "Bar"},
            {"title": "Foo"},
            {"title": "", "category": "Bar"},
            {"title": "Foo", "category": ""},
        ],
    )
    def test_create_requires_title_and_category(self, repository, seeded_store, db_path, sample_products, payload):
        """Test that missing required fields raise without touching the store."""
        with pytest.raises(ValidationError, match="title and category are required"):
            repository.create_product(ProductCreate.model_validate(payload))

        assert self._stored_products(db_path) == sample_products

    def test_update_merges_patch(self, repository, seeded_store, db_path, sample_products):
        """Test that a patch changes only the given fields."""
        updated = repository.update_product("3", ProductPatch(price=500))

        assert updated == {**sample_products[2], "price": 500}
        assert self._stored_products(db_path)[2] == updated

    def test_update_never_changes_id(self, repository, seeded_store):
        updated = repository.update_product(1, ProductPatch.model_validate({"id": 99, "title": "Standing Desk"}))

        assert updated["id"] == 1
        assert updated["title"] == "Standing Desk"

    def test_update_missing_product_raises(self, repository, seeded_store, db_path, sample_products):
        """Test that updating an unknown id leaves the collection unchanged."""
        with pytest.raises(NotFoundError):
            repository.update_product(42, ProductPatch(price=1))

        assert self._stored_products(db_path) == sample_products

    def test_update_non_numeric_id_raises(self, repository, seeded_store):
        with pytest.raises(NotFoundError):
            repository.update_product("abc", ProductPatch(price=1))

    def test_delete_removes_one_product(self, repository, seeded_store, db_path):
        repository.delete_product("2")

        assert [p["id"] for p in self._stored_products(db_path)] == [1, 3]

    def test_delete_twice_raises(self, repository, seeded_store):
        repository.delete_product(2)

        with pytest.raises(NotFoundError):
            repository.delete_product(2)

    def test_delete_on_empty_store_raises(self, repository):
        with pytest.raises(NotFoundError):
            repository.delete_product(1)

    def test_missing_or_junk_ids_never_match(self, repository, db_path):
        products = [{"title": "No id"}, {"id": "x", "title": "Junk"}, {"id": None, "title": "Null"}]
        db_path.write_text(json.dumps({"products": products}), encoding="utf-8")

        with pytest.raises(NotFoundError):
            repository.delete_product(0)
        with pytest.raises(NotFoundError):
            repository.update_product("0", ProductPatch(price=1))

        assert self._stored_products(db_path) == products

    def test_concurrent_creates_get_unique_ids(self, repository, db_path):
        """Test that parallel creates neither collide on ids nor lose writes."""
        def create(i):
            return repository.create_product(ProductCreate(title=f"Item {i}", category="Bulk"))["id"]

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: repository.list_products(), range(20)))
            ids = list(pool.map(create, range(20)))

        assert sorted(ids) == list(range(1, 21))
        assert sorted(p["id"] for p in self._stored_products(db_path)) == list(range(1, 21))

    def test_concurrent_creates_and_reads_lose_nothing(self, repository, db_path):
        def work(i):
            if i % 2:
                return repository.list_products()
            return repository.create_product(ProductCreate(title=f"Item {i}", category="Bulk"))

        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(work, range(40)))

        assert len(self._stored_products(db_path)) == 20

    def test_id_reused_after_deleting_highest(self, repository, seeded_store):
        """Test that deleting the max id lets the next product take it again."""
        repository.delete_product(3)

        product = repository.create_product(ProductCreate(title="Lamp", category="Home & Garden"))

        assert product["id"] == 3

    def test_store_errors_propagate(self, repository, db_path):
        db_path.write_text("{broken", encoding="utf-8")

        with pytest.raises(StoreIOError):
            repository.list_products()
