import pytest

from mappify.base import Model
from mappify.exceptions import NotFoundError, ValidationError
from mappify.filters import col
from mappify.generator import SchemaGenerator
from mappify.orm_types import Text, Real, Number


class Product(Model):
    name = Text()
    price = Real()
    category = Text()
    password = Text()


@pytest.fixture
def db(session):
    SchemaGenerator().create_all(session.engine, [Product])
    for name, price, category in [
        ("Product 1", 100, "tools"),
        ("Product 2", 150, "tools"),
        ("Product 3", 250, "garden"),
        ("Widget", 50, None),
    ]:
        session.create(Product, name=name, price=price, category=category, password="secret")
    session.engine.calls.clear()
    return session


def test_find_one_requires_where(db):
    with pytest.raises(ValidationError):
        db.query(Product).find_one()
    with pytest.raises(ValidationError):
        db.query(Product).find_one(where={})
    assert db.engine.calls == []


def test_find_one(db):
    product = db.query(Product).find_one(where={"name": "Product 2"})
    assert isinstance(product, Product)
    assert product.price == 150
    assert product._session is db
    assert db.engine.calls[-1] == ('SELECT * FROM "products" WHERE "name" = ? LIMIT 1', ("Product 2",))


def test_find_one_accepts_an_options_mapping(db):
    product = db.query(Product).find_one({"where": {"price": {"gt": 100, "lt": 200}}})
    assert product.name == "Product 2"


def test_find_one_miss_returns_none(db):
    assert db.query(Product).find_one(where={"name": "nope"}) is None


def test_find_one_attributes_and_exclude(db):
    product = db.query(Product).find_one(
        where={"id": 1}, attributes=["id", "name", "password"], exclude=["password"]
    )
    assert product.name == "Product 1"
    assert "password" not in product.__dict__
    assert "price" not in product.__dict__
    assert db.engine.calls[-1][0].startswith('SELECT "id", "name", "password" FROM "products"')


def test_find_all_without_where_scans_table(db):
    products = db.query(Product).find_all()
    assert [p.name for p in products] == ["Product 1", "Product 2", "Product 3", "Widget"]
    assert db.engine.calls[-1] == ('SELECT * FROM "products"', ())


def test_find_all_operators(db):
    q = db.query(Product)
    assert [p.name for p in q.find_all(where={"name": {"in": ["Product 1", "Widget"]}})] == ["Product 1", "Widget"]
    assert [p.id for p in q.find_all(where={"price": {"between": [100, 200]}})] == [1, 2]
    assert [p.id for p in q.find_all(where={"price": {"notBetween": [100, 200]}})] == [3, 4]
    assert [p.id for p in q.find_all(where={"name": {"like": "Product%"}})] == [1, 2, 3]
    assert [p.id for p in q.find_all(where={"name": {"notLike": "Product%"}})] == [4]
    assert [p.id for p in q.find_all(where={"category": {"isNull": True}})] == [4]
    assert [p.id for p in q.find_all(where={"category": {"isNotNull": True}})] == [1, 2, 3]
    assert [p.id for p in q.find_all(where={"not": {"name": "Product 1"}})] == [2, 3, 4]
    assert [p.id for p in q.find_all(where={"or": [{"name": "Product 1"}, {"price": 250}]})] == [1, 3]
    assert [p.id for p in q.find_all(where={"and": [{"category": "tools"}, {"price": {"gt": 120}}]})] == [2]


def test_find_all_with_filter_expression(db):
    products = db.query(Product).find_all(where=(col("price") >= 150) & col("category").is_not_null())
    assert [p.id for p in products] == [2, 3]


def test_find_all_paging_needs_limit_and_offset(db):
    with pytest.raises(ValidationError):
        db.query(Product).find_all(limit=10)
    with pytest.raises(ValidationError):
        db.query(Product).find_all(offset=2)
    assert db.engine.calls == []


def test_find_all_offset_is_page_based(db):
    db.query(Product).find_all(limit=10, offset=2)
    assert db.engine.calls[-1][0] == 'SELECT * FROM "products" LIMIT 10 OFFSET 10'

    page = db.query(Product).find_all(limit=2, offset=2, order="id ASC")
    assert [p.id for p in page] == [3, 4]


def test_find_all_order_and_group(db):
    products = db.query(Product).find_all(order="price DESC")
    assert [p.id for p in products] == [3, 2, 1, 4]

    groups = db.query(Product).find_all(attributes=["category"], group="category", order="category")
    assert [g.category for g in groups] == [None, "garden", "tools"]


def test_unsafe_order_is_rejected(db):
    with pytest.raises(ValidationError):
        db.query(Product).find_all(order="price; DROP TABLE products")


def test_unknown_option_is_rejected(db):
    with pytest.raises(ValidationError):
        db.query(Product).find_all(wher={"id": 1})


def test_exclude_on_find_all(db):
    products = db.query(Product).find_all(exclude=["password"])
    assert all("password" not in p.__dict__ for p in products)


def test_fetch(db):
    assert len(db.query(Product).fetch()) == 4
    assert db.engine.calls[-1] == ('SELECT * FROM "products"', ())


def test_find_by_id(db):
    assert db.query(Product).find_by_id(3).name == "Product 3"
    assert db.engine.calls[-1] == ('SELECT * FROM "products" WHERE "id" = ? LIMIT 1', (3,))
    assert db.query(Product).find_by_id(42) is None


def test_find_or_create(db):
    product, created = db.query(Product).find_or_create({"where": {"name": "Widget"}}, {"price": 1})
    assert created is False
    assert product.id == 4

    db.engine.calls.clear()
    product, created = db.query(Product).find_or_create(
        {"where": {"name": "Gadget", "price": {"gt": 0}}}, {"price": 75, "category": "toys"}
    )
    assert created is True
    assert product.id == 5
    assert product.name == "Gadget"
    assert product.price == 75
    assert len(db.engine.calls) == 2


def test_find_or_create_keeps_eq_conditions(db):
    product, created = db.query(Product).find_or_create({"where": {"name": {"eq": "Gadget"}}})
    assert created is True
    assert product.name == "Gadget"

    again, created = db.query(Product).find_or_create({"where": {"name": {"eq": "Gadget"}}})
    assert created is False
    assert again.id == product.id


def test_find_or_create_with_filter_expression(db):
    where = (col("name") == "Gadget") & (col("category") == "toys")
    product, created = db.query(Product).find_or_create({"where": where}, {"price": 5})
    assert created is True
    assert (product.name, product.category, product.price) == ("Gadget", "toys", 5)

    again, created = db.query(Product).find_or_create({"where": where})
    assert created is False
    assert again.id == product.id
    assert len(db.query(Product).find_all(where={"name": "Gadget"})) == 1


def test_find_or_create_requires_where(db):
    with pytest.raises(ValidationError):
        db.query(Product).find_or_create({}, {"name": "x"})


def test_find_by_id_and_delete(db):
    assert db.query(Product).find_by_id_and_delete(1) is True
    assert len(db.engine.calls) == 2
    assert db.query(Product).find_by_id(1) is None
    with pytest.raises(NotFoundError):
        db.query(Product).find_by_id_and_delete(1)


def test_find_one_and_delete(db):
    assert db.query(Product).find_one_and_delete(where={"name": "Widget"}) is True
    with pytest.raises(NotFoundError):
        db.query(Product).find_one_and_delete(where={"name": "Widget"})
    with pytest.raises(ValidationError):
        db.query(Product).find_one_and_delete(where={})


def test_strict_finders_always_load_the_primary_key(db):
    assert db.query(Product).find_one_and_delete(where={"name": "Widget"}, exclude=["id"]) is True
    assert db.query(Product).find_one(where={"name": "Widget"}) is None

    product = db.query(Product).find_one_and_update(
        {"where": {"name": "Product 1"}, "attributes": ["name", "price"]}, {"price": 10}
    )
    assert product.id == 1
    assert db.query(Product).find_by_id(1).price == 10
    assert db.query(Product).find_by_id(1).category == "tools"


def test_find_one_and_update(db):
    product = db.query(Product).find_one_and_update({"where": {"id": 1}}, {"price": 200})
    assert product.price == 200
    assert len(db.engine.calls) == 2
    assert db.query(Product).find_by_id(1).price == 200

    with pytest.raises(NotFoundError):
        db.query(Product).find_one_and_update({"where": {"id": 99}}, {"price": 1})


def test_find_by_id_and_update(db):
    product = db.query(Product).find_by_id_and_update(2, {"name": "Renamed"})
    assert product.name == "Renamed"
    assert db.query(Product).find_by_id(2).name == "Renamed"
    assert db.query(Product).find_by_id_and_update(99, {"name": "x"}) is None
