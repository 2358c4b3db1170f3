from mappify import Model
from mappify.orm_types import Text, Number, Real, HasMany, BelongsTo, BelongsToMany


class Category(Model):
    class Meta:
        table_name = "categories"
    name = Text(nullable=False, unique=True)
    description = Text()
    products = HasMany("Product", foreign_key="category_id")


class Product(Model):
    name = Text(nullable=False)
    price = Real(default=0.0)
    stock = Number(default=0)
    category_id = Number()

    category = BelongsTo(Category, foreign_key="category_id")
    tags = BelongsToMany("Tag", through="ProductTag", foreign_key="product_id", other_key="tag_id")


class Tag(Model):
    label = Text(nullable=False, unique=True)


class ProductTag(Model):
    class Meta:
        table_name = "product_tags"
    product_id = Number(nullable=False)
    tag_id = Number(nullable=False)


ALL_MODELS = [Category, Product, Tag, ProductTag]
