# techpedia/routers/dependencies.py
"""
Shared router wiring: one instance of each repository and service,
plus request-body normalisers.
"""

from fastapi import Request
from pydantic import ValidationError as PydanticValidationError

from techpedia.core.errors import ValidationError
from techpedia.repositories.cart_repo import CartRepository
from techpedia.repositories.order_repo import OrderRepository
from techpedia.repositories.product_repo import ProductRepository
from techpedia.repositories.taxonomy_repo import BrandRepository, CategoryRepository
from techpedia.repositories.token_repo import TokenRepository
from techpedia.repositories.user_repo import UserRepository
from techpedia.schemas.product import ProductCreate, ProductUpdate
from techpedia.services.auth_service import AuthService
from techpedia.services.cart_service import CartService
from techpedia.services.catalog_service import CatalogService
from techpedia.services.checkout_service import CheckoutService
from techpedia.services.order_service import OrderService
from techpedia.services.user_service import UserService

cart_repo = CartRepository()
order_repo = OrderRepository()
product_repo = ProductRepository()
brand_repo = BrandRepository()
category_repo = CategoryRepository()
token_repo = TokenRepository()
user_repo = UserRepository()

cart_service = CartService(cart_repo, product_repo)
order_service = OrderService(order_repo, product_repo)
catalog_service = CatalogService(product_repo, brand_repo, category_repo, cart_repo)
checkout_service = CheckoutService(cart_repo, catalog_service, order_repo, order_service)
auth_service = AuthService(user_repo, token_repo, cart_service, order_service)
user_service = UserService(user_repo)


FORM_CONTENT_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")

# camelCase names sent by the dashboard front-end
PRODUCT_FIELD_ALIASES = {
    "brandId": "brand_id",
    "categoryId": "category_id",
    "imageUrl": "image_url",
    "removeImage": "remove_image",
}


def validation_issues(exc: PydanticValidationError) -> list[dict]:
    return [
        {"loc": [str(part) for part in err["loc"]], "msg": err["msg"]}
        for err in exc.errors()
    ]


async def _product_body(request: Request) -> dict:
    """
    Read a product body as a plain dict with snake_case keys, whether the
    client sent JSON or form-data. File parts are ignored (images are
    referenced by URL only); empty form values count as absent.
    """
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        raw = {
            key: value
            for key, value in form.items()
            if isinstance(value, str) and value != ""
        }
    else:
        try:
            raw = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON")
        if not isinstance(raw, dict):
            raise ValidationError("Request body must be a JSON object")

    return {PRODUCT_FIELD_ALIASES.get(key, key): value for key, value in raw.items()}


def _validate(schema, data: dict):
    try:
        return schema.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid input", issues=validation_issues(e))


async def product_create_input(request: Request) -> ProductCreate:
    return _validate(ProductCreate, await _product_body(request))


async def product_update_input(request: Request) -> ProductUpdate:
    return _validate(ProductUpdate, await _product_body(request))
