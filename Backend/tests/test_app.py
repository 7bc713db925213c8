"""
Application wiring: service selection, settings parsing, error-kind mapping.
"""
import pytest

from miniature.core.config import Settings
from miniature.core.errors import (
    AuthzUnavailable,
    ConstraintViolation,
    Forbidden,
    InvalidArgument,
    InvalidToken,
    NotFound,
    Unauthenticated,
    Unavailable,
)
from miniature.core.request_context import RequestContext, require_role
from miniature.main import create_app


def route_paths(app) -> set[str]:
    return {route.path for route in app.routes}


def test_enabled_services_selects_routers():
    app = create_app(Settings(ENABLED_SERVICES="customer"))

    paths = route_paths(app)
    assert "/v1/customer/login" in paths
    assert "/health" in paths
    assert "/v1/shop" not in paths
    assert "/v1/products/{product_id}" not in paths


def test_all_services_mounted_by_default():
    paths = route_paths(create_app(Settings()))

    assert {"/v1/customer/register", "/v1/shop/my", "/v1/shops/{shop_id}/products"} <= paths


def test_settings_lists_are_normalized():
    settings = Settings(SHOP_CREATOR_ROLES="seller, owner ,", ENABLED_SERVICES=" Shop,PRODUCT", TOKEN_TTL_MINUTES=30)

    assert settings.shop_creator_roles_list == ["SELLER", "OWNER"]
    assert settings.enabled_services_list == ["shop", "product"]
    assert settings.token_ttl.total_seconds() == 1800


@pytest.mark.parametrize(
    "error,status",
    [
        (InvalidArgument("x"), 400),
        (Unauthenticated("x"), 401),
        (InvalidToken("x"), 401),
        (Forbidden("x"), 403),
        (NotFound("x"), 404),
        (ConstraintViolation("x"), 409),
        (Unavailable("x"), 500),
        (AuthzUnavailable("x"), 503),
    ],
)
def test_error_kind_maps_to_status(error, status):
    assert error.status_code == status


def test_require_role_is_case_insensitive():
    ctx = RequestContext(user_id="u1", role="seller")

    assert require_role(ctx, ["SELLER", "OWNER"]) == "SELLER"
    with pytest.raises(Forbidden):
        require_role(RequestContext(user_id="u2", role="CUSTOMER"), ["SELLER", "OWNER"])
