from order_changes_api.app.api.routing import Route, build_router, registered_paths, route_precedence
from order_changes_api.app.api.v1.endpoints import order_changes


async def _handler() -> dict:
    return {}


def test_route_precedence_orders_literals_first():
    paths = ["/{order_change_id}", "/user/{user_id}", "/"]
    assert sorted(paths, key=route_precedence) == ["/", "/user/{user_id}", "/{order_change_id}"]


def test_build_router_keeps_declared_order_for_equal_precedence():
    router = build_router(
        [
            Route("GET", "/{item_id}", _handler),
            Route("DELETE", "/{item_id}", _handler),
            Route("GET", "/search/{term}", _handler),
        ]
    )
    assert registered_paths(router) == [
        ("GET", "/search/{term}"),
        ("GET", "/{item_id}"),
        ("DELETE", "/{item_id}"),
    ]


def test_order_change_routes_register_user_lookup_before_id_lookup():
    paths = registered_paths(order_changes.router)
    assert paths.index(("GET", "/user/{user_id}")) < paths.index(("GET", "/{order_change_id}"))
    # the declared table lists the id route first; registration must not follow it
    declared = [(route.method, route.path) for route in order_changes.routes]
    assert declared.index(("GET", "/{order_change_id}")) < declared.index(("GET", "/user/{user_id}"))
