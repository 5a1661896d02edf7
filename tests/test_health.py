"""Smoke test for application startup."""


def test_app_imports() -> None:
    """Verify the app can be imported without errors."""
    from nexusnft.main import app

    assert app.title == "Nexus NFT"


def test_routes_registered() -> None:
    """Every public surface is mounted on the app."""
    from nexusnft.main import app

    paths = {route.path for route in app.routes}

    assert {
        "/collections",
        "/metadata",
        "/metadata/{token_id}",
        "/image/{token_id}",
        "/upload",
        "/assets/{path:path}",
        "/contract-artifact",
        "/transactions/{tx_hash}",
        "/health",
        "/ready",
    } <= paths
