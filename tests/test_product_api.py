"""End-to-end tests for the HTTP surface.

Covers:
- Session login and the authentication requirement on /products
- Create, list, detail, edit, update and delete through the API
- Localized messages for success, validation and permission failures
- Serving stored images
"""

import pytest
from fastapi.testclient import TestClient

from src.api import create_app
from tests.conftest import JPEG_BYTES, PNG_BYTES, TEXT_BYTES

SCRIPTED_SVG = (
    b'<svg xmlns="http://www.w3.org/2000/svg">'
    b'<script>fetch("/products").then(r => r.text())</script></svg>'
)


def register(client: TestClient, username: str) -> int:
    response = client.post(
        "/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": "secreto123"},
    )
    assert response.status_code == 201
    return response.json()["id"]


def create_chair(client: TestClient, **overrides):
    data = {"title": "Chair", "description": "Wooden chair", "price": "49.99"}
    data.update(overrides)
    return client.post(
        "/products",
        data=data,
        files={"image": ("chair.jpg", JPEG_BYTES, "image/jpeg")},
    )


class TestProductApi:
    @pytest.fixture
    def app(self, app_config):
        return create_app(app_config())

    @pytest.fixture
    def alice(self, app):
        client = TestClient(app)
        client.user_id = register(client, "alice")
        return client

    @pytest.fixture
    def bob(self, app):
        client = TestClient(app)
        client.user_id = register(client, "bob")
        return client

    def test_health(self, app):
        assert TestClient(app).get("/health").json() == {"status": "healthy"}

    def test_products_require_login(self, app):
        client = TestClient(app)

        assert client.get("/products").status_code == 401
        assert client.get("/products/1").status_code == 401
        assert create_chair(client).status_code == 401

    def test_login_and_logout(self, app):
        client = TestClient(app)
        register(client, "carol")
        assert client.post("/auth/logout").status_code == 204
        assert client.get("/products").status_code == 401

        wrong = client.post("/auth/login", json={"username": "carol", "password": "nope"})
        assert wrong.status_code == 401

        login = client.post("/auth/login", json={"username": "carol", "password": "secreto123"})
        assert login.status_code == 200
        assert client.get("/products").status_code == 200

    def test_duplicate_registration(self, alice):
        response = alice.post(
            "/auth/register",
            json={"username": "alice", "email": "alice@example.com", "password": "secreto123"},
        )
        assert response.status_code == 400

    def test_create_product(self, alice):
        response = create_chair(alice)

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Anuncio creado correctamente"
        product = body["product"]
        assert product["title"] == "Chair"
        assert product["price"] == 49.99
        assert product["owner_id"] == alice.user_id
        assert product["image_url"] == f"/storage/{product['image']}"

    def test_owner_comes_from_session(self, alice):
        response = create_chair(alice, owner_id="999", user_id="999")

        assert response.json()["product"]["owner_id"] == alice.user_id

    def test_create_validation_errors(self, alice, app):
        response = create_chair(alice, title="x" * 21)

        assert response.status_code == 422
        assert response.json() == {
            "errors": {"title": ["El título no debe exceder los 20 caracteres."]}
        }
        assert alice.get("/products").json()["products"] == []
        assert not any(path.is_file() for path in app.state.blob_store.root.rglob("*"))

    def test_create_rejects_text_file(self, alice, app):
        response = alice.post(
            "/products",
            data={"title": "Chair", "description": "Wooden chair", "price": "49.99"},
            files={"image": ("notes.txt", TEXT_BYTES, "text/plain")},
        )

        assert response.status_code == 422
        assert "El archivo debe ser una imagen." in response.json()["errors"]["image"]
        assert alice.get("/products").json()["products"] == []
        assert not any(path.is_file() for path in app.state.blob_store.root.rglob("*"))

    def test_create_rejects_oversized_image(self, alice, app):
        oversized = JPEG_BYTES + b"\x00" * (3 * 1024 * 1024)

        response = alice.post(
            "/products",
            data={"title": "Chair", "description": "Wooden chair", "price": "49.99"},
            files={"image": ("huge.jpg", oversized, "image/jpeg")},
        )

        assert response.status_code == 422
        assert response.json() == {"errors": {"image": ["La imagen no debe exceder los 2MB."]}}
        assert alice.get("/products").json()["products"] == []
        assert not any(path.is_file() for path in app.state.blob_store.root.rglob("*"))

    def test_update_rejects_oversized_image(self, alice, app):
        product = create_chair(alice).json()["product"]
        oversized = PNG_BYTES + b"\x00" * (3 * 1024 * 1024)

        response = alice.put(
            f"/products/{product['id']}",
            data={"title": "Table", "description": "Oak table", "price": "120"},
            files={"image": ("huge.png", oversized, "image/png")},
        )

        assert response.status_code == 422
        assert response.json()["errors"] == {"image": ["La imagen no debe exceder los 2MB."]}
        assert alice.get(f"/products/{product['id']}").json() == product
        stored = [path for path in app.state.blob_store.root.rglob("*") if path.is_file()]
        assert len(stored) == 1

    def test_create_requires_image(self, alice):
        response = alice.post(
            "/products",
            data={"title": "Chair", "description": "Wooden chair", "price": "49.99"},
        )

        assert response.status_code == 422
        assert response.json()["errors"] == {"image": ["La imagen es obligatoria."]}

    def test_list_only_own_products(self, alice, bob):
        create_chair(alice)
        create_chair(bob, title="Lamp")

        titles = [p["title"] for p in alice.get("/products").json()["products"]]

        assert titles == ["Chair"]

    def test_show_any_product(self, alice, bob):
        product = create_chair(alice).json()["product"]

        response = bob.get(f"/products/{product['id']}")

        assert response.status_code == 200
        assert response.json()["title"] == "Chair"

    def test_show_missing_product(self, alice):
        response = alice.get("/products/999")

        assert response.status_code == 404
        assert response.json() == {"detail": "Anuncio no encontrado"}

    def test_edit_form_for_owner_only(self, alice, bob):
        product = create_chair(alice).json()["product"]

        own = alice.get(f"/products/{product['id']}/edit")
        assert own.status_code == 200
        assert own.json()["image_required"] is True

        other = bob.get(f"/products/{product['id']}/edit")
        assert other.status_code == 403
        assert other.json() == {"detail": "No tienes permiso para editar este anuncio"}

    def test_update_by_owner(self, alice, app):
        product = create_chair(alice).json()["product"]

        response = alice.put(
            f"/products/{product['id']}",
            data={"title": "Table", "description": "Oak table", "price": "120"},
            files={"image": ("table.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Anuncio actualizado correctamente"
        assert body["product"]["title"] == "Table"
        assert body["product"]["owner_id"] == alice.user_id
        assert not app.state.blob_store.exists(product["image"])
        assert app.state.blob_store.exists(body["product"]["image"])

    def test_update_requires_image(self, alice):
        product = create_chair(alice).json()["product"]

        response = alice.put(
            f"/products/{product['id']}",
            data={"title": "Table", "description": "Oak table", "price": "120"},
        )

        assert response.status_code == 422
        assert response.json()["errors"] == {"image": ["La imagen es obligatoria."]}

    def test_update_by_non_owner(self, alice, bob):
        product = create_chair(alice).json()["product"]

        response = bob.put(
            f"/products/{product['id']}",
            data={"title": "Stolen", "description": "Mine now", "price": "1"},
            files={"image": ("table.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 403
        assert response.json() == {"detail": "No tienes permiso para editar este anuncio"}
        assert alice.get(f"/products/{product['id']}").json() == product

    def test_delete_by_non_owner(self, alice, bob, app):
        product = create_chair(alice).json()["product"]

        response = bob.delete(f"/products/{product['id']}")

        assert response.status_code == 403
        assert response.json() == {"detail": "No tienes permiso para eliminar este anuncio"}
        assert alice.get(f"/products/{product['id']}").status_code == 200
        assert app.state.blob_store.exists(product["image"])

    def test_delete_by_owner(self, alice, app):
        product = create_chair(alice).json()["product"]

        response = alice.delete(f"/products/{product['id']}")

        assert response.status_code == 200
        assert response.json()["message"] == "Producto eliminado correctamente"
        assert alice.get(f"/products/{product['id']}").status_code == 404
        assert not app.state.blob_store.exists(product["image"])

    def test_serve_image(self, alice, app):
        product = create_chair(alice).json()["product"]

        response = TestClient(app).get(product["image_url"])

        assert response.status_code == 200
        assert response.content == JPEG_BYTES
        assert response.headers["content-type"] == "image/jpeg"
        assert "content-security-policy" not in response.headers

    def test_serve_svg_with_restrictive_policy(self, alice, app):
        response = alice.post(
            "/products",
            data={"title": "Logo", "description": "Vector logo", "price": "5"},
            files={"image": ("logo.svg", SCRIPTED_SVG, "image/svg+xml")},
        )
        assert response.status_code == 201
        product = response.json()["product"]
        assert product["image"].endswith(".svg")

        served = TestClient(app).get(product["image_url"])

        assert served.status_code == 200
        assert served.content == SCRIPTED_SVG
        assert served.headers["content-type"].startswith("image/svg+xml")
        assert served.headers["content-security-policy"] == (
            "default-src 'none'; style-src 'unsafe-inline'; sandbox"
        )
        assert served.headers["x-content-type-options"] == "nosniff"

    def test_serve_missing_image(self, app):
        assert TestClient(app).get("/storage/product_images/missing.jpg").status_code == 404


class TestOptionalImagePolicy:
    def test_update_keeps_image_when_optional(self, app_config):
        app = create_app(app_config(update_requires_image=False))
        client = TestClient(app)
        register(client, "dana")
        product = create_chair(client).json()["product"]

        assert client.get(f"/products/{product['id']}/edit").json()["image_required"] is False

        response = client.put(
            f"/products/{product['id']}",
            data={"title": "Chair", "description": "Wooden chair", "price": "39.99"},
        )

        assert response.status_code == 200
        assert response.json()["product"]["price"] == 39.99
        assert response.json()["product"]["image"] == product["image"]
