"""
=============================================================================
EXAMPLE: ONE APP, TWO TRANSPORTS
=============================================================================

The same setup function answers HTTP requests and command line calls:

    # HTTP, with the wsgiref development server
    python -m switchyard serve examples.shop_app:setup --port 8000
    curl http://127.0.0.1:8000/products/2
    curl -X POST -d '{"name": "Lamp"}' http://127.0.0.1:8000/products

    # Command line
    python -m switchyard call examples.shop_app:setup /report --format=json
    python examples/shop_app.py /report

ARCHITECTURE OVERVIEW:
─────────────────────

    ┌─────────────────────────────────────────────────────────────────┐
    │   App                                                            │
    │   ─────────────────────────────────────────────────────────────  │
    │   LoggingMiddleware  ──►  powered_by  ──►  Router                │
    │   (access log)            (header)         /products/:id         │
    │                                            /products             │
    │                                            /report               │
    │                                            /:anything (pass)     │
    └─────────────────────────────────────────────────────────────────┘

=============================================================================
"""

import sys
from pathlib import Path

# Allow running from a checkout without `pip install -e .`
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from switchyard import App, Controller, LoggingMiddleware, function_middleware


# =============================================================================
# IN-MEMORY DATA
# =============================================================================
# Not thread-safe; one App is built per request but this dict is shared.

products = {
    1: {"id": 1, "name": "Desk"},
    2: {"id": 2, "name": "Chair"},
}


# =============================================================================
# CONTROLLERS
# =============================================================================

class Products(Controller):
    """GET/POST/DELETE /products[/:id], dispatched by app.rest()."""

    def get(self):
        product_id = self.app.param("id")
        if product_id is None:
            self.app.output.json(list(products.values()))
            return
        product = products.get(int(product_id))
        if product is None:
            self.app.pass_()
        self.app.output.json(product)

    def post(self):
        data = self.app.input.json() or {}
        if not data.get("name"):
            self.app.output.status(400)
            return "name is required"
        product_id = max(products, default=0) + 1
        products[product_id] = {"id": product_id, "name": data["name"]}
        self.app.output.status(201).json(products[product_id])

    def delete(self):
        products.pop(int(self.app.param("id") or 0), None)
        self.app.output.status(204)


@function_middleware
def powered_by(app, next):
    if not app.is_cli():
        app.output.header("X-Powered-By", "switchyard")
    next()


def report(app, next):
    if app.input.option("format") == "json":
        return f'{{"products": {len(products)}}}\n'
    return f"{len(products)} products\n"


# =============================================================================
# SETUP
# =============================================================================

def setup(app: App) -> None:
    app.add(LoggingMiddleware())
    app.add(powered_by)

    @app.configure("production")
    def production():
        app.disable("debug")

    app.rest("/products/:id", Products)
    app.rest("/products", Products)
    app.on("/report", report)

    # Routes can decline with pass_(); the next matching route is tried
    @app.on("/:anything")
    def maybe(app, next):
        app.pass_()

    @app.not_found
    def missing(app, next):
        return f"Nothing at {app.input.path()}\n"


if __name__ == "__main__":
    app = App()
    setup(app)
    app.run()
    sys.exit(app.output.exit_code)
