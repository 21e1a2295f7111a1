import json
import pathlib

from litestar import Litestar, get
from litestar.middleware import DefineMiddleware

from restrbac import Guard
from restrbac.adapters.litestar import RestRbacMiddleware
from restrbac.metrics.prometheus import PrometheusMetrics

roles_path = pathlib.Path(__file__).parent.parent / "roles.json"
guard = Guard(json.loads(roles_path.read_text(encoding="utf-8")), metrics=PrometheusMetrics())


def current_role(scope) -> str:
    return "accountant"


@get("/invoices/{invoice_id:int}")
async def get_invoice(invoice_id: int) -> dict:
    return {"id": invoice_id}


@get("/health")
async def health() -> dict:
    return {"ok": True}


app = Litestar(
    route_handlers=[get_invoice, health],
    middleware=[DefineMiddleware(RestRbacMiddleware, guard=guard, role_getter=current_role)],
)

# Run: uvicorn examples.litestar_demo.app:app --reload
