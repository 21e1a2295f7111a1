import contextlib
import logging
import pathlib

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.responses import JSONResponse
from starlette.routing import Route

from restrbac import FileRoleSource, Guard, HotReloader
from restrbac.adapters.asgi import RestRbacMiddleware
from restrbac.logging import DecisionLogger

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

roles_path = pathlib.Path(__file__).parent.parent / "roles.json"
guard = Guard(logger_sink=DecisionLogger(as_json=True))
reloader = HotReloader(guard, FileRoleSource(str(roles_path)), initial_load=True, poll_interval=1.0)
reloader.poll_once()


def role_from_header(scope):
    # identity verification belongs to an upstream auth layer
    for name, value in scope.get("headers", []):
        if name == b"x-role":
            return value.decode("latin-1")
    return None


@contextlib.asynccontextmanager
async def lifespan(app):
    reloader.start()
    try:
        yield
    finally:
        reloader.stop()


async def collection(request):
    return JSONResponse({"resource": request.url.path})


async def item(request):
    return JSONResponse({"id": request.path_params["item_id"]})


app = Starlette(
    routes=[
        Route("/", lambda request: JSONResponse({"ok": True})),
        Route("/{resource}", collection, methods=["GET", "POST"]),
        Route("/{resource}/{item_id}", item, methods=["GET", "PUT", "PATCH", "DELETE"]),
    ],
    middleware=[Middleware(RestRbacMiddleware, guard=guard, role_getter=role_from_header, add_headers=True)],
    lifespan=lifespan,
)

# Run: uvicorn examples.starlette_demo.app:app --reload
