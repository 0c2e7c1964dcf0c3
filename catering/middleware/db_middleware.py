# catering/middleware/db_middleware.py

from starlette.types import ASGIApp, Receive, Scope, Send
from catering.utils.database import AsyncSessionLocal

class DBSessionMiddleware:
    """
    Одна AsyncSession на HTTP-запрос: кладётся в request.state.db,
    закрывается после отправки ответа. Незакоммиченные изменения при закрытии откатываются.
    """

    def __init__(self, app: ASGIApp):
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        state = scope.setdefault("state", {})
        async with AsyncSessionLocal() as session:
            state["db"] = session
            await self.app(scope, receive, send)
