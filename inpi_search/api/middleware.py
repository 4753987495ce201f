"""요청 본문 크기 제한 (ASGI 미들웨어)

Content-Length가 있으면 바로 거절하고, 없으면 (chunked 등)
실제로 수신한 바이트 수를 세어 한도를 넘는 순간 413으로 중단합니다.
"""

from fastapi import HTTPException
from fastapi.responses import JSONResponse
from starlette.datastructures import Headers
from starlette.types import ASGIApp, Message, Receive, Scope, Send


PAYLOAD_TOO_LARGE_MESSAGE = "Payload too large"


class RequestSizeLimitMiddleware:
    def __init__(self, app: ASGIApp, max_bytes: int):
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        content_length = Headers(scope=scope).get("content-length")
        if content_length and content_length.isdigit() and int(content_length) > self.max_bytes:
            response = JSONResponse(status_code=413, content={"ok": False, "error": PAYLOAD_TOO_LARGE_MESSAGE})
            await response(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    # 본문을 읽는 라우트에서 HTTPException으로 전파 → 413 핸들러
                    raise HTTPException(status_code=413, detail=PAYLOAD_TOO_LARGE_MESSAGE)
            return message

        await self.app(scope, limited_receive, send)
