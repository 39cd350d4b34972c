import argparse
import asyncio
import json
import sys
from contextlib import asynccontextmanager
from typing import Callable, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from loguru import logger

from .dashboard import CursesDashboard, run_dashboard
from .logging_config import configure_dashboard_logging, configure_logging
from .pipeline import Pipeline
from .schemas import Envelope, PublishRequest, Snapshot, Stats
from .transports import Selection, select_transport
from .utilities import (
    HTTP_HOST,
    HTTP_PORT,
    UI_TICK_INTERVAL,
    DashboardError,
    SerializationError,
    TransportError,
    make_error,
    make_pong,
    make_snapshot_event,
)


# -------------- HTTP / WebSocket view --------------
def create_app(selector: Callable[[], Selection] = select_transport,
               ui_tick: float = UI_TICK_INTERVAL, **pipeline_options) -> FastAPI:
    ''' FastAPI view of a pipeline that runs for the lifetime of the app.'''

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        pipeline = Pipeline(selector(), **pipeline_options)
        pipeline.start()
        app.state.pipeline = pipeline
        logger.info("Pipeline started in {} mode", pipeline.mode)
        try:
            yield
        finally:
            await pipeline.stop()
            logger.info("Pipeline stopped")

    app = FastAPI(title="Cardinal pub/sub demo", lifespan=lifespan)

    def get_pipeline() -> Pipeline:
        return app.state.pipeline

    async def snapshot_sender_loop(ws: WebSocket):
        """
        Background task per connection: push a snapshot every UI tick.
        """
        try:
            while True:
                snapshot = get_pipeline().snapshot()
                await ws.send_text(json.dumps(make_snapshot_event(snapshot.model_dump(mode="json"))))
                await asyncio.sleep(ui_tick)
        except asyncio.CancelledError:
            pass
        except Exception:
            # (broken pipe / closed) -> stop
            pass

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        await ws.accept()
        sender = asyncio.create_task(snapshot_sender_loop(ws))
        try:
            while True:
                data = await ws.receive_text()
                try:
                    payload = json.loads(data)
                except json.JSONDecodeError:
                    await ws.send_text(json.dumps(make_error(None, "BAD_REQUEST", "invalid json")))
                    continue
                if not isinstance(payload, dict):
                    await ws.send_text(json.dumps(make_error(None, "BAD_REQUEST", "expected an object")))
                    continue
                typ = payload.get("type")
                request_id = payload.get("request_id")
                if typ == "ping":
                    await ws.send_text(json.dumps(make_pong(request_id)))
                    continue
                await ws.send_text(json.dumps(make_error(request_id, "BAD_REQUEST", f"unknown type: {typ}")))
        except WebSocketDisconnect:
            pass
        finally:
            sender.cancel()
            try:
                await sender
            except asyncio.CancelledError:
                pass

    @app.get("/messages", response_model=Snapshot)
    async def rest_messages():
        return get_pipeline().snapshot()

    @app.post("/messages", status_code=201, response_model=Envelope)
    async def rest_publish(req: PublishRequest):
        try:
            return await get_pipeline().publish(req.content)
        except SerializationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        except TransportError as exc:
            raise HTTPException(status_code=502, detail=str(exc))

    @app.get("/health")
    async def rest_health():
        pipeline = get_pipeline()
        return {
            "uptime_sec": int(pipeline.stats.uptime()),
            "mode": pipeline.mode,
            "status": pipeline.status,
            "running": pipeline.running,
        }

    @app.get("/stats", response_model=Stats)
    async def rest_stats():
        return get_pipeline().stats_view()

    return app


app = create_app()


# -------------- Terminal dashboard --------------
async def run_terminal(selector: Callable[[], Selection] = select_transport,
                       dashboard: Optional[CursesDashboard] = None):
    dashboard = dashboard or CursesDashboard()
    # terminal failure is fatal and must happen before any loop starts
    dashboard.open()
    try:
        pipeline = Pipeline(selector())
        pipeline.start()
        try:
            await run_dashboard(dashboard, pipeline)
        finally:
            await pipeline.stop()
    finally:
        # the terminal is restored even if shutdown fails
        dashboard.close()


def main(argv=None):
    parser = argparse.ArgumentParser(prog="cardinal", description="Fast DDS pub/sub demo with mock fallback")
    parser.add_argument("--serve", action="store_true", help="serve the HTTP/WebSocket view instead of the terminal dashboard")
    parser.add_argument("--host", default=HTTP_HOST)
    parser.add_argument("--port", type=int, default=HTTP_PORT)
    parser.add_argument("--force-mock", action="store_true", help="skip the native transport")
    args = parser.parse_args(argv)

    def selector() -> Selection:
        if args.force_mock:
            return select_transport(force_mock=True)
        return select_transport()

    if args.serve:
        import uvicorn

        configure_logging()
        logger.info("Starting Cardinal - Fast DDS + FastAPI view")
        uvicorn.run(create_app(selector), host=args.host, port=args.port)
        return 0

    configure_dashboard_logging()
    logger.info("Starting Cardinal - Fast DDS + terminal dashboard")
    try:
        asyncio.run(run_terminal(selector))
    except DashboardError as exc:
        logger.error("Application error: {}", exc)
        print(f"cardinal: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        pass
    logger.info("Cardinal application terminated successfully.")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
