from fastapi import FastAPI, WebSocket, WebSocketDisconnect, HTTPException, Query
from fastapi.responses import Response
from pydantic import BaseModel
import json
import traceback
from typing import Dict, Any, Optional

from light_processor.config import load_config
from light_processor.errors import LightProcessorError
from light_processor.processor import LightProcessor, STATS_TOP_WORDS
from light_processor.tokens import tokenize_phrase


class IngestRequest(BaseModel):
    text: str


class GenerateRequest(BaseModel):
    phrase: str
    max_steps: Optional[int] = None


async def handle_ingest_text(processor: LightProcessor, websocket: WebSocket,
                             data: Dict[str, Any]) -> Dict[str, Any]:
    """Handle ingest_text command - streams one progress message per batch, then the result."""
    try:
        text = data.get("text", "")
        if not isinstance(text, str):
            return {
                "type": "error",
                "message": "Field 'text' must be a string.",
                "success": False
            }

        async def send_progress(p):
            await websocket.send_json({"type": "progress", "progress": p})

        report = await processor.ingest_text(text, on_progress=send_progress)
        print(f"  -> Ingested {report.tokens_processed} tokens ({len(processor.registry)} words)")
        return {
            "type": "ingest_complete",
            "report": report.to_dict(),
            "word_count": len(processor.registry),
            "success": True
        }
    except Exception as e:
        return {
            "type": "error",
            "message": f"Error ingesting text: {str(e)}",
            "success": False
        }


async def handle_generate(processor: LightProcessor, data: Dict[str, Any]) -> Dict[str, Any]:
    """Handle generate command - ingests the phrase, then walks from its last word."""
    try:
        phrase = data.get("phrase", "")
        max_steps = data.get("max_steps", None)
        if max_steps is not None and (not isinstance(max_steps, int) or max_steps < 0):
            return {
                "type": "error",
                "message": f"Invalid max_steps: {max_steps}. Must be a non-negative integer.",
                "success": False
            }
        output = await processor.generate_async(tokenize_phrase(phrase), max_steps)
        return {
            "type": "generate_complete",
            "output": output,
            "phrase": " ".join(output),
            "success": True
        }
    except Exception as e:
        return {
            "type": "error",
            "message": f"Error generating: {str(e)}",
            "success": False
        }


def create_app(processor: Optional[LightProcessor] = None) -> FastAPI:
    """Build the app around one processor instance (created from config if omitted)."""
    processor = processor or LightProcessor(load_config())
    app = FastAPI(title="Light Processor")
    app.state.processor = processor

    @app.get("/stats")
    async def get_stats(top: int = Query(STATS_TOP_WORDS, ge=0)):
        return processor.stats(top=top)

    @app.post("/ingest")
    async def post_ingest(request: IngestRequest):
        try:
            report = await processor.ingest_text(request.text)
        except LightProcessorError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {"report": report.to_dict(), "word_count": len(processor.registry)}

    @app.post("/generate")
    async def post_generate(request: GenerateRequest):
        if request.max_steps is not None and request.max_steps < 0:
            raise HTTPException(status_code=400, detail="max_steps must be non-negative")
        output = await processor.generate_async(tokenize_phrase(request.phrase), request.max_steps)
        return {"output": output, "phrase": " ".join(output)}

    @app.get("/grid")
    async def get_grid():
        data = await processor.queue.run(processor.export_bytes)
        return Response(
            content=data,
            media_type="application/octet-stream",
            headers={
                "X-Grid-Side": str(processor.encoder.grid_side),
                "X-Word-Count": str(processor.encoder.word_count),
            },
        )

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        await websocket.accept()
        try:
            while True:
                raw = await websocket.receive_text()
                try:
                    data = json.loads(raw)
                except json.JSONDecodeError:
                    await websocket.send_json({
                        "type": "error",
                        "message": "Invalid JSON format",
                        "success": False
                    })
                    continue

                command = data.get("type") if isinstance(data, dict) else None
                print(f"[Server] Command: {command}")
                if command == "ingest_text":
                    response = await handle_ingest_text(processor, websocket, data)
                elif command == "generate":
                    response = await handle_generate(processor, data)
                elif command == "stats":
                    response = {"type": "stats", "stats": processor.stats(), "success": True}
                else:
                    response = {
                        "type": "error",
                        "message": f"Unknown command: {command}",
                        "success": False
                    }
                await websocket.send_json(response)
        except WebSocketDisconnect:
            print("[Server] Client disconnected")
        except Exception as e:
            await websocket.send_json({
                "type": "error",
                "message": f"Unexpected error: {str(e)}",
                "traceback": traceback.format_exc(),
                "success": False
            })

    return app


def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Light processor server")
    parser.add_argument("--config", type=str, default=None, help="JSON config file")
    parser.add_argument("--checkpoint", type=str, default=None, help="Checkpoint to resume from")
    parser.add_argument("--host", type=str, default="0.0.0.0")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args()

    processor = LightProcessor(load_config(args.config))
    if args.checkpoint:
        processor.load_checkpoint(args.checkpoint)
    uvicorn.run(create_app(processor), host=args.host, port=args.port)


if __name__ == "__main__":
    main()
