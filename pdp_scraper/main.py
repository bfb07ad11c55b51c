"""
Product Page Scraper - FastAPI Application
Main entry point: submit a product URL, then poll the job until it finishes.
"""
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse
from pydantic import BaseModel

from pdp_scraper.config import config
from pdp_scraper.layers.orchestrator import TaskOrchestrator
from pdp_scraper.tasks import BackgroundRunner, TaskStore
from pdp_scraper.utils.logger import get_logger, set_trace_id


VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title="Product Page Scraper",
    description="Extracts product details and the full color x size price matrix from a product page",
    version=VERSION,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Initialize job machinery
task_store = TaskStore()
runner = BackgroundRunner()
orchestrator = TaskOrchestrator(task_store)

logger = get_logger("main")


class ScrapeRequest(BaseModel):
    """Request model for job submission."""
    url: Optional[str] = None


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


# API Routes
@app.get("/", response_class=HTMLResponse)
async def index():
    """Static liveness page."""
    return HTMLResponse(
        content="<h1>Scraper API is running!</h1>"
                "<p>Send a POST request to /scrape to start a job.</p>"
    )


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": VERSION, "activeJobs": runner.active}


@app.post("/scrape", status_code=202)
async def submit_scrape(request: Optional[ScrapeRequest] = None):
    """
    Accept a scrape job and start it in the background.

    Returns immediately with the task id; poll `statusUrl` for the outcome.
    """
    trace_id = set_trace_id()

    if not config.is_browser_configured():
        logger.error("browser_not_configured", reason="BROWSER_WS is not set", trace_id=trace_id)
        return error_response(500, "Server is not configured. Missing browser connection details.")

    url = (request.url or "").strip() if request else ""
    if not url:
        return error_response(400, "Missing URL")

    task = task_store.create(url)
    runner.submit(orchestrator.run(task.id, url), name=task.id)

    logger.info("scrape_request_accepted", task_id=task.id, url=url, trace_id=trace_id)

    return {
        "message": "Scraping task accepted.",
        "taskId": task.id,
        "statusUrl": f"/scrape/{task.id}",
        "estimatedCompletionTime": "2-3 minutes",
    }


@app.get("/scrape/{task_id}")
async def get_scrape_status(task_id: str):
    """Return the full task record."""
    task = task_store.get(task_id)
    if task is None:
        return error_response(404, "Task not found")
    return task.model_dump(mode="json")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.HOST, port=config.PORT, timeout_keep_alive=120)
