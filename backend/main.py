"""FastAPI app: health e tag manual de ambiente por work item."""
import logging

from fastapi import FastAPI, HTTPException, Query, status

from app.config import settings
from app.models.tagging import TagOutcome
from app.services.devops_client import AzureDevOpsClient
from app.services.work_item_tagger import WorkItemTagService

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="TagAmbienteWorkItems", description="Tag DeployedEnv:<AMBIENTE> em work items do Azure DevOps")


@app.get("/health")
async def health():
    """Health check para monitoramento e deploy."""
    return {"status": "ok"}


@app.post("/tag/work-item/{work_item_id:int}")
def tag_work_item(work_item_id: int, environment: str | None = Query(None)):
    """Disparo manual: aplica a tag de ambiente em um work item por ID."""
    try:
        config = settings.tagging_config(environment)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    if not config.has_credentials:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Credencial do Azure DevOps não configurada")
    devops = AzureDevOpsClient(config.organization, config.project, pat=config.pat, access_token=config.access_token)
    try:
        result = WorkItemTagService(devops, config.environment_tag).tag_work_item(work_item_id)
    finally:
        devops.close()
    if result.outcome == TagOutcome.FAILED:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result.message)
    return {"ok": True, "result": result.to_dict()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8000, reload=True)
