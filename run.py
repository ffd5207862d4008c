import uvicorn
from serene.core.config import settings

if __name__ == "__main__":
    uvicorn.run(
        "serene.main:app",
        host="localhost",
        port=settings.SERVER_PORT,
        reload=True,
        log_level="info",
    )
