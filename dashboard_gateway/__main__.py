import uvicorn

from .config import load_settings
from .main import app

if __name__ == "__main__":
    settings = load_settings()
    uvicorn.run(app, host=settings.host, port=settings.port)
