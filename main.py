# main.py
import uvicorn

from storefront.core.config import settings
from storefront.main import app

if __name__ == "__main__":
    uvicorn.run(app, host=settings.HOST, port=settings.PORT)
