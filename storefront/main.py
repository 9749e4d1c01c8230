# storefront/main.py
import uvicorn

from storefront.api import create_app
from storefront.utils.logging import setup_logging

setup_logging()
app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
