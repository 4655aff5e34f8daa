import os

import uvicorn

if __name__ == "__main__":
    # Recarga automática solo en desarrollo
    is_dev = os.getenv("ENV", "development") == "development"

    uvicorn.run(
        "app.main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
        reload=is_dev,
        log_level="info"
    )
