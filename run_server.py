"""
Run the ADA analyst backend server.
"""
import os
import sys

# Set working directory and path
project_dir = os.path.dirname(os.path.abspath(__file__))
os.chdir(project_dir)
sys.path.insert(0, project_dir)

# Load environment
from dotenv import load_dotenv
load_dotenv(os.path.join(project_dir, ".env"))

import uvicorn

from ada_ta.core.config import settings
from ada_ta.core.logging import setup_logging

if __name__ == "__main__":
    setup_logging(settings.log_level)
    print("Starting ADA Live AI Analyst Server...")
    print(f"Working directory: {project_dir}")
    print(f"API Docs: http://localhost:{settings.port}/docs")
    print("-" * 50)

    uvicorn.run(
        "ada_ta.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
